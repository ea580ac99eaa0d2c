from oee_tracker import schemas
from oee_tracker.core.notifier import ORDER_UPDATED, emit_serialized


def test_emit_serialized_skips_unserializable(events):
    emit_serialized(events, ORDER_UPDATED, schemas.ProductionOrderRead, object())
    assert events.events == []


def test_emit_serialized_sends_json_payload(machine, make_order, events):
    order = make_order()
    emit_serialized(events, ORDER_UPDATED, schemas.ProductionOrderRead, order)
    name, payload = events.events[-1]
    assert name == ORDER_UPDATED
    assert payload["id"] == order.id
    assert payload["state"] == "created"
