import threading

import pytest

from oee_tracker.core.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from oee_tracker.core.metrics import MetricsEngine
from oee_tracker.core.notifier import ORDER_CREATED, ORDER_DELETED, ORDER_UPDATED
from oee_tracker.core.state_machine import OrderStateMachine
from oee_tracker.db import SessionLocal
from oee_tracker.models import OrderState, ProductionOrder


def test_create_sets_defaults(make_order, events):
    order = make_order(target_quantity="4000", units_per_box="24")
    assert order.state == OrderState.created
    assert order.target_quantity == 4000
    assert order.units_per_box == 24
    assert order.estimated_production_hours == 1.0
    assert order.good_units == 0
    assert order.start_time is None
    assert events.names() == [ORDER_CREATED]


def test_create_collects_all_errors(machine):
    with pytest.raises(ValidationError) as exc:
        machine.create({"target_quantity": "abc"})
    details = " ".join(exc.value.details)
    for name in ("order_code", "article_code", "product_name", "target_boxes"):
        assert name in details
    assert "target_quantity" in details


def test_create_rejects_non_positive_target(make_order):
    with pytest.raises(ValidationError):
        make_order(target_quantity=0)


def test_create_repercap_requires_initial_cut(make_order):
    with pytest.raises(ValidationError) as exc:
        make_order(repercap=True)
    assert any("initial_cut_number" in d for d in exc.value.details)

    order = make_order(repercap=True, initial_cut_number=1500)
    assert order.repercap is True
    assert order.initial_cut_number == 1500


def test_duplicate_order_code_conflict(make_order):
    make_order(order_code="OF-DUP")
    with pytest.raises(ConflictError):
        make_order(order_code="OF-DUP")


def test_start_sets_start_time_once(machine, make_order, clock):
    order = make_order()
    machine.start(order.id)
    first_start = order.start_time
    assert order.state == OrderState.started
    assert first_start == clock.now

    clock.advance(minutes=10)
    machine.pause(order.id, "Limpieza")
    clock.advance(minutes=5)
    machine.start(order.id)
    assert order.start_time == first_start


def test_start_missing_order(machine):
    with pytest.raises(NotFoundError):
        machine.start(12345)


def test_only_one_started_order(machine, make_order):
    first = make_order()
    second = make_order()
    machine.start(first.id)
    with pytest.raises(ConflictError):
        machine.start(second.id)

    # pausing frees the line
    machine.pause(first.id, "Mantenimiento")
    machine.start(second.id)
    with pytest.raises(ConflictError):
        machine.start(first.id)


def test_start_already_started_is_invalid(machine, make_order):
    order = make_order()
    machine.start(order.id)
    with pytest.raises(InvalidStateError):
        machine.start(order.id)


def test_concurrent_starts_only_one_wins(make_order, clock):
    orders = [make_order() for _ in range(4)]
    results = []
    barrier = threading.Barrier(len(orders))

    def worker(order_id):
        session = SessionLocal()
        try:
            barrier.wait()
            OrderStateMachine(session, clock=clock).start(order_id)
            results.append("ok")
        except ConflictError:
            results.append("conflict")
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(o.id,)) for o in orders]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 1
    assert results.count("conflict") == len(orders) - 1
    check = SessionLocal()
    try:
        started = check.query(ProductionOrder).filter(ProductionOrder.state == OrderState.started).count()
    finally:
        check.close()
    assert started == 1


def test_pause_requires_started(machine, make_order):
    order = make_order()
    with pytest.raises(InvalidStateError):
        machine.pause(order.id, "Limpieza")


def test_pause_rejects_unknown_type(machine, make_order):
    order = make_order()
    machine.start(order.id)
    with pytest.raises(ValidationError):
        machine.pause(order.id, "siesta")
    with pytest.raises(ValidationError):
        machine.pause(order.id, None)
    assert order.state == OrderState.started


def test_resume_adds_counting_pause_duration(machine, make_order, clock):
    order = make_order()
    machine.start(order.id)
    clock.advance(minutes=10)
    _, pause = machine.pause(order.id, "Mantenimiento", "bearing")
    assert pause.counts_toward_downtime is True
    clock.advance(minutes=7, seconds=59)
    machine.start(order.id)

    assert pause.end_time == clock.now
    assert pause.duration_minutes == 7
    assert order.accumulated_paused_minutes == 7
    assert machine.ledger.open_pause(order.id) is None


def test_shift_change_does_not_add_paused_minutes(machine, make_order, clock):
    order = make_order()
    machine.start(order.id)
    clock.advance(minutes=10)
    _, pause = machine.pause(order.id, "cambio_turno")
    assert pause.counts_toward_downtime is False
    clock.advance(minutes=480)
    machine.start(order.id)
    assert pause.duration_minutes == 480
    assert order.accumulated_paused_minutes == 0


def test_resume_pause_by_id(machine, make_order, clock):
    order = make_order()
    machine.start(order.id)
    _, pause = machine.pause(order.id, "Falta de Material")
    clock.advance(minutes=3)
    resumed = machine.resume_pause(pause.id)
    assert resumed.state == OrderState.started
    with pytest.raises(InvalidStateError):
        machine.resume_pause(pause.id)
    with pytest.raises(NotFoundError):
        machine.resume_pause(pause.id + 100)


def test_finish_scenario(machine, make_order, clock, events):
    order = make_order()
    machine.start(order.id)
    clock.advance(minutes=10)
    machine.pause(order.id, "Mantenimiento")
    clock.advance(minutes=30)
    machine.start(order.id)
    clock.advance(minutes=50)

    order, snapshot = machine.finish(order.id, {"closing_good_units": 3000, "closing_bad_units": 0})
    assert order.state == OrderState.finished
    assert order.end_time == clock.now
    assert order.total_minutes == 90
    assert order.paused_minutes == 30
    assert order.active_minutes == 60
    assert order.actual_rate == 3000.0
    assert order.availability == 0.666667
    assert order.performance == 0.75
    assert order.quality == 1.0
    assert order.oee == 0.5
    assert snapshot.warnings == ()
    assert events.names()[-1] == ORDER_UPDATED


def test_finish_while_paused_closes_pause(machine, make_order, clock):
    order = make_order()
    machine.start(order.id)
    clock.advance(minutes=20)
    _, pause = machine.pause(order.id, "Limpieza")
    clock.advance(minutes=15)
    order, snapshot = machine.finish(order.id, {"closing_good_units": 100})

    assert pause.end_time == clock.now
    assert pause.duration_minutes == 15
    assert order.accumulated_paused_minutes == 15
    assert snapshot.paused_minutes == 15
    assert snapshot.active_minutes == 20


def test_finish_frees_active_slot(machine, make_order):
    first = make_order()
    second = make_order()
    machine.start(first.id)
    machine.finish(first.id)
    machine.start(second.id)
    assert second.state == OrderState.started


def test_finish_twice_fails_without_changes(machine, make_order, clock):
    order = make_order()
    machine.start(order.id)
    clock.advance(minutes=60)
    order, _ = machine.finish(order.id, {"closing_good_units": 2000})
    end_time, oee = order.end_time, order.oee

    clock.advance(minutes=30)
    with pytest.raises(InvalidStateError):
        machine.finish(order.id, {"closing_good_units": 4000})
    machine.db.refresh(order)
    assert order.end_time == end_time
    assert order.oee == oee
    assert order.closing_good_units == 2000


def test_finish_created_order(machine, make_order):
    order = make_order()
    order, snapshot = machine.finish(order.id)
    assert order.state == OrderState.finished
    assert snapshot.total_minutes == 0
    assert snapshot.oee == 0.0


def test_subscriber_failure_does_not_roll_back(db, clock, events, make_order):
    def broken(name, payload):
        raise RuntimeError("socket closed")

    events.subscribe(broken)
    order = make_order()
    OrderStateMachine(db, notifier=events, clock=clock, engine=MetricsEngine(reference_rate=4000)).start(order.id)
    db.expire_all()
    assert db.get(ProductionOrder, order.id).state == OrderState.started


def test_update_rules(machine, make_order, clock):
    order = make_order()
    machine.update(order.id, {"target_quantity": 6000, "state": "finished"})
    assert order.target_quantity == 6000
    assert order.estimated_production_hours == 1.5
    assert order.state == OrderState.created

    with pytest.raises(ValidationError):
        machine.update(order.id, {"order_code": "OF-NEW"})
    with pytest.raises(ValidationError):
        machine.update(order.id, {"target_boxes": -1})

    machine.start(order.id)
    machine.finish(order.id)
    with pytest.raises(InvalidStateError):
        machine.update(order.id, {"closing_good_units": 10})
    machine.update_product_details(order.id, {"product_format": "1.5L", "container_type": "PET"})
    assert order.product_format == "1.5L"
    assert order.container_type == "PET"
    with pytest.raises(InvalidStateError):
        machine.update_product_details(order.id, {"units_per_box": 12})


def test_delete_only_created(machine, make_order, events):
    order = make_order()
    machine.start(order.id)
    with pytest.raises(InvalidStateError):
        machine.delete(order.id)

    other = make_order()
    other_id = other.id
    machine.delete(other_id)
    assert events.names()[-1] == ORDER_DELETED
    with pytest.raises(NotFoundError):
        machine.get_order(other_id)


def test_simulate_time(machine, make_order, clock):
    order = make_order()
    with pytest.raises(InvalidStateError):
        machine.simulate_time(order.id, 30)
    machine.start(order.id)
    started_at = order.start_time
    machine.simulate_time(order.id, 30)
    assert (started_at - order.start_time).total_seconds() == 1800

    _, snapshot = machine.finish(order.id, {"closing_good_units": 1000})
    assert snapshot.total_minutes == 30


@pytest.mark.parametrize("field", [
    "closing_good_units",
    "closing_bad_units",
    "weight_scale_total",
    "rejected_units",
    "final_cut_number",
])
def test_finish_rejects_negative_closing_values(machine, make_order, clock, field):
    order = make_order()
    machine.start(order.id)
    clock.advance(minutes=60)
    closing = {"closing_good_units": 100, field: -300}

    with pytest.raises(ValidationError) as exc:
        machine.finish(order.id, closing)
    assert any(field in d for d in exc.value.details)

    machine.db.refresh(order)
    assert order.state == OrderState.started
    assert order.total_units is None
    assert order.end_time is None
