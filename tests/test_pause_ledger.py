import pytest

from oee_tracker.core.errors import InvalidStateError, NotFoundError, ValidationError
from oee_tracker.core.pause_ledger import PauseLedger
from oee_tracker.database.connection import transaction


def test_record_start_and_end_floor_minutes(db, clock, make_order):
    order = make_order()
    ledger = PauseLedger(db)
    with transaction(db):
        pause = ledger.record_start(order.id, "Limpieza", "cleaning nozzles", clock())
    assert pause.end_time is None
    assert pause.counts_toward_downtime is True

    clock.advance(minutes=12, seconds=59)
    with transaction(db):
        duration = ledger.record_end(pause.id, clock())
    assert duration == 12
    assert ledger.get(pause.id).duration_minutes == 12


def test_invalid_type_rejected(db, clock, make_order):
    order = make_order()
    with pytest.raises(ValidationError):
        PauseLedger(db).record_start(order.id, "coffee", None, clock())


def test_only_one_open_pause_per_order(db, clock, make_order):
    order = make_order()
    ledger = PauseLedger(db)
    ledger.record_start(order.id, "Limpieza", None, clock())
    with pytest.raises(InvalidStateError):
        ledger.record_start(order.id, "Mantenimiento", None, clock())


def test_record_end_twice_fails(db, clock, make_order):
    order = make_order()
    ledger = PauseLedger(db)
    pause = ledger.record_start(order.id, "Limpieza", None, clock())
    clock.advance(minutes=3)
    ledger.record_end(pause.id, clock())
    with pytest.raises(InvalidStateError):
        ledger.record_end(pause.id, clock())


def test_missing_pause(db):
    with pytest.raises(NotFoundError):
        PauseLedger(db).record_end(999, None)


def test_sum_counting_duration_skips_non_counting_types(db, clock, make_order):
    order = make_order()
    ledger = PauseLedger(db)
    for pause_type, minutes in (("Mantenimiento", 10), ("cambio_turno", 480), ("Limpieza", 5)):
        pause = ledger.record_start(order.id, pause_type, None, clock())
        clock.advance(minutes=minutes)
        ledger.record_end(pause.id, clock())

    # a stale flag on a non-counting type is still ignored
    partial = ledger.record_start(order.id, "pausa_parcial", None, clock())
    clock.advance(minutes=7)
    ledger.record_end(partial.id, clock())
    partial.counts_toward_downtime = True
    db.flush()

    assert ledger.sum_counting_duration(order.id) == 15


def test_open_pause_not_in_duration_sum(db, clock, make_order):
    order = make_order()
    ledger = PauseLedger(db)
    ledger.record_start(order.id, "Mantenimiento", None, clock())
    clock.advance(minutes=30)
    assert ledger.sum_counting_duration(order.id) == 0


def test_change_type_rederives_flag(db, clock, make_order):
    order = make_order()
    ledger = PauseLedger(db)
    pause = ledger.record_start(order.id, "Mantenimiento", None, clock())
    ledger.change_type(pause.id, "cambio_turno")
    assert pause.pause_type == "cambio_turno"
    assert pause.counts_toward_downtime is False

    clock.advance(minutes=5)
    ledger.record_end(pause.id, clock())
    with pytest.raises(InvalidStateError):
        ledger.change_type(pause.id, "Limpieza")


def test_update_comment_requires_text(db, clock, make_order):
    order = make_order()
    ledger = PauseLedger(db)
    pause = ledger.record_start(order.id, "Otros", None, clock())
    with pytest.raises(ValidationError):
        ledger.update_comment(pause.id, "")
    ledger.update_comment(pause.id, "waiting for forklift")
    assert pause.comment == "waiting for forklift"


def test_delete_closed_pause_subtracts_accumulated(db, clock, machine, make_order):
    order = make_order()
    machine.start(order.id)
    clock.advance(minutes=5)
    _, pause = machine.pause(order.id, "Mantenimiento")
    clock.advance(minutes=20)
    machine.start(order.id)
    assert order.accumulated_paused_minutes == 20

    with pytest.raises(NotFoundError):
        machine.delete_pause(pause.id + 1000)
    machine.delete_pause(pause.id)
    db.refresh(order)
    assert order.accumulated_paused_minutes == 0
    assert machine.ledger.list_for_order(order.id) == []


def test_delete_open_pause_fails(db, clock, machine, make_order):
    order = make_order()
    machine.start(order.id)
    _, pause = machine.pause(order.id, "Limpieza")
    with pytest.raises(InvalidStateError):
        machine.delete_pause(pause.id)


def test_statistics_by_type(db, clock, make_order):
    order = make_order()
    ledger = PauseLedger(db)
    for pause_type, minutes in (("Limpieza", 4), ("Limpieza", 6), ("cambio_turno", 30)):
        pause = ledger.record_start(order.id, pause_type, None, clock())
        clock.advance(minutes=minutes)
        ledger.record_end(pause.id, clock())
        clock.advance(minutes=1)

    stats = ledger.statistics(order.id)
    assert stats["total_pauses"] == 3
    assert stats["counted_minutes"] == 10
    assert stats["not_counted_minutes"] == 30
    assert stats["by_type"][0] == {
        "pause_type": "Limpieza",
        "count": 2,
        "total_minutes": 10,
        "counts_toward_downtime": True,
    }
