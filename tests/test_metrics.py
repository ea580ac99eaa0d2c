from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from oee_tracker.core.metrics import ClosingInputs, MetricsEngine, recovered_units, weight_recirculation

T0 = datetime(2025, 3, 10, 8, 0, 0)


def make_order(**overrides):
    fields = dict(
        id=1,
        start_time=T0,
        end_time=None,
        target_quantity=4000,
        units_per_box=None,
        counted_boxes=0,
        good_units=0,
        closing_good_units=None,
        closing_bad_units=None,
        rejected_units=0,
        weight_scale_total=0,
        initial_cut_number=None,
        final_cut_number=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def make_pause(start_offset, minutes=None, pause_type="Mantenimiento", counts=True):
    start = T0 + timedelta(minutes=start_offset)
    return SimpleNamespace(
        start_time=start,
        end_time=start + timedelta(minutes=minutes) if minutes is not None else None,
        duration_minutes=minutes,
        pause_type=pause_type,
        counts_toward_downtime=counts,
    )


def test_estimated_hours_from_reference_rate():
    engine = MetricsEngine(reference_rate=4000)
    assert engine.estimated_production_hours(4000) == 1.0
    assert engine.estimated_production_hours(6000) == 1.5


def test_oee_scenario_with_maintenance_pause():
    engine = MetricsEngine(reference_rate=4000)
    order = make_order()
    pauses = [make_pause(10, 30)]
    snap = engine.compute(order, pauses, ClosingInputs(closing_good_units=3000, closing_bad_units=0),
                          now=T0 + timedelta(minutes=90))

    assert snap.total_minutes == 90
    assert snap.paused_minutes == 30
    assert snap.active_minutes == 60
    assert snap.total_units == 3000
    assert snap.actual_rate == 3000.0
    assert snap.availability == 0.666667
    assert snap.performance == 0.75
    assert snap.quality == 1.0
    assert snap.oee == 0.5
    assert snap.completion_percent == 75.0
    assert snap.paused_percent == 33.333333
    assert snap.warnings == ()


def test_shift_change_pause_is_not_downtime():
    engine = MetricsEngine(reference_rate=4000)
    pauses = [make_pause(10, 480, pause_type="cambio_turno", counts=False)]
    snap = engine.compute(make_order(), pauses, ClosingInputs(closing_good_units=1000),
                          now=T0 + timedelta(minutes=500))
    assert snap.paused_minutes == 0
    assert snap.active_minutes == 500
    assert snap.availability == 1.0


def test_non_counting_type_ignored_even_if_flag_set():
    engine = MetricsEngine(reference_rate=4000)
    pauses = [make_pause(5, 20, pause_type="pausa_parcial", counts=True)]
    snap = engine.compute(make_order(), pauses, now=T0 + timedelta(minutes=60))
    assert snap.paused_minutes == 0


def test_open_pause_counted_up_to_now():
    engine = MetricsEngine(reference_rate=4000)
    pauses = [make_pause(40)]
    snap = engine.compute(make_order(), pauses, now=T0 + timedelta(minutes=60, seconds=30))
    assert snap.paused_minutes == 20
    assert snap.total_minutes == 60


def test_never_started_order_has_zero_rates():
    engine = MetricsEngine(reference_rate=4000)
    snap = engine.compute(make_order(start_time=None), [], now=T0)
    assert snap.total_minutes == 0
    assert snap.active_minutes == 0
    assert snap.total_units == 0
    assert snap.availability == 0.0
    assert snap.performance == 0.0
    assert snap.quality == 0.0
    assert snap.oee == 0.0
    assert snap.actual_rate == 0.0
    assert snap.repercap_recovery_rate is None


def test_minimum_one_minute_once_started():
    engine = MetricsEngine(reference_rate=4000)
    snap = engine.compute(make_order(), [], now=T0 + timedelta(seconds=20))
    assert snap.total_minutes == 1


def test_negative_active_minutes_clamped_with_warning():
    engine = MetricsEngine(reference_rate=4000)
    # pause longer than the whole order, e.g. after a start_time edit
    pauses = [make_pause(-60, 100)]
    snap = engine.compute(make_order(), pauses, ClosingInputs(closing_good_units=10),
                          now=T0 + timedelta(minutes=50))
    assert snap.active_minutes == 0
    assert snap.availability == 0.0
    assert snap.actual_rate == 0.0
    assert len(snap.warnings) == 1


def test_boxes_take_precedence_over_good_units():
    engine = MetricsEngine(reference_rate=4000)
    order = make_order(units_per_box=24, counted_boxes=10, good_units=5)
    snap = engine.compute(order, [], now=T0 + timedelta(minutes=60))
    assert snap.good_units == 240
    assert snap.closing_good_units == 240


def test_closing_falls_back_to_stored_values():
    engine = MetricsEngine(reference_rate=4000)
    order = make_order(closing_good_units=900, closing_bad_units=100, rejected_units=25)
    snap = engine.compute(order, [], now=T0 + timedelta(minutes=60))
    assert snap.closing_good_units == 900
    assert snap.closing_bad_units == 100
    assert snap.total_units == 1000
    assert snap.good_percent == 90.0
    assert snap.bad_percent == 10.0
    assert snap.rejection_rate == 2.5
    assert snap.quality == 0.9


def test_explicit_zero_closing_falls_through():
    engine = MetricsEngine(reference_rate=4000)
    order = make_order(good_units=500)
    snap = engine.compute(order, [], ClosingInputs(closing_good_units=0), now=T0 + timedelta(minutes=60))
    assert snap.closing_good_units == 500


def test_repercap_subtractive_formula():
    engine = MetricsEngine(reference_rate=4000, repercap_formula="subtractive")
    order = make_order(initial_cut_number=1000)
    snap = engine.compute(order, [], ClosingInputs(closing_good_units=4000, final_cut_number=5200),
                          now=T0 + timedelta(minutes=60))
    assert snap.final_cut_number == 5200
    assert snap.repercap_recirculation == 200
    assert snap.repercap_recovery_rate == 5.0


def test_repercap_multiplicative_formula():
    engine = MetricsEngine(reference_rate=4000, repercap_formula="multiplicative")
    assert engine.repercap_recirculation(10, 12, 4000, 300) == 600


def test_repercap_missing_cut_numbers():
    engine = MetricsEngine(reference_rate=4000)
    snap = engine.compute(make_order(), [], ClosingInputs(closing_good_units=100), now=T0 + timedelta(minutes=60))
    assert snap.repercap_recirculation is None
    assert snap.repercap_recovery_rate is None


def test_unknown_repercap_formula_rejected():
    with pytest.raises(ValueError):
        MetricsEngine(repercap_formula="bogus")


def test_weight_scale_helpers():
    assert recovered_units(1200, 1000) == 200
    assert recovered_units(900, 1000) == 0
    assert recovered_units(0, 1000) == 0
    assert weight_recirculation(1200, 1100) == 100
    assert weight_recirculation(1200, 0) == 0


def test_weight_scale_in_snapshot():
    engine = MetricsEngine(reference_rate=4000)
    order = make_order(good_units=1000)
    snap = engine.compute(order, [], ClosingInputs(weight_scale_total=1250, closing_bad_units=50),
                          now=T0 + timedelta(minutes=60))
    assert snap.recovered_units == 250
    assert snap.weight_recovery_rate == 20.0
    assert snap.weight_recirculation == 200


def test_closing_inputs_parse_strings():
    closing = ClosingInputs.from_mapping({"closing_good_units": "3000", "closing_bad_units": "", "final_cut_number": "x"})
    assert closing.closing_good_units == 3000
    assert closing.closing_bad_units is None
    assert closing.final_cut_number is None


def test_live_times_in_seconds():
    order = make_order()
    pauses = [make_pause(10, 5), make_pause(20, 30, pause_type="cambio_turno", counts=False)]
    times = MetricsEngine.live_times(order, pauses, now=T0 + timedelta(minutes=61))
    assert times == {"total_seconds": 3660, "active_seconds": 3360, "paused_seconds": 300}
