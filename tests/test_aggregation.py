from __future__ import annotations

from bagline.core.aggregation import (
    UNKNOWN_LABEL,
    UNSPECIFIED_LABEL,
    get_active_stops,
    get_daily_production,
    get_hourly_production,
    get_packaging_by_collaborator,
    get_packaging_total,
    get_stops_for_day,
    member_name,
    product_label,
    product_name,
    summarize_stops,
)
from bagline.core.models import PackagingRecord, Product, ProductionRecord, StopRecord, TeamMember


def _prod(rid, day, time, box, qty, product_id="p1", ts=0):
    return ProductionRecord(
        id=rid, date=day, time=time, box_number=box, product_id=product_id, quantity=qty, timestamp=ts
    )


def _stop(rid, sector, day, *, active=False, duration=None, ts=0):
    return StopRecord(
        id=rid,
        sector=sector,
        date=day,
        start_time="08:00",
        reason="Manutenção",
        is_active=active,
        timestamp=ts,
        duration=duration,
    )


def test_daily_production_splits_by_box():
    records = [
        _prod("a", "2024-03-01", "09:15", 1, 10),
        _prod("b", "2024-03-01", "09:45", 2, 5),
        _prod("c", "2024-03-02", "10:00", 1, 99),
    ]
    daily = get_daily_production("2024-03-01", records)
    assert (daily.box1, daily.box2, daily.total) == (10, 5, 15)


def test_daily_production_empty_day_is_zero():
    daily = get_daily_production("2024-03-05", [_prod("a", "2024-03-01", "09:15", 1, 10)])
    assert (daily.box1, daily.box2, daily.total) == (0, 0, 0)


def test_hourly_production_has_24_ordered_buckets():
    records = [
        _prod("a", "2024-03-01", "09:15", 1, 10),
        _prod("b", "2024-03-01", "09:45", 2, 5),
        _prod("c", "2024-03-01", "23:59", 2, 7),
        _prod("d", "2024-03-01", "00:00", 1, 3),
    ]
    hourly = get_hourly_production("2024-03-01", records)

    assert [h.hour for h in hourly] == [f"{h:02d}:00" for h in range(24)]
    by_hour = {h.hour: h for h in hourly}
    assert (by_hour["09:00"].box1, by_hour["09:00"].box2) == (10, 5)
    assert by_hour["23:00"].box2 == 7
    assert by_hour["00:00"].box1 == 3
    assert by_hour["12:00"].total == 0

    # Buckets always add up to the daily total
    daily = get_daily_production("2024-03-01", records)
    assert sum(h.total for h in hourly) == daily.total


def test_hourly_production_truncates_instead_of_rounding():
    hourly = get_hourly_production("2024-03-01", [_prod("a", "2024-03-01", "10:59", 1, 4)])
    by_hour = {h.hour: h for h in hourly}
    assert by_hour["10:00"].box1 == 4
    assert by_hour["11:00"].box1 == 0


def test_stops_for_day_newest_first_and_active_filter():
    stops = [
        _stop("old", "box1", "2024-03-01", duration=10, ts=1),
        _stop("new", "box2", "2024-03-01", active=True, ts=3),
        _stop("mid", "packaging", "2024-03-01", duration=20, ts=2),
        _stop("other", "box1", "2024-02-29", duration=5, ts=4),
    ]
    assert [s.id for s in get_stops_for_day("2024-03-01", stops)] == ["new", "mid", "old"]
    assert [s.id for s in get_active_stops(stops)] == ["new"]


def test_summarize_stops_average_ignores_active():
    stops = [
        _stop("a", "box1", "2024-03-01", duration=10),
        _stop("b", "box2", "2024-03-01", duration=25),
        _stop("c", "packaging", "2024-03-01", active=True),
    ]
    summary = summarize_stops(stops)
    assert summary.total_stops == 3
    assert summary.total_minutes == 35
    assert summary.active_stops == 1
    assert summary.average_minutes == 18  # round(17.5)


def test_summarize_stops_empty():
    summary = summarize_stops([])
    assert (summary.total_stops, summary.total_minutes, summary.active_stops, summary.average_minutes) == (0, 0, 0, 0)


def test_packaging_by_collaborator_lists_packaging_team_only():
    members = [
        TeamMember(id="m1", name="Maria Silva", role="packaging"),
        TeamMember(id="m2", name="João Santos", role="bagging", box_number=1),
        TeamMember(id="m3", name="Ana Costa", role="packaging"),
    ]
    records = [
        PackagingRecord(id="r1", date="2024-03-01", collaborator_id="m1", quantity=40, timestamp=0),
        PackagingRecord(id="r2", date="2024-03-01", collaborator_id="m1", quantity=10, timestamp=0),
        PackagingRecord(id="r3", date="2024-03-02", collaborator_id="m3", quantity=7, timestamp=0),
        PackagingRecord(id="r4", date="2024-03-01", collaborator_id="ghost", quantity=3, timestamp=0),
    ]

    totals = get_packaging_by_collaborator(records, members, "2024-03-01")
    assert [(t.name, t.total) for t in totals] == [("Maria Silva", 50), ("Ana Costa", 0), (UNKNOWN_LABEL, 3)]
    assert sum(t.total for t in totals) == get_packaging_total(records, "2024-03-01")
    assert get_packaging_total(records, "2024-03-01") == 53
    assert get_packaging_total(records) == 60


def test_reference_labels_for_missing_entities():
    products = [Product(id="p1", name="Ração Bovina", weight_per_bag=30)]
    assert product_label("p1", products) == "Ração Bovina (30kg)"
    assert product_name("gone", products) == UNKNOWN_LABEL
    assert product_name(None, products) == UNSPECIFIED_LABEL
    assert member_name("gone", []) == UNKNOWN_LABEL


def test_packaging_by_bagging_member_lands_in_unknown_row():
    members = [
        TeamMember(id="m1", name="Maria Silva", role="packaging"),
        TeamMember(id="m2", name="João Santos", role="bagging", box_number=1),
    ]
    records = [
        PackagingRecord(id="r1", date="2024-03-01", collaborator_id="m1", quantity=5, timestamp=0),
        PackagingRecord(id="r2", date="2024-03-01", collaborator_id="m2", quantity=2, timestamp=0),
    ]

    totals = get_packaging_by_collaborator(records, members)
    assert [(t.name, t.total) for t in totals] == [("Maria Silva", 5), (UNKNOWN_LABEL, 2)]

    # No unknown row when everything is attributed
    assert [t.name for t in get_packaging_by_collaborator(records[:1], members)] == ["Maria Silva"]
