import pytest

from drivescore.models.trip import Trip
from drivescore.services.trip_store import TripDecodeError, decode_trip, decode_trips
from drivescore.services.user_stats import StatsTotals, compute_stats


def _row(trip_id: int, **overrides) -> Trip:
    values = dict(
        id=trip_id,
        uid="u-1",
        start_time_ms=1_000 * trip_id,
        end_time_ms=1_000 * trip_id + 600_000,
        distance_m=8_000.0,
        avg_speed_kmh=42.0,
        max_speed_kmh=70.0,
        finished=True,
        score=4.5,
        bonus_points=0.0,
    )
    values.update(overrides)
    return Trip(**values)


def test_decode_defaults_finished_and_bonus():
    trip = decode_trip(_row(1, finished=None, bonus_points=None))

    assert trip.finished is True
    assert trip.bonus_points == 0.0


def test_decode_rejects_missing_required_field():
    with pytest.raises(TripDecodeError) as exc_info:
        decode_trip(_row(7, distance_m=None))

    assert exc_info.value.trip_id == 7
    assert exc_info.value.field_name == "distance_m"


def test_decode_trips_skips_malformed_rows():
    rows = [_row(1), _row(2, score=None), _row(3, start_time_ms=None), _row(4)]

    trips = decode_trips(rows)

    assert [t.id for t in trips] == [1, 4]


def test_compute_stats_matches_documented_sums():
    trips = decode_trips(
        [
            _row(1, score=5.0, distance_m=10_000.0, bonus_points=1.0),
            _row(2, score=4.0, distance_m=2_500.0),
            _row(3, score=3.0, distance_m=1_000.0, finished=None),
            _row(4, score=1.0, distance_m=50_000.0, finished=False),
        ]
    )

    totals = compute_stats(trips)

    assert totals.trip_count == 3
    assert totals.total_score == pytest.approx(12.0)
    assert totals.total_points == pytest.approx(5.0 * 10 + 1.0 + 4.0 * 2.5 + 3.0 * 1.0)
    assert totals.avg_score == pytest.approx(4.0)


def test_compute_stats_is_idempotent():
    trips = decode_trips([_row(i, score=4.0 + i / 10) for i in range(1, 6)])

    assert compute_stats(trips) == compute_stats(trips)


def test_empty_history_gives_zero_totals():
    assert compute_stats([]) == StatsTotals()
    assert StatsTotals().avg_score == 0.0
