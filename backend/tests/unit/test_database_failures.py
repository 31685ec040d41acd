from __future__ import annotations

from sqlalchemy.exc import OperationalError

from drivescore.models.trip import Trip
from drivescore.models.user_stats import UserStats
from drivescore.services.trip_store import list_trips
from drivescore.services.user_stats import StatsTotals, refresh_all_user_stats, refresh_user_stats


def _db_error() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("server closed the connection"))


class FakeQuery:
    def __init__(self, rows):
        self._rows = rows

    def filter(self, *args):
        return self

    def order_by(self, *args):
        return self

    def limit(self, n):
        return self

    def all(self):
        return list(self._rows)

    def one_or_none(self):
        return self._rows[0] if self._rows else None


class FakeSession:
    """Serves canned rows keyed by entity name; fails where told to."""

    def __init__(self, rows=None, fail_query=False, fail_commit=False):
        self.rows = rows or {}
        self.fail_query = fail_query
        self.fail_commit = fail_commit
        self.added = []
        self.commits = 0
        self.rollbacks = 0

    def query(self, entity, *more):
        if self.fail_query:
            raise _db_error()
        name = entity.__name__ if isinstance(entity, type) else str(entity)
        return FakeQuery(self.rows.get(name, []))

    def add(self, obj):
        self.added.append(obj)

    def commit(self):
        self.commits += 1
        if self.fail_commit:
            raise _db_error()

    def rollback(self):
        self.rollbacks += 1


def _trip(uid: str, score: float) -> Trip:
    return Trip(
        id=1,
        uid=uid,
        start_time_ms=0,
        end_time_ms=60_000,
        distance_m=1_000.0,
        avg_speed_kmh=30.0,
        max_speed_kmh=50.0,
        finished=True,
        score=score,
        bonus_points=0.0,
    )


def test_list_trips_returns_empty_history_on_read_failure():
    db = FakeSession(fail_query=True)

    assert list_trips(db, "u-1") == []
    assert db.rollbacks == 1


def test_refresh_user_stats_returns_zero_totals_and_writes_nothing():
    db = FakeSession(fail_query=True)

    assert refresh_user_stats(db, "u-1") == StatsTotals()
    assert db.rollbacks == 1
    assert db.commits == 0
    assert db.added == []


def test_refresh_user_stats_rolls_back_failed_commit():
    db = FakeSession(rows={"Trip": [_trip("u-1", 4.0)]}, fail_commit=True)

    assert refresh_user_stats(db, "u-1") == StatsTotals()
    assert db.rollbacks == 1


def test_refresh_all_user_stats_is_all_or_nothing():
    db = FakeSession(
        rows={
            "Trip": [_trip("a", 4.0), _trip("b", 3.0)],
            "User.uid": [("a",), ("b",), ("c",)],
        },
        fail_commit=True,
    )

    assert refresh_all_user_stats(db) is None
    assert db.commits == 1
    assert db.rollbacks == 1
    # every user was staged in the one transaction that was rolled back
    assert sorted(row.uid for row in db.added if isinstance(row, UserStats)) == ["a", "b", "c"]


def test_refresh_all_user_stats_returns_none_when_read_fails():
    db = FakeSession(fail_query=True)

    assert refresh_all_user_stats(db) is None
    assert db.rollbacks == 1
    assert db.commits == 0
