from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from drivescore.models.trip import Trip
from drivescore.models.user import User
from drivescore.models.user_stats import UserStats
from drivescore.services.trip_store import TripRecord, decode_trips, finished_filter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatsTotals:
    trip_count: int = 0
    total_score: float = 0.0
    total_points: float = 0.0

    @property
    def avg_score(self) -> float:
        return self.total_score / self.trip_count if self.trip_count else 0.0


def compute_stats(trips: Iterable[TripRecord]) -> StatsTotals:
    """Fold a user's trips into totals. Trips marked unfinished are ignored."""
    trip_count = 0
    total_score = 0.0
    total_points = 0.0
    for trip in trips:
        if not trip.finished:
            continue
        trip_count += 1
        total_score += trip.score
        total_points += trip.points
    return StatsTotals(trip_count=trip_count, total_score=total_score, total_points=total_points)


def get_persisted_stats(db: Session, uid: str) -> UserStats | None:
    return db.query(UserStats).filter(UserStats.uid == uid).one_or_none()


def _overwrite(db: Session, uid: str, totals: StatsTotals) -> UserStats:
    row = get_persisted_stats(db, uid)
    if row is None:
        row = UserStats(uid=uid)
        db.add(row)

    row.trip_count = totals.trip_count
    row.total_score = totals.total_score
    row.total_points = totals.total_points
    row.computed_at = datetime.now(timezone.utc)
    return row


def record_trip(db: Session, trip: Trip) -> None:
    """Add one newly persisted trip to its owner's counters; the caller commits.

    The row is created or incremented by one ``INSERT ... ON CONFLICT DO
    UPDATE``. Concurrent writes for the same user therefore never both insert.
    Recomputation remains last-writer-wins.
    """
    now = datetime.now(timezone.utc)
    if trip.finished is False:
        db.execute(
            insert(UserStats)
            .values(uid=trip.uid, trip_count=0, total_score=0.0, total_points=0.0, computed_at=now)
            .on_conflict_do_nothing(index_elements=[UserStats.uid])
        )
        return

    score = trip.score or 0.0
    points = score * (trip.distance_m or 0.0) / 1000.0 + (trip.bonus_points or 0.0)
    stmt = insert(UserStats).values(
        uid=trip.uid,
        trip_count=1,
        total_score=score,
        total_points=points,
        computed_at=now,
    )
    db.execute(
        stmt.on_conflict_do_update(
            index_elements=[UserStats.uid],
            set_={
                "trip_count": UserStats.trip_count + 1,
                "total_score": UserStats.total_score + score,
                "total_points": UserStats.total_points + points,
                "computed_at": now,
            },
        )
    )


def refresh_user_stats(db: Session, uid: str) -> StatsTotals:
    """Rebuild one user's stats from trip history (full overwrite).

    On a database failure the error is logged and zero totals are returned;
    nothing is written.
    """
    try:
        rows = db.query(Trip).filter(Trip.uid == uid).filter(finished_filter()).all()
        totals = compute_stats(decode_trips(rows))
        _overwrite(db, uid, totals)
        db.commit()
    except SQLAlchemyError:
        logger.exception("User stats refresh failed", extra={"uid": uid})
        db.rollback()
        return StatsTotals()

    logger.info(
        "User stats refreshed",
        extra={"uid": uid, "trip_count": totals.trip_count, "total_score": totals.total_score},
    )
    return totals


def refresh_all_user_stats(db: Session) -> dict[str, StatsTotals] | None:
    """Rebuild every user's stats in one pass and one transaction.

    Users without trips get zeroed stats. Returns ``None`` when the pass
    failed and nothing was written.
    """
    try:
        rows = db.query(Trip).filter(finished_filter()).all()
        by_uid: dict[str, list[TripRecord]] = defaultdict(list)
        for trip in decode_trips(rows):
            by_uid[trip.uid].append(trip)

        uids = [uid for (uid,) in db.query(User.uid).all()]
        result = {uid: compute_stats(by_uid.get(uid, [])) for uid in uids}
        for uid, totals in result.items():
            _overwrite(db, uid, totals)
        db.commit()
    except SQLAlchemyError:
        logger.exception("Global user stats refresh failed")
        db.rollback()
        return None

    logger.info("All user stats refreshed", extra={"user_count": len(result)})
    return result
