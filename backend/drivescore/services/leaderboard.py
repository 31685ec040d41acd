from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.orm import Session

from drivescore.models.user import User
from drivescore.models.user_stats import UserStats
from drivescore.services.user_stats import StatsTotals


@dataclass(frozen=True)
class LeaderboardEntry:
    uid: str
    display_name: str
    trip_count: int
    total_score: float
    total_points: float = 0.0

    @property
    def avg_score(self) -> float:
        return self.total_score / self.trip_count if self.trip_count > 0 else 0.0


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    entry: LeaderboardEntry


def display_name(email: str | None) -> str:
    if not email:
        return "User"
    return email.split("@", 1)[0] or "User"


# Tie comparison precision for average scores.
AVG_SCORE_DIGITS = 9


def _avg_key(entry: LeaderboardEntry) -> float:
    return round(entry.avg_score, AVG_SCORE_DIGITS)


def rank_entries(entries: Iterable[LeaderboardEntry]) -> list[RankedEntry]:
    """Order by average score, then trip count, then name.

    Rows with the same average score share a rank; the next distinct score
    takes its row position, so scores [4.5, 4.5, 3.0] rank 1, 1, 3.
    """
    ordered = sorted(
        entries,
        key=lambda e: (-_avg_key(e), -e.trip_count, e.display_name.casefold()),
    )

    ranked: list[RankedEntry] = []
    rank = 0
    previous_avg: float | None = None
    for position, entry in enumerate(ordered, start=1):
        avg = _avg_key(entry)
        if previous_avg is None or avg != previous_avg:
            rank = position
        previous_avg = avg
        ranked.append(RankedEntry(rank=rank, entry=entry))
    return ranked


def build_leaderboard(db: Session, limit: int | None = None) -> list[RankedEntry]:
    """Every known user ranked; users with no stats row count as zero trips."""
    rows = (
        db.query(User.uid, User.email, UserStats)
        .outerjoin(UserStats, UserStats.uid == User.uid)
        .all()
    )
    entries = []
    for uid, email, stats in rows:
        totals = StatsTotals()
        if stats is not None:
            totals = StatsTotals(
                trip_count=int(stats.trip_count or 0),
                total_score=float(stats.total_score or 0.0),
                total_points=float(stats.total_points or 0.0),
            )
        entries.append(
            LeaderboardEntry(
                uid=uid,
                display_name=display_name(email),
                trip_count=totals.trip_count,
                total_score=totals.total_score,
                total_points=totals.total_points,
            )
        )
    ranked = rank_entries(entries)
    return ranked[:limit] if limit is not None else ranked
