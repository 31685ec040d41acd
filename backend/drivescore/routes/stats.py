from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from drivescore.core.config import settings
from drivescore.core.db import get_db
from drivescore.models.user import User
from drivescore.schemas.stats import LeaderboardRowOut, UserStatsOut
from drivescore.services.leaderboard import build_leaderboard
from drivescore.services.user_stats import (
    StatsTotals,
    get_persisted_stats,
    refresh_all_user_stats,
    refresh_user_stats,
)

router = APIRouter(tags=["stats"])


def _stats_payload(uid: str, totals: StatsTotals) -> UserStatsOut:
    return UserStatsOut(
        uid=uid,
        trip_count=totals.trip_count,
        total_score=totals.total_score,
        total_points=totals.total_points,
        avg_score=totals.avg_score,
    )


def _user_or_404(db: Session, uid: str) -> User:
    user = db.query(User).filter(User.uid == uid).one_or_none()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/stats/{uid}", response_model=UserStatsOut)
def get_user_stats(uid: str, db: Session = Depends(get_db)):
    _user_or_404(db, uid)
    row = get_persisted_stats(db, uid)
    if row is None:
        return _stats_payload(uid, StatsTotals())
    return _stats_payload(
        uid,
        StatsTotals(
            trip_count=row.trip_count,
            total_score=row.total_score,
            total_points=row.total_points,
        ),
    )


@router.post("/stats/refresh")
def refresh_all_stats(db: Session = Depends(get_db)):
    result = refresh_all_user_stats(db)
    if result is None:
        return {"ok": False, "users": 0}
    return {"ok": True, "users": len(result)}


@router.post("/stats/{uid}/refresh", response_model=UserStatsOut)
def refresh_stats(uid: str, db: Session = Depends(get_db)):
    _user_or_404(db, uid)
    return _stats_payload(uid, refresh_user_stats(db, uid))


@router.get("/leaderboard", response_model=list[LeaderboardRowOut])
def leaderboard(
    limit: int = Query(default=settings.LEADERBOARD_DEFAULT_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    return [
        LeaderboardRowOut(
            rank=row.rank,
            uid=row.entry.uid,
            display_name=row.entry.display_name,
            trip_count=row.entry.trip_count,
            avg_score=row.entry.avg_score,
            total_points=row.entry.total_points,
        )
        for row in build_leaderboard(db, limit=limit)
    ]
