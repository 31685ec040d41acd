from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from drivescore.core.config import settings
from drivescore.core.db import get_db
from drivescore.schemas.trip import TripOut
from drivescore.services.trip_store import get_trip, list_trips, trip_track_geojson

router = APIRouter(prefix="/trips", tags=["trips"])


@router.get("/", response_model=list[TripOut])
def list_user_trips(
    uid: str,
    limit: int = Query(default=settings.TRIP_HISTORY_DEFAULT_LIMIT, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """
    Trip history of one user, newest first. Malformed rows are left out.
    """
    return [TripOut.model_validate(trip) for trip in list_trips(db, uid, limit=limit)]


@router.get("/{trip_id}", response_model=TripOut)
def get_single_trip(trip_id: int, db: Session = Depends(get_db)):
    trip = get_trip(db, trip_id)
    if trip is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    return TripOut.model_validate(trip)


@router.get("/{trip_id}/track")
def get_trip_track(trip_id: int, db: Session = Depends(get_db)):
    trip = get_trip(db, trip_id)
    if trip is None:
        raise HTTPException(status_code=404, detail="Trip not found")

    feature = trip_track_geojson(db, trip)
    if feature["properties"]["point_count"] == 0:
        raise HTTPException(status_code=404, detail="No points recorded for this trip")
    return feature
