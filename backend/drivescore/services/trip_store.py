from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime

from geoalchemy2.shape import from_shape
from shapely.geometry import Point
from sqlalchemy import or_, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from drivescore.models.trip import Trip
from drivescore.models.trip_point import TripPoint
from drivescore.services.drive_session import FinishedTrip

logger = logging.getLogger(__name__)

REQUIRED_TRIP_FIELDS = (
    "uid",
    "start_time_ms",
    "end_time_ms",
    "distance_m",
    "avg_speed_kmh",
    "max_speed_kmh",
    "score",
)


class TripDecodeError(ValueError):
    """A stored trip row is missing a field needed to use it."""

    def __init__(self, trip_id: int | None, field_name: str, reason: str = "missing"):
        self.trip_id = trip_id
        self.field_name = field_name
        super().__init__(f"Trip {trip_id}: field '{field_name}' is {reason}")


@dataclass(frozen=True)
class TripRecord:
    id: int
    uid: str
    start_time_ms: int
    end_time_ms: int
    distance_m: float
    avg_speed_kmh: float
    max_speed_kmh: float
    finished: bool
    score: float
    bonus_points: float
    created_at: datetime | None = None

    @property
    def points(self) -> float:
        return self.score * self.distance_m / 1000.0 + self.bonus_points


def decode_trip(row: Trip) -> TripRecord:
    values = {}
    for name in REQUIRED_TRIP_FIELDS:
        value = getattr(row, name, None)
        if value is None:
            raise TripDecodeError(row.id, name)
        values[name] = value

    try:
        return TripRecord(
            id=row.id,
            uid=str(values["uid"]),
            start_time_ms=int(values["start_time_ms"]),
            end_time_ms=int(values["end_time_ms"]),
            distance_m=float(values["distance_m"]),
            avg_speed_kmh=float(values["avg_speed_kmh"]),
            max_speed_kmh=float(values["max_speed_kmh"]),
            finished=row.finished is not False,
            score=float(values["score"]),
            bonus_points=float(row.bonus_points) if row.bonus_points is not None else 0.0,
            created_at=row.created_at,
        )
    except (TypeError, ValueError) as exc:
        raise TripDecodeError(row.id, "*", reason=f"unparseable ({exc})") from exc


def decode_trips(rows: list[Trip]) -> list[TripRecord]:
    """Decode rows, skipping (and logging) the ones that cannot be decoded."""
    trips: list[TripRecord] = []
    for row in rows:
        try:
            trips.append(decode_trip(row))
        except TripDecodeError as exc:
            logger.warning(
                "Skipping malformed trip row",
                extra={"trip_id": exc.trip_id, "field": exc.field_name},
            )
    return trips


def finished_filter():
    return or_(Trip.finished.is_(None), Trip.finished.is_(True))


def list_trips(db: Session, uid: str, limit: int = 10) -> list[TripRecord]:
    """Most recent trips of ``uid``, newest first. Empty on read failure."""
    try:
        rows = (
            db.query(Trip)
            .filter(Trip.uid == uid)
            .order_by(Trip.start_time_ms.desc().nullslast(), Trip.id.desc())
            .limit(limit)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to read trip history", extra={"uid": uid})
        db.rollback()
        return []
    return decode_trips(rows)


def get_trip(db: Session, trip_id: int) -> TripRecord | None:
    row = db.query(Trip).filter(Trip.id == trip_id).one_or_none()
    if row is None:
        return None
    try:
        return decode_trip(row)
    except TripDecodeError:
        logger.warning("Requested trip row is malformed", extra={"trip_id": trip_id})
        return None


def add_trip(db: Session, uid: str, finished: FinishedTrip) -> Trip:
    """Stage a finished trip and its fixes on ``db``; the caller commits."""
    segment = finished.segment
    trip = Trip(
        uid=uid,
        start_time_ms=segment.start_time_ms,
        end_time_ms=segment.end_time_ms,
        distance_m=segment.distance_m,
        avg_speed_kmh=segment.avg_speed_kmh,
        max_speed_kmh=segment.max_speed_kmh,
        finished=True,
        score=finished.score,
        bonus_points=finished.bonus_points,
    )
    db.add(trip)
    db.flush()  # assigns trip.id

    db.add_all(
        [
            TripPoint(
                trip_id=trip.id,
                seq=i,
                timestamp_ms=sample.timestamp_ms,
                speed_kmh=sample.speed_kmh,
                geom=from_shape(Point(sample.longitude, sample.latitude), srid=4326),
            )
            for i, sample in enumerate(segment.samples)
        ]
    )
    return trip


def trip_track_geojson(db: Session, trip: TripRecord) -> dict:
    sql = text("""
        SELECT ST_AsGeoJSON(
            ST_MakeLine(geom ORDER BY seq)
        ) AS geojson,
        count(*) AS point_count
        FROM trip_points
        WHERE trip_id = :trip_id
    """)
    row = db.execute(sql, {"trip_id": trip.id}).mappings().one()

    return {
        "type": "Feature",
        "geometry": None if row["geojson"] is None else json.loads(row["geojson"]),
        "properties": {
            "trip_id": trip.id,
            "uid": trip.uid,
            "point_count": int(row["point_count"]),
            "start_time_ms": trip.start_time_ms,
            "end_time_ms": trip.end_time_ms,
            "distance_m": trip.distance_m,
            "score": trip.score,
        },
    }
