from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from drivescore.core.db import get_db
from drivescore.models.user import User
from drivescore.schemas.session import (
    FinishedTripOut,
    SamplesIn,
    SamplesOut,
    SessionCreateIn,
    SessionOut,
)
from drivescore.services.drive_session import (
    DriveSession,
    FinishedTrip,
    SessionRegistry,
    session_registry,
)
from drivescore.services.motion import LocationSample
from drivescore.services.trip_writer import TripWriter

router = APIRouter(prefix="/sessions", tags=["sessions"])


def get_session_registry() -> SessionRegistry:
    return session_registry


def get_trip_writer(request: Request) -> TripWriter:
    return request.app.state.trip_writer


def _session_or_404(registry: SessionRegistry, session_id: str) -> DriveSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _session_payload(session: DriveSession) -> SessionOut:
    state = session.state
    acc = state.accumulator
    return SessionOut(
        session_id=session.session_id,
        uid=session.uid,
        motion=session.last_motion,
        in_drive=acc is not None,
        last_drive_timestamp_ms=state.classifier.last_drive_timestamp_ms,
        stop_start_timestamp_ms=state.classifier.stop_start_timestamp_ms,
        current_distance_m=acc.distance_m if acc is not None else None,
    )


def _trip_payload(finished: FinishedTrip) -> FinishedTripOut:
    segment = finished.segment
    return FinishedTripOut(
        start_time_ms=segment.start_time_ms,
        end_time_ms=segment.end_time_ms,
        distance_m=segment.distance_m,
        avg_speed_kmh=segment.avg_speed_kmh,
        max_speed_kmh=segment.max_speed_kmh,
        score=finished.score,
        bonus_points=finished.bonus_points,
        points=finished.points,
        harsh_events=finished.harsh_events,
        point_count=len(segment.samples),
    )


@router.post("", response_model=SessionOut, status_code=201)
def open_session(
    payload: SessionCreateIn,
    db: Session = Depends(get_db),
    registry: SessionRegistry = Depends(get_session_registry),
):
    user = db.query(User).filter(User.uid == payload.uid).one_or_none()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    return _session_payload(registry.open(user.uid))


@router.get("/{session_id}", response_model=SessionOut)
def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    return _session_payload(_session_or_404(registry, session_id))


@router.post("/{session_id}/samples", response_model=SamplesOut)
def push_samples(
    session_id: str,
    payload: SamplesIn,
    registry: SessionRegistry = Depends(get_session_registry),
    writer: TripWriter = Depends(get_trip_writer),
):
    """
    Apply a batch of fixes in order. Finished trips are handed to the writer
    and not awaited.
    """
    session = _session_or_404(registry, session_id)

    samples = [
        LocationSample(
            latitude=s.latitude,
            longitude=s.longitude,
            speed_kmh=s.speed_kmh,
            timestamp_ms=s.timestamp_ms,
        )
        for s in payload.samples
    ]
    outcomes = session.push_many(
        samples,
        bonus_points=payload.bonus_points,
        on_trip=lambda trip: writer.submit(session.uid, trip),
    )

    finished = [o.finished_trip for o in outcomes if o.finished_trip is not None]

    return SamplesOut(
        session_id=session.session_id,
        statuses=[o.motion for o in outcomes],
        motion=outcomes[-1].motion,
        finished_trips=[_trip_payload(t) for t in finished],
        writes_submitted=len(finished),
    )


@router.delete("/{session_id}", status_code=204)
def close_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    if registry.close(session_id) is None:
        raise HTTPException(status_code=404, detail="Session not found")
