from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable
from uuid import uuid4

from drivescore.services.motion import (
    ClassifierState,
    LocationSample,
    MotionState,
    classify,
)
from drivescore.services.scoring import count_harsh_events, score_speeds, trip_points
from drivescore.services.trip_aggregator import FinishedSegment, TripAccumulator, fold

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    classifier: ClassifierState = field(default_factory=ClassifierState)
    accumulator: TripAccumulator | None = None


@dataclass(frozen=True)
class FinishedTrip:
    segment: FinishedSegment
    score: float
    bonus_points: float
    harsh_events: int

    @property
    def points(self) -> float:
        return trip_points(self.score, self.segment.distance_m, self.bonus_points)


@dataclass(frozen=True)
class SampleOutcome:
    motion: MotionState
    finished_trip: FinishedTrip | None = None


def score_segment(segment: FinishedSegment, bonus_points: float = 0.0) -> FinishedTrip:
    speeds = segment.speeds
    return FinishedTrip(
        segment=segment,
        score=score_speeds(speeds),
        bonus_points=bonus_points,
        harsh_events=count_harsh_events(speeds).total,
    )


def step(
    state: SessionState,
    sample: LocationSample,
    bonus_points: float = 0.0,
) -> tuple[SessionState, SampleOutcome]:
    """Apply one fix to a session: classify, aggregate, score on drive end."""
    classifier, motion = classify(state.classifier, sample)
    accumulator, segment = fold(state.accumulator, sample, motion)

    finished = score_segment(segment, bonus_points) if segment is not None else None
    return (
        SessionState(classifier=classifier, accumulator=accumulator),
        SampleOutcome(motion=motion, finished_trip=finished),
    )


class DriveSession:
    """One device's live tracking session.

    Holds the threaded ``SessionState`` and serializes updates so samples are
    applied strictly in the order they are delivered.
    """

    def __init__(self, uid: str, session_id: str | None = None):
        self.uid = uid
        self.session_id = session_id or uuid4().hex
        self._state = SessionState()
        self._last_motion: MotionState | None = None
        self._lock = threading.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def last_motion(self) -> MotionState | None:
        return self._last_motion

    def _apply(self, sample: LocationSample, bonus_points: float) -> SampleOutcome:
        # caller holds self._lock
        self._state, outcome = step(self._state, sample, bonus_points)
        self._last_motion = outcome.motion

        if outcome.finished_trip is not None:
            segment = outcome.finished_trip.segment
            logger.info(
                "Drive segment finished",
                extra={
                    "uid": self.uid,
                    "session_id": self.session_id,
                    "start_time_ms": segment.start_time_ms,
                    "end_time_ms": segment.end_time_ms,
                    "distance_m": round(segment.distance_m, 1),
                    "score": outcome.finished_trip.score,
                },
            )
        return outcome

    def push(self, sample: LocationSample, bonus_points: float = 0.0) -> SampleOutcome:
        with self._lock:
            return self._apply(sample, bonus_points)

    def push_many(
        self,
        samples: Iterable[LocationSample],
        bonus_points: float = 0.0,
        on_trip: Callable[[FinishedTrip], object] | None = None,
    ) -> list[SampleOutcome]:
        """Apply a batch atomically with respect to other batches.

        ``on_trip`` is called under the session lock for each finished trip,
        in the order the trips finished.
        """
        outcomes = []
        with self._lock:
            for sample in samples:
                outcome = self._apply(sample, bonus_points)
                if on_trip is not None and outcome.finished_trip is not None:
                    on_trip(outcome.finished_trip)
                outcomes.append(outcome)
        return outcomes


class SessionRegistry:
    def __init__(self):
        self._sessions: dict[str, DriveSession] = {}
        self._lock = threading.Lock()

    def open(self, uid: str) -> DriveSession:
        session = DriveSession(uid)
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info("Tracking session opened", extra={"uid": uid, "session_id": session.session_id})
        return session

    def get(self, session_id: str) -> DriveSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def close(self, session_id: str) -> DriveSession | None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            # An unfinished drive segment is dropped with the session.
            logger.info(
                "Tracking session closed",
                extra={
                    "uid": session.uid,
                    "session_id": session_id,
                    "discarded_open_segment": session.state.accumulator is not None,
                },
            )
        return session

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


session_registry = SessionRegistry()
