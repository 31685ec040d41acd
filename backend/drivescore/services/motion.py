"""Movement classification from a stream of location fixes.

The classifier is a pure function of ``(ClassifierState, LocationSample)``;
callers thread the returned state into the next call.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

DRIVING_SPEED_KMH = 10.0
STILLNESS_MS = 300_000  # 5 minutes below driving speed -> walking


class MotionState(str, Enum):
    NO_MOVE = "no_move"
    WALKING = "walking"
    DRIVING = "driving"


@dataclass(frozen=True)
class LocationSample:
    latitude: float
    longitude: float
    speed_kmh: float
    timestamp_ms: int


@dataclass(frozen=True)
class ClassifierState:
    last_drive_timestamp_ms: int | None = None
    stop_start_timestamp_ms: int | None = None


def classify(
    state: ClassifierState,
    sample: LocationSample,
) -> tuple[ClassifierState, MotionState]:
    if sample.speed_kmh >= DRIVING_SPEED_KMH:
        return (
            ClassifierState(
                last_drive_timestamp_ms=sample.timestamp_ms,
                stop_start_timestamp_ms=None,
            ),
            MotionState.DRIVING,
        )

    if state.stop_start_timestamp_ms is None:
        state = replace(state, stop_start_timestamp_ms=sample.timestamp_ms)

    # Not clamped: a backdated fix yields a negative elapsed time.
    elapsed_ms = sample.timestamp_ms - state.stop_start_timestamp_ms

    if elapsed_ms >= STILLNESS_MS:
        return state, MotionState.WALKING
    if state.last_drive_timestamp_ms is not None:
        return state, MotionState.DRIVING
    return state, MotionState.NO_MOVE
