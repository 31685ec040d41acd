from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from drivescore.services.geo import haversine_m
from drivescore.services.motion import LocationSample, MotionState


@dataclass(frozen=True)
class TripAccumulator:
    """Running metrics of the drive segment currently being recorded."""

    start_time_ms: int
    last_time_ms: int
    distance_m: float
    samples: tuple[LocationSample, ...]

    @property
    def speeds(self) -> list[float]:
        return [s.speed_kmh for s in self.samples]


@dataclass(frozen=True)
class FinishedSegment:
    start_time_ms: int
    end_time_ms: int
    distance_m: float
    avg_speed_kmh: float
    max_speed_kmh: float
    samples: tuple[LocationSample, ...]

    @property
    def speeds(self) -> list[float]:
        return [s.speed_kmh for s in self.samples]

    @property
    def duration_ms(self) -> int:
        return self.end_time_ms - self.start_time_ms


def start_segment(sample: LocationSample) -> TripAccumulator:
    return TripAccumulator(
        start_time_ms=sample.timestamp_ms,
        last_time_ms=sample.timestamp_ms,
        distance_m=0.0,
        samples=(sample,),
    )


def extend_segment(acc: TripAccumulator, sample: LocationSample) -> TripAccumulator:
    prev = acc.samples[-1]
    d = haversine_m(prev.latitude, prev.longitude, sample.latitude, sample.longitude)
    return TripAccumulator(
        start_time_ms=acc.start_time_ms,
        last_time_ms=sample.timestamp_ms,
        distance_m=acc.distance_m + d,
        samples=acc.samples + (sample,),
    )


def finish_segment(acc: TripAccumulator) -> FinishedSegment:
    speeds = acc.speeds
    return FinishedSegment(
        start_time_ms=acc.start_time_ms,
        end_time_ms=acc.last_time_ms,
        distance_m=acc.distance_m,
        avg_speed_kmh=sum(speeds) / len(speeds),
        max_speed_kmh=max(speeds),
        samples=acc.samples,
    )


def fold(
    acc: TripAccumulator | None,
    sample: LocationSample,
    motion: MotionState,
) -> tuple[TripAccumulator | None, FinishedSegment | None]:
    """Fold one classified sample into the running segment.

    Returns the new accumulator (``None`` outside a drive) and the segment
    that just ended, if any. A segment ends on the first sample that is not
    classified as driving; that sample itself is not part of the trip.
    """
    if motion is MotionState.DRIVING:
        if acc is None:
            return start_segment(sample), None
        return extend_segment(acc, sample), None

    if acc is None:
        return None, None
    return None, finish_segment(acc)


def summarize_samples(samples: Sequence[LocationSample]) -> FinishedSegment:
    """Build the segment metrics for an already-delimited list of fixes."""
    if not samples:
        raise ValueError("Cannot summarize an empty drive segment")

    acc = start_segment(samples[0])
    for sample in samples[1:]:
        acc = extend_segment(acc, sample)
    return finish_segment(acc)
