from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

BASE_SCORE = 5.0
HARSH_EVENT_PENALTY = 0.1
# Speed change between two consecutive ~1 Hz fixes treated as harsh
# (15 km/h per second is roughly 0.42 g).
HARSH_DELTA_KMH = 15.0


@dataclass
class HarshEvents:
    accelerations: int
    brakings: int

    @property
    def total(self) -> int:
        return self.accelerations + self.brakings


def count_harsh_events(
    speeds: Sequence[float],
    harsh_delta_kmh: float = HARSH_DELTA_KMH,
) -> HarshEvents:
    accelerations = 0
    brakings = 0
    for i in range(1, len(speeds)):
        delta = speeds[i] - speeds[i - 1]
        if delta > harsh_delta_kmh:
            accelerations += 1
        elif delta < -harsh_delta_kmh:
            brakings += 1
    return HarshEvents(accelerations=accelerations, brakings=brakings)


def score_speeds(
    speeds: Sequence[float],
    harsh_delta_kmh: float = HARSH_DELTA_KMH,
    penalty: float = HARSH_EVENT_PENALTY,
    base: float = BASE_SCORE,
) -> float:
    """Driving-quality score of one trip.

    Starts at ``base`` and loses ``penalty`` per harsh acceleration or
    braking. The result is not clamped and can go below zero.
    """
    events = count_harsh_events(speeds, harsh_delta_kmh=harsh_delta_kmh)
    return base - penalty * events.total


def trip_points(score: float, distance_m: float, bonus_points: float = 0.0) -> float:
    return score * distance_m / 1000.0 + bonus_points
