from pydantic import BaseModel, Field

from drivescore.services.motion import MotionState


class SessionCreateIn(BaseModel):
    uid: str = Field(min_length=1, max_length=128)


class LocationSampleIn(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    speed_kmh: float = Field(ge=0.0)
    timestamp_ms: int


class SamplesIn(BaseModel):
    samples: list[LocationSampleIn] = Field(min_length=1, max_length=3600)
    # Points granted outside the scorer (campaigns, OBD bonuses, ...).
    bonus_points: float = 0.0


class FinishedTripOut(BaseModel):
    start_time_ms: int
    end_time_ms: int
    distance_m: float
    avg_speed_kmh: float
    max_speed_kmh: float
    score: float
    bonus_points: float
    points: float
    harsh_events: int
    point_count: int


class SamplesOut(BaseModel):
    session_id: str
    statuses: list[MotionState]
    motion: MotionState
    finished_trips: list[FinishedTripOut]
    writes_submitted: int


class SessionOut(BaseModel):
    session_id: str
    uid: str
    motion: MotionState | None
    in_drive: bool
    last_drive_timestamp_ms: int | None
    stop_start_timestamp_ms: int | None
    current_distance_m: float | None
