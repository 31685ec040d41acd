from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TripOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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
    points: float
    created_at: datetime | None
