from pydantic import BaseModel


class UserStatsOut(BaseModel):
    uid: str
    trip_count: int
    total_score: float
    total_points: float
    avg_score: float


class LeaderboardRowOut(BaseModel):
    rank: int
    uid: str
    display_name: str
    trip_count: int
    avg_score: float
    total_points: float
