from drivescore.models.base import Base
from drivescore.models.user import User
from drivescore.models.trip import Trip
from drivescore.models.trip_point import TripPoint
from drivescore.models.user_stats import UserStats
from drivescore.models.favorite_location import FavoriteLocation
from drivescore.models.car import Car

__all__ = [
    "Base",
    "User",
    "Trip",
    "TripPoint",
    "UserStats",
    "FavoriteLocation",
    "Car",
]
