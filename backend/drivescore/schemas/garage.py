from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FavoriteLocationIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address: str | None = Field(default=None, max_length=512)
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class FavoriteLocationOut(BaseModel):
    id: int
    uid: str
    name: str
    address: str | None
    latitude: float
    longitude: float
    created_at: datetime | None


class CarIn(BaseModel):
    brand: str = Field(min_length=1, max_length=100)
    model: str = Field(min_length=1, max_length=100)
    year: str | None = Field(default=None, max_length=16)
    license_plate: str | None = Field(default=None, max_length=32)


class CarOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    uid: str
    brand: str
    model: str
    year: str | None
    license_plate: str | None
