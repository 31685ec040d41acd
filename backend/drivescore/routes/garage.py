from fastapi import APIRouter, Depends, HTTPException
from geoalchemy2.functions import ST_X, ST_Y
from geoalchemy2.shape import from_shape
from shapely.geometry import Point
from sqlalchemy.orm import Session

from drivescore.core.db import get_db
from drivescore.models.car import Car
from drivescore.models.favorite_location import FavoriteLocation
from drivescore.models.user import User
from drivescore.schemas.garage import CarIn, CarOut, FavoriteLocationIn, FavoriteLocationOut

router = APIRouter(prefix="/users/{uid}", tags=["garage"])


def _require_user(db: Session, uid: str) -> None:
    if db.query(User.uid).filter(User.uid == uid).one_or_none() is None:
        raise HTTPException(status_code=404, detail="User not found")


def _favorite_rows(db: Session, uid: str, favorite_id: int | None = None):
    q = db.query(FavoriteLocation, ST_Y(FavoriteLocation.geom), ST_X(FavoriteLocation.geom)).filter(
        FavoriteLocation.uid == uid
    )
    if favorite_id is not None:
        q = q.filter(FavoriteLocation.id == favorite_id)
    return q.order_by(FavoriteLocation.created_at.desc(), FavoriteLocation.id.desc()).all()


def _favorite_payload(fav: FavoriteLocation, lat, lon) -> FavoriteLocationOut:
    return FavoriteLocationOut(
        id=fav.id,
        uid=fav.uid,
        name=fav.name,
        address=fav.address,
        latitude=float(lat),
        longitude=float(lon),
        created_at=fav.created_at,
    )


@router.get("/favorites", response_model=list[FavoriteLocationOut])
def list_favorites(uid: str, db: Session = Depends(get_db)):
    _require_user(db, uid)
    return [_favorite_payload(*row) for row in _favorite_rows(db, uid)]


@router.post("/favorites", response_model=FavoriteLocationOut, status_code=201)
def add_favorite(uid: str, payload: FavoriteLocationIn, db: Session = Depends(get_db)):
    _require_user(db, uid)

    fav = FavoriteLocation(
        uid=uid,
        name=payload.name,
        address=payload.address,
        geom=from_shape(Point(payload.longitude, payload.latitude), srid=4326),
    )
    db.add(fav)
    db.commit()

    return _favorite_payload(*_favorite_rows(db, uid, fav.id)[0])


@router.delete("/favorites/{favorite_id}", status_code=204)
def delete_favorite(uid: str, favorite_id: int, db: Session = Depends(get_db)):
    deleted = (
        db.query(FavoriteLocation)
        .filter(FavoriteLocation.uid == uid, FavoriteLocation.id == favorite_id)
        .delete()
    )
    if not deleted:
        raise HTTPException(status_code=404, detail="Favorite not found")
    db.commit()


@router.get("/cars", response_model=list[CarOut])
def list_cars(uid: str, db: Session = Depends(get_db)):
    _require_user(db, uid)
    return db.query(Car).filter(Car.uid == uid).order_by(Car.id.asc()).all()


@router.post("/cars", response_model=CarOut, status_code=201)
def add_car(uid: str, payload: CarIn, db: Session = Depends(get_db)):
    _require_user(db, uid)

    car = Car(uid=uid, **payload.model_dump())
    db.add(car)
    db.commit()
    db.refresh(car)
    return car


@router.put("/cars/{car_id}", response_model=CarOut)
def update_car(uid: str, car_id: int, payload: CarIn, db: Session = Depends(get_db)):
    car = db.query(Car).filter(Car.uid == uid, Car.id == car_id).one_or_none()
    if car is None:
        raise HTTPException(status_code=404, detail="Car not found")

    for key, value in payload.model_dump().items():
        setattr(car, key, value)

    db.commit()
    db.refresh(car)
    return car


@router.delete("/cars/{car_id}", status_code=204)
def delete_car(uid: str, car_id: int, db: Session = Depends(get_db)):
    deleted = db.query(Car).filter(Car.uid == uid, Car.id == car_id).delete()
    if not deleted:
        raise HTTPException(status_code=404, detail="Car not found")
    db.commit()
