from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from drivescore.core.db import get_db
from drivescore.models.user import User
from drivescore.schemas.user import UserOut, UserUpsertIn

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/{uid}", response_model=UserOut)
def upsert_user(uid: str, payload: UserUpsertIn, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.uid == uid).one_or_none()
    if user is None:
        user = User(uid=uid)
        db.add(user)

    user.email = payload.email

    db.commit()
    db.refresh(user)
    return user
