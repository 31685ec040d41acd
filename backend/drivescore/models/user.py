from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from drivescore.models.base import Base


class User(Base):
    __tablename__ = "users"

    # opaque id issued by the auth provider
    uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
