from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from drivescore.models.base import Base


class Car(Base):
    __tablename__ = "cars"

    id: Mapped[int] = mapped_column(primary_key=True)

    uid: Mapped[str] = mapped_column(
        ForeignKey("users.uid", ondelete="CASCADE"),
        index=True,
    )
    user = relationship("User")

    brand: Mapped[str] = mapped_column(String(100))
    model: Mapped[str] = mapped_column(String(100))
    # free text in the garage form ("2019", "2019/2020", ...)
    year: Mapped[str | None] = mapped_column(String(16), nullable=True)
    license_plate: Mapped[str | None] = mapped_column(String(32), nullable=True)
