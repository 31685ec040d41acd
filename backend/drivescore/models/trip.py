from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Float, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from drivescore.models.base import Base


class Trip(Base):
    __tablename__ = "trips"

    id: Mapped[int] = mapped_column(primary_key=True)

    uid: Mapped[str] = mapped_column(ForeignKey("users.uid"), index=True)
    user = relationship("User")

    # Measurement columns stay nullable: rows written by older clients or
    # corrected by hand may lack them, and readers skip such rows.
    start_time_ms: Mapped[int | None] = mapped_column(BigInteger, nullable=True, index=True)
    end_time_ms: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    distance_m: Mapped[float | None] = mapped_column(Float, nullable=True)
    avg_speed_kmh: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_speed_kmh: Mapped[float | None] = mapped_column(Float, nullable=True)

    # NULL counts as finished.
    finished: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=True)
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    bonus_points: Mapped[float | None] = mapped_column(Float, nullable=True, default=0.0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
