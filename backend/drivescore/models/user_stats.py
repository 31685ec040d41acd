from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Float, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from drivescore.models.base import Base


class UserStats(Base):
    """Materialized per-user aggregate, rebuildable from ``trips`` at any time."""

    __tablename__ = "user_stats"

    uid: Mapped[str] = mapped_column(
        ForeignKey("users.uid", ondelete="CASCADE"),
        primary_key=True,
    )
    user = relationship("User")

    trip_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_points: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    computed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
