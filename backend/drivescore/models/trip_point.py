from sqlalchemy import BigInteger, Float, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from geoalchemy2 import Geometry

from drivescore.models.base import Base


class TripPoint(Base):
    __tablename__ = "trip_points"
    __table_args__ = (
        UniqueConstraint("trip_id", "seq", name="uq_trip_points_trip_id_seq"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    trip_id: Mapped[int] = mapped_column(
        ForeignKey("trips.id", ondelete="CASCADE"),
        index=True,
    )
    trip = relationship("Trip")

    # index of the fix within the drive segment (0, 1, 2, ...)
    seq: Mapped[int] = mapped_column(Integer)

    timestamp_ms: Mapped[int] = mapped_column(BigInteger)
    speed_kmh: Mapped[float] = mapped_column(Float)

    # raw geometry (lon/lat)
    geom: Mapped[str] = mapped_column(
        Geometry(geometry_type="POINT", srid=4326, spatial_index=True)
    )
