"""Initial schema: users, trips with their fixes, per-user stats."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    op.create_table(
        "users",
        sa.Column("uid", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("uid"),
    )

    op.create_table(
        "trips",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(length=128), nullable=False),
        sa.Column("start_time_ms", sa.BigInteger(), nullable=True),
        sa.Column("end_time_ms", sa.BigInteger(), nullable=True),
        sa.Column("distance_m", sa.Float(), nullable=True),
        sa.Column("avg_speed_kmh", sa.Float(), nullable=True),
        sa.Column("max_speed_kmh", sa.Float(), nullable=True),
        sa.Column("finished", sa.Boolean(), nullable=True),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column("bonus_points", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_trips_uid", "trips", ["uid"], unique=False)
    op.create_index("ix_trips_start_time_ms", "trips", ["start_time_ms"], unique=False)

    op.create_table(
        "trip_points",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("trip_id", sa.Integer(), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("timestamp_ms", sa.BigInteger(), nullable=False),
        sa.Column("speed_kmh", sa.Float(), nullable=False),
        sa.Column("geom", Geometry(geometry_type="POINT", srid=4326, spatial_index=False), nullable=False),
        sa.ForeignKeyConstraint(["trip_id"], ["trips.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("trip_id", "seq", name="uq_trip_points_trip_id_seq"),
    )
    op.create_index("ix_trip_points_trip_id", "trip_points", ["trip_id"], unique=False)
    op.create_index(
        "idx_trip_points_geom",
        "trip_points",
        ["geom"],
        unique=False,
        postgresql_using="gist",
    )

    op.create_table(
        "user_stats",
        sa.Column("uid", sa.String(length=128), nullable=False),
        sa.Column("trip_count", sa.BigInteger(), nullable=False),
        sa.Column("total_score", sa.Float(), nullable=False),
        sa.Column("total_points", sa.Float(), nullable=False),
        sa.Column("computed_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uid"),
    )


def downgrade() -> None:
    op.drop_table("user_stats")

    op.drop_index("idx_trip_points_geom", table_name="trip_points", postgresql_using="gist")
    op.drop_index("ix_trip_points_trip_id", table_name="trip_points")
    op.drop_table("trip_points")

    op.drop_index("ix_trips_start_time_ms", table_name="trips")
    op.drop_index("ix_trips_uid", table_name="trips")
    op.drop_table("trips")

    op.drop_table("users")
