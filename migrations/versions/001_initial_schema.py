"""Initial schema: profiles and missions.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── profiles ──────────────────────────────────────────────────────
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("role", sa.String(20), nullable=True),
        sa.Column("full_name", sa.String(120), nullable=True),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column(
            "is_online", sa.Boolean, nullable=False, server_default=sa.false()
        ),
        sa.Column("current_lat", sa.Float, nullable=True),
        sa.Column("current_lng", sa.Float, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_profiles_role", "profiles", ["role"])

    # ── missions ──────────────────────────────────────────────────────
    op.create_table(
        "missions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "customer_id",
            sa.String(64),
            sa.ForeignKey("profiles.id"),
            nullable=False,
        ),
        sa.Column("pickup", sa.String(255), nullable=False),
        sa.Column("pickup_lat", sa.Float, nullable=False),
        sa.Column("pickup_lng", sa.Float, nullable=False),
        sa.Column("dropoff", sa.String(255), nullable=False),
        sa.Column("dropoff_lat", sa.Float, nullable=False),
        sa.Column("dropoff_lng", sa.Float, nullable=False),
        sa.Column("distance_km", sa.Float, nullable=False),
        sa.Column("vehicle", sa.String(10), nullable=False, server_default="bike"),
        sa.Column("price", sa.Integer, nullable=False),
        sa.Column(
            "status", sa.String(20), nullable=False, server_default="pending"
        ),
        sa.Column("delivery_pin", sa.String(4), nullable=False),
        sa.Column(
            "driver_id",
            sa.String(64),
            sa.ForeignKey("profiles.id"),
            nullable=True,
        ),
        sa.Column("rating", sa.Integer, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("price >= 0", name="ck_missions_price_non_negative"),
        sa.CheckConstraint(
            "rating IS NULL OR rating BETWEEN 1 AND 5",
            name="ck_missions_rating_range",
        ),
    )
    op.create_index("idx_missions_status", "missions", ["status"])
    op.create_index("idx_missions_customer", "missions", ["customer_id"])
    op.create_index("idx_missions_driver", "missions", ["driver_id"])
    op.create_index("idx_missions_created", "missions", ["created_at"])


def downgrade() -> None:
    op.drop_table("missions")
    op.drop_table("profiles")
