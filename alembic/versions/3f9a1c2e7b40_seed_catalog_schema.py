"""seed_catalog_schema

Revision ID: 3f9a1c2e7b40
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the catalog schema: users, companies, crop_varieties, seeds and
seed_images plus the suitable_region / user_role enum types.  UUID defaults
use gen_random_uuid() (built into PostgreSQL 13+).

``companies`` and ``crop_varieties`` are owned by the company directory and
the crop simulator; they are created here only when missing so a fresh
database is self-contained.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f9a1c2e7b40"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# ── Enum type names (PostgreSQL CREATE TYPE) ────────────────────────────────
ENUM_SUITABLE_REGION = postgresql.ENUM(
    "irrigated", "rainfed", "drought", name="suitable_region", create_type=False
)
ENUM_USER_ROLE = postgresql.ENUM(
    "admin", "manager", "viewer", name="user_role", create_type=False
)


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _table_exists(name: str) -> bool:
    return sa.inspect(op.get_bind()).has_table(name)


def upgrade() -> None:
    # ── 1. Create enum types ────────────────────────────────────────────
    ENUM_SUITABLE_REGION.create(op.get_bind(), checkfirst=True)
    ENUM_USER_ROLE.create(op.get_bind(), checkfirst=True)

    # ── 2. Reference tables owned by other subsystems ───────────────────
    if not _table_exists("companies"):
        op.create_table(
            "companies",
            _uuid_pk(),
            sa.Column("company", sa.String(255), nullable=False),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id", name="pk_companies"),
            sa.UniqueConstraint("company", name="uq_companies_company"),
        )

    if not _table_exists("crop_varieties"):
        op.create_table(
            "crop_varieties",
            _uuid_pk(),
            sa.Column("variety_eng", sa.String(255), nullable=False),
            sa.Column(
                "in_farmacie",
                sa.Boolean(),
                server_default=sa.text("false"),
                nullable=False,
            ),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id", name="pk_crop_varieties"),
        )
        op.create_index(
            "ix_crop_varieties_variety_eng", "crop_varieties", ["variety_eng"]
        )

    # ── 3. Catalog tables ───────────────────────────────────────────────
    op.create_table(
        "seeds",
        _uuid_pk(),
        sa.Column("seed_variety_name", sa.String(255), nullable=False),
        sa.Column("company_fk", sa.String(255), nullable=True),
        sa.Column("crop_category", sa.String(255), nullable=False),
        sa.Column("crop", sa.String(255), nullable=False),
        sa.Column("seed_weight", sa.Integer(), nullable=True),
        sa.Column("package_weight", sa.Integer(), nullable=True),
        sa.Column("package_type", sa.String(255), nullable=True),
        sa.Column("germination_percentage", sa.Integer(), nullable=True),
        sa.Column("maturity_percentage", sa.Integer(), nullable=True),
        sa.Column("min_harvesting_days", sa.Integer(), nullable=True),
        sa.Column("max_harvesting_days", sa.Integer(), nullable=True),
        sa.Column("suitable_region", ENUM_SUITABLE_REGION, nullable=True),
        sa.Column("height_class", sa.String(255), nullable=True),
        sa.Column("nutrient_content", sa.String(255), nullable=True),
        sa.Column("common_disease_tolerance", sa.String(255), nullable=True),
        sa.Column("env_resilience_factors", sa.String(255), nullable=True),
        sa.Column("unique_features", sa.String(255), nullable=True),
        sa.Column("price", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "in_simulator",
            sa.Boolean(),
            server_default=sa.text("false"),
            nullable=False,
        ),
        sa.Column(
            "trial_count",
            sa.Integer(),
            server_default=sa.text("0"),
            nullable=False,
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["company_fk"],
            ["companies.company"],
            name="fk_seeds_company_fk_companies",
            ondelete="SET NULL",
            onupdate="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_seeds"),
        sa.UniqueConstraint(
            "seed_variety_name",
            "company_fk",
            "crop_category",
            "crop",
            "package_weight",
            "package_type",
            name="uq_seeds_listing",
        ),
        sa.CheckConstraint(
            "germination_percentage BETWEEN 0 AND 100",
            name="ck_seeds_germination_percentage_range",
        ),
        sa.CheckConstraint(
            "maturity_percentage BETWEEN 0 AND 100",
            name="ck_seeds_maturity_percentage_range",
        ),
        sa.CheckConstraint(
            "min_harvesting_days <= max_harvesting_days",
            name="ck_seeds_harvesting_days_order",
        ),
    )
    op.create_index("ix_seeds_in_simulator", "seeds", ["in_simulator"])

    op.create_table(
        "seed_images",
        _uuid_pk(),
        sa.Column("image_url", sa.String(1024), nullable=False),
        sa.Column("seed_id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["seed_id"],
            ["seeds.id"],
            name="fk_seed_images_seed_id_seeds",
            ondelete="CASCADE",
            onupdate="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_seed_images"),
    )
    op.create_index("ix_seed_images_seed_id", "seed_images", ["seed_id"])

    # ── 4. Auth ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("hashed_password", sa.String(128), nullable=False),
        sa.Column(
            "role",
            ENUM_USER_ROLE,
            server_default=sa.text("'viewer'"),
            nullable=False,
        ),
        sa.Column(
            "is_active",
            sa.Boolean(),
            server_default=sa.text("true"),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)


def downgrade() -> None:
    # ── Drop catalog tables; reference tables stay with their owners ────
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_seed_images_seed_id", table_name="seed_images")
    op.drop_table("seed_images")
    op.drop_index("ix_seeds_in_simulator", table_name="seeds")
    op.drop_table("seeds")

    # ── Drop enum types ─────────────────────────────────────────────────
    ENUM_USER_ROLE.drop(op.get_bind(), checkfirst=True)
    ENUM_SUITABLE_REGION.drop(op.get_bind(), checkfirst=True)
