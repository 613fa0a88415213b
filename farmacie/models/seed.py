"""Seed and SeedImage ORM models for the seed catalog.

A ``Seed`` row is one sellable listing: a variety from a company in a given
package.  The listing tuple (variety, company, crop category, crop, package
weight, package type) is unique so duplicate submissions surface as a
constraint violation even when two requests race past the service check.

Images are owned by their seed: the FK cascades at the database level and
the relationship is declared ``passive_deletes`` so a bulk
``DELETE FROM seeds`` removes them without loading them first.
"""

from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from farmacie.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from farmacie.models.enums import SuitableRegionEnum

# ═══════════════════════════════════════════════════════════════════════════
# Seed
# ═══════════════════════════════════════════════════════════════════════════


class Seed(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A seed-variety listing in the global catalog.

    ``in_simulator`` mirrors whether the variety is known to the crop
    simulator's ``crop_varieties`` table.  ``trial_count`` is maintained by
    the trials subsystem; this service only reads it.
    """

    __tablename__ = "seeds"
    __table_args__ = (
        UniqueConstraint(
            "seed_variety_name",
            "company_fk",
            "crop_category",
            "crop",
            "package_weight",
            "package_type",
            name="uq_seeds_listing",
        ),
        CheckConstraint(
            "germination_percentage BETWEEN 0 AND 100",
            name="germination_percentage_range",
        ),
        CheckConstraint(
            "maturity_percentage BETWEEN 0 AND 100",
            name="maturity_percentage_range",
        ),
        CheckConstraint(
            "min_harvesting_days <= max_harvesting_days",
            name="harvesting_days_order",
        ),
        Index("ix_seeds_in_simulator", "in_simulator"),
    )

    seed_variety_name: Mapped[str] = mapped_column(String(255), nullable=False)
    company_fk: Mapped[str | None] = mapped_column(
        String(255),
        ForeignKey("companies.company", ondelete="SET NULL", onupdate="CASCADE"),
        nullable=True,
    )
    crop_category: Mapped[str] = mapped_column(String(255), nullable=False)
    crop: Mapped[str] = mapped_column(String(255), nullable=False)

    seed_weight: Mapped[int | None] = mapped_column(Integer, nullable=True)
    package_weight: Mapped[int | None] = mapped_column(Integer, nullable=True)
    package_type: Mapped[str | None] = mapped_column(String(255), nullable=True)

    germination_percentage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    maturity_percentage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    min_harvesting_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_harvesting_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    suitable_region: Mapped[SuitableRegionEnum | None] = mapped_column(
        Enum(
            SuitableRegionEnum,
            name="suitable_region",
            create_constraint=False,
            native_enum=True,
        ),
        nullable=True,
    )

    height_class: Mapped[str | None] = mapped_column(String(255), nullable=True)
    nutrient_content: Mapped[str | None] = mapped_column(String(255), nullable=True)
    common_disease_tolerance: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    env_resilience_factors: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    unique_features: Mapped[str | None] = mapped_column(String(255), nullable=True)
    price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    in_simulator: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    trial_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    # ── Relationships ────────────────────────────────────────────────────
    images: Mapped[list[SeedImage]] = relationship(
        back_populates="seed",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="SeedImage.created_at",
    )

    def __repr__(self) -> str:
        return (
            f"<Seed id={self.id} variety={self.seed_variety_name!r} "
            f"company={self.company_fk!r}>"
        )


# ═══════════════════════════════════════════════════════════════════════════
# SeedImage
# ═══════════════════════════════════════════════════════════════════════════


class SeedImage(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """An uploaded image, stored as a path relative to the storage root."""

    __tablename__ = "seed_images"
    __table_args__ = (Index("ix_seed_images_seed_id", "seed_id"),)

    image_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    seed_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("seeds.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
    )

    # ── Relationships ────────────────────────────────────────────────────
    seed: Mapped[Seed] = relationship(back_populates="images")

    def __repr__(self) -> str:
        return f"<SeedImage id={self.id} seed={self.seed_id} url={self.image_url!r}>"
