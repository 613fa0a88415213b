"""Company and CropVariety ORM models: tables owned by other subsystems.

``companies`` belongs to the company directory and is only referenced here
(``seeds.company_fk`` points at ``companies.company``).  ``crop_varieties``
is the crop simulator's variety registry; the catalog reads it to cross-link
seeds and flips ``in_farmacie`` when a matching seed is listed.
"""

from __future__ import annotations

from sqlalchemy import Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column

from farmacie.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Company(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Seed company; ``company`` is the natural key seeds reference."""

    __tablename__ = "companies"

    company: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Company id={self.id} company={self.company!r}>"


class CropVariety(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Variety known to the crop simulator."""

    __tablename__ = "crop_varieties"

    variety_eng: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    in_farmacie: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    def __repr__(self) -> str:
        return (
            f"<CropVariety id={self.id} variety={self.variety_eng!r} "
            f"in_farmacie={self.in_farmacie}>"
        )
