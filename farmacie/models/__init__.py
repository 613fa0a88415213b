"""ORM model registry — importing this module registers every table on Base.metadata.

Alembic ``env.py`` and ``farmacie.database.init_models`` import ``Base`` from
here (not from ``base.py``) so that every table and relationship is
configured.  Application code can also do::

    from farmacie.models import Seed, SeedImage, CropVariety, ...
"""

# ── Auth models ─────────────────────────────────────────────────────────────
from farmacie.models.user import User

# ── Base & Mixins ───────────────────────────────────────────────────────────
from farmacie.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

# ── Enums ───────────────────────────────────────────────────────────────────
from farmacie.models.enums import SuitableRegionEnum, UserRoleEnum

# ── Reference tables owned by other subsystems ──────────────────────────────
from farmacie.models.registry import Company, CropVariety

# ── Catalog models ──────────────────────────────────────────────────────────
from farmacie.models.seed import Seed, SeedImage

__all__ = [
    # Base & mixins
    "Base",
    # Reference tables
    "Company",
    "CropVariety",
    # Catalog
    "Seed",
    "SeedImage",
    # Enums
    "SuitableRegionEnum",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Auth
    "User",
    "UserRoleEnum",
]
