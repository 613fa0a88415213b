"""PostgreSQL-backed enum types for all ORM models.

Each StrEnum maps 1:1 to a PostgreSQL CREATE TYPE ... AS ENUM.
These are separate from the Pydantic StrEnum in farmacie/config.py —
config enums validate settings, ORM enums type database columns.
"""

from enum import StrEnum

# ── Catalog enums ───────────────────────────────────────────────────────────


class SuitableRegionEnum(StrEnum):
    """Growing conditions a seed variety is recommended for."""

    irrigated = "irrigated"
    rainfed = "rainfed"
    drought = "drought"


# ── Auth enums ──────────────────────────────────────────────────────────────


class UserRoleEnum(StrEnum):
    """User authorization roles for RBAC."""

    admin = "admin"
    manager = "manager"
    viewer = "viewer"
