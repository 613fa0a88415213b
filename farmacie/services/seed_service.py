"""Seed catalog CRUD, validation and crop-simulator cross-linking service."""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from farmacie.models.registry import CropVariety
from farmacie.models.seed import Seed, SeedImage
from farmacie.schemas.seed import SeedCreate, SeedStats, SeedUpdate
from farmacie.services.errors import (
	SeedConflictError,
	SeedNotFoundError,
	SeedValidationError,
)
from farmacie.services.utils import convert_to_lowercase, is_blank, require_fields

SEED_REQUIRED_FIELDS: tuple[str, ...] = (
	"seed_variety_name",
	"company_fk",
	"crop_category",
	"crop",
	"seed_weight",
	"package_weight",
	"package_type",
	"germination_percentage",
	"maturity_percentage",
	"min_harvesting_days",
	"max_harvesting_days",
	"suitable_region",
)

SEED_LOWERCASE_EXCLUDE: frozenset[str] = frozenset({"company_fk"})

LISTING_KEY_FIELDS: tuple[str, ...] = (
	"seed_variety_name",
	"company_fk",
	"crop_category",
	"crop",
	"package_weight",
	"package_type",
)

MSG_SEED_ADDED = "Seed added successfully"
MSG_SEED_UPDATED = "Seed updated successfully"
MSG_SEED_DELETED = "Seed deleted successfully"
MSG_IMAGE_DELETED = "Seed image deleted successfully"
MSG_SIMULATOR_ALREADY_SET = "Seed in simulator status already set."
MSG_SIMULATOR_UPDATED = "Seed in simulator status updated successfully."

_SchemaT = TypeVar("_SchemaT", bound=BaseModel)


class SeedService:
	"""Service for seed listings, their images, and the simulator registry link."""

	def __init__(self, db: AsyncSession):
		self.db = db

	async def add_seed(self, fields: Mapping[str, Any], image_paths: Sequence[str]) -> Seed:
		require_fields(fields, SEED_REQUIRED_FIELDS)
		if not image_paths:
			raise SeedValidationError("At least one image is required.", field="images")

		payload = self._validate(SeedCreate, convert_to_lowercase(fields, SEED_LOWERCASE_EXCLUDE))
		if payload.min_harvesting_days > payload.max_harvesting_days:
			raise SeedValidationError(
				"Min harvesting days must be less than or equal to max harvesting days",
				field="min_harvesting_days",
			)

		values = payload.model_dump()
		if await self._listing_exists(values):
			raise SeedConflictError("Seed already added in global list")

		values["in_simulator"] = await self._link_simulator_variety(payload.seed_variety_name)

		seed = Seed(id=uuid.uuid4(), **values)
		self.db.add(seed)
		await self._flush()
		self._add_images(seed.id, image_paths)
		await self._flush()
		return seed

	async def get_seed(self, seed_id: uuid.UUID) -> Seed:
		row = await self.db.execute(select(Seed).where(Seed.id == seed_id))
		seed = row.scalar_one_or_none()
		if seed is None:
			raise SeedNotFoundError("Seed not found", field="uuid")
		return seed

	async def list_seeds(self) -> list[dict[str, Any]]:
		stmt = select(
			Seed.id,
			Seed.seed_variety_name,
			Seed.company_fk,
			Seed.crop_category,
			Seed.crop,
			Seed.in_simulator,
			Seed.trial_count,
		).order_by(Seed.created_at.desc())
		rows = await self.db.execute(stmt)
		return [dict(row) for row in rows.mappings().all()]

	async def delete_seed(self, seed_id: uuid.UUID) -> int:
		result = await self.db.execute(delete(Seed).where(Seed.id == seed_id))
		return int(result.rowcount or 0)

	async def delete_seed_image(self, image_id: uuid.UUID) -> int:
		result = await self.db.execute(delete(SeedImage).where(SeedImage.id == image_id))
		return int(result.rowcount or 0)

	async def update_seed(
		self,
		seed_id: uuid.UUID,
		fields: Mapping[str, Any],
		image_paths: Sequence[str] = (),
	) -> Seed:
		seed = await self.get_seed(seed_id)

		if image_paths:
			self._add_images(seed.id, image_paths)

		supplied = {key: value for key, value in fields.items() if not is_blank(value)}
		payload = self._validate(SeedUpdate, convert_to_lowercase(supplied, SEED_LOWERCASE_EXCLUDE))
		changes = payload.model_dump(exclude_unset=True)
		self._check_harvesting_update(seed, changes)

		for key, value in changes.items():
			setattr(seed, key, value)
		await self._flush()
		return seed

	async def seed_stats(self) -> SeedStats:
		total = await self.db.execute(select(func.count()).select_from(Seed))
		flagged = await self.db.execute(
			select(func.count()).select_from(Seed).where(Seed.in_simulator.is_(True))
		)
		return SeedStats(
			seed_count=int(total.scalar_one()),
			in_simulator_count=int(flagged.scalar_one()),
		)

	async def mark_in_simulator(self, seed_id: uuid.UUID) -> str:
		seed = await self.get_seed(seed_id)
		if seed.in_simulator:
			return MSG_SIMULATOR_ALREADY_SET
		seed.in_simulator = True
		await self.db.flush()
		return MSG_SIMULATOR_UPDATED

	async def _listing_exists(self, values: Mapping[str, Any]) -> bool:
		conditions = [getattr(Seed, key) == values[key] for key in LISTING_KEY_FIELDS]
		row = await self.db.execute(select(Seed.id).where(*conditions).limit(1))
		return row.scalar_one_or_none() is not None

	async def _link_simulator_variety(self, variety_name: str) -> bool:
		"""Flag matching simulator varieties as listed; return whether any matched."""
		match = func.lower(CropVariety.variety_eng) == variety_name.lower()
		row = await self.db.execute(select(CropVariety.id).where(match).limit(1))
		if row.scalar_one_or_none() is None:
			return False
		await self.db.execute(
			update(CropVariety)
			.where(match)
			.values(in_farmacie=True)
			.execution_options(synchronize_session=False)
		)
		return True

	def _add_images(self, seed_id: uuid.UUID, image_paths: Sequence[str]) -> None:
		self.db.add_all([SeedImage(seed_id=seed_id, image_url=path) for path in image_paths])

	async def _flush(self) -> None:
		try:
			await self.db.flush()
		except IntegrityError as exc:
			translated = self._translate_integrity_error(exc)
			if translated is None:
				raise
			raise translated from exc

	@staticmethod
	def _translate_integrity_error(exc: IntegrityError) -> Exception | None:
		detail = str(exc.orig) if exc.orig is not None else str(exc)
		if "uq_seeds_listing" in detail:
			return SeedConflictError("Seed already added in global list")
		if "fk_seeds_company_fk_companies" in detail:
			return SeedValidationError("company_fk does not reference a known company", field="company_fk")
		for name in ("germination_percentage", "maturity_percentage"):
			if f"ck_seeds_{name}_range" in detail:
				return SeedValidationError(f"{name} must be between 0 and 100", field=name)
		if "ck_seeds_harvesting_days_order" in detail:
			return SeedValidationError(
				"Min harvesting days must be less than or equal to max harvesting days",
				field="min_harvesting_days",
			)
		return None

	@staticmethod
	def _validate(schema: type[_SchemaT], data: Mapping[str, Any]) -> _SchemaT:
		try:
			return schema.model_validate(dict(data))
		except ValidationError as exc:
			error = exc.errors()[0]
			field = str(error["loc"][0]) if error.get("loc") else None
			message = f"{field}: {error['msg']}" if field else error["msg"]
			raise SeedValidationError(message, field=field) from exc

	@staticmethod
	def _check_harvesting_update(seed: Seed, changes: Mapping[str, Any]) -> None:
		new_min = changes.get("min_harvesting_days")
		new_max = changes.get("max_harvesting_days")

		if new_min is not None and new_max is not None:
			if new_min > new_max:
				raise SeedValidationError(
					"Min harvesting days must be less than or equal to max harvesting days",
					field="min_harvesting_days",
				)
			return

		if new_min is not None and seed.max_harvesting_days is not None and new_min > seed.max_harvesting_days:
			raise SeedValidationError(
				"Min harvesting days must be less than or equal to max harvesting days",
				field="min_harvesting_days",
			)
		if new_max is not None and seed.min_harvesting_days is not None and new_max < seed.min_harvesting_days:
			raise SeedValidationError(
				"Max harvesting days must be greater than or equal to min harvesting days",
				field="max_harvesting_days",
			)
