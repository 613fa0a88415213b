"""Pydantic request/response schemas for seed catalog objects."""

from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from farmacie.models.enums import SuitableRegionEnum


def _blank_to_none(value: Any) -> Any:
	if isinstance(value, str) and not value.strip():
		return None
	return value


class _SeedOptionalFields(BaseModel):
	model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

	height_class: str | None = Field(default=None, max_length=255)
	nutrient_content: str | None = Field(default=None, max_length=255)
	common_disease_tolerance: str | None = Field(default=None, max_length=255)
	env_resilience_factors: str | None = Field(default=None, max_length=255)
	unique_features: str | None = Field(default=None, max_length=255)
	price: int | None = Field(default=None, ge=0)
	description: str | None = None

	@field_validator("*", mode="before")
	@classmethod
	def _strip_blank(cls, value: Any) -> Any:
		return _blank_to_none(value)


class SeedCreate(_SeedOptionalFields):
	seed_variety_name: str = Field(min_length=1, max_length=255)
	company_fk: str = Field(min_length=1, max_length=255)
	crop_category: str = Field(min_length=1, max_length=255)
	crop: str = Field(min_length=1, max_length=255)
	seed_weight: int = Field(ge=0)
	package_weight: int = Field(ge=0)
	package_type: str = Field(min_length=1, max_length=255)
	germination_percentage: int = Field(ge=0, le=100)
	maturity_percentage: int = Field(ge=0, le=100)
	min_harvesting_days: int = Field(ge=0)
	max_harvesting_days: int = Field(ge=0)
	suitable_region: SuitableRegionEnum


class SeedUpdate(_SeedOptionalFields):
	"""Partial update; only keys present in the payload are applied."""

	seed_variety_name: str | None = Field(default=None, min_length=1, max_length=255)
	company_fk: str | None = Field(default=None, min_length=1, max_length=255)
	crop_category: str | None = Field(default=None, min_length=1, max_length=255)
	crop: str | None = Field(default=None, min_length=1, max_length=255)
	seed_weight: int | None = Field(default=None, ge=0)
	package_weight: int | None = Field(default=None, ge=0)
	package_type: str | None = Field(default=None, min_length=1, max_length=255)
	germination_percentage: int | None = Field(default=None, ge=0, le=100)
	maturity_percentage: int | None = Field(default=None, ge=0, le=100)
	min_harvesting_days: int | None = Field(default=None, ge=0)
	max_harvesting_days: int | None = Field(default=None, ge=0)
	suitable_region: SuitableRegionEnum | None = None


class SeedImageRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	image_url: str


class SeedRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	seed_variety_name: str
	company_fk: str | None
	crop_category: str
	crop: str
	seed_weight: int | None
	package_weight: int | None
	package_type: str | None
	germination_percentage: int | None
	maturity_percentage: int | None
	min_harvesting_days: int | None
	max_harvesting_days: int | None
	suitable_region: SuitableRegionEnum | None
	height_class: str | None = None
	nutrient_content: str | None = None
	common_disease_tolerance: str | None = None
	env_resilience_factors: str | None = None
	unique_features: str | None = None
	price: int | None = None
	description: str | None = None
	in_simulator: bool
	trial_count: int
	images: list[SeedImageRead] = Field(default_factory=list)


class SeedSummary(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	seed_variety_name: str
	company_fk: str | None
	crop_category: str
	crop: str
	in_simulator: bool
	trial_count: int


class SeedStats(BaseModel):
	seed_count: int
	in_simulator_count: int


class MessageResponse(BaseModel):
	message: str


class SeedDetailResponse(MessageResponse):
	data: SeedRead


class SeedListResponse(MessageResponse):
	data: list[SeedSummary]


class SeedStatsResponse(MessageResponse):
	data: SeedStats
