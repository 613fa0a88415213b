from __future__ import annotations

from collections.abc import Callable
from typing import Any
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from farmacie.models.enums import SuitableRegionEnum
from farmacie.models.seed import Seed, SeedImage
from farmacie.services.errors import (
	MissingFieldError,
	SeedConflictError,
	SeedNotFoundError,
	SeedValidationError,
)
from farmacie.services.seed_service import (
	MSG_SIMULATOR_ALREADY_SET,
	MSG_SIMULATOR_UPDATED,
	SEED_REQUIRED_FIELDS,
	SeedService,
)
from tests.conftest import FakeAsyncSession, FakeResult

IMAGE = "/static/images/seeds/a1.png"


def _fields(**overrides: Any) -> dict[str, Any]:
	fields: dict[str, Any] = {
		"seed_variety_name": "Galaxy-2013",
		"company_fk": "AgriCo",
		"crop_category": "Grain",
		"crop": "Wheat",
		"seed_weight": "40",
		"package_weight": "50",
		"package_type": "Bag",
		"germination_percentage": "85",
		"maturity_percentage": "90",
		"min_harvesting_days": "30",
		"max_harvesting_days": "60",
		"suitable_region": "Irrigated",
		"price": "1200",
		"description": "Rust Resistant",
	}
	fields.update(overrides)
	return fields


def _stored_seed(**overrides: Any) -> Seed:
	values: dict[str, Any] = {
		"id": uuid4(),
		"seed_variety_name": "galaxy-2013",
		"company_fk": "AgriCo",
		"crop_category": "grain",
		"crop": "wheat",
		"package_weight": 50,
		"package_type": "bag",
		"min_harvesting_days": 30,
		"max_harvesting_days": 60,
		"price": 1200,
		"in_simulator": False,
		"trial_count": 0,
	}
	values.update(overrides)
	return Seed(**values)


def _added(session: FakeAsyncSession, kind: type) -> list[Any]:
	return [obj for obj in session.added if isinstance(obj, kind)]


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", SEED_REQUIRED_FIELDS)
async def test_add_seed_rejects_each_missing_field(
	scripted_session: Callable[..., FakeAsyncSession],
	missing: str,
) -> None:
	session = scripted_session()
	fields = _fields()
	del fields[missing]

	with pytest.raises(MissingFieldError) as exc_info:
		await SeedService(session).add_seed(fields, [IMAGE])

	assert exc_info.value.field == missing
	assert session.execute.await_count == 0
	assert session.added == []


@pytest.mark.asyncio
async def test_add_seed_blank_field_counts_as_missing(
	scripted_session: Callable[..., FakeAsyncSession],
) -> None:
	with pytest.raises(MissingFieldError) as exc_info:
		await SeedService(scripted_session()).add_seed(_fields(crop="   "), [IMAGE])
	assert exc_info.value.field == "crop"


@pytest.mark.asyncio
async def test_add_seed_requires_an_image(scripted_session: Callable[..., FakeAsyncSession]) -> None:
	session = scripted_session()
	with pytest.raises(SeedValidationError) as exc_info:
		await SeedService(session).add_seed(_fields(), [])
	assert exc_info.value.field == "images"
	assert session.execute.await_count == 0


@pytest.mark.asyncio
async def test_add_seed_rejects_inverted_harvesting_days(
	scripted_session: Callable[..., FakeAsyncSession],
) -> None:
	session = scripted_session()
	with pytest.raises(SeedValidationError):
		await SeedService(session).add_seed(
			_fields(min_harvesting_days="60", max_harvesting_days="30"),
			[IMAGE],
		)
	assert session.execute.await_count == 0
	assert session.added == []


@pytest.mark.asyncio
async def test_add_seed_without_registry_match(scripted_session: Callable[..., FakeAsyncSession]) -> None:
	session = scripted_session(FakeResult(), FakeResult())

	seed = await SeedService(session).add_seed(_fields(), [IMAGE, "/static/images/seeds/b2.png"])

	assert seed.in_simulator is False
	assert seed.seed_variety_name == "galaxy-2013"
	assert seed.crop == "wheat"
	assert seed.suitable_region == SuitableRegionEnum.irrigated
	assert seed.company_fk == "AgriCo"
	assert seed.description == "rust resistant"
	assert seed.min_harvesting_days == 30
	assert seed.max_harvesting_days == 60

	images = _added(session, SeedImage)
	assert [image.image_url for image in images] == [IMAGE, "/static/images/seeds/b2.png"]
	assert all(image.seed_id == seed.id for image in images)
	assert _added(session, Seed) == [seed]

	# duplicate check + registry lookup only; the registry is not written
	assert session.execute.await_count == 2
	assert not any(getattr(stmt, "is_update", False) for stmt in session.statements())


@pytest.mark.asyncio
async def test_add_seed_links_matching_simulator_variety(
	scripted_session: Callable[..., FakeAsyncSession],
) -> None:
	session = scripted_session(FakeResult(), FakeResult(scalar=uuid4()), FakeResult(rowcount=1))

	seed = await SeedService(session).add_seed(_fields(seed_variety_name="GALAXY-2013"), [IMAGE])

	assert seed.in_simulator is True
	update_stmt = session.statements()[2]
	assert update_stmt.is_update
	assert update_stmt.table.name == "crop_varieties"
	compiled = update_stmt.compile()
	assert compiled.params["in_farmacie"] is True
	assert "galaxy-2013" in compiled.params.values()


@pytest.mark.asyncio
async def test_add_seed_duplicate_listing_conflicts(scripted_session: Callable[..., FakeAsyncSession]) -> None:
	session = scripted_session(FakeResult(scalar=uuid4()))

	with pytest.raises(SeedConflictError):
		await SeedService(session).add_seed(_fields(price="99", description="other"), [IMAGE])

	assert session.added == []
	assert session.execute.await_count == 1


@pytest.mark.asyncio
async def test_add_seed_unique_violation_on_flush_is_conflict(
	scripted_session: Callable[..., FakeAsyncSession],
) -> None:
	session = scripted_session(FakeResult(), FakeResult())
	session.flush.side_effect = IntegrityError(
		"INSERT INTO seeds ...",
		{},
		Exception('duplicate key value violates unique constraint "uq_seeds_listing"'),
	)

	with pytest.raises(SeedConflictError):
		await SeedService(session).add_seed(_fields(), [IMAGE])


@pytest.mark.asyncio
async def test_add_seed_unknown_company_is_field_error(
	scripted_session: Callable[..., FakeAsyncSession],
) -> None:
	session = scripted_session(FakeResult(), FakeResult())
	session.flush.side_effect = IntegrityError(
		"INSERT INTO seeds ...",
		{},
		Exception('insert or update on table "seeds" violates foreign key constraint "fk_seeds_company_fk_companies"'),
	)

	with pytest.raises(SeedValidationError) as exc_info:
		await SeedService(session).add_seed(_fields(), [IMAGE])
	assert exc_info.value.field == "company_fk"


@pytest.mark.asyncio
@pytest.mark.parametrize(
	("field", "value"),
	[
		("germination_percentage", "101"),
		("maturity_percentage", "-1"),
		("suitable_region", "desert"),
		("seed_weight", "heavy"),
	],
)
async def test_add_seed_field_validation(
	scripted_session: Callable[..., FakeAsyncSession],
	field: str,
	value: str,
) -> None:
	session = scripted_session()
	with pytest.raises(SeedValidationError) as exc_info:
		await SeedService(session).add_seed(_fields(**{field: value}), [IMAGE])
	assert exc_info.value.field == field
	assert field in exc_info.value.message
	assert session.execute.await_count == 0


@pytest.mark.asyncio
async def test_get_seed_not_found(scripted_session: Callable[..., FakeAsyncSession]) -> None:
	with pytest.raises(SeedNotFoundError) as exc_info:
		await SeedService(scripted_session(FakeResult())).get_seed(uuid4())
	assert exc_info.value.field == "uuid"


@pytest.mark.asyncio
async def test_list_seeds_empty_store(scripted_session: Callable[..., FakeAsyncSession]) -> None:
	assert await SeedService(scripted_session(FakeResult(rows=[]))).list_seeds() == []


@pytest.mark.asyncio
async def test_delete_seed_is_idempotent(scripted_session: Callable[..., FakeAsyncSession]) -> None:
	session = scripted_session(FakeResult(rowcount=0))

	assert await SeedService(session).delete_seed(uuid4()) == 0
	stmt = session.statements()[0]
	assert stmt.is_delete
	assert stmt.table.name == "seeds"


@pytest.mark.asyncio
async def test_delete_seed_image_only_targets_images(
	scripted_session: Callable[..., FakeAsyncSession],
) -> None:
	session = scripted_session(FakeResult(rowcount=1))

	assert await SeedService(session).delete_seed_image(uuid4()) == 1
	assert session.statements()[0].table.name == "seed_images"


@pytest.mark.asyncio
async def test_update_seed_not_found(scripted_session: Callable[..., FakeAsyncSession]) -> None:
	session = scripted_session(FakeResult())
	with pytest.raises(SeedNotFoundError):
		await SeedService(session).update_seed(uuid4(), {"crop": "maize"}, [IMAGE])
	assert session.added == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
	("changes", "field"),
	[
		({"max_harvesting_days": "20"}, "max_harvesting_days"),
		({"min_harvesting_days": "90"}, "min_harvesting_days"),
		({"min_harvesting_days": "50", "max_harvesting_days": "40"}, "min_harvesting_days"),
	],
)
async def test_update_seed_harvesting_checks_against_stored_values(
	scripted_session: Callable[..., FakeAsyncSession],
	changes: dict[str, str],
	field: str,
) -> None:
	seed = _stored_seed()
	session = scripted_session(FakeResult(scalar=seed))

	with pytest.raises(SeedValidationError) as exc_info:
		await SeedService(session).update_seed(seed.id, changes)

	assert exc_info.value.field == field
	assert seed.min_harvesting_days == 30
	assert seed.max_harvesting_days == 60


@pytest.mark.asyncio
async def test_update_seed_partial_leaves_other_fields(
	scripted_session: Callable[..., FakeAsyncSession],
) -> None:
	seed = _stored_seed()
	session = scripted_session(FakeResult(scalar=seed))

	await SeedService(session).update_seed(
		seed.id,
		{"max_harvesting_days": "75", "crop": "Durum Wheat", "company_fk": "AgriCo Intl", "price": ""},
		[IMAGE],
	)

	assert seed.max_harvesting_days == 75
	assert seed.crop == "durum wheat"
	assert seed.company_fk == "AgriCo Intl"
	assert seed.min_harvesting_days == 30
	assert seed.price == 1200
	assert seed.seed_variety_name == "galaxy-2013"
	images = _added(session, SeedImage)
	assert len(images) == 1 and images[0].seed_id == seed.id
	session.flush.assert_awaited()


@pytest.mark.asyncio
async def test_update_seed_moves_both_bounds_past_stored_max(
	scripted_session: Callable[..., FakeAsyncSession],
) -> None:
	seed = _stored_seed()
	session = scripted_session(FakeResult(scalar=seed))

	await SeedService(session).update_seed(
		seed.id,
		{"min_harvesting_days": "70", "max_harvesting_days": "90"},
	)

	assert seed.min_harvesting_days == 70
	assert seed.max_harvesting_days == 90


@pytest.mark.asyncio
async def test_update_seed_listing_collision_is_conflict(
	scripted_session: Callable[..., FakeAsyncSession],
) -> None:
	seed = _stored_seed()
	session = scripted_session(FakeResult(scalar=seed))
	session.flush.side_effect = IntegrityError(
		"UPDATE seeds ...",
		{},
		Exception('duplicate key value violates unique constraint "uq_seeds_listing"'),
	)

	with pytest.raises(SeedConflictError):
		await SeedService(session).update_seed(seed.id, {"package_weight": "25"})


@pytest.mark.asyncio
async def test_update_seed_lowercases_description(
	scripted_session: Callable[..., FakeAsyncSession],
) -> None:
	seed = _stored_seed()
	session = scripted_session(FakeResult(scalar=seed))

	await SeedService(session).update_seed(seed.id, {"description": "Heat Tolerant"})

	assert seed.description == "heat tolerant"


@pytest.mark.asyncio
async def test_update_seed_ignores_system_flags(scripted_session: Callable[..., FakeAsyncSession]) -> None:
	seed = _stored_seed(trial_count=4)
	session = scripted_session(FakeResult(scalar=seed))

	await SeedService(session).update_seed(seed.id, {"in_simulator": "true", "trial_count": "0"})

	assert seed.in_simulator is False
	assert seed.trial_count == 4


@pytest.mark.asyncio
async def test_seed_stats(scripted_session: Callable[..., FakeAsyncSession]) -> None:
	stats = await SeedService(scripted_session(FakeResult(scalar=7), FakeResult(scalar=2))).seed_stats()
	assert stats.seed_count == 7
	assert stats.in_simulator_count == 2


@pytest.mark.asyncio
async def test_mark_in_simulator_twice(scripted_session: Callable[..., FakeAsyncSession]) -> None:
	seed = _stored_seed()
	session = scripted_session(FakeResult(scalar=seed), FakeResult(scalar=seed))
	service = SeedService(session)

	assert await service.mark_in_simulator(seed.id) == MSG_SIMULATOR_UPDATED
	assert seed.in_simulator is True
	assert await service.mark_in_simulator(seed.id) == MSG_SIMULATOR_ALREADY_SET
	assert session.flush.await_count == 1


@pytest.mark.asyncio
async def test_mark_in_simulator_not_found(scripted_session: Callable[..., FakeAsyncSession]) -> None:
	with pytest.raises(SeedNotFoundError):
		await SeedService(scripted_session(FakeResult())).mark_in_simulator(uuid4())
