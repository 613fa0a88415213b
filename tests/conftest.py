"""Shared pytest fixtures: async test client, fake DB sessions, auth overrides."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from farmacie.auth.dependencies import get_current_user, get_token_claims
from farmacie.auth.jwt import TokenClaims, create_access_token
from farmacie.database import get_db
from farmacie.main import app
from farmacie.models.enums import UserRoleEnum


class FakeResult:
	"""Just enough of ``sqlalchemy.engine.Result`` for service code paths."""

	def __init__(
		self,
		scalar: Any = None,
		rows: Sequence[dict[str, Any]] | None = None,
		rowcount: int = 0,
	) -> None:
		self._scalar = scalar
		self._rows = list(rows or [])
		self.rowcount = rowcount

	def scalar_one_or_none(self) -> Any:
		return self._scalar

	def scalar_one(self) -> Any:
		return self._scalar

	def mappings(self) -> FakeResult:
		return self

	def all(self) -> list[dict[str, Any]]:
		return self._rows


class FakeAsyncSession:
	def __init__(self, results: Sequence[FakeResult] | None = None) -> None:
		self.commit = AsyncMock()
		self.rollback = AsyncMock()
		self.close = AsyncMock()
		self.flush = AsyncMock()
		self.execute = AsyncMock(side_effect=list(results) if results is not None else None)
		self.added: list[Any] = []

	def add(self, obj: Any) -> None:
		self.added.append(obj)

	def add_all(self, objs: Sequence[Any]) -> None:
		self.added.extend(objs)

	def statements(self) -> list[Any]:
		return [call.args[0] for call in self.execute.await_args_list]


@pytest.fixture
def fake_db_session() -> FakeAsyncSession:
	"""A lightweight async-session stub for dependency overrides in API tests."""
	return FakeAsyncSession()


@pytest.fixture
def scripted_session() -> Callable[..., FakeAsyncSession]:
	"""Factory for sessions whose ``execute`` returns the given results in order."""

	def _factory(*results: FakeResult) -> FakeAsyncSession:
		return FakeAsyncSession(results)

	return _factory


class FakeRedis:
	def __init__(self) -> None:
		self._counter: dict[str, int] = {}
		self.incr = AsyncMock(side_effect=self._incr)
		self.expire = AsyncMock(return_value=True)
		self.ping = AsyncMock(return_value=True)

	async def _incr(self, key: str) -> int:
		value = self._counter.get(key, 0) + 1
		self._counter[key] = value
		return value


@pytest.fixture
def fake_redis() -> FakeRedis:
	return FakeRedis()


def _user_stub(role: UserRoleEnum) -> Any:
	return type(
		"UserStub",
		(),
		{
			"id": uuid.uuid4(),
			"role": role,
			"is_active": True,
			"email": f"{role.value}@test.local",
		},
	)()


def _override_identity(role: UserRoleEnum) -> None:
	user = _user_stub(role)
	claims = TokenClaims(
		subject=str(user.id),
		token_type="access",
		expires_at=datetime.now(UTC) + timedelta(minutes=30),
		role=role,
	)

	async def override_current_user() -> Any:
		return user

	async def override_token_claims() -> TokenClaims:
		return claims

	app.dependency_overrides[get_current_user] = override_current_user
	app.dependency_overrides[get_token_claims] = override_token_claims


@asynccontextmanager
async def _noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
	yield


async def _open_client(fake_db_session: FakeAsyncSession) -> AsyncGenerator[AsyncClient, None]:
	async def override_get_db() -> AsyncGenerator[Any, None]:
		yield fake_db_session

	app.dependency_overrides[get_db] = override_get_db
	original_lifespan = app.router.lifespan_context
	app.router.lifespan_context = _noop_lifespan

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as test_client:
		yield test_client

	app.router.lifespan_context = original_lifespan
	app.dependency_overrides.clear()


@pytest.fixture
async def client(fake_db_session: FakeAsyncSession) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with lifespan disabled, DB mocked and an admin user."""
	_override_identity(UserRoleEnum.admin)
	async for test_client in _open_client(fake_db_session):
		yield test_client


@pytest.fixture
async def auth_client(fake_db_session: FakeAsyncSession) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with DB override only (real auth dependencies active)."""
	async for test_client in _open_client(fake_db_session):
		yield test_client


@pytest.fixture
def as_role() -> Callable[[UserRoleEnum], None]:
	"""Switch the authenticated user's role for the current test."""
	return _override_identity


@pytest.fixture
def auth_user_id() -> uuid.UUID:
	return uuid.UUID("11111111-1111-1111-1111-111111111111")


@pytest.fixture
def access_token(auth_user_id: uuid.UUID) -> str:
	return create_access_token(str(auth_user_id), role=UserRoleEnum.viewer, expires_minutes=30)
