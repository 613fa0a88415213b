"""Async SQLAlchemy engine, session factory and per-request session dependency."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
	AsyncEngine,
	AsyncSession,
	async_sessionmaker,
	create_async_engine,
)

from farmacie.config import get_settings

_settings = get_settings()

engine: AsyncEngine = create_async_engine(
	_settings.database_url,
	echo=_settings.database_echo,
	pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
	engine,
	class_=AsyncSession,
	expire_on_commit=False,
)


async def init_models(bind: AsyncEngine, create_tables: bool = False) -> list[str]:
	"""Register every mapped table and optionally create them.

	Importing the model registry here (rather than at module import) keeps
	relationship configuration an explicit startup step.  Returns the
	registered table names.
	"""
	from sqlalchemy.orm import configure_mappers

	from farmacie.models import Base

	configure_mappers()
	if create_tables:
		async with bind.begin() as connection:
			await connection.run_sync(Base.metadata.create_all)
	return sorted(Base.metadata.tables)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
	"""One session per request: commit on success, roll back on any failure."""
	async with async_session_factory() as session:
		try:
			yield session
			await session.commit()
		except Exception:
			await session.rollback()
			raise
