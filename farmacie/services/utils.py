"""Shared request-payload helpers: required fields, case normalization, storage paths."""

from __future__ import annotations

import uuid
from collections.abc import Collection, Iterable, Mapping
from pathlib import Path, PurePath
from typing import Any

from farmacie.services.errors import MissingFieldError, SeedValidationError


def is_blank(value: Any) -> bool:
	if value is None:
		return True
	return isinstance(value, str) and not value.strip()


def require_fields(data: Mapping[str, Any], fields: Iterable[str]) -> None:
	"""Raise ``MissingFieldError`` for the first declared field that is absent or blank."""
	for field in fields:
		if is_blank(data.get(field)):
			raise MissingFieldError(field)


def convert_to_lowercase(
	data: Mapping[str, Any],
	exclude: Collection[str] = (),
) -> dict[str, Any]:
	"""Return a copy with string values lower-cased, except keys in ``exclude``."""
	converted: dict[str, Any] = {}
	for key, value in data.items():
		if isinstance(value, str) and key not in exclude:
			converted[key] = value.lower()
		else:
			converted[key] = value
	return converted


def parse_uuid(value: str, field: str) -> uuid.UUID:
	try:
		return uuid.UUID(str(value).strip())
	except ValueError as exc:
		raise SeedValidationError(f"{field} must be a valid UUID", field=field) from exc


def relative_storage_path(path: str | PurePath, storage_root: str | PurePath) -> str:
	"""Map a stored file path to ``/<path relative to storage_root>`` in POSIX form.

	Both paths are resolved before comparison.  A path outside the root is a
	programming or configuration error and raises ``ValueError``.
	"""
	resolved = Path(path).resolve()
	root = Path(storage_root).resolve()
	try:
		relative = resolved.relative_to(root)
	except ValueError as exc:
		raise ValueError(f"{resolved} is not under storage root {root}") from exc
	return "/" + relative.as_posix()
