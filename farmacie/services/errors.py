"""Catalog failure taxonomy raised by services and mapped at the route edge."""

from __future__ import annotations


class SeedValidationError(ValueError):
	"""A domain rule was violated; ``field`` names the offending input when known."""

	code = "validation_error"

	def __init__(self, message: str, field: str | None = None) -> None:
		super().__init__(message)
		self.message = message
		self.field = field


class MissingFieldError(SeedValidationError):
	code = "missing_field"

	def __init__(self, field: str) -> None:
		super().__init__(f"{field} is required", field=field)


class SeedConflictError(ValueError):
	"""The listing tuple is already present in the catalog."""

	code = "conflict"

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message
		self.field: str | None = None


class SeedNotFoundError(LookupError):
	code = "not_found"

	def __init__(self, message: str, field: str | None = None) -> None:
		super().__init__(message)
		self.message = message
		self.field = field
