"""Uploaded image persistence under the configured storage root."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from pathlib import Path

from starlette.datastructures import UploadFile

from farmacie.config import Settings
from farmacie.services.errors import SeedValidationError
from farmacie.services.utils import relative_storage_path


class ImageStorage:
	"""Writes seed images to ``<storage_root>/<seed_image_dir>``."""

	def __init__(self, settings: Settings):
		self.settings = settings
		self.root = Path(settings.storage_root).resolve()
		self.image_dir = self.root / settings.seed_image_dir

	def ensure_dirs(self) -> Path:
		self.image_dir.mkdir(parents=True, exist_ok=True)
		return self.image_dir

	def validate(self, upload: UploadFile) -> str:
		filename = upload.filename or ""
		suffix = Path(filename).suffix.lower()
		allowed = self.settings.allowed_image_extensions_list
		if suffix not in allowed:
			raise SeedValidationError(
				f"Invalid image type: {filename or 'unnamed file'} (allowed: {', '.join(allowed)})",
				field="images",
			)
		return suffix

	async def _read_checked(self, upload: UploadFile) -> tuple[str, bytes]:
		suffix = self.validate(upload)
		content = await upload.read()
		if len(content) > self.settings.max_image_size_bytes:
			raise SeedValidationError(
				f"Image {upload.filename} exceeds {self.settings.max_image_size_mb}MB",
				field="images",
			)
		return suffix, content

	def _write(self, suffix: str, content: bytes) -> Path:
		self.ensure_dirs()
		target = self.image_dir / f"{uuid.uuid4().hex}{suffix}"
		target.write_bytes(content)
		return target

	async def save(self, upload: UploadFile) -> Path:
		suffix, content = await self._read_checked(upload)
		return self._write(suffix, content)

	async def save_all(self, uploads: Sequence[UploadFile]) -> list[str]:
		"""Check every upload (type and size) before writing any, then return relative paths.

		A write failure part-way removes the files already written.
		"""
		for upload in uploads:
			self.validate(upload)
		checked = [await self._read_checked(upload) for upload in uploads]

		written: list[Path] = []
		try:
			for suffix, content in checked:
				written.append(self._write(suffix, content))
		except OSError:
			for path in written:
				path.unlink(missing_ok=True)
			raise
		return [relative_storage_path(path, self.root) for path in written]

	def discard(self, relative_paths: Sequence[str]) -> None:
		for relative in relative_paths:
			candidate = (self.root / relative.lstrip("/")).resolve()
			if candidate.is_relative_to(self.root):
				candidate.unlink(missing_ok=True)
