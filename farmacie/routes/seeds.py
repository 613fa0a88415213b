"""Seed catalog routes: listings, images and simulator status."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from farmacie.auth.dependencies import READ_ROLES, WRITE_ROLES, require_active_role, require_role
from farmacie.config import get_settings
from farmacie.database import get_db
from farmacie.models.enums import UserRoleEnum
from farmacie.schemas.seed import (
	MessageResponse,
	SeedDetailResponse,
	SeedListResponse,
	SeedRead,
	SeedStatsResponse,
	SeedSummary,
)
from farmacie.services.errors import (
	SeedConflictError,
	SeedNotFoundError,
	SeedValidationError,
)
from farmacie.services.seed_service import (
	MSG_IMAGE_DELETED,
	MSG_SEED_ADDED,
	MSG_SEED_DELETED,
	MSG_SEED_UPDATED,
	SEED_REQUIRED_FIELDS,
	SeedService,
)
from farmacie.services.storage import ImageStorage
from farmacie.services.utils import parse_uuid, require_fields

router = APIRouter(prefix="/seeds", tags=["seeds"])
logger = structlog.get_logger("farmacie.seeds")

IMAGES_FIELD = "images"


def _map_error(exc: Exception, operation: str) -> HTTPException:
	if isinstance(exc, HTTPException):
		return exc

	if isinstance(exc, SeedNotFoundError):
		status_code = status.HTTP_404_NOT_FOUND
	elif isinstance(exc, SeedConflictError):
		status_code = status.HTTP_409_CONFLICT
	elif isinstance(exc, SeedValidationError):
		status_code = status.HTTP_400_BAD_REQUEST
	else:
		logger.error("seed_request_failed", operation=operation, error=str(exc), exc_info=exc)
		return HTTPException(
			status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
			detail={
				"error": "unexpected_error",
				"message": "Unexpected seed catalog failure",
				"field": None,
			},
		)

	logger.warning(
		"seed_request_rejected",
		operation=operation,
		error=exc.code,
		field=exc.field,
		message=exc.message,
	)
	return HTTPException(
		status_code=status_code,
		detail={"error": exc.code, "message": exc.message, "field": exc.field},
	)


async def _read_payload(request: Request) -> tuple[dict[str, Any], list[UploadFile]]:
	"""Split a multipart/urlencoded or JSON body into plain fields and image uploads."""
	content_type = request.headers.get("content-type", "")
	if content_type.startswith("application/json"):
		body = await request.json()
		if not isinstance(body, dict):
			raise SeedValidationError("Request body must be a JSON object")
		return {key: value for key, value in body.items() if key != IMAGES_FIELD}, []

	if not content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
		return {}, []

	form = await request.form()
	fields: dict[str, Any] = {}
	uploads: list[UploadFile] = []
	for key, value in form.multi_items():
		if isinstance(value, UploadFile):
			if key == IMAGES_FIELD and value.filename:
				uploads.append(value)
			continue
		if key != IMAGES_FIELD:
			fields[key] = value
	return fields, uploads


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def add_seed(
	request: Request,
	db: AsyncSession = Depends(get_db),
	_user: object = Depends(require_active_role(*WRITE_ROLES)),
) -> MessageResponse:
	storage = ImageStorage(get_settings())
	saved: list[str] = []
	try:
		fields, uploads = await _read_payload(request)
		require_fields(fields, SEED_REQUIRED_FIELDS)
		if not uploads:
			raise SeedValidationError("At least one image is required.", field=IMAGES_FIELD)
		saved = await storage.save_all(uploads)
		await SeedService(db).add_seed(fields, saved)
	except Exception as exc:
		storage.discard(saved)
		raise _map_error(exc, "add_seed") from exc
	logger.info("seed_added", images=len(saved))
	return MessageResponse(message=MSG_SEED_ADDED)


@router.get("", response_model=SeedListResponse)
async def list_seeds(
	db: AsyncSession = Depends(get_db),
	_user: object = Depends(require_role(*READ_ROLES)),
) -> SeedListResponse:
	try:
		rows = await SeedService(db).list_seeds()
	except Exception as exc:
		raise _map_error(exc, "list_seeds") from exc
	return SeedListResponse(
		message="Seeds fetched successfully",
		data=[SeedSummary.model_validate(row) for row in rows],
	)


@router.get("/single", response_model=SeedDetailResponse)
async def get_single_seed(
	uuid: str | None = Query(default=None, description="Seed id"),
	db: AsyncSession = Depends(get_db),
	_user: object = Depends(require_role(*READ_ROLES)),
) -> SeedDetailResponse:
	try:
		require_fields({"uuid": uuid}, ["uuid"])
		seed = await SeedService(db).get_seed(parse_uuid(uuid, "uuid"))
		data = SeedRead.model_validate(seed)
	except Exception as exc:
		raise _map_error(exc, "get_single_seed") from exc
	return SeedDetailResponse(message="Seed fetched successfully", data=data)


@router.get("/stats", response_model=SeedStatsResponse)
async def seed_stats(
	db: AsyncSession = Depends(get_db),
	_user: object = Depends(require_role(*READ_ROLES)),
) -> SeedStatsResponse:
	try:
		stats = await SeedService(db).seed_stats()
	except Exception as exc:
		raise _map_error(exc, "seed_stats") from exc
	return SeedStatsResponse(message="Seed stats fetched successfully", data=stats)


@router.patch("", response_model=MessageResponse)
async def update_seed(
	request: Request,
	uuid: str | None = Query(default=None, description="Seed id"),
	db: AsyncSession = Depends(get_db),
	_user: object = Depends(require_active_role(*WRITE_ROLES)),
) -> MessageResponse:
	storage = ImageStorage(get_settings())
	saved: list[str] = []
	try:
		require_fields({"uuid": uuid}, ["uuid"])
		seed_id = parse_uuid(uuid, "uuid")
		fields, uploads = await _read_payload(request)
		service = SeedService(db)
		await service.get_seed(seed_id)
		if uploads:
			saved = await storage.save_all(uploads)
		await service.update_seed(seed_id, fields, saved)
	except Exception as exc:
		storage.discard(saved)
		raise _map_error(exc, "update_seed") from exc
	return MessageResponse(message=MSG_SEED_UPDATED)


@router.patch("/in-simulator", response_model=MessageResponse)
async def mark_already_in_simulator(
	uuid: str | None = Query(default=None, description="Seed id"),
	db: AsyncSession = Depends(get_db),
	_user: object = Depends(require_active_role(*WRITE_ROLES)),
) -> MessageResponse:
	try:
		require_fields({"uuid": uuid}, ["uuid"])
		message = await SeedService(db).mark_in_simulator(parse_uuid(uuid, "uuid"))
	except Exception as exc:
		raise _map_error(exc, "mark_already_in_simulator") from exc
	return MessageResponse(message=message)


@router.delete("", response_model=MessageResponse)
async def delete_seed(
	uuid: str | None = Query(default=None, description="Seed id"),
	db: AsyncSession = Depends(get_db),
	_user: object = Depends(require_active_role(UserRoleEnum.admin)),
) -> MessageResponse:
	try:
		require_fields({"uuid": uuid}, ["uuid"])
		deleted = await SeedService(db).delete_seed(parse_uuid(uuid, "uuid"))
	except Exception as exc:
		raise _map_error(exc, "delete_seed") from exc
	logger.info("seed_deleted", seed_id=uuid, rows=deleted)
	return MessageResponse(message=MSG_SEED_DELETED)


@router.delete("/images", response_model=MessageResponse)
async def delete_seed_image(
	image_uuid: str | None = Query(default=None, description="Seed image id"),
	db: AsyncSession = Depends(get_db),
	_user: object = Depends(require_active_role(*WRITE_ROLES)),
) -> MessageResponse:
	try:
		require_fields({"image_uuid": image_uuid}, ["image_uuid"])
		await SeedService(db).delete_seed_image(parse_uuid(image_uuid, "image_uuid"))
	except Exception as exc:
		raise _map_error(exc, "delete_seed_image") from exc
	return MessageResponse(message=MSG_IMAGE_DELETED)
