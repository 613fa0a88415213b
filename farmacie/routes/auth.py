"""Token issuance routes: password login and refresh."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from farmacie.auth.dependencies import auth_http_error, load_active_user, verify_password
from farmacie.auth.jwt import AuthError, create_access_token, create_refresh_token, decode_token
from farmacie.database import get_db
from farmacie.models.user import User
from farmacie.schemas.auth import RefreshRequest, TokenPair, TokenRequest

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_pair(user: User) -> TokenPair:
	subject = str(user.id)
	return TokenPair(
		access_token=create_access_token(subject, role=user.role),
		refresh_token=create_refresh_token(subject),
	)


@router.post("/token", response_model=TokenPair)
async def issue_token(
	payload: TokenRequest,
	db: AsyncSession = Depends(get_db),
) -> TokenPair:
	row = await db.execute(select(User).where(func.lower(User.email) == payload.email.strip().lower()))
	user = row.scalar_one_or_none()
	if user is None or not user.is_active or not verify_password(payload.password, user.hashed_password):
		raise auth_http_error(AuthError(code="credentials_invalid", detail="Invalid email or password"))
	return _issue_pair(user)


@router.post("/refresh", response_model=TokenPair)
async def refresh_token(
	payload: RefreshRequest,
	db: AsyncSession = Depends(get_db),
) -> TokenPair:
	try:
		claims = decode_token(payload.refresh_token, expected_type="refresh")
	except AuthError as exc:
		raise auth_http_error(exc) from exc
	user: User = await load_active_user(db, claims.subject)
	return _issue_pair(user)

