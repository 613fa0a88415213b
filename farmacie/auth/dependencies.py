"""Authentication dependencies: token claims, current user, role checks, passwords."""

from __future__ import annotations

import uuid
from typing import Any, Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from farmacie.auth.jwt import AuthError, TokenClaims, decode_token, token_subject_hint
from farmacie.database import get_db
from farmacie.models.enums import UserRoleEnum
from farmacie.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

READ_ROLES = (UserRoleEnum.admin, UserRoleEnum.manager, UserRoleEnum.viewer)
WRITE_ROLES = (UserRoleEnum.admin, UserRoleEnum.manager)


def auth_http_error(exc: AuthError) -> HTTPException:
	return HTTPException(
		status_code=exc.status_code,
		detail={"error": exc.code, "message": exc.detail},
	)


def hash_password(plaintext: str) -> str:
	return pwd_context.hash(plaintext)


def verify_password(plaintext: str, hashed: str) -> bool:
	try:
		return pwd_context.verify(plaintext, hashed)
	except ValueError:
		return False


def extract_identity_hint(request: Request) -> str:
	"""Rate-limit identity: token subject when present, else client address."""
	subject = token_subject_hint(request.headers.get("authorization"))
	if subject is not None:
		return f"user:{subject}"
	client_host = request.client.host if request.client is not None else "unknown"
	return f"ip:{client_host}"


async def load_active_user(db: AsyncSession, subject: str) -> User:
	try:
		user_id = uuid.UUID(subject)
	except ValueError as exc:
		raise auth_http_error(AuthError(code="token_invalid", detail="Token subject is invalid")) from exc

	row = await db.execute(select(User).where(User.id == user_id))
	user = row.scalar_one_or_none()
	if user is None or not user.is_active:
		raise auth_http_error(AuthError(code="user_invalid", detail="User is not active"))
	return user


async def get_token_claims(request: Request) -> TokenClaims:
	"""Verified access-token claims for the current request."""
	credentials: HTTPAuthorizationCredentials | None = await bearer_scheme(request)
	if credentials is None or credentials.scheme.lower() != "bearer":
		raise auth_http_error(AuthError(code="auth_required", detail="Bearer token is required"))
	try:
		return decode_token(credentials.credentials, expected_type="access")
	except AuthError as exc:
		raise auth_http_error(exc) from exc


async def get_current_user(
	claims: TokenClaims = Depends(get_token_claims),
	db: AsyncSession = Depends(get_db),
) -> User:
	return await load_active_user(db, claims.subject)


def _ensure_role(role: UserRoleEnum | None, allowed: frozenset[UserRoleEnum]) -> None:
	if role not in allowed:
		raise HTTPException(
			status_code=status.HTTP_403_FORBIDDEN,
			detail={"error": "forbidden", "message": "Insufficient role"},
		)


def require_role(*allowed: UserRoleEnum) -> Callable[..., Any]:
	"""Authorize from the token's role claim without touching the database."""
	allowed_set = frozenset(allowed)

	async def dependency(claims: TokenClaims = Depends(get_token_claims)) -> TokenClaims:
		_ensure_role(claims.role, allowed_set)
		return claims

	return dependency


def require_active_role(*allowed: UserRoleEnum) -> Callable[..., Any]:
	"""Authorize against the stored user; deactivation and role changes apply at once."""
	allowed_set = frozenset(allowed)

	async def dependency(current_user: User = Depends(get_current_user)) -> User:
		_ensure_role(current_user.role, allowed_set)
		return current_user

	return dependency
