"""Catalog bearer tokens.

Access tokens carry the holder's catalog role so read routes can authorize
from the claims alone. Refresh tokens carry only the subject; the role is
re-read from ``users`` whenever a new pair is issued.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Literal

from jose import ExpiredSignatureError, JWTError, jwt

from farmacie.config import get_settings
from farmacie.models.enums import UserRoleEnum

TokenType = Literal["access", "refresh"]


@dataclass(slots=True)
class AuthError(Exception):
	"""Structured authentication error for consistent mapping at the edge."""

	code: str
	detail: str
	status_code: int = 401


@dataclass(frozen=True, slots=True)
class TokenClaims:
	subject: str
	token_type: TokenType
	expires_at: datetime
	role: UserRoleEnum | None = None


def issue_token(
	subject: str,
	token_type: TokenType,
	role: UserRoleEnum | None = None,
	expires_minutes: int | None = None,
) -> str:
	settings = get_settings()
	if expires_minutes is None:
		expires_minutes = (
			settings.jwt_access_token_expire_minutes
			if token_type == "access"
			else settings.jwt_refresh_token_expire_minutes
		)
	issued_at = datetime.now(UTC)
	payload: dict[str, object] = {
		"sub": subject,
		"typ": token_type,
		"iat": issued_at,
		"exp": issued_at + timedelta(minutes=expires_minutes),
	}
	if role is not None and token_type == "access":
		payload["role"] = role.value
	return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(
	subject: str,
	role: UserRoleEnum | None = None,
	expires_minutes: int | None = None,
) -> str:
	return issue_token(subject, "access", role=role, expires_minutes=expires_minutes)


def create_refresh_token(subject: str, expires_minutes: int | None = None) -> str:
	return issue_token(subject, "refresh", expires_minutes=expires_minutes)


def decode_token(token: str, expected_type: TokenType | None = None) -> TokenClaims:
	"""Verify signature and expiry, then check the claims the catalog relies on."""
	settings = get_settings()
	try:
		payload = jwt.decode(
			token,
			settings.jwt_secret,
			algorithms=[settings.jwt_algorithm],
			options={"require_exp": True, "require_sub": True},
		)
	except ExpiredSignatureError as exc:
		raise AuthError(code="token_expired", detail="Authentication token has expired") from exc
	except JWTError as exc:
		raise AuthError(code="token_invalid", detail="Invalid authentication token") from exc

	token_type = payload.get("typ")
	if token_type not in ("access", "refresh"):
		raise AuthError(code="token_invalid", detail="Token type is missing")
	if expected_type is not None and token_type != expected_type:
		raise AuthError(code="token_type_invalid", detail=f"Expected {expected_type} token")

	role_raw = payload.get("role")
	try:
		role = UserRoleEnum(role_raw) if role_raw is not None else None
	except ValueError as exc:
		raise AuthError(code="token_invalid", detail="Token role is unknown") from exc

	return TokenClaims(
		subject=str(payload["sub"]),
		token_type=token_type,
		expires_at=datetime.fromtimestamp(payload["exp"], UTC),
		role=role,
	)


def token_subject_hint(authorization: str | None) -> str | None:
	"""Subject of a bearer header if it decodes, else None."""
	if not authorization or not authorization.lower().startswith("bearer "):
		return None
	try:
		return decode_token(authorization[7:].strip()).subject
	except AuthError:
		return None
