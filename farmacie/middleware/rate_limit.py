"""Redis-backed rate limiting middleware for catalog writes."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from farmacie.auth.dependencies import extract_identity_hint
from farmacie.config import get_settings

LIMITED_PREFIX = "/api/v1/seeds"
LIMITED_METHODS = frozenset({"POST", "PATCH", "PUT", "DELETE"})


class RateLimitMiddleware(BaseHTTPMiddleware):
	"""Per-identity write quota backed by Redis atomic counters."""

	async def dispatch(self, request: Request, call_next):  # type: ignore[override]
		if not self._is_limited(request):
			return await call_next(request)

		settings = get_settings()
		if not settings.rate_limit_enabled:
			return await call_next(request)

		redis_client = getattr(request.app.state, "redis", None)
		if redis_client is None:
			return await call_next(request)

		identity = extract_identity_hint(request)
		quota = settings.rate_limit_user_per_minute
		minute_bucket = datetime.now(UTC).strftime("%Y%m%d%H%M")
		key = f"ratelimit:seeds:{identity}:{minute_bucket}"
		current = await redis_client.incr(key)
		if current == 1:
			await redis_client.expire(key, 65)

		if current > quota:
			return JSONResponse(
				status_code=429,
				content={
					"detail": {
						"error": "rate_limited",
						"message": "Write quota exceeded, retry in a minute",
						"field": None,
						"quota": quota,
					}
				},
			)

		return await call_next(request)

	@staticmethod
	def _is_limited(request: Request) -> bool:
		return request.method in LIMITED_METHODS and request.url.path.startswith(LIMITED_PREFIX)
