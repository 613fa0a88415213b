"""Structured logging with request ID propagation."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from farmacie.config import LogFormat, get_settings

QUIET_PREFIXES = ("/health", "/static")

_configured = False


def configure_structured_logging() -> None:
	"""Configure stdlib + structlog once per process, sharing one renderer."""
	global _configured
	if _configured:
		return

	settings = get_settings()
	log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

	shared_processors: list[Any] = [
		structlog.contextvars.merge_contextvars,
		structlog.stdlib.add_logger_name,
		structlog.processors.add_log_level,
		structlog.processors.TimeStamper(fmt="iso", utc=True),
	]
	renderer: Any = (
		structlog.processors.JSONRenderer()
		if settings.log_format == LogFormat.json
		else structlog.dev.ConsoleRenderer()
	)

	structlog.configure(
		processors=[
			*shared_processors,
			structlog.processors.format_exc_info,
			structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
		],
		wrapper_class=structlog.make_filtering_bound_logger(log_level),
		logger_factory=structlog.stdlib.LoggerFactory(),
		cache_logger_on_first_use=True,
	)

	handler = logging.StreamHandler()
	handler.setFormatter(
		structlog.stdlib.ProcessorFormatter(
			foreign_pre_chain=shared_processors,
			processors=[
				structlog.stdlib.ProcessorFormatter.remove_processors_meta,
				renderer,
			],
		)
	)
	root = logging.getLogger()
	root.handlers = [handler]
	root.setLevel(log_level)
	_configured = True


class RequestLoggingMiddleware(BaseHTTPMiddleware):
	"""Attach request IDs and emit one structured timing log per request."""

	async def dispatch(self, request: Request, call_next):  # type: ignore[override]
		request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
		request.state.request_id = request_id

		structlog.contextvars.clear_contextvars()
		structlog.contextvars.bind_contextvars(
			request_id=request_id,
			method=request.method,
			path=request.url.path,
		)

		logger = structlog.get_logger("farmacie.request")
		start = time.perf_counter()

		try:
			response = await call_next(request)
		except Exception as exc:
			logger.exception(
				"http_request_failed",
				duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
				error=str(exc),
			)
			raise

		response.headers["x-request-id"] = request_id
		if request.url.path.startswith(QUIET_PREFIXES) and response.status_code < 400:
			return response

		duration_ms = round((time.perf_counter() - start) * 1000.0, 2)
		if response.status_code >= 500:
			log = logger.error
		elif response.status_code >= 400:
			log = logger.warning
		else:
			log = logger.info
		log("http_request", status_code=response.status_code, duration_ms=duration_ms)
		return response
