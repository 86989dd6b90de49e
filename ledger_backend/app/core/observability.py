"""
Observability middleware and logging setup.

Adds correlation IDs and structured logging context to requests.
"""

import time
import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# Configure structured logger
logger = logging.getLogger("ledger.http")


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the ledger logger hierarchy once."""
    root = logging.getLogger("ledger")
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s"
        ))
        root.addHandler(handler)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        # 1. Generate or extract Correlation ID
        correlation_id = request.headers.get("X-Correlation-ID", str(uuid.uuid4()))

        # 2. Start Timer
        start_time = time.time()

        # 3. Process Request
        response = await call_next(request)

        # 4. Calculate Duration
        process_time = (time.time() - start_time) * 1000  # ms

        # 5. Add Header to Response
        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Process-Time"] = str(process_time)

        # 6. Structured Log
        log_data = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(process_time, 2),
            "profile_id": request.headers.get("profile-id"),
        }

        # Log level based on status
        if response.status_code >= 500:
            level, outcome = logging.ERROR, "Request Failed"
        elif response.status_code >= 400:
            level, outcome = logging.WARNING, "Request Rejected"
        else:
            level, outcome = logging.INFO, "Request API"

        logger.log(
            level,
            "%s %s %s -> %s in %sms correlation_id=%s profile_id=%s",
            outcome,
            log_data["method"],
            log_data["path"],
            log_data["status_code"],
            log_data["duration_ms"],
            log_data["correlation_id"],
            log_data["profile_id"],
            extra=log_data,
        )

        return response
