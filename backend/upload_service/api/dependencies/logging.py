"""
Request Logging Middleware
===========================
Logs all incoming requests and outgoing responses with timing information.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from upload_service.core.logging_config import get_logger


logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests and responses

    Features:
    - Request ID generation and tracking
    - Request timing
    - Structured logging
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()

        method = request.method
        path = request.url.path
        client_host = request.client.host if request.client else "unknown"

        logger.info(
            "Incoming request {} {}",
            method,
            path,
            request_id=request_id,
            client_host=client_host,
            user_agent=request.headers.get("user-agent", "unknown"),
        )

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                "Request failed: {}",
                repr(e),
                request_id=request_id,
                method=method,
                path=path,
                process_time=round(process_time, 4),
            )
            raise

        process_time = time.time() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(round(process_time, 4))

        logger.info(
            "Request completed {} {} -> {}",
            method,
            path,
            response.status_code,
            request_id=request_id,
            process_time=round(process_time, 4),
        )

        return response
