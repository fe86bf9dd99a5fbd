# app/middleware/request_logger.py
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app.requests")


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = round((time.perf_counter() - start_time) * 1000, 2)

        logger.info(
            "%s %s status=%s time=%sms user=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration,
            getattr(request.state, "username", "-"),
        )
        return response
