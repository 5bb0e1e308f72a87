from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.models.document import TIMESTAMP_FORMAT
from app.utils.logger import get_logger

logger = get_logger("error-handler")


class ErrorMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.exception("Unhandled exception occurred")
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": str(e) if settings.DEBUG else "An unexpected error occurred",
                    "timestamp": datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)
                }
            )
