"""
API error envelope.

Every error leaves the service as
``{"error": {"code": <status>, "key": <str>, "message": <str>, "data": <obj|null>}}``.
Handlers raise ``ApiError`` and the exception handler registered on the app
renders it.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, key: str, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.key = key
        self.message = message
        self.data = data

    def to_response(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.status_code,
                "key": self.key,
                "message": self.message,
                "data": self.data,
            }
        }


def bad_request(message: str) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, "bad_request", message)


def database_error(message: str, data: Dict[str, Any]) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, "database_error", message, data)


def unauthorized() -> ApiError:
    return ApiError(status.HTTP_401_UNAUTHORIZED, "unauthorized", "Unauthorized")


def not_found() -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, "not_found", "Not found")


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error("api_error: %s %s -> %s", request.method, request.url.path, exc.message)
        else:
            logger.debug("api_error: %s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.key)
        return JSONResponse(exc.to_response(), status_code=exc.status_code)
