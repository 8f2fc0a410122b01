from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from theme_switcher.api.responses import error_payload

logger = logging.getLogger(__name__)


class ApiException(Exception):
    def __init__(self, *, status_code: int, code: str, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


def register_api_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiException)
    async def _handle_api_exception(request: Request, exc: ApiException) -> JSONResponse:
        logger.info(
            "api.error",
            extra={
                "event": "api.error",
                "path": request.url.path,
                "status_code": exc.status_code,
                "code": exc.code,
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_payload(request, code=exc.code, message=exc.message),
        )
