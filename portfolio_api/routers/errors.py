"""Global exception handlers: typed service errors become JSON responses."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from portfolio_api.domain.errors import PortfolioError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PortfolioError)
    async def portfolio_error_handler(request: Request, exc: PortfolioError):
        log = logger.error if exc.http_status >= 500 else logger.info
        log(exc.message, extra={"error_code": exc.code, "path": request.url.path})
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Validation error", extra={"error_code": "validation_error", "path": request.url.path})
        return JSONResponse(
            status_code=422,
            content={
                "error": {
                    "code": "validation_error",
                    "message": "Request validation failed",
                    "details": [
                        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg", "")}
                        for err in exc.errors()
                    ],
                }
            },
        )
