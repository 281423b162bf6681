"""Storefront order service entrypoint."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from packages.shared.logging_config import setup_logging
from packages.shared.schemas.checkout_v1 import ErrorBodyV1
from services.api.app.db.init_db import init_db
from services.api.app.routers.order import router as order_router
from services.api.app.services.errors import StorefrontError

logger = logging.getLogger(__name__)

app = FastAPI(title="Storefront Order Service")

app.include_router(order_router)


@app.on_event("startup")
def _startup() -> None:
    setup_logging()
    init_db()


@app.exception_handler(StorefrontError)
async def _storefront_error(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=ErrorBodyV1(
            error="Invalid order request",
            details=_describe_validation_errors(exc.errors()),
        ).model_dump(),
    )


def _describe_validation_errors(errors: Sequence[Any]) -> str:
    parts: list[str] = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        field = ".".join(loc) or "body"
        parts.append(f"{field}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
