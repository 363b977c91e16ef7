# ownership_api/interfaces/api/main.py
from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ownership_api.application.services.hierarchy_cache import HierarchyIndexCache
from ownership_api.domain.company.errors import (
    CycleDetectedError,
    HierarchyError,
    InvalidShareholderReferenceError,
    NotFoundError,
)
from ownership_api.infrastructure.config import get_settings
from ownership_api.interfaces.api.middleware.rate_limit import RateLimitMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    from ownership_api.infrastructure.duckdb_connection import get_connection

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    get_connection()  # fail fast on a bad DUCKDB_PATH
    app.state.hierarchy_cache = HierarchyIndexCache(enabled=settings.hierarchy_cache_enabled)
    yield


app = FastAPI(
    title="Ownership & Hierarchy API",
    debug=get_settings().debug,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url=None,
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next: object) -> Response:
    response = await call_next(request)  # type: ignore[misc]
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response  # type: ignore[return-value]


app.add_middleware(RateLimitMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidShareholderReferenceError)
async def invalid_shareholder_handler(request: Request, exc: InvalidShareholderReferenceError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "referenced_id": exc.referenced_id, "reason": exc.reason},
    )


@app.exception_handler(CycleDetectedError)
async def cycle_handler(request: Request, exc: CycleDetectedError) -> JSONResponse:
    # data integrity fault, not a client error
    logger.error("%s (path=%s)", exc, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Company hierarchy is inconsistent", "cycle": exc.path})


@app.exception_handler(HierarchyError)
async def hierarchy_error_handler(request: Request, exc: HierarchyError) -> JSONResponse:
    logger.error("Unhandled hierarchy error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal hierarchy error"})


from ownership_api.interfaces.api.routes.company_routes import router as company_router  # noqa: E402
from ownership_api.interfaces.api.routes.scope_routes import router as scope_router  # noqa: E402

app.include_router(company_router, prefix="/api")
app.include_router(scope_router, prefix="/api")
