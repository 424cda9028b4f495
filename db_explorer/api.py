"""
HTTP surface for DB Explorer.

Thin FastAPI layer: extracts table name, record id and query parameters,
calls the Explorer and wraps the outcome in the response envelope:

    success: {"response": {...}}
    failure: {"error": "<message>"}

Endpoints are plain `def` functions, so FastAPI runs them on its worker
thread pool and each request uses its own pooled connections.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from db_explorer.config import get_settings
from db_explorer.errors import ExplorerError
from db_explorer.infrastructure.db_factory import close_pool, get_pool
from db_explorer.service import Explorer
from db_explorer.utils.logging import get_logger

log = get_logger(__name__)


def get_explorer() -> Explorer:
    """Dependency providing an Explorer bound to the shared pool."""
    settings = get_settings()
    return Explorer(get_pool(settings), settings)


def envelope(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"response": payload}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    close_pool()


def create_app() -> FastAPI:
    # Every one-segment path is a table name, so the built-in docs routes stay off.
    app = FastAPI(
        title="DB Explorer",
        lifespan=_lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        log.info(
            f"{request.method} {request.url.path}",
            extra={"method": request.method, "path": request.url.path},
        )
        return await call_next(request)

    @app.exception_handler(ExplorerError)
    async def explorer_error_handler(request: Request, exc: ExplorerError) -> JSONResponse:
        if exc.status_code >= 500:
            log.error(
                f"{type(exc).__name__}: {exc.message}",
                extra={"method": request.method, "path": request.url.path},
            )
        else:
            log.info(
                f"Request rejected: {exc.message}",
                extra={"status": exc.status_code, "path": request.url.path},
            )
        return error_response(exc.status_code, exc.envelope_message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 405:
            return error_response(405, "method not allowed")
        if exc.status_code == 404:
            return error_response(404, "not found")
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        log.info("Malformed request", extra={"path": request.url.path, "errors": str(exc)})
        return error_response(400, "invalid request body")

    @app.get("/")
    def list_tables(explorer: Explorer = Depends(get_explorer)) -> Dict[str, Any]:
        return envelope({"tables": explorer.list_tables()})

    @app.get("/{table}")
    def read_records(
        table: str,
        offset: Optional[str] = None,
        limit: Optional[str] = None,
        explorer: Explorer = Depends(get_explorer),
    ) -> Dict[str, Any]:
        return envelope({"records": explorer.read_records(table, offset=offset, limit=limit)})

    @app.post("/{table}")
    def create_record(
        table: str,
        body: Any = Body(None),
        explorer: Explorer = Depends(get_explorer),
    ) -> Dict[str, Any]:
        return envelope(explorer.create_record(table, body))

    @app.get("/{table}/{record_id}")
    def read_record(
        table: str, record_id: str, explorer: Explorer = Depends(get_explorer)
    ) -> Dict[str, Any]:
        return envelope({"record": explorer.read_record(table, record_id)})

    @app.put("/{table}/{record_id}")
    def update_record(
        table: str,
        record_id: str,
        body: Any = Body(None),
        explorer: Explorer = Depends(get_explorer),
    ) -> Dict[str, Any]:
        return envelope({"updated": explorer.update_record(table, record_id, body)})

    @app.delete("/{table}/{record_id}")
    def delete_record(
        table: str, record_id: str, explorer: Explorer = Depends(get_explorer)
    ) -> Dict[str, Any]:
        return envelope({"deleted": explorer.delete_record(table, record_id)})

    return app


app = create_app()

__all__ = ["app", "create_app", "envelope", "get_explorer"]
