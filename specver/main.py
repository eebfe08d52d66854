# specver/main.py
from __future__ import annotations
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from specver.core.config import Settings, settings as default_settings
from specver.routes import history, suggest
from specver.services.entry_store import EntryStore
from specver.services.errors import (
    DuplicateEntry, EntryNotFound, EntryValidationError, StoreUnavailable,
)
from specver.services.registry import RegistryService, build_store

logger = logging.getLogger(__name__)

_STORE_HINT = (
    "Check the storage settings (STORAGE_BACKEND, SPECVER_DB_PATH / GCP project) "
    "and that the 'history_entries' table exists."
)


def _error(status: int, exc: Exception, detail: Optional[str] = None) -> JSONResponse:
    body = {"error": str(exc)}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status, content=body)


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DuplicateEntry)
    async def _duplicate(request: Request, exc: DuplicateEntry):
        return _error(409, exc)

    @app.exception_handler(EntryValidationError)
    async def _invalid(request: Request, exc: EntryValidationError):
        return _error(400, exc)

    @app.exception_handler(EntryNotFound)
    async def _not_found(request: Request, exc: EntryNotFound):
        return _error(404, exc)

    @app.exception_handler(StoreUnavailable)
    async def _unavailable(request: Request, exc: StoreUnavailable):
        logger.error(f"Store unavailable on {request.method} {request.url.path}: {exc}")
        return _error(503, exc, _STORE_HINT)


def create_app(app_settings: Optional[Settings] = None, store: Optional[EntryStore] = None) -> FastAPI:
    s = app_settings or default_settings
    logging.basicConfig(stream=sys.stderr, level=s.log_level.upper())
    entry_store = store or build_store(s)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        entry_store.open()
        if s.auto_init:
            entry_store.initialize()
        logger.info(f"History store ready (backend={entry_store.name})")
        try:
            yield
        finally:
            entry_store.close()

    app = FastAPI(title="SpecVer Registry", lifespan=lifespan)
    app.state.settings = s
    app.state.registry = RegistryService(entry_store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in s.ui_origin.split(",")],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_error_handlers(app)

    app.include_router(history.router, prefix="/api")
    app.include_router(suggest.router, prefix="/api")

    @app.get("/health")
    def health():
        return {"ok": True, "backend": entry_store.name, "suggestions": s.suggestions_enabled}

    return app


app = create_app()
