import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sms_ledger.core.config import Settings, settings as default_settings
from sms_ledger.core.errors import LedgerError
from sms_ledger.core.logger import get_logger
from sms_ledger.routers import legacy, stats, transactions, verification
from sms_ledger.store import LedgerStore, build_store

logger = get_logger("sms_ledger.main")


def create_app(settings: Optional[Settings] = None, store: Optional[LedgerStore] = None) -> FastAPI:
    settings = settings or default_settings

    # --- 1. LEDGER STORE LIFECYCLE ---
    # One store per process, built at startup and handed to every request.
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = False
        if getattr(app.state, "store", None) is None:
            app.state.store = build_store(settings)
            owned = True
        logger.info("app.startup", extra={"fields": {"backend": app.state.store.name}})
        yield
        if owned:
            app.state.store.close()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Ledger and verification engine for SMS payment notifications",
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store

    # --- 2. CORS ---
    # The Android client and the dashboard call the API from other origins.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- 3. ERRORS ---
    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        logger.warning(
            "app.ledger_error",
            extra={"fields": {"error": exc.code, "detail": exc.message, "path": request.url.path}},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.code, "message": exc.message},
        )

    # --- 4. ROUTERS ---
    app.include_router(transactions.router)
    app.include_router(verification.router)
    app.include_router(stats.router)
    app.include_router(legacy.router)

    # --- 5. HEALTH ---
    @app.get("/")
    def root():
        return {
            "status": "running",
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "backend": settings.LEDGER_BACKEND,
        }

    # ⚠️ ADMIN: wipes transactions and backups. Never called by the ingest/verify paths.
    @app.post("/sys/clear-ledger")
    def clear_ledger(admin_key: str, request: Request):
        if admin_key != settings.ADMIN_RESET_KEY:
            raise HTTPException(status_code=403, detail="Access denied")

        request.app.state.store.clear_all()
        logger.warning("app.ledger_cleared")
        return {"success": True, "message": "Database cleared successfully"}

    return app


app = create_app()

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 10000))
    uvicorn.run(app, host="0.0.0.0", port=port)
