from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from padelplace.database import DocumentStore, Settings, load_settings
from padelplace.logger import configure_logging
from padelplace.players.router import get_store, router as players_router

logger = structlog.get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level, settings.log_json)
        store = DocumentStore.from_settings(settings)
        try:
            await store.ping()
            await store.create_all()
            logger.info("document store connected", timeout=store.timeout)
            app.state.store = store
            yield
        finally:
            await store.close()

    app = FastAPI(title="Padel Place", lifespan=lifespan)
    app.include_router(players_router)

    @app.get("/health")
    async def health(store: DocumentStore = Depends(get_store)):
        try:
            await store.ping()
        except Exception as exc:
            logger.warning("health check failed", error=str(exc))
            return JSONResponse({"status": "unavailable", "error": str(exc)}, status_code=503)
        return {"status": "ok"}

    return app


def run() -> None:
    uvicorn.run("padelplace.main:create_app", factory=True, host="0.0.0.0", port=8080)
