# recipe_sync/app/main.py
from __future__ import annotations

import logging
import sys

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recipe_sync import __version__
from recipe_sync.app.config import get_settings
from recipe_sync.app.domain.errors import ConfigurationError
from recipe_sync.app.routers.enrichment import router as enrichment_router
from recipe_sync.app.routers.playlists import router as playlists_router
from recipe_sync.app.routers.sync import router as sync_router

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Recipe Sync API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sync_router)
app.include_router(enrichment_router)
app.include_router(playlists_router)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Server misconfigured: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Server configuration error", "errors": exc.errors},
    )


@app.get("/health")
def health():
    return {"ok": True}
