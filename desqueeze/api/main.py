# desqueeze/api/main.py
# uvicorn desqueeze.api.main:app --reload --proxy-headers
from __future__ import annotations
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from desqueeze.api.downloads import router as downloads_router
from desqueeze.api.upload import router as upload_router
from desqueeze.config import Settings, settings as default_settings
from desqueeze.services import storage
from desqueeze.utils.logger import setup_logging


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    if not logging.getLogger().handlers:
        setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    app = FastAPI(title=f"{settings.APP_NAME} API", version=settings.VERSION)
    app.state.settings = settings

    # --- CORS setup ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # ------------------

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "✅ Desqueeze backend running"

    # mount routes
    app.include_router(upload_router)
    app.include_router(downloads_router)

    storage.ensure_dir(settings.upload_path)
    storage.ensure_dir(settings.downloads_path)
    app.mount("/downloads", StaticFiles(directory=str(settings.downloads_path)), name="downloads")

    return app


app = create_app()
