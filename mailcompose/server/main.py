"""FastAPI server adapter for the Compose core engine."""

from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env before importing modules that may resolve/capture settings.
ROOT_DIR = Path(__file__).resolve().parents[2]
load_dotenv(ROOT_DIR / ".env")

from ..config import get_settings
from ..core.config import CoreConfig, config_from_env
from ..core.sending import client_from_config
from ..core.sending.service import ClientFactory
from ..core.storage import InMemoryStore
from .routers import api, email, templates

settings = get_settings()
logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)


def create_app(
    *,
    store: InMemoryStore | None = None,
    core_config: CoreConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        summary="Validate email HTML for client compatibility and send it through Mailgun",
        version="1.0.0",
    )

    resolved_config = core_config or config_from_env()
    fastapi_app.state.store = store or InMemoryStore()
    fastapi_app.state.core_config = resolved_config
    fastapi_app.state.client_factory = client_factory or (lambda: client_from_config(resolved_config))

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    fastapi_app.include_router(api.router)
    fastapi_app.include_router(templates.router)
    fastapi_app.include_router(email.router)
    return fastapi_app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("mailcompose.server.main:app", host="0.0.0.0", port=8000, reload=settings.debug)


__all__ = ["app", "create_app", "logger", "run", "settings"]
