"""Request-scoped access to application-owned collaborators."""

from fastapi import Header, HTTPException, Request

from ..core.config import CoreConfig
from ..core.sending.service import ClientFactory
from ..core.storage import InMemoryStore


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


def get_client_factory(request: Request) -> ClientFactory:
    return request.app.state.client_factory


def get_core_config(request: Request) -> CoreConfig:
    return request.app.state.core_config


def current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    # Sessions are terminated by the hosting platform, which forwards the user id.
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized - Please log in")
    return user_id
