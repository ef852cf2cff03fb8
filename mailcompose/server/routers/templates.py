"""Template CRUD routes under /api/v1/templates."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ...core.errors import StorageValidationError, TemplateNotFoundError
from ...core.storage import InMemoryStore
from ...core.validate import get_summary, validate_html
from ..dependencies import current_user_id, get_store
from ..schemas import DuplicateTemplateRequest, TemplateCreateRequest, TemplateUpdateRequest

router = APIRouter(prefix="/api/v1/templates")


def _template_response(template) -> dict:
    result = validate_html(template.html)
    return {**template.to_dict(), "validation": {**result.to_dict(), "summary": get_summary(result)}}


@router.get("")
def list_templates(
    q: str = Query("", description="Case-insensitive match on name or subject"),
    store: InMemoryStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
) -> list[dict]:
    templates = store.search_templates(user_id, q) if q.strip() else store.list_templates(user_id)
    return [template.to_dict() for template in templates]


@router.post("", status_code=201)
def create_template(
    payload: TemplateCreateRequest,
    store: InMemoryStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
) -> dict:
    try:
        template = store.create_template(user_id, **payload.model_dump())
    except StorageValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _template_response(template)


@router.get("/stats")
def template_stats(
    store: InMemoryStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
) -> list[dict]:
    return [stats.to_dict() for stats in store.template_stats(user_id)]


@router.get("/{template_id}")
def get_template(
    template_id: str,
    store: InMemoryStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
) -> dict:
    template = store.get_template(template_id, user_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return _template_response(template)


@router.put("/{template_id}")
def update_template(
    template_id: str,
    payload: TemplateUpdateRequest,
    store: InMemoryStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
) -> dict:
    try:
        template = store.update_template(template_id, user_id, **payload.changes())
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Template not found") from exc
    except StorageValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _template_response(template)


@router.delete("/{template_id}", status_code=204)
def delete_template(
    template_id: str,
    store: InMemoryStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
) -> Response:
    try:
        store.delete_template(template_id, user_id)
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Template not found") from exc
    return Response(status_code=204)


@router.post("/{template_id}/duplicate", status_code=201)
def duplicate_template(
    template_id: str,
    payload: DuplicateTemplateRequest | None = None,
    store: InMemoryStore = Depends(get_store),
    user_id: str = Depends(current_user_id),
) -> dict:
    try:
        template = store.duplicate_template(template_id, user_id, payload.name if payload else None)
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Template not found") from exc
    except StorageValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _template_response(template)
