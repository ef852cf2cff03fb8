"""JSON API routes: /health, /api/v1/config, /api/v1/validate."""

import json
import logging

from fastapi import APIRouter

from ...config import get_settings
from ...core.constraints import ALLOWED_TAGS, MAX_FILE_SIZE, MAX_WIDTH, SUPPORTED_CSS_PROPERTIES
from ...core.validate import get_summary, validate_html
from ..logging import validation_result_to_loggable
from ..schemas import ValidateRequest

settings = get_settings()
logger = logging.getLogger("uvicorn.error")
router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok", "app": settings.app_name}


@router.get("/api/v1/config")
def client_config() -> dict:
    return {
        "validation_debounce_ms": settings.validation_debounce_ms,
        "constraints": {
            "max_width": MAX_WIDTH,
            "max_file_size": MAX_FILE_SIZE,
            "allowed_tags": list(ALLOWED_TAGS),
            "supported_css_properties": list(SUPPORTED_CSS_PROPERTIES),
        },
    }


@router.post("/api/v1/validate")
def validate(payload: ValidateRequest) -> dict:
    result = validate_html(payload.html)
    logger.debug(
        "Validation summary:\n%s",
        json.dumps(validation_result_to_loggable(result), ensure_ascii=False, indent=2),
    )
    return {**result.to_dict(), "summary": get_summary(result)}
