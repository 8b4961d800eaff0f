"""Template endpoints — CRUD, draft auto-save and skip-logic preview.

Templates are returned in their camelCase wire shape.  Publishing writes
(POST / PUT) run full validation and answer 422 with the offending field's
``location``; the draft endpoint accepts work in progress.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from awv_db.gateway import DocumentStore
from awv_templates.models import Template
from awv_templates.services import TemplateService

from awv_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from awv_server.dependencies import get_store, get_template_service, get_user_id

router = APIRouter(tags=["templates"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class VisibilityRequest(BaseModel):
    """Body for POST /templates/{id}/visibility."""
    responses: dict[str, Any] = {}


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("/templates")
async def list_templates(
    user_id: str = Depends(get_user_id),
    store: DocumentStore = Depends(get_store),
    service: TemplateService = Depends(get_template_service),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> list[dict]:
    """List the caller's templates, most recently updated first."""
    templates = await service.list_templates(
        store, user_id=user_id, limit=limit, offset=offset,
    )
    return [t.to_wire() for t in templates]


@router.post("/templates", status_code=201)
async def create_template(
    body: Template,
    user_id: str = Depends(get_user_id),
    store: DocumentStore = Depends(get_store),
    service: TemplateService = Depends(get_template_service),
) -> dict:
    """Create a template.  Returns 422 with ``location`` if it is incomplete."""
    template = await service.create_template(store, body, user_id=user_id)
    return template.to_wire()


@router.get("/templates/{template_id}")
async def get_template(
    template_id: str,
    store: DocumentStore = Depends(get_store),
    service: TemplateService = Depends(get_template_service),
) -> dict:
    template = await service.get_template(store, template_id)
    return template.to_wire()


@router.put("/templates/{template_id}")
async def update_template(
    template_id: str,
    body: Template,
    store: DocumentStore = Depends(get_store),
    service: TemplateService = Depends(get_template_service),
) -> dict:
    """Replace the template tree (validated)."""
    template = await service.update_template(store, template_id, body)
    return template.to_wire()


@router.put("/templates/{template_id}/draft")
async def save_draft(
    template_id: str,
    body: Template,
    store: DocumentStore = Depends(get_store),
    service: TemplateService = Depends(get_template_service),
) -> dict:
    """Auto-save a draft snapshot; last writer wins."""
    template = await service.save_draft(store, template_id, body)
    return template.to_wire()


@router.delete("/templates/{template_id}", status_code=204)
async def delete_template(
    template_id: str,
    store: DocumentStore = Depends(get_store),
    service: TemplateService = Depends(get_template_service),
) -> None:
    await service.delete_template(store, template_id)


@router.post("/templates/{template_id}/visibility")
async def evaluate_visibility(
    template_id: str,
    body: VisibilityRequest,
    store: DocumentStore = Depends(get_store),
    service: TemplateService = Depends(get_template_service),
) -> dict:
    """Which questions and sections are visible for the given responses."""
    visibility = await service.evaluate_visibility(store, template_id, body.responses)
    return visibility.to_dict()
