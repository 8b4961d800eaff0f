"""TemplateService — CRUD and draft saving for questionnaire templates.

Publishing paths (``create_template`` / ``update_template``) run the full
editor validation; the auto-save path (``save_draft``) only requires a name
and at least one section so half-finished work can be kept.  Counts are
derived on every write.  Writes are last-writer-wins: the whole tree is
replaced, with no merge and no optimistic lock.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from awv_db.gateway import DocumentStore
from awv_db.models.enums import Collection

from awv_templates.autosave import is_saveable
from awv_templates.editor import TemplateEditor
from awv_templates.evaluator import SkipLogicEvaluator, Visibility
from awv_templates.models.template import Template
from awv_templates.services._common import paginate

logger = logging.getLogger(__name__)

_COLLECTION = Collection.TEMPLATES.value

# Fields the caller may never overwrite through an update
_PROTECTED_FIELDS = ("id", "userId", "createdAt", "updatedAt")


def _to_document(template: Template) -> dict[str, Any]:
    doc = template.refresh_counts().to_wire()
    for key in _PROTECTED_FIELDS:
        doc.pop(key, None)
    return doc


class TemplateService:
    """Business operations on templates, over any ``DocumentStore``."""

    def __init__(self, evaluator: Optional[SkipLogicEvaluator] = None) -> None:
        self._evaluator = evaluator or SkipLogicEvaluator()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_templates(
        self,
        store: DocumentStore,
        *,
        user_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Template]:
        """List templates, most recently updated first."""
        docs = await store.find_many(
            _COLLECTION,
            {"userId": user_id} if user_id else None,
            sort=[("updatedAt", -1)],
        )
        return [Template.model_validate(d) for d in paginate(docs, limit, offset)]

    async def get_template(self, store: DocumentStore, template_id: str) -> Template:
        """Load a template or raise ``ValueError`` if it does not exist."""
        doc = await store.find_by_id(_COLLECTION, template_id)
        if doc is None:
            raise ValueError(f"Template not found: id={template_id}")
        return Template.model_validate(doc)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_template(
        self, store: DocumentStore, template: Template, *, user_id: str
    ) -> Template:
        """Validate and persist a new template owned by ``user_id``.

        Raises ``TemplateValidationError`` before anything is written.
        """
        validated = TemplateEditor(template).validate()
        doc = _to_document(validated)
        doc["userId"] = user_id
        created = await store.create(_COLLECTION, doc)
        logger.info(
            "Created template %s (%d sections, %d questions)",
            created["id"],
            created["sectionCount"],
            created["questionCount"],
        )
        return Template.model_validate(created)

    async def update_template(
        self, store: DocumentStore, template_id: str, template: Template
    ) -> Template:
        """Validate and replace the template's tree."""
        validated = TemplateEditor(template).validate()
        return await self._replace(store, template_id, validated)

    async def save_draft(
        self, store: DocumentStore, template_id: str, template: Template
    ) -> Template:
        """Persist an unvalidated snapshot (the auto-save path)."""
        if not is_saveable(template):
            raise ValueError("Draft requires a name and at least one section")
        return await self._replace(store, template_id, template.model_copy(deep=True))

    async def delete_template(self, store: DocumentStore, template_id: str) -> None:
        if not await store.delete_by_id(_COLLECTION, template_id):
            raise ValueError(f"Template not found: id={template_id}")
        logger.info("Deleted template %s", template_id)

    # ------------------------------------------------------------------
    # Skip logic
    # ------------------------------------------------------------------

    async def evaluate_visibility(
        self,
        store: DocumentStore,
        template_id: str,
        responses: Mapping[str, Any],
    ) -> Visibility:
        template = await self.get_template(store, template_id)
        return self._evaluator.evaluate(template, responses)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _replace(
        self, store: DocumentStore, template_id: str, template: Template
    ) -> Template:
        updated = await store.update_by_id(_COLLECTION, template_id, _to_document(template))
        if updated is None:
            raise ValueError(f"Template not found: id={template_id}")
        logger.debug("Saved template %s", template_id)
        return Template.model_validate(updated)
