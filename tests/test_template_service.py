"""TemplateService tests against the in-memory store."""

import pytest

from awv_db import GatewayError
from awv_templates.editor import TemplateValidationError
from awv_templates.models import Template

from helpers.builders import awv_template, awv_template_wire, minimal_template_wire

USER = "u-1"


class TestCreate:
    @pytest.mark.asyncio
    async def test_counts_and_ownership(self, store, template_service):
        template = Template.model_validate(minimal_template_wire())
        created = await template_service.create_template(store, template, user_id=USER)
        assert created.id.startswith("t")
        assert (created.section_count, created.question_count) == (1, 1)
        assert created.user_id == USER
        assert created.created_at is not None

    @pytest.mark.asyncio
    async def test_client_supplied_counts_ignored(self, store, template_service):
        wire = minimal_template_wire()
        wire.update(sectionCount=9, questionCount=9, id="client-id")
        created = await template_service.create_template(
            store, Template.model_validate(wire), user_id=USER
        )
        assert created.question_count == 1
        assert created.id != "client-id"

    @pytest.mark.asyncio
    async def test_invalid_template_not_written(self, store, template_service):
        template = Template.model_validate(minimal_template_wire(name=""))
        with pytest.raises(TemplateValidationError) as excinfo:
            await template_service.create_template(store, template, user_id=USER)
        assert excinfo.value.location == "name"
        assert await store.find_many("templates") == []

    @pytest.mark.asyncio
    async def test_forward_skip_reference_not_written(self, store, template_service):
        wire = awv_template_wire()
        wire["sections"][0]["questions"][0]["skipLogicRules"] = [
            {
                "condition": {"questionId": "q_notes", "operator": "is-answered"},
                "action": "hide",
                "targetType": "question",
                "targetId": "no-such-question",
            }
        ]
        with pytest.raises(TemplateValidationError) as excinfo:
            await template_service.create_template(
                store, Template.model_validate(wire), user_id=USER
            )
        assert excinfo.value.location == (
            "sections[0].questions[0].skipLogicRules[0].condition.questionId"
        )
        assert await store.find_many("templates") == []

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_skip_target(self, store, template_service):
        created = await template_service.create_template(store, awv_template(), user_id=USER)
        wire = awv_template_wire()
        wire["sections"][0]["questions"][1]["skipLogicRules"][0]["targetId"] = "gone"
        with pytest.raises(TemplateValidationError) as excinfo:
            await template_service.update_template(
                store, created.id, Template.model_validate(wire)
            )
        assert excinfo.value.location.endswith("skipLogicRules[0].targetId")
        stored = await template_service.get_template(store, created.id)
        assert stored.sections[0].questions[1].skip_logic_rules[0].target_id is None

    @pytest.mark.asyncio
    async def test_stored_in_wire_shape(self, store, template_service):
        created = await template_service.create_template(store, awv_template(), user_id=USER)
        raw = store.raw("templates", created.id)
        question = raw["sections"][1]["questions"][0]
        assert "scoringScaleConfig" in question
        assert "config" not in question


class TestReadAndList:
    @pytest.mark.asyncio
    async def test_get_missing(self, store, template_service):
        with pytest.raises(ValueError, match="Template not found"):
            await template_service.get_template(store, "nope")

    @pytest.mark.asyncio
    async def test_list_most_recently_updated_first(self, store, template_service):
        first = await template_service.create_template(
            store, Template.model_validate(minimal_template_wire("A")), user_id=USER
        )
        await template_service.create_template(
            store, Template.model_validate(minimal_template_wire("B")), user_id=USER
        )
        await template_service.update_template(
            store, first.id, Template.model_validate(minimal_template_wire("A2"))
        )
        names = [t.name for t in await template_service.list_templates(store)]
        assert names == ["A2", "B"]

    @pytest.mark.asyncio
    async def test_list_filters_owner_and_paginates(self, store, template_service):
        for name in ("A", "B", "C"):
            await template_service.create_template(
                store, Template.model_validate(minimal_template_wire(name)), user_id=USER
            )
        await template_service.create_template(
            store, Template.model_validate(minimal_template_wire("X")), user_id="other"
        )
        page = await template_service.list_templates(store, user_id=USER, limit=2, offset=1)
        assert [t.name for t in page] == ["B", "A"]


class TestUpdateAndDraft:
    @pytest.mark.asyncio
    async def test_update_replaces_tree(self, store, template_service):
        created = await template_service.create_template(store, awv_template(), user_id=USER)
        updated = await template_service.update_template(
            store, created.id, Template.model_validate(minimal_template_wire("Short"))
        )
        assert (updated.name, updated.section_count) == ("Short", 1)
        assert updated.user_id == USER, "Owner must survive an update"
        assert updated.created_at == created.created_at

    @pytest.mark.asyncio
    async def test_update_missing(self, store, template_service):
        with pytest.raises(ValueError, match="not found"):
            await template_service.update_template(store, "nope", awv_template())

    @pytest.mark.asyncio
    async def test_draft_skips_full_validation(self, store, template_service):
        created = await template_service.create_template(store, awv_template(), user_id=USER)
        draft = awv_template()
        draft.sections[0].questions[0].text = ""
        saved = await template_service.save_draft(store, created.id, draft)
        assert saved.sections[0].questions[0].text == ""

    @pytest.mark.asyncio
    async def test_draft_needs_name_and_section(self, store, template_service):
        created = await template_service.create_template(store, awv_template(), user_id=USER)
        with pytest.raises(ValueError, match="Draft requires"):
            await template_service.save_draft(store, created.id, Template(name="Empty"))


class TestDeleteAndVisibility:
    @pytest.mark.asyncio
    async def test_delete(self, store, template_service):
        created = await template_service.create_template(store, awv_template(), user_id=USER)
        await template_service.delete_template(store, created.id)
        with pytest.raises(ValueError, match="not found"):
            await template_service.delete_template(store, created.id)

    @pytest.mark.asyncio
    async def test_evaluate_visibility(self, store, template_service):
        created = await template_service.create_template(store, awv_template(), user_id=USER)
        visibility = await template_service.evaluate_visibility(
            store, created.id, {"q_smoke": "no"}
        )
        assert visibility.hidden_question_ids == ["q_packs"]

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, store, template_service):
        store.fail_with = ConnectionError("down")
        with pytest.raises(GatewayError):
            await template_service.list_templates(store)
