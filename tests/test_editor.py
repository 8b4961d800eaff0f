"""TemplateEditor tests — ordering invariants, type changes, validation.

Every mutating editor call must leave ``order`` dense (0..n-1 matching list
position), notify the change listener with an independent snapshot, and
``validate()`` must report the first offending field without mutating.
"""

import random

import pytest

from awv_templates.editor import TemplateEditor, TemplateValidationError, reorder
from awv_templates.models import (
    MatrixConfig,
    OptionsConfig,
    QuestionType,
    ScaleConfig,
    ScoringScaleConfig,
    SkipLogicRule,
    Template,
    VitalSignsConfig,
)

from helpers.builders import awv_template, minimal_template_wire


def _orders(items):
    return [item.order for item in items]


def _rule(source_id, target_id=None, target_type="question", action="hide"):
    return SkipLogicRule.model_validate(
        {
            "condition": {"questionId": source_id, "operator": "equals", "value": "yes"},
            "action": action,
            "targetType": target_type,
            "targetId": target_id,
        }
    )


# =====================================================================
# reorder
# =====================================================================


class TestReorder:
    def test_moves_single_element(self):
        assert reorder(["a", "b", "c", "d"], 0, 2) == ["b", "c", "a", "d"]
        assert reorder(["a", "b", "c", "d"], 3, 1) == ["a", "d", "b", "c"]

    def test_input_untouched(self):
        items = [1, 2, 3]
        reorder(items, 0, 2)
        assert items == [1, 2, 3], "reorder must not modify its input"

    def test_same_index_is_identity(self):
        assert reorder([1, 2, 3], 1, 1) == [1, 2, 3]

    def test_out_of_range_raises(self):
        with pytest.raises(IndexError):
            reorder([1, 2], 0, 2)


# =====================================================================
# Sections
# =====================================================================


class TestSections:
    def test_add_section_returns_index_and_title(self):
        editor = TemplateEditor()
        assert editor.add_section() == 0
        assert editor.add_section() == 1
        titles = [s.title for s in editor.template.sections]
        assert titles == ["Section 1", "Section 2"]

    def test_first_section_gets_default_question(self):
        editor = TemplateEditor()
        editor.add_section()
        editor.add_section()
        first, second = editor.template.sections
        assert len(first.questions) == 1, "First section should start with a question"
        assert second.questions == [], "Later sections start empty"

    def test_order_dense_after_random_edits(self):
        rng = random.Random(42)
        editor = TemplateEditor()
        for _ in range(200):
            sections = editor.template.sections
            op = rng.choice(["add", "remove", "move"])
            if op == "add" or not sections:
                editor.add_section()
            elif op == "remove":
                editor.remove_section(rng.randrange(len(sections)))
            else:
                editor.move_section(
                    rng.randrange(len(sections)), rng.randrange(len(sections))
                )
            assert _orders(editor.template.sections) == list(
                range(len(editor.template.sections))
            ), f"Section orders not dense after {op}"

    def test_move_section_keeps_identity(self):
        editor = TemplateEditor(awv_template())
        editor.move_section(1, 0)
        assert [s.id for s in editor.template.sections] == ["s_mood", "s_history"]
        assert _orders(editor.template.sections) == [0, 1]

    def test_remove_section_out_of_range(self):
        with pytest.raises(IndexError):
            TemplateEditor().remove_section(0)


# =====================================================================
# Questions and options
# =====================================================================


class TestQuestions:
    def test_add_question_is_radio_with_three_options(self):
        editor = TemplateEditor(awv_template())
        index = editor.add_question(0)
        question = editor.template.sections[0].questions[index]
        assert index == 2
        assert question.type is QuestionType.RADIO
        assert question.text == ""
        assert [o.value for o in question.options] == ["option_1", "option_2", "option_3"]

    def test_remove_and_move_question_renumber(self):
        editor = TemplateEditor(awv_template())
        editor.add_question(0)
        editor.move_question(0, 2, 0)
        editor.remove_question(0, 1)
        questions = editor.template.sections[0].questions
        assert _orders(questions) == [0, 1]
        assert questions[1].id == "q_packs"

    def test_scale_then_radio_yields_two_default_options(self):
        editor = TemplateEditor(awv_template())
        editor.change_question_type(0, 0, QuestionType.SCALE)
        assert isinstance(editor.template.sections[0].questions[0].config, ScaleConfig)

        editor.change_question_type(0, 0, QuestionType.RADIO)
        question = editor.template.sections[0].questions[0]
        wire = question.to_wire()
        assert "scaleConfig" not in wire, "Old configuration must be cleared"
        assert [o.text for o in question.options] == ["Option 1", "Option 2"]

    @pytest.mark.parametrize(
        "qtype, config_type",
        [
            ("SELECT", OptionsConfig),
            ("MATRIX", MatrixConfig),
            ("VITAL_SIGNS", VitalSignsConfig),
            ("BMI_CALCULATOR", VitalSignsConfig),
            ("SCORING_SCALE", ScoringScaleConfig),
        ],
    )
    def test_change_type_installs_default(self, qtype, config_type):
        editor = TemplateEditor(awv_template())
        editor.change_question_type(1, 1, qtype)
        assert isinstance(editor.template.sections[1].questions[1].config, config_type)

    def test_change_to_text_type_clears_configuration(self):
        editor = TemplateEditor(awv_template())
        editor.change_question_type(0, 0, "DATE")
        question = editor.template.sections[0].questions[0]
        assert question.config is None
        assert question.options == []

    def test_add_option_blank_gets_positional_value(self):
        editor = TemplateEditor(awv_template())
        index = editor.add_option(0, 0)
        option = editor.template.sections[0].questions[0].options[index]
        assert (option.text, option.value, option.order) == ("", "option_3", 2)

    def test_set_option_text_rederives_value(self):
        editor = TemplateEditor(awv_template())
        editor.set_option_text(0, 0, 1, "Used To Smoke")
        assert editor.template.sections[0].questions[0].options[1].value == "used_to_smoke"

    def test_move_and_remove_option_renumber(self):
        editor = TemplateEditor(awv_template())
        editor.add_option(0, 0, "Sometimes")
        editor.move_option(0, 0, 2, 0)
        editor.remove_option(0, 0, 1)
        options = editor.template.sections[0].questions[0].options
        assert [o.text for o in options] == ["Sometimes", "No"]
        assert _orders(options) == [0, 1]

    def test_options_on_non_option_question_rejected(self):
        editor = TemplateEditor(awv_template())
        with pytest.raises(ValueError, match="has no options"):
            editor.add_option(0, 1, "x")


# =====================================================================
# Skip logic and recommendations
# =====================================================================


class TestSkipLogicRules:
    def test_backward_reference_accepted(self):
        editor = TemplateEditor(awv_template())
        editor.add_skip_logic_rule(1, 0, _rule("q_smoke"))
        assert len(editor.template.sections[1].questions[0].skip_logic_rules) == 1

    def test_forward_reference_rejected(self):
        editor = TemplateEditor(awv_template())
        with pytest.raises(ValueError, match="come before"):
            editor.add_skip_logic_rule(0, 0, _rule("q_phq"))

    def test_self_reference_rejected(self):
        editor = TemplateEditor(awv_template())
        with pytest.raises(ValueError, match="come before"):
            editor.add_skip_logic_rule(0, 0, _rule("q_smoke"))

    def test_unknown_section_target_rejected(self):
        editor = TemplateEditor(awv_template())
        with pytest.raises(ValueError, match="not found"):
            editor.add_skip_logic_rule(1, 0, _rule("q_smoke", "nope", "section"))

    def test_remove_rule(self):
        editor = TemplateEditor(awv_template())
        editor.remove_skip_logic_rule(0, 1, 0)
        assert editor.template.sections[0].questions[1].skip_logic_rules == []


class TestRecommendations:
    def test_first_recommendation_is_default(self):
        editor = TemplateEditor(awv_template())
        first = editor.add_recommendation(0, 1, "Screen for COPD", "Screenings")
        second = editor.add_recommendation(0, 1, "Walk daily", "Exercise")
        assert first.is_default is True
        assert second.is_default is False

    def test_recommendation_on_option(self):
        editor = TemplateEditor(awv_template())
        editor.add_recommendation(0, 0, "Quit line", "Lifestyle", option_index=0)
        recs = editor.template.sections[0].questions[0].options[0].recommendations
        assert [r.text for r in recs] == ["Smoking cessation counselling", "Quit line"]


# =====================================================================
# Validation and change notification
# =====================================================================


class TestValidate:
    def test_valid_template_returns_snapshot_with_counts(self):
        snapshot = TemplateEditor(awv_template()).validate()
        assert (snapshot.section_count, snapshot.question_count) == (2, 4)

    @pytest.mark.parametrize(
        "mutate, location",
        [
            (lambda w: w.update(name="  "), "name"),
            (lambda w: w.update(sections=[]), "sections"),
            (lambda w: w["sections"][0].update(title=""), "sections[0].title"),
            (lambda w: w["sections"][0].update(questions=[]), "sections[0].questions"),
            (
                lambda w: w["sections"][0]["questions"][0].update(text=""),
                "sections[0].questions[0].text",
            ),
            (
                lambda w: w["sections"][0]["questions"][0]["options"].append({"text": ""}),
                "sections[0].questions[0].options[2].text",
            ),
        ],
    )
    def test_first_offending_location(self, mutate, location):
        from helpers.builders import awv_template_wire

        wire = awv_template_wire()
        mutate(wire)
        editor = TemplateEditor(Template.model_validate(wire))
        with pytest.raises(TemplateValidationError) as excinfo:
            editor.validate()
        assert excinfo.value.location == location

    def test_validation_does_not_mutate(self):
        editor = TemplateEditor(Template.model_validate(minimal_template_wire("")))
        before = editor.template.model_copy(deep=True)
        with pytest.raises(TemplateValidationError):
            editor.validate()
        assert editor.template == before

    def test_new_editor_default_question_fails_validation(self):
        editor = TemplateEditor()
        editor.update_details(name="Draft")
        editor.add_section()
        with pytest.raises(TemplateValidationError) as excinfo:
            editor.validate()
        assert excinfo.value.location == "sections[0].questions[0].text"

    def test_removing_every_option_survives_reload_but_blocks_publishing(self):
        editor = TemplateEditor(awv_template())
        editor.remove_option(0, 0, 0)
        editor.remove_option(0, 0, 0)
        reloaded = Template.model_validate(editor.template.to_wire())
        assert reloaded == editor.template, "Emptied question must reload unchanged"

        with pytest.raises(TemplateValidationError) as excinfo:
            editor.validate()
        assert excinfo.value.location == "sections[0].questions[0].options"


class TestValidateSkipLogic:
    def test_move_section_creating_forward_reference(self):
        editor = TemplateEditor(awv_template())
        editor.add_skip_logic_rule(1, 0, _rule("q_smoke"))
        editor.validate()

        editor.move_section(1, 0)
        with pytest.raises(TemplateValidationError) as excinfo:
            editor.validate()
        assert excinfo.value.location == (
            "sections[0].questions[0].skipLogicRules[0].condition.questionId"
        )

    def test_move_question_creating_forward_reference(self):
        editor = TemplateEditor(awv_template())
        editor.move_question(0, 1, 0)
        with pytest.raises(TemplateValidationError) as excinfo:
            editor.validate()
        assert excinfo.value.location == (
            "sections[0].questions[0].skipLogicRules[0].condition.questionId"
        )

    @pytest.mark.parametrize(
        "target_type, target_id",
        [("question", "no-such-question"), ("section", "no-such-section"), ("section", None)],
    )
    def test_unknown_target(self, target_type, target_id):
        from helpers.builders import awv_template_wire

        wire = awv_template_wire()
        wire["sections"][1]["questions"][1]["skipLogicRules"] = [
            _rule("q_smoke", target_id, target_type).to_wire()
        ]
        with pytest.raises(TemplateValidationError) as excinfo:
            TemplateEditor(Template.model_validate(wire)).validate()
        assert excinfo.value.location == (
            "sections[1].questions[1].skipLogicRules[0].targetId"
        )

    def test_deleted_source_still_publishable(self):
        editor = TemplateEditor(awv_template())
        editor.remove_question(0, 0)
        snapshot = editor.validate()
        rules = snapshot.sections[0].questions[0].skip_logic_rules
        assert rules[0].condition.question_id == "q_smoke", (
            "Rules on a deleted source stay and evaluate false"
        )


class TestChangeListener:
    def test_listener_receives_independent_snapshots(self):
        snapshots = []
        editor = TemplateEditor(on_change=snapshots.append)
        editor.update_details(name="Draft")
        editor.add_section()
        assert len(snapshots) == 2
        assert snapshots[0].sections == [], "Earlier snapshot must not see later edits"
        assert snapshots[1].section_count == 1

    def test_input_template_not_mutated(self):
        original = awv_template()
        editor = TemplateEditor(original)
        editor.remove_section(0)
        assert len(original.sections) == 2
