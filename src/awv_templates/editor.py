"""TemplateEditor — explicit editing API over an in-memory Template tree.

The editor owns one mutable ``Template`` and is the only thing that should
mutate it.  Every mutating call keeps ``order`` fields dense (0..n-1,
matching list position) for the list it touched, then hands a deep
snapshot to the optional change listener (the auto-saver).

Usage::

    editor = TemplateEditor(on_change=saver.schedule)
    s = editor.add_section()                  # "Section 1" + one question
    editor.change_question_type(s, 0, QuestionType.SCALE)
    editor.validate()                         # raises TemplateValidationError
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, TypeVar

from awv_templates.constants import (
    DEFAULT_RECOMMENDATION_CATEGORY,
    NEW_QUESTION_OPTION_COUNT,
    OPTION_QUESTION_TYPES,
)
from awv_templates.models.config import (
    Option,
    OptionsConfig,
    QuestionType,
    Recommendation,
    option_value,
)
from awv_templates.models.defaults import default_config, default_options
from awv_templates.models.template import Question, Section, SkipLogicRule, Template

logger = logging.getLogger(__name__)

T = TypeVar("T")

ChangeListener = Callable[[Template], None]


class TemplateValidationError(ValueError):
    """Raised by :meth:`TemplateEditor.validate` for the first invalid field.

    ``location`` is a dotted path such as
    ``sections[1].questions[0].options[2].text``.
    """

    def __init__(self, location: str, message: str) -> None:
        super().__init__(f"{location}: {message}")
        self.location = location
        self.message = message


def reorder(items: List[T], from_index: int, to_index: int) -> List[T]:
    """Return a new list with the element at ``from_index`` moved to ``to_index``.

    Pure: the input list is not modified.  Raises ``IndexError`` for an
    out-of-range index.
    """
    size = len(items)
    for index in (from_index, to_index):
        if not 0 <= index < size:
            raise IndexError(f"Index {index} out of range for list of {size}")
    result = list(items)
    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return result


def _renumber(items: list) -> None:
    for position, item in enumerate(items):
        item.order = position


def new_question(option_count: int = NEW_QUESTION_OPTION_COUNT) -> Question:
    """A blank RADIO question pre-filled with ``option_count`` options."""
    return Question(
        text="",
        type=QuestionType.RADIO,
        config=OptionsConfig(options=default_options(option_count)),
    )


def _rule_problem(
    template: Template, owner: Question, rule: SkipLogicRule
) -> Optional[tuple[str, str]]:
    """First broken reference of ``rule`` as ``(field, message)``, or ``None``.

    A source question missing from the template is not reported here: such
    rules are left in place when a question is deleted and evaluate false.
    """
    source_position = template.question_position(rule.condition.question_id)
    owner_position = template.question_position(owner.id)
    if source_position is not None and source_position >= owner_position:
        return (
            "condition.questionId",
            "Skip logic may only depend on questions that come before "
            f"question {owner.id}",
        )

    if rule.target_type == "section":
        if rule.target_id is None or template.find_section(rule.target_id) is None:
            return "targetId", f"Skip logic target section {rule.target_id} not found"
    elif rule.target_id is not None and template.find_question(rule.target_id) is None:
        return "targetId", f"Skip logic target question {rule.target_id} not found"
    return None


class TemplateEditor:
    """Mutable editing state for a single template."""

    def __init__(
        self,
        template: Optional[Template] = None,
        on_change: Optional[ChangeListener] = None,
    ) -> None:
        self._template = template.model_copy(deep=True) if template else Template()
        self._on_change = on_change
        for section in self._template.sections:
            _renumber(section.questions)
            for question in section.questions:
                _renumber(question.options)
        _renumber(self._template.sections)

    @property
    def template(self) -> Template:
        """The live tree.  Mutate it only through editor methods."""
        return self._template

    def snapshot(self) -> Template:
        """Deep copy of the current tree with refreshed counts."""
        return self._template.model_copy(deep=True).refresh_counts()

    # ------------------------------------------------------------------
    # Template details
    # ------------------------------------------------------------------

    def update_details(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        if name is not None:
            self._template.name = name
        if description is not None:
            self._template.description = description
        if is_active is not None:
            self._template.is_active = is_active
        self._changed()

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def add_section(self) -> int:
        """Append ``Section {n}`` and return its index.

        The first section of an empty template starts with one question.
        """
        sections = self._template.sections
        index = len(sections)
        section = Section(title=f"Section {index + 1}", order=index)
        if index == 0:
            section.questions.append(new_question())
        sections.append(section)
        self._changed()
        return index

    def remove_section(self, index: int) -> None:
        sections = self._template.sections
        self._check_index(sections, index, "section")
        del sections[index]
        _renumber(sections)
        self._changed()

    def move_section(self, from_index: int, to_index: int) -> None:
        self._template.sections = reorder(self._template.sections, from_index, to_index)
        _renumber(self._template.sections)
        self._changed()

    def update_section(
        self,
        index: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        section = self._section(index)
        if title is not None:
            section.title = title
        if description is not None:
            section.description = description
        self._changed()

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    def add_question(self, section_index: int) -> int:
        """Append a RADIO question with three options; return its index."""
        questions = self._section(section_index).questions
        question = new_question()
        question.order = len(questions)
        questions.append(question)
        self._changed()
        return question.order

    def remove_question(self, section_index: int, question_index: int) -> None:
        questions = self._section(section_index).questions
        self._check_index(questions, question_index, "question")
        del questions[question_index]
        _renumber(questions)
        self._changed()

    def move_question(self, section_index: int, from_index: int, to_index: int) -> None:
        section = self._section(section_index)
        section.questions = reorder(section.questions, from_index, to_index)
        _renumber(section.questions)
        self._changed()

    def update_question(
        self,
        section_index: int,
        question_index: int,
        text: Optional[str] = None,
        required: Optional[bool] = None,
    ) -> None:
        question = self._question(section_index, question_index)
        if text is not None:
            question.text = text
        if required is not None:
            question.required = required
        self._changed()

    def change_question_type(
        self,
        section_index: int,
        question_index: int,
        new_type: QuestionType | str,
    ) -> None:
        """Switch type, dropping every configuration and installing the new default."""
        question = self._question(section_index, question_index)
        new_type = QuestionType(new_type)
        question.type = new_type
        question.config = default_config(new_type)
        logger.debug("Question %s changed type to %s", question.id, new_type.value)
        self._changed()

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def add_option(self, section_index: int, question_index: int, text: str = "") -> int:
        """Append an option; a blank option gets the value ``option_{n}``."""
        options = self._options(section_index, question_index)
        position = len(options)
        value = option_value(text) if text.strip() else f"option_{position + 1}"
        options.append(Option(text=text, value=value, order=position))
        self._changed()
        return position

    def remove_option(
        self, section_index: int, question_index: int, option_index: int
    ) -> None:
        options = self._options(section_index, question_index)
        self._check_index(options, option_index, "option")
        del options[option_index]
        _renumber(options)
        self._changed()

    def move_option(
        self,
        section_index: int,
        question_index: int,
        from_index: int,
        to_index: int,
    ) -> None:
        options = self._options(section_index, question_index)
        config = self._question(section_index, question_index).config
        config.options = reorder(options, from_index, to_index)
        _renumber(config.options)
        self._changed()

    def set_option_text(
        self,
        section_index: int,
        question_index: int,
        option_index: int,
        text: str,
    ) -> None:
        """Set an option's text and re-derive its value token."""
        options = self._options(section_index, question_index)
        self._check_index(options, option_index, "option")
        option = options[option_index]
        option.text = text
        option.value = option_value(text)
        self._changed()

    # ------------------------------------------------------------------
    # Skip logic
    # ------------------------------------------------------------------

    def add_skip_logic_rule(
        self, section_index: int, question_index: int, rule: SkipLogicRule
    ) -> None:
        """Attach ``rule`` to a question.

        Raises ``ValueError`` if the source question does not come strictly
        before the owning question, or if the target does not exist.
        """
        owner = self._question(section_index, question_index)
        if self._template.question_position(rule.condition.question_id) is None:
            raise ValueError(
                f"Skip logic source question {rule.condition.question_id} not found"
            )
        problem = _rule_problem(self._template, owner, rule)
        if problem is not None:
            raise ValueError(problem[1])

        owner.skip_logic_rules.append(rule.model_copy(deep=True))
        self._changed()

    def remove_skip_logic_rule(
        self, section_index: int, question_index: int, rule_index: int
    ) -> None:
        rules = self._question(section_index, question_index).skip_logic_rules
        self._check_index(rules, rule_index, "skip logic rule")
        del rules[rule_index]
        self._changed()

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    def add_recommendation(
        self,
        section_index: int,
        question_index: int,
        text: str,
        category: str = DEFAULT_RECOMMENDATION_CATEGORY,
        option_index: Optional[int] = None,
    ) -> Recommendation:
        """Add a recommendation to an option, or to the question defaults.

        The first recommendation in a list is marked ``is_default``.
        """
        question = self._question(section_index, question_index)
        if option_index is None:
            target = question.default_recommendations
        else:
            options = self._options(section_index, question_index)
            self._check_index(options, option_index, "option")
            target = options[option_index].recommendations

        recommendation = Recommendation(
            text=text, category=category, is_default=len(target) == 0
        )
        target.append(recommendation)
        self._changed()
        return recommendation

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> Template:
        """Check the tree is publishable; return a snapshot if it is.

        Raises ``TemplateValidationError`` for the first offending field,
        including skip logic rules whose source no longer comes before their
        question (after a move) or whose target is missing.  Never mutates
        the tree.
        """
        template = self._template
        if not template.name.strip():
            raise TemplateValidationError("name", "Template name is required")
        if not template.sections:
            raise TemplateValidationError("sections", "At least one section is required")

        for s, section in enumerate(template.sections):
            where = f"sections[{s}]"
            if not section.title.strip():
                raise TemplateValidationError(f"{where}.title", "Section title is required")
            if not section.questions:
                raise TemplateValidationError(
                    f"{where}.questions", "Each section needs at least one question"
                )
            for q, question in enumerate(section.questions):
                q_where = f"{where}.questions[{q}]"
                if not question.text.strip():
                    raise TemplateValidationError(
                        f"{q_where}.text", "Question text is required"
                    )
                if question.type.value in OPTION_QUESTION_TYPES:
                    self._validate_options(question, q_where)
                for k, rule in enumerate(question.skip_logic_rules):
                    problem = _rule_problem(template, question, rule)
                    if problem is not None:
                        field, message = problem
                        raise TemplateValidationError(
                            f"{q_where}.skipLogicRules[{k}].{field}", message
                        )
        return self.snapshot()

    @staticmethod
    def _validate_options(question: Question, where: str) -> None:
        if not question.options:
            raise TemplateValidationError(
                f"{where}.options", "Choice questions need at least one option"
            )
        for o, option in enumerate(question.options):
            if not option.text.strip():
                raise TemplateValidationError(
                    f"{where}.options[{o}].text", "Option text is required"
                )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self.snapshot())

    @staticmethod
    def _check_index(items: list, index: int, what: str) -> None:
        if not 0 <= index < len(items):
            raise IndexError(f"{what.capitalize()} index {index} out of range")

    def _section(self, index: int) -> Section:
        self._check_index(self._template.sections, index, "section")
        return self._template.sections[index]

    def _question(self, section_index: int, question_index: int) -> Question:
        questions = self._section(section_index).questions
        self._check_index(questions, question_index, "question")
        return questions[question_index]

    def _options(self, section_index: int, question_index: int) -> list[Option]:
        question = self._question(section_index, question_index)
        if not isinstance(question.config, OptionsConfig):
            raise ValueError(f"Question type {question.type.value} has no options")
        return question.config.options
