"""
Comprehension question model.

A question is a tagged union discriminated by ``type``. Each variant owns the
shape of its options and answer, so an inconsistent question cannot be
constructed:

- multiple_choice: ordered options, correct_answer must be one of them
- true_false: correct_answer is "true" or "false"
- fill_blank / short_answer: free-text correct_answer
- matching: options and correct_answer are parallel lists (pairs)
- ordering: the options order is the correct order

Wire format is the camelCase JSON the authoring UI has always produced
(``question`` for the prompt, ``correctAnswer``, ``timeLimit``).
"""

from __future__ import annotations

from typing import Annotated, Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel

QuestionType = Literal[
    "multiple_choice",
    "true_false",
    "fill_blank",
    "short_answer",
    "matching",
    "ordering",
]
Difficulty = Literal["easy", "medium", "hard"]

QUESTION_TYPES: tuple[str, ...] = (
    "multiple_choice",
    "true_false",
    "fill_blank",
    "short_answer",
    "matching",
    "ordering",
)


class _QuestionBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(default_factory=lambda: str(uuid4()))
    prompt: str = Field(alias="question")
    difficulty: Difficulty = "medium"
    points: int = Field(default=1, gt=0)
    explanation: str | None = None
    time_limit_seconds: int | None = Field(default=None, alias="timeLimit", gt=0)
    hints: list[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Legacy builders used Date.now() numbers as ids
        if isinstance(value, int):
            return str(value)
        return value


class MultipleChoiceQuestion(_QuestionBase):
    type: Literal["multiple_choice"] = "multiple_choice"
    options: list[str] = Field(default_factory=list)
    correct_answer: str

    @model_validator(mode="after")
    def _answer_is_an_option(self) -> MultipleChoiceQuestion:
        if not self.correct_answer.strip():
            raise ValueError("multiple_choice requires a non-empty correctAnswer")
        if self.options and self.correct_answer not in self.options:
            raise ValueError(
                f"correctAnswer '{self.correct_answer}' is not one of the options"
            )
        return self


class TrueFalseQuestion(_QuestionBase):
    type: Literal["true_false"] = "true_false"
    correct_answer: Literal["true", "false"]

    @field_validator("correct_answer", mode="before")
    @classmethod
    def _normalize_bool(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str):
            return value.strip().lower()
        return value


class FillBlankQuestion(_QuestionBase):
    type: Literal["fill_blank"] = "fill_blank"
    correct_answer: str


class ShortAnswerQuestion(_QuestionBase):
    type: Literal["short_answer"] = "short_answer"
    correct_answer: str


class MatchingQuestion(_QuestionBase):
    type: Literal["matching"] = "matching"
    options: list[str]
    correct_answer: list[str]

    @model_validator(mode="after")
    def _pairs_line_up(self) -> MatchingQuestion:
        if len(self.options) != len(self.correct_answer):
            raise ValueError(
                "matching requires one answer per option "
                f"({len(self.options)} options, {len(self.correct_answer)} answers)"
            )
        return self

    @property
    def pairs(self) -> list[tuple[str, str]]:
        return list(zip(self.options, self.correct_answer, strict=True))


class OrderingQuestion(_QuestionBase):
    type: Literal["ordering"] = "ordering"
    options: list[str]


Question = Annotated[
    MultipleChoiceQuestion
    | TrueFalseQuestion
    | FillBlankQuestion
    | ShortAnswerQuestion
    | MatchingQuestion
    | OrderingQuestion,
    Field(discriminator="type"),
]

_question_adapter: TypeAdapter[Question] = TypeAdapter(Question)
_question_list_adapter: TypeAdapter[list[Question]] = TypeAdapter(list[Question])


def parse_question(data: dict[str, Any]) -> Question:
    """Build the right variant from a wire dict. Raises pydantic.ValidationError."""
    return _question_adapter.validate_python(data)


def parse_questions(items: list[Any]) -> list[Question]:
    """Build a question list. Raises pydantic.ValidationError on any bad item."""
    return _question_list_adapter.validate_python(items)


def question_to_wire(question: Question) -> dict[str, Any]:
    return question.model_dump(mode="json", by_alias=True, exclude_none=True)


def questions_to_wire(questions: list[Question]) -> list[dict[str, Any]]:
    return [question_to_wire(q) for q in questions]
