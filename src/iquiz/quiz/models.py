"""Topic and question records plus the wire-format decoder.

The topic feed is a JSON array of ``{"title", "desc", "questions"}`` objects.
Each question carries its answer options in presentation order and the
1-based index of the correct option as a decimal string (``"answer": "2"``).
Decoding validates that index eagerly so a malformed feed is rejected as a
whole instead of failing later in the middle of a session.
"""

from __future__ import annotations

import json
import re
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .errors import DecodeError

__all__ = [
    "Question",
    "Topic",
    "parse_topics",
    "topics_from_payload",
]

_INDEX_RE = re.compile(r"\d+")


@dataclass(frozen=True)
class Question:
    """A single quiz item."""

    text: str
    answers: tuple[str, ...]
    correct_answer_index: int

    def __post_init__(self) -> None:
        if not 1 <= self.correct_answer_index <= len(self.answers):
            raise ValueError(
                "correct answer index {0} is outside 1..{1}".format(
                    self.correct_answer_index, len(self.answers)
                )
            )

    @property
    def correct_answer(self) -> str:
        return self.answers[self.correct_answer_index - 1]


@dataclass(frozen=True)
class Topic:
    """A named group of questions. Immutable once decoded."""

    title: str
    description: str
    questions: tuple[Question, ...]
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def question_count(self) -> int:
        return len(self.questions)


def parse_topics(raw: str | bytes) -> tuple[Topic, ...]:
    """Decode a JSON document into topics.

    Raises :class:`DecodeError` for invalid JSON as well as for structurally
    valid JSON that does not describe a list of topics.
    """

    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError and UnicodeDecodeError are ValueErrors; very deep
        # nesting exhausts the decoder stack instead.
        raise DecodeError(f"invalid JSON: {exc}") from exc
    return topics_from_payload(payload)


def topics_from_payload(payload: Any) -> tuple[Topic, ...]:
    """Build topics from an already-parsed JSON value."""

    if not isinstance(payload, list):
        raise DecodeError(
            f"expected a list of topics, found {_type_name(payload)}"
        )
    return tuple(
        _decode_topic(item, position)
        for position, item in enumerate(payload)
    )


def _decode_topic(item: Any, position: int) -> Topic:
    where = f"topic[{position}]"
    data = _require_mapping(item, where)
    title = _require_str(data, "title", where)
    description = _require_str(data, "desc", where)
    raw_questions = _require_list(data, "questions", where)
    questions = tuple(
        _decode_question(entry, f"{where}.questions[{index}]")
        for index, entry in enumerate(raw_questions)
    )
    return Topic(title=title, description=description, questions=questions)


def _decode_question(item: Any, where: str) -> Question:
    data = _require_mapping(item, where)
    text = _require_str(data, "text", where)
    raw_answers = _require_list(data, "answers", where)
    answers: list[str] = []
    for index, answer in enumerate(raw_answers):
        if not isinstance(answer, str):
            raise DecodeError(
                f"{where}.answers[{index}] must be a string, found "
                f"{_type_name(answer)}"
            )
        answers.append(answer)
    raw_index = _require_str(data, "answer", where)
    if not _INDEX_RE.fullmatch(raw_index):
        raise DecodeError(
            f"{where}.answer must be a decimal number, found {raw_index!r}"
        )
    try:
        return Question(
            text=text,
            answers=tuple(answers),
            correct_answer_index=int(raw_index),
        )
    except ValueError as exc:
        raise DecodeError(f"{where}: {exc}") from exc


def _require_mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DecodeError(
            f"{where} must be an object, found {_type_name(value)}"
        )
    return value


def _require_str(data: Mapping[str, Any], key: str, where: str) -> str:
    if key not in data:
        raise DecodeError(f"{where} is missing '{key}'")
    value = data[key]
    if not isinstance(value, str):
        raise DecodeError(
            f"{where}.{key} must be a string, found {_type_name(value)}"
        )
    return value


def _require_list(
    data: Mapping[str, Any], key: str, where: str
) -> Sequence[Any]:
    if key not in data:
        raise DecodeError(f"{where} is missing '{key}'")
    value = data[key]
    if not isinstance(value, list):
        raise DecodeError(
            f"{where}.{key} must be a list, found {_type_name(value)}"
        )
    return value


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    return type(value).__name__
