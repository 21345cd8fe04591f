"""Quiz session state machine.

A session walks one topic's questions in order. Each question is answered
with :meth:`QuizSession.submit_answer`, which grades it and exposes feedback,
and is then left with :meth:`QuizSession.advance`. The two calls must
alternate::

    AwaitingAnswer(i) --submit_answer--> ShowingFeedback(i, result)
    ShowingFeedback(i, result) --advance--> AwaitingAnswer(i + 1)
                                        \\-> Finished(score, total)

A topic without questions starts out ``Finished(0, 0)``. Sessions are not
thread-safe; front ends serialize user actions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .errors import (
    AlreadyAnswered,
    InvalidChoice,
    NothingToGrade,
    SessionFinished,
)
from .models import Question, Topic

__all__ = [
    "AnswerResult",
    "AwaitingAnswer",
    "InProgress",
    "ShowingFeedback",
    "Finished",
    "SessionState",
    "QuizSession",
    "score_message",
    "score_line",
]


@dataclass(frozen=True)
class AnswerResult:
    """Grading feedback for one submitted answer."""

    is_correct: bool
    correct_answer_text: str
    selected_answer_text: str


@dataclass(frozen=True)
class AwaitingAnswer:
    index: int
    question: Question


@dataclass(frozen=True)
class ShowingFeedback:
    index: int
    question: Question
    result: AnswerResult


@dataclass(frozen=True)
class Finished:
    score: int
    total: int

    @property
    def message(self) -> str:
        return score_message(self.score, self.total)


# ``advance`` reports an in-progress session as the next AwaitingAnswer state.
InProgress = AwaitingAnswer

SessionState = Union[AwaitingAnswer, ShowingFeedback, Finished]


class QuizSession:
    """Stateful progression of one user through one topic."""

    def __init__(self, topic: Topic) -> None:
        self.topic = topic
        self.current_index = 0
        self.recorded_answers: list[Optional[str]] = []
        self.score = 0
        self._feedback: Optional[AnswerResult] = None

    @property
    def total_questions(self) -> int:
        return len(self.topic.questions)

    @property
    def is_finished(self) -> bool:
        return self.current_index >= self.total_questions

    @property
    def state(self) -> SessionState:
        if self.is_finished:
            return Finished(self.score, self.total_questions)
        question = self.topic.questions[self.current_index]
        if self._feedback is not None:
            return ShowingFeedback(
                self.current_index, question, self._feedback
            )
        return AwaitingAnswer(self.current_index, question)

    def current_question(self) -> Optional[Question]:
        if self.is_finished:
            return None
        return self.topic.questions[self.current_index]

    def submit_answer(self, choice_index: int) -> AnswerResult:
        """Record and grade ``choice_index`` (0-based) for the current question.

        Does not move on; call :meth:`advance` once the feedback was shown.
        """

        if self.is_finished:
            raise SessionFinished()
        if self._feedback is not None:
            raise AlreadyAnswered()
        question = self.topic.questions[self.current_index]
        if not 0 <= choice_index < len(question.answers):
            raise InvalidChoice(choice_index, len(question.answers))

        selected = question.answers[choice_index]
        correct = question.correct_answer
        result = AnswerResult(
            is_correct=selected == correct,
            correct_answer_text=correct,
            selected_answer_text=selected,
        )
        self.recorded_answers.append(selected)
        if result.is_correct:
            self.score += 1
        self._feedback = result
        return result

    def advance(self) -> Union[AwaitingAnswer, Finished]:
        if self.is_finished:
            raise SessionFinished()
        if self._feedback is None:
            raise NothingToGrade()
        self._feedback = None
        self.current_index += 1
        if self.is_finished:
            return Finished(self.score, self.total_questions)
        return AwaitingAnswer(
            self.current_index, self.topic.questions[self.current_index]
        )


def score_message(score: int, total: int) -> str:
    """Map a final score to the summary headline."""

    percentage = 1.0 if total == 0 else score / total
    if percentage >= 1.0:
        return "Perfect!"
    if percentage >= 0.9:
        return "Almost perfect!"
    if percentage >= 0.7:
        return "Great job!"
    if percentage >= 0.5:
        return "Not bad!"
    return "Keep practicing!"


def score_line(score: int, total: int) -> str:
    return f"Your Score: {score} of {total} correct"
