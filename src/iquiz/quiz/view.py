from __future__ import annotations

from typing import Optional, Sequence

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widget import Widget
from textual.widgets import Button, Input, Static

from .models import Question, Topic
from .repository import LoadResult, TopicRepository
from .session import (
    AnswerResult,
    AwaitingAnswer,
    Finished,
    QuizSession,
    ShowingFeedback,
    score_line,
)


class QuizApp(App):
    CSS_PATH = None
    CSS = """
#settings { height: auto; }
#url { width: 1fr; }
#status { color: $error; }
.correct { color: $success; }
.incorrect { color: $error; }
"""
    BINDINGS = [
        ("ctrl+n", "next", "Next"),
        ("escape", "back", "Topics"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        topics: Sequence[Topic] = (),
        *,
        repository: Optional[TopicRepository] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__()
        self._topics = list(topics)
        self._repository = repository
        self._url = url or (repository.default_url if repository else "")
        self._session: Optional[QuizSession] = None
        self.status_message = ""

    def compose(self) -> ComposeResult:
        with Horizontal(id="settings"):
            yield Input(self._url, placeholder="Enter URL", id="url")
            yield Button("Check Now", id="check")
        yield Static(self.status_message, id="status")
        with Container(id="stage"):
            yield self._stage_view()

    def on_mount(self) -> None:
        if self._repository is not None and not self._topics:
            self.load_topics(self._url)

    # Navigation helpers; they work whether or not the app is running
    @property
    def topics(self) -> list[Topic]:
        return list(self._topics)

    @property
    def session(self) -> Optional[QuizSession]:
        return self._session

    def load_topics(self, url: str) -> None:
        if self._repository is None:
            return
        self._url = url
        self._repository.load_async(
            url,
            lambda result: self.call_from_thread(
                self.apply_load_result, result
            ),
        )

    def apply_load_result(self, result: LoadResult) -> None:
        if result.ok:
            self._topics = list(result.topics)
            self._session = None
            self.status_message = ""
        else:
            self.status_message = result.message or ""
        self._refresh_stage()

    def select_topic(self, index: int) -> bool:
        if not 0 <= index < len(self._topics):
            return False
        self._session = QuizSession(self._topics[index])
        self._refresh_stage()
        return True

    def choose_answer(self, index: int) -> Optional[AnswerResult]:
        session = self._session
        if session is None or not isinstance(session.state, AwaitingAnswer):
            return None
        question = session.current_question()
        if question is None or not 0 <= index < len(question.answers):
            return None
        result = session.submit_answer(index)
        self._refresh_stage()
        return result

    def next_question(self) -> bool:
        session = self._session
        if session is None or not isinstance(session.state, ShowingFeedback):
            return False
        session.advance()
        self._refresh_stage()
        return True

    def back_to_topics(self) -> None:
        self._session = None
        self._refresh_stage()

    def action_next(self) -> None:
        self.next_question()

    def action_back(self) -> None:
        self.back_to_topics()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = getattr(event.button, "id", "") or ""
        if bid.startswith("topic-"):
            self.select_topic(int(bid[len("topic-"):]))
        elif bid.startswith("answer-"):
            self.choose_answer(int(bid[len("answer-"):]))
        elif bid == "next":
            self.next_question()
        elif bid == "back":
            self.back_to_topics()
        elif bid == "check":
            self.load_topics(self.query_one("#url", Input).value)

    def _stage_view(self) -> Widget:
        session = self._session
        if session is None:
            return TopicListView(self._topics)
        state = session.state
        if isinstance(state, AwaitingAnswer):
            return QuestionView(
                state.question,
                index=state.index + 1,
                total=session.total_questions,
            )
        if isinstance(state, ShowingFeedback):
            return FeedbackView(state.question, state.result)
        return FinishedView(state)

    def _refresh_stage(self) -> None:
        if not self.is_running:
            return
        try:
            stage = self.query_one("#stage", Container)
            status = self.query_one("#status", Static)
        except NoMatches:
            return
        status.update(self.status_message)
        stage.remove_children()
        stage.mount(self._stage_view())


class TopicListView(Widget):
    """Buttons for every loaded topic."""

    def __init__(self, topics: Sequence[Topic]) -> None:
        super().__init__()
        self.topics = list(topics)

    def compose(self) -> ComposeResult:
        if not self.topics:
            yield Static("No topics loaded.", id="empty")
            return
        with Vertical(id="topics"):
            for index, topic in enumerate(self.topics):
                yield Button(self.label_for(topic), id=f"topic-{index}")

    @staticmethod
    def label_for(topic: Topic) -> str:
        return f"{topic.title}\n{topic.description}"


class QuestionView(Widget):
    """A single question with one button per answer."""

    def __init__(self, question: Question, index: int, total: int) -> None:
        super().__init__()
        self.question = question
        self.index = index
        self.total = total

    def compose(self) -> ComposeResult:
        yield Static(self.question.text, id="text")
        with Vertical(id="answers"):
            for position, answer in enumerate(self.question.answers):
                yield Button(answer, id=f"answer-{position}")
        yield Static(self.progress_text(), id="progress")

    def progress_text(self) -> str:
        return f"{self.index}/{self.total}"


class FeedbackView(Widget):
    """Correct answer after a submission, plus a Next button."""

    def __init__(self, question: Question, result: AnswerResult) -> None:
        super().__init__()
        self.question = question
        self.result = result

    def compose(self) -> ComposeResult:
        yield Static(self.question.text, id="text")
        verdict = Static(self.correct_text(), id="correct")
        verdict.add_class(
            "correct" if self.result.is_correct else "incorrect"
        )
        yield verdict
        yield Static(self.bonus_text(), id="bonus")
        yield Button("Next", id="next")

    def correct_text(self) -> str:
        return f"Correct Answer: {self.result.correct_answer_text}"

    def bonus_text(self) -> str:
        return "+1" if self.result.is_correct else " "


class FinishedView(Widget):
    """Final score headline and summary line."""

    def __init__(self, state: Finished) -> None:
        super().__init__()
        self.state = state

    def compose(self) -> ComposeResult:
        yield Static(self.state.message, id="headline")
        summary = score_line(self.state.score, self.state.total)
        yield Static(summary, id="score")
        yield Button("Back to topics", id="back")
