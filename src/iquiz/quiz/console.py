"""Rich-powered console front end for quiz sessions.

The loop renders the topic list, then drives a :class:`QuizSession` through
question, feedback and summary screens. Input comes from an injected
provider so the whole flow can be scripted in tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Topic
from .session import (
    AwaitingAnswer,
    Finished,
    QuizSession,
    SessionState,
    ShowingFeedback,
    score_line,
)

InputProvider = Callable[[], str]
ExitAction = Literal["finished", "quit", "empty"]


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: Literal["pick", "next", "quit"]
    number: Optional[int] = None


@dataclass(frozen=True)
class ConsoleQuizResult:
    """Return value from ``run_console_quiz``."""

    topic: Optional[Topic]
    final_state: Optional[SessionState]
    exit_action: ExitAction


class _Interrupted(Exception):
    pass


def parse_session_command(raw: Optional[str]) -> Optional[SessionCommand]:
    """Parse raw user input into a structured command.

    Numbers are returned as typed (1-based). An empty line means "next".
    """

    if raw is None:
        return None
    text = raw.strip().lower()
    if text in {"q", "quit", "exit"}:
        return SessionCommand("quit")
    if text in {"", "n", "next"}:
        return SessionCommand("next")
    if text.isdigit():
        return SessionCommand("pick", int(text))
    return None


def run_console_quiz(
    topics: Sequence[Topic],
    console: Console,
    input_provider: InputProvider,
    *,
    topic_number: Optional[int] = None,
) -> ConsoleQuizResult:
    """Let the user pick a topic and work through its questions."""

    if not topics:
        console.print(
            Panel(
                "No topics available.",
                title="iQuiz",
                border_style="yellow",
            )
        )
        return ConsoleQuizResult(None, None, "empty")

    try:
        topic = _choose_topic(topics, console, input_provider, topic_number)
        if topic is None:
            return ConsoleQuizResult(None, None, "quit")
        session = QuizSession(topic)
        state = _drive_session(session, console, input_provider)
    except _Interrupted:
        console.print("\n[bold yellow]Session interrupted.[/]")
        return ConsoleQuizResult(None, None, "quit")

    if isinstance(state, Finished):
        render_summary(console, state)
        return ConsoleQuizResult(topic, state, "finished")
    console.print("\n[bold yellow]Leaving the quiz early.[/]")
    return ConsoleQuizResult(topic, state, "quit")


def render_topics(console: Console, topics: Sequence[Topic]) -> None:
    table = Table(title="iQuiz", box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Topic", style="bold")
    table.add_column("Description")
    table.add_column("Questions", justify="right")
    for number, topic in enumerate(topics, start=1):
        table.add_row(
            str(number),
            topic.title,
            Text(topic.description, style="dim"),
            str(topic.question_count),
        )
    console.print(table)


def render_summary(console: Console, state: Finished) -> None:
    console.print()
    console.print(
        Panel(
            Text(score_line(state.score, state.total), justify="center"),
            title=state.message,
            border_style="magenta",
        )
    )


def _choose_topic(
    topics: Sequence[Topic],
    console: Console,
    input_provider: InputProvider,
    topic_number: Optional[int],
) -> Optional[Topic]:
    if topic_number is not None:
        if 1 <= topic_number <= len(topics):
            return topics[topic_number - 1]
        console.print(f"[red]There is no topic {topic_number}.[/red]")

    render_topics(console, topics)
    while True:
        console.print(
            Text(f"Pick a topic [1-{len(topics)}] or q to quit", style="dim")
        )
        command = parse_session_command(_read(input_provider))
        if command is not None and command.type == "quit":
            return None
        if (
            command is not None
            and command.type == "pick"
            and command.number is not None
            and 1 <= command.number <= len(topics)
        ):
            return topics[command.number - 1]
        console.print("[red]Unrecognized topic. Try again.[/]")


def _drive_session(
    session: QuizSession,
    console: Console,
    input_provider: InputProvider,
) -> SessionState:
    state = session.state
    while not isinstance(state, Finished):
        if isinstance(state, AwaitingAnswer):
            _render_question(console, session, state)
        else:
            _render_feedback(console, state)
        command = parse_session_command(_read(input_provider))
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            return state
        state = _apply_command(command, session, state, console)
    return state


def _apply_command(
    command: SessionCommand,
    session: QuizSession,
    state: SessionState,
    console: Console,
) -> SessionState:
    if isinstance(state, AwaitingAnswer):
        if command.type != "pick" or command.number is None:
            console.print("[red]Pick an answer first.[/]")
            return state
        answers = state.question.answers
        if not 1 <= command.number <= len(answers):
            console.print(
                "[red]'%d' is not a valid answer for this question.[/red]"
                % command.number
            )
            return state
        session.submit_answer(command.number - 1)
        return session.state
    if command.type != "next":
        console.print("[red]Press Enter to continue.[/]")
        return state
    return session.advance()


def _render_question(
    console: Console, session: QuizSession, state: AwaitingAnswer
) -> None:
    header = Text.assemble(
        (f"Question {state.index + 1}", "bold cyan"),
        (f" / {session.total_questions}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(state.question.text, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Answer")
    for number, answer in enumerate(state.question.answers, start=1):
        table.add_row(str(number), answer)
    console.print(table)
    console.print(
        Text(
            f"Score {session.score} | choose 1-{len(state.question.answers)}"
            ", q to quit",
            style="dim",
        )
    )


def _render_feedback(console: Console, state: ShowingFeedback) -> None:
    result = state.result
    style = "bold green" if result.is_correct else "bold red"
    console.print()
    console.print(Text(state.question.text, style="bold"))
    console.print(
        Text(f"Correct Answer: {result.correct_answer_text}", style=style)
    )
    if result.is_correct:
        console.print(Text("+1", style="green"))
    else:
        console.print(
            Text(f"Your answer: {result.selected_answer_text}", style="dim")
        )
    console.print(Text("Press Enter for the next question", style="dim"))


def _read(input_provider: InputProvider) -> str:
    try:
        return input_provider()
    except (EOFError, KeyboardInterrupt, StopIteration) as exc:
        raise _Interrupted() from exc
