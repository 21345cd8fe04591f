from __future__ import annotations

from typing import Iterable

import pytest
from rich.console import Console

from iquiz.quiz.console import (
    SessionCommand,
    parse_session_command,
    render_topics,
    run_console_quiz,
)
from iquiz.quiz.session import AwaitingAnswer, Finished


def _console() -> Console:
    return Console(record=True, width=120, color_system=None)


def _script(lines: Iterable[str]):
    return iter(list(lines)).__next__


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("q", SessionCommand("quit")),
        (" EXIT ", SessionCommand("quit")),
        ("", SessionCommand("next")),
        ("n", SessionCommand("next")),
        ("3", SessionCommand("pick", 3)),
        ("abc", None),
        ("-1", None),
        (None, None),
    ],
)
def test_parse_session_command(raw, expected):
    assert parse_session_command(raw) == expected


def test_full_quiz_run(sample_topics):
    console = _console()

    result = run_console_quiz(
        sample_topics, console, _script(["2", "1", "", "1", ""])
    )

    out = console.export_text()
    assert result.exit_action == "finished"
    assert result.topic is sample_topics[1]
    assert result.final_state == Finished(1, 2)
    assert "Mathematics" in out and "Science!" in out
    assert "Question 1 / 2" in out
    assert "Correct Answer: 4" in out
    assert "+1" in out
    assert "Correct Answer: 9" in out
    assert "Your answer: 6" in out
    assert "Not bad!" in out
    assert "Your Score: 1 of 2 correct" in out


def test_topic_number_skips_prompt(sample_topics):
    console = _console()

    result = run_console_quiz(
        sample_topics, console, _script(["1", ""]), topic_number=1
    )

    out = console.export_text()
    assert result.final_state == Finished(1, 1)
    assert "Pick a topic" not in out
    assert "Perfect!" in out


def test_unknown_topic_number_falls_back_to_prompt(sample_topics):
    console = _console()

    result = run_console_quiz(
        sample_topics, console, _script(["q"]), topic_number=5
    )

    out = console.export_text()
    assert "There is no topic 5." in out
    assert "Pick a topic [1-2]" in out
    assert result.exit_action == "quit"
    assert result.topic is None


def test_bad_input_is_reprompted(sample_topics):
    console = _console()

    result = run_console_quiz(
        sample_topics,
        console,
        _script(["zzz", "9", "1", "", "7", "1", "2", "?", ""]),
    )

    out = console.export_text()
    assert out.count("Unrecognized topic. Try again.") == 2
    assert "Pick an answer first." in out
    assert "'7' is not a valid answer for this question." in out
    assert "Press Enter to continue." in out
    assert "Unrecognized command. Try again." in out
    assert result.final_state == Finished(1, 1)


def test_quit_mid_session(sample_topics):
    console = _console()

    result = run_console_quiz(sample_topics, console, _script(["2", "q"]))

    assert result.exit_action == "quit"
    assert isinstance(result.final_state, AwaitingAnswer)
    assert "Leaving the quiz early." in console.export_text()


def test_end_of_input_interrupts(sample_topics):
    console = _console()

    def _eof() -> str:
        raise EOFError

    result = run_console_quiz(sample_topics, console, _eof)

    assert result.exit_action == "quit"
    assert "Session interrupted." in console.export_text()


def test_no_topics():
    console = _console()

    result = run_console_quiz((), console, _script([]))

    assert result.exit_action == "empty"
    assert "No topics available." in console.export_text()


def test_render_topics_lists_counts(sample_topics):
    console = _console()

    render_topics(console, sample_topics)

    out = console.export_text()
    assert "Did you pass the third grade?" in out
    assert "Questions" in out
