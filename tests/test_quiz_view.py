from __future__ import annotations

from types import SimpleNamespace

from iquiz.quiz import view as qv
from iquiz.quiz.errors import NetworkUnavailable
from iquiz.quiz.repository import LoadResult
from iquiz.quiz.session import AnswerResult, AwaitingAnswer, Finished, ShowingFeedback


class FakeRepository:
    default_url = "https://saved.example.com/q.json"

    def __init__(self) -> None:
        self.requested: list[str] = []

    def load_async(self, url, callback=None):
        self.requested.append(url)


def _press(app: qv.QuizApp, button_id: str) -> None:
    app.on_button_pressed(SimpleNamespace(button=SimpleNamespace(id=button_id)))


def test_initial_state_lists_topics(sample_topics):
    app = qv.QuizApp(sample_topics)

    assert app.topics == list(sample_topics)
    assert app.session is None
    assert isinstance(app._stage_view(), qv.TopicListView)


def test_select_topic_bounds(sample_topics):
    app = qv.QuizApp(sample_topics)

    assert app.select_topic(5) is False
    assert app.select_topic(-1) is False
    assert app.select_topic(1) is True
    assert app.session is not None
    assert app.session.topic is sample_topics[1]
    assert isinstance(app.session.state, AwaitingAnswer)


def test_answer_feedback_and_finish(sample_topics):
    app = qv.QuizApp(sample_topics)
    app.select_topic(0)

    assert app.choose_answer(9) is None
    result = app.choose_answer(0)
    assert result is not None and result.is_correct
    assert app.choose_answer(1) is None
    assert isinstance(app.session.state, ShowingFeedback)
    assert isinstance(app._stage_view(), qv.FeedbackView)

    assert app.next_question() is True
    assert app.next_question() is False
    assert app.session.state == Finished(1, 1)
    assert isinstance(app._stage_view(), qv.FinishedView)

    app.back_to_topics()
    assert app.session is None


def test_helpers_without_session(sample_topics):
    app = qv.QuizApp(sample_topics)

    assert app.choose_answer(0) is None
    assert app.next_question() is False


def test_button_dispatch(sample_topics):
    app = qv.QuizApp(sample_topics)

    _press(app, "topic-1")
    _press(app, "answer-1")
    assert app.session.score == 0
    _press(app, "next")
    assert app.session.current_index == 1
    _press(app, "answer-2")
    assert app.session.score == 1
    _press(app, "back")
    assert app.session is None


def test_apply_load_result(sample_topics):
    app = qv.QuizApp()
    app.select_topic(0)

    app.apply_load_result(
        LoadResult(url="u", error=NetworkUnavailable())
    )
    assert app.status_message == "Network is not available"
    assert app.topics == []

    app.apply_load_result(LoadResult(url="u", topics=sample_topics))
    assert app.status_message == ""
    assert app.topics == list(sample_topics)
    assert app.session is None


def test_repository_supplies_url_and_loads():
    repo = FakeRepository()
    app = qv.QuizApp(repository=repo)

    assert app._url == repo.default_url
    app.load_topics("https://other.example.com/q.json")

    assert repo.requested == ["https://other.example.com/q.json"]


def test_explicit_url_wins_over_repository():
    app = qv.QuizApp(repository=FakeRepository(), url="https://cli/q.json")

    assert app._url == "https://cli/q.json"


def test_load_topics_without_repository_is_noop():
    app = qv.QuizApp()

    app.load_topics("https://x.example.com")

    assert app.topics == []


def test_widget_text_helpers(sample_topics):
    topic = sample_topics[1]
    question = topic.questions[0]

    assert qv.TopicListView.label_for(topic) == (
        "Mathematics\nDid you pass the third grade?"
    )
    assert qv.QuestionView(question, index=1, total=2).progress_text() == "1/2"

    right = qv.FeedbackView(question, AnswerResult(True, "4", "4"))
    wrong = qv.FeedbackView(question, AnswerResult(False, "4", "22"))
    assert right.correct_text() == "Correct Answer: 4"
    assert right.bonus_text() == "+1"
    assert wrong.correct_text() == "Correct Answer: 4"
    assert wrong.bonus_text().strip() == ""


def test_question_view_from_stage(sample_topics):
    app = qv.QuizApp(sample_topics)
    app.select_topic(1)

    stage = app._stage_view()

    assert isinstance(stage, qv.QuestionView)
    assert stage.progress_text() == "1/2"
