from ._main import build_arg_parser
from .errors import (
    AlreadyAnswered,
    DecodeError,
    FetchError,
    InvalidChoice,
    InvalidURL,
    NetworkUnavailable,
    NothingToGrade,
    SessionError,
    SessionFinished,
    TransportError,
)
from .models import Question, Topic, parse_topics, topics_from_payload
from .repository import (
    AlwaysReachable,
    Connectivity,
    LoadResult,
    TopicRepository,
    validate_url,
)
from .session import (
    AnswerResult,
    AwaitingAnswer,
    Finished,
    InProgress,
    QuizSession,
    SessionState,
    ShowingFeedback,
    score_line,
    score_message,
)
from .settings import (
    DEFAULT_TOPICS_URL,
    MemorySettingsStore,
    SettingsError,
    SettingsStore,
    TomlSettingsStore,
)
from .console import ConsoleQuizResult, run_console_quiz

__all__ = [
    "build_arg_parser",
    "AlreadyAnswered",
    "DecodeError",
    "FetchError",
    "InvalidChoice",
    "InvalidURL",
    "NetworkUnavailable",
    "NothingToGrade",
    "SessionError",
    "SessionFinished",
    "TransportError",
    "Question",
    "Topic",
    "parse_topics",
    "topics_from_payload",
    "AlwaysReachable",
    "Connectivity",
    "LoadResult",
    "TopicRepository",
    "validate_url",
    "AnswerResult",
    "AwaitingAnswer",
    "Finished",
    "InProgress",
    "QuizSession",
    "SessionState",
    "ShowingFeedback",
    "score_line",
    "score_message",
    "DEFAULT_TOPICS_URL",
    "MemorySettingsStore",
    "SettingsError",
    "SettingsStore",
    "TomlSettingsStore",
    "ConsoleQuizResult",
    "run_console_quiz",
]
