"""Error taxonomy for topic fetching and quiz sessions."""

from __future__ import annotations

__all__ = [
    "FetchError",
    "InvalidURL",
    "NetworkUnavailable",
    "TransportError",
    "DecodeError",
    "SessionError",
    "InvalidChoice",
    "SessionFinished",
    "NothingToGrade",
    "AlreadyAnswered",
]


class FetchError(RuntimeError):
    """Base class for failures while loading topics.

    ``message`` is meant to be shown to the user verbatim.
    """

    kind = "fetch"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidURL(FetchError):
    kind = "invalid_url"

    def __init__(self, url: str) -> None:
        super().__init__("Invalid URL")
        self.url = url


class NetworkUnavailable(FetchError):
    kind = "network_unavailable"

    def __init__(self) -> None:
        super().__init__("Network is not available")


class TransportError(FetchError):
    kind = "transport"

    def __init__(self, detail: str) -> None:
        super().__init__(f"Error fetching data: {detail}")
        self.detail = detail


class DecodeError(FetchError):
    kind = "decode"

    def __init__(self, detail: str) -> None:
        super().__init__(f"Error decoding JSON: {detail}")
        self.detail = detail


class SessionError(RuntimeError):
    """Raised when a quiz session is driven out of order."""


class InvalidChoice(SessionError):
    def __init__(self, choice: int, available: int) -> None:
        super().__init__(
            f"Choice {choice} is out of range for {available} answer(s)."
        )
        self.choice = choice
        self.available = available


class SessionFinished(SessionError):
    def __init__(self) -> None:
        super().__init__("The quiz session is already finished.")


class NothingToGrade(SessionError):
    def __init__(self) -> None:
        super().__init__(
            "The current question has not been answered; submit an answer "
            "before advancing."
        )


class AlreadyAnswered(SessionError):
    def __init__(self) -> None:
        super().__init__(
            "The current question was already answered; advance before "
            "submitting again."
        )
