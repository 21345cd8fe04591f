"""HTTP session fake shared across tests.

``TopicRepository`` only needs ``get(url, timeout=...)`` returning an object
with ``content`` and ``raise_for_status()``. The fake records every call and
serves queued responses or exceptions in order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Tuple, Union

import requests


@dataclass
class FakeResponse:
    """Canned response; non-2xx status codes raise like ``requests`` does."""

    content: bytes = b"[]"
    status_code: int = 200

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


Outcome = Union[FakeResponse, BaseException]


@dataclass
class FakeHttp:
    """Stand-in for ``requests.Session`` that never touches the network."""

    outcomes: List[Outcome] = field(default_factory=list)
    calls: List[Tuple[str, Any]] = field(default_factory=list)

    def queue(self, outcome: Outcome) -> "FakeHttp":
        self.outcomes.append(outcome)
        return self

    def queue_json(self, text: str, status_code: int = 200) -> "FakeHttp":
        return self.queue(
            FakeResponse(content=text.encode("utf-8"), status_code=status_code)
        )

    def get(self, url: str, timeout: Any = None) -> FakeResponse:
        self.calls.append((url, timeout))
        if not self.outcomes:
            raise AssertionError(f"Unexpected request to {url}")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome
