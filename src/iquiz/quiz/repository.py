"""Fetch quiz topics from a remote JSON endpoint.

``TopicRepository`` validates the URL, consults an injectable connectivity
check, issues a single GET and decodes the body into :class:`Topic` records.
Only a fully successful load writes anything: the URL is then remembered in
the settings store so the next run starts from it. Failures are never
retried; the caller decides whether to try again.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, runtime_checkable
from urllib.parse import urlsplit

import requests

from .errors import (
    FetchError,
    InvalidURL,
    NetworkUnavailable,
    TransportError,
)
from .models import Topic, parse_topics
from .settings import DEFAULT_TOPICS_URL, SettingsError, SettingsStore

__all__ = [
    "AlwaysReachable",
    "Connectivity",
    "LoadResult",
    "TopicRepository",
    "validate_url",
]

logger = logging.getLogger(__name__)

LoadCallback = Callable[["LoadResult"], None]

_ALLOWED_SCHEMES = frozenset({"http", "https"})


@runtime_checkable
class Connectivity(Protocol):
    """Answers whether the network can currently be reached."""

    def is_reachable(self) -> bool:
        ...


class AlwaysReachable:
    """Connectivity check that never reports an outage."""

    def is_reachable(self) -> bool:
        return True


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one ``TopicRepository.load`` call."""

    url: str
    topics: tuple[Topic, ...] = ()
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error is not None else None


def validate_url(url: str) -> str:
    """Return ``url`` stripped of surrounding whitespace or raise InvalidURL."""

    candidate = (url or "").strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        raise InvalidURL(url)
    try:
        parts = urlsplit(candidate)
        parts.port  # malformed ports only surface on access
    except ValueError as exc:
        raise InvalidURL(url) from exc
    if parts.scheme.lower() not in _ALLOWED_SCHEMES or not parts.hostname:
        raise InvalidURL(url)
    return candidate


class TopicRepository:
    """Load topic lists and remember the last URL that worked."""

    def __init__(
        self,
        settings: SettingsStore,
        *,
        connectivity: Optional[Connectivity] = None,
        http: Any = None,
        timeout: float = 10.0,
        fallback_url: str = DEFAULT_TOPICS_URL,
    ) -> None:
        self._settings = settings
        self._connectivity = connectivity or AlwaysReachable()
        self._http = http
        self._timeout = timeout
        self._fallback_url = fallback_url
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def default_url(self) -> str:
        """URL to start from: the remembered one, else the fallback."""

        try:
            stored = self._settings.load()
        except SettingsError as exc:
            logger.warning(
                "Ignoring unreadable settings",
                extra={"error": str(exc)},
            )
            stored = None
        return stored or self._fallback_url

    def fetch(self, url: str) -> tuple[Topic, ...]:
        """Load topics from ``url``, raising a :class:`FetchError` on failure."""

        target = validate_url(url)
        if not self._connectivity.is_reachable():
            raise NetworkUnavailable()

        logger.info("Fetching topics", extra={"url": target})
        try:
            response = self._session().get(target, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(str(exc)) from exc

        topics = parse_topics(response.content)
        self._remember(target)
        logger.info(
            "Fetched topics",
            extra={"url": target, "topic_count": len(topics)},
        )
        return topics

    def load(self, url: str) -> LoadResult:
        """Like :meth:`fetch` but returns failures inside a ``LoadResult``."""

        try:
            topics = self.fetch(url)
        except FetchError as exc:
            logger.warning(
                "Topic fetch failed",
                extra={"url": url, "kind": exc.kind, "error": exc.message},
            )
            return LoadResult(url=url, error=exc)
        return LoadResult(url=url, topics=topics)

    def load_async(
        self, url: str, callback: Optional[LoadCallback] = None
    ) -> "Future[LoadResult]":
        """Run :meth:`load` in the background.

        ``callback`` is invoked once with the result on the worker thread,
        also when ``load`` itself crashed. It is skipped when the future was
        cancelled before it started.
        """

        future = self._pool().submit(self.load, url)
        if callback is not None:
            future.add_done_callback(_deliver_to(callback, url))
        return future

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if isinstance(self._http, requests.Session):
            self._http.close()

    def __enter__(self) -> "TopicRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _session(self) -> Any:
        if self._http is None:
            self._http = requests.Session()
        return self._http

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=2, thread_name_prefix="iquiz-fetch"
            )
        return self._executor

    def _remember(self, url: str) -> None:
        try:
            self._settings.save(url)
        except SettingsError as exc:
            logger.warning(
                "Could not persist topic URL",
                extra={"url": url, "error": str(exc)},
            )


def _deliver_to(
    callback: LoadCallback, url: str
) -> Callable[["Future[LoadResult]"], None]:
    def _done(future: "Future[LoadResult]") -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None:
            callback(future.result())
            return
        logger.error(
            "Topic load crashed",
            exc_info=exc,
            extra={"url": url},
        )
        callback(
            LoadResult(url=url, error=FetchError(f"Unexpected error: {exc}"))
        )

    return _done
