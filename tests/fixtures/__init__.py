"""Shared testing fixtures and fakes for the iquiz test suite."""

from .http import FakeHttp, FakeResponse  # noqa: F401
from .topics import SAMPLE_TOPICS, sample_topics_json  # noqa: F401
from .workspace import WorkspaceBuilder, build_tree  # noqa: F401

__all__ = [
    "FakeHttp",
    "FakeResponse",
    "SAMPLE_TOPICS",
    "WorkspaceBuilder",
    "build_tree",
    "sample_topics_json",
]
