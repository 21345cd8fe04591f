from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from fixtures import (  # noqa: E402
    FakeHttp,
    WorkspaceBuilder,
    sample_topics_json,
)

# Ensure src/ is importable when the package is not installed
ROOT = TESTS_DIR.parent
for extra in (ROOT / "src",):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from iquiz.quiz.models import Topic, parse_topics  # noqa: E402
from iquiz.quiz.repository import TopicRepository  # noqa: E402
from iquiz.quiz.settings import MemorySettingsStore  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Keep tests away from the real ~/.iquiz-data and user env overrides."""

    for key in (
        "IQUIZ_CONFIG",
        "IQUIZ_DEFAULT_URL",
        "IQUIZ_TIMEOUT",
        "IQUIZ_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("IQUIZ_DATA_HOME", str(tmp_path / "iquiz-home"))
    yield


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path / "iquiz-home")


@pytest.fixture
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def settings() -> MemorySettingsStore:
    return MemorySettingsStore()


@pytest.fixture
def repository(
    settings: MemorySettingsStore, http: FakeHttp
) -> Iterator[TopicRepository]:
    repo = TopicRepository(settings, http=http, timeout=5.0)
    yield repo
    repo.close()


@pytest.fixture
def sample_topics() -> tuple[Topic, ...]:
    return parse_topics(sample_topics_json())
