from __future__ import annotations

import stat

import pytest

from iquiz.core import config as core_config


def test_load_toml_reads_document(tmp_path):
    path = tmp_path / "c.toml"
    path.write_text('[source]\ndefault_url = "https://x/q.json"\n', encoding="utf-8")

    assert core_config.load_toml(path) == {
        "source": {"default_url": "https://x/q.json"}
    }


def test_load_toml_errors(tmp_path):
    with pytest.raises(core_config.TomlConfigError, match="not found"):
        core_config.load_toml(tmp_path / "missing.toml")

    broken = tmp_path / "broken.toml"
    broken.write_text("[source\n", encoding="utf-8")
    with pytest.raises(core_config.TomlConfigError, match="parse"):
        core_config.load_toml(broken)


def test_merge_defaults_overrides_known_keys():
    base = {"network": {"timeout_seconds": 10.0}, "logging": {"level": "INFO"}}

    core_config.merge_defaults(base, {"network": {"timeout_seconds": 3}})

    assert base == {"network": {"timeout_seconds": 3}, "logging": {"level": "INFO"}}


def test_merge_defaults_rejects_unknown_and_mistyped_keys():
    base = {"network": {"timeout_seconds": 10.0}}

    with pytest.raises(core_config.TomlConfigError, match="network.retries"):
        core_config.merge_defaults(base, {"network": {"retries": 3}})
    with pytest.raises(core_config.TomlConfigError, match="Expected table"):
        core_config.merge_defaults(base, {"network": 5})


def test_write_toml_template_respects_overwrite(tmp_path):
    target = tmp_path / "nested" / "c.toml"

    core_config.write_toml_template(target, template="a = 1\n")
    with pytest.raises(core_config.TomlConfigError):
        core_config.write_toml_template(target, template="a = 2\n")
    core_config.write_toml_template(target, template="a = 2\n", overwrite=True)

    assert target.read_text(encoding="utf-8") == "a = 2\n"


def test_write_toml_atomic_replaces_file(tmp_path):
    target = tmp_path / "config" / "settings.toml"
    target.parent.mkdir()
    target.write_text("old = 1\n", encoding="utf-8")

    core_config.write_toml_atomic(target, "new = 2\n")

    assert target.read_text(encoding="utf-8") == "new = 2\n"
    assert stat.S_IMODE(target.stat().st_mode) == 0o600
    assert [p.name for p in target.parent.iterdir()] == ["settings.toml"]


def test_write_toml_atomic_reports_failures(tmp_path, monkeypatch):
    target = tmp_path / "settings.toml"

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(core_config.os, "replace", boom)

    with pytest.raises(core_config.TomlConfigError, match="disk full"):
        core_config.write_toml_atomic(target, "x = 1\n")
    assert list(tmp_path.iterdir()) == []
