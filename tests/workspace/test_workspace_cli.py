from __future__ import annotations

from iquiz.workspace import cli


def test_iquiz_init_creates_workspace(tmp_path, capsys, monkeypatch):
    target = tmp_path / "workspace"
    monkeypatch.setenv("IQUIZ_DATA_HOME", str(target))

    code = cli.main([])

    captured = capsys.readouterr()
    assert code == 0
    assert "Workspace ready" in captured.out
    assert "(created)" in captured.out
    assert (target / "config").is_dir()
    assert (target / "logs").is_dir()


def test_iquiz_init_reports_existing(tmp_path, capsys):
    target = tmp_path / "again"
    cli.main(["--path", str(target)])
    capsys.readouterr()

    code = cli.main(["--path", str(target)])

    captured = capsys.readouterr()
    assert code == 0
    assert "(exists)" in captured.out
    assert "(created)" not in captured.out


def test_iquiz_init_supports_custom_path(tmp_path, capsys):
    target = tmp_path / "custom"

    code = cli.main(["--path", str(target)])

    captured = capsys.readouterr()
    assert code == 0
    assert target.is_dir()
    assert str(target.resolve()) in captured.out


def test_iquiz_init_quiet_mode(tmp_path, capsys, monkeypatch):
    target = tmp_path / "quiet"
    monkeypatch.setenv("IQUIZ_DATA_HOME", str(target))

    code = cli.main(["--quiet"])

    captured = capsys.readouterr()
    assert code == 0
    assert captured.out == ""


def test_iquiz_init_reports_errors(tmp_path, capsys):
    target = tmp_path / "file"
    target.write_text("x", encoding="utf-8")

    code = cli.main(["--path", str(target)])

    captured = capsys.readouterr()
    assert code == 1
    assert "not a directory" in captured.err
