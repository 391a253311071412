from pathlib import Path

from click.testing import CliRunner

from bookclub import __version__
from bookclub.cli import cli


def test_cli_build_success(project, monkeypatch):
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["build"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Built 6 documents into" in result.output
    assert "✓ Converted meeting10.md to meeting10.html" in result.output
    assert (project / "docs" / "index.html").exists()


def test_cli_build_missing_source_exits_nonzero(project, monkeypatch):
    monkeypatch.chdir(project)
    (project / "content" / "summary.md").unlink()
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Build failed:" in result.output
    assert f"File: {Path('content') / 'summary.md'}" in result.output
    assert "Source Markdown file not found" in result.output
    assert not (project / "docs" / "index.html").exists()


def test_cli_build_invalid_utf8_source(project, monkeypatch):
    monkeypatch.chdir(project)
    (project / "meetings" / "meeting2.md").write_bytes(b"# Caf\xe9 notes\n")
    result = CliRunner().invoke(cli, ["build"], catch_exceptions=False)
    assert result.exit_code == 0
    html = (project / "docs" / "meeting2.html").read_text(encoding="utf-8")
    assert "Caf\ufffd notes" in html


def test_cli_build_unreadable_source_exits_nonzero(project, monkeypatch):
    monkeypatch.chdir(project)

    def deny(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_bytes", deny)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Build failed:" in result.output
    assert f"File: {Path('content') / 'overview.md'}" in result.output
    assert "Could not read source: Permission denied" in result.output
    assert not (project / "docs" / "index.html").exists()


def test_cli_build_output_dir_option(project, monkeypatch, tmp_path_factory):
    monkeypatch.chdir(project)
    target = tmp_path_factory.mktemp("elsewhere") / "site"
    result = CliRunner().invoke(cli, ["build", "--output-dir", str(target)])
    assert result.exit_code == 0
    assert (target / "index.html").exists()
    assert not (project / "docs").exists()


def test_cli_build_reports_config_errors(project, monkeypatch):
    monkeypatch.chdir(project)
    (project / "bookclub.yaml").write_text("documents: 3\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "File: bookclub.yaml" in result.output
    assert "'documents' must be a list" in result.output


def test_cli_dev_passes_ports(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    called = {}

    class DummyServer:
        def __init__(self, root, http_port=None, ws_port=None):
            called["root"] = root
            called["port"] = http_port
            called["ws_port"] = ws_port

        def start(self):
            called["started"] = True

    monkeypatch.setattr("bookclub.server.DevServer", DummyServer)
    result = CliRunner().invoke(
        cli, ["dev", "--port", "5050", "--ws-port", "5051"], catch_exceptions=False
    )
    assert result.exit_code == 0
    assert called == {
        "root": tmp_path,
        "port": 5050,
        "ws_port": 5051,
        "started": True,
    }


def test_cli_new_scaffolds_buildable_project(tmp_path, monkeypatch):
    runner = CliRunner()
    target = tmp_path / "club"
    env = {"BOOKCLUB_SKIP_GIT_INIT": "1"}
    result = runner.invoke(cli, ["new", str(target)], env=env)
    assert result.exit_code == 0
    assert (target / "bookclub.yaml").exists()
    assert (target / "meetings" / "meeting0.md").exists()
    assert (target / "assets" / "main.js").exists()

    monkeypatch.chdir(target)
    result = runner.invoke(cli, ["build"], catch_exceptions=False)
    assert result.exit_code == 0
    html = (target / "docs" / "index.html").read_text(encoding="utf-8")
    assert 'data-tab="reading-guide">Facilitator Guide</button>' in html
    assert 'data-tab="meeting-0"' in html

    (target / "extra.txt").write_text("x", encoding="utf-8")
    result = runner.invoke(cli, ["new", str(target)], env=env)
    assert result.exit_code != 0
    assert "non-empty" in result.output


def test_cli_meeting_with_title(project, monkeypatch):
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["meeting", "--title", "Chapter 4 "])
    assert result.exit_code == 0
    created = project / "meetings" / "meeting11.md"
    assert created.read_text(encoding="utf-8") == "# Chapter 4\n\n"
    assert f"Created {Path('meetings') / 'meeting11.md'}" in result.output


def test_cli_meeting_prompts_for_title(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    asked = {}

    class FakePrompt:
        def __init__(self, answer):
            self.answer = answer

        def ask(self):
            return self.answer

    def fake_text(message, default="", **kwargs):
        asked["default"] = default
        return FakePrompt(default)

    monkeypatch.setattr("bookclub.cli.questionary.text", fake_text)
    result = CliRunner().invoke(cli, ["meeting"], catch_exceptions=False)
    assert result.exit_code == 0
    assert asked["default"] == "Meeting 0"
    assert (tmp_path / "meetings" / "meeting0.md").read_text(encoding="utf-8") == "# Meeting 0\n\n"


def test_cli_meeting_prompt_cancelled(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "bookclub.cli.questionary.text",
        lambda *args, **kwargs: type("P", (), {"ask": lambda self: None})(),
    )
    result = CliRunner().invoke(cli, ["meeting"])
    assert result.exit_code != 0
    assert not (tmp_path / "meetings").exists()


def test_cli_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_module_main_entrypoint():
    from bookclub.__main__ import main

    assert callable(main)
