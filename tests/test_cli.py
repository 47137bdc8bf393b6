"""Smoke tests for all CLI commands using typer CliRunner."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from conftest import FakeBackend, pr_payload
from rich.console import Console
from typer.testing import CliRunner

import prstatus.settings as settings_module
from prstatus.main import ConsoleSink, app
from prstatus.query import StatusQueryService

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_user_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings_module, "CONFIG_PATH", tmp_path / "missing.toml")
    settings_module._load_toml.cache_clear()
    yield
    settings_module._load_toml.cache_clear()


def _patched(backend: FakeBackend):
    return patch("prstatus.main.get_service", return_value=StatusQueryService(backend))


class TestShow:
    def test_prints_status(self, backend: FakeBackend, tmp_path: Path) -> None:
        backend.branch_pr = pr_payload(
            42, checks=[{"name": "ci", "conclusion": "FAILURE"}, {"name": "lint", "conclusion": "SUCCESS"}]
        )
        backend.threads = [{"isResolved": False}]
        with _patched(backend):
            result = runner.invoke(app, ["show", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert result.output == (
            "🟢 PR #42 · ❌ 1/2 checks failed · 💬 1 unresolved · https://github.com/owner/repo/pull/42\n"
        )
        assert ("current_branch", str(tmp_path.resolve())) in backend.calls

    def test_no_pr_prints_nothing(self, backend: FakeBackend, tmp_path: Path) -> None:
        with _patched(backend):
            result = runner.invoke(app, ["show", str(tmp_path)])
        assert result.exit_code == 0
        assert result.output == ""

    def test_text_pins_pr(self, backend: FakeBackend, tmp_path: Path) -> None:
        backend.prs[("other/proj", 7)] = pr_payload(7, state="MERGED", repo="other/proj")
        with _patched(backend):
            result = runner.invoke(app, ["show", str(tmp_path), "--text", "see https://github.com/other/proj/pull/7"])
        assert result.exit_code == 0
        assert result.output.startswith("🟣 PR #7")

    def test_text_ignored_for_open_branch_pr(self, backend: FakeBackend, tmp_path: Path) -> None:
        backend.branch_pr = pr_payload(42)
        backend.prs[("other/proj", 7)] = pr_payload(7, repo="other/proj")
        with _patched(backend):
            result = runner.invoke(app, ["show", str(tmp_path), "-t", "https://github.com/other/proj/pull/7"])
        assert result.output.startswith("🟢 PR #42")


class TestWatch:
    def test_reads_stdin_until_eof(self, backend: FakeBackend, tmp_path: Path) -> None:
        backend.prs[("other/proj", 7)] = pr_payload(7, repo="other/proj")
        scheduler = MagicMock()
        with _patched(backend), patch("prstatus.main.ThreadScheduler", return_value=scheduler):
            result = runner.invoke(
                app,
                ["watch", str(tmp_path), "--interval", "2"],
                input="hello\nhttps://github.com/other/proj/pull/7\n",
            )
        assert result.exit_code == 0, result.output
        assert "no pull request" in result.output
        assert "PR #7" in result.output
        assert scheduler.start.call_args.args[0] == 2.0
        scheduler.stop.assert_called_once()


class TestParseUrl:
    def test_prints_reference(self) -> None:
        result = runner.invoke(app, ["parse-url", "continue https://github.com/a/b/pull/12 please"])
        assert result.exit_code == 0
        assert result.output == "a/b#12\n"

    def test_no_url_exits(self) -> None:
        result = runner.invoke(app, ["parse-url", "https://github.com/a/b/issues/12"])
        assert result.exit_code == 1


class TestConsoleSink:
    def test_prints_status_verbatim(self) -> None:
        console = Console(record=True, width=200)
        ConsoleSink(console).set_status("pr-status", "🟢 PR #1 · [bold] · https://x/o/r/pull/1")
        assert "[bold]" in console.export_text()
