"""Tests for the command-line interface (no network access)."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from wikisift.cli import build_parser, main
from wikisift.config.settings import Settings
from wikisift.models.result import SearchResult


@pytest.fixture(autouse=True)
def _workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Run each command from an empty directory with no WIKISIFT_ variables."""
    monkeypatch.chdir(tmp_path)
    for key in [k for k in os.environ if k.upper().startswith("WIKISIFT_")]:
        monkeypatch.delenv(key)
    monkeypatch.setenv("WIKISIFT_CONFIG_DIR", str(tmp_path / "profiles"))

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield tmp_path
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def profile_dir(_workdir: Path) -> Path:
    return _workdir / "profiles"


class TestParser:
    def test_search_options(self) -> None:
        args = build_parser().parse_args(["search", "Roma", "-s", "wiki", "-l", "3", "-f", "json", "-d"])
        assert args.command == "search"
        assert args.query == "Roma"
        assert args.source == "wiki"
        assert args.limit == 3
        assert args.format == "json"
        assert args.detailed is True

    def test_isearch_options(self) -> None:
        args = build_parser().parse_args(["isearch", "Galileo", "--source", "EN"])
        assert args.command == "isearch"
        assert args.query == "Galileo"
        assert args.source == "EN"

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_unknown_format_rejected(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["search", "x", "--format", "xml"])


class TestSourcesCommand:
    def test_lists_defaults(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["sources"]) == 0
        out = capsys.readouterr().out
        assert "Wikipedia IT [it] api: enabled" in out
        assert "Wikipedia EN [en] api: enabled" in out
        assert "JSONPlaceholder Example [en] custom api: disabled" in out


class TestConfigCommands:
    def test_show_defaults(self, profile_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["config", "show"]) == 0
        out = capsys.readouterr().out
        assert "Config file: (defaults)" in out
        assert "Profile: config" in out
        assert "max_results=10" in out

    def test_init_writes_default_profile(self, profile_dir: Path) -> None:
        assert main(["config", "init"]) == 0
        written = Settings.from_file(profile_dir / "config.yaml")
        assert [s.name for s in written.sources] == ["Wikipedia IT", "Wikipedia EN"]

    def test_init_refuses_to_overwrite_local_file(self, _workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (_workdir / "wikisift.yaml").write_text("settings:\n  maxResults: 2\n", encoding="utf-8")
        assert main(["config", "init"]) == 1
        assert "already exists" in capsys.readouterr().err
        assert main(["config", "init", "--force"]) == 0
        assert Settings.from_file(_workdir / "wikisift.yaml").app.max_results == 10

    def test_disable_then_enable(self, profile_dir: Path) -> None:
        path = profile_dir / "config.yaml"
        assert main(["config", "disable", "wikipedia en"]) == 0
        assert [s.enabled for s in Settings.from_file(path).sources] == [True, False]

        assert main(["config", "enable", "WIKIPEDIA EN"]) == 0
        assert [s.enabled for s in Settings.from_file(path).sources] == [True, True]

    def test_unknown_source(self, _workdir: Path, profile_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["config", "enable", "Britannica"]) == 1
        assert "not found" in capsys.readouterr().err
        assert not (_workdir / "wikisift.yaml").exists()
        assert not (profile_dir / "config.yaml").exists()

    def test_explicit_config_path(self, _workdir: Path) -> None:
        path = _workdir / "custom.json"
        Settings().to_file(path)
        assert main(["--config", str(path), "config", "disable", "Wikipedia IT"]) == 0
        assert Settings.from_file(path).sources[0].enabled is False

    def test_local_file_wins_over_profile(self, _workdir: Path, profile_dir: Path) -> None:
        assert main(["config", "create-profile", "work"]) == 0
        assert main(["config", "set-file", "work"]) == 0
        (_workdir / "wikisift.yaml").write_text("settings:\n  maxResults: 2\n", encoding="utf-8")

        assert main(["config", "disable", "Wikipedia IT"]) == 0

        assert Settings.from_file(_workdir / "wikisift.yaml").sources[0].enabled is False
        assert Settings.from_file(profile_dir / "work.yaml").sources[0].enabled is True


class TestProfileCommands:
    def test_list_empty(self, profile_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["config", "list-profiles"]) == 0
        assert f"No profiles in {profile_dir}" in capsys.readouterr().out

    def test_create_and_list_marks_current(self, profile_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["config", "init"]) == 0
        assert main(["config", "create-profile", "work"]) == 0
        assert (profile_dir / "work.yaml").is_file()
        capsys.readouterr()

        assert main(["config", "list-profiles"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert "* config" in lines
        assert "work" in [line.strip() for line in lines]

    def test_create_existing_profile_fails(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["config", "create-profile", "work"]) == 0
        assert main(["config", "create-profile", "work"]) == 1
        assert "already exists" in capsys.readouterr().err

    @pytest.mark.parametrize("name", ["../escape", "a/b", ".hidden"])
    def test_create_invalid_name(self, name: str, profile_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["config", "create-profile", name]) == 1
        assert "Invalid profile name" in capsys.readouterr().err
        assert not profile_dir.exists()

    def test_set_file_switches_active_config(self, profile_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["config", "create-profile", "work"]) == 0
        assert main(["config", "set-file", "work"]) == 0
        assert main(["config", "disable", "Wikipedia EN"]) == 0

        assert Settings.from_file(profile_dir / "work.yaml").sources[1].enabled is False
        assert not (profile_dir / "config.yaml").exists()

        capsys.readouterr()
        assert main(["config", "show"]) == 0
        out = capsys.readouterr().out
        assert f"Config file: {profile_dir / 'work.yaml'}" in out
        assert "Profile: work" in out
        assert "Wikipedia EN [en] api: disabled" in out

    def test_set_file_unknown_profile(self, profile_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["config", "set-file", "nowhere"]) == 1
        assert "not found" in capsys.readouterr().err
        assert not (profile_dir / "current").exists()


class _Answers:
    """Replays prompt answers in order."""

    def __init__(self, *answers: str) -> None:
        self._answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str = "", **kwargs: Any) -> str:
        self.prompts.append(prompt)
        return self._answers.pop(0)


def _hits() -> list[SearchResult]:
    return [
        SearchResult(
            title="Leonardo da Vinci",
            summary="Italian polymath",
            url="https://en.wikipedia.org/wiki/Leonardo_da_Vinci",
            source="Wikipedia EN",
            metadata={"pageId": "18079"},
        ),
        SearchResult(title="Gioconda [dipinto]", summary="Ritratto", source="Wikipedia IT", language="it"),
    ]


class TestInteractiveSearch:
    @pytest.fixture
    def searches(self, monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, str | None, int | None]]:
        calls: list[tuple[str, str | None, int | None]] = []

        async def fake_search(settings: Settings, query: str, source: str | None, limit: int | None) -> list[SearchResult]:
            calls.append((query, source, limit))
            return _hits()

        monkeypatch.setattr("wikisift.cli._run_search", fake_search)
        return calls

    @pytest.fixture
    def opened(self, monkeypatch: pytest.MonkeyPatch) -> list[str]:
        urls: list[str] = []

        def fake_open(url: str) -> bool:
            urls.append(url)
            return True

        monkeypatch.setattr("wikisift.cli.webbrowser.open", fake_open)
        return urls

    def _answer(self, monkeypatch: pytest.MonkeyPatch, *answers: str) -> _Answers:
        replay = _Answers(*answers)
        monkeypatch.setattr("wikisift.cli.Prompt.ask", replay)
        return replay

    def test_open_then_back_then_quit(
        self,
        monkeypatch: pytest.MonkeyPatch,
        searches: list[tuple[str, str | None, int | None]],
        opened: list[str],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        self._answer(monkeypatch, "1", "o", "b", "q")
        assert main(["isearch", "Leonardo", "-s", "wiki"]) == 0
        assert searches == [("Leonardo", "wiki", 10)]
        assert opened == ["https://en.wikipedia.org/wiki/Leonardo_da_Vinci"]
        out = capsys.readouterr().out
        assert "pageId" in out
        assert "18079" in out

    def test_copy_prints_url(
        self, monkeypatch: pytest.MonkeyPatch, searches: list[Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        self._answer(monkeypatch, "1", "c", "q")
        assert main(["isearch", "Leonardo"]) == 0
        assert "https://en.wikipedia.org/wiki/Leonardo_da_Vinci" in capsys.readouterr().out.splitlines()

    def test_open_without_url(
        self,
        monkeypatch: pytest.MonkeyPatch,
        searches: list[Any],
        opened: list[str],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        self._answer(monkeypatch, "2", "o", "q")
        assert main(["isearch", "Gioconda"]) == 0
        assert opened == []
        assert "URL not available." in capsys.readouterr().out

    def test_invalid_selection_asks_again(
        self, monkeypatch: pytest.MonkeyPatch, searches: list[Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        replay = self._answer(monkeypatch, "9", "abc", "q")
        assert main(["isearch", "Leonardo"]) == 0
        assert len(replay.prompts) == 3
        assert capsys.readouterr().out.count("Invalid selection") == 2

    def test_related_search_runs_new_query(
        self, monkeypatch: pytest.MonkeyPatch, searches: list[tuple[str, str | None, int | None]]
    ) -> None:
        self._answer(monkeypatch, "2", "s", "Monna Lisa", "q")
        assert main(["isearch", "Leonardo"]) == 0
        assert [query for query, _, _ in searches] == ["Leonardo", "Monna Lisa"]

    def test_no_results(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        async def nothing(*args: Any) -> list[SearchResult]:
            return []

        monkeypatch.setattr("wikisift.cli._run_search", nothing)
        replay = self._answer(monkeypatch)
        assert main(["isearch", "zzzz"]) == 0
        assert "No results found." in capsys.readouterr().out
        assert replay.prompts == []

    def test_end_of_input_quits(self, monkeypatch: pytest.MonkeyPatch, searches: list[Any]) -> None:
        def closed_stdin(*args: Any, **kwargs: Any) -> str:
            raise EOFError

        monkeypatch.setattr("wikisift.cli.Prompt.ask", closed_stdin)
        assert main(["isearch", "Leonardo"]) == 0

    def test_blank_query(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["isearch", "  "]) == 1
        assert "Query must not be empty" in capsys.readouterr().err


class TestErrors:
    def test_missing_explicit_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--config", "missing.yaml", "sources"]) == 1
        assert "not found" in capsys.readouterr().err

    def test_invalid_config(self, _workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (_workdir / "wikisift.yaml").write_text("- just\n- a list\n", encoding="utf-8")
        assert main(["sources"]) == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_invalid_profile_file(self, profile_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        profile_dir.mkdir()
        (profile_dir / "config.yaml").write_text("just a string\n", encoding="utf-8")
        assert main(["sources"]) == 1
        assert "must contain a mapping" in capsys.readouterr().err

    def test_blank_query(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["search", "   "]) == 1
        assert "Query must not be empty" in capsys.readouterr().err
