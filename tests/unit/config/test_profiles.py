"""Tests for named configuration profiles."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from wikisift.config.profiles import (
    CONFIG_DIR_ENV,
    DEFAULT_PROFILE,
    ProfileStore,
    default_config_dir,
    validate_profile_name,
)
from wikisift.config.settings import Settings
from wikisift.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for key in [k for k in os.environ if k.upper().startswith("WIKISIFT_")]:
        monkeypatch.delenv(key)


@pytest.fixture
def store(tmp_path: Path) -> ProfileStore:
    return ProfileStore(tmp_path / "profiles")


class TestConfigDir:
    def test_home_directory_by_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert default_config_dir() == tmp_path / ".wikisift"

    def test_environment_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path / "elsewhere"))
        assert default_config_dir() == tmp_path / "elsewhere"
        assert ProfileStore().directory == tmp_path / "elsewhere"


class TestProfileNames:
    @pytest.mark.parametrize("name", ["config", "work", "team-2", "eu_west.v2"])
    def test_valid(self, name: str) -> None:
        assert validate_profile_name(name) == name

    @pytest.mark.parametrize("name", ["", " ", "../up", "a/b", "a\\b", ".hidden", "what?", "tab\there"])
    def test_invalid(self, name: str) -> None:
        with pytest.raises(ConfigurationError, match="Invalid profile name"):
            validate_profile_name(name)


class TestProfileStore:
    def test_defaults_without_directory(self, store: ProfileStore) -> None:
        assert store.list_profiles() == []
        assert store.current_profile() == DEFAULT_PROFILE
        assert store.current_path() == store.directory / "config.yaml"

    def test_create_writes_defaults(self, store: ProfileStore) -> None:
        path = store.create_profile("work")
        assert path == store.directory / "work.yaml"
        assert [s.name for s in Settings.from_file(path).sources] == ["Wikipedia IT", "Wikipedia EN"]

    def test_create_existing_fails_and_keeps_file(self, store: ProfileStore) -> None:
        path = store.create_profile("work")
        path.write_text("settings:\n  maxResults: 3\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="already exists"):
            store.create_profile("work")
        assert Settings.from_file(path).app.max_results == 3

    def test_list_is_sorted_and_ignores_other_files(self, store: ProfileStore) -> None:
        for name in ("zeta", "alpha", "config"):
            store.create_profile(name)
        (store.directory / "notes.txt").write_text("x", encoding="utf-8")
        assert store.list_profiles() == ["alpha", "config", "zeta"]

    def test_set_current_persists(self, store: ProfileStore) -> None:
        store.create_profile("work")
        assert store.set_current("work") == store.directory / "work.yaml"
        assert ProfileStore(store.directory).current_profile() == "work"

    def test_set_current_requires_existing_profile(self, store: ProfileStore) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            store.set_current("ghost")
        assert store.current_profile() == DEFAULT_PROFILE

    def test_corrupt_pointer_falls_back_to_default(self, store: ProfileStore) -> None:
        store.directory.mkdir(parents=True)
        (store.directory / "current").write_text("../../etc/passwd\n", encoding="utf-8")
        assert store.current_profile() == DEFAULT_PROFILE
