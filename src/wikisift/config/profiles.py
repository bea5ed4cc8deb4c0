"""Configuration profiles — Named config files in a per-user directory.

Layout of the profile directory (``~/.wikisift`` unless WIKISIFT_CONFIG_DIR
points elsewhere):

    config.yaml     the default profile
    <name>.yaml     any other profile
    current         name of the active profile

A missing or unreadable ``current`` file selects the default profile.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from wikisift.config.settings import Settings
from wikisift.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "WIKISIFT_CONFIG_DIR"
DEFAULT_PROFILE = "config"
PROFILE_SUFFIX = ".yaml"

_POINTER_FILE = "current"
_PROFILE_NAME = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]*")


def default_config_dir() -> Path:
    """Return the per-user configuration directory."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".wikisift"


def validate_profile_name(name: str) -> str:
    """Return *name* unchanged if it can be used as a profile file name.

    Raises:
        ConfigurationError: If the name is empty or contains path characters.
    """
    if not _PROFILE_NAME.fullmatch(name):
        raise ConfigurationError(
            f"Invalid profile name '{name}': use letters, digits, '.', '_' or '-'"
        )
    return name


class ProfileStore:
    """Named configuration profiles and the pointer to the active one.

    Args:
        directory: Profile directory; defaults to ``default_config_dir()``.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self.directory = directory or default_config_dir()

    def path_for(self, name: str) -> Path:
        return self.directory / f"{validate_profile_name(name)}{PROFILE_SUFFIX}"

    def list_profiles(self) -> list[str]:
        """Names of all profile files, sorted."""
        if not self.directory.is_dir():
            return []
        return sorted(path.stem for path in self.directory.glob(f"*{PROFILE_SUFFIX}") if path.is_file())

    def current_profile(self) -> str:
        pointer = self.directory / _POINTER_FILE
        try:
            name = pointer.read_text(encoding="utf-8").strip()
        except OSError:
            return DEFAULT_PROFILE
        if not _PROFILE_NAME.fullmatch(name):
            logger.warning("Ignoring invalid profile pointer in %s: %r", pointer, name)
            return DEFAULT_PROFILE
        return name

    def current_path(self) -> Path:
        return self.path_for(self.current_profile())

    def create_profile(self, name: str) -> Path:
        """Write a new profile holding the built-in defaults.

        Raises:
            ConfigurationError: If the name is invalid or the profile exists.
        """
        path = self.path_for(name)
        if path.exists():
            raise ConfigurationError(f"Profile '{name}' already exists: {path}")
        Settings(_env_file=None).to_file(path)  # type: ignore[call-arg]
        logger.info("Created profile %s at %s", name, path)
        return path

    def set_current(self, name: str) -> Path:
        """Make *name* the active profile.

        Raises:
            ConfigurationError: If the name is invalid or no such profile exists.
        """
        path = self.path_for(name)
        if not path.is_file():
            raise ConfigurationError(f"Profile '{name}' not found in {self.directory}")
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / _POINTER_FILE).write_text(f"{name}\n", encoding="utf-8")
        logger.info("Active profile set to %s", name)
        return path
