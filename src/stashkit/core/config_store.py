"""Configuration data structures and loading.

Provides immutable config data loaded from ~/.stashkit/config.toml (or the
file named by STASHKIT_CONFIG). Loaded eagerly at the CLI entry point.
"""

import os
import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from pathlib import Path

import tomlkit

from stashkit.core.stash.store import DEFAULT_STASH_REF
from stashkit.core.stash.types import UntrackedMode

CONFIG_ENV_VAR = "STASHKIT_CONFIG"
CONFIG_KEYS = ("stash_ref", "confirm_bulk_drop", "include_untracked")


@dataclass(frozen=True)
class StashConfig:
    """Immutable configuration data.

    Loaded once at CLI entry point and stored in StashContext.
    All fields are read-only after construction.
    """

    stash_ref: str = DEFAULT_STASH_REF
    confirm_bulk_drop: bool = True
    include_untracked: UntrackedMode = UntrackedMode.NONE


def _parse_bool(key: str, value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "yes", "1"):
        return True
    if isinstance(value, str) and value.lower() in ("false", "no", "0"):
        return False
    raise ValueError(f"'{key}' must be a boolean, got {value!r}")


def _parse_untracked(value: object) -> UntrackedMode:
    try:
        return UntrackedMode(str(value))
    except ValueError:
        choices = ", ".join(mode.value for mode in UntrackedMode)
        raise ValueError(f"'include_untracked' must be one of {choices}, got {value!r}") from None


def with_value(config: StashConfig, key: str, raw: object) -> StashConfig:
    """Return a copy of ``config`` with ``key`` parsed from ``raw``.

    Raises:
        ValueError: If the key is unknown or the value does not parse
    """
    if key == "stash_ref":
        ref = str(raw)
        if not ref.startswith("refs/"):
            raise ValueError(f"'stash_ref' must be a full reference name, got {ref!r}")
        return replace(config, stash_ref=ref)
    if key == "confirm_bulk_drop":
        return replace(config, confirm_bulk_drop=_parse_bool(key, raw))
    if key == "include_untracked":
        return replace(config, include_untracked=_parse_untracked(raw))
    raise ValueError(f"Unknown config key '{key}' (expected one of {', '.join(CONFIG_KEYS)})")


class ConfigStore(ABC):
    """Abstract interface for config operations.

    Provides dependency injection for config access, enabling in-memory
    implementations for tests without touching filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if config exists."""
        ...

    @abstractmethod
    def load(self) -> StashConfig:
        """Load config.

        Raises:
            ValueError: If config is malformed
        """
        ...

    @abstractmethod
    def save(self, config: StashConfig) -> None:
        """Save config."""
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the config file (for error messages and debugging)."""
        ...


class RealConfigStore(ConfigStore):
    """Production implementation that reads/writes the TOML config file."""

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> StashConfig:
        """Load config, falling back to defaults for missing keys or file."""
        config_path = self.path()
        config = StashConfig()
        if not config_path.exists():
            return config

        try:
            data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

        for key in CONFIG_KEYS:
            if key in data:
                config = with_value(config, key, data[key])
        return config

    def save(self, config: StashConfig) -> None:
        """Write config, preserving unrelated keys, comments and formatting."""
        config_path = self.path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        if config_path.exists():
            doc = tomlkit.parse(config_path.read_text(encoding="utf-8"))
        else:
            doc = tomlkit.document()

        doc["stash_ref"] = config.stash_ref
        doc["confirm_bulk_drop"] = config.confirm_bulk_drop
        doc["include_untracked"] = config.include_untracked.value

        config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")

    def path(self) -> Path:
        override = os.environ.get(CONFIG_ENV_VAR)
        if override:
            return Path(override).expanduser()
        return Path.home() / ".stashkit" / "config.toml"


class FakeConfigStore(ConfigStore):
    """In-memory implementation for tests.

    This class has NO public setup methods. All state is provided via constructor
    or captured during execution.
    """

    def __init__(self, config: StashConfig | None = None) -> None:
        self._config = config
        self._saved: list[StashConfig] = []

    @property
    def saved_configs(self) -> list[StashConfig]:
        return list(self._saved)

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> StashConfig:
        return self._config if self._config is not None else StashConfig()

    def save(self, config: StashConfig) -> None:
        self._config = config
        self._saved.append(config)

    def path(self) -> Path:
        return Path("/test/.stashkit/config.toml")
