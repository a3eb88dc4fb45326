"""Tests for config parsing and the TOML-backed config store."""

from pathlib import Path

import pytest

from stashkit.core.config_store import (
    CONFIG_ENV_VAR,
    FakeConfigStore,
    RealConfigStore,
    StashConfig,
    with_value,
)
from stashkit.core.stash.types import UntrackedMode


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "stashkit" / "config.toml"
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    return path


def test_defaults() -> None:
    config = StashConfig()

    assert config.stash_ref == "refs/stash"
    assert config.confirm_bulk_drop is True
    assert config.include_untracked is UntrackedMode.NONE


def test_with_value_parses_each_key() -> None:
    config = with_value(StashConfig(), "confirm_bulk_drop", "false")
    config = with_value(config, "include_untracked", "all")
    config = with_value(config, "stash_ref", "refs/stashes/mine")

    assert config == StashConfig(
        stash_ref="refs/stashes/mine",
        confirm_bulk_drop=False,
        include_untracked=UntrackedMode.ALL,
    )


@pytest.mark.parametrize(
    ("key", "value", "message"),
    [
        ("confirm_bulk_drop", "maybe", "must be a boolean"),
        ("include_untracked", "some", "must be one of none, standard, all"),
        ("stash_ref", "stash", "full reference name"),
        ("color", "auto", "Unknown config key"),
    ],
)
def test_with_value_rejects_bad_input(key: str, value: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        with_value(StashConfig(), key, value)


def test_env_var_overrides_path(config_path: Path) -> None:
    assert RealConfigStore().path() == config_path


def test_missing_file_loads_defaults(config_path: Path) -> None:
    store = RealConfigStore()

    assert not store.exists()
    assert store.load() == StashConfig()


def test_load_reads_toml(config_path: Path) -> None:
    config_path.parent.mkdir(parents=True)
    config_path.write_text(
        'stash_ref = "refs/stashes/work"\nconfirm_bulk_drop = false\n', encoding="utf-8"
    )

    config = RealConfigStore().load()

    assert config.stash_ref == "refs/stashes/work"
    assert config.confirm_bulk_drop is False
    assert config.include_untracked is UntrackedMode.NONE


def test_invalid_toml_raises_value_error(config_path: Path) -> None:
    config_path.parent.mkdir(parents=True)
    config_path.write_text("stash_ref = [", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid TOML"):
        RealConfigStore().load()


def test_save_preserves_comments_and_unknown_keys(config_path: Path) -> None:
    config_path.parent.mkdir(parents=True)
    config_path.write_text(
        "# personal settings\nconfirm_bulk_drop = true\neditor = \"vim\"\n", encoding="utf-8"
    )
    store = RealConfigStore()

    store.save(with_value(store.load(), "include_untracked", "standard"))

    text = config_path.read_text(encoding="utf-8")
    assert "# personal settings" in text
    assert 'editor = "vim"' in text
    assert 'include_untracked = "standard"' in text
    assert store.load().include_untracked is UntrackedMode.TRACKED_IGNORE_EXCLUDED


def test_save_creates_missing_file(config_path: Path) -> None:
    RealConfigStore().save(StashConfig(confirm_bulk_drop=False))

    assert RealConfigStore().load() == StashConfig(confirm_bulk_drop=False)


def test_fake_store_records_saves() -> None:
    store = FakeConfigStore()
    assert not store.exists()

    store.save(StashConfig(stash_ref="refs/other"))

    assert store.exists()
    assert store.load().stash_ref == "refs/other"
    assert store.saved_configs == [StashConfig(stash_ref="refs/other")]
