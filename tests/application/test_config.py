from pathlib import Path

import pytest
from pydantic import ValidationError

from benkyo.application.config import AppConfig, resolve_config
from benkyo.application.factory import get_card_store, get_review_policy
from benkyo.infrastructure.stores import JsonCardStore, MemoryCardStore


def test_defaults():
    config = resolve_config()
    assert config.store == "json"
    assert config.store_path == Path.home().resolve() / ".local/share/benkyo/cards.json"
    assert (config.good_growth, config.easy_growth, config.sticky_learned) == (2, 3, True)
    assert config.log_level == "INFO"


def test_env_overrides_defaults(monkeypatch):
    monkeypatch.setenv("BENKYO_STORE", "memory")
    monkeypatch.setenv("BENKYO_STICKY_LEARNED", "false")
    monkeypatch.setenv("BENKYO_LOG_LEVEL", "debug")

    config = resolve_config()

    assert config.store == "memory"
    assert config.sticky_learned is False
    assert config.log_level == "DEBUG"


def test_cli_overrides_win_and_none_is_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv("BENKYO_STORE", "memory")

    config = resolve_config({"store": "json", "store_path": tmp_path / "x.json", "port": None})

    assert config.store == "json"
    assert config.store_path == (tmp_path / "x.json").resolve()
    assert config.port == 8777


def test_toml_file_is_lowest_priority(monkeypatch, tmp_path):
    cfg = tmp_path / "config.toml"
    cfg.write_text('store = "memory"\ngood_growth = 3\neasy_growth = 4\n', encoding="utf-8")
    monkeypatch.setattr("benkyo.application.config.CONFIG_FILES", [tmp_path / "missing.toml", cfg])
    monkeypatch.setenv("BENKYO_EASY_GROWTH", "5")

    config = resolve_config()

    assert config.store == "memory"
    assert config.good_growth == 3
    assert config.easy_growth == 5


def test_growth_order_is_validated():
    with pytest.raises(ValidationError, match="good_growth and easy_growth"):
        AppConfig(good_growth=4, easy_growth=3)


def test_factory_selects_store(tmp_path):
    assert isinstance(get_card_store(resolve_config({"store": "memory"})), MemoryCardStore)

    store = get_card_store(resolve_config({"store_path": tmp_path / "cards.json"}))
    assert isinstance(store, JsonCardStore)
    assert store.path == (tmp_path / "cards.json").resolve()


def test_factory_builds_policy():
    policy = get_review_policy(resolve_config({"good_growth": 3, "easy_growth": 3, "sticky_learned": False}))
    assert (policy.good_growth, policy.easy_growth, policy.sticky_learned) == (3, 3, False)
