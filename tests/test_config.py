from pathlib import Path

import pytest

from brodeploy.config.loader import config_section, load_config
from brodeploy.config.settings import DEFAULT_SETTLE_DELAY, Settings
from brodeploy.exceptions import ConfigError, ConfigNotFoundError

from conftest import ADMIN, make_config, write_config


def test_missing_config_names_the_file(tmp_path):
    with pytest.raises(ConfigNotFoundError) as exc:
        load_config("columbus-5", tmp_path)

    assert exc.value.path == tmp_path / "columbus-5.json"
    assert "columbus-5.json" in str(exc.value)


def test_load_config_parses_json(tmp_path):
    write_config(tmp_path, make_config(), network="bombay-12")

    config = load_config("bombay-12", tmp_path)

    assert config["deployToken"] is True
    assert config["bbro_token"]["symbol"] == "bBRO"


def test_config_must_be_an_object(tmp_path):
    (tmp_path / "bombay-12.json").write_text("[1, 2]")

    with pytest.raises(ConfigError):
        load_config("bombay-12", tmp_path)


def test_config_section_returns_a_copy():
    config = make_config()

    section = config_section(config, "bbro_minter")
    section["whitelist"].append("x")

    assert config["bbro_minter"]["whitelist"] == []


def test_config_section_missing():
    with pytest.raises(ConfigError, match="token_pool"):
        config_section({"airdrop": {}}, "token_pool")


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("CHAINID", "bombay-12")
    monkeypatch.setenv("ADMIN_ADDRESS", ADMIN)
    monkeypatch.setenv("MNEMONIC", "word " * 24)
    monkeypatch.setenv("LCD", "https://bombay-lcd.terra.dev")
    monkeypatch.setenv("SETTLE_DELAY", "0.5")
    monkeypatch.delenv("WASM_DIR", raising=False)

    settings = Settings.from_env(config_dir=Path("cfg"))

    assert settings.network_id == "bombay-12"
    assert settings.lcd_url == "https://bombay-lcd.terra.dev"
    assert settings.settle_delay == 0.5
    assert settings.config_dir == Path("cfg")
    assert not settings.uses_local_terra


def test_settings_default_to_local_terra(monkeypatch):
    monkeypatch.setenv("CHAINID", "localterra")
    monkeypatch.setenv("ADMIN_ADDRESS", ADMIN)
    for name in ("MNEMONIC", "LCD", "SETTLE_DELAY"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.uses_local_terra
    assert settings.settle_delay == DEFAULT_SETTLE_DELAY


def test_settings_require_chain_id_and_admin(monkeypatch):
    monkeypatch.delenv("CHAINID", raising=False)
    monkeypatch.delenv("ADMIN_ADDRESS", raising=False)

    with pytest.raises(ConfigError, match="CHAINID, ADMIN_ADDRESS"):
        Settings.from_env()


def test_settings_mnemonic_needs_lcd(monkeypatch):
    monkeypatch.setenv("CHAINID", "bombay-12")
    monkeypatch.setenv("ADMIN_ADDRESS", ADMIN)
    monkeypatch.setenv("MNEMONIC", "word " * 24)
    monkeypatch.delenv("LCD", raising=False)

    with pytest.raises(ConfigError, match="LCD"):
        Settings.from_env()
