"""Tests for AppConfig helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from mongoui import config as config_module
from mongoui.config import AccountConfig, AppConfig, load_config, save_config
from mongoui.listing import LOCAL_CONNECTION_DEBUGGING_TIPS
from mongoui.models import AccountDescriptor


def test_defaults_include_local_emulator() -> None:
    config = AppConfig()

    assert config.emulator_debugging_link == LOCAL_CONNECTION_DEBUGGING_TIPS
    assert config.emulator_allow_invalid_certificates is True
    assert config.accounts[0].is_emulator is True


def test_load_config_returns_defaults_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.toml")

    result = load_config()

    assert result == AppConfig()


def test_load_config_reads_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
app_name = "my-agent"
emulator_allow_invalid_certificates = false

[[accounts]]
name = "Contoso"
connection_string = "mongodb://user:pw@contoso:10255/?ssl=true"
account_name = "contoso"

[[accounts]]
name = "Broken"

[[accounts]]
name = "Emulator"
connection_string = "mongodb://localhost:10255/"
is_emulator = true
"""
    )
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result.app_name == "my-agent"
    assert result.emulator_allow_invalid_certificates is False
    assert result.emulator_debugging_link == LOCAL_CONNECTION_DEBUGGING_TIPS
    assert [account.name for account in result.accounts] == ["Contoso", "Emulator"]
    assert result.accounts[0].account_name == "contoso"
    assert result.accounts[1].is_emulator is True


def test_load_config_handles_toml_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("app_name = [unterminated")
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result == AppConfig()


def test_save_config_round_trips(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "nested" / "config.toml"
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)
    config = AppConfig(
        app_name="agent",
        accounts=[
            AccountConfig(
                name='Quoted "Account"',
                connection_string="mongodb://user:pw@host/?ssl=true",
                account_name="acct",
                is_emulator=True,
            )
        ],
    )

    save_config(config)

    content = config_path.read_text()
    assert "[[accounts]]" in content
    assert "is_emulator = true" in content
    assert load_config() == config


def test_account_helpers() -> None:
    config = AppConfig(accounts=[])
    account = AccountConfig(name="A", connection_string="mongodb://a/", account_name="acct")

    updated = config.with_account(account)

    assert updated.account("A") == account
    assert updated.account("A").to_descriptor() == AccountDescriptor(
        connection_string="mongodb://a/", account_name="acct", is_emulator=False, label="A"
    )
    assert updated.without_account("A").accounts == []
    with pytest.raises(ValueError):
        updated.account("B")


def test_load_config_keeps_last_duplicate_account(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
[[accounts]]
name = "Contoso"
connection_string = "mongodb://old/"

[[accounts]]
name = "Other"
connection_string = "mongodb://other/"

[[accounts]]
name = "Contoso"
connection_string = "mongodb://new/"
"""
    )
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    with caplog.at_level(logging.WARNING, logger="mongoui.config"):
        result = load_config()

    assert [account.name for account in result.accounts] == ["Contoso", "Other"]
    assert result.account("Contoso").connection_string == "mongodb://new/"
    assert "Duplicate account 'Contoso'" in caplog.text
