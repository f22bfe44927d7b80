"""App configuration loading helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import tomllib

from pydantic import BaseModel, Field

from .listing import DEFAULT_USER_AGENT, LOCAL_CONNECTION_DEBUGGING_TIPS, DatabaseLister
from .models import AccountDescriptor

LOG = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".config" / "mongoui" / "config.toml"


class AccountConfig(BaseModel):
    """Account entry stored in config.toml."""

    name: str
    connection_string: str
    account_name: str | None = None
    is_emulator: bool = False

    def to_descriptor(self) -> AccountDescriptor:
        return AccountDescriptor(
            connection_string=self.connection_string,
            account_name=self.account_name,
            is_emulator=self.is_emulator,
            label=self.name,
        )


class AppConfig(BaseModel):
    """Shape of the application configuration file."""

    app_name: str = DEFAULT_USER_AGENT
    emulator_debugging_link: str = LOCAL_CONNECTION_DEBUGGING_TIPS
    emulator_allow_invalid_certificates: bool = True
    accounts: list[AccountConfig] = Field(default_factory=lambda: list(_default_accounts()))

    def account(self, name: str) -> AccountConfig:
        for entry in self.accounts:
            if entry.name == name:
                return entry
        raise ValueError(f"Account '{name}' not found.")

    def with_account(self, account: AccountConfig) -> AppConfig:
        """Return a copy with ``account`` added, replacing any entry of the same name."""

        accounts = [entry for entry in self.accounts if entry.name != account.name]
        accounts.append(account)
        return self.model_copy(update={"accounts": accounts})

    def without_account(self, name: str) -> AppConfig:
        """Return a copy with the named account removed."""

        accounts = [entry for entry in self.accounts if entry.name != name]
        return self.model_copy(update={"accounts": accounts})

    def build_lister(self) -> DatabaseLister:
        """Create a lister honoring the configured client options."""

        return DatabaseLister(
            user_agent=self.app_name,
            debugging_link=self.emulator_debugging_link,
            emulator_allow_invalid_certificates=self.emulator_allow_invalid_certificates,
        )


def load_config() -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing."""

    try:
        data = _read_config_file()
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError):
        return AppConfig()

    accounts_data = data.get("accounts")
    accounts: list[AccountConfig] | None = None
    if isinstance(accounts_data, list):
        accounts = [
            AccountConfig(**account)
            for account in accounts_data  # type: ignore[list-item]
            if isinstance(account, dict)
        ]

    defaults = AppConfig.model_fields
    return AppConfig(
        app_name=data.get("app_name", defaults["app_name"].default),
        emulator_debugging_link=data.get(
            "emulator_debugging_link", defaults["emulator_debugging_link"].default
        ),
        emulator_allow_invalid_certificates=data.get(
            "emulator_allow_invalid_certificates",
            defaults["emulator_allow_invalid_certificates"].default,
        ),
        accounts=accounts if accounts is not None else list(_default_accounts()),
    )


def save_config(config: AppConfig) -> None:
    """Persist configuration to disk."""

    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = [
        f"app_name = {_quote(config.app_name)}",
        f"emulator_debugging_link = {_quote(config.emulator_debugging_link)}",
        f"emulator_allow_invalid_certificates = {str(config.emulator_allow_invalid_certificates).lower()}",
    ]
    if config.accounts:
        lines.append("")
        for account in config.accounts:
            lines.append("[[accounts]]")
            lines.append(f"name = {_quote(account.name)}")
            lines.append(f"connection_string = {_quote(account.connection_string)}")
            if account.account_name:
                lines.append(f"account_name = {_quote(account.account_name)}")
            if account.is_emulator:
                lines.append("is_emulator = true")
            lines.append("")
    CONFIG_FILE.write_text("\n".join(lines) + "\n")


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _read_config_file() -> dict[str, object]:
    with CONFIG_FILE.open("rb") as handle:
        raw = tomllib.load(handle)
    data: dict[str, object] = {}
    if isinstance(raw, dict):
        for key in ("app_name", "emulator_debugging_link"):
            value = raw.get(key)
            if isinstance(value, str) and value:
                data[key] = value
        allow_invalid = raw.get("emulator_allow_invalid_certificates")
        if isinstance(allow_invalid, bool):
            data["emulator_allow_invalid_certificates"] = allow_invalid
        accounts = raw.get("accounts")
        if isinstance(accounts, list):
            parsed_accounts: list[dict[str, object]] = []
            for account in accounts:
                if not isinstance(account, dict):
                    continue
                parsed: dict[str, object] = {}
                for key in ("name", "connection_string", "account_name"):
                    value = account.get(key)
                    if isinstance(value, str):
                        parsed[key] = value
                is_emulator = account.get("is_emulator")
                if isinstance(is_emulator, bool):
                    parsed["is_emulator"] = is_emulator
                if parsed.get("name") and "connection_string" in parsed:
                    parsed_accounts.append(parsed)
            parsed_accounts = _dedupe_accounts(parsed_accounts)
            if parsed_accounts:
                data["accounts"] = parsed_accounts
    return data


def _dedupe_accounts(accounts: list[dict[str, object]]) -> list[dict[str, object]]:
    """Keep the last entry for each account name, in first-seen order."""

    by_name: dict[object, dict[str, object]] = {}
    for account in accounts:
        name = account["name"]
        if name in by_name:
            LOG.warning("Duplicate account '%s' in config; using the last entry", name)
        by_name[name] = account
    return list(by_name.values())


def _default_accounts() -> tuple[AccountConfig, ...]:
    """Default accounts shown on first run before config is customized."""

    return (
        AccountConfig(
            name="Local Emulator",
            connection_string="mongodb://localhost:10255/?ssl=true",
            is_emulator=True,
        ),
    )


__all__ = ["AccountConfig", "AppConfig", "CONFIG_FILE", "load_config", "save_config"]
