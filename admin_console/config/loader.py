from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load YAML config (default config/admin.yml)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults for every optional key

Environment variables (ADMIN_API_BASE_URL, ADMIN_API_TOKEN) are read by the
components that use them, at use time, not here.
"""

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "ApiConfig",
    "AppConfig",
    "ConfigError",
    "ImportSettings",
    "PayoutSettings",
    "SessionSettings",
    "load_config",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/admin.yml")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ApiConfig:
    base_url: str | None = None  # ADMIN_API_BASE_URL が優先
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class ImportSettings:
    max_rows: int = 1000
    max_reported_errors: int = 100
    resolve_users: bool = False  # True: client-side email -> user id check before submit


@dataclass(frozen=True)
class SessionSettings:
    ttl_seconds: float = 60.0


@dataclass(frozen=True)
class PayoutSettings:
    poll_interval_seconds: float = 10.0


@dataclass(frozen=True)
class AppConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    imports: ImportSettings = field(default_factory=ImportSettings)
    session: SessionSettings = field(default_factory=SessionSettings)
    payouts: PayoutSettings = field(default_factory=PayoutSettings)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not JSON, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    api_raw = data.get("api") or {}
    import_raw = data.get("import") or {}
    session_raw = data.get("session") or {}
    payouts_raw = data.get("payouts") or {}
    return AppConfig(
        api=ApiConfig(
            base_url=api_raw.get("base_url"),
            timeout_seconds=float(api_raw.get("timeout_seconds", 30.0)),
        ),
        imports=ImportSettings(
            max_rows=int(import_raw.get("max_rows", 1000)),
            max_reported_errors=int(import_raw.get("max_reported_errors", 100)),
            resolve_users=bool(import_raw.get("resolve_users", False)),
        ),
        session=SessionSettings(ttl_seconds=float(session_raw.get("ttl_seconds", 60.0))),
        payouts=PayoutSettings(
            poll_interval_seconds=float(payouts_raw.get("poll_interval_seconds", 10.0)),
        ),
    )
