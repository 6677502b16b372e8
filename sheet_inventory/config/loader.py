from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load YAML config (default: config/inventory.yml)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults for optional keys
- Let environment variables override the data-source id, access key and
  webhook URL (.env is loaded by the CLI before this runs)
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/inventory.yml")

ENV_SHEET_ID = "INVENTORY_SHEET_ID"
ENV_API_KEY = "INVENTORY_SHEETS_API_KEY"
ENV_WEBHOOK_URL = "INVENTORY_WEBHOOK_URL"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class InventoryConfig:
    sheet_id: str
    webhook_url: str
    sheet_range: str = "A1:Z"
    api_key: str | None = None
    source_name: str = "Retailer Portal"
    refresh_interval_seconds: float = 30.0
    critical_stock_level: float = 10.0
    request_timeout_seconds: float = 30.0


def _validate_config_schema(data: dict) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails validation (unknown keys, wrong types, missing
            webhook_url).
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


def _env_or(environ: Mapping[str, str], key: str, fallback: str | None) -> str | None:
    value = environ.get(key)
    if value is not None and value.strip():
        return value.strip()
    return fallback


def load_config(path: Path = DEFAULT_CONFIG_PATH, environ: Mapping[str, str] | None = None) -> InventoryConfig:
    if environ is None:
        environ = os.environ
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    # 環境変数が設定ファイルより優先
    sheet_id = _env_or(environ, ENV_SHEET_ID, data.get("sheet_id"))
    api_key = _env_or(environ, ENV_API_KEY, data.get("api_key"))
    webhook_url = _env_or(environ, ENV_WEBHOOK_URL, data["webhook_url"])

    if not sheet_id or not str(sheet_id).strip():
        raise ConfigError(f"sheet id is missing (set sheet_id or {ENV_SHEET_ID})")

    return InventoryConfig(
        sheet_id=str(sheet_id).strip(),
        webhook_url=str(webhook_url),
        sheet_range=data.get("sheet_range", "A1:Z"),
        api_key=api_key.strip() if api_key else None,
        source_name=data.get("source_name", "Retailer Portal"),
        refresh_interval_seconds=float(data.get("refresh_interval_seconds", 30)),
        critical_stock_level=float(data.get("critical_stock_level", 10)),
        request_timeout_seconds=float(data.get("request_timeout_seconds", 30)),
    )
