from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import ApiConfig, DatabaseConfig, ImportConfig, RecordDefaults

"""Config loader for config/import.yml.

Responsibilities:
- Load YAML
- Validate against config_schema.json (shipped next to this module)
- Apply defaults for every omitted section
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing / not valid JSON, or the
            config data violates it (unknown keys, wrong types ...)
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


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    db_raw = data.get("database", {})
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    api_raw = data.get("api", {})
    api = ApiConfig(
        timeout_seconds=api_raw.get("timeout_seconds", ApiConfig.timeout_seconds),
        body_preview_chars=api_raw.get("body_preview_chars", ApiConfig.body_preview_chars),
    )
    defaults_raw = data.get("defaults", {})
    defaults = RecordDefaults(
        status=defaults_raw.get("status", RecordDefaults.status),
        service_interval_months=defaults_raw.get(
            "service_interval_months", RecordDefaults.service_interval_months
        ),
    )
    return ImportConfig(
        database=db,
        table=data.get("table", "elevators"),
        api=api,
        defaults=defaults,
        label_aliases={k: list(v) for k, v in data.get("label_aliases", {}).items()},
        encoding=data.get("encoding", "utf-8"),
        range_expand_limit=data.get("range_expand_limit", ImportConfig.range_expand_limit),
    )
