from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the elevator importer.

Built by ``elevator_import.config.loader.load_config`` from
config/import.yml. Every section is optional; ``ImportConfig()`` is a valid
all-defaults configuration used when no config file exists.
"""


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection fallback configuration.

    Environment variables (DATABASE_URL / PGDSN / PG*) take precedence over
    these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ApiConfig:
    timeout_seconds: float = 30
    body_preview_chars: int = 300  # エラー時にログへ出すレスポンス本文の最大文字数


@dataclass(frozen=True)
class RecordDefaults:
    status: str = "active"
    service_interval_months: int = 1


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    table: str = "elevators"
    api: ApiConfig = field(default_factory=ApiConfig)
    defaults: RecordDefaults = field(default_factory=RecordDefaults)
    label_aliases: dict[str, list[str]] = field(default_factory=dict)  # field 名 -> 追加ラベル
    encoding: str = "utf-8"  # 入力テキストの文字コード
    range_expand_limit: int = 1000  # --range-expand で展開する 1 範囲あたりの最大コード数
