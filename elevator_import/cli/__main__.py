from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from elevator_import.api.client import ApiAuthError, ElevatorApiClient
from elevator_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from elevator_import.db.connection import db_cursor
from elevator_import.db.store import INSERT_COLUMNS, ElevatorStore, StoreError
from elevator_import.logging.error_log import ErrorLogBuffer
from elevator_import.logging.init import log_summary, set_debug, setup_logging
from elevator_import.models.config_models import ImportConfig
from elevator_import.parsing.labels import build_label_table
from elevator_import.services.mapper import map_blocks
from elevator_import.services.orchestrator import (
    FailureRecorder,
    ImportOptions,
    ImportRunError,
    parse_blocks,
    read_input,
    run_import,
)
from elevator_import.services.sinks import DirectStoreSink, RemoteApiSink
from elevator_import.services.summary import render_detail_lines, render_summary_line

"""CLI entrypoint: elevator address text file -> PostgreSQL / REST service.

Usage:
    elevator-import --file=adrese.txt [--dry-run] [--range-expand] [--wipe]
    elevator-import --file=adrese.txt --api-base=https://host/api
        --api-email=user@example.com --api-password=secret [--range-expand] [--wipe]

Exit codes:
    0  run completed (dry-run and per-record errors included)
    1  fatal startup error (missing file / credentials, config, store or
       service unreachable, API login failed)
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so its DB / API settings win over the inherited environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Elevator address text -> installation records importer")
    p.add_argument("--file", help="Input text file with elevator address blocks")
    p.add_argument("--dry-run", action="store_true", help="Parse and report without writing")
    p.add_argument("--range-expand", action="store_true", help="Expand 'A ... B' code ranges")
    p.add_argument("--wipe", action="store_true", help="Delete ALL existing elevators first")
    p.add_argument("--api-base", help="Base URL of the REST service (enables API mode)")
    p.add_argument("--api-email", help="Login e-mail for API mode")
    p.add_argument("--api-password", help="Login password for API mode")
    p.add_argument("--config", help=f"YAML config (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print parsed records then exit")
    return p.parse_args(argv)


def _resolve_config(config_arg: str | None) -> ImportConfig:
    # 明示指定が無く既定パスも無ければ既定値で動かす
    if config_arg is None and not DEFAULT_CONFIG_PATH.exists():
        return ImportConfig()
    return load_config(Path(config_arg) if config_arg else DEFAULT_CONFIG_PATH)


def _inspect_data(text: str, args: argparse.Namespace, cfg: ImportConfig, label_table) -> int:
    blocks = parse_blocks(
        text,
        range_expand=args.range_expand,
        range_limit=cfg.range_expand_limit,
        label_table=label_table,
    )
    records = list(
        map_blocks(
            blocks,
            status=cfg.defaults.status,
            service_interval_months=cfg.defaults.service_interval_months,
        )
    )
    print(f"blocks={len(blocks)} records={len(records)}")
    if not records:
        return EXIT_SUCCESS
    df = pd.DataFrame.from_records([r.to_row() for r in records], columns=list(INSERT_COLUMNS))
    df = df.drop(columns=["notes", "status", "service_interval_months"])
    with pd.option_context("display.max_columns", None, "display.width", 200):
        print(df.to_string(index=False))
    dupes = df[df.duplicated("unit_code", keep="first")]["unit_code"].tolist()
    if dupes:
        print("repeated unit codes: " + ", ".join(dupes))
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # 空リスト [] はそのまま使う (None のときのみ sys.argv を読む)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if not args.file:
        logger.error("missing --file argument")
        return EXIT_FATAL
    input_path = Path(args.file)
    try:
        text = read_input(input_path, cfg.encoding)
    except ImportRunError as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL

    label_table = build_label_table(cfg.label_aliases)

    if args.inspect_data:
        return _inspect_data(text, args, cfg, label_table)

    options = ImportOptions(
        dry_run=args.dry_run,
        range_expand=args.range_expand,
        wipe=args.wipe,
        range_limit=cfg.range_expand_limit,
    )
    recorder = FailureRecorder(ErrorLogBuffer(), input_path.name)

    if args.api_base:
        if not args.api_email or not args.api_password:
            logger.error("API mode requires --api-email and --api-password")
            return EXIT_FATAL
        logger.info(f"API mode active -> {args.api_base}")
        with ElevatorApiClient(args.api_base, timeout=cfg.api.timeout_seconds) as client:
            try:
                client.login(args.api_email, args.api_password)
            except ApiAuthError as e:
                logger.error(f"API login failed: {e}")
                return EXIT_FATAL
            logger.info("Logged in (API mode)")
            sink = RemoteApiSink(
                client,
                dry_run=args.dry_run,
                body_preview_chars=cfg.api.body_preview_chars,
                on_failure=recorder,
            )
            report = run_import(
                text,
                sink,
                options,
                defaults=cfg.defaults,
                label_table=label_table,
                recorder=recorder,
            )
    else:
        try:
            with db_cursor(cfg.database, commit=not args.dry_run) as cur:
                logger.info("database connected")
                store = ElevatorStore(cur, cfg.table)
                sink = DirectStoreSink(store, dry_run=args.dry_run, on_failure=recorder)
                report = run_import(
                    text,
                    sink,
                    options,
                    defaults=cfg.defaults,
                    label_table=label_table,
                    recorder=recorder,
                )
        except StoreError as e:
            logger.error(f"database: {e}")
            return EXIT_FATAL
        except ImportRunError as e:
            logger.error(f"processing: {e}")
            return EXIT_FATAL

    summary_line = render_summary_line(report)
    # log_summary が "SUMMARY " ラベルを付与するため先頭を除去
    log_summary(summary_line[len("SUMMARY "):])
    for level, line in render_detail_lines(report):
        logger.log(level, line)
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
