from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from procmon_stats.analytics.engine import analyze
from procmon_stats.config.loader import ConfigError, resolve_config
from procmon_stats.logging.init import log_summary, set_debug, setup_logging
from procmon_stats.models.config_models import AppConfig
from procmon_stats.services.orchestrator import ProcessingError, process_all
from procmon_stats.services.summary import render_summary_line, report_to_dict

"""CLI entrypoint.

Flow:
- Load .env (PROCMON_STATS_CONFIG may point at the config file)
- Load config (explicit --config > env var > config/procmon_stats.yml > defaults)
- Process every input file / directory
- Run analytics over the merged counters
- Print the SUMMARY line, optionally write the JSON report

Exit codes: 0 all files succeeded, 2 at least one file failed,
1 fatal (bad config, no input files).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path) -> None:
    """Load .env using python-dotenv (existing environment wins)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="procmon-stats",
        description="Stream Procmon CSV exports into aggregate statistics and risk analytics",
    )
    p.add_argument("files", nargs="*", type=Path, help="CSV files or directories of CSV files")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument("--output-dir", type=Path, default=None, help="Write cleaned / success-archive CSVs here")
    p.add_argument("--logs-dir", type=Path, default=None, help="Directory for the JSON Lines error log")
    p.add_argument("--json", dest="json_path", type=Path, default=None, help="Write the full report as JSON")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _with_output_dir(cfg: AppConfig, output_dir: Path | None) -> AppConfig:
    if output_dir is None:
        return cfg
    pp = dataclasses.replace(cfg.post_processing, output_directory=str(output_dir))
    return dataclasses.replace(cfg, post_processing=pp)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # 空リスト [] を渡された場合に sys.argv を読まないよう None のみ判定
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = _with_output_dir(resolve_config(args.config), args.output_dir)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if not args.files:
        logger.error("no input files given")
        return EXIT_FATAL

    try:
        result = process_all(args.files, cfg, logs_dir=args.logs_dir)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    for fr in result.file_results or []:
        if not fr.success:
            logger.error(f"file={fr.file_name} {fr.error}")

    analytics = analyze(
        result.counters,
        total_events=result.records_seen,
        duration_seconds=result.elapsed_seconds,
        config=cfg.analytics,
        benign_results=cfg.post_processing.benign_results,
    )
    for line in analytics.insights:
        logger.info(line)
    for line in analytics.recommendations:
        logger.info(f"recommendation: {line}")

    if args.json_path is not None:
        args.json_path.parent.mkdir(parents=True, exist_ok=True)
        args.json_path.write_text(
            json.dumps(report_to_dict(result, analytics), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info(f"report written to {args.json_path}")

    total_files = result.success_files + result.failed_files
    summary_line = render_summary_line(total_files, result, analytics)
    # log_summary が "SUMMARY " ラベルを付与するため除去
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
