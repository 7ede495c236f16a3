"""Command-line entry point.

    jorei-crawler --output output --index index.jsonl --start 2022-01-01 \
        --end 2022-12-31 --rows 50 --sleep-time 500
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from .config import DEFAULT_CONFIG_PATH, CrawlConfig, load_config
from .errors import ConfigError, CrawlError
from .logger_config import configure_logging
from .pipeline import run_crawl


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jorei-crawler",
        description="Save ordinances listed on jorei.slis.doshisha.ac.jp to local JSON files.",
    )
    parser.add_argument("-o", "--output", help="directory for one JSON file per ordinance")
    parser.add_argument("-i", "--index", help="JSON Lines index of every saved ordinance")
    parser.add_argument("-s", "--start", help="first announcement date, YYYY-MM-DD or YYYY")
    parser.add_argument("-e", "--end", help="last announcement date, YYYY-MM-DD or YYYY")
    parser.add_argument(
        "-r", "--rows", type=int, help="ordinances per listing request (default 50)"
    )
    parser.add_argument(
        "--sleep-time", type=int, help="pause between requests in milliseconds (default 500)"
    )
    parser.add_argument(
        "-c", "--config", type=Path,
        help=f"JSON config file, {DEFAULT_CONFIG_PATH} when present; flags override it",
    )
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-dir", type=Path, help="also write rotating log files here")
    parser.add_argument("--no-progress", action="store_true", help="hide the progress bar")
    return parser


def config_from_args(args: argparse.Namespace) -> CrawlConfig:
    overrides: Dict[str, Any] = {
        "output_dir": args.output,
        "index_path": args.index,
        "start_date": args.start,
        "end_date": args.end,
        "rows": args.rows,
        "sleep_time_ms": args.sleep_time,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if args.no_progress:
        overrides["show_progress"] = False
    if args.config is not None or DEFAULT_CONFIG_PATH.exists():
        return load_config(args.config, overrides)
    return CrawlConfig.from_dict(overrides)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_dir)
    try:
        config = config_from_args(args)
    except ConfigError as exc:
        logger.error("invalid configuration: {}", exc)
        return 2
    try:
        summary = run_crawl(config)
    except CrawlError as exc:
        logger.error("crawl aborted: {}", exc)
        return 1
    if summary.stopped_on_duplicate:
        logger.info("listing started repeating, stopped early")
    logger.info("all done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
