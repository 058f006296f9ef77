from __future__ import annotations

import argparse
import json
import os
from dataclasses import asdict
from pathlib import Path

import yaml
from dotenv import load_dotenv

from . import __version__
from .core.config import DATA_DIR_ENV, Config, load_config
from .core.log import get_logger, setup_logging
from .poll.run import report_summary, run as poll_run

load_dotenv()


def _load(args: argparse.Namespace) -> Config:
    cfg = load_config(args.params, data_dir=args.data_dir)
    if args.only:
        cfg = cfg.only(args.only)
    return cfg


def _cmd_run(args: argparse.Namespace) -> int:
    setup_logging(args.log_level)
    logger = get_logger()
    logger.info("Starting catalog sniper...")
    try:
        report = poll_run(_load(args))
        ok = report_summary(report)
    except Exception as exc:  # noqa: BLE001
        logger.error("Catalog sniper error: %s", exc)
        logger.debug("Traceback", exc_info=True)
        return 1

    if ok:
        logger.info("Catalog sniper completed successfully")
        return 0
    logger.info("Catalog sniper completed with some errors")
    return 1


def _cmd_sources(args: argparse.Namespace) -> int:
    try:
        cfg = _load(args)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        get_logger().error("Cannot load sources: %s", exc)
        return 1
    payload = {
        "data_dir": str(cfg.data_dir),
        "fetch": asdict(cfg.fetch),
        "sources": [
            {**asdict(s), "path": str(cfg.output_path(s.output_file))}
            for s in cfg.sources
        ],
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _cmd_version(_: argparse.Namespace) -> int:
    print(__version__)
    return 0


def _add_config_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--params",
        type=Path,
        help="Path to a sources YAML file (defaults to the bundled table).",
    )
    p.add_argument(
        "--data-dir",
        default=os.getenv(DATA_DIR_ENV),
        help="Directory that relative output files are written to.",
    )
    p.add_argument(
        "--only",
        nargs="+",
        metavar="FILE",
        help="Process only these output files (e.g. EmoteSniper.json).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catalog-sniper",
        description="Poll catalog search endpoints and merge new items into JSON snapshots.",
    )
    # Bare invocation behaves like `run`
    parser.set_defaults(
        func=_cmd_run,
        params=None,
        data_dir=os.getenv(DATA_DIR_ENV),
        only=None,
        log_level="INFO",
    )
    sub = parser.add_subparsers(dest="cmd")

    p_run = sub.add_parser("run", help="Fetch all sources and update output files")
    _add_config_args(p_run)
    p_run.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    p_run.set_defaults(func=_cmd_run)

    p_sources = sub.add_parser("sources", help="Print the resolved source table")
    _add_config_args(p_sources)
    p_sources.set_defaults(func=_cmd_sources)

    p_ver = sub.add_parser("version", help="Print version")
    p_ver.set_defaults(func=_cmd_version)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    result = args.func(args)
    return 0 if result is None else int(result)


if __name__ == "__main__":
    raise SystemExit(main())
