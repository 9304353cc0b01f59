"""Console entry point for mpegflow."""
from __future__ import annotations

import argparse
import sys
from typing import List, NoReturn

import yaml
from loguru import logger
from pydantic import ValidationError

from .config import AppConfig, load_config
from .extract import run_extract

USAGE = """\
Usage: mpegflow [--raw | [[--grid8x8] [--occupancy]]] videoPath
  --help and -h will output this help message.
  --raw will prevent motion vectors from being arranged in matrices.
  --grid8x8 will force fine 8x8 grid.
  --occupancy will append occupancy matrix after motion vector matrices.
  --quiet will suppress debug output.
  --config PATH reads defaults from a YAML file.
  --gap-fill {none,dummy} pads PTS gaps with empty frames (default none).
  --progress shows a progress bar on stderr.
  --verbose enables debug logging.
"""


class _UsageParser(argparse.ArgumentParser):
    def format_usage(self) -> str:
        return USAGE

    def format_help(self) -> str:
        return USAGE

    def error(self, message: str) -> NoReturn:
        sys.stderr.write(USAGE)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _configure_logging(quiet: bool, verbose: bool) -> None:
    logger.remove()
    if quiet:
        level = "ERROR"
    elif verbose:
        level = "DEBUG"
    else:
        level = "INFO"
    logger.add(sys.stderr, level=level)


def build_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(prog="mpegflow", add_help=False)
    parser.add_argument("video", nargs="?")
    parser.add_argument("-h", "--help", action="store_true")
    parser.add_argument("--raw", action="store_true")
    parser.add_argument("--grid8x8", action="store_true")
    parser.add_argument("--occupancy", action="store_true")
    parser.add_argument("-q", "--quiet", action="store_true")
    parser.add_argument("--config")
    parser.add_argument("--gap-fill", dest="gap_fill", choices=["none", "dummy"])
    parser.add_argument("--progress", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    return parser


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    if args.raw:
        config.output.raw = True
    if args.grid8x8:
        config.arrange.grid_step = 8
    if args.occupancy:
        config.arrange.occupancy = True
    if args.quiet:
        config.decoder.quiet = True
    if args.progress:
        config.decoder.progress = True
    if args.gap_fill:
        config.arrange.gap_fill = args.gap_fill
    return config


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1
    if args.help or not args.video:
        sys.stderr.write(USAGE)
        return 1
    try:
        config = apply_overrides(load_config(args.config), args)
    except (ValidationError, yaml.YAMLError) as exc:
        _configure_logging(args.quiet, args.verbose)
        logger.error("Invalid configuration in {}: {}", args.config, exc)
        return 1
    _configure_logging(config.quiet, args.verbose)
    if args.config:
        logger.debug("Loaded configuration from {}", args.config)
    return run_extract(config, args.video)


if __name__ == "__main__":
    sys.exit(main())
