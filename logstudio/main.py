#!/usr/bin/env python3
"""
LogStudio - Main Entry Point
Run the log viewer terminal UI
"""
import argparse
import logging
import sys
from typing import List, Optional

from logstudio.config.settings import SettingsStore, load_settings
from logstudio.log_analysis.app_logging import configure_logging
from logstudio.UI.app import run_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="logstudio", description="Structured log viewer")
    parser.add_argument("paths", nargs="*", help="log files to open")
    parser.add_argument("--dir", dest="log_directory", help="directory to list log files from")
    parser.add_argument("--merge", action="store_true",
                        help="show all given files as one timeline ordered by timestamp")
    parser.add_argument("--settings", help="settings file (default: ~/.logstudio/settings.json)")
    parser.add_argument("--debug", action="store_true", help="verbose application log")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(level=logging.DEBUG if args.debug else logging.INFO)
    logger = logging.getLogger(__name__)

    store = SettingsStore(args.settings) if args.settings else None
    settings = load_settings(store)
    if args.log_directory:
        settings = settings.model_copy(update={'log_directory': args.log_directory})

    logger.info("Starting LogStudio (%d files, merge=%s)", len(args.paths), args.merge)
    try:
        run_app(settings, args.paths, args.merge)
    except KeyboardInterrupt:
        print("\nLogStudio terminated by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
