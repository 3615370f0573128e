#!/usr/bin/env python3
"""
dataentry CLI entry point with file + console logging
"""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import os
import signal
import sys
import traceback
from pathlib import Path

from dataentry.__version__ import __version__

LOG_FORMAT = '[%(asctime)s] %(levelname)-8s %(name)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
DEFAULT_LOG_FILE = '~/.dataentry.log'


def setup_logging(debug: bool = False, log_file: str | None = None) -> logging.Logger:
    """Setup logging to both console and file

    Args:
        debug: Enable debug level logging
        log_file: Path to log file (default: ~/.dataentry.log)
    """
    import dataentry.log  # noqa: F401  registers TRACE

    logger = logging.getLogger('dataentry')
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    log_file = os.path.expanduser(log_file or DEFAULT_LOG_FILE)
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    fmt = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # File handler (rotate log file when it gets too large)
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10 MB
            backupCount=5,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)
    except OSError as e:
        print(f"Warning: Could not setup file logging: {e}", file=sys.stderr)

    # Console handler (only warnings in production, all in debug)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    console_handler.setFormatter(fmt)
    logger.addHandler(console_handler)

    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dataentry',
        description='Keypad data entry with automatic enter rules',
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode with verbose logging'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to config file (default: ~/.config/dataentry/config.json)'
    )
    parser.add_argument(
        '--logfile',
        type=str,
        default=None,
        help='Path to log file (default: ~/.dataentry.log)'
    )
    parser.add_argument(
        '--headless',
        action='store_true',
        help='Run without the entry window'
    )
    parser.add_argument(
        '--version',
        action='version',
        version='%(prog)s ' + __version__
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for dataentry"""
    args = build_parser().parse_args(argv)

    log = setup_logging(debug=args.debug, log_file=args.logfile)
    log.info("dataentry %s starting (pid %d, debug=%s)", __version__, os.getpid(), args.debug)

    # Import after args parsing to avoid import-time side effects
    from dataentry.app import DataEntryApp

    try:
        app = DataEntryApp(headless=args.headless, debug=args.debug, config_path=args.config)
    except ValueError as e:
        log.error("Invalid configuration: %s", e)
        return 1

    def signal_handler(signum: int, frame) -> None:
        log.info("Received %s, shutting down", signal.Signals(signum).name)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        app.run()
        return 0

    except KeyboardInterrupt:
        log.info("dataentry terminated by user (Ctrl+C)")
        return 0

    except PermissionError as e:
        log.error("Permission error: %s", e)
        log.error("Reading input devices requires membership in the 'input' group:"
                  " sudo usermod -a -G input $USER")
        log.debug(traceback.format_exc())
        return 1

    except OSError as e:
        log.error("OS error: %s", e)
        log.debug(traceback.format_exc())
        return 1

    finally:
        app.stop()
        log.info("dataentry shutdown")


if __name__ == '__main__':
    sys.exit(main())
