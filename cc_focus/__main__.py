#!/usr/bin/env python3
"""CLI entry point for the cc-focus daemon.

Starts the event socket listener, session state machine and dead-session
reaper on one asyncio loop.

Usage:
    python -m cc_focus [OPTIONS]
    cc-focus [OPTIONS]

Options:
    --socket PATH           Event socket path (default: /tmp/cc-focus-$UID.sock)
    --lock-file PATH        Instance marker (default: /tmp/cc-focus-$UID.pid)
    --snapshot PATH         Session snapshot JSON for widgets
    --no-snapshot           Do not write a snapshot file
    --orphan-window SECS    Resume orphan suppression window (default: 5)
    --reap-interval SECS    Dead-process sweep interval (default: 30)
    --verbose               Enable verbose logging
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from . import __version__
from .config import FocusConfig


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="cc-focus",
        description="cc-focus - Track which coding-assistant sessions are working or waiting for input",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Start with default settings
    cc-focus

    # Custom socket, no snapshot file
    cc-focus --socket $XDG_RUNTIME_DIR/cc-focus.sock --no-snapshot

Environment Variables:
    CC_FOCUS_SOCKET         Override socket path
    CC_FOCUS_LOCK_FILE      Override instance marker path
    CC_FOCUS_SNAPSHOT       Override snapshot path
    CC_FOCUS_ORPHAN_WINDOW  Override orphan window (5 seconds)
    CC_FOCUS_REAP_INTERVAL  Override reap interval (30 seconds)
    CC_FOCUS_MAX_MESSAGE    Override per-message size limit (1 MiB)
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument("--socket", type=Path, default=None, help="Event socket path")
    parser.add_argument("--lock-file", type=Path, default=None, help="Instance marker path")
    parser.add_argument("--snapshot", type=Path, default=None, help="Snapshot JSON path")
    parser.add_argument(
        "--no-snapshot",
        action="store_true",
        help="Do not write the snapshot JSON file",
    )
    parser.add_argument(
        "--orphan-window",
        type=float,
        default=None,
        help="Seconds within which a resumed session replaces same-cwd sessions (default: 5)",
    )
    parser.add_argument(
        "--reap-interval",
        type=float,
        default=None,
        help="Seconds between dead-process sweeps (default: 30)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def build_config(args: argparse.Namespace) -> FocusConfig:
    """Layer command-line flags over the environment config.

    Raises:
        pydantic.ValidationError: A value is out of range
    """
    config = FocusConfig.from_env()
    overrides = {}
    if args.socket is not None:
        overrides["socket_path"] = args.socket
    if args.lock_file is not None:
        overrides["lock_path"] = args.lock_file
    if args.snapshot is not None:
        overrides["snapshot_path"] = args.snapshot
    if args.no_snapshot:
        overrides["snapshot_path"] = None
    if args.orphan_window is not None:
        overrides["orphan_window_sec"] = args.orphan_window
    if args.reap_interval is not None:
        overrides["reap_interval_sec"] = args.reap_interval
    return FocusConfig(**{**config.model_dump(), **overrides})


async def main_async(config: FocusConfig) -> int:
    """Async main entry point."""
    from .daemon import FocusDaemon

    logger = logging.getLogger("cc-focus")
    logger.info(f"Starting cc-focus v{__version__}")
    logger.info(f"Event socket: {config.socket_path}")

    daemon = FocusDaemon(config)

    loop = asyncio.get_running_loop()

    def handle_signal(signum: int) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        daemon.request_shutdown()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda s=sig: handle_signal(s))

    return await daemon.run()


def main() -> None:
    """Main entry point."""
    args = parse_args()
    setup_logging(args.verbose)

    try:
        config = build_config(args)
    except ValidationError as e:
        logging.getLogger("cc-focus").error(f"Invalid configuration: {e}")
        sys.exit(1)

    try:
        exit_code = asyncio.run(main_async(config))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
