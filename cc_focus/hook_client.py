#!/usr/bin/env python3
"""Hook-side client for cc-focus.

Assistant hooks run this with the event type as argument and the hook's JSON
payload on stdin:

    cc-focus-send session_start < payload.json

The relevant payload fields are forwarded to the daemon socket as a single
newline-terminated JSON line together with the event type and the pid of the
assistant process (the hook's parent). The client never fails the hook: if
the daemon is not running the event is silently dropped.
"""

import argparse
import json
import logging
import os
import socket
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from . import __version__
from .config import FocusConfig
from .constants import ConfigPaths

logger = logging.getLogger(__name__)

FORWARDED_FIELDS = ("session_id", "cwd", "transcript_path", "source")


class HookClientError(Exception):
    """Event could not be delivered to the daemon."""


def build_event(
    event_type: str,
    payload: Dict[str, Any],
    pid: Optional[int] = None,
) -> Dict[str, Any]:
    """Build the wire event from a hook payload.

    Args:
        event_type: cc-focus event type (session_start, stop, ...)
        payload: Decoded hook stdin payload
        pid: Assistant process id (omitted when None)

    Returns:
        Event dictionary ready to serialize
    """
    event: Dict[str, Any] = {"event_type": event_type}
    for field in FORWARDED_FIELDS:
        value = payload.get(field)
        if isinstance(value, str) and value:
            event[field] = value
    if pid is not None:
        event["pid"] = pid
    return event


def send_event(socket_path: Path, event: Dict[str, Any], timeout: float = 2.0) -> None:
    """Deliver one event to the daemon.

    Args:
        socket_path: Daemon event socket
        event: Event dictionary
        timeout: Connect/send timeout in seconds

    Raises:
        HookClientError: Socket missing, refused, or timed out
    """
    line = (json.dumps(event, separators=(",", ":")) + "\n").encode()
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.settimeout(timeout)
        sock.connect(str(socket_path))
        sock.sendall(line)
    except socket.timeout:
        raise HookClientError(f"Timeout sending to {socket_path}")
    except OSError as e:
        raise HookClientError(f"Socket error: {e}")
    finally:
        sock.close()


def read_payload(stream) -> Dict[str, Any]:
    """Read the hook payload from stdin; anything but a JSON object reads as {}."""
    if stream.isatty():
        return {}
    text = stream.read()
    if not text.strip():
        return {}
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"Ignoring non-JSON hook payload: {e}")
        return {}
    return payload if isinstance(payload, dict) else {}


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="cc-focus-send",
        description="Forward an assistant hook event to the cc-focus daemon",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("event_type", help="Event type (session_start, stop, user_prompt, ...)")
    parser.add_argument(
        "--socket",
        type=Path,
        default=None,
        help="Daemon socket path (default: /tmp/cc-focus-$UID.sock, env: CC_FOCUS_SOCKET)",
    )
    parser.add_argument(
        "--pid",
        type=int,
        default=None,
        help="Assistant process id (default: parent of this process)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log delivery errors")
    return parser.parse_args(argv)


def main(argv: Optional[list] = None) -> int:
    """Entry point for cc-focus-send. Always returns 0."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.CRITICAL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    socket_path = args.socket
    if socket_path is None:
        try:
            socket_path = FocusConfig.from_env().socket_path
        except ValidationError as e:
            logger.error(f"Invalid CC_FOCUS_* environment: {e}")
            socket_path = ConfigPaths.SOCKET_PATH
    pid = args.pid if args.pid is not None else os.getppid()
    event = build_event(args.event_type, read_payload(sys.stdin), pid)

    try:
        send_event(socket_path, event)
        logger.debug(f"Sent {args.event_type} to {socket_path}")
    except HookClientError as e:
        logger.error(f"Event not delivered: {e}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
