"""cc-focus: live status monitor for coding-assistant sessions.

A small daemon that receives hook events from coding-assistant sessions over a
per-user Unix socket and keeps a deduplicated view of which sessions are
working and which are waiting for input.
"""

__version__ = "1.0.0"
