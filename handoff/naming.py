"""
naming.py — Design Handoff
==========================
Names for auto-created projects:
  - adopted_project_name()  "Design from <local date and time>"
  - new_design_name()       "New Design #<n>"
"""

import threading
import time
from datetime import datetime

ADOPTED_PREFIX = "Design from "
NEW_DESIGN_PREFIX = "New Design #"

_suffix_lock = threading.Lock()
_last_suffix = 0


def adopted_project_name(now: datetime | None = None) -> str:
    """
    Name for a project built from anonymous work, e.g.
    "Design from 2026-10-19 3:45:12 PM".
    """
    now = now or datetime.now()
    clock = now.strftime("%I:%M:%S %p").lstrip("0")
    return f"{ADOPTED_PREFIX}{now:%Y-%m-%d} {clock}"


def next_design_number() -> int:
    """
    Epoch milliseconds, bumped so that no two calls in this process return
    the same number. Clients are not coordinated with each other.
    """
    global _last_suffix
    with _suffix_lock:
        candidate = time.time_ns() // 1_000_000
        if candidate <= _last_suffix:
            candidate = _last_suffix + 1
        _last_suffix = candidate
        return candidate


def new_design_name() -> str:
    return f"{NEW_DESIGN_PREFIX}{next_design_number()}"
