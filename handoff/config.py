"""
config.py — Design Handoff
==========================
Environment-driven settings and logging setup shared by the API server and the CLI.
"""

import logging
import os
import pathlib

from dotenv import load_dotenv

_ROOT = pathlib.Path(__file__).resolve().parents[1]
load_dotenv(_ROOT / ".env")

LOG_LEVEL = os.getenv("HANDOFF_LOG_LEVEL", "INFO").upper()

# LangGraph recursion limit for a single reconciliation run
RECURSION_LIMIT = int(os.getenv("HANDOFF_RECURSION_LIMIT", "20"))

# When set, the CLI keeps anonymous work in this JSON file instead of memory
WORK_STORE_PATH = os.getenv("HANDOFF_WORK_STORE_PATH") or None

BCRYPT_ROUNDS = int(os.getenv("HANDOFF_BCRYPT_ROUNDS", "12"))
MIN_PASSWORD_LENGTH = int(os.getenv("HANDOFF_MIN_PASSWORD_LENGTH", "8"))

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_HANDLER_NAME = "handoff"


def configure_logging(level: str | None = None) -> logging.Logger:
    """
    Installs one stream handler on the root logger. Calling it again only
    adjusts the level, so the server and CLI can both call it safely.
    """
    root = logging.getLogger()
    root.setLevel(level or LOG_LEVEL)

    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)

    return logging.getLogger("handoff")
