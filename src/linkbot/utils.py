"""Shared utility functions used across multiple LinkBot modules.

Provides:
  - linkbot_dir(): resolve config directory from LINKBOT_DIR env var.
  - read_json_token(): read the bot token from a JSON config file.
"""

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

LINKBOT_DIR_ENV = "LINKBOT_DIR"


def linkbot_dir() -> Path:
    """Resolve config directory from LINKBOT_DIR env var or default ~/.linkbot."""
    raw = os.environ.get(LINKBOT_DIR_ENV, "")
    return Path(raw) if raw else Path.home() / ".linkbot"


def read_json_token(path: Path) -> str:
    """Read the ``token`` key from a JSON config file.

    Returns an empty string when the file is missing, unreadable, or has
    no usable token, so callers can fall through to their own error.
    """
    if not path.is_file():
        return ""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return ""
    if not isinstance(data, dict):
        return ""
    token = data.get("token") or data.get("Token") or ""
    return token if isinstance(token, str) else ""
