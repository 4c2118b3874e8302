"""Application configuration — reads env vars and exposes a singleton.

Loads TELEGRAM_BOT_TOKEN, ALLOWED_USERS and the debounce settings from
environment variables (with .env support).
.env loading priority: local .env (cwd) > $LINKBOT_DIR/.env (default ~/.linkbot).
When TELEGRAM_BOT_TOKEN is unset, the ``token`` key of $LINKBOT_DIR/config.json
is used instead.

Key class: Config (singleton instantiated as `config`).
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from .utils import linkbot_dir, read_json_token

logger = logging.getLogger(__name__)

DEFAULT_QUIET_TICKS = 3
DEFAULT_TICK_INTERVAL = 1.0


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        self.config_dir = linkbot_dir()
        self.config_dir.mkdir(parents=True, exist_ok=True)

        # Load .env: local (cwd) takes priority over config_dir
        # load_dotenv default override=False means first-loaded wins
        local_env = Path(".env")
        global_env = self.config_dir / ".env"
        if local_env.is_file():
            load_dotenv(local_env)
            logger.debug("Loaded env from %s", local_env.resolve())
        if global_env.is_file():
            load_dotenv(global_env)
            logger.debug("Loaded env from %s", global_env)

        self.json_config_file = self.config_dir / "config.json"
        self.telegram_bot_token: str = os.getenv(
            "TELEGRAM_BOT_TOKEN"
        ) or read_json_token(self.json_config_file)
        if not self.telegram_bot_token:
            raise ValueError("TELEGRAM_BOT_TOKEN environment variable is required")

        # Empty ALLOWED_USERS means the bot serves everyone
        allowed_users_str = os.getenv("ALLOWED_USERS", "")
        try:
            self.allowed_users: set[int] = {
                int(uid.strip()) for uid in allowed_users_str.split(",") if uid.strip()
            }
        except ValueError as e:
            raise ValueError(
                f"ALLOWED_USERS contains non-numeric value: {e}. "
                "Expected comma-separated Telegram user IDs."
            ) from e

        # Album debounce: number of quiet ticks and seconds per tick
        try:
            self.quiet_ticks = int(
                os.getenv("LINKBOT_QUIET_TICKS", str(DEFAULT_QUIET_TICKS))
            )
            self.tick_interval = float(
                os.getenv("LINKBOT_TICK_INTERVAL", str(DEFAULT_TICK_INTERVAL))
            )
        except ValueError as e:
            raise ValueError(f"Invalid debounce setting: {e}") from e
        if self.quiet_ticks < 1:
            raise ValueError("LINKBOT_QUIET_TICKS must be at least 1")
        if self.tick_interval <= 0:
            raise ValueError("LINKBOT_TICK_INTERVAL must be positive")

        logger.debug(
            "Config initialized: dir=%s, token=%s..., allowed_users=%d, "
            "quiet_ticks=%d, tick_interval=%.2f",
            self.config_dir,
            self.telegram_bot_token[:8],
            len(self.allowed_users),
            self.quiet_ticks,
            self.tick_interval,
        )

    def is_user_allowed(self, user_id: int) -> bool:
        """Check if a user may use the bot (everyone when no list is set)."""
        return not self.allowed_users or user_id in self.allowed_users


config = Config()
