"""Process bootstrap — logging setup and the long-polling loop.

``main()`` is the console-script entry point and hands over to the click
command in cli.py, which copies its flags into the environment and then
calls ``run_bot()``. Config is only imported from inside ``run_bot()`` so
those flags are visible when the singleton is built.
"""

import logging
import os

import click
import colorlog
from telegram import Update

logger = logging.getLogger(__name__)

# Width of the widest linkbot module name ("batch_collector")
_TAG_WIDTH = 15

_LOG_FORMAT = (
    "%(log_color)s%(asctime)s.%(msecs)03d %(levelname).1s%(reset)s "
    f"%(tag)-{_TAG_WIDTH}s %(message)s"
)


class _ModuleTagFilter(logging.Filter):
    """Tag records with the bare linkbot module name, or the library name."""

    def filter(self, record: logging.LogRecord) -> bool:
        parts = record.name.split(".")
        if parts[0] == "linkbot":
            tag = parts[-1]
        else:
            tag = parts[0]
        record.tag = tag[:_TAG_WIDTH]  # type: ignore[attr-defined]
        return True


def setup_logging(log_level: str) -> None:
    """Log to stderr with millisecond timestamps (album debounce runs sub-second)."""
    numeric_level = logging.getLevelName(log_level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handler = colorlog.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter(
            _LOG_FORMAT,
            datefmt="%H:%M:%S",
            log_colors={
                "DEBUG": "thin_white",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
    )
    handler.addFilter(_ModuleTagFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("linkbot").setLevel(numeric_level)
    # PTB logs every getUpdates round-trip through httpx at INFO
    for name in ("httpx", "httpcore", "telegram.ext"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _load_config():
    """Import the config singleton, or explain where the token goes and exit 1."""
    try:
        from .config import config
    except ValueError as e:
        from .utils import linkbot_dir

        config_dir = linkbot_dir()
        click.echo(f"Error: {e}", err=True)
        click.echo(
            "Put TELEGRAM_BOT_TOKEN=<token from @BotFather> into "
            f"{config_dir / '.env'},\n"
            f'or store it as {{"token": "..."}} in {config_dir / "config.json"}.',
            err=True,
        )
        raise SystemExit(1) from e
    return config


def run_bot() -> None:
    """Configure logging, load config, and poll for private messages until stopped."""
    setup_logging(os.environ.get("LINKBOT_LOG_LEVEL", "INFO"))
    config = _load_config()

    logger.info(
        "Starting linkbot: users=%s, album window=%d x %.2fs",
        sorted(config.allowed_users) or "everyone",
        config.quiet_ticks,
        config.tick_interval,
    )

    from .bot import create_bot

    # Commands, captions and album items all arrive as plain message updates
    create_bot().run_polling(allowed_updates=[Update.MESSAGE])


def main() -> None:
    from .cli import cli

    cli()


if __name__ == "__main__":
    main()
