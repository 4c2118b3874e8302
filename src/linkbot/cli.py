"""Click command behind the ``linkbot`` console script.

Every flag has an environment-variable twin. Precedence: flag > env var >
.env > default. Flags are turned into environment variables by
``env_overrides()`` before config.py builds its singleton, so Config stays
the only place that parses and validates them.
"""

import os
from pathlib import Path

import click

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _validate_positive_float(
    _ctx: click.Context, _param: click.Parameter, value: float | None
) -> float | None:
    if value is not None and value <= 0:
        raise click.BadParameter("must be positive")
    return value


def _validate_positive_int(
    _ctx: click.Context, _param: click.Parameter, value: int | None
) -> int | None:
    if value is not None and value < 1:
        raise click.BadParameter("must be at least 1")
    return value


def env_overrides(
    *,
    verbose: bool = False,
    log_level: str | None = None,
    config_dir: Path | None = None,
    allowed_users: str | None = None,
    quiet_ticks: int | None = None,
    tick_interval: float | None = None,
) -> dict[str, str]:
    """Environment variables for the flags that were given; -v beats --log-level."""
    env: dict[str, str] = {}
    if verbose:
        env["LINKBOT_LOG_LEVEL"] = "DEBUG"
    elif log_level is not None:
        env["LINKBOT_LOG_LEVEL"] = log_level.upper()
    if config_dir is not None:
        env["LINKBOT_DIR"] = str(config_dir.expanduser().resolve())
    if allowed_users is not None:
        env["ALLOWED_USERS"] = allowed_users
    if quiet_ticks is not None:
        env["LINKBOT_QUIET_TICKS"] = str(quiet_ticks)
    if tick_interval is not None:
        env["LINKBOT_TICK_INTERVAL"] = str(tick_interval)
    return env


@click.command(
    "linkbot",
    help="Telegram bot that replaces every link in a message or album.",
)
@click.version_option(package_name="linkbot", prog_name="linkbot")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level.",
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="LINKBOT_DIR",
    help="Config directory (default: ~/.linkbot).",
)
@click.option(
    "--allowed-users",
    default=None,
    envvar="ALLOWED_USERS",
    help="Comma-separated Telegram user IDs (default: everyone).",
)
@click.option(
    "--quiet-ticks",
    type=int,
    default=None,
    callback=_validate_positive_int,
    envvar="LINKBOT_QUIET_TICKS",
    help="Quiet ticks before an album counts as complete (default: 3).",
)
@click.option(
    "--tick-interval",
    type=float,
    default=None,
    callback=_validate_positive_float,
    envvar="LINKBOT_TICK_INTERVAL",
    help="Seconds per debounce tick (default: 1.0).",
)
def cli(**flags) -> None:
    """Start the bot with optional overrides."""
    os.environ.update(env_overrides(**flags))

    from .main import run_bot

    run_bot()
