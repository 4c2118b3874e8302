"""Root conftest — sets env vars BEFORE any linkbot module is imported.

The config.py module-level singleton requires TELEGRAM_BOT_TOKEN at import
time, so it must be set before pytest discovers any test that transitively
imports linkbot.
"""

import os
import tempfile

# Force-set (not setdefault) to prevent real env vars from leaking into tests
os.environ["TELEGRAM_BOT_TOKEN"] = "test:0000000000:AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
os.environ["ALLOWED_USERS"] = ""
os.environ["LINKBOT_DIR"] = tempfile.mkdtemp(prefix="linkbot-test-")
os.environ.pop("LINKBOT_QUIET_TICKS", None)
os.environ.pop("LINKBOT_TICK_INTERVAL", None)
