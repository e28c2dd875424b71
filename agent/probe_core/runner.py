"""
Entry point: settings → logging → ledger → provider → loop.

Configuration problems are the only fatal errors; they stop the process
before the loop starts.
"""

import sys

from .constants import AGENT_VERSION
from .config import log, safe_print, setup_logging, load_settings
from .errors import ConfigError, ConfigMissing, LedgerError
from .ledger import Ledger
from .provider import SystemProvider
from .loop import main_loop, run_iteration
from . import http_client


def load_settings_or_exit(dotenv_path=None):
    try:
        return load_settings(dotenv_path)
    except (ConfigMissing, ConfigError) as e:
        log.error("Configuration error: %s", e)
        sys.exit(1)


def main(once=False, dotenv_path=None):
    """Primary agent entry point."""
    safe_print("Host Telemetry Agent v" + AGENT_VERSION)
    safe_print()

    setup_logging()
    settings = load_settings_or_exit(dotenv_path)
    setup_logging(settings.log_file, settings.log_level)

    ledger = Ledger(settings.ledger_path)
    try:
        agent_id = ledger.ensure()
    except LedgerError as e:
        log.error("Ledger unusable at %s: %s", ledger.path, e)
        sys.exit(1)
    log.info("Agent id %s (ledger: %s)", str(agent_id)[:8] + "...", ledger.path)

    provider = SystemProvider(capture_display=settings.capture_display)

    if once:
        result = run_iteration(settings, provider, agent_id=agent_id, session=http_client.http)
        sys.exit(0 if result is not None and result.ok else 1)

    main_loop(settings, provider, agent_id=agent_id)
