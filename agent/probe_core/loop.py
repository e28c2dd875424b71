"""
Agent loop: collect → build → deliver → sleep, forever.

Iterations never overlap. Whatever happens inside one (provider error,
HTTP failure, unexpected exception) is logged and the loop sleeps the
full interval before the next attempt.
"""

import time

from .config import log
from .errors import ProviderError
from .payload import build
from .delivery import deliver
from . import http_client


def run_iteration(settings, provider, agent_id=None, session=None):
    """One collect/build/deliver cycle. Returns DeliveryResult, or None if collection failed."""
    try:
        snapshot = provider.collect_system_snapshot()
    except ProviderError as e:
        log.error("Snapshot collection failed: %s — skipping this iteration", e)
        return None

    payload = build(snapshot, settings, agent_id=agent_id)
    log.debug(
        "Payload built | cpu=%d @ %.1f%% | disks=%d | processes=%d | image=%s",
        payload["cpu_count"], payload["cpu_usage"], payload["disks_numbers"],
        payload["processes_count"], "yes" if payload["image_base64"] else "no",
    )
    return deliver(payload, settings.endpoint, session=session, timeout=settings.http_timeout)


def main_loop(settings, provider, agent_id=None, sleep=time.sleep, max_iterations=None):
    """
    Run iterations until interrupted, or until max_iterations have completed.
    Sleeps exactly settings.interval after every iteration, whatever its outcome.
    """
    log.info("Agent loop started (interval=%ds, endpoint=%s)", settings.interval, settings.endpoint)

    iterations = 0
    while max_iterations is None or iterations < max_iterations:
        iterations += 1
        try:
            run_iteration(settings, provider, agent_id=agent_id, session=http_client.http)
        except KeyboardInterrupt:
            log.info("Agent stopped by user (Ctrl+C)")
            break
        except Exception as e:
            log.error("Unexpected error in main loop: %s", e, exc_info=True)
            # Drop pooled connections that may be wedged
            http_client.http = http_client.reset_session(http_client.http)

        try:
            sleep(settings.interval)
        except KeyboardInterrupt:
            log.info("Agent stopped by user (Ctrl+C)")
            break

    return iterations
