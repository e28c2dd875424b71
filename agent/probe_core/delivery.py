"""
Delivery client — one synchronous JSON POST per payload.

Outcomes are returned, not raised, so the loop can log and carry on:
SUCCESS (2xx), APPLICATION_FAILURE (any other status, body logged) and
TRANSPORT_FAILURE (connection / DNS / timeout). Nothing is queued or
retried on failure.
"""

import enum
from dataclasses import dataclass

import requests

from .config import log
from .constants import DEFAULT_HTTP_TIMEOUT_SEC, ERROR_BODY_LOG_LIMIT
from .errors import ApplicationError, TransportError
from . import http_client


class DeliveryOutcome(enum.Enum):
    SUCCESS = "success"
    APPLICATION_FAILURE = "application_failure"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass(frozen=True)
class DeliveryResult:
    outcome: DeliveryOutcome
    status_code: int | None = None
    body: str = ""
    error: str | None = None

    @property
    def ok(self):
        return self.outcome is DeliveryOutcome.SUCCESS

    def raise_for_outcome(self):
        """Raise TransportError / ApplicationError for failed deliveries."""
        if self.outcome is DeliveryOutcome.TRANSPORT_FAILURE:
            raise TransportError(self.error or "transport failure")
        if self.outcome is DeliveryOutcome.APPLICATION_FAILURE:
            raise ApplicationError(self.status_code, self.body)


def deliver(payload, endpoint, session=None, timeout=DEFAULT_HTTP_TIMEOUT_SEC):
    """POST payload as application/json to endpoint. Returns DeliveryResult."""
    session = session or http_client.http

    try:
        resp = session.post(endpoint, json=payload, timeout=timeout)
    except requests.RequestException as e:
        log.warning("Delivery network error: %s", e)
        return DeliveryResult(DeliveryOutcome.TRANSPORT_FAILURE, error=str(e))

    try:
        body = resp.text
    except requests.RequestException as e:
        log.warning("Delivery network error while reading response: %s", e)
        return DeliveryResult(DeliveryOutcome.TRANSPORT_FAILURE, status_code=resp.status_code, error=str(e))

    if 200 <= resp.status_code < 300:
        log.info("Data sent successfully | HTTP %d | %s", resp.status_code, body[:ERROR_BODY_LOG_LIMIT])
        return DeliveryResult(DeliveryOutcome.SUCCESS, status_code=resp.status_code, body=body)

    log.warning("Delivery failed: HTTP %d — %s", resp.status_code, body[:ERROR_BODY_LOG_LIMIT])
    return DeliveryResult(DeliveryOutcome.APPLICATION_FAILURE, status_code=resp.status_code, body=body)
