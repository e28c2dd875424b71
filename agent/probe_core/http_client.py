"""
HTTP session with connection pooling and SSL CA bundle resolution.

Delivery is one attempt per tick: the adapter's Retry follows redirects
but never re-sends a payload. A failed sample is simply replaced by the
next one.
"""

import os

import certifi
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .constants import MAX_REDIRECTS

_retry_strategy = Retry(
    total=None,
    connect=0,
    read=0,
    status=0,
    other=0,
    redirect=MAX_REDIRECTS,
    raise_on_status=False,
)


def _get_ca_bundle():
    """CA bundle for verifying the collector: REQUESTS_CA_BUNDLE / SSL_CERT_FILE, else certifi."""
    env_ca = os.environ.get("REQUESTS_CA_BUNDLE") or os.environ.get("SSL_CERT_FILE")
    if env_ca and os.path.isfile(env_ca):
        return env_ca
    return certifi.where()


def create_session():
    """Session used for telemetry POSTs: one pooled host, redirects only, verified TLS."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=2,
        max_retries=_retry_strategy,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = _get_ca_bundle()
    return session


def reset_session(session):
    """Swap in a fresh session after the loop hits an unexpected error."""
    session.close()
    return create_session()


# Shared by the loop and the one-shot runner
http = create_session()
