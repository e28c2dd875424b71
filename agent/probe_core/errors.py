"""
Exception taxonomy.

Only ConfigMissing / ConfigError are fatal (raised before the loop starts).
Everything raised during an iteration is caught at the loop boundary.
Ledger errors always reach the caller of the ledger operation.
"""


class AgentError(Exception):
    """Base class for all agent errors."""


# ─── Configuration ───────────────────────────────────────────────

class ConfigMissing(AgentError):
    """A required setting is absent."""

    def __init__(self, name):
        super().__init__(f"Missing required environment variable: {name}")
        self.name = name


class ConfigError(AgentError):
    """A setting is present but unusable (e.g. INTERVAL=abc)."""


# ─── Collection ──────────────────────────────────────────────────

class ProviderError(AgentError):
    """Snapshot collection failed; the current iteration is skipped."""


class CaptureError(AgentError):
    """Display image unavailable; the payload carries an empty image."""


# ─── Delivery ────────────────────────────────────────────────────

class DeliveryError(AgentError):
    """Base for failed deliveries."""


class TransportError(DeliveryError):
    """Connection refused, DNS failure, timeout."""


class ApplicationError(DeliveryError):
    """Server answered with a non-2xx status."""

    def __init__(self, status_code, body):
        super().__init__(f"HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


# ─── Ledger ──────────────────────────────────────────────────────

class LedgerError(AgentError):
    """Base for ledger failures."""


class LedgerNotFound(LedgerError):
    """The ledger file does not exist."""


class LedgerMalformed(LedgerError):
    """The ledger file exists but its sections cannot be parsed."""


class LedgerAlreadyExists(LedgerError):
    """create() was called while a ledger is already present."""
