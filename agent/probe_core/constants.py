"""
Constants: version, timing defaults, ledger markers, payload schema.
"""

AGENT_VERSION = "1.0.0"

# ─── Payload ─────────────────────────────────────────────────────
PAYLOAD_SCHEMA_VERSION = 1
ERROR_BODY_LOG_LIMIT = 500     # Chars of a failed response body kept in the log

# ─── Network ─────────────────────────────────────────────────────
DEFAULT_HTTP_TIMEOUT_SEC = 30.0
MAX_REDIRECTS = 3

# ─── Logging ─────────────────────────────────────────────────────
LOG_FILE_MAX_BYTES = 1_000_000  # Log file is truncated at startup above this
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# ─── Ledger ──────────────────────────────────────────────────────
DEFAULT_LEDGER_FILE = "info"

UUID_BEGIN = "-----BEGIN UUID-----"
UUID_END = "-----END UUID-----"
SERVICES_BEGIN = "-----BEGIN SERVICES TO VERIFY-----"
SERVICES_END = "-----END SERVICES TO VERIFY-----"
TASKS_BEGIN = "-----BEGIN TASKS TO VERIFY-----"
TASKS_END = "-----END TASKS TO VERIFY-----"

# Any entry containing one of these would break the section layout.
MARKER_PREFIXES = ("-----BEGIN", "-----END")
