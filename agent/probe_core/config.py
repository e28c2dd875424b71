"""
Logging setup, Settings loaded from the environment (.env aware), safe_print.
"""

import os
import sys
import logging
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .constants import (
    DEFAULT_HTTP_TIMEOUT_SEC,
    DEFAULT_LEDGER_FILE,
    LOG_DATEFMT,
    LOG_FILE_MAX_BYTES,
    LOG_FORMAT,
)
from .errors import ConfigError, ConfigMissing


log = logging.getLogger("probe")


# ─── Safe print (no crash when started without a console) ────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except (OSError, ValueError):
        pass


# ─── Logging ─────────────────────────────────────────────────────

def setup_logging(log_file=None, level="INFO"):
    """
    Attach a stdout handler (and a file handler when log_file is set)
    to the agent logger. Safe to call more than once.
    """
    log.setLevel(level.upper() if isinstance(level, str) else level)
    log.propagate = False
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    log.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        try:
            if path.exists() and path.stat().st_size > LOG_FILE_MAX_BYTES:
                path.write_text("")
        except OSError as e:
            log.warning("Could not truncate log file %s: %s", path, e)
        file_handler = logging.FileHandler(str(path), encoding="utf-8")
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)

    return log


# ─── Settings ────────────────────────────────────────────────────

def _env(name, default=None):
    v = os.getenv(name)
    if v is None or not v.strip():
        if default is None:
            raise ConfigMissing(name)
        return default
    return v


def _env_bool(name, default):
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _parse_interval(raw):
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigError(f"INTERVAL must be a positive integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"INTERVAL must be a positive integer, got {raw!r}")
    return value


def _parse_timeout(raw):
    try:
        value = float(raw.strip())
    except ValueError:
        raise ConfigError(f"HTTP_TIMEOUT must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"HTTP_TIMEOUT must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    credential: str
    endpoint: str
    interval: int

    http_timeout: float = DEFAULT_HTTP_TIMEOUT_SEC
    ledger_path: Path = Path(DEFAULT_LEDGER_FILE)
    capture_display: bool = True

    log_file: str | None = None
    log_level: str = "INFO"


def _credential():
    # API key and password deployments only differ in the variable name.
    for name in ("API_KEY", "API_PASSWORD"):
        v = os.getenv(name)
        if v is not None and v.strip():
            return v
    raise ConfigMissing("API_KEY")


def load_settings(dotenv_path=None):
    """
    Build Settings from the process environment.
    A .env file (dotenv_path, else the first one found walking up from the
    working directory) is loaded first; real env vars win.
    Raises ConfigMissing / ConfigError.
    """
    load_dotenv(dotenv_path or find_dotenv(usecwd=True), override=False)

    return Settings(
        credential=_credential(),
        endpoint=_env("API_URL"),
        interval=_parse_interval(_env("INTERVAL")),
        http_timeout=_parse_timeout(_env("HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT_SEC))),
        ledger_path=Path(_env("LEDGER_PATH", DEFAULT_LEDGER_FILE)).expanduser(),
        capture_display=_env_bool("CAPTURE_DISPLAY", True),
        log_file=os.getenv("LOG_FILE") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
