"""
Ledger — persisted agent identity plus the services / tasks to verify.

On disk the ledger keeps the four-section marker layout so existing
`info` files stay readable:

    -----BEGIN UUID-----
    <uuid>
    -----END UUID-----
    -----BEGIN SERVICES TO VERIFY-----
    <one entry per line>
    -----END SERVICES TO VERIFY-----
    -----BEGIN TASKS TO VERIFY-----
    <one entry per line>
    -----END TASKS TO VERIFY-----

In memory it is a LedgerRecord. Parsing works on whole lines and entries
are compared by exact equality, so one name can never match part of
another. Every public operation reads, modifies and rewrites the whole
file under a lock, and writes go through a temp file + os.replace.
"""

import os
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from .config import log
from .constants import (
    DEFAULT_LEDGER_FILE,
    MARKER_PREFIXES,
    SERVICES_BEGIN,
    SERVICES_END,
    TASKS_BEGIN,
    TASKS_END,
    UUID_BEGIN,
    UUID_END,
)
from .errors import LedgerAlreadyExists, LedgerMalformed, LedgerNotFound


@dataclass
class LedgerRecord:
    agent_id: uuid.UUID
    services_to_verify: list[str] = field(default_factory=list)
    tasks_to_verify: list[str] = field(default_factory=list)


# ─── Text format ─────────────────────────────────────────────────

def _entries(lines):
    # Blank lines are padding, duplicates collapse to the first occurrence.
    return list(dict.fromkeys(line for line in lines if line))


def _section(lines, pos, begin, end):
    """Return (body_lines, next_pos) for the section starting at or after pos."""
    while pos < len(lines) and not lines[pos]:
        pos += 1
    if pos >= len(lines) or lines[pos] != begin:
        raise LedgerMalformed(f"Expected {begin!r} at line {pos + 1}")
    try:
        stop = lines.index(end, pos + 1)
    except ValueError:
        raise LedgerMalformed(f"Missing {end!r}") from None
    return lines[pos + 1:stop], stop + 1


def parse(text):
    """Parse ledger text into a LedgerRecord. Raises LedgerMalformed."""
    lines = [line.strip() for line in text.splitlines()]

    uuid_body, pos = _section(lines, 0, UUID_BEGIN, UUID_END)
    services_body, pos = _section(lines, pos, SERVICES_BEGIN, SERVICES_END)
    tasks_body, pos = _section(lines, pos, TASKS_BEGIN, TASKS_END)

    if any(lines[pos:]):
        raise LedgerMalformed(f"Unexpected content after {TASKS_END!r}")

    ids = [line for line in uuid_body if line]
    if len(ids) != 1:
        raise LedgerMalformed(f"Expected one UUID, found {len(ids)}")
    try:
        agent_id = uuid.UUID(ids[0])
    except ValueError:
        raise LedgerMalformed(f"Invalid UUID {ids[0]!r}") from None

    return LedgerRecord(
        agent_id=agent_id,
        services_to_verify=_entries(services_body),
        tasks_to_verify=_entries(tasks_body),
    )


def serialize(record):
    """Render a LedgerRecord; an empty list is written as one blank line."""
    lines = [
        UUID_BEGIN,
        str(record.agent_id),
        UUID_END,
        SERVICES_BEGIN,
        *(record.services_to_verify or [""]),
        SERVICES_END,
        TASKS_BEGIN,
        *(record.tasks_to_verify or [""]),
        TASKS_END,
    ]
    return "\n".join(lines)


def validate_name(name):
    """Entries must be one non-blank line without surrounding spaces or markers."""
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Entry name must be a non-empty string")
    if name != name.strip():
        raise ValueError(f"Entry name has leading/trailing whitespace: {name!r}")
    if "\n" in name or "\r" in name:
        raise ValueError(f"Entry name must be a single line: {name!r}")
    if any(marker in name for marker in MARKER_PREFIXES):
        raise ValueError(f"Entry name contains a ledger marker: {name!r}")
    return name


# ─── Store ───────────────────────────────────────────────────────

class Ledger:
    """File-backed ledger store. One writer process per file."""

    def __init__(self, path=DEFAULT_LEDGER_FILE):
        self.path = Path(path)
        self._lock = threading.RLock()

    def __repr__(self):
        return f"Ledger({str(self.path)!r})"

    # ── Raw I/O ──────────────────────────────────────────────
    def _read_text(self):
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise LedgerNotFound(f"No ledger at {self.path}") from None
        except UnicodeDecodeError as e:
            raise LedgerMalformed(f"Ledger {self.path} is not UTF-8: {e}") from None

    def _write(self, record):
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8", newline="\n") as f:
                f.write(serialize(record))
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

    def _modify(self, mutate):
        with self._lock:
            record = parse(self._read_text())
            changed = mutate(record)
            if changed:
                self._write(record)
            return changed

    # ── Lifecycle ────────────────────────────────────────────
    def exists(self):
        return self.path.is_file()

    def create(self):
        """Write a fresh ledger with a new agent id. Refuses to overwrite."""
        with self._lock:
            if self.path.exists():
                raise LedgerAlreadyExists(f"Ledger already exists at {self.path}")
            self.path.parent.mkdir(parents=True, exist_ok=True)
            record = LedgerRecord(agent_id=uuid.uuid4())
            self._write(record)
        log.info("Ledger created at %s (agent id %s)", self.path, record.agent_id)
        return record.agent_id

    def ensure(self):
        """Create the ledger if absent; return the agent id either way."""
        with self._lock:
            if not self.exists():
                return self.create()
            return self.read_agent_id()

    # ── Reads ────────────────────────────────────────────────
    def read(self):
        with self._lock:
            return parse(self._read_text())

    def read_agent_id(self):
        return self.read().agent_id

    def read_services(self):
        return list(self.read().services_to_verify)

    def read_tasks(self):
        return list(self.read().tasks_to_verify)

    # ── Mutations ────────────────────────────────────────────
    @staticmethod
    def _append(entries, name):
        if name in entries:
            return False
        entries.append(name)
        return True

    @staticmethod
    def _discard(entries, name):
        if name not in entries:
            return False
        entries.remove(name)
        return True

    def add_service(self, name):
        validate_name(name)
        changed = self._modify(lambda r: self._append(r.services_to_verify, name))
        if changed:
            log.info("Service added to verify list: %s", name)
        return changed

    def remove_service(self, name):
        changed = self._modify(lambda r: self._discard(r.services_to_verify, name))
        if changed:
            log.info("Service removed from verify list: %s", name)
        return changed

    def add_task(self, name):
        validate_name(name)
        changed = self._modify(lambda r: self._append(r.tasks_to_verify, name))
        if changed:
            log.info("Task added to verify list: %s", name)
        return changed

    def remove_task(self, name):
        changed = self._modify(lambda r: self._discard(r.tasks_to_verify, name))
        if changed:
            log.info("Task removed from verify list: %s", name)
        return changed

    def compact(self):
        """Rewrite the file without blank or duplicate entries. Returns True if it changed."""
        with self._lock:
            text = self._read_text()
            record = parse(text)
            if serialize(record) == text:
                return False
            self._write(record)
        log.info("Ledger compacted: %s", self.path)
        return True
