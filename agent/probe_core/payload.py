"""
Payload builder — Snapshot + Settings → wire dict.

Every schema key is always present (None / [] when unknown) so the
collector can parse a stable shape. The builder never raises because of
the display image; encoding problems degrade to an empty string.
"""

import base64
import io
import time

from .config import log
from .constants import AGENT_VERSION, PAYLOAD_SCHEMA_VERSION


def encode_image(image):
    """PNG-encode a PIL image and return standard base64 text ("" on failure)."""
    if image is None:
        return ""
    try:
        buf = io.BytesIO()
        image.save(buf, format="PNG")
    except Exception as e:
        log.warning("Screenshot encoding failed: %s — sending empty image", e)
        return ""
    return base64.b64encode(buf.getvalue()).decode("ascii")


def _disk(d):
    return {
        "name": d.name,
        "mount_point": d.mount_point,
        "file_system": d.file_system,
        "total_space": d.total_space,
        "available_space": d.available_space,
    }


def _network(n):
    return {
        "interface": n.interface,
        "bytes_received": n.bytes_received,
        "bytes_transmitted": n.bytes_transmitted,
        "packets_received": n.packets_received,
        "packets_transmitted": n.packets_transmitted,
        "errors_on_received": n.errors_on_received,
        "errors_on_transmitted": n.errors_on_transmitted,
    }


def _component(c):
    return {
        "label": c.label,
        "temperature": c.temperature,
        "max": c.max,
        "critical": c.critical,
    }


def _process(pid, p):
    return {
        "pid": pid,
        "name": p.name,
        "start_time": p.start_time,
        "cpu_usage": p.cpu_usage,
        "memory": p.memory,
    }


def build(snapshot, settings, agent_id=None, now=None):
    """Build the wire payload for one snapshot. Pure apart from logging."""
    ident = snapshot.system_identity
    mem = snapshot.memory
    cpu = snapshot.cpu

    return {
        "schema_version": PAYLOAD_SCHEMA_VERSION,
        "agent_version": AGENT_VERSION,
        "agent_id": str(agent_id) if agent_id is not None else None,
        "collected_at": int(now if now is not None else time.time()),
        "credential": settings.credential,
        "interval_seconds": settings.interval,
        "start_time": ident.boot_time,
        "total_memory": mem.total_memory,
        "used_memory": mem.used_memory,
        "total_swap": mem.total_swap,
        "used_swap": mem.used_swap,
        "system_name": ident.system_name,
        "kernel_version": ident.kernel_version,
        "os_version": ident.os_version,
        "host_name": ident.host_name,
        "cpu_count": cpu.count,
        "cpu_name": cpu.brand or None,
        "cpu_usage": cpu.average_usage,
        "disks_numbers": len(snapshot.disks),
        "disks": [_disk(d) for d in snapshot.disks],
        "networks": [_network(n) for n in snapshot.networks],
        "components": [_component(c) for c in snapshot.components],
        "processes_count": len(snapshot.processes),
        "processes": [_process(pid, snapshot.processes[pid]) for pid in sorted(snapshot.processes)],
        "image_base64": encode_image(snapshot.display_capture),
    }
