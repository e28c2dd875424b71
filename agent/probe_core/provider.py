"""
Default metrics provider — psutil for OS/hardware/process state,
Pillow's ImageGrab for the primary display.

Anything exposing collect_system_snapshot() can replace it. Per-process
and per-disk failures are skipped; failure of the system-wide calls
raises ProviderError so the loop can drop the iteration.
"""

import platform
import socket
import sys

import psutil
from PIL import ImageGrab

from .config import log
from .errors import CaptureError, ProviderError
from .models import (
    ComponentInfo,
    CpuInfo,
    DiskInfo,
    MemoryInfo,
    NetworkInfo,
    ProcessInfo,
    Snapshot,
    SystemIdentity,
)


# ─── Display capture ─────────────────────────────────────────────

def capture_primary_display():
    """Grab the primary monitor. Raises CaptureError on any failure."""
    try:
        image = ImageGrab.grab(all_screens=False)
    except Exception as e:
        # Headless hosts, missing X display, Wayland without a portal...
        raise CaptureError(f"Display capture failed: {e}") from e
    if image is None:
        raise CaptureError("Display capture returned no image")
    return image


# ─── Platform helpers ────────────────────────────────────────────

def _cpu_brand():
    if sys.platform.startswith("linux"):
        try:
            with open("/proc/cpuinfo", encoding="utf-8") as f:
                for line in f:
                    if line.lower().startswith("model name"):
                        return line.split(":", 1)[1].strip() or None
        except OSError:
            pass
    return platform.processor() or None


def _os_version():
    if sys.platform.startswith("linux"):
        try:
            release = platform.freedesktop_os_release()
            return release.get("VERSION_ID") or release.get("VERSION") or None
        except OSError:
            pass
    if sys.platform == "darwin":
        return platform.mac_ver()[0] or None
    return platform.version() or None


def _system_identity():
    try:
        boot_time = int(psutil.boot_time())
    except (psutil.Error, OSError):
        boot_time = None
    return SystemIdentity(
        system_name=platform.system() or None,
        kernel_version=platform.release() or None,
        os_version=_os_version(),
        host_name=socket.gethostname() or None,
        boot_time=boot_time,
    )


# ─── Provider ────────────────────────────────────────────────────

class SystemProvider:
    """
    psutil-backed metrics provider.

    CPU percentages are deltas since the previous call, so the constructor
    primes the counters; the first snapshot then reports usage since
    construction rather than zeros.
    """

    _PROCESS_ATTRS = ["pid", "name", "create_time", "cpu_percent", "memory_info"]

    def __init__(self, capture_display=True, capture=capture_primary_display):
        self.capture_display = capture_display
        self._capture = capture
        psutil.cpu_percent(percpu=True)

    def collect_system_snapshot(self) -> Snapshot:
        try:
            cpu = self._collect_cpu()
            vm = psutil.virtual_memory()
            swap = psutil.swap_memory()
        except (psutil.Error, OSError) as e:
            raise ProviderError(f"System metrics unavailable: {e}") from e

        return Snapshot(
            memory=MemoryInfo(
                total_memory=vm.total,
                used_memory=vm.used,
                total_swap=swap.total,
                used_swap=swap.used,
            ),
            system_identity=_system_identity(),
            cpu=cpu,
            disks=self._collect_disks(),
            networks=self._collect_networks(),
            components=self._collect_components(),
            processes=self._collect_processes(),
            display_capture=self._collect_display(),
        )

    def _collect_cpu(self):
        count = psutil.cpu_count(logical=True)
        if not count:
            raise ProviderError("No CPUs could be enumerated")
        per_core = tuple(float(p) for p in psutil.cpu_percent(percpu=True))
        return CpuInfo(count=count, brand=_cpu_brand(), per_core_usage=per_core)

    def _collect_disks(self):
        disks = []
        for part in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except (PermissionError, OSError):
                # Empty card readers, unmounted network shares
                continue
            disks.append(DiskInfo(
                file_system=part.fstype,
                total_space=usage.total,
                available_space=usage.free,
                name=part.device,
                mount_point=part.mountpoint,
            ))
        return tuple(disks)

    def _collect_networks(self):
        try:
            counters = psutil.net_io_counters(pernic=True)
        except (psutil.Error, OSError) as e:
            log.warning("Network counters unavailable: %s", e)
            return ()
        return tuple(
            NetworkInfo(
                interface=name,
                bytes_received=c.bytes_recv,
                bytes_transmitted=c.bytes_sent,
                packets_received=c.packets_recv,
                packets_transmitted=c.packets_sent,
                errors_on_received=c.errin,
                errors_on_transmitted=c.errout,
            )
            for name, c in counters.items()
        )

    def _collect_components(self):
        sensors = getattr(psutil, "sensors_temperatures", None)
        if sensors is None:
            return ()
        try:
            readings = sensors()
        except (psutil.Error, OSError) as e:
            log.warning("Sensor readings unavailable: %s", e)
            return ()
        components = []
        for chip, entries in readings.items():
            for entry in entries:
                components.append(ComponentInfo(
                    label=f"{chip} {entry.label}".strip() if entry.label else chip,
                    temperature=entry.current,
                    max=entry.high,
                    critical=entry.critical,
                ))
        return tuple(components)

    def _collect_processes(self):
        processes = {}
        for proc in psutil.process_iter(attrs=self._PROCESS_ATTRS):
            try:
                info = proc.info
                mem_info = info.get("memory_info")
                processes[info["pid"]] = ProcessInfo(
                    name=info.get("name") or "",
                    start_time=int(info.get("create_time") or 0),
                    cpu_usage=info.get("cpu_percent") or 0.0,
                    memory=mem_info.rss if mem_info else 0,
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        return processes

    def _collect_display(self):
        if not self.capture_display:
            return None
        try:
            return self._capture()
        except CaptureError as e:
            log.warning("%s — sending empty image", e)
            return None
