"""
Snapshot data model.

A Snapshot is built once per iteration by the metrics provider and only
read afterwards. All types are frozen.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(slots=True, frozen=True)
class MemoryInfo:
    total_memory: int
    used_memory: int
    total_swap: int
    used_swap: int


@dataclass(slots=True, frozen=True)
class SystemIdentity:
    """OS identity fields; any of them may be unknown on a given platform."""

    system_name: str | None = None
    kernel_version: str | None = None
    os_version: str | None = None
    host_name: str | None = None
    boot_time: int | None = None  # Unix seconds


@dataclass(slots=True, frozen=True)
class CpuInfo:
    count: int
    brand: str | None
    per_core_usage: tuple[float, ...] = ()

    @property
    def average_usage(self) -> float:
        """Mean of per-core usage; 0.0 when no core reported a value."""
        if not self.per_core_usage:
            return 0.0
        return sum(self.per_core_usage) / len(self.per_core_usage)


@dataclass(slots=True, frozen=True)
class DiskInfo:
    file_system: str
    total_space: int
    available_space: int
    name: str = ""
    mount_point: str = ""


@dataclass(slots=True, frozen=True)
class NetworkInfo:
    interface: str
    bytes_received: int = 0
    bytes_transmitted: int = 0
    packets_received: int = 0
    packets_transmitted: int = 0
    errors_on_received: int = 0
    errors_on_transmitted: int = 0


@dataclass(slots=True, frozen=True)
class ComponentInfo:
    """A hardware sensor reading (temperatures in °C)."""

    label: str
    temperature: float | None = None
    max: float | None = None
    critical: float | None = None


@dataclass(slots=True, frozen=True)
class ProcessInfo:
    name: str
    start_time: int  # Unix seconds
    cpu_usage: float
    memory: int  # Resident bytes


def _freeze(mapping):
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time capture of machine metrics and the primary display."""

    memory: MemoryInfo
    system_identity: SystemIdentity
    cpu: CpuInfo
    disks: tuple[DiskInfo, ...] = ()
    networks: tuple[NetworkInfo, ...] = ()
    components: tuple[ComponentInfo, ...] = ()
    processes: Mapping[int, ProcessInfo] = field(default_factory=dict)
    display_capture: Any = None  # PIL.Image.Image or None

    def __post_init__(self):
        # Accept lists/dicts from callers but store read-only views.
        object.__setattr__(self, "disks", tuple(self.disks))
        object.__setattr__(self, "networks", tuple(self.networks))
        object.__setattr__(self, "components", tuple(self.components))
        object.__setattr__(self, "processes", _freeze(self.processes))
