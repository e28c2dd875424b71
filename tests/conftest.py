"""Shared fixtures for the agent tests."""

import logging

import pytest
from PIL import Image

from probe_core.config import Settings, log
from probe_core.models import (
    CpuInfo,
    DiskInfo,
    MemoryInfo,
    NetworkInfo,
    ProcessInfo,
    Snapshot,
    SystemIdentity,
)


@pytest.fixture(autouse=True)
def _reset_agent_logger():
    """setup_logging() detaches the agent logger from root; undo that for caplog."""
    yield
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.propagate = True
    log.setLevel(logging.NOTSET)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        credential="secret-key",
        endpoint="http://collector.test/api/metrics",
        interval=5,
        http_timeout=3.0,
        ledger_path=tmp_path / "info",
    )


def _snapshot(per_core=(10.0, 20.0, 30.0, 40.0), disks=None, image=None, processes=None):
    if disks is None:
        disks = [
            DiskInfo(file_system="ext4", total_space=500_000_000_000, available_space=200_000_000_000,
                     name="/dev/sda1", mount_point="/"),
            DiskInfo(file_system="vfat", total_space=512_000_000, available_space=500_000_000,
                     name="/dev/sda2", mount_point="/boot/efi"),
        ]
    if processes is None:
        processes = {
            42: ProcessInfo(name="sshd", start_time=1_700_000_100, cpu_usage=0.5, memory=8_000_000),
            1: ProcessInfo(name="init", start_time=1_700_000_000, cpu_usage=0.0, memory=12_000_000),
        }
    return Snapshot(
        memory=MemoryInfo(
            total_memory=16 * 1024**3,
            used_memory=8 * 1024**3,
            total_swap=4 * 1024**3,
            used_swap=1024**3,
        ),
        system_identity=SystemIdentity(
            system_name="Linux",
            kernel_version="6.8.0",
            os_version="24.04",
            host_name="build-01",
            boot_time=1_699_999_000,
        ),
        cpu=CpuInfo(count=len(per_core), brand="Test CPU @ 3.0GHz", per_core_usage=tuple(per_core)),
        disks=disks,
        networks=[NetworkInfo(interface="eth0", bytes_received=1000, bytes_transmitted=2000)],
        components=[],
        processes=processes,
        display_capture=image,
    )


@pytest.fixture
def make_snapshot():
    return _snapshot


@pytest.fixture
def screen_image():
    return Image.new("RGB", (8, 6), color=(30, 60, 90))


AGENT_ENV_VARS = (
    "API_KEY", "API_PASSWORD", "API_URL", "INTERVAL", "HTTP_TIMEOUT",
    "LEDGER_PATH", "CAPTURE_DISPLAY", "LOG_FILE", "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Environment without agent settings; anything load_dotenv() adds is undone."""
    for name in AGENT_ENV_VARS:
        # setenv first so monkeypatch remembers the variable was absent.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch
