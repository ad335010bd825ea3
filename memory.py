#!/usr/bin/env python3
"""
Memory provider - used / total RAM with per-platform accounting

No kernel exposes "used memory" directly, so every supported platform gets
its own derivation from raw counters:

• Linux          → /proc/meminfo (kB):
                   MemTotal + Shmem - SReclaimable - Buffers - Cached - MemFree
• OpenBSD        → sysctl hw.physmem (bytes) + third field of the last vmstat line
• FreeBSD/Dfly   → sysctl hw.physmem - (inactive + free + cache) * pagesize
• NetBSD         → sysctl hw.physmem64 - MemFree from /proc/meminfo
                   (kB subtracted from bytes, kept as-is; see DESIGN.md)

Each derivation is a pure function of the raw text so it can be exercised
without the real system files.
"""

import logging
import platform
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Optional

from errors import ParseFailure
from providers import Provider
from raw_sources import RawSource

logger = logging.getLogger(__name__)

MEMINFO_PATH = "/proc/meminfo"

_LINUX_KEYS = ("MemTotal", "Shmem", "SReclaimable", "Buffers", "Cached", "MemFree")


class Platform(Enum):
    LINUX = "linux"
    OPENBSD = "openbsd"
    FREEBSD = "freebsd"
    DRAGONFLY = "dragonfly"
    NETBSD = "netbsd"
    UNKNOWN = "unknown"


_SYSTEM_MAP = {
    "Linux": Platform.LINUX,
    "OpenBSD": Platform.OPENBSD,
    "FreeBSD": Platform.FREEBSD,
    "DragonFly": Platform.DRAGONFLY,
    "NetBSD": Platform.NETBSD,
}


def detect_platform(system: Optional[str] = None) -> Platform:
    """Map platform.system() (or an explicit name) onto a Platform tag."""
    name = system if system is not None else platform.system()
    return _SYSTEM_MAP.get(name, Platform.UNKNOWN)


@dataclass(frozen=True)
class MemorySnapshot:
    """Memory figures in MiB; either side may be unknown."""
    used_mib: Optional[float] = None
    total_mib: Optional[float] = None


def _to_float(raw: str, what: str) -> float:
    try:
        return float(raw.strip())
    except ValueError as e:
        raise ParseFailure(f"{what}: not a number: {raw.strip()!r}") from e


def parse_meminfo(text: str, keys: Iterable[str]) -> Dict[str, float]:
    """
    Pull the wanted ``Key: value kB`` counters out of a meminfo block.
    Keys outside ``keys`` are ignored, malformed wanted values raise.
    """
    wanted = set(keys)
    values: Dict[str, float] = {}
    for line in text.splitlines():
        key, sep, raw = line.partition(":")
        key = key.strip()
        if not sep or key not in wanted:
            continue
        values[key] = _to_float(raw.replace("kB", ""), key)
    return values


def linux_usage(meminfo: str) -> MemorySnapshot:
    counters = parse_meminfo(meminfo, _LINUX_KEYS)
    if "MemTotal" not in counters:
        raise ParseFailure("MemTotal missing from meminfo")

    total = counters["MemTotal"]
    used = (
        total
        + counters.get("Shmem", 0.0)
        - counters.get("SReclaimable", 0.0)
        - counters.get("Buffers", 0.0)
        - counters.get("Cached", 0.0)
        - counters.get("MemFree", 0.0)
    )
    return MemorySnapshot(used_mib=used / 1024, total_mib=total / 1024)


def openbsd_usage(physmem: str, vmstat: str) -> MemorySnapshot:
    total = _to_float(physmem, "hw.physmem")

    lines = [l for l in vmstat.splitlines() if l.strip()]
    if not lines:
        raise ParseFailure("vmstat produced no output")
    fields = lines[-1].split()
    if len(fields) < 3:
        raise ParseFailure(f"vmstat: unexpected line {lines[-1]!r}")
    used = _to_float(fields[2], "vmstat")

    return MemorySnapshot(used_mib=used / 1024 / 1024, total_mib=total / 1024 / 1024)


def freebsd_usage(physmem: str, vm_stats: str) -> MemorySnapshot:
    """
    ``vm_stats`` is the output of one batched sysctl call:
    pagesize, inactive count, free count, cache count (one per line).
    """
    total = _to_float(physmem, "hw.physmem")

    fields = vm_stats.split()
    if len(fields) < 4:
        raise ParseFailure(f"expected 4 vm counters, got {len(fields)}")
    pagesize, inactive, free, cache = (
        _to_float(v, name)
        for v, name in zip(fields, ("hw.pagesize", "v_inactive_count", "v_free_count", "v_cache_count"))
    )

    total_mib = total / 1024 / 1024
    reclaimable_mib = (inactive + free + cache) * pagesize / 1024 / 1024
    return MemorySnapshot(used_mib=total_mib - reclaimable_mib, total_mib=total_mib)


def netbsd_usage(physmem64: str, meminfo: str) -> MemorySnapshot:
    total = _to_float(physmem64, "hw.physmem64")
    free = parse_meminfo(meminfo, ("MemFree",)).get("MemFree", 0.0)
    # Bytes minus kB, stored unscaled.
    return MemorySnapshot(used_mib=total - free, total_mib=total)


# ── Per-platform acquisition ──────────────────────────────────────────────────

def _acquire_linux(source: RawSource) -> MemorySnapshot:
    return linux_usage(source.read_text(MEMINFO_PATH))


def _acquire_openbsd(source: RawSource) -> MemorySnapshot:
    return openbsd_usage(
        source.run(["sysctl", "-n", "hw.physmem"]),
        source.run(["vmstat"]),
    )


def _acquire_freebsd(source: RawSource) -> MemorySnapshot:
    return freebsd_usage(
        source.run(["sysctl", "-n", "hw.physmem"]),
        source.run([
            "sysctl", "-n",
            "hw.pagesize",
            "vm.stats.vm.v_inactive_count",
            "vm.stats.vm.v_free_count",
            "vm.stats.vm.v_cache_count",
        ]),
    )


def _acquire_netbsd(source: RawSource) -> MemorySnapshot:
    return netbsd_usage(
        source.run(["sysctl", "-n", "hw.physmem64"]),
        source.read_text(MEMINFO_PATH),
    )


_ACQUIRERS: Dict[Platform, Callable[[RawSource], MemorySnapshot]] = {
    Platform.LINUX: _acquire_linux,
    Platform.OPENBSD: _acquire_openbsd,
    Platform.FREEBSD: _acquire_freebsd,
    Platform.DRAGONFLY: _acquire_freebsd,
    Platform.NETBSD: _acquire_netbsd,
}


def format_mib(value: Optional[float]) -> str:
    """512 → "512MiB", 6750 → "6.59GiB", None → "?"."""
    if value is None:
        return "?"
    if value < 1024:
        return f"{value:.0f}MiB"
    return f"{value / 1024:.2f}GiB"


class MemoryProvider(Provider):
    label = "MEMORY"

    def __init__(self, platform_tag: Optional[Platform] = None, source: RawSource = None):
        super().__init__(source)
        self.platform = platform_tag or detect_platform()
        self.snapshot = MemorySnapshot()

    def acquire(self) -> None:
        acquirer = _ACQUIRERS.get(self.platform)
        if acquirer is None:
            # Unrecognised platform: leave both figures unknown.
            logger.debug(f"No memory accounting for platform {self.platform.value}")
            return
        self.snapshot = acquirer(self.source)

    def render(self) -> str:
        return f"{format_mib(self.snapshot.used_mib)} / {format_mib(self.snapshot.total_mib)}"
