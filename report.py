#!/usr/bin/env python3
"""
Report - turns a fact selection into an ordered list of report entries

Facts are always collected in the fixed FACT_ORDER below, whatever order
they were requested in.  Each provider gets exactly one acquire() attempt;
a failure is logged and the fact is left out of the report.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional

from errors import FetchError
from memory import MemoryProvider, Platform
from providers import (
    CPUProvider,
    DeviceProvider,
    DistroProvider,
    EditorProvider,
    KernelProvider,
    MusicProvider,
    NetworkProvider,
    PackagesProvider,
    Provider,
    ShellProvider,
    UptimeProvider,
    UserProvider,
    WindowManagerProvider,
)
from raw_sources import RawSource

logger = logging.getLogger(__name__)

FACT_ORDER = (
    "user",
    "host",
    "uptime",
    "distro",
    "kernel",
    "wm",
    "editor",
    "shell",
    "cpu",
    "memory",
    "ip_address",
    "packages",
    "music",
)


@dataclass(frozen=True)
class ReportEntry:
    label: str
    value: str


@dataclass(frozen=True)
class Selection:
    """
    Facts the user asked for.  ``packages`` and ``music`` carry their
    argument (package manager / music source) and are selected when set.
    """
    facts: FrozenSet[str] = frozenset()
    packages: Optional[str] = None
    music: Optional[str] = None

    def requested(self) -> List[str]:
        """Selected fact names in canonical order."""
        wanted = set(self.facts)
        if self.packages:
            wanted.add("packages")
        if self.music:
            wanted.add("music")
        return [name for name in FACT_ORDER if name in wanted]

    def is_empty(self) -> bool:
        return not self.requested()


_Factory = Callable[[Selection, RawSource, Optional[Platform]], Provider]

_FACTORIES: Dict[str, _Factory] = {
    "user": lambda sel, src, plat: UserProvider(src),
    "host": lambda sel, src, plat: DeviceProvider(src),
    "uptime": lambda sel, src, plat: UptimeProvider(src),
    "distro": lambda sel, src, plat: DistroProvider(src),
    "kernel": lambda sel, src, plat: KernelProvider(src),
    "wm": lambda sel, src, plat: WindowManagerProvider(src),
    "editor": lambda sel, src, plat: EditorProvider(src),
    "shell": lambda sel, src, plat: ShellProvider(src),
    "cpu": lambda sel, src, plat: CPUProvider(src),
    "memory": lambda sel, src, plat: MemoryProvider(plat, src),
    "ip_address": lambda sel, src, plat: NetworkProvider(src),
    "packages": lambda sel, src, plat: PackagesProvider(sel.packages, src),
    "music": lambda sel, src, plat: MusicProvider(sel.music, src),
}


def collect(
    selection: Selection,
    source: RawSource = None,
    platform_tag: Optional[Platform] = None,
) -> List[ReportEntry]:
    """Acquire and render every selected fact, skipping the ones that fail."""
    source = source or RawSource()
    entries: List[ReportEntry] = []

    for name in selection.requested():
        provider = _FACTORIES[name](selection, source, platform_tag)
        try:
            provider.acquire()
        except FetchError as e:
            logger.error(f"Unable to retrieve {name}: {e}")
            continue
        entries.append(ReportEntry(provider.label, provider.render()))
        logger.debug(f"Collected {name}")

    return entries
