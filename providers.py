#!/usr/bin/env python3
"""
Providers - one class per fact that ends up in the report

Every provider follows the same two-step contract:

• acquire()  → does the I/O for its fact through a RawSource and stores the
               parsed value; raises an ``errors.FetchError`` subclass on failure
• render()   → turns whatever state is present into display text; never raises,
               falls back to ``placeholder`` when nothing was acquired

Sources
───────
• User      → `id -un`, fallback $USER
• Host      → /etc/hostname, fallback /proc/sys/kernel/hostname
• Uptime    → /proc/uptime
• Distro    → /etc/os-release (PRETTY_NAME, NAME)
• Kernel    → /proc/sys/kernel/osrelease
• WM/DE     → last line of ~/.xinitrc, fallback $XDG_CURRENT_DESKTOP / $DESKTOP_SESSION
• Shell     → $SHELL, Editor → $VISUAL / $EDITOR
• CPU       → /proc/cpuinfo + cpufreq max frequency
• IP        → public address via https://ipecho.net/plain
• Packages  → package manager query (line count) or package db listing
• Music     → `mpc current`

Memory lives in memory.py because of its per-platform accounting.
"""

import ipaddress
import logging
import re
from pathlib import PurePath
from typing import Dict, List, Optional

from errors import ConfigurationError, ExternalCommandFailed, ParseFailure, SourceUnavailable
from raw_sources import RawSource

logger = logging.getLogger(__name__)

HOSTNAME_PATHS = ("/etc/hostname", "/proc/sys/kernel/hostname")
UPTIME_PATH = "/proc/uptime"
OS_RELEASE_PATH = "/etc/os-release"
OSRELEASE_PATH = "/proc/sys/kernel/osrelease"
CPUINFO_PATH = "/proc/cpuinfo"
CPUFREQ_PATH = "/sys/devices/system/cpu/cpu0/cpufreq/cpuinfo_max_freq"
IP_LOOKUP_URL = "https://ipecho.net/plain"


class Provider:
    """Base class for a single report fact (not used directly)."""

    label = ""
    placeholder = "?"

    def __init__(self, source: RawSource = None):
        self.source = source or RawSource()
        self.value: Optional[str] = None

    def acquire(self) -> None:
        raise NotImplementedError

    def render(self) -> str:
        if self.value is None:
            return self.placeholder
        return self.value


# ── Environment ────────────────────────────────────────────────────────────────

class UserProvider(Provider):
    label = "USER"

    def acquire(self) -> None:
        try:
            user = self.source.run(["id", "-un"]).strip()
            if user:
                self.value = user
                return
        except ExternalCommandFailed as e:
            logger.debug(f"id -un failed, falling back to $USER: {e}")

        user = (self.source.env("USER") or "").strip()
        if not user:
            raise SourceUnavailable("USER is not set")
        self.value = user


class ShellProvider(Provider):
    label = "SHELL"

    def acquire(self) -> None:
        shell = (self.source.env("SHELL") or "").strip()
        if not shell:
            raise SourceUnavailable("SHELL is not set")
        self.value = PurePath(shell).name


class EditorProvider(Provider):
    label = "EDITOR"

    def acquire(self) -> None:
        editor = (self.source.env("VISUAL") or self.source.env("EDITOR") or "").strip()
        if not editor:
            raise SourceUnavailable("neither VISUAL nor EDITOR is set")
        self.value = PurePath(editor).name


class WindowManagerProvider(Provider):
    """
    Guess the WM/DE: the command exec'd at the end of ~/.xinitrc wins,
    otherwise whatever the session manager exported.
    """

    label = "WM/DE"
    placeholder = "Unknown"

    def acquire(self) -> None:
        wm = self._from_xinitrc()
        if not wm:
            desktop = self.source.env("XDG_CURRENT_DESKTOP") or ""
            if ":" in desktop:
                desktop = desktop.split(":")[-1]  # "ubuntu:GNOME" → "GNOME"
            wm = desktop.strip() or (self.source.env("DESKTOP_SESSION") or "").strip()
        if not wm:
            raise SourceUnavailable("Unable to guess window manager")
        self.value = wm

    def _from_xinitrc(self) -> str:
        path = self.source.home() / ".xinitrc"
        try:
            text = self.source.read_text(str(path))
        except SourceUnavailable:
            return ""
        lines = [l.strip() for l in text.splitlines() if l.strip() and not l.strip().startswith("#")]
        if not lines:
            logger.debug(f"{path} is empty")
            return ""
        return lines[-1].split()[-1]


# ── Host / OS ─────────────────────────────────────────────────────────────────

class DeviceProvider(Provider):
    label = "HOST"

    def acquire(self) -> None:
        for path in HOSTNAME_PATHS:
            try:
                name = self.source.read_text(path).strip()
            except SourceUnavailable:
                continue
            if name:
                self.value = name
                return
        raise SourceUnavailable("Unable to retrieve device name")


class DistroProvider(Provider):
    label = "DISTRO"
    placeholder = "Unknown"

    def acquire(self) -> None:
        os_release: Dict[str, str] = {}
        for line in self.source.read_text(OS_RELEASE_PATH).splitlines():
            line = line.strip()
            if "=" in line:
                key, _, value = line.partition("=")
                os_release[key] = value.strip('"\'')

        name = os_release.get("PRETTY_NAME") or os_release.get("NAME")
        if not name:
            raise ParseFailure(f"{OS_RELEASE_PATH} has neither PRETTY_NAME nor NAME")
        self.value = name


class KernelProvider(Provider):
    label = "KERNEL"

    def acquire(self) -> None:
        release = self.source.read_text(OSRELEASE_PATH).strip()
        if not release:
            raise ParseFailure(f"{OSRELEASE_PATH} is empty")
        self.value = release


class UptimeProvider(Provider):
    label = "UPTIME"

    def __init__(self, source: RawSource = None):
        super().__init__(source)
        self.seconds: Optional[int] = None

    def acquire(self) -> None:
        fields = self.source.read_text(UPTIME_PATH).split()
        if not fields:
            raise ParseFailure(f"{UPTIME_PATH} is empty")
        try:
            self.seconds = int(float(fields[0]))
        except ValueError as e:
            raise ParseFailure(f"{UPTIME_PATH}: bad uptime {fields[0]!r}") from e

    def render(self) -> str:
        if self.seconds is None:
            return self.placeholder
        days = self.seconds // 86400
        hours = (self.seconds % 86400) // 3600
        mins = (self.seconds % 3600) // 60
        parts = []
        if days:
            parts.append(f"{days}d")
        if hours:
            parts.append(f"{hours}h")
        parts.append(f"{mins}m")
        return " ".join(parts)


# ── Hardware ──────────────────────────────────────────────────────────────────

class CPUProvider(Provider):
    label = "CPU"

    def __init__(self, source: RawSource = None):
        super().__init__(source)
        self.model = ""
        self.cores = 0
        self.freq_mhz: Optional[int] = None

    def acquire(self) -> None:
        for line in self.source.read_text(CPUINFO_PATH).splitlines():
            key, sep, value = line.partition(":")
            if not sep:
                continue
            key, value = key.strip(), value.strip()
            if key in ("model name", "Hardware") and not self.model:
                self.model = value
            elif key == "processor":
                try:
                    self.cores = int(value) + 1
                except ValueError as e:
                    raise ParseFailure(f"{CPUINFO_PATH}: bad processor index {value!r}") from e

        if not self.model and not self.cores:
            raise ParseFailure(f"{CPUINFO_PATH}: no model or processor entries")

        # Not every machine exposes cpufreq (VMs, some ARM boards).
        try:
            raw = self.source.read_text(CPUFREQ_PATH).strip()
        except SourceUnavailable:
            logger.debug(f"{CPUFREQ_PATH} not available, leaving frequency out")
            return
        try:
            self.freq_mhz = int(raw) // 1000
        except ValueError as e:
            raise ParseFailure(f"{CPUFREQ_PATH}: bad frequency {raw!r}") from e

    def render(self) -> str:
        if not self.model and not self.cores:
            return self.placeholder

        model = re.sub(r"\(R\)|\(TM\)|CPU\s+", " ", self.model)
        model = re.sub(r"\s+@\s+[\d.]+\s*GHz", "", model)
        model = re.sub(r"\s+", " ", model).strip()

        if model and self.cores:
            text = f"{model} ({self.cores})"
        else:
            text = model or f"{self.cores} cores"
        if self.freq_mhz:
            text += f" @ {self.freq_mhz / 1000:.2f}GHz"
        return text


# ── Network ───────────────────────────────────────────────────────────────────

class NetworkProvider(Provider):
    label = "IP ADDRESS"

    def __init__(self, source: RawSource = None):
        super().__init__(source)
        self.address = None

    def acquire(self) -> None:
        body = self.source.fetch(IP_LOOKUP_URL).strip()
        try:
            self.address = ipaddress.ip_address(body)
        except ValueError as e:
            raise ParseFailure(f"{IP_LOOKUP_URL} returned {body[:40]!r}") from e

    def render(self) -> str:
        if self.address is None:
            return self.placeholder
        return str(self.address)


# ── Packages ──────────────────────────────────────────────────────────────────

# manager → (command, header lines to skip)
_PACKAGE_COMMANDS: Dict[str, tuple] = {
    "pacman": (["pacman", "-Qq"], 0),
    "apt": (["dpkg-query", "-f", ".\n", "-W"], 0),
    "xbps": (["xbps-query", "-l"], 0),
    "dnf": (["dnf", "list", "installed"], 1),
    "pkg": (["pkg", "info"], 0),
    "eopkg": (["eopkg", "list-installed"], 0),
    "rpm": (["rpm", "-qa"], 0),
    "apk": (["apk", "info"], 0),
    "pip": (["pip", "list"], 2),
}

# manager → glob (relative globs are resolved against $HOME)
_PACKAGE_GLOBS: Dict[str, str] = {
    "portage": "/var/db/pkg/*/*",
    "cargo": ".cargo/bin/*",
}

PACKAGE_MANAGERS: List[str] = sorted(list(_PACKAGE_COMMANDS) + list(_PACKAGE_GLOBS))


class PackagesProvider(Provider):
    def __init__(self, manager: str, source: RawSource = None):
        super().__init__(source)
        self.manager = manager.lower()
        self.label = f"PACKAGES ({self.manager.upper()})"
        self.count: Optional[int] = None

    def acquire(self) -> None:
        if self.manager in _PACKAGE_GLOBS:
            pattern = _PACKAGE_GLOBS[self.manager]
            if not pattern.startswith("/"):
                pattern = str(self.source.home() / pattern)
            self.count = self.source.count_entries(pattern)
            return

        if self.manager not in _PACKAGE_COMMANDS:
            raise ConfigurationError(
                f"unknown package manager {self.manager!r} "
                f"(expected one of: {', '.join(PACKAGE_MANAGERS)})"
            )
        argv, header = _PACKAGE_COMMANDS[self.manager]
        lines = [l for l in self.source.run(argv).splitlines() if l.strip()]
        self.count = max(len(lines) - header, 0)

    def render(self) -> str:
        if self.count is None:
            return self.placeholder
        return str(self.count)


# ── Music ─────────────────────────────────────────────────────────────────────

MPC_FORMAT = "%artist% - (%date%) %album% - %title%"

_MUSIC_COMMANDS: Dict[str, List[str]] = {
    "mpd": ["mpc", "current", "-f", MPC_FORMAT],
}


class MusicProvider(Provider):
    """Currently playing track; an empty value means nothing is playing."""

    def __init__(self, player: str = "mpd", source: RawSource = None):
        super().__init__(source)
        self.player = player.lower()
        self.label = f"MUSIC ({self.player.upper()})"

    def acquire(self) -> None:
        argv = _MUSIC_COMMANDS.get(self.player)
        if argv is None:
            raise ConfigurationError(
                f"unsupported music source {self.player!r} (only 'mpd' is supported)"
            )
        lines = self.source.run(argv).splitlines()
        self.value = lines[0].strip() if lines else ""
