import logging

from memory import MEMINFO_PATH, Platform
from providers import OSRELEASE_PATH, UPTIME_PATH
from report import FACT_ORDER, ReportEntry, Selection, collect
from _helpers import FakeSource


def _host_source(**overrides):
    files = {
        "/etc/hostname": "box1\n",
        OSRELEASE_PATH: "6.1.0\n",
        UPTIME_PATH: "3720.0 100.0\n",
        MEMINFO_PATH: "MemTotal: 2048000 kB\nMemFree: 1024000 kB\n",
    }
    files.update(overrides.pop("files", {}))
    return FakeSource(
        files=files,
        commands={("id", "-un"): "alice\n"},
        env={"SHELL": "/bin/bash"},
        **overrides,
    )


def test_requested_follows_canonical_order():
    sel = Selection(facts=frozenset({"shell", "kernel", "user"}), packages="apt", music="mpd")
    assert sel.requested() == ["user", "kernel", "shell", "packages", "music"]
    assert [n for n in FACT_ORDER if n in sel.requested()] == sel.requested()


def test_empty_selection():
    assert Selection().is_empty()
    assert not Selection(packages="pacman").is_empty()


def test_collect_in_canonical_order():
    entries = collect(
        Selection(facts=frozenset({"kernel", "shell", "user", "host", "uptime"})),
        source=_host_source(),
        platform_tag=Platform.LINUX,
    )
    assert entries == [
        ReportEntry("USER", "alice"),
        ReportEntry("HOST", "box1"),
        ReportEntry("UPTIME", "1h 2m"),
        ReportEntry("KERNEL", "6.1.0"),
        ReportEntry("SHELL", "bash"),
    ]


def test_collect_memory_uses_platform():
    entries = collect(Selection(facts=frozenset({"memory"})), source=_host_source(), platform_tag=Platform.LINUX)
    assert entries == [ReportEntry("MEMORY", "1000MiB / 1.95GiB")]

    entries = collect(Selection(facts=frozenset({"memory"})), source=_host_source(), platform_tag=Platform.UNKNOWN)
    assert entries == [ReportEntry("MEMORY", "? / ?")]


def test_failing_provider_is_skipped(caplog):
    source = _host_source()
    del source.files[OSRELEASE_PATH]
    with caplog.at_level(logging.ERROR, logger="report"):
        entries = collect(Selection(facts=frozenset({"user", "kernel", "host"})), source=source)

    assert [e.label for e in entries] == ["USER", "HOST"]
    assert "Unable to retrieve kernel" in caplog.text


def test_all_failures_give_empty_report(caplog):
    with caplog.at_level(logging.ERROR, logger="report"):
        entries = collect(Selection(facts=frozenset({"host", "cpu"}), packages="brew"), source=FakeSource())
    assert entries == []
    assert "unknown package manager" in caplog.text


def test_each_provider_acquires_once():
    source = _host_source()
    collect(Selection(facts=frozenset({"kernel", "host"})), source=source)
    reads = [c for c in source.calls if c[0] == "read"]
    assert reads == [("read", "/etc/hostname"), ("read", OSRELEASE_PATH)]
