import pytest

from errors import ParseFailure, SourceUnavailable
from memory import (
    MEMINFO_PATH,
    MemoryProvider,
    MemorySnapshot,
    Platform,
    detect_platform,
    format_mib,
    freebsd_usage,
    linux_usage,
    netbsd_usage,
    openbsd_usage,
)
from _helpers import FakeSource

LINUX_MEMINFO = """\
MemTotal:       16384000 kB
MemFree:         8192000 kB
MemAvailable:   12000000 kB
Buffers:          204800 kB
Cached:          1024000 kB
SwapCached:            0 kB
Shmem:             51200 kB
SReclaimable:     102400 kB
HugePages_Total:       0
"""

OPENBSD_VMSTAT = """\
 procs    memory       page                    disks    traps          cpu
 r b w    avm     fre  flt  re  pi  po  fr  sr sd0 sd1  int   sys   cs us sy id
 1 0 2147483648 6291456  120   0   0   0   0   0   3   0  210   890  400  2  1 97
"""

FREEBSD_PHYSMEM = "17179869184\n"
FREEBSD_VM_STATS = "4096\n1048576\n1048576\n262144\n"

FREEBSD_SYSCTL = (
    "sysctl", "-n",
    "hw.pagesize",
    "vm.stats.vm.v_inactive_count",
    "vm.stats.vm.v_free_count",
    "vm.stats.vm.v_cache_count",
)


def _source_for(tag):
    if tag == Platform.LINUX:
        return FakeSource(files={MEMINFO_PATH: LINUX_MEMINFO})
    if tag == Platform.OPENBSD:
        return FakeSource(commands={
            ("sysctl", "-n", "hw.physmem"): "8589934592\n",
            ("vmstat",): OPENBSD_VMSTAT,
        })
    if tag in (Platform.FREEBSD, Platform.DRAGONFLY):
        return FakeSource(commands={
            ("sysctl", "-n", "hw.physmem"): FREEBSD_PHYSMEM,
            FREEBSD_SYSCTL: FREEBSD_VM_STATS,
        })
    if tag == Platform.NETBSD:
        return FakeSource(
            files={MEMINFO_PATH: "MemTotal: 8388608 kB\nMemFree: 4194304 kB\n"},
            commands={("sysctl", "-n", "hw.physmem64"): "8589934592\n"},
        )
    return FakeSource()


def test_linux_scenario():
    snap = linux_usage(LINUX_MEMINFO)
    # 16384000 + 51200 - 102400 - 204800 - 1024000 - 8192000 = 6912000 kB
    assert snap.used_mib == pytest.approx(6750.0)
    assert snap.total_mib == pytest.approx(16000.0)
    assert snap.total_mib / 1024 == pytest.approx(15.63, abs=0.01)


def test_linux_provider_render():
    provider = MemoryProvider(Platform.LINUX, _source_for(Platform.LINUX))
    provider.acquire()
    assert provider.render() == "6.59GiB / 15.62GiB"


def test_linux_ignores_unrelated_malformed_keys():
    text = LINUX_MEMINFO + "DirectMap4k:   not-a-number kB\n"
    assert linux_usage(text).used_mib == pytest.approx(6750.0)


def test_linux_malformed_counter():
    with pytest.raises(ParseFailure):
        linux_usage(LINUX_MEMINFO.replace("204800", "lots"))


def test_linux_missing_total():
    with pytest.raises(ParseFailure):
        linux_usage("MemFree: 100 kB\n")


def test_linux_missing_file():
    provider = MemoryProvider(Platform.LINUX, FakeSource())
    with pytest.raises(SourceUnavailable):
        provider.acquire()
    assert provider.render() == "? / ?"


def test_openbsd_usage():
    snap = openbsd_usage("8589934592\n", OPENBSD_VMSTAT)
    assert snap.total_mib == pytest.approx(8192.0)
    assert snap.used_mib == pytest.approx(2048.0)


def test_openbsd_empty_vmstat():
    with pytest.raises(ParseFailure):
        openbsd_usage("8589934592\n", "\n")


def test_freebsd_usage():
    snap = freebsd_usage(FREEBSD_PHYSMEM, FREEBSD_VM_STATS)
    # (1048576 + 1048576 + 262144) pages * 4096 = 9216 MiB reclaimable
    assert snap.total_mib == pytest.approx(16384.0)
    assert snap.used_mib == pytest.approx(7168.0)


def test_freebsd_short_batch():
    with pytest.raises(ParseFailure):
        freebsd_usage(FREEBSD_PHYSMEM, "4096\n1\n")


def test_freebsd_bad_physmem():
    with pytest.raises(ParseFailure):
        freebsd_usage("unknown oid\n", FREEBSD_VM_STATS)


def test_netbsd_keeps_units_unscaled():
    snap = netbsd_usage("8589934592\n", "MemFree: 4194304 kB\n")
    assert snap.total_mib == 8589934592
    assert snap.used_mib == 8589934592 - 4194304


@pytest.mark.parametrize("tag", [
    Platform.LINUX, Platform.OPENBSD, Platform.FREEBSD, Platform.DRAGONFLY, Platform.NETBSD,
])
def test_used_never_exceeds_total(tag):
    provider = MemoryProvider(tag, _source_for(tag))
    provider.acquire()
    snap = provider.snapshot
    assert snap.used_mib is not None and snap.total_mib is not None
    assert 0 <= snap.used_mib <= snap.total_mib


@pytest.mark.parametrize("tag", list(Platform))
def test_unacquired_renders_placeholders(tag):
    assert MemoryProvider(tag, FakeSource()).render() == "? / ?"


def test_unknown_platform_acquire_is_a_noop():
    source = FakeSource()
    provider = MemoryProvider(Platform.UNKNOWN, source)
    provider.acquire()
    assert provider.snapshot == MemorySnapshot()
    assert provider.render() == "? / ?"
    assert source.calls == []


def test_fields_render_independently():
    provider = MemoryProvider(Platform.UNKNOWN, FakeSource())
    provider.snapshot = MemorySnapshot(used_mib=512.0, total_mib=None)
    assert provider.render() == "512MiB / ?"
    provider.snapshot = MemorySnapshot(used_mib=None, total_mib=2048.0)
    assert provider.render() == "? / 2.00GiB"


def test_format_mib():
    assert format_mib(None) == "?"
    assert format_mib(512) == "512MiB"
    assert format_mib(1536) == "1.50GiB"


def test_detect_platform():
    assert detect_platform("Linux") == Platform.LINUX
    assert detect_platform("OpenBSD") == Platform.OPENBSD
    assert detect_platform("FreeBSD") == Platform.FREEBSD
    assert detect_platform("DragonFly") == Platform.DRAGONFLY
    assert detect_platform("NetBSD") == Platform.NETBSD
    assert detect_platform("Windows") == Platform.UNKNOWN
