#!/usr/bin/env python3
"""
Raw sources - file, command and HTTP accessors used by the providers

Nothing in here interprets data: every accessor either returns the raw
text it found or raises one of the ``errors`` kinds.  Providers receive a
``RawSource`` instance so tests can hand them fixture text instead of the
real /proc tree.
"""

import glob
import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional

import requests as _requests

from errors import ExternalCommandFailed, SourceUnavailable

logger = logging.getLogger(__name__)

_USER_AGENT = "hostfetch/1.0"


def read_text(path: str) -> str:
    """Return the contents of a text file, or raise SourceUnavailable."""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        raise SourceUnavailable(f"{path}: {e.strerror or e}") from e


def run_command(argv: List[str]) -> str:
    """
    Run a command to completion and return its stdout.
    A missing binary, a non-zero exit or non-UTF-8 output all raise
    ExternalCommandFailed.  There is no timeout: a hung tool blocks the run.
    """
    logger.debug(f"Running {argv!r}")
    try:
        result = subprocess.run(argv, capture_output=True, check=False)
    except OSError as e:
        raise ExternalCommandFailed(f"{argv[0]}: {e.strerror or e}") from e

    if result.returncode != 0:
        raise ExternalCommandFailed(
            f"{' '.join(argv)} exited with status {result.returncode}"
        )
    try:
        return result.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ExternalCommandFailed(f"{argv[0]}: undecodable output") from e


def count_entries(pattern: str) -> int:
    """Count filesystem entries matching a glob pattern."""
    return len(glob.glob(pattern))


def fetch_url(url: str, timeout: int = 10) -> str:
    """GET a URL and return the response body as text."""
    try:
        resp = _requests.get(url, headers={"User-Agent": _USER_AGENT}, timeout=timeout)
        resp.raise_for_status()
    except _requests.RequestException as e:
        raise ExternalCommandFailed(f"GET {url}: {e}") from e
    return resp.text


class RawSource:
    """Bundle of the accessors above; override methods to inject fixtures."""

    def read_text(self, path: str) -> str:
        return read_text(path)

    def run(self, argv: List[str]) -> str:
        return run_command(argv)

    def count_entries(self, pattern: str) -> int:
        return count_entries(pattern)

    def fetch(self, url: str) -> str:
        return fetch_url(url)

    def env(self, name: str) -> Optional[str]:
        return os.environ.get(name)

    def home(self) -> Path:
        return Path.home()
