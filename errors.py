"""Error taxonomy for fact collection.

Providers raise one of the concrete kinds below; the orchestration layer
catches ``FetchError`` so one broken source never takes the whole report
down with it.

 - SourceUnavailable: expected file, device or environment value absent
 - ParseFailure: data present but not in the expected shape
 - ExternalCommandFailed: child process or HTTP lookup missing / failed
 - ConfigurationError: bad user-supplied input (logo file, package manager)
"""
from __future__ import annotations


class FetchError(Exception):
    """Base error for anything that stops a fact from being collected."""


class SourceUnavailable(FetchError):
    """The backing file, device or variable does not exist."""


class ParseFailure(FetchError):
    """Numeric or structural parse failure on otherwise-present data."""


class ExternalCommandFailed(FetchError):
    """Command missing, exited non-zero, or produced undecodable output."""


class ConfigurationError(FetchError):
    """User-supplied configuration could not be used."""


__all__ = [
    "FetchError",
    "SourceUnavailable",
    "ParseFailure",
    "ExternalCommandFailed",
    "ConfigurationError",
]
