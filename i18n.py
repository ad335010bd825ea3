"""
String table for the hostfetch CLI.

Usage:
    import i18n
    i18n.init()                     # load locales/en.json
    i18n.t('cli.arg_cpu')           # → "Show CPU model, core count and frequency."
    i18n.t('cli.logo_failed', error=e)
"""

import json
import site
import sys
from pathlib import Path
from typing import List

_strings: dict = {}


def _candidate_dirs() -> List[Path]:
    """Source checkout first, then where setup.py's data_files lands."""
    return [
        Path(__file__).resolve().parent / 'locales',
        Path(sys.prefix) / 'locales',
        Path(site.getuserbase()) / 'locales',
    ]


def init() -> None:
    """Load the first en.json found; unknown keys fall back to themselves."""
    global _strings

    for locales_dir in _candidate_dirs():
        path = locales_dir / 'en.json'
        if path.is_file():
            with open(path, encoding='utf-8') as f:
                _strings = json.load(f)
            return


def t(key: str, **kwargs) -> str:
    """Look up a string by key, with optional {name} placeholder interpolation."""
    text = _strings.get(key, key)

    if kwargs:
        try:
            text = text.format(**kwargs)
        except (KeyError, IndexError):
            pass

    return text
