"""Small helpers for regular-expression filtering, environment and secret lookups."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from pathlib import Path


def match_string(exp: str, s: str) -> bool:
    """Report whether ``s`` contains any match of the regular expression ``exp``.

    An expression that does not compile never matches.
    """
    try:
        pattern = re.compile(exp, re.ASCII)
    except re.error:
        return False
    return pattern.search(s) is not None


def is_included(s: str, includes: Iterable[str] | None) -> bool:
    """Return True if ``s`` matches one of ``includes``; an empty list includes everything."""
    includes = list(includes or [])
    if not includes:
        return True
    return any(match_string(include, s) for include in includes)


def is_excluded(s: str, excludes: Iterable[str] | None) -> bool:
    """Return True if ``s`` matches one of ``excludes``; an empty list excludes nothing."""
    return any(match_string(exclude, s) for exclude in excludes or [])


def get_env(key: str, fallback: str) -> str:
    """Return the environment variable ``key``, or ``fallback`` when it is not set."""
    return os.environ.get(key, fallback)


def get_secret(plaintext: str, filename: str) -> str:
    """Return ``plaintext`` if given, else the content of ``filename``, else an empty string.

    Raises OSError when the file cannot be read.
    """
    if plaintext:
        return plaintext
    if filename:
        return Path(filename).read_text(encoding="utf-8")
    return ""