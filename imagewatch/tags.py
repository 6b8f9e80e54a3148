"""Sorting and filtering of repository tags."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from functools import cmp_to_key
from itertools import dropwhile

from imagewatch.utl import is_excluded, is_included


class SortTag(str, Enum):
    """How tags of a repository are ordered."""

    DEFAULT = "default"
    REVERSE = "reverse"
    LEXICOGRAPHICAL = "lexicographical"
    SEMVER = "semver"

    @classmethod
    def valid(cls, value: str) -> bool:
        """Return True if ``value`` names a sort type."""
        return value in {member.value for member in cls}


@dataclass
class Tags:
    """Tags kept after filtering, with counts of what was dropped."""

    list: list[str] = field(default_factory=list)
    not_included: int = 0
    excluded: int = 0
    total: int = 0


_NUM = r"(?:0|[1-9][0-9]*)"
_PRE_IDENT = r"(?:0|[1-9][0-9]*|[0-9]*[A-Za-z-][0-9A-Za-z-]*)"
_SEMVER_RE = re.compile(
    r"v(" + _NUM + r")"
    r"(?:\.(" + _NUM + r")"
    r"(?:\.(" + _NUM + r")"
    r"(?:-(" + _PRE_IDENT + r"(?:\." + _PRE_IDENT + r")*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r")?)?",
    re.ASCII,
)


def _parse_semver(v: str) -> tuple[str, str, str, str] | None:
    match = _SEMVER_RE.fullmatch(v)
    if match is None:
        return None
    major, minor, patch, prerelease = match.groups()
    return major, minor or "0", patch or "0", prerelease or ""


def _compare_int(x: str, y: str) -> int:
    if x == y:
        return 0
    if len(x) != len(y):
        return -1 if len(x) < len(y) else 1
    return -1 if x < y else 1


def _is_num(s: str) -> bool:
    return s.isascii() and s.isdigit()


def _compare_prerelease(x: str, y: str) -> int:
    if x == y:
        return 0
    if not x:
        return 1
    if not y:
        return -1
    xs, ys = x.split("."), y.split(".")
    for dx, dy in zip(xs, ys):
        if dx == dy:
            continue
        nx, ny = _is_num(dx), _is_num(dy)
        if nx and ny:
            return _compare_int(dx, dy)
        if nx != ny:
            return -1 if nx else 1
        return -1 if dx < dy else 1
    if len(xs) == len(ys):
        return 0
    return -1 if len(xs) < len(ys) else 1


def _compare_semver(v: str, w: str) -> int:
    pv, pw = _parse_semver(v), _parse_semver(w)
    if pv is None and pw is None:
        return 0
    if pv is None:
        return -1
    if pw is None:
        return 1
    for a, b in zip(pv[:3], pw[:3]):
        c = _compare_int(a, b)
        if c:
            return c
    return _compare_prerelease(pv[3], pw[3])


def _semver_ish(tag: str) -> str:
    rest = "".join(dropwhile(lambda ch: not unicodedata.category(ch).startswith("N"), tag))
    candidate = f"v{rest}"
    return candidate if _parse_semver(candidate) is not None else ""


def _semver_order(a: str, b: str) -> int:
    c = _compare_semver(_semver_ish(a), _semver_ish(b))
    if c:
        return -c
    dots = a.count(".") - b.count(".")
    if dots:
        return -1 if dots > 0 else 1
    return (a > b) - (a < b)


def sort_tags(tags: Iterable[str], sort_tag: SortTag | str) -> list[str]:
    """Return ``tags`` ordered according to ``sort_tag``; unknown types keep the order."""
    tags = list(tags)
    if not SortTag.valid(sort_tag):
        return tags
    kind = SortTag(sort_tag)
    if kind is SortTag.REVERSE:
        return tags[::-1]
    if kind is SortTag.LEXICOGRAPHICAL:
        return sorted(tags)
    if kind is SortTag.SEMVER:
        return sorted(tags, key=cmp_to_key(_semver_order))
    return tags


def filter_tags(
    tags: Iterable[str],
    sort_tag: SortTag | str = SortTag.DEFAULT,
    include: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
    max_tags: int = 0,
) -> Tags:
    """Sort ``tags``, keep those included and not excluded, and cap at ``max_tags`` if positive."""
    tags = list(tags)
    include = list(include or [])
    exclude = list(exclude or [])
    result = Tags(total=len(tags))
    for tag in sort_tags(tags, sort_tag):
        if not is_included(tag, include):
            result.not_included += 1
        elif is_excluded(tag, exclude):
            result.excluded += 1
        else:
            result.list.append(tag)
    if max_tags > 0:
        result.list = result.list[:max_tags]
    return result