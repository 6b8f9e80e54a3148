"""Parsing and normalisation of container image references."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

DEFAULT_DOMAIN = "docker.io"
LEGACY_DEFAULT_DOMAIN = "index.docker.io"
OFFICIAL_REPO_PREFIX = "library/"
DEFAULT_TAG = "latest"
NAME_TOTAL_LENGTH_MAX = 255

_ALNUM = r"[a-z0-9]+"
_SEPARATOR = r"(?:[._]|__|[-]+)"
_PATH_COMPONENT = _ALNUM + r"(?:" + _SEPARATOR + _ALNUM + r")*"
_DOMAIN_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
_DOMAIN_NAME = _DOMAIN_COMPONENT + r"(?:\." + _DOMAIN_COMPONENT + r")*"
_IPV6 = r"\[[a-fA-F0-9:]+\]"
_DOMAIN = r"(?:" + _DOMAIN_NAME + r"|" + _IPV6 + r")(?::[0-9]+)?"
_PATH = _PATH_COMPONENT + r"(?:/" + _PATH_COMPONENT + r")*"
_NAME = r"(?:" + _DOMAIN + r"/)?" + _PATH
_TAG = r"[\w][\w.-]{0,127}"
_DIGEST = r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}"

_REFERENCE_RE = re.compile(
    r"(" + _NAME + r")(?::(" + _TAG + r"))?(?:@(" + _DIGEST + r"))?", re.ASCII
)
_ANCHORED_NAME_RE = re.compile(r"(?:(" + _DOMAIN + r")/)?(" + _PATH + r")", re.ASCII)
_ANCHORED_TAG_RE = re.compile(_TAG, re.ASCII)
_ANCHORED_IDENTIFIER_RE = re.compile(r"[a-f0-9]{64}")

_DIGEST_HEX_LENGTHS = {"sha256": 64, "sha384": 96, "sha512": 128}


class ReferenceParseError(ValueError):
    """Raised when an image reference cannot be parsed."""


@dataclass(frozen=True)
class Reference:
    """A named image reference with an optional tag and digest."""

    domain: str
    path: str
    tag: str | None = None
    digest: str | None = None

    @property
    def name(self) -> str:
        """Full repository name, domain included."""
        return f"{self.domain}/{self.path}" if self.domain else self.path

    def __str__(self) -> str:
        text = self.name
        if self.tag:
            text += f":{self.tag}"
        if self.digest:
            text += f"@{self.digest}"
        return text

    def trimmed(self) -> Reference:
        """Return the reference without its tag and digest."""
        return replace(self, tag=None, digest=None)

    def with_tag(self, tag: str) -> Reference:
        """Return the reference with ``tag``, keeping any digest."""
        if not _ANCHORED_TAG_RE.fullmatch(tag):
            raise ReferenceParseError(f"invalid tag format: {tag!r}")
        return replace(self, tag=tag)


def _validate_digest(digest: str) -> None:
    algorithm, _, encoded = digest.partition(":")
    expected = _DIGEST_HEX_LENGTHS.get(algorithm)
    if expected is None:
        raise ReferenceParseError(f"unsupported digest algorithm: {digest}")
    if len(encoded) != expected or not re.fullmatch(r"[a-f0-9]+", encoded):
        raise ReferenceParseError(f"invalid checksum digest format: {digest}")


def _parse(s: str) -> Reference:
    match = _REFERENCE_RE.fullmatch(s)
    if match is None:
        if not s:
            raise ReferenceParseError("repository name must have at least one component")
        if _REFERENCE_RE.fullmatch(s.lower()):
            raise ReferenceParseError("repository name must be lowercase")
        raise ReferenceParseError(f"invalid reference format: {s!r}")
    name, tag, digest = match.groups()
    if len(name) > NAME_TOTAL_LENGTH_MAX:
        raise ReferenceParseError(
            f"repository name must not be more than {NAME_TOTAL_LENGTH_MAX} characters"
        )
    name_match = _ANCHORED_NAME_RE.fullmatch(name)
    if name_match is None:
        raise ReferenceParseError(f"invalid reference format: {s!r}")
    domain, path = name_match.groups()
    if digest:
        _validate_digest(digest)
    return Reference(domain=domain or "", path=path, tag=tag or None, digest=digest or None)


def _split_docker_domain(name: str) -> tuple[str, str]:
    first, sep, rest = name.partition("/")
    if not sep or (
        not any(c in first for c in ".:") and first != "localhost" and first.lower() == first
    ):
        domain, remainder = DEFAULT_DOMAIN, name
    else:
        domain, remainder = first, rest
    if domain == LEGACY_DEFAULT_DOMAIN:
        domain = DEFAULT_DOMAIN
    if domain == DEFAULT_DOMAIN and "/" not in remainder:
        remainder = OFFICIAL_REPO_PREFIX + remainder
    return domain, remainder


def parse_normalized_named(name: str) -> Reference:
    """Parse ``name`` the way the docker CLI does, filling in the default domain."""
    if _ANCHORED_IDENTIFIER_RE.fullmatch(name):
        raise ReferenceParseError(
            f"invalid repository name ({name}), cannot specify 64-byte hexadecimal strings"
        )
    domain, remainder = _split_docker_domain(name)
    remainder_name = remainder.split(":", 1)[0]
    if remainder_name.lower() != remainder_name:
        raise ReferenceParseError(
            f"invalid reference format: repository name ({remainder}) must be lowercase"
        )
    return _parse(f"{domain}/{remainder}")


def tag_name_only(ref: Reference) -> Reference:
    """Add the default tag to a reference that has neither tag nor digest."""
    if ref.tag is None and ref.digest is None:
        return ref.with_tag(DEFAULT_TAG)
    return ref


def image_reference(name: str) -> Reference:
    """Return a tagged reference for ``name``, dropping a digest.

    A digest-only reference gets the default tag; a tagged and digested one keeps its tag.
    """
    stripped = name.removeprefix("//")
    try:
        ref = parse_normalized_named(stripped)
    except ReferenceParseError as exc:
        raise ReferenceParseError(
            f"cannot parse reference: parsing normalized named {stripped!r}: {exc}"
        ) from exc
    if ref.tag is not None or ref.digest is not None:
        ref = replace(ref, digest=None)
    return tag_name_only(ref)