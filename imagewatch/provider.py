"""Validation of watched images from provider labels, and job building."""

from __future__ import annotations

import platform as _host
import re
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from imagewatch.tags import SortTag

_METADATA_KEY_CHARS = "a-zA-Z0-9_"
_METADATA_KEY_RE = re.compile(f"[{_METADATA_KEY_CHARS}]+")
_INT_RE = re.compile(r"[+-]?[0-9]+")
_SPECIFIER_RE = re.compile(r"[A-Za-z0-9_-]+")

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_KNOWN_OS = frozenset(
    {
        "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios",
        "js", "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris", "windows",
        "zos", "wasip1",
    }
)
_KNOWN_ARCH = frozenset(
    {
        "386", "amd64", "amd64p32", "arm", "armbe", "arm64", "arm64be", "ppc64",
        "ppc64le", "loong64", "mips", "mipsle", "mips64", "mips64le", "mips64p32",
        "mips64p32le", "ppc", "riscv", "riscv64", "s390", "s390x", "sparc",
        "sparc64", "wasm",
    }
)


class ValidationError(ValueError):
    """Raised when the labels of an image hold an invalid value."""


class NotifyOn(str, Enum):
    """Which kind of change triggers a notification."""

    NEW = "new"
    UPDATE = "update"

    @classmethod
    def valid(cls, value: str) -> bool:
        """Return True if ``value`` names a notify status."""
        return value in {member.value for member in cls}


@dataclass(frozen=True)
class ImagePlatform:
    """Operating system, architecture and variant of an image."""

    os: str = ""
    arch: str = ""
    variant: str = ""


@dataclass
class Defaults:
    """Default settings applied to every watched image."""

    watch_repo: bool | None = None
    notify_on: list[NotifyOn] = field(default_factory=list)
    max_tags: int = 0
    sort_tags: SortTag | None = None
    include_tags: list[str] = field(default_factory=list)
    exclude_tags: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class WatchedImage:
    """An image to watch, with the options that drive the analysis."""

    name: str
    reg_opt: str = ""
    watch_repo: bool | None = None
    notify_on: list[NotifyOn] = field(default_factory=list)
    max_tags: int = 0
    sort_tags: SortTag | None = None
    include_tags: list[str] = field(default_factory=list)
    exclude_tags: list[str] = field(default_factory=list)
    hub_tpl: str = ""
    hub_link: str = ""
    platform: ImagePlatform = field(default_factory=ImagePlatform)
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Job:
    """An image found by a provider."""

    provider: str
    image: WatchedImage


def _quote(s: str) -> str:
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _parse_bool(value: str) -> bool:
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"parsing {_quote(value)}: invalid syntax")


def _parse_int(value: str) -> int:
    if not _INT_RE.fullmatch(value):
        raise ValueError(f"parsing {_quote(value)}: invalid syntax")
    return int(value)


def _normalize_os(os_name: str) -> str:
    os_name = os_name.lower()
    return "darwin" if os_name == "macos" else os_name


def _normalize_arch(arch: str, variant: str) -> tuple[str, str]:
    arch, variant = arch.lower(), variant.lower()
    if arch == "i386":
        return "386", ""
    if arch in ("x86_64", "x86-64", "amd64"):
        return "amd64", "" if variant == "v1" else variant
    if arch in ("aarch64", "arm64"):
        if variant in ("8", "v8", "v8.0"):
            variant = ""
        elif variant in ("9", "v9", "v9.0"):
            variant = "v9"
        return "arm64", variant
    if arch == "armhf":
        return "arm", "v7"
    if arch == "armel":
        return "arm", "v6"
    if arch == "arm":
        if variant in ("", "7"):
            variant = "v7"
        elif variant in ("5", "6", "8"):
            variant = "v" + variant
        return "arm", variant
    return arch, variant


def _host_os() -> str:
    name = sys.platform
    if name == "win32":
        return "windows"
    for known in ("linux", "darwin", "freebsd", "openbsd", "netbsd", "aix"):
        if name.startswith(known):
            return known
    return name


def _host_arch() -> str:
    machine = _host.machine().lower()
    mapping = {
        "x86_64": "amd64",
        "amd64": "amd64",
        "aarch64": "arm64",
        "arm64": "arm64",
        "i386": "386",
        "i686": "386",
        "x86": "386",
    }
    if machine in mapping:
        return mapping[machine]
    if machine.startswith("arm"):
        return "arm"
    return machine


def parse_platform(value: str) -> ImagePlatform:
    """Parse a platform specifier such as ``linux/arm/v7``.

    Raises ValueError for specifiers that are malformed or name nothing known.
    """
    if "*" in value:
        raise ValueError(f"{_quote(value)}: wildcards not yet supported")
    parts = value.split("/")
    for part in parts:
        if not _SPECIFIER_RE.fullmatch(part):
            raise ValueError(
                f"{_quote(part)} is an invalid component of {_quote(value)}: "
                "platform specifier component must match \"^[A-Za-z0-9_-]+$\""
            )

    if len(parts) == 1:
        os_name = _normalize_os(parts[0])
        if os_name in _KNOWN_OS:
            arch, variant = _normalize_arch(_host_arch(), "")
            return ImagePlatform(os=os_name, arch=arch, variant=variant)
        arch, variant = _normalize_arch(parts[0], "")
        if arch in _KNOWN_ARCH:
            return ImagePlatform(os=_host_os(), arch=arch, variant=variant)
        raise ValueError(f"{_quote(value)}: unknown operating system or architecture")

    if len(parts) == 2:
        arch, variant = _normalize_arch(parts[1], "")
        if arch == "arm" and variant == "v7":
            variant = ""
        return ImagePlatform(os=_normalize_os(parts[0]), arch=arch, variant=variant)

    if len(parts) == 3:
        arch, variant = _normalize_arch(parts[1], parts[2])
        if arch == "arm64" and not variant:
            variant = "v8"
        return ImagePlatform(os=_normalize_os(parts[0]), arch=arch, variant=variant)

    raise ValueError(f"{_quote(value)}: cannot parse platform specifier")


def _from_defaults(name: str, defaults: Defaults | None) -> WatchedImage:
    if defaults is None:
        return WatchedImage(name=name)
    return WatchedImage(
        name=name,
        watch_repo=defaults.watch_repo,
        notify_on=list(defaults.notify_on),
        max_tags=defaults.max_tags,
        sort_tags=defaults.sort_tags,
        include_tags=list(defaults.include_tags),
        exclude_tags=list(defaults.exclude_tags),
        metadata=dict(defaults.metadata),
    )


def _apply_label(img: WatchedImage, key: str, value: str) -> None:
    if key == "diun.regopt":
        img.reg_opt = value
    elif key == "diun.watch_repo":
        try:
            img.watch_repo = _parse_bool(value)
        except ValueError as exc:
            raise ValidationError(
                f"cannot parse {_quote(value)} value of label {key}: {exc}"
            ) from exc
    elif key == "diun.notify_on":
        if not value:
            return
        statuses = value.split(";")
        if not all(NotifyOn.valid(status) for status in statuses):
            raise ValidationError(f"unknown notify status {_quote(value)}")
        img.notify_on = [NotifyOn(status) for status in statuses]
    elif key == "diun.sort_tags":
        if not value:
            return
        if not SortTag.valid(value):
            raise ValidationError(f"unknown sort tags type {_quote(value)}")
        img.sort_tags = SortTag(value)
    elif key == "diun.max_tags":
        try:
            img.max_tags = _parse_int(value)
        except ValueError as exc:
            raise ValidationError(
                f"cannot parse {_quote(value)} value of label {key}: {exc}"
            ) from exc
    elif key == "diun.include_tags":
        img.include_tags = value.split(";")
    elif key == "diun.exclude_tags":
        img.exclude_tags = value.split(";")
    elif key == "diun.hub_tpl":
        img.hub_tpl = value
    elif key == "diun.hub_link":
        img.hub_link = value
    elif key == "diun.platform":
        try:
            img.platform = parse_platform(value)
        except ValueError as exc:
            raise ValidationError(
                f"cannot parse {_quote(value)} platform of label {key}: {exc}"
            ) from exc
    elif key.startswith("diun.metadata."):
        mkey = key.removeprefix("diun.metadata.")
        if not mkey or not value:
            return
        if not _METADATA_KEY_RE.fullmatch(mkey):
            raise ValidationError(
                f"invalid metadata key {_quote(mkey)}: only {_quote(_METADATA_KEY_CHARS)} are allowed"
            )
        img.metadata[mkey] = value


def validate_image(
    image: str,
    metadata: Mapping[str, str] | None,
    labels: Mapping[str, str] | None,
    watch_by_default: bool,
    defaults: Defaults | None,
) -> WatchedImage | None:
    """Build the watched image described by ``labels``.

    Returns None when watching is disabled for the image, and raises
    ValidationError when a label holds an invalid value. Provider ``metadata``
    fills keys the labels did not set.
    """
    labels = labels or {}
    img = _from_defaults(image, defaults)

    if "diun.enable" in labels:
        enable_str = labels["diun.enable"]
        try:
            enabled = _parse_bool(enable_str)
        except ValueError as exc:
            raise ValidationError(
                f"cannot parse {_quote(enable_str)} value of label diun.enable: {exc}"
            ) from exc
        if not enabled:
            return None
    elif not watch_by_default:
        return None

    for key, value in labels.items():
        _apply_label(img, key, value)

    for key, value in (metadata or {}).items():
        if not img.metadata.get(key):
            img.metadata[key] = value

    return img


def parse_service_tags(tags: Iterable[str]) -> dict[str, str]:
    """Turn ``key=value`` service tags into labels; tags without ``=`` are ignored."""
    labels: dict[str, str] = {}
    for tag in tags:
        key, sep, value = tag.partition("=")
        if sep:
            labels[key] = value
    return labels


def make_jobs(provider: str, images: Iterable[WatchedImage | None]) -> list[Job]:
    """Wrap each watched image in a job for ``provider``, skipping disabled ones."""
    return [Job(provider=provider, image=image) for image in images if image is not None]