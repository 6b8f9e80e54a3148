"""Image names split into registry domain, path, tag and digest, with a hub link."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass, field

from imagewatch.reference import (
    Reference,
    ReferenceParseError,
    parse_normalized_named,
    tag_name_only,
)

_ACTION_RE = re.compile(r"\{\{\s*\.([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


@dataclass(frozen=True)
class Image:
    """Information about an image reference."""

    domain: str
    path: str
    tag: str = ""
    digest: str = ""
    hub_link: str = ""
    named: Reference | None = field(default=None, repr=False, compare=False)

    @property
    def name(self) -> str:
        """Full repository name of the image."""
        return self.named.name if self.named else f"{self.domain}/{self.path}"

    def __str__(self) -> str:
        return str(self.named) if self.named else self.name

    def reference(self) -> str:
        """Return the digest if there is one, otherwise the tag."""
        if len(self.digest) > 1:
            return self.digest
        return self.tag


def _render_template(template: str, fields: dict[str, str]) -> str:
    parts: list[str] = []
    pos = 0
    for match in _ACTION_RE.finditer(template):
        parts.append(template[pos : match.start()])
        key = match.group(1)
        if key not in fields:
            raise ValueError(f"can't evaluate field {key}")
        parts.append(fields[key])
        pos = match.end()
    parts.append(template[pos:])
    for literal in parts[::2]:
        if "{{" in literal or "}}" in literal:
            raise ValueError(f"unsupported template action in {template!r}")
    return "".join(parts)


def _hub_link(domain: str, path: str, named: Reference, hub_tpl: str) -> str:
    if hub_tpl:
        # Tag and digest are not yet known when the link is resolved.
        fields = {
            "Domain": domain,
            "Path": path,
            "Tag": "",
            "Digest": "",
            "HubLink": "",
            "Name": named.name,
            "String": str(named),
            "Reference": "",
        }
        return _render_template(hub_tpl, fields)

    if domain == "docker.io":
        prefix, repo = "r", path
        if path.startswith("library/"):
            prefix, repo = "_", path.replace("library/", "", 1)
        return f"https://hub.docker.com/{prefix}/{repo}"
    if domain in ("docker.bintray.io", "jfrog-docker-reg2.bintray.io"):
        return "https://bintray.com/jfrog/reg2/" + path.replace("/", "%3A")
    if domain == "docker.pkg.github.com":
        return f"https://github.com/{posixpath.dirname(path) or '.'}/packages"
    if domain == "gcr.io":
        return f"https://{domain}/{path}"
    if domain == "ghcr.io":
        parts = path.split("/")
        if len(parts) < 2:
            raise ValueError(f"path {path!r} has no package name")
        return f"https://github.com/users/{parts[0]}/packages/container/package/{parts[1]}"
    if domain == "quay.io":
        return f"https://quay.io/repository/{path}"
    if domain == "registry.access.redhat.com":
        return f"https://access.redhat.com/containers/#/registry.access.redhat.com/{path}"
    if domain == "registry.gitlab.com":
        return f"https://gitlab.com/{path}/container_registry"
    return ""


def parse_image(name: str, hub_tpl: str = "") -> Image:
    """Parse ``name`` into an Image, defaulting the tag to ``latest``.

    ``hub_tpl`` may be a template such as ``https://{{ .Domain }}/{{ .Path }}``.
    """
    try:
        named = tag_name_only(parse_normalized_named(name))
    except ReferenceParseError as exc:
        raise ReferenceParseError(f"parsing image {name} failed: {exc}") from exc

    try:
        hub_link = _hub_link(named.domain, named.path, named, hub_tpl)
    except ValueError as exc:
        raise ValueError(f"resolving hub link for image {name} failed: {exc}") from exc

    return Image(
        domain=named.domain,
        path=named.path,
        tag=named.tag or "",
        digest=named.digest or "",
        hub_link=hub_link,
        named=named,
    )