# imagewatch

Helpers for deciding which container images to watch, and for reading
their references and tags.

## Modules

### `imagewatch.reference`

- `parse_normalized_named(name)` parses a name the way the docker CLI does.
  It fills in the `docker.io` domain and the `library/` prefix for official
  images. It returns a frozen `Reference` with `domain`, `path`, `tag`,
  `digest` and a `name` property.
- `tag_name_only(ref)` adds the `latest` tag to a reference that has no tag
  and no digest.
- `image_reference(name)` returns a tagged reference with any digest
  dropped. For example, `busybox@sha256:…` becomes
  `docker.io/library/busybox:latest`, and `busybox:v1.0.0@sha256:…` becomes
  `docker.io/library/busybox:v1.0.0`.
- `Reference.trimmed()` drops the tag and digest. `Reference.with_tag(tag)`
  sets a tag.
- Invalid names, such as names in upper case, raise `ReferenceParseError`,
  which is a `ValueError`.

### `imagewatch.image`

- `parse_image(name, hub_tpl="")` returns a frozen `Image` with `domain`,
  `path`, `tag`, `digest` and `hub_link`. It also has a `name` property and a
  `reference()` method, which returns the digest if there is one and the tag
  otherwise.
- `hub_link` is set for Docker Hub, `gcr.io`, `ghcr.io`, `quay.io`,
  `docker.pkg.github.com`, `registry.gitlab.com`,
  `registry.access.redhat.com` and the JFrog bintray registries. For any
  other domain it is empty, unless `hub_tpl` is given.
- A `hub_tpl` template uses the fields `{{ .Domain }}`, `{{ .Path }}`,
  `{{ .Name }}` and `{{ .String }}`. An unknown field raises `ValueError`.

### `imagewatch.tags`

- `SortTag` has the members `DEFAULT`, `REVERSE`, `LEXICOGRAPHICAL` and
  `SEMVER`.
- `sort_tags(tags, sort_tag)` returns a new list.
  - Semver ordering puts the newest version first. Non-numeric prefixes such
    as `alpine-` are ignored when versions are compared.
  - Tags that are not versions go last, in lexical order.
  - A sort type that is not known keeps the input order.
- `filter_tags(tags, sort_tag, include, exclude, max_tags)` returns a `Tags`
  with `list`, `not_included`, `excluded` and `total`.
  - It first sorts the tags.
  - It then keeps the tags that match an include pattern and match no
    exclude pattern. The patterns are regular expressions.
  - Finally, if `max_tags` is positive, it caps the list at that many tags.

### `imagewatch.provider`

- `validate_image(image, metadata, labels, watch_by_default, defaults)`
  reads `diun.*` labels into a `WatchedImage`, starting from the values in
  `Defaults`.
  - It returns `None` when watching is disabled, either by
    `diun.enable=false` or by `watch_by_default` being false without a
    `diun.enable` label.
  - Malformed values raise `ValidationError`.
  - Supported labels are `diun.regopt`, `diun.watch_repo`, `diun.notify_on`,
    `diun.sort_tags`, `diun.max_tags`, `diun.include_tags`,
    `diun.exclude_tags`, `diun.hub_tpl`, `diun.hub_link`, `diun.platform` and
    `diun.metadata.<key>`.
  - Provider `metadata` fills in the keys that the labels did not set.
- `NotifyOn` has the members `NEW` and `UPDATE`.
- `parse_platform(value)` parses specifiers such as `linux/arm/v7` into an
  `ImagePlatform`.
- `parse_service_tags(tags)` turns `key=value` service tags into a label
  dictionary. Tags without `=` are ignored.
- `make_jobs(provider, images)` wraps images in `Job` records and skips
  `None` entries.

### `imagewatch.utl`

- `match_string`, `is_included` and `is_excluded` do regular-expression
  filtering. A pattern that does not compile never matches.
- `get_env` reads an environment variable, with a fallback.
- `get_secret` returns a plaintext value, or the contents of a file.

## Example

```python
from imagewatch.image import parse_image
from imagewatch.tags import SortTag, sort_tags

img = parse_image("alpine", "")
print(img.domain, img.path, img.tag)   # docker.io library/alpine latest
print(img.hub_link)                    # https://hub.docker.com/_/alpine

print(sort_tags(["1.2.0", "1.10.0", "edge"], SortTag.SEMVER))
# ['1.10.0', '1.2.0', 'edge']
```

## What it does not do

This package is a library only. It has no command and no scheduler, and it
does not store state. It does not connect to anything:

- It does not query registries for manifests or tag lists. `filter_tags`
  works on tag lists that you supply.
- It does not talk to Docker, Swarm, Kubernetes or Nomad to discover
  images.
- It does not read Dockerfiles.
- It does not send notifications.

## Tests

```
pip install -e .[test]
pytest
```