import pytest

from imagewatch.image import parse_image
from imagewatch.reference import ReferenceParseError

SHA256_DIGEST_HEX = "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
SHA256_DIGEST = "@sha256:" + SHA256_DIGEST_HEX


@pytest.mark.parametrize(
    "name, domain, path, tag",
    [
        (
            "jfrog-docker-reg2.bintray.io/jfrog/artifactory-oss:4.0.0",
            "jfrog-docker-reg2.bintray.io",
            "jfrog/artifactory-oss",
            "4.0.0",
        ),
        ("docker.bintray.io/jfrog/xray-server:2.8.6", "docker.bintray.io", "jfrog/xray-server", "2.8.6"),
        ("alpine", "docker.io", "library/alpine", "latest"),
        ("docker.io/crazymax/nextcloud:latest", "docker.io", "crazymax/nextcloud", "latest"),
        ("gcr.io/google-containers/busybox:latest", "gcr.io", "google-containers/busybox", "latest"),
        (
            "gcr.io/google-containers/busybox:latest" + SHA256_DIGEST,
            "gcr.io",
            "google-containers/busybox",
            "latest",
        ),
        (
            "docker.pkg.github.com/crazy-max/ddns-route53/ddns-route53:latest",
            "docker.pkg.github.com",
            "crazy-max/ddns-route53/ddns-route53",
            "latest",
        ),
        ("registry.gitlab.com/meltano/meltano", "registry.gitlab.com", "meltano/meltano", "latest"),
        ("quay.io/coreos/hyperkube", "quay.io", "coreos/hyperkube", "latest"),
        ("ghcr.io/crazy-max/ddns-route53", "ghcr.io", "crazy-max/ddns-route53", "latest"),
        ("ghcr.io/linuxserver/radarr", "ghcr.io", "linuxserver/radarr", "latest"),
    ],
)
def test_parse_image(name, domain, path, tag):
    img = parse_image(name)
    assert img.domain == domain
    assert img.path == path
    assert img.tag == tag


@pytest.mark.parametrize(
    "name, hub_tpl, expected",
    [
        (
            "jfrog-docker-reg2.bintray.io/jfrog/artifactory-oss:4.0.0",
            "",
            "https://bintray.com/jfrog/reg2/jfrog%3Aartifactory-oss",
        ),
        ("jfrog-docker-reg2.bintray.io/kubexray:latest", "", "https://bintray.com/jfrog/reg2/kubexray"),
        ("docker.bintray.io/jfrog/xray-server:2.8.6", "", "https://bintray.com/jfrog/reg2/jfrog%3Axray-server"),
        ("alpine", "", "https://hub.docker.com/_/alpine"),
        ("docker.io/crazymax/nextcloud:latest", "", "https://hub.docker.com/r/crazymax/nextcloud"),
        ("gcr.io/google-containers/busybox:latest", "", "https://gcr.io/google-containers/busybox"),
        (
            "docker.pkg.github.com/crazy-max/ddns-route53/ddns-route53:latest",
            "",
            "https://github.com/crazy-max/ddns-route53/packages",
        ),
        ("registry.gitlab.com/meltano/meltano", "", "https://gitlab.com/meltano/meltano/container_registry"),
        ("quay.io/coreos/hyperkube", "", "https://quay.io/repository/coreos/hyperkube"),
        (
            "ghcr.io/crazy-max/ddns-route53",
            "",
            "https://github.com/users/crazy-max/packages/container/package/ddns-route53",
        ),
        (
            "ghcr.io/linuxserver/radarr",
            "",
            "https://github.com/users/linuxserver/packages/container/package/radarr",
        ),
        (
            "registry.access.redhat.com/rhel7/etcd",
            "",
            "https://access.redhat.com/containers/#/registry.access.redhat.com/rhel7/etcd",
        ),
        (
            "myregistry.example.com/an/image:latest",
            "https://{{ .Domain }}/ui/repos/{{ .Path }}",
            "https://myregistry.example.com/ui/repos/an/image",
        ),
    ],
)
def test_hub_link(name, hub_tpl, expected):
    assert parse_image(name, hub_tpl).hub_link == expected


def test_unknown_registry_has_no_hub_link():
    assert parse_image("myregistry.example.com/an/image:latest").hub_link == ""


def test_digest_and_reference():
    img = parse_image("gcr.io/google-containers/busybox:latest" + SHA256_DIGEST)
    assert img.digest == "sha256:" + SHA256_DIGEST_HEX
    assert img.reference() == "sha256:" + SHA256_DIGEST_HEX


def test_reference_falls_back_to_tag():
    assert parse_image("alpine").reference() == "latest"


def test_name_and_str():
    img = parse_image("alpine")
    assert img.name == "docker.io/library/alpine"
    assert str(img) == "docker.io/library/alpine:latest"


def test_invalid_image_name():
    with pytest.raises(ReferenceParseError):
        parse_image("UPPERCASEISINVALID")


def test_hub_template_unknown_field():
    with pytest.raises(ValueError):
        parse_image("myregistry.example.com/an/image", "https://{{ .Nope }}/")