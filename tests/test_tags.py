import pytest

from imagewatch.tags import SortTag, Tags, filter_tags, sort_tags

REPOTAGS = [
    "0.1.0",
    "0.4.0",
    "3.0.0-beta.1",
    "3.0.0-beta.3",
    "3.0.0-beta.4",
    "4",
    "4.0.0",
    "4.0.0-beta.1",
    "4.1.0",
    "4.1.1",
    "4.10.0",
    "4.11.0",
    "4.12.0",
    "4.13.0",
    "4.14.0",
    "4.19.0",
    "4.2.0",
    "4.20",
    "4.20.0",
    "4.20.1",
    "4.21",
    "4.21.0",
    "4.3.0",
    "4.3.1",
    "4.4.0",
    "4.6.1",
    "4.7.0",
    "4.8.0",
    "4.8.1",
    "4.9.0",
    "ubuntu-5.0",
    "alpine-5.0",
    "edge",
    "latest",
]

LEXICOGRAPHICAL = [
    "0.1.0", "0.4.0", "3.0.0-beta.1", "3.0.0-beta.3", "3.0.0-beta.4", "4", "4.0.0",
    "4.0.0-beta.1", "4.1.0", "4.1.1", "4.10.0", "4.11.0", "4.12.0", "4.13.0", "4.14.0",
    "4.19.0", "4.2.0", "4.20", "4.20.0", "4.20.1", "4.21", "4.21.0", "4.3.0", "4.3.1",
    "4.4.0", "4.6.1", "4.7.0", "4.8.0", "4.8.1", "4.9.0", "alpine-5.0", "edge", "latest",
    "ubuntu-5.0",
]

REVERSE = [
    "latest", "edge", "alpine-5.0", "ubuntu-5.0", "4.9.0", "4.8.1", "4.8.0", "4.7.0",
    "4.6.1", "4.4.0", "4.3.1", "4.3.0", "4.21.0", "4.21", "4.20.1", "4.20.0", "4.20",
    "4.2.0", "4.19.0", "4.14.0", "4.13.0", "4.12.0", "4.11.0", "4.10.0", "4.1.1", "4.1.0",
    "4.0.0-beta.1", "4.0.0", "4", "3.0.0-beta.4", "3.0.0-beta.3", "3.0.0-beta.1", "0.4.0",
    "0.1.0",
]

SEMVER = [
    "alpine-5.0", "ubuntu-5.0", "4.21.0", "4.21", "4.20.1", "4.20.0", "4.20", "4.19.0",
    "4.14.0", "4.13.0", "4.12.0", "4.11.0", "4.10.0", "4.9.0", "4.8.1", "4.8.0", "4.7.0",
    "4.6.1", "4.4.0", "4.3.1", "4.3.0", "4.2.0", "4.1.1", "4.1.0", "4.0.0", "4",
    "4.0.0-beta.1", "3.0.0-beta.4", "3.0.0-beta.3", "3.0.0-beta.1", "0.4.0", "0.1.0",
    "edge", "latest",
]


@pytest.mark.parametrize(
    "sort_tag, expected",
    [
        (SortTag.DEFAULT, REPOTAGS),
        (SortTag.LEXICOGRAPHICAL, LEXICOGRAPHICAL),
        (SortTag.REVERSE, REVERSE),
        (SortTag.SEMVER, SEMVER),
    ],
)
def test_sort_tags(sort_tag, expected):
    assert sort_tags(list(REPOTAGS), sort_tag) == expected


def test_sort_tags_accepts_plain_string():
    assert sort_tags(list(REPOTAGS), "semver") == SEMVER


def test_sort_tags_does_not_mutate_input():
    tags = list(REPOTAGS)
    sort_tags(tags, SortTag.REVERSE)
    assert tags == REPOTAGS


def test_sort_tags_unknown_type_keeps_order():
    assert sort_tags(list(REPOTAGS), "chickens") == REPOTAGS


def test_sort_tag_validity():
    assert SortTag.valid("semver") is True
    assert SortTag.valid("chickens") is False
    with pytest.raises(ValueError):
        SortTag("chickens")


def test_filter_tags_counts():
    result = filter_tags(["1.0", "2.0", "edge"], SortTag.DEFAULT, [r"^\d"], [r"^2"], 0)
    assert result == Tags(list=["1.0"], not_included=1, excluded=1, total=3)


def test_filter_tags_sorts_then_caps():
    result = filter_tags(REPOTAGS, SortTag.SEMVER, [r"^4\.2"], [], 3)
    assert result.list == ["4.21.0", "4.21", "4.20.1"]
    assert result.total == len(REPOTAGS)
    assert result.excluded == 0


def test_filter_tags_no_filters_keeps_everything():
    result = filter_tags(REPOTAGS, SortTag.REVERSE)
    assert result.list == REVERSE
    assert result.not_included == 0
    assert result.excluded == 0
    assert result.total == len(REPOTAGS)