import pytest

from blobserve.sublevel import Sublevel, resolve_sublevels
from blobserve.urls import FileQuery, build_url, parse_url


def test_parse_url():
    assert parse_url("/files/42") == FileQuery(id="42", sublevels=[])
    assert parse_url("/files/a/42") == FileQuery(id="42", sublevels=["a"])
    assert parse_url("/files/a/b/image.png") == FileQuery(id="image.png", sublevels=["a", "b"])
    assert parse_url("/files/a/x?y") == FileQuery(id="x?y", sublevels=["a"])


@pytest.mark.parametrize(
    "url",
    ["/", "", "/nonsense", "/files", "/files/", "/images/42", "/files/a/", "files/42", "/favicon.ico", "//files/42"],
)
def test_parse_url_no_match(url):
    assert parse_url(url) is None


def test_parse_url_empty_sublevels():
    # empty names are passed on literally, it is up to the resolver to reject them
    assert parse_url("/files/a//42") == FileQuery(id="42", sublevels=["a", ""])


def test_build_url():
    root = Sublevel()
    assert build_url(root, "42") == "/files/42"
    assert build_url(root, 42) == "/files/42"
    assert build_url(root.sublevel("a"), "42") == "/files/a/42"
    assert build_url(root.sublevel("a").sublevel("b"), "image.png") == "/files/a/b/image.png"
    assert build_url(root.sublevel("my docs"), "x?y") == "/files/my%20docs/x%3Fy"


@pytest.mark.parametrize("names", [[], ["a"], ["a", "b"], ["users", "42", "avatars"]])
def test_url_roundtrip(names):
    level = resolve_sublevels(Sublevel(), names)
    url = build_url(level, "1234.jpg")
    assert url == "/" + "/".join(["files", *names, "1234.jpg"])
    query = parse_url(url)
    assert query == FileQuery(id="1234.jpg", sublevels=names)
    assert resolve_sublevels(Sublevel(), query.sublevels) == level
