import pytest

from linkding_companion.core.url_utils import extract_search_query, has_scheme_and_host


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://example.com/a", True),
        ("http://localhost:9090", True),
        ("not a url", False),
        ("example.com/path", False),
        ("mailto:someone@example.com", False),
        ("", False),
        (None, False),
    ],
)
def test_has_scheme_and_host(url, expected):
    assert has_scheme_and_host(url) is expected


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://x.test/search?q=rust+ownership", "rust ownership"),
        ("https://duckduckgo.com/?q=caf%C3%A9&ia=web", "café"),
        ("https://www.google.com/search?client=firefox&q=peewee+orm", "peewee orm"),
        ("https://x.test/search", None),
        ("https://x.test/search?page=2", None),
        ("https://x.test/search?q=", None),
        ("https://x.test/search?q=+", None),
        (None, None),
    ],
)
def test_extract_search_query(url, expected):
    assert extract_search_query(url) == expected
