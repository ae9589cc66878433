"""Test URL normalization."""

from search_refinery.models.config import DeduplicationOptions
from search_refinery.result_processing.url_normalizer import (
    UrlNormalizer,
    extract_hostname,
    hostnames_match,
    normalize_url,
    registrable_domain,
)


def test_default_normalization_drops_protocol_www_and_query():
    """Test that default options reduce a URL to host and path."""
    assert normalize_url("https://www.example.com/x?utm_source=a") == "example.com/x"
    assert normalize_url("http://example.com/x/") == "example.com/x"


def test_root_path_is_dropped():
    assert normalize_url("https://example.com/") == "example.com"
    assert normalize_url("https://example.com") == "example.com"


def test_fragment_is_dropped():
    assert normalize_url("https://example.com/page#footer") == "example.com/page"


def test_path_case_is_ignored_by_default():
    assert normalize_url("https://example.com/Some/Path") == "example.com/some/path"

    options = DeduplicationOptions(ignore_case_in_path=False)
    assert normalize_url("https://Example.com/Some/Path", options) == "example.com/Some/Path"


def test_trailing_slash_kept_when_configured():
    options = DeduplicationOptions(ignore_trailing_slash=False)
    assert normalize_url("https://example.com/docs/", options) == "example.com/docs/"


def test_protocol_kept_when_configured():
    options = DeduplicationOptions(ignore_protocol=False)
    assert normalize_url("https://www.example.com/a", options) == "https://example.com/a"


def test_www_kept_when_configured():
    options = DeduplicationOptions(ignore_www=False)
    assert normalize_url("https://www.example.com/a", options) == "www.example.com/a"


def test_port_is_preserved():
    assert normalize_url("http://localhost:8080/api") == "localhost:8080/api"


class TestQueryParameters:
    """Tests for query handling when query parameters are kept."""

    options = DeduplicationOptions(ignore_query_params=False)

    def test_query_params_sorted(self):
        normalizer = UrlNormalizer(self.options)
        assert normalizer("https://example.com/s?b=2&a=1") == normalizer(
            "https://example.com/s?a=1&b=2"
        )
        assert normalizer("https://example.com/s?b=2&a=1") == "example.com/s?a=1&b=2"

    def test_tracking_params_removed(self):
        normalizer = UrlNormalizer(self.options)
        tracking_urls = [
            "https://example.com/s?utm_source=google&page=1",
            "https://example.com/s?gclid=123&page=1",
            "https://example.com/s?fbclid=xyz&page=1",
            "https://example.com/s?ref=footer&page=1",
            "https://example.com/s?page=1&_ga=1.2.3",
        ]
        for url in tracking_urls:
            assert normalizer(url) == "example.com/s?page=1"

    def test_tracking_params_kept_when_stripping_disabled(self):
        options = DeduplicationOptions(
            ignore_query_params=False, strip_tracking_params=False
        )
        assert (
            normalize_url("https://example.com/s?utm_source=x&page=1", options)
            == "example.com/s?page=1&utm_source=x"
        )

    def test_only_tracking_params_leaves_no_query(self):
        assert normalize_url("https://example.com/s?utm_source=x", self.options) == (
            "example.com/s"
        )


def test_subdomains_collapsed_when_configured():
    options = DeduplicationOptions(treat_subdomains_as_same=True)
    assert normalize_url("https://blog.example.com/post", options) == "example.com/post"
    assert normalize_url("https://docs.example.com/post", options) == "example.com/post"


def test_scheme_less_urls():
    assert normalize_url("www.example.com/page") == "example.com/page"


def test_unparseable_url_falls_back_to_lowercase():
    """Test that normalization never raises."""
    assert normalize_url("Not A URL") == "not a url"
    assert normalize_url("") == ""
    assert normalize_url("http://example.com:notaport/x") == "http://example.com:notaport/x"


def test_extract_hostname():
    assert extract_hostname("https://WWW.Example.com/path") == "www.example.com"
    assert extract_hostname("not a url") is None


def test_registrable_domain():
    assert registrable_domain("a.b.example.com") == "example.com"
    assert registrable_domain("example.com") == "example.com"
    assert registrable_domain("localhost") == "localhost"


class TestHostnamesMatch:
    def test_exact_and_www(self):
        assert hostnames_match("example.com", "example.com")
        assert hostnames_match("www.site1.com", "site1.com")

    def test_subdomains(self):
        assert not hostnames_match("blog.example.com", "docs.example.com")
        assert hostnames_match("blog.example.com", "docs.example.com", True)

    def test_missing_hostname(self):
        assert not hostnames_match(None, "example.com")
        assert not hostnames_match("example.com", "")


def test_normalization_is_deterministic_and_idempotent():
    urls = [
        "https://www.Example.com/Docs/Guide/?utm_source=x",
        "http://example.com",
        "example.com/a/b/",
        "https://blog.example.co.uk:8443/Post#intro",
    ]
    for url in urls:
        normalized = normalize_url(url)
        assert normalize_url(url) == normalized
        assert normalize_url(normalized) == normalized
