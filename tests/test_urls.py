"""Tests for URL normalization."""

import pytest

from astool.exceptions import InvalidURLError
from astool.urls import first_normalize_url, normalize, parse_url


class TestNormalize:
    def test_scheme_host_lowercased_and_query_sorted(self):
        assert normalize("HTTP://Example.com/Path?b=2&a=1") == "http://example.com/Path?a=1&b=2"

    def test_default_port_dropped(self):
        assert normalize("https://example.com:443/x") == "https://example.com/x"
        assert normalize("http://example.com:80/x") == "http://example.com/x"

    def test_other_port_kept(self):
        assert normalize("http://example.com:8080/x") == "http://example.com:8080/x"

    def test_empty_path_becomes_root(self):
        assert normalize("http://example.com") == "http://example.com/"

    def test_fragment_and_userinfo_dropped(self):
        assert normalize("http://user:pw@Example.com/a#frag") == "http://example.com/a"

    def test_trailing_dot_on_host(self):
        assert normalize("http://example.com./a") == "http://example.com/a"

    def test_empty_query_pieces_removed(self):
        assert normalize("http://example.com/?&b=1&&a=") == "http://example.com/?a=&b=1"

    def test_ipv6_host(self):
        assert normalize("http://[::1]:8080/a") == "http://[::1]:8080/a"

    def test_scheme_less_kept_as_path(self):
        assert normalize("example.com/Path") == "example.com/Path"

    def test_idempotent(self):
        once = normalize("HTTP://Example.com/Path?b=2&a=1")
        assert normalize(once) == once


class TestParseUrl:
    def test_returns_split_result(self):
        u = parse_url("http://example.com/a?x=1")
        assert u.hostname == "example.com"
        assert first_normalize_url(u) == "http://example.com/a?x=1"

    @pytest.mark.parametrize(
        "raw",
        ["http://[::1/a", "http://example.com:port/", "http://exa\nmple.com/", "http://example.com/\x7f"],
    )
    def test_invalid(self, raw):
        with pytest.raises(InvalidURLError):
            parse_url(raw)
