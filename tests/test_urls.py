"""Unit tests for core/urls.py -- link normalization and Gravatar derivation."""

import hashlib

import pytest

from core.urls import gravatar_url, normalize_url


class TestNormalizeUrl:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("example.com", "http://example.com"),
            ("//example.com/a", "http://example.com/a"),
            ("HTTP://WWW.Example.COM/", "http://example.com"),
            ("http://example.com:80/path//to///x/", "http://example.com/path/to/x"),
            ("https://example.com:8443/", "https://example.com:8443"),
            ("http://example.com/?b=2&a=1&utm_source=news", "http://example.com?a=1&b=2"),
            ("http://example.com/page#section", "http://example.com/page#section"),
        ],
    )
    def test_normalization(self, raw, expected):
        assert normalize_url(raw) == expected

    def test_force_https_upgrades_http(self):
        assert normalize_url("http://github.com/ada", force_https=True) == "https://github.com/ada"

    def test_force_https_on_bare_host(self):
        assert normalize_url("linkedin.com/in/ada", force_https=True) == "https://linkedin.com/in/ada"

    def test_force_https_leaves_other_schemes(self):
        assert normalize_url("ftp://files.example.com/x", force_https=True) == "ftp://files.example.com/x"

    def test_www_only_stripped_when_followed_by_domain(self):
        assert normalize_url("http://www.com") == "http://www.com"

    def test_empty_input(self):
        assert normalize_url("   ") == ""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("http://[::1]:8080/x", "http://[::1]:8080/x"),
            ("https://[2001:DB8::1]/", "https://[2001:db8::1]"),
            ("http://[::1]:80/", "http://[::1]"),
        ],
    )
    def test_ipv6_host_keeps_brackets(self, raw, expected):
        assert normalize_url(raw) == expected

    @pytest.mark.parametrize("raw", ["example.com:notaport", "http://[bad", "example.com:99999"])
    def test_unsplittable_input_raises(self, raw):
        with pytest.raises(ValueError):
            normalize_url(raw)


class TestGravatarUrl:
    def test_shape(self):
        digest = hashlib.md5(b"ada@example.com").hexdigest()
        assert gravatar_url("ada@example.com") == f"https://gravatar.com/avatar/{digest}?d=mm&r=pg&s=200"

    def test_email_case_and_whitespace_ignored(self):
        assert gravatar_url("  Ada@Example.COM ") == gravatar_url("ada@example.com")
