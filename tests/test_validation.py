"""Tests for address normalization"""

import pytest

from src.time.errors import InvalidInput
from src.utils.validation import canonical_origin, normalize_address


class TestNormalizeAddress:
    """normalize_address behavior"""

    def test_adds_https(self):
        """Bare hosts get the secure scheme"""
        assert normalize_address("naver.com") == "https://naver.com"

    def test_same_as_explicit_scheme(self):
        """example.com and https://example.com normalize alike"""
        assert normalize_address("example.com") == normalize_address("https://example.com")

    @pytest.mark.parametrize(
        "address",
        ["https://example.com", "http://example.com/path?q=1", "HTTPS://Example.com", "https://[::1]:8443"],
    )
    def test_idempotent(self, address):
        """Addresses that already carry a scheme are left alone"""
        once = normalize_address(address)
        assert once == address
        assert normalize_address(once) == once

    def test_trims(self):
        """Surrounding whitespace is removed"""
        assert normalize_address("  example.com \n") == "https://example.com"

    def test_other_scheme_is_not_recognized(self):
        """ftp:// is not a web scheme, so https:// is prepended and parsing fails"""
        with pytest.raises(InvalidInput):
            normalize_address("ftp://example.com")

    def test_non_string(self):
        """Non-string input is a format error"""
        with pytest.raises(InvalidInput) as exc:
            normalize_address(42)
        assert exc.value.message == "Invalid URL format"

    def test_unicode_host(self):
        """Internationalized hosts are accepted"""
        assert normalize_address("bücher.example") == "https://bücher.example"


class TestCanonicalOrigin:
    """canonical_origin behavior"""

    @pytest.mark.parametrize(
        "address, origin",
        [
            ("https://naver.com", "https://naver.com"),
            ("https://naver.com/", "https://naver.com"),
            ("https://naver.com:443/x", "https://naver.com"),
            ("http://naver.com:80", "http://naver.com"),
            ("http://naver.com:8080/a", "http://naver.com:8080"),
            ("HTTPS://NAVER.COM", "https://naver.com"),
            ("https://user:pw@naver.com", "https://naver.com"),
            ("https://[::1]:8443/", "https://[::1]:8443"),
            ("https://bücher.example", "https://xn--bcher-kva.example"),
        ],
    )
    def test_origin(self, address, origin):
        """Scheme and host only, default ports dropped"""
        assert canonical_origin(address) == origin
