"""
Unit tests for signing string construction
"""

import pytest

from http_signatures.exceptions import InvalidConfigurationError, MissingHeaderError
from http_signatures.signing import (
    HttpRequestView,
    RequestView,
    SigningStringBuilder,
    build_signing_string,
)


class TestSigningStringBuilder:
    """Test canonical signing string construction"""

    def test_canonical_example(self):
        """Test the reference GET example produces the exact string"""
        view = HttpRequestView("GET", "/foo?bar=baz", {"Host": "example.com"})

        result = build_signing_string(view, ["(request-target)", "host"])

        assert result == "(request-target): get /foo?bar=baz\nhost: example.com"

    def test_follows_requested_order(self, request_view):
        """Test lines follow the header list order, not the request order"""
        result = build_signing_string(request_view, ["date", "(request-target)", "host"])

        assert result.split("\n") == [
            "date: Sun, 05 Jan 2014 21:31:40 GMT",
            "(request-target): post /foo?param=value&pet=dog",
            "host: example.com",
        ]

    def test_no_trailing_newline(self, request_view):
        """Test the string has no trailing newline"""
        result = build_signing_string(request_view, ["host"])
        assert result == "host: example.com"

    def test_names_are_case_insensitive(self):
        """Test header lookup ignores case and emits lowercase names"""
        view = HttpRequestView("GET", "/", [("X-Custom-Header", "Value")])

        assert build_signing_string(view, ["X-CUSTOM-HEADER"]) == "x-custom-header: Value"

    def test_multiple_values_joined_in_order(self):
        """Test repeated headers are trimmed and joined with ', '"""
        view = HttpRequestView("GET", "/", [
            ("Cache-Control", " max-age=60 "),
            ("X-Other", "1"),
            ("cache-control", "must-revalidate"),
        ])

        assert build_signing_string(view, ["cache-control"]) == "cache-control: max-age=60, must-revalidate"

    def test_values_not_normalized_beyond_trimming(self):
        """Test inner whitespace and case in values pass through"""
        view = HttpRequestView("GET", "/", {"X-Value": "  A   b\tC  "})

        assert build_signing_string(view, ["x-value"]) == "x-value: A   b\tC"

    def test_pseudo_header_lowercases_method(self):
        """Test the request target line lowercases only the method"""
        view = HttpRequestView("DELETE", "/Path/To?Q=1")

        assert build_signing_string(view, ["(request-target)"]) == "(request-target): delete /Path/To?Q=1"

    def test_missing_header(self, request_view):
        """Test absent header raises MissingHeaderError with its name"""
        with pytest.raises(MissingHeaderError) as exc_info:
            build_signing_string(request_view, ["host", "x-absent"])

        assert exc_info.value.header_name == "x-absent"

    def test_empty_header_list(self, request_view):
        """Test an empty header list is rejected as meaningless"""
        with pytest.raises(InvalidConfigurationError):
            SigningStringBuilder().build(request_view, [])


class TestHttpRequestView:
    """Test the in-memory request view"""

    def test_satisfies_protocol(self):
        """Test HttpRequestView is a RequestView"""
        assert isinstance(HttpRequestView("GET", "/"), RequestView)

    def test_from_url(self):
        """Test target is derived from path and query only"""
        view = HttpRequestView.from_url("GET", "https://example.com:8443/foo?bar=baz#frag")

        assert view.target() == "/foo?bar=baz"

    def test_from_url_without_path(self):
        """Test a bare origin gets '/' as target"""
        assert HttpRequestView.from_url("GET", "https://example.com").target() == "/"

    def test_mapping_with_list_values(self):
        """Test mapping input with multiple values per name"""
        view = HttpRequestView("GET", "/", {"Accept": ["text/html", "application/json"]})

        assert view.header("accept") == ["text/html", "application/json"]
        assert view.header_names() == ["accept"]

    def test_absent_header_is_empty(self):
        """Test missing header lookups return an empty list"""
        assert HttpRequestView("GET", "/").header("host") == []

    def test_with_header_returns_copy(self):
        """Test with_header leaves the original view unchanged"""
        view = HttpRequestView("GET", "/", {"Host": "example.com"})
        extended = view.with_header("Date", "now")

        assert view.header("date") == []
        assert extended.header("date") == ["now"]

    def test_empty_method_rejected(self):
        """Test an empty method is rejected"""
        with pytest.raises(ValueError):
            HttpRequestView("", "/")
