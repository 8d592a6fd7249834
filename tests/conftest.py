"""
Shared fixtures for the HTTP Signatures test suite
"""

import pytest

from http_signatures.crypto import generate_signing_key, hmac_signing_key
from http_signatures.signing import HttpRequestView

# Fixed clock for freshness tests
NOW = 1_700_000_000


@pytest.fixture(scope="session")
def rsa_key():
    """RSA key shared by the whole session; key generation is slow."""
    return generate_signing_key("rsa-sha256")


@pytest.fixture(scope="session")
def ecdsa_key():
    return generate_signing_key("ecdsa-sha256")


@pytest.fixture
def hmac_key():
    return hmac_signing_key(b"correct horse battery staple", "hmac-sha256")


@pytest.fixture
def request_view():
    """Request used throughout the HTTP Signatures draft examples."""
    return HttpRequestView("POST", "/foo?param=value&pet=dog", [
        ("Host", "example.com"),
        ("Date", "Sun, 05 Jan 2014 21:31:40 GMT"),
        ("Content-Type", "application/json"),
        ("Digest", "SHA-256=X48E9qOokqqrvdts8nOJRJN3OWDUoyWxBf7kbu9DBPE="),
        ("Content-Length", "18"),
    ])


@pytest.fixture
def signed_headers():
    return ["(request-target)", "host", "date", "digest", "content-length"]


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def now():
    return NOW
