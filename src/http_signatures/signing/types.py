"""
Type definitions for request signing

This module defines the read-only request view the signing engine works
against, and the parameters carried by a signature header.
"""

from dataclasses import dataclass
from typing import (
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
    runtime_checkable,
)
from urllib.parse import urlsplit

# Pseudo-header standing for the request line in the signing string
REQUEST_TARGET = "(request-target)"

HeaderValues = Union[str, Sequence[str]]
HeaderInput = Union[Mapping[str, HeaderValues], Iterable[Tuple[str, str]]]


@runtime_checkable
class RequestView(Protocol):
    """
    Read-only view over an HTTP-like message.

    Transport adapters implement this for their own request objects; the
    signing engine never constructs one itself.
    """

    def method(self) -> str:
        """Request method token, e.g. "GET"."""
        ...

    def target(self) -> str:
        """Path plus optional "?query", exactly as sent."""
        ...

    def header(self, name: str) -> Sequence[str]:
        """All values for a header, in order; empty when absent. Lookup is case-insensitive."""
        ...


class HttpRequestView:
    """
    Plain in-memory RequestView.

    Headers are kept as an ordered list of (name, value) pairs so repeated
    headers keep their original order.
    """

    def __init__(self, method: str, target: str, headers: Optional[HeaderInput] = None):
        if not method:
            raise ValueError("Request method cannot be empty")
        if not target:
            raise ValueError("Request target cannot be empty")

        self._method = method
        self._target = target
        self._headers: Tuple[Tuple[str, str], ...] = tuple(_flatten_headers(headers))

    @classmethod
    def from_url(cls, method: str, url: str, headers: Optional[HeaderInput] = None) -> "HttpRequestView":
        """
        Build a view from an absolute or relative URL.

        Args:
            method: Request method
            url: URL whose path and query form the target
            headers: Request headers

        Returns:
            HttpRequestView: View over the request
        """
        parts = urlsplit(url)
        target = parts.path or "/"
        if parts.query:
            target = f"{target}?{parts.query}"
        return cls(method, target, headers)

    def method(self) -> str:
        return self._method

    def target(self) -> str:
        return self._target

    def header(self, name: str) -> List[str]:
        wanted = name.lower()
        return [value for key, value in self._headers if key.lower() == wanted]

    def header_names(self) -> List[str]:
        """Distinct header names in first-seen order, lower-cased."""
        seen: List[str] = []
        for key, _ in self._headers:
            lowered = key.lower()
            if lowered not in seen:
                seen.append(lowered)
        return seen

    def with_header(self, name: str, value: str) -> "HttpRequestView":
        """Copy of this view with one more header value appended."""
        return HttpRequestView(self._method, self._target, list(self._headers) + [(name, value)])

    def __repr__(self) -> str:
        return f"HttpRequestView({self._method!r}, {self._target!r}, headers={list(self._headers)!r})"


def _flatten_headers(headers: Optional[HeaderInput]) -> Iterable[Tuple[str, str]]:
    if headers is None:
        return
    items = headers.items() if isinstance(headers, Mapping) else headers
    for name, value in items:
        if isinstance(value, str):
            yield name, value
        else:
            for item in value:
                yield name, item


@dataclass
class SignatureParams:
    """
    Parameters carried by a signature header

    Attributes:
        key_id: Opaque identifier of the key material
        algorithm: Algorithm wire token, e.g. "rsa-sha256"
        headers: Ordered, lower-cased names of the signed headers
        signature: Raw signature bytes (base64 on the wire)
        created: Optional Unix timestamp the signature was created at
        expires: Optional Unix timestamp the signature expires at
    """
    key_id: str
    algorithm: str
    headers: Tuple[str, ...]
    signature: bytes
    created: Optional[int] = None
    expires: Optional[int] = None

    def __post_init__(self):
        """Normalize header names so both sides compare the same list"""
        self.algorithm = str(getattr(self.algorithm, "value", self.algorithm))
        self.headers = tuple(name.strip().lower() for name in self.headers)
