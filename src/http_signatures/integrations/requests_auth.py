"""
requests integration for request signing

HttpSignatureAuth plugs a Signer into requests' auth hook, so every
prepared request gets a Signature (or Authorization) header:

    session = requests.Session()
    session.auth = HttpSignatureAuth(signer)
    session.get("https://example.com/foo?bar=baz")
"""

import logging
from email.utils import formatdate
from typing import List, Optional
from urllib.parse import urlsplit

from requests.auth import AuthBase
from requests.models import PreparedRequest

from ..exceptions import InvalidConfigurationError
from ..signing.signer import Signer

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "Signature"
AUTHORIZATION_HEADER = "Authorization"

HEADER_MODES = ("signature", "authorization")


class PreparedRequestView:
    """RequestView over a requests.PreparedRequest"""

    def __init__(self, request: PreparedRequest):
        self.request = request

    def method(self) -> str:
        return self.request.method or "GET"

    def target(self) -> str:
        parts = urlsplit(self.request.url or "")
        target = parts.path or "/"
        if parts.query:
            target = f"{target}?{parts.query}"
        return target

    def header(self, name: str) -> List[str]:
        value = self.request.headers.get(name)
        if value is None:
            return []
        if isinstance(value, bytes):
            value = value.decode("latin-1")
        return [value]


def _host_header(url: str) -> str:
    """Host header value for a URL, without any userinfo."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    return host


def sign_prepared_request(
    request: PreparedRequest,
    signer: Signer,
    header_mode: str = "signature",
    headers: Optional[List[str]] = None
) -> PreparedRequest:
    """
    Sign a prepared request in place.

    Host and Date are filled in when they are to be signed but not yet set,
    since requests leaves them to the connection layer.

    Args:
        request: Request to sign
        signer: Signer to use
        header_mode: "signature" for a Signature header, "authorization" for Authorization
        headers: Override for the signed header list

    Returns:
        PreparedRequest: The same request, with the signature header attached
    """
    if header_mode not in HEADER_MODES:
        raise InvalidConfigurationError(
            f"Unknown header mode: {header_mode}",
            details={"header_mode": header_mode}
        )

    names = [name.lower() for name in (headers or signer.headers)]
    if "host" in names and "Host" not in request.headers:
        request.headers["Host"] = _host_header(request.url)
    if "date" in names and "Date" not in request.headers:
        request.headers["Date"] = formatdate(usegmt=True)

    view = PreparedRequestView(request)
    if header_mode == "authorization":
        request.headers[AUTHORIZATION_HEADER] = signer.authorization_header(view, headers)
    else:
        request.headers[SIGNATURE_HEADER] = signer.signature_header(view, headers)

    logger.debug(f"Signed {view.method()} {view.target()} with key ID: {signer.key_id}")
    return request


class HttpSignatureAuth(AuthBase):
    """requests auth handler that signs every outgoing request"""

    def __init__(self, signer: Signer, header_mode: str = "signature", headers: Optional[List[str]] = None):
        if header_mode not in HEADER_MODES:
            raise InvalidConfigurationError(
                f"Unknown header mode: {header_mode}",
                details={"header_mode": header_mode}
            )
        self.signer = signer
        self.header_mode = header_mode
        self.headers = headers

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        return sign_prepared_request(request, self.signer, self.header_mode, self.headers)
