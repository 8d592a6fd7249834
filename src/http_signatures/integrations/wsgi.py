"""
WSGI middleware for verifying request signatures

    verifier = Verifier(StaticKeyResolver({"client-1": key}))
    app = SignatureVerificationMiddleware(app, verifier, required_headers=["host", "date"])

Rejected requests get a 401 whose body only says "rejected"; the reason is
logged locally and left in the environ for the application.
"""

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Pattern
from urllib.parse import quote

from ..exceptions import InvalidConfigurationError
from ..verification.types import RejectionReason, VerificationOutcome
from ..verification.verifier import Verifier

logger = logging.getLogger(__name__)

OUTCOME_ENVIRON_KEY = "http_signatures.outcome"

HEADER_MODES = ("signature", "authorization")

# Headers WSGI exposes without the HTTP_ prefix
_UNPREFIXED_HEADERS = ("CONTENT_TYPE", "CONTENT_LENGTH")

_REJECTED_BODY = b"rejected"


def _environ_key(name: str) -> str:
    key = name.upper().replace("-", "_")
    if key in _UNPREFIXED_HEADERS:
        return key
    return f"HTTP_{key}"


class WsgiRequestView:
    """RequestView over a WSGI environ"""

    def __init__(self, environ: Dict[str, Any]):
        self.environ = environ

    def method(self) -> str:
        return self.environ.get("REQUEST_METHOD", "GET")

    def target(self) -> str:
        raw = self.environ.get("RAW_URI") or self.environ.get("REQUEST_URI")
        if raw:
            return raw

        path = self.environ.get("SCRIPT_NAME", "") + self.environ.get("PATH_INFO", "")
        # PEP 3333 hands the path over latin-1 decoded
        target = quote(path.encode("latin-1"), safe="/;=,:@!$&'()*+~") or "/"
        query = self.environ.get("QUERY_STRING")
        if query:
            target = f"{target}?{query}"
        return target

    def header(self, name: str) -> List[str]:
        value = self.environ.get(_environ_key(name))
        if value is None:
            return []
        return [value]


class SignatureVerificationMiddleware:
    """WSGI middleware that rejects requests without a valid signature"""

    def __init__(
        self,
        app: Callable,
        verifier: Verifier,
        header_mode: str = "signature",
        required_headers: Optional[Iterable[str]] = None,
        skip_patterns: Optional[List[Pattern]] = None,
        realm: Optional[str] = None
    ):
        """
        Wrap a WSGI application.

        Args:
            app: Downstream WSGI application
            verifier: Verifier used for every request
            header_mode: Read the Signature header, or the Authorization header
            required_headers: Header names every accepted signature must cover
            skip_patterns: Compiled path patterns that bypass verification
            realm: Realm advertised in the WWW-Authenticate challenge
        """
        if header_mode not in HEADER_MODES:
            raise InvalidConfigurationError(
                f"Unknown header mode: {header_mode}",
                details={"header_mode": header_mode}
            )
        self.app = app
        self.verifier = verifier
        self.header_mode = header_mode
        self.required_headers = [name.lower() for name in (required_headers or [])]
        self.skip_patterns = skip_patterns or []
        self.realm = realm

    def __call__(self, environ: Dict[str, Any], start_response: Callable):
        path = environ.get("PATH_INFO", "")
        if any(pattern.search(path) for pattern in self.skip_patterns):
            return self.app(environ, start_response)

        outcome = self.verify_environ(environ)
        environ[OUTCOME_ENVIRON_KEY] = outcome

        if outcome.accepted:
            return self.app(environ, start_response)

        logger.info(
            f"Rejected request {environ.get('REQUEST_METHOD')} {path}: "
            f"{outcome.reason.value} ({outcome.detail}) key ID: {outcome.key_id}"
        )
        start_response("401 Unauthorized", [
            ("Content-Type", "text/plain"),
            ("Content-Length", str(len(_REJECTED_BODY))),
            ("WWW-Authenticate", self._challenge()),
        ])
        return [_REJECTED_BODY]

    def verify_environ(self, environ: Dict[str, Any]) -> VerificationOutcome:
        """Verify the request described by environ and apply the required header policy."""
        view = WsgiRequestView(environ)
        authorization = self.header_mode == "authorization"
        values = view.header("Authorization" if authorization else "Signature")
        if not values:
            return VerificationOutcome.reject(RejectionReason.MALFORMED_HEADER, "No signature header present")

        outcome = self.verifier.verify(view, values[0], authorization=authorization)
        return outcome.require_headers(self.required_headers)

    def _challenge(self) -> str:
        params = []
        if self.realm:
            params.append(f'realm="{self.realm}"')
        if self.required_headers:
            params.append(f'headers="{" ".join(self.required_headers)}"')
        if not params:
            return "Signature"
        return "Signature " + ",".join(params)


def create_skip_patterns(patterns: List[str]) -> List[Pattern]:
    """
    Compile path patterns that bypass verification.

    Args:
        patterns: Regex pattern strings

    Returns:
        List[Pattern]: Compiled patterns
    """
    return [re.compile(pattern) for pattern in patterns]
