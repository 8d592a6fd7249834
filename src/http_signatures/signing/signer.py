"""
Request signer

The signer builds the signing string for a request, signs it with the key's
algorithm, and returns a header value ready to attach. Attaching the header
to an outgoing message is left to the caller or a transport adapter.
"""

import time
from typing import Callable, Optional, Sequence, Tuple

from ..crypto.algorithms import get_algorithm
from ..crypto.types import SigningKey
from ..exceptions import InvalidConfigurationError
from .header_codec import DEFAULT_HEADERS, SignatureHeaderCodec
from .signing_string import SigningStringBuilder
from .types import RequestView, SignatureParams
from .utils import normalize_header_name

Clock = Callable[[], float]


class Signer:
    """
    HTTP Signatures signer bound to one key

    The signer holds no mutable state and can be shared between threads.
    """

    def __init__(
        self,
        key: SigningKey,
        key_id: str,
        headers: Optional[Sequence[str]] = None,
        *,
        include_created: bool = False,
        expires_in: Optional[int] = None,
        clock: Clock = time.time
    ):
        """
        Initialize the signer.

        Args:
            key: Signing key; its algorithm tag selects the algorithm
            key_id: Identifier the receiver uses to look up the verifying key
            headers: Default ordered list of header names to sign
            include_created: Add a created timestamp to every signature
            expires_in: Add an expires timestamp this many seconds after now
            clock: Time source returning Unix seconds

        Raises:
            InvalidConfigurationError: If the configuration is invalid
        """
        if not isinstance(key, SigningKey):
            raise InvalidConfigurationError("key must be a SigningKey")
        if not key_id:
            raise InvalidConfigurationError("Key ID cannot be empty")
        if expires_in is not None and expires_in <= 0:
            raise InvalidConfigurationError(
                "expires_in must be positive",
                details={"expires_in": expires_in}
            )

        self.key = key
        self.key_id = key_id
        self.headers = self._normalize_headers(headers if headers is not None else DEFAULT_HEADERS)
        self.include_created = include_created
        self.expires_in = expires_in
        self._clock = clock
        self._builder = SigningStringBuilder()
        self._codec = SignatureHeaderCodec()

    @property
    def algorithm(self) -> str:
        return self.key.algorithm.value

    def signing_string(self, view: RequestView, headers: Optional[Sequence[str]] = None) -> str:
        """
        Build the signing string this signer would sign.

        Args:
            view: Request to sign
            headers: Override for the signed header list

        Returns:
            str: Signing string
        """
        return self._builder.build(view, self._effective_headers(headers))

    def signature_params(
        self,
        view: RequestView,
        headers: Optional[Sequence[str]] = None,
        created: Optional[int] = None,
        expires: Optional[int] = None
    ) -> SignatureParams:
        """
        Sign a request and return the structured signature parameters.

        Args:
            view: Request to sign
            headers: Override for the signed header list
            created: Explicit created timestamp
            expires: Explicit expires timestamp

        Returns:
            SignatureParams: Parameters including the raw signature bytes

        Raises:
            InvalidConfigurationError: If the header list is empty or timestamps conflict
            MissingHeaderError: If a signed header is absent from the request
        """
        names = self._effective_headers(headers)
        created, expires = self._timestamps(created, expires)

        signing_string = self._builder.build(view, names)
        provider = get_algorithm(self.key.algorithm)
        signature = provider.sign(signing_string.encode("utf-8"), self.key)

        return SignatureParams(
            key_id=self.key_id,
            algorithm=provider.identifier(),
            headers=names,
            signature=signature,
            created=created,
            expires=expires,
        )

    def signature_header(self, view: RequestView, headers: Optional[Sequence[str]] = None, **kwargs) -> str:
        """Sign a request and return a Signature header value."""
        return self._codec.serialize(self.signature_params(view, headers, **kwargs))

    def authorization_header(self, view: RequestView, headers: Optional[Sequence[str]] = None, **kwargs) -> str:
        """Sign a request and return an "Authorization: Signature ..." header value."""
        return self._codec.serialize_authorization(self.signature_params(view, headers, **kwargs))

    def _effective_headers(self, headers: Optional[Sequence[str]]) -> Tuple[str, ...]:
        if headers is None:
            return self.headers
        return self._normalize_headers(headers)

    def _normalize_headers(self, headers: Sequence[str]) -> Tuple[str, ...]:
        if isinstance(headers, str):
            headers = headers.split()
        names = tuple(normalize_header_name(name) for name in headers)
        if not names:
            raise InvalidConfigurationError("At least one header must be signed")
        return names

    def _timestamps(self, created: Optional[int], expires: Optional[int]) -> Tuple[Optional[int], Optional[int]]:
        now = int(self._clock())
        if created is None and self.include_created:
            created = now
        if expires is None and self.expires_in is not None:
            expires = (created if created is not None else now) + self.expires_in

        if created is not None and expires is not None and expires <= created:
            raise InvalidConfigurationError(
                "expires must be later than created",
                details={"created": created, "expires": expires}
            )
        return created, expires


def sign(
    view: RequestView,
    header_names: Sequence[str],
    key_id: str,
    key: SigningKey,
    created: Optional[int] = None,
    expires: Optional[int] = None
) -> str:
    """
    Sign a request and return a Signature header value.

    Args:
        view: Request to sign
        header_names: Ordered names of the headers to sign
        key_id: Identifier of the key
        key: Signing key
        created: Optional created timestamp
        expires: Optional expires timestamp

    Returns:
        str: Header value ready to attach
    """
    signer = Signer(key, key_id, header_names)
    return signer.signature_header(view, created=created, expires=expires)
