"""
Signature verification engine

Verification walks a fixed sequence of states:

    received -> parsed -> headers_resolved -> string_reconstructed
             -> algorithm_checked -> freshness_checked -> accepted

Any failing step ends in a rejected outcome carrying the reason. The key
resolver is the only collaborator that may block or await; its failures are
reported as outcomes and never retried here.
"""

import inspect
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

from ..crypto.algorithms import AlgorithmProvider, get_algorithm
from ..crypto.types import VerifyingKey
from ..exceptions import (
    HttpSignaturesError,
    InvalidConfigurationError,
    KeyNotFoundError,
    MalformedHeaderError,
    MissingHeaderError,
    UnsupportedAlgorithmError,
)
from ..signing.header_codec import SignatureHeaderCodec
from ..signing.signing_string import SigningStringBuilder
from ..signing.types import RequestView, SignatureParams
from .types import KeyResolver, RejectionReason, VerificationOutcome, VerificationState

# Seconds a signature's created time may lie in the future
DEFAULT_CLOCK_SKEW = 30

Clock = Callable[[], float]


@dataclass(frozen=True)
class _ParsedSignature:
    params: SignatureParams
    provider: AlgorithmProvider


class Verifier:
    """
    HTTP Signatures verifier

    The verifier keeps no per-request state; a single instance may serve
    concurrent requests as long as its resolver is thread-safe.
    """

    def __init__(
        self,
        resolver: KeyResolver,
        clock_skew: int = DEFAULT_CLOCK_SKEW,
        *,
        clock: Clock = time.time,
        allowed_algorithms: Optional[Iterable[str]] = None
    ):
        """
        Initialize the verifier.

        Args:
            resolver: Collaborator that maps key IDs to verifying keys
            clock_skew: Seconds a created timestamp may be ahead of local time
            clock: Time source returning Unix seconds
            allowed_algorithms: Algorithm tokens to accept (default: all registered)

        Raises:
            InvalidConfigurationError: If the configuration is invalid
        """
        if resolver is None or not hasattr(resolver, "resolve"):
            raise InvalidConfigurationError("resolver must provide resolve(key_id)")
        if clock_skew < 0:
            raise InvalidConfigurationError(
                "clock_skew cannot be negative",
                details={"clock_skew": clock_skew}
            )

        self.resolver = resolver
        self.clock_skew = clock_skew
        self.allowed_algorithms = None
        if allowed_algorithms is not None:
            self.allowed_algorithms = frozenset(get_algorithm(token).identifier() for token in allowed_algorithms)
        self._clock = clock
        self._codec = SignatureHeaderCodec()
        self._builder = SigningStringBuilder()

    def verify(self, view: RequestView, header_value: str, *, authorization: bool = False) -> VerificationOutcome:
        """
        Verify a signature header against a request.

        Args:
            view: Request as received
            header_value: Signature header value, or Authorization value if authorization=True
            authorization: Whether header_value uses the "Signature" auth scheme

        Returns:
            VerificationOutcome: Accepted outcome, or rejected with a reason
        """
        parsed = self._parse(header_value, authorization)
        if isinstance(parsed, VerificationOutcome):
            return parsed

        try:
            key = self.resolver.resolve(parsed.params.key_id)
        except Exception as error:
            return self._resolution_failure(parsed.params, error)

        if inspect.isawaitable(key):
            close = getattr(key, "close", None)
            if close is not None:
                close()
            return self._reject(
                parsed.params, RejectionReason.KEY_RESOLUTION_FAILED,
                "Resolver returned an awaitable; use verify_async", VerificationState.PARSED
            )

        return self._check(view, parsed, key)

    async def verify_async(
        self,
        view: RequestView,
        header_value: str,
        *,
        authorization: bool = False
    ) -> VerificationOutcome:
        """
        Verify a signature header, awaiting the resolver if it returns an awaitable.

        Resolvers that define an async resolve_async(key_id) are awaited through it.

        Cancellation of the resolver propagates to the caller.
        """
        parsed = self._parse(header_value, authorization)
        if isinstance(parsed, VerificationOutcome):
            return parsed

        try:
            resolve_async = getattr(self.resolver, "resolve_async", None)
            if inspect.iscoroutinefunction(resolve_async):
                key = await resolve_async(parsed.params.key_id)
            else:
                key = self.resolver.resolve(parsed.params.key_id)
            if inspect.isawaitable(key):
                key = await key
        except Exception as error:
            return self._resolution_failure(parsed.params, error)

        return self._check(view, parsed, key)

    def _parse(self, header_value: str, authorization: bool) -> Union[_ParsedSignature, VerificationOutcome]:
        try:
            if authorization:
                params = self._codec.parse_authorization(header_value)
            else:
                params = self._codec.parse(header_value)
        except MalformedHeaderError as error:
            return VerificationOutcome.reject(RejectionReason.MALFORMED_HEADER, error.message)

        try:
            provider = get_algorithm(params.algorithm)
        except UnsupportedAlgorithmError as error:
            return self._reject(params, RejectionReason.UNSUPPORTED_ALGORITHM, error.message, VerificationState.PARSED)

        if self.allowed_algorithms is not None and provider.identifier() not in self.allowed_algorithms:
            return self._reject(
                params,
                RejectionReason.UNSUPPORTED_ALGORITHM,
                f"Algorithm not allowed: {provider.identifier()}",
                VerificationState.PARSED
            )

        return _ParsedSignature(params, provider)

    def _resolution_failure(self, params: SignatureParams, error: Exception) -> VerificationOutcome:
        if isinstance(error, KeyNotFoundError):
            reason = RejectionReason.KEY_NOT_FOUND
        else:
            reason = RejectionReason.KEY_RESOLUTION_FAILED
        message = error.message if isinstance(error, HttpSignaturesError) else str(error)
        return self._reject(params, reason, message, VerificationState.PARSED)

    def _check(self, view: RequestView, parsed: _ParsedSignature, key) -> VerificationOutcome:
        params, provider = parsed.params, parsed.provider

        if key is None:
            return self._reject(
                params, RejectionReason.KEY_NOT_FOUND,
                f"No key found for key ID: {params.key_id}", VerificationState.PARSED
            )
        if not isinstance(key, VerifyingKey):
            return self._reject(
                params, RejectionReason.KEY_RESOLUTION_FAILED,
                f"Resolver returned {type(key).__name__}, not VerifyingKey", VerificationState.PARSED
            )
        if key.algorithm is not provider.algorithm:
            return self._reject(
                params, RejectionReason.KEY_ALGORITHM_MISMATCH,
                f"Key is for {key.algorithm.value}, signature uses {provider.identifier()}",
                VerificationState.PARSED
            )

        try:
            signing_string = self._builder.build(view, params.headers)
        except MissingHeaderError as error:
            return self._reject(
                params, RejectionReason.MISSING_HEADER,
                error.header_name, VerificationState.HEADERS_RESOLVED
            )

        if not provider.verify(signing_string.encode("utf-8"), params.signature, key):
            return self._reject(
                params, RejectionReason.SIGNATURE_MISMATCH,
                "Signature does not match the reconstructed signing string",
                VerificationState.STRING_RECONSTRUCTED
            )

        now = self._clock()
        if params.expires is not None and now > params.expires:
            return self._reject(
                params, RejectionReason.EXPIRED,
                f"Signature expired at {params.expires}", VerificationState.ALGORITHM_CHECKED
            )
        if params.created is not None and now + self.clock_skew < params.created:
            return self._reject(
                params, RejectionReason.NOT_YET_VALID,
                f"Signature created in the future at {params.created}", VerificationState.ALGORITHM_CHECKED
            )

        return VerificationOutcome.accept(params.key_id, provider.identifier(), params.headers)

    def _reject(
        self,
        params: SignatureParams,
        reason: RejectionReason,
        detail: str,
        last_completed: VerificationState
    ) -> VerificationOutcome:
        return VerificationOutcome.reject(
            reason,
            detail,
            last_completed=last_completed,
            key_id=params.key_id,
            algorithm=params.algorithm,
            headers=params.headers,
        )


def verify(
    view: RequestView,
    header_value: str,
    resolver: KeyResolver,
    clock_skew: int = DEFAULT_CLOCK_SKEW
) -> VerificationOutcome:
    """
    Verify a Signature header value against a request.

    Args:
        view: Request as received
        header_value: Signature header value
        resolver: Key resolver
        clock_skew: Allowed clock skew for created timestamps

    Returns:
        VerificationOutcome: Verification outcome
    """
    return Verifier(resolver, clock_skew).verify(view, header_value)
