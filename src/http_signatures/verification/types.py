"""
Type definitions for signature verification

Verification never raises for a rejected signature. It returns a
VerificationOutcome which carries either the verified key ID and header
list, or the reason the signature was rejected. The reason is for local
diagnostics only; peers should only ever see accepted or rejected.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, Optional, Protocol, Tuple, Type, runtime_checkable

from ..crypto.types import VerifyingKey
from ..exceptions import (
    ExpiredSignatureError,
    HttpSignaturesError,
    KeyAlgorithmMismatchError,
    KeyNotFoundError,
    KeyResolutionError,
    MalformedHeaderError,
    MissingHeaderError,
    NotYetValidError,
    SignatureMismatchError,
    UnsupportedAlgorithmError,
)


class VerificationState(str, Enum):
    """States of the verification state machine, in order"""
    RECEIVED = "received"
    PARSED = "parsed"
    HEADERS_RESOLVED = "headers_resolved"
    STRING_RECONSTRUCTED = "string_reconstructed"
    ALGORITHM_CHECKED = "algorithm_checked"
    FRESHNESS_CHECKED = "freshness_checked"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class RejectionReason(str, Enum):
    """Why a signature was rejected. Every reason is equally fatal."""
    MALFORMED_HEADER = "malformed_header"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    KEY_NOT_FOUND = "key_not_found"
    KEY_RESOLUTION_FAILED = "key_resolution_failed"
    KEY_ALGORITHM_MISMATCH = "key_algorithm_mismatch"
    MISSING_HEADER = "missing_header"
    SIGNATURE_MISMATCH = "signature_mismatch"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"


_REASON_ERRORS: Dict[RejectionReason, Type[HttpSignaturesError]] = {
    RejectionReason.MALFORMED_HEADER: MalformedHeaderError,
    RejectionReason.UNSUPPORTED_ALGORITHM: UnsupportedAlgorithmError,
    RejectionReason.KEY_NOT_FOUND: KeyNotFoundError,
    RejectionReason.KEY_RESOLUTION_FAILED: KeyResolutionError,
    RejectionReason.KEY_ALGORITHM_MISMATCH: KeyAlgorithmMismatchError,
    RejectionReason.MISSING_HEADER: MissingHeaderError,
    RejectionReason.SIGNATURE_MISMATCH: SignatureMismatchError,
    RejectionReason.EXPIRED: ExpiredSignatureError,
    RejectionReason.NOT_YET_VALID: NotYetValidError,
}


@runtime_checkable
class KeyResolver(Protocol):
    """
    Looks up verifying keys by key ID

    resolve() may return an awaitable for Verifier.verify_async. A resolver may
    also define a coroutine resolve_async(key_id), which verify_async prefers.
    """

    def resolve(self, key_id: str) -> VerifyingKey:
        """
        Return the verifying key for key_id.

        Raises:
            KeyNotFoundError: If no key is known for key_id
        """
        ...


@dataclass(frozen=True)
class VerificationOutcome:
    """
    Result of verifying one signature

    Attributes:
        accepted: True only when every check passed
        state: Last state reached (ACCEPTED or REJECTED)
        last_completed: Last state completed before the outcome was decided
        key_id: Key ID from the header, when it could be parsed
        algorithm: Algorithm token from the header, when it could be parsed
        headers: Header names covered by the verified signature
        reason: Rejection reason, None when accepted
        detail: Detail for local logs; the missing header names for MISSING_HEADER
    """
    accepted: bool
    state: VerificationState
    last_completed: VerificationState
    key_id: Optional[str] = None
    algorithm: Optional[str] = None
    headers: Tuple[str, ...] = ()
    reason: Optional[RejectionReason] = None
    detail: str = field(default="", compare=False)

    @classmethod
    def accept(cls, key_id: str, algorithm: str, headers: Iterable[str]) -> "VerificationOutcome":
        return cls(
            accepted=True,
            state=VerificationState.ACCEPTED,
            last_completed=VerificationState.FRESHNESS_CHECKED,
            key_id=key_id,
            algorithm=algorithm,
            headers=tuple(headers),
        )

    @classmethod
    def reject(
        cls,
        reason: RejectionReason,
        detail: str = "",
        last_completed: VerificationState = VerificationState.RECEIVED,
        key_id: Optional[str] = None,
        algorithm: Optional[str] = None,
        headers: Iterable[str] = ()
    ) -> "VerificationOutcome":
        return cls(
            accepted=False,
            state=VerificationState.REJECTED,
            last_completed=last_completed,
            key_id=key_id,
            algorithm=algorithm,
            headers=tuple(headers),
            reason=reason,
            detail=detail,
        )

    def public_message(self) -> str:
        """Text safe to return to an untrusted peer."""
        return "accepted" if self.accepted else "rejected"

    def require_headers(self, names: Iterable[str]) -> "VerificationOutcome":
        """
        Enforce a minimum set of covered headers on an accepted outcome.

        Args:
            names: Header names that must have been covered by the signature

        Returns:
            VerificationOutcome: self if every name is covered (or already
            rejected), otherwise a MISSING_HEADER rejection
        """
        if not self.accepted:
            return self

        missing = [name.lower() for name in names if name.lower() not in self.headers]
        if not missing:
            return self

        return replace(
            self,
            accepted=False,
            state=VerificationState.REJECTED,
            reason=RejectionReason.MISSING_HEADER,
            detail=", ".join(missing),
        )

    def raise_for_rejection(self) -> None:
        """
        Raise the exception matching the rejection reason.

        Raises:
            HttpSignaturesError: Subclass matching self.reason, when rejected
        """
        if self.accepted:
            return

        error_class = _REASON_ERRORS[self.reason]
        details = {"key_id": self.key_id, "state": self.last_completed.value}
        if error_class is MissingHeaderError:
            raise MissingHeaderError(self.detail or "unknown", details=details)
        if error_class is KeyNotFoundError:
            raise KeyNotFoundError(self.key_id or "", details=details)
        raise error_class(self.detail or self.reason.value, details=details)
