"""
Signature header codec

Parses and serializes the structured header value that carries a signature:

    keyId="rsa-key-1",algorithm="rsa-sha256",headers="(request-target) host",signature="Base64=="

The same parameters may be sent as an Authorization header with the
"Signature" scheme prefix. Unknown parameters are ignored when parsing.
"""

import re
from typing import Dict, List, Optional

from ..exceptions import InvalidConfigurationError, MalformedHeaderError
from .types import REQUEST_TARGET, SignatureParams
from .utils import decode_signature, encode_signature, validate_header_name

SIGNATURE_SCHEME = "Signature"

DEFAULT_HEADERS = (REQUEST_TARGET,)

# key="value", or key=123 for unquoted integers
_PARAM_PATTERN = re.compile(r'\s*([A-Za-z][A-Za-z0-9_-]*)\s*=\s*(?:"([^"]*)"|([0-9]+))\s*')

_INTEGER_FIELDS = ("created", "expires")

_QUOTED_FIELDS = ("keyId", "algorithm", "headers", "signature")

_DIGITS = re.compile(r"[0-9]+")


class SignatureHeaderCodec:
    """
    Parser and serializer for signature header values
    """

    def parse(self, raw: str) -> SignatureParams:
        """
        Parse a Signature header value.

        Args:
            raw: Header value, without any scheme prefix

        Returns:
            SignatureParams: Parsed parameters

        Raises:
            MalformedHeaderError: On any syntax violation
        """
        fields = self._split_params(raw)

        key_id = self._require(fields, "keyId")
        algorithm = self._require(fields, "algorithm")
        signature = decode_signature(self._require(fields, "signature"))

        if "headers" in fields:
            headers = fields["headers"].split()
            if not headers:
                raise MalformedHeaderError("Signed header list cannot be empty", details={"field": "headers"})
        else:
            headers = list(DEFAULT_HEADERS)

        return SignatureParams(
            key_id=key_id,
            algorithm=algorithm,
            headers=tuple(headers),
            signature=signature,
            created=self._integer(fields, "created"),
            expires=self._integer(fields, "expires"),
        )

    def serialize(self, params: SignatureParams) -> str:
        """
        Serialize parameters to a Signature header value.

        Order is fixed: keyId, algorithm, headers, created, expires, signature.

        Args:
            params: Parameters to serialize

        Returns:
            str: Header value

        Raises:
            InvalidConfigurationError: If a value cannot be represented on the wire
        """
        self._check_serializable(params)

        parts = [
            f'keyId="{params.key_id}"',
            f'algorithm="{params.algorithm}"',
            f'headers="{" ".join(params.headers)}"',
        ]
        if params.created is not None:
            parts.append(f'created="{params.created}"')
        if params.expires is not None:
            parts.append(f'expires="{params.expires}"')
        parts.append(f'signature="{encode_signature(params.signature)}"')

        return ",".join(parts)

    def parse_authorization(self, raw: str) -> SignatureParams:
        """
        Parse an Authorization header value using the Signature scheme.

        Raises:
            MalformedHeaderError: If the scheme is missing or the parameters are malformed
        """
        if not isinstance(raw, str):
            raise MalformedHeaderError("Authorization header is empty")
        scheme, _, params = raw.strip().partition(" ")
        if scheme.lower() != SIGNATURE_SCHEME.lower() or not params.strip():
            raise MalformedHeaderError(
                "Authorization header does not use the Signature scheme",
                details={"scheme": scheme}
            )
        return self.parse(params)

    def serialize_authorization(self, params: SignatureParams) -> str:
        """Serialize parameters to an Authorization header value."""
        return f"{SIGNATURE_SCHEME} {self.serialize(params)}"

    def _split_params(self, raw: str) -> Dict[str, str]:
        if not isinstance(raw, str) or not raw.strip():
            raise MalformedHeaderError("Signature header is empty")

        fields: Dict[str, str] = {}
        position = 0
        length = len(raw)

        while position < length:
            match = _PARAM_PATTERN.match(raw, position)
            if not match:
                raise MalformedHeaderError(
                    f"Malformed signature parameter at offset {position}",
                    details={"offset": position}
                )

            name = match.group(1)
            quoted, bare = match.group(2), match.group(3)
            if bare is not None and name in _QUOTED_FIELDS:
                raise MalformedHeaderError(
                    f"Parameter {name} must be quoted",
                    details={"field": name}
                )
            if name in fields:
                raise MalformedHeaderError(f"Duplicate parameter: {name}", details={"field": name})
            fields[name] = quoted if quoted is not None else bare

            position = match.end()
            if position < length:
                if raw[position] != ",":
                    raise MalformedHeaderError(
                        f"Expected ',' at offset {position}",
                        details={"offset": position}
                    )
                position += 1
                if position >= length or not raw[position:].strip():
                    raise MalformedHeaderError("Trailing ',' in signature header")

        return fields

    def _require(self, fields: Dict[str, str], name: str) -> str:
        value = fields.get(name)
        if not value:
            raise MalformedHeaderError(f"Missing signature parameter: {name}", details={"field": name})
        return value

    def _integer(self, fields: Dict[str, str], name: str) -> Optional[int]:
        value = fields.get(name)
        if value is None:
            return None
        if not _DIGITS.fullmatch(value):
            raise MalformedHeaderError(
                f"Parameter {name} must be an integer timestamp",
                details={"field": name, "value": value}
            )
        return int(value)

    def _check_serializable(self, params: SignatureParams) -> None:
        if not params.key_id:
            raise InvalidConfigurationError("Key ID cannot be empty")
        if '"' in params.key_id:
            raise InvalidConfigurationError("Key ID cannot contain '\"'", details={"key_id": params.key_id})
        if not params.algorithm or '"' in params.algorithm:
            raise InvalidConfigurationError("Invalid algorithm token", details={"algorithm": params.algorithm})
        if not params.headers:
            raise InvalidConfigurationError("At least one header must be signed")

        invalid: List[str] = [name for name in params.headers if not validate_header_name(name)]
        if invalid:
            raise InvalidConfigurationError(
                f"Invalid header names: {', '.join(invalid)}",
                details={"headers": invalid}
            )

        for name in _INTEGER_FIELDS:
            value = getattr(params, name)
            if value is not None and (not isinstance(value, int) or value < 0):
                raise InvalidConfigurationError(
                    f"{name} must be a non-negative integer",
                    details={"field": name, "value": value}
                )


_DEFAULT_CODEC = SignatureHeaderCodec()


def parse_signature_header(raw: str) -> SignatureParams:
    """Parse a Signature header value. See SignatureHeaderCodec.parse."""
    return _DEFAULT_CODEC.parse(raw)


def serialize_signature_header(params: SignatureParams) -> str:
    """Serialize a Signature header value. See SignatureHeaderCodec.serialize."""
    return _DEFAULT_CODEC.serialize(params)


def parse_authorization_header(raw: str) -> SignatureParams:
    """Parse an "Authorization: Signature ..." header value."""
    return _DEFAULT_CODEC.parse_authorization(raw)


def serialize_authorization_header(params: SignatureParams) -> str:
    """Serialize an "Authorization: Signature ..." header value."""
    return _DEFAULT_CODEC.serialize_authorization(params)
