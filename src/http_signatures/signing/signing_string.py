"""
Signing string construction

Both the signer and the verifier build the signing string from a RequestView
and an ordered list of header names. The output must be byte-identical on
both sides, so the rules here are deliberately small:

- one line per requested name, in the order given, joined by a single "\\n"
- "(request-target): <lowercased method> <target>" for the pseudo-header
- "<lowercased name>: <values>" otherwise, where repeated values are each
  trimmed of surrounding whitespace and joined with ", "
"""

from typing import List, Sequence

from ..exceptions import InvalidConfigurationError, MissingHeaderError
from .types import REQUEST_TARGET, RequestView
from .utils import normalize_header_name


class SigningStringBuilder:
    """
    Canonical signing string builder
    """

    def build(self, view: RequestView, header_names: Sequence[str]) -> str:
        """
        Build the signing string for a request.

        Args:
            view: Request to read method, target and headers from
            header_names: Ordered names of the headers to cover

        Returns:
            str: Signing string, lines joined by "\\n" with no trailing newline

        Raises:
            InvalidConfigurationError: If header_names is empty
            MissingHeaderError: If a requested header is absent from the request
        """
        if not header_names:
            raise InvalidConfigurationError(
                "At least one header must be signed",
                details={"headers": list(header_names)}
            )

        lines: List[str] = []
        for name in header_names:
            normalized = normalize_header_name(name)
            if normalized == REQUEST_TARGET:
                lines.append(self._request_target_line(view))
            else:
                lines.append(self._header_line(view, normalized))

        return "\n".join(lines)

    def _request_target_line(self, view: RequestView) -> str:
        return f"{REQUEST_TARGET}: {view.method().lower()} {view.target()}"

    def _header_line(self, view: RequestView, name: str) -> str:
        values = view.header(name)
        if not values:
            raise MissingHeaderError(name)

        joined = ", ".join(value.strip() for value in values)
        return f"{name}: {joined}"


_DEFAULT_BUILDER = SigningStringBuilder()


def build_signing_string(view: RequestView, header_names: Sequence[str]) -> str:
    """
    Build the signing string for a request.

    Args:
        view: Request view
        header_names: Ordered names of the headers to cover

    Returns:
        str: Signing string
    """
    return _DEFAULT_BUILDER.build(view, header_names)
