"""
Command-line interface for HTTP Signatures
Key generation, signing string inspection, signing and verification
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from . import __version__
from .config import HttpSignaturesConfig, configure_logging, load_config
from .crypto import (
    generate_signing_key,
    load_signing_key,
    load_verifying_key,
    serialize_signing_key,
    serialize_verifying_key,
    supported_algorithms,
)
from .exceptions import HttpSignaturesError
from .signing import HttpRequestView, Signer, build_signing_string
from .verification import CallableKeyResolver, StaticKeyResolver

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='http-signatures',
        description='Sign and verify HTTP requests with HTTP Signatures'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'http-signatures {__version__}'
    )
    parser.add_argument('--config', help='JSON configuration file')
    parser.add_argument('--log-level', help='Log level (overrides configuration)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_keygen_parser(subparsers)
    setup_signing_string_parser(subparsers)
    setup_sign_parser(subparsers)
    setup_verify_parser(subparsers)

    return parser


def _add_request_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--method', default='GET', help='Request method (default: GET)')
    parser.add_argument('--target', default='/', help='Request path and query, e.g. /foo?bar=baz')
    parser.add_argument(
        '-H', '--header',
        action='append',
        default=[],
        dest='request_headers',
        metavar='"NAME: VALUE"',
        help='Request header; repeat for several headers'
    )
    parser.add_argument(
        '--headers',
        dest='signed_headers',
        help='Space separated header names to sign (default: from configuration)'
    )


def _add_key_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--key', required=True, help='Key file (PEM/DER, or base64 secret for HMAC)')
    parser.add_argument(
        '--algorithm',
        required=True,
        choices=supported_algorithms(),
        help='Signature algorithm'
    )


def setup_keygen_parser(subparsers):
    """Setup key generation subcommand."""
    keygen_parser = subparsers.add_parser('keygen', help='Generate key material')
    keygen_parser.add_argument(
        '--algorithm',
        required=True,
        choices=supported_algorithms(),
        help='Algorithm the key is for'
    )
    keygen_parser.add_argument(
        '--key-size',
        type=int,
        default=2048,
        help='RSA key size in bits (default: 2048)'
    )
    keygen_parser.add_argument('--out-private', help='Write the private key (or HMAC secret) to this file')
    keygen_parser.add_argument('--out-public', help='Write the public key to this file')


def setup_signing_string_parser(subparsers):
    """Setup signing string subcommand."""
    parser = subparsers.add_parser('signing-string', help='Print the signing string for a request')
    _add_request_arguments(parser)


def setup_sign_parser(subparsers):
    """Setup sign subcommand."""
    parser = subparsers.add_parser('sign', help='Sign a request and print the header value')
    _add_request_arguments(parser)
    _add_key_arguments(parser)
    parser.add_argument('--key-id', help='Key ID (default: from configuration)')
    parser.add_argument('--created', type=int, help='Created timestamp to include')
    parser.add_argument('--expires', type=int, help='Expires timestamp to include')
    parser.add_argument(
        '--authorization',
        action='store_true',
        help='Print an Authorization header value instead of a Signature value'
    )


def setup_verify_parser(subparsers):
    """Setup verify subcommand."""
    parser = subparsers.add_parser('verify', help='Verify a signature header against a request')
    _add_request_arguments(parser)
    _add_key_arguments(parser)
    parser.add_argument('--signature', required=True, help='Signature (or Authorization) header value')
    parser.add_argument('--key-id', help='Only accept this key ID')
    parser.add_argument(
        '--authorization',
        action='store_true',
        help='The header value uses the "Signature" Authorization scheme'
    )
    parser.add_argument('--clock-skew', type=int, help='Allowed clock skew in seconds')


def parse_header_arguments(values: List[str]) -> List[Tuple[str, str]]:
    """
    Parse repeated "Name: value" arguments.

    Raises:
        ValueError: If an argument has no colon
    """
    headers = []
    for value in values:
        name, separator, header_value = value.partition(':')
        if not separator or not name.strip():
            raise ValueError(f"Header must look like 'Name: value', got '{value}'")
        headers.append((name.strip(), header_value.strip()))
    return headers


def _request_view(args) -> HttpRequestView:
    return HttpRequestView(args.method, args.target, parse_header_arguments(args.request_headers))


def _signed_headers(args, config: HttpSignaturesConfig) -> List[str]:
    if args.signed_headers:
        return args.signed_headers.split()
    return config.signer.headers


def handle_keygen_command(args) -> int:
    """Handle key generation command."""
    key = generate_signing_key(args.algorithm, key_size=args.key_size)
    private_data = serialize_signing_key(key)
    public_data = serialize_verifying_key(key.verifying_key())

    if args.out_private:
        Path(args.out_private).write_bytes(private_data)
        print(f"Private key written to {args.out_private}")
    else:
        print(private_data.decode('ascii').rstrip())

    # HMAC secrets have no separate public half
    if key.algorithm.family.value == 'hmac':
        return 0

    if args.out_public:
        Path(args.out_public).write_bytes(public_data)
        print(f"Public key written to {args.out_public}")
    else:
        print(public_data.decode('ascii').rstrip())
    return 0


def handle_signing_string_command(args, config: HttpSignaturesConfig) -> int:
    """Handle signing string command."""
    print(build_signing_string(_request_view(args), _signed_headers(args, config)))
    return 0


def handle_sign_command(args, config: HttpSignaturesConfig) -> int:
    """Handle sign command."""
    key_id = args.key_id or config.signer.key_id
    if not key_id:
        print("Error: --key-id is required when the configuration has no signer.key_id", file=sys.stderr)
        return 1

    key = load_signing_key(Path(args.key).read_bytes(), args.algorithm)
    signer = Signer(
        key,
        key_id,
        _signed_headers(args, config),
        include_created=config.signer.include_created,
        expires_in=config.signer.expires_in,
    )

    view = _request_view(args)
    authorization = args.authorization or config.signer.header_mode == 'authorization'
    if authorization:
        print(signer.authorization_header(view, created=args.created, expires=args.expires))
    else:
        print(signer.signature_header(view, created=args.created, expires=args.expires))
    return 0


def handle_verify_command(args, config: HttpSignaturesConfig) -> int:
    """Handle verify command."""
    key = load_verifying_key(Path(args.key).read_bytes(), args.algorithm)
    if args.key_id:
        resolver = StaticKeyResolver({args.key_id: key})
    else:
        resolver = CallableKeyResolver(lambda key_id: key)

    if args.clock_skew is not None:
        config.verifier.clock_skew_seconds = args.clock_skew
    verifier = config.build_verifier(resolver)

    authorization = args.authorization or config.verifier.header_mode == 'authorization'
    outcome = verifier.verify(_request_view(args), args.signature, authorization=authorization)
    outcome = outcome.require_headers(config.verifier.required_headers)

    if outcome.accepted:
        print("accepted")
        return 0

    logger.debug(f"Verification detail: {outcome.detail}")
    print(f"rejected: {outcome.reason.value}")
    return 1


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        level = args.log_level or config.logging.level
        logging.basicConfig(format='%(levelname)s %(name)s: %(message)s')
        configure_logging(level)

        if args.command == 'keygen':
            return handle_keygen_command(args)
        elif args.command == 'signing-string':
            return handle_signing_string_command(args, config)
        elif args.command == 'sign':
            return handle_sign_command(args, config)
        elif args.command == 'verify':
            return handle_verify_command(args, config)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except (HttpSignaturesError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
