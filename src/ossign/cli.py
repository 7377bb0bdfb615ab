"""
Command-line interface for the ossign SDK
Inspect signatures, build request URLs, send signed requests and manage
keyring credentials
"""

import argparse
import getpass
import sys
from typing import Dict, List, Optional, Tuple

from . import __version__
from .config import (
    KeyringCredentialStore,
    DEFAULT_PROFILE,
    LoggingConfig,
    configure_logging,
    load_config_from_env,
    load_config_from_file,
)
from .exceptions import ConfigurationError, OssSDKError, ServiceError
from .http_client import ClientConfig, OssHttpClient
from .request import build, build_signed, query_url
from .signing import Credentials, OssSigner


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='ossign',
        description='Sign and send requests to an OSS-compatible object storage service'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'ossign {__version__}'
    )
    parser.add_argument('--config', help='JSON configuration file (default: OSS_* environment variables)')
    parser.add_argument('--profile', default=DEFAULT_PROFILE, help='Keyring profile used when no other credentials are found')
    parser.add_argument('--log-level', help='Log level (DEBUG shows the string to sign)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_request_parsers(subparsers)
    setup_credentials_parser(subparsers)

    return parser


def _add_request_arguments(subparser) -> None:
    subparser.add_argument('--verb', default='GET', help='HTTP method (default: GET)')
    subparser.add_argument('--host', required=True, help='Request host, e.g. bucket.oss-cn-hangzhou.aliyuncs.com')
    subparser.add_argument('--path', required=True, help='Literal URL path')
    subparser.add_argument('--resource', required=True, help='Canonical resource, e.g. /bucket/key')
    subparser.add_argument(
        '--sub-resource',
        action='append',
        default=[],
        metavar='KEY[=VALUE]',
        help='Signed sub-resource; repeat to keep order'
    )
    subparser.add_argument(
        '--query',
        action='append',
        default=[],
        metavar='KEY=VALUE',
        help='Unsigned query parameter'
    )
    subparser.add_argument(
        '--header',
        action='append',
        default=[],
        metavar='NAME:VALUE',
        help='Request header; repeat for more'
    )
    subparser.add_argument('--body', default='', help='Request body text')
    subparser.add_argument('--body-file', help='Read request body from file')
    subparser.add_argument('--date', help='Pin the Date header instead of using the current time')


def setup_request_parsers(subparsers):
    """Setup sign, url and request subcommands."""
    sign_parser = subparsers.add_parser('sign', help='Print the string to sign and the Authorization header')
    _add_request_arguments(sign_parser)

    url_parser = subparsers.add_parser('url', help='Print the request URL')
    _add_request_arguments(url_parser)

    request_parser = subparsers.add_parser('request', help='Send a signed request')
    _add_request_arguments(request_parser)
    request_parser.add_argument('--output', help='Write the response body to a file')


def setup_credentials_parser(subparsers):
    """Setup keyring credential subcommands."""
    creds_parser = subparsers.add_parser('credentials', help='Keyring credential management')
    creds_subparsers = creds_parser.add_subparsers(dest='credentials_command', help='Credential operations')

    store_parser = creds_subparsers.add_parser('store', help='Store credentials in the OS keyring')
    store_parser.add_argument('--access-key-id', required=True, help='Access key ID')
    store_parser.add_argument('--access-key-secret', help='Access key secret (prompted if omitted)')
    store_parser.add_argument('--security-token', help='Optional STS security token')

    creds_subparsers.add_parser('delete', help='Delete credentials from the OS keyring')


def parse_sub_resources(values: List[str]) -> Dict[str, Optional[str]]:
    """Turn ``key`` / ``key=value`` arguments into an ordered mapping."""
    sub_resources: Dict[str, Optional[str]] = {}
    for item in values:
        key, sep, value = item.partition('=')
        sub_resources[key] = value if sep else None
    return sub_resources


def parse_pairs(values: List[str], separator: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition(separator)
        if not sep or not key.strip():
            raise ConfigurationError(f"Expected NAME{separator}VALUE, got '{item}'", "INVALID_ARGUMENT")
        pairs[key.strip()] = value.strip()
    return pairs


def partial_from_args(args) -> dict:
    """Build a partial request mapping from parsed arguments."""
    headers = parse_pairs(args.header, ':')
    if args.date:
        headers['Date'] = args.date

    if args.body_file:
        with open(args.body_file, 'rb') as f:
            body = f.read()
    else:
        body = args.body

    return {
        'verb': args.verb,
        'host': args.host,
        'path': args.path,
        'resource': args.resource,
        'sub_resources': parse_sub_resources(args.sub_resource),
        'query_params': parse_pairs(args.query, '='),
        'headers': headers,
        'body': body,
    }


def resolve_config(args) -> Tuple[Credentials, ClientConfig]:
    """Credentials and client settings from --config, then the environment, then the keyring."""
    if args.config:
        config = load_config_from_file(args.config).get_config()
        return config.credentials, config.client

    try:
        config = load_config_from_env().get_config()
        return config.credentials, config.client
    except ConfigurationError as e:
        if e.error_code != 'MISSING_CREDENTIALS':
            raise

    credentials = KeyringCredentialStore().load(args.profile)
    if credentials is None:
        raise ConfigurationError(
            "No credentials found in --config, OSS_ACCESS_KEY_ID/OSS_ACCESS_KEY_SECRET or the keyring",
            "MISSING_CREDENTIALS"
        )
    return credentials, ClientConfig()


def resolve_credentials(args) -> Credentials:
    return resolve_config(args)[0]


def handle_sign_command(args) -> int:
    """Handle printing the signature of a request."""
    credentials = resolve_credentials(args)
    request = build(partial_from_args(args), credentials)
    result = OssSigner(credentials).sign_request(request)

    print("String to sign:")
    print(result.string_to_sign)
    print()
    print(f"Authorization: {result.authorization}")
    return 0


def handle_url_command(args) -> int:
    """Handle printing the URL of a request."""
    request = build(partial_from_args(args))
    print(query_url(request))
    return 0


def handle_request_command(args) -> int:
    """Handle sending a signed request."""
    credentials, client_config = resolve_config(args)

    signed = build_signed(partial_from_args(args), credentials)
    with OssHttpClient(credentials, client_config) as client:
        try:
            response = client.send(signed)
        except ServiceError as e:
            print(f"HTTP {e.http_status} {e.error_code}: {e}", file=sys.stderr)
            if e.request_id:
                print(f"  Request ID: {e.request_id}", file=sys.stderr)
            return 1

    print(f"HTTP {response.status_code}")
    for name, value in response.headers.items():
        print(f"{name}: {value}")

    if args.output:
        with open(args.output, 'wb') as f:
            f.write(response.body)
        print(f"\nBody written to {args.output} ({len(response.body)} bytes)")
    elif response.body:
        print()
        print(response.body.decode('utf-8', errors='replace'))
    return 0


def handle_credentials_command(args) -> int:
    """Handle keyring credential commands."""
    store = KeyringCredentialStore()

    if args.credentials_command == 'store':
        secret = args.access_key_secret or getpass.getpass('Access key secret: ')
        credentials = Credentials(args.access_key_id, secret, args.security_token)
        store.store(credentials, args.profile)
        print(f"Stored credentials for profile '{args.profile}'")
        return 0
    elif args.credentials_command == 'delete':
        if store.delete(args.profile):
            print(f"Deleted credentials for profile '{args.profile}'")
        else:
            print(f"No credentials stored for profile '{args.profile}'")
        return 0
    else:
        print("Error: No credentials command specified", file=sys.stderr)
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
        if args.log_level:
            configure_logging(LoggingConfig(level=args.log_level))

        if args.command == 'sign':
            return handle_sign_command(args)
        elif args.command == 'url':
            return handle_url_command(args)
        elif args.command == 'request':
            return handle_request_command(args)
        elif args.command == 'credentials':
            return handle_credentials_command(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except OssSDKError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
