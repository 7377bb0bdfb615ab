"""
ossign - OSS request signing SDK
Builds, signs and sends requests to S3-compatible object storage services
"""

from .version import __version__
from .exceptions import (
    OssSDKError,
    ValidationError,
    RequestConstructionError,
    ConfigurationError,
    CredentialStorageError,
    TransportError,
    ServiceError,
)
from .signing import (
    # Core signing functionality
    OssSigner,
    create_signer,
    sign_request,
    # Types
    OssRequest,
    Credentials,
    SignatureResult,
    SubResource,
    KeyOnly,
    KeyValue,
    make_sub_resource,
    SigningError,
    SigningErrorCodes,
    HttpMethod,
    # Canonicalization
    build_canonical_message,
    canonicalize_oss_headers,
    canonicalize_resource,
    # Utilities
    calculate_content_md5,
    guess_content_type,
    format_http_date,
)
from .request import (
    build,
    build_signed,
    gen_signature,
    query_url,
)
from .response import (
    OssResponse,
    parse_response,
    parse_error,
)
from .http_client import (
    OssHttpClient,
    ClientConfig,
    create_client,
)
from .config import (
    OssConfig,
    OssConfigManager,
    LoggingConfig,
    KeyringCredentialStore,
    configure_logging,
    load_config_from_json,
    load_config_from_file,
    load_config_from_env,
)

# Public API exports
__all__ = [
    '__version__',
    # Exceptions
    'OssSDKError',
    'ValidationError',
    'RequestConstructionError',
    'ConfigurationError',
    'CredentialStorageError',
    'TransportError',
    'ServiceError',
    # Request Signing - Core
    'OssSigner',
    'create_signer',
    'sign_request',
    # Request Signing - Types
    'OssRequest',
    'Credentials',
    'SignatureResult',
    'SubResource',
    'KeyOnly',
    'KeyValue',
    'make_sub_resource',
    'SigningError',
    'SigningErrorCodes',
    'HttpMethod',
    # Request Signing - Canonicalization
    'build_canonical_message',
    'canonicalize_oss_headers',
    'canonicalize_resource',
    # Request Signing - Utilities
    'calculate_content_md5',
    'guess_content_type',
    'format_http_date',
    # Request Assembly
    'build',
    'build_signed',
    'gen_signature',
    'query_url',
    # Responses
    'OssResponse',
    'parse_response',
    'parse_error',
    # HTTP Client
    'OssHttpClient',
    'ClientConfig',
    'create_client',
    # Configuration
    'OssConfig',
    'OssConfigManager',
    'LoggingConfig',
    'KeyringCredentialStore',
    'configure_logging',
    'load_config_from_json',
    'load_config_from_file',
    'load_config_from_env',
]
