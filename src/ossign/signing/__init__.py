"""
ossign - Request Signing Module

OSS V1 header signatures (HMAC-SHA1 over a canonical "sign string").
This module provides the canonicalizer and signer used to authenticate
requests against S3-compatible object storage endpoints.
"""

from .types import (
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
)

from .oss_signer import (
    OssSigner,
    create_signer,
    sign_request,
)

from .canonical_message import (
    CanonicalMessageBuilder,
    build_canonical_message,
    build_string_to_sign,
    canonicalize_oss_headers,
    canonicalize_resource,
)

from .utils import (
    calculate_content_md5,
    guess_content_type,
    format_http_date,
    gmt_now,
    find_header,
    has_header,
    is_oss_header,
    normalize_header_name,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'OssSigner',
    'create_signer',
    'sign_request',
    # Types
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
    # Canonicalization
    'CanonicalMessageBuilder',
    'build_canonical_message',
    'build_string_to_sign',
    'canonicalize_oss_headers',
    'canonicalize_resource',
    # Utilities
    'calculate_content_md5',
    'guess_content_type',
    'format_http_date',
    'gmt_now',
    'find_header',
    'has_header',
    'is_oss_header',
    'normalize_header_name',
]
