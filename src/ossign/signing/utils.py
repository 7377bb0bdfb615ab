"""
Utility functions for request signing

This module provides the helpers used while assembling and signing OSS
requests: content digests, content type lookup, HTTP dates and
case-insensitive header access.
"""

import base64
import mimetypes
import os
import re
import time
from email.utils import formatdate
from typing import Mapping, Optional

from cryptography.hazmat.primitives import hashes

from .types import (
    SigningError,
    SigningErrorCodes,
    SubResource,
    RequestBody,
)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
OSS_HEADER_PREFIX = "x-oss-"

_OSS_HEADER_PATTERN = re.compile("^" + re.escape(OSS_HEADER_PREFIX), re.IGNORECASE)


def calculate_content_md5(body: RequestBody) -> str:
    """
    Calculate the Content-MD5 header value for a request body.

    Args:
        body: Request body (string, bytes, or None)

    Returns:
        str: Empty string for an empty body, else base64 of the MD5 digest
    """
    if body is None:
        body = b""
    elif isinstance(body, str):
        body = body.encode('utf-8')
    elif not isinstance(body, (bytes, bytearray)):
        raise SigningError(
            f"Body must be string, bytes, or None, got {type(body)}",
            SigningErrorCodes.INVALID_REQUEST,
            {"body_type": str(type(body))}
        )

    if not body:
        return ""

    digest = hashes.Hash(hashes.MD5())
    digest.update(bytes(body))
    return base64.b64encode(digest.finalize()).decode('ascii')


def guess_content_type(resource: str) -> str:
    """
    Derive a content type from the file extension of a resource path.

    Args:
        resource: Canonical resource path, e.g. ``/bucket/key.txt``

    Returns:
        str: MIME type, or application/octet-stream when unknown
    """
    _, extension = os.path.splitext(resource)
    if not extension or extension == '.':
        return DEFAULT_CONTENT_TYPE

    content_type, _ = mimetypes.guess_type(f"file{extension.lower()}", strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


def format_http_date(timestamp: Optional[float] = None) -> str:
    """
    Format a timestamp as an RFC 1123 HTTP-date in GMT.

    Args:
        timestamp: Unix timestamp (uses current time if None)

    Returns:
        str: Date such as ``Mon, 21 Oct 2024 07:28:00 GMT``
    """
    if timestamp is None:
        timestamp = time.time()
    return formatdate(timestamp, usegmt=True)


def gmt_now() -> str:
    """Current time as an HTTP-date."""
    return format_http_date()


def normalize_header_name(name: str) -> str:
    """
    Normalize header name to lowercase for comparisons.

    Args:
        name: Header name to normalize

    Returns:
        str: Lowercase header name
    """
    return str(name).lower().strip()


def is_oss_header(name: str) -> bool:
    """Check whether a header name is a service-specific x-oss-* header."""
    return bool(_OSS_HEADER_PATTERN.match(str(name)))


def find_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """
    Find a header value regardless of name case.

    Args:
        headers: Header mapping
        name: Header name to look up

    Returns:
        Optional[str]: First matching value, or None
    """
    wanted = normalize_header_name(name)
    for key, value in headers.items():
        if normalize_header_name(key) == wanted:
            return value
    return None


def has_header(headers: Mapping[str, str], name: str) -> bool:
    return find_header(headers, name) is not None


def encode_sub_resource(entry: SubResource) -> str:
    """Render a sub-resource as ``key`` or ``key=value``."""
    return entry.render()


def escape_for_log(value: str) -> str:
    """Make a multi-line canonical string readable on one log line."""
    return value.replace('\n', '\\n')


class PerformanceTimer:
    """Simple performance timer for monitoring signing operations."""

    def __init__(self):
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000

    def reset(self) -> None:
        """Reset the timer."""
        self.start_time = time.perf_counter()
