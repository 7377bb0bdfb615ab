"""
Request assembly for the OSS REST API

This module turns a caller-supplied partial request into a complete
``OssRequest``: it fills the essential headers the signature depends on,
attaches the Authorization header and builds the request URL.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import quote_plus

from .exceptions import RequestConstructionError
from .signing.oss_signer import OssSigner
from .signing.types import Credentials, KeyOnly, OssRequest
from .signing.utils import (
    calculate_content_md5,
    gmt_now,
    guess_content_type,
    has_header,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('host', 'path', 'resource')
OPTIONAL_FIELDS = ('verb', 'query_params', 'sub_resources', 'body', 'headers')
SECURITY_TOKEN_HEADER = 'x-oss-security-token'

PartialRequest = Mapping[str, Any]


def build(partial: PartialRequest, credentials: Optional[Credentials] = None) -> OssRequest:
    """
    Build a request from a partial description and fill default headers.

    Args:
        partial: Mapping with at least ``host``, ``path`` and ``resource``;
            ``verb``, ``query_params``, ``sub_resources``, ``body`` and
            ``headers`` override the defaults
        credentials: Optional credentials; a security token is added as an
            ``x-oss-security-token`` header

    Returns:
        OssRequest: Request with Host, Content-Type, Content-MD5,
            Content-Length and Date present

    Raises:
        RequestConstructionError: If a mandatory field is missing or an
            unknown field is supplied
    """
    if not isinstance(partial, Mapping):
        raise RequestConstructionError(
            f"Partial request must be a mapping, got {type(partial).__name__}"
        )

    missing = [name for name in REQUIRED_FIELDS if not partial.get(name)]
    if missing:
        raise RequestConstructionError(
            f"Missing required request fields: {', '.join(missing)}",
            "MISSING_REQUIRED_FIELD",
            {"missing_fields": missing}
        )

    unknown = [name for name in partial if name not in REQUIRED_FIELDS + OPTIONAL_FIELDS]
    if unknown:
        raise RequestConstructionError(
            f"Unknown request fields: {', '.join(unknown)}",
            "UNKNOWN_FIELD",
            {"unknown_fields": unknown}
        )

    request = OssRequest(**dict(partial))
    return ensure_essential_headers(request, credentials)


def build_signed(partial: PartialRequest, credentials: Credentials) -> OssRequest:
    """
    Build a request and attach its Authorization header.

    Args:
        partial: Partial request, see ``build``
        credentials: Account credentials

    Returns:
        OssRequest: Signed request ready for the transport
    """
    request = build(partial, credentials)
    return set_authorization_header(request, credentials)


def gen_signature(request: Union[OssRequest, PartialRequest], credentials: Credentials) -> str:
    """
    Compute the signature of a built request or of a partial request.

    Args:
        request: ``OssRequest`` or partial mapping (built first)
        credentials: Account credentials

    Returns:
        str: Base64-encoded signature
    """
    if not isinstance(request, OssRequest):
        request = build(request, credentials)
    return OssSigner(credentials).sign(request)


def ensure_essential_headers(request: OssRequest, credentials: Optional[Credentials] = None) -> OssRequest:
    """
    Return a copy of the request with missing essential headers filled.

    Caller-supplied headers win; names are matched case-insensitively.
    """
    headers: Dict[str, str] = dict(request.headers)

    defaults = (
        ('Host', lambda: request.host),
        ('Content-Type', lambda: guess_content_type(request.resource)),
        ('Content-MD5', lambda: calculate_content_md5(request.body)),
        ('Content-Length', lambda: str(len(request.body))),
        ('Date', gmt_now),
    )
    for name, make_value in defaults:
        if not has_header(headers, name):
            headers[name] = make_value()

    if credentials is not None and credentials.security_token:
        if not has_header(headers, SECURITY_TOKEN_HEADER):
            headers[SECURITY_TOKEN_HEADER] = credentials.security_token

    return replace(request, headers=headers)


def set_authorization_header(request: OssRequest, credentials: Credentials) -> OssRequest:
    """Return a copy of the request carrying a fresh Authorization header."""
    authorization = OssSigner(credentials).authorization(request)

    headers = {
        name: value for name, value in request.headers.items()
        if name.lower() != 'authorization'
    }
    headers['Authorization'] = authorization

    logger.debug(f"Signed {request.verb.value} request for {request.host}{request.path}")
    return replace(request, headers=headers)


def query_string(request: OssRequest) -> str:
    """
    Form-encode query params merged with sub-resources.

    Sub-resources win on key collision; key-only sub-resources are rendered
    as bare keys.
    """
    merged: Dict[str, Optional[str]] = dict(request.query_params)
    for entry in request.sub_resources:
        merged[entry.key] = None if isinstance(entry, KeyOnly) else entry.value

    parts = []
    for key, value in merged.items():
        if value is None:
            parts.append(quote_plus(key))
        else:
            parts.append(f"{quote_plus(key)}={quote_plus(value)}")
    return '&'.join(parts)


def query_url(request: OssRequest) -> str:
    """
    Build the HTTPS URL for a request.

    Returns:
        str: ``https://{host}{path}`` followed by ``?{query}`` when the
            query is not empty
    """
    url = f"https://{request.host}{request.path}"
    query = query_string(request)
    if query:
        url = f"{url}?{query}"
    return url

