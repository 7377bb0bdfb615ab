"""
Canonical string construction for OSS header signatures

This module builds the "string to sign" used by the OSS V1 signature
scheme: the verb, Content-MD5, Content-Type and Date lines, followed by the
canonicalized x-oss-* headers and the canonicalized resource.
"""

from typing import Iterable, Mapping, Optional

from .types import (
    OssRequest,
    SigningError,
    SigningErrorCodes,
    SubResource,
)
from .utils import (
    encode_sub_resource,
    find_header,
    is_oss_header,
    normalize_header_name,
)

REQUIRED_SIGNING_HEADERS = ('Content-MD5', 'Content-Type', 'Date')


class CanonicalMessageBuilder:
    """
    Canonical string builder for OSS signatures
    """

    def __init__(self, request: OssRequest):
        """
        Initialize canonical message builder.

        Args:
            request: Request whose headers already hold Content-MD5,
                Content-Type and Date
        """
        self.request = request

    def build(self) -> str:
        """
        Build the string to sign.

        Returns:
            str: Canonical string

        Raises:
            SigningError: If a required header is missing
        """
        values = {}
        for header_name in REQUIRED_SIGNING_HEADERS:
            value = find_header(self.request.headers, header_name)
            if value is None:
                raise SigningError(
                    f"Required header not found: {header_name}",
                    SigningErrorCodes.MISSING_REQUIRED_HEADER,
                    {"header": header_name, "available_headers": list(self.request.headers.keys())}
                )
            values[header_name] = value

        return build_string_to_sign(
            verb=self.request.verb.value,
            content_md5=values['Content-MD5'],
            content_type=values['Content-Type'],
            date=values['Date'],
            canonicalized_oss_headers=canonicalize_oss_headers(self.request.headers),
            canonicalized_resource=canonicalize_resource(
                self.request.resource,
                self.request.sub_resources
            ),
        )


def canonicalize_resource(resource: str, sub_resources: Optional[Iterable[SubResource]]) -> str:
    """
    Append sub-resources to the resource path.

    Entries are joined with ``&`` in insertion order. When there are no
    sub-resources the resource is returned unchanged, without a ``?``.
    """
    if sub_resources is None:
        return resource

    query_string = '&'.join(encode_sub_resource(entry) for entry in sub_resources)
    if not query_string:
        return resource
    return f"{resource}?{query_string}"


def canonicalize_oss_headers(headers: Mapping[str, str]) -> str:
    """
    Render x-oss-* headers as lowercase ``name:value`` lines.

    Headers keep mapping order. A trailing newline is appended when any
    header matched; otherwise the result is empty.
    """
    lines = [
        f"{normalize_header_name(name)}:{value}"
        for name, value in headers.items()
        if is_oss_header(name)
    ]
    if not lines:
        return ''
    return '\n'.join(lines) + '\n'


def build_string_to_sign(
    verb: str,
    content_md5: str,
    content_type: str,
    date: str,
    canonicalized_oss_headers: str,
    canonicalized_resource: str
) -> str:
    # the headers block carries its own trailing newline
    return (
        f"{verb}\n"
        f"{content_md5}\n"
        f"{content_type}\n"
        f"{date}\n"
        f"{canonicalized_oss_headers}{canonicalized_resource}"
    )


def build_canonical_message(request: OssRequest) -> str:
    """
    Build the string to sign for a request.

    Args:
        request: Request to canonicalize

    Returns:
        str: Canonical string

    Raises:
        SigningError: If a required header is missing
    """
    return CanonicalMessageBuilder(request).build()
