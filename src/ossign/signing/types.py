"""
Type definitions for request signing functionality

This module provides the request value, credentials and sub-resource types
used by the OSS header signing scheme.
"""

from typing import Dict, Mapping, Optional, Tuple, Union, Any
from dataclasses import dataclass, field
from enum import Enum

from ..exceptions import OssSDKError, RequestConstructionError, ValidationError


class HttpMethod(str, Enum):
    """HTTP methods supported by the storage service"""
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class KeyOnly:
    """
    Sub-resource that carries no value (e.g. ``?acl``)

    Attributes:
        key: Sub-resource name
    """
    key: str

    def render(self) -> str:
        return self.key


@dataclass(frozen=True)
class KeyValue:
    """
    Sub-resource with a value (e.g. ``?uploadId=123``)

    Attributes:
        key: Sub-resource name
        value: Sub-resource value, used verbatim
    """
    key: str
    value: str

    def render(self) -> str:
        return f"{self.key}={self.value}"


SubResource = Union[KeyOnly, KeyValue]


def make_sub_resource(key: str, value: Optional[Any] = None) -> SubResource:
    """
    Create a sub-resource entry from a key and an optional value.

    Args:
        key: Sub-resource name
        value: Value, or None for a bare key

    Returns:
        SubResource: KeyOnly when value is None, KeyValue otherwise
    """
    if not isinstance(key, str) or not key:
        raise RequestConstructionError(
            "Sub-resource key must be a non-empty string",
            details={"key": key}
        )
    if value is None:
        return KeyOnly(key)
    return KeyValue(key, str(value))


def normalize_sub_resources(
    sub_resources: Union[None, Mapping[str, Optional[Any]], Tuple[SubResource, ...], list]
) -> Tuple[SubResource, ...]:
    """
    Normalize caller-supplied sub-resources into an ordered tuple.

    Accepts a mapping of key to value-or-None, or an iterable of
    KeyOnly/KeyValue entries. Insertion order is kept; a repeated key keeps
    its first position and takes the last value.
    """
    if sub_resources is None:
        return ()

    if isinstance(sub_resources, Mapping):
        entries = [make_sub_resource(k, v) for k, v in sub_resources.items()]
    else:
        entries = []
        for entry in sub_resources:
            if not isinstance(entry, (KeyOnly, KeyValue)):
                raise RequestConstructionError(
                    f"Invalid sub-resource entry: {entry!r}",
                    details={"entry": repr(entry)}
                )
            entries.append(entry)

    merged: Dict[str, SubResource] = {}
    for entry in entries:
        merged[entry.key] = entry
    return tuple(merged.values())


@dataclass(frozen=True)
class OssRequest:
    """
    Request to be signed and sent to the storage service

    Attributes:
        host: Host name the request is sent to
        path: Literal URL path
        resource: Canonical resource path used for signing
        verb: HTTP method
        query_params: URL-only query parameters, never signed
        sub_resources: Signed sub-resources, in insertion order
        body: Request body bytes
        headers: Request headers, in insertion order
    """
    host: str
    path: str
    resource: str
    verb: HttpMethod = HttpMethod.GET
    query_params: Dict[str, str] = field(default_factory=dict)
    sub_resources: Tuple[SubResource, ...] = ()
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate and normalize request fields"""
        for name in ("host", "path", "resource"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise RequestConstructionError(
                    f"Request {name} must be a non-empty string",
                    "MISSING_REQUIRED_FIELD",
                    {"field": name}
                )

        try:
            verb = HttpMethod(str(getattr(self.verb, "value", self.verb)).upper())
        except ValueError:
            raise RequestConstructionError(
                f"Unsupported HTTP method: {self.verb}",
                "INVALID_METHOD",
                {"verb": str(self.verb)}
            )
        object.__setattr__(self, "verb", verb)

        body = self.body
        if body is None:
            body = b""
        elif isinstance(body, str):
            body = body.encode("utf-8")
        elif not isinstance(body, (bytes, bytearray)):
            raise RequestConstructionError(
                f"Body must be bytes or str, got {type(body).__name__}",
                details={"body_type": type(body).__name__}
            )
        object.__setattr__(self, "body", bytes(body))

        if not isinstance(self.headers, Mapping):
            raise RequestConstructionError("Headers must be a mapping")
        if not isinstance(self.query_params, Mapping):
            raise RequestConstructionError("Query params must be a mapping")

        object.__setattr__(self, "headers", {str(k): str(v) for k, v in self.headers.items()})
        object.__setattr__(self, "query_params", {str(k): str(v) for k, v in self.query_params.items()})
        object.__setattr__(self, "sub_resources", normalize_sub_resources(self.sub_resources))

    def header(self, name: str) -> Optional[str]:
        """Look up a header value case-insensitively."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass(frozen=True)
class Credentials:
    """
    Account credentials used for signing

    Attributes:
        access_key_id: Access key identifier sent in the Authorization header
        access_key_secret: Secret used as the HMAC key
        security_token: Optional STS token for temporary credentials
    """
    access_key_id: str
    access_key_secret: str = field(repr=False)
    security_token: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        """Validate credentials"""
        if not isinstance(self.access_key_id, str) or not self.access_key_id.strip():
            raise ValidationError("Access key ID cannot be empty", "INVALID_CREDENTIALS")

        if not isinstance(self.access_key_secret, str) or not self.access_key_secret.strip():
            raise ValidationError("Access key secret cannot be empty", "INVALID_CREDENTIALS")


@dataclass
class SignatureResult:
    """
    Generated signature for a request

    Attributes:
        string_to_sign: Canonical string that was signed
        signature: Base64-encoded HMAC-SHA1 signature
        authorization: Complete Authorization header value
    """
    string_to_sign: str
    signature: str
    authorization: str


class SigningError(OssSDKError):
    """
    Error class for signing operations

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Optional additional error details
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, code, details)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.code}, details: {self.details})"
        return f"{self.message} (code: {self.code})"

    def __repr__(self) -> str:
        return f"SigningError(message='{self.message}', code='{self.code}', details={self.details})"


class SigningErrorCodes:
    """Standard error codes for signing operations"""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_REQUEST = "INVALID_REQUEST"
    MISSING_REQUIRED_HEADER = "MISSING_REQUIRED_HEADER"
    SIGNING_FAILED = "SIGNING_FAILED"


RequestBody = Union[str, bytes, None]
