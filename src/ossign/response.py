"""
Response and error parsing for the OSS REST API

Successful responses are wrapped in ``OssResponse`` with XML bodies parsed
into nested dictionaries; error responses are turned into ``ServiceError``
using the fields of the service's ``<Error>`` document.
"""

from typing import Any, Dict, Mapping, Optional
from dataclasses import dataclass
from xml.etree import ElementTree as ET

from .exceptions import ServiceError
from .signing.utils import find_header

REQUEST_ID_HEADER = 'x-oss-request-id'


@dataclass
class OssResponse:
    """
    Response returned by the storage service

    Attributes:
        status_code: HTTP status code
        headers: Response headers
        body: Raw response body
        data: Parsed XML body, or None for non-XML bodies
    """
    status_code: int
    headers: Dict[str, str]
    body: bytes = b""
    data: Optional[Dict[str, Any]] = None

    @property
    def request_id(self) -> Optional[str]:
        return find_header(self.headers, REQUEST_ID_HEADER)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def parse_response(status_code: int, headers: Mapping[str, str], body: bytes) -> OssResponse:
    """
    Wrap a successful HTTP response.

    Args:
        status_code: HTTP status code
        headers: Response headers
        body: Raw response body

    Returns:
        OssResponse: Response with ``data`` populated for XML bodies
    """
    headers = dict(headers)
    data = None
    if _looks_like_xml(headers, body):
        data = parse_xml(body)
    return OssResponse(status_code=status_code, headers=headers, body=body, data=data)


def parse_error(status_code: int, body: bytes, headers: Optional[Mapping[str, str]] = None) -> ServiceError:
    """
    Build a ServiceError from an error response.

    The service answers failures with an ``<Error>`` document holding
    Code, Message, RequestId and HostId.

    Args:
        status_code: HTTP status code
        body: Raw response body
        headers: Response headers

    Returns:
        ServiceError: Error describing the failure
    """
    headers = dict(headers or {})
    fields: Dict[str, Any] = {}
    if body and _looks_like_xml(headers, body):
        parsed = parse_xml(body)
        if parsed and isinstance(parsed.get('Error'), dict):
            fields = parsed['Error']

    code = fields.get('Code') or 'HTTP_ERROR'
    message = fields.get('Message') or f"HTTP {status_code}"
    request_id = fields.get('RequestId') or find_header(headers, REQUEST_ID_HEADER)

    return ServiceError(
        f"Service request failed: {message}",
        error_code=code,
        http_status=status_code,
        request_id=request_id,
        host_id=fields.get('HostId'),
        body=body,
        details={k: v for k, v in fields.items() if k not in ('Code', 'Message')}
    )


def parse_xml(body: bytes) -> Optional[Dict[str, Any]]:
    """
    Parse an XML document into nested dictionaries.

    Repeated child elements become lists. Returns None for malformed XML.
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError:
        return None
    return {_local_name(root.tag): _element_to_value(root)}


def _element_to_value(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return (element.text or '').strip()

    result: Dict[str, Any] = {}
    for child in children:
        name = _local_name(child.tag)
        value = _element_to_value(child)
        if name in result:
            if not isinstance(result[name], list):
                result[name] = [result[name]]
            result[name].append(value)
        else:
            result[name] = value
    return result


def _local_name(tag: str) -> str:
    # strip "{namespace}" prefixes
    return tag.rsplit('}', 1)[-1]


def _looks_like_xml(headers: Mapping[str, str], body: bytes) -> bool:
    content_type = find_header(headers, 'Content-Type') or ''
    if 'xml' in content_type.lower():
        return True
    return body.lstrip().startswith(b'<')

