"""
HTTP client for the OSS REST API

This module dispatches signed requests over a ``requests`` session and maps
the outcome to an ``OssResponse``, a ``ServiceError`` (non-2xx) or a
``TransportError`` (no response at all). Requests are never retried here.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import quote

import requests

from .exceptions import ServiceError, TransportError, ValidationError
from .request import build_signed, query_url, PartialRequest
from .response import OssResponse, parse_error, parse_response
from .signing.types import Credentials, HttpMethod, OssRequest
from .version import __version__

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
# large uploads/downloads through POST/PUT
DEFAULT_UPLOAD_TIMEOUT = 200.0
BODY_METHODS = (HttpMethod.POST, HttpMethod.PUT)


@dataclass
class ClientConfig:
    """Configuration for the OSS HTTP client."""
    endpoint: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    upload_timeout: float = DEFAULT_UPLOAD_TIMEOUT
    verify_ssl: bool = True
    user_agent: str = f"ossign-python-sdk/{__version__}"

    def __post_init__(self):
        """Validate client configuration."""
        if self.timeout <= 0:
            raise ValidationError("Timeout must be positive")

        if self.upload_timeout <= 0:
            raise ValidationError("Upload timeout must be positive")

        if self.endpoint is not None:
            endpoint = self.endpoint.strip()
            for scheme in ('https://', 'http://'):
                if endpoint.startswith(scheme):
                    endpoint = endpoint[len(scheme):]
            endpoint = endpoint.rstrip('/')
            if not endpoint:
                raise ValidationError(f"Invalid endpoint: {self.endpoint}")
            self.endpoint = endpoint


class OssHttpClient:
    """
    HTTP client for the OSS REST API.

    Builds, signs and sends requests. GET, HEAD and DELETE go out without a
    body; POST and PUT carry the body and use the extended upload timeout.
    """

    def __init__(
        self,
        credentials: Credentials,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the HTTP client.

        Args:
            credentials: Account credentials used to sign every request
            config: Client configuration settings
            session: Optional existing requests session
        """
        if not isinstance(credentials, Credentials):
            raise ValidationError("credentials must be a Credentials instance")

        self.credentials = credentials
        self.config = config or ClientConfig()
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': self.config.user_agent})

        logger.info(f"Initialized OSS HTTP client for access key: {credentials.access_key_id}")

    def __enter__(self) -> 'OssHttpClient':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def request(self, partial: PartialRequest) -> OssResponse:
        """
        Build, sign and send a request.

        Args:
            partial: Partial request with at least host, path and resource

        Returns:
            OssResponse: Parsed 2xx response

        Raises:
            RequestConstructionError: If the partial request is incomplete
            ServiceError: On non-2xx responses
            TransportError: On network or connection errors
        """
        signed = build_signed(partial, self.credentials)
        return self.send(signed)

    def send(self, request: OssRequest) -> OssResponse:
        """
        Send an already signed request.

        Args:
            request: Signed request

        Returns:
            OssResponse: Parsed 2xx response
        """
        url = query_url(request)
        kwargs: Dict[str, Any] = {
            'headers': request.headers,
            'verify': self.config.verify_ssl,
        }
        if request.verb in BODY_METHODS:
            kwargs['data'] = request.body
            kwargs['timeout'] = self.config.upload_timeout
        else:
            kwargs['timeout'] = self.config.timeout

        try:
            logger.debug(f"Making {request.verb.value} request to {url}")
            response = self.session.request(request.verb.value, url, **kwargs)
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timeout for {request.verb.value} {url}: {e}")
            raise TransportError(
                f"Request timeout after {kwargs['timeout']} seconds",
                "TIMEOUT",
                reason=e
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error for {request.verb.value} {url}: {e}")
            raise TransportError(f"Connection error: {e}", "CONNECTION_ERROR", reason=e)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed for {request.verb.value} {url}: {e}")
            raise TransportError(f"Request failed: {e}", reason=e)

        headers = dict(response.headers)
        if not 200 <= response.status_code < 300:
            logger.error(f"Request error: {response.status_code} for {request.verb.value} {url}")
            raise parse_error(response.status_code, response.content, headers)

        return parse_response(response.status_code, headers, response.content)

    def put_object(
        self,
        bucket: str,
        key: str,
        data: Union[str, bytes],
        headers: Optional[Mapping[str, str]] = None
    ) -> OssResponse:
        """Upload an object."""
        return self.request(self._object_request(HttpMethod.PUT, bucket, key, body=data, headers=headers))

    def get_object(
        self,
        bucket: str,
        key: str,
        headers: Optional[Mapping[str, str]] = None
    ) -> OssResponse:
        """Download an object; the content is in ``response.body``."""
        return self.request(self._object_request(HttpMethod.GET, bucket, key, headers=headers))

    def head_object(self, bucket: str, key: str) -> OssResponse:
        """Fetch object metadata."""
        return self.request(self._object_request(HttpMethod.HEAD, bucket, key))

    def delete_object(self, bucket: str, key: str) -> OssResponse:
        """Delete an object."""
        return self.request(self._object_request(HttpMethod.DELETE, bucket, key))

    def get_object_acl(self, bucket: str, key: str) -> OssResponse:
        """Fetch an object's access control list."""
        return self.request(self._object_request(HttpMethod.GET, bucket, key, sub_resources={'acl': None}))

    def initiate_multipart_upload(self, bucket: str, key: str) -> OssResponse:
        """Start a multipart upload; the upload id is in ``response.data``."""
        return self.request(self._object_request(HttpMethod.POST, bucket, key, sub_resources={'uploads': None}))

    def get_bucket_location(self, bucket: str) -> OssResponse:
        """Fetch the region a bucket lives in."""
        return self.request({
            'verb': HttpMethod.GET,
            'host': self._bucket_host(bucket),
            'path': '/',
            'resource': f"/{bucket}/",
            'sub_resources': {'location': None},
        })

    def close(self):
        """Close the HTTP session."""
        if hasattr(self, 'session'):
            self.session.close()
            logger.debug("HTTP session closed")

    def _object_request(
        self,
        verb: HttpMethod,
        bucket: str,
        key: str,
        body: Union[str, bytes] = b"",
        headers: Optional[Mapping[str, str]] = None,
        sub_resources: Optional[Mapping[str, Optional[str]]] = None
    ) -> Dict[str, Any]:
        if not key:
            raise ValidationError("Object key cannot be empty")

        return {
            'verb': verb,
            'host': self._bucket_host(bucket),
            'path': f"/{quote(key)}",
            'resource': f"/{bucket}/{key}",
            'body': body,
            'headers': dict(headers or {}),
            'sub_resources': dict(sub_resources or {}),
        }

    def _bucket_host(self, bucket: str) -> str:
        if not bucket:
            raise ValidationError("Bucket name cannot be empty")
        if not self.config.endpoint:
            raise ValidationError("An endpoint is required for bucket operations")
        return f"{bucket}.{self.config.endpoint}"


def create_client(
    access_key_id: str,
    access_key_secret: str,
    endpoint: Optional[str] = None,
    security_token: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
    upload_timeout: float = DEFAULT_UPLOAD_TIMEOUT,
    verify_ssl: bool = True
) -> OssHttpClient:
    """
    Create an OSS HTTP client with default configuration.

    Args:
        access_key_id: Access key identifier
        access_key_secret: Access key secret
        endpoint: Region endpoint, e.g. ``oss-cn-hangzhou.aliyuncs.com``
        security_token: Optional STS token
        timeout: Timeout for GET, HEAD and DELETE requests in seconds
        upload_timeout: Timeout for POST and PUT requests in seconds
        verify_ssl: Whether to verify SSL certificates

    Returns:
        OssHttpClient: Configured HTTP client
    """
    credentials = Credentials(access_key_id, access_key_secret, security_token)
    config = ClientConfig(
        endpoint=endpoint,
        timeout=timeout,
        upload_timeout=upload_timeout,
        verify_ssl=verify_ssl
    )
    return OssHttpClient(credentials, config)
