"""
OSS V1 header signature implementation

This module provides the signer for the OSS "sign string" scheme: an
HMAC-SHA1 over the canonical string, keyed with the account secret and
base64-encoded into the ``Authorization: OSS <id>:<signature>`` header.
"""

import base64
import logging

from cryptography.hazmat.primitives import hashes, hmac

from .types import (
    Credentials,
    OssRequest,
    SignatureResult,
    SigningError,
    SigningErrorCodes,
)
from .utils import escape_for_log, PerformanceTimer
from .canonical_message import build_canonical_message

logger = logging.getLogger(__name__)

AUTHORIZATION_SCHEME = "OSS"


class OssSigner:
    """
    OSS request signer

    Signing is a pure function of the request and the credentials, so one
    signer can be shared across threads.
    """

    def __init__(self, credentials: Credentials):
        """
        Initialize the signer with credentials.

        Args:
            credentials: Account credentials

        Raises:
            SigningError: If credentials are not a Credentials instance
        """
        if not isinstance(credentials, Credentials):
            raise SigningError(
                "Credentials must be a Credentials instance",
                SigningErrorCodes.INVALID_CREDENTIALS
            )
        self.credentials = credentials

    def string_to_sign(self, request: OssRequest) -> str:
        """
        Build the canonical string for a request.

        Raises:
            SigningError: If Content-MD5, Content-Type or Date is missing
        """
        if not isinstance(request, OssRequest):
            raise SigningError(
                f"Cannot sign {type(request).__name__}, expected OssRequest",
                SigningErrorCodes.INVALID_REQUEST
            )
        return build_canonical_message(request)

    def sign(self, request: OssRequest) -> str:
        """
        Compute the base64-encoded signature for a request.

        Args:
            request: Fully assembled request

        Returns:
            str: Signature string
        """
        return self.sign_request(request).signature

    def authorization(self, request: OssRequest) -> str:
        """
        Compute the Authorization header value for a request.

        Args:
            request: Fully assembled request

        Returns:
            str: ``OSS <access_key_id>:<signature>``
        """
        return self.sign_request(request).authorization

    def sign_request(self, request: OssRequest) -> SignatureResult:
        """
        Sign a request.

        Args:
            request: Fully assembled request

        Returns:
            SignatureResult: String to sign, signature and header value

        Raises:
            SigningError: If signing preconditions are not met
        """
        timer = PerformanceTimer()

        string_to_sign = self.string_to_sign(request)
        logger.debug(f"String to sign: {escape_for_log(string_to_sign)}")

        signature = self._hmac_sha1(string_to_sign)
        authorization = f"{AUTHORIZATION_SCHEME} {self.credentials.access_key_id}:{signature}"

        logger.debug(f"Signed {request.verb.value} {request.resource} in {timer.elapsed_ms():.2f}ms")

        return SignatureResult(
            string_to_sign=string_to_sign,
            signature=signature,
            authorization=authorization
        )

    def _hmac_sha1(self, message: str) -> str:
        mac = hmac.HMAC(self.credentials.access_key_secret.encode('utf-8'), hashes.SHA1())
        mac.update(message.encode('utf-8'))
        return base64.b64encode(mac.finalize()).decode('ascii')


def create_signer(credentials: Credentials) -> OssSigner:
    """
    Create a new OSS signer.

    Args:
        credentials: Account credentials

    Returns:
        OssSigner: Configured signer instance
    """
    return OssSigner(credentials)


def sign_request(request: OssRequest, credentials: Credentials) -> SignatureResult:
    """
    Sign a request with the given credentials.

    Args:
        request: Request to sign
        credentials: Account credentials

    Returns:
        SignatureResult: Signing result
    """
    return create_signer(credentials).sign_request(request)
