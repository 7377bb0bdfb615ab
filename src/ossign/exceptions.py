"""
Exception classes for the ossign SDK
"""

from typing import Optional, Dict, Any


class OssSDKError(Exception):
    """Base exception for all ossign SDK errors"""
    
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ValidationError(OssSDKError):
    """Exception raised for validation failures"""
    pass


class RequestConstructionError(ValidationError):
    """Exception raised when a request cannot be built from the supplied fields"""
    
    def __init__(self, message: str, error_code: str = "INVALID_REQUEST", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ConfigurationError(OssSDKError):
    """Exception raised for configuration and credential loading errors"""
    pass


class CredentialStorageError(OssSDKError):
    """Exception raised for OS keyring credential storage errors"""
    pass


class TransportError(OssSDKError):
    """Exception raised when the request never produced an HTTP response"""
    
    def __init__(self, message: str, error_code: str = "TRANSPORT_ERROR",
                 reason: Optional[BaseException] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.reason = reason


class ServiceError(OssSDKError):
    """Exception raised for non-2xx responses from the storage service"""
    
    def __init__(self, message: str, error_code: str = "SERVICE_ERROR",
                 http_status: int = 0, request_id: Optional[str] = None,
                 host_id: Optional[str] = None, body: bytes = b"",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status
        self.request_id = request_id
        self.host_id = host_id
        self.body = body
