"""
Configuration management for the ossign SDK

This module provides configuration loading (JSON, files, environment),
logging setup and OS keyring credential storage.
"""

from .oss_config import (
    OssConfig,
    OssConfigManager,
    LoggingConfig,
    configure_logging,
    load_config_from_json,
    load_config_from_file,
    load_config_from_env,
)
from .credential_store import (
    KeyringCredentialStore,
    DEFAULT_PROFILE,
)

__all__ = [
    'OssConfig',
    'OssConfigManager',
    'LoggingConfig',
    'configure_logging',
    'load_config_from_json',
    'load_config_from_file',
    'load_config_from_env',
    'KeyringCredentialStore',
    'DEFAULT_PROFILE',
]
