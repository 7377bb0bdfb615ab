"""
Configuration management for the ossign SDK

Loads credentials, endpoint, client and logging settings from JSON strings,
JSON files or environment variables. Credentials are loaded once and passed
explicitly to the signer and client.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..exceptions import ConfigurationError, ValidationError
from ..http_client import ClientConfig, DEFAULT_TIMEOUT, DEFAULT_UPLOAD_TIMEOUT
from ..signing.types import Credentials

ENV_ACCESS_KEY_ID = "OSS_ACCESS_KEY_ID"
ENV_ACCESS_KEY_SECRET = "OSS_ACCESS_KEY_SECRET"
ENV_SECURITY_TOKEN = "OSS_SECURITY_TOKEN"
ENV_ENDPOINT = "OSS_ENDPOINT"
ENV_TIMEOUT = "OSS_TIMEOUT"
ENV_LOG_LEVEL = "OSS_LOG_LEVEL"

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOGGER_NAME = "ossign"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "WARNING"
    format: str = DEFAULT_LOG_FORMAT

    def __post_init__(self):
        self.level = str(self.level).upper()
        if not isinstance(logging.getLevelName(self.level), int):
            raise ConfigurationError(f"Unknown log level: {self.level}", "INVALID_FORMAT")


@dataclass
class OssConfig:
    """Complete SDK configuration"""
    credentials: Credentials
    client: ClientConfig = field(default_factory=ClientConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def endpoint(self) -> Optional[str]:
        return self.client.endpoint


class OssConfigManager:
    """Configuration loader for the ossign SDK"""

    def __init__(self, config: OssConfig):
        self.config = config

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'OssConfigManager':
        """Load configuration from a parsed dictionary"""
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration must be an object", "INVALID_FORMAT")
        try:
            return cls(cls._parse_config_dict(data))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}", "INVALID_FORMAT")
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration format: {e}", "INVALID_FORMAT")

    @classmethod
    def from_json(cls, json_string: str) -> 'OssConfigManager':
        """Load configuration from JSON string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR")
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a JSON object", "INVALID_FORMAT")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'OssConfigManager':
        """Load configuration from file"""
        try:
            path = Path(file_path)
            with open(path, 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file: {e}", "FILE_ERROR")
        return cls.from_json(json_string)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'OssConfigManager':
        """Load configuration from OSS_* environment variables"""
        env = os.environ if environ is None else environ

        data: Dict[str, Any] = {
            'credentials': {
                'access_key_id': env.get(ENV_ACCESS_KEY_ID),
                'access_key_secret': env.get(ENV_ACCESS_KEY_SECRET),
                'security_token': env.get(ENV_SECURITY_TOKEN) or None,
            },
            'client': {},
            'logging': {},
        }
        if env.get(ENV_ENDPOINT):
            data['endpoint'] = env[ENV_ENDPOINT]
        if env.get(ENV_TIMEOUT):
            data['client']['timeout'] = env[ENV_TIMEOUT]
        if env.get(ENV_LOG_LEVEL):
            data['logging']['level'] = env[ENV_LOG_LEVEL]

        return cls.from_dict(data)

    def get_config(self) -> OssConfig:
        """Get the full configuration"""
        return self.config

    def get_credentials(self) -> Credentials:
        return self.config.credentials

    def get_client_config(self) -> ClientConfig:
        return self.config.client

    def get_logging_config(self) -> LoggingConfig:
        return self.config.logging

    @staticmethod
    def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
        section = data.get(name)
        if section is None:
            return {}
        if not isinstance(section, Mapping):
            raise ConfigurationError(
                f"Configuration section '{name}' must be an object, got {type(section).__name__}",
                "INVALID_FORMAT"
            )
        return section

    @classmethod
    def _parse_config_dict(cls, data: Mapping[str, Any]) -> OssConfig:
        """Parse configuration dictionary into structured objects"""
        creds_data = cls._section(data, 'credentials')
        client_data = cls._section(data, 'client')
        logging_data = cls._section(data, 'logging')

        if not creds_data.get('access_key_id') or not creds_data.get('access_key_secret'):
            raise ConfigurationError(
                "Configuration is missing access_key_id or access_key_secret",
                "MISSING_CREDENTIALS"
            )

        credentials = Credentials(
            access_key_id=creds_data['access_key_id'],
            access_key_secret=creds_data['access_key_secret'],
            security_token=creds_data.get('security_token')
        )

        verify_ssl = client_data.get('verify_ssl', True)
        if not isinstance(verify_ssl, bool):
            raise ConfigurationError(
                f"verify_ssl must be true or false, got {verify_ssl!r}",
                "INVALID_FORMAT"
            )

        client = ClientConfig(
            endpoint=data.get('endpoint') or client_data.get('endpoint'),
            timeout=float(client_data.get('timeout', DEFAULT_TIMEOUT)),
            upload_timeout=float(client_data.get('upload_timeout', DEFAULT_UPLOAD_TIMEOUT)),
            verify_ssl=verify_ssl,
        )

        logging_config = LoggingConfig(**logging_data)

        return OssConfig(credentials=credentials, client=client, logging=logging_config)


def configure_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Attach a stream handler to the ``ossign`` logger hierarchy.

    Calling it again replaces the handler installed by the previous call.
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.level)

    for handler in list(logger.handlers):
        if getattr(handler, '_ossign_handler', False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(config.format))
    handler._ossign_handler = True
    logger.addHandler(handler)
    return logger


def load_config_from_json(json_string: str) -> OssConfigManager:
    """Load configuration from JSON string"""
    return OssConfigManager.from_json(json_string)


def load_config_from_file(file_path: Union[str, Path]) -> OssConfigManager:
    """Load configuration from file"""
    return OssConfigManager.from_file(file_path)


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> OssConfigManager:
    """Load configuration from environment variables"""
    return OssConfigManager.from_env(environ)
