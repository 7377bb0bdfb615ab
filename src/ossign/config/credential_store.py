"""
OS keyring storage for account credentials

Stores the access key secret (and optional STS token) in the operating
system keychain, indexed by access key ID and a profile name.
"""

import json
import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ..exceptions import CredentialStorageError, ValidationError
from ..signing.types import Credentials

logger = logging.getLogger(__name__)

STORAGE_SERVICE_NAME = "ossign"
DEFAULT_PROFILE = "default"


class KeyringCredentialStore:
    """
    Credential storage backed by the OS keyring
    """

    def __init__(self, service_name: str = STORAGE_SERVICE_NAME):
        """
        Initialize keyring credential storage

        Args:
            service_name: Keyring service name under which entries are kept
        """
        self.service_name = service_name

    def _get_identifier(self, profile: str) -> str:
        return f"{self.service_name}:{profile}"

    def store(self, credentials: Credentials, profile: str = DEFAULT_PROFILE) -> None:
        """
        Store credentials under a profile name.

        Args:
            credentials: Credentials to store
            profile: Profile name

        Raises:
            CredentialStorageError: If the keyring rejects the entry
        """
        payload = json.dumps({
            'access_key_id': credentials.access_key_id,
            'access_key_secret': credentials.access_key_secret,
            'security_token': credentials.security_token,
        })
        try:
            keyring.set_password(self.service_name, self._get_identifier(profile), payload)
        except KeyringError as e:
            raise CredentialStorageError(
                f"Keyring storage failed: {e}",
                "KEYRING_STORAGE_FAILED"
            )
        logger.info(f"Stored credentials for profile '{profile}' ({credentials.access_key_id})")

    def load(self, profile: str = DEFAULT_PROFILE) -> Optional[Credentials]:
        """
        Load credentials for a profile.

        Args:
            profile: Profile name

        Returns:
            Optional[Credentials]: Stored credentials, or None if absent

        Raises:
            CredentialStorageError: If the keyring fails or the entry is corrupt
        """
        try:
            payload = keyring.get_password(self.service_name, self._get_identifier(profile))
        except KeyringError as e:
            raise CredentialStorageError(
                f"Keyring retrieval failed: {e}",
                "KEYRING_RETRIEVAL_FAILED"
            )

        if payload is None:
            return None

        try:
            data = json.loads(payload)
            return Credentials(
                access_key_id=data['access_key_id'],
                access_key_secret=data['access_key_secret'],
                security_token=data.get('security_token')
            )
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            raise CredentialStorageError(
                f"Stored credentials for profile '{profile}' are corrupt: {e}",
                "KEYRING_ENTRY_CORRUPT"
            )

    def delete(self, profile: str = DEFAULT_PROFILE) -> bool:
        """
        Delete credentials for a profile.

        Returns:
            bool: True if an entry was deleted, False if none existed
        """
        try:
            keyring.delete_password(self.service_name, self._get_identifier(profile))
        except PasswordDeleteError:
            return False
        except KeyringError as e:
            raise CredentialStorageError(
                f"Keyring deletion failed: {e}",
                "KEYRING_DELETE_FAILED"
            )
        logger.info(f"Deleted credentials for profile '{profile}'")
        return True
