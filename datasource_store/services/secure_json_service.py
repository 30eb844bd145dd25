"""
Secure JSON Service - Encrypts the secure_json_data sidecar of a data source.
Callers encrypt values before handing them to the store; the store only
persists the resulting tokens.
"""

import logging
from typing import Dict, Optional

from cryptography.fernet import Fernet, InvalidToken

from ..config import settings

logger = logging.getLogger(__name__)


class SecureJsonService:
    """Service for encrypting and decrypting secure_json_data values"""

    def __init__(self, key: Optional[str] = None):
        self._key = self._get_encryption_key(key)
        self._fernet = Fernet(self._key)

    def _get_encryption_key(self, key: Optional[str]) -> bytes:
        """Get encryption key from the argument, settings, or generate one"""
        key_str = key or settings.SECURE_JSON_KEY
        if key_str:
            return key_str.encode('utf-8')

        # Development only; tokens do not survive a restart
        logger.warning("SECURE_JSON_KEY not set, using a generated key")
        return Fernet.generate_key()

    def encrypt(self, values: Dict[str, str]) -> Dict[str, str]:
        """Encrypt each value, keeping the keys readable"""
        return {
            key: self._fernet.encrypt(value.encode('utf-8')).decode('utf-8')
            for key, value in (values or {}).items()
        }

    def decrypt(self, encrypted_values: Dict[str, str]) -> Dict[str, str]:
        """Decrypt each token back to plaintext"""
        decrypted = {}
        for key, token in (encrypted_values or {}).items():
            try:
                decrypted[key] = self._fernet.decrypt(token.encode('utf-8')).decode('utf-8')
            except InvalidToken:
                logger.error(f"Failed to decrypt secure json field '{key}'")
                raise
        return decrypted
