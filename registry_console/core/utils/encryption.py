"""
Encryption utilities for the persisted authentication token.
"""

import base64
import logging
import os
import secrets
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from registry_console.core.security import validate_secret_key

logger = logging.getLogger(__name__)

SALT_LENGTH = 16
KDF_ITERATIONS = 480000


class TokenDecryptionError(Exception):
    """Raised when a stored value cannot be decrypted"""


def get_or_create_salt(salt_file: Path) -> bytes:
    """Get existing salt or create a new secure salt for key derivation.

    Args:
        salt_file: Location of the salt file

    Returns:
        16-byte salt for PBKDF2 key derivation
    """
    try:
        salt = salt_file.read_bytes()
        if len(salt) == SALT_LENGTH:
            return salt
        logger.warning("Invalid salt file found, regenerating")
    except FileNotFoundError:
        pass

    salt = secrets.token_bytes(SALT_LENGTH)
    salt_file.parent.mkdir(parents=True, exist_ok=True)

    try:
        # Exclusive creation with restrictive permissions (0o600)
        fd = os.open(salt_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        try:
            os.write(fd, salt)
        finally:
            os.close(fd)
        logger.info("Created new encryption salt file")
        return salt
    except FileExistsError:
        existing = salt_file.read_bytes()
        if len(existing) == SALT_LENGTH:
            logger.debug("Using salt file created by another process")
            return existing
        # Corrupted file: replace it
        salt_file.write_bytes(salt)
        os.chmod(salt_file, 0o600)
        return salt


class TokenCipher:
    """Fernet cipher keyed from the application's secret key."""

    def __init__(self, secret_key: Optional[str], salt: bytes):
        validate_secret_key(secret_key)
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=KDF_ITERATIONS,
        )
        key = base64.urlsafe_b64encode(kdf.derive(secret_key.encode("utf-8")))
        self._fernet = Fernet(key)

    def encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def decrypt(self, value: str) -> str:
        try:
            return self._fernet.decrypt(value.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as e:
            raise TokenDecryptionError("Stored value could not be decrypted") from e
