"""
Security utilities for the registry console

Masking helpers that keep tokens, credentials and personal data out of log
lines and API payloads, plus validation of the secret used to encrypt the
stored token.
"""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

# Compact JWS: three base64url segments
_JWT_PATTERN = re.compile(r'\beyJ[A-Za-z0-9_-]*\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*')
_EMAIL_PATTERN = re.compile(r'\b([a-zA-Z])[a-zA-Z0-9._%+-]*@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b')
_SECRET_PAIR_PATTERN = re.compile(
    r'(password|secret|key|token)[\'"\s]*[:=][\'"\s]*[^\s\'"]+', re.IGNORECASE
)

DEFAULT_SENSITIVE_KEYS = [
    'password', 'token', 'secret', 'key', 'credential', 'auth', 'proofid'
]


def mask_token(token: Optional[str]) -> str:
    """Return a short, non-reversible label for a token."""
    if not token:
        return "<none>"
    if len(token) <= 12:
        return "****"
    return f"{token[:6]}****{token[-4:]}"


def sanitize_log_data(data: str, max_length: int = 200) -> str:
    """
    Sanitize data for safe logging.

    Args:
        data: The data to sanitize
        max_length: Maximum length to log

    Returns:
        Sanitized data safe for logging
    """
    if not data:
        return ""

    data = _JWT_PATTERN.sub('eyJ****', data)
    data = _SECRET_PAIR_PATTERN.sub(r'\1=****', data)
    data = _EMAIL_PATTERN.sub(r'\1****@\2', data)

    if len(data) > max_length:
        data = data[:max_length] + "..."

    return data


def mask_sensitive_data(data: dict, sensitive_keys: Optional[list] = None) -> dict:
    """
    Mask sensitive data in dictionaries for safe logging/responses.

    Args:
        data: Dictionary containing potentially sensitive data
        sensitive_keys: List of keys to mask (uses defaults if None)

    Returns:
        Dictionary with sensitive values masked
    """
    if sensitive_keys is None:
        sensitive_keys = DEFAULT_SENSITIVE_KEYS

    masked_data = {}
    for key, value in data.items():
        if any(sensitive in key.lower() for sensitive in sensitive_keys):
            if isinstance(value, str) and len(value) > 8:
                # Show first 4 characters for identification, mask the rest
                masked_data[key] = value[:4] + "****"
            else:
                masked_data[key] = "****"
        elif isinstance(value, dict):
            masked_data[key] = mask_sensitive_data(value, sensitive_keys)
        else:
            masked_data[key] = value

    return masked_data


def shorten_address(address: str) -> str:
    """Display form of a wallet address: 0x1234...abcd"""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


def validate_secret_key(secret_key: Optional[str]) -> None:
    """
    Validate that a secret key meets security requirements.

    Args:
        secret_key: The secret key to validate

    Raises:
        ValueError: If the secret key doesn't meet requirements
    """
    if not secret_key:
        raise ValueError("SECRET_KEY cannot be empty")

    if len(secret_key) < 32:
        raise ValueError("SECRET_KEY must be at least 32 characters long")

    insecure_defaults = ["change-me", "secret", "password", "123456", "admin"]
    if secret_key.lower() in insecure_defaults:
        raise ValueError("SECRET_KEY appears to be an insecure default value")

    # At least 8 different characters
    if len(set(secret_key.lower())) < 8:
        raise ValueError("SECRET_KEY has insufficient entropy (too repetitive)")

    logger.debug("SECRET_KEY validation passed")
