"""Token decoding.

Tokens are compact JWTs issued by the registry service. The console only
reads their claims for display and routing; it never verifies the
signature. Every authorization decision is made again by the service on
each call.
"""

from typing import Any

from jose import jwt
from jose.exceptions import JOSEError
from pydantic import ValidationError as PydanticValidationError

from registry_console.core.exceptions import DecodeError
from registry_console.core.schemas.auth import TokenClaims


def decode(token: Any) -> TokenClaims:
    """Extract the claim set embedded in ``token``.

    Args:
        token: Compact JWT string.

    Returns:
        TokenClaims with a well-defined expiry.

    Raises:
        DecodeError: If the token is not a string, is structurally malformed,
            or its payload lacks a numeric ``exp`` claim.
    """
    if not isinstance(token, str) or not token.strip():
        raise DecodeError("Token must be a non-empty string")

    try:
        claims = jwt.get_unverified_claims(token)
    except JOSEError as e:
        raise DecodeError(f"Malformed token: {e}") from e

    if not isinstance(claims, dict):
        raise DecodeError("Token payload is not a claim set")
    if "exp" not in claims:
        raise DecodeError("Token has no expiry claim")

    try:
        decoded = TokenClaims(
            exp=claims["exp"],
            iat=claims.get("iat"),
            user=claims.get("user"),
            raw=claims,
        )
    except PydanticValidationError as e:
        raise DecodeError(f"Invalid token claims: {e.error_count()} error(s)") from e

    # exp must map to a representable instant (rejects NaN, inf, out of range)
    try:
        decoded.expires_at
    except (OverflowError, OSError, ValueError) as e:
        raise DecodeError("Token expiry is out of range") from e

    return decoded
