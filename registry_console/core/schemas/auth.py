"""Authentication schemas"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Credentials(BaseModel):
    """Login and account registration payload"""

    email: str
    password: str


class LoginResponse(BaseModel):
    """Response of POST /auth/login"""

    token: str


class RegisterResponse(BaseModel):
    """Response of POST /auth/register"""

    msg: str = ""


class TokenClaims(BaseModel):
    """Claim set extracted from an authentication token.

    Only ``exp`` is required. ``user`` carries the identity payload the
    registry service embeds (id, email, ...).
    """

    model_config = ConfigDict(frozen=True)

    exp: float
    iat: Optional[float] = None
    user: Dict[str, Any] = Field(default_factory=dict)
    raw: Dict[str, Any] = Field(default_factory=dict, repr=False)

    @field_validator("exp", mode="before")
    @classmethod
    def validate_exp(cls, v: Any) -> Any:
        """Reject booleans and strings; pydantic would coerce them."""
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("exp must be a numeric timestamp")
        return v

    @field_validator("user", mode="before")
    @classmethod
    def validate_user(cls, v: Any) -> Any:
        if v is None:
            return {}
        return v

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, tz=timezone.utc)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True when the expiry instant is at or before ``now``."""
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now

    @property
    def email(self) -> Optional[str]:
        value = self.user.get("email")
        return value if isinstance(value, str) else None

    @property
    def user_id(self) -> Optional[str]:
        value = self.user.get("id")
        return str(value) if value is not None else None
