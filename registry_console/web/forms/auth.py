"""Login and account-registration forms"""

import logging
from typing import Any, Dict, Optional

from registry_console.api.client import LOGIN_FAILED, REGISTER_FAILED, RegistryApiClient
from registry_console.core.exceptions import ValidationError
from registry_console.core.schemas.auth import Credentials
from registry_console.core.session import SessionManager, SessionState
from registry_console.web.forms.base import MessageKind, RegistryForm
from registry_console.web.routing import View

logger = logging.getLogger(__name__)

CREDENTIALS_REQUIRED_MESSAGE = "Email and password are required."


class _CredentialsForm(RegistryForm):
    fields = ("email", "password")
    secret_fields = ("password",)

    def __init__(self, client: RegistryApiClient):
        super().__init__(client)
        self.next_view: Optional[View] = None

    def validate(self) -> Credentials:
        if self.missing_fields():
            raise ValidationError(CREDENTIALS_REQUIRED_MESSAGE)
        return Credentials(email=self.values["email"].strip(), password=self.values["password"])

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["next_view"] = self.next_view.value if self.next_view else None
        return data


class LoginForm(_CredentialsForm):
    """Exchanges credentials for a token and hands it to the session.

    A token the session refuses (undecodable or already expired) leaves the
    console logged out without a message.
    """

    name = "login"
    fallback_message = LOGIN_FAILED

    def __init__(self, client: RegistryApiClient, session: SessionManager):
        super().__init__(client)
        self._session = session

    async def perform(self, request: Credentials) -> str:
        return await self._client.login(request.email, request.password)

    def succeed(self, token: str) -> None:
        self.reset()
        if self._session.set_token(token) is SessionState.LOGGED_IN:
            self.next_view = View.DASHBOARD
        else:
            logger.warning("Login returned a token the session rejected")


class RegisterAccountForm(_CredentialsForm):
    name = "register"
    fallback_message = REGISTER_FAILED

    async def perform(self, request: Credentials) -> str:
        return await self._client.register(request.email, request.password)

    def succeed(self, msg: str) -> None:
        self.reset()
        self._show(f"{msg} Redirecting to login...".strip(), MessageKind.SUCCESS)
        self.next_view = View.LOGIN
