"""
Registry API client.

Typed async client for the registry service endpoints the console depends
on. Every failure (transport error, error status, unexpected payload shape)
surfaces as a RemoteError whose ``message`` is ready to show: the server's
structured message field when present, otherwise the per-action fallback.
"""

import logging
from typing import Any, Callable, List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from registry_console.core.exceptions import RemoteError
from registry_console.core.schemas.auth import Credentials, LoginResponse, RegisterResponse
from registry_console.core.schemas.registry import (
    LandRecord,
    LandRegistration,
    MessageResponse,
    Owner,
    OwnerRegistration,
    OwnershipTransfer,
    Property,
)
from registry_console.core.security import mask_sensitive_data, sanitize_log_data

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
TokenProvider = Callable[[], Optional[str]]

# Per-action fallback messages
LOGIN_FAILED = "Failed to login. Please try again."
REGISTER_FAILED = "Failed to register. Please try again."
FETCH_OWNERS_FAILED = "Failed to fetch owners."
FETCH_LANDS_FAILED = "Failed to fetch lands."
REGISTER_OWNER_FAILED = "Failed to register owner."
REGISTER_LAND_FAILED = "Failed to register land."
TRANSFER_FAILED = "Failed to transfer ownership."
FETCH_RECORD_FAILED = "Failed to fetch record."

class RegistryApiClient:
    """Client of the registry service.

    Args:
        base_url: API origin, e.g. ``http://localhost:5001/api``.
        token_provider: Callable returning the current session token; when it
            returns a token the client sends it as a bearer credential.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        *,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=self.base_url + "/",
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "RegistryApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict:
        token = self._token_provider() if self._token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        fallback: str,
        json: Optional[dict] = None,
        message_field: str = "message",
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            RemoteError: On transport failure, error status or non-JSON body.
        """
        try:
            response = await self._client.request(
                method, path.lstrip("/"), json=json, headers=self._headers()
            )
        except httpx.HTTPError as e:
            logger.warning(
                f"{method} /{path.lstrip('/')} failed: {type(e).__name__}: {e}"
                f"{_describe_body(json)}"
            )
            raise RemoteError(fallback) from e

        if response.is_error:
            server_message = _extract_message(response, message_field)
            logger.warning(
                f"{method} /{path.lstrip('/')} returned {response.status_code}: "
                f"{sanitize_log_data(server_message or '')}{_describe_body(json)}"
            )
            raise RemoteError(
                server_message or fallback,
                status_code=response.status_code,
                server_message=server_message,
            )

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"{method} /{path.lstrip('/')} returned a non-JSON body")
            raise RemoteError(fallback, status_code=response.status_code) from e

    def _parse(self, model: Type[M], data: Any, fallback: str) -> M:
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"Unexpected {model.__name__} payload: {e.error_count()} error(s)")
            raise RemoteError(fallback) from e

    def _parse_rows(self, model: Type[M], data: Any, fallback: str) -> List[M]:
        """Validate a list payload row by row; malformed rows are dropped and logged."""
        if not isinstance(data, list):
            logger.warning(f"Expected a list of {model.__name__}, got {type(data).__name__}")
            raise RemoteError(fallback)

        rows = []
        for index, item in enumerate(data):
            try:
                rows.append(model.model_validate(item))
            except PydanticValidationError as e:
                logger.warning(
                    f"Skipping malformed {model.__name__} at index {index}: "
                    f"{e.error_count()} error(s)"
                )
        return rows

    # Authentication

    async def login(self, email: str, password: str) -> str:
        """Exchange credentials for a token"""
        data = await self._request(
            "POST", "auth/login",
            json=Credentials(email=email, password=password).model_dump(),
            fallback=LOGIN_FAILED,
            message_field="msg",
        )
        return self._parse(LoginResponse, data, LOGIN_FAILED).token

    async def register(self, email: str, password: str) -> str:
        """Create a staff account; returns the server's confirmation text"""
        data = await self._request(
            "POST", "auth/register",
            json=Credentials(email=email, password=password).model_dump(),
            fallback=REGISTER_FAILED,
            message_field="msg",
        )
        return self._parse(RegisterResponse, data, REGISTER_FAILED).msg

    # Reference data

    async def get_owners(self) -> List[Owner]:
        data = await self._request("GET", "getOwners", fallback=FETCH_OWNERS_FAILED)
        return self._parse_rows(Owner, data, FETCH_OWNERS_FAILED)

    async def get_lands(self) -> List[Property]:
        data = await self._request("GET", "getLands", fallback=FETCH_LANDS_FAILED)
        return self._parse_rows(Property, data, FETCH_LANDS_FAILED)

    # Mutations

    async def register_owner(self, owner: OwnerRegistration) -> str:
        data = await self._request(
            "POST", "registerOwner", json=owner.to_payload(), fallback=REGISTER_OWNER_FAILED
        )
        return self._parse(MessageResponse, data, REGISTER_OWNER_FAILED).message

    async def register_land(self, land: LandRegistration) -> str:
        data = await self._request(
            "POST", "registerLand", json=land.to_payload(), fallback=REGISTER_LAND_FAILED
        )
        return self._parse(MessageResponse, data, REGISTER_LAND_FAILED).message

    async def transfer_ownership(self, land_id: str, new_owner_id: str) -> str:
        transfer = OwnershipTransfer(land_id=land_id, new_owner_id=new_owner_id)
        data = await self._request(
            "PUT", "transferOwnership", json=transfer.to_payload(), fallback=TRANSFER_FAILED
        )
        return self._parse(MessageResponse, data, TRANSFER_FAILED).message

    # Records

    async def get_land_record(self, land_id: str) -> LandRecord:
        data = await self._request(
            "GET", f"getLandRecord/{quote(land_id, safe='')}",
            fallback=FETCH_RECORD_FAILED,
        )
        return self._parse(LandRecord, data, FETCH_RECORD_FAILED)


def _describe_body(body: Optional[dict]) -> str:
    return f" body={mask_sensitive_data(body)}" if body else ""


def _extract_message(response: httpx.Response, field: str) -> Optional[str]:
    """Structured error message from an error response, if any"""
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        value = payload.get(field)
        if isinstance(value, str) and value:
            return value
    return None
