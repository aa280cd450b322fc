"""
Test data factories for consistent test data generation

These factories build signed tokens, registry entities, an in-process fake
of the registry service (served through httpx.MockTransport) and a fake
wallet provider.
"""

import asyncio
import itertools
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx
from jose import jwt

from registry_console.core.exceptions import WalletError
from registry_console.core.utils.storage import MemoryKeyValueStore
from registry_console.providers.base import WalletProvider

SIGNING_KEY = "registry-service-signing-key-for-tests"
TEST_SECRET_KEY = "k7Qp2Xv9LmN4rT8wZc1Hy6Bd3Fg5Js0Ua"


class TokenFactory:
    """Factory for authentication tokens as the registry service issues them"""

    @staticmethod
    def create_token(
        user: Optional[Dict[str, Any]] = None,
        expires_in: timedelta = timedelta(hours=1),
        now: Optional[datetime] = None,
        **claims: Any,
    ) -> str:
        now = now or datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "user": user if user is not None else {"id": "u-1", "email": "clerk@registry.test"},
            "iat": int(now.timestamp()),
            "exp": int((now + expires_in).timestamp()),
        }
        payload.update(claims)
        return jwt.encode(payload, SIGNING_KEY, algorithm="HS256")

    @staticmethod
    def create_expired_token(user: Optional[Dict[str, Any]] = None) -> str:
        return TokenFactory.create_token(user=user, expires_in=timedelta(hours=-1))

    @staticmethod
    def create_token_without_expiry() -> str:
        return jwt.encode({"user": {"id": "u-1"}}, SIGNING_KEY, algorithm="HS256")

    @staticmethod
    def create_malformed_tokens() -> List[Any]:
        """Inputs that must never decode"""
        return [
            "",
            "   ",
            "not-a-token",
            "a.b",
            "a.b.c",
            "eyJhbGciOiJIUzI1NiJ9.bm90IGpzb24.c2ln",  # payload is not JSON
            None,
            12345,
            b"eyJ.eyJ.sig",
        ]


class RegistryDataFactory:
    """Factory for registry entities in the service's JSON shape"""

    _ids = itertools.count(1)

    @classmethod
    def next_id(cls, prefix: str) -> str:
        return f"{prefix}{next(cls._ids):020x}"

    @classmethod
    def create_owner(cls, **kwargs: Any) -> Dict[str, Any]:
        owner = {
            "_id": cls.next_id("own"),
            "name": "Asha Verma",
            "contact": "9876543210",
            "email": "asha@example.com",
            "proofId": "AADHAAR-1234",
        }
        owner.update(kwargs)
        return owner

    @classmethod
    def create_land(cls, owner_id: str, **kwargs: Any) -> Dict[str, Any]:
        land = {
            "_id": cls.next_id("lnd"),
            "location": "Pune, Maharashtra",
            "area": "2 Acres",
            "marketValue": 2500000,
            "propertyType": "Agricultural",
            "surveyNumber": "SN-42",
            "currentOwnerId": owner_id,
        }
        land.update(kwargs)
        return land


class FakeRegistryServer:
    """In-process stand-in for the registry service.

    Use ``handle`` as the handler of an ``httpx.MockTransport``. Every request
    is recorded in ``requests``. ``fail`` makes a path answer with a fixed
    status and body; ``hold`` makes a path wait on an event before answering.
    """

    def __init__(self):
        self.users: Dict[str, str] = {}
        self.owners: List[Dict[str, Any]] = []
        self.lands: List[Dict[str, Any]] = []
        self.history: Dict[str, List[Dict[str, Any]]] = {}
        self.requests: List[httpx.Request] = []
        self.failures: Dict[str, Tuple[int, Any]] = {}
        self.holds: Dict[str, asyncio.Event] = {}
        self.token_factory = TokenFactory.create_token

    # Seeding

    def add_user(self, email: str, password: str) -> None:
        self.users[email] = password

    def add_owner(self, **kwargs: Any) -> Dict[str, Any]:
        owner = RegistryDataFactory.create_owner(**kwargs)
        self.owners.append(owner)
        return owner

    def add_land(self, owner_id: str, **kwargs: Any) -> Dict[str, Any]:
        land = RegistryDataFactory.create_land(owner_id, **kwargs)
        self.lands.append(land)
        self.history[land["_id"]] = [
            {"owner": owner_id, "transferDate": "2024-01-15T10:00:00Z"}
        ]
        return land

    def fail(self, path: str, status_code: int = 500, body: Any = None) -> None:
        self.failures[path] = (status_code, body)

    def hold(self, path: str) -> asyncio.Event:
        event = asyncio.Event()
        self.holds[path] = event
        return event

    def paths(self, method: Optional[str] = None) -> List[str]:
        return [
            self._route(r)
            for r in self.requests
            if method is None or r.method == method
        ]

    # Transport

    @staticmethod
    def _route(request: httpx.Request) -> str:
        path = request.url.path
        return path.split("/api/", 1)[1] if "/api/" in path else path.lstrip("/")

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._route(request)
        key = route.split("/", 1)[0] if route.startswith("getLandRecord/") else route

        if key in self.holds:
            await self.holds[key].wait()

        if key in self.failures:
            status_code, body = self.failures[key]
            if body is None:
                return httpx.Response(status_code)
            if isinstance(body, str):
                return httpx.Response(status_code, text=body)
            return httpx.Response(status_code, json=body)

        body = json.loads(request.content) if request.content else {}

        if request.method == "POST" and route == "auth/login":
            return self._login(body)
        if request.method == "POST" and route == "auth/register":
            return self._register(body)
        if request.method == "GET" and route == "getOwners":
            return httpx.Response(200, json=self.owners)
        if request.method == "GET" and route == "getLands":
            return httpx.Response(200, json=self.lands)
        if request.method == "POST" and route == "registerOwner":
            return self._register_owner(body)
        if request.method == "POST" and route == "registerLand":
            return self._register_land(body)
        if request.method == "PUT" and route == "transferOwnership":
            return self._transfer(body)
        if request.method == "GET" and route.startswith("getLandRecord/"):
            return self._record(route.split("/", 1)[1])
        return httpx.Response(404, json={"message": "Not found"})

    def _login(self, body: Dict[str, Any]) -> httpx.Response:
        email, password = body.get("email"), body.get("password")
        if self.users.get(email) != password:
            return httpx.Response(400, json={"msg": "Invalid credentials"})
        token = self.token_factory(user={"id": f"u-{email}", "email": email})
        return httpx.Response(200, json={"token": token})

    def _register(self, body: Dict[str, Any]) -> httpx.Response:
        email = body.get("email")
        if email in self.users:
            return httpx.Response(400, json={"msg": "User already exists"})
        self.users[email] = body.get("password")
        return httpx.Response(201, json={"msg": "User registered successfully."})

    def _register_owner(self, body: Dict[str, Any]) -> httpx.Response:
        self.add_owner(**body)
        return httpx.Response(201, json={"message": "Owner registered successfully!"})

    def _register_land(self, body: Dict[str, Any]) -> httpx.Response:
        owner_id = body.get("currentOwnerId")
        if not any(o["_id"] == owner_id for o in self.owners):
            return httpx.Response(404, json={"message": "Owner not found"})
        fields = {k: v for k, v in body.items() if k != "currentOwnerId"}
        self.add_land(owner_id, **fields)
        return httpx.Response(201, json={"message": "Land registered successfully!"})

    def _transfer(self, body: Dict[str, Any]) -> httpx.Response:
        land = next((item for item in self.lands if item["_id"] == body.get("landId")), None)
        if land is None:
            return httpx.Response(404, json={"message": "Land not found"})
        new_owner_id = body.get("newOwnerId")
        if not any(o["_id"] == new_owner_id for o in self.owners):
            return httpx.Response(404, json={"message": "New owner not found"})
        land["currentOwnerId"] = new_owner_id
        self.history[land["_id"]].append(
            {"owner": new_owner_id, "transferDate": datetime.now(timezone.utc).isoformat()}
        )
        return httpx.Response(200, json={"message": "Ownership transferred successfully!"})

    def _record(self, land_id: str) -> httpx.Response:
        land = next((item for item in self.lands if item["_id"] == land_id), None)
        if land is None:
            return httpx.Response(404, json={"message": "Land record not found"})
        owners = {o["_id"]: o for o in self.owners}
        record = {
            "location": land["location"],
            "surveyNumber": land["surveyNumber"],
            "area": land["area"],
            "marketValue": land["marketValue"],
            "currentOwner": owners.get(land["currentOwnerId"], {}),
            "ownershipHistory": [
                {"owner": owners.get(entry["owner"], {}), "transferDate": entry["transferDate"]}
                for entry in self.history[land_id]
            ],
        }
        return httpx.Response(200, json=record)


class FakeWalletProvider(WalletProvider):
    """Wallet provider answering from a fixed account list or error"""

    def __init__(self, accounts: Optional[List[str]] = None, error: Optional[WalletError] = None):
        self.accounts = accounts if accounts is not None else [
            "0x1234567890abcdef1234567890abcdef12345678"
        ]
        self.error = error
        self.calls = 0
        self.closed = False

    async def request_accounts(self) -> List[str]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.accounts)

    async def aclose(self) -> None:
        self.closed = True


class FailingStore(MemoryKeyValueStore):
    """In-memory store whose operations named in ``fail_on`` raise"""

    def __init__(self, initial: Optional[Dict[str, str]] = None, fail_on: Iterable[str] = ()):
        super().__init__(initial)
        self.fail_on = set(fail_on)

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise OSError(f"{operation} failed: database is locked")

    def get(self, key: str) -> Optional[str]:
        self._check("get")
        return super().get(key)

    def set(self, key: str, value: str) -> None:
        self._check("set")
        super().set(key, value)

    def remove(self, key: str) -> None:
        self._check("remove")
        super().remove(key)
