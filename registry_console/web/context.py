"""
Console context: the process-wide collaborators, wired once.

The session lives here and is handed to the web shell through
``app.state`` rather than a module global, so tests and embedders can build
as many independent consoles as they like.
"""

import logging
from pathlib import Path
from typing import Optional

import httpx

from registry_console.api.client import RegistryApiClient
from registry_console.core.config import Settings
from registry_console.core.config import settings as default_settings
from registry_console.core.session import Clock, SessionManager, utc_now
from registry_console.core.utils.encryption import TokenCipher, get_or_create_salt
from registry_console.core.utils.storage import KeyValueStore, SqlKeyValueStore, TokenStorage
from registry_console.core.wallet import WalletConnector
from registry_console.db.session import create_store_engine
from registry_console.providers import detect_wallet_provider
from registry_console.providers.base import WalletProvider

logger = logging.getLogger(__name__)

SALT_FILENAME = ".token_salt"


def _store_directory(store_url: str) -> Path:
    if store_url.startswith("sqlite:///") and ":memory:" not in store_url:
        return Path(store_url[len("sqlite:///"):]).parent
    return Path("./data")


def build_token_storage(settings: Settings, store: Optional[KeyValueStore] = None) -> TokenStorage:
    """Token storage for ``settings``, encrypted at rest when enabled."""
    if store is None:
        store = SqlKeyValueStore(create_store_engine(settings.TOKEN_STORE_URL))

    cipher = None
    if settings.ENCRYPT_STORED_TOKEN:
        salt = get_or_create_salt(_store_directory(settings.TOKEN_STORE_URL) / SALT_FILENAME)
        cipher = TokenCipher(settings.SECRET_KEY, salt)
        logger.info("Stored token encryption enabled")

    return TokenStorage(store, key=settings.TOKEN_STORAGE_KEY, cipher=cipher)


class ConsoleContext:
    def __init__(
        self,
        settings: Settings,
        storage: TokenStorage,
        session: SessionManager,
        api: RegistryApiClient,
        wallet: WalletConnector,
        wallet_provider: Optional[WalletProvider] = None,
    ):
        self.settings = settings
        self.storage = storage
        self.session = session
        self.api = api
        self.wallet = wallet
        self._wallet_provider = wallet_provider

        # Logging out also forgets the wallet address
        session.add_logout_listener(wallet.disconnect)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        store: Optional[KeyValueStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        wallet_provider: Optional[WalletProvider] = None,
        detect_wallet: bool = True,
        clock: Clock = utc_now,
    ) -> "ConsoleContext":
        """Wire a console from configuration.

        Args:
            settings: Settings to use; the module-level instance by default.
            store: Key-value store for the token; SQL store at
                ``TOKEN_STORE_URL`` by default.
            transport: httpx transport for the registry API client.
            wallet_provider: Injected wallet provider. When omitted and
                ``detect_wallet`` is set, one is built from settings.
            clock: Time source for expiry checks.
        """
        settings = settings or default_settings
        storage = build_token_storage(settings, store)
        session = SessionManager(storage, clock=clock)
        api = RegistryApiClient(
            settings.api_base_url,
            token_provider=lambda: session.token,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )
        if wallet_provider is None and detect_wallet:
            wallet_provider = detect_wallet_provider(settings)

        return cls(
            settings=settings,
            storage=storage,
            session=session,
            api=api,
            wallet=WalletConnector(wallet_provider),
            wallet_provider=wallet_provider,
        )

    async def aclose(self) -> None:
        await self.api.aclose()
        if self._wallet_provider is not None:
            await self._wallet_provider.aclose()
