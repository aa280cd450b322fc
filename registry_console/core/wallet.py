"""Wallet connection, independent of the authentication session.

The connector holds at most one address obtained from an injected
provider. It is never persisted; the session clears it on logout as a
matter of consistent UX, not as an authentication requirement.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from registry_console.core.exceptions import ProviderAbsent, ProviderError, WalletError
from registry_console.core.security import shorten_address
from registry_console.providers.base import WalletProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalletConnection:
    address: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.address is not None

    @property
    def short_address(self) -> Optional[str]:
        return shorten_address(self.address) if self.address else None


class WalletConnector:
    def __init__(self, provider: Optional[WalletProvider] = None):
        self._provider = provider
        self._connection = WalletConnection()

    @property
    def connection(self) -> WalletConnection:
        return self._connection

    @property
    def address(self) -> Optional[str]:
        return self._connection.address

    @property
    def provider_available(self) -> bool:
        return self._provider is not None

    async def connect(self) -> str:
        """Ask the provider for its accounts and keep the first one.

        Raises:
            ProviderAbsent: No provider is injected.
            UserRejected: The user declined the request.
            ProviderError: The provider failed or returned no account.
        """
        if self._provider is None:
            raise ProviderAbsent()

        try:
            accounts = await self._provider.request_accounts()
        except WalletError as e:
            logger.warning(f"Wallet connection failed: {type(e).__name__}: {e.message}")
            raise

        if not accounts:
            logger.warning("Wallet provider returned no accounts")
            raise ProviderError()

        self._connection = WalletConnection(address=accounts[0])
        logger.info(f"Wallet connected: {self._connection.short_address}")
        return accounts[0]

    def disconnect(self) -> None:
        """Forget the address locally. Provider permissions are untouched."""
        if self._connection.connected:
            logger.info("Wallet disconnected")
        self._connection = WalletConnection()
