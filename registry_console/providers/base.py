"""Abstract base class for wallet provider implementations.

A wallet provider is the address-yielding collaborator the console hands
the connection handshake to. The console never asks it for anything else:
no signing, no contract calls.
"""

from abc import ABC, abstractmethod
from typing import List


class WalletProvider(ABC):
    """Abstract base class for wallet providers.

    Example usage:
        provider = get_provider("jsonrpc", url="http://127.0.0.1:8545")
        accounts = await provider.request_accounts()
    """

    @abstractmethod
    async def request_accounts(self) -> List[str]:
        """Request access to the user's accounts.

        Returns:
            Account addresses, the active one first. May be empty.

        Raises:
            UserRejected: The user declined the request.
            ProviderError: The provider failed to answer.
        """
        pass

    async def aclose(self) -> None:
        """Release provider resources"""
        return None
