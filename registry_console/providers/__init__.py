"""Wallet provider registry"""

import logging
from typing import Any, Dict, List, Optional, Type

from registry_console.core.config import Settings
from registry_console.providers.base import WalletProvider
from registry_console.providers.jsonrpc import JsonRpcWalletProvider

logger = logging.getLogger(__name__)

_PROVIDERS: Dict[str, Type[WalletProvider]] = {
    "jsonrpc": JsonRpcWalletProvider,
}


def is_provider_registered(name: str) -> bool:
    return name in _PROVIDERS


def list_providers() -> List[str]:
    return sorted(_PROVIDERS)


def get_provider(name: str, **kwargs: Any) -> WalletProvider:
    """Instantiate a registered provider.

    Raises:
        ValueError: If no provider is registered under ``name``.
    """
    if name not in _PROVIDERS:
        raise ValueError(
            f"Unknown wallet provider: '{name}'. "
            f"Available providers: {list_providers() or 'none registered'}"
        )
    return _PROVIDERS[name](**kwargs)


def detect_wallet_provider(settings: Settings) -> Optional[WalletProvider]:
    """Return the injected provider, or None when none is configured."""
    if not settings.WALLET_PROVIDER_URL:
        logger.info("No wallet provider configured")
        return None
    provider = get_provider(settings.WALLET_PROVIDER, url=settings.WALLET_PROVIDER_URL)
    logger.info(f"Wallet provider '{settings.WALLET_PROVIDER}' detected")
    return provider


__all__ = [
    "WalletProvider",
    "JsonRpcWalletProvider",
    "detect_wallet_provider",
    "get_provider",
    "is_provider_registered",
    "list_providers",
]
