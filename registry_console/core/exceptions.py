"""
Error taxonomy for the registry console.

ValidationError and RemoteError are handled inside the form that raised
them. DecodeError always ends in a logout. WalletError stays inside the
wallet widget.
"""

from typing import Optional


class RegistryConsoleError(Exception):
    """Base class for all console errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RegistryConsoleError):
    """Local, pre-network check failed. Never reaches the server."""


class DecodeError(RegistryConsoleError):
    """A token could not be decoded into a claim set."""


class RemoteError(RegistryConsoleError):
    """Registry API call failed.

    Attributes:
        message: User-facing text. The server's structured message when the
            response carried one, otherwise the per-action fallback.
        status_code: HTTP status when a response was received.
        server_message: The raw structured message from the server, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message


class WalletError(RegistryConsoleError):
    """Wallet handshake failed"""

    default_message = "Failed to connect wallet. Is it unlocked?"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class UserRejected(WalletError):
    default_message = "You rejected the connection request."


class ProviderAbsent(WalletError):
    default_message = "No wallet provider is installed."


class ProviderError(WalletError):
    default_message = "Failed to connect wallet. Is it unlocked?"


class ScopeClosedError(RegistryConsoleError):
    """Work was abandoned because its owning component was disposed."""
