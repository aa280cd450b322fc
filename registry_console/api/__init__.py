"""Registry service API client"""

from registry_console.api.client import RegistryApiClient

__all__ = ["RegistryApiClient"]
