"""Wallet provider speaking EIP-1193 over JSON-RPC/HTTP.

Posts ``eth_requestAccounts`` to a wallet bridge (a local signer or node
exposing the standard provider methods). Error code 4001 is the EIP-1193
"user rejected request" code.
"""

import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx

from registry_console.core.exceptions import ProviderError, UserRejected
from registry_console.providers.base import WalletProvider

logger = logging.getLogger(__name__)

USER_REJECTED_CODE = 4001


class JsonRpcWalletProvider(WalletProvider):
    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: Optional[list] = None) -> Any:
        request = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        try:
            response = await self._client.post(self.url, json=request)
            response.raise_for_status()
            body: Dict[str, Any] = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Wallet provider call {method} failed: {e}")
            raise ProviderError() from e

        if not isinstance(body, dict):
            raise ProviderError()

        error = body.get("error")
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            if code == USER_REJECTED_CODE:
                raise UserRejected()
            logger.warning(f"Wallet provider returned error for {method}: {error}")
            raise ProviderError()

        return body.get("result")

    async def request_accounts(self) -> List[str]:
        result = await self._call("eth_requestAccounts")
        if not isinstance(result, list) or not all(isinstance(a, str) for a in result):
            raise ProviderError()
        return result

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
