import logging
from typing import Any

import httpx

from ..models import BroadcastResponse, TxLookup

logger = logging.getLogger(__name__)


class LcdUtility:
    """Utility for querying and submitting to a Terra LCD endpoint.

    Wraps the Cosmos SDK REST routes used by the swapper over a single
    keep-alive HTTP client.
    """

    LATEST_BLOCK_PATH: str = "/cosmos/base/tendermint/v1beta1/blocks/latest"
    BALANCE_PATH: str = "/cosmos/bank/v1beta1/balances/{address}/by_denom"
    TX_PATH: str = "/cosmos/tx/v1beta1/txs/{txhash}"
    BROADCAST_PATH: str = "/cosmos/tx/v1beta1/txs"

    def __init__(
        self,
        url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        """Initialize LCD utility.

        Args:
            url: LCD base URL
            timeout: Per-request timeout in seconds
            transport: Optional transport override (used for testing)
        """
        self.url: str = url.rstrip('/')
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=self.url,
            timeout=timeout,
            transport=transport
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def _lcd_get(self, path: str, params: dict[str, str] | None = None) -> Any:
        """Send a GET request to the LCD.

        Args:
            path: API endpoint path
            params: Optional query parameters

        Returns:
            JSON response from the LCD

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        logger.debug(f"GET {self.url}{path} {params or ''}")
        response: httpx.Response = await self.client.get(path, params=params)
        response.raise_for_status()
        return response.json()

    async def get_block_height(self) -> int:
        """Fetch the height of the latest block."""
        response: dict[str, Any] = await self._lcd_get(self.LATEST_BLOCK_PATH)
        return int(response["block"]["header"]["height"])

    async def get_balance(self, address: str, denom: str) -> int | None:
        """Fetch the balance of a single denom.

        Args:
            address: Account address
            denom: Token denom

        Returns:
            The amount held, or None if the account has no entry for the denom
        """
        path: str = self.BALANCE_PATH.format(address=address)
        response: dict[str, Any] = await self._lcd_get(path, params={"denom": denom})

        match response.get("balance"):
            case {"amount": amount} if amount not in (None, ""):
                return int(amount)
            case _:
                return None

    async def lookup_tx(self, txhash: str) -> TxLookup:
        """
        Look a transaction up by hash.

        Never raises for HTTP level failures; every outcome is reported as
        a tagged TxLookup.

        Args:
            txhash: Transaction hash

        Returns:
            NOT_FOUND while the tx is not indexed, INCLUDED once it is,
            TRANSPORT_ERROR for anything else
        """
        path: str = self.TX_PATH.format(txhash=txhash)
        try:
            response: httpx.Response = await self.client.get(path)
        except httpx.HTTPError as e:
            return TxLookup.transport_error(f"{type(e).__name__}: {e}")

        if response.status_code == 404:
            return TxLookup.not_found()

        if response.is_error:
            # gRPC gateway reports a missing tx as an error body on some nodes
            message: str = self._error_message(response)
            if "not found" in message.lower():
                return TxLookup.not_found()
            return TxLookup.transport_error(f"HTTP {response.status_code}: {message}")

        try:
            tx_response: dict[str, Any] = response.json()["tx_response"]
            return TxLookup.included(
                height=int(tx_response["height"]),
                code=int(tx_response.get("code") or 0),
                raw_log=tx_response.get("raw_log") or ""
            )
        except (ValueError, KeyError, TypeError) as e:
            return TxLookup.transport_error(f"Malformed tx response: {e}")

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body: Any = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or body)
        return str(body)

    async def broadcast_sync(self, tx_bytes: str) -> BroadcastResponse:
        """
        Broadcast a signed transaction in sync mode.

        Sync mode returns after the entry node's check-tx; acceptance does not
        imply inclusion in a block.

        Args:
            tx_bytes: Base64 encoded signed transaction

        Returns:
            The check-tx response

        Raises:
            httpx.HTTPError: If the request itself fails
        """
        payload: dict[str, str] = {
            "tx_bytes": tx_bytes,
            "mode": "BROADCAST_MODE_SYNC"
        }

        response: httpx.Response = await self.client.post(self.BROADCAST_PATH, json=payload)
        response.raise_for_status()
        tx_response: dict[str, Any] = response.json()["tx_response"]
        logger.debug(f"Broadcast response: {tx_response}")

        return BroadcastResponse(
            txhash=tx_response["txhash"],
            code=int(tx_response.get("code") or 0),
            raw_log=tx_response.get("raw_log") or ""
        )
