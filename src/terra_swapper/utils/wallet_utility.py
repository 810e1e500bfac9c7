import logging

from terra_classic_sdk.client.lcd import AsyncLCDClient
from terra_classic_sdk.client.lcd.api.tx import CreateTxOptions
from terra_classic_sdk.core import Coin, Coins
from terra_classic_sdk.core.market import MsgSwap
from terra_classic_sdk.key.mnemonic import MnemonicKey

from ..models import SignedTx, SwapRequest

logger = logging.getLogger(__name__)


class WalletUtility:
    """
    Signing wallet for market swaps.

    Fee estimation and account sequence lookups are delegated to the SDK's
    own LCD client; broadcasting is left to the caller.
    """

    def __init__(
        self,
        node_url: str,
        chain_id: str,
        mnemonic: str,
        gas_prices: str,
        gas_adjustment: float = 1.75
    ) -> None:
        """
        Initialize the wallet. Must be called from a running event loop.

        Args:
            node_url: LCD base URL
            chain_id: Chain identifier
            mnemonic: Account mnemonic
            gas_prices: Gas prices string such as '0.01133uluna'
            gas_adjustment: Multiplier applied to simulated gas for the fee
        """
        self.lcd = AsyncLCDClient(
            url=node_url,
            chain_id=chain_id,
            gas_prices=Coins.from_str(gas_prices),
            gas_adjustment=gas_adjustment
        )
        self.key = MnemonicKey(mnemonic=mnemonic)
        self.wallet = self.lcd.wallet(self.key)

    @property
    def address(self) -> str:
        return self.key.acc_address

    async def sign_swap(self, request: SwapRequest) -> SignedTx:
        """
        Create and sign a MsgSwap transaction for the request.

        Args:
            request: The swap to sign; its sender must be this wallet

        Returns:
            SignedTx with base64 encoded tx bytes
        """
        if request.sender != self.address:
            raise ValueError(
                f"Swap sender {request.sender} does not match wallet {self.address}"
            )

        msg = MsgSwap(
            self.address,
            Coin(request.from_denom, request.amount),
            request.to_denom
        )
        tx = await self.wallet.create_and_sign_tx(CreateTxOptions(msgs=[msg]))
        logger.debug(f"Signed swap tx for {request}")

        return SignedTx(tx_bytes=await self.lcd.tx.encode(tx))

    async def close(self) -> None:
        await self.lcd.session.close()
