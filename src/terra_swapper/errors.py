"""Exceptions raised by the swapper cycle."""


class SwapperError(Exception):
    """Base class for swapper failures surfaced to the scheduler."""


class BroadcastRejected(SwapperError):
    """The entry node rejected the transaction during its synchronous check."""

    def __init__(self, code: int, raw_log: str) -> None:
        self.code = code
        self.raw_log = raw_log
        super().__init__(f"Failed with Error Code: {code} and Error Log: {raw_log}")


class TransactionFailed(SwapperError):
    """The transaction was included in a block but its execution failed."""

    def __init__(self, code: int, raw_log: str, height: int = 0) -> None:
        self.code = code
        self.raw_log = raw_log
        self.height = height
        super().__init__(f"Tx failed at height {height}: code: {code}, raw_log: {raw_log}")


class ConfirmationTimeout(SwapperError):
    """The transaction was not observed in a block before the deadline."""

    def __init__(self, txhash: str, timeout: float) -> None:
        self.txhash = txhash
        self.timeout = timeout
        super().__init__(f"Tx {txhash} not confirmed within {timeout} seconds")


class ConfirmationCancelled(SwapperError):
    """Confirmation polling was stopped before an outcome was observed."""

    def __init__(self, txhash: str) -> None:
        self.txhash = txhash
        super().__init__(f"Confirmation of tx {txhash} cancelled")
