"""Construction of bounded swap requests."""

from .models import SwapRequest


def build_swap_request(
    sender: str,
    balance: int,
    cap: int,
    from_denom: str,
    to_denom: str
) -> SwapRequest:
    """
    Build a swap request offering at most ``cap`` of the source balance.

    Amounts are Python ints so comparison never loses precision.

    Raises:
        ValueError: If the caller violates the preconditions
    """
    if not sender:
        raise ValueError("Sender address is required")
    if not from_denom or not to_denom:
        raise ValueError("Both denoms are required")
    if from_denom == to_denom:
        raise ValueError(f"Cannot swap {from_denom} into itself")
    if balance < 0:
        raise ValueError(f"Balance must be non-negative, got {balance}")
    if cap < 0:
        raise ValueError(f"Cap must be non-negative, got {cap}")

    return SwapRequest(
        from_denom=from_denom,
        amount=min(balance, cap),
        to_denom=to_denom,
        sender=sender
    )
