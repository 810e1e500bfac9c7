#!/usr/bin/env python3
"""Data models for the Terra Swapper.

This module defines the immutable value types passed between the swapper
components and the tagged results returned at collaborator boundaries.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class SwapRequest:
    """A bounded market swap on behalf of a single account.

    Attributes:
        from_denom: Denom offered
        amount: Amount of from_denom offered (never above the period cap)
        to_denom: Denom asked
        sender: Bech32 address of the trading account
    """
    from_denom: str
    amount: int
    to_denom: str
    sender: str

    def __str__(self) -> str:
        return f"SwapRequest({self.amount}{self.from_denom} -> {self.to_denom}, sender={self.sender})"


@dataclass(frozen=True, slots=True)
class SignedTx:
    """A signed transaction ready for broadcast.

    Attributes:
        tx_bytes: Base64 encoded protobuf transaction bytes
    """
    tx_bytes: str


@dataclass(frozen=True, slots=True)
class BroadcastResponse:
    """Synchronous check-tx response from the entry node."""
    txhash: str
    code: int = 0
    raw_log: str = ""

    @property
    def accepted(self) -> bool:
        return self.code == 0


class LookupStatus(Enum):
    """Outcome of looking a transaction up by hash."""
    NOT_FOUND = "not_found"
    INCLUDED = "included"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True, slots=True)
class TxLookup:
    """Tagged result of a transaction lookup.

    Only INCLUDED results carry a meaningful code, raw_log and height;
    TRANSPORT_ERROR results carry the error description.
    """
    status: LookupStatus
    code: int = 0
    raw_log: str = ""
    height: int = 0
    error: str = ""

    @classmethod
    def not_found(cls) -> "TxLookup":
        return cls(status=LookupStatus.NOT_FOUND)

    @classmethod
    def included(cls, height: int, code: int = 0, raw_log: str = "") -> "TxLookup":
        return cls(status=LookupStatus.INCLUDED, code=code, raw_log=raw_log, height=height)

    @classmethod
    def transport_error(cls, error: str) -> "TxLookup":
        return cls(status=LookupStatus.TRANSPORT_ERROR, error=error)


class ConfirmationState(Enum):
    """States of the confirmation poller."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ConfirmationResult:
    """Observed on-chain outcome of an included transaction."""
    txhash: str
    height: int
    success: bool
    code: int = 0
    raw_log: str = ""


class CycleOutcome(Enum):
    """How a single swapper cycle ended when it did not raise."""
    SKIPPED = "skipped"
    NO_BALANCE = "no_balance"
    CONFIRMED = "confirmed"
