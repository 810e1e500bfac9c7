#!/usr/bin/env python3
"""Unit tests for swap request construction."""

import dataclasses

import pytest

from src.terra_swapper.models import SwapRequest
from src.terra_swapper.swap_builder import build_swap_request

SENDER = "terra1x46rqay4d3cssq8gxxvqz8xt6nwlz4td20k38v"


class TestBuildSwapRequest:
    """Test suite for build_swap_request."""

    def test_balance_below_cap(self):
        """Test that the whole balance is offered when below the cap."""
        request = build_swap_request(SENDER, balance=500, cap=1000, from_denom="uusd", to_denom="uluna")

        assert request == SwapRequest(from_denom="uusd", amount=500, to_denom="uluna", sender=SENDER)

    def test_balance_above_cap(self):
        """Test that the amount is capped."""
        request = build_swap_request(SENDER, balance=5000, cap=1000, from_denom="uusd", to_denom="uluna")

        assert request.amount == 1000

    def test_balance_equal_to_cap(self):
        request = build_swap_request(SENDER, balance=1000, cap=1000, from_denom="uusd", to_denom="uluna")
        assert request.amount == 1000

    @pytest.mark.parametrize("balance,cap", [
        (0, 0), (0, 10), (10, 0), (7, 7), (123, 45), (45, 123),
    ])
    def test_amount_is_minimum(self, balance, cap):
        request = build_swap_request(SENDER, balance=balance, cap=cap, from_denom="uusd", to_denom="uluna")
        assert request.amount == min(balance, cap)

    def test_arbitrary_precision(self):
        """Test that amounts beyond 2**53 compare exactly."""
        cap = 2**53
        balance = 2**53 + 1

        request = build_swap_request(SENDER, balance=balance, cap=cap, from_denom="uusd", to_denom="uluna")

        assert request.amount == cap
        assert float(balance) == float(cap)  # a float comparison would not tell them apart

    def test_request_is_immutable(self):
        request = build_swap_request(SENDER, balance=1, cap=1, from_denom="uusd", to_denom="uluna")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.amount = 2

    def test_negative_balance_rejected(self):
        with pytest.raises(ValueError, match="Balance must be non-negative"):
            build_swap_request(SENDER, balance=-1, cap=10, from_denom="uusd", to_denom="uluna")

    def test_negative_cap_rejected(self):
        with pytest.raises(ValueError, match="Cap must be non-negative"):
            build_swap_request(SENDER, balance=1, cap=-10, from_denom="uusd", to_denom="uluna")

    def test_missing_sender_rejected(self):
        with pytest.raises(ValueError, match="Sender address is required"):
            build_swap_request("", balance=1, cap=10, from_denom="uusd", to_denom="uluna")

    def test_same_denom_rejected(self):
        with pytest.raises(ValueError, match="into itself"):
            build_swap_request(SENDER, balance=1, cap=10, from_denom="uusd", to_denom="uusd")
