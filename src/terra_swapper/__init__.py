"""
Terra Swapper package.

Block-height gated token swap worker for Terra chains.
"""

from .config import SwapperConfig
from .height_gate import HeightGate, should_act
from .models import CycleOutcome, SwapRequest
from .swapper import TerraSwapper

__all__ = ["SwapperConfig", "HeightGate", "should_act", "CycleOutcome", "SwapRequest", "TerraSwapper"]
__version__ = "0.1.0"
