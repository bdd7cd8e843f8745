"""
swap-deposit package.

Swaps a token through a Uniswap V3 style router and deposits the output
into an Aave style lending pool.
"""

from .config import WorkflowConfig
from .errors import PoolNotFoundError, SwapDepositError, TransactionRevertedError, WorkflowAbortedError
from .models import PoolInfo, SwapParams, TransactionResult, WorkflowResult
from .swap_executor import build_swap_params
from .workflow import SwapDepositWorkflow, WorkflowStep

__all__ = [
    "WorkflowConfig",
    "SwapDepositWorkflow",
    "WorkflowStep",
    "SwapParams",
    "PoolInfo",
    "TransactionResult",
    "WorkflowResult",
    "build_swap_params",
    "SwapDepositError",
    "PoolNotFoundError",
    "TransactionRevertedError",
    "WorkflowAbortedError",
]
__version__ = "0.1.0"
