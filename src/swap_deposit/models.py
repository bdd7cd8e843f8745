#!/usr/bin/env python3
"""Data models for the swap-deposit workflow.

This module provides immutable data classes for swap parameters, pool
metadata and confirmed transactions. Every instance lives for a single run.
"""

from dataclasses import dataclass, field
from typing import Any

from web3.types import TxReceipt


@dataclass(frozen=True, slots=True)
class SwapParams:
    """Parameters for a single-pool exact-input swap.

    Mirrors the router's ``ExactInputSingleParams`` struct. Constructed once
    per swap and never mutated.

    Attributes:
        token_in: Checksummed address of the token sold
        token_out: Checksummed address of the token bought
        fee: Pool fee tier in hundredths of a bip (3000 = 0.3%)
        recipient: Address receiving the output tokens
        deadline: Unix timestamp after which the router rejects the swap
        amount_in: Input amount in smallest units
        amount_out_minimum: Minimum acceptable output; 0 disables slippage protection
        sqrt_price_limit_x96: Price limit for the swap; 0 means no limit
    """

    token_in: str
    token_out: str
    fee: int
    recipient: str
    deadline: int
    amount_in: int
    amount_out_minimum: int = 0
    sqrt_price_limit_x96: int = 0

    def __post_init__(self) -> None:
        if self.amount_in < 0:
            raise ValueError(f"amount_in must be non-negative, got {self.amount_in}")
        if self.amount_out_minimum < 0:
            raise ValueError(
                f"amount_out_minimum must be non-negative, got {self.amount_out_minimum}"
            )

    def __str__(self) -> str:
        return (
            f"SwapParams({self.token_in[:8]}... -> {self.token_out[:8]}..., "
            f"fee={self.fee}, amount_in={self.amount_in}, "
            f"min_out={self.amount_out_minimum}, deadline={self.deadline})"
        )

    def to_struct(self) -> dict[str, Any]:
        """Render the struct argument expected by ``exactInputSingle``."""
        return {
            "tokenIn": self.token_in,
            "tokenOut": self.token_out,
            "fee": self.fee,
            "recipient": self.recipient,
            "deadline": self.deadline,
            "amountIn": self.amount_in,
            "amountOutMinimum": self.amount_out_minimum,
            "sqrtPriceLimitX96": self.sqrt_price_limit_x96,
        }


@dataclass(frozen=True, slots=True)
class PoolInfo:
    """Metadata read from a liquidity pool.

    Attributes:
        address: Pool contract address
        token0: Lower-sorted token of the pair
        token1: Higher-sorted token of the pair
        fee: Fee tier reported by the pool
        tick_spacing: Tick spacing of the pool
        liquidity: In-range liquidity at read time
        sqrt_price_x96: Current sqrt price (Q64.96)
        tick: Current tick
    """

    address: str
    token0: str
    token1: str
    fee: int
    tick_spacing: int
    liquidity: int
    sqrt_price_x96: int
    tick: int

    def __str__(self) -> str:
        return (
            f"PoolInfo({self.address[:10]}..., fee={self.fee}, "
            f"liquidity={self.liquidity}, tick={self.tick})"
        )


@dataclass(frozen=True, slots=True)
class TransactionResult:
    """A transaction confirmed with status 1.

    Only inclusion is recorded; logs and return values are not decoded.
    """

    description: str
    tx_hash: str
    block_number: int
    gas_used: int | None = None

    @classmethod
    def from_receipt(cls, description: str, tx_hash: str, receipt: TxReceipt) -> "TransactionResult":
        return cls(
            description=description,
            tx_hash=tx_hash,
            block_number=receipt["blockNumber"],
            gas_used=receipt.get("gasUsed"),
        )


@dataclass(frozen=True, slots=True)
class WorkflowResult:
    """Summary of a completed swap-then-deposit run."""

    pool: PoolInfo
    swap_params: SwapParams
    deposit_amount: int
    transactions: list[TransactionResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "pool": self.pool.address,
            "amount_in": self.swap_params.amount_in,
            "deposit_amount": self.deposit_amount,
            "transactions": [
                {"description": tx.description, "tx_hash": tx.tx_hash, "block_number": tx.block_number}
                for tx in self.transactions
            ],
        }
