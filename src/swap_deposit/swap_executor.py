#!/usr/bin/env python3
"""Swap parameter construction and execution.

``build_swap_params`` is a pure function; ``SwapExecutor`` submits the
resulting ``exactInputSingle`` call to the router.
"""

import logging
import time
from typing import TYPE_CHECKING

from web3 import Web3
from web3.contract import Contract

from .models import SwapParams, TransactionResult

if TYPE_CHECKING:
    from .utils.contract_utility import ContractUtility
    from .utils.transaction_sender import TransactionSender

logger = logging.getLogger(__name__)

DEFAULT_DEADLINE_SECONDS = 20 * 60


def build_swap_params(
    token_in: str,
    token_out: str,
    fee: int,
    recipient: str,
    amount_in: int,
    amount_out_minimum: int = 0,
    deadline_seconds: int = DEFAULT_DEADLINE_SECONDS,
    now: int | None = None
) -> SwapParams:
    """
    Assemble the parameter record for a single-pool exact-input swap.

    No network access. The deadline is the current Unix time plus
    ``deadline_seconds``.

    Args:
        token_in: Token sold
        token_out: Token bought
        fee: Pool fee tier
        recipient: Address receiving the output
        amount_in: Input amount in smallest units
        amount_out_minimum: Minimum output; 0 accepts any price
        deadline_seconds: Window before the router rejects the swap
        now: Current Unix time; taken from the wall clock when None

    Returns:
        Immutable SwapParams
    """
    if deadline_seconds <= 0:
        raise ValueError(f"Deadline window must be positive, got {deadline_seconds}")

    current = int(time.time()) if now is None else now
    return SwapParams(
        token_in=Web3.to_checksum_address(token_in),
        token_out=Web3.to_checksum_address(token_out),
        fee=fee,
        recipient=Web3.to_checksum_address(recipient),
        deadline=current + deadline_seconds,
        amount_in=amount_in,
        amount_out_minimum=amount_out_minimum
    )


class SwapExecutor:
    """Submits ``exactInputSingle`` swaps to the router."""

    def __init__(
        self,
        contract_util: "ContractUtility",
        sender: "TransactionSender",
        router_address: str
    ) -> None:
        """
        Initialize the SwapExecutor.

        Args:
            contract_util: Utility for contract interactions
            sender: Transaction sender used to submit and confirm the swap
            router_address: Address of the swap router
        """
        self.contract_util: ContractUtility = contract_util
        self.sender: TransactionSender = sender
        self.router_address: str = Web3.to_checksum_address(router_address)
        self.router: Contract = self.contract_util.get_contract("SwapRouter", self.router_address)

    def execute(self, params: SwapParams) -> TransactionResult:
        """
        Submit the swap and wait for confirmation.

        Args:
            params: Swap parameters from build_swap_params

        Returns:
            TransactionResult of the confirmed swap

        Raises:
            ValueError: If the deadline has already passed
        """
        if params.deadline <= int(time.time()):
            raise ValueError(f"Swap deadline {params.deadline} has already passed")

        logger.info(f"Executing swap: {params}")
        return self.sender.send(
            self.router.functions.exactInputSingle(params.to_struct()),
            "exactInputSingle"
        )
