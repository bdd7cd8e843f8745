#!/usr/bin/env python3
"""ERC20 allowance handling.

Grants a spender contract permission to move tokens on the signer's behalf.
"""

import logging
from typing import TYPE_CHECKING

from web3 import Web3

from .models import TransactionResult

if TYPE_CHECKING:
    from .utils.contract_utility import ContractUtility
    from .utils.transaction_sender import TransactionSender

logger = logging.getLogger(__name__)


class AllowanceGranter:
    """Submits ERC20 ``approve`` transactions."""

    def __init__(
        self,
        contract_util: "ContractUtility",
        sender: "TransactionSender"
    ) -> None:
        """
        Initialize the AllowanceGranter.

        Args:
            contract_util: Utility for contract interactions
            sender: Transaction sender used to submit and confirm approvals
        """
        self.contract_util: ContractUtility = contract_util
        self.sender: TransactionSender = sender

    def approve(self, token_address: str, spender: str, amount: int) -> TransactionResult:
        """
        Approve ``spender`` to transfer ``amount`` of the token and wait for confirmation.

        Args:
            token_address: ERC20 token contract address
            spender: Contract allowed to move the tokens
            amount: Allowance in the token's smallest units

        Returns:
            TransactionResult of the confirmed approval

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Approval amount must be non-negative, got {amount}")

        spender = Web3.to_checksum_address(spender)
        token = self.contract_util.get_contract("ERC20", token_address)

        logger.info(f"Approving {spender} to spend {amount} of token {token_address}")
        return self.sender.send(
            token.functions.approve(spender, amount),
            f"approve({spender[:10]}..., {amount})"
        )
