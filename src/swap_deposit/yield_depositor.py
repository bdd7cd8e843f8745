#!/usr/bin/env python3
"""Lending-pool deposit.

Approves the lending pool for the deposit amount, then deposits.
"""

import logging
from typing import TYPE_CHECKING

from web3 import Web3
from web3.contract import Contract

from .models import TransactionResult

if TYPE_CHECKING:
    from .allowance import AllowanceGranter
    from .utils.contract_utility import ContractUtility
    from .utils.transaction_sender import TransactionSender

logger = logging.getLogger(__name__)


class YieldDepositor:
    """Deposits tokens into the lending pool."""

    def __init__(
        self,
        contract_util: "ContractUtility",
        sender: "TransactionSender",
        granter: "AllowanceGranter",
        lending_pool_address: str
    ) -> None:
        """
        Initialize the YieldDepositor.

        Args:
            contract_util: Utility for contract interactions
            sender: Transaction sender used to submit and confirm the deposit
            granter: Allowance granter used to approve the lending pool
            lending_pool_address: Address of the lending pool
        """
        self.contract_util: ContractUtility = contract_util
        self.sender: TransactionSender = sender
        self.granter: AllowanceGranter = granter
        self.lending_pool_address: str = Web3.to_checksum_address(lending_pool_address)
        self.lending_pool: Contract = self.contract_util.get_contract("LendingPool", self.lending_pool_address)

    def deposit(
        self,
        asset: str,
        amount: int,
        on_behalf_of: str,
        referral_code: int = 0
    ) -> tuple[TransactionResult, TransactionResult]:
        """
        Approve the lending pool and deposit ``amount`` of ``asset``.

        Both transactions are confirmed before returning. If the deposit fails
        the approval stays in place.

        Args:
            asset: Token to deposit
            amount: Amount in smallest units
            on_behalf_of: Address credited with the deposit
            referral_code: Lending-pool referral code

        Returns:
            Tuple of (approval result, deposit result)
        """
        if amount < 0:
            raise ValueError(f"Deposit amount must be non-negative, got {amount}")

        asset = Web3.to_checksum_address(asset)
        on_behalf_of = Web3.to_checksum_address(on_behalf_of)

        approval = self.granter.approve(asset, self.lending_pool_address, amount)

        logger.info(f"Depositing {amount} of {asset} on behalf of {on_behalf_of}")
        deposit = self.sender.send(
            self.lending_pool.functions.deposit(asset, amount, on_behalf_of, referral_code),
            "deposit"
        )
        return approval, deposit
