#!/usr/bin/env python3
"""Transaction submission for the swap-deposit workflow.

Submits a prepared contract function through the signing middleware,
blocks until the transaction is mined and checks the receipt status.
"""

import logging

from web3 import Web3
from web3.contract.contract import ContractFunction
from web3.types import HexBytes, TxParams, TxReceipt

from ..errors import TransactionRevertedError
from ..models import TransactionResult

logger = logging.getLogger(__name__)


class TransactionSender:
    """Sends state-changing contract calls and waits for confirmation."""

    def __init__(
        self,
        w3: Web3,
        receipt_timeout: int = 120,
        gas_limit: int | None = None
    ) -> None:
        """
        Initialize the TransactionSender.

        Args:
            w3: Web3 instance with signing middleware and default account set
            receipt_timeout: Seconds to wait for a transaction to be mined
            gas_limit: Fixed gas limit; web3 estimates gas when None
        """
        self.w3 = w3
        self.receipt_timeout = receipt_timeout
        self.gas_limit = gas_limit

    def send(self, fn: ContractFunction, description: str) -> TransactionResult:
        """
        Submit a contract call and block until it is confirmed.

        Args:
            fn: Already-parameterized contract function
            description: Short label used in logs and errors

        Returns:
            TransactionResult for the confirmed transaction

        Raises:
            TransactionRevertedError: If the receipt status is not 1
            web3.exceptions.TimeExhausted: If not mined within receipt_timeout
            web3.exceptions.ContractLogicError: If gas estimation reverts
        """
        tx_params: TxParams = {}
        if self.gas_limit:
            tx_params['gas'] = self.gas_limit

        logger.info(f"Submitting {description}...")
        tx_hash: HexBytes = fn.transact(tx_params)
        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info(f"✓ {description} submitted: {tx_hash_hex}")

        receipt: TxReceipt = self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.receipt_timeout
        )

        if (status := receipt.get('status', 0)) != 1:
            logger.error(f"✗ {description} failed with status={status}")
            raise TransactionRevertedError(description, tx_hash_hex, receipt)

        logger.info(f"✓ {description} confirmed in block {receipt['blockNumber']}")
        return TransactionResult.from_receipt(description, tx_hash_hex, receipt)
