"""
Swap-then-deposit workflow.

This module wires the step components together and runs them strictly in
sequence: approve the router, locate the pool, build the swap parameters,
swap, then approve the lending pool and deposit.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

from .allowance import AllowanceGranter
from .config import WorkflowConfig
from .errors import WorkflowAbortedError
from .models import TransactionResult, WorkflowResult
from .pool_locator import PoolLocator
from .swap_executor import SwapExecutor, build_swap_params
from .utils.contract_utility import ContractUtility
from .utils.transaction_sender import TransactionSender
from .utils.units import from_base_units, to_base_units
from .yield_depositor import YieldDepositor

logger = logging.getLogger(__name__)


class WorkflowStep(Enum):
    """Steps of the workflow, in execution order."""
    APPROVE = "approve"
    LOCATE_POOL = "locate_pool"
    BUILD_PARAMS = "build_params"
    SWAP = "swap"
    DEPOSIT = "deposit"


class SwapDepositWorkflow:
    """
    Runs the swap-then-deposit sequence with a single signing identity.

    Each step blocks until its transaction is confirmed. The first failure
    aborts the run; nothing is retried or rolled back.
    """

    def __init__(
        self,
        config: WorkflowConfig,
        contract_util: ContractUtility | None = None
    ) -> None:
        """
        Initialize the workflow and connect to the network.

        Args:
            config: Workflow configuration
            contract_util: Pre-built contract utility; created from config when None

        Raises:
            ConnectionError: If the RPC endpoint is unreachable
            ValueError: If no signing account is available
        """
        self.config = config
        self.completed_steps: list[WorkflowStep] = []

        logger.debug(f"Connecting to {config.network.rpc_url}")
        self.contract_util = contract_util or ContractUtility(
            config.network.rpc_url,
            config.network.private_key,
            request_timeout=config.network.request_timeout
        )
        if not self.contract_util.is_connected():
            raise ConnectionError(f"Failed to connect to RPC at {config.network.rpc_url}")

        if not self.contract_util.account_address:
            raise ValueError("A signing account is required to submit transactions")
        self.account: str = self.contract_util.account_address

        # Fetch chain ID from the connected RPC endpoint and update config
        self.config = self.config.with_chain_id(self.contract_util.w3.eth.chain_id)

        self.sender = TransactionSender(
            self.contract_util.w3,
            receipt_timeout=config.transactions.receipt_timeout,
            gas_limit=config.transactions.gas_limit
        )
        self.granter = AllowanceGranter(self.contract_util, self.sender)
        self.pool_locator = PoolLocator(self.contract_util, config.contracts.factory_address)
        self.swap_executor = SwapExecutor(self.contract_util, self.sender, config.contracts.router_address)
        self.depositor = YieldDepositor(
            self.contract_util,
            self.sender,
            self.granter,
            config.contracts.lending_pool_address
        )

        logger.info(f"Workflow initialized (chain {self.config.network.chain_id}, signer {self.account})")

    @classmethod
    def from_env(cls) -> "SwapDepositWorkflow":
        """
        Create a workflow from environment variables.

        Raises:
            ValueError: If required environment variables are missing
        """
        config = WorkflowConfig.from_env()
        config.log_config()
        return cls(config)

    @property
    def last_completed_step(self) -> WorkflowStep | None:
        """Highest step reached so far, or None before the first one completes."""
        return self.completed_steps[-1] if self.completed_steps else None

    @contextmanager
    def _step(self, step: WorkflowStep) -> Iterator[None]:
        """Track a step; wrap any failure in WorkflowAbortedError."""
        logger.info(f"--- Step: {step.value} ---")
        try:
            yield
        except Exception as e:
            reached = self.last_completed_step
            logger.error(f"✗ Step '{step.value}' failed: {e}")
            logger.error(
                f"Highest step reached: {reached.value if reached else 'none'}; "
                "on-chain effects of completed steps remain in place"
            )
            raise WorkflowAbortedError(step, self.completed_steps) from e
        self.completed_steps.append(step)

    def _token_decimals(self, token_address: str, configured: int | None) -> int:
        if configured is not None:
            return configured
        token = self.contract_util.get_contract("ERC20", token_address)
        decimals = int(token.functions.decimals().call())
        logger.debug(f"Token {token_address} has {decimals} decimals")
        return decimals

    def _token_balance(self, token_address: str) -> int:
        token = self.contract_util.get_contract("ERC20", token_address)
        return int(token.functions.balanceOf(self.account).call())

    def run(self) -> WorkflowResult:
        """
        Execute all steps in order.

        Returns:
            WorkflowResult describing the confirmed transactions

        Raises:
            WorkflowAbortedError: On the first failing step, chained to the cause
        """
        swap_cfg = self.config.swap
        deposit_cfg = self.config.deposit
        contracts = self.config.contracts
        transactions: list[TransactionResult] = []
        self.completed_steps = []

        logger.info("Starting swap-deposit workflow...")

        with self._step(WorkflowStep.APPROVE):
            decimals_in = self._token_decimals(swap_cfg.token_in, swap_cfg.token_in_decimals)
            amount_in = to_base_units(swap_cfg.amount, decimals_in)
            transactions.append(self.granter.approve(swap_cfg.token_in, contracts.router_address, amount_in))

        with self._step(WorkflowStep.LOCATE_POOL):
            pool = self.pool_locator.locate(swap_cfg.token_in, swap_cfg.token_out, swap_cfg.fee_tier)

        with self._step(WorkflowStep.BUILD_PARAMS):
            params = build_swap_params(
                token_in=swap_cfg.token_in,
                token_out=swap_cfg.token_out,
                fee=swap_cfg.fee_tier,
                recipient=swap_cfg.recipient or self.account,
                amount_in=amount_in,
                amount_out_minimum=swap_cfg.amount_out_minimum,
                deadline_seconds=swap_cfg.deadline_seconds
            )

        with self._step(WorkflowStep.SWAP):
            balance_before = None
            if deposit_cfg.amount is None:
                balance_before = self._token_balance(swap_cfg.token_out)
            transactions.append(self.swap_executor.execute(params))

        with self._step(WorkflowStep.DEPOSIT):
            if balance_before is None:
                decimals_out = self._token_decimals(swap_cfg.token_out, deposit_cfg.token_decimals)
                deposit_amount = to_base_units(deposit_cfg.amount, decimals_out)
            else:
                deposit_amount = self._token_balance(swap_cfg.token_out) - balance_before
                if deposit_amount <= 0:
                    raise ValueError(f"Swap produced no {swap_cfg.token_out} for the signer to deposit")
                logger.info(f"Depositing swap output of {swap_cfg.token_out}: {deposit_amount}")

            approval, deposit = self.depositor.deposit(
                swap_cfg.token_out,
                deposit_amount,
                deposit_cfg.on_behalf_of or self.account,
                deposit_cfg.referral_code
            )
            transactions.extend([approval, deposit])

        logger.info(
            f"✓ Workflow complete: swapped {from_base_units(amount_in, decimals_in)} "
            f"via pool {pool.address}, deposited {deposit_amount} base units"
        )
        return WorkflowResult(
            pool=pool,
            swap_params=params,
            deposit_amount=deposit_amount,
            transactions=transactions
        )
