#!/usr/bin/env python3
"""Integration tests for SwapDepositWorkflow against a mocked chain."""

import time
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from web3 import Web3
from web3.exceptions import ContractLogicError

from swap_deposit.config import (
    ContractsConfig,
    DepositConfig,
    NetworkConfig,
    SwapConfig,
    TransactionConfig,
    WorkflowConfig,
)
from swap_deposit.errors import PoolNotFoundError, TransactionRevertedError, WorkflowAbortedError
from swap_deposit.pool_locator import ZERO_ADDRESS
from swap_deposit.workflow import SwapDepositWorkflow, WorkflowStep

USDC = Web3.to_checksum_address("0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48")
DAI = Web3.to_checksum_address("0x6b175474e89094c44da98b954eedeac495271d0f")
POOL = Web3.to_checksum_address("0x6c6bc977e13df9b0de53b251522280bb72383700")
SIGNER = Web3.to_checksum_address("0x19e7e376e7c213b7e7e7e46cc70a5dd086daff2a")
BENEFICIARY = Web3.to_checksum_address("0x000000000000000000000000000000000000beef")


class FakeChain:
    """Mock ContractUtility recording every contract call in order."""

    def __init__(self, pool_address: str = POOL) -> None:
        self.calls: list[tuple[str, tuple]] = []
        self.contracts = {
            "ERC20": MagicMock(),
            "UniswapV3Factory": MagicMock(),
            "UniswapV3Pool": MagicMock(),
            "SwapRouter": MagicMock(),
            "LendingPool": MagicMock(),
        }

        self.util = MagicMock()
        self.util.account_address = SIGNER
        self.util.is_connected.return_value = True
        self.util.w3.eth.chain_id = 1
        self.util.w3.eth.wait_for_transaction_receipt.return_value = {
            'status': 1,
            'blockNumber': 100,
            'gasUsed': 50000
        }
        self.util.get_contract.side_effect = lambda name, address: self.contracts[name]

        erc20 = self.contracts["ERC20"].functions
        erc20.approve.side_effect = self._transaction("approve")
        erc20.decimals.side_effect = self._view("decimals", 6)
        # Signer balance of token_out before and after the swap
        self.balances = [1 * 10**18, 100 * 10**18]
        erc20.balanceOf.side_effect = self._view("balanceOf", lambda: self.balances.pop(0))

        self.contracts["UniswapV3Factory"].functions.getPool.side_effect = self._view("getPool", pool_address)

        pool = self.contracts["UniswapV3Pool"].functions
        pool.slot0.return_value.call.return_value = (2**96, 0, 0, 1, 1, 0, True)
        pool.token0.return_value.call.return_value = DAI
        pool.token1.return_value.call.return_value = USDC
        pool.fee.return_value.call.return_value = 3000
        pool.tickSpacing.return_value.call.return_value = 60
        pool.liquidity.return_value.call.return_value = 10**20

        self.contracts["SwapRouter"].functions.exactInputSingle.side_effect = self._transaction("exactInputSingle")
        self.contracts["LendingPool"].functions.deposit.side_effect = self._transaction("deposit")

    def _transaction(self, name: str):
        def build(*args):
            self.calls.append((name, args))
            fn = MagicMock()
            fn.transact.return_value = bytes([len(self.calls)]) * 32
            return fn
        return build

    def _view(self, name: str, value):
        def build(*args):
            self.calls.append((name, args))
            fn = MagicMock()
            fn.call.return_value = value() if callable(value) else value
            return fn
        return build

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def args_of(self, name: str) -> list[tuple]:
        return [args for call_name, args in self.calls if call_name == name]

    @property
    def transaction_names(self) -> list[str]:
        return [n for n in self.names if n not in ("decimals", "balanceOf")]


def make_config(
    token_in_decimals: int | None = 6,
    deposit_amount: Decimal | None = Decimal("50"),
    on_behalf_of: str | None = None
) -> WorkflowConfig:
    return WorkflowConfig(
        network=NetworkConfig(rpc_url="http://localhost:8545", private_key="0x" + "1" * 64),
        contracts=ContractsConfig(),
        swap=SwapConfig(
            token_in=USDC,
            token_out=DAI,
            amount=Decimal("100"),
            token_in_decimals=token_in_decimals
        ),
        deposit=DepositConfig(amount=deposit_amount, token_decimals=18, on_behalf_of=on_behalf_of),
        transactions=TransactionConfig()
    )


@pytest.fixture
def chain():
    return FakeChain()


class TestSwapDepositWorkflow:
    """Test suite for the full workflow."""

    def test_run_calls_in_order(self, chain):
        """All steps succeed and calls happen in the documented order."""
        workflow = SwapDepositWorkflow(make_config(), contract_util=chain.util)

        result = workflow.run()

        assert chain.transaction_names == ["approve", "getPool", "exactInputSingle", "approve", "deposit"]
        assert workflow.completed_steps == list(WorkflowStep)
        assert workflow.last_completed_step is WorkflowStep.DEPOSIT
        assert len(result.transactions) == 4
        assert result.pool.address == POOL

        summary = result.to_dict()
        assert summary["pool"] == POOL
        assert summary["amount_in"] == 100_000_000
        assert summary["deposit_amount"] == 50 * 10**18
        assert [tx["description"] for tx in summary["transactions"]][1] == "exactInputSingle"

    def test_run_amounts_and_addresses(self, chain):
        """Approvals, swap and deposit carry the configured addresses and amounts."""
        config = make_config()
        workflow = SwapDepositWorkflow(config, contract_util=chain.util)

        before = int(time.time())
        result = workflow.run()
        after = int(time.time())

        swap_approval, deposit_approval = chain.args_of("approve")
        assert swap_approval == (config.contracts.router_address, 100_000_000)
        assert deposit_approval == (config.contracts.lending_pool_address, 50 * 10**18)

        assert chain.args_of("getPool") == [(USDC, DAI, 3000)]

        (struct,), = chain.args_of("exactInputSingle")
        assert struct["amountIn"] == 100_000_000
        assert struct["amountOutMinimum"] == 0
        assert struct["recipient"] == SIGNER
        assert before + 1200 <= struct["deadline"] <= after + 1200
        assert result.swap_params.amount_in == 100_000_000

        assert chain.args_of("deposit") == [(DAI, 50 * 10**18, SIGNER, 0)]
        assert result.deposit_amount == 50 * 10**18

    def test_deposit_on_behalf_of(self, chain):
        workflow = SwapDepositWorkflow(make_config(on_behalf_of=BENEFICIARY), contract_util=chain.util)

        workflow.run()

        assert chain.args_of("deposit") == [(DAI, 50 * 10**18, BENEFICIARY, 0)]

    def test_decimals_read_on_chain(self, chain):
        """Without configured decimals the token is queried once."""
        workflow = SwapDepositWorkflow(make_config(token_in_decimals=None), contract_util=chain.util)

        workflow.run()

        assert chain.names[0] == "decimals"
        assert chain.args_of("approve")[0][1] == 100_000_000

    def test_swap_output_deposit(self, chain):
        """Without a deposit amount only the balance gained from the swap is deposited."""
        workflow = SwapDepositWorkflow(make_config(deposit_amount=None), contract_util=chain.util)

        result = workflow.run()

        assert chain.args_of("balanceOf") == [(SIGNER,), (SIGNER,)]
        swap_index = chain.names.index("exactInputSingle")
        balance_reads = [i for i, name in enumerate(chain.names) if name == "balanceOf"]
        assert balance_reads[0] < swap_index < balance_reads[1]
        assert chain.args_of("deposit") == [(DAI, 99 * 10**18, SIGNER, 0)]
        assert result.deposit_amount == 99 * 10**18

    def test_swap_output_deposit_nothing_received(self, chain):
        """If the signer's balance did not grow, nothing is deposited."""
        chain.balances = [5 * 10**18, 5 * 10**18]
        workflow = SwapDepositWorkflow(make_config(deposit_amount=None), contract_util=chain.util)

        with pytest.raises(WorkflowAbortedError) as exc_info:
            workflow.run()

        assert exc_info.value.step is WorkflowStep.DEPOSIT
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert chain.transaction_names == ["approve", "getPool", "exactInputSingle"]

    def test_missing_pool_stops_before_swap(self):
        """A zero pool address aborts the run before the swap is reached."""
        chain = FakeChain(pool_address=ZERO_ADDRESS)
        workflow = SwapDepositWorkflow(make_config(), contract_util=chain.util)

        with pytest.raises(WorkflowAbortedError) as exc_info:
            workflow.run()

        assert exc_info.value.step is WorkflowStep.LOCATE_POOL
        assert exc_info.value.completed_steps == [WorkflowStep.APPROVE]
        assert isinstance(exc_info.value.__cause__, PoolNotFoundError)
        assert "exactInputSingle" not in chain.names
        assert chain.transaction_names == ["approve", "getPool"]

    def test_swap_revert_skips_deposit(self, chain):
        """If the swap reverts, the deposit step is never invoked."""
        swap = chain.contracts["SwapRouter"].functions.exactInputSingle
        build_swap = swap.side_effect

        def reverting_swap(*args):
            fn = build_swap(*args)
            fn.transact.side_effect = ContractLogicError("execution reverted: Too little received")
            return fn

        swap.side_effect = reverting_swap
        workflow = SwapDepositWorkflow(make_config(), contract_util=chain.util)

        with pytest.raises(WorkflowAbortedError) as exc_info:
            workflow.run()

        assert exc_info.value.step is WorkflowStep.SWAP
        assert workflow.last_completed_step is WorkflowStep.BUILD_PARAMS
        assert isinstance(exc_info.value.__cause__, ContractLogicError)
        assert "deposit" not in chain.names
        assert chain.transaction_names == ["approve", "getPool", "exactInputSingle"]

    def test_mined_revert_skips_deposit(self, chain):
        """A swap mined with status 0 also stops the run."""
        chain.util.w3.eth.wait_for_transaction_receipt.side_effect = [
            {'status': 1, 'blockNumber': 100},
            {'status': 0, 'blockNumber': 101},
        ]
        workflow = SwapDepositWorkflow(make_config(), contract_util=chain.util)

        with pytest.raises(WorkflowAbortedError) as exc_info:
            workflow.run()

        assert exc_info.value.step is WorkflowStep.SWAP
        assert isinstance(exc_info.value.__cause__, TransactionRevertedError)
        assert "deposit" not in chain.names

    def test_not_connected(self, chain):
        chain.util.is_connected.return_value = False

        with pytest.raises(ConnectionError, match="Failed to connect"):
            SwapDepositWorkflow(make_config(), contract_util=chain.util)

    def test_requires_signing_account(self, chain):
        chain.util.account_address = None

        with pytest.raises(ValueError, match="signing account"):
            SwapDepositWorkflow(make_config(), contract_util=chain.util)

    def test_chain_id_recorded(self, chain):
        chain.util.w3.eth.chain_id = 11155111

        workflow = SwapDepositWorkflow(make_config(), contract_util=chain.util)

        assert workflow.config.network.chain_id == 11155111

    def test_from_env(self, chain):
        """from_env loads the config and builds the contract utility from it."""
        env = {
            "RPC_URL": "http://localhost:8545",
            "PRIVATE_KEY": "0x" + "1" * 64,
            "TOKEN_IN_ADDRESS": USDC,
            "TOKEN_OUT_ADDRESS": DAI,
            "SWAP_AMOUNT": "100",
        }
        with patch.dict("os.environ", env, clear=True), \
                patch("swap_deposit.workflow.ContractUtility", return_value=chain.util) as mock_util:
            workflow = SwapDepositWorkflow.from_env()

        mock_util.assert_called_once_with(
            "http://localhost:8545", "0x" + "1" * 64, request_timeout=30
        )
        assert workflow.account == SIGNER
