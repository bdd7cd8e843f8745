"""Exceptions raised by the swap-deposit workflow."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .workflow import WorkflowStep


class SwapDepositError(Exception):
    """Base class for workflow errors."""


class PoolNotFoundError(SwapDepositError):
    """The factory has no pool for the token pair and fee tier."""

    def __init__(self, token_a: str, token_b: str, fee: int) -> None:
        self.token_a = token_a
        self.token_b = token_b
        self.fee = fee
        super().__init__(f"No pool for {token_a}/{token_b} at fee tier {fee}")


class TransactionRevertedError(SwapDepositError):
    """A transaction was mined with a failure status."""

    def __init__(self, description: str, tx_hash: str, receipt: Any = None) -> None:
        self.description = description
        self.tx_hash = tx_hash
        self.receipt = receipt
        status = receipt.get("status") if receipt is not None else None
        super().__init__(f"{description} reverted (tx={tx_hash}, status={status})")


class WorkflowAbortedError(SwapDepositError):
    """The workflow stopped at ``step``; earlier on-chain effects remain in place.

    The underlying failure is available as ``__cause__``.
    """

    def __init__(self, step: "WorkflowStep", completed_steps: list["WorkflowStep"]) -> None:
        self.step = step
        self.completed_steps = list(completed_steps)
        completed = ", ".join(s.value for s in self.completed_steps) or "none"
        super().__init__(f"Workflow aborted at step '{step.value}' (completed: {completed})")
