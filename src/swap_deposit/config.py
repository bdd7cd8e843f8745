#!/usr/bin/env python3
"""Configuration management for the swap-deposit workflow.

This module provides type-safe configuration dataclasses with validation.
Configuration is loaded from environment variables with sensible defaults
where appropriate.
"""

import logging
import os
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import ClassVar
from urllib.parse import urlparse

from eth_account import Account
from web3 import Web3

# Get logger for this module
logger = logging.getLogger(__name__)

# Ethereum mainnet deployments
DEFAULT_FACTORY_ADDRESS = "0x1F98431c8aD98523631AE4a59f267346ea31F984"
DEFAULT_ROUTER_ADDRESS = "0xE592427A0AEce92De3Edee1F18E0157C05861564"
DEFAULT_LENDING_POOL_ADDRESS = "0x7d2768dE32b0b80b7a3454c06BdAc94A69DDc7A9"


def _checksum(address: str, label: str, env_var: str) -> str:
    """Validate an address and return it in checksum format."""
    if not address:
        raise ValueError(f"{label} is required ({env_var})")
    if not Web3.is_address(address):
        raise ValueError(f"Invalid {label.lower()}: {address}")
    return Web3.to_checksum_address(address)


def _optional_checksum(address: str | None, label: str, env_var: str) -> str | None:
    if address is None:
        return None
    return _checksum(address, label, env_var)


def _parse_decimal(value: str, env_var: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise ValueError(f"{env_var} must be a decimal number, got {value!r}") from None


def _parse_int(value: str, env_var: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{env_var} must be an integer, got {value!r}") from None


def _optional_int(env_var: str) -> int | None:
    if value := os.environ.get(env_var):
        return _parse_int(value, env_var)
    return None


@dataclass(frozen=True, slots=True)
class NetworkConfig:
    """Configuration for the blockchain connection and signer.

    Attributes:
        rpc_url: HTTP(S) JSON-RPC endpoint
        private_key: Signer private key (hex, optional 0x prefix)
        chain_id: Chain ID (fetched from RPC, not configured)
        request_timeout: HTTP request timeout in seconds
    """

    rpc_url: str
    private_key: str
    chain_id: int | None = None
    request_timeout: int = 30

    def __post_init__(self) -> None:
        """Validate network configuration."""
        if not self.rpc_url:
            raise ValueError("RPC URL is required (RPC_URL)")

        parsed = urlparse(self.rpc_url)
        if parsed.scheme not in ('http', 'https'):
            raise ValueError(
                f"Invalid RPC URL scheme: {parsed.scheme}. "
                "Expected http or https"
            )

        if not self.private_key:
            raise ValueError("Private key is required (PRIVATE_KEY)")

        # Basic private key validation (64 hex chars, optionally with 0x prefix)
        key = self.private_key.removeprefix('0x')
        if len(key) != 64:
            raise ValueError(
                f"Invalid private key length. Expected 64 hex characters, got {len(key)}"
            )
        try:
            int(key, 16)
        except ValueError:
            raise ValueError("Invalid private key format. Must be hexadecimal") from None

        if self.request_timeout <= 0:
            raise ValueError(f"Request timeout must be positive, got {self.request_timeout}")
        if self.request_timeout > 120:
            raise ValueError(f"Request timeout too long (max 120s), got {self.request_timeout}")


@dataclass(frozen=True, slots=True)
class ContractsConfig:
    """Addresses of the external protocol contracts.

    Attributes:
        factory_address: Pool factory (getPool)
        router_address: Swap router (exactInputSingle)
        lending_pool_address: Lending pool (deposit)
    """

    factory_address: str = DEFAULT_FACTORY_ADDRESS
    router_address: str = DEFAULT_ROUTER_ADDRESS
    lending_pool_address: str = DEFAULT_LENDING_POOL_ADDRESS

    def __post_init__(self) -> None:
        """Validate and checksum contract addresses."""
        # Use object.__setattr__ since dataclass is frozen
        object.__setattr__(self, 'factory_address', _checksum(
            self.factory_address, "Factory address", "SWAP_FACTORY_ADDRESS"))
        object.__setattr__(self, 'router_address', _checksum(
            self.router_address, "Router address", "SWAP_ROUTER_ADDRESS"))
        object.__setattr__(self, 'lending_pool_address', _checksum(
            self.lending_pool_address, "Lending pool address", "LENDING_POOL_ADDRESS"))


@dataclass(frozen=True, slots=True)
class SwapConfig:
    """Configuration for the swap leg.

    Attributes:
        token_in: Token sold
        token_out: Token bought (and later deposited)
        amount: Amount of token_in in human units
        fee_tier: Pool fee tier
        token_in_decimals: Decimals of token_in; read on-chain when None
        amount_out_minimum: Minimum output in smallest units (0 = no slippage protection)
        deadline_seconds: Deadline window added to the current time
        recipient: Output recipient; the signer when None
    """

    token_in: str
    token_out: str
    amount: Decimal
    fee_tier: int = 3000
    token_in_decimals: int | None = None
    amount_out_minimum: int = 0
    deadline_seconds: int = 1200
    recipient: str | None = None

    # Fee tiers enabled on the Uniswap V3 factory
    SUPPORTED_FEE_TIERS: ClassVar[set[int]] = {100, 500, 3000, 10000}

    def __post_init__(self) -> None:
        """Validate swap configuration."""
        object.__setattr__(self, 'token_in', _checksum(
            self.token_in, "Token in address", "TOKEN_IN_ADDRESS"))
        object.__setattr__(self, 'token_out', _checksum(
            self.token_out, "Token out address", "TOKEN_OUT_ADDRESS"))
        object.__setattr__(self, 'recipient', _optional_checksum(
            self.recipient, "Swap recipient", "SWAP_RECIPIENT"))

        if self.token_in == self.token_out:
            raise ValueError("Token in and token out must differ")

        if not self.amount.is_finite() or self.amount <= 0:
            raise ValueError(f"Swap amount must be positive, got {self.amount}")

        if self.fee_tier not in self.SUPPORTED_FEE_TIERS:
            raise ValueError(
                f"Unsupported fee tier: {self.fee_tier}. "
                f"Supported fee tiers: {', '.join(str(f) for f in sorted(self.SUPPORTED_FEE_TIERS))}"
            )

        if self.token_in_decimals is not None and not 0 <= self.token_in_decimals <= 255:
            raise ValueError(f"Token decimals must be between 0 and 255, got {self.token_in_decimals}")

        if self.amount_out_minimum < 0:
            raise ValueError(f"Minimum output must be non-negative, got {self.amount_out_minimum}")

        if self.deadline_seconds <= 0:
            raise ValueError(f"Deadline window must be positive, got {self.deadline_seconds}")


@dataclass(frozen=True, slots=True)
class DepositConfig:
    """Configuration for the lending-pool deposit leg.

    Attributes:
        amount: Amount of the swapped token to deposit in human units;
            the signer's balance gain from the swap when None
        token_decimals: Decimals of the deposited token; read on-chain when None
        on_behalf_of: Beneficiary of the deposit; the signer when None
        referral_code: Lending-pool referral code
    """

    amount: Decimal | None = None
    token_decimals: int | None = None
    on_behalf_of: str | None = None
    referral_code: int = 0

    def __post_init__(self) -> None:
        """Validate deposit configuration."""
        object.__setattr__(self, 'on_behalf_of', _optional_checksum(
            self.on_behalf_of, "On-behalf-of address", "ON_BEHALF_OF"))

        if self.amount is not None and (not self.amount.is_finite() or self.amount <= 0):
            raise ValueError(f"Deposit amount must be positive, got {self.amount}")

        if self.token_decimals is not None and not 0 <= self.token_decimals <= 255:
            raise ValueError(f"Token decimals must be between 0 and 255, got {self.token_decimals}")

        # referralCode is a uint16
        if not 0 <= self.referral_code <= 0xFFFF:
            raise ValueError(f"Referral code must fit in uint16, got {self.referral_code}")


@dataclass(frozen=True, slots=True)
class TransactionConfig:
    """Settings applied to every submitted transaction."""
    receipt_timeout: int = 120  # seconds to wait for inclusion
    gas_limit: int | None = None  # None lets web3 estimate

    def __post_init__(self) -> None:
        """Validate transaction configuration."""
        if self.receipt_timeout <= 0:
            raise ValueError(f"Receipt timeout must be positive, got {self.receipt_timeout}")
        if self.receipt_timeout > 3600:
            raise ValueError(f"Receipt timeout too long (max 3600s), got {self.receipt_timeout}")

        if self.gas_limit is not None and self.gas_limit <= 21000:
            raise ValueError(f"Gas limit must exceed 21000, got {self.gas_limit}")


@dataclass(frozen=True, slots=True)
class WorkflowConfig:
    """Main configuration for the swap-deposit workflow.

    Attributes:
        network: RPC endpoint and signer
        contracts: External protocol contract addresses
        swap: Swap leg settings
        deposit: Deposit leg settings
        transactions: Per-transaction settings
    """

    network: NetworkConfig
    contracts: ContractsConfig
    swap: SwapConfig
    deposit: DepositConfig
    transactions: TransactionConfig

    def __post_init__(self) -> None:
        """Validate settings that span sections."""
        # Without DEPOSIT_AMOUNT the deposit is the signer's balance gain from the swap
        if self.deposit.amount is None and self.swap.recipient is not None:
            signer = Account.from_key(self.network.private_key).address
            if self.swap.recipient != signer:
                raise ValueError(
                    "DEPOSIT_AMOUNT is required when SWAP_RECIPIENT is not the signer "
                    f"({self.swap.recipient} != {signer})"
                )

    @classmethod
    def from_env(cls) -> "WorkflowConfig":
        """Load configuration from environment variables.

        Returns:
            WorkflowConfig instance with loaded values

        Raises:
            ValueError: If required environment variables are missing or invalid
        """
        network_config = NetworkConfig(
            rpc_url=os.environ.get("RPC_URL", ""),
            private_key=os.environ.get("PRIVATE_KEY", ""),
            request_timeout=_parse_int(os.environ.get("REQUEST_TIMEOUT", "30"), "REQUEST_TIMEOUT")
        )

        contracts_config = ContractsConfig(
            factory_address=os.environ.get("SWAP_FACTORY_ADDRESS", DEFAULT_FACTORY_ADDRESS),
            router_address=os.environ.get("SWAP_ROUTER_ADDRESS", DEFAULT_ROUTER_ADDRESS),
            lending_pool_address=os.environ.get("LENDING_POOL_ADDRESS", DEFAULT_LENDING_POOL_ADDRESS)
        )

        swap_amount = os.environ.get("SWAP_AMOUNT", "")
        if not swap_amount:
            raise ValueError(
                "SWAP_AMOUNT environment variable is required. "
                "This is the amount of the input token to swap, in token units (e.g. 100)"
            )

        swap_config = SwapConfig(
            token_in=os.environ.get("TOKEN_IN_ADDRESS", ""),
            token_out=os.environ.get("TOKEN_OUT_ADDRESS", ""),
            amount=_parse_decimal(swap_amount, "SWAP_AMOUNT"),
            fee_tier=_parse_int(os.environ.get("FEE_TIER", "3000"), "FEE_TIER"),
            token_in_decimals=_optional_int("TOKEN_IN_DECIMALS"),
            amount_out_minimum=_parse_int(os.environ.get("AMOUNT_OUT_MINIMUM", "0"), "AMOUNT_OUT_MINIMUM"),
            deadline_seconds=_parse_int(os.environ.get("DEADLINE_SECONDS", "1200"), "DEADLINE_SECONDS"),
            recipient=os.environ.get("SWAP_RECIPIENT") or None
        )

        deposit_amount = os.environ.get("DEPOSIT_AMOUNT")
        deposit_config = DepositConfig(
            amount=_parse_decimal(deposit_amount, "DEPOSIT_AMOUNT") if deposit_amount else None,
            token_decimals=_optional_int("TOKEN_OUT_DECIMALS"),
            on_behalf_of=os.environ.get("ON_BEHALF_OF") or None,
            referral_code=_parse_int(os.environ.get("REFERRAL_CODE", "0"), "REFERRAL_CODE")
        )

        transaction_config = TransactionConfig(
            receipt_timeout=_parse_int(os.environ.get("RECEIPT_TIMEOUT", "120"), "RECEIPT_TIMEOUT"),
            gas_limit=_optional_int("GAS_LIMIT")
        )

        return cls(
            network=network_config,
            contracts=contracts_config,
            swap=swap_config,
            deposit=deposit_config,
            transactions=transaction_config
        )

    def log_config(self) -> None:
        """Log the configuration in a readable format for debugging."""
        logger.info("=" * 60)
        logger.info("Swap-Deposit Configuration")
        logger.info("=" * 60)

        logger.info("Network:")
        logger.info(f"  RPC URL: {self.network.rpc_url}")
        if self.network.chain_id:
            logger.info(f"  Chain ID: {self.network.chain_id}")
        logger.info("  Private Key: [CONFIGURED]")

        logger.info("Contracts:")
        logger.info(f"  Factory: {self.contracts.factory_address}")
        logger.info(f"  Router: {self.contracts.router_address}")
        logger.info(f"  Lending Pool: {self.contracts.lending_pool_address}")

        logger.info("Swap:")
        logger.info(f"  Token In: {self.swap.token_in}")
        logger.info(f"  Token Out: {self.swap.token_out}")
        logger.info(f"  Amount: {self.swap.amount}")
        logger.info(f"  Fee Tier: {self.swap.fee_tier}")
        logger.info(f"  Minimum Output: {self.swap.amount_out_minimum}")
        logger.info(f"  Deadline Window: {self.swap.deadline_seconds} seconds")
        if self.swap.amount_out_minimum == 0:
            logger.warning("  Slippage protection disabled (AMOUNT_OUT_MINIMUM=0)")

        logger.info("Deposit:")
        logger.info(f"  Amount: {self.deposit.amount if self.deposit.amount is not None else 'swap output'}")
        logger.info(f"  On Behalf Of: {self.deposit.on_behalf_of or 'signer'}")
        logger.info(f"  Referral Code: {self.deposit.referral_code}")

        logger.info("Transactions:")
        logger.info(f"  Receipt Timeout: {self.transactions.receipt_timeout} seconds")
        logger.info(f"  Gas Limit: {self.transactions.gas_limit or 'estimated'}")

        logger.info("=" * 60)

    def with_chain_id(self, chain_id: int) -> "WorkflowConfig":
        """Create a new config with the chain ID set.

        Args:
            chain_id: The chain ID from the connected RPC

        Returns:
            New WorkflowConfig instance with chain_id set
        """
        return replace(self, network=replace(self.network, chain_id=chain_id))
