#!/usr/bin/env python3
"""Liquidity pool lookup.

Resolves the pool for a token pair and fee tier through the factory and
reads its current metadata.
"""

import logging
from typing import TYPE_CHECKING

from web3 import Web3
from web3.contract import Contract

from .errors import PoolNotFoundError
from .models import PoolInfo

if TYPE_CHECKING:
    from .utils.contract_utility import ContractUtility

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "0" * 40


class PoolLocator:
    """Finds pools via the factory's ``getPool``."""

    def __init__(self, contract_util: "ContractUtility", factory_address: str) -> None:
        """
        Initialize the PoolLocator.

        Args:
            contract_util: Utility for contract interactions
            factory_address: Address of the pool factory
        """
        self.contract_util: ContractUtility = contract_util
        self.factory_address: str = Web3.to_checksum_address(factory_address)
        self.factory: Contract = self.contract_util.get_contract("UniswapV3Factory", self.factory_address)

    def get_pool_address(self, token_a: str, token_b: str, fee: int) -> str:
        """
        Return the pool address for the pair, or the zero address if none exists.

        Args:
            token_a: First token of the pair
            token_b: Second token of the pair
            fee: Fee tier

        Returns:
            Pool address as returned by the factory
        """
        return self.factory.functions.getPool(
            Web3.to_checksum_address(token_a),
            Web3.to_checksum_address(token_b),
            fee
        ).call()

    def locate(self, token_a: str, token_b: str, fee: int) -> PoolInfo:
        """
        Look up the pool for a token pair and read its metadata.

        Args:
            token_a: First token of the pair
            token_b: Second token of the pair
            fee: Fee tier

        Returns:
            PoolInfo for the located pool

        Raises:
            PoolNotFoundError: If the factory returns the zero address
        """
        logger.info(f"Looking up pool for {token_a}/{token_b} (fee tier {fee})")
        pool_address = self.get_pool_address(token_a, token_b, fee)

        if not pool_address or pool_address.lower() == ZERO_ADDRESS:
            logger.error(f"✗ No pool deployed for {token_a}/{token_b} at fee tier {fee}")
            raise PoolNotFoundError(token_a, token_b, fee)

        pool: Contract = self.contract_util.get_contract("UniswapV3Pool", pool_address)
        sqrt_price_x96, tick, *_ = pool.functions.slot0().call()

        info = PoolInfo(
            address=Web3.to_checksum_address(pool_address),
            token0=pool.functions.token0().call(),
            token1=pool.functions.token1().call(),
            fee=pool.functions.fee().call(),
            tick_spacing=pool.functions.tickSpacing().call(),
            liquidity=pool.functions.liquidity().call(),
            sqrt_price_x96=sqrt_price_x96,
            tick=tick
        )
        logger.info(f"✓ Located {info}")
        return info
