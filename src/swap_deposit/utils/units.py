"""Conversion between human-readable token amounts and smallest units."""

from decimal import Decimal, Inexact, InvalidOperation, localcontext

# ERC20 decimals() is a uint8
MAX_DECIMALS = 255

# Amounts are passed on-chain as uint256
MAX_UINT256 = 2**256 - 1


def _validate_decimals(decimals: int) -> None:
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ValueError(f"Token decimals must be between 0 and {MAX_DECIMALS}, got {decimals}")


def to_base_units(amount: str | int | Decimal, decimals: int) -> int:
    """Convert a human-readable amount to the token's smallest unit.

    ``to_base_units("100", 6) == 100_000_000``

    Args:
        amount: Decimal amount as string, int or Decimal
        decimals: Token decimals

    Returns:
        Integer amount in smallest units

    Raises:
        ValueError: If the amount is negative, not a finite number, or has
            more fractional digits than the token supports, or does not fit
            in a uint256
    """
    _validate_decimals(decimals)
    if isinstance(amount, float):
        # float repr loses precision silently
        raise ValueError("Amounts must be given as str, int or Decimal, not float")

    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount!r}") from None

    if not value.is_finite():
        raise ValueError(f"Amount must be finite, got {amount!r}")
    if value < 0:
        raise ValueError(f"Amount must be non-negative, got {amount}")

    with localcontext() as ctx:
        ctx.prec = MAX_DECIMALS + 100
        ctx.traps[Inexact] = True
        try:
            scaled = value.scaleb(decimals)
        except Inexact:
            raise ValueError(f"Amount {amount} has too many significant digits") from None
        if scaled != scaled.to_integral_value():
            raise ValueError(f"Amount {amount} has more than {decimals} decimal places")
        if scaled > MAX_UINT256:
            raise ValueError(f"Amount {amount} does not fit in a uint256")
        return int(scaled)


def from_base_units(raw: int, decimals: int) -> Decimal:
    """Convert an amount in smallest units back to a Decimal."""
    _validate_decimals(decimals)
    with localcontext() as ctx:
        ctx.prec = MAX_DECIMALS + 100
        return Decimal(int(raw)).scaleb(-decimals)
