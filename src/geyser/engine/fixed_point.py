"""Module A: Fixed-point math - Deterministic integer conversions between shares and tokens.

Key Concepts:
- All amounts are unsigned integers bounded by UINT256_MAX
- Conversions floor, so a conversion never rounds in the holder's favour
- An empty pool converts 1:1 (scaled by the initial shares-per-token)
- Subtractions that rounding could underflow are clamped at zero (dust policy)
"""

from ..errors import ArithmeticOverflowError

UINT256_MAX = 2**256 - 1


def check_uint(value: int, name: str = "value") -> int:
    """
    Ensure value is an unsigned 256-bit integer.

    Args:
        value: Integer to check
        name: Name used in the error message

    Returns:
        The value unchanged

    Raises:
        ArithmeticOverflowError: If value is negative or above UINT256_MAX
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise ArithmeticOverflowError(f"FixedPoint: {name} out of uint256 range ({value})")
    return value


def mul_div(a: int, b: int, c: int) -> int:
    """
    Compute floor(a * b / c) with overflow checks.

    Args:
        a: Multiplicand
        b: Multiplier
        c: Divisor

    Returns:
        Floored quotient

    Raises:
        ZeroDivisionError: If c is zero
        ArithmeticOverflowError: If an operand or the product leaves uint256
    """
    check_uint(a, "a")
    check_uint(b, "b")
    check_uint(c, "c")
    if c == 0:
        raise ZeroDivisionError("FixedPoint: division by zero")
    return check_uint(a * b, "product") // c


def saturating_sub(a: int, b: int) -> int:
    """Subtract b from a, clamping at zero instead of underflowing."""
    return a - b if a > b else 0


def shares_for_tokens(
    amount: int,
    total_shares: int,
    total_tokens: int,
    initial_shares_per_token: int = 1,
) -> int:
    """
    Convert a token amount into pool shares at the current exchange rate.

    Formula: shares = floor(total_shares * amount / total_tokens)

    Args:
        amount: Tokens being deposited
        total_shares: Shares outstanding in the pool
        total_tokens: Tokens backing those shares
        initial_shares_per_token: Rate used when the pool is empty

    Returns:
        Shares to mint
    """
    if total_shares == 0 or total_tokens == 0:
        return check_uint(amount * initial_shares_per_token, "shares")
    return mul_div(total_shares, amount, total_tokens)


def tokens_for_shares(shares: int, total_tokens: int, total_shares: int) -> int:
    """
    Convert pool shares into their token value.

    Formula: tokens = floor(total_tokens * shares / total_shares)
    """
    if total_shares == 0:
        return 0
    return mul_div(total_tokens, shares, total_shares)
