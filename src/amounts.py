"""Helpers for Decimal amounts: parsing, sign checks, exact arithmetic and output formatting.

Amounts are accumulated as exact Decimals; rounding only happens when an
amount is rendered for output.
"""

from decimal import Decimal, Inexact, InvalidOperation, ROUND_HALF_EVEN, getcontext, localcontext

ZERO = Decimal("0")
DEFAULT_PRECISION = 4


def parse_amount(raw: str) -> Decimal:
    """Parse a textual amount into a finite Decimal.

    Raises:
        ValueError: If the text is not a number, is NaN/Infinity, or its
            exponent is outside the range the decimal context can represent.
    """
    try:
        amount = Decimal(raw)
    except InvalidOperation as e:
        raise ValueError(f"invalid amount {raw!r}") from e
    if not amount.is_finite():
        raise ValueError(f"non-finite amount {raw!r}")
    context = getcontext()
    if amount and not context.Emin <= amount.adjusted() <= context.Emax:
        raise ValueError(f"amount out of range {raw!r}")
    return amount


def is_negative(amount: Decimal) -> bool:
    # -0 compares equal to 0 and is accepted
    return amount < ZERO


def exact_add(a: Decimal, b: Decimal) -> Decimal:
    """Add two amounts without rounding.

    The working precision is sized to hold every digit of the result.

    Raises:
        ArithmeticError: If the result overflows the context exponent range.
    """
    lowest_exponent = min(a.as_tuple().exponent, b.as_tuple().exponent)
    needed = max(a.adjusted(), b.adjusted()) - lowest_exponent + 2
    with localcontext() as ctx:
        ctx.prec = max(needed, ctx.prec)
        ctx.traps[Inexact] = True
        return a + b


def exact_subtract(a: Decimal, b: Decimal) -> Decimal:
    return exact_add(a, b.copy_negate())


def format_amount(value: Decimal, precision: int = DEFAULT_PRECISION) -> str:
    """Format decimal with up to `precision` decimal places, removing trailing zeros."""
    with localcontext() as ctx:
        ctx.prec = max(value.adjusted(), 0) + precision + 2
        rounded = value.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_EVEN)
        if rounded == ZERO:
            return "0"
        normalized = rounded.normalize()
    return f"{normalized:f}"
