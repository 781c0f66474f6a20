"""Integer arithmetic utilities for cents-based amounts.

All payment amounts, leg costs and balances are held as int cents.
Decimal input is parsed once, at the edge of the ledger, and never stored as float.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.rl_common.errors import ValidationError

_CENT = Decimal("0.01")

# payments.amount_cents is BIGINT
MAX_ABS_CENTS = 2**63 - 1


def parse_amount_cents(value: object) -> int:
    """Parse a signed monetary amount into cents.

    Accepts int, float, Decimal or numeric strings ("10", "-2.5", "7,25").
    Fractions of a cent are rounded half-up. Anything non-finite or
    non-numeric raises ValidationError.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"amount must be a number, got {value!r}")
    if isinstance(value, str):
        raw = value.strip().replace(",", ".")
        if not raw:
            raise ValidationError("amount must not be empty")
    elif isinstance(value, (int, float, Decimal)):
        raw = str(value)
    else:
        raise ValidationError(f"amount must be a number, got {type(value).__name__}")

    try:
        amount = Decimal(raw)
    except InvalidOperation:
        raise ValidationError(f"amount is not a number: {value!r}") from None
    if not amount.is_finite():
        raise ValidationError(f"amount must be finite, got {value!r}")

    try:
        cents = int((amount * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise ValidationError(f"amount out of range: {value!r}") from None
    if abs(cents) > MAX_ABS_CENTS:
        raise ValidationError(f"amount out of range: {value!r}")
    return cents


def cents_to_decimal(cents: int) -> Decimal:
    """Convert cents to a 2-place Decimal: 1050 -> Decimal('10.50')."""
    return (Decimal(cents) / 100).quantize(_CENT)


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 1050 -> '10.50€', -700 -> '-7.00€'."""
    if cents < 0:
        abs_cents = -cents
        return f"-{abs_cents // 100:,}.{abs_cents % 100:02d}€"
    return f"{cents // 100:,}.{cents % 100:02d}€"
