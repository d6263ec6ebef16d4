"""Money helpers and the delivery fee schedule used by the cart."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0")

DEFAULT_DELIVERY_LOCATION = "perla-marina"

DEFAULT_DELIVERY_FEES: dict[str, Decimal] = {
    "perla-marina": Decimal("0"),
    "cabarete": Decimal("100"),
    "sosua": Decimal("150"),
}


def to_money(value: Decimal | str | int) -> Decimal:
    """Convert a price value to Decimal without passing through float.

    Args:
        value: Decimal, decimal string (e.g. "18.99") or integer

    Returns:
        Decimal value

    Raises:
        ValueError: If the value is a float or not a valid decimal
    """
    if isinstance(value, float):
        raise ValueError("Prices must not be binary floats")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal amount: {value!r}") from e


def round_money(amount: Decimal) -> Decimal:
    """Round an amount half-up to whole cents."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_delivery_fees(raw: str) -> dict[str, Decimal]:
    """Parse a ``location:fee`` list such as ``"perla-marina:0,cabarete:100"``.

    Blank entries are ignored.

    Args:
        raw: Comma separated location:fee pairs

    Returns:
        Mapping of location key to fee

    Raises:
        ValueError: If an entry is malformed or a fee is not a decimal
    """
    fees: dict[str, Decimal] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        location, sep, fee = entry.partition(":")
        if not sep or not location.strip():
            raise ValueError(f"Invalid delivery fee entry: {entry!r}")
        fees[location.strip().lower()] = to_money(fee)
    return fees


def location_label(location: str) -> str:
    """Human readable name for a location key, e.g. ``perla-marina`` -> ``Perla Marina``."""
    return " ".join(part.capitalize() for part in location.replace("_", "-").split("-") if part)
