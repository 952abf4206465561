"""Conversions between indivisible integer amounts and display strings."""

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext

from .builder import PreconditionError
from .gas import NEAR_DECIMALS

MAX_DECIMALS = 36
TGAS_DECIMALS = 12
NEAR_SYMBOL = "Ⓝ"


def format_amount(amount: int, decimals: int = NEAR_DECIMALS) -> str:
    """Render ``amount / 10**decimals`` exactly, with thousands separators."""

    _check_decimals(decimals)
    if amount < 0:
        raise PreconditionError("Amounts must be non-negative.")
    return _format_scaled(amount, decimals, group=True)


def format_near(amount: int) -> str:
    return f"{format_amount(amount, NEAR_DECIMALS)}{NEAR_SYMBOL}"


def format_gas(gas: int) -> str:
    """Gas in TGas, e.g. ``250`` or ``0.5``."""

    return _format_scaled(gas, TGAS_DECIMALS, group=False)


def parse_amount(text: str, decimals: int = NEAR_DECIMALS, truncate: bool = False) -> int:
    """Convert a human decimal string to indivisible units without floats.

    More fractional digits than ``decimals`` are rejected unless ``truncate``
    is set, in which case the excess is dropped.
    """

    _check_decimals(decimals)
    try:
        value = Decimal(str(text).replace(",", "").strip())
    except InvalidOperation as exc:
        raise PreconditionError(f"Invalid amount: {text!r}") from exc
    if not value.is_finite() or value < 0:
        raise PreconditionError(f"Invalid amount: {text!r}")

    with localcontext() as ctx:
        ctx.prec = 100
        scaled = value.scaleb(decimals)
        whole = scaled.to_integral_value(rounding=ROUND_DOWN)
        if whole != scaled and not truncate:
            raise PreconditionError(
                f"Amount {text} has more than {decimals} fractional digits."
            )
        return int(whole)


def suggest_counter_amount(amount: str, price_from: str, price_to: str) -> float:
    """Price-derived counterpart of ``amount`` for display only.

    Anything submitted must be converted back through ``parse_amount``.
    """

    to_price = float(price_to)
    if to_price <= 0:
        raise PreconditionError("Counter-asset price must be positive.")
    return float(amount) * float(price_from) / to_price


def _check_decimals(decimals: int) -> None:
    if not 0 <= decimals <= MAX_DECIMALS:
        raise PreconditionError(f"Decimals must be within 0..{MAX_DECIMALS}.")


def _format_scaled(amount: int, decimals: int, group: bool) -> str:
    whole, fraction = divmod(amount, 10**decimals)
    whole_text = f"{whole:,}" if group else str(whole)
    if decimals == 0 or fraction == 0:
        return whole_text
    fraction_text = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{whole_text}.{fraction_text}"
