"""Campaign funding progress and fiat value display.

- Percent funded is computed in integers, so 18 decimal amounts
  never overflow or drift

- Fiat values are best effort display strings. A failed conversion
  never raises, but degrades to a fixed fallback
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional

from crowdfunding.fixed_point import TOKEN_DECIMALS, to_decimal
from crowdfunding.oracle import OraclePrice, PriceReading, resolve_usd_price
from crowdfunding.pending import is_pending
from crowdfunding.types import BaseUnitAmount, Percent, USDollarAmount
from crowdfunding.utils.format import format_value


logger = logging.getLogger(__name__)


#: Shown instead of a fiat value when the price or the amount is not available yet.
#:
#: Must be rendered differently from ``$0.00``.
UNAVAILABLE = "$...."

#: Shown when the conversion unexpectedly fails
FALLBACK_VALUE = "$0.00"


@dataclass(slots=True, frozen=True)
class FundingSnapshot:
    """Goal and balance read at the same poll.

    Either value may be ``None`` while still loading.
    """

    #: Campaign goal in base units. Never changes.
    goal: Optional[BaseUnitAmount]

    #: Campaign contract balance in base units
    balance: Optional[BaseUnitAmount]

    def get_progress(self) -> Percent:
        return calculate_progress(self.goal, self.balance)

    def is_loading(self) -> bool:
        return is_pending(self.goal) or is_pending(self.balance)


def calculate_progress(goal: Optional[BaseUnitAmount], balance: Optional[BaseUnitAmount]) -> Percent:
    """Calculate funded percent.

    - Missing or zero goal gives 0, we never divide by zero

    - Overfunded campaigns are capped to 100

    :return:
        Integer percent 0...100, rounded down
    """

    if is_pending(goal) or is_pending(balance) or not goal:
        return 0

    assert type(goal) == int and goal > 0, f"Bad goal {goal}"
    assert type(balance) == int and balance >= 0, f"Bad balance {balance}"

    return min(balance * 100 // goal, 100)


def format_fiat_value(
    amount: Optional[BaseUnitAmount],
    price: PriceReading | OraclePrice | USDollarAmount | None,
    decimals: int = TOKEN_DECIMALS,
) -> str:
    """Convert a token amount to a US dollar display string.

    .. code-block:: python

        assert format_fiat_value(50_000_000_000_000_000, 2000.0) == "$100.00"

    :param amount:
        Token amount in base units, ``None`` if still loading

    :param price:
        US dollar price of one token

    :param decimals:
        Token decimals

    :return:
        ``$1,234.56`` style string,
        or :py:data:`UNAVAILABLE` if amount or price is not there,
        or :py:data:`FALLBACK_VALUE` if the conversion failed.
    """

    if not amount or is_pending(amount):
        return UNAVAILABLE

    try:
        usd_price = resolve_usd_price(price)
        if usd_price is None:
            return UNAVAILABLE

        token_amount = float(to_decimal(amount, decimals))
        usd_value = token_amount * usd_price
        if not math.isfinite(usd_value):
            raise ValueError(f"Got non-finite value {usd_value}")
        return format_value(usd_value)
    except (ValueError, TypeError, ArithmeticError, AssertionError) as e:
        logger.warning(f"Could not format {amount} at price {price} to USD: {e}")
        return FALLBACK_VALUE
