"""Chainlink price feed readings.

Chainlink feeds return prices as an integer answer with fixed decimals,
8 decimals for USD feeds. ``latestRoundData()`` returns a tuple::

    (roundId, answer, startedAt, updatedAt, answeredInRound)

We turn this to a float US dollar price for display
and for the single fiat to token conversion in :py:mod:`crowdfunding.transaction`.
"""
import datetime
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from crowdfunding.pending import is_pending
from crowdfunding.types import USDollarAmount


logger = logging.getLogger(__name__)


#: Chainlink USD feeds use 8 decimals
ORACLE_DECIMALS = 8


@dataclass(slots=True, frozen=True)
class OraclePrice:
    """One ``latestRoundData()`` reading."""

    #: The answer as raw integer.
    #:
    #: Signed. Chainlink may report negative or zero answers
    #: in the case of a broken feed and we pass them through.
    mantissa: int

    #: 8 for USD feeds
    decimals: int = ORACLE_DECIMALS

    #: Chainlink round id
    round_id: Optional[int] = None

    #: UNIX timestamp when the answer was last updated
    updated_at: Optional[int] = None

    def __post_init__(self):
        assert type(self.mantissa) == int, f"Oracle answer must be int, got {type(self.mantissa)}"
        assert type(self.decimals) == int and self.decimals > 0, f"Bad oracle decimals: {self.decimals}"

    @staticmethod
    def from_round_data(round_data: Sequence, decimals: int = ORACLE_DECIMALS) -> "OraclePrice":
        """Decode the raw ``latestRoundData()`` tuple.

        Only the answer at index 1 is required, the other fields are kept if present.
        """
        assert len(round_data) >= 2, f"Round data must have at least roundId and answer, got {round_data}"
        round_id = round_data[0]
        updated_at = round_data[3] if len(round_data) > 3 else None
        return OraclePrice(
            mantissa=int(round_data[1]),
            decimals=decimals,
            round_id=round_id,
            updated_at=updated_at,
        )

    def get_price(self) -> USDollarAmount:
        """Answer as a float, e.g. 2000.0 for ``200000000000``."""
        return self.mantissa / (10 ** self.decimals)

    def get_updated_at(self) -> Optional[datetime.datetime]:
        """When the feed was last updated, as naive UTC."""
        if self.updated_at is None:
            return None
        return datetime.datetime.fromtimestamp(self.updated_at, datetime.timezone.utc).replace(tzinfo=None)

    def get_age(self, now: Optional[datetime.datetime] = None) -> Optional[datetime.timedelta]:
        """How old this answer is.

        :param now:
            Naive UTC timestamp, default to the current time
        """
        updated_at = self.get_updated_at()
        if updated_at is None:
            return None
        if now is None:
            now = datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)
        return now - updated_at


@dataclass(slots=True, frozen=True)
class PriceReading:
    """Price as presented to the user.

    Either loading, or a float price.
    """

    #: US dollar price of one token.
    #:
    #: 0 while loading.
    price: USDollarAmount

    #: No reading has arrived yet
    is_loading: bool

    #: The reading this price was derived from
    source: Optional[OraclePrice] = None

    def is_available(self) -> bool:
        """Can this price be used for conversions.

        Loading, zero and negative prices are all unavailable.
        """
        return not self.is_loading and self.price > 0

    @staticmethod
    def loading() -> "PriceReading":
        return PriceReading(price=0, is_loading=True)


def current_price(raw_reading: Any, decimals: int = ORACLE_DECIMALS) -> PriceReading:
    """Normalise an oracle reading to a display price.

    :param raw_reading:
        The ``latestRoundData()`` tuple, an :py:class:`OraclePrice`,
        or ``None`` / :py:data:`crowdfunding.pending.PENDING` if the read has not completed.

    :param decimals:
        Feed decimals when decoding a raw tuple

    :return:
        Loading reading with price 0, or mantissa / 10**decimals.
        Negative answers are passed through uninterpreted.
    """

    if is_pending(raw_reading):
        return PriceReading.loading()

    if isinstance(raw_reading, OraclePrice):
        oracle_price = raw_reading
    else:
        oracle_price = OraclePrice.from_round_data(raw_reading, decimals=decimals)

    price = oracle_price.get_price()
    if price <= 0:
        logger.warning(f"Oracle returned non-positive answer {oracle_price.mantissa}, round {oracle_price.round_id}")

    return PriceReading(price=price, is_loading=False, source=oracle_price)


def resolve_usd_price(price: PriceReading | OraclePrice | USDollarAmount | None) -> Optional[USDollarAmount]:
    """Get a usable float price out of any price presentation.

    :param price:
        A :py:class:`PriceReading`, :py:class:`OraclePrice`,
        bare float price, or ``None`` / ``PENDING`` when loading.

    :return:
        Positive float price, or ``None`` if the price is loading, zero, negative or NaN.
    """
    if isinstance(price, PriceReading):
        reading = price
    elif isinstance(price, OraclePrice) or is_pending(price):
        reading = current_price(price)
    else:
        reading = PriceReading(price=float(price), is_loading=False)

    if not reading.is_available():
        return None

    return reading.price
