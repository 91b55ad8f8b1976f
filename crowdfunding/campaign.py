"""Campaign read model.

Campaigns are presented by

- :py:class:`CampaignSummary` for one campaign page

- :py:class:`CampaignListing` for the factory campaign list

- :py:class:`Tier` for funding levels

To read them from a chain see :py:mod:`crowdfunding.reader`.
"""
import datetime
import enum
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

import pandas as pd
from dataclasses_json import dataclass_json

from crowdfunding.fixed_point import TOKEN_DECIMALS, to_decimal
from crowdfunding.oracle import OraclePrice, PriceReading
from crowdfunding.progress import FundingSnapshot, calculate_progress, format_fiat_value
from crowdfunding.types import BaseUnitAmount, NonChecksummedAddress, Percent, USDollarAmount


class CampaignState(enum.Enum):
    """Campaign lifecycle as reported by ``state()``."""

    active = 0

    successful = 1

    failed = 2

    #: The contract returned something we do not know
    unknown = -1

    @staticmethod
    def from_raw(value: Optional[int]) -> "CampaignState":
        """Map the raw ``uint8`` to the enum.

        Never fails, unknown values give :py:attr:`unknown`.
        """
        if value is None or type(value) == bool:
            return CampaignState.unknown
        try:
            state = CampaignState(int(value))
        except (ValueError, TypeError):
            return CampaignState.unknown
        return state

    def get_label(self) -> str:
        return self.name.capitalize()


@dataclass_json
@dataclass(frozen=True)
class Tier:
    """A named funding level."""

    #: Like "Gold"
    name: str

    #: How much backing at this tier costs, in wei
    amount: BaseUnitAmount

    #: How many times this tier has been funded
    backers: int

    #: Position in ``getTiers()``.
    #:
    #: Not stable, shifts when an earlier tier is removed.
    index: int

    def __post_init__(self):
        assert type(self.amount) == int and self.amount >= 0, f"Bad tier amount {self.amount}"
        assert type(self.backers) == int and self.backers >= 0, f"Bad backer count {self.backers}"
        assert type(self.index) == int and self.index >= 0, f"Bad tier index {self.index}"

    def __repr__(self):
        return f"<Tier #{self.index} {self.name} {to_decimal(self.amount)} ETH, {self.backers} backers>"

    @staticmethod
    def from_contract_tuple(raw: Sequence, index: int) -> "Tier":
        """Decode ``(string name, uint256 amount, uint256 backers)``."""
        name, amount, backers = raw
        return Tier(name=name, amount=int(amount), backers=int(backers), index=index)

    def get_decimal_amount(self, decimals: int = TOKEN_DECIMALS) -> str:
        return to_decimal(self.amount, decimals)

    def get_fiat_value(self, price: PriceReading | OraclePrice | USDollarAmount | None) -> str:
        return format_fiat_value(self.amount, price)


@dataclass_json
@dataclass(frozen=True)
class CampaignListing:
    """One entry of the factory ``getAllCampaigns()``."""

    address: NonChecksummedAddress

    owner: NonChecksummedAddress

    name: str

    #: Not all factory versions store this
    created_at: Optional[datetime.datetime] = None

    @staticmethod
    def from_contract_tuple(raw: Sequence) -> "CampaignListing":
        assert len(raw) >= 3, f"Bad campaign listing {raw}"
        created_at = None
        if len(raw) > 3 and raw[3]:
            created_at = datetime.datetime.fromtimestamp(int(raw[3]), datetime.timezone.utc).replace(tzinfo=None)
        return CampaignListing(
            address=raw[0].lower(),
            owner=raw[1].lower(),
            name=raw[2],
            created_at=created_at,
        )


@dataclass
class CampaignSummary:
    """Everything a campaign page shows."""

    #: Campaign contract
    address: NonChecksummedAddress

    name: str

    description: str

    #: Naive UTC
    deadline: datetime.datetime

    #: Goal in wei
    goal: BaseUnitAmount

    #: Contract balance in wei
    balance: BaseUnitAmount

    #: Campaign owner, can add and remove tiers
    owner: NonChecksummedAddress

    state: CampaignState

    tiers: List[Tier] = field(default_factory=list)

    def __post_init__(self):
        assert self.deadline.tzinfo is None, "Don't use timezone aware timestamps - everything must be naive UTC"

    def has_deadline_passed(self, now: Optional[datetime.datetime] = None) -> bool:
        if now is None:
            now = datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)
        return self.deadline < now

    def get_snapshot(self) -> FundingSnapshot:
        return FundingSnapshot(goal=self.goal, balance=self.balance)

    def get_progress(self) -> Percent:
        return calculate_progress(self.goal, self.balance)

    def is_fully_funded(self) -> bool:
        return self.get_progress() >= 100

    def is_owner(self, address: Optional[str]) -> bool:
        """Is the connected wallet the campaign owner.

        Only the owner gets to edit tiers.
        """
        if not address:
            return False
        return address.lower() == self.owner.lower()


def create_tier_table(
    tiers: Iterable[Tier],
    price: PriceReading | OraclePrice | USDollarAmount | None,
) -> pd.DataFrame:
    """Create a human readable tier table.

    Amounts are decimal strings, not floats,
    because wei values do not fit in numpy integers.

    :return:
        DataFrame indexed by tier index with columns
        name, amount, fiat_value, backers
    """
    rows = [
        {
            "index": t.index,
            "name": t.name,
            "amount": t.get_decimal_amount(),
            "fiat_value": t.get_fiat_value(price),
            "backers": t.backers,
        }
        for t in tiers
    ]
    df = pd.DataFrame(rows, columns=["index", "name", "amount", "fiat_value", "backers"])
    return df.set_index("index")
