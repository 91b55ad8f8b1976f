"""Read campaign and price feed state from a chain.

The arithmetic in this package never does I/O itself.
The application polls the contracts through a :py:class:`ContractReader`
and feeds the values to :py:mod:`crowdfunding.progress` and :py:mod:`crowdfunding.transaction`.

- :py:class:`Web3ContractReader` reads a live campaign contract

- :py:class:`crowdfunding.testing.mock_reader.MockContractReader` serves canned values in tests
"""
import datetime
import enum
import logging
from typing import Any, List, Optional, Protocol

from eth_utils import to_checksum_address
from web3 import Web3

from crowdfunding.campaign import CampaignListing, CampaignState, CampaignSummary, Tier
from crowdfunding.oracle import OraclePrice
from crowdfunding.pending import PENDING, is_pending
from crowdfunding.types import NonChecksummedAddress


logger = logging.getLogger(__name__)


def _view(name: str, outputs: list) -> dict:
    return {
        "inputs": [],
        "name": name,
        "outputs": outputs,
        "stateMutability": "view",
        "type": "function",
    }


#: View functions of the campaign contract we use
CAMPAIGN_ABI = [
    _view("name", [{"name": "", "type": "string"}]),
    _view("description", [{"name": "", "type": "string"}]),
    _view("deadline", [{"name": "", "type": "uint256"}]),
    _view("goal", [{"name": "", "type": "uint256"}]),
    _view("getContractBalance", [{"name": "", "type": "uint256"}]),
    _view("owner", [{"name": "", "type": "address"}]),
    _view("state", [{"name": "", "type": "uint8"}]),
    _view("getTiers", [{
        "name": "",
        "type": "tuple[]",
        "components": [
            {"name": "name", "type": "string"},
            {"name": "amount", "type": "uint256"},
            {"name": "backers", "type": "uint256"},
        ],
    }]),
]

#: Chainlink AggregatorV3Interface
PRICE_FEED_ABI = [
    _view("latestRoundData", [
        {"name": "roundId", "type": "uint80"},
        {"name": "answer", "type": "int256"},
        {"name": "startedAt", "type": "uint256"},
        {"name": "updatedAt", "type": "uint256"},
        {"name": "answeredInRound", "type": "uint80"},
    ]),
    _view("decimals", [{"name": "", "type": "uint8"}]),
]


def _campaign_listing_abi(with_creation_time: bool) -> list:
    components = [
        {"name": "campaignAddress", "type": "address"},
        {"name": "owner", "type": "address"},
        {"name": "name", "type": "string"},
    ]
    if with_creation_time:
        components.append({"name": "creationTime", "type": "uint256"})
    return [
        _view("getAllCampaigns", [{
            "name": "",
            "type": "tuple[]",
            "components": components,
        }]),
    ]


#: Campaign factory returning ``(campaignAddress, owner, name)[]``
FACTORY_ABI = _campaign_listing_abi(with_creation_time=False)

#: Campaign factory versions that also store ``creationTime``
FACTORY_ABI_WITH_CREATION_TIME = _campaign_listing_abi(with_creation_time=True)


class CampaignField(enum.Enum):
    """Readable campaign fields.

    The value is the view function name.
    """

    campaign_name = "name"
    description = "description"
    deadline = "deadline"
    goal = "goal"
    balance = "getContractBalance"
    tiers = "getTiers"
    owner = "owner"
    state = "state"


class ContractReader(Protocol):
    """Read one field of one campaign contract."""

    def read(self, field: CampaignField) -> Any:
        """Get the raw value as returned by the contract.

        :return:
            The value, or :py:data:`crowdfunding.pending.PENDING`
            if it is not available yet.
        """


class Web3ContractReader:
    """Read a campaign contract over JSON-RPC.

    Each :py:meth:`read` is a blocking ``eth_call``.
    Network errors are raised to the caller.
    """

    def __init__(self, web3: Web3, address: str):
        self.web3 = web3
        self.address = address.lower()
        self.contract = web3.eth.contract(address=to_checksum_address(address), abi=CAMPAIGN_ABI)

    def __repr__(self):
        return f"<Web3ContractReader {self.address}>"

    def read(self, field: CampaignField) -> Any:
        func = getattr(self.contract.functions, field.value)
        value = func().call()
        logger.debug(f"Read {self.address}.{field.value}(): {value}")
        return value


def read_oracle_round(web3: Web3, feed_address: str, decimals: Optional[int] = None) -> OraclePrice:
    """Read Chainlink ``latestRoundData()``.

    :param decimals:
        Feed decimals. If not given, read from the feed ``decimals()``.

    :return:
        The answer with its decimals,
        to be passed to :py:func:`crowdfunding.oracle.current_price`
    """
    feed = web3.eth.contract(address=to_checksum_address(feed_address), abi=PRICE_FEED_ABI)
    if decimals is None:
        decimals = int(feed.functions.decimals().call())
    round_data = tuple(feed.functions.latestRoundData().call())
    logger.debug(f"Price feed {feed_address} round {round_data[0]} answer {round_data[1]}, {decimals} decimals")
    return OraclePrice.from_round_data(round_data, decimals=decimals)


def read_campaign_summary(reader: ContractReader, address: NonChecksummedAddress) -> CampaignSummary | Any:
    """Read everything a campaign page needs.

    :return:
        The campaign, or :py:data:`crowdfunding.pending.PENDING`
        if any of the fields is still loading.
    """

    values = {field: reader.read(field) for field in CampaignField}

    pending = [field.name for field, value in values.items() if is_pending(value)]
    if pending:
        logger.debug(f"Campaign {address} still loading {pending}")
        return PENDING

    deadline = datetime.datetime.fromtimestamp(int(values[CampaignField.deadline]), datetime.timezone.utc).replace(tzinfo=None)
    tiers = [Tier.from_contract_tuple(t, idx) for idx, t in enumerate(values[CampaignField.tiers])]

    return CampaignSummary(
        address=address.lower(),
        name=values[CampaignField.campaign_name],
        description=values[CampaignField.description],
        deadline=deadline,
        goal=int(values[CampaignField.goal]),
        balance=int(values[CampaignField.balance]),
        owner=values[CampaignField.owner].lower(),
        state=CampaignState.from_raw(values[CampaignField.state]),
        tiers=tiers,
    )


def read_all_campaigns(web3: Web3, factory_address: str, with_creation_time: bool = False) -> List[CampaignListing]:
    """List all campaigns created by the factory.

    :param with_creation_time:
        The factory struct has ``creationTime`` as the fourth member.
        The ABI must match the deployed factory, or decoding fails.
    """
    abi = FACTORY_ABI_WITH_CREATION_TIME if with_creation_time else FACTORY_ABI
    factory = web3.eth.contract(address=to_checksum_address(factory_address), abi=abi)
    raw = factory.functions.getAllCampaigns().call()
    campaigns = [CampaignListing.from_contract_tuple(c) for c in raw]
    logger.info(f"Factory {factory_address} has {len(campaigns)} campaigns")
    return campaigns
