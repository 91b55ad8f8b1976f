"""Web3 reader plumbing without a live node.

The contract call layer is replaced with a stub that returns
what a node would return for the view functions.
"""
import datetime
import logging

from eth_abi import decode, encode
from urllib3.exceptions import ProtocolError

from crowdfunding.campaign import CampaignListing
from crowdfunding.oracle import current_price
from crowdfunding.reader import (
    FACTORY_ABI,
    FACTORY_ABI_WITH_CREATION_TIME,
    CampaignField,
    Web3ContractReader,
    read_all_campaigns,
    read_oracle_round,
)
from crowdfunding.utils.logging_retry import LoggingRetry


class _StubCall:

    def __init__(self, value):
        self.value = value

    def call(self):
        return self.value


class _StubFunctions:

    def __init__(self, results: dict):
        self.results = results

    def __getattr__(self, name):
        value = self.results[name]
        return lambda *args: _StubCall(value)


class _StubContract:

    def __init__(self, results: dict):
        self.functions = _StubFunctions(results)


class _StubEth:

    def __init__(self, results: dict):
        self.results = results
        self.addresses = []
        self.abis = []

    def contract(self, address, abi):
        self.addresses.append(address)
        self.abis.append(abi)
        return _StubContract(self.results)


class _StubWeb3:

    def __init__(self, results: dict):
        self.eth = _StubEth(results)


def test_web3_contract_reader():
    web3 = _StubWeb3({"getContractBalance": 10**18, "name": "Solar roof"})
    reader = Web3ContractReader(web3, "0x5fbdb2315678afecb367f032d93f642f64180aa3")
    assert reader.read(CampaignField.balance) == 10**18
    assert reader.read(CampaignField.campaign_name) == "Solar roof"
    assert web3.eth.addresses == ["0x5FbDB2315678afecb367f032d93F642f64180aa3"]


def test_read_oracle_round():
    web3 = _StubWeb3({"latestRoundData": [5, 250_000_000_000, 1, 2, 5], "decimals": 8})
    oracle_price = read_oracle_round(web3, "0x694AA1769357215DE4FAC081bf1f309aDC325306")
    assert oracle_price.mantissa == 250_000_000_000
    assert oracle_price.decimals == 8
    assert oracle_price.round_id == 5
    assert current_price(oracle_price).price == 2500.0


def test_read_oracle_round_feed_decimals():
    """Feeds with other than 8 decimals are scaled by what the feed reports."""
    web3 = _StubWeb3({"latestRoundData": [7, 2500 * 10**18, 1, 2, 7], "decimals": 18})
    oracle_price = read_oracle_round(web3, "0x694AA1769357215DE4FAC081bf1f309aDC325306")
    assert oracle_price.decimals == 18
    assert current_price(oracle_price).price == 2500.0


def test_read_oracle_round_given_decimals():
    """Known decimals skip the decimals() call."""
    web3 = _StubWeb3({"latestRoundData": [5, 2_500_000, 1, 2, 5]})
    oracle_price = read_oracle_round(web3, "0x694AA1769357215DE4FAC081bf1f309aDC325306", decimals=3)
    assert current_price(oracle_price).price == 2500.0


def test_read_all_campaigns():
    web3 = _StubWeb3({"getAllCampaigns": [
        ("0x5FbDB2315678afecb367f032d93F642f64180aa3", "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266", "Solar roof"),
        ("0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512", "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266", "Bike lane"),
    ]})
    campaigns = read_all_campaigns(web3, "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0")
    assert web3.eth.abis == [FACTORY_ABI]
    assert len(campaigns) == 2
    assert campaigns[0].name == "Solar roof"
    assert campaigns[0].created_at is None
    assert campaigns[1].address == "0xe7f1725e7734ce288f8367e1bb143e90bb3f0512"


def test_read_all_campaigns_with_creation_time():
    web3 = _StubWeb3({"getAllCampaigns": [
        ("0x5FbDB2315678afecb367f032d93F642f64180aa3", "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266", "Solar roof", 1700000000),
        ("0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512", "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266", "Bike lane", 0),
    ]})
    campaigns = read_all_campaigns(web3, "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0", with_creation_time=True)
    assert web3.eth.abis == [FACTORY_ABI_WITH_CREATION_TIME]
    assert campaigns[0].created_at == datetime.datetime(2023, 11, 14, 22, 13, 20)
    assert campaigns[1].created_at is None


def _listing_type(abi: list) -> str:
    components = abi[0]["outputs"][0]["components"]
    return "(" + ",".join(c["type"] for c in components) + ")[]"


def test_factory_abi_decodes_listing():
    """The default ABI decodes what a 3-member struct factory returns."""
    encoded = encode(
        ["(address,address,string)[]"],
        [[("0x5FbDB2315678afecb367f032d93F642f64180aa3", "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266", "Solar roof")]],
    )
    (raw,) = decode([_listing_type(FACTORY_ABI)], encoded)
    listing = CampaignListing.from_contract_tuple(raw[0])
    assert listing.address == "0x5fbdb2315678afecb367f032d93f642f64180aa3"
    assert listing.owner == "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"
    assert listing.name == "Solar roof"
    assert listing.created_at is None


def test_factory_abi_with_creation_time_decodes_listing():
    encoded = encode(
        ["(address,address,string,uint256)[]"],
        [[("0x5FbDB2315678afecb367f032d93F642f64180aa3", "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266", "Solar roof", 1700000000)]],
    )
    (raw,) = decode([_listing_type(FACTORY_ABI_WITH_CREATION_TIME)], encoded)
    listing = CampaignListing.from_contract_tuple(raw[0])
    assert listing.name == "Solar roof"
    assert listing.created_at == datetime.datetime(2023, 11, 14, 22, 13, 20)


def test_logging_retry(caplog):
    retry = LoggingRetry(total=5, backoff_factor=0.1)
    with caplog.at_level(logging.WARNING):
        retry = retry.increment(method="GET", url="https://example.com/rpc", error=ProtocolError("Connection aborted"))
    assert retry.total == 4
    assert isinstance(retry, LoggingRetry)
    assert "Retrying JSON-RPC" in caplog.text
