"""Campaign reads through the contract reader interface."""
import datetime

import pytest

from crowdfunding.campaign import CampaignState, CampaignSummary
from crowdfunding.pending import PENDING
from crowdfunding.reader import CampaignField, read_campaign_summary
from crowdfunding.testing.mock_reader import MockContractReader


ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


@pytest.fixture
def reader() -> MockContractReader:
    return MockContractReader({
        CampaignField.campaign_name: "Solar roof",
        CampaignField.description: "Panels for the community hall",
        CampaignField.deadline: 1700000000,
        CampaignField.goal: 4 * 10**18,
        CampaignField.balance: 5 * 10**18,
        CampaignField.tiers: [("Gold", 5 * 10**16, 3)],
        CampaignField.owner: "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
        CampaignField.state: 1,
    })


def test_read_campaign_summary(logger, reader):
    campaign = read_campaign_summary(reader, ADDRESS)
    assert isinstance(campaign, CampaignSummary)
    assert campaign.address == ADDRESS.lower()
    assert campaign.name == "Solar roof"
    assert campaign.deadline == datetime.datetime(2023, 11, 14, 22, 13, 20)
    assert campaign.get_progress() == 100
    assert campaign.state == CampaignState.successful
    assert campaign.owner == "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"
    assert len(campaign.tiers) == 1
    assert campaign.tiers[0].backers == 3


def test_read_campaign_pending(reader):
    """Any field still loading means the whole campaign is loading."""
    del reader.values[CampaignField.balance]
    assert read_campaign_summary(reader, ADDRESS) is PENDING

    reader.set(CampaignField.balance, 0)
    campaign = read_campaign_summary(reader, ADDRESS)
    assert campaign.balance == 0
    assert campaign.get_progress() == 0


def test_read_campaign_no_tiers(reader):
    """Empty tier list is a value, not loading."""
    reader.set(CampaignField.tiers, [])
    campaign = read_campaign_summary(reader, ADDRESS)
    assert campaign.tiers == []


def test_read_campaign_unknown_state(reader):
    reader.set(CampaignField.state, 9)
    campaign = read_campaign_summary(reader, ADDRESS)
    assert campaign.state == CampaignState.unknown
