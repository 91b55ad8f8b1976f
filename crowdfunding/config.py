"""Client configuration.

There is no process-wide blockchain client. Instead the application creates
one :py:class:`ClientConfiguration` and passes it, or the :py:class:`Web3`
created from it, to the readers.

The configuration can come from

- Environment variables, see :py:meth:`ClientConfiguration.from_environment`

- ``~/.crowdfunding/settings.json``, see :py:func:`load_configuration`
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import requests
from dataclasses_json import dataclass_json
from requests.adapters import HTTPAdapter
from urllib3 import Retry
from web3 import HTTPProvider, Web3

from crowdfunding.chain import ChainId
from crowdfunding.exceptions import CrowdfundingError
from crowdfunding.utils.logging_retry import LoggingRetry


logger = logging.getLogger(__name__)


#: Where we will store our settings file
#:
#: Store under user home
#:
DEFAULT_SETTINGS_PATH = Path(os.path.expanduser("~/.crowdfunding"))

#: Chainlink ETH/USD feed on Sepolia
SEPOLIA_ETH_USD_FEED = "0x694AA1769357215DE4FAC081bf1f309aDC325306"


class WrongChain(CrowdfundingError):
    """JSON-RPC node is on a different chain than configured."""


@dataclass_json
@dataclass
class ClientConfiguration:
    """Configuration for the crowdfunding client."""

    #: JSON-RPC node URL, may contain an API key
    json_rpc_url: Optional[str] = None

    #: Which chain the campaigns are on
    chain_id: int = ChainId.sepolia.value

    #: Campaign factory contract listing all campaigns
    factory_address: Optional[str] = None

    #: Chainlink ETH/USD price feed
    price_feed_address: str = SEPOLIA_ETH_USD_FEED

    def __repr__(self):
        # Do not print API keys in the RPC URL
        return f"<ClientConfiguration chain {self.chain_id}, factory {self.factory_address}, feed {self.price_feed_address}>"

    def get_chain(self) -> ChainId:
        return ChainId(self.chain_id)

    @staticmethod
    def from_environment(environ: Mapping[str, str] = os.environ) -> "ClientConfiguration":
        """Read configuration from environment variables.

        - ``JSON_RPC_URL``

        - ``CHAIN_ID``

        - ``FACTORY_ADDRESS``

        - ``PRICE_FEED_ADDRESS``

        Unset variables get the defaults.
        """
        config = ClientConfiguration(
            json_rpc_url=environ.get("JSON_RPC_URL"),
            factory_address=environ.get("FACTORY_ADDRESS"),
        )

        if environ.get("CHAIN_ID"):
            config.chain_id = int(environ["CHAIN_ID"])

        if environ.get("PRICE_FEED_ADDRESS"):
            config.price_feed_address = environ["PRICE_FEED_ADDRESS"]

        return config


def load_configuration(settings_path: Path = DEFAULT_SETTINGS_PATH) -> Optional[ClientConfiguration]:
    """Read ``settings.json``.

    :return:
        ``None`` if there is no settings file
    """
    settings_file = settings_path / "settings.json"
    if settings_file.exists():
        data = settings_file.read_text()
        if data:
            return ClientConfiguration.from_json(data)
    return None


def save_configuration(config: ClientConfiguration, settings_path: Path = DEFAULT_SETTINGS_PATH):
    """Write ``settings.json``."""
    assert isinstance(settings_path, Path), f"Got {settings_path.__class__}"
    os.makedirs(settings_path, exist_ok=True)
    with open(settings_path / "settings.json", "wt") as out:
        out.write(config.to_json())
    logger.info(f"Saved configuration to {settings_path}")


def create_requests_session(retry_policy: Optional[Retry] = None) -> requests.Session:
    """Create HTTP 1.1 keep-alive connection to the JSON-RPC node.

    :param retry_policy:
        Override default retry policy.
    """
    session = requests.Session()

    # Set up dealing with network connectivity flakey
    if retry_policy is None:
        retry_policy = LoggingRetry(
            total=5,
            backoff_factor=0.1,
            status_forcelist=[ 500, 502, 503, 504 ],
        )

    session.mount('http://', HTTPAdapter(max_retries=retry_policy))
    session.mount('https://', HTTPAdapter(max_retries=retry_policy))
    return session


def create_web3(
    config: ClientConfiguration,
    retry_policy: Optional[Retry] = None,
    check_chain: bool = True,
) -> Web3:
    """Connect to the configured JSON-RPC node.

    :param check_chain:
        Verify the node is on ``config.chain_id``.
        Needs a network round trip.

    :raise WrongChain:
        Node reports a different chain id
    """
    assert config.json_rpc_url, "JSON_RPC_URL not configured"

    session = create_requests_session(retry_policy)
    web3 = Web3(HTTPProvider(config.json_rpc_url, session=session))

    if check_chain:
        chain_id = web3.eth.chain_id
        if chain_id != config.chain_id:
            raise WrongChain(f"Configured for chain {config.chain_id}, but the node is on {chain_id}")

    logger.info(f"Connected to chain {config.chain_id}")
    return web3
