"""Blockchain ids.

Campaign and price feed contracts live on a specific EVM chain.
See :py:class:`ChainId` enum class for passing the identity of a blockchain around.
This is based on the underlying `web3.eth.chain_id` attribute of a chain.
"""

import enum
from typing import Dict, Optional


class ChainId(enum.IntEnum):
    """Chain ids and chain metadata helper.

    For the full chain id list see

    - `chainid.network <https://chainid.network/>`_
    """

    #: Ethereum mainnet chain id
    ethereum = 1

    #: Polygon chain id
    polygon = 137

    #: Base chain id
    base = 8453

    #: Arbitrum One id
    arbitrum = 42161

    #: Sepolia testnet, where the demo campaigns are deployed
    sepolia = 11155111

    #: Anvil test chain.
    #:
    #: This is the chain id for Anvil local tester / mainnet forks.
    anvil = 31337

    @property
    def data(self) -> dict:
        """Get chain data entry for this chain."""
        return _CHAIN_DATA[self.value]

    def get_name(self) -> str:
        """Get full human readab name for this blockchain"""
        return self.data["name"]

    def get_slug(self) -> str:
        """Get URL slug for this chain"""
        return self.data["slug"]

    def get_explorer(self) -> Optional[str]:
        """Get explorer landing page for this blockchain"""
        return self.data.get("explorer")

    def get_tx_link(self, tx: str) -> Optional[str]:
        """Get one tx link.

        Use EIP3091 format.

        https://eips.ethereum.org/EIPS/eip-3091
        """
        explorer = self.get_explorer()
        if not explorer:
            return None
        return f"{explorer}/tx/{tx}"

    @staticmethod
    def get_by_slug(slug: str) -> Optional["ChainId"]:
        """Map a slug back to the chain.

        Most useful for resolving URLs.
        """
        for chain_id, data in _CHAIN_DATA.items():
            if data["slug"] == slug:
                return ChainId(chain_id)
        return None


_CHAIN_DATA: Dict[int, dict] = {
    1: {
        "name": "Ethereum",
        "slug": "ethereum",
        "explorer": "https://etherscan.io",
    },
    137: {
        "name": "Polygon",
        "slug": "polygon",
        "explorer": "https://polygonscan.com",
    },
    8453: {
        "name": "Base",
        "slug": "base",
        "explorer": "https://basescan.org",
    },
    42161: {
        "name": "Arbitrum One",
        "slug": "arbitrum",
        "explorer": "https://arbiscan.io",
    },
    11155111: {
        "name": "Sepolia",
        "slug": "sepolia",
        "explorer": "https://sepolia.etherscan.io",
    },
    31337: {
        "name": "Anvil",
        "slug": "anvil",
    },
}
