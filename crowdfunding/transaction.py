"""Compose campaign write transactions.

We only build transaction descriptors. Signing, gas estimation,
submission and confirmation are done by the wallet,
see :py:class:`crowdfunding.submitter.TransactionSubmitter`.

Example how to create a tier priced in US dollars:

.. code-block:: python

    from crowdfunding.oracle import current_price
    from crowdfunding.reader import read_oracle_round
    from crowdfunding.transaction import compose_add_tier

    price = current_price(read_oracle_round(web3, config.price_feed_address))
    request = compose_add_tier("Gold", "100", price)
    tx = request.as_transaction(campaign_address)

"""
import enum
import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Tuple

from dataclasses_json import dataclass_json
from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from crowdfunding.exceptions import ValidationError
from crowdfunding.fixed_point import TOKEN_DECIMALS, to_base_units
from crowdfunding.oracle import OraclePrice, PriceReading, resolve_usd_price
from crowdfunding.types import BaseUnitAmount, NonChecksummedAddress, USDollarAmount


logger = logging.getLogger(__name__)


#: Largest amount a ``uint256`` contract argument can hold
MAX_UINT256 = 2**256 - 1


class InvalidAmount(ValidationError):
    """User entered amount is not a positive number."""


class PriceUnavailable(ValidationError):
    """The oracle price has not been loaded yet, or it is not positive."""


class TargetMethod(enum.Enum):
    """Campaign contract write functions.

    The value is the Solidity function signature.
    """

    #: ``function addTier(string _name, uint256 _amount)``
    add_tier = "addTier(string,uint256)"

    #: ``function removeTier(uint256 _index)``
    remove_tier = "removeTier(uint256)"

    #: ``function fund(uint256 _tierIndex) payable``
    fund_tier = "fund(uint256)"

    def get_argument_types(self) -> list[str]:
        """ABI types of the function arguments, e.g. ``["uint256"]``."""
        args = self.value[self.value.index("(") + 1:-1]
        return args.split(",") if args else []

    def is_payable(self) -> bool:
        return self == TargetMethod.fund_tier


@dataclass_json
@dataclass(frozen=True)
class TransactionRequest:
    """An unsigned campaign contract call.

    Handed to the wallet for submission. Never executed by us.
    """

    #: Which contract function to call
    target_method: TargetMethod

    #: Function arguments in the ABI order
    parameters: Tuple[Any, ...]

    #: ETH sent along the call, in wei
    attached_value: BaseUnitAmount = 0

    #: Campaign contract the call is for, if known when composing
    contract_address: Optional[NonChecksummedAddress] = field(default=None)

    def __post_init__(self):
        assert isinstance(self.target_method, TargetMethod), f"Got {self.target_method}"
        assert type(self.parameters) == tuple, f"Parameters must be a tuple, got {type(self.parameters)}"
        assert len(self.parameters) == len(self.target_method.get_argument_types()), f"{self.target_method.value} cannot take {self.parameters}"
        assert type(self.attached_value) == int and self.attached_value >= 0, f"Bad attached value {self.attached_value}"
        if self.attached_value:
            assert self.target_method.is_payable(), f"{self.target_method.value} is not payable"

    def __repr__(self):
        return f"<TransactionRequest {self.get_function_signature()} params: {self.parameters} value: {self.attached_value}>"

    def get_function_signature(self) -> str:
        return self.target_method.value

    def get_selector(self) -> bytes:
        """4-byte function selector."""
        return function_signature_to_4byte_selector(self.get_function_signature())

    def encode_calldata(self) -> bytes:
        """ABI encoded call data: selector followed by the encoded arguments."""
        return self.get_selector() + encode(self.target_method.get_argument_types(), list(self.parameters))

    def as_transaction(self, contract_address: Optional[str] = None) -> dict:
        """Create a web3 transaction dict.

        No gas, nonce or chain id is filled in, the wallet does that.

        :param contract_address:
            Override the campaign address given at compose time
        """
        address = contract_address or self.contract_address
        assert address, "Campaign contract address needed for a transaction"
        return {
            "to": to_checksum_address(address),
            "data": "0x" + self.encode_calldata().hex(),
            "value": self.attached_value,
        }


def _parse_fiat_amount(fiat_amount: str | float | int | Decimal) -> USDollarAmount:
    if isinstance(fiat_amount, str):
        fiat_amount = fiat_amount.strip()

    try:
        value = float(fiat_amount)
    except (ValueError, TypeError):
        raise InvalidAmount(f"Please enter a valid tier cost, got {fiat_amount!r}")

    if not math.isfinite(value) or value <= 0:
        raise InvalidAmount(f"Tier cost must be a positive number, got {fiat_amount!r}")

    return value


def compose_add_tier(
    name: str,
    fiat_amount: str | float | int | Decimal,
    price: PriceReading | OraclePrice | USDollarAmount | None,
    contract_address: Optional[NonChecksummedAddress] = None,
    decimals: int = TOKEN_DECIMALS,
) -> TransactionRequest:
    """Create a new tier priced in US dollars.

    The dollar amount is converted to ETH using the oracle price at the compose time.
    After that the tier price is fixed in ETH and drifts in dollar terms.

    :param name:
        Tier name, passed to the contract as is

    :param fiat_amount:
        Tier cost in US dollars as the user typed it

    :param price:
        ETH/USD price

    :param contract_address:
        Campaign the tier is added to

    :raise InvalidAmount:
        Amount is not a positive number, rounds to zero wei,
        or does not fit in ``uint256``

    :raise PriceUnavailable:
        Price is loading, zero or negative
    """

    assert isinstance(name, str), f"Tier name must be a string, got {type(name)}"

    fiat_value = _parse_fiat_amount(fiat_amount)

    usd_price = resolve_usd_price(price)
    if usd_price is None:
        raise PriceUnavailable(f"ETH price is not available, cannot calculate the tier amount. Got {price}")

    token_amount = fiat_value / usd_price
    if not math.isfinite(token_amount):
        raise InvalidAmount(f"Tier cost {fiat_amount} is too large at price {usd_price}")

    amount = to_base_units(token_amount, decimals)

    if amount == 0:
        raise InvalidAmount(f"Tier cost {fiat_amount} is too small at price {usd_price}")

    if amount > MAX_UINT256:
        raise InvalidAmount(f"Tier cost {fiat_amount} is too large at price {usd_price}")

    request = TransactionRequest(
        target_method=TargetMethod.add_tier,
        parameters=(name, amount),
        contract_address=contract_address,
    )
    logger.info(f"Composed add tier {name}: {fiat_value} USD at {usd_price} USD/ETH is {amount} wei")
    return request


def compose_remove_tier(
    index: int,
    contract_address: Optional[NonChecksummedAddress] = None,
) -> TransactionRequest:
    """Remove a tier.

    The index is not checked against the tier list.
    The contract reverts on a bad index.

    .. note::

        Tier indexes shift after a removal.
        Always re-read the tier list before composing another remove.
    """
    assert type(index) == int and index >= 0, f"Bad tier index {index}"

    request = TransactionRequest(
        target_method=TargetMethod.remove_tier,
        parameters=(index,),
        contract_address=contract_address,
    )
    logger.info(f"Composed remove tier #{index}")
    return request


def compose_fund_tier(
    index: int,
    tier_amount: BaseUnitAmount,
    contract_address: Optional[NonChecksummedAddress] = None,
) -> TransactionRequest:
    """Back a campaign at a tier.

    :param index:
        Tier index in ``getTiers()`` order

    :param tier_amount:
        The tier amount as last read from the contract.
        The contract requires the exact amount,
        and may reject if the tier changed after our read.
    """
    assert type(index) == int and index >= 0, f"Bad tier index {index}"
    assert type(tier_amount) == int and tier_amount >= 0, f"Bad tier amount {tier_amount}"

    request = TransactionRequest(
        target_method=TargetMethod.fund_tier,
        parameters=(index,),
        attached_value=tier_amount,
        contract_address=contract_address,
    )
    logger.info(f"Composed fund tier #{index} with {tier_amount} wei")
    return request
