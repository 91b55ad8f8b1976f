"""Generic units used in the crowdfunding data models.

Types aliases are used to give human-readable meaning for various arguments and return values.
"""
from typing import TypeAlias


#: Token amount in its smallest indivisible unit, like wei for ETH.
#:
#: - Python integer, arbitrary precision
#:
#: - Always non-negative
#:
#: - Meaningless without the token decimals, 18 for ETH
#:
#: 18 decimal amounts routinely overflow 64-bit integers,
#: so never pass these through numpy or pandas integer columns.
BaseUnitAmount: TypeAlias = int


#: Human readable token amount as a string.
#:
#: E.g. `1.5` for 1500000000000000000 wei.
#:
#: Lossless, trailing fractional zeros trimmed.
DecimalAmount: TypeAlias = str


#: Express USD monetary amount.
#:
#: Used for the oracle price and fiat conversion.
#: Normally you should not use float for pricing,
#: but the fiat values here are for display only and
#: are never converted back to base units without going through
#: :py:func:`crowdfunding.fixed_point.to_base_units`.
USDollarAmount: TypeAlias = float


#: Funding progress as an integer percent 0...100
Percent: TypeAlias = int


#: Ethereum address that does *not* use EIP-55 checksumming.
#:
#: - String
#:
#: - Always starts 0x
#:
#: - Lowercased
#:
#: `See EIP-55 <https://github.com/ethereum/EIPs/blob/master/EIPS/eip-55.md>`__.
NonChecksummedAddress: TypeAlias = str
