"""Exact conversion between token base units and decimal amounts.

Token amounts on EVM chains are integers in the smallest unit of the token,
like wei for ETH. For humans we present them as decimal strings,
e.g. ``1.5`` ETH for ``1500000000000000000`` wei.

Both directions are done in integer arithmetic,
so no precision is lost even for amounts that do not fit in 64 bits.

Example:

.. code-block:: python

    from crowdfunding.fixed_point import to_decimal, to_base_units

    assert to_decimal(1_500_000_000_000_000_000) == "1.5"
    assert to_base_units("1.5") == 1_500_000_000_000_000_000

"""
from decimal import Decimal, InvalidOperation
from typing import Optional

from crowdfunding.types import BaseUnitAmount, DecimalAmount


#: Decimals of ETH and most ERC-20 tokens
TOKEN_DECIMALS = 18


def to_decimal(amount: Optional[BaseUnitAmount], decimals: int = TOKEN_DECIMALS) -> DecimalAmount:
    """Convert base units to a human readable decimal string.

    - ``None`` and zero are both presented as ``"0"``

    - Trailing fractional zeros are trimmed, so we never get ``"1.0"``

    :param amount:
        Raw token amount, e.g. from ``balanceOf()``

    :param decimals:
        Token decimals

    :return:
        Decimal string like ``"0.05"``
    """

    assert type(decimals) == int and decimals >= 0, f"Bad decimals: {decimals}"

    if not amount:
        return "0"

    assert type(amount) == int, f"Base unit amount must be int, got {type(amount)}"
    assert amount >= 0, f"Base unit amount cannot be negative: {amount}"

    integer_part, remainder = divmod(amount, 10 ** decimals)

    if remainder == 0:
        return str(integer_part)

    fractional_part = str(remainder).rjust(decimals, "0").rstrip("0")
    return f"{integer_part}.{fractional_part}"


def _parse_decimal(value: str | int | float | Decimal) -> Decimal:
    """Parse any supported amount input to a :py:class:`Decimal`.

    Floats go through ``repr()``, so ``0.05`` is read as the
    shortest text that round trips, not as its binary expansion.
    """
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, bool):
        raise AssertionError(f"Cannot convert bool to token amount: {value}")
    elif isinstance(value, int):
        d = Decimal(value)
    elif isinstance(value, float):
        d = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            d = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"Cannot parse token amount: {value!r}")
    else:
        raise AssertionError(f"Unsupported token amount type: {type(value)}")

    if not d.is_finite():
        raise ValueError(f"Token amount must be finite, got {value!r}")

    return d


def to_base_units(value: str | int | float | Decimal, decimals: int = TOKEN_DECIMALS) -> BaseUnitAmount:
    """Convert a decimal amount to base units.

    The inverse of :py:func:`to_decimal`:

    .. code-block:: python

        assert to_base_units(to_decimal(amount)) == amount

    Digits beyond ``decimals`` are rounded half away from zero,
    e.g. with 2 decimals ``"0.005"`` becomes ``1`` and ``"0.0049"`` becomes ``0``.

    :param value:
        Decimal string, :py:class:`Decimal`, int or float.

    :param decimals:
        Token decimals

    :return:
        Raw token amount

    :raise ValueError:
        If a string cannot be parsed as a number
    """

    assert type(decimals) == int and decimals >= 0, f"Bad decimals: {decimals}"

    d = _parse_decimal(value)
    sign, digits, exponent = d.as_tuple()
    coefficient = int("".join(str(digit) for digit in digits))

    shift = exponent + decimals
    if shift >= 0:
        amount = coefficient * 10 ** shift
    else:
        divisor = 10 ** -shift
        amount, remainder = divmod(coefficient, divisor)
        if remainder * 2 >= divisor:
            amount += 1

    assert not (sign and amount), f"Token amount cannot be negative: {value}"
    return amount
