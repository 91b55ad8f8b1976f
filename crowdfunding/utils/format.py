"""Value formatting utilities."""


def format_value(v: float) -> str:
    """Format US dollar value with two decimals and thousand separators.

    Negative values get the minus sign before the dollar sign: ``-$1.00``.
    """
    if v < 0:
        return f"-${-v:,.2f}"
    return f"${v:,.2f}"
