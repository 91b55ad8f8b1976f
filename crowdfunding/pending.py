"""Loading state marker for contract reads.

A contract read that has not completed yet is different from a read
that returned zero or an empty list. Readers return :py:data:`PENDING`
for the former.
"""
import enum
from typing import Any


class _Pending(enum.Enum):
    pending = "pending"

    def __repr__(self):
        return "PENDING"

    def __bool__(self):
        return False


#: Returned by :py:class:`crowdfunding.reader.ContractReader` when the value is not available yet
PENDING = _Pending.pending


def is_pending(value: Any) -> bool:
    """Is this a value still being loaded.

    ``None`` is treated as pending as well.
    """
    return value is None or value is PENDING
