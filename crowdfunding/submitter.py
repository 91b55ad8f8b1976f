"""Transaction submission interface.

Submission belongs to the wallet. We only define the shape of the exchange:
the wallet takes a :py:class:`crowdfunding.transaction.TransactionRequest`
and reports back a :py:class:`SubmissionResult`.

The result is passed through as is. There is no retry here,
and revert reasons are not interpreted.
"""
from dataclasses import dataclass
from typing import Optional, Protocol

from crowdfunding.exceptions import CrowdfundingError
from crowdfunding.transaction import TransactionRequest


class SubmissionRejected(CrowdfundingError):
    """The wallet or the contract rejected the transaction."""


@dataclass(slots=True, frozen=True)
class SubmissionResult:
    """What happened to a submitted transaction."""

    #: Transaction was mined and did not revert
    confirmed: bool

    #: Transaction hash, if it got that far
    tx_hash: Optional[str] = None

    #: Rejection reason as reported by the wallet
    reason: Optional[str] = None

    def __post_init__(self):
        assert self.confirmed or self.reason, "Rejected result must have a reason"

    @staticmethod
    def success(tx_hash: Optional[str] = None) -> "SubmissionResult":
        return SubmissionResult(confirmed=True, tx_hash=tx_hash)

    @staticmethod
    def rejected(reason: str, tx_hash: Optional[str] = None) -> "SubmissionResult":
        return SubmissionResult(confirmed=False, tx_hash=tx_hash, reason=reason)

    def raise_for_rejection(self):
        """Turn a rejection into an exception for callers that prefer those."""
        if not self.confirmed:
            raise SubmissionRejected(self.reason)


class TransactionSubmitter(Protocol):
    """Wallet that signs and broadcasts composed transactions."""

    def submit(self, request: TransactionRequest) -> SubmissionResult:
        """Submit and wait for the confirmation."""
