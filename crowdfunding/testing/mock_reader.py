"""In-memory contract reader and submitter.

Used for unit testing

- Serve canned campaign field values without a blockchain backend

- Record composed transactions instead of sending them

"""
from typing import Any, Dict, List, Optional

from crowdfunding.pending import PENDING
from crowdfunding.reader import CampaignField
from crowdfunding.submitter import SubmissionResult
from crowdfunding.transaction import TransactionRequest


class MockContractReader:
    """Return field values from a dict.

    Fields not in the dict are :py:data:`crowdfunding.pending.PENDING`.
    """

    def __init__(self, values: Optional[Dict[CampaignField, Any]] = None):
        self.values = dict(values or {})
        self.reads: List[CampaignField] = []

    def read(self, field: CampaignField) -> Any:
        self.reads.append(field)
        return self.values.get(field, PENDING)

    def set(self, field: CampaignField, value: Any):
        """Simulate a poll completing."""
        self.values[field] = value


class RecordingSubmitter:
    """Accept everything, or reject everything with a fixed reason."""

    def __init__(self, reject_reason: Optional[str] = None):
        self.reject_reason = reject_reason
        self.submitted: List[TransactionRequest] = []

    def submit(self, request: TransactionRequest) -> SubmissionResult:
        self.submitted.append(request)
        if self.reject_reason:
            return SubmissionResult.rejected(self.reject_reason)
        return SubmissionResult.success(tx_hash=f"0x{len(self.submitted):064x}")
