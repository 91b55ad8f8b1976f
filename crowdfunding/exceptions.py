"""Module for custom exceptions. This should contain base classes. Children of these base classes should be defined in the modules where they are used."""


class CrowdfundingError(Exception):
    """Base class for all errors raised by the crowdfunding package."""


class ValidationError(CrowdfundingError):
    """User input cannot be turned into a transaction.

    Currently a base class for :py:class:`crowdfunding.transaction.InvalidAmount`
    and :py:class:`crowdfunding.transaction.PriceUnavailable`.
    """

    def __init__(self, message: str):
        super().__init__(message)
