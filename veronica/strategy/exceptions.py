"""Strategy-specific exceptions."""

from __future__ import annotations

from veronica.common.exceptions import VeronicaBaseException


class ScoringError(VeronicaBaseException):
    """A strategy could not evaluate a symbol (store or codec failure)."""


class InsufficientHistoryError(VeronicaBaseException):
    """Not enough trailing records to compute a score or settle decision.

    Recovered inside the strategy unless the insufficient-history policy
    is "raise".
    """
