"""Decision-engine exceptions."""

from __future__ import annotations

from typing import Literal

from veronica.common.exceptions import VeronicaBaseException

Subsystem = Literal["store", "strategy"]


class DecisionError(VeronicaBaseException):
    """A simulation step failed and the run must abort.

    Args:
        message: Human-readable error description.
        subsystem: Where the failure originated ("store" or "strategy").
        context: Optional dict of structured data for logging/debugging.
    """

    def __init__(self, message: str, subsystem: Subsystem, context: dict | None = None) -> None:
        super().__init__(message, context={"subsystem": subsystem, **(context or {})})
        self.subsystem = subsystem
