"""Crawler-specific exceptions.

All crawler failures are subclasses of CrawlerError. `RateLimitedError` is
the only one the update job retries; the others abort the update.
"""

from __future__ import annotations

from veronica.common.exceptions import VeronicaBaseException


class CrawlerError(VeronicaBaseException):
    """Base exception for all crawler errors (unexpected status, bad payload)."""


class RateLimitedError(CrawlerError):
    """The data provider's request quota is exhausted."""


class BadRequestError(CrawlerError):
    """The data provider rejected the request parameters."""


class TransientIOError(CrawlerError):
    """Network failure or timeout while talking to the data provider."""
