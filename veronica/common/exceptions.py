"""Custom exceptions for Veronica.

All modules should raise these exceptions instead of generic ones.
Every exception carries an optional context dict for structured logging;
keys that look like secrets are redacted when the exception is rendered.

Usage:
    from veronica.common.exceptions import StorageError

    raise StorageError("Failed to decode record", context={"key": "2330_2021-06-01"})
"""

from __future__ import annotations


class VeronicaBaseException(Exception):
    """Base exception for all Veronica errors.

    Args:
        message: Human-readable error description.
        context: Optional dict of structured data for logging/debugging.
    """

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message)
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            safe_context = {
                k: "[REDACTED]" if _is_secret_key(k) else v for k, v in self.context.items()
            }
            return f"{super().__str__()} | context={safe_context}"
        return super().__str__()


class ConfigurationError(VeronicaBaseException):
    """Settings or run parameters are invalid."""


class StorageError(VeronicaBaseException):
    """The time-series store failed (I/O, SQL, or payload codec)."""


class DataInconsistencyError(VeronicaBaseException):
    """A record that must exist is missing. Fatal for the current run."""


def _is_secret_key(key: str) -> bool:
    """Check if a dict key name suggests it contains secret data.

    Matches whole underscore-separated words so that store keys such as
    ``key`` on a record are still visible while ``finmind_token`` is not.
    """
    secret_words = {"secret", "password", "token", "private", "pem", "credential"}
    parts = set(key.lower().split("_"))
    return bool(parts & secret_words)
