"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from veronica.common.exceptions import (
    ConfigurationError,
    DataInconsistencyError,
    StorageError,
    VeronicaBaseException,
)


class TestVeronicaBaseException:
    """Test message and context rendering."""

    def test_message_only(self):
        exc = VeronicaBaseException("boom")
        assert str(exc) == "boom"
        assert exc.context == {}

    def test_context_rendered(self):
        exc = StorageError("Query failed", context={"key": "2330_2021-06-01"})
        assert "Query failed" in str(exc)
        assert "2330_2021-06-01" in str(exc)

    def test_secret_context_redacted(self):
        exc = ConfigurationError("bad", context={"finmind_token": "abc123", "symbol": "2330"})
        rendered = str(exc)
        assert "abc123" not in rendered
        assert "[REDACTED]" in rendered
        assert "2330" in rendered

    def test_record_key_not_redacted(self):
        """A store key is data, not a secret."""
        exc = StorageError("Failed to decode stored record", context={"key": "0050_2021-01-04"})
        assert "0050_2021-01-04" in str(exc)

    @pytest.mark.parametrize("cls", [ConfigurationError, StorageError, DataInconsistencyError])
    def test_subclasses(self, cls):
        assert issubclass(cls, VeronicaBaseException)
