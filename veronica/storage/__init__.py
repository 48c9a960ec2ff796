"""Storage module — the daily record time-series store."""

from __future__ import annotations
