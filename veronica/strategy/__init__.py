"""Strategy module — entry scores and settle decisions for daily stocks."""

from __future__ import annotations
