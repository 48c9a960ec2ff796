"""Veronica — backtesting of stock scoring strategies over daily prices."""

from __future__ import annotations

__version__ = "0.1.0"
