"""Core module — decision engine and backtest runner.

Replays historical daily records through a scoring strategy to evaluate
its profitability without trading real money.
"""

from __future__ import annotations
