"""Portfolio management — tracks cash, positions, history, and valuation."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from stockbroker.core.types import ZERO, Position, PortfolioSummary, Transaction

DEFAULT_CASH = Decimal("100000")


@dataclass
class Portfolio:
    """Cash balance, open positions keyed by symbol, and the transaction log.

    ``total_value`` and ``total_gain_loss`` are cached aggregates. Anything
    that changes cash, shares or a position's price must call
    :meth:`recalculate` before the aggregates are read again; the ledger
    does this for every operation it performs.
    """

    cash_balance: Decimal = DEFAULT_CASH
    positions: dict[str, Position] = field(default_factory=dict)
    transaction_history: list[Transaction] = field(default_factory=list)
    total_value: Decimal = ZERO
    total_gain_loss: Decimal = ZERO

    def __post_init__(self) -> None:
        self.recalculate()

    @classmethod
    def default(cls, initial_cash: Decimal = DEFAULT_CASH) -> Portfolio:
        return cls(cash_balance=initial_cash)

    @property
    def has_positions(self) -> bool:
        return len(self.positions) > 0

    @property
    def invested(self) -> Decimal:
        """Sum of the cost basis of all open positions."""
        return sum((p.total_cost for p in self.positions.values()), ZERO)

    def get_position(self, symbol: str) -> Position | None:
        return self.positions.get(symbol)

    def recalculate(self) -> None:
        """Recompute total value and total gain/loss from the positions."""
        market_value = sum((p.current_value for p in self.positions.values()), ZERO)
        self.total_value = self.cash_balance + market_value
        self.total_gain_loss = market_value - self.invested

    def summary(self) -> PortfolioSummary:
        return PortfolioSummary(
            cash_balance=self.cash_balance,
            total_value=self.total_value,
            total_gain_loss=self.total_gain_loss,
            invested=self.invested,
            position_count=len(self.positions),
        )

    def reset(self, initial_cash: Decimal = DEFAULT_CASH) -> None:
        """Discard all positions and history and restore the starting cash."""
        self.cash_balance = initial_cash
        self.positions.clear()
        self.transaction_history.clear()
        self.recalculate()
