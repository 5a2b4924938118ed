"""Core data structures used throughout the stockbroker simulator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Literal

TradeSide = Literal["BUY", "SELL"]
TradeError = Literal["insufficient_funds", "insufficient_shares", "invalid_trade_input"]

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a number to Decimal without going through binary float digits.

    Raises:
        ValueError: If the value cannot be parsed as a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


@dataclass(frozen=True, slots=True)
class Stock:
    """A catalog entry with its starting price."""

    symbol: str
    name: str
    price: Decimal
    sector: str = ""
    market_cap: str = ""
    volume: str = ""
    description: str = ""


@dataclass(frozen=True, slots=True)
class Quote:
    """Latest simulated price of a symbol and its move since the previous tick."""

    symbol: str
    price: Decimal
    change: Decimal = ZERO
    change_percent: Decimal = ZERO

    @property
    def is_up(self) -> bool:
        return self.change > 0

    @property
    def is_down(self) -> bool:
        return self.change < 0


@dataclass(slots=True)
class Position:
    """Shares held in one symbol, with their cost basis."""

    symbol: str
    shares: int
    average_cost: Decimal
    current_price: Decimal

    @property
    def total_cost(self) -> Decimal:
        return self.shares * self.average_cost

    @property
    def current_value(self) -> Decimal:
        return self.shares * self.current_price

    @property
    def gain_loss(self) -> Decimal:
        return self.current_value - self.total_cost

    @property
    def gain_loss_percent(self) -> Decimal:
        """Unrealized gain as a percentage of cost. Returns 0 for a zero cost basis."""
        total_cost = self.total_cost
        if total_cost > 0:
            return self.gain_loss / total_cost * HUNDRED
        return ZERO


@dataclass(frozen=True, slots=True)
class Transaction:
    """An executed trade. Never modified once recorded."""

    date_time: datetime
    type: TradeSide
    symbol: str
    shares: int
    price: Decimal

    @property
    def total(self) -> Decimal:
        return self.shares * self.price

    @classmethod
    def now(cls, type: TradeSide, symbol: str, shares: int, price: Decimal) -> Transaction:
        return cls(datetime.now(UTC), type, symbol, shares, price)


@dataclass(frozen=True, slots=True)
class PortfolioSummary:
    """Portfolio aggregates at one point in time."""

    cash_balance: Decimal
    total_value: Decimal
    total_gain_loss: Decimal
    invested: Decimal
    position_count: int

    @property
    def total_gain_loss_percent(self) -> Decimal:
        if self.invested > 0:
            return self.total_gain_loss / self.invested * HUNDRED
        return ZERO


@dataclass(frozen=True, slots=True)
class TradeResult:
    """Outcome of a trade request.

    Rejections are expected, recoverable outcomes and are reported here
    rather than raised. A rejected result carries no transaction and the
    portfolio is left untouched.
    """

    success: bool
    side: TradeSide
    symbol: str
    shares: int
    price: Decimal | None
    message: str
    summary: PortfolioSummary
    error: TradeError | None = None
    transaction: Transaction | None = None

    @classmethod
    def executed(cls, transaction: Transaction, summary: PortfolioSummary) -> TradeResult:
        verb = "Bought" if transaction.type == "BUY" else "Sold"
        message = (
            f"{verb} {transaction.shares} shares of {transaction.symbol} "
            f"at ${transaction.price:,.2f} (total ${transaction.total:,.2f})"
        )
        return cls(
            success=True,
            side=transaction.type,
            symbol=transaction.symbol,
            shares=transaction.shares,
            price=transaction.price,
            message=message,
            summary=summary,
            transaction=transaction,
        )

    @classmethod
    def rejected(
        cls,
        error: TradeError,
        message: str,
        side: TradeSide,
        symbol: str,
        shares: int,
        price: Decimal | None,
        summary: PortfolioSummary,
    ) -> TradeResult:
        return cls(
            success=False,
            side=side,
            symbol=symbol,
            shares=shares,
            price=price,
            message=message,
            summary=summary,
            error=error,
        )
