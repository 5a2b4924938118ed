"""Portfolio ledger — applies trades and revaluations to a portfolio."""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Literal

from stockbroker.core.portfolio import DEFAULT_CASH, Portfolio
from stockbroker.core.types import (
    PortfolioSummary,
    Position,
    TradeResult,
    TradeSide,
    Transaction,
    to_decimal,
)

logger = logging.getLogger(__name__)

LedgerEvent = Literal["trade", "revalue", "reset"]

# Called with (event, summary) after every successful mutation.
LedgerCallback = Callable[[LedgerEvent, PortfolioSummary], None]


class Ledger:
    """Single writer for a :class:`Portfolio`.

    Every mutation (trade, revaluation, reset) runs under one lock and
    recomputes the portfolio aggregates before the lock is released, so a
    reader never sees a half-applied trade or stale totals. Use
    :meth:`snapshot` or :meth:`summary` to read from another thread.

    Trade rejections are returned as :class:`TradeResult` values. In that
    case the portfolio is not modified at all.
    """

    def __init__(
        self,
        portfolio: Portfolio | None = None,
        initial_cash: Decimal = DEFAULT_CASH,
        on_change: LedgerCallback | None = None,
    ) -> None:
        self.initial_cash = initial_cash
        self.portfolio = portfolio if portfolio is not None else Portfolio.default(initial_cash)
        self.on_change = on_change
        self._lock = threading.Lock()
        with self._lock:
            self.portfolio.recalculate()

    def snapshot(self) -> Portfolio:
        """Deep copy of the portfolio, safe to serialize outside the lock."""
        with self._lock:
            return copy.deepcopy(self.portfolio)

    def summary(self) -> PortfolioSummary:
        with self._lock:
            return self.portfolio.summary()

    def replace_portfolio(self, portfolio: Portfolio) -> None:
        """Swap in a portfolio loaded from storage."""
        with self._lock:
            portfolio.recalculate()
            self.portfolio = portfolio

    # --- Trades ---

    def buy(self, symbol: str, shares: int, price: Decimal | int | str) -> TradeResult:
        return self.execute_trade(symbol, shares, price, is_buy=True)

    def sell(self, symbol: str, shares: int, price: Decimal | int | str) -> TradeResult:
        return self.execute_trade(symbol, shares, price, is_buy=False)

    def execute_trade(
        self,
        symbol: str,
        shares: int,
        price: Decimal | int | str,
        is_buy: bool,
    ) -> TradeResult:
        """Buy or sell ``shares`` of ``symbol`` at ``price``.

        All-or-nothing: either the trade is fully applied (cash, position,
        transaction, aggregates) or the portfolio is left untouched and the
        result says why.
        """
        side: TradeSide = "BUY" if is_buy else "SELL"
        symbol = symbol.strip().upper() if isinstance(symbol, str) else ""

        with self._lock:
            invalid = self._validate(symbol, shares, price)
            if invalid is not None:
                result = TradeResult.rejected(
                    "invalid_trade_input",
                    invalid,
                    side,
                    symbol,
                    shares,
                    None,
                    self.portfolio.summary(),
                )
            elif is_buy:
                result = self._buy(symbol, shares, to_decimal(price))
            else:
                result = self._sell(symbol, shares, to_decimal(price))

        if result.success:
            logger.info("%s", result.message)
            self._notify("trade", result.summary)
        else:
            logger.warning("Rejected %s %s x%s: %s", side, symbol, shares, result.message)
        return result

    def _buy(self, symbol: str, shares: int, price: Decimal) -> TradeResult:
        portfolio = self.portfolio
        required = shares * price
        if portfolio.cash_balance < required:
            return TradeResult.rejected(
                "insufficient_funds",
                f"Insufficient funds: need ${required:,.2f} but only have "
                f"${portfolio.cash_balance:,.2f}",
                "BUY",
                symbol,
                shares,
                price,
                portfolio.summary(),
            )

        portfolio.cash_balance -= required
        position = portfolio.get_position(symbol)
        if position is not None:
            total_shares = position.shares + shares
            position.average_cost = (position.total_cost + required) / total_shares
            position.shares = total_shares
        else:
            portfolio.positions[symbol] = Position(
                symbol=symbol,
                shares=shares,
                average_cost=price,
                current_price=price,
            )

        return self._record(Transaction.now("BUY", symbol, shares, price))

    def _sell(self, symbol: str, shares: int, price: Decimal) -> TradeResult:
        portfolio = self.portfolio
        position = portfolio.get_position(symbol)
        held = position.shares if position is not None else 0
        if position is None or held < shares:
            return TradeResult.rejected(
                "insufficient_shares",
                f"Not enough shares of {symbol}: you own {held}, trying to sell {shares}",
                "SELL",
                symbol,
                shares,
                price,
                portfolio.summary(),
            )

        portfolio.cash_balance += shares * price
        position.shares -= shares
        if position.shares == 0:
            del portfolio.positions[symbol]

        return self._record(Transaction.now("SELL", symbol, shares, price))

    def _record(self, transaction: Transaction) -> TradeResult:
        self.portfolio.transaction_history.append(transaction)
        self.portfolio.recalculate()
        return TradeResult.executed(transaction, self.portfolio.summary())

    @staticmethod
    def _validate(symbol: str, shares: int, price: Decimal | int | str) -> str | None:
        """Return a rejection message, or None if the trade input is well-formed."""
        if not symbol:
            return "Symbol is required"
        if isinstance(shares, bool) or not isinstance(shares, int):
            return f"Shares must be a whole number, got {shares!r}"
        if shares <= 0:
            return f"Shares must be positive, got {shares}"
        try:
            value = to_decimal(price)
        except ValueError:
            return f"Price must be a number, got {price!r}"
        if value <= 0:
            return f"Price must be positive, got {value}"
        return None

    # --- Valuation ---

    def revalue_positions(
        self, price_feed: Mapping[str, Decimal | int | str]
    ) -> PortfolioSummary:
        """Mark held positions to the prices in ``price_feed``.

        Symbols missing from the feed keep their last known price, as do
        symbols whose feed value is malformed or not positive.
        """
        with self._lock:
            prices = self._valid_prices(self.portfolio.positions, price_feed)
            for symbol, price in prices.items():
                self.portfolio.positions[symbol].current_price = price
            self.portfolio.recalculate()
            summary = self.portfolio.summary()

        self._notify("revalue", summary)
        return summary

    @staticmethod
    def _valid_prices(
        held: Mapping[str, Position],
        price_feed: Mapping[str, Decimal | int | str],
    ) -> dict[str, Decimal]:
        prices: dict[str, Decimal] = {}
        for symbol in held:
            if symbol not in price_feed:
                continue
            raw = price_feed[symbol]
            try:
                price = to_decimal(raw)
            except ValueError:
                logger.warning("Ignoring malformed price for %s: %r", symbol, raw)
                continue
            if price <= 0:
                logger.warning("Ignoring non-positive price for %s: %s", symbol, price)
                continue
            prices[symbol] = price
        return prices

    def reset(self) -> PortfolioSummary:
        """Restore the starting cash and drop every position and transaction."""
        with self._lock:
            self.portfolio.reset(self.initial_cash)
            summary = self.portfolio.summary()

        logger.info("Portfolio reset to $%s", f"{self.initial_cash:,.2f}")
        self._notify("reset", summary)
        return summary

    def _notify(self, event: LedgerEvent, summary: PortfolioSummary) -> None:
        if self.on_change is not None:
            self.on_change(event, summary)
