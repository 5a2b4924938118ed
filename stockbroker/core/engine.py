"""Trading engine — orchestrates market ticks, orders, persistence, and alerts."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

from stockbroker.alerts.discord import DiscordAlerter
from stockbroker.core.ledger import Ledger
from stockbroker.core.market import Market
from stockbroker.core.types import PortfolioSummary, TradeResult
from stockbroker.persistence.store import DataStore

logger = logging.getLogger(__name__)


class Engine:
    """Drives the simulated market and routes user orders to the ledger.

    Typical use::

        engine = Engine(ledger, market, store=DataStore("data/"))
        engine.load()
        await engine.submit_order("AAPL", 10, is_buy=True)
        await engine.run()          # tick every ``tick_interval`` seconds

    Ticks and orders are meant to run on one event loop. Each ledger
    mutation is a synchronous critical section, so a revaluation always
    sees either none or all of a trade's effects.
    """

    def __init__(
        self,
        ledger: Ledger,
        market: Market,
        store: DataStore | None = None,
        alerter: DiscordAlerter | None = None,
        tick_interval: float = 5.0,
    ) -> None:
        self.ledger = ledger
        self.market = market
        self.store = store
        self.alerter = alerter
        self.tick_interval = tick_interval
        self.tick_count = 0
        self._stop_event = asyncio.Event()

    def load(self) -> PortfolioSummary:
        """Restore saved state and mark the portfolio to the saved prices."""
        if self.store is not None and not self.store.has_saved_data():
            logger.info("No saved data in %s, starting fresh", self.store.data_dir)
        elif self.store is not None:
            self.ledger.replace_portfolio(self.store.load_portfolio())
            applied = self.market.apply_prices(self.store.load_prices())
            logger.info(
                "Loaded portfolio with %d positions and %d saved prices",
                len(self.ledger.portfolio.positions),
                applied,
            )
        return self.ledger.revalue_positions(self.market.prices())

    async def tick(self) -> PortfolioSummary:
        """Move every market price once and revalue the portfolio."""
        quotes = self.market.tick()
        summary = self.ledger.revalue_positions(self.market.prices())
        self.tick_count += 1

        if self.store is not None and not self.store.save_prices(self.market.prices()):
            await self._alert_error("Could not save market prices")

        logger.debug(
            "Tick %d: %d quotes, total value %s",
            self.tick_count,
            len(quotes),
            summary.total_value,
        )
        return summary

    async def submit_order(
        self,
        symbol: str,
        shares: int,
        is_buy: bool,
        price: Decimal | None = None,
    ) -> TradeResult:
        """Execute an order at ``price``, or at the current market price if omitted."""
        if price is None:
            price = self.market.price_of(symbol) if isinstance(symbol, str) else None
            if price is None:
                result = self._no_quote(symbol, shares, is_buy)
                await self._alert_rejected(result)
                return result

        result = self.ledger.execute_trade(symbol, shares, price, is_buy)

        if not result.success:
            await self._alert_rejected(result)
            return result

        if not self.save_all():
            await self._alert_error(f"Could not save state after: {result.message}")
        if self.alerter is not None and result.transaction is not None:
            await self.alerter.on_trade_executed(result.transaction, result.summary)
        return result

    async def reset(self) -> PortfolioSummary:
        """Wipe saved data and return the portfolio to its starting cash."""
        if self.store is not None:
            self.store.delete_all_data()
        summary = self.ledger.reset()
        if not self.save_all():
            await self._alert_error("Could not save state after portfolio reset")
        if self.alerter is not None:
            await self.alerter.on_portfolio_reset(summary)
        return summary

    def save_all(self) -> bool:
        """Persist portfolio, prices and transactions from a stable snapshot."""
        if self.store is None:
            return True
        snapshot = self.ledger.snapshot()
        saved = [
            self.store.save_portfolio(snapshot),
            self.store.save_prices(self.market.prices()),
            self.store.save_transactions(snapshot.transaction_history),
        ]
        return all(saved)

    async def run(self, max_ticks: int | None = None) -> None:
        """Tick every ``tick_interval`` seconds until stopped or ``max_ticks`` is reached."""
        self._stop_event.clear()
        logger.info("Market simulation started (interval=%.1fs)", self.tick_interval)

        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.tick_interval)
                break
            except TimeoutError:
                pass
            await self.tick()
            ticks += 1

        logger.info("Market simulation stopped after %d ticks", self.tick_count)

    def stop(self) -> None:
        self._stop_event.set()

    # --- Private helpers ---

    def _no_quote(self, symbol: str, shares: int, is_buy: bool) -> TradeResult:
        message = f"No market price for symbol {symbol!r}"
        logger.warning("Rejected order: %s", message)
        return TradeResult.rejected(
            "invalid_trade_input",
            message,
            "BUY" if is_buy else "SELL",
            symbol.upper() if isinstance(symbol, str) else "",
            shares,
            None,
            self.ledger.summary(),
        )

    async def _alert_rejected(self, result: TradeResult) -> None:
        if self.alerter is not None:
            await self.alerter.on_trade_rejected(result)

    async def _alert_error(self, message: str) -> None:
        logger.error(message)
        if self.alerter is not None:
            await self.alerter.on_error(message)
