"""Simulated market — current quotes for the catalog, advanced tick by tick."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from stockbroker.core.catalog import DEFAULT_CATALOG
from stockbroker.core.pricing import PriceSimulator
from stockbroker.core.types import HUNDRED, ZERO, Quote, Stock, to_decimal

logger = logging.getLogger(__name__)


class Market:
    """Holds one quote per catalog symbol.

    Quotes start at the catalog price with no change. Each :meth:`tick`
    moves every price through the :class:`PriceSimulator` and records the
    change against the previous tick.
    """

    def __init__(
        self,
        catalog: Iterable[Stock] = DEFAULT_CATALOG,
        simulator: PriceSimulator | None = None,
    ) -> None:
        self.simulator = simulator if simulator is not None else PriceSimulator()
        self._stocks: dict[str, Stock] = {s.symbol: s for s in catalog}
        self._quotes: dict[str, Quote] = {
            s.symbol: Quote(symbol=s.symbol, price=s.price) for s in self._stocks.values()
        }

    @property
    def symbols(self) -> list[str]:
        return list(self._quotes)

    def stock(self, symbol: str) -> Stock | None:
        return self._stocks.get(symbol.upper())

    def quote(self, symbol: str) -> Quote | None:
        return self._quotes.get(symbol.upper())

    def price_of(self, symbol: str) -> Decimal | None:
        quote = self.quote(symbol)
        return quote.price if quote is not None else None

    def quotes(self) -> list[Quote]:
        return list(self._quotes.values())

    def prices(self) -> dict[str, Decimal]:
        return {symbol: q.price for symbol, q in self._quotes.items()}

    def apply_prices(self, prices: Mapping[str, Decimal]) -> int:
        """Overlay saved prices onto the catalog quotes.

        Unknown symbols and non-positive or malformed prices are skipped.
        Returns the number of prices applied.
        """
        applied = 0
        for symbol, raw in prices.items():
            if symbol not in self._quotes:
                logger.warning("Ignoring saved price for unknown symbol %s", symbol)
                continue
            try:
                price = to_decimal(raw)
            except ValueError:
                logger.warning("Ignoring malformed saved price for %s: %r", symbol, raw)
                continue
            if price <= 0:
                logger.warning("Ignoring non-positive saved price for %s: %s", symbol, price)
                continue
            self._quotes[symbol] = Quote(symbol=symbol, price=price)
            applied += 1
        return applied

    def tick(self) -> list[Quote]:
        """Advance every quote by one simulated move."""
        new_prices = self.simulator.next_prices(self.prices())
        for symbol, new_price in new_prices.items():
            old_price = self._quotes[symbol].price
            change = new_price - old_price
            change_percent = change / old_price * HUNDRED if old_price > 0 else ZERO
            self._quotes[symbol] = Quote(symbol, new_price, change, change_percent)
        return self.quotes()

    def top_movers(self, limit: int = 5) -> list[Quote]:
        """Quotes with the largest absolute percentage move on the last tick."""
        movers = [q for q in self._quotes.values() if q.change != 0]
        movers.sort(key=lambda q: abs(q.change_percent), reverse=True)
        return movers[:limit]
