"""Core module — price simulation, portfolio ledger, and market state."""

from stockbroker.core.ledger import Ledger
from stockbroker.core.market import Market
from stockbroker.core.portfolio import Portfolio
from stockbroker.core.pricing import PriceSimulator
from stockbroker.core.types import Position, PortfolioSummary, Quote, Stock, TradeResult, Transaction

__all__ = [
    "Ledger",
    "Market",
    "Portfolio",
    "PortfolioSummary",
    "Position",
    "PriceSimulator",
    "Quote",
    "Stock",
    "TradeResult",
    "Transaction",
]
