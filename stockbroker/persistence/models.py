"""JSON record schemas for the persistence layer.

Field names are camelCase on disk (``averageCost``, ``dateTime``,
``cashBalance``...). Decimals are serialized as JSON strings so that
prices and balances survive a save/load cycle without precision loss.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from stockbroker.core.portfolio import Portfolio
from stockbroker.core.types import Position, Transaction

logger = logging.getLogger(__name__)


def _ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes written by older or hand-edited files."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("symbol", mode="before", check_fields=False)
    @classmethod
    def normalize_symbol(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class PositionRecord(_Record):
    symbol: str = Field(min_length=1)
    shares: int = Field(ge=0)
    average_cost: Decimal = Field(ge=0)
    current_price: Decimal = Field(ge=0)

    @classmethod
    def from_position(cls, position: Position) -> PositionRecord:
        return cls(
            symbol=position.symbol,
            shares=position.shares,
            average_cost=position.average_cost,
            current_price=position.current_price,
        )

    def to_position(self) -> Position:
        return Position(
            symbol=self.symbol,
            shares=self.shares,
            average_cost=self.average_cost,
            current_price=self.current_price,
        )


class TransactionRecord(_Record):
    date_time: datetime
    type: Literal["BUY", "SELL"]
    symbol: str = Field(min_length=1)
    shares: int = Field(gt=0)
    price: Decimal = Field(gt=0)

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> TransactionRecord:
        return cls(
            date_time=transaction.date_time,
            type=transaction.type,
            symbol=transaction.symbol,
            shares=transaction.shares,
            price=transaction.price,
        )

    def to_transaction(self) -> Transaction:
        return Transaction(
            date_time=_ensure_utc(self.date_time),
            type=self.type,
            symbol=self.symbol,
            shares=self.shares,
            price=self.price,
        )


class PortfolioRecord(_Record):
    cash_balance: Decimal
    total_value: Decimal = Decimal("0")
    total_gain_loss: Decimal = Decimal("0")
    positions: list[PositionRecord] = Field(default_factory=list)
    transaction_history: list[TransactionRecord] = Field(default_factory=list)

    @classmethod
    def from_portfolio(cls, portfolio: Portfolio) -> PortfolioRecord:
        return cls(
            cash_balance=portfolio.cash_balance,
            total_value=portfolio.total_value,
            total_gain_loss=portfolio.total_gain_loss,
            positions=[PositionRecord.from_position(p) for p in portfolio.positions.values()],
            transaction_history=[
                TransactionRecord.from_transaction(t) for t in portfolio.transaction_history
            ],
        )

    def to_portfolio(self) -> Portfolio:
        """Build a Portfolio, dropping empty positions and recomputing totals.

        The stored ``totalValue`` and ``totalGainLoss`` are informational
        only; the aggregates are always derived from the positions.
        """
        positions: dict[str, Position] = {}
        for record in self.positions:
            if record.shares == 0:
                continue
            if record.symbol in positions:
                logger.warning("Dropping duplicate position record for %s", record.symbol)
                continue
            positions[record.symbol] = record.to_position()
        return Portfolio(
            cash_balance=self.cash_balance,
            positions=positions,
            transaction_history=[t.to_transaction() for t in self.transaction_history],
        )


PRICES_ADAPTER: TypeAdapter[dict[str, Decimal]] = TypeAdapter(dict[str, Decimal])
TRANSACTIONS_ADAPTER: TypeAdapter[list[TransactionRecord]] = TypeAdapter(list[TransactionRecord])
