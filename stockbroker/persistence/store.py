"""JSON file store for persistence — portfolio, prices, and transactions."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from decimal import Decimal
from pathlib import Path

from stockbroker.core.portfolio import DEFAULT_CASH, Portfolio
from stockbroker.core.types import Transaction
from stockbroker.persistence.models import (
    PRICES_ADAPTER,
    TRANSACTIONS_ADAPTER,
    PortfolioRecord,
    TransactionRecord,
)

logger = logging.getLogger(__name__)

PORTFOLIO_FILE = "portfolio.json"
PRICES_FILE = "prices.json"
TRANSACTIONS_FILE = "transactions.json"


class DataStore:
    """Reads and writes the simulator state as human-readable JSON files.

    Loading never raises: a missing, unreadable or malformed file is logged
    and replaced by a default value (a fresh portfolio, no prices, no
    transactions). Saving never raises either; it logs the failure and
    returns ``False``.

    Lifecycle::

        store = DataStore("data/")
        portfolio = store.load_portfolio()
        ...
        store.save_portfolio(portfolio)
    """

    def __init__(self, data_dir: str | Path = "data/", initial_cash: Decimal = DEFAULT_CASH) -> None:
        self.data_dir = Path(data_dir)
        self.initial_cash = initial_cash

    @property
    def portfolio_path(self) -> Path:
        return self.data_dir / PORTFOLIO_FILE

    @property
    def prices_path(self) -> Path:
        return self.data_dir / PRICES_FILE

    @property
    def transactions_path(self) -> Path:
        return self.data_dir / TRANSACTIONS_FILE

    # --- Portfolio ---

    def load_portfolio(self) -> Portfolio:
        """Return the saved portfolio, or a default one if none can be read."""
        raw = self._read(self.portfolio_path)
        if raw is not None:
            try:
                return PortfolioRecord.model_validate_json(raw).to_portfolio()
            except ValueError as exc:
                logger.error("Error loading portfolio from %s: %s", self.portfolio_path, exc)
        return Portfolio.default(self.initial_cash)

    def save_portfolio(self, portfolio: Portfolio) -> bool:
        record = PortfolioRecord.from_portfolio(portfolio)
        return self._write(self.portfolio_path, record.model_dump_json(by_alias=True, indent=2))

    # --- Prices ---

    def load_prices(self) -> dict[str, Decimal]:
        """Return saved prices by symbol, or an empty mapping."""
        raw = self._read(self.prices_path)
        if raw is not None:
            try:
                return PRICES_ADAPTER.validate_json(raw)
            except ValueError as exc:
                logger.error("Error loading prices from %s: %s", self.prices_path, exc)
        return {}

    def save_prices(self, prices: Mapping[str, Decimal]) -> bool:
        payload = PRICES_ADAPTER.dump_json(dict(prices), indent=2).decode("utf-8")
        return self._write(self.prices_path, payload)

    # --- Transactions ---

    def load_transactions(self) -> list[Transaction]:
        raw = self._read(self.transactions_path)
        if raw is not None:
            try:
                records = TRANSACTIONS_ADAPTER.validate_json(raw)
                return [r.to_transaction() for r in records]
            except ValueError as exc:
                logger.error("Error loading transactions from %s: %s", self.transactions_path, exc)
        return []

    def save_transactions(self, transactions: Iterable[Transaction]) -> bool:
        records = [TransactionRecord.from_transaction(t) for t in transactions]
        payload = TRANSACTIONS_ADAPTER.dump_json(records, by_alias=True, indent=2).decode("utf-8")
        return self._write(self.transactions_path, payload)

    # --- Utilities ---

    def has_saved_data(self) -> bool:
        return self.portfolio_path.exists() or self.prices_path.exists()

    def delete_all_data(self) -> bool:
        """Remove every state file. Returns False if any could not be deleted."""
        ok = True
        for path in (self.portfolio_path, self.prices_path, self.transactions_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.error("Error deleting %s: %s", path, exc)
                ok = False
        return ok

    # --- Private helpers ---

    def _read(self, path: Path) -> str | None:
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Error reading %s: %s", path, exc)
            return None

    def _write(self, path: Path, payload: str) -> bool:
        """Write via a temporary file and an atomic rename."""
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.error("Error saving %s: %s", path, exc)
            return False
        return True
