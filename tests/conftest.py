"""Shared fixtures and test configuration."""

import os
from decimal import Decimal

import pytest

# Keep the Settings() singleton independent of the developer's environment.
# CLI tests pass an explicit --data-path so nothing is written to data/.
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("INITIAL_CASH", "100000")

from stockbroker.core.ledger import Ledger  # noqa: E402
from stockbroker.core.portfolio import Portfolio  # noqa: E402


@pytest.fixture
def portfolio() -> Portfolio:
    return Portfolio.default(Decimal("100000"))


@pytest.fixture
def ledger(portfolio: Portfolio) -> Ledger:
    return Ledger(portfolio=portfolio, initial_cash=Decimal("100000"))
