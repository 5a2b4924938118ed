"""Price simulator — tiered random volatility for synthetic market moves.

Each move is a small lottery:

- Tier 1 (always): roll 1-10, adds ``roll * 0.05`` percent (0.05% - 0.50%).
- Tier 2 (only if tier 1 rolled 7+): roll 1-10, adds ``roll * 0.2`` percent
  (0.2% - 2.0%).
- Tier 3 (only if tier 2 rolled 8+): roll 1-10, adds ``roll * 0.5`` percent
  (0.5% - 5.0%).

The direction is an independent coin flip. Most moves are therefore tiny,
with an occasional large one (up to 7.5%).
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal

from stockbroker.core.types import HUNDRED, to_decimal

logger = logging.getLogger(__name__)

TIER1_COEFFICIENT = Decimal("0.05")
TIER2_COEFFICIENT = Decimal("0.2")
TIER3_COEFFICIENT = Decimal("0.5")

TIER2_THRESHOLD = 7  # tier 1 roll needed to reach tier 2
TIER3_THRESHOLD = 8  # tier 2 roll needed to reach tier 3

MIN_PRICE = Decimal("1.00")
CENT = Decimal("0.01")


@dataclass(frozen=True, slots=True)
class VolatilityRoll:
    """The dice behind a single price move. Unreached tiers are 0."""

    tier1: int
    tier2: int
    tier3: int
    direction: int  # +1 or -1

    @property
    def multiplier(self) -> Decimal:
        """Magnitude of the move, in percent."""
        multiplier = self.tier1 * TIER1_COEFFICIENT
        if self.tier2 > 0:
            multiplier += self.tier2 * TIER2_COEFFICIENT
        if self.tier3 > 0:
            multiplier += self.tier3 * TIER3_COEFFICIENT
        return multiplier

    @property
    def change_percent(self) -> Decimal:
        return self.multiplier * self.direction

    def describe(self) -> str:
        if self.tier3 > 0:
            return f"Rare volatility (tier 3: {self.tier1}-{self.tier2}-{self.tier3})"
        if self.tier2 > 0:
            return f"Medium volatility (tier 2: {self.tier1}-{self.tier2})"
        return f"Normal volatility (tier 1: {self.tier1})"


class PriceSimulator:
    """Generates the next price of a stock from its current price.

    The random source is injectable so runs can be reproduced::

        sim = PriceSimulator(seed=42)
        sim.next_price(Decimal("178.42"))

    Without ``rng`` or ``seed`` the generator is seeded from system entropy.
    Prices are rounded to cents with banker's rounding (``ROUND_HALF_EVEN``)
    and never drop below :data:`MIN_PRICE`.
    """

    def __init__(self, rng: random.Random | None = None, seed: int | None = None) -> None:
        if rng is not None and seed is not None:
            raise ValueError("Pass either rng or seed, not both")
        self._rng = rng if rng is not None else random.Random(seed)

    def roll(self) -> VolatilityRoll:
        """Draw the three volatility tiers and a direction."""
        tier1 = self._rng.randint(1, 10)
        tier2 = self._rng.randint(1, 10) if tier1 >= TIER2_THRESHOLD else 0
        tier3 = self._rng.randint(1, 10) if tier2 >= TIER3_THRESHOLD else 0
        direction = 1 if self._rng.random() < 0.5 else -1
        return VolatilityRoll(tier1, tier2, tier3, direction)

    def next_price(self, current_price: Decimal | int | str) -> Decimal:
        """Apply one random move to ``current_price``.

        Raises:
            ValueError: If ``current_price`` is not a positive number.
        """
        price = to_decimal(current_price)
        if price <= 0:
            raise ValueError(f"Price must be positive, got {current_price}")

        roll = self.roll()
        new_price = price * (1 + roll.change_percent / HUNDRED)
        new_price = new_price.quantize(CENT, rounding=ROUND_HALF_EVEN)
        if new_price < MIN_PRICE:
            new_price = MIN_PRICE

        logger.debug("%s: %s -> %s (%s%%)", roll.describe(), price, new_price, roll.change_percent)
        return new_price

    def next_prices(self, prices: Mapping[str, Decimal]) -> dict[str, Decimal]:
        """Apply an independent move to every symbol in ``prices``."""
        return {symbol: self.next_price(price) for symbol, price in prices.items()}
