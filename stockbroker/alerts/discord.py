"""Discord alerter — send trade notifications via Discord webhooks."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal

import httpx

from stockbroker.core.types import PortfolioSummary, TradeResult, Transaction

logger = logging.getLogger(__name__)

# Discord embed colors (decimal)
COLOR_GREEN = 0x2ECC71  # Buy / gain
COLOR_RED = 0xE74C3C  # Sell / loss / error
COLOR_BLUE = 0x3498DB  # Info / reset
COLOR_ORANGE = 0xE67E22  # Rejected trade

# Maximum retries for rate-limited requests
_MAX_RATE_LIMIT_RETRIES = 3


class DiscordAlerter:
    """Send portfolio event notifications to a Discord channel via webhook.

    All methods are async and handle failures gracefully — they log errors
    but never raise, so trading is never disrupted by alert failures.

    Rate limiting is handled automatically: if Discord returns a 429, the
    alerter waits for the ``Retry-After`` duration before retrying (up to
    ``_MAX_RATE_LIMIT_RETRIES`` times).
    """

    def __init__(self, webhook_url: str) -> None:
        self.webhook_url = webhook_url
        self._client = httpx.AsyncClient(timeout=10.0)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # --- Public alert methods ---

    async def send_alert(self, message: str, embed: dict | None = None) -> None:
        """Send a message (and optional embed) to the Discord webhook.

        Handles rate limiting (429) by sleeping for the ``Retry-After``
        duration and retrying. All HTTP and network errors are caught and
        logged — this method never raises.
        """
        payload: dict = {"content": message}
        if embed is not None:
            payload["embeds"] = [embed]

        for attempt in range(_MAX_RATE_LIMIT_RETRIES + 1):
            try:
                response = await self._client.post(self.webhook_url, json=payload)

                if response.status_code == 429:
                    retry_after = self._parse_retry_after(response)
                    if attempt < _MAX_RATE_LIMIT_RETRIES:
                        logger.warning(
                            "Discord rate limited, retrying after %.1fs (attempt %d/%d)",
                            retry_after,
                            attempt + 1,
                            _MAX_RATE_LIMIT_RETRIES,
                        )
                        await asyncio.sleep(retry_after)
                        continue
                    logger.error(
                        "Discord rate limit exceeded after %d retries, dropping message",
                        _MAX_RATE_LIMIT_RETRIES,
                    )
                    return

                if response.status_code >= 400:
                    logger.error(
                        "Discord webhook returned %d: %s",
                        response.status_code,
                        response.text[:200],
                    )
                return

            except httpx.HTTPError as exc:
                logger.error("Discord webhook request failed: %s", exc)
                return
            except Exception as exc:
                logger.error("Unexpected error sending Discord alert: %s", exc)
                return

    async def on_trade_executed(self, transaction: Transaction, summary: PortfolioSummary) -> None:
        """Alert when a buy or sell is filled."""
        color = COLOR_GREEN if transaction.type == "BUY" else COLOR_RED
        embed = {
            "title": f"Trade Executed: {transaction.type} {transaction.symbol}",
            "color": color,
            "fields": [
                {"name": "Shares", "value": str(transaction.shares), "inline": True},
                {"name": "Price", "value": self._format_money(transaction.price), "inline": True},
                {"name": "Total", "value": self._format_money(transaction.total), "inline": True},
                {
                    "name": "Cash Balance",
                    "value": self._format_money(summary.cash_balance),
                    "inline": True,
                },
                {
                    "name": "Portfolio Value",
                    "value": self._format_money(summary.total_value),
                    "inline": True,
                },
                {
                    "name": "Gain/Loss",
                    "value": self._format_gain_loss(summary.total_gain_loss),
                    "inline": True,
                },
            ],
            "timestamp": transaction.date_time.isoformat(),
        }
        await self.send_alert("", embed=embed)

    async def on_trade_rejected(self, result: TradeResult) -> None:
        """Alert when a trade request is turned down."""
        reason = (result.error or "rejected").replace("_", " ").title()
        embed = {
            "title": f"Trade Rejected: {result.side} {result.symbol}",
            "description": result.message,
            "color": COLOR_ORANGE,
            "fields": [{"name": "Reason", "value": reason, "inline": True}],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        await self.send_alert("", embed=embed)

    async def on_portfolio_reset(self, summary: PortfolioSummary) -> None:
        """Alert when the portfolio is reset to its starting cash."""
        embed = {
            "title": "Portfolio Reset",
            "description": f"Cash restored to **{self._format_money(summary.cash_balance)}**",
            "color": COLOR_BLUE,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        await self.send_alert("", embed=embed)

    async def on_error(self, error_message: str) -> None:
        """Alert on an error."""
        embed = {
            "title": "Error",
            "description": error_message,
            "color": COLOR_RED,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        await self.send_alert("", embed=embed)

    # --- Private helpers ---

    @staticmethod
    def _format_money(amount: Decimal) -> str:
        return f"${amount:,.2f}"

    @staticmethod
    def _format_gain_loss(amount: Decimal) -> str:
        """Format gain/loss with sign before the dollar sign: +$100.00 or -$50.00."""
        if amount >= 0:
            return f"+${amount:,.2f}"
        return f"-${abs(amount):,.2f}"

    @staticmethod
    def _parse_retry_after(response: httpx.Response) -> float:
        """Extract Retry-After seconds from a 429 response.

        Falls back to 1.0 second if the header is missing or unparseable.
        """
        retry_after_header = response.headers.get("Retry-After")
        if retry_after_header is not None:
            try:
                return float(retry_after_header)
            except (ValueError, TypeError):
                pass

        # Try Discord's JSON body format: {"retry_after": 1.5}
        try:
            body = response.json()
            return float(body.get("retry_after", 1.0))
        except (ValueError, TypeError, AttributeError):
            return 1.0
