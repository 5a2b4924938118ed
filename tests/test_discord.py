"""Tests for DiscordAlerter — message formatting, webhook calls, and rate limiting."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from stockbroker.alerts.discord import (
    COLOR_BLUE,
    COLOR_GREEN,
    COLOR_ORANGE,
    COLOR_RED,
    DiscordAlerter,
)
from stockbroker.core.types import PortfolioSummary, TradeResult, Transaction

# --- Helpers ---

WEBHOOK_URL = "https://discord.com/api/webhooks/123456/test-token"


def _transaction(
    type_: str = "BUY",
    symbol: str = "AAPL",
    shares: int = 10,
    price: str = "178.42",
) -> Transaction:
    return Transaction(
        date_time=datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC),
        type=type_,  # type: ignore[arg-type]
        symbol=symbol,
        shares=shares,
        price=Decimal(price),
    )


def _summary(
    cash: str = "98215.80",
    total: str = "100000.00",
    gain_loss: str = "0",
) -> PortfolioSummary:
    return PortfolioSummary(
        cash_balance=Decimal(cash),
        total_value=Decimal(total),
        total_gain_loss=Decimal(gain_loss),
        invested=Decimal("1784.20"),
        position_count=1,
    )


def _mock_response(
    status_code: int = 204,
    headers: dict | None = None,
    json_data: dict | None = None,
) -> httpx.Response:
    """Create a mock httpx.Response."""
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = status_code
    resp.headers = headers or {}
    resp.text = ""
    resp.json.return_value = json_data or {}
    return resp


def _sent_embed(mock_post: AsyncMock) -> dict:
    payload = mock_post.call_args.kwargs["json"]
    return payload["embeds"][0]


class _AlerterTest:
    def setup_method(self) -> None:
        self.alerter = DiscordAlerter(WEBHOOK_URL)
        self.alerter._client = MagicMock(spec=httpx.AsyncClient)
        self.mock_post = AsyncMock(return_value=_mock_response(204))
        self.alerter._client.post = self.mock_post


# --- TestSendAlert ---


class TestSendAlert(_AlerterTest):
    """Tests for the core send_alert method."""

    @pytest.mark.asyncio
    async def test_send_message_only(self) -> None:
        await self.alerter.send_alert("Hello world")

        self.mock_post.assert_called_once_with(
            WEBHOOK_URL,
            json={"content": "Hello world"},
        )

    @pytest.mark.asyncio
    async def test_send_with_embed(self) -> None:
        embed = {"title": "Test", "color": 123}
        await self.alerter.send_alert("msg", embed=embed)

        self.mock_post.assert_called_once_with(
            WEBHOOK_URL,
            json={"content": "msg", "embeds": [embed]},
        )

    @pytest.mark.asyncio
    async def test_http_error_logged_not_raised(self) -> None:
        self.mock_post.side_effect = httpx.ConnectError("connection refused")

        await self.alerter.send_alert("test")

        self.mock_post.assert_called_once()

    @pytest.mark.asyncio
    async def test_unexpected_error_logged_not_raised(self) -> None:
        self.mock_post.side_effect = RuntimeError("event loop is closed")

        await self.alerter.send_alert("test")

        self.mock_post.assert_called_once()

    @pytest.mark.asyncio
    async def test_executed_alert_survives_unexpected_error(self) -> None:
        self.mock_post.side_effect = TypeError("bad payload")

        await self.alerter.on_trade_executed(_transaction(), _summary())

    @pytest.mark.asyncio
    async def test_non_200_logged_not_raised(self) -> None:
        self.mock_post.return_value = _mock_response(500)

        await self.alerter.send_alert("test")

        self.mock_post.assert_called_once()


# --- TestRateLimiting ---


class TestRateLimiting(_AlerterTest):
    """Tests for Discord 429 rate limit handling."""

    @pytest.mark.asyncio
    async def test_retries_on_429_with_retry_after_header(self) -> None:
        rate_limited = _mock_response(429, headers={"Retry-After": "0.01"})
        self.mock_post.side_effect = [rate_limited, _mock_response(204)]

        with patch.object(asyncio, "sleep", new_callable=AsyncMock) as mock_sleep:
            await self.alerter.send_alert("test")

        mock_sleep.assert_called_once_with(0.01)
        assert self.mock_post.call_count == 2

    @pytest.mark.asyncio
    async def test_retries_on_429_with_json_retry_after(self) -> None:
        rate_limited = _mock_response(429, json_data={"retry_after": 0.02})
        self.mock_post.side_effect = [rate_limited, _mock_response(204)]

        with patch.object(asyncio, "sleep", new_callable=AsyncMock) as mock_sleep:
            await self.alerter.send_alert("test")

        mock_sleep.assert_called_once_with(0.02)

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self) -> None:
        rate_limited = _mock_response(429, headers={"Retry-After": "0.01"})
        self.mock_post.side_effect = [rate_limited] * 4

        with patch.object(asyncio, "sleep", new_callable=AsyncMock):
            await self.alerter.send_alert("test")

        # Initial + 3 retries
        assert self.mock_post.call_count == 4


# --- Event embeds ---


class TestOnTradeExecuted(_AlerterTest):
    @pytest.mark.asyncio
    async def test_buy_embed(self) -> None:
        await self.alerter.on_trade_executed(_transaction(), _summary())

        embed = _sent_embed(self.mock_post)
        assert embed["title"] == "Trade Executed: BUY AAPL"
        assert embed["color"] == COLOR_GREEN
        fields = {f["name"]: f["value"] for f in embed["fields"]}
        assert fields["Shares"] == "10"
        assert fields["Price"] == "$178.42"
        assert fields["Total"] == "$1,784.20"
        assert fields["Cash Balance"] == "$98,215.80"
        assert fields["Portfolio Value"] == "$100,000.00"
        assert fields["Gain/Loss"] == "+$0.00"
        assert embed["timestamp"].startswith("2024-06-01T12:00:00")

    @pytest.mark.asyncio
    async def test_sell_embed_with_loss(self) -> None:
        await self.alerter.on_trade_executed(
            _transaction(type_="SELL", shares=5),
            _summary(gain_loss="-42.5"),
        )

        embed = _sent_embed(self.mock_post)
        assert "SELL" in embed["title"]
        assert embed["color"] == COLOR_RED
        fields = {f["name"]: f["value"] for f in embed["fields"]}
        assert fields["Gain/Loss"] == "-$42.50"  # sign before dollar


class TestOnTradeRejected(_AlerterTest):
    @pytest.mark.asyncio
    async def test_rejection_embed(self) -> None:
        result = TradeResult.rejected(
            "insufficient_funds",
            "Insufficient funds: need $1,784.20 but only have $10.00",
            "BUY",
            "AAPL",
            10,
            Decimal("178.42"),
            _summary(cash="10"),
        )

        await self.alerter.on_trade_rejected(result)

        embed = _sent_embed(self.mock_post)
        assert embed["title"] == "Trade Rejected: BUY AAPL"
        assert embed["color"] == COLOR_ORANGE
        assert "Insufficient funds" in embed["description"]
        fields = {f["name"]: f["value"] for f in embed["fields"]}
        assert fields["Reason"] == "Insufficient Funds"


class TestOnPortfolioReset(_AlerterTest):
    @pytest.mark.asyncio
    async def test_reset_embed(self) -> None:
        await self.alerter.on_portfolio_reset(_summary(cash="100000"))

        embed = _sent_embed(self.mock_post)
        assert embed["title"] == "Portfolio Reset"
        assert "$100,000.00" in embed["description"]
        assert embed["color"] == COLOR_BLUE
        assert "timestamp" in embed


class TestOnError(_AlerterTest):
    @pytest.mark.asyncio
    async def test_error_embed(self) -> None:
        await self.alerter.on_error("Could not save portfolio")

        embed = _sent_embed(self.mock_post)
        assert embed["title"] == "Error"
        assert "Could not save portfolio" in embed["description"]
        assert embed["color"] == COLOR_RED


# --- TestClose ---


class TestAlerterClose:
    @pytest.mark.asyncio
    async def test_close_calls_aclose(self) -> None:
        alerter = DiscordAlerter(WEBHOOK_URL)
        alerter._client = MagicMock(spec=httpx.AsyncClient)
        alerter._client.aclose = AsyncMock()

        await alerter.close()

        alerter._client.aclose.assert_called_once()


# --- TestParseRetryAfter ---


class TestParseRetryAfter:
    """Tests for _parse_retry_after static method."""

    def test_header_value(self) -> None:
        resp = _mock_response(429, headers={"Retry-After": "2.5"})
        assert DiscordAlerter._parse_retry_after(resp) == 2.5

    def test_json_body_fallback(self) -> None:
        resp = _mock_response(429, json_data={"retry_after": 1.5})
        assert DiscordAlerter._parse_retry_after(resp) == 1.5

    def test_default_fallback(self) -> None:
        resp = _mock_response(429, headers={"Retry-After": "invalid"})
        resp.json.side_effect = ValueError("no json")
        assert DiscordAlerter._parse_retry_after(resp) == 1.0
