"""Tests for the command-line entry point."""

import subprocess
import sys
from pathlib import Path

import pytest

from main import _parse_price, build_parser, log_file_path

ROOT = Path(__file__).resolve().parent.parent


class TestParser:
    def test_trade_arguments(self):
        args = build_parser().parse_args(["buy", "AAPL", "10", "--price", "178.42"])
        assert args.command == "buy"
        assert args.symbol == "AAPL"
        assert args.shares == 10
        assert str(args.price) == "178.42"

    def test_run_arguments(self):
        args = build_parser().parse_args(["--data-path", "/tmp/x", "run", "--ticks", "3", "--interval", "0.1"])
        assert args.data_path == "/tmp/x"
        assert args.ticks == 3
        assert args.interval == 0.1

    def test_log_file_follows_data_path(self):
        assert Path(log_file_path("/tmp/state")) == Path("/tmp/state/stockbroker.log")

    @pytest.mark.parametrize("value", ["0", "-1", "abc"])
    def test_parse_price_rejects(self, value):
        import argparse

        with pytest.raises(argparse.ArgumentTypeError):
            _parse_price(value)


class TestCLI:
    """Run main.py in a subprocess against a temporary data directory."""

    @pytest.fixture(autouse=True)
    def _data_dir(self, tmp_path: Path) -> None:
        self.data_dir = tmp_path / "data"

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        return subprocess.run(
            [sys.executable, "main.py", "--data-path", str(self.data_dir), *args],
            capture_output=True,
            text=True,
            cwd=ROOT,
            timeout=60,
        )

    def test_no_command_exits_with_error(self):
        result = self._run()
        assert result.returncode == 1

    def test_help_exits_cleanly(self):
        result = self._run("--help")
        assert result.returncode == 0
        for command in ("run", "quotes", "portfolio", "buy", "sell", "reset"):
            assert command in result.stdout

    def test_quotes(self):
        result = self._run("quotes")
        assert result.returncode == 0
        assert "AAPL" in result.stdout
        assert "178.42" in result.stdout

    def test_buy_then_sell_round_trip(self):
        bought = self._run("buy", "AAPL", "10", "--price", "178.42")
        assert bought.returncode == 0, bought.stderr
        assert "Bought 10 shares of AAPL" in bought.stdout
        assert "$98,215.80" in bought.stdout

        portfolio = self._run("portfolio")
        assert "AAPL" in portfolio.stdout

        sold = self._run("sell", "AAPL", "10", "--price", "178.42")
        assert sold.returncode == 0, sold.stderr
        assert "$100,000.00" in sold.stdout

        history = self._run("history")
        lines = [line for line in history.stdout.splitlines() if "AAPL" in line]
        assert [line.split()[2] for line in lines] == ["BUY", "SELL"]

    def test_sell_without_shares_fails(self):
        result = self._run("sell", "AAPL", "1")
        assert result.returncode == 1
        assert "Error: Not enough shares of AAPL" in result.stdout

    def test_unknown_symbol_fails(self):
        result = self._run("buy", "ZZZZ", "1")
        assert result.returncode == 1
        assert "No market price" in result.stdout

    def test_run_ticks_and_saves_prices(self):
        result = self._run("run", "--ticks", "2", "--interval", "0.01")
        assert result.returncode == 0, result.stderr
        assert "[tick 2]" in result.stdout
        assert (self.data_dir / "prices.json").exists()

    def test_log_file_written_to_data_path(self):
        self._run("buy", "AAPL", "1")
        self._run("portfolio")
        assert (self.data_dir / "stockbroker.log").exists()

    def test_reset_with_yes(self):
        self._run("buy", "MSFT", "1")
        result = self._run("reset", "--yes")
        assert result.returncode == 0
        assert "reset to $100,000.00" in result.stdout
        assert "No open positions" in self._run("portfolio").stdout
