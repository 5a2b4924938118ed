"""Stockbroker simulator — CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from decimal import Decimal
from pathlib import Path

from stockbroker.config import settings, setup_logging

logger = logging.getLogger(__name__)


def _parse_price(value: str) -> Decimal:
    """Parse a positive decimal price from the command line."""
    from stockbroker.core.types import to_decimal

    try:
        price = to_decimal(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid price: '{value}'") from None
    if price <= 0:
        raise argparse.ArgumentTypeError(f"Price must be positive, got {value}")
    return price


def log_file_path(data_path: str) -> str:
    """Log file kept next to the saved state."""
    return str(Path(data_path) / "stockbroker.log")


def build_engine(args: argparse.Namespace):
    """Create the engine from settings and load the saved state."""
    from stockbroker.alerts.discord import DiscordAlerter
    from stockbroker.core.engine import Engine
    from stockbroker.core.ledger import Ledger
    from stockbroker.core.market import Market
    from stockbroker.core.pricing import PriceSimulator
    from stockbroker.persistence.store import DataStore

    store = DataStore(args.data_path, initial_cash=settings.initial_cash)
    market = Market(simulator=PriceSimulator(seed=settings.random_seed))
    ledger = Ledger(initial_cash=settings.initial_cash)

    alerter: DiscordAlerter | None = None
    if settings.discord_webhook_url:
        alerter = DiscordAlerter(webhook_url=settings.discord_webhook_url)

    engine = Engine(
        ledger=ledger,
        market=market,
        store=store,
        alerter=alerter,
        tick_interval=getattr(args, "interval", None) or settings.tick_interval_seconds,
    )
    engine.load()
    return engine


async def _close(engine) -> None:
    if engine.alerter is not None:
        await engine.alerter.close()


def _print_summary(summary) -> None:
    print(
        f"Cash: ${summary.cash_balance:,.2f}  "
        f"Value: ${summary.total_value:,.2f}  "
        f"Gain/Loss: ${summary.total_gain_loss:,.2f} ({summary.total_gain_loss_percent:+.2f}%)"
    )


async def cmd_run(args: argparse.Namespace) -> None:
    """Run the market simulation loop."""
    engine = build_engine(args)

    def on_change(event, summary) -> None:
        if event == "revalue":
            print(f"[tick {engine.tick_count + 1}] ", end="")
            _print_summary(summary)
            movers = engine.market.top_movers(limit=3)
            if movers:
                print("  Top movers: " + ", ".join(f"{q.symbol} {q.change_percent:+.2f}%" for q in movers))

    engine.ledger.on_change = on_change

    print(f"Market simulation starting (tick every {engine.tick_interval:g}s)")
    print("Press Ctrl+C to stop.")

    try:
        await engine.run(max_ticks=args.ticks)
    finally:
        engine.save_all()
        await _close(engine)


async def cmd_quotes(args: argparse.Namespace) -> None:
    """Print current quotes for the catalog."""
    engine = build_engine(args)
    try:
        print(f"{'Symbol':<7} {'Name':<26} {'Sector':<19} {'Price':>10}")
        print("-" * 65)
        for quote in engine.market.quotes():
            stock = engine.market.stock(quote.symbol)
            name = stock.name if stock else ""
            sector = stock.sector if stock else ""
            print(f"{quote.symbol:<7} {name:<26} {sector:<19} {quote.price:>10,.2f}")
    finally:
        await _close(engine)


async def cmd_portfolio(args: argparse.Namespace) -> None:
    """Print cash, totals and open positions."""
    engine = build_engine(args)
    try:
        portfolio = engine.ledger.snapshot()
        _print_summary(portfolio.summary())
        if not portfolio.has_positions:
            print("\nNo open positions.")
            return
        print(f"\n{'Symbol':<7} {'Shares':>7} {'Avg Cost':>10} {'Price':>10} {'Value':>12} {'Gain/Loss':>12}")
        print("-" * 63)
        for p in portfolio.positions.values():
            print(
                f"{p.symbol:<7} {p.shares:>7} {p.average_cost:>10,.2f} {p.current_price:>10,.2f} "
                f"{p.current_value:>12,.2f} {p.gain_loss:>+12,.2f}"
            )
    finally:
        await _close(engine)


async def cmd_history(args: argparse.Namespace) -> None:
    """Print the transaction history."""
    engine = build_engine(args)
    try:
        history = engine.ledger.snapshot().transaction_history
        if not history:
            print("No transactions yet.")
            return
        for t in history:
            print(
                f"{t.date_time:%Y-%m-%d %H:%M:%S}  {t.type:<4}  {t.symbol:<6} "
                f"{t.shares:>6} @ {t.price:>10,.2f}  = {t.total:>12,.2f}"
            )
    finally:
        await _close(engine)


async def cmd_trade(args: argparse.Namespace) -> None:
    """Buy or sell shares at the market (or an explicit) price."""
    engine = build_engine(args)
    try:
        result = await engine.submit_order(
            args.symbol,
            args.shares,
            is_buy=args.command == "buy",
            price=args.price,
        )
    finally:
        await _close(engine)

    if not result.success:
        print(f"Error: {result.message}")
        sys.exit(1)

    print(result.message)
    _print_summary(result.summary)


async def cmd_reset(args: argparse.Namespace) -> None:
    """Reset the portfolio to the starting cash after confirmation."""
    if not args.yes:
        answer = input(
            f"This will reset your portfolio to ${settings.initial_cash:,.2f} and delete "
            "all positions and history. Continue? [y/N] "
        )
        if answer.strip().lower() not in ("y", "yes"):
            print("Reset cancelled.")
            return

    engine = build_engine(args)
    try:
        summary = await engine.reset()
    finally:
        await _close(engine)
    print(f"Portfolio has been reset to ${summary.cash_balance:,.2f}")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="stockbroker",
        description="Stockbroker — simulated stock trading with a paper portfolio",
    )
    parser.add_argument(
        "--data-path",
        default=settings.data_path,
        help=f"Directory for saved portfolio and prices (default: {settings.data_path})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run
    run = subparsers.add_parser(
        "run",
        help="Run the market simulation",
        description="Move prices periodically and revalue the portfolio.",
    )
    run.add_argument("--ticks", type=int, default=None, help="Stop after N ticks (default: run forever)")
    run.add_argument(
        "--interval",
        type=float,
        default=None,
        help=f"Seconds between ticks (default: {settings.tick_interval_seconds})",
    )

    subparsers.add_parser("quotes", help="Show current stock prices")
    subparsers.add_parser("portfolio", help="Show cash, totals and positions")
    subparsers.add_parser("history", help="Show the transaction history")

    # buy / sell
    for name, verb in (("buy", "Buy"), ("sell", "Sell")):
        trade = subparsers.add_parser(name, help=f"{verb} shares")
        trade.add_argument("symbol", help="Stock symbol (e.g., AAPL)")
        trade.add_argument("shares", type=int, help="Number of whole shares")
        trade.add_argument(
            "--price",
            type=_parse_price,
            default=None,
            help="Execution price (default: current market price)",
        )

    # reset
    reset = subparsers.add_parser("reset", help="Reset the portfolio to the starting cash")
    reset.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    return parser


def main() -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args()

    setup_logging(settings.log_level, log_file_path(args.data_path))

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    command_map = {
        "run": cmd_run,
        "quotes": cmd_quotes,
        "portfolio": cmd_portfolio,
        "history": cmd_history,
        "buy": cmd_trade,
        "sell": cmd_trade,
        "reset": cmd_reset,
    }

    handler = command_map[args.command]
    try:
        asyncio.run(handler(args))
    except KeyboardInterrupt:
        print("\nStopped.")


if __name__ == "__main__":
    main()
