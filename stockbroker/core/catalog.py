"""Static stock catalog — the symbols the simulated market trades."""

from __future__ import annotations

from decimal import Decimal

from stockbroker.core.types import Stock

DEFAULT_CATALOG: tuple[Stock, ...] = (
    Stock(
        "AAPL", "Apple Inc.", Decimal("178.42"), "Technology", "2.78T", "52.1M",
        "Apple Inc. designs, manufactures, and markets smartphones, personal computers, "
        "tablets, wearables, and accessories worldwide.",
    ),
    Stock(
        "MSFT", "Microsoft Corporation", Decimal("374.23"), "Technology", "2.81T", "23.5M",
        "Microsoft Corporation develops, licenses, and supports software, services, "
        "devices, and solutions worldwide.",
    ),
    Stock(
        "GOOGL", "Alphabet Inc.", Decimal("139.67"), "Technology", "1.75T", "28.7M",
        "Alphabet Inc. provides various products and services in the United States, "
        "Europe, the Middle East, Africa, the Asia-Pacific, Canada, and Latin America.",
    ),
    Stock(
        "AMZN", "Amazon.com, Inc.", Decimal("145.82"), "Consumer Cyclical", "1.51T", "45.8M",
        "Amazon.com, Inc. engages in the retail sale of consumer products and "
        "subscriptions in North America and internationally.",
    ),
    Stock(
        "NVDA", "NVIDIA Corporation", Decimal("485.12"), "Technology", "1.19T", "45.2M",
        "NVIDIA Corporation provides graphics, and compute and networking solutions "
        "in the United States, Taiwan, China, and internationally.",
    ),
    Stock(
        "TSLA", "Tesla, Inc.", Decimal("242.84"), "Consumer Cyclical", "771.2B", "98.7M",
        "Tesla, Inc. designs, develops, manufactures, leases, and sells electric "
        "vehicles, and energy generation and storage systems.",
    ),
    Stock(
        "META", "Meta Platforms, Inc.", Decimal("338.56"), "Technology", "861.5B", "18.5M",
        "Meta Platforms, Inc. engages in the development of products that enable "
        "people to connect and share with friends and family.",
    ),
    Stock(
        "BRK.B", "Berkshire Hathaway Inc.", Decimal("367.45"), "Financial", "794.3B", "3.2M",
        "Berkshire Hathaway Inc., through its subsidiaries, engages in the insurance, "
        "freight rail transportation, and utility businesses worldwide.",
    ),
    Stock(
        "V", "Visa Inc.", Decimal("258.32"), "Financial", "531.2B", "6.8M",
        "Visa Inc. operates as a payments technology company worldwide.",
    ),
    Stock(
        "JPM", "JPMorgan Chase & Co.", Decimal("156.78"), "Financial", "455.8B", "12.4M",
        "JPMorgan Chase & Co. operates as a financial services company worldwide.",
    ),
    Stock(
        "JNJ", "Johnson & Johnson", Decimal("162.45"), "Healthcare", "402.1B", "8.9M",
        "Johnson & Johnson researches and develops, manufactures, and sells various "
        "products in the healthcare field worldwide.",
    ),
    Stock(
        "WMT", "Walmart Inc.", Decimal("158.92"), "Consumer Defensive", "433.2B", "11.2M",
        "Walmart Inc. engages in the operation of retail, wholesale, and other units "
        "worldwide.",
    ),
)
