#!/usr/bin/env python3
"""
Scan CLI.

Scores a list of symbols with the weighted indicator model and prints them
ranked from strongest to weakest.
"""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from tascan.data.providers import FallbackProvider, PriceHistoryProvider, create_provider, normalize_symbol
from tascan.shared.defaults import DEFAULT_EXCHANGE, MAX_SCAN_COUNT, SCAN_DELAY_SECONDS
from tascan.signals.config import WeightConfig, get_profile
from tascan.signals.config_loader import load_weights_from_yaml
from tascan.signals.scanner import ScoredSymbol, SignalScanner


API_KEY_ENV = {
    "alphavantage": "ALPHAVANTAGE_API_KEY",
    "finnhub": "FINNHUB_API_KEY",
}


def setup_logging(verbose: bool = False):
    """
    Setup logging to stdout.

    Args:
        verbose: If True, use DEBUG level, otherwise INFO
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def add_provider_arguments(parser: argparse.ArgumentParser):
    """Arguments shared by every CLI that fetches price history."""
    parser.add_argument(
        "--provider",
        choices=["yahoo", "alphavantage", "finnhub", "csv"],
        action="append",
        help="Price history source; repeat to fall back in order, "
             "e.g. --provider finnhub --provider alphavantage (default: yahoo)"
    )
    parser.add_argument(
        "--api-key",
        type=str,
        help="API key for alphavantage/finnhub (default: ALPHAVANTAGE_API_KEY / FINNHUB_API_KEY)"
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default="data",
        help="Directory of <SYMBOL>.csv files for --provider csv (default: data)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)"
    )


def provider_from_args(args) -> PriceHistoryProvider:
    """Build the provider, or the fallback chain, selected on the command line."""
    providers = []
    for name in args.provider or ["yahoo"]:
        api_key = args.api_key or os.environ.get(API_KEY_ENV.get(name, ""), "")
        providers.append(create_provider(name, api_key=api_key, data_dir=args.data_dir))
    if len(providers) == 1:
        return providers[0]
    return FallbackProvider(providers)


def weights_from_args(args) -> WeightConfig:
    """Resolve weights from --weights-file / --profile."""
    if args.weights_file:
        return load_weights_from_yaml(Path(args.weights_file), profile=args.profile)
    if args.profile:
        return get_profile(args.profile)
    return WeightConfig()


def format_results(results: List[ScoredSymbol]) -> str:
    """Format ranked results for display."""
    lines = []
    for rank, result in enumerate(results, start=1):
        lines.append(f"{rank:>3}. {result.symbol:<16} {result.score:>5.1f}  {result.reason}")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the scanner."""
    parser = argparse.ArgumentParser(
        description="Rank symbols by weighted indicator score",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Scan five symbols with Yahoo data
    python -m cli.scan AAPL MSFT AMZN NFLX TSLA

    # Use a weight profile
    python -m cli.scan AAPL MSFT --profile Aggressive

    # Profiles from a file, Alpha Vantage data
    python -m cli.scan AAPL --provider alphavantage --weights-file configs/weights.yaml

    # Finnhub first, Alpha Vantage when Finnhub has nothing
    python -m cli.scan AAPL MSFT --provider finnhub --provider alphavantage
        """
    )
    parser.add_argument("symbols", nargs="+", help="Symbols to scan, in order")
    parser.add_argument(
        "--max-count",
        type=int,
        default=MAX_SCAN_COUNT,
        help=f"Scan at most this many symbols (default: {MAX_SCAN_COUNT})"
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=SCAN_DELAY_SECONDS,
        help=f"Seconds to pause after each fetch (default: {SCAN_DELAY_SECONDS})"
    )
    parser.add_argument(
        "--exchange",
        type=str,
        default=DEFAULT_EXCHANGE,
        help=f"Exchange prefix for bare symbols (default: {DEFAULT_EXCHANGE})"
    )
    parser.add_argument("--profile", type=str, help="Weight profile name")
    parser.add_argument("--weights-file", type=str, help="YAML file with weights or profiles")
    add_provider_arguments(parser)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        weights = weights_from_args(args)
        provider = provider_from_args(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    scanner = SignalScanner(provider, weights=weights, delay_seconds=args.delay)
    symbols = [normalize_symbol(s, default_exchange=args.exchange) for s in args.symbols]
    results = scanner.scan(symbols, max_count=args.max_count)

    print("=" * 60)
    print("SCAN RESULTS")
    print("=" * 60)
    print(format_results(results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
