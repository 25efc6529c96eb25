#!/usr/bin/env python3
"""
Single-symbol analysis CLI.

Prints the latest indicator values, QQE crossover signals and ZigZag pivots
for one symbol.
"""
import argparse
import sys
from typing import List, Optional

from tascan.data.providers import ProviderError
from tascan.data.series import PriceSeries
from tascan.indicators.qqe import calculate_qqe
from tascan.indicators.technical import TechnicalIndicators
from tascan.indicators.zigzag import ZigZagDetector
from tascan.shared.defaults import ZIGZAG_THRESHOLD_PCT

from cli.scan import add_provider_arguments, provider_from_args, setup_logging


def _latest(series) -> str:
    if series is None or len(series) == 0:
        return "n/a"
    return f"{series.iloc[-1]:.2f}"


def format_analysis(
    symbol: str,
    series: PriceSeries,
    threshold_pct: float = ZIGZAG_THRESHOLD_PCT,
    max_signals: int = 5,
) -> str:
    """Format indicator, QQE and ZigZag output for one series."""
    snapshot = TechnicalIndicators().calculate(series)
    lines = [f"{symbol}: {len(series)} bars, last close {series.latest_close:.2f}"]

    lines.append("Indicators:")
    lines.append(f"  SMA(10): {_latest(snapshot.sma_short)}  SMA(50): {_latest(snapshot.sma_long)}")
    lines.append(f"  RSI(14): {_latest(snapshot.rsi)}")
    if snapshot.macd is not None:
        lines.append(
            f"  MACD: {_latest(snapshot.macd.line)}  signal: {_latest(snapshot.macd.signal)}  "
            f"histogram: {_latest(snapshot.macd.histogram)}"
        )
    else:
        lines.append("  MACD: n/a")
    if snapshot.stochastic is not None:
        lines.append(f"  %K: {_latest(snapshot.stochastic.k)}  %D: {_latest(snapshot.stochastic.d)}")
    else:
        lines.append("  Stochastic: n/a")

    qqe = calculate_qqe(series.closes)
    if qqe is None:
        lines.append("QQE: n/a")
    else:
        lines.append(f"QQE: fast {_latest(qqe.fast)}  slow {_latest(qqe.slow)}")
        for signal in qqe.signals[-max_signals:]:
            lines.append(f"  {signal.signal_type.value.upper():<4} at {signal.timestamp} ({signal.value:.2f})")

    zigzag = ZigZagDetector(threshold_pct=threshold_pct).detect(series.closes)
    if zigzag is None:
        lines.append("ZigZag: n/a")
    else:
        note = " (local extrema fallback)" if zigzag.used_fallback else ""
        lines.append(f"ZigZag {threshold_pct}%: {len(zigzag.pivots)} pivots{note}")
        for pivot in zigzag.pivots:
            lines.append(f"  {pivot.kind.value:<4} {pivot.timestamp}  {pivot.price:.2f}")
        channel = zigzag.channel
        if channel is not None:
            for line in (channel.upper, channel.lower):
                if line is not None:
                    approx = " (approx.)" if line.approximated else ""
                    lines.append(f"  {line.kind.value} line: slope {line.slope:.4f}{approx}")

    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for single-symbol analysis."""
    parser = argparse.ArgumentParser(description="Show indicators, QQE signals and ZigZag pivots for a symbol")
    parser.add_argument("symbol", help="Symbol to analyze")
    parser.add_argument(
        "--threshold",
        type=float,
        default=ZIGZAG_THRESHOLD_PCT,
        help=f"ZigZag threshold in percent (default: {ZIGZAG_THRESHOLD_PCT})"
    )
    add_provider_arguments(parser)
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.threshold <= 0:
        print(f"Error: --threshold must be > 0, got {args.threshold}", file=sys.stderr)
        return 1

    try:
        provider = provider_from_args(args)
        series = provider.fetch_daily(args.symbol)
    except (ProviderError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if len(series) == 0:
        print(f"Error: no data for {args.symbol}", file=sys.stderr)
        return 1

    print(format_analysis(args.symbol, series, threshold_pct=args.threshold))
    return 0


if __name__ == "__main__":
    sys.exit(main())
