#!/usr/bin/env python3
"""
Determinism Check - Run the indicator pipeline twice on one CSV, verify 100% match

Validates that the pipeline is deterministic (replay-safe) by:
1. Loading bars from a CSV export
2. Running the pipeline twice with the same settings
3. Comparing SHA-256 digests of every aligned series
4. Writing determinism_diff.txt with results
"""

import argparse
import json
import sys
import logging
from datetime import datetime, timezone
from hashlib import sha256
from pathlib import Path

logger = logging.getLogger(__name__)


def setup_logging():
    """Setup logging to console and file."""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    log_file = log_dir / f"determinism_check_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}.log"

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # File handler
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    root_logger.addHandler(file_handler)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(
        '%(levelname)s: %(message)s'
    ))
    root_logger.addHandler(console_handler)

    return log_file


def _plain(value):
    """JSON-safe form of an aligned slot."""
    if value is None:
        return None
    if hasattr(value, 'rising'):
        return [_plain(value.value), value.rising]
    if value != value:  # NaN
        return None
    return value


def digest_series(values) -> str:
    """SHA-256 of one aligned series."""
    payload = json.dumps([_plain(v) for v in values], sort_keys=True, default=str)
    return sha256(payload.encode()).hexdigest()


def run_determinism_test(csv_path: str, timeframe: str, mode: str, count: int):
    """
    Run the pipeline twice on the same bars.

    Returns:
        Tuple of (run1_digests, run2_digests), or None if no bars could be loaded
    """
    from chartcore.orchestration.pipeline import IndicatorPipeline
    from configs import config_loader
    from infra.data.data_loader import DataLoader

    loader = DataLoader({"source": "csv", "csv_path": csv_path})
    bars = loader.load_bars("CSV", timeframe, count)
    if not bars:
        logger.error("No bars loaded", extra={"path": csv_path})
        return None

    logger.info(f"Starting determinism test with {len(bars)} bars")
    chart_config = config_loader.chart_config(timeframe)

    digests = []
    for run in (1, 2):
        logger.info(f"Run {run}: Processing bars...")
        pipeline = IndicatorPipeline.from_config(chart_config)
        result = pipeline.run(bars, timeframe, mode)
        digests.append({name: digest_series(values) for name, values in result.aligned.items()})
        logger.info(f"Run {run}: {len(result.aligned)} series, {len(result.bars)} derived bars")

    return digests[0], digests[1]


def compare_digests(digests1, digests2):
    """
    Compare two digest maps for determinism.

    Returns:
        Tuple of (is_match, diff_report)
    """
    names = sorted(set(digests1) | set(digests2))
    mismatches = [
        {"series": name, "run1": digests1.get(name), "run2": digests2.get(name)}
        for name in names
        if digests1.get(name) != digests2.get(name)
    ]
    diff_report = {
        "series_count": len(names),
        "series_match": not mismatches,
        "mismatches": mismatches
    }
    return diff_report["series_match"], diff_report


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the indicator pipeline twice and compare outputs")
    parser.add_argument("--csv", required=True, help="CSV file with time/open/high/low/close[/volume] columns")
    parser.add_argument("--timeframe", default="5m", help="Nominal bar interval (default: 5m)")
    parser.add_argument("--mode", default="candles",
                        choices=["candles", "ohlc", "heikin", "range", "renko", "kagi"],
                        help="Price mode (default: candles)")
    parser.add_argument("--count", type=int, default=5000, help="Number of trailing bars to load")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    print("\n" + "="*70)
    print("DETERMINISM CHECK - Indicator Pipeline Replay Test")
    print("="*70)

    # Setup logging
    log_file = setup_logging()
    logger.info(f"Logging to {log_file}")

    outcome = run_determinism_test(args.csv, args.timeframe, args.mode, args.count)
    if outcome is None:
        print("\nFAIL: no bars loaded")
        return 1

    is_match, diff_report = compare_digests(*outcome)

    # Write diff report
    diff_file = Path("artifacts") / "determinism_diff.txt"
    diff_file.parent.mkdir(parents=True, exist_ok=True)

    with open(diff_file, "w", encoding="utf-8") as f:
        f.write("="*70 + "\n")
        f.write("DETERMINISM CHECK RESULTS\n")
        f.write("="*70 + "\n\n")
        f.write(f"Series: {diff_report['series_count']}\n")
        f.write(f"Series Match: {diff_report['series_match']}\n\n")
        f.write(json.dumps(diff_report, indent=2))

    print(f"Series compared: {diff_report['series_count']}")

    if is_match:
        print(f"\nOK: 100% determinism match")
        print(f"Diff report: {diff_file}")
        print("="*70 + "\n")
        return 0

    print(f"\nFAIL: Determinism mismatch detected")
    print(f"Mismatches: {len(diff_report['mismatches'])}")
    print(f"Diff report: {diff_file}")
    print("="*70 + "\n")
    return 1


if __name__ == "__main__":
    sys.exit(main())
