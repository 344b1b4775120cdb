#!/usr/bin/env python3
"""
CLI entry point for portfolio evaluation.

Usage:
    # Evaluate a portfolio
    python -m account_health.run customers.json

    # With a tuned config, a fixed reference time and ranked alerts
    python -m account_health.run customers.yaml --config engine.yaml --now 2025-01-15 --alerts

    # List past runs
    python -m account_health.run --list
"""

import argparse
import logging
import sys

from .config import EngineConfig
from .profile import ProfileValidationError, parse_datetime
from .runner import EvaluationRunner


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Customer account health evaluation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m account_health.run customers.json
  python -m account_health.run customers.yaml --config engine.yaml --alerts
  python -m account_health.run --list
        """,
    )

    parser.add_argument(
        "profiles",
        nargs="?",
        help="Path to JSON or YAML file of customer documents",
    )
    parser.add_argument(
        "--config",
        help="YAML engine config overriding the defaults",
    )
    parser.add_argument(
        "--now",
        help="Reference time as ISO-8601 (default: current UTC time)",
    )
    parser.add_argument(
        "--logs-dir",
        default="logs",
        help="Directory for JSON run logs (default: logs)",
    )
    parser.add_argument(
        "--alerts",
        action="store_true",
        help="Print portfolio alerts ranked by severity",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List all past runs",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log run progress as JSON to stderr",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger("account_health.runner").setLevel(logging.INFO)

    config = EngineConfig.from_yaml(args.config) if args.config else None
    runner = EvaluationRunner(config=config, logs_dir=args.logs_dir)

    # List runs
    if args.list:
        df = runner.list_runs()
        if df.empty:
            print("No runs found.")
        else:
            print(df.to_string(index=False))
        return 0

    if not args.profiles:
        parser.print_help()
        return 1

    try:
        now = parse_datetime(args.now, "--now") if args.now else None
        result = runner.run(args.profiles, now=now)
    except (OSError, ValueError) as e:
        # ProfileValidationError is a ValueError
        kind = "Invalid profile" if isinstance(e, ProfileValidationError) else "ERROR"
        print(f"{kind}: {e}")
        return 1

    print(result.report())

    if args.alerts:
        print(f"\n{'=' * 60}")
        print("ALERTS")
        print("=" * 60)
        if not result.alerts:
            print("No active alerts.")
        for alert in result.alerts:
            who = alert.customer_name or alert.customer_id
            print(f"  [{alert.severity.value.upper():8}] {who}: {alert.title}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
