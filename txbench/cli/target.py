"""Target selection shared by the CLI commands."""

import argparse
import os

from ..core.submitters import DryRunSubmitter, HttpSubmitter, Submitter
from ..sweeps.presets import DRY_RUN_DEFAULTS


def add_target_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the arguments that choose where transactions are sent."""
    parser.add_argument(
        "--url",
        type=str,
        default=os.environ.get("TXBENCH_URL"),
        help="Gateway URL that accepts transactions (default: $TXBENCH_URL)",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=os.environ.get("TXBENCH_TOKEN"),
        help="API key for authentication (Bearer token, default: $TXBENCH_TOKEN)",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=120,
        help="Per-request timeout in seconds (default: 120)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Send nothing; simulate the target with random latency",
    )
    parser.add_argument(
        "--dry-run-failure-rate",
        type=float,
        default=DRY_RUN_DEFAULTS["failure_rate"],
        help="Fraction of simulated transactions that fail (default: 0.0)",
    )


def create_submitter(args: argparse.Namespace) -> Submitter:
    """Build the submitter selected on the command line."""
    if args.dry_run:
        return DryRunSubmitter(
            latency_range_seconds=DRY_RUN_DEFAULTS["latency_range_seconds"],
            failure_rate=args.dry_run_failure_rate,
            seed=getattr(args, "seed", None),
        )
    if not args.url:
        raise ValueError("--url (or $TXBENCH_URL) is required unless --dry-run is set")
    return HttpSubmitter(
        args.url, api_key=args.api_key, timeout_seconds=args.request_timeout
    )
