"""CLI for batch-size sweeps."""

import argparse
import asyncio
import sys
from typing import List, Optional

from ..core.errors import ConfigurationError, GenerationError
from ..core.models import RunSummary
from ..core.workload import WorkloadGenerator
from ..results.charts import generate_charts
from ..sweeps.batch_sweep import BatchSizeSweep
from ..sweeps.presets import SWEEP_DEFAULTS
from .target import add_target_arguments, create_submitter


def parse_sizes(sizes_str: str) -> List[int]:
    """Parse comma-separated batch sizes into a list of integers."""
    return [int(s.strip()) for s in sizes_str.split(",") if s.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="txbench sweep",
        description="Run one benchmark round per batch size and compare them",
    )
    default_sizes = ",".join(str(s) for s in SWEEP_DEFAULTS["batch_sizes"])
    parser.add_argument(
        "--batch-sizes",
        type=str,
        default=default_sizes,
        help=f"Comma-separated batch sizes to test (default: {default_sizes})",
    )
    parser.add_argument(
        "--transactions",
        type=int,
        default=SWEEP_DEFAULTS["transactions_per_round"],
        help=f"Transactions per round (default: {SWEEP_DEFAULTS['transactions_per_round']})",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=1,
        help="In-process worker loops per round (default: 1)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible payloads")
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Export the summary table to this CSV file",
    )
    parser.add_argument(
        "--chart",
        type=str,
        default=None,
        help="Save sweep charts to this PNG file",
    )
    add_target_arguments(parser)
    return parser


async def run_sweep(sweep: BatchSizeSweep, sizes: List[int], transactions: int) -> List[RunSummary]:
    async with sweep.submitter:
        return await sweep.run(batch_sizes=sizes, transactions_per_round=transactions)


def main(argv: Optional[List[str]] = None):
    """Main entry point for the sweep CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        sizes = parse_sizes(args.batch_sizes)
        submitter = create_submitter(args)
    except ValueError as e:
        print(f"Configuration error: {e}")
        sys.exit(2)

    sweep = BatchSizeSweep(
        submitter,
        generator=WorkloadGenerator(seed=args.seed),
        concurrency=args.concurrency,
    )

    try:
        asyncio.run(run_sweep(sweep, sizes, args.transactions))
    except KeyboardInterrupt:
        print("\nSweep interrupted by user")
        # Still print results collected so far
        if sweep.aggregator.results:
            sweep.aggregator.print_summary_table(title="PARTIAL SWEEP RESULTS (interrupted)")
        sys.exit(130)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        sys.exit(2)
    except GenerationError as e:
        print(f"Generation error: {e}")
        sys.exit(3)
    except Exception as e:
        print(f"Error running sweep: {e}")
        import traceback

        traceback.print_exc()
        sys.exit(1)

    sweep.aggregator.print_summary_table(title="BATCH SIZE SWEEP RESULTS")
    if args.csv:
        sweep.aggregator.to_csv(args.csv)
        print(f"\nResults saved as: {args.csv}")
    if args.chart:
        generate_charts(sweep.aggregator.results, output_path=args.chart)


if __name__ == "__main__":
    main()
