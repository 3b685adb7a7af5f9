"""CLI for single benchmark runs."""

import argparse
import asyncio
import sys
from typing import List, Optional

from ..core.config_loader import RUN_DEFAULTS, load_run_config
from ..core.driver import BenchmarkDriver
from ..core.errors import ConfigurationError, GenerationError
from ..core.models import RunSummary
from ..core.submitters import Submitter
from ..core.workload import WorkloadGenerator
from ..results.charts import generate_latency_chart
from ..results.report import print_summary, save_summary_json
from .target import add_target_arguments, create_submitter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="txbench run",
        description="Submit a fixed number of transactions and report performance",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON file with run configuration (CLI flags take precedence)",
    )
    parser.add_argument(
        "--transactions",
        type=int,
        help=f"Number of transactions to submit (default: {RUN_DEFAULTS['transaction_count']})",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        help=f"Records per transaction (default: {RUN_DEFAULTS['batch_size']})",
    )
    parser.add_argument(
        "--worker-index",
        type=int,
        help="Index of this driver when several run in parallel (default: 0)",
    )
    parser.add_argument(
        "--total-workers",
        type=int,
        help="Number of drivers running in parallel (default: 1)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="In-process worker loops; 1 submits strictly sequentially (default: 1)",
    )
    parser.add_argument(
        "--progress-interval",
        type=int,
        help=f"Report progress every N transactions (default: {RUN_DEFAULTS['progress_interval']})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Stop issuing new transactions after this many seconds",
    )
    parser.add_argument(
        "--function",
        type=str,
        help="Contract function to invoke (default: addBatchSensorReadings)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for reproducible payloads",
    )
    parser.add_argument(
        "--output-json",
        type=str,
        default=None,
        help="Write the summary to this JSON file",
    )
    parser.add_argument(
        "--latency-chart",
        type=str,
        default=None,
        help="Save a latency profile chart to this PNG file",
    )
    add_target_arguments(parser)
    return parser


async def execute(
    submitter: Submitter,
    driver: BenchmarkDriver,
    output_json: Optional[str] = None,
) -> RunSummary:
    """Run the benchmark, closing the submitter afterwards."""
    async with submitter:
        summary = await driver.run()
    if output_json:
        path = await save_summary_json(summary, output_json)
        print(f"\nSummary saved as: {path}")
    return summary


def main(argv: Optional[List[str]] = None):
    """Main entry point for the run CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = asyncio.run(
            load_run_config(
                args.config,
                transaction_count=args.transactions,
                batch_size=args.batch_size,
                worker_index=args.worker_index,
                total_workers=args.total_workers,
                concurrency=args.concurrency,
                progress_interval=args.progress_interval,
                timeout_seconds=args.timeout,
                function_name=args.function,
            )
        )
        submitter = create_submitter(args)
    except (ConfigurationError, ValueError) as e:
        print(f"Configuration error: {e}")
        sys.exit(2)

    driver = BenchmarkDriver(
        config, submitter, generator=WorkloadGenerator(seed=args.seed)
    )

    try:
        summary = asyncio.run(execute(submitter, driver, args.output_json))
    except KeyboardInterrupt:
        print("\nBenchmark interrupted by user")
        if driver.collector is not None and driver.collector.completed:
            summary = driver.partial_summary()
            print_summary(summary)
        sys.exit(130)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        sys.exit(2)
    except GenerationError as e:
        print(f"Generation error: {e}")
        sys.exit(3)
    except Exception as e:
        print(f"Error running benchmark: {e}")
        sys.exit(1)

    print_summary(summary)
    if args.latency_chart:
        generate_latency_chart(summary, output_path=args.latency_chart)


if __name__ == "__main__":
    main()
