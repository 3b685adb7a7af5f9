"""Main entry point for the txbench package.

Usage:
    python -m txbench run --url http://localhost:8801/invoke --transactions 200 --batch-size 5
    python -m txbench run --dry-run --transactions 100 --concurrency 4
    python -m txbench sweep --url http://localhost:8801/invoke --batch-sizes 1,5,10,25
"""

import sys


def main():
    """Main entry point that dispatches to subcommands."""
    if len(sys.argv) < 2:
        print_help()
        sys.exit(1)

    command = sys.argv[1]

    if command in ["-h", "--help", "help"]:
        print_help()
        sys.exit(0)

    args = sys.argv[2:]

    if command == "run":
        from .cli.run import main as run_main

        run_main(args)
    elif command == "sweep":
        from .cli.sweep import main as sweep_main

        sweep_main(args)
    else:
        print(f"Unknown command: {command}")
        print_help()
        sys.exit(1)


def print_help():
    """Print help message."""
    print(
        """txbench - transaction load generation and performance measurement

Usage: python -m txbench <command> [options]

Commands:
    run      Submit a fixed number of transactions and report performance
    sweep    Run one round per batch size and compare throughput and latency

Examples:
    # Sequential run of 200 transactions, 5 sensor readings each
    python -m txbench run --url http://localhost:8801/invoke --transactions 200 --batch-size 5

    # Same run driven by a JSON config file
    python -m txbench run --url http://localhost:8801/invoke --config run.json

    # Exercise the harness without a target, four concurrent worker loops
    python -m txbench run --dry-run --transactions 100 --concurrency 4

    # Batch-size sweep with charts
    python -m txbench sweep --url http://localhost:8801/invoke --batch-sizes 1,5,10,25 --chart sweep.png

For command-specific help:
    python -m txbench <command> --help
"""
    )


if __name__ == "__main__":
    main()
