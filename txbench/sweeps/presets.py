"""Predefined sweep configurations."""

# Batch-size rounds, after the reference benchmark workspace
SWEEP_DEFAULTS = {
    "batch_sizes": [1, 5, 10, 25, 50],
    "transactions_per_round": 200,
    "progress_interval": 50,
}

# Simulated target used by --dry-run
DRY_RUN_DEFAULTS = {
    "latency_range_seconds": (0.005, 0.02),
    "failure_rate": 0.0,
}
