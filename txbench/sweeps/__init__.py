"""Batch-size sweep orchestration."""

from .batch_sweep import BatchSizeSweep
from .presets import SWEEP_DEFAULTS, DRY_RUN_DEFAULTS

__all__ = ["BatchSizeSweep", "SWEEP_DEFAULTS", "DRY_RUN_DEFAULTS"]
