"""Batch-size sweep orchestration."""

import logging
from typing import Any, Dict, List, Optional

from ..core.config_loader import build_run_config
from ..core.driver import BenchmarkDriver
from ..core.errors import ConfigurationError
from ..core.models import RunSummary
from ..core.submitters import Submitter
from ..core.workload import WorkloadGenerator
from ..results.aggregator import ResultAggregator
from .presets import SWEEP_DEFAULTS


class BatchSizeSweep:
    """
    Runs one benchmark round per batch size against the same submitter.

    Rounds run one after another; each round is a complete run with its own
    collector, and every summary lands in a shared ResultAggregator.
    """

    def __init__(
        self,
        submitter: Submitter,
        generator: Optional[WorkloadGenerator] = None,
        **config_overrides: Any,
    ):
        """
        Initialize the sweep orchestrator.

        Args:
            submitter: Transport used for every round
            generator: Workload generator (sensor readings if None)
            **config_overrides: RunConfig fields applied to every round
                (e.g. concurrency, worker_index, function_name)
        """
        self.submitter = submitter
        self.generator = generator or WorkloadGenerator()
        self.config_overrides: Dict[str, Any] = config_overrides
        self.aggregator = ResultAggregator()

        logging.basicConfig(
            level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
        )
        self.logger = logging.getLogger(__name__)

    async def run(
        self,
        batch_sizes: Optional[List[int]] = None,
        transactions_per_round: Optional[int] = None,
    ) -> List[RunSummary]:
        """
        Run the sweep.

        Args:
            batch_sizes: Batch sizes to test, one round each
            transactions_per_round: Transactions submitted per round

        Returns:
            List of run summaries, in batch-size order

        Raises:
            ConfigurationError: If no batch size is given or any round's
                configuration is invalid; all rounds are validated before
                the first one starts
        """
        sizes = SWEEP_DEFAULTS["batch_sizes"] if batch_sizes is None else list(batch_sizes)
        count = (
            SWEEP_DEFAULTS["transactions_per_round"]
            if transactions_per_round is None
            else transactions_per_round
        )
        if not sizes:
            raise ConfigurationError("At least one batch size is required")

        configs = []
        for batch_size in sizes:
            values = {"progress_interval": SWEEP_DEFAULTS["progress_interval"]}
            values.update(self.config_overrides)
            values.update({"transaction_count": count, "batch_size": batch_size})
            configs.append(build_run_config(values))

        self.logger.info(f"Starting batch-size sweep: {list(sizes)}")
        self.logger.info(f"  {count} transactions per round")

        summaries = []
        for i, config in enumerate(configs):
            self.logger.info("=" * 60)
            self.logger.info(
                f"Round {i + 1}/{len(configs)}: batch size {config.batch_size}"
            )
            self.logger.info("=" * 60)

            driver = BenchmarkDriver(config, self.submitter, generator=self.generator)
            summary = await driver.run()

            self.aggregator.add_result(summary)
            self.aggregator.print_single_result(summary)
            summaries.append(summary)

        return summaries
