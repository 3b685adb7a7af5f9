"""Result aggregation and reporting."""

import pandas as pd
from typing import List, Optional

from ..core.models import RunSummary


class ResultAggregator:
    """Aggregates and formats run summaries for export."""

    def __init__(self):
        self.results: List[RunSummary] = []

    def add_result(self, result: RunSummary) -> None:
        """Add a single run summary."""
        self.results.append(result)

    def add_results(self, results: List[RunSummary]) -> None:
        """Add multiple run summaries."""
        self.results.extend(results)

    def clear(self) -> None:
        """Clear all results."""
        self.results = []

    def to_dataframe(self) -> pd.DataFrame:
        """Convert results to pandas DataFrame."""
        data = []
        for result in self.results:
            data.append({
                "Batch": result.batch_size,
                "Mode": result.mode,
                "Workers": result.concurrency,
                "Total": result.total,
                "Success": result.succeeded,
                "Failed": result.failed,
                "Error%": f"{result.error_rate:.2f}",
                "TPS": f"{result.throughput_tps:.2f}",
                "Min_ms": f"{result.min_latency_ms:.2f}",
                "Avg_ms": f"{result.avg_latency_ms:.2f}",
                "P50_ms": f"{result.p50_latency_ms:.2f}",
                "P90_ms": f"{result.p90_latency_ms:.2f}",
                "P95_ms": f"{result.p95_latency_ms:.2f}",
                "P99_ms": f"{result.p99_latency_ms:.2f}",
                "Max_ms": f"{result.max_latency_ms:.2f}",
            })
        return pd.DataFrame(data)

    def error_dataframe(self) -> pd.DataFrame:
        """One row per (batch size, error message) with its count."""
        rows = []
        for result in self.results:
            for error, count in result.error_histogram.items():
                rows.append({"Batch": result.batch_size, "Error": error, "Count": count})
        return pd.DataFrame(rows, columns=["Batch", "Error", "Count"])

    def to_csv(self, path: str) -> None:
        """Export to CSV file."""
        df = self.to_dataframe()
        df.to_csv(path, index=False)

    def to_tsv(self, path: str) -> None:
        """Export to TSV file."""
        df = self.to_dataframe()
        df.to_csv(path, sep="\t", index=False)

    def get_tsv_string(self) -> str:
        """Get results as TSV string for easy copy/paste to spreadsheet."""
        df = self.to_dataframe()
        return df.to_csv(sep="\t", index=False)

    def print_summary_table(
        self,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        """Print formatted summary table to console."""
        if not self.results:
            print("No results to display.")
            return

        print()
        print("=" * 100)
        if title:
            print(title.center(100))
        else:
            print("BENCHMARK RESULTS SUMMARY".center(100))
        print("=" * 100)

        if description:
            print(description)
            print("-" * 100)

        df = self.to_dataframe()
        print(df.to_string(index=False))

        errors = self.error_dataframe()
        if not errors.empty:
            print()
            print("ERRORS")
            print("-" * 100)
            print(errors.to_string(index=False))

        print()
        print("=" * 100)
        print("TSV OUTPUT (copy to spreadsheet):")
        print("=" * 100)
        print(self.get_tsv_string())
        print("=" * 100)

    def print_single_result(self, result: RunSummary) -> None:
        """Print a single run summary during a sweep."""
        print(f"\nResults for batch_size={result.batch_size}:")
        print(f"  Throughput: {result.throughput_tps:.2f} TPS")
        print(f"  Avg Latency: {result.avg_latency_ms:.2f}ms")
        print(f"  P95 Latency: {result.p95_latency_ms:.2f}ms")
        print(f"  Error Rate: {result.error_rate:.2f}%")
