"""Text rendering and export of a single run summary."""

import json
from pathlib import Path
from typing import Union

import aiofiles

from ..core.models import RunSummary


def format_summary(summary: RunSummary) -> str:
    """Render a run summary as a plain-text report."""
    lines = [
        "",
        "=" * 60,
        "BENCHMARK RESULTS",
        "=" * 60,
        f"Mode:                {summary.mode}",
        f"Batch Size:          {summary.batch_size}",
        f"Total Transactions:  {summary.total}",
        f"Successful:          {summary.succeeded}",
        f"Failed:              {summary.failed}",
        f"Success Rate:        {summary.success_rate * 100:.2f}%",
        "",
        "PERFORMANCE",
        "-" * 30,
        f"Duration:            {summary.duration_seconds:.2f} seconds",
        f"Throughput:          {summary.throughput_tps:.2f} TPS",
    ]

    if summary.succeeded > 0:
        lines += [
            "",
            "LATENCY STATISTICS (ms)",
            "-" * 30,
            f"Minimum:             {summary.min_latency_ms:.2f}",
            f"Average:             {summary.avg_latency_ms:.2f}",
            f"p50 (median):        {summary.p50_latency_ms:.2f}",
            f"p90:                 {summary.p90_latency_ms:.2f}",
            f"p95:                 {summary.p95_latency_ms:.2f}",
            f"p99:                 {summary.p99_latency_ms:.2f}",
            f"Maximum:             {summary.max_latency_ms:.2f}",
        ]

    if summary.error_histogram:
        lines += ["", "ERROR SUMMARY", "-" * 30]
        for error, count in summary.error_histogram.items():
            lines.append(f"{count}x: {error}")

    lines.append("=" * 60)
    return "\n".join(lines)


def print_summary(summary: RunSummary) -> None:
    """Print a run summary in a formatted way."""
    print(format_summary(summary))


async def save_summary_json(summary: RunSummary, path: Union[str, Path]) -> Path:
    """Write the summary, including raw latencies, to a JSON file."""
    output_path = Path(path)
    data = summary.to_dict()
    data["latencies_ms"] = list(summary.latencies_ms)

    async with aiofiles.open(output_path, "w") as f:
        await f.write(json.dumps(data, indent=2))
    return output_path
