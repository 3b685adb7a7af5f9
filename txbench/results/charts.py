"""Chart generation for benchmark results."""

import matplotlib.pyplot as plt
from datetime import datetime
from typing import List, Optional

from ..core.models import RunSummary


def _output_path(output_path: Optional[str], prefix: str) -> str:
    if output_path:
        return output_path
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.png"


def generate_charts(
    results: List[RunSummary],
    output_path: Optional[str] = None,
    show: bool = False,
    x_label: str = "Batch Size",
) -> Optional[str]:
    """
    Generate performance charts from a series of run summaries.

    Args:
        results: Run summaries to plot, one point each (x = batch size)
        output_path: Path to save the chart (auto-generated if None)
        show: Whether to display the chart
        x_label: Label for x-axis

    Returns:
        Path to saved chart file, or None if there was nothing to plot
    """
    if not results:
        print("No results to chart.")
        return None

    x_values = [r.batch_size or 0 for r in results]
    throughput = [r.throughput_tps for r in results]
    avg_latency = [r.avg_latency_ms for r in results]
    p50_latency = [r.p50_latency_ms for r in results]
    p95_latency = [r.p95_latency_ms for r in results]
    p99_latency = [r.p99_latency_ms for r in results]
    error_rates = [r.error_rate for r in results]

    fig, ((ax1, ax2), (ax3, ax4)) = plt.subplots(2, 2, figsize=(15, 12))
    fig.suptitle("Benchmark Results", fontsize=16, fontweight="bold")

    # Throughput chart
    ax1.plot(x_values, throughput, "b-o", linewidth=2, markersize=6)
    ax1.set_xlabel(x_label)
    ax1.set_ylabel("Throughput (TPS)")
    ax1.set_title("Throughput vs " + x_label)
    ax1.grid(True, alpha=0.3)

    # Latency percentiles
    ax2.plot(x_values, p50_latency, "g-o", label="p50", linewidth=2, markersize=6)
    ax2.plot(x_values, p95_latency, "r-o", label="p95", linewidth=2, markersize=6)
    ax2.plot(x_values, p99_latency, "m-o", label="p99", linewidth=2, markersize=6)
    ax2.set_xlabel(x_label)
    ax2.set_ylabel("Latency (ms)")
    ax2.set_title("Latency Percentiles vs " + x_label)
    ax2.legend()
    ax2.grid(True, alpha=0.3)

    # Error rate chart
    ax3.plot(x_values, error_rates, "r-o", linewidth=2, markersize=6)
    ax3.set_xlabel(x_label)
    ax3.set_ylabel("Error Rate (%)")
    ax3.set_title("Error Rate vs " + x_label)
    ax3.grid(True, alpha=0.3)

    # Min/max latency range
    min_latency = [r.min_latency_ms for r in results]
    max_latency = [r.max_latency_ms for r in results]
    ax4.fill_between(x_values, min_latency, max_latency, alpha=0.3, label="Min-Max Range")
    ax4.plot(x_values, avg_latency, "g-o", label="Average", linewidth=2)
    ax4.set_xlabel(x_label)
    ax4.set_ylabel("Latency (ms)")
    ax4.set_title("Latency Range")
    ax4.legend()
    ax4.grid(True, alpha=0.3)

    plt.tight_layout()

    saved_path = _output_path(output_path, "benchmark_results")
    plt.savefig(saved_path, dpi=150, bbox_inches="tight")
    print(f"\nChart saved as: {saved_path}")

    if show:
        plt.show()
    plt.close(fig)

    return saved_path


def generate_latency_chart(
    summary: RunSummary,
    output_path: Optional[str] = None,
    show: bool = False,
) -> Optional[str]:
    """
    Plot one run's latencies in recording order, next to their histogram.

    Returns:
        Path to saved chart file, or None if the run had no successes
    """
    if not summary.latencies_ms:
        print("No successful transactions to chart.")
        return None

    latencies = list(summary.latencies_ms)
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(15, 6))
    fig.suptitle(
        f"Latency Profile (batch size {summary.batch_size}, {summary.mode})",
        fontsize=14,
        fontweight="bold",
    )

    ax1.plot(range(1, len(latencies) + 1), latencies, "b-", linewidth=1)
    ax1.axhline(summary.p95_latency_ms, color="r", linestyle="--", label="p95")
    ax1.axhline(summary.p50_latency_ms, color="g", linestyle="--", label="p50")
    ax1.set_xlabel("Successful Transaction #")
    ax1.set_ylabel("Latency (ms)")
    ax1.set_title("Latency Over Run")
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    ax2.hist(latencies, bins=min(50, max(10, len(latencies) // 5)), color="steelblue")
    ax2.set_xlabel("Latency (ms)")
    ax2.set_ylabel("Transactions")
    ax2.set_title("Latency Distribution")
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()

    saved_path = _output_path(output_path, "latency_profile")
    plt.savefig(saved_path, dpi=150, bbox_inches="tight")
    print(f"\nChart saved as: {saved_path}")

    if show:
        plt.show()
    plt.close(fig)

    return saved_path
