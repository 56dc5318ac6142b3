"""
Level 3 Example: Benchmarked Sweep over Growing Chains
======================================================

Advanced example demonstrating:
- Generating parameter sets programmatically (growing 50-bit chains)
- Collecting timing and capability events with the BenchmarkManager
- Plotting the maximum depth per parameter set

Oversized chains are rejected and reported, the sweep carries on.
"""

import logging

from fhedepth import DepthSweep, ParameterSet, configure_logging
from fhedepth.core.benchmark_manager import BenchmarkManager, BenchmarkProfile
from fhedepth.fhe import PYFHEL_AVAILABLE

configure_logging(logging.INFO)
logger = logging.getLogger(__name__)


def growing_chains(ring_degree=8192, prime_bits=50, max_primes=6):
    # 60-bit special prime last, data primes in front
    for count in range(1, max_primes + 1):
        yield ParameterSet(ring_degree, 20, (prime_bits,) * count + (60,), "bgv")


if __name__ == "__main__":
    backend = "pyfhel" if PYFHEL_AVAILABLE else "simulated"
    manager = BenchmarkManager([BenchmarkProfile.ESTIMATION_TIMING, BenchmarkProfile.CAPABILITY])

    sweep = DepthSweep.from_parameter_sets(
        growing_chains(), descent_mode="on_depletion_only", strategy="square",
        backend=backend, benchmark_manager=manager, seed=3,
    )
    reports = sweep.run()

    print("\n" + "=" * 60)
    print("BENCHMARK SUMMARY")
    print("=" * 60)
    print(manager.summary())

    for report in reports:
        if report.rejected:
            logger.warning(f"logq={report.parameter_set.log_q}: {report.outcome.error.reason}")

    manager.export_to_csv("depth_benchmark_events.csv")
    manager.plot_depth_summary(save_path="depth_benchmark.png")
    print("\nPlot saved to depth_benchmark.png")
