"""
Level 2 Example: Modulus Descent Modes and Multiplication Strategies
===================================================================

Intermediate example demonstrating:
- The same chain evaluated under every descent mode (none, on_depletion_only, eager)
- Two-operand multiplication against squaring
- Tabulating the reports with pandas and exporting them to CSV
"""

import logging
import sys
import os

import pandas as pd

from fhedepth import DepthSweep, ParameterSet, SchemePolicy, SweepCase, configure_logging
from fhedepth.core.policy import ModulusDescentMode, MultiplicationStrategy
from fhedepth.fhe import PYFHEL_AVAILABLE

configure_logging(logging.INFO)
logger = logging.getLogger(__name__)


def build_cases(ring_degree=16384, chain=(53, 53, 53, 53, 53, 53, 53, 53)):
    """Every scheme x descent mode x strategy combination for one chain."""
    cases = []
    for scheme in ("bfv", "bgv"):
        ps = ParameterSet(ring_degree, 20, chain, scheme)
        for mode in ModulusDescentMode:
            for strategy in MultiplicationStrategy:
                cases.append(SweepCase(ps, SchemePolicy(ps.scheme, mode), strategy))
    return cases


def main():
    backend = "pyfhel" if PYFHEL_AVAILABLE else "simulated"
    logger.info(f"Comparing descent modes on the '{backend}' backend")

    sweep = DepthSweep(build_cases(), backend=backend, seed=42)
    sweep.run()
    df = sweep.to_dataframe()

    print("\n" + "=" * 70)
    print("DEPTH BY SCHEME, DESCENT MODE AND STRATEGY")
    print("=" * 70)
    table = df.pivot_table(index=['scheme', 'descent_mode'], columns='strategy',
                           values='max_depth', aggfunc='first')
    with pd.option_context('display.width', 120):
        print(table)

    output_dir = sys.argv[1] if len(sys.argv) > 1 else "."
    path = os.path.join(output_dir, "descent_modes_comparison.csv")
    sweep.export_csv(path)
    print(f"\nFull reports written to {path}")


if __name__ == "__main__":
    main()
