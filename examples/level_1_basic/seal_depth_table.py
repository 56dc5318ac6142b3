"""
Level 1 Example: Depth Table for the SEAL Demo Chains
=====================================================

Prints the maximum multiplicative depth of the demo parameter sets:
- Every chain under BFV, then every chain under BGV
- Two-ciphertext multiplication with each scheme's default descent mode
- One line per parameter set with log q, depth and remaining noise budget

Falls back to the simulated backend when Pyfhel is not installed.
"""
import logging

from fhedepth import DepthSweep, configure_logging
from fhedepth.core.presets import demo_cases
from fhedepth.fhe import PYFHEL_AVAILABLE

configure_logging(logging.WARNING)

if __name__ == "__main__":
    backend = "pyfhel" if PYFHEL_AVAILABLE else "simulated"
    print(f"Backend: {backend}")

    sweep = DepthSweep(demo_cases(), backend=backend, seed=0)
    sweep.run()

    for line in sweep.format_lines():
        print(line)
