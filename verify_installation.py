#!/usr/bin/env python3
"""
fhedepth Installation Verification Script
=========================================

Checks that fhedepth imports, reports which backends are registered and runs
one small estimation on each of them.
"""


def verify_installation():
    """Verify fhedepth installation and backend availability"""

    print("fhedepth Installation Verification")
    print("=" * 40)

    # Test 1: Basic import
    try:
        import fhedepth
        print("✓ fhedepth package import: SUCCESS")
    except ImportError as e:
        print(f"✗ fhedepth package import: FAILED - {e}")
        print("  Solution: pip install -e .")
        return False

    # Test 2: Backends
    from fhedepth.fhe import PYFHEL_AVAILABLE, backend_registry
    print(f"✓ Registered backends: {', '.join(sorted(backend_registry))}")
    if PYFHEL_AVAILABLE:
        print("✓ SEAL backend (Pyfhel): AVAILABLE")
    else:
        print("✗ SEAL backend (Pyfhel): NOT AVAILABLE")
        print("  Solution: pip install -e .[seal]")

    # Test 3: One estimation per backend
    from fhedepth import DepthEstimator, ParameterSet
    ps = ParameterSet(8192, 20, (50, 40, 40, 50))
    for name in sorted(backend_registry):
        try:
            result = DepthEstimator(name).estimate_capability(ps)
            print(f"✓ {name}: depth {result.max_depth}, {result.noise_budget_bits} bits left")
        except Exception as e:
            print(f"✗ {name}: FAILED - {e}")
            return False

    print("\n" + "=" * 40)
    print("Installation Status: SUCCESS" if PYFHEL_AVAILABLE else "Installation Status: SIMULATED ONLY")
    return True


if __name__ == "__main__":
    import sys
    sys.exit(0 if verify_installation() else 1)
