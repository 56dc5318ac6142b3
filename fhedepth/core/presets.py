"""
Demonstration parameter lists.

Each entry is a ``(ring degree, plaintext bits, coefficient chain)`` triple.
Chains for n <= 32768 stay within the supported total bit size; the 65536
entries rely on the extrapolated maximum and are rejected by SEAL builds
that stop at 32768.
"""

from typing import List, Sequence, Tuple, Union

from .estimator import SweepCase
from .parameters import ParameterSet, SchemeType
from .policy import ModulusDescentMode, MultiplicationStrategy, make_policy

SEAL_DEMO_CHAINS: List[Tuple[int, int, Tuple[int, ...]]] = [
    (16384, 20, (59, 59, 45, 59, 59, 24, 59, 60)),
    (16384, 20, (59, 59, 36, 59, 59, 59, 60)),
    (32768, 20, (60, 30, 30, 50, 55, 60, 60, 60, 60, 60, 60)),
    (32768, 20, (60, 30, 30, 50, 52, 50, 50, 60, 60, 60, 60)),
    (65536, 20, (60, 58, 50, 50, 52, 50, 60, 60, 60, 60, 60, 60, 60, 60, 60, 60)),
    (65536, 20, (60, 58, 40, 50, 52, 50, 30, 60, 60, 60, 60, 60, 60, 60, 60, 60)),
]

SQUARING_DEMO_CHAINS: List[Tuple[int, int, Tuple[int, ...]]] = [
    (16384, 20, (53, 53, 53, 53, 53, 53, 53, 53)),
    (32768, 20, (60, 30, 30, 52, 50, 56, 60, 60, 60, 60, 60, 60, 60, 60, 60)),
]


def demo_cases(schemes: Sequence[Union[SchemeType, str]] = (SchemeType.BFV, SchemeType.BGV),
               chains=SEAL_DEMO_CHAINS,
               descent_mode: Union[ModulusDescentMode, str, None] = None,
               strategy: Union[MultiplicationStrategy, str] = MultiplicationStrategy.MULTIPLY) -> List[SweepCase]:
    """Every chain evaluated under every scheme, scheme-major like the legacy printout."""
    strategy = MultiplicationStrategy.coerce(strategy)
    cases = []
    for scheme in schemes:
        policy = make_policy(scheme, descent_mode)
        for ring_degree, plain_bits, chain in chains:
            cases.append(SweepCase(ParameterSet(ring_degree, plain_bits, chain, policy.scheme), policy, strategy))
    return cases
