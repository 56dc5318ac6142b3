"""
End-to-end depth figures on SEAL through Pyfhel.

Skipped when the ``seal`` extra is not installed.
"""

import numpy as np
import pytest

pytest.importorskip("Pyfhel")

from fhedepth.core.estimator import DepthEstimator
from fhedepth.core.outcome import Usable
from fhedepth.core.parameters import ParamErrorKind, ParameterSet, SchemeType
from fhedepth.core.policy import ModulusDescentMode, MultiplicationStrategy, SchemePolicy

MIXED_CHAIN = (59, 59, 45, 59, 59, 24, 59, 60)
EVEN_CHAIN = (53, 53, 53, 53, 53, 53, 53, 53)
LONG_CHAIN = (60, 30, 30, 52, 50, 56, 60, 60, 60, 60, 60, 60, 60, 60, 60)


@pytest.fixture(scope="module")
def estimator():
    return DepthEstimator("pyfhel")


def test_bfv_multiply(estimator):
    ps = ParameterSet(16384, 20, MIXED_CHAIN, SchemeType.BFV)
    report = estimator.estimate(ps, strategy="multiply", rng=np.random.default_rng(0))
    assert (report.max_depth, report.noise_budget_bits) == (10, 1)


def test_bgv_multiply_with_depletion_descent(estimator):
    ps = ParameterSet(16384, 20, MIXED_CHAIN, SchemeType.BGV)
    report = estimator.estimate(ps, ModulusDescentMode.ON_DEPLETION_ONLY, "multiply", np.random.default_rng(0))
    assert (report.max_depth, report.noise_budget_bits) == (5, 31)


def test_bfv_square_without_descent(estimator):
    ps = ParameterSet(16384, 20, EVEN_CHAIN, SchemeType.BFV)
    report = estimator.estimate(ps, ModulusDescentMode.NONE, "square", np.random.default_rng(0))
    assert (report.max_depth, report.noise_budget_bits) == (10, 8)


def test_bgv_square_with_eager_descent(estimator):
    ps = ParameterSet(32768, 20, LONG_CHAIN, SchemeType.BGV)
    policy = SchemePolicy(SchemeType.BGV, ModulusDescentMode.EAGER)
    report = estimator.estimate(ps, policy, MultiplicationStrategy.SQUARE, np.random.default_rng(0))
    assert isinstance(report.outcome, Usable)
    assert report.diagnostics == []
    assert report.noise_budget_bits == report.budget_trajectory[-1]
    assert len(report.budget_trajectory) == report.max_depth + 1


def test_oversized_chain_is_rejected(estimator):
    ps = ParameterSet(4096, 20, (60, 50), SchemeType.BFV)
    report = estimator.estimate(ps, rng=np.random.default_rng(0))
    assert report.outcome.error.kind is ParamErrorKind.INSUFFICIENT_PRIMES


def test_single_prime_chain(estimator):
    ps = ParameterSet(4096, 20, (60,), SchemeType.BFV)
    report = estimator.estimate(ps, rng=np.random.default_rng(0))
    assert report.max_depth in (-1, 1)


@pytest.mark.parametrize("ring_degree,chain", [(16384, MIXED_CHAIN), (16384, EVEN_CHAIN), (4096, (60,))])
def test_context_uses_the_requested_chain(ring_degree, chain):
    built = DepthEstimator("pyfhel").backend.validate_and_build(ParameterSet(ring_degree, 20, chain))
    he = built.backend_data["he"]
    assert list(he.qi_sizes) == list(chain)
