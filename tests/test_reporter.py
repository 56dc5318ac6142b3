import pytest

from fhedepth.core.estimator import DepthEstimator
from fhedepth.core.parameters import ParameterSet, SchemeType
from fhedepth.core.reporter import describe_outcome, format_parameter_set, format_report, reports_to_dataframe
from fhedepth.fhe.simulated_backend import SimulatedBackend


@pytest.fixture
def estimator():
    return DepthEstimator(SimulatedBackend())


def test_parameter_set_rendering():
    ps = ParameterSet(16384, 20, (59, 59, 45))
    assert format_parameter_set(ps) == "( 16384, 20, {59, 59, 45} )"


def test_usable_report_line(estimator, five_prime_set, rng):
    report = estimator.estimate(five_prime_set, rng=rng)
    assert format_report(report) == (
        "---BFV---\n"
        "( 8192, 20, {50, 40, 40, 40, 40} )\t(logq = 210) maximum depth: 4, noise budget left: 5 bits"
    )
    assert describe_outcome(report.outcome) == "usable up to depth 4 with 5 bits left"


def test_rejected_report_line_carries_the_error(estimator, rng):
    report = estimator.estimate(ParameterSet(4096, 10, (40, 40), SchemeType.BGV), rng=rng)
    assert format_report(report) == (
        "---BGV---\n"
        "( 4096, 10, {40, 40} )\t(logq = 80) Error: cannot find a plain_modulus for the bit size"
        "\tmaximum depth: -1, noise budget left: 0 bits"
    )
    assert describe_outcome(report.outcome) == "rejected (no_suitable_plaintext_modulus)"


def test_insufficient_primes_message(estimator, rng):
    report = estimator.estimate(ParameterSet(4096, 20, (60, 50)), rng=rng)
    assert "Error: cannot find enough primes for the bit sizes" in format_report(report)


def test_diagnostics_are_appended(estimator, rng):
    report = estimator.estimate(ParameterSet(4096, 40, (30, 30)), rng=rng)
    lines = format_report(report).splitlines()
    assert len(lines) == 3
    assert lines[2].startswith("  invalid input: invalid_plain_modulus_too_large")


def test_dataframe_has_one_row_per_report(estimator, five_prime_set, rng):
    reports = [
        estimator.estimate(five_prime_set, rng=rng),
        estimator.estimate(ParameterSet(4096, 10, (40, 40)), rng=rng),
    ]
    df = reports_to_dataframe(reports)
    assert list(df['status']) == ["usable", "rejected"]
    assert list(df['max_depth']) == [4, -1]
    assert df.loc[0, 'log_q'] == 210
    assert df.loc[0, 'descent_mode'] == "on_depletion_only"


def test_empty_dataframe_keeps_columns():
    df = reports_to_dataframe([])
    assert df.empty
    assert 'max_depth' in df.columns
