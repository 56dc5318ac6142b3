import pandas as pd
import pytest

from fhedepth import DepthSweep
from fhedepth.core.benchmark_manager import BenchmarkManager, BenchmarkProfile
from fhedepth.core.estimator import SweepCase
from fhedepth.core.parameters import ParameterSet, SchemeType
from fhedepth.core.policy import ModulusDescentMode, MultiplicationStrategy
from fhedepth.core.presets import SEAL_DEMO_CHAINS, SQUARING_DEMO_CHAINS, demo_cases


@pytest.fixture
def parameter_sets(five_prime_set):
    return [
        five_prime_set,
        ParameterSet(4096, 10, (40, 40)),
        ParameterSet(4096, 20, (30,)),
    ]


def _sweep(parameter_sets, **kwargs):
    return DepthSweep.from_parameter_sets(
        parameter_sets, backend="simulated", show_progress=False, seed=1, **kwargs
    )


def test_sweep_continues_past_rejected_cases(parameter_sets):
    sweep = _sweep(parameter_sets)
    reports = sweep.run()
    assert [r.status for r in reports] == ["usable", "rejected", "unusable"]
    assert reports[0].max_depth == 4


def test_sweep_applies_mode_and_strategy(five_prime_set):
    sweep = _sweep([five_prime_set.with_scheme(SchemeType.BGV)],
                   descent_mode="eager", strategy=MultiplicationStrategy.SQUARE)
    report = sweep.run()[0]
    assert report.policy.descent_mode is ModulusDescentMode.EAGER
    assert (report.max_depth, report.noise_budget_bits) == (2, 17)


def test_sweep_is_reproducible(parameter_sets):
    first = _sweep(parameter_sets).run()
    second = _sweep(parameter_sets).run()
    assert [r.capability for r in first] == [r.capability for r in second]


def test_dataframe_and_csv_export(parameter_sets, tmp_path):
    sweep = _sweep(parameter_sets)
    sweep.run()
    df = sweep.to_dataframe()
    assert len(df) == 3
    path = tmp_path / "depths.csv"
    sweep.export_csv(path)
    loaded = pd.read_csv(path)
    assert list(loaded['max_depth']) == [4, -1, -1]


def test_format_lines(parameter_sets):
    sweep = _sweep(parameter_sets)
    sweep.run()
    lines = sweep.format_lines()
    assert len(lines) == 3
    assert all(line.startswith("---BFV---") for line in lines)


def test_benchmark_events_are_recorded(parameter_sets):
    sweep = _sweep(parameter_sets, enable_benchmarking=True)
    sweep.run()
    data = sweep.benchmark_manager.get_benchmark_data()
    metrics = set(data['metric'])
    assert {'Context Generation Time', 'Key Generation Time', 'Estimation Time', 'Max Depth', 'Noise Budget'} <= metrics
    summary = sweep.benchmark_manager.summary()
    assert 'Max Depth' in summary.columns


def test_profile_filters_events(five_prime_set):
    manager = BenchmarkManager([BenchmarkProfile.CAPABILITY])
    sweep = _sweep([five_prime_set], benchmark_manager=manager)
    sweep.run()
    assert set(manager.get_benchmark_data()['metric']) == {'Max Depth', 'Noise Budget'}


def test_depth_plot_and_export(five_prime_set, tmp_path):
    sweep = _sweep([five_prime_set, five_prime_set.with_scheme("bgv")], enable_benchmarking=True)
    sweep.run()
    plot_path = tmp_path / "depths.png"
    sweep.benchmark_manager.plot_depth_summary(save_path=plot_path)
    assert plot_path.exists()
    csv_path = tmp_path / "events.csv"
    sweep.benchmark_manager.export_to_csv(csv_path, BenchmarkProfile.CAPABILITY)
    assert csv_path.exists()


def test_export_without_events_writes_nothing(tmp_path):
    manager = BenchmarkManager()
    manager.export_to_csv(tmp_path / "none.csv")
    assert not (tmp_path / "none.csv").exists()


def test_demo_cases_are_scheme_major():
    cases = demo_cases()
    assert len(cases) == 2 * len(SEAL_DEMO_CHAINS)
    assert [c.parameter_set.scheme for c in cases[:len(SEAL_DEMO_CHAINS)]] == [SchemeType.BFV] * len(SEAL_DEMO_CHAINS)
    assert all(isinstance(c, SweepCase) for c in cases)
    assert cases[-1].policy.scheme is SchemeType.BGV


def test_squaring_demo_cases():
    cases = demo_cases(["bgv"], SQUARING_DEMO_CHAINS, "eager", "square")
    assert len(cases) == 2
    assert all(c.strategy is MultiplicationStrategy.SQUARE for c in cases)
    assert all(c.policy.descent_mode is ModulusDescentMode.EAGER for c in cases)
