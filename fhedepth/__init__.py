import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

import numpy as np
import pandas as pd
from tqdm import tqdm

from .core import (
    BenchmarkManager,
    CapabilityResult,
    ConfigurationError,
    BackendError,
    DepthEstimator,
    EstimationReport,
    ModulusDescentMode,
    MultiplicationStrategy,
    ParameterSet,
    SchemePolicy,
    SchemeType,
    SweepCase,
    format_report,
    make_policy,
    reports_to_dataframe,
)
from .fhe import PYFHEL_AVAILABLE, backend_registry


def configure_logging(level=logging.INFO):
    """Configure logging for the fhedepth package.

    Args:
        level: The logging level to set. Can be logging.DEBUG, logging.INFO,
              logging.WARNING, logging.ERROR, or logging.CRITICAL
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logging.getLogger('fhedepth').setLevel(level)


class DepthSweep:
    """
    Evaluates a batch of parameter sets and collects their reports.

    Cases are independent: a rejected parameter set is reported and the batch
    continues, while backend faults propagate to the caller.
    """
    def __init__(self,
                 cases: Iterable[SweepCase],
                 backend: Union[str, Any] = "pyfhel",
                 enable_benchmarking: bool = False,
                 benchmark_manager: BenchmarkManager = None,
                 seed: Optional[int] = None,
                 show_progress: bool = True,
                 **backend_kwargs):

        self.cases: List[SweepCase] = list(cases)
        if benchmark_manager is not None:
            self.benchmark_manager = benchmark_manager
        else:
            self.benchmark_manager = BenchmarkManager() if enable_benchmarking else None
        self.estimator = DepthEstimator(backend, benchmark_manager=self.benchmark_manager, **backend_kwargs)
        self.seed = seed
        self.show_progress = show_progress
        self.reports: List[EstimationReport] = []

    @classmethod
    def from_parameter_sets(cls, parameter_sets: Iterable[ParameterSet],
                            descent_mode: Union[ModulusDescentMode, str, None] = None,
                            strategy: Union[MultiplicationStrategy, str] = MultiplicationStrategy.MULTIPLY,
                            **kwargs) -> "DepthSweep":
        strategy = MultiplicationStrategy.coerce(strategy)
        cases = [SweepCase(ps, make_policy(ps.scheme, descent_mode), strategy) for ps in parameter_sets]
        return cls(cases, **kwargs)

    def run(self) -> List[EstimationReport]:
        """Evaluate every case in order with a single progress bar."""
        logger = logging.getLogger(__name__)
        # one generator per case so cases stay independent of evaluation order
        seeds = np.random.SeedSequence(self.seed).spawn(len(self.cases))
        self.reports = []

        with tqdm(total=len(self.cases), desc="Depth Estimation", ncols=100, disable=not self.show_progress) as pbar:
            for case, seed in zip(self.cases, seeds):
                ps = case.parameter_set
                pbar.set_postfix_str(f"n={ps.ring_degree} logq={ps.log_q} {ps.scheme.value}")
                report = self.estimator.estimate_case(case, rng=np.random.default_rng(seed))
                self.reports.append(report)
                pbar.update(1)

        usable = sum(1 for r in self.reports if r.status == "usable")
        logger.info(f"Depth sweep finished: {usable}/{len(self.reports)} parameter sets usable")
        return self.reports

    def to_dataframe(self) -> pd.DataFrame:
        return reports_to_dataframe(self.reports)

    def export_csv(self, filepath: Union[str, Path]):
        path = Path(filepath)
        self.to_dataframe().to_csv(path, index=False)
        logging.getLogger(__name__).info(f"Exported {len(self.reports)} reports to {path}")

    def format_lines(self) -> List[str]:
        return [format_report(report) for report in self.reports]


__all__ = [
    'configure_logging',
    'DepthSweep',
    'DepthEstimator',
    'SweepCase',
    'ParameterSet',
    'SchemeType',
    'SchemePolicy',
    'ModulusDescentMode',
    'MultiplicationStrategy',
    'CapabilityResult',
    'EstimationReport',
    'ConfigurationError',
    'BackendError',
    'PYFHEL_AVAILABLE',
    'backend_registry',
]
