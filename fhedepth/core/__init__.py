"""
Core components of fhedepth.
"""

from .exceptions import ConfigurationError, BackendError
from .parameters import (
    SchemeType,
    ParameterSet,
    Parameters,
    ParamError,
    ParamErrorKind,
    BuildResult,
    max_coeff_bit_count,
    check_chain_budget,
)
from .policy import (
    ModulusDescentMode,
    MultiplicationStrategy,
    SchemePolicy,
    DEFAULT_DESCENT_MODES,
    default_policy,
    make_policy,
)
from .outcome import (
    CapabilityResult,
    ConfigurationRejected,
    Unusable,
    Usable,
    ContextDiagnostic,
    DiagnosticKind,
    EstimationReport,
)
from .estimator import DepthEstimator, EvaluationState, SweepCase
from .benchmark_manager import BenchmarkManager, BenchmarkProfile
from .reporter import format_report, format_parameter_set, describe_outcome, reports_to_dataframe

__all__ = [
    'ConfigurationError',
    'BackendError',
    'SchemeType',
    'ParameterSet',
    'Parameters',
    'ParamError',
    'ParamErrorKind',
    'BuildResult',
    'max_coeff_bit_count',
    'check_chain_budget',
    'ModulusDescentMode',
    'MultiplicationStrategy',
    'SchemePolicy',
    'DEFAULT_DESCENT_MODES',
    'default_policy',
    'make_policy',
    'CapabilityResult',
    'ConfigurationRejected',
    'Unusable',
    'Usable',
    'ContextDiagnostic',
    'DiagnosticKind',
    'EstimationReport',
    'DepthEstimator',
    'EvaluationState',
    'SweepCase',
    'BenchmarkManager',
    'BenchmarkProfile',
    'format_report',
    'format_parameter_set',
    'describe_outcome',
    'reports_to_dataframe',
]
