"""
Human-readable and tabular rendering of estimation reports.
"""

from typing import Iterable, List

import pandas as pd

from .outcome import ConfigurationRejected, EstimationReport, Outcome, Unusable
from .parameters import ParamErrorKind, ParameterSet

REJECTION_MESSAGES = {
    ParamErrorKind.NO_SUITABLE_PLAINTEXT_MODULUS: "Error: cannot find a plain_modulus for the bit size",
    ParamErrorKind.INSUFFICIENT_PRIMES: "Error: cannot find enough primes for the bit sizes",
}


def format_parameter_set(parameter_set: ParameterSet) -> str:
    chain = ", ".join(str(bits) for bits in parameter_set.coeff_modulus_bits)
    return f"( {parameter_set.ring_degree}, {parameter_set.plain_modulus_bits}, {{{chain}}} )"


def describe_outcome(outcome: Outcome) -> str:
    if isinstance(outcome, ConfigurationRejected):
        return f"rejected ({outcome.error.kind.name.lower()})"
    if isinstance(outcome, Unusable):
        return "unusable: a fresh ciphertext does not decrypt"
    return f"usable up to depth {outcome.depth} with {outcome.budget} bits left"


def format_report(report: EstimationReport) -> str:
    """
    Render a report in the legacy printout format, e.g.::

        ---BFV---
        ( 16384, 20, {59, 59, 45} )	(logq = 163) maximum depth: 2, noise budget left: 7 bits
    """
    ps = report.parameter_set
    line = f"{format_parameter_set(ps)}\t(logq = {ps.log_q}) "
    if isinstance(report.outcome, ConfigurationRejected):
        line += REJECTION_MESSAGES[report.outcome.error.kind] + "\t"
    line += f"maximum depth: {report.max_depth}, noise budget left: {report.noise_budget_bits} bits"
    for diagnostic in report.diagnostics:
        line += f"\n  invalid input: {diagnostic.reason}"
    return f"---{ps.scheme.name}---\n{line}"


def reports_to_dataframe(reports: Iterable[EstimationReport]) -> pd.DataFrame:
    rows: List[dict] = []
    for report in reports:
        ps = report.parameter_set
        rows.append({
            'ring_degree': ps.ring_degree,
            'plain_modulus_bits': ps.plain_modulus_bits,
            'coeff_modulus_bits': list(ps.coeff_modulus_bits),
            'log_q': ps.log_q,
            'scheme': ps.scheme.value,
            'descent_mode': report.policy.descent_mode.value,
            'strategy': report.strategy.value,
            'status': report.status,
            'max_depth': report.max_depth,
            'noise_budget_bits': report.noise_budget_bits,
            'diagnostics': "; ".join(d.reason for d in report.diagnostics),
        })
    return pd.DataFrame(rows, columns=[
        'ring_degree', 'plain_modulus_bits', 'coeff_modulus_bits', 'log_q', 'scheme',
        'descent_mode', 'strategy', 'status', 'max_depth', 'noise_budget_bits', 'diagnostics',
    ])
