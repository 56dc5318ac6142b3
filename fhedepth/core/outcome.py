"""
Estimation results.

:class:`CapabilityResult` is the legacy numeric pair. The three outcome
classes distinguish a rejected configuration from an unusable one, which the
numeric sentinel ``(-1, 0)`` cannot.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Union

from .parameters import ParamError, ParameterSet
from .policy import MultiplicationStrategy, SchemePolicy

SENTINEL_DEPTH = -1


@dataclass(frozen=True)
class CapabilityResult:
    """
    Maximum multiplicative depth and the budget left at that depth.

    ``max_depth == -1`` means a fresh ciphertext already fails to decrypt
    (or the parameters could not be built at all).
    """
    max_depth: int = SENTINEL_DEPTH
    noise_budget_bits: int = 0

    def __post_init__(self):
        if self.max_depth < SENTINEL_DEPTH:
            raise ValueError(f"max_depth must be >= -1, got {self.max_depth}")
        if self.noise_budget_bits < 0:
            raise ValueError(f"noise_budget_bits must be >= 0, got {self.noise_budget_bits}")

    @property
    def is_sentinel(self) -> bool:
        return self.max_depth == SENTINEL_DEPTH


@dataclass(frozen=True)
class ConfigurationRejected:
    """The backend could not build parameters for the set"""
    error: ParamError

    def to_capability(self) -> CapabilityResult:
        return CapabilityResult()


@dataclass(frozen=True)
class Unusable:
    """Parameters were built but a fresh ciphertext has no budget left"""
    budget: int = 0

    def to_capability(self) -> CapabilityResult:
        return CapabilityResult()


@dataclass(frozen=True)
class Usable:
    """
    A fresh ciphertext decrypts correctly.

    ``depth`` counts the multiplications it survives, so 0 means fresh
    ciphertexts decrypt but a single multiplication exhausts the budget.
    """
    depth: int
    budget: int

    def __post_init__(self):
        if self.depth < 0:
            raise ValueError(f"A usable outcome needs depth >= 0, got {self.depth}")

    def to_capability(self) -> CapabilityResult:
        return CapabilityResult(self.depth, self.budget)


Outcome = Union[ConfigurationRejected, Unusable, Usable]


def outcome_from_capability(capability: CapabilityResult) -> Outcome:
    """Map a numeric result from a successful build onto the three-way outcome."""
    if capability.is_sentinel:
        return Unusable(budget=0)
    return Usable(depth=capability.max_depth, budget=capability.noise_budget_bits)


class DiagnosticKind(Enum):
    INVALID_PARAMETER_COMBINATION = auto()


@dataclass(frozen=True)
class ContextDiagnostic:
    """Non-fatal complaint raised by the backend about a built context"""
    kind: DiagnosticKind
    reason: str

    @classmethod
    def invalid_combination(cls, reason: str) -> "ContextDiagnostic":
        return cls(DiagnosticKind.INVALID_PARAMETER_COMBINATION, reason)


@dataclass
class EstimationReport:
    """
    Everything one estimation call produced.

    Attributes:
        parameter_set: The evaluated configuration
        policy: Scheme policy used for the loop
        strategy: Multiplication strategy used for the loop
        outcome: Three-way outcome
        diagnostics: Context inconsistencies reported by the backend
        budget_trajectory: Budget snapshot recorded at each depth 0..max_depth
        plain_modulus: Plaintext modulus chosen by the backend (None if rejected)
    """
    parameter_set: ParameterSet
    policy: SchemePolicy
    strategy: MultiplicationStrategy
    outcome: Outcome
    diagnostics: List[ContextDiagnostic] = field(default_factory=list)
    budget_trajectory: List[int] = field(default_factory=list)
    plain_modulus: Optional[int] = None

    @property
    def capability(self) -> CapabilityResult:
        return self.outcome.to_capability()

    @property
    def max_depth(self) -> int:
        return self.capability.max_depth

    @property
    def noise_budget_bits(self) -> int:
        return self.capability.noise_budget_bits

    @property
    def rejected(self) -> bool:
        return isinstance(self.outcome, ConfigurationRejected)

    @property
    def status(self) -> str:
        if isinstance(self.outcome, ConfigurationRejected):
            return "rejected"
        if isinstance(self.outcome, Unusable):
            return "unusable"
        return "usable"
