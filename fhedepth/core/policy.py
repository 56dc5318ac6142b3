"""
Scheme policies and multiplication strategies.

The two knobs that distinguish the estimator variants:

* :class:`ModulusDescentMode` decides when the running ciphertext is switched
  down the modulus chain. Combined with the scheme family through
  :class:`SchemePolicy`.
* :class:`MultiplicationStrategy` decides whether each step multiplies two
  independent ciphertexts or squares one. It is orthogonal to the policy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional, Union

from .exceptions import ConfigurationError
from .parameters import SchemeType


class _ValueEnum(Enum):
    @classmethod
    def coerce(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise ConfigurationError(
            f"Unknown {cls.__name__} '{value}'. Supported values: {[m.value for m in cls]}"
        )


class ModulusDescentMode(_ValueEnum):
    """When ``mod_switch_to_next`` is invoked on the running ciphertext"""
    NONE = "none"                             # never switch
    ON_DEPLETION_ONLY = "on_depletion_only"   # after a step, if budget is still positive (BGV only)
    EAGER = "eager"                           # once after encryption, then after every step


class MultiplicationStrategy(_ValueEnum):
    """Shape of the multiplicative step"""
    MULTIPLY = "multiply"  # running ciphertext times a fixed second ciphertext
    SQUARE = "square"      # running ciphertext squared in place


# Scheme families for which ON_DEPLETION_ONLY actually descends.
DEPLETION_DESCENT_SCHEMES: FrozenSet[SchemeType] = frozenset({SchemeType.BGV})

# Must cover every SchemeType.
DEFAULT_DESCENT_MODES: Dict[SchemeType, ModulusDescentMode] = {
    SchemeType.BFV: ModulusDescentMode.ON_DEPLETION_ONLY,
    SchemeType.BGV: ModulusDescentMode.ON_DEPLETION_ONLY,
}


@dataclass(frozen=True)
class SchemePolicy:
    """
    Per-scheme-family behaviour of the estimation loop.

    Attributes:
        scheme: Scheme family the policy applies to
        descent_mode: Selected modulus descent mode
    """
    scheme: SchemeType
    descent_mode: ModulusDescentMode = ModulusDescentMode.ON_DEPLETION_ONLY

    def __post_init__(self):
        object.__setattr__(self, "scheme", SchemeType.coerce(self.scheme))
        object.__setattr__(self, "descent_mode", ModulusDescentMode.coerce(self.descent_mode))

    @property
    def pre_consumes_level(self) -> bool:
        """Whether one level is dropped right after the initial encryption"""
        return self.descent_mode is ModulusDescentMode.EAGER

    @property
    def descends_after_step(self) -> bool:
        """Whether a descent can follow each multiply+relinearize step"""
        if self.descent_mode is ModulusDescentMode.EAGER:
            return True
        if self.descent_mode is ModulusDescentMode.ON_DEPLETION_ONLY:
            return self.scheme in DEPLETION_DESCENT_SCHEMES
        return False

    @property
    def descent_requires_budget(self) -> bool:
        """Whether the post-step descent is conditional on a positive budget"""
        return self.descent_mode is ModulusDescentMode.ON_DEPLETION_ONLY

    @staticmethod
    def can_relinearize(chain_length: int) -> bool:
        return chain_length > 1

    def describe(self) -> str:
        return f"{self.scheme.value}/{self.descent_mode.value}"


def default_policy(scheme: Union[SchemeType, str]) -> SchemePolicy:
    """Policy with the family's default descent mode."""
    scheme = SchemeType.coerce(scheme)
    if scheme not in DEFAULT_DESCENT_MODES:
        raise ConfigurationError(f"No descent policy defined for scheme '{scheme.value}'")
    return SchemePolicy(scheme, DEFAULT_DESCENT_MODES[scheme])


def make_policy(scheme: Union[SchemeType, str],
                descent_mode: Optional[Union[ModulusDescentMode, str]] = None) -> SchemePolicy:
    """Build a policy, falling back to the family default when no mode is given."""
    if descent_mode is None:
        return default_policy(scheme)
    return SchemePolicy(SchemeType.coerce(scheme), ModulusDescentMode.coerce(descent_mode))
