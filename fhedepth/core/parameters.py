"""
Parameter sets and their validation results.

A :class:`ParameterSet` is the immutable, user-supplied description of one
candidate configuration. A backend turns it into concrete :class:`Parameters`
through ``validate_and_build`` or returns a :class:`ParamError` describing why
it could not.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Tuple, Union

from .exceptions import ConfigurationError


class SchemeType(Enum):
    """Leveled scheme families supported by the estimator"""
    BFV = "bfv"  # scheme family A
    BGV = "bgv"  # scheme family B

    @classmethod
    def coerce(cls, value: Union["SchemeType", str]) -> "SchemeType":
        """Accept an enum member or its case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise ConfigurationError(
            f"Unknown scheme '{value}'. Supported schemes: {[s.value for s in cls]}"
        )


# Largest total coefficient modulus (bits) per ring degree, taken from the
# HomomorphicEncryption.org 128-bit table.
MAX_COEFF_BIT_COUNT: Dict[int, int] = {
    1024: 27,
    2048: 54,
    4096: 109,
    8192: 218,
    16384: 438,
    32768: 881,
}


def max_coeff_bit_count(ring_degree: int) -> int:
    """
    Supported total coefficient modulus size for a ring degree.

    Degrees above the table are extrapolated by doubling the largest entry.
    Degrees below it are unsupported and return 0.
    """
    if ring_degree in MAX_COEFF_BIT_COUNT:
        return MAX_COEFF_BIT_COUNT[ring_degree]
    largest = max(MAX_COEFF_BIT_COUNT)
    if ring_degree < largest:
        return 0
    bits = MAX_COEFF_BIT_COUNT[largest]
    degree = largest
    while degree < ring_degree:
        degree *= 2
        bits *= 2
    return bits


def _is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


@dataclass(frozen=True)
class ParameterSet:
    """
    One candidate configuration.

    Attributes:
        ring_degree: Polynomial ring dimension (power of two)
        plain_modulus_bits: Target bit size of the batching plaintext modulus
        coeff_modulus_bits: Bit sizes of the coefficient modulus chain
        scheme: Scheme family
    """
    ring_degree: int
    plain_modulus_bits: int
    coeff_modulus_bits: Tuple[int, ...]
    scheme: SchemeType = SchemeType.BFV

    def __post_init__(self):
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "scheme", SchemeType.coerce(self.scheme))
        object.__setattr__(self, "coeff_modulus_bits", tuple(self.coeff_modulus_bits))

        if not isinstance(self.ring_degree, int) or self.ring_degree < 2 or not _is_power_of_two(self.ring_degree):
            raise ConfigurationError(f"Ring degree must be a power of two >= 2, got {self.ring_degree!r}")
        if not isinstance(self.plain_modulus_bits, int) or self.plain_modulus_bits <= 0:
            raise ConfigurationError(f"Plaintext modulus bit size must be a positive integer, got {self.plain_modulus_bits!r}")
        if not self.coeff_modulus_bits:
            raise ConfigurationError("Coefficient modulus chain must not be empty")
        for bits in self.coeff_modulus_bits:
            if not isinstance(bits, int) or bits <= 0:
                raise ConfigurationError(f"Coefficient modulus bit sizes must be positive integers, got {bits!r}")

    @property
    def chain_length(self) -> int:
        return len(self.coeff_modulus_bits)

    @property
    def log_q(self) -> int:
        """Total coefficient modulus size in bits"""
        return sum(self.coeff_modulus_bits)

    def with_scheme(self, scheme: Union[SchemeType, str]) -> "ParameterSet":
        return ParameterSet(self.ring_degree, self.plain_modulus_bits, self.coeff_modulus_bits, scheme)


class ParamErrorKind(Enum):
    """Recoverable reasons a parameter set cannot be materialised"""
    NO_SUITABLE_PLAINTEXT_MODULUS = auto()
    INSUFFICIENT_PRIMES = auto()


@dataclass(frozen=True)
class ParamError:
    """Tagged failure returned (never raised) by ``validate_and_build``"""
    kind: ParamErrorKind
    reason: str = ""

    @classmethod
    def no_suitable_plain_modulus(cls, reason: str = "") -> "ParamError":
        return cls(ParamErrorKind.NO_SUITABLE_PLAINTEXT_MODULUS, reason)

    @classmethod
    def insufficient_primes(cls, reason: str = "") -> "ParamError":
        return cls(ParamErrorKind.INSUFFICIENT_PRIMES, reason)


@dataclass(frozen=True)
class Parameters:
    """
    Concrete parameters materialised by a backend.

    ``data_level_count`` is the number of levels a fresh ciphertext can descend
    through: the last prime of a multi-prime chain is reserved for key
    switching, so it is ``chain_length - 1`` there and 1 for a single prime.
    """
    parameter_set: ParameterSet
    plain_modulus: int
    coeff_moduli: Tuple[int, ...] = ()
    backend_data: Dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def chain_length(self) -> int:
        return self.parameter_set.chain_length

    @property
    def data_level_count(self) -> int:
        return max(1, self.chain_length - 1)

    @property
    def data_moduli(self) -> Tuple[int, ...]:
        """Primes carrying ciphertext data, empty when the backend does not expose them"""
        if self.chain_length == 1:
            return self.coeff_moduli
        return self.coeff_moduli[:-1]


BuildResult = Union[Parameters, ParamError]


def check_chain_budget(parameter_set: ParameterSet) -> Union[ParamError, None]:
    """
    Reject chains whose total size exceeds the supported maximum for the ring degree.

    Shared by all backends so an oversized chain never yields partially built parameters.
    """
    limit = max_coeff_bit_count(parameter_set.ring_degree)
    if parameter_set.log_q > limit:
        return ParamError.insufficient_primes(
            f"coefficient modulus of {parameter_set.log_q} bits exceeds the {limit}-bit maximum "
            f"for ring degree {parameter_set.ring_degree}"
        )
    return None

