from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional
import logging

import numpy as np

from ..core.exceptions import BackendError
from ..core.parameters import BuildResult, ParameterSet, Parameters


@dataclass
class KeySet:
    """Key handles produced by a backend. ``relin_key`` is None for single-prime chains."""
    secret_key: Any
    public_key: Any
    relin_key: Optional[Any] = None


class HEContext:
    """
    Backend context scoped to one estimation call.

    Owns the backend handle and releases it on ``close()``; usable as a
    context manager so every exit path releases it.
    """

    def __init__(self, parameters: Parameters, handle: Any = None, consistent: bool = True,
                 message: str = "valid", on_close: Optional[Callable[["HEContext"], None]] = None):
        self.parameters = parameters
        self.handle = handle
        self._consistent = consistent
        self._message = message
        self._on_close = on_close
        self.closed = False

    @property
    def plain_modulus(self) -> int:
        return self.parameters.plain_modulus

    def is_consistent(self) -> bool:
        return self._consistent

    def diagnostic_message(self) -> str:
        return self._message

    def ensure_open(self) -> None:
        if self.closed:
            raise BackendError("Context has already been released")

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._on_close is not None:
            self._on_close(self)
        self.handle = None

    def __enter__(self) -> "HEContext":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class BaseHEBackend(ABC):
    """Abstract Base Class for all leveled HE backends."""
    name = "base"

    def __init__(self, benchmark_manager: Any = None):
        self.benchmark_manager = benchmark_manager
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    @abstractmethod
    def validate_and_build(self, parameter_set: ParameterSet) -> BuildResult:
        """Materialise parameters, or return a ParamError for the two recoverable failures."""
        pass

    @abstractmethod
    def create_context(self, parameters: Parameters) -> HEContext:
        pass

    @abstractmethod
    def generate_keys(self, context: HEContext, relinearization: bool) -> KeySet:
        """Generate secret/public keys, plus a relinearization key when requested."""
        pass

    @abstractmethod
    def slot_count(self, context: HEContext) -> int:
        pass

    @abstractmethod
    def encode(self, context: HEContext, values: np.ndarray) -> Any:
        """Batch-encode residues modulo the plaintext modulus."""
        pass

    @abstractmethod
    def encrypt(self, context: HEContext, plaintext: Any, public_key: Any) -> Any:
        pass

    @abstractmethod
    def multiply(self, context: HEContext, ciphertext: Any, other: Any) -> Any:
        pass

    @abstractmethod
    def square(self, context: HEContext, ciphertext: Any) -> Any:
        pass

    @abstractmethod
    def relinearize(self, context: HEContext, ciphertext: Any, relin_key: Any) -> Any:
        pass

    @abstractmethod
    def mod_switch_to_next(self, context: HEContext, ciphertext: Any) -> Any:
        pass

    @abstractmethod
    def noise_budget(self, context: HEContext, ciphertext: Any, secret_key: Any) -> int:
        """Invariant noise budget in bits; decryption is correct iff it is positive."""
        pass

    def plain_modulus(self, context: HEContext) -> int:
        return context.plain_modulus

    def __repr__(self):
        return f"{self.__class__.__name__}(name='{self.name}')"
