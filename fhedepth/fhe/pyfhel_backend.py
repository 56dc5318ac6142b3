from collections import namedtuple
from typing import Any, Callable, Optional
import logging
import time

import numpy as np

from ..core.exceptions import BackendError
from ..core.parameters import (
    BuildResult,
    ParamError,
    ParameterSet,
    Parameters,
    check_chain_budget,
    max_coeff_bit_count,
)
from .base_backend import BaseHEBackend, HEContext, KeySet

# Pyfhel keeps every key inside the Pyfhel instance; the handles only remember which one.
PyfhelKey = namedtuple("PyfhelKey", ["kind", "he"])

PROBE_PRIME_BITS = 60

# Pyfhel maps sec=0 to SEAL's sec_level_type::none. Any other level makes
# contextGen discard qi_sizes and build SEAL's default chain instead.
NO_SECURITY_ENFORCEMENT = 0


def _new_pyfhel() -> Any:
    from Pyfhel import Pyfhel
    return Pyfhel()


def _message_is_valid(message: Any) -> bool:
    if message is None:
        return True
    text = str(message).strip().lower()
    return text == "" or text.startswith("success") or text == "valid"


class PyfhelBackend(BaseHEBackend):
    """
    SEAL-based backend through Pyfhel.

    Parameter validation runs in two stages so the two recoverable failures
    stay distinguishable: a probe context selects the batching plaintext
    modulus, then the full chain is built with that modulus.

    Args:
        security_level: Passed to ``contextGen(sec=...)``. The default disables
            security enforcement so the requested chain is used as given.
        benchmark_manager: Optional BenchmarkManager receiving timing events
        he_factory: Zero-argument callable returning a fresh Pyfhel object
    """
    name = "pyfhel"

    def __init__(self, security_level: int = NO_SECURITY_ENFORCEMENT, benchmark_manager: Any = None,
                 he_factory: Optional[Callable[[], Any]] = None):
        super().__init__(benchmark_manager)
        self.security_level = security_level
        self.he_factory = he_factory or _new_pyfhel

    def _context_gen(self, he: Any, parameter_set: ParameterSet, **kwargs) -> Any:
        return he.contextGen(
            scheme=parameter_set.scheme.value,
            n=parameter_set.ring_degree,
            sec=self.security_level,
            **kwargs
        )

    def validate_and_build(self, parameter_set: ParameterSet) -> BuildResult:
        limit = max_coeff_bit_count(parameter_set.ring_degree)
        if limit < 2:
            return ParamError.insufficient_primes(
                f"ring degree {parameter_set.ring_degree} is below the smallest supported degree"
            )

        probe = self.he_factory()
        try:
            self._context_gen(probe, parameter_set, t_bits=parameter_set.plain_modulus_bits,
                              qi_sizes=[min(PROBE_PRIME_BITS, limit)])
            plain_modulus = int(probe.t)
        except (RuntimeError, ValueError) as e:
            return ParamError.no_suitable_plain_modulus(str(e))
        finally:
            del probe

        rejected = check_chain_budget(parameter_set)
        if rejected is not None:
            return rejected

        start_time = time.time()
        he = self.he_factory()
        try:
            message = self._context_gen(he, parameter_set, t=plain_modulus,
                                        qi_sizes=list(parameter_set.coeff_modulus_bits))
        except (RuntimeError, ValueError) as e:
            return ParamError.insufficient_primes(str(e))
        if self.benchmark_manager:
            self.benchmark_manager.log_event('Backend (Pyfhel)', 'Context Generation Time', time.time() - start_time)
        logging.getLogger(__name__).debug(
            f"Pyfhel context built for n={parameter_set.ring_degree}, t={plain_modulus}, "
            f"chain={list(parameter_set.coeff_modulus_bits)}: {message}"
        )
        return Parameters(parameter_set, plain_modulus, backend_data={"he": he, "message": message})

    def create_context(self, parameters: Parameters) -> HEContext:
        he = parameters.backend_data.pop("he", None)
        message = parameters.backend_data.get("message")
        if he is None:
            # parameters were already used for a context; rebuild an identical one
            he = self.he_factory()
            message = self._context_gen(he, parameters.parameter_set, t=parameters.plain_modulus,
                                        qi_sizes=list(parameters.parameter_set.coeff_modulus_bits))
        return HEContext(parameters, he, _message_is_valid(message), str(message))

    # ---- helpers -----------------------------------------------------------
    @staticmethod
    def _he(context: HEContext) -> Any:
        context.ensure_open()
        return context.handle

    @staticmethod
    def _call(operation: str, fn, *args):
        try:
            return fn(*args)
        except (RuntimeError, ValueError) as e:
            raise BackendError(f"Pyfhel {operation} failed: {e}") from e

    # ---- keys & encoding ---------------------------------------------------
    def generate_keys(self, context: HEContext, relinearization: bool) -> KeySet:
        he = self._he(context)
        self._call("keyGen", he.keyGen)
        relin_key = None
        if relinearization:
            self._call("relinKeyGen", he.relinKeyGen)
            relin_key = PyfhelKey("relin", he)
        return KeySet(PyfhelKey("secret", he), PyfhelKey("public", he), relin_key)

    def slot_count(self, context: HEContext) -> int:
        return int(self._he(context).get_nSlots())

    def encode(self, context: HEContext, values: np.ndarray) -> Any:
        he = self._he(context)
        t = context.plain_modulus
        residues = np.asarray(values, dtype=np.uint64) % np.uint64(t)
        # The batch encoder takes signed values, so use centred representatives.
        centred = residues.astype(np.int64)
        centred[centred > t // 2] -= t
        return self._call("encodeInt", he.encodeInt, centred)

    def encrypt(self, context: HEContext, plaintext: Any, public_key: Any) -> Any:
        he = self._he(context)
        return self._call("encryptPtxt", he.encryptPtxt, plaintext)

    # ---- evaluation --------------------------------------------------------
    def multiply(self, context: HEContext, ciphertext: Any, other: Any) -> Any:
        he = self._he(context)
        self._call("multiply", he.multiply, ciphertext, other)
        return ciphertext

    def square(self, context: HEContext, ciphertext: Any) -> Any:
        he = self._he(context)
        self._call("square", he.square, ciphertext)
        return ciphertext

    def relinearize(self, context: HEContext, ciphertext: Any, relin_key: Any) -> Any:
        he = self._he(context)
        if relin_key is None:
            raise BackendError("Relinearization requires a relinearization key")
        self._call("relinearize", he.relinearize, ciphertext)
        return ciphertext

    def mod_switch_to_next(self, context: HEContext, ciphertext: Any) -> Any:
        he = self._he(context)
        self._call("mod_switch_to_next", he.mod_switch_to_next, ciphertext)
        return ciphertext

    def noise_budget(self, context: HEContext, ciphertext: Any, secret_key: Any) -> int:
        he = self._he(context)
        return int(self._call("noise_level", he.noise_level, ciphertext))
