"""
Pure-Python leveled backend with a coarse noise model.

No ring arithmetic is performed. Each ciphertext only carries its level, its
size and an estimate of its noise in bits. The model:

* ``log_n = log2(ring_degree)``, ``t_bits = plain_modulus.bit_length()``
* fresh noise and the rounding floor: ``t_bits + log_n``
* BFV multiply/square: ``max(noise_a, noise_b) + t_bits + log_n``
* BGV multiply/square: ``noise_a + noise_b``
* modulus switch dropping a ``p``-bit prime: ``max(floor, noise - p)``
* budget: ``max(0, level_bits - noise)`` where ``level_bits`` is the size of
  the data primes still in the chain

It is calibrated for the shape of the trajectories (BFV loses a constant
amount per multiplication, BGV needs modulus switching to survive), not for
the exact numbers a SEAL backend reports.
"""

from dataclasses import dataclass
from typing import Any, List
import itertools

import numpy as np

from ..core.exceptions import BackendError
from ..core.parameters import (
    BuildResult,
    ParamError,
    ParameterSet,
    Parameters,
    SchemeType,
    check_chain_budget,
)
from .base_backend import BaseHEBackend, HEContext, KeySet
from .primes import batching_plain_modulus, create_coeff_moduli

_context_ids = itertools.count(1)


@dataclass(frozen=True)
class SimulatedKey:
    kind: str
    context_id: int


@dataclass(frozen=True)
class SimulatedPlaintext:
    context_id: int
    slots: int


@dataclass(frozen=True)
class SimulatedCiphertext:
    context_id: int
    level: int
    noise_bits: int
    size: int = 2


class SimulatedBackend(BaseHEBackend):
    """Leveled backend that tracks noise analytically instead of computing on polynomials."""
    name = "simulated"

    def __init__(self, benchmark_manager: Any = None):
        super().__init__(benchmark_manager)
        self.open_contexts = 0

    # ---- parameters & context ---------------------------------------------
    def validate_and_build(self, parameter_set: ParameterSet) -> BuildResult:
        n = parameter_set.ring_degree
        try:
            plain_modulus = batching_plain_modulus(n, parameter_set.plain_modulus_bits)
        except ValueError as e:
            return ParamError.no_suitable_plain_modulus(str(e))

        rejected = check_chain_budget(parameter_set)
        if rejected is not None:
            return rejected
        try:
            moduli = create_coeff_moduli(n, parameter_set.coeff_modulus_bits)
        except ValueError as e:
            return ParamError.insufficient_primes(str(e))

        return Parameters(parameter_set, plain_modulus, tuple(moduli))

    def create_context(self, parameters: Parameters) -> HEContext:
        consistent, message = self._check_consistency(parameters)
        data_bits = [p.bit_length() for p in parameters.data_moduli]
        handle = {
            "id": next(_context_ids),
            "data_bits": data_bits,
            "log_n": parameters.parameter_set.ring_degree.bit_length() - 1,
            "t_bits": parameters.plain_modulus.bit_length(),
            "scheme": parameters.parameter_set.scheme,
        }
        self.open_contexts += 1
        return HEContext(parameters, handle, consistent, message, on_close=self._release)

    def _release(self, context: HEContext) -> None:
        self.open_contexts -= 1

    @staticmethod
    def _check_consistency(parameters: Parameters):
        t = parameters.plain_modulus
        if t in parameters.coeff_moduli:
            return False, "invalid_plain_modulus_coprimality: plain_modulus is not coprime to coeff_modulus"
        product = 1
        for q in parameters.data_moduli:
            product *= q
        if t >= product:
            return False, "invalid_plain_modulus_too_large: plain_modulus is not smaller than coeff_modulus"
        return True, "valid"

    # ---- keys & encoding ---------------------------------------------------
    def _handle(self, context: HEContext) -> dict:
        context.ensure_open()
        return context.handle

    def generate_keys(self, context: HEContext, relinearization: bool) -> KeySet:
        cid = self._handle(context)["id"]
        relin_key = None
        if relinearization:
            if context.parameters.chain_length < 2:
                raise BackendError("keyswitching is not supported by the context")
            relin_key = SimulatedKey("relin", cid)
        return KeySet(SimulatedKey("secret", cid), SimulatedKey("public", cid), relin_key)

    def slot_count(self, context: HEContext) -> int:
        self._handle(context)
        return context.parameters.parameter_set.ring_degree

    def encode(self, context: HEContext, values: np.ndarray) -> SimulatedPlaintext:
        handle = self._handle(context)
        values = np.asarray(values)
        if len(values) > self.slot_count(context):
            raise BackendError(f"Cannot encode {len(values)} values into {self.slot_count(context)} slots")
        if len(values) and (values.min() < 0 or int(values.max()) >= context.plain_modulus):
            raise BackendError("Encoded values must be residues modulo the plaintext modulus")
        return SimulatedPlaintext(handle["id"], len(values))

    def encrypt(self, context: HEContext, plaintext: SimulatedPlaintext, public_key: SimulatedKey) -> SimulatedCiphertext:
        handle = self._handle(context)
        self._check_key(handle, public_key, "public")
        if plaintext.context_id != handle["id"]:
            raise BackendError("Plaintext does not belong to this context")
        return SimulatedCiphertext(handle["id"], 0, handle["t_bits"] + handle["log_n"])

    # ---- evaluation --------------------------------------------------------
    def _check_operand(self, handle: dict, ciphertext: SimulatedCiphertext) -> None:
        if ciphertext.context_id != handle["id"]:
            raise BackendError("Ciphertext does not belong to this context")

    @staticmethod
    def _check_key(handle: dict, key: Any, kind: str) -> None:
        if not isinstance(key, SimulatedKey) or key.kind != kind or key.context_id != handle["id"]:
            raise BackendError(f"Invalid {kind} key for this context")

    def _product_noise(self, handle: dict, a: int, b: int) -> int:
        if handle["scheme"] is SchemeType.BGV:
            return a + b
        return max(a, b) + handle["t_bits"] + handle["log_n"]

    def multiply(self, context: HEContext, ciphertext: SimulatedCiphertext, other: SimulatedCiphertext) -> SimulatedCiphertext:
        handle = self._handle(context)
        self._check_operand(handle, ciphertext)
        self._check_operand(handle, other)
        if ciphertext.level != other.level:
            raise BackendError("encrypted1 and encrypted2 parameter mismatch")
        return SimulatedCiphertext(
            handle["id"],
            ciphertext.level,
            self._product_noise(handle, ciphertext.noise_bits, other.noise_bits),
            ciphertext.size + other.size - 1,
        )

    def square(self, context: HEContext, ciphertext: SimulatedCiphertext) -> SimulatedCiphertext:
        handle = self._handle(context)
        self._check_operand(handle, ciphertext)
        return SimulatedCiphertext(
            handle["id"],
            ciphertext.level,
            self._product_noise(handle, ciphertext.noise_bits, ciphertext.noise_bits),
            2 * ciphertext.size - 1,
        )

    def relinearize(self, context: HEContext, ciphertext: SimulatedCiphertext, relin_key: Any) -> SimulatedCiphertext:
        handle = self._handle(context)
        self._check_operand(handle, ciphertext)
        if relin_key is None:
            raise BackendError("Relinearization requires a relinearization key")
        self._check_key(handle, relin_key, "relin")
        if ciphertext.size < 3:
            raise BackendError("Ciphertext of size 2 does not need relinearization")
        return SimulatedCiphertext(handle["id"], ciphertext.level, ciphertext.noise_bits, 2)

    def mod_switch_to_next(self, context: HEContext, ciphertext: SimulatedCiphertext) -> SimulatedCiphertext:
        handle = self._handle(context)
        self._check_operand(handle, ciphertext)
        data_bits: List[int] = handle["data_bits"]
        remaining = len(data_bits) - ciphertext.level
        if remaining <= 1:
            raise BackendError("end of modulus switching chain reached")
        dropped = data_bits[remaining - 1]
        floor = handle["t_bits"] + handle["log_n"]
        return SimulatedCiphertext(
            handle["id"],
            ciphertext.level + 1,
            max(floor, ciphertext.noise_bits - dropped),
            ciphertext.size,
        )

    def noise_budget(self, context: HEContext, ciphertext: SimulatedCiphertext, secret_key: Any) -> int:
        handle = self._handle(context)
        self._check_operand(handle, ciphertext)
        self._check_key(handle, secret_key, "secret")
        if ciphertext.size != 2:
            raise BackendError("Noise budget is only defined for size-2 ciphertexts")
        data_bits = handle["data_bits"]
        level_bits = sum(data_bits[:len(data_bits) - ciphertext.level])
        return max(0, level_bits - ciphertext.noise_bits)
