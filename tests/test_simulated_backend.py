import numpy as np
import pytest

from fhedepth.core.exceptions import BackendError
from fhedepth.core.parameters import ParamError, ParamErrorKind, ParameterSet, Parameters, SchemeType
from fhedepth.fhe import create_backend
from fhedepth.fhe.simulated_backend import SimulatedBackend


def _context(backend, ps):
    built = backend.validate_and_build(ps)
    assert isinstance(built, Parameters)
    return backend.create_context(built)


@pytest.mark.parametrize("ps,kind", [
    (ParameterSet(4096, 10, (40, 40)), ParamErrorKind.NO_SUITABLE_PLAINTEXT_MODULUS),
    (ParameterSet(4096, 61, (40, 40)), ParamErrorKind.NO_SUITABLE_PLAINTEXT_MODULUS),
    (ParameterSet(8192, 20, (13, 40)), ParamErrorKind.INSUFFICIENT_PRIMES),
    (ParameterSet(8192, 20, (61, 40)), ParamErrorKind.INSUFFICIENT_PRIMES),
    (ParameterSet(4096, 20, (60, 50)), ParamErrorKind.INSUFFICIENT_PRIMES),
])
def test_validation_failures_are_returned_not_raised(simulated_backend, ps, kind):
    result = simulated_backend.validate_and_build(ps)
    assert isinstance(result, ParamError)
    assert result.kind is kind
    assert result.reason


def test_built_parameters(simulated_backend):
    built = simulated_backend.validate_and_build(ParameterSet(8192, 20, (50, 40, 40)))
    assert built.plain_modulus.bit_length() == 20
    assert [q.bit_length() for q in built.coeff_moduli] == [50, 40, 40]
    assert built.data_level_count == 2


def test_context_is_a_scoped_resource(simulated_backend):
    with _context(simulated_backend, ParameterSet(4096, 20, (40, 40))) as context:
        assert simulated_backend.open_contexts == 1
        assert context.is_consistent()
        assert simulated_backend.slot_count(context) == 4096
    assert simulated_backend.open_contexts == 0
    with pytest.raises(BackendError):
        simulated_backend.slot_count(context)


def test_relin_key_only_for_multi_prime_chains(simulated_backend):
    with _context(simulated_backend, ParameterSet(4096, 20, (60,))) as context:
        assert simulated_backend.generate_keys(context, relinearization=False).relin_key is None
        with pytest.raises(BackendError):
            simulated_backend.generate_keys(context, relinearization=True)


def test_plain_modulus_sharing_a_coefficient_prime_is_inconsistent(simulated_backend):
    # both pick the largest 20-bit prime = 1 mod 8192
    with _context(simulated_backend, ParameterSet(4096, 20, (20, 60))) as context:
        assert not context.is_consistent()
        assert "coprimality" in context.diagnostic_message()


def test_structural_rules(simulated_backend):
    backend = simulated_backend
    with _context(backend, ParameterSet(8192, 20, (50, 40, 40))) as context:
        keys = backend.generate_keys(context, relinearization=True)
        values = np.zeros(backend.slot_count(context), dtype=np.uint64)
        pt = backend.encode(context, values)
        a = backend.encrypt(context, pt, keys.public_key)
        b = backend.encrypt(context, pt, keys.public_key)

        with pytest.raises(BackendError):
            backend.encode(context, np.full(4, context.plain_modulus, dtype=np.uint64))
        with pytest.raises(BackendError):
            backend.relinearize(context, a, keys.relin_key)

        product = backend.multiply(context, a, b)
        with pytest.raises(BackendError):
            backend.noise_budget(context, product, keys.secret_key)
        product = backend.relinearize(context, product, keys.relin_key)
        assert backend.noise_budget(context, product, keys.secret_key) == 90 - 66

        lowered = backend.mod_switch_to_next(context, a)
        with pytest.raises(BackendError):
            backend.multiply(context, lowered, b)
        with pytest.raises(BackendError):
            backend.mod_switch_to_next(context, lowered)


def test_registry_resolves_simulated_backend():
    assert isinstance(create_backend("simulated"), SimulatedBackend)
    backend = SimulatedBackend()
    assert create_backend(backend) is backend
