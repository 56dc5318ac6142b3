import numpy as np
import pytest

from fhedepth.core.estimator import DepthEstimator
from fhedepth.core.exceptions import BackendError
from fhedepth.core.parameters import ParameterSet, SchemeType
from fhedepth.fhe.simulated_backend import SimulatedBackend


class RecordingBackend(SimulatedBackend):
    """Simulated backend that records the evaluation calls it receives."""

    def __init__(self, fail_on=None, fail_after=0):
        super().__init__()
        self.calls = []
        self.fail_on = fail_on
        self.fail_after = fail_after

    def _record(self, name):
        self.calls.append(name)
        if name == self.fail_on:
            if self.fail_after == 0:
                raise BackendError(f"injected {name} failure")
            self.fail_after -= 1

    def generate_keys(self, context, relinearization):
        self._record("generate_keys")
        return super().generate_keys(context, relinearization)

    def encrypt(self, context, plaintext, public_key):
        self._record("encrypt")
        return super().encrypt(context, plaintext, public_key)

    def multiply(self, context, ciphertext, other):
        self._record("multiply")
        return super().multiply(context, ciphertext, other)

    def square(self, context, ciphertext):
        self._record("square")
        return super().square(context, ciphertext)

    def relinearize(self, context, ciphertext, relin_key):
        self._record("relinearize")
        return super().relinearize(context, ciphertext, relin_key)

    def mod_switch_to_next(self, context, ciphertext):
        self._record("mod_switch_to_next")
        return super().mod_switch_to_next(context, ciphertext)

    def noise_budget(self, context, ciphertext, secret_key):
        self._record("noise_budget")
        return super().noise_budget(context, ciphertext, secret_key)


@pytest.fixture
def simulated_backend():
    return SimulatedBackend()


@pytest.fixture
def recording_backend():
    return RecordingBackend()


@pytest.fixture
def estimator(simulated_backend):
    return DepthEstimator(simulated_backend)


@pytest.fixture
def rng():
    return np.random.default_rng(7)


@pytest.fixture
def five_prime_set():
    """n=8192, t=20 bits: fresh noise 33 bits, 170 data bits."""
    return ParameterSet(8192, 20, (50, 40, 40, 40, 40), SchemeType.BFV)
