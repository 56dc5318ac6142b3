import logging
from typing import Any, Union

from ..core.exceptions import ConfigurationError
from .base_backend import BaseHEBackend, HEContext, KeySet
from .pyfhel_backend import PyfhelBackend
from .simulated_backend import SimulatedBackend

# Pyfhel is an optional extra; without it only the simulated backend is registered.
PYFHEL_AVAILABLE = True
try:
    import Pyfhel  # noqa: F401
except ImportError:
    logging.getLogger(__name__).debug("Pyfhel not installed; the 'pyfhel' backend is unavailable")
    PYFHEL_AVAILABLE = False

# The Backend Registry
backend_registry = {
    "simulated": SimulatedBackend,
}

if PYFHEL_AVAILABLE:
    backend_registry["pyfhel"] = PyfhelBackend


def create_backend(backend: Union[str, BaseHEBackend], **kwargs: Any) -> BaseHEBackend:
    """Resolve a backend instance from a registry name or pass an instance through."""
    if isinstance(backend, BaseHEBackend):
        return backend
    if not isinstance(backend, str) or backend.lower() not in backend_registry:
        hint = " (install the 'seal' extra for Pyfhel)" if backend == "pyfhel" else ""
        raise ConfigurationError(
            f"Unknown backend '{backend}'{hint}. Available backends: {sorted(backend_registry)}"
        )
    return backend_registry[backend.lower()](**kwargs)


__all__ = [
    'BaseHEBackend',
    'HEContext',
    'KeySet',
    'SimulatedBackend',
    'PyfhelBackend',
    'PYFHEL_AVAILABLE',
    'backend_registry',
    'create_backend',
]
