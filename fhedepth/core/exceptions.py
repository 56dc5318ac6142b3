"""
Exceptions raised by fhedepth.

Recoverable parameter-construction failures are NOT exceptions: they are
returned as :class:`fhedepth.core.parameters.ParamError` values.
"""


class ConfigurationError(ValueError):
    """Raised when a parameter set, scheme tag, descent mode, strategy or backend name is malformed"""
    pass


class BackendError(RuntimeError):
    """Raised by a backend for faults the estimator does not recover from"""
    pass
