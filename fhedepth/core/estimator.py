"""
Multiplicative depth estimation.

The estimator encrypts a random batch of residues and repeatedly applies a
multiplicative step, relinearizes and, depending on the scheme policy, drops
a level of the modulus chain, until the backend reports no noise budget left.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union
import logging
import time

import numpy as np

from .exceptions import ConfigurationError
from .outcome import (
    SENTINEL_DEPTH,
    CapabilityResult,
    ConfigurationRejected,
    ContextDiagnostic,
    EstimationReport,
    outcome_from_capability,
)
from .parameters import ParamError, ParameterSet, Parameters
from .policy import ModulusDescentMode, MultiplicationStrategy, SchemePolicy, make_policy


@dataclass
class EvaluationState:
    """Mutable loop state, private to one estimation call"""
    ciphertext: Any = None
    operand: Any = None
    budget: int = 0
    level: int = 0
    last_level: int = 0
    depth: int = SENTINEL_DEPTH
    trajectory: List[int] = field(default_factory=list)

    @property
    def at_chain_end(self) -> bool:
        return self.level >= self.last_level


@dataclass(frozen=True)
class SweepCase:
    """One (parameter set, policy, strategy) combination to evaluate"""
    parameter_set: ParameterSet
    policy: Optional[SchemePolicy] = None
    strategy: MultiplicationStrategy = MultiplicationStrategy.MULTIPLY

    def resolved_policy(self) -> SchemePolicy:
        return self.policy if self.policy is not None else make_policy(self.parameter_set.scheme)


class DepthEstimator:
    """
    Runs the multiply -> relinearize -> (maybe) switch -> query cycle.

    Args:
        backend: Backend instance or registry name ('pyfhel', 'simulated')
        benchmark_manager: Optional BenchmarkManager receiving timing events
        **backend_kwargs: Forwarded to the backend constructor when a name is given
    """

    def __init__(self, backend: Union[str, Any] = "pyfhel", benchmark_manager: Any = None, **backend_kwargs):
        from ..fhe import create_backend

        self.backend = create_backend(backend, **backend_kwargs)
        self.benchmark_manager = benchmark_manager
        self.logger = logging.getLogger(__name__)

    def _resolve_policy(self, parameter_set: ParameterSet,
                        policy: Union[SchemePolicy, ModulusDescentMode, str, None]) -> SchemePolicy:
        if isinstance(policy, SchemePolicy):
            if policy.scheme is not parameter_set.scheme:
                raise ConfigurationError(
                    f"Policy for '{policy.scheme.value}' cannot evaluate a "
                    f"'{parameter_set.scheme.value}' parameter set"
                )
            return policy
        return make_policy(parameter_set.scheme, policy)

    def _log_time(self, metric: str, value: float, case_id: str, unit: str = 's'):
        if self.benchmark_manager:
            self.benchmark_manager.log_event(case_id, metric, value, unit=unit)

    def estimate(self, parameter_set: ParameterSet,
                 policy: Union[SchemePolicy, ModulusDescentMode, str, None] = None,
                 strategy: Union[MultiplicationStrategy, str] = MultiplicationStrategy.MULTIPLY,
                 rng: Optional[np.random.Generator] = None) -> EstimationReport:
        """
        Estimate the maximum multiplicative depth of a parameter set.

        Args:
            parameter_set: Configuration to evaluate
            policy: Scheme policy, a descent mode for the set's scheme, or None for the default
            strategy: Multiply two ciphertexts or square one
            rng: Source of plaintext residues; a fresh generator when omitted

        Returns:
            EstimationReport with the three-way outcome and its legacy CapabilityResult
        """
        policy = self._resolve_policy(parameter_set, policy)
        strategy = MultiplicationStrategy.coerce(strategy)
        rng = rng if rng is not None else np.random.default_rng()
        case_id = f"n={parameter_set.ring_degree}/logq={parameter_set.log_q}/{policy.describe()}/{strategy.value}"

        start_time = time.time()
        built = self.backend.validate_and_build(parameter_set)
        if isinstance(built, ParamError):
            self.logger.warning(f"Parameter set {case_id} rejected: {built.kind.name} {built.reason}")
            return EstimationReport(parameter_set, policy, strategy, ConfigurationRejected(built))

        diagnostics: List[ContextDiagnostic] = []
        with self.backend.create_context(built) as context:
            self._log_time('Context Generation Time', time.time() - start_time, case_id)
            if not context.is_consistent():
                message = context.diagnostic_message()
                self.logger.warning(f"invalid input for {case_id}: {message}")
                diagnostics.append(ContextDiagnostic.invalid_combination(message))
            capability, trajectory = self._run(context, built, policy, strategy, rng, case_id)

        elapsed = time.time() - start_time
        self._log_time('Estimation Time', elapsed, case_id)
        self._log_time('Max Depth', capability.max_depth, case_id, unit='levels')
        self._log_time('Noise Budget', capability.noise_budget_bits, case_id, unit='bits')
        self.logger.info(
            f"{case_id}: maximum depth {capability.max_depth}, "
            f"noise budget left {capability.noise_budget_bits} bits ({elapsed:.3f}s)"
        )
        return EstimationReport(
            parameter_set, policy, strategy, outcome_from_capability(capability),
            diagnostics=diagnostics, budget_trajectory=trajectory, plain_modulus=built.plain_modulus,
        )

    def estimate_capability(self, parameter_set: ParameterSet,
                            policy: Union[SchemePolicy, ModulusDescentMode, str, None] = None,
                            strategy: Union[MultiplicationStrategy, str] = MultiplicationStrategy.MULTIPLY,
                            rng: Optional[np.random.Generator] = None) -> CapabilityResult:
        """Legacy numeric result: (-1, 0) for rejected or unusable parameters."""
        return self.estimate(parameter_set, policy, strategy, rng).capability

    def estimate_case(self, case: SweepCase, rng: Optional[np.random.Generator] = None) -> EstimationReport:
        return self.estimate(case.parameter_set, case.resolved_policy(), case.strategy, rng)

    # ---- the loop ----------------------------------------------------------
    def _descend(self, context, state: EvaluationState) -> None:
        if state.at_chain_end:
            self.logger.debug(f"Descent skipped at level {state.level}: end of the modulus chain")
            return
        state.ciphertext = self.backend.mod_switch_to_next(context, state.ciphertext)
        if state.operand is not None:
            # keep the second factor at the running ciphertext's level
            state.operand = self.backend.mod_switch_to_next(context, state.operand)
        state.level += 1

    def _step(self, context, state: EvaluationState, strategy: MultiplicationStrategy) -> Any:
        if strategy is MultiplicationStrategy.SQUARE:
            return self.backend.square(context, state.ciphertext)
        return self.backend.multiply(context, state.ciphertext, state.operand)

    def _run(self, context, parameters: Parameters, policy: SchemePolicy, strategy: MultiplicationStrategy,
             rng: np.random.Generator, case_id: str) -> Tuple[CapabilityResult, List[int]]:
        backend = self.backend
        chain_length = parameters.chain_length

        start_time = time.time()
        keys = backend.generate_keys(context, relinearization=policy.can_relinearize(chain_length))
        self._log_time('Key Generation Time', time.time() - start_time, case_id)

        # Message content does not affect the noise trajectory; any residues will do.
        slots = backend.slot_count(context)
        messages = rng.integers(0, backend.plain_modulus(context), size=slots, dtype=np.uint64)
        plaintext = backend.encode(context, messages)

        state = EvaluationState(last_level=parameters.data_level_count - 1)
        state.ciphertext = backend.encrypt(context, plaintext, keys.public_key)
        if strategy is MultiplicationStrategy.MULTIPLY:
            state.operand = backend.encrypt(context, plaintext, keys.public_key)

        if policy.pre_consumes_level:
            self._descend(context, state)

        budget = backend.noise_budget(context, state.ciphertext, keys.secret_key)

        if not policy.can_relinearize(chain_length):
            # no relinearization, so no multiplication: one level at most
            if budget > 0:
                return CapabilityResult(1, budget), [budget]
            return CapabilityResult(SENTINEL_DEPTH, 0), []

        while budget > 0:
            state.depth += 1
            state.budget = budget
            state.trajectory.append(budget)

            state.ciphertext = self._step(context, state, strategy)
            state.ciphertext = backend.relinearize(context, state.ciphertext, keys.relin_key)

            if policy.descends_after_step:
                if policy.descent_requires_budget:
                    budget = backend.noise_budget(context, state.ciphertext, keys.secret_key)
                    if budget > 0:
                        self._descend(context, state)
                else:
                    self._descend(context, state)

            budget = backend.noise_budget(context, state.ciphertext, keys.secret_key)
            self.logger.debug(f"{case_id}: step {state.depth + 1} level {state.level} budget {budget}")

        if state.depth == SENTINEL_DEPTH:
            return CapabilityResult(), []
        return CapabilityResult(state.depth, state.budget), state.trajectory
