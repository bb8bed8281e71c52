"""Simulated annealing over furniture layouts.

An ``AnnealingRun`` owns all mutable search state (temperature, current and
best layouts, recorded snapshots) for exactly one optimization. The loop is
synchronous; the only shared object is the ``PlaybackBuffer`` it records into,
which a ``PlaybackTimer`` may drain from another thread.
"""

import logging
import math
import threading

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from omegaconf import DictConfig

from layoutsmith.layout.room import LayoutState
from layoutsmith.layout.wall_geometry import update_all_derived_fields
from layoutsmith.optimizer.cost_model import CostModel
from layoutsmith.optimizer.perturbation import PerturbationGenerator
from layoutsmith.optimizer.playback import PlaybackBuffer

console_logger = logging.getLogger(__name__)

# The schedule ends once the temperature has cooled to this value or below.
TERMINAL_TEMPERATURE = 1.0


class RecordPolicy(Enum):
    """Which states an annealing run pushes into its playback buffer.

    The initial and the best state are always recorded.
    """

    ENDPOINTS = "endpoints"
    """Only the initial and the best state."""

    IMPROVEMENTS = "improvements"
    """Additionally every state that improves on the best energy so far."""

    INTERVAL = "interval"
    """Additionally the current state every ``record_interval`` steps."""


@dataclass
class AnnealingConfig:
    """Configuration of one annealing run."""

    initial_temperature: float = 100.0
    """Starting temperature. Must be finite and greater than 1."""

    cooling_decay: float = 0.01
    """Per-step decay; the temperature is multiplied by ``1 - cooling_decay``."""

    num_swaps: int = 1
    """Position swaps applied per proposed candidate. Zero disables swapping."""

    record_policy: RecordPolicy = RecordPolicy.ENDPOINTS
    """States pushed to the playback buffer besides the initial and best one."""

    record_interval: int = 50
    """Step interval used by ``RecordPolicy.INTERVAL``."""

    seed: int | None = None
    """Seed for the random generator. None draws fresh entropy."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if isinstance(self.record_policy, str):
            self.record_policy = RecordPolicy(self.record_policy)

        if not math.isfinite(self.initial_temperature) or (
            self.initial_temperature <= TERMINAL_TEMPERATURE
        ):
            raise ValueError(
                "initial_temperature must be finite and greater than "
                f"{TERMINAL_TEMPERATURE}, got {self.initial_temperature}"
            )
        if not 0.0 < self.cooling_decay < 1.0:
            raise ValueError(
                f"cooling_decay must be in (0, 1), got {self.cooling_decay}"
            )
        if self.num_swaps < 0:
            raise ValueError(f"num_swaps must be non-negative, got {self.num_swaps}")
        if self.record_interval < 1:
            raise ValueError(
                f"record_interval must be at least 1, got {self.record_interval}"
            )

    @property
    def cool_rate(self) -> float:
        """Multiplicative cooling factor applied after every step."""
        return 1.0 - self.cooling_decay

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "AnnealingConfig":
        """Create config from an OmegaConf node (cfg.annealing)."""
        defaults = cls()
        return cls(
            initial_temperature=float(cfg.initial_temperature),
            cooling_decay=float(cfg.cooling_decay),
            num_swaps=int(cfg.get("num_swaps", defaults.num_swaps)),
            record_policy=RecordPolicy(
                cfg.get("record_policy", defaults.record_policy.value)
            ),
            record_interval=int(cfg.get("record_interval", defaults.record_interval)),
            seed=cfg.get("seed", None),
        )


@dataclass
class AnnealingResult:
    """Outcome of an annealing run."""

    best_state: LayoutState
    """Lowest-energy layout found."""

    best_energy: float
    """Energy of ``best_state`` at the step it was found."""

    initial_energy: float
    """Energy of the starting layout."""

    iterations: int
    """Number of loop steps executed."""

    accepted_moves: int
    """Number of candidates adopted as the current state."""

    final_temperature: float
    """Temperature when the loop ended."""

    cancelled: bool = False
    """Whether the run stopped early because ``cancel()`` was called."""

    energy_history: list[float] = field(default_factory=list)
    """Best energy after each step."""


def accept_probability(energy: float, new_energy: float, temperature: float) -> float:
    """Metropolis acceptance probability of moving from ``energy`` to ``new_energy``.

    Improvements are always accepted. Worse candidates are accepted with
    probability ``exp((energy - new_energy) / temperature)``.
    """
    if new_energy < energy:
        return 1.0
    return math.exp((energy - new_energy) / temperature)


class AnnealingRun:
    """A single simulated annealing optimization of a layout.

    Instances are not reusable: construct a new run for every optimization.
    """

    def __init__(
        self,
        initial_state: LayoutState,
        config: AnnealingConfig,
        cost_model: CostModel | None = None,
        buffer: PlaybackBuffer | None = None,
    ):
        """
        Args:
            initial_state: Starting layout. Copied; the caller's object is never
                modified.
            config: Validated annealing configuration.
            cost_model: Energy function. Defaults to the standard weights.
            buffer: Playback buffer to record states into. A private one is
                created when omitted.
        """
        if not initial_state.objects:
            raise ValueError("Cannot optimize a layout without furniture")

        self.config = config
        self.cost_model = cost_model or CostModel()
        self.buffer = buffer if buffer is not None else PlaybackBuffer()

        self.initial_state = update_all_derived_fields(initial_state.clone())
        self.temperature = config.initial_temperature

        self._rng = np.random.default_rng(config.seed)
        self._generator = PerturbationGenerator(
            num_swaps=config.num_swaps, rng=self._rng
        )
        self._cancel_event = threading.Event()
        self._has_run = False

    def cancel(self) -> None:
        """Request the loop to stop after the current step. Safe from any thread."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def _propose(self, state: LayoutState) -> LayoutState:
        return self._generator.propose(
            state, self.temperature, self.config.initial_temperature
        )

    def _should_record(self, step: int, improved: bool) -> bool:
        policy = self.config.record_policy
        if policy == RecordPolicy.IMPROVEMENTS:
            return improved
        if policy == RecordPolicy.INTERVAL:
            return step % self.config.record_interval == 0
        return False

    def run(self) -> AnnealingResult:
        """Run until the schedule cools or is cancelled and return the best layout."""
        if self._has_run:
            raise RuntimeError("AnnealingRun instances cannot be reused")
        self._has_run = True

        console_logger.info(
            f"Starting annealing: {len(self.initial_state.objects)} items, "
            f"T0={self.config.initial_temperature}, "
            f"cool_rate={self.config.cool_rate}"
        )

        current = self._propose(self.initial_state)
        reference = self._propose(self.initial_state)
        current_energy = self.cost_model.energy(reference, current)
        initial_energy = current_energy
        self.buffer.push(current)

        best = current.clone()
        best_energy = current_energy

        iterations = 0
        accepted_moves = 0
        energy_history: list[float] = []
        cool_rate = self.config.cool_rate

        while self.temperature > TERMINAL_TEMPERATURE:
            if self._cancel_event.is_set():
                console_logger.info(
                    f"Annealing cancelled after {iterations} iterations"
                )
                break

            candidate = self._propose(current)
            candidate_energy = self.cost_model.energy(candidate, current)

            probability = accept_probability(
                current_energy, candidate_energy, self.temperature
            )
            if probability > self._rng.random():
                # candidate is a fresh clone owned by nobody else.
                current = candidate
                current_energy = candidate_energy
                accepted_moves += 1

            improved = current_energy < best_energy
            if improved:
                best = current.clone()
                best_energy = current_energy

            iterations += 1
            energy_history.append(best_energy)
            if self._should_record(iterations, improved):
                self.buffer.push(current)

            self.temperature *= cool_rate

        best_evaluation = self.cost_model.evaluate(best, best)
        console_logger.info(
            f"Best room has a cost of {best_energy} after {iterations} iterations "
            f"({accepted_moves} accepted)"
        )
        console_logger.info(f"Evaluation: {best_evaluation.to_description()}")
        self.buffer.push(best)

        return AnnealingResult(
            best_state=best.clone(),
            best_energy=best_energy,
            initial_energy=initial_energy,
            iterations=iterations,
            accepted_moves=accepted_moves,
            final_temperature=self.temperature,
            cancelled=self.cancelled,
            energy_history=energy_history,
        )
