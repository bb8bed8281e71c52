"""Simulated annealing optimizer for furniture layouts."""

from layoutsmith.optimizer.annealing import (
    AnnealingConfig,
    AnnealingResult,
    AnnealingRun,
    RecordPolicy,
    accept_probability,
)
from layoutsmith.optimizer.cost_model import (
    CostConfigurationError,
    CostModel,
    CostWeights,
)
from layoutsmith.optimizer.gaussian import GaussianSampler
from layoutsmith.optimizer.perturbation import PerturbationGenerator
from layoutsmith.optimizer.playback import PlaybackBuffer, PlaybackTimer

__all__ = [
    "AnnealingConfig",
    "AnnealingResult",
    "AnnealingRun",
    "CostConfigurationError",
    "CostModel",
    "CostWeights",
    "GaussianSampler",
    "PerturbationGenerator",
    "PlaybackBuffer",
    "PlaybackTimer",
    "RecordPolicy",
    "accept_probability",
]
