"""Gaussian sampling with the polar Box-Muller transform."""

import math

import numpy as np


class GaussianSampler:
    """Normal-distribution sampler that produces samples in pairs.

    Each transform yields two independent standard normal values; the second
    one is cached and returned by the next call. The cache belongs to this
    instance, so concurrent optimizer runs must each own a sampler.
    """

    def __init__(self, rng: np.random.Generator | None = None):
        self._rng = rng if rng is not None else np.random.default_rng()
        self._cached: float | None = None

    def standard_normal(self) -> float:
        """Draw one sample from N(0, 1)."""
        if self._cached is not None:
            value = self._cached
            self._cached = None
            return value

        while True:
            x1 = 2.0 * self._rng.random() - 1.0
            x2 = 2.0 * self._rng.random() - 1.0
            w = x1 * x1 + x2 * x2
            # w == 0 would make log(w) diverge.
            if 0.0 < w < 1.0:
                break

        scale = math.sqrt((-2.0 * math.log(w)) / w)
        self._cached = x2 * scale
        return x1 * scale

    def sample(self, mean: float = 0.0, stdev: float = 1.0) -> float:
        """Draw one sample from N(mean, stdev^2)."""
        return mean + stdev * self.standard_normal()
