"""
Weighted Sampling Module

Alias-method discrete sampler (Vose's variant). Construction is O(n),
each draw is O(1): pick a column uniformly, then either keep it or jump
to its alias with one biased coin flip.

Used for fitness-proportionate parent selection and for picking
crossover/mutation operator variants by relative probability.
"""

import logging
from typing import Sequence

import numpy as np

from brains.errors import InvalidWeightsError

# Configure logging
logger = logging.getLogger(__name__)


class WeightedSampler:
    """
    Draw index i with probability weights[i] / sum(weights).

    Attributes:
        probability: Per-column probability of keeping the column
        alias: Per-column fallback index

    Example:
        >>> rng = np.random.default_rng(0)
        >>> sampler = WeightedSampler([1.0, 1.0, 2.0])
        >>> 0 <= sampler.sample(rng) < 3
        True
    """

    def __init__(self, weights: Sequence[float]):
        """
        Build the alias table.

        Args:
            weights: Non-negative, finite relative weights, at least one positive

        Raises:
            InvalidWeightsError: If the weights are empty, negative, non-finite
                or sum to zero
        """
        w = np.asarray(weights, dtype=np.float64).reshape(-1)

        if w.size == 0:
            raise InvalidWeightsError("Weights must not be empty")
        if not np.all(np.isfinite(w)):
            raise InvalidWeightsError("Weights must be finite")
        if np.any(w < 0.0):
            raise InvalidWeightsError("Weights must not be negative")

        # Scale by the peak so the sum stays within [1, n]
        peak = w.max()
        if not peak > 0.0:
            raise InvalidWeightsError("Weights must have a positive sum")
        w = w / peak

        n = w.size
        scaled = w * (n / w.sum())
        self.probability = np.ones(n, dtype=np.float64)
        self.alias = np.arange(n, dtype=np.intp)

        small = [i for i in range(n) if scaled[i] < 1.0]
        large = [i for i in range(n) if scaled[i] >= 1.0]

        while small and large:
            lo = small.pop()
            hi = large.pop()
            self.probability[lo] = scaled[lo]
            self.alias[lo] = hi
            scaled[hi] = (scaled[hi] + scaled[lo]) - 1.0
            if scaled[hi] < 1.0:
                small.append(hi)
            else:
                large.append(hi)

        # Leftovers are 1.0 up to rounding error
        for i in large + small:
            self.probability[i] = 1.0

    def __len__(self) -> int:
        return len(self.probability)

    def sample(self, rng: np.random.Generator) -> int:
        """Draw a single index."""
        column = int(rng.integers(len(self.probability)))
        if rng.random() < self.probability[column]:
            return column
        return int(self.alias[column])

    def sample_many(self, rng: np.random.Generator, size: int) -> np.ndarray:
        """Draw `size` indices at once (vectorized)."""
        columns = rng.integers(len(self.probability), size=size)
        keep = rng.random(size) < self.probability[columns]
        return np.where(keep, columns, self.alias[columns])
