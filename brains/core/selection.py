"""
Selection Strategies Module

Parent selection for the generation pipeline. The configuration surface
declares four strategies:
- FitnessProportionate: parent chance proportional to fitness (implemented)
- StochasticUniversal: equally spaced pointers over cumulative fitness
- Tournament: best of a random subset of the given size
- Truncation: only the best fraction of the population reproduces

Only FitnessProportionate is built. Requesting any other strategy raises
UnimplementedStrategyError instead of falling back to another strategy.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Sequence, Union

import numpy as np

from brains.core.sampling import WeightedSampler
from brains.errors import ErrorCode, PreconditionViolation, SerializationError, UnimplementedStrategyError

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FitnessProportionate:
    """Sum fitness, draw parents with probability fitness / sum."""


@dataclass(frozen=True)
class StochasticUniversal:
    """Equally spaced pointers, randomly offset once per generation."""


@dataclass(frozen=True)
class Tournament:
    """Randomly choose a subset of `size` individuals, take the strongest."""
    size: int


@dataclass(frozen=True)
class Truncation:
    """Take only the best `fraction` of the population."""
    fraction: float


SelectionMethod = Union[FitnessProportionate, StochasticUniversal, Tournament, Truncation]

IMPLEMENTED_METHODS = (FitnessProportionate,)


def ensure_implemented(method: SelectionMethod) -> None:
    """
    Fail fast on a declared but unimplemented selection method.

    Raises:
        UnimplementedStrategyError: For anything but FitnessProportionate
    """
    if not isinstance(method, IMPLEMENTED_METHODS):
        raise UnimplementedStrategyError(
            f"Selection method {type(method).__name__} is not implemented"
        )


def check_fitness(fitness: np.ndarray) -> None:
    """Fitness values must be finite and non-negative."""
    if not np.all(np.isfinite(fitness)):
        raise PreconditionViolation("Fitness values must be finite", ErrorCode.INVALID_FITNESS)
    if np.any(fitness < 0.0):
        raise PreconditionViolation("Fitness values must not be negative", ErrorCode.INVALID_FITNESS)


class Selector:
    """
    Parent selector bound to one generation's fitness values.

    Built once per generation; draws never modify the population, they
    only return indices into it.

    Example:
        >>> selector = Selector(FitnessProportionate(), [1.0, 3.0])
        >>> len(selector.select(np.random.default_rng(0), 2))
        2
    """

    def __init__(self, method: SelectionMethod, fitness: Sequence[float]):
        ensure_implemented(method)

        values = np.asarray(fitness, dtype=np.float64).reshape(-1)
        check_fitness(values)

        # All-zero fitness selects uniformly
        if values.size and not values.max() > 0.0:
            values = np.ones_like(values)

        self.method = method
        self.sampler = WeightedSampler(values)

    def select(self, rng: np.random.Generator, count: int) -> List[int]:
        return self.sampler.sample_many(rng, count).tolist()

    def select_into(self, rng: np.random.Generator, count: int, output: List[int]) -> None:
        """Append `count` parent indices to `output`."""
        output.extend(self.sampler.sample_many(rng, count).tolist())


def selection_to_json(method: SelectionMethod) -> Any:
    if isinstance(method, FitnessProportionate):
        return 'FitnessProportionate'
    if isinstance(method, StochasticUniversal):
        return 'StochasticUniversal'
    if isinstance(method, Tournament):
        return {'Tournament': method.size}
    if isinstance(method, Truncation):
        return {'Truncation': method.fraction}
    raise SerializationError(f"Unknown selection method: {method!r}")


def selection_from_json(value: Any) -> SelectionMethod:
    if value == 'FitnessProportionate':
        return FitnessProportionate()
    if value == 'StochasticUniversal':
        return StochasticUniversal()
    if isinstance(value, dict) and len(value) == 1:
        (name, arg), = value.items()
        if name == 'Tournament':
            return Tournament(int(arg))
        if name == 'Truncation':
            return Truncation(float(arg))
    raise SerializationError(f"Unknown selection method in JSON: {value!r}")
