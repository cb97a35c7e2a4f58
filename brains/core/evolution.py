"""
Generation Pipeline Module

Turns one population plus its fitness values into the next generation:
1. Elitism: the best individuals are cloned unchanged
2. Fill: repeated selection + crossover until the population is full
3. Mutation: every non-elite individual goes through the mutation gate

The pipeline is generic over the individual type; crossover and mutation
are passed in as callables so the same loop drives any specimen.
"""

import logging
import math
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

import numpy as np

from brains.core.crossover import crossover as network_crossover
from brains.core.mutation import mutate as network_mutate
from brains.core.selection import SelectionMethod, Selector, ensure_implemented
from brains.errors import ErrorCode, PreconditionViolation

# Configure logging
logger = logging.getLogger(__name__)

S = TypeVar('S')

CrossoverFunction = Callable[[np.random.Generator, Sequence[Any], Any, Any], None]
MutationFunction = Callable[[np.random.Generator, Any, Any], Any]


class OffspringCollector(Generic[S]):
    """
    Fixed-capacity output buffer for a new generation.

    Writes past the capacity are silently discarded.

    Attributes:
        limit: Maximum number of individuals
        members: Individuals written so far
    """

    def __init__(self, limit: int):
        self.limit = limit
        self.members: List[S] = []

    def write(self, specimen: S) -> None:
        if self.can_write():
            self.members.append(specimen)

    def can_write(self) -> bool:
        return len(self.members) < self.limit

    def __len__(self) -> int:
        return len(self.members)


def _fitness_rank_key(value: float) -> float:
    # NaN sorts as the lowest value so the order stays total
    return -math.inf if math.isnan(value) else value


def rank_by_fitness(fitness: Sequence[float]) -> List[int]:
    """
    Indices ordered by fitness, best first.

    Ties keep their original order; NaN ranks lowest.
    """
    return sorted(
        range(len(fitness)),
        key=lambda i: _fitness_rank_key(float(fitness[i])),
        reverse=True,
    )


def add_elite_members(
    output: OffspringCollector,
    population: Sequence[Any],
    fitness: Sequence[float],
    elitism: int,
    clone: Callable[[Any], Any]
) -> None:
    if elitism <= 0:
        return
    for index in rank_by_fitness(fitness)[:elitism]:
        output.write(clone(population[index]))


def _clone(specimen: Any) -> Any:
    return specimen.clone()


def evolve(
    rng: np.random.Generator,
    population: Sequence[S],
    fitness: Sequence[float],
    selection_method: SelectionMethod,
    elitism: int,
    crossover_settings: Any,
    mutation_settings: Any,
    crossover_inputs: int = 2,
    crossover: CrossoverFunction = network_crossover,
    mutate: MutationFunction = network_mutate,
    clone: Optional[Callable[[S], S]] = None
) -> List[S]:
    """
    Produce the next generation.

    Args:
        rng: Random generator shared by every step
        population: Current generation
        fitness: One non-negative, finite fitness value per individual
        selection_method: Parent selection strategy
        elitism: Number of top individuals carried over unmutated
        crossover_settings: Settings handed to `crossover`
        mutation_settings: Settings handed to `mutate`
        crossover_inputs: Parents per crossover call
        crossover: Operator writing offspring into the collector
        mutate: In-place mutation operator
        clone: Deep copy used for elite members (defaults to `.clone()`)

    Returns:
        List of the same length as `population`

    Raises:
        PreconditionViolation: If population and fitness lengths differ or
            fitness values are negative or non-finite
        UnimplementedStrategyError: If the selection method is not implemented
    """
    if len(population) != len(fitness):
        raise PreconditionViolation(
            f"Population has {len(population)} members but {len(fitness)} fitness values",
            ErrorCode.FITNESS_LENGTH_MISMATCH,
        )
    ensure_implemented(selection_method)

    if not population:
        return []

    selector = Selector(selection_method, fitness)
    output: OffspringCollector[S] = OffspringCollector(len(population))

    add_elite_members(output, population, fitness, elitism, clone or _clone)

    parent_indices: List[int] = []
    parents: List[S] = []
    crossovers = 0

    while output.can_write():
        parent_indices.clear()
        parents.clear()

        selector.select_into(rng, crossover_inputs, parent_indices)
        parents.extend(population[i] for i in parent_indices)

        crossover(rng, parents, output, crossover_settings)
        crossovers += 1

    members = output.members
    mutated = 0
    for specimen in members[elitism:]:
        if mutate(rng, specimen, mutation_settings):
            mutated += 1

    logger.debug(
        f"Generation built: {len(members)} members, {min(elitism, len(members))} elite, "
        f"{crossovers} crossovers, {mutated} mutated"
    )
    return members
