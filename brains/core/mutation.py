"""
Mutation Module

In-place weight mutation for a single network.

A mutation call is gated once per individual by the configured mutation
probability. When it fires, k weights (k drawn from the settings' range)
are picked by uniform layer and uniform flat weight index, and each gets
one operator:
- Invert: w = -w
- Replace(min, max): w = U[min, max)
- Scale(min, max): w *= U[min, max)
- Shift(min, max): w += U[min, max)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

import numpy as np

from brains.core.network import NeuralNetwork
from brains.core.sampling import WeightedSampler
from brains.errors import ConfigError, ErrorCode, InvalidWeightsError, SerializationError

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Invert:
    pass


@dataclass(frozen=True)
class Replace:
    min: float
    max: float


@dataclass(frozen=True)
class Scale:
    min: float
    max: float


@dataclass(frozen=True)
class Shift:
    min: float
    max: float


MutationMethod = Union[Invert, Replace, Scale, Shift]

_RANGED_METHODS = {
    'Replace': (Replace, ErrorCode.MUTATION_INVALID_REPLACE_METHOD_MIN_MAX),
    'Scale': (Scale, ErrorCode.MUTATION_INVALID_SCALE_METHOD_MIN_MAX),
    'Shift': (Shift, ErrorCode.MUTATION_INVALID_SHIFT_METHOD_MIN_MAX),
}


@dataclass
class MutationMethodProbability:
    method: MutationMethod
    relative_probability: float

    def to_dict(self) -> Dict[str, Any]:
        if isinstance(self.method, Invert):
            method: Any = 'Invert'
        else:
            method = {type(self.method).__name__: [self.method.min, self.method.max]}
        return {'method': method, 'relative_probability': self.relative_probability}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MutationMethodProbability':
        raw = data['method']
        if raw == 'Invert':
            method: MutationMethod = Invert()
        elif isinstance(raw, dict) and len(raw) == 1 and next(iter(raw)) in _RANGED_METHODS:
            (name, bounds), = raw.items()
            method_cls = _RANGED_METHODS[name][0]
            method = method_cls(float(bounds[0]), float(bounds[1]))
        else:
            raise SerializationError(f"Unknown mutation method in JSON: {raw!r}")
        return cls(method, float(data['relative_probability']))


def _default_mutation_methods() -> List[MutationMethodProbability]:
    return [
        MutationMethodProbability(Invert(), 0.5),
        MutationMethodProbability(Replace(-2.0, 2.0), 1.0),
        MutationMethodProbability(Scale(-2.0, 2.0), 4.0),
        MutationMethodProbability(Shift(-2.0, 2.0), 2.0),
    ]


@dataclass
class MutationSettingsTemplate:
    """
    Ratio-based mutation configuration.

    Attributes:
        mutation_probability: Chance that an individual is mutated at all
        min_weights_affected_ratio: Lower bound of mutated weights, as a share of all weights
        max_weights_affected_ratio: Upper bound of mutated weights, as a share of all weights
        methods: Operator variants with relative probabilities
    """
    mutation_probability: float = 0.3
    min_weights_affected_ratio: float = 0.0
    max_weights_affected_ratio: float = 0.2
    methods: List[MutationMethodProbability] = field(default_factory=_default_mutation_methods)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mutation_probability': self.mutation_probability,
            'min_weights_affected_ratio': self.min_weights_affected_ratio,
            'max_weights_affected_ratio': self.max_weights_affected_ratio,
            'methods': [m.to_dict() for m in self.methods],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MutationSettingsTemplate':
        return cls(
            mutation_probability=float(data['mutation_probability']),
            min_weights_affected_ratio=float(data['min_weights_affected_ratio']),
            max_weights_affected_ratio=float(data['max_weights_affected_ratio']),
            methods=[MutationMethodProbability.from_dict(m) for m in data['methods']],
        )


class MutationSettings:
    """
    Mutation settings bound to one network shape.

    The affected-weight range is [trunc(min_ratio * total_weights),
    trunc(max_ratio * total_weights) + 1).
    """

    def __init__(self, template: MutationSettingsTemplate, network: NeuralNetwork):
        self.validate_template(template)

        total_weights = network.total_weights()
        self.mutation_probability = template.mutation_probability
        self.min_weights_affected = int(template.min_weights_affected_ratio * total_weights)
        self.max_weights_affected = int(template.max_weights_affected_ratio * total_weights) + 1

        self.methods: List[MutationMethod] = [m.method for m in template.methods]
        try:
            self.method_sampler = WeightedSampler([m.relative_probability for m in template.methods])
        except InvalidWeightsError as e:
            raise ConfigError(
                f"Invalid mutation method probabilities: {e}",
                ErrorCode.MUTATION_INVALID_METHOD_PROBABILITIES,
            ) from e

        logger.debug(
            f"Mutation settings: {total_weights} weights, "
            f"affected range [{self.min_weights_affected}, {self.max_weights_affected})"
        )

    @staticmethod
    def validate_template(template: MutationSettingsTemplate) -> None:
        if not 0.0 <= template.mutation_probability <= 1.0:
            raise ConfigError(
                f"mutation_probability must be in [0, 1], got {template.mutation_probability}",
                ErrorCode.MUTATION_INVALID_PROBABILITY,
            )

        min_ratio = template.min_weights_affected_ratio
        max_ratio = template.max_weights_affected_ratio
        if not 0.0 <= min_ratio <= 1.0:
            raise ConfigError(
                f"min_weights_affected_ratio must be in [0, 1], got {min_ratio}",
                ErrorCode.MUTATION_INVALID_MIN_WEIGHTS_AFFECTED_RATIO,
            )
        if not min_ratio <= max_ratio <= 1.0:
            raise ConfigError(
                f"max_weights_affected_ratio must be in [{min_ratio}, 1], got {max_ratio}",
                ErrorCode.MUTATION_INVALID_MAX_WEIGHTS_AFFECTED_RATIO,
            )

        if not template.methods:
            raise ConfigError("Mutation needs at least one method", ErrorCode.MUTATION_METHODS_EMPTY)

        for entry in template.methods:
            method = entry.method
            if isinstance(method, Invert):
                continue
            ranged = _RANGED_METHODS.get(type(method).__name__)
            if ranged is None or not isinstance(method, ranged[0]):
                raise ConfigError(
                    f"Unknown mutation method: {method!r}",
                    ErrorCode.MUTATION_INVALID_METHOD_PROBABILITIES,
                )
            if not method.min <= method.max:
                raise ConfigError(
                    f"{type(method).__name__} needs min <= max, got [{method.min}, {method.max}]",
                    ranged[1],
                )

    def gen_weights_affected(self, rng: np.random.Generator) -> int:
        return int(rng.integers(self.min_weights_affected, self.max_weights_affected))

    def gen_method(self, rng: np.random.Generator) -> MutationMethod:
        return self.methods[self.method_sampler.sample(rng)]


def apply_method(rng: np.random.Generator, method: MutationMethod, weight: float) -> float:
    if isinstance(method, Invert):
        return -weight
    if isinstance(method, Replace):
        return rng.uniform(method.min, method.max)
    if isinstance(method, Scale):
        return weight * rng.uniform(method.min, method.max)
    return weight + rng.uniform(method.min, method.max)


def mutate(rng: np.random.Generator, network: NeuralNetwork, settings: MutationSettings) -> bool:
    """
    Mutate a network in place.

    Args:
        rng: Random generator
        network: Network to mutate
        settings: Mutation settings bound to the network's topology

    Returns:
        bool: False if the probability gate skipped the network
    """
    if rng.random() >= settings.mutation_probability:
        return False

    layer_count = len(network.layers)
    for _ in range(settings.gen_weights_affected(rng)):
        weights = network.layers[int(rng.integers(layer_count))].all_weights()
        index = int(rng.integers(weights.size))
        weights[index] = apply_method(rng, settings.gen_method(rng), float(weights[index]))

    return True
