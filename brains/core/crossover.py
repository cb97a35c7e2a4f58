"""
Crossover Module

Node-level crossover between two networks of identical topology.

Two operator variants, picked per affected node by relative probability:
- SwapWholeNode: exchange a node's whole weight row (bias included)
- SwapSomeWeights: exchange a random subset of a node's weights

CrossoverSettings binds a ratio-based template to one network shape and
turns it into an integer range of affected nodes plus an operator sampler.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Union

import numpy as np

from brains.core.network import NeuralNetwork
from brains.core.sampling import WeightedSampler
from brains.errors import ConfigError, ErrorCode, InvalidWeightsError, SerializationError

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapWholeNode:
    """Exchange the full weight row of a node."""


@dataclass(frozen=True)
class SwapSomeWeights:
    """
    Exchange trunc(fraction * row_length) distinct weights of a node, with
    fraction drawn uniformly from [min_weights_swapped_ratio, max_weights_swapped_ratio).
    """
    min_weights_swapped_ratio: float
    max_weights_swapped_ratio: float


CrossoverMethod = Union[SwapWholeNode, SwapSomeWeights]


@dataclass
class CrossoverMethodProbability:
    method: CrossoverMethod
    relative_probability: float

    def to_dict(self) -> Dict[str, Any]:
        if isinstance(self.method, SwapWholeNode):
            method: Any = 'SwapWholeNode'
        else:
            method = {
                'SwapSomeWeights': {
                    'min_weights_swapped_ratio': self.method.min_weights_swapped_ratio,
                    'max_weights_swapped_ratio': self.method.max_weights_swapped_ratio,
                }
            }
        return {'method': method, 'relative_probability': self.relative_probability}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CrossoverMethodProbability':
        raw = data['method']
        if raw == 'SwapWholeNode':
            method: CrossoverMethod = SwapWholeNode()
        elif isinstance(raw, dict) and 'SwapSomeWeights' in raw:
            args = raw['SwapSomeWeights']
            method = SwapSomeWeights(
                float(args['min_weights_swapped_ratio']),
                float(args['max_weights_swapped_ratio']),
            )
        else:
            raise SerializationError(f"Unknown crossover method in JSON: {raw!r}")
        return cls(method, float(data['relative_probability']))


def _default_crossover_methods() -> List[CrossoverMethodProbability]:
    return [
        CrossoverMethodProbability(SwapWholeNode(), 3.0),
        CrossoverMethodProbability(SwapSomeWeights(0.25, 0.75), 1.0),
    ]


@dataclass
class CrossoverSettingsTemplate:
    """
    Ratio-based crossover configuration.

    Attributes:
        min_nodes_affected_ratio: Lower bound of affected nodes, as a share of all nodes
        max_nodes_affected_ratio: Upper bound of affected nodes, as a share of all nodes
        methods: Operator variants with relative probabilities
    """
    min_nodes_affected_ratio: float = 0.02
    max_nodes_affected_ratio: float = 0.3
    methods: List[CrossoverMethodProbability] = field(default_factory=_default_crossover_methods)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'min_nodes_affected_ratio': self.min_nodes_affected_ratio,
            'max_nodes_affected_ratio': self.max_nodes_affected_ratio,
            'methods': [m.to_dict() for m in self.methods],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CrossoverSettingsTemplate':
        return cls(
            min_nodes_affected_ratio=float(data['min_nodes_affected_ratio']),
            max_nodes_affected_ratio=float(data['max_nodes_affected_ratio']),
            methods=[CrossoverMethodProbability.from_dict(m) for m in data['methods']],
        )


class CrossoverSettings:
    """
    Crossover settings bound to one network shape.

    The affected-node range is [trunc(min_ratio * total_nodes),
    trunc(max_ratio * total_nodes) + 1). Rebuild the settings if the
    network shape changes.

    The node index buffer is scratch space owned by this instance and
    reused by every crossover call; it is sized to the longest node row
    and assumes all nodes of a layer share the layer's input count.
    """

    def __init__(self, template: CrossoverSettingsTemplate, network: NeuralNetwork):
        """
        Args:
            template: Ratio-based configuration
            network: Any network with the run's topology

        Raises:
            ConfigError: If the template fails validation
        """
        self.validate_template(template)

        total_nodes = network.total_nodes()
        self.min_nodes_affected = int(template.min_nodes_affected_ratio * total_nodes)
        self.max_nodes_affected = int(template.max_nodes_affected_ratio * total_nodes) + 1

        self.methods: List[CrossoverMethod] = [m.method for m in template.methods]
        try:
            self.method_sampler = WeightedSampler([m.relative_probability for m in template.methods])
        except InvalidWeightsError as e:
            raise ConfigError(
                f"Invalid crossover method probabilities: {e}",
                ErrorCode.CROSSOVER_INVALID_METHOD_PROBABILITIES,
            ) from e

        self.node_index_buffer = np.arange(network.max_row_length(), dtype=np.intp)

        logger.debug(
            f"Crossover settings: {total_nodes} nodes, "
            f"affected range [{self.min_nodes_affected}, {self.max_nodes_affected})"
        )

    @staticmethod
    def validate_template(template: CrossoverSettingsTemplate) -> None:
        min_ratio = template.min_nodes_affected_ratio
        max_ratio = template.max_nodes_affected_ratio

        if not 0.0 <= min_ratio <= 1.0:
            raise ConfigError(
                f"min_nodes_affected_ratio must be in [0, 1], got {min_ratio}",
                ErrorCode.CROSSOVER_INVALID_MIN_NODE_RATIO,
            )
        if not min_ratio <= max_ratio <= 1.0:
            raise ConfigError(
                f"max_nodes_affected_ratio must be in [{min_ratio}, 1], got {max_ratio}",
                ErrorCode.CROSSOVER_INVALID_MAX_NODE_RATIO,
            )
        if not template.methods:
            raise ConfigError(
                "Crossover needs at least one method",
                ErrorCode.CROSSOVER_EMPTY_METHOD_PROBABILITIES,
            )

        for entry in template.methods:
            method = entry.method
            if isinstance(method, SwapSomeWeights):
                lo = method.min_weights_swapped_ratio
                hi = method.max_weights_swapped_ratio
                if not (0.0 <= lo <= 1.0 and lo <= hi <= 1.0):
                    raise ConfigError(
                        f"Invalid swap ratios [{lo}, {hi}]",
                        ErrorCode.CROSSOVER_INVALID_SWAP_WEIGHTS_RATIOS,
                    )
            elif not isinstance(method, SwapWholeNode):
                raise ConfigError(
                    f"Unknown crossover method: {method!r}",
                    ErrorCode.CROSSOVER_INVALID_METHOD_PROBABILITIES,
                )

    def gen_nodes_affected(self, rng: np.random.Generator) -> int:
        return int(rng.integers(self.min_nodes_affected, self.max_nodes_affected))

    def gen_method(self, rng: np.random.Generator) -> CrossoverMethod:
        return self.methods[self.method_sampler.sample(rng)]


def swap_whole_node(a_row: np.ndarray, b_row: np.ndarray) -> None:
    tmp = a_row.copy()
    a_row[:] = b_row
    b_row[:] = tmp


def swap_some_weights(
    rng: np.random.Generator,
    a_row: np.ndarray,
    b_row: np.ndarray,
    method: SwapSomeWeights,
    index_buffer: np.ndarray
) -> int:
    """
    Swap a random subset of two weight rows in place.

    Returns:
        int: Number of weights swapped
    """
    row_length = len(a_row)
    fraction = rng.uniform(method.min_weights_swapped_ratio, method.max_weights_swapped_ratio)
    count = int(fraction * row_length)
    if count == 0:
        return 0

    chosen = index_buffer[:count]
    chosen[:] = rng.choice(row_length, size=count, replace=False)
    a_row[chosen], b_row[chosen] = b_row[chosen], a_row[chosen]
    return count


def crossover(
    rng: np.random.Generator,
    parents: Sequence[NeuralNetwork],
    output: Any,
    settings: CrossoverSettings
) -> None:
    """
    Combine two parents into two offspring and write both to `output`.

    Both parents are cloned; k nodes (k drawn from the settings' range)
    are then picked by uniform layer and uniform node, and each has one
    operator applied between the two clones.

    Args:
        rng: Random generator
        parents: Exactly two networks of identical topology
        output: Collector with a `write(network)` method; writes past its
            capacity are discarded
        settings: Crossover settings bound to the parents' topology
    """
    assert len(parents) == 2

    a = parents[0].clone()
    b = parents[1].clone()
    layer_count = len(a.layers)

    for _ in range(settings.gen_nodes_affected(rng)):
        layer = int(rng.integers(layer_count))
        node = int(rng.integers(a.layers[layer].node_count))

        a_row = a.layers[layer].node_weights(node)
        b_row = b.layers[layer].node_weights(node)

        method = settings.gen_method(rng)
        if isinstance(method, SwapWholeNode):
            swap_whole_node(a_row, b_row)
        else:
            swap_some_weights(rng, a_row, b_row, method, settings.node_index_buffer)

    output.write(a)
    output.write(b)
