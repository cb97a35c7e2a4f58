"""
Neural Network Module

Fixed-topology feed-forward networks evolved by the generation pipeline:
- Activation: per-node activation function (Linear, TanH or Custom)
- Layer: weight matrix plus per-layer evaluation scratch buffers
- NeuralNetwork: ordered layers with a forward pass

Weights of a layer live in a single C-contiguous array of shape
(node_count, input_count + 1). Column 0 of every row is the bias weight.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from brains.errors import ErrorCode, PreconditionViolation, SerializationError, ShapeError

# Configure logging
logger = logging.getLogger(__name__)

# Type aliases
ActivationFunction = Callable[[np.ndarray], float]


class Activation:
    """
    Activation applied to a node's weighted inputs.

    Closed set of variants: Linear, TanH and Custom. A Custom activation
    receives the node's weighted input vector (bias term first) and
    returns the node output. Custom activations hold a function reference
    and cannot be serialized.

    Example:
        >>> Activation.tanh().evaluate(np.array([0.0, 1.0, 1.0]))
        0.9640275800758169
    """

    LINEAR = 'Linear'
    TANH = 'TanH'
    CUSTOM = 'Custom'

    __slots__ = ('kind', 'function')

    def __init__(self, kind: str, function: Optional[ActivationFunction] = None):
        if kind not in (self.LINEAR, self.TANH, self.CUSTOM):
            raise ValueError(f"Unknown activation: {kind!r}")
        if (kind == self.CUSTOM) != (function is not None):
            raise ValueError("Only Custom activations take a function")
        self.kind = kind
        self.function = function

    @classmethod
    def linear(cls) -> 'Activation':
        return cls(cls.LINEAR)

    @classmethod
    def tanh(cls) -> 'Activation':
        return cls(cls.TANH)

    @classmethod
    def custom(cls, function: ActivationFunction) -> 'Activation':
        return cls(cls.CUSTOM, function)

    @property
    def is_custom(self) -> bool:
        return self.kind == self.CUSTOM

    def evaluate(self, weighted_inputs: np.ndarray) -> float:
        """
        Apply the activation to a node's weighted input vector.

        Args:
            weighted_inputs: Element-wise product of (1, inputs...) and the
                node's weight row

        Returns:
            float: Node output
        """
        if self.kind == self.LINEAR:
            return float(np.sum(weighted_inputs))
        if self.kind == self.TANH:
            return float(np.tanh(np.sum(weighted_inputs)))
        return float(self.function(weighted_inputs))

    def to_json(self) -> str:
        if self.is_custom:
            raise SerializationError("Custom activations cannot be serialized")
        return self.kind

    @classmethod
    def from_json(cls, value: Any) -> 'Activation':
        if value not in (cls.LINEAR, cls.TANH):
            raise SerializationError(f"Unknown activation in JSON: {value!r}")
        return cls(value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Activation):
            return NotImplemented
        return self.kind == other.kind and self.function is other.function

    def __hash__(self) -> int:
        return hash((self.kind, id(self.function)))

    def __repr__(self) -> str:
        return self.kind


@dataclass
class NeuralNetworkTemplate:
    """
    Shape description used to build networks.

    Attributes:
        input_count: Number of network inputs
        layers: One list of activations per layer, one activation per node
    """
    input_count: int = 19
    layers: List[List[Activation]] = field(
        default_factory=lambda: [
            [Activation.tanh() for _ in range(10)],
            [Activation.tanh() for _ in range(2)],
        ]
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'input_count': self.input_count,
            'layers': [[a.to_json() for a in layer] for layer in self.layers],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NeuralNetworkTemplate':
        return cls(
            input_count=int(data['input_count']),
            layers=[[Activation.from_json(a) for a in layer] for layer in data['layers']],
        )


class Layer:
    """
    One fully connected layer.

    Attributes:
        input_count: Number of inputs feeding each node
        activations: One activation per node
        weights: Weight matrix of shape (node_count, input_count + 1)
    """

    def __init__(
        self,
        input_count: int,
        activations: Sequence[Activation],
        weights: Optional[np.ndarray] = None
    ):
        assert input_count > 0
        assert len(activations) > 0

        self.input_count = input_count
        self.activations: List[Activation] = list(activations)

        shape = (len(self.activations), input_count + 1)
        if weights is None:
            self.weights = np.zeros(shape, dtype=np.float64)
        else:
            self.weights = np.array(weights, dtype=np.float64).reshape(shape)

        self._init_scratch()

    def _init_scratch(self) -> None:
        """Allocate evaluation buffers; they are not part of the layer's identity."""
        self._input_buffer = np.empty(self.input_count + 1, dtype=np.float64)
        self._input_buffer[0] = 1.0
        self._output = np.zeros(len(self.activations), dtype=np.float64)

        kinds = [a.kind for a in self.activations]
        self._linear_nodes = np.array(
            [i for i, k in enumerate(kinds) if k == Activation.LINEAR], dtype=np.intp
        )
        self._tanh_nodes = np.array(
            [i for i, k in enumerate(kinds) if k == Activation.TANH], dtype=np.intp
        )
        self._custom_nodes = [i for i, k in enumerate(kinds) if k == Activation.CUSTOM]

    @property
    def node_count(self) -> int:
        return len(self.activations)

    @property
    def row_length(self) -> int:
        """Weights per node, bias included."""
        return self.input_count + 1

    @property
    def output(self) -> np.ndarray:
        return self._output

    def all_weights(self) -> np.ndarray:
        """Flat, writable view over every weight of the layer (row-major)."""
        return self.weights.reshape(-1)

    def node_weights(self, node: int) -> np.ndarray:
        """Writable view over one node's weight row (bias first)."""
        return self.weights[node]

    def evaluate(self, inputs: np.ndarray) -> np.ndarray:
        """
        Compute the layer output for the given inputs.

        Args:
            inputs: Vector of length input_count

        Returns:
            np.ndarray: The layer's output buffer (overwritten by the next call)
        """
        if len(inputs) != self.input_count:
            raise PreconditionViolation(
                f"Expected {self.input_count} inputs, got {len(inputs)}",
                ErrorCode.INPUT_LENGTH_MISMATCH,
            )

        buf = self._input_buffer
        buf[1:] = inputs

        if len(self._linear_nodes) or len(self._tanh_nodes):
            pre_activation = self.weights @ buf
            self._output[self._linear_nodes] = pre_activation[self._linear_nodes]
            self._output[self._tanh_nodes] = np.tanh(pre_activation[self._tanh_nodes])

        for node in self._custom_nodes:
            self._output[node] = self.activations[node].evaluate(self.weights[node] * buf)

        return self._output

    def clone(self) -> 'Layer':
        return Layer(self.input_count, self.activations, self.weights)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'input_count': self.input_count,
            'activations': [a.to_json() for a in self.activations],
            'weights': self.weights.reshape(-1).tolist(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Layer':
        input_count = int(data['input_count'])
        activations = [Activation.from_json(a) for a in data['activations']]
        weights = data['weights']

        if input_count <= 0:
            raise ShapeError("Layer input count must be positive", ErrorCode.NETWORK_INPUT_COUNT_ZERO)
        if not activations:
            raise ShapeError("Layer has no nodes", ErrorCode.NETWORK_EMPTY_LAYER)
        if len(weights) != (input_count + 1) * len(activations):
            raise ShapeError(
                f"Layer expects {(input_count + 1) * len(activations)} weights, got {len(weights)}",
                ErrorCode.NETWORK_WEIGHT_COUNT_MISMATCH,
            )
        return cls(input_count, activations, np.asarray(weights, dtype=np.float64))

    def __repr__(self) -> str:
        return f"Layer(input_count={self.input_count}, nodes={self.node_count})"


class NeuralNetwork:
    """
    Fixed-topology feed-forward network.

    Layer i's node count equals layer i+1's input count; layer 0's input
    count is the network's input count. Each network owns its weights and
    evaluation buffers exclusively.

    Attributes:
        layers: Ordered list of layers

    Example:
        >>> net = NeuralNetwork(2, [[Activation.tanh()]])
        >>> net.layers[0].weights[0] = [0.0, 1.0, 1.0]
        >>> net.evaluate([1.0, 1.0])
        array([0.96402758])
    """

    def __init__(self, input_count: int, activation_layers: Sequence[Sequence[Activation]]):
        assert len(activation_layers) > 0

        self.layers: List[Layer] = []
        layer_inputs = input_count
        for activations in activation_layers:
            layer = Layer(layer_inputs, activations)
            self.layers.append(layer)
            layer_inputs = layer.node_count

    @classmethod
    def from_template(cls, template: NeuralNetworkTemplate) -> 'NeuralNetwork':
        """
        Build a zero-weight network from a validated template.

        Args:
            template: Network shape description

        Returns:
            NeuralNetwork: New network with all weights set to zero

        Raises:
            ShapeError: If the template has no inputs, no layers or an empty layer
        """
        if template.input_count <= 0:
            raise ShapeError("Network input count must be positive", ErrorCode.NETWORK_INPUT_COUNT_ZERO)
        if not template.layers:
            raise ShapeError("Network has no layers", ErrorCode.NETWORK_NO_LAYERS)
        if any(len(layer) == 0 for layer in template.layers):
            raise ShapeError("Network has an empty layer", ErrorCode.NETWORK_EMPTY_LAYER)

        return cls(template.input_count, template.layers)

    @classmethod
    def _from_layers(cls, layers: List[Layer]) -> 'NeuralNetwork':
        network = cls.__new__(cls)
        network.layers = layers
        return network

    @property
    def input_count(self) -> int:
        return self.layers[0].input_count

    @property
    def output_count(self) -> int:
        return self.layers[-1].node_count

    def total_nodes(self) -> int:
        return sum(layer.node_count for layer in self.layers)

    def total_weights(self) -> int:
        return sum(layer.weights.size for layer in self.layers)

    def max_row_length(self) -> int:
        """Length of the longest node weight row across all layers."""
        return max(layer.row_length for layer in self.layers)

    def evaluate(self, inputs: Sequence[float]) -> np.ndarray:
        """
        Run the forward pass.

        Args:
            inputs: Vector of length input_count

        Returns:
            np.ndarray: Read-only view of the last layer's output. The view is
            overwritten by the next evaluate call; copy it to keep it.

        Raises:
            PreconditionViolation: If the input length does not match
        """
        values = np.asarray(inputs, dtype=np.float64)
        for layer in self.layers:
            values = layer.evaluate(values)

        result = values.view()
        result.flags.writeable = False
        return result

    def randomize_weights(
        self,
        rng: np.random.Generator,
        min_weight: float,
        max_weight: float
    ) -> None:
        """Overwrite every weight with a uniform draw in [min_weight, max_weight)."""
        for layer in self.layers:
            layer.weights[...] = rng.uniform(min_weight, max_weight, size=layer.weights.shape)

    def is_structurally_equal(self, other: 'NeuralNetwork') -> bool:
        """
        Check that two networks share a topology.

        Compares node count, weight-buffer length and input count of every
        layer pair. Weights and activations are not compared.
        """
        if len(self.layers) != len(other.layers):
            return False
        return all(
            s.node_count == o.node_count
            and s.weights.size == o.weights.size
            and s.input_count == o.input_count
            for s, o in zip(self.layers, other.layers)
        )

    def clone(self) -> 'NeuralNetwork':
        """Deep copy with independent weights and fresh scratch buffers."""
        return NeuralNetwork._from_layers([layer.clone() for layer in self.layers])

    def __deepcopy__(self, memo: Dict[int, Any]) -> 'NeuralNetwork':
        return self.clone()

    def to_dict(self) -> Dict[str, Any]:
        return {'layers': [layer.to_dict() for layer in self.layers]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NeuralNetwork':
        """
        Rebuild a network from its serialized form.

        Raises:
            ShapeError: If the layers are missing, empty or do not chain
        """
        layers = [Layer.from_dict(layer) for layer in data['layers']]
        if not layers:
            raise ShapeError("Network has no layers", ErrorCode.NETWORK_NO_LAYERS)

        for prev, current in zip(layers, layers[1:]):
            if current.input_count != prev.node_count:
                raise ShapeError(
                    f"Layer input count {current.input_count} does not match "
                    f"previous layer node count {prev.node_count}",
                    ErrorCode.NETWORK_LAYER_CHAIN_MISMATCH,
                )
        return cls._from_layers(layers)

    def __repr__(self) -> str:
        shape = [self.input_count] + [layer.node_count for layer in self.layers]
        return f"NeuralNetwork(shape={shape})"
