"""
Pytest Configuration and Fixtures

Shared fixtures for all tests.
"""

import pytest
import numpy as np
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from brains.core.network import Activation, NeuralNetwork, NeuralNetworkTemplate
from brains.core.crossover import CrossoverSettingsTemplate
from brains.core.mutation import MutationSettingsTemplate
from brains.config import ConfigTemplate


@pytest.fixture
def rng():
    """Seeded random generator for reproducibility."""
    return np.random.default_rng(42)


@pytest.fixture
def small_template():
    """3 inputs, a hidden layer of 4 TanH nodes, 2 Linear outputs."""
    return NeuralNetworkTemplate(
        input_count=3,
        layers=[
            [Activation.tanh() for _ in range(4)],
            [Activation.linear(), Activation.linear()],
        ],
    )


@pytest.fixture
def small_network(small_template, rng):
    """Small network with random weights in [-1, 1)."""
    network = NeuralNetwork.from_template(small_template)
    network.randomize_weights(rng, -1.0, 1.0)
    return network


@pytest.fixture
def patterned_pair(small_template):
    """
    Two networks with distinguishable weights.

    Network A holds positive weights, network B the same values negated,
    so every weight reveals which parent it came from.
    """
    a = NeuralNetwork.from_template(small_template)
    b = NeuralNetwork.from_template(small_template)
    for layer_idx, (layer_a, layer_b) in enumerate(zip(a.layers, b.layers)):
        values = np.arange(1, layer_a.weights.size + 1, dtype=np.float64) + 100.0 * layer_idx
        layer_a.weights[...] = values.reshape(layer_a.weights.shape)
        layer_b.weights[...] = -values.reshape(layer_b.weights.shape)
    return a, b


@pytest.fixture
def default_crossover_template():
    return CrossoverSettingsTemplate()


@pytest.fixture
def default_mutation_template():
    return MutationSettingsTemplate()


@pytest.fixture
def small_config_template(small_template):
    """Population config small enough for quick end-to-end runs."""
    return ConfigTemplate(
        population_size=20,
        elitism=0.1,
        network=small_template,
    )
