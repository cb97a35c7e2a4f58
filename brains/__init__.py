# Brains - Neuroevolution Engine Package
"""
Brains: evolves populations of fixed-topology feed-forward networks with
a generational genetic algorithm instead of gradient descent.

This package provides:
- Feed-forward networks with Linear, TanH and custom activations
- Alias-method weighted sampling
- Fitness-proportionate selection, node-level crossover, weight mutation
- Elitist generation pipeline driven by host-supplied fitness
- A population handle with JSON persistence for host applications
"""

__version__ = "1.0.0"
__author__ = "Brains Contributors"

# Core components
from brains.core.network import Activation, Layer, NeuralNetwork, NeuralNetworkTemplate
from brains.core.sampling import WeightedSampler
from brains.core.selection import FitnessProportionate, StochasticUniversal, Tournament, Truncation
from brains.core.crossover import (
    SwapWholeNode,
    SwapSomeWeights,
    CrossoverMethodProbability,
    CrossoverSettingsTemplate,
    CrossoverSettings,
)
from brains.core.mutation import (
    Invert,
    Replace,
    Scale,
    Shift,
    MutationMethodProbability,
    MutationSettingsTemplate,
    MutationSettings,
)
from brains.core.evolution import evolve

# Configuration and population handle
from brains.config import ConfigTemplate, Config, DEFAULT_CONFIG
from brains.population import Population, export_default_config, load_config_template

# Errors
from brains.errors import (
    ErrorCode,
    BrainsError,
    ShapeError,
    ConfigError,
    InvalidWeightsError,
    PreconditionViolation,
    UnimplementedStrategyError,
    PopulationError,
    SerializationError,
)

__all__ = [
    # Core
    "Activation",
    "Layer",
    "NeuralNetwork",
    "NeuralNetworkTemplate",
    "WeightedSampler",
    "FitnessProportionate",
    "StochasticUniversal",
    "Tournament",
    "Truncation",
    "SwapWholeNode",
    "SwapSomeWeights",
    "CrossoverMethodProbability",
    "CrossoverSettingsTemplate",
    "CrossoverSettings",
    "Invert",
    "Replace",
    "Scale",
    "Shift",
    "MutationMethodProbability",
    "MutationSettingsTemplate",
    "MutationSettings",
    "evolve",
    # Config
    "ConfigTemplate",
    "Config",
    "DEFAULT_CONFIG",
    # Population
    "Population",
    "export_default_config",
    "load_config_template",
    # Errors
    "ErrorCode",
    "BrainsError",
    "ShapeError",
    "ConfigError",
    "InvalidWeightsError",
    "PreconditionViolation",
    "UnimplementedStrategyError",
    "PopulationError",
    "SerializationError",
]
