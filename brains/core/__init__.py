# Core evaluation and evolution components
from brains.core.network import Activation, Layer, NeuralNetwork, NeuralNetworkTemplate
from brains.core.sampling import WeightedSampler
from brains.core.selection import (
    FitnessProportionate,
    StochasticUniversal,
    Tournament,
    Truncation,
    SelectionMethod,
    Selector,
)
from brains.core.crossover import (
    SwapWholeNode,
    SwapSomeWeights,
    CrossoverMethodProbability,
    CrossoverSettingsTemplate,
    CrossoverSettings,
    crossover,
)
from brains.core.mutation import (
    Invert,
    Replace,
    Scale,
    Shift,
    MutationMethodProbability,
    MutationSettingsTemplate,
    MutationSettings,
    mutate,
)
from brains.core.evolution import OffspringCollector, evolve, rank_by_fitness

__all__ = [
    # Network
    "Activation",
    "Layer",
    "NeuralNetwork",
    "NeuralNetworkTemplate",
    # Sampling
    "WeightedSampler",
    # Selection
    "FitnessProportionate",
    "StochasticUniversal",
    "Tournament",
    "Truncation",
    "SelectionMethod",
    "Selector",
    # Crossover
    "SwapWholeNode",
    "SwapSomeWeights",
    "CrossoverMethodProbability",
    "CrossoverSettingsTemplate",
    "CrossoverSettings",
    "crossover",
    # Mutation
    "Invert",
    "Replace",
    "Scale",
    "Shift",
    "MutationMethodProbability",
    "MutationSettingsTemplate",
    "MutationSettings",
    "mutate",
    # Generation pipeline
    "OffspringCollector",
    "evolve",
    "rank_by_fitness",
]
