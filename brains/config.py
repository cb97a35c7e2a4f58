"""
Brains Configuration Module

Population-level configuration: the JSON-shaped template a host edits,
and the validated Config built from it together with a network
instance of the run's topology.
"""

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from brains.core.crossover import CrossoverSettings, CrossoverSettingsTemplate
from brains.core.mutation import MutationSettings, MutationSettingsTemplate
from brains.core.network import NeuralNetwork, NeuralNetworkTemplate
from brains.core.selection import (
    FitnessProportionate,
    SelectionMethod,
    ensure_implemented,
    selection_from_json,
    selection_to_json,
)
from brains.errors import ConfigError, ErrorCode, SerializationError

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class ConfigTemplate:
    """
    Configuration template for a population.

    Attributes:
        population_size: Number of networks in the population
        min_weight: Lower bound of initial random weights
        max_weight: Upper bound (exclusive) of initial random weights
        elitism: Share of the population carried over unmutated
        network: Network topology
        selection_method: Parent selection strategy
        crossover: Crossover settings template
        mutation: Mutation settings template
    """
    population_size: int = 500
    min_weight: float = -1.0
    max_weight: float = 1.0
    elitism: float = 0.02
    network: NeuralNetworkTemplate = field(default_factory=NeuralNetworkTemplate)
    selection_method: SelectionMethod = field(default_factory=FitnessProportionate)
    crossover: CrossoverSettingsTemplate = field(default_factory=CrossoverSettingsTemplate)
    mutation: MutationSettingsTemplate = field(default_factory=MutationSettingsTemplate)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'population_size': self.population_size,
            'min_weight': self.min_weight,
            'max_weight': self.max_weight,
            'elitism': self.elitism,
            'network': self.network.to_dict(),
            'selection_method': selection_to_json(self.selection_method),
            'crossover': self.crossover.to_dict(),
            'mutation': self.mutation.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConfigTemplate':
        """
        Parse the JSON form of a template.

        Raises:
            KeyError, TypeError, ValueError: On malformed input
        """
        return cls(
            population_size=int(data['population_size']),
            min_weight=float(data['min_weight']),
            max_weight=float(data['max_weight']),
            elitism=float(data['elitism']),
            network=NeuralNetworkTemplate.from_dict(data['network']),
            selection_method=selection_from_json(data['selection_method']),
            crossover=CrossoverSettingsTemplate.from_dict(data['crossover']),
            mutation=MutationSettingsTemplate.from_dict(data['mutation']),
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str) -> 'ConfigTemplate':
        return cls.from_dict(json.loads(text))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ConfigTemplate':
        """
        Read a template from a JSON file.

        Raises:
            ConfigError: If the file cannot be read or is not a valid template
        """
        try:
            text = Path(path).read_text(encoding='utf-8')
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}", ErrorCode.CANNOT_READ_CONFIG_FILE) from e
        try:
            return cls.from_json(text)
        except (ValueError, KeyError, TypeError, IndexError, SerializationError) as e:
            raise ConfigError(f"Invalid config JSON in {path}: {e}", ErrorCode.INVALID_CONFIG_JSON) from e

    def save(self, path: Union[str, Path]) -> None:
        try:
            Path(path).write_text(self.to_json(), encoding='utf-8')
        except OSError as e:
            raise ConfigError(f"Cannot write {path}: {e}", ErrorCode.FILE_SAVE_ERROR) from e


class Config:
    """
    Validated configuration, bound to the run's network topology.

    Attributes:
        template: The template this config was built from
        elitism: Number of elite individuals, trunc(elitism ratio * population size)
        selection_method: Parent selection strategy
        network: Zero-weight network of the run's topology
        crossover_settings: Crossover settings bound to `network`
        mutation_settings: Mutation settings bound to `network`
    """

    def __init__(
        self,
        template: ConfigTemplate,
        elitism: int,
        network: NeuralNetwork,
        crossover_settings: CrossoverSettings,
        mutation_settings: MutationSettings
    ):
        self.template = template
        self.elitism = elitism
        self.selection_method = template.selection_method
        self.network = network
        self.crossover_settings = crossover_settings
        self.mutation_settings = mutation_settings

    @property
    def population_size(self) -> int:
        return self.template.population_size

    @classmethod
    def build_from_template(cls, template: ConfigTemplate) -> 'Config':
        """
        Validate a template and build every derived object.

        Raises:
            ConfigError: On invalid population-level or operator settings
            ShapeError: On an invalid network template
            UnimplementedStrategyError: If the selection method is not implemented
        """
        template = copy.deepcopy(template)

        if template.population_size <= 0:
            raise ConfigError("Population size must be positive", ErrorCode.POPULATION_SIZE_ZERO)
        if not template.min_weight <= template.max_weight:
            raise ConfigError(
                f"min_weight {template.min_weight} is larger than max_weight {template.max_weight}",
                ErrorCode.MIN_WEIGHT_LARGER_THAN_MAX_WEIGHT,
            )
        if not 0.0 <= template.elitism <= 1.0:
            raise ConfigError(
                f"Elitism ratio must be in [0, 1], got {template.elitism}",
                ErrorCode.INVALID_ELITISM_RATIO,
            )
        ensure_implemented(template.selection_method)

        elitism = int(template.elitism * template.population_size)
        network = NeuralNetwork.from_template(template.network)
        crossover_settings = CrossoverSettings(template.crossover, network)
        mutation_settings = MutationSettings(template.mutation, network)

        logger.debug(
            f"Config built: population {template.population_size}, elitism {elitism}, "
            f"network {network!r}"
        )
        return cls(template, elitism, network, crossover_settings, mutation_settings)


# Global default configuration instance
DEFAULT_CONFIG = ConfigTemplate()


def get_output_directory(default: str = '.') -> str:
    """Output directory for CLI runs, overridable with BRAINS_OUTPUT_DIR."""
    output_dir = os.environ.get('BRAINS_OUTPUT_DIR', default)
    os.makedirs(output_dir, exist_ok=True)
    return output_dir
