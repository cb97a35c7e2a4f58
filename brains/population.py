"""
Population Management Module

Single-owner handle around a population of networks and its optional
evolution config. This is the surface a host application talks to:
- Build a randomized population from a config template or file
- Load saved members, optionally cross-checked against a config
- Evaluate members, evolve a generation from host-computed fitness
- Save all members or the fittest ones as JSON

Every failure raises a BrainsError subclass carrying an ErrorCode.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np

from brains.config import DEFAULT_CONFIG, Config, ConfigTemplate
from brains.core.evolution import evolve, rank_by_fitness
from brains.core.network import NeuralNetwork
from brains.errors import (
    BrainsError,
    ErrorCode,
    PopulationError,
    PreconditionViolation,
    SerializationError,
)

# Configure logging
logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _read_text(path: PathLike) -> str:
    try:
        return Path(path).read_text(encoding='utf-8')
    except OSError as e:
        raise PopulationError(f"Cannot read {path}: {e}", ErrorCode.CANNOT_READ_MEMBERS_FILE) from e


def _write_json(path: PathLike, payload: object) -> None:
    try:
        text = json.dumps(payload, indent=2)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot serialize to JSON: {e}") from e
    try:
        Path(path).write_text(text, encoding='utf-8')
    except OSError as e:
        raise PopulationError(f"Cannot write {path}: {e}", ErrorCode.FILE_SAVE_ERROR) from e


def load_config_template(path: PathLike) -> ConfigTemplate:
    """
    Read a config template from a JSON file.

    Raises:
        ConfigError: If the file cannot be read or is not a valid config template
    """
    return ConfigTemplate.load(path)


def export_default_config(path: PathLike) -> None:
    """Write the default config template as JSON."""
    DEFAULT_CONFIG.save(path)
    logger.info(f"Default config written to {path}")


def _serialize_members(members: Sequence[NeuralNetwork]) -> List[dict]:
    return [member.to_dict() for member in members]


class Population:
    """
    A population of networks plus the config used to evolve it.

    Attributes:
        members: Current generation
        config: Evolution config, or None for populations loaded without one
        rng: Random generator used for evolution

    Example:
        >>> pop = Population.from_config(ConfigTemplate(population_size=10))
        >>> outputs = pop.evaluate(0, [0.0] * pop.input_count)
        >>> pop.evolve(np.ones(pop.count))
    """

    def __init__(
        self,
        members: List[NeuralNetwork],
        config: Optional[Config] = None,
        rng: Optional[np.random.Generator] = None
    ):
        self.members = members
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng()
        self.generation = 0

    @classmethod
    def from_config(
        cls,
        template: ConfigTemplate,
        rng: Optional[np.random.Generator] = None
    ) -> 'Population':
        """
        Build a randomized population.

        Every member is a clone of the config's network with weights drawn
        uniformly from [min_weight, max_weight).
        """
        config = Config.build_from_template(template)
        rng = rng if rng is not None else np.random.default_rng()

        members = []
        for _ in range(template.population_size):
            member = config.network.clone()
            member.randomize_weights(rng, template.min_weight, template.max_weight)
            members.append(member)

        logger.info(
            f"Population created: {len(members)} members, "
            f"{members[0].input_count} inputs, {members[0].output_count} outputs"
        )
        return cls(members, config, rng)

    @classmethod
    def from_config_file(
        cls,
        path: PathLike,
        rng: Optional[np.random.Generator] = None
    ) -> 'Population':
        return cls.from_config(load_config_template(path), rng)

    @classmethod
    def load(
        cls,
        members_path: PathLike,
        config_path: Optional[PathLike] = None,
        rng: Optional[np.random.Generator] = None
    ) -> 'Population':
        """
        Load saved members, optionally with a config to keep evolving them.

        Raises:
            PopulationError: If the members file is unreadable, empty,
                inconsistent or does not match the config's topology
            ConfigError: If the config file is invalid
        """
        text = _read_text(members_path)
        try:
            members = [NeuralNetwork.from_dict(m) for m in json.loads(text)]
        except (ValueError, KeyError, TypeError, IndexError, BrainsError) as e:
            raise PopulationError(
                f"Invalid members JSON in {members_path}: {e}", ErrorCode.INVALID_MEMBERS_JSON
            ) from e

        if not members:
            raise PopulationError("Population file has no members", ErrorCode.POPULATION_SIZE_ZERO)

        first = members[0]
        if any(m.input_count != first.input_count for m in members):
            raise PopulationError(
                "Members have inconsistent input counts", ErrorCode.INCONSISTENT_NETWORK_INPUT_COUNTS
            )
        if any(m.output_count != first.output_count for m in members):
            raise PopulationError(
                "Members have inconsistent output counts", ErrorCode.INCONSISTENT_NETWORK_OUTPUT_COUNTS
            )

        config = None
        if config_path is not None:
            config = Config.build_from_template(load_config_template(config_path))
            if not all(config.network.is_structurally_equal(m) for m in members):
                raise PopulationError(
                    "Members do not match the config's network topology",
                    ErrorCode.POPULATION_CONFIG_MISMATCH,
                )

        logger.info(f"Population loaded from {members_path}: {len(members)} members")
        return cls(members, config, rng)

    @property
    def count(self) -> int:
        return len(self.members)

    @property
    def input_count(self) -> int:
        return self.members[0].input_count

    @property
    def output_count(self) -> int:
        return self.members[0].output_count

    def evaluate(self, index: int, inputs: Sequence[float]) -> np.ndarray:
        """
        Run one member's forward pass.

        Returns:
            np.ndarray: Copy of the member's outputs

        Raises:
            PopulationError: If the index is out of range
            PreconditionViolation: If the input length is wrong
        """
        if not 0 <= index < len(self.members):
            raise PopulationError(
                f"Member index {index} out of range [0, {len(self.members)})",
                ErrorCode.INVALID_MEMBER_INDEX,
            )
        return self.members[index].evaluate(inputs).copy()

    def evolve(self, fitness: Sequence[float]) -> None:
        """
        Replace the members with the next generation.

        Args:
            fitness: One value per member, in member order
        """
        if self.config is None:
            raise PopulationError(
                "Population has no evolution config", ErrorCode.MISSING_EVOLUTION_CONFIG
            )
        if len(fitness) != len(self.members):
            raise PreconditionViolation(
                f"Expected {len(self.members)} fitness values, got {len(fitness)}",
                ErrorCode.FITNESS_LENGTH_MISMATCH,
            )

        config = self.config
        self.members = evolve(
            self.rng,
            self.members,
            fitness,
            config.selection_method,
            config.elitism,
            config.crossover_settings,
            config.mutation_settings,
        )
        self.generation += 1

        best = max(fitness, key=lambda f: -np.inf if np.isnan(f) else f)
        logger.debug(f"Generation {self.generation} evolved, previous best fitness {best:.4f}")

    def top(self, fitness: Sequence[float], n: int) -> List[NeuralNetwork]:
        """
        The `n` fittest members, best first (NaN ranks lowest).

        Raises:
            PopulationError: If `n` is not positive
            PreconditionViolation: If fitness does not match the member count
        """
        if n <= 0:
            raise PopulationError("Member count to export must be positive", ErrorCode.EXPORT_MEMBER_COUNT_ZERO)
        if len(fitness) != len(self.members):
            raise PreconditionViolation(
                f"Expected {len(self.members)} fitness values, got {len(fitness)}",
                ErrorCode.FITNESS_LENGTH_MISMATCH,
            )
        return [self.members[i] for i in rank_by_fitness(fitness)[:n]]

    def save_top(self, path: PathLike, fitness: Sequence[float], n: int) -> None:
        """
        Save the `n` fittest members as a JSON list.

        Raises:
            PopulationError: If `n` is zero or the file cannot be written
        """
        _write_json(path, _serialize_members(self.top(fitness, n)))
        logger.info(f"Saved top {min(n, self.count)} members to {path}")

    def save_all(self, path: PathLike) -> None:
        _write_json(path, _serialize_members(self.members))
        logger.info(f"Saved {self.count} members to {path}")
