"""
Error Types Module

Error codes and exception classes raised by the brains package.

Every exception carries an ``ErrorCode`` so host applications that
drive the engine from another runtime can map failures onto a stable
numeric value.
"""

from enum import IntEnum
from typing import Optional


class ErrorCode(IntEnum):
    """Stable numeric error codes, grouped by subsystem."""
    NONE = 0
    INTERNAL_ERROR = 1

    # Population
    POPULATION_SIZE_ZERO = 100
    INCONSISTENT_NETWORK_INPUT_COUNTS = 101
    INCONSISTENT_NETWORK_OUTPUT_COUNTS = 102
    POPULATION_CONFIG_MISMATCH = 103

    # Config
    CANNOT_READ_CONFIG_FILE = 200
    INVALID_CONFIG_JSON = 201
    MIN_WEIGHT_LARGER_THAN_MAX_WEIGHT = 202
    INVALID_ELITISM_RATIO = 203

    # Neural network config
    NETWORK_NO_LAYERS = 300
    NETWORK_EMPTY_LAYER = 301
    NETWORK_INPUT_COUNT_ZERO = 302
    NETWORK_WEIGHT_COUNT_MISMATCH = 303
    NETWORK_LAYER_CHAIN_MISMATCH = 304

    # Sampling
    INVALID_WEIGHTS = 400

    # Crossover config
    CROSSOVER_INVALID_MIN_NODE_RATIO = 500
    CROSSOVER_INVALID_MAX_NODE_RATIO = 501
    CROSSOVER_INVALID_METHOD_PROBABILITIES = 502
    CROSSOVER_EMPTY_METHOD_PROBABILITIES = 503
    CROSSOVER_INVALID_SWAP_WEIGHTS_RATIOS = 504

    # Mutation config
    MUTATION_INVALID_PROBABILITY = 600
    MUTATION_INVALID_MIN_WEIGHTS_AFFECTED_RATIO = 601
    MUTATION_INVALID_MAX_WEIGHTS_AFFECTED_RATIO = 602
    MUTATION_METHODS_EMPTY = 603
    MUTATION_INVALID_METHOD_PROBABILITIES = 604
    MUTATION_INVALID_REPLACE_METHOD_MIN_MAX = 605
    MUTATION_INVALID_SCALE_METHOD_MIN_MAX = 606
    MUTATION_INVALID_SHIFT_METHOD_MIN_MAX = 607

    # Evolution
    MISSING_EVOLUTION_CONFIG = 700
    FITNESS_LENGTH_MISMATCH = 701
    INVALID_FITNESS = 702
    UNIMPLEMENTED_SELECTION_METHOD = 703

    # Export
    EXPORT_MEMBER_COUNT_ZERO = 800
    FILE_SAVE_ERROR = 801
    NOT_SERIALIZABLE = 802

    # Import
    CANNOT_READ_MEMBERS_FILE = 900
    INVALID_MEMBERS_JSON = 901

    # Evaluate
    INVALID_MEMBER_INDEX = 1000
    INPUT_LENGTH_MISMATCH = 1001


class BrainsError(Exception):
    """Base class for all errors raised by the package."""

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.code = code if code is not None else self.default_code

    def __str__(self) -> str:
        return f"{self.code.name}: {super().__str__()}"


class ShapeError(BrainsError, ValueError):
    """A network template or serialized network describes an invalid shape."""


class ConfigError(BrainsError, ValueError):
    """A configuration template failed validation."""


class InvalidWeightsError(BrainsError, ValueError):
    """Relative weights cannot form a sampling distribution."""

    default_code = ErrorCode.INVALID_WEIGHTS


class PreconditionViolation(BrainsError, AssertionError):
    """A caller broke a documented precondition (wrong lengths, bad fitness)."""


class UnimplementedStrategyError(BrainsError, NotImplementedError):
    """A declared but unimplemented strategy variant was requested."""

    default_code = ErrorCode.UNIMPLEMENTED_SELECTION_METHOD


class PopulationError(BrainsError):
    """Failure while building, loading, saving or querying a population."""


class SerializationError(BrainsError):
    """An object cannot be converted to or from its JSON form."""

    default_code = ErrorCode.NOT_SERIALIZABLE
