"""
Brains CLI Entry Point

Allows running the package as: python -m brains
"""

import argparse
import logging
import os
import sys
from dataclasses import replace

import numpy as np

from brains.config import DEFAULT_CONFIG, Config, ConfigTemplate, get_output_directory
from brains.core.network import Activation, NeuralNetworkTemplate
from brains.errors import BrainsError
from brains.population import Population, export_default_config, load_config_template
from brains.utils.logging import LOG_LEVEL_ENV, get_logger, setup_logging

logger = get_logger(__name__)

XOR_INPUTS = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])
XOR_TARGETS = np.array([0.0, 1.0, 1.0, 0.0])


def xor_template(population_size: int) -> ConfigTemplate:
    """Config template for the XOR demo: 2 inputs, 4 hidden TanH nodes, 1 TanH output."""
    return replace(
        DEFAULT_CONFIG,
        population_size=population_size,
        elitism=0.05,
        network=NeuralNetworkTemplate(
            input_count=2,
            layers=[
                [Activation.tanh() for _ in range(4)],
                [Activation.tanh()],
            ],
        ),
    )


def xor_fitness(population: Population) -> np.ndarray:
    """1 / (1 + squared error) over the four XOR cases, per member."""
    fitness = np.empty(population.count)
    for index in range(population.count):
        outputs = np.array([population.evaluate(index, x)[0] for x in XOR_INPUTS])
        fitness[index] = 1.0 / (1.0 + np.sum((outputs - XOR_TARGETS) ** 2))
    return fitness


def cmd_export_config(args: argparse.Namespace) -> int:
    export_default_config(args.path)
    print(f"Default config written to {args.path}")
    return 0


def cmd_check_config(args: argparse.Namespace) -> int:
    template = load_config_template(args.path)
    config = Config.build_from_template(template)
    network = config.network
    crossover = config.crossover_settings
    mutation = config.mutation_settings

    shape = [network.input_count] + [layer.node_count for layer in network.layers]
    print(f"Config OK: {args.path}")
    print(f"  Population size:   {config.population_size}")
    print(f"  Elite members:     {config.elitism}")
    print(f"  Network shape:     {shape} ({network.total_nodes()} nodes, {network.total_weights()} weights)")
    print(f"  Nodes crossed:     [{crossover.min_nodes_affected}, {crossover.max_nodes_affected})")
    print(f"  Weights mutated:   [{mutation.min_weights_affected}, {mutation.max_weights_affected})")
    print(f"  Mutation chance:   {mutation.mutation_probability}")
    return 0


def cmd_demo(args: argparse.Namespace) -> int:
    rng = np.random.default_rng(args.seed)
    if args.config:
        population = Population.from_config(load_config_template(args.config), rng)
        if population.input_count != 2 or population.output_count != 1:
            print("The XOR demo needs a network with 2 inputs and 1 output", file=sys.stderr)
            return 1
    else:
        population = Population.from_config(xor_template(args.population), rng)

    fitness = xor_fitness(population)
    for generation in range(args.generations):
        population.evolve(fitness)
        fitness = xor_fitness(population)
        if generation % args.print_interval == 0 or generation == args.generations - 1:
            print(
                f"Generation {generation + 1:4d}: best={fitness.max():.4f} "
                f"avg={fitness.mean():.4f}"
            )

    logger.info(
        f"Demo finished after {population.generation} generations, best fitness {fitness.max():.4f}"
    )

    if args.save:
        path = os.path.join(get_output_directory(), args.save)
        population.save_top(path, fitness, 1)
        print(f"Best network saved to {path}")
    return 0


def main(argv=None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        prog='brains',
        description='Brains - Neuroevolution of fixed-topology networks',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m brains export-config config.json
  python -m brains check-config config.json
  python -m brains demo --generations 200 --seed 7
        """
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=os.environ.get(LOG_LEVEL_ENV, 'WARNING').upper(),
        help=f'Log level (default: ${LOG_LEVEL_ENV} or WARNING)'
    )
    parser.add_argument('--log-file', type=str, default=None, help='Also write logs to this file')
    subparsers = parser.add_subparsers(dest='command', required=True)

    export_parser = subparsers.add_parser('export-config', help='Write the default config as JSON')
    export_parser.add_argument('path', type=str)
    export_parser.set_defaults(func=cmd_export_config)

    check_parser = subparsers.add_parser('check-config', help='Validate a config file')
    check_parser.add_argument('path', type=str)
    check_parser.set_defaults(func=cmd_check_config)

    demo_parser = subparsers.add_parser('demo', help='Evolve networks on the XOR problem')
    demo_parser.add_argument('--config', '-c', type=str, default=None, help='Config file (2 inputs, 1 output)')
    demo_parser.add_argument('--generations', '-g', type=int, default=100)
    demo_parser.add_argument('--population', '-p', type=int, default=100)
    demo_parser.add_argument('--seed', '-s', type=int, default=None)
    demo_parser.add_argument('--print-interval', type=int, default=10)
    demo_parser.add_argument('--save', type=str, default=None, help='File name for the best network')
    demo_parser.set_defaults(func=cmd_demo)

    args = parser.parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else args.log_level,
        log_file=args.log_file,
    )

    try:
        return args.func(args)
    except BrainsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
