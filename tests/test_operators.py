"""
Tests for selection, crossover and mutation operators.
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from brains.core.crossover import (
    CrossoverMethodProbability,
    CrossoverSettings,
    CrossoverSettingsTemplate,
    SwapSomeWeights,
    SwapWholeNode,
    crossover,
)
from brains.core.evolution import OffspringCollector
from brains.core.mutation import (
    Invert,
    MutationMethodProbability,
    MutationSettings,
    MutationSettingsTemplate,
    Replace,
    Scale,
    Shift,
    mutate,
)
from brains.core.selection import (
    FitnessProportionate,
    Selector,
    StochasticUniversal,
    Tournament,
    Truncation,
    selection_from_json,
    selection_to_json,
)
from brains.errors import ErrorCode, PreconditionViolation, UnimplementedStrategyError


def single_node_crossover(network, method):
    """Settings that touch exactly one node per crossover (6 nodes, ratio 0.2)."""
    template = CrossoverSettingsTemplate(0.2, 0.2, [CrossoverMethodProbability(method, 1.0)])
    return CrossoverSettings(template, network)


def mutation_settings(network, methods, probability=1.0, min_ratio=0.04, max_ratio=0.04):
    """Defaults touch exactly one of the 26 weights of the small network."""
    template = MutationSettingsTemplate(
        probability,
        min_ratio,
        max_ratio,
        [MutationMethodProbability(m, 1.0) for m in methods],
    )
    return MutationSettings(template, network)


def row_origins(child, parent_a, parent_b):
    """For every node row: 'a', 'b' or 'mixed' depending on where the child's weights came from."""
    origins = {}
    for layer_idx, layer in enumerate(child.layers):
        for node in range(layer.node_count):
            row = layer.node_weights(node)
            a_row = parent_a.layers[layer_idx].node_weights(node)
            b_row = parent_b.layers[layer_idx].node_weights(node)
            if np.array_equal(row, a_row):
                origins[(layer_idx, node)] = 'a'
            elif np.array_equal(row, b_row):
                origins[(layer_idx, node)] = 'b'
            else:
                origins[(layer_idx, node)] = 'mixed'
    return origins


class TestSelection:
    """Tests for parent selection."""

    def test_zero_fitness_never_selected(self, rng):
        """Test individuals with zero fitness are never parents when others are positive."""
        selector = Selector(FitnessProportionate(), [0.0, 0.0, 1.0])

        assert set(selector.select(rng, 200)) == {2}

    def test_proportional(self, rng):
        """Test selection frequency follows fitness."""
        selector = Selector(FitnessProportionate(), [1.0, 3.0])

        picks = np.array(selector.select(rng, 20000))

        assert np.mean(picks == 1) == pytest.approx(0.75, abs=0.02)

    def test_all_zero_is_uniform(self, rng):
        """Test all-zero fitness degenerates to uniform selection."""
        selector = Selector(FitnessProportionate(), [0.0, 0.0, 0.0, 0.0])

        counts = np.bincount(selector.select(rng, 8000), minlength=4)

        np.testing.assert_allclose(counts / 8000, [0.25] * 4, atol=0.03)

    def test_select_into_appends(self, rng):
        """Test select_into appends to the given list."""
        selector = Selector(FitnessProportionate(), [1.0, 1.0])
        output = [7]

        selector.select_into(rng, 2, output)

        assert len(output) == 3
        assert output[0] == 7

    def test_select_distribution(self, rng):
        """Test selected parent frequencies match fitness shares."""
        selector = Selector(FitnessProportionate(), [1.0, 1.0, 2.0])

        counts = np.bincount(selector.select(rng, 100_000), minlength=3)
        expected = np.array([0.25, 0.25, 0.5]) * 100_000

        # Chi-square, df=2, alpha=0.001
        assert np.sum((counts - expected) ** 2 / expected) < 13.816

    def test_select_returns_ints(self, rng):
        """Test selected indices are plain ints."""
        output = []
        Selector(FitnessProportionate(), [1.0, 2.0]).select_into(rng, 3, output)

        assert all(type(index) is int for index in output)

    def test_huge_fitness(self, rng):
        """Test fitness values near the float maximum are selectable."""
        selector = Selector(FitnessProportionate(), [1e308, 1e308])

        assert set(selector.select(rng, 200)) == {0, 1}

    def test_subnormal_fitness(self, rng):
        """Test a lone subnormal fitness is always the parent."""
        selector = Selector(FitnessProportionate(), [1e-310, 0.0, 0.0])

        assert set(selector.select(rng, 200)) == {0}

    @pytest.mark.parametrize("fitness", [[1.0, -1.0], [1.0, float('nan')], [float('inf'), 1.0]])
    def test_invalid_fitness(self, fitness):
        """Test negative or non-finite fitness is a precondition violation."""
        with pytest.raises(PreconditionViolation) as exc:
            Selector(FitnessProportionate(), fitness)
        assert exc.value.code == ErrorCode.INVALID_FITNESS

    @pytest.mark.parametrize("method", [StochasticUniversal(), Tournament(3), Truncation(0.5)])
    def test_unimplemented_methods_fail_fast(self, method):
        """Test declared but unimplemented methods raise instead of falling back."""
        with pytest.raises(UnimplementedStrategyError):
            Selector(method, [1.0, 2.0])

        with pytest.raises(NotImplementedError):
            Selector(method, [1.0, 2.0])

    def test_json_forms(self):
        """Test selection methods use externally tagged JSON."""
        assert selection_to_json(FitnessProportionate()) == 'FitnessProportionate'
        assert selection_to_json(Tournament(4)) == {'Tournament': 4}
        assert selection_from_json({'Truncation': 0.25}) == Truncation(0.25)
        assert selection_from_json('StochasticUniversal') == StochasticUniversal()


class TestCrossover:
    """Tests for node-level crossover."""

    def test_writes_two_offspring(self, patterned_pair, rng):
        """Test one call produces two offspring."""
        a, b = patterned_pair
        output = OffspringCollector(10)

        crossover(rng, [a, b], output, CrossoverSettings(CrossoverSettingsTemplate(), a))

        assert len(output) == 2
        assert output.members[0] is not a
        assert output.members[1] is not b

    def test_collector_discards_excess(self, patterned_pair, rng):
        """Test the second offspring is dropped when only one slot is left."""
        a, b = patterned_pair
        output = OffspringCollector(1)

        crossover(rng, [a, b], output, CrossoverSettings(CrossoverSettingsTemplate(), a))

        assert len(output) == 1

    def test_parents_untouched(self, patterned_pair, rng):
        """Test crossover never modifies the parents."""
        a, b = patterned_pair
        a_before = [layer.weights.copy() for layer in a.layers]
        b_before = [layer.weights.copy() for layer in b.layers]

        crossover(rng, [a, b], OffspringCollector(2), CrossoverSettings(CrossoverSettingsTemplate(), a))

        for layer, before in zip(a.layers, a_before):
            np.testing.assert_array_equal(layer.weights, before)
        for layer, before in zip(b.layers, b_before):
            np.testing.assert_array_equal(layer.weights, before)

    def test_swap_whole_node(self, patterned_pair, rng):
        """Test SwapWholeNode exchanges exactly one full row and nothing else."""
        a, b = patterned_pair
        settings = single_node_crossover(a, SwapWholeNode())

        for _ in range(20):
            output = OffspringCollector(2)
            crossover(rng, [a, b], output, settings)
            child_a, child_b = output.members

            origins_a = row_origins(child_a, a, b)
            origins_b = row_origins(child_b, a, b)

            swapped = [key for key, origin in origins_a.items() if origin == 'b']
            assert len(swapped) == 1
            assert 'mixed' not in origins_a.values()
            for key, origin in origins_a.items():
                assert origins_b[key] == ('a' if origin == 'b' else 'b')

    def test_swap_some_weights(self, patterned_pair, rng):
        """Test SwapSomeWeights exchanges trunc(fraction * row length) slots of one row."""
        a, b = patterned_pair
        settings = single_node_crossover(a, SwapSomeWeights(0.5, 0.5))

        for _ in range(20):
            output = OffspringCollector(2)
            crossover(rng, [a, b], output, settings)
            child_a, child_b = output.members

            changed = []
            for layer_idx, layer in enumerate(child_a.layers):
                diff = np.argwhere(layer.weights != a.layers[layer_idx].weights)
                for node, weight in diff:
                    changed.append((layer_idx, node, weight))
                    assert layer.weights[node, weight] == b.layers[layer_idx].weights[node, weight]
                    assert (child_b.layers[layer_idx].weights[node, weight]
                            == a.layers[layer_idx].weights[node, weight])

            # Row lengths are 4 and 5, both give trunc(0.5 * n) == 2
            assert len(changed) == 2
            assert len({(layer_idx, node) for layer_idx, node, _ in changed}) == 1

    def test_zero_nodes_affected_clones(self, patterned_pair, rng):
        """Test a zero node range yields plain copies of the parents."""
        a, b = patterned_pair
        template = CrossoverSettingsTemplate(0.0, 0.0, [CrossoverMethodProbability(SwapWholeNode(), 1.0)])
        output = OffspringCollector(2)

        crossover(rng, [a, b], output, CrossoverSettings(template, a))

        for layer, parent_layer in zip(output.members[0].layers, a.layers):
            np.testing.assert_array_equal(layer.weights, parent_layer.weights)
        for layer, parent_layer in zip(output.members[1].layers, b.layers):
            np.testing.assert_array_equal(layer.weights, parent_layer.weights)


class TestMutation:
    """Tests for in-place weight mutation."""

    def test_probability_zero_never_mutates(self, small_network, rng):
        """Test a zero mutation probability leaves the network untouched."""
        settings = mutation_settings(small_network, [Shift(1.0, 2.0)], probability=0.0, max_ratio=1.0)
        before = [layer.weights.copy() for layer in small_network.layers]

        results = [mutate(rng, small_network, settings) for _ in range(10_000)]

        assert not any(results)
        for layer, weights in zip(small_network.layers, before):
            np.testing.assert_array_equal(layer.weights, weights)

    def test_probability_one_always_mutates(self, small_network, rng):
        """Test a mutation probability of one changes at least one weight every time."""
        settings = mutation_settings(small_network, [Shift(0.5, 1.0)], min_ratio=0.1, max_ratio=0.3)

        for _ in range(200):
            before = np.concatenate([layer.all_weights() for layer in small_network.layers])
            assert mutate(rng, small_network, settings)
            after = np.concatenate([layer.all_weights() for layer in small_network.layers])
            assert np.any(before != after)

    def test_invert(self, small_network, rng):
        """Test Invert negates exactly one weight."""
        settings = mutation_settings(small_network, [Invert()])
        before = np.concatenate([layer.all_weights() for layer in small_network.layers])

        mutate(rng, small_network, settings)

        after = np.concatenate([layer.all_weights() for layer in small_network.layers])
        changed = np.flatnonzero(before != after)
        assert len(changed) == 1
        assert after[changed[0]] == -before[changed[0]]

    def test_replace(self, small_network, rng):
        """Test Replace overwrites with a value in [min, max)."""
        settings = mutation_settings(small_network, [Replace(5.0, 6.0)])

        mutate(rng, small_network, settings)

        weights = np.concatenate([layer.all_weights() for layer in small_network.layers])
        replaced = weights[weights >= 5.0]
        assert len(replaced) == 1
        assert replaced[0] < 6.0

    def test_scale(self, small_network, rng):
        """Test Scale multiplies a weight."""
        settings = mutation_settings(small_network, [Scale(3.0, 3.0)])
        before = np.concatenate([layer.all_weights() for layer in small_network.layers])

        mutate(rng, small_network, settings)

        after = np.concatenate([layer.all_weights() for layer in small_network.layers])
        changed = np.flatnonzero(before != after)
        assert len(changed) == 1
        assert after[changed[0]] == pytest.approx(3.0 * before[changed[0]])

    def test_shift(self, small_network, rng):
        """Test Shift adds to a weight."""
        settings = mutation_settings(small_network, [Shift(0.25, 0.25)])
        before = np.concatenate([layer.all_weights() for layer in small_network.layers])

        mutate(rng, small_network, settings)

        after = np.concatenate([layer.all_weights() for layer in small_network.layers])
        changed = np.flatnonzero(before != after)
        assert len(changed) == 1
        assert after[changed[0]] == pytest.approx(before[changed[0]] + 0.25)

    def test_bias_weights_eligible(self, small_template, rng):
        """Test bias weights get mutated as well as input weights."""
        from brains.core.network import NeuralNetwork

        network = NeuralNetwork.from_template(small_template)
        settings = mutation_settings(network, [Replace(1.0, 2.0)], max_ratio=1.0, min_ratio=1.0)

        for _ in range(5):
            mutate(rng, network, settings)

        biases = np.concatenate([layer.weights[:, 0] for layer in network.layers])
        assert np.any(biases != 0.0)
