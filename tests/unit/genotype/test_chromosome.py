"""
Unit tests for cgpde.genotype.chromosome module.

This module contains tests for the Chromosome class: random creation,
construction from explicit genes, active-node resolution, execution,
copying, comparison, persistence and visualization.
"""

import pytest
import numpy as np
from unittest.mock import Mock

from cgpde.data import DataSet
from cgpde.genotype import Chromosome, InputRef, NodeRef
from cgpde.phenotype.executor import FLOAT_MAX
from cgpde.run.config import Config


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def adder():
    """2 inputs, one 'add' node reading both inputs, one output reading the node."""
    return Chromosome.from_dict({'num_inputs'  : 2,
                                 'arity'       : 2,
                                 'function_set': ['add'],
                                 'nodes'       : [{'function': 'add', 'inputs': [0, 1]}],
                                 'outputs'     : [2]})


@pytest.fixture
def chain():
    """
    Node 0 adds the inputs, node 1 multiplies node 0 by input 0,
    node 2 is not reachable from the output.
    """
    return Chromosome.from_dict({'num_inputs'  : 2,
                                 'arity'       : 2,
                                 'function_set': ['add', 'mul'],
                                 'nodes'       : [{'function': 'add', 'inputs': [0, 1], 'weights': [0.5, -1.25]},
                                                  {'function': 'mul', 'inputs': [2, 0], 'weights': [2.0, 0.75]},
                                                  {'function': 'add', 'inputs': [3, 1], 'weights': [1.0, 1.0]}],
                                 'outputs'     : [3]})


@pytest.fixture
def accumulator():
    """One 'add' node reading input 0 and its own previous output."""
    return Chromosome.from_dict({'num_inputs'  : 1,
                                 'arity'       : 2,
                                 'function_set': ['add'],
                                 'nodes'       : [{'function': 'add', 'inputs': [0, 1]}],
                                 'outputs'     : [1]})


def reachable(chromosome):
    """Node positions reachable from the outputs, computed independently."""
    seen, frontier = set(), [int(a) for a in chromosome.output_genes]
    while frontier:
        address = frontier.pop()
        if address < chromosome.num_inputs:
            continue
        index = address - chromosome.num_inputs
        if index in seen:
            continue
        seen.add(index)
        node = chromosome.nodes[index]
        frontier.extend(int(a) for a in node.inputs[:chromosome.node_arity(index)])
    return seen


# ============================================================================
# Test Random Creation
# ============================================================================

class TestChromosomeInit:
    """Test Chromosome.__init__."""

    def test_dimensions(self, small_config, rng):
        chromosome = Chromosome(small_config, rng)
        assert chromosome.num_inputs == 2
        assert chromosome.num_nodes == 10
        assert chromosome.num_outputs == 1
        assert chromosome.arity == 2
        assert len(chromosome.nodes) == 10
        assert chromosome.output_genes.shape == (1,)

    def test_genes_in_range(self, small_config, rng):
        small_config.num_outputs = 4
        chromosome = Chromosome(small_config, rng)
        for i, node in enumerate(chromosome.nodes):
            assert 0 <= node.function < len(small_config.function_set)
            assert np.all(node.inputs < chromosome.num_inputs + i)
            assert np.all(np.abs(node.weights) <= small_config.weight_range)
        assert np.all(chromosome.output_genes < chromosome.num_inputs + chromosome.num_nodes)

    def test_no_shortcut_connections(self, small_config, rng):
        small_config.shortcut_connections = False
        small_config.num_outputs = 5
        chromosome = Chromosome(small_config, rng)
        assert np.all(chromosome.output_genes >= chromosome.num_inputs)

    def test_function_set_is_copied(self, small_config, rng):
        chromosome = Chromosome(small_config, rng)
        small_config.function_set.add_preset("tanh")
        assert "tanh" not in chromosome.function_set.names

    def test_empty_function_set_raises(self, rng):
        config = Mock(spec=Config)
        config.function_set = []
        config.arity = 2
        with pytest.raises(ValueError, match="function set is empty"):
            Chromosome(config, rng)

    def test_initial_state(self, small_config, rng):
        chromosome = Chromosome(small_config, rng)
        assert chromosome.fitness == 0.0
        assert chromosome.fitness_validation == 0.0
        assert chromosome.generation == 0
        assert chromosome.active_nodes == sorted(reachable(chromosome))

    def test_same_seed_same_chromosome(self, small_config):
        a = Chromosome(small_config, np.random.default_rng(7))
        b = Chromosome(small_config, np.random.default_rng(7))
        assert a.compare_ann(b)


# ============================================================================
# Test Construction From Genes
# ============================================================================

class TestFromDict:
    """Test Chromosome.from_dict and to_dict."""

    def test_function_by_name_or_index(self):
        chromosome = Chromosome.from_dict({'num_inputs': 1, 'arity': 1, 'function_set': ['add', 'sig'],
                                           'nodes': [{'function': 'sig', 'inputs': [0]},
                                                     {'function': 0, 'inputs': [1]}],
                                           'outputs': [2]})
        assert chromosome.nodes[0].function == 1
        assert chromosome.nodes[1].function == 0

    def test_weights_default_to_one(self, adder):
        np.testing.assert_array_equal(adder.nodes[0].weights, [1.0, 1.0])

    def test_address_out_of_range_raises(self):
        with pytest.raises(ValueError, match="out of range"):
            Chromosome.from_dict({'num_inputs': 2, 'arity': 2, 'function_set': ['add'],
                                  'nodes': [{'function': 0, 'inputs': [0, 5]}], 'outputs': [2]})

    def test_wrong_number_of_inputs_raises(self):
        with pytest.raises(ValueError):
            Chromosome.from_dict({'num_inputs': 2, 'arity': 2, 'function_set': ['add'],
                                  'nodes': [{'function': 0, 'inputs': [0]}], 'outputs': [2]})

    def test_invalid_arity_raises(self):
        with pytest.raises(ValueError, match="arity"):
            Chromosome.from_dict({'num_inputs': 2, 'arity': 0, 'function_set': ['add'],
                                  'nodes': [], 'outputs': [0]})

    def test_to_dict_round_trip(self, chain):
        rebuilt = Chromosome.from_dict(chain.to_dict())
        assert rebuilt.compare_ann(chain)


# ============================================================================
# Test Active Node Resolution
# ============================================================================

class TestActiveNodes:
    """Test resolve_active_nodes and the derived properties."""

    def test_chain(self, chain):
        assert chain.active_nodes == [0, 1]
        assert chain.is_node_active(0)
        assert chain.is_node_active(1)
        assert not chain.is_node_active(2)

    def test_idempotent(self, small_config, rng):
        chromosome = Chromosome(small_config, rng)
        first  = list(chromosome.resolve_active_nodes())
        second = list(chromosome.resolve_active_nodes())
        assert first == second

    @pytest.mark.parametrize("seed", range(10))
    def test_active_set_is_exactly_the_reachable_set(self, small_config, seed):
        small_config.num_nodes    = 30
        small_config.num_outputs  = 2
        small_config.function_set = "add,abs,sig,1"
        chromosome = Chromosome(small_config, np.random.default_rng(seed))
        assert set(chromosome.active_nodes) == reachable(chromosome)
        assert chromosome.active_nodes == sorted(chromosome.active_nodes)

    def test_actual_arity_limits_the_search(self):
        """An 'abs' node only consumes its first input; the second is not followed."""
        chromosome = Chromosome.from_dict({'num_inputs': 1, 'arity': 2, 'function_set': ['add', 'abs'],
                                           'nodes': [{'function': 'add', 'inputs': [0, 0]},
                                                     {'function': 'abs', 'inputs': [0, 1]}],
                                           'outputs': [2]})
        assert chromosome.active_nodes == [1]
        assert chromosome.nodes[1].actual_arity == 1
        assert chromosome.node_arity(0) == 2

    def test_output_addressing_input(self):
        chromosome = Chromosome.from_dict({'num_inputs': 2, 'arity': 1, 'function_set': ['wire'],
                                           'nodes': [{'function': 0, 'inputs': [0]}],
                                           'outputs': [1]})
        assert chromosome.active_nodes == []
        np.testing.assert_array_equal(chromosome.execute([4.0, 7.0]), [7.0])

    def test_recurrent_cycle_terminates(self, accumulator):
        assert accumulator.active_nodes == [0]
        assert accumulator.is_recurrent()

    def test_num_active_connections(self, chain):
        assert chain.num_active_nodes == 2
        assert chain.num_active_connections == 4

    def test_num_weights(self, chain):
        assert chain.num_weights == 6

    def test_not_recurrent(self, chain):
        assert not chain.is_recurrent()


# ============================================================================
# Test Address References
# ============================================================================

class TestReferences:
    """Test the tagged address accessors."""

    def test_address_ref(self, chain):
        assert chain.address_ref(1) == InputRef(1)
        assert chain.address_ref(3) == NodeRef(1)

    def test_encode_ref(self, chain):
        assert chain.encode_ref(NodeRef(2)) == 4
        assert chain.encode_ref(InputRef(0)) == 0

    def test_encode_ref_out_of_range(self, chain):
        with pytest.raises(ValueError):
            chain.encode_ref(NodeRef(3))

    def test_node_input_refs(self, chain):
        assert chain.node_input_refs(1) == [NodeRef(0), InputRef(0)]

    def test_output_refs(self, chain):
        assert chain.output_refs() == [NodeRef(1)]


# ============================================================================
# Test Execution
# ============================================================================

class TestExecution:
    """Test execute, outputs, node_value and reset."""

    def test_adder(self, adder):
        outputs = adder.execute([2.0, 3.0])
        np.testing.assert_array_equal(outputs, [5.0])
        np.testing.assert_array_equal(adder.outputs, [5.0])
        assert adder.node_value(0) == 5.0

    def test_batch(self, adder):
        outputs = adder.execute(np.array([[2.0, 3.0], [1.0, -1.0], [0.5, 0.25]]))
        assert outputs.shape == (3, 1)
        np.testing.assert_array_equal(outputs[:, 0], [5.0, 0.0, 0.75])

    def test_batch_matches_single_samples(self, small_config, rng):
        small_config.num_outputs = 3
        chromosome = Chromosome(small_config, rng)
        inputs     = rng.uniform(-1, 1, size=(6, 2))
        batch      = chromosome.execute(inputs)
        for i in range(6):
            np.testing.assert_allclose(chromosome.execute(inputs[i]), batch[i])

    def test_deterministic(self, small_config, rng):
        chromosome = Chromosome(small_config, rng)
        first  = chromosome.execute([0.3, -0.7]).copy()
        second = chromosome.execute([0.3, -0.7])
        assert np.array_equal(first, second)

    def test_wrong_number_of_inputs_raises(self, adder):
        with pytest.raises(ValueError):
            adder.execute([1.0, 2.0, 3.0])

    def test_nan_becomes_zero(self):
        chromosome = Chromosome.from_dict({'num_inputs': 1, 'arity': 1, 'function_set': ['sqrt'],
                                           'nodes': [{'function': 0, 'inputs': [0]}],
                                           'outputs': [1]})
        np.testing.assert_array_equal(chromosome.execute([-1.0]), [0.0])
        assert chromosome.node_value(0) == 0.0

    def test_inf_is_clamped(self):
        chromosome = Chromosome.from_dict({'num_inputs': 2, 'arity': 2, 'function_set': ['div'],
                                           'nodes': [{'function': 0, 'inputs': [0, 1]}],
                                           'outputs': [2]})
        assert chromosome.execute([1.0, 0.0])[0] == FLOAT_MAX
        assert chromosome.execute([-1.0, 0.0])[0] == -FLOAT_MAX

    def test_overflow_is_clamped(self):
        chromosome = Chromosome.from_dict({'num_inputs': 1, 'arity': 1, 'function_set': ['exp'],
                                           'nodes': [{'function': 0, 'inputs': [0]}],
                                           'outputs': [1]})
        outputs = chromosome.execute([1000.0])
        assert np.isfinite(outputs).all()
        assert outputs[0] == FLOAT_MAX

    def test_recurrent_reads_previous_output(self, accumulator):
        assert accumulator.execute([1.0])[0] == 1.0
        assert accumulator.execute([1.0])[0] == 2.0
        assert accumulator.execute([0.5])[0] == 2.5

    def test_reset(self, accumulator):
        accumulator.execute([1.0])
        accumulator.execute([1.0])
        accumulator.reset()
        assert accumulator.node_value(0) == 0.0
        assert accumulator.execute([1.0])[0] == 1.0

    def test_recurrent_batch_raises(self, accumulator):
        with pytest.raises(ValueError, match="one sample at a time"):
            accumulator.execute(np.ones((3, 1)))

    def test_constant_node_in_batch(self):
        chromosome = Chromosome.from_dict({'num_inputs': 1, 'arity': 1, 'function_set': ['pi'],
                                           'nodes': [{'function': 0, 'inputs': [0]}],
                                           'outputs': [1]})
        outputs = chromosome.execute(np.zeros((4, 1)))
        np.testing.assert_allclose(outputs[:, 0], np.full(4, np.pi))

    def test_stochastic_node_uses_chromosome_rng(self):
        description = {'num_inputs': 1, 'arity': 1, 'function_set': ['rand'],
                       'nodes': [{'function': 0, 'inputs': [0]}], 'outputs': [1]}
        a = Chromosome.from_dict(description, np.random.default_rng(3))
        b = Chromosome.from_dict(description, np.random.default_rng(3))
        assert a.execute([0.0])[0] == b.execute([0.0])[0]
        assert -1.0 <= a.execute([0.0])[0] <= 1.0


# ============================================================================
# Test Fitness
# ============================================================================

class TestFitness:
    """Test evaluate, set_fitness and set_fitness_validation."""

    def test_set_fitness(self, adder):
        config = Config()
        data   = DataSet([[2.0, 3.0], [1.0, 1.0]], [[5.0], [3.0]])
        adder.set_fitness(config, data)
        assert adder.fitness == pytest.approx(1.0)

    def test_set_fitness_validation(self, adder):
        config = Config()
        data   = DataSet([[2.0, 3.0]], [[4.0]])
        adder.set_fitness_validation(config, data)
        assert adder.fitness_validation == pytest.approx(1.0)
        assert adder.fitness == 0.0

    def test_evaluate_does_not_store(self, adder):
        config = Config()
        data   = DataSet([[2.0, 3.0]], [[0.0]])
        assert adder.evaluate(config, data) == pytest.approx(5.0)
        assert adder.fitness == 0.0

    def test_evaluate_resets_recurrent_state(self, accumulator):
        config = Config()
        data   = DataSet([[1.0], [1.0]], [[1.0], [2.0]])
        accumulator.execute([10.0])
        assert accumulator.evaluate(config, data) == pytest.approx(0.0)


# ============================================================================
# Test Copying
# ============================================================================

class TestCopying:
    """Test clone and copy_from."""

    def test_clone_is_independent(self, chain):
        clone = chain.clone()
        clone.nodes[0].inputs[0] = 1
        clone.nodes[0].weights[0] = 9.0
        clone.output_genes[0] = 2
        assert chain.nodes[0].inputs[0] == 0
        assert chain.nodes[0].weights[0] == 0.5
        assert chain.output_genes[0] == 3

    def test_copy_from(self, small_config):
        a = Chromosome(small_config, np.random.default_rng(1))
        b = Chromosome(small_config, np.random.default_rng(2))
        b.fitness, b.fitness_validation, b.generation = 3.0, 4.0, 12
        rng_before = a.rng

        a.copy_from(b)

        assert a.compare_ann(b)
        assert a.active_nodes == b.active_nodes
        assert (a.fitness, a.fitness_validation, a.generation) == (3.0, 4.0, 12)
        assert a.rng is rng_before

        b.nodes[0].weights[0] = 100.0
        assert a.nodes[0].weights[0] != 100.0

    def test_copy_from_dimension_mismatch_raises(self, small_config, rng):
        a = Chromosome(small_config, rng)
        small_config.num_nodes = 11
        b = Chromosome(small_config, rng)
        with pytest.raises(ValueError, match="different dimensions"):
            a.copy_from(b)


# ============================================================================
# Test Structure Operations
# ============================================================================

class TestStructure:
    """Test remove_inactive_nodes, depth and the weight vector."""

    def test_remove_inactive_nodes(self, chain):
        before = chain.execute([1.5, -2.0]).copy()
        chain.remove_inactive_nodes()

        assert chain.num_nodes == 2
        assert chain.active_nodes == [0, 1]
        np.testing.assert_array_equal(chain.output_genes, [3])
        np.testing.assert_array_equal(chain.nodes[1].inputs, [2, 0])
        np.testing.assert_array_equal(chain.execute([1.5, -2.0]), before)

    @pytest.mark.parametrize("seed", range(5))
    def test_remove_inactive_nodes_preserves_behaviour(self, small_config, seed):
        small_config.num_nodes   = 25
        small_config.num_outputs = 2
        chromosome = Chromosome(small_config, np.random.default_rng(seed))
        inputs     = np.random.default_rng(seed).uniform(-1, 1, size=(5, 2))
        before     = chromosome.execute(inputs).copy()

        chromosome.remove_inactive_nodes()

        assert chromosome.num_nodes == chromosome.num_active_nodes
        np.testing.assert_allclose(chromosome.execute(inputs), before)

    def test_depth(self, chain):
        assert chain.depth() == 2

    def test_depth_of_output_on_input(self):
        chromosome = Chromosome.from_dict({'num_inputs': 1, 'arity': 1, 'function_set': ['wire'],
                                           'nodes': [{'function': 0, 'inputs': [0]}],
                                           'outputs': [0]})
        assert chromosome.depth() == 0

    def test_depth_without_outputs(self):
        chromosome = Chromosome.from_dict({'num_inputs': 1, 'arity': 1, 'function_set': ['wire'],
                                           'nodes': [{'function': 0, 'inputs': [0]}],
                                           'outputs': []})
        assert chromosome.depth() == -1

    def test_depth_ignores_recurrent_edges(self, accumulator):
        assert accumulator.depth() == 1

    def test_weights_vector(self, chain):
        np.testing.assert_array_equal(chain.weights_vector(), [0.5, -1.25, 2.0, 0.75, 1.0, 1.0])

    def test_set_weights_vector(self, chain):
        chain.set_weights_vector(np.arange(6.0))
        np.testing.assert_array_equal(chain.nodes[1].weights, [2.0, 3.0])
        np.testing.assert_array_equal(chain.weights_vector(), np.arange(6.0))

    def test_set_weights_vector_wrong_length_raises(self, chain):
        with pytest.raises(ValueError, match="Expected 6 weights"):
            chain.set_weights_vector(np.zeros(5))


# ============================================================================
# Test Comparison
# ============================================================================

class TestComparison:
    """Test compare, compare_ann, compare_active and compare_active_ann."""

    def test_clone_compares_equal(self, chain):
        clone = chain.clone()
        assert chain.compare(clone)
        assert chain.compare_ann(clone)
        assert chain.compare_active(clone)
        assert chain.compare_active_ann(clone)

    def test_weight_difference(self, chain):
        clone = chain.clone()
        clone.nodes[0].weights[0] = 3.0
        assert chain.compare(clone)
        assert not chain.compare_ann(clone)
        assert chain.compare_active(clone)
        assert not chain.compare_active_ann(clone)

    def test_inactive_difference(self, chain):
        clone = chain.clone()
        clone.nodes[2].function = 1
        assert not chain.compare(clone)
        assert chain.compare_active(clone)

    def test_output_difference(self, chain):
        clone = chain.clone()
        clone.output_genes[0] = 2
        clone.resolve_active_nodes()
        assert not chain.compare(clone)
        assert not chain.compare_active(clone)

    def test_activity_mismatch(self, chain):
        clone = chain.clone()
        clone.output_genes[0] = 4
        clone.resolve_active_nodes()
        assert not chain.compare_active(clone)

    def test_different_dimensions(self, chain, adder):
        assert not chain.compare(adder)
        assert not chain.compare(None)


# ============================================================================
# Test Persistence
# ============================================================================

class TestPersistence:
    """Test save and load."""

    def test_file_format(self, chain, tmp_path):
        path = tmp_path / "chain.chromo"
        chain.save(str(path))
        lines = path.read_text().split("\n")

        assert lines[:5] == ["numInputs,2", "numNodes,3", "numOutputs,1", "arity,2", "functionSet,add,mul"]
        assert lines[5] == "0"
        assert lines[6] == "0,0.500000"
        assert lines[7] == "1,-1.250000"
        assert lines[-1] == "3,"

    def test_round_trip(self, chain, tmp_path):
        path = tmp_path / "chain.chromo"
        chain.save(str(path))
        loaded = Chromosome.load(str(path))
        assert loaded.compare_ann(chain)
        assert loaded.active_nodes == chain.active_nodes

    def test_round_trip_random(self, small_config, rng, tmp_path):
        small_config.num_outputs = 2
        chromosome = Chromosome(small_config, rng)
        path = tmp_path / "random.chromo"
        chromosome.save(str(path))
        loaded = Chromosome.load(str(path))
        assert loaded.compare(chromosome)
        np.testing.assert_allclose(loaded.weights_vector(), chromosome.weights_vector(), atol=1e-6)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Chromosome.load(str(tmp_path / "missing.chromo"))

    def test_custom_function_rejected(self, tmp_path):
        path = tmp_path / "custom.chromo"
        path.write_text("numInputs,1\nnumNodes,1\nnumOutputs,1\narity,1\nfunctionSet,myfunc\n0\n0,1.000000\n1,")
        with pytest.raises(ValueError, match="myfunc"):
            Chromosome.load(str(path))

    def test_malformed_header_rejected(self, tmp_path):
        path = tmp_path / "bad.chromo"
        path.write_text("numNodes,1\nnumInputs,1\nnumOutputs,1\narity,1\nfunctionSet,add\n0\n0,1.000000\n1,")
        with pytest.raises(ValueError, match="Malformed"):
            Chromosome.load(str(path))


# ============================================================================
# Test Visualization and Printing
# ============================================================================

class TestVisualization:
    """Test to_dot, save_dot, visualize and __str__."""

    def test_to_dot(self, chain):
        source = chain.to_dot().source
        assert "NeuralNetwork" in source
        assert "rankdir=LR" in source
        assert "(0) Input" in source
        assert "(2) add" in source
        assert "(3) mul" in source
        assert "Output 0" in source
        assert "lightgrey" in source
        assert "0.50" in source

    def test_to_dot_without_weights(self, chain):
        source = chain.to_dot(weights=False).source
        assert " (1)" in source
        assert "0.50" not in source

    def test_save_dot(self, chain, tmp_path):
        path = tmp_path / "chain.dot"
        chain.save_dot(str(path))
        assert "NeuralNetwork" in path.read_text()

    def test_visualize_without_view(self, chain):
        dot = chain.visualize(view=False)
        assert dot.name == "NeuralNetwork"

    def test_str(self, chain):
        text = str(chain)
        assert "(0):\tinput" in text
        assert "(2):\tadd" in text
        assert "*" in text
        assert "outputs: 3" in text
