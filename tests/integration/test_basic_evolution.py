"""
Integration tests for the CGPANN and CGPDE run modes.

These tests run the complete modes on a small synthetic classification
problem (three Gaussian blobs) with reduced budgets. They check that the
pieces fit together and that the guarantees of each mode hold end-to-end.
"""

import pytest
import numpy as np

from cgpde.genotype import Chromosome
from cgpde.optimization import DEOptimizer, best_de_chromosome
from cgpde.run import EvolutionLoop, HybridizationController, Experiment
from cgpde.run.experiment import MODES


# ============================================================================
# Test CGPANN
# ============================================================================

class TestCGPANN:
    """Test the plain CGPANN evolution loop end-to-end."""

    def test_evolution_does_not_lose_the_initial_best(self, blobs_config, blobs_split):
        training, validation, _ = blobs_split

        initial = EvolutionLoop(blobs_config, training, validation, np.random.default_rng(1)).run(0)
        evolved = EvolutionLoop(blobs_config, training, validation, np.random.default_rng(1)).run(30)

        assert evolved.fitness_validation <= initial.fitness_validation

    def test_evolved_best_is_a_working_classifier(self, blobs_config, blobs_split, rng):
        training, validation, testing = blobs_split
        best = EvolutionLoop(blobs_config, training, validation, rng).run(30)

        best.set_fitness(blobs_config, testing)
        assert -1.0 <= best.fitness <= 0.0
        assert best.num_active_nodes <= blobs_config.num_nodes

    def test_save_and_load_evolved_best(self, blobs_config, blobs_split, rng, tmp_path):
        training, validation, _ = blobs_split
        best = EvolutionLoop(blobs_config, training, validation, rng).run(10)

        path = tmp_path / "best.chromo"
        best.save(str(path))
        loaded = Chromosome.load(str(path))

        assert loaded.compare(best)
        np.testing.assert_allclose(loaded.weights_vector(), best.weights_vector(), atol=1e-6)
        assert loaded.active_nodes == best.active_nodes


# ============================================================================
# Test CGPDE
# ============================================================================

class TestCGPDE:
    """Test the hybrid modes end-to-end."""

    def test_de_does_not_worsen_training_fitness(self, blobs_config, blobs_split, rng):
        training, validation, _ = blobs_split
        seed = EvolutionLoop(blobs_config, training, validation, rng).run(10)
        seed_fitness = seed.clone().evaluate(blobs_config, training)

        refined = DEOptimizer(blobs_config, 8, 15).run(seed, training, rng)

        assert best_de_chromosome(refined).fitness <= seed_fitness

    def test_all_modes(self, blobs_config, blobs_split, rng):
        blobs_config.max_iter_OUT = 20
        training, validation, testing = blobs_split
        controller = HybridizationController(blobs_config, training, validation)

        cgpann     = controller.run_cgpann(rng, 10)
        cgpde_in   = controller.run_cgpde_in(rng, 3)
        population = controller.run_cgpde_out(rng, 10)
        out_t      = controller.pick_out_t(population)
        out_v      = controller.pick_out_v(population)

        assert len(population) == blobs_config.NP_OUT
        assert out_t.compare(out_v)
        for chromosome in (cgpann, cgpde_in, out_t, out_v):
            chromosome.set_fitness(blobs_config, testing)
            assert -1.0 <= chromosome.fitness <= 0.0

    def test_out_t_has_the_lowest_training_fitness(self, blobs_config, blobs_split, rng):
        blobs_config.max_iter_OUT = 10
        training, validation, _ = blobs_split
        controller = HybridizationController(blobs_config, training, validation)

        population = controller.run_cgpde_out(rng, 5)
        out_v = controller.pick_out_v(population)
        out_t = controller.pick_out_t(population)

        assert out_t.fitness <= out_v.fitness
        assert out_v.fitness_validation <= out_t.fitness_validation


# ============================================================================
# Test Experiment
# ============================================================================

class TestExperimentEndToEnd:
    """Test a complete (if short) cross-validated experiment."""

    def test_experiment(self, blobs_config, blobs_data, tmp_path):
        blobs_config.max_iter_IN  = 2
        blobs_config.max_iter_OUT = 5

        experiment = Experiment(blobs_config, blobs_data,
                                {'cgpann': 5, 'cgpde_in': 2, 'cgpde_out': 5},
                                num_repetitions=1, output_dir=str(tmp_path), suppress_output=True)
        experiment.run()

        for mode in MODES:
            assert len(experiment.scores[mode]) == 10
            assert (tmp_path / f"{mode}.txt").exists()
            assert 0.0 <= experiment.results[mode].average_active_nodes() <= blobs_config.num_nodes
