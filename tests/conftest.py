"""Pytest configuration and shared fixtures."""

import pytest
import sys
import numpy as np
from pathlib import Path

# Add the source directory to the Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


@pytest.fixture
def rng():
    """Provide a seeded random generator."""
    return np.random.default_rng(42)


@pytest.fixture
def small_config():
    """Provide a small configuration: 2 inputs, 10 nodes, 1 output, arity 2."""
    from cgpde.run.config import Config

    config = Config()
    config.num_inputs   = 2
    config.num_nodes    = 10
    config.num_outputs  = 1
    config.arity        = 2
    config.function_set = "add,sub,mul,sig"
    return config


@pytest.fixture
def classification_config():
    """Provide a small classification configuration: 2 inputs, 3 classes."""
    from cgpde.run.config import Config

    config = Config()
    config.num_inputs       = 2
    config.num_nodes        = 15
    config.num_outputs      = 3
    config.arity            = 3
    config.function_set     = "sig,tanh"
    config.weight_range     = 5.0
    config.fitness_function = 'classification_accuracy'
    config.NP_IN            = 4
    config.max_iter_IN      = 2
    config.NP_OUT           = 4
    config.max_iter_OUT     = 3
    config.num_generations  = 5
    return config


@pytest.fixture
def classification_data():
    """Provide 30 samples in three well separated classes (10 per class)."""
    from cgpde.data import DataSet

    generator = np.random.default_rng(0)
    centres   = np.array([[0.0, 2.0], [-2.0, -1.0], [2.0, -1.0]])

    inputs, outputs = [], []
    for c, centre in enumerate(centres):
        for _ in range(10):
            inputs.append(centre + 0.3 * generator.standard_normal(2))
            target = [0.0, 0.0, 0.0]
            target[c] = 1.0
            outputs.append(target)
    return DataSet(inputs, outputs)
