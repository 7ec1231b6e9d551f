"""
Shared fixtures for integration tests.
"""

import pytest
import numpy as np
from pathlib import Path

from cgpde.data import DataSet
from cgpde.run.config import Config

EXAMPLES_DIR = Path(__file__).parent.parent.parent / "examples"


@pytest.fixture
def blobs_config():
    """The example configuration of the Gaussian blobs problem."""
    return Config(str(EXAMPLES_DIR / "configs" / "config_blobs.ini"))


@pytest.fixture
def blobs_data():
    """90 samples: three Gaussian blobs of 30 points, one per class."""
    generator = np.random.default_rng(123)
    centres   = np.array([[0.0, 1.0], [-1.0, -0.6], [1.0, -0.6]])

    inputs, outputs = [], []
    for c, centre in enumerate(centres):
        inputs.append(centre + 0.3 * generator.standard_normal((30, 2)))
        target = np.zeros((30, 3))
        target[:, c] = 1.0
        outputs.append(target)
    return DataSet(np.concatenate(inputs), np.concatenate(outputs))


@pytest.fixture
def blobs_split(blobs_data):
    """Stratified training, validation and testing sets (7, 2 and 1 folds)."""
    rng   = np.random.default_rng(0)
    folds = blobs_data.shuffled(rng).generate_folds(10)
    training_index, validation_index = DataSet.split_indices(0, rng)
    return (DataSet.concatenate([folds[k] for k in training_index]),
            DataSet.concatenate([folds[k] for k in validation_index]),
            folds[0])
