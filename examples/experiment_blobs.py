"""
Gaussian Blobs Classification with CGPANN and CGPDE

This module implements a small synthetic classification problem used to
compare the three run modes without any data file.

The Problem:
    Three classes of points in the plane, each drawn from an isotropic
    Gaussian centred on a vertex of a triangle. Each sample has two inputs
    (the coordinates) and three one-hot outputs (the class).

Fitness Function:
    Fitness = -(correctly classified samples / samples)

    The predicted class is the output with the largest value. A perfect
    classifier has fitness -1.

Functions:
    make_blobs: Generate the data set
    run_single: Run the three modes once, on one training / validation / testing split
    run_experiment: Repeated stratified cross-validation of the three modes

Usage:
    python examples/experiment_blobs.py
"""

import numpy as np
from pathlib import Path

from cgpde.data       import DataSet
from cgpde.run        import Config, Experiment, HybridizationController

CENTRES = np.array([[ 0.0,  1.0],
                    [-1.0, -0.6],
                    [ 1.0, -0.6]])

def make_blobs(num_per_class: int, rng: np.random.Generator, spread: float = 0.4) -> DataSet:
    """
    Generate 'num_per_class' samples around each of the three centres.
    """
    inputs, outputs = [], []
    for c, centre in enumerate(CENTRES):
        inputs.append(centre + spread * rng.standard_normal((num_per_class, 2)))
        target = np.zeros((num_per_class, len(CENTRES)))
        target[:, c] = 1.0
        outputs.append(target)
    return DataSet(np.concatenate(inputs), np.concatenate(outputs))

def run_single(config: Config, seed: int = 0):
    rng  = np.random.default_rng(seed)
    data = make_blobs(40, rng).shuffled(rng)

    folds = data.generate_folds(10)
    training_index, validation_index = DataSet.split_indices(0, rng)
    training   = DataSet.concatenate([folds[k] for k in training_index])
    validation = DataSet.concatenate([folds[k] for k in validation_index])
    testing    = folds[0]

    controller = HybridizationController(config, training, validation)

    chosen = {"CGPANN"   : controller.run_cgpann(rng),
              "CGPDE-IN" : controller.run_cgpde_in(rng, 20)}
    population = controller.run_cgpde_out(rng)
    chosen["CGPDE-OUT-T"] = controller.pick_out_t(population)
    chosen["CGPDE-OUT-V"] = controller.pick_out_v(population)

    for name, chromosome in chosen.items():
        accuracy = -chromosome.evaluate(config, testing)
        print(f"{name:12s} test accuracy {accuracy:.4f}, active nodes {chromosome.num_active_nodes}")

def run_experiment(config: Config, num_jobs: int = 1):
    data = make_blobs(40, np.random.default_rng(1))
    experiment = Experiment(config, data,
                            generations={'cgpann': 200, 'cgpde_in': 20, 'cgpde_out': 200},
                            num_repetitions=1)
    experiment.run(num_jobs=num_jobs, num_jobs_fitness=1)

if __name__ == '__main__':
    config = Config(str(Path(__file__).parent / "configs" / "config_blobs.ini"))
    print(config)
    run_single(config)
    run_experiment(config, num_jobs=-1)
