"""
CGP Experiment Module

This module runs the cross-validated comparison of the three run modes
(CGPANN, CGPDE-IN, CGPDE-OUT in its T and V variants) on a classification
data set, with built-in support for CPU-based parallelization using joblib.

An experiment repeats a stratified k-fold cross-validation several times.
Each repetition shuffles the data and builds the folds; each fold in turn is
the testing set, while the remaining folds are randomly split into training
and validation sets. Every (repetition, fold) pair is an independent unit
of work with its own random seed.
"""

import os
import numpy as np
from joblib import Parallel, delayed
from sys    import stdout
from typing import Callable

from cgpde.data.dataset  import DataSet
from cgpde.run.config    import Config
from cgpde.run.fitness   import register_fitness_function
from cgpde.run.hybrid    import HybridizationController
from cgpde.run.results   import Results

MODES = ('cgpann', 'cgpde_in', 'cgpde_out_t', 'cgpde_out_v')

MODE_LABELS = {
    'cgpann'     : 'CGPANN\t',
    'cgpde_in'   : 'CGPDE-IN',
    'cgpde_out_t': 'CGPDE-OUT-T',
    'cgpde_out_v': 'CGPDE-OUT-V',
}

class Experiment:
    """
    Repeated stratified cross-validation of the CGPANN and CGPDE run modes.

    The score of a mode on a fold is the negated fitness of its chosen
    chromosome on the testing set (for the accuracy fitness function, this
    is the test accuracy).

    Public Attributes:
        scores:  For every mode, a list of (repetition, fold, score) tuples
        results: For every mode, a Results object holding the chosen chromosomes,
                 with their fitness measured on the testing set

    Public Methods:
        run(num_jobs=1, num_jobs_fitness=None): Execute the complete experiment

    Parallelization:
        Supports two levels of parallelization:

        Fold-level parallelization (num_jobs):
            1:  Serial execution of the (repetition, fold) units
           >1:  Use specified number of parallel processes
           -1:  Use all available CPU cores

        Fitness-level parallelization within each fold (num_jobs_fitness):
            None: Keep 'config.num_threads'
            1:    Serial fitness evaluation (recommended when num_jobs > 1)
    """

    def __init__(self,
                 config         : Config,
                 dataset        : DataSet,
                 generations    : dict[str, int],
                 num_repetitions: int = 3,
                 num_folds      : int = 10,
                 num_training   : int = 7,
                 num_validation : int = 2,
                 percentage     : float = 1.0,
                 seed           : int = 50,
                 output_dir     : str | None = None,
                 suppress_output: bool = False):
        """
        Parameters:
            config:          Configuration parameters
            dataset:         The full classification data set
            generations:     Generation budget per run mode, with keys
                             'cgpann', 'cgpde_in' and 'cgpde_out'
            num_repetitions: Number of independent cross-validations
            num_folds:       Number of folds per cross-validation
            num_training:    Number of folds forming the training set
            num_validation:  Number of folds forming the validation set
            percentage:      Fraction of the data set to use (stratified); 1 uses all of it
            seed:            Base seed; repetition r shuffles the data with seed + r,
                             and the folds draw from spawned seed sequences
            output_dir:      If given, the per-fold data sets and per-mode
                             result files are written there
            suppress_output: If True, suppress the progress and final reports
        """
        for key in ('cgpann', 'cgpde_in', 'cgpde_out'):
            if key not in generations:
                raise ValueError(f"Missing generation budget for '{key}'")

        self._config          : Config         = config
        self._dataset         : DataSet        = dataset
        self._generations     : dict[str, int] = dict(generations)
        self._num_repetitions : int            = num_repetitions
        self._num_folds       : int            = num_folds
        self._num_training    : int            = num_training
        self._num_validation  : int            = num_validation
        self._percentage      : float          = percentage
        self._seed            : int            = seed
        self._output_dir      : str | None     = output_dir
        self._suppress_output : bool           = suppress_output

        self.scores : dict[str, list[tuple[int, int, float]]] = {}
        self.results: dict[str, Results]                      = {}

    def _reset(self):
        self.scores  = {mode: [] for mode in MODES}
        self.results = {mode: Results() for mode in MODES}

    def run(self, num_jobs: int = 1, num_jobs_fitness: int | None = None):
        """
        Run the experiment.

        Parameters:
            num_jobs:         Number of parallel processes for the (repetition, fold) units
                               1 = serial execution (default)
                              -1 = use all available CPU cores
                              >1 = use specified number of processes
            num_jobs_fitness: Number of parallel processes for fitness evaluation within
                              each unit; None keeps 'config.num_threads'
        """
        self._reset()

        config = self._config
        if num_jobs_fitness is not None:
            config = config.copy()
            config.num_threads = num_jobs_fitness

        # one independent seed sequence per (repetition, fold)
        seeds = np.random.SeedSequence(self._seed).spawn(self._num_repetitions * self._num_folds)

        units = []
        for rep in range(self._num_repetitions):
            data  = self._dataset.shuffled(np.random.default_rng(self._seed + rep))
            data  = data.reduce_sample_size(self._percentage)
            folds = data.generate_folds(self._num_folds)
            for j in range(self._num_folds):
                units.append((rep, j, folds, seeds[rep * self._num_folds + j]))

        if not self._suppress_output:
            print("TYPE\t\ti\tj\tFIT\n")

        # workers receive the callable, since their registry lacks run-time registrations
        fitness_function = config.get_fitness_function()

        serialize = num_jobs == 1
        if serialize:
            results = [self._run_fold(config, fitness_function, *unit) for unit in units]
        else:
            results = Parallel(num_jobs)(delayed(self._run_fold)(config, fitness_function, *unit)
                                         for unit in units)

        for r in results:
            self._analyze_fold_results(r)

        if self._output_dir is not None:
            self._save_scores()

        if not self._suppress_output:
            self._final_report()

    def _run_fold(self, config: Config, fitness_function: Callable, rep: int, j: int,
                  folds: list[DataSet], seed: np.random.SeedSequence) -> dict:
        """
        Run the three modes on one fold.

        Returns:
            The repetition and fold numbers, and for every mode the chosen
            chromosome with its fitness set on the testing data
        """
        register_fitness_function(config.fitness_function, fitness_function)
        rng = np.random.default_rng(seed)

        training_index, validation_index = DataSet.split_indices(j, rng,
                                                                 self._num_folds,
                                                                 self._num_training,
                                                                 self._num_validation)
        training_data   = DataSet.concatenate([folds[k] for k in training_index])
        validation_data = DataSet.concatenate([folds[k] for k in validation_index])
        testing_data    = folds[j]

        if self._output_dir is not None:
            self._save_fold_data(rep, j, training_data, validation_data, testing_data)

        controller = HybridizationController(config, training_data, validation_data)

        chosen = {}
        chosen['cgpann']   = controller.run_cgpann(rng, self._generations['cgpann'])
        chosen['cgpde_in'] = controller.run_cgpde_in(rng, self._generations['cgpde_in'])

        population = controller.run_cgpde_out(rng, self._generations['cgpde_out'])
        chosen['cgpde_out_t'] = controller.pick_out_t(population)
        chosen['cgpde_out_v'] = controller.pick_out_v(population)

        for chromosome in chosen.values():
            chromosome.set_fitness(config, testing_data)

        return {"repetition": rep, "fold": j, "chromosomes": chosen}

    def _analyze_fold_results(self, results: dict):
        rep, j = results["repetition"], results["fold"]
        for mode in MODES:
            chromosome = results["chromosomes"][mode]
            score      = -chromosome.fitness
            self.scores[mode].append((rep, j, score))
            self.results[mode].add(chromosome)
            if not self._suppress_output:
                print(f"{MODE_LABELS[mode]}\t{rep}\t{j}\t{score:.4f}")

    def _save_fold_data(self, rep: int, j: int, training: DataSet, validation: DataSet, testing: DataSet):
        for prefix, data in (('TRN', training), ('VLD', validation), ('TST', testing)):
            directory = os.path.join(self._output_dir, prefix)
            os.makedirs(directory, exist_ok=True)
            data.save(os.path.join(directory, f"{prefix}_{rep}_{j}.txt"))

    def _save_scores(self):
        os.makedirs(self._output_dir, exist_ok=True)
        for mode in MODES:
            with open(os.path.join(self._output_dir, f"{mode}.txt"), 'w') as f:
                f.write("i,\tj,\taccuracy\n")
                for rep, j, score in self.scores[mode]:
                    f.write(f"{rep},\t{j},\t{score:.4f}\n")

    def _final_report(self):
        """
        Produce the final report: the mean score and the mean size of the
        chosen chromosomes, for every mode.
        """
        stdout.write('\n')
        for mode in MODES:
            scores = [score for _, _, score in self.scores[mode]]
            print(f"{MODE_LABELS[mode]}\tmean score: {np.mean(scores):.4f}  "
                  f"(std {np.std(scores):.4f}), "
                  f"mean active nodes: {self.results[mode].average_active_nodes():.1f}")
