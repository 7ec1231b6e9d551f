"""
CGP Population Module

This module implements the Population class, which holds the parents and
children of a (mu + lambda) or (mu, lambda) evolution strategy, together with
the parallel fitness evaluation used by every run mode.

Classes:
    Population: Parents, children and the candidate pool used for selection

Functions:
    evaluate_chromosomes: Compute and store the fitness of many chromosomes
"""

import numpy as np
from joblib import Parallel, delayed
from typing import Callable, TYPE_CHECKING

from cgpde.genotype import Chromosome

if TYPE_CHECKING:
    from cgpde.data.dataset import DataSet
    from cgpde.run.config   import Config

STRATEGIES = ('+', ',')

def _evaluate(fitness_function: Callable,
              config          : 'Config',
              chromosome      : Chromosome,
              data            : 'DataSet') -> tuple[float, dict]:
    """
    Worker task: the fitness of a chromosome copy, and the state its
    random generator was left in by stochastic node functions.
    """
    fitness = chromosome.evaluate(config, data, fitness_function)
    return fitness, chromosome.rng.bit_generator.state

def evaluate_chromosomes(config     : 'Config',
                         chromosomes: list[Chromosome],
                         data       : 'DataSet',
                         validation : bool = False,
                         num_jobs   : int | None = None) -> None:
    """
    Evaluate the fitness of every chromosome and store it.

    Evaluations are independent; with more than one job each worker receives
    its own copy of the chromosome, and the results are gathered before this
    function returns. The fitness function is resolved here and sent to the
    workers, so functions registered at run time are available to them. The
    random generator state reached by each worker copy is stored back, so a
    parallel run draws the same numbers as a serial one.

    Parameters:
        config:      Stores configuration parameters
        chromosomes: The chromosomes to evaluate
        data:        The data to evaluate them on
        validation:  Store the result as validation fitness instead of training fitness
        num_jobs:    Number of parallel processes (defaults to 'config.num_threads')
                      1 = serial (no parallelization)
                     -1 = use all available CPU cores
                     >1 = use specified number of processes
    """
    num_jobs         = config.num_threads if num_jobs is None else num_jobs
    serialize        = num_jobs == 1 or len(chromosomes) < 2
    fitness_function = config.get_fitness_function()

    # Resolve active nodes in this process, so workers and
    # the returned chromosomes agree on what was evaluated
    for chromosome in chromosomes:
        chromosome.resolve_active_nodes()

    if serialize:
        fitness_all = [chromosome.evaluate(config, data, fitness_function) for chromosome in chromosomes]
    else:
        outcomes = Parallel(num_jobs)(delayed(_evaluate)(fitness_function, config, c, data)
                                      for c in chromosomes)
        fitness_all = []
        for chromosome, (fitness, rng_state) in zip(chromosomes, outcomes):
            chromosome.rng.bit_generator.state = rng_state
            fitness_all.append(fitness)

    for chromosome, fitness in zip(chromosomes, fitness_all):
        if validation:
            chromosome.fitness_validation = fitness
        else:
            chromosome.fitness = fitness

class Population:
    """
    The parents and children of a CGP evolution strategy.

    Public Attributes:
        parents:  The 'mu' parent chromosomes
        children: The 'lambda' children chromosomes

    Public Methods:
        candidate_pool():     Chromosomes competing to become the next parents
        select():             Apply the configured selection scheme
        reproduce(rng, ...):  Apply the configured reproduction scheme
        update_best(best):    Overwrite 'best' with a better chromosome, by validation fitness
        get_fittest(...):     Best child or parent by training fitness
    """

    def __init__(self, config: 'Config', rng: np.random.Generator):
        """
        Create 'mu' random parents and 'lambda' random children.

        Parameters:
            config: Stores configuration parameters
            rng:    Random number generator
        """
        if config.strategy not in STRATEGIES:
            raise ValueError(f"Unknown evolutionary strategy '{config.strategy}'")
        if config.strategy == ',' and config.lambda_ < config.mu:
            raise ValueError(f"Strategy ',' needs lambda >= mu, got mu={config.mu} and lambda={config.lambda_}")

        self._config = config

        self.parents : list[Chromosome] = [Chromosome(config, rng) for _ in range(config.mu)]
        self.children: list[Chromosome] = [Chromosome(config, rng) for _ in range(config.lambda_)]

        # Slots for the candidate pool, overwritten in place every generation
        num_candidates = config.mu + config.lambda_ if config.strategy == '+' else config.lambda_
        self._candidates: list[Chromosome] = [self.children[0].clone() for _ in range(num_candidates)]

    def candidate_pool(self) -> list[Chromosome]:
        """
        Copy the chromosomes competing for the next parent slots into the
        candidate pool: children followed by parents for '+', children only for ','.
        Children come first so that, on equal fitness, new blood is preferred.
        """
        competitors = self.children + self.parents if self._config.strategy == '+' else self.children
        for slot, chromosome in zip(self._candidates, competitors):
            slot.copy_from(chromosome)
        return self._candidates

    def select(self) -> None:
        self._config.get_selection_scheme()(self._config, self.parents, self.candidate_pool())

    def reproduce(self, rng: np.random.Generator, weight_mutation: bool = True) -> None:
        self._config.get_reproduction_scheme()(self._config, self.parents, self.children, rng, weight_mutation)

    def update_best(self, best: Chromosome) -> bool:
        """
        Overwrite 'best' with the chromosome of lowest validation fitness,
        if any parent or child is at least as good.

        Parents are scanned before children, and ties go to the later
        chromosome, so a child is preferred over an equally good parent.

        Returns:
            True if 'best' was overwritten
        """
        best_so_far = best
        for chromosome in self.parents + self.children:
            if chromosome.fitness_validation <= best_so_far.fitness_validation:
                best_so_far = chromosome

        if best_so_far is best:
            return False
        best.copy_from(best_so_far)
        return True

    def get_fittest(self, among: str = 'children') -> tuple[int, Chromosome]:
        """
        Return the chromosome with the lowest training fitness; the first one wins ties.

        Parameters:
            among: 'children' or 'parents'

        Returns:
            The index of the chromosome and the chromosome itself
        """
        chromosomes = self.children if among == 'children' else self.parents
        index = min(range(len(chromosomes)), key=lambda i: chromosomes[i].fitness)
        return index, chromosomes[index]

    def __str__(self):
        lines  = [f"Parent {i}: fitness={c.fitness:.6f}" for i, c in enumerate(self.parents)]
        lines += [f"Child {i}: fitness={c.fitness:.6f}" for i, c in enumerate(self.children)]
        return '\n'.join(lines)
