"""
Differential Evolution Module

This module refines the connection weights of a chromosome with Differential
Evolution (DE/rand/1/bin), keeping its topology frozen.

Each individual owns a clone of the seed chromosome and a flattened weight
vector of length num_nodes * arity. The vector is written into the clone
before every fitness evaluation.

Classes:
    DEIndividual: A chromosome clone and its weight vector
    DEOptimizer:  Population-based weight refinement

Functions:
    best_de_chromosome: Pick the best chromosome of a refined population
"""

import numpy as np
from typing import TYPE_CHECKING

from cgpde.genotype.node     import random_weight
from cgpde.pool.population   import evaluate_chromosomes

if TYPE_CHECKING:
    from cgpde.data.dataset import DataSet
    from cgpde.genotype     import Chromosome
    from cgpde.run.config   import Config

MIN_POPULATION_SIZE = 4

class DEIndividual:
    """
    A member of the DE population.

    Public Attributes:
        chromosome: An independent clone of the seed chromosome
        weights:    Flattened weight vector

    Public Methods:
        synchronize(): Write the weight vector into the chromosome
    """

    def __init__(self, chromosome: 'Chromosome', weights: np.ndarray | None = None):
        self.chromosome: 'Chromosome' = chromosome.clone()
        self.weights   : np.ndarray   = self.chromosome.weights_vector() if weights is None \
                                        else np.array(weights, dtype=float)
        self.synchronize()

    def synchronize(self) -> None:
        self.chromosome.set_weights_vector(self.weights)

    @property
    def fitness(self) -> float:
        return self.chromosome.fitness

    def __repr__(self):
        return f"DEIndividual(fitness={self.fitness}, num_weights={len(self.weights)})"

class DEOptimizer:
    """
    Differential Evolution over the weights of a fixed topology.

    Public Attributes:
        population: The DE individuals of the last run

    Public Methods:
        initialise_population(chromosome, data, rng): Create and evaluate the initial population
        trial_vector(i, rng):                         Build the trial vector for target 'i'
        run(chromosome, data, rng):                   Refine the weights and return the population
    """

    def __init__(self, config: 'Config', population_size: int, max_iterations: int):
        """
        Parameters:
            config:          Stores configuration parameters (CR, F, weight_range, ...)
            population_size: Number of DE individuals (NP), at least 4
            max_iterations:  Number of sweeps over the population
        """
        if population_size < MIN_POPULATION_SIZE:
            raise ValueError(f"DE population size must be at least {MIN_POPULATION_SIZE}, "
                             f"got {population_size}")
        if max_iterations < 0:
            raise ValueError(f"Invalid number of DE iterations: {max_iterations}")

        self._config        : 'Config' = config
        self.population_size: int      = population_size
        self.max_iterations : int      = max_iterations
        self.population     : list[DEIndividual] = []

    def initialise_population(self, chromosome: 'Chromosome', data: 'DataSet',
                              rng: np.random.Generator) -> list[DEIndividual]:
        """
        Individual 0 keeps the weights of 'chromosome'; the others get weights
        drawn uniformly from [-weight_range, weight_range]. All are evaluated.
        """
        weight_range = self._config.weight_range

        self.population = [DEIndividual(chromosome)]
        for _ in range(1, self.population_size):
            weights = [random_weight(weight_range, rng) for _ in range(chromosome.num_weights)]
            self.population.append(DEIndividual(chromosome, weights))

        evaluate_chromosomes(self._config, [ind.chromosome for ind in self.population], data)
        return self.population

    def _draw_donors(self, i: int, rng: np.random.Generator) -> tuple[int, int, int]:
        NP = self.population_size

        r1 = int(rng.integers(NP))
        while r1 == i:
            r1 = int(rng.integers(NP))

        r2 = int(rng.integers(NP))
        while r2 in (i, r1):
            r2 = int(rng.integers(NP))

        r3 = int(rng.integers(NP))
        while r3 in (i, r1, r2):
            r3 = int(rng.integers(NP))

        return r1, r2, r3

    def trial_vector(self, i: int, rng: np.random.Generator) -> np.ndarray:
        """
        Build the trial vector for target 'i' (rand/1/bin).

        Coordinate j is taken from the mutant w[r3] + F * (w[r1] - w[r2]) when
        a uniform draw falls below CR, or when j is the forced coordinate jr;
        otherwise it is copied from the target.
        """
        r1, r2, r3  = self._draw_donors(i, rng)
        num_weights = len(self.population[i].weights)
        jr          = int(rng.integers(num_weights))

        target = self.population[i].weights
        mutant = self.population[r3].weights + \
                 self._config.F * (self.population[r1].weights - self.population[r2].weights)

        crossover     = rng.random(num_weights) < self._config.CR
        crossover[jr] = True
        return np.where(crossover, mutant, target)

    def run(self, chromosome: 'Chromosome', data: 'DataSet', rng: np.random.Generator) -> list['Chromosome']:
        """
        Refine the weights of 'chromosome' on the given data.

        A trial replaces its target when its fitness is lower than or equal to
        the target's. Replacement happens immediately, so later targets in the
        same sweep already draw donors from the updated population.

        Parameters:
            chromosome: The seed chromosome; it is not modified
            data:       Training data
            rng:        Random number generator

        Returns:
            The chromosomes of the refined population, in population order
        """
        self.initialise_population(chromosome, data, rng)

        # nothing to optimise without weights
        if chromosome.num_weights == 0:
            return [ind.chromosome for ind in self.population]

        trial = DEIndividual(chromosome)

        for _ in range(self.max_iterations):
            for i, target in enumerate(self.population):
                trial.weights = self.trial_vector(i, rng)
                trial.synchronize()
                trial.chromosome.set_fitness(self._config, data)

                if trial.chromosome.fitness <= target.chromosome.fitness:
                    target.chromosome.copy_from(trial.chromosome)
                    target.weights = trial.weights.copy()

        return [ind.chromosome for ind in self.population]

def best_de_chromosome(chromosomes: list['Chromosome'], validation: bool = False) -> 'Chromosome':
    """
    Return a clone of the best chromosome of a DE population.
    The first chromosome wins ties.

    Parameters:
        chromosomes: The DE population
        validation:  Rank by validation fitness instead of training fitness
    """
    if not chromosomes:
        raise ValueError("Cannot pick the best chromosome of an empty population")

    best = chromosomes[0]
    for chromosome in chromosomes[1:]:
        if validation:
            if chromosome.fitness_validation < best.fitness_validation:
                best = chromosome
        elif chromosome.fitness < best.fitness:
            best = chromosome
    return best.clone()
