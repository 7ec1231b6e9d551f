"""
CGP / DE Hybridization Module

This module composes the CGP evolution loop and the Differential Evolution
weight optimizer into the three run modes:

    CGPANN:    the evolution loop alone; mutation changes structure and weights
    CGPDE-IN:  every generation, the best child has its weights refined by a
               small DE run before selection; mutation changes structure only
    CGPDE-OUT: the evolution loop runs to completion, then the weights of the
               best chromosome are refined by one large DE run; the whole DE
               population is returned and the final pick is left to the caller
               (OUT-T: best by training fitness, OUT-V: best by validation fitness)

Classes:
    CGPDEInLoop:              Evolution loop with DE refinement of the best child
    HybridizationController:  Entry point for the three run modes
"""

import numpy as np
from typing import TYPE_CHECKING

from cgpde.optimization  import DEOptimizer, best_de_chromosome
from cgpde.pool          import evaluate_chromosomes
from cgpde.run.evolution_loop import EvolutionLoop, check_data

if TYPE_CHECKING:
    from cgpde.data.dataset import DataSet
    from cgpde.genotype     import Chromosome
    from cgpde.run.config   import Config

class CGPDEInLoop(EvolutionLoop):
    """
    Evolution loop of CGPDE-IN.

    Children are evaluated on the training data only. The best child (lowest
    training fitness, first one on ties) is replaced by the best member of a
    DE population grown from it, which is then scored on the validation data
    and compared against the best chromosome so far. Mutation never changes
    the weights, which are left to DE.
    """

    def __init__(self,
                 config         : 'Config',
                 training_data  : 'DataSet',
                 validation_data: 'DataSet',
                 rng            : np.random.Generator,
                 suppress_output: bool = False):
        super().__init__(config, training_data, validation_data, rng,
                         weight_mutation=False, suppress_output=suppress_output)
        self._optimizer = DEOptimizer(config, config.NP_IN, config.max_iter_IN)

    def _evaluate_parents(self):
        evaluate_chromosomes(self._config, self.population.parents, self._training_data)

    def _evaluate_generation(self):
        children = self.population.children
        evaluate_chromosomes(self._config, children, self._training_data)
        for child in children:
            child.generation = self.generation_counter

        index, fittest = self.population.get_fittest('children')

        refined = self._optimizer.run(fittest, self._training_data, self._rng)
        refined = best_de_chromosome(refined)
        refined.set_fitness_validation(self._config, self._validation_data)
        refined.generation = self.generation_counter
        children[index].copy_from(refined)

        if refined.fitness_validation <= self.best.fitness_validation:
            self.best.copy_from(refined)

class HybridizationController:
    """
    Runs CGPANN, CGPDE-IN and CGPDE-OUT on the same data.

    Public Methods:
        run_cgpann(num_generations):   Best chromosome of a plain CGPANN run
        run_cgpde_in(num_generations): Best chromosome of a CGPDE-IN run
        run_cgpde_out(num_generations): DE population of a CGPDE-OUT run
        pick_out_t(population):        OUT-T pick (best by training fitness)
        pick_out_v(population):        OUT-V pick (best by validation fitness)
    """

    def __init__(self,
                 config         : 'Config',
                 training_data  : 'DataSet',
                 validation_data: 'DataSet',
                 suppress_output: bool = True):
        """
        Parameters:
            config:          Configuration parameters
            training_data:   Data used to compute the fitness driving evolution and DE
            validation_data: Data used to pick the returned chromosomes
            suppress_output: If True, suppress progress and final reports
        """
        check_data(config, training_data, validation_data)

        self._config          = config
        self._training_data   = training_data
        self._validation_data = validation_data
        self._suppress_output = suppress_output

    def run_cgpann(self, rng: np.random.Generator, num_generations: int | None = None) -> 'Chromosome':
        loop = EvolutionLoop(self._config, self._training_data, self._validation_data, rng,
                             weight_mutation=True, suppress_output=self._suppress_output)
        return loop.run(num_generations)

    def run_cgpde_in(self, rng: np.random.Generator, num_generations: int | None = None) -> 'Chromosome':
        loop = CGPDEInLoop(self._config, self._training_data, self._validation_data, rng,
                           suppress_output=self._suppress_output)
        return loop.run(num_generations)

    def run_cgpde_out(self, rng: np.random.Generator, num_generations: int | None = None) -> list['Chromosome']:
        """
        Run the evolution loop, then refine the weights of its best chromosome with DE.

        Returns:
            The whole refined DE population (NP_OUT chromosomes)
        """
        loop = EvolutionLoop(self._config, self._training_data, self._validation_data, rng,
                             weight_mutation=True, suppress_output=self._suppress_output)
        best = loop.run(num_generations)

        optimizer = DEOptimizer(self._config, self._config.NP_OUT, self._config.max_iter_OUT)
        return optimizer.run(best, self._training_data, rng)

    def pick_out_t(self, population: list['Chromosome']) -> 'Chromosome':
        return best_de_chromosome(population)

    def pick_out_v(self, population: list['Chromosome']) -> 'Chromosome':
        """
        Score every chromosome of the DE population on the validation data,
        and return a copy of the best one.
        """
        evaluate_chromosomes(self._config, population, self._validation_data, validation=True)
        return best_de_chromosome(population, validation=True)
