"""
CGP Evolution Loop Module

This module implements the generational loop of CGPANN: a (mu + lambda) or
(mu, lambda) evolution strategy over chromosomes, with fitness measured on
training data and the returned model chosen by validation fitness.

Within a generation, fitness evaluations are independent and may run in
parallel (joblib); selection, reproduction and best tracking then run
sequentially on the gathered results.
"""

import numpy as np
from sys    import stdout
from typing import TYPE_CHECKING

from cgpde.pool import Population, evaluate_chromosomes

if TYPE_CHECKING:
    from cgpde.data.dataset import DataSet
    from cgpde.genotype     import Chromosome
    from cgpde.run.config   import Config

def check_data(config: 'Config', *data_sets: 'DataSet') -> None:
    """
    Raise ValueError if a data set does not match the configured chromosome dimensions.
    """
    for data in data_sets:
        if data is None:
            continue
        if data.num_inputs != config.num_inputs:
            raise ValueError(f"The number of inputs specified in the data set ({data.num_inputs}) does not "
                             f"match the number of inputs specified in the configuration ({config.num_inputs})")
        if data.num_outputs != config.num_outputs:
            raise ValueError(f"The number of outputs specified in the data set ({data.num_outputs}) does not "
                             f"match the number of outputs specified in the configuration ({config.num_outputs})")

class EvolutionLoop:
    """
    One run of the CGP evolution strategy.

    Every generation the children are evaluated on the training and the
    validation data; the best chromosome seen so far, by validation fitness,
    is kept aside; then the next parents are selected and new children are
    produced from them.

    Subclasses can override:
    - _evaluate_parents(): Initial evaluation of the parents
    - _evaluate_generation(): Evaluation of the children and best tracking
    - _terminate(): Custom termination logic

    Public Attributes:
        best:               Best chromosome found, by validation fitness
        population:         The parents and children of the run
        generation_counter: Number of generations completed
        failed:             False if the run stopped because the target fitness was reached

    Public Methods:
        run(num_generations): Execute the run and return the best chromosome
    """

    def __init__(self,
                 config         : 'Config',
                 training_data  : 'DataSet',
                 validation_data: 'DataSet',
                 rng            : np.random.Generator,
                 weight_mutation: bool = True,
                 suppress_output: bool = False):
        """
        Parameters:
            config:          Configuration parameters
            training_data:   Data used to compute the fitness driving selection
            validation_data: Data used to pick the returned chromosome
            rng:             Random number generator
            weight_mutation: Whether mutation may change the connection weights
            suppress_output: If True, suppress progress and final reports
        """
        check_data(config, training_data, validation_data)

        self._config          : 'Config'            = config
        self._training_data   : 'DataSet'           = training_data
        self._validation_data : 'DataSet'           = validation_data
        self._rng             : np.random.Generator = rng
        self._weight_mutation : bool                = weight_mutation
        self._suppress_output : bool                = suppress_output

        self.population        : Population   = None
        self.best              : 'Chromosome' = None
        self.generation_counter: int          = 0
        self.failed            : bool         = True

    def run(self, num_generations: int | None = None) -> 'Chromosome':
        """
        Run the evolution strategy.

        Parameters:
            num_generations: Generation budget (defaults to 'config.num_generations')

        Returns:
            The best chromosome found, by validation fitness
        """
        num_generations = self._config.num_generations if num_generations is None else num_generations
        if num_generations < 0:
            raise ValueError(f"{num_generations} generations is invalid; the number of generations must be >= 0")
        self._num_generations = num_generations

        self.generation_counter = 0
        self.failed             = True

        # Create random parents and children
        self.population = Population(self._config, self._rng)

        # The best chromosome starts as a copy of the first parent
        self.best = self.population.parents[0].clone()
        self.best.set_fitness_validation(self._config, self._validation_data)

        self._evaluate_parents()

        # Evolution loop
        while not self._terminate():

            self._evaluate_generation()

            if self._report_due():
                self._report_progress()

            if self._target_reached():
                self.failed = False
                break

            # The next parents compete among the candidates; children are bred from them
            self.population.select()
            self.population.reproduce(self._rng, self._weight_mutation)

            self.generation_counter += 1

        if not self._suppress_output and self._config.report_interval > 0:
            self._final_report()

        return self.best

    def _evaluate_parents(self):
        evaluate_chromosomes(self._config, self.population.parents, self._training_data)
        evaluate_chromosomes(self._config, self.population.parents, self._validation_data, validation=True)

    def _evaluate_generation(self):
        children = self.population.children
        evaluate_chromosomes(self._config, children, self._training_data)
        evaluate_chromosomes(self._config, children, self._validation_data, validation=True)
        for child in children:
            child.generation = self.generation_counter

        self.population.update_best(self.best)

    def _target_reached(self) -> bool:
        return self._config.fitness_termination_check and \
               self.best.fitness_validation <= self._config.target_fitness

    def _terminate(self) -> bool:
        return self.generation_counter >= self._num_generations

    def _report_due(self) -> bool:
        interval = self._config.report_interval
        return not self._suppress_output and interval > 0 and self.generation_counter % interval == 0

    def _report_progress(self):
        s = (f"Generation {self.generation_counter:6d}: "
             f"best validation fitness {self.best.fitness_validation: .6f}, "
             f"active nodes {self.best.num_active_nodes}")
        stdout.write(s + '\r')
        stdout.flush()

    def _final_report(self):
        print()
        print(f"Generations run:          {self.generation_counter}")
        print(f"Best validation fitness:  {self.best.fitness_validation:.6f}")
        print(f"Found in generation:      {self.best.generation}")
        print(f"Active nodes:             {self.best.num_active_nodes}")
        if self._config.fitness_termination_check:
            print(f"Target fitness reached:   {not self.failed}")
