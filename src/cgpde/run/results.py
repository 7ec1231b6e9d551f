"""
CGP Results Module

This module collects the best chromosome of each of several independent
runs and summarizes them.

Classes:
    Results: Best chromosomes of repeated runs
"""

from statistics import mean, median
from typing     import TYPE_CHECKING

if TYPE_CHECKING:
    from cgpde.genotype import Chromosome

class Results:
    """
    The best chromosomes of repeated runs.

    Public Attributes:
        chromosomes: One chromosome per run, in run order

    Public Methods:
        add(chromosome):        Store a copy of the best chromosome of a run
        average_active_nodes(): Mean number of active nodes
        median_active_nodes():  Median number of active nodes
        average_fitness():      Mean fitness
        median_fitness():       Median fitness
        average_generations():  Mean generation in which the chromosomes were found
        median_generations():   Median generation in which the chromosomes were found
        save(path):             Write a CSV summary
    """

    def __init__(self):
        self.chromosomes: list['Chromosome'] = []

    def add(self, chromosome: 'Chromosome') -> None:
        self.chromosomes.append(chromosome.clone())

    def __len__(self) -> int:
        return len(self.chromosomes)

    def __getitem__(self, run: int) -> 'Chromosome':
        return self.chromosomes[run].clone()

    def _values(self, attribute: str) -> list:
        if not self.chromosomes:
            raise ValueError("No results have been recorded")
        return [getattr(c, attribute) for c in self.chromosomes]

    def average_active_nodes(self) -> float:
        return mean(self._values('num_active_nodes'))

    def median_active_nodes(self) -> float:
        return median(self._values('num_active_nodes'))

    def average_fitness(self) -> float:
        return mean(self._values('fitness'))

    def median_fitness(self) -> float:
        return median(self._values('fitness'))

    def average_generations(self) -> float:
        return mean(self._values('generation'))

    def median_generations(self) -> float:
        return median(self._values('generation'))

    def save(self, path: str) -> None:
        with open(path, 'w') as f:
            f.write("Run,Fitness,Generations,Active Nodes\n")
            for i, c in enumerate(self.chromosomes):
                f.write(f"{i},{c.fitness:f},{c.generation},{c.num_active_nodes}\n")
