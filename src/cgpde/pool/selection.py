"""
CGP Selection Module

Selection schemes choose the parents of the next generation from a pool of
candidate chromosomes. A scheme receives (config, parents, candidates) and
overwrites the parent slots in place with copies of the chosen candidates.

Functions:
    select_fittest:            Keep the best candidates, ties resolved by pool order
    register_selection_scheme: Make a custom scheme available by name
"""

from typing import Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from cgpde.genotype import Chromosome
    from cgpde.run.config import Config

def select_fittest(config: 'Config', parents: list['Chromosome'], candidates: list['Chromosome']) -> None:
    """
    Copy the 'len(parents)' candidates with the lowest training fitness into the parent slots.

    The ordering is stable: candidates of equal fitness keep their relative
    order in the pool. Since the pool lists children before parents, a child
    is preferred over a parent of equal fitness (neutral drift).

    Parameters:
        config:     Stores configuration parameters
        parents:    Parent slots, overwritten in place
        candidates: Candidate pool
    """
    if len(candidates) < len(parents):
        raise ValueError(f"Cannot select {len(parents)} parents from {len(candidates)} candidates")

    ranked = sorted(candidates, key=lambda chromosome: chromosome.fitness)
    for parent, candidate in zip(parents, ranked):
        parent.copy_from(candidate)

selection_schemes: dict[str, Callable] = {
    'select_fittest': select_fittest,
}

def register_selection_scheme(name: str, function: Callable) -> None:
    selection_schemes[name] = function
