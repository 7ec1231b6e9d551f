"""
CGP Reproduction Module

Reproduction schemes fill the children slots from the current parents. A scheme
receives (config, parents, children, rng, weight_mutation) and overwrites the
children in place.

Functions:
    mutate_random_parent:         Each child is a mutated copy of a random parent
    register_reproduction_scheme: Make a custom scheme available by name
"""

import numpy as np
from typing import Callable, TYPE_CHECKING

from cgpde.genotype.mutation import mutate_chromosome

if TYPE_CHECKING:
    from cgpde.genotype import Chromosome
    from cgpde.run.config import Config

def mutate_random_parent(config         : 'Config',
                         parents        : list['Chromosome'],
                         children       : list['Chromosome'],
                         rng            : np.random.Generator,
                         weight_mutation: bool = True) -> None:
    """
    Overwrite every child with a copy of a uniformly chosen parent, then mutate it.

    Parameters:
        config:          Stores configuration parameters
        parents:         The current parents
        children:        Children slots, overwritten in place
        rng:             Random number generator
        weight_mutation: Whether the mutation may change weight genes
    """
    for child in children:
        child.copy_from(parents[int(rng.integers(len(parents)))])
        mutate_chromosome(config, child, rng, weight_mutation)

reproduction_schemes: dict[str, Callable] = {
    'mutate_random_parent': mutate_random_parent,
}

def register_reproduction_scheme(name: str, function: Callable) -> None:
    reproduction_schemes[name] = function
