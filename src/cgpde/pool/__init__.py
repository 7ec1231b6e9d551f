"""
CGP Pool Package

This package manages the chromosomes of a run: the parents and children of
the evolution strategy, the candidate pool, and the pluggable selection and
reproduction schemes that turn one generation into the next.

Modules:
    population:   Population class and parallel fitness evaluation
    selection:    Selection schemes
    reproduction: Reproduction schemes

Exported Items:
    Population:           Parents, children and candidate pool
    evaluate_chromosomes: Compute and store the fitness of many chromosomes
    selection_schemes:    Dictionary of selection schemes, indexed by name
    reproduction_schemes: Dictionary of reproduction schemes, indexed by name
"""

from cgpde.pool.population   import Population, evaluate_chromosomes
from cgpde.pool.selection    import selection_schemes, select_fittest, register_selection_scheme
from cgpde.pool.reproduction import reproduction_schemes, mutate_random_parent, register_reproduction_scheme

__all__ = ['Population',
           'evaluate_chromosomes',
           'selection_schemes',
           'select_fittest',
           'register_selection_scheme',
           'reproduction_schemes',
           'mutate_random_parent',
           'register_reproduction_scheme']
