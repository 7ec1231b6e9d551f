"""
CGPDE - Cartesian Genetic Programming of neural networks, with Differential
Evolution of the connection weights.

This package evolves the topology of Cartesian Genetic Programming networks
(CGPANN) with a (mu + lambda) or (mu, lambda) evolution strategy, and refines
their connection weights with Differential Evolution either inside the
evolution loop (CGPDE-IN) or after it (CGPDE-OUT).

Main components:
- functions: Node functions and function sets
- genotype: Chromosome encoding, mutation, persistence and visualization
- phenotype: Batched execution of chromosomes
- pool: Parents, children, selection and reproduction
- optimization: Differential Evolution of connection weights
- data: Data sets, stratified folds and sampling
- run: Configuration, fitness, run modes and experiments

Example:
    >>> import numpy as np
    >>> from cgpde import Config, DataSet, HybridizationController
    >>> config   = Config("config.ini")
    >>> training = DataSet.from_file("training.txt")
    >>> valid    = DataSet.from_file("validation.txt")
    >>> controller = HybridizationController(config, training, valid)
    >>> best = controller.run_cgpde_in(np.random.default_rng(0))
"""

__version__ = "0.1.0"

# Import main classes for convenient access
from cgpde.functions    import FunctionSet
from cgpde.genotype     import Chromosome
from cgpde.data         import DataSet
from cgpde.pool         import Population
from cgpde.optimization import DEOptimizer
from cgpde.run.config   import Config
from cgpde.run.evolution_loop import EvolutionLoop
from cgpde.run.hybrid   import HybridizationController
from cgpde.run.results  import Results
from cgpde.run.experiment import Experiment

__all__ = [
    "FunctionSet",
    "Chromosome",
    "DataSet",
    "Population",
    "DEOptimizer",
    "Config",
    "EvolutionLoop",
    "HybridizationController",
    "Results",
    "Experiment",
]
