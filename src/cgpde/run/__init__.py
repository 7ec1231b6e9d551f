"""
CGP Run Package

This package implements the execution of CGP runs: configuration, fitness
functions, the generational evolution loop, its hybridization with
Differential Evolution, and the cross-validated experiment comparing the
run modes.

Modules:
    config:         Configuration management for CGP / CGPDE parameters
    fitness:        Fitness functions
    evolution_loop: The CGPANN evolution strategy
    hybrid:         CGPDE-IN and CGPDE-OUT run modes
    results:        Statistics over the best chromosomes of repeated runs
    experiment:     Repeated stratified cross-validation of the run modes

Exported Classes:
    Config:                  Configuration parameters
    EvolutionLoop:           One run of the evolution strategy
    CGPDEInLoop:             Evolution loop with DE refinement of the best child
    HybridizationController: Entry point for the three run modes
    Results:                 Best chromosomes of repeated runs
    Experiment:              Cross-validated comparison of the run modes
"""

from cgpde.run.config         import Config
from cgpde.run.evolution_loop import EvolutionLoop
from cgpde.run.hybrid         import CGPDEInLoop, HybridizationController
from cgpde.run.results        import Results
from cgpde.run.experiment     import Experiment

__all__ = ['Config',
           'EvolutionLoop',
           'CGPDEInLoop',
           'HybridizationController',
           'Results',
           'Experiment']
