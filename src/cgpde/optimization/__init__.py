"""
Weight Optimization Package

This package refines the connection weights of a chromosome whose topology
is kept fixed, using Differential Evolution.

Modules:
    differential_evolution: DEIndividual and DEOptimizer classes

Exported Items:
    DEIndividual:       A chromosome clone with its flattened weight vector
    DEOptimizer:        Differential Evolution over the weights of a fixed topology
    best_de_chromosome: Best chromosome of a refined population
"""

from cgpde.optimization.differential_evolution import DEIndividual, DEOptimizer, best_de_chromosome

__all__ = ['DEIndividual',
           'DEOptimizer',
           'best_de_chromosome']
