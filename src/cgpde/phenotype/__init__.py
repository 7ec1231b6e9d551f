"""
CGP Phenotype Package

This package expresses a chromosome as an executable program: the active
nodes are evaluated in ascending order over one sample or a batch of samples.

Modules:
    executor: Evaluation of the active subgraph and the numerical policy

Exported Functions:
    execute:  Run a chromosome on the given inputs
    sanitize: Replace NaN by 0 and clamp infinities to the largest finite float
"""

from cgpde.phenotype.executor import execute, sanitize

__all__ = ['execute',
           'sanitize']
