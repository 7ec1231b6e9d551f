"""
CGP Genotype Package

This package implements the genetic encoding of Cartesian Genetic Programming.
A chromosome is a fixed-size list of function nodes; each node holds a function
gene, and one input-address gene and one connection-weight gene per input.
Output genes map program outputs to addresses.

Modules:
    address:    Tagged InputRef / NodeRef form of a compact address
    node:       Node class and the constrained gene generators
    chromosome: Chromosome class (creation, active-node resolution, persistence)
    mutation:   Mutation policies

Exported Items:
    InputRef:          Reference to a sample input
    NodeRef:           Reference to the output of a node
    Node:              A function node
    Chromosome:        A CGP genome
    mutation_types:    Dictionary of mutation policies, indexed by name
    mutate_chromosome: Apply the configured mutation policy
"""

from cgpde.genotype.address    import InputRef, NodeRef
from cgpde.genotype.node       import Node
from cgpde.genotype.chromosome import Chromosome
from cgpde.genotype.mutation   import mutation_types, mutate_chromosome, register_mutation_type

__all__ = ['InputRef',
           'NodeRef',
           'Node',
           'Chromosome',
           'mutation_types',
           'mutate_chromosome',
           'register_mutation_type']
