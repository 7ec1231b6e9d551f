"""
CGP Mutation Module

This module implements the mutation policies applied to a chromosome when a
child is produced from a parent.

A chromosome carries four classes of gene:
    function genes: one per node
    input genes:    'arity' per node
    weight genes:   'arity' per node (only mutated when weight mutation is on)
    output genes:   one per program output

Every redraw uses the same constrained generators as chromosome creation.
All policies leave the chromosome with up-to-date active nodes.

Functions:
    probabilistic:             Every gene redrawn with probability 'mutation_rate'
    probabilistic_only_active: Same, restricted to active nodes and outputs
    point:                     A fixed number of distinct genes redrawn (no weights)
    point_ann:                 Redraw genes until a quota of active genes is reached
    single:                    Redraw genes until one change affects the phenotype
    mutate_chromosome:         Apply the configured policy
    register_mutation_type:    Make a custom policy available by name
"""

import numpy as np
from typing import Callable, TYPE_CHECKING

from cgpde.genotype.node import random_function, random_node_input, random_weight, random_output

if TYPE_CHECKING:
    from cgpde.genotype.chromosome import Chromosome
    from cgpde.run.config          import Config

# redraws tried by the single mutation before it gives up
MAX_SINGLE_ATTEMPTS = 100000

def _redraw_function(chromosome: 'Chromosome', index: int, rng: np.random.Generator) -> None:
    chromosome.nodes[index].function = random_function(len(chromosome.function_set), rng)

def _redraw_input(config: 'Config', chromosome: 'Chromosome', index: int, j: int,
                  rng: np.random.Generator) -> None:
    chromosome.nodes[index].inputs[j] = random_node_input(chromosome.num_inputs,
                                                          chromosome.num_nodes,
                                                          index,
                                                          config.recurrent_connection_probability,
                                                          rng)

def _redraw_weight(config: 'Config', chromosome: 'Chromosome', index: int, j: int,
                   rng: np.random.Generator) -> None:
    chromosome.nodes[index].weights[j] = random_weight(config.weight_range, rng)

def _redraw_output(config: 'Config', chromosome: 'Chromosome', i: int, rng: np.random.Generator) -> None:
    chromosome.output_genes[i] = random_output(chromosome.num_inputs,
                                               chromosome.num_nodes,
                                               config.shortcut_connections,
                                               rng)

def _number_to_mutate(num_genes: int, rate: float) -> int:
    # round half away from zero
    return int(np.floor(num_genes * rate + 0.5))

def _mutate_genes(config, chromosome, rng, weight_mutation, positions):
    rate = config.mutation_rate

    for i in positions:
        if len(chromosome.function_set) > 1 and rng.random() <= rate:
            _redraw_function(chromosome, i, rng)

        for j in range(chromosome.arity):
            if rng.random() <= rate:
                _redraw_input(config, chromosome, i, j, rng)
            if weight_mutation and rng.random() <= rate:
                _redraw_weight(config, chromosome, i, j, rng)

    for i in range(chromosome.num_outputs):
        if rng.random() <= rate:
            _redraw_output(config, chromosome, i, rng)

def probabilistic(config: 'Config', chromosome: 'Chromosome', rng: np.random.Generator,
                  weight_mutation: bool = True) -> None:
    """
    Redraw every gene independently with probability 'mutation_rate'.

    Function genes are left alone when the function set holds a single function.
    Weight genes are only considered when 'weight_mutation' is True.
    """
    _mutate_genes(config, chromosome, rng, weight_mutation, range(chromosome.num_nodes))

def probabilistic_only_active(config: 'Config', chromosome: 'Chromosome', rng: np.random.Generator,
                              weight_mutation: bool = True) -> None:
    """
    As 'probabilistic', but only the genes of active nodes (and all output genes)
    are candidates for mutation.
    """
    chromosome.resolve_active_nodes()
    _mutate_genes(config, chromosome, rng, weight_mutation, list(chromosome.active_nodes))

def point(config: 'Config', chromosome: 'Chromosome', rng: np.random.Generator,
          weight_mutation: bool = True) -> None:
    """
    Redraw exactly round(G * mutation_rate) distinct gene slots, where G is the
    number of function, input and output genes. Weight genes are never mutated.
    """
    num_function_genes = chromosome.num_nodes
    num_input_genes    = chromosome.num_nodes * chromosome.arity
    num_genes          = num_function_genes + num_input_genes + chromosome.num_outputs

    num_to_mutate = min(_number_to_mutate(num_genes, config.mutation_rate), num_genes)

    for gene in rng.choice(num_genes, size=num_to_mutate, replace=False):
        gene = int(gene)
        if gene < num_function_genes:
            _redraw_function(chromosome, gene, rng)
        elif gene < num_function_genes + num_input_genes:
            index, j = divmod(gene - num_function_genes, chromosome.arity)
            _redraw_input(config, chromosome, index, j, rng)
        else:
            _redraw_output(config, chromosome, gene - num_function_genes - num_input_genes, rng)

def point_ann(config: 'Config', chromosome: 'Chromosome', rng: np.random.Generator,
              weight_mutation: bool = True) -> None:
    """
    Redraw randomly chosen genes, weights included, until round(G * mutation_rate)
    of the redraws have landed on an active node or an output gene.
    G counts function, input, weight and output genes.

    Redraws landing on inactive nodes still change the genes, but do not count
    towards the quota. With 'weight_mutation' False, weight genes are excluded.
    """
    chromosome.resolve_active_nodes()

    num_function_genes = chromosome.num_nodes
    num_input_genes    = chromosome.num_nodes * chromosome.arity
    num_weight_genes   = num_input_genes if weight_mutation else 0
    num_genes          = num_function_genes + num_input_genes + num_weight_genes + chromosome.num_outputs

    num_to_mutate = _number_to_mutate(num_genes, config.mutation_rate)

    # without outputs nothing is active and the quota can never be met
    if chromosome.num_outputs == 0:
        return

    counter = 0
    while counter < num_to_mutate:
        gene = int(rng.integers(num_genes))

        if gene < num_function_genes:
            index = gene
            _redraw_function(chromosome, index, rng)
        elif gene < num_function_genes + num_input_genes:
            index, j = divmod(gene - num_function_genes, chromosome.arity)
            _redraw_input(config, chromosome, index, j, rng)
        elif gene < num_function_genes + num_input_genes + num_weight_genes:
            index, j = divmod(gene - num_function_genes - num_input_genes, chromosome.arity)
            _redraw_weight(config, chromosome, index, j, rng)
        else:
            _redraw_output(config, chromosome, gene - num_genes + chromosome.num_outputs, rng)
            counter += 1
            continue

        if chromosome.nodes[index].active:
            counter += 1

def single(config: 'Config', chromosome: 'Chromosome', rng: np.random.Generator,
           weight_mutation: bool = True) -> None:
    """
    Redraw one random gene at a time until a redraw changes the behaviour of
    the program: a different function for an active node, a different used
    input for an active node, or a different output address.
    Weight genes are never mutated.
    """
    if chromosome.num_outputs == 0:
        raise ValueError("Single mutation requires at least one output")

    chromosome.resolve_active_nodes()

    num_function_genes = chromosome.num_nodes
    num_input_genes    = chromosome.num_nodes * chromosome.arity
    num_genes          = num_function_genes + num_input_genes + chromosome.num_outputs

    for _ in range(MAX_SINGLE_ATTEMPTS):
        gene = int(rng.integers(num_genes))

        if gene < num_function_genes:
            node     = chromosome.nodes[gene]
            previous = node.function
            _redraw_function(chromosome, gene, rng)
            if node.active and node.function != previous:
                return

        elif gene < num_function_genes + num_input_genes:
            index, j = divmod(gene - num_function_genes, chromosome.arity)
            node     = chromosome.nodes[index]
            previous = node.inputs[j]
            _redraw_input(config, chromosome, index, j, rng)
            if node.active and j < node.actual_arity and node.inputs[j] != previous:
                return

        else:
            i        = gene - num_function_genes - num_input_genes
            previous = chromosome.output_genes[i]
            _redraw_output(config, chromosome, i, rng)
            if chromosome.output_genes[i] != previous:
                return

    raise RuntimeError(f"Single mutation found no effective change in {MAX_SINGLE_ATTEMPTS} redraws")

mutation_types: dict[str, Callable] = {
    'probabilistic'            : probabilistic,
    'probabilistic_only_active': probabilistic_only_active,
    'point'                    : point,
    'point_ann'                : point_ann,
    'single'                   : single,
}

def register_mutation_type(name: str, function: Callable) -> None:
    """
    Make a custom mutation policy available under the given name.
    The callable receives (config, chromosome, rng, weight_mutation).
    """
    mutation_types[name] = function

def mutate_chromosome(config: 'Config', chromosome: 'Chromosome', rng: np.random.Generator,
                      weight_mutation: bool = True) -> None:
    """
    Apply the configured mutation policy, then refresh the active nodes.

    Parameters:
        config:          Stores configuration parameters
        chromosome:      The chromosome to mutate in place
        rng:             Random number generator
        weight_mutation: Whether weight genes may be mutated
    """
    config.get_mutation()(config, chromosome, rng, weight_mutation)
    chromosome.resolve_active_nodes()
