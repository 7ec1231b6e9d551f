"""
CGP Executor Module

This module evaluates the active subgraph of a chromosome over input samples.

Inputs can be a single sample (1D array of length num_inputs) or a batch of
samples (2D array of shape (n_samples, num_inputs)). In batch mode every node
output is a vector holding one value per sample, so a feed-forward chromosome
is evaluated over a whole dataset in one pass.

Recurrent chromosomes read the cached output of a node from the *previous*
execution call, so they must be executed one sample at a time.

Numerical policy: a NaN node output becomes 0, +/-inf becomes the largest
finite float of the same sign. Non-finite values never propagate.

Functions:
    execute(chromosome, inputs): Run the chromosome, return the output values
    sanitize(values):            Apply the NaN/inf policy
"""

import numpy as np
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cgpde.genotype.chromosome import Chromosome

FLOAT_MAX = np.finfo(float).max

def sanitize(values):
    return np.nan_to_num(values, nan=0.0, posinf=FLOAT_MAX, neginf=-FLOAT_MAX)

def execute(chromosome: 'Chromosome', inputs) -> np.ndarray:
    """
    Execute the chromosome on the given inputs.

    The active nodes are evaluated in ascending order, and the output of
    each one is cached on the node. Execution therefore mutates the
    chromosome, and the same instance must not be executed concurrently.

    Parameters:
        chromosome: The chromosome to execute; its active nodes must be resolved
        inputs:     One sample (num_inputs,) or a batch (n_samples, num_inputs)

    Returns:
        Output values, shape (num_outputs,) or (n_samples, num_outputs)
    """
    x = np.asarray(inputs, dtype=float)
    if x.ndim not in (1, 2) or x.shape[-1] != chromosome.num_inputs:
        raise ValueError(f"Expected {chromosome.num_inputs} inputs per sample, got shape {x.shape}")
    if x.ndim == 2 and chromosome.is_recurrent():
        raise ValueError("Recurrent chromosomes must be executed one sample at a time")

    num_inputs  = chromosome.num_inputs
    nodes       = chromosome.nodes
    batch_shape = x.shape[:-1]

    def value(address):
        if address < num_inputs:
            return x[..., address]
        return np.broadcast_to(nodes[address - num_inputs].output, batch_shape)

    with np.errstate(all='ignore'):
        for index in chromosome.active_nodes:
            node     = nodes[index]
            arity    = node.actual_arity
            function = chromosome.function_set[node.function]

            if arity > 0:
                operands = np.array([value(address) for address in node.inputs[:arity]])
            else:
                operands = np.empty((0,) + batch_shape)
            weights = node.weights[:arity]

            if function.stochastic:
                result = function.function(operands, weights, chromosome.rng)
            else:
                result = function.function(operands, weights)

            result = sanitize(np.broadcast_to(np.asarray(result, dtype=float), batch_shape))
            node.output = float(result) if result.ndim == 0 else result

    if chromosome.num_outputs > 0:
        outputs = np.array([value(address) for address in chromosome.output_genes], dtype=float)
    else:
        outputs = np.empty((0,) + batch_shape)

    # one row per sample
    if outputs.ndim == 2:
        outputs = outputs.T

    chromosome.output_values = outputs
    return outputs
