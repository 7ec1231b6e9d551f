"""
CGP Node Module

This module implements the Node class, the building block of a CGP chromosome,
together with the constrained random generators used for its genes.

Classes:
    Node: A function node with input-address and connection-weight genes

Functions:
    random_function:     Draw a function gene
    random_node_input:   Draw an input gene for a node at a given position
    random_weight:       Draw a connection weight gene
    random_output:       Draw an output gene
"""

import numpy as np

def random_function(num_functions: int, rng: np.random.Generator) -> int:
    if num_functions < 1:
        raise ValueError("Cannot draw a function gene: the function set is empty")
    return int(rng.integers(num_functions))

def random_node_input(num_inputs         : int,
                      num_nodes          : int,
                      position           : int,
                      recurrent_prob     : float,
                      rng                : np.random.Generator) -> int:
    """
    Draw an input address for the node at 'position'.

    With probability 'recurrent_prob' the address points at the node
    itself or a later node (recurrent connection); otherwise it points
    at a sample input or an earlier node.
    """
    if rng.random() < recurrent_prob:
        return int(rng.integers(num_nodes - position)) + position + num_inputs
    return int(rng.integers(num_inputs + position))

def random_weight(weight_range: float, rng: np.random.Generator) -> float:
    return rng.random() * 2.0 * weight_range - weight_range

def random_output(num_inputs: int, num_nodes: int, shortcut_connections: bool,
                  rng: np.random.Generator) -> int:
    """
    Draw an output address. Without shortcut connections,
    outputs may only address nodes, never sample inputs.
    """
    if shortcut_connections:
        return int(rng.integers(num_inputs + num_nodes))
    if num_nodes < 1:
        raise ValueError("Outputs cannot be connected: no nodes and shortcut connections disabled")
    return int(rng.integers(num_nodes)) + num_inputs

class Node:
    """
    A node of a CGP chromosome.

    Public Attributes:
        function:     Index of the node function in the chromosome's function set
        inputs:       Input addresses (length = chromosome arity)
        weights:      Connection weights, parallel to 'inputs'
        output:       Cached output of the last execution
        active:       Whether the node is reachable from an output gene
        actual_arity: Number of inputs the node's function consumes
    """

    def __init__(self, function: int, inputs: np.ndarray, weights: np.ndarray):
        self.function    : int        = function
        self.inputs      : np.ndarray = np.asarray(inputs, dtype=int)
        self.weights     : np.ndarray = np.asarray(weights, dtype=float)
        self.output                   = 0.0
        self.active      : bool       = True
        self.actual_arity: int        = len(self.inputs)

    @classmethod
    def random(cls,
               num_inputs    : int,
               num_nodes     : int,
               arity         : int,
               num_functions : int,
               weight_range  : float,
               recurrent_prob: float,
               position      : int,
               rng           : np.random.Generator) -> 'Node':
        """
        Create a node with randomly drawn genes.

        Parameters:
            num_inputs:     Number of chromosome inputs
            num_nodes:      Number of chromosome nodes
            arity:          Number of input genes per node
            num_functions:  Size of the function set
            weight_range:   Weights are drawn uniformly from [-weight_range, weight_range]
            recurrent_prob: Probability of drawing a recurrent input
            position:       Position of the node within the chromosome
            rng:            Random number generator
        """
        function = random_function(num_functions, rng)
        inputs   = np.empty(arity, dtype=int)
        weights  = np.empty(arity, dtype=float)
        for i in range(arity):
            inputs[i]  = random_node_input(num_inputs, num_nodes, position, recurrent_prob, rng)
            weights[i] = random_weight(weight_range, rng)
        return cls(function, inputs, weights)

    def copy(self) -> 'Node':
        node = Node(self.function, self.inputs.copy(), self.weights.copy())
        node.output       = np.copy(self.output) if isinstance(self.output, np.ndarray) else self.output
        node.active       = self.active
        node.actual_arity = self.actual_arity
        return node

    def __repr__(self):
        return (f"Node(function={self.function}, inputs={self.inputs.tolist()}, "
                f"weights={np.round(self.weights, 6).tolist()}, active={self.active})")
