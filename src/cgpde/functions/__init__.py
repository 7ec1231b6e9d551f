"""
CGP Node Functions Package

This package provides the transfer functions available to CGP nodes and the
function set which binds function genes to them.

Every function follows the same calling convention: it receives an array of
operands (one row per node input, optionally one column per sample) and the
node's connection weights, and returns the node output. Arithmetic, boolean
and transcendental functions ignore the weights; activation-style functions
('sig', 'gauss', 'step', 'soft', 'tanh') apply them to a weighted sum.

Modules:
    basic_functions: Preset node functions
    function_set:    NodeFunction and FunctionSet classes

Exported Items:
    functions:         Dictionary of preset node functions, indexed by name
    function_arities:  Dictionary of declared arities, indexed by name
    NodeFunction:      Named function with declared arity
    FunctionSet:       Ordered, capacity-bounded collection of node functions
    MAX_NUM_FUNCTIONS: Capacity of a function set
"""

from cgpde.functions.basic_functions import functions, function_arities, stochastic_functions
from cgpde.functions.function_set    import FunctionSet, NodeFunction, MAX_NUM_FUNCTIONS

__all__ = ['functions',
           'function_arities',
           'stochastic_functions',
           'FunctionSet',
           'NodeFunction',
           'MAX_NUM_FUNCTIONS']
