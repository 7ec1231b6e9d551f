"""
CGP Function Set Module

This module implements the ordered, capacity-bounded catalog of node
functions from which the function gene of every node is drawn.

Classes:
    NodeFunction: A named transfer function with its declared arity
    FunctionSet:  Ordered collection of node functions
"""

import warnings
from typing import Callable, Iterator

from cgpde.functions.basic_functions import functions, function_arities, stochastic_functions

MAX_NUM_FUNCTIONS = 50

class NodeFunction:
    """
    A node transfer function.

    Public Attributes:
        name:       Name under which the function is registered
        function:   The callable; receives (operands, weights) or, when
                    stochastic, (operands, weights, rng)
        arity:      Declared maximum number of operands (-1 = chromosome arity)
        stochastic: Whether the function draws random numbers
    """

    def __init__(self, name: str, function: Callable, arity: int, stochastic: bool = False):
        self.name      : str      = name
        self.function  : Callable = function
        self.arity     : int      = arity
        self.stochastic: bool     = stochastic

    def actual_arity(self, chromosome_arity: int) -> int:
        """
        The number of operands the function consumes inside a
        chromosome whose nodes have 'chromosome_arity' input genes.
        """
        if self.arity == -1 or self.arity >= chromosome_arity:
            return chromosome_arity
        return self.arity

    def __eq__(self, other):
        if not isinstance(other, NodeFunction):
            return NotImplemented
        return (self.name, self.function, self.arity, self.stochastic) == \
               (other.name, other.function, other.arity, other.stochastic)

    def __repr__(self):
        return f"NodeFunction(name={self.name!r}, arity={self.arity}, stochastic={self.stochastic})"

class FunctionSet:
    """
    An ordered collection of node functions.

    The function gene of a node is an index into this collection. Each
    chromosome holds its own copy of the set, so the meaning of its
    function genes cannot change under it.

    Public Methods:
        add_node_functions(names): Add preset functions by comma-separated name
        add_preset(name):          Add a single preset function
        add_custom(...):           Add a user-supplied function
        clear():                   Remove all functions
        copy():                    Return an independent copy
        index(name):               Position of the function with the given name

    Public Properties:
        names: Names of the functions, in order
    """

    def __init__(self, names: str | list[str] | None = None):
        """
        Parameters:
            names: Optional preset names (comma-separated string or list) to add
        """
        self._functions: list[NodeFunction] = []
        if names:
            self.add_node_functions(names)

    def add_node_functions(self, names: str | list[str]) -> None:
        """
        Add preset functions by name.

        Unknown names are skipped with a warning.

        Parameters:
            names: Comma-separated string ("add,sub,sig") or list of names
        """
        if isinstance(names, str):
            names = names.split(',')

        for name in names:
            name = name.strip()
            if not name:
                continue
            if name not in functions:
                warnings.warn(f"Function '{name}' is not known and was not added")
                continue
            self.add_preset(name)

        if len(self._functions) < 1:
            warnings.warn("No functions added to function set")

    def add_preset(self, name: str) -> bool:
        """
        Add a preset function.

        Returns:
            True if the function was added, False otherwise
        """
        if name not in functions:
            return False
        return self.add_custom(name, functions[name], function_arities[name], name in stochastic_functions)

    def add_custom(self, name: str, function: Callable, arity: int, stochastic: bool = False) -> bool:
        """
        Add a user-supplied function.

        Parameters:
            name:       Name of the function
            function:   Callable receiving (operands, weights) or (operands, weights, rng)
            arity:      Declared maximum number of operands (-1 = chromosome arity)
            stochastic: Whether the callable expects a random generator

        Returns:
            True if the function was added, False if the set is full
        """
        if len(self._functions) >= MAX_NUM_FUNCTIONS:
            warnings.warn(f"Function '{name}' was not added: function set capacity "
                          f"of {MAX_NUM_FUNCTIONS} reached")
            return False
        self._functions.append(NodeFunction(name, function, arity, stochastic))
        return True

    def clear(self) -> None:
        self._functions = []

    def copy(self) -> 'FunctionSet':
        other = FunctionSet()
        other._functions = list(self._functions)
        return other

    def index(self, name: str) -> int:
        for i, function in enumerate(self._functions):
            if function.name == name:
                return i
        raise ValueError(f"Function '{name}' is not in the function set")

    @property
    def names(self) -> list[str]:
        return [f.name for f in self._functions]

    def is_preset_only(self) -> bool:
        """
        Whether every function in the set is the unmodified preset of that name.
        """
        return all(f.name in functions and f.function is functions[f.name] for f in self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def __getitem__(self, index: int) -> NodeFunction:
        return self._functions[index]

    def __iter__(self) -> Iterator[NodeFunction]:
        return iter(self._functions)

    def __eq__(self, other):
        if not isinstance(other, FunctionSet):
            return NotImplemented
        return self._functions == other._functions

    def __str__(self):
        lines = ["Function Set:"]
        lines += [f"  ({f.arity}) {f.name}" for f in self._functions]
        lines.append(f"  ({len(self._functions)})")
        return "\n".join(lines)
