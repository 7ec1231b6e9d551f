"""
CGP Chromosome Module

This module implements the Chromosome class, the genome of Cartesian Genetic
Programming: a fixed number of function nodes, each with an input-address and
a connection-weight gene per input, plus one output gene per program output.

All addresses share one integer space. Addresses [0, num_inputs) refer to
sample inputs and addresses [num_inputs, num_inputs + num_nodes) refer to
node outputs. A non-recurrent input gene addresses a position before its
own node; recurrent genes may address the node itself or later nodes.

Classes:
    Chromosome: A CGP genome with active-node resolution, execution and persistence
"""

import copy
import graphviz
import numpy as np
from typing import Callable, TYPE_CHECKING

from cgpde.functions import FunctionSet, functions
from cgpde.genotype.address import InputRef, NodeRef, decode_address, encode_address
from cgpde.genotype.node    import Node, random_output
from cgpde.phenotype        import executor

if TYPE_CHECKING:
    from cgpde.data.dataset  import DataSet
    from cgpde.run.config    import Config

class Chromosome:
    """
    A CGP chromosome.

    Public Attributes:
        num_inputs:         Number of program inputs
        num_nodes:          Number of function nodes
        num_outputs:        Number of program outputs
        arity:              Number of input genes per node
        function_set:       The chromosome's own copy of the function set
        nodes:              List of Node objects
        output_genes:       Output addresses, one per program output
        active_nodes:       Positions of the active nodes, ascending
        output_values:      Outputs computed by the last execution
        fitness:            Fitness on the training data (lower is better)
        fitness_validation: Fitness on the validation data (lower is better)
        generation:         Generation in which the chromosome was evaluated
        rng:                Random generator used by stochastic node functions

    Public Methods:
        from_dict(chromosome_dict): Create a chromosome with the given genes
        to_dict():                  Dictionary form of the genes
        load(path):                 Read a chromosome from a text file
        save(path):                 Write the chromosome to a text file
        clone():                    Deep, independent copy
        copy_from(other):           Overwrite this chromosome with a copy of another
        resolve_active_nodes():     Recompute which nodes are reachable from the outputs
        execute(inputs):            Evaluate the active nodes on the given inputs
        reset():                    Zero the cached node outputs
        set_fitness(config, data):            Evaluate and store the training fitness
        set_fitness_validation(config, data): Evaluate and store the validation fitness
        remove_inactive_nodes():    Delete the nodes not reachable from the outputs
        depth():                    Longest chain of active nodes from input to output
        weights_vector():           All connection weights, flattened
        set_weights_vector(v):      Overwrite the connection weights
        to_dot(weights):            Graphviz representation
        visualize(view):            Render the Graphviz representation

    Public Properties:
        num_active_nodes:       Number of active nodes
        num_active_connections: Number of connections consumed by active nodes
        num_weights:            Number of weight genes
    """

    def __init__(self, config: 'Config', rng: np.random.Generator):
        """
        Create a chromosome with randomly drawn genes.

        Parameters:
            config: Stores configuration parameters
            rng:    Random number generator
        """
        if len(config.function_set) < 1:
            raise ValueError("Chromosome not created: the function set is empty")
        if config.arity < 1:
            raise ValueError(f"Invalid arity: {config.arity}")

        self.num_inputs  : int         = config.num_inputs
        self.num_nodes   : int         = config.num_nodes
        self.num_outputs : int         = config.num_outputs
        self.arity       : int         = config.arity
        self.function_set: FunctionSet = config.function_set.copy()

        self.nodes: list[Node] = [Node.random(config.num_inputs,
                                              config.num_nodes,
                                              config.arity,
                                              len(self.function_set),
                                              config.weight_range,
                                              config.recurrent_connection_probability,
                                              position,
                                              rng)
                                  for position in range(config.num_nodes)]

        self.output_genes: np.ndarray = np.array([random_output(config.num_inputs,
                                                                config.num_nodes,
                                                                config.shortcut_connections,
                                                                rng)
                                                  for _ in range(config.num_outputs)], dtype=int)
        self._finish_init(np.random.default_rng(rng.integers(2**63)))

    def _finish_init(self, rng: np.random.Generator) -> None:
        self.active_nodes      : list[int]  = []
        self.output_values     : np.ndarray = np.zeros(self.num_outputs)
        self.fitness           : float      = 0.0
        self.fitness_validation: float      = 0.0
        self.generation        : int        = 0
        self.rng               : np.random.Generator = rng
        self.resolve_active_nodes()

    @classmethod
    def from_dict(cls, chromosome_dict: dict, rng: np.random.Generator | None = None) -> 'Chromosome':
        """
        Create a chromosome with the given genes.

        Example:
            {
                'num_inputs'  : 2,
                'arity'       : 2,
                'function_set': ['add', 'mul'],
                'nodes'       : [
                    {'function': 'add', 'inputs': [0, 1], 'weights': [1.0, 1.0]},
                    {'function': 1,     'inputs': [2, 0]},
                ],
                'outputs'     : [3]
            }

        Function genes may be given by index or by name. Weights default to 1.

        Parameters:
            chromosome_dict: Dictionary describing the genes
            rng:             Random generator for stochastic node functions

        Returns:
            The new chromosome
        """
        function_set = chromosome_dict['function_set']
        if not isinstance(function_set, FunctionSet):
            function_set = FunctionSet(function_set)
        else:
            function_set = function_set.copy()
        if len(function_set) < 1:
            raise ValueError("Chromosome not created: the function set is empty")

        arity = chromosome_dict['arity']
        if arity < 1:
            raise ValueError(f"Invalid arity: {arity}")

        num_inputs = chromosome_dict['num_inputs']
        nodes = []
        for spec in chromosome_dict['nodes']:
            function = spec['function']
            if isinstance(function, str):
                function = function_set.index(function)
            if not 0 <= function < len(function_set):
                raise ValueError(f"Function gene {function} out of range")
            inputs  = list(spec['inputs'])
            weights = list(spec.get('weights', [1.0] * len(inputs)))
            if len(inputs) != arity or len(weights) != arity:
                raise ValueError(f"Each node needs exactly {arity} inputs and weights")
            nodes.append(Node(function, inputs, weights))

        outputs = chromosome_dict['outputs']
        num_addresses = num_inputs + len(nodes)
        for address in [a for node in nodes for a in node.inputs] + list(outputs):
            if not 0 <= address < num_addresses:
                raise ValueError(f"Address {address} out of range")

        chromosome = cls.__new__(cls)
        chromosome.num_inputs   = num_inputs
        chromosome.num_nodes    = len(nodes)
        chromosome.num_outputs  = len(outputs)
        chromosome.arity        = arity
        chromosome.function_set = function_set
        chromosome.nodes        = nodes
        chromosome.output_genes = np.array(outputs, dtype=int)
        chromosome._finish_init(rng if rng is not None else np.random.default_rng())
        return chromosome

    def to_dict(self) -> dict:
        return {
            'num_inputs'  : self.num_inputs,
            'arity'       : self.arity,
            'function_set': self.function_set.names,
            'nodes'       : [{'function': node.function,
                              'inputs'  : node.inputs.tolist(),
                              'weights' : node.weights.tolist()} for node in self.nodes],
            'outputs'     : self.output_genes.tolist()
        }

    # ------------------------------------------------------------------
    # Copying

    def clone(self) -> 'Chromosome':
        return copy.deepcopy(self)

    def copy_from(self, other: 'Chromosome') -> None:
        """
        Overwrite this chromosome with a deep copy of 'other'.
        Both must have the same number of inputs, nodes, outputs and arity.
        The random generator of this chromosome is kept.
        """
        for attribute in ('num_inputs', 'num_nodes', 'num_outputs', 'arity'):
            if getattr(self, attribute) != getattr(other, attribute):
                raise ValueError(f"Cannot copy a chromosome of different dimensions: "
                                 f"'{attribute}' does not match")

        self.nodes              = [node.copy() for node in other.nodes]
        self.active_nodes       = list(other.active_nodes)
        self.function_set       = other.function_set.copy()
        self.output_genes       = other.output_genes.copy()
        self.output_values      = np.copy(other.output_values)
        self.fitness            = other.fitness
        self.fitness_validation = other.fitness_validation
        self.generation         = other.generation

    # ------------------------------------------------------------------
    # Structure

    def node_arity(self, index: int) -> int:
        """
        Number of inputs consumed by the node at position 'index':
        the declared arity of its function, clamped to the chromosome arity.
        """
        return self.function_set[self.nodes[index].function].actual_arity(self.arity)

    def resolve_active_nodes(self) -> list[int]:
        """
        Mark the nodes reachable from the output genes as active.

        Starting from every output gene that addresses a node, a node is
        marked active and its inputs (up to its actual arity) are followed.
        A node that is already active is not visited again, which makes the
        search terminate on recurrent cycles.

        Returns:
            Positions of the active nodes, in ascending order
        """
        for node in self.nodes:
            node.active = False
        self.active_nodes = []

        for address in self.output_genes:
            stack = [int(address)]
            while stack:
                address = stack.pop()
                if address < self.num_inputs:
                    continue
                index = address - self.num_inputs
                node  = self.nodes[index]
                if node.active:
                    continue
                node.active       = True
                node.actual_arity = self.node_arity(index)
                self.active_nodes.append(index)
                stack.extend(int(a) for a in node.inputs[:node.actual_arity])

        self.active_nodes.sort()
        return self.active_nodes

    def is_node_active(self, index: int) -> bool:
        return self.nodes[index].active

    def is_recurrent(self) -> bool:
        """
        Whether any active node reads its own output or that of a later node.
        """
        for index in self.active_nodes:
            node = self.nodes[index]
            if any(a >= self.num_inputs + index for a in node.inputs[:node.actual_arity]):
                return True
        return False

    @property
    def num_active_nodes(self) -> int:
        return len(self.active_nodes)

    @property
    def num_active_connections(self) -> int:
        return sum(self.nodes[i].actual_arity for i in self.active_nodes)

    @property
    def num_weights(self) -> int:
        return self.num_nodes * self.arity

    def address_ref(self, address: int) -> InputRef | NodeRef:
        return decode_address(address, self.num_inputs)

    def encode_ref(self, ref: InputRef | NodeRef) -> int:
        address = encode_address(ref, self.num_inputs)
        if address >= self.num_inputs + self.num_nodes:
            raise ValueError(f"{ref} out of range")
        return address

    def node_input_refs(self, index: int) -> list[InputRef | NodeRef]:
        """
        The inputs consumed by the node at position 'index', as tagged references.
        """
        node = self.nodes[index]
        return [self.address_ref(int(a)) for a in node.inputs[:self.node_arity(index)]]

    def output_refs(self) -> list[InputRef | NodeRef]:
        return [self.address_ref(int(a)) for a in self.output_genes]

    def remove_inactive_nodes(self) -> None:
        """
        Delete every inactive node and renumber the remaining addresses.

        An address which pointed at a deleted node is moved to the next
        surviving node (or the last one if none follows).
        """
        self.resolve_active_nodes()
        keep = list(self.active_nodes)

        # number of surviving nodes before each original position
        shift = np.zeros(self.num_nodes + 1, dtype=int)
        for index in keep:
            shift[index + 1:] += 1

        num_kept = len(keep)

        def remap(address):
            if address < self.num_inputs:
                return address
            new = self.num_inputs + shift[address - self.num_inputs]
            if new >= self.num_inputs + num_kept:
                new = self.num_inputs + num_kept - 1 if num_kept > 0 else 0
            return new

        self.nodes = [self.nodes[i] for i in keep]
        for node in self.nodes:
            node.inputs = np.array([remap(a) for a in node.inputs], dtype=int)
        self.output_genes = np.array([remap(a) for a in self.output_genes], dtype=int)
        self.num_nodes    = num_kept
        self.resolve_active_nodes()

    def depth(self) -> int:
        """
        The largest number of active nodes on a path from an output gene
        back to a program input. Recurrent edges are not followed.

        Returns:
            The depth, or -1 if the chromosome has no outputs
        """
        self.resolve_active_nodes()
        memo = {}

        def node_depth(address):
            if address < self.num_inputs:
                return 0
            if address in memo:
                return memo[address]
            node = self.nodes[address - self.num_inputs]
            predecessors = [int(a) for a in node.inputs[:node.actual_arity] if a < address]
            memo[address] = 1 + max((node_depth(a) for a in predecessors), default=0)
            return memo[address]

        # evaluate in ascending order so the recursion stays shallow
        for index in self.active_nodes:
            node_depth(index + self.num_inputs)

        return max((node_depth(int(a)) for a in self.output_genes), default=-1)

    # ------------------------------------------------------------------
    # Weights

    def weights_vector(self) -> np.ndarray:
        if not self.nodes:
            return np.empty(0)
        return np.concatenate([node.weights for node in self.nodes])

    def set_weights_vector(self, vector) -> None:
        vector = np.asarray(vector, dtype=float)
        if vector.shape != (self.num_weights,):
            raise ValueError(f"Expected {self.num_weights} weights, got shape {vector.shape}")
        for i, node in enumerate(self.nodes):
            node.weights = vector[i * self.arity:(i + 1) * self.arity].copy()

    # ------------------------------------------------------------------
    # Execution and fitness

    def execute(self, inputs) -> np.ndarray:
        return executor.execute(self, inputs)

    @property
    def outputs(self) -> np.ndarray:
        """Output values computed by the last execution."""
        return self.output_values

    def node_value(self, index: int):
        return self.nodes[index].output

    def reset(self) -> None:
        for node in self.nodes:
            node.output = 0.0

    def evaluate(self,
                 config          : 'Config',
                 data            : 'DataSet',
                 fitness_function: Callable | None = None) -> float:
        """
        Compute the fitness of the chromosome on the given data,
        without storing it.

        Parameters:
            config:           Stores configuration parameters
            data:             The data to evaluate on
            fitness_function: Callable to use instead of the one named by the config
        """
        if fitness_function is None:
            fitness_function = config.get_fitness_function()
        self.resolve_active_nodes()
        self.reset()
        return float(fitness_function(config, self, data))

    def set_fitness(self, config: 'Config', data: 'DataSet') -> None:
        self.fitness = self.evaluate(config, data)

    def set_fitness_validation(self, config: 'Config', data: 'DataSet') -> None:
        self.fitness_validation = self.evaluate(config, data)

    # ------------------------------------------------------------------
    # Comparison

    def _same_dimensions(self, other: 'Chromosome') -> bool:
        return (self.num_inputs  == other.num_inputs  and
                self.num_nodes   == other.num_nodes   and
                self.num_outputs == other.num_outputs and
                self.arity       == other.arity)

    def compare(self, other: 'Chromosome', weights: bool = False, active_only: bool = False) -> bool:
        """
        Whether two chromosomes have identical genes.

        Parameters:
            other:       The chromosome to compare against
            weights:     Also compare the connection weights
            active_only: Only compare nodes active in both chromosomes; a
                         node active in only one of them is a difference

        Returns:
            True if no difference was found
        """
        if other is None or not self._same_dimensions(other):
            return False

        for a, b in zip(self.nodes, other.nodes):
            if active_only:
                if a.active != b.active:
                    return False
                if not a.active:
                    continue
            if a.function != b.function:
                return False
            if not np.array_equal(a.inputs, b.inputs):
                return False
            if weights and not np.array_equal(a.weights, b.weights):
                return False

        return np.array_equal(self.output_genes, other.output_genes)

    def compare_ann(self, other: 'Chromosome') -> bool:
        return self.compare(other, weights=True)

    def compare_active(self, other: 'Chromosome') -> bool:
        return self.compare(other, active_only=True)

    def compare_active_ann(self, other: 'Chromosome') -> bool:
        return self.compare(other, weights=True, active_only=True)

    # ------------------------------------------------------------------
    # Persistence

    def save(self, path: str) -> None:
        """
        Write the chromosome to a text file.

        Format:
            numInputs,<n>
            numNodes,<n>
            numOutputs,<n>
            arity,<n>
            functionSet,<name>,<name>,...
            then for each node a function-index line followed by
            'arity' lines of '<address>,<weight>', and finally the
            output addresses, each followed by a comma.
        """
        lines = [f"numInputs,{self.num_inputs}",
                 f"numNodes,{self.num_nodes}",
                 f"numOutputs,{self.num_outputs}",
                 f"arity,{self.arity}",
                 ",".join(["functionSet"] + self.function_set.names)]
        for node in self.nodes:
            lines.append(f"{node.function}")
            for address, weight in zip(node.inputs, node.weights):
                lines.append(f"{address},{weight:f}")
        lines.append("".join(f"{address}," for address in self.output_genes))

        with open(path, 'w') as f:
            f.write("\n".join(lines))

    @classmethod
    def load(cls, path: str, rng: np.random.Generator | None = None) -> 'Chromosome':
        """
        Read a chromosome written by 'save'.

        Only preset node functions can be restored; a file naming any
        other function is rejected.

        Parameters:
            path: File to read
            rng:  Random generator for stochastic node functions

        Returns:
            The restored chromosome
        """
        try:
            with open(path) as f:
                lines = [line.strip() for line in f]
        except FileNotFoundError:
            raise FileNotFoundError(f"Chromosome file '{path}' not found")

        def header(line, key):
            name, value = line.split(',')[:2]
            if name != key:
                raise ValueError(f"Malformed chromosome file: expected '{key}', got '{name}'")
            return int(value)

        num_inputs  = header(lines[0], 'numInputs')
        num_nodes   = header(lines[1], 'numNodes')
        num_outputs = header(lines[2], 'numOutputs')
        arity       = header(lines[3], 'arity')

        names = [n for n in lines[4].split(',')[1:] if n]
        for name in names:
            if name not in functions:
                raise ValueError(f"Cannot load chromosome with custom node function '{name}'")

        nodes = []
        row   = 5
        for _ in range(num_nodes):
            node = {'function': int(lines[row]), 'inputs': [], 'weights': []}
            row += 1
            for _ in range(arity):
                address, weight = lines[row].split(',')
                node['inputs'].append(int(address))
                node['weights'].append(float(weight))
                row += 1
            nodes.append(node)

        outputs = [int(a) for a in lines[row].split(',') if a][:num_outputs] if num_outputs else []

        return cls.from_dict({'num_inputs'  : num_inputs,
                              'arity'       : arity,
                              'function_set': FunctionSet(names),
                              'nodes'       : nodes,
                              'outputs'     : outputs}, rng)

    # ------------------------------------------------------------------
    # Visualization

    def to_dot(self, weights: bool = True) -> graphviz.Digraph:
        """
        Graphviz representation of the chromosome.
        Active nodes are drawn in black, inactive ones in light grey.

        Parameters:
            weights: Label edges with connection weights (otherwise with the input index)
        """
        self.resolve_active_nodes()

        dot = graphviz.Digraph(name='NeuralNetwork')
        dot.attr(rankdir='LR', size='4,3', center='true')

        for i in range(self.num_inputs):
            dot.node(f"node{i}", label=f"({i}) Input", color='black', fontcolor='black')

        for i, node in enumerate(self.nodes):
            address = i + self.num_inputs
            colour  = 'black' if node.active else 'lightgrey'
            name    = self.function_set[node.function].name
            dot.node(f"node{address}", label=f"({address}) {name}", color=colour, fontcolor=colour)
            for j in range(self.node_arity(i)):
                label = f"{node.weights[j]:.2f}" if weights else f" ({j})"
                dot.edge(f"node{node.inputs[j]}", f"node{address}",
                         label=label, color=colour, fontcolor=colour, style='bold')

        first_output = self.num_inputs + self.num_nodes
        for i, address in enumerate(self.output_genes):
            dot.node(f"node{first_output + i}", label=f"Output {i}", color='black', fontcolor='black')
            dot.edge(f"node{address}", f"node{first_output + i}", color='black', style='bold')

        with dot.subgraph() as inputs:
            inputs.attr(rank='source')
            for i in range(self.num_inputs):
                inputs.node(f"node{i}")

        with dot.subgraph() as outputs:
            outputs.attr(rank='max')
            for i in range(self.num_outputs):
                outputs.node(f"node{first_output + i}")

        return dot

    def save_dot(self, path: str, weights: bool = True) -> None:
        with open(path, 'w') as f:
            f.write(self.to_dot(weights).source)

    def visualize(self, view: bool = True, weights: bool = True) -> graphviz.Digraph:
        dot = self.to_dot(weights)
        if view:
            dot.view(cleanup=True)
        return dot

    def __str__(self):
        self.resolve_active_nodes()
        lines = [f"({i}):\tinput" for i in range(self.num_inputs)]
        for i, node in enumerate(self.nodes):
            s = f"({self.num_inputs + i}):\t{self.function_set[node.function].name}\t"
            for j in range(self.node_arity(i)):
                s += f"{node.inputs[j]},{node.weights[j]:+.1f}\t"
            if node.active:
                s += "*"
            lines.append(s)
        lines.append("outputs: " + " ".join(str(a) for a in self.output_genes))
        return "\n".join(lines)
