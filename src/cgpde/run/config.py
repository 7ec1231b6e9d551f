import configparser
import copy
import os
import warnings
from typing import Callable

from cgpde.functions         import FunctionSet
from cgpde.genotype.mutation import mutation_types
from cgpde.pool.reproduction import reproduction_schemes
from cgpde.pool.selection    import selection_schemes
from cgpde.run.fitness       import fitness_functions

class Config:
    """
    Configuration parameters of a CGP / CGPDE run.

    Attribute assignment is validated. Out-of-range tunables (mu, lambda,
    mutation rate, recurrent connection probability, number of threads, and
    unknown operator names) issue a warning and leave the previous value in
    place. Contract violations (chromosome dimensions, strategy, DE settings)
    raise ValueError.

    Public Methods:
        copy():                    Independent copy
        summary():                 Human-readable parameter listing
        get_fitness_function():    The configured fitness function
        get_selection_scheme():    The configured selection scheme
        get_reproduction_scheme(): The configured reproduction scheme
        get_mutation():            The configured mutation policy
    """

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a Config holding the defaults.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a default Config for manual attribute setting.
        """

        # Defaults, also used for any optional key missing from the file
        self.num_inputs                       = 1
        self.num_nodes                        = 10
        self.num_outputs                      = 1
        self.arity                            = 2
        self.function_set                     = FunctionSet()
        self.weight_range                     = 1.0
        self.recurrent_connection_probability = 0.0
        self.shortcut_connections             = True

        self.mu                  = 1
        self.lambda_             = 4
        self.strategy            = '+'
        self.mutation_rate       = 0.05
        self.mutation_type       = 'probabilistic'
        self.fitness_function    = 'supervised_learning'
        self.selection_scheme    = 'select_fittest'
        self.reproduction_scheme = 'mutate_random_parent'
        self.num_threads         = 1
        self.report_interval     = 0

        self.NP_IN        = 10
        self.NP_OUT       = 10
        self.max_iter_IN  = 100
        self.max_iter_OUT = 100
        self.CR           = 0.5
        self.F            = 1.0

        self.target_fitness            = 0.0
        self.fitness_termination_check = False
        self.num_generations           = 100

        if config_file is None:
            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        # [CHROMOSOME]

        # The number of program inputs (attributes of a sample).
        self.num_inputs = get_value('CHROMOSOME', 'num_inputs', int)

        # The number of function nodes in every chromosome.
        self.num_nodes = get_value('CHROMOSOME', 'num_nodes', int)

        # The number of program outputs (classes, for a classifier).
        self.num_outputs = get_value('CHROMOSOME', 'num_outputs', int)

        # The number of input (and weight) genes of every node.
        self.arity = get_value('CHROMOSOME', 'arity', int)

        # Comma-separated names of the preset node functions available to the nodes.
        self.function_set = get_value('CHROMOSOME', 'function_set', str)

        # Connection weights are drawn uniformly from [-weight_range, weight_range].
        self.weight_range = get_value('CHROMOSOME', 'weight_range', float, default=self.weight_range)

        # The probability that a new input gene is a recurrent connection,
        # i.e. addresses its own node or a later one.
        self.recurrent_connection_probability = \
            get_value('CHROMOSOME', 'recurrent_connection_probability', float,
                      default=self.recurrent_connection_probability)

        # Whether output genes may address program inputs directly.
        self.shortcut_connections = \
            get_value('CHROMOSOME', 'shortcut_connections', bool, default=self.shortcut_connections)

        # [EVOLUTION]

        # The number of parents and children of the evolution strategy.
        self.mu      = get_value('EVOLUTION', 'mu',     int, default=self.mu)
        self.lambda_ = get_value('EVOLUTION', 'lambda', int, default=self.lambda_)

        # The evolution strategy.
        # Allowed values:
        #   "+" parents and children compete for the next parent slots
        #   "," only the children compete
        self.strategy = get_value('EVOLUTION', 'strategy', str, default=self.strategy)

        # The mutation rate; its meaning depends on the mutation type.
        self.mutation_rate = get_value('EVOLUTION', 'mutation_rate', float, default=self.mutation_rate)

        # The mutation policy.
        # Allowed values: "probabilistic", "probabilistic_only_active",
        #                 "point", "point_ann", "single", or a registered name
        self.mutation_type = get_value('EVOLUTION', 'mutation_type', str, default=self.mutation_type)

        # The names of the fitness function, selection scheme and reproduction scheme.
        self.fitness_function = \
            get_value('EVOLUTION', 'fitness_function', str, default=self.fitness_function)
        self.selection_scheme = \
            get_value('EVOLUTION', 'selection_scheme', str, default=self.selection_scheme)
        self.reproduction_scheme = \
            get_value('EVOLUTION', 'reproduction_scheme', str, default=self.reproduction_scheme)

        # Number of parallel processes used for fitness evaluation.
        self.num_threads = get_value('EVOLUTION', 'num_threads', int, default=self.num_threads)

        # Report progress every this many generations (0 = never).
        self.report_interval = get_value('EVOLUTION', 'report_interval', int, default=self.report_interval)

        # [DIFFERENTIAL_EVOLUTION]

        # DE population size and number of sweeps, for CGPDE-IN and CGPDE-OUT.
        self.NP_IN        = get_value('DIFFERENTIAL_EVOLUTION', 'NP_IN',        int, default=self.NP_IN)
        self.NP_OUT       = get_value('DIFFERENTIAL_EVOLUTION', 'NP_OUT',       int, default=self.NP_OUT)
        self.max_iter_IN  = get_value('DIFFERENTIAL_EVOLUTION', 'max_iter_IN',  int, default=self.max_iter_IN)
        self.max_iter_OUT = get_value('DIFFERENTIAL_EVOLUTION', 'max_iter_OUT', int, default=self.max_iter_OUT)

        # DE crossover rate, in [0,1].
        self.CR = get_value('DIFFERENTIAL_EVOLUTION', 'CR', float, default=self.CR)

        # DE differential weight, in [0,2].
        self.F = get_value('DIFFERENTIAL_EVOLUTION', 'F', float, default=self.F)

        # [TERMINATION]

        # The fitness value which, when reached, may end the run.
        self.target_fitness = get_value('TERMINATION', 'target_fitness', float, default=self.target_fitness)

        # Whether to stop the run once the best validation fitness
        # is lower than or equal to 'target_fitness'.
        self.fitness_termination_check = \
            get_value('TERMINATION', 'fitness_termination_check', bool, default=self.fitness_termination_check)

        # The number of generations after which to stop the run.
        self.num_generations = get_value('TERMINATION', 'num_generations', int, default=self.num_generations)

    def __setattr__(self, name, value):
        validator = self._validators.get(name)
        if validator is not None and name in self.__dict__:
            value = validator(self, name, value)
        elif validator is not None:
            value = validator(self, name, value, initial=True)
        object.__setattr__(self, name, value)

    # ------------------------------------------------------------------
    # Validation

    def _warn_and_keep(self, name, value, message):
        previous = self.__dict__.get(name)
        warnings.warn(f"{message}; '{name}' left unchanged as {previous!r}")
        return previous

    def _positive(self, name, value, initial=False):
        if value is None or value <= 0:
            if initial:
                raise ValueError(f"Invalid value for '{name}': {value}")
            return self._warn_and_keep(name, value, f"'{name}' must be one or greater, got {value}")
        return value

    def _probability(self, name, value, initial=False):
        if value is None or not 0.0 <= value <= 1.0:
            if initial:
                raise ValueError(f"Invalid value for '{name}': {value}")
            return self._warn_and_keep(name, value, f"'{name}' must be in the range [0,1], got {value}")
        return value

    def _registered(registry):
        def validate(self, name, value, initial=False):
            if value not in registry:
                if initial:
                    raise ValueError(f"Unknown {name.replace('_', ' ')} '{value}'")
                return self._warn_and_keep(name, value, f"Unknown {name.replace('_', ' ')} '{value}'")
            return value
        return validate

    def _num_inputs(self, name, value, initial=False):
        if value is None or value <= 0:
            raise ValueError(f"Number of inputs must be one or greater, got {value}")
        return value

    def _non_negative(self, name, value, initial=False):
        if value is None or value < 0:
            raise ValueError(f"'{name}' cannot be negative, got {value}")
        return value

    def _arity(self, name, value, initial=False):
        if value is None or value < 1:
            raise ValueError(f"Invalid arity: {value}")
        return value

    def _strategy(self, name, value, initial=False):
        if value not in ('+', ','):
            raise ValueError(f"Unknown evolutionary strategy '{value}'; must be '+' or ','")
        return value

    def _population_size(self, name, value, initial=False):
        if value is None or value < 4:
            raise ValueError(f"DE population size cannot be less than four, got {value}")
        return value

    def _crossover_rate(self, name, value, initial=False):
        if value is None or not 0.0 <= value <= 1.0:
            raise ValueError(f"DE crossover rate must be in the range [0,1], got {value}")
        return value

    def _differential_weight(self, name, value, initial=False):
        if value is None or not 0.0 <= value <= 2.0:
            raise ValueError(f"DE differential weight must be in the range [0,2], got {value}")
        return value

    def _function_set(self, name, value, initial=False):
        if isinstance(value, FunctionSet):
            return value
        return FunctionSet(value or [])

    _validators: dict[str, Callable] = {
        'num_inputs'                      : _num_inputs,
        'num_nodes'                       : _non_negative,
        'num_outputs'                     : _non_negative,
        'arity'                           : _arity,
        'function_set'                    : _function_set,
        'recurrent_connection_probability': _probability,
        'mu'                              : _positive,
        'lambda_'                         : _positive,
        'strategy'                        : _strategy,
        'mutation_rate'                   : _probability,
        'mutation_type'                   : _registered(mutation_types),
        'fitness_function'                : _registered(fitness_functions),
        'selection_scheme'                : _registered(selection_schemes),
        'reproduction_scheme'             : _registered(reproduction_schemes),
        'num_threads'                     : _positive,
        'NP_IN'                           : _population_size,
        'NP_OUT'                          : _population_size,
        'max_iter_IN'                     : _non_negative,
        'max_iter_OUT'                    : _non_negative,
        'CR'                              : _crossover_rate,
        'F'                               : _differential_weight,
        'num_generations'                 : _non_negative,
        'report_interval'                 : _non_negative,
    }

    # ------------------------------------------------------------------
    # Pluggable operators

    def get_fitness_function(self) -> Callable:
        return fitness_functions[self.fitness_function]

    def get_selection_scheme(self) -> Callable:
        return selection_schemes[self.selection_scheme]

    def get_reproduction_scheme(self) -> Callable:
        return reproduction_schemes[self.reproduction_scheme]

    def get_mutation(self) -> Callable:
        return mutation_types[self.mutation_type]

    def copy(self) -> 'Config':
        return copy.deepcopy(self)

    def summary(self) -> str:
        """
        Human-readable listing of the parameters.
        """
        rule  = "-" * 59
        lines = [rule,
                 "                       Parameters                          ",
                 rule,
                 f"Evolutionary Strategy:\t\t\t({self.mu}{self.strategy}{self.lambda_})-ES",
                 f"Inputs:\t\t\t\t\t{self.num_inputs}",
                 f"Nodes:\t\t\t\t\t{self.num_nodes}",
                 f"Outputs:\t\t\t\t{self.num_outputs}",
                 f"Node Arity:\t\t\t\t{self.arity}",
                 f"Connection weights range:\t\t+/- {self.weight_range:f}",
                 f"Mutation Type:\t\t\t\t{self.mutation_type}",
                 f"Mutation rate:\t\t\t\t{self.mutation_rate:f}",
                 f"Recurrent Connection Probability:\t{self.recurrent_connection_probability:f}",
                 f"Shortcut Connections:\t\t\t{int(self.shortcut_connections)}",
                 f"Fitness Function:\t\t\t{self.fitness_function}",
                 f"Selection scheme:\t\t\t{self.selection_scheme}",
                 f"Reproduction scheme:\t\t\t{self.reproduction_scheme}",
                 f"Threads:\t\t\t\t{self.num_threads}",
                 f"DE population (IN/OUT):\t\t{self.NP_IN}/{self.NP_OUT}",
                 f"DE iterations (IN/OUT):\t\t{self.max_iter_IN}/{self.max_iter_OUT}",
                 f"DE CR, F:\t\t\t\t{self.CR:f}, {self.F:f}",
                 str(self.function_set),
                 rule]
        return "\n".join(lines)

    def __str__(self):
        return self.summary()
