"""
CGP Fitness Functions Module

A fitness function receives (config, chromosome, data) and returns a scalar;
lower is better for every fitness function.

Feed-forward chromosomes are executed once over the whole data set. A
recurrent chromosome is executed one sample at a time, in order, so that its
recurrent connections read the node outputs of the previous sample.

Functions:
    supervised_learning:       Sum of absolute errors
    classification_accuracy:   Negated fraction of correctly classified samples
    register_fitness_function: Make a custom fitness function available by name
"""

import numpy as np
from typing import Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from cgpde.data.dataset import DataSet
    from cgpde.genotype     import Chromosome
    from cgpde.run.config   import Config

def _check_dimensions(chromosome: 'Chromosome', data: 'DataSet') -> None:
    if chromosome.num_inputs != data.num_inputs:
        raise ValueError(f"The chromosome has {chromosome.num_inputs} inputs "
                         f"but the data set has {data.num_inputs}")
    if chromosome.num_outputs != data.num_outputs:
        raise ValueError(f"The chromosome has {chromosome.num_outputs} outputs "
                         f"but the data set has {data.num_outputs}")

def predict(chromosome: 'Chromosome', data: 'DataSet') -> np.ndarray:
    """
    Execute the chromosome on every sample of the data set.

    Returns:
        Array of shape (num_samples, num_outputs)
    """
    _check_dimensions(chromosome, data)

    if not chromosome.is_recurrent():
        return chromosome.execute(data.inputs).reshape(data.num_samples, data.num_outputs)

    predictions = np.empty((data.num_samples, data.num_outputs))
    for i in range(data.num_samples):
        predictions[i] = chromosome.execute(data.sample_inputs(i))
    return predictions

def supervised_learning(config: 'Config', chromosome: 'Chromosome', data: 'DataSet') -> float:
    """
    Sum, over samples and outputs, of the absolute difference between
    the chromosome output and the target.
    """
    predictions = predict(chromosome, data)
    with np.errstate(all='ignore'):
        return float(np.sum(np.abs(predictions - data.outputs)))

def classification_accuracy(config: 'Config', chromosome: 'Chromosome', data: 'DataSet') -> float:
    """
    Negated classification accuracy.

    The predicted class of a sample is the output with the largest value
    (the first one if several are equal). The true class is the last target
    equal to 1.0, or class 0 if there is none.
    """
    predictions = predict(chromosome, data)
    if data.num_samples == 0:
        return 0.0

    predicted = np.argmax(predictions, axis=1)

    hot     = data.outputs == 1.0
    last    = data.num_outputs - 1 - np.argmax(hot[:, ::-1], axis=1)
    correct = np.where(hot.any(axis=1), last, 0)

    return -float(np.sum(predicted == correct)) / data.num_samples

fitness_functions: dict[str, Callable] = {
    'supervised_learning'    : supervised_learning,
    'classification_accuracy': classification_accuracy,
}

def register_fitness_function(name: str, function: Callable) -> None:
    """
    Make a custom fitness function available under the given name.
    The callable receives (config, chromosome, data) and returns a float; lower is better.
    """
    fitness_functions[name] = function
