"""
CGP Data Set Module

This module implements the DataSet class, an immutable table of input/target
samples, together with the helpers used to build stratified cross-validation
splits for classification problems (targets are one-hot encoded).

File format:
    numInputs,numOutputs,numSamples
    followed by one line per sample holding the input values and then the
    target values, separated by commas or spaces.

Classes:
    DataSet: Sample inputs and target outputs
"""

import numpy as np

class DataSet:
    """
    A set of samples, each an input vector and a target vector.

    Public Attributes:
        inputs:  Array of shape (num_samples, num_inputs)
        outputs: Array of shape (num_samples, num_outputs)

    Public Methods:
        from_file(path):                Read a data set from a text file
        save(path):                     Write the data set to a text file
        shuffled(rng):                  Copy with the samples shuffled
        generate_folds(num_folds):      Stratified folds
        reduce_sample_size(percentage): Stratified subsample
        split_indices(...):             Random training/validation fold indices
        concatenate(data_sets):         Merge data sets
    """

    def __init__(self, inputs, outputs):
        """
        Parameters:
            inputs:  Array-like of shape (num_samples, num_inputs)
            outputs: Array-like of shape (num_samples, num_outputs)
        """
        inputs  = np.array(inputs,  dtype=float)
        outputs = np.array(outputs, dtype=float)

        if inputs.ndim != 2 or outputs.ndim != 2:
            raise ValueError("Inputs and outputs must be two-dimensional arrays")
        if inputs.shape[0] != outputs.shape[0]:
            raise ValueError(f"Number of input samples ({inputs.shape[0]}) does not match "
                             f"number of output samples ({outputs.shape[0]})")

        inputs.setflags(write=False)
        outputs.setflags(write=False)
        self.inputs : np.ndarray = inputs
        self.outputs: np.ndarray = outputs

    @classmethod
    def from_file(cls, path: str) -> 'DataSet':
        try:
            with open(path) as f:
                lines = [line.strip() for line in f]
        except FileNotFoundError:
            raise FileNotFoundError(f"Data set file '{path}' not found")

        num_inputs, num_outputs, num_samples = (int(v) for v in lines[0].split(',')[:3])

        rows = []
        for line in lines[1:num_samples + 1]:
            values = [float(v) for v in line.replace(',', ' ').split()]
            if len(values) != num_inputs + num_outputs:
                raise ValueError(f"Malformed data set line: '{line}'")
            rows.append(values)

        if len(rows) != num_samples:
            raise ValueError(f"Data set file '{path}' declares {num_samples} samples, found {len(rows)}")

        table = np.array(rows, dtype=float).reshape(num_samples, num_inputs + num_outputs)
        return cls(table[:, :num_inputs], table[:, num_inputs:])

    def save(self, path: str) -> None:
        lines = [f"{self.num_inputs},{self.num_outputs},{self.num_samples}"]
        for x, y in zip(self.inputs, self.outputs):
            lines.append(",".join(f"{v:f}" for v in list(x) + list(y)))
        with open(path, 'w') as f:
            f.write("\n".join(lines) + "\n")

    @property
    def num_inputs(self) -> int:
        return self.inputs.shape[1]

    @property
    def num_outputs(self) -> int:
        return self.outputs.shape[1]

    @property
    def num_samples(self) -> int:
        return self.inputs.shape[0]

    def sample_inputs(self, i: int) -> np.ndarray:
        return self.inputs[i]

    def sample_outputs(self, i: int) -> np.ndarray:
        return self.outputs[i]

    def __len__(self) -> int:
        return self.num_samples

    def shuffled(self, rng: np.random.Generator) -> 'DataSet':
        """
        Return a copy in which 'num_samples' randomly chosen pairs of samples were swapped.
        """
        order = np.arange(self.num_samples)
        for _ in range(self.num_samples):
            a, b = rng.integers(self.num_samples), rng.integers(self.num_samples)
            order[a], order[b] = order[b], order[a]
        return DataSet(self.inputs[order], self.outputs[order])

    def _class_members(self) -> list[list[int]]:
        # samples whose target for class c is exactly 1
        return [[i for i in range(self.num_samples) if self.outputs[i, c] == 1.0]
                for c in range(self.num_outputs)]

    def generate_folds(self, num_folds: int = 10) -> list['DataSet']:
        """
        Split the data into folds which keep the class proportions.

        The samples of each class are dealt to the folds in turn; the fold
        pointer carries on from one class to the next, so fold sizes differ
        by at most one. Samples without a one-hot target are left out.
        """
        members = [[] for _ in range(num_folds)]
        k = 0
        for class_members in self._class_members():
            for i in class_members:
                members[k].append(i)
                k = (k + 1) % num_folds

        return [DataSet(self.inputs[m].reshape(-1, self.num_inputs),
                        self.outputs[m].reshape(-1, self.num_outputs)) for m in members]

    def reduce_sample_size(self, percentage: float) -> 'DataSet':
        """
        Keep 'percentage' of the samples, preserving the class proportions.

        Each class keeps int(percentage * class_size) samples; the shortfall
        against int(percentage * num_samples) is spread over the classes in
        turn. The data is returned unchanged unless 0 < percentage < 1.
        """
        if percentage <= 0.0 or percentage >= 1.0:
            return self

        total   = int(percentage * self.num_samples)
        members = self._class_members()
        quota   = [int(percentage * len(m)) for m in members]

        c = 0
        for _ in range(total - sum(quota)):
            quota[c] += 1
            c = (c + 1) % self.num_outputs

        kept = []
        for class_members, class_quota in zip(members, quota):
            kept.extend(class_members[:class_quota])
            if len(kept) >= total:
                kept = kept[:total]
                break

        return DataSet(self.inputs[kept].reshape(-1, self.num_inputs),
                       self.outputs[kept].reshape(-1, self.num_outputs))

    @staticmethod
    def split_indices(testing_index : int,
                      rng           : np.random.Generator,
                      num_folds     : int = 10,
                      num_training  : int = 7,
                      num_validation: int = 2) -> tuple[list[int], list[int]]:
        """
        Draw distinct fold indices for training and validation, none equal to 'testing_index'.

        Returns:
            The training indices and the validation indices
        """
        if num_training + num_validation > num_folds - 1:
            raise ValueError(f"Cannot draw {num_training} training and {num_validation} "
                             f"validation folds out of {num_folds}")

        taken = [testing_index]
        for _ in range(num_training + num_validation):
            index = int(rng.integers(num_folds))
            while index in taken:
                index = int(rng.integers(num_folds))
            taken.append(index)

        return taken[1:num_training + 1], taken[num_training + 1:]

    @staticmethod
    def concatenate(data_sets: list['DataSet']) -> 'DataSet':
        if not data_sets:
            raise ValueError("Cannot concatenate an empty list of data sets")
        return DataSet(np.concatenate([d.inputs  for d in data_sets]),
                       np.concatenate([d.outputs for d in data_sets]))

    def __str__(self):
        lines = [f"Inputs: {self.num_inputs}, Outputs: {self.num_outputs}, Samples: {self.num_samples}"]
        for x, y in zip(self.inputs, self.outputs):
            lines.append(" ".join(f"{v:f}" for v in x) + " : " + " ".join(f"{v:f}" for v in y))
        return "\n".join(lines)
