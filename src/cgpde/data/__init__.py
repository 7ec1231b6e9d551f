"""
CGP Data Package

This package holds the sample data consumed by fitness functions, and the
helpers used to build stratified cross-validation splits.

Modules:
    dataset: DataSet class

Exported Classes:
    DataSet: Sample inputs and target outputs
"""

from cgpde.data.dataset import DataSet

__all__ = ['DataSet']
