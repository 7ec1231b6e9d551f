#!/usr/bin/env python3
"""
Utility script to run the cross-validated classification experiment.

Usage:
    python scripts/run_example.py dataSets/iris.txt
    python scripts/run_example.py dataSets/iris.txt --config examples/configs/config_iris.ini
    python scripts/run_example.py dataSets/iris.txt --num-jobs 10 --output-dir results
"""

import sys
import argparse
from pathlib import Path

# Add the source directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cgpde.data import DataSet
from cgpde.run  import Config, Experiment


def main():
    parser = argparse.ArgumentParser(description='Compare CGPANN, CGPDE-IN and CGPDE-OUT on a classification data set')
    parser.add_argument('dataset',
                        help='Data set file (header "inputs,outputs,samples" followed by one sample per line)')
    parser.add_argument('--config', default='examples/configs/config_iris.ini',
                        help='INI configuration file')
    parser.add_argument('--generations-cgpann', type=int, default=50000,
                        help='Generation budget of CGPANN')
    parser.add_argument('--generations-in', type=int, default=64,
                        help='Generation budget of CGPDE-IN')
    parser.add_argument('--generations-out', type=int, default=40000,
                        help='Generation budget of CGPDE-OUT')
    parser.add_argument('--repetitions', type=int, default=3,
                        help='Number of independent cross-validations')
    parser.add_argument('--percentage', type=float, default=1.0,
                        help='Fraction of the data set to use')
    parser.add_argument('--seed', type=int, default=50,
                        help='Base random seed')
    parser.add_argument('--output-dir', default=None,
                        help='Directory for the per-fold data sets and the result files')
    parser.add_argument('--num-jobs', type=int, default=4,
                        help='Number of parallel jobs')

    args = parser.parse_args()

    config  = Config(args.config)
    dataset = DataSet.from_file(args.dataset)

    print(config)
    print(f"Data set: {args.dataset} ({dataset.num_samples} samples)")

    experiment = Experiment(config, dataset,
                            generations={'cgpann'   : args.generations_cgpann,
                                         'cgpde_in' : args.generations_in,
                                         'cgpde_out': args.generations_out},
                            num_repetitions=args.repetitions,
                            percentage=args.percentage,
                            seed=args.seed,
                            output_dir=args.output_dir)
    experiment.run(num_jobs=args.num_jobs, num_jobs_fitness=1)


if __name__ == '__main__':
    main()
