#!/usr/bin/env python3
"""
Utility script to visualize a saved CGP chromosome.

Usage:
    python scripts/visualize_network.py --chromosome best.chromo
    python scripts/visualize_network.py --chromosome best.chromo --no-weights --active-only
"""

import sys
import argparse
from pathlib import Path

# Add the source directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cgpde.genotype import Chromosome


def main():
    parser = argparse.ArgumentParser(description='Visualize a saved CGP chromosome')
    parser.add_argument('--chromosome', required=True,
                        help='Chromosome file written by Chromosome.save')
    parser.add_argument('--output', default='network',
                        help='Output filename (without extension)')
    parser.add_argument('--format', default='png',
                        help='Output format (png, pdf, svg, etc.)')
    parser.add_argument('--no-weights', action='store_true',
                        help='Label edges with the input index instead of the weight')
    parser.add_argument('--active-only', action='store_true',
                        help='Drop the inactive nodes before drawing')
    parser.add_argument('--no-view', action='store_true',
                        help='Do not open the generated file')

    args = parser.parse_args()

    chromosome = Chromosome.load(args.chromosome)
    if args.active_only:
        chromosome.remove_inactive_nodes()

    print(chromosome)
    print(f"Active nodes: {chromosome.num_active_nodes}, depth: {chromosome.depth()}")

    dot = chromosome.to_dot(weights=not args.no_weights)
    dot.format = args.format
    dot.render(args.output, view=not args.no_view, cleanup=True)
    print(f"Network visualization saved to {args.output}.{args.format}")


if __name__ == '__main__':
    main()
