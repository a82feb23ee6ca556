#!/usr/bin/env python3
"""
Utility script to visualize a saved NEAT genome.

Usage:
    python scripts/visualize_network.py --genome xor_best_genome.json --config examples/config_xor.ini
"""

import argparse
import sys

from neatevo           import Config, load_genome
from neatevo.phenotype import create_network


def visualize_genome(genome, output_file='network', format='png', view=True):
    """
    Render the network expressed by 'genome' to 'output_file.format'.

    Args:
        genome:      The genome to visualize
        output_file: Output filename (without extension)
        format:      Output format (png, pdf, svg, etc.)
        view:        Whether to automatically open the generated file
    """
    dot        = create_network(genome).visualize()
    dot.format = format
    dot.render(output_file, view=view, cleanup=True)
    print(f"Network visualization saved to {output_file}.{format}")


def main():
    parser = argparse.ArgumentParser(description='Visualize NEAT neural networks')
    parser.add_argument('--genome', type=str, required=True,
                        help='Path to a genome saved as JSON')
    parser.add_argument('--config', type=str, default=None,
                        help='Configuration file the genome was evolved with')
    parser.add_argument('--output', type=str, default='network',
                        help='Output filename (without extension)')
    parser.add_argument('--format', type=str, default='png',
                        choices=['png', 'pdf', 'svg'],
                        help='Output format')
    parser.add_argument('--no-view', action='store_true',
                        help='Do not automatically open the generated file')

    args = parser.parse_args()

    try:
        genome = load_genome(args.genome, Config(args.config))
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: could not load genome from {args.genome}: {e}")
        sys.exit(1)

    visualize_genome(genome, args.output, args.format, not args.no_view)


if __name__ == '__main__':
    main()
