"""
NEAT Reproduction Package

This package implements the genetic operators producing new genomes.

Modules:
    mutation:  Mutation operators (structural and parametric)
    crossover: Crossover of two parents, and cloning of a single one
"""

from neatevo.reproduction.crossover import crossover, clone
from neatevo.reproduction.mutation  import (mutate,
                                            mutate_add_connection,
                                            mutate_add_node,
                                            mutate_delete_connection,
                                            mutate_toggle_connection,
                                            mutate_weights,
                                            mutate_activation)

__all__ = ['crossover',
           'clone',
           'mutate',
           'mutate_add_connection',
           'mutate_add_node',
           'mutate_delete_connection',
           'mutate_toggle_connection',
           'mutate_weights',
           'mutate_activation']
