"""
NEAT Pool Package

This package manages the evolving population and its division into species.

Modules:
    species:         Species class
    species_manager: SpeciesManager class (speciation, stagnation, offspring allocation)
    population:      Population class and GenerationState enumeration
"""

from neatevo.pool.population      import GenerationState, Population
from neatevo.pool.species         import Species
from neatevo.pool.species_manager import SpeciesManager

__all__ = ['GenerationState',
           'Population',
           'Species',
           'SpeciesManager']
