"""
NEAT (NeuroEvolution of Augmenting Topologies) - A Python implementation.

This package evolves populations of variable-topology neural networks: genomes
encoding nodes and connections are mutated, crossed over with topology-aware
alignment, grouped into species by structural similarity, and selected by
fitness across generations.

Main components:
- activations:  Activation functions for neural networks
- genotype:     Genetic encoding (genomes, genes, innovation tracking, serialization)
- phenotype:    Neural network expression (feed-forward and recurrent networks)
- reproduction: Mutation and crossover operators
- pool:         Population and speciation management
- run:          Configuration and trial execution

Example:
    >>> from neatevo import Config, Trial, create_network
    >>> config = Config("config.ini")
    >>> class MyTrial(Trial):
    ...     def _evaluate_fitness(self, genome):
    ...         network = create_network(genome)
    ...         return 4.0 - sum((network.tick(x)[0] - y) ** 2 for x, y in data)
    >>> best_genome = MyTrial(config).run()
"""

__version__ = "0.1.0"

# Import main classes for convenient access
from neatevo.run.config    import Config
from neatevo.errors        import (NeatError,
                                   StructuralError,
                                   ArityMismatch,
                                   EmptyPopulation,
                                   InvalidConfiguration)
from neatevo.genotype      import (ConnectionGene,
                                   Genome,
                                   InnovationTracker,
                                   NodeGene,
                                   NodeType,
                                   save_genome,
                                   load_genome)
from neatevo.phenotype     import FeedForwardNetwork, RecurrentNetwork, create_network
from neatevo.reproduction  import crossover, clone, mutate
from neatevo.pool          import GenerationState, Population, Species, SpeciesManager
from neatevo.run.trial     import Trial

__all__ = [
    "Config",
    "NeatError",
    "StructuralError",
    "ArityMismatch",
    "EmptyPopulation",
    "InvalidConfiguration",
    "ConnectionGene",
    "Genome",
    "InnovationTracker",
    "NodeGene",
    "NodeType",
    "save_genome",
    "load_genome",
    "FeedForwardNetwork",
    "RecurrentNetwork",
    "create_network",
    "crossover",
    "clone",
    "mutate",
    "GenerationState",
    "Population",
    "Species",
    "SpeciesManager",
    "Trial",
]
