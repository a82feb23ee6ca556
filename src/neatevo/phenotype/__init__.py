"""
NEAT Phenotype Package

This package implements the phenotype representation for the NEAT (NeuroEvolution
of Augmenting Topologies) algorithm. It provides classes for expressing genomes as
executable neural networks.

Modules:
    network_base: Abstract base class (graph analysis, introspection, visualization)
    network:      Feed-forward and recurrent network implementations

Exported Classes:
    Connection:         A weighted connection between two neurons
    Neuron:             A computational node applying activation functions
    NetworkBase:        Abstract base class for network implementations
    FeedForwardNetwork: Network without feedback edges
    RecurrentNetwork:   Network with feedback edges

Exported Functions:
    create_network: Build the right kind of network for a genome
"""

from neatevo.phenotype.network_base import NetworkBase
from neatevo.phenotype.network      import (Connection,
                                            Neuron,
                                            FeedForwardNetwork,
                                            RecurrentNetwork,
                                            create_network)

__all__ = ['Connection',
           'Neuron',
           'NetworkBase',
           'FeedForwardNetwork',
           'RecurrentNetwork',
           'create_network']
