"""
NEAT Genotype Package

This package implements the genotype representation for the NEAT (NeuroEvolution of
Augmenting Topologies) algorithm. It provides classes for encoding neural network
structures and parameters at the genetic level.

The NEAT genotype consists of two types of genes:
- Node genes:       Encode individual neurons (type and activation function)
- Connection genes: Encode weighted connections between neurons with innovation numbers

Modules:
    node_gene:          NodeType enumeration and NodeGene class
    connection_gene:    ConnectionGene class
    genome:             Genome class
    innovation_tracker: InnovationTracker class
    serialization:      JSON save/load helpers for genomes

Exported Classes:
    NodeType:          Enumeration for node types (INPUT, HIDDEN, OUTPUT, BIAS)
    NodeGene:          Gene encoding a single network node
    ConnectionGene:    Gene encoding a weighted connection between nodes
    Genome:            Complete genome representing a neural network
    InnovationTracker: Tracker for innovation numbers and node IDs

Exported Functions:
    save_genome: Write a genome to a JSON file
    load_genome: Read a genome from a JSON file
"""

from neatevo.genotype.connection_gene    import ConnectionGene
from neatevo.genotype.genome             import Genome
from neatevo.genotype.innovation_tracker import InnovationTracker
from neatevo.genotype.node_gene          import NodeType, NodeGene
from neatevo.genotype.serialization      import save_genome, load_genome

__all__ = ['ConnectionGene',
           'Genome',
           'InnovationTracker',
           'NodeGene',
           'NodeType',
           'save_genome',
           'load_genome']
