"""
NEAT Connection Gene Module

Classes:
    ConnectionGene: Gene encoding a weighted, directed edge between two nodes

Functions:
    random_weight: Draw an initial weight for a new connection
"""

import numpy as np
import random

from neatevo.run.config import Config

class ConnectionGene:
    """
    A directed, weighted edge 'node_in -> node_out' of a genome.

    The innovation number is the gene's historical marker: two genomes holding
    genes with the same innovation number hold the same structural edge, which
    is how crossover and the distance measure line genomes up. A disabled gene
    is kept in the genome but ignored when the network is built.

    Public Attributes:
        node_in:    Source node ID
        node_out:   Target node ID
        weight:     Connection weight
        enabled:    False if the edge is switched off
        innovation: Historical marker shared by all genes for this edge

    Public Methods:
        mutate(config, rng): Perturb or replace the weight
    """

    def __init__(self,
                 node_in   : int,
                 node_out  : int,
                 weight    : float,
                 innovation: int,
                 enabled   : bool = True):
        self.node_in   : int   = node_in
        self.node_out  : int   = node_out
        self.weight    : float = float(weight)
        self.enabled   : bool  = enabled
        self.innovation: int   = innovation

    @property
    def endpoints(self) -> tuple[int, int]:
        return self.node_in, self.node_out

    def mutate(self, config: Config, rng=random) -> None:
        """
        Mutate the weight.

        With probability 'weight_perturb_prob' a N(0, weight_perturb_strength)
        step is added; otherwise, with probability 'weight_replace_prob', a
        fresh weight is drawn. The result stays within [min_weight, max_weight].

        Parameters:
            config: Stores configuration parameters
            rng:    Source of randomness (random.Random-like)
        """
        perturb_prob = config.weight_perturb_prob   # prob of perturbing the 'weight'
        replace_prob = config.weight_replace_prob   # prob of replacing  the 'weight'

        r = rng.random()
        if r < perturb_prob:
            chg_weight  = rng.gauss(0, config.weight_perturb_strength)
            new_weight  = self.weight + chg_weight
            new_weight  = np.maximum(config.min_weight, np.minimum(config.max_weight, new_weight))  # Clip it
            self.weight = float(new_weight)

        elif r < perturb_prob + replace_prob:
            self.weight = random_weight(config, rng)

    def __eq__(self, other):
        if not isinstance(other, ConnectionGene):
            return NotImplemented
        return (self.node_in    == other.node_in  and
                self.node_out   == other.node_out and
                self.weight     == other.weight   and
                self.enabled    == other.enabled  and
                self.innovation == other.innovation)

    def __repr__(self):
        return (f"ConnectionGene(node_in={self.node_in:03d}, node_out={self.node_out:03d}, "
                f"weight={self.weight:+.6f}, enabled={self.enabled}, innovation={self.innovation:03d})")

    def __str__(self):
        s  = f"[{self.innovation:03d},{'E' if self.enabled else 'D'},"
        s += f"{self.node_in:02d}=>{self.node_out:02d},{self.weight:+.02f}]"
        return s

def random_weight(config: Config, rng=random) -> float:
    """
    Draw a fresh connection weight from N(weight_init_mean, weight_init_stdev),
    clipped to [min_weight, max_weight].
    """
    weight = rng.gauss(config.weight_init_mean, config.weight_init_stdev)
    return float(np.minimum(np.maximum(weight, config.min_weight), config.max_weight))
