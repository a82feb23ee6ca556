"""
NEAT Node Gene Module.

This module implements the NodeGene class and NodeType enumeration
for the NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    NodeType: Enumeration for node types (INPUT, HIDDEN, OUTPUT, BIAS)
    NodeGene: Gene encoding a single network node
"""

import random
from enum   import Enum
from typing import Callable

from neatevo.activations import activation_codes, get_activation
from neatevo.run.config  import Config

class NodeType(Enum):
    """
    Nodes come in four types: input, hidden, output and bias.
    A bias node behaves like an input which always emits the same value.
    """
    INPUT  = "I"
    HIDDEN = "H"
    OUTPUT = "O"
    BIAS   = "B"

    @property
    def is_source(self) -> bool:
        """Whether nodes of this type take no incoming connections."""
        return self in (NodeType.INPUT, NodeType.BIAS)

class NodeGene:
    """
    A gene describing a node in a Neural Network.

    Node genes are identified by a node ID which remains consistent across
    structural mutations and crossover operations. The node computes its
    output as: activation(weighted_input). Input and bias nodes have no
    activation, they pass their value through.

    The value a node holds during evaluation does not live on the gene but
    on the compiled network, so one genome may back several networks at once.

    Public Attributes:
        id:              Unique identifier for this node (within its genome)
        type:            Type of node (INPUT, HIDDEN, OUTPUT or BIAS)
        activation_name: Name of the activation function (e.g., 'tanh', 'relu'), None for sources

    Public Properties:
        activation: The activation function itself (callable), None for sources

    Public Methods:
        mutate(config, rng): Stochastically change the activation function
    """

    def __init__(self,
                 node_id        : int,
                 node_type      : NodeType,
                 activation_name: str | None = None):
        """
        Initialize a node gene.

        Parameters:
            node_id:         Unique identifier for this node
            node_type:       Type of node
            activation_name: Name of activation function (ignored for INPUT and BIAS nodes)
                             Must be given for HIDDEN and OUTPUT nodes.
        """
        self.id  : int      = node_id
        self.type: NodeType = node_type

        if node_type.is_source:
            self.activation_name: str | None = None
        else:
            if activation_name is None:
                raise ValueError(f"node {node_id} of type {node_type.name} needs an activation function")
            get_activation(activation_name)   # fail early on unknown names
            self.activation_name = activation_name

    @property
    def activation(self) -> Callable | None:
        """
        Get the activation function for this node.

        Returns:
           The activation function for the node (None for INPUT and BIAS nodes).
        """
        if self.activation_name is None:
            return None
        return get_activation(self.activation_name)

    def mutate(self, config: Config, rng=random) -> None:
        """
        Stochastically replace the activation function (hidden and output nodes only).
        The new function is chosen among 'config.activation_options',
        excluding the current one.

        Parameters:
            config: Stores configuration parameters
            rng:    Source of randomness (random.Random-like)
        """
        if self.type.is_source:
            return

        if rng.random() < config.activation_mutate_prob:
            available_activations = [name for name in config.activation_options
                                     if name != self.activation_name]
            if available_activations:
                self.activation_name = rng.choice(available_activations)

    def __eq__(self, other):
        if not isinstance(other, NodeGene):
            return NotImplemented
        return (self.id              == other.id   and
                self.type            == other.type and
                self.activation_name == other.activation_name)

    def __repr__(self):
        return (f"NodeGene(node_id={self.id:+03d}, node_type=NodeType.{self.type.name:6s}, "
                f"activation_name={self.activation_name!r})")

    def __str__(self):
        if self.type.is_source:
            return f"[{self.type.value}{self.id}]"
        else:
            # Get the 3-letter activation code
            act_code = activation_codes.get(self.activation_name, "???")
            return f"[{self.type.value}{self.id},{act_code}]"
