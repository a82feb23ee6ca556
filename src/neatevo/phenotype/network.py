"""
NEAT Network Module

This module implements the phenotype representation for the NEAT algorithm.
It provides classes for expressing a genome as an executable neural network,
using an Object Oriented approach to representing Nodes, Connections and the Network.

Classes:
    Connection:         A weighted connection between two neurons
    Neuron:             A computational node applying activation functions
    FeedForwardNetwork: A network without feedback edges, stateless across ticks
    RecurrentNetwork:   A network with feedback edges, keeping its state across ticks

Functions:
    create_network: Build the right kind of network for a genome
"""

from typing import Callable, Sequence, TYPE_CHECKING

from neatevo.errors                 import ArityMismatch
from neatevo.genotype.node_gene     import NodeType  # Needed at runtime
from neatevo.phenotype.network_base import NetworkBase

if TYPE_CHECKING:
    from neatevo.genotype import ConnectionGene, Genome, NodeGene

class Connection:
    """
    A weighted connection between two neurons in a neural network.

    This class represents the phenotype manifestation of a ConnectionGene.
    The gene's values are copied when the network is built, so mutating the
    genome afterwards leaves an existing network unchanged.

    Public Properties:
        nodeID_in:  ID of the source neuron
        nodeID_out: ID of the destination neuron
        enabled:    Whether this connection is active in the network
        weight:     Weight multiplier applied to the transmitted signal
        innovation: Global innovation number identifying this connection
    """

    def __init__(self, gene: "ConnectionGene"):
        """
        Parameters:
            gene: the gene encoding the Connection
        """
        self._node_in   : int   = gene.node_in
        self._node_out  : int   = gene.node_out
        self._enabled   : bool  = gene.enabled
        self._weight    : float = gene.weight
        self._innovation: int   = gene.innovation

    @property
    def nodeID_in(self) -> int:
        """The ID of the node/neuron representing the connection start."""
        return self._node_in

    @property
    def nodeID_out(self) -> int:
        """The ID of the node/neuron representing the connection end."""
        return self._node_out

    @property
    def enabled(self) -> bool:
        """Whether the connection is enabled."""
        return self._enabled

    @property
    def weight(self) -> float:
        """The weight associated with this connection."""
        return self._weight

    @property
    def innovation(self) -> int:
        """The globally unique ID associated with this connection."""
        return self._innovation

    def __repr__(self):
        return (f"Connection({self._node_in:02d}=>{self._node_out:02d}, weight={self._weight:+.6f}, "
                f"enabled={self._enabled}, innovation={self._innovation:03d})")

class Neuron:
    """
    A computational node (neuron) in a neural network.

    This class represents the phenotype manifestation of a NodeGene. It holds the
    value the node produced at the most recent tick, so that the gene itself stays
    free of evaluation state.

    Input neurons simply pass through their input unchanged.
    Bias neurons always output the same constant value.
    Hidden and output neurons compute their output as: activation(weighted_input)

    Public Attributes:
        output: The computed output value (0.0 until calculated)

    Public Properties:
        id:         ID of the underlying node gene
        type:       Neuron type (INPUT, HIDDEN, OUTPUT or BIAS)
        activation: Activation function applied to the weighted input

    Public Methods:
        calculate_output(input_data): Compute and store the neuron's output value
    """

    def __init__(self, gene: "NodeGene", bias_value: float = 1.0):
        """
        Parameters:
            gene:       the gene encoding the Node/Neuron
            bias_value: the constant emitted by a BIAS neuron
        """
        self._gene      : "NodeGene" = gene
        self._bias_value: float      = bias_value
        self._activation: Callable | None = gene.activation
        self.output     : float      = 0.0

    @property
    def id(self) -> int:
        """The ID associated with this Node/Neuron."""
        return self._gene.id

    @property
    def type(self) -> NodeType:
        """The Node/Neuron type: INPUT, HIDDEN, OUTPUT, BIAS"""
        return self._gene.type

    @property
    def activation(self) -> Callable | None:
        """The Neuron activation function, used to calculate: output = activation(weighted_input)"""
        return self._activation

    def calculate_output(self, input_data: float) -> None:
        """
        Calculate the output of this node/neuron.
        The result is saved internally in 'self.output'.

        Parameters:
            input_data: the network input (INPUT neurons) or the weighted sum of the incoming signals
        """
        if self.type == NodeType.INPUT:
            self.output = float(input_data)
        elif self.type == NodeType.BIAS:
            self.output = self._bias_value
        elif self._activation is None:
            self.output = float(input_data)
        else:
            self.output = float(self._activation(input_data))

    def __str__(self):
        return f"Neuron({self.id:+03d}, NodeType.{self.type.name:6s}, {self._gene.activation_name})"

    def __repr__(self):
        return f"Neuron(gene={self._gene})"

class _Network(NetworkBase):
    """
    Object-oriented evaluation shared by both network kinds.
    Subclasses decide what happens to the neuron values between ticks.
    """

    def __init__(self, genome: "Genome", bias_value: float | None = None):
        """
        Parameters:
            genome:     the Genome encoding the network
            bias_value: the constant emitted by bias nodes (defaults to 'config.bias_value')
        """
        super().__init__(genome)

        if bias_value is None:
            bias_value = genome.config.bias_value

        # Create nodes/neurons objects from node genes
        self._neurons: dict[int, Neuron] = {}
        for gene in genome.node_genes.values():
            self._neurons[gene.id] = Neuron(gene, bias_value)

        # For each neuron, build list of incoming enabled connections
        self._incoming_connections: dict[int, list[Connection]] = {}   # neuron ID => [Connection instance]
        for gene in genome.connections:
            if gene.enabled:
                self._incoming_connections.setdefault(gene.node_out, []).append(Connection(gene))

    def _prepare_tick(self) -> None:
        pass

    def tick(self, inputs: Sequence[float]) -> list[float]:
        """
        Perform one evaluation step through the network.

        Every non-input node receives the weighted sum of its incoming enabled connections.
        A feedback edge contributes the value its source node had at the end of the
        previous tick (0.0 before the first tick or after 'reset()').

        Parameters:
            inputs: the network inputs (as many as input neurons)

        Returns:
            the results of passing the inputs through the network (as many as output neurons)

        Raises:
            ArityMismatch: If the number of inputs differs from the number of input neurons
        """
        # The number of inputs must match the number of input neurons
        if len(inputs) != len(self._input_ids):
            raise ArityMismatch(f"Expected {len(self._input_ids)} inputs, got {len(inputs)}")

        self._prepare_tick()

        # Values seen through feedback edges
        previous = {node_id: neuron.output for node_id, neuron in self._neurons.items()}

        # Set input values
        for input_id, value in zip(self._input_ids, inputs):
            self._neurons[input_id].calculate_output(value)

        # Propagate values through the network, in topological order
        for node_id in self._sorted_nodes:
            if node_id in self._input_ids:    # skip input nodes, already set
                continue
            neuron     = self._neurons[node_id]
            input_data = 0.0
            for conn in self._incoming_connections.get(node_id, []):
                if conn.innovation in self._feedback_edges:
                    input_data += conn.weight * previous[conn.nodeID_in]
                else:
                    input_data += conn.weight * self._neurons[conn.nodeID_in].output
            neuron.calculate_output(input_data)

        # Get output values
        return [self._neurons[ID].output for ID in self._output_ids]

    def __str__(self):
        neurons_str     = "\n".join(f"  {neuron}" for neuron in self._neurons.values())
        connections_str = "\n".join(f"  {conn}" for conns in self._incoming_connections.values() for conn in conns)
        return f"{neurons_str},\n\n{connections_str}"

class FeedForwardNetwork(_Network):
    """
    Network built from a genome whose enabled connections are acyclic.

    Every tick recomputes all values from the inputs alone, so the outputs
    only depend on the current inputs.

    Public Methods:
        tick(inputs): Process inputs through the network and return outputs
    """

    def _prepare_tick(self) -> None:
        for neuron in self._neurons.values():
            neuron.output = 0.0

class RecurrentNetwork(_Network):
    """
    Network built from a genome whose enabled connections contain cycles.

    Neuron values persist between ticks: a signal travels one feedback edge per tick.

    Public Methods:
        tick(inputs): Process inputs through the network and return outputs
        reset():      Clear the state carried over between ticks
    """

    def reset(self) -> None:
        """
        Set every neuron value back to 0.0.
        """
        for neuron in self._neurons.values():
            neuron.output = 0.0

def create_network(genome: "Genome", bias_value: float | None = None) -> FeedForwardNetwork | RecurrentNetwork:
    """
    Build an executable network from a genome.

    Parameters:
        genome:     the Genome encoding the network
        bias_value: the constant emitted by bias nodes (defaults to 'config.bias_value')

    Returns:
        a FeedForwardNetwork if the enabled connections are acyclic, a RecurrentNetwork otherwise
    """
    if genome.has_cycle():
        return RecurrentNetwork(genome, bias_value)
    return FeedForwardNetwork(genome, bias_value)
