"""
NEAT Genome Module

This module implements the Genome class for the NEAT
(NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    Genome: Complete genome representing a neural network structure
"""

import copy
from itertools import count

from neatevo.errors                   import StructuralError
from neatevo.run.config               import Config
from neatevo.genotype.connection_gene import ConnectionGene
from neatevo.genotype.node_gene       import NodeType, NodeGene

class Genome:
    """
    A NEAT genome representing a neural network as a collection of node and connection genes.

    In the NEAT (NeuroEvolution of Augmenting Topologies) algorithm, a genome encodes
    the structure and parameters of a neural network at the genotype level. It consists of:
    - Node genes: describe network nodes (input, hidden, output, bias)
    - Connection genes: describe weighted connections between nodes, each with a unique
      innovation number for tracking historical markings during crossover

    A minimal genome contains only input, output and (optionally) bias nodes, and no
    connections. Via mutation operations, genomes can grow by adding nodes and connections.

    Connection genes are always kept in ascending innovation order, which lets
    distance and crossover align two genomes with a single linear walk.
    No two enabled connections share the same (source, target) pair.

    Node numbering convention:
        - Input nodes:  [0, num_inputs)
        - Output nodes: [num_inputs, num_inputs + num_outputs)
        - Bias node:    num_inputs + num_outputs (only if 'config.bias_node')
        - Hidden nodes: above all of the above

    Attributes:
        ID:               Unique identifier of this genome within the process
        fitness:          Raw fitness (None until evaluated)
        adjusted_fitness: Fitness after sharing within its species (None until computed)
        node_genes:       Dictionary mapping node IDs to NodeGene objects
        conn_genes:       Dictionary mapping innovation numbers to ConnectionGene objects

    Public Properties:
        input_nodes:  List of all input node genes
        output_nodes: List of all output node genes
        hidden_nodes: List of all hidden node genes
        bias_nodes:   List of all bias node genes (at most one)
        connections:  List of all connection genes, in ascending innovation order

    Public Methods:
        add_node_at(node_id, ...):           Add a hidden node gene
        add_connection_at(node_in, ...):     Add a connection gene
        delete_connection(innovation):       Remove a connection gene
        has_enabled_connection(in, out):     Whether an enabled connection joins two nodes
        has_cycle():                         Whether the enabled connections contain a cycle
        distance(other):                     Calculate genetic distance to another genome
        to_dict():                           Convert genome to dictionary representation

    Class Methods:
        from_dict(genome_dict, config): Create a genome from a dictionary description
    """

    _ID_generator = count(0)

    def __init__(self, config: Config):
        """
        Initialize a minimal Genome.

        A minimal genome is defined as a genome that describes the smallest possible network:
        a network consisting of only input, output and bias nodes (whose number never changes
        and is retrieved from the configuration) and having no connections.

        Parameters:
            config: Stores configuration parameters
        """
        self._config = config

        self.ID              : int          = next(Genome._ID_generator)
        self.fitness         : float | None = None
        self.adjusted_fitness: float | None = None

        self.node_genes: dict[int, NodeGene]       = {}  # node ID => node gene
        self.conn_genes: dict[int, ConnectionGene] = {}  # innovation number => connection gene

        # Initialize input nodes
        # By convention, input nodes are numbered: [0, NUMBER INPUT NODES)
        for node_id in range(config.num_inputs):
            self.node_genes[node_id] = NodeGene(node_id, NodeType.INPUT)

        # Initialize output nodes
        # By convention, output nodes are numbered: [NUMBER INPUT NODES, NUMBER INPUT NODES + NUMBER OUTPUT NODES)
        for i in range(config.num_outputs):
            node_id = config.num_inputs + i
            self.node_genes[node_id] = NodeGene(node_id, NodeType.OUTPUT, config.activation_initial)

        # The bias node, if any, comes right after the output nodes
        if config.bias_node:
            node_id = config.num_inputs + config.num_outputs
            self.node_genes[node_id] = NodeGene(node_id, NodeType.BIAS)

    @property
    def config(self) -> Config:
        return self._config

    def __deepcopy__(self, memo):
        # The configuration is shared, never copied
        duplicate = self.__class__.__new__(self.__class__)
        memo[id(self)] = duplicate
        for name, value in self.__dict__.items():
            setattr(duplicate, name, value if name == '_config' else copy.deepcopy(value, memo))
        return duplicate

    @classmethod
    def empty(cls, config: Config) -> 'Genome':
        """
        Create a genome with a new ID and no node or connection genes.
        """
        offspring = cls.__new__(cls)
        offspring._config          = config
        offspring.ID               = next(Genome._ID_generator)
        offspring.fitness          = None
        offspring.adjusted_fitness = None
        offspring.node_genes       = {}
        offspring.conn_genes       = {}
        return offspring

    @property
    def input_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.INPUT]

    @property
    def output_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.OUTPUT]

    @property
    def hidden_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.HIDDEN]

    @property
    def bias_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.BIAS]

    @property
    def connections(self) -> list[ConnectionGene]:
        return list(self.conn_genes.values())

    # -------------------------------------------------------------------------
    # Low-level structural operations

    def add_node_at(self, node_id: int, activation_name: str | None = None) -> NodeGene:
        """
        Add a hidden node gene to the genome.

        Parameters:
            node_id:         ID of the new node (must not be in use)
            activation_name: Activation function of the node, defaults to 'config.activation_initial'

        Returns:
            the new node gene

        Raises:
            StructuralError: If a node with this ID already exists
        """
        if node_id in self.node_genes:
            raise StructuralError(f"Node {node_id} already exists in genome {self.ID}")

        node = NodeGene(node_id, NodeType.HIDDEN, activation_name or self._config.activation_initial)
        self.node_genes[node_id] = node
        return node

    def add_connection_at(self,
                          node_in   : int,
                          node_out  : int,
                          weight    : float,
                          innovation: int,
                          enabled   : bool = True) -> ConnectionGene:
        """
        Add a connection gene to the genome.

        Parameters:
            node_in:    ID of the source node
            node_out:   ID of the destination node
            weight:     Weight of the connection
            innovation: Innovation number of the connection
            enabled:    Whether the connection is active

        Returns:
            the new connection gene

        Raises:
            StructuralError: If an endpoint is missing, the source is an output node, the
                             target is an input or bias node, the innovation number is already
                             used, or the connection would duplicate an enabled connection
        """
        if node_in not in self.node_genes:
            raise StructuralError(f"Connection references non-existent source node: {node_in}")
        if node_out not in self.node_genes:
            raise StructuralError(f"Connection references non-existent destination node: {node_out}")
        if self.node_genes[node_in].type == NodeType.OUTPUT:
            raise StructuralError(f"Connection cannot start at output node {node_in}")
        if self.node_genes[node_out].type.is_source:
            raise StructuralError(f"Connection cannot end at {self.node_genes[node_out].type.name} node {node_out}")
        if innovation in self.conn_genes:
            raise StructuralError(f"Innovation number {innovation} already used in genome {self.ID}")
        if enabled and self.has_enabled_connection(node_in, node_out):
            raise StructuralError(f"Nodes {node_in} and {node_out} are already connected")

        conn = ConnectionGene(node_in, node_out, weight, innovation, enabled)
        self._insert_connection(conn)
        return conn

    def _insert_connection(self, conn: ConnectionGene) -> None:
        """
        Insert a connection gene, keeping 'conn_genes' in ascending innovation order.
        """
        last_innovation = next(reversed(self.conn_genes), -1)
        self.conn_genes[conn.innovation] = conn
        if conn.innovation < last_innovation:
            self.conn_genes = dict(sorted(self.conn_genes.items()))

    def delete_connection(self, innovation_number: int) -> None:
        """
        Delete a connection from the genome.

        Parameters:
            innovation_number: Innovation number of the connection to delete

        Raises:
            StructuralError: If the innovation number does not exist in the genome
        """
        if innovation_number not in self.conn_genes:
            raise StructuralError(f"Connection with innovation number {innovation_number} does not exist in the genome")

        del self.conn_genes[innovation_number]

    def has_connection(self, node_in: int, node_out: int) -> bool:
        """Whether any connection (enabled or not) goes from 'node_in' to 'node_out'."""
        return any(conn.node_in == node_in and conn.node_out == node_out
                   for conn in self.conn_genes.values())

    def has_enabled_connection(self, node_in: int, node_out: int) -> bool:
        """Whether an enabled connection goes from 'node_in' to 'node_out'."""
        return any(conn.enabled and conn.node_in == node_in and conn.node_out == node_out
                   for conn in self.conn_genes.values())

    # -------------------------------------------------------------------------
    # Graph queries

    def has_cycle(self) -> bool:
        """
        Check whether the enabled connections of the genome contain a cycle
        (self-loops included).
        """
        adjacency = {}
        for conn in self.conn_genes.values():
            if conn.enabled:
                adjacency.setdefault(conn.node_in, []).append(conn.node_out)

        # Iterative three-color DFS; a GREY node reached again closes a cycle
        WHITE, GREY, BLACK = 0, 1, 2
        color = {node_id: WHITE for node_id in self.node_genes}
        for root in self.node_genes:
            if color[root] != WHITE:
                continue
            color[root] = GREY
            stack = [(root, iter(adjacency.get(root, [])))]
            while stack:
                node_id, successors = stack[-1]
                for succ in successors:
                    if color[succ] == GREY:
                        return True
                    if color[succ] == WHITE:
                        color[succ] = GREY
                        stack.append((succ, iter(adjacency.get(succ, []))))
                        break
                else:
                    color[node_id] = BLACK
                    stack.pop()
        return False

    def _would_create_cycle(self, from_node: int, to_node: int, enabled_only: bool = False) -> bool:
        """
        Check if adding a connection from_node -> to_node would create a cycle.
        Uses DFS to check if there's already a path from 'to_node' back to 'from_node'.

        Parameters:
            from_node:    proposed start of the new connection
            to_node:      proposed end   of the new connections
            enabled_only: if False, disabled connections count as paths too

        Returns:
            whether adding the new connection would create a network cycle
        """
        # A self-loop is a cycle
        if from_node == to_node:
            return True

        # If we can reach 'from_node' starting at 'to_node', then adding a
        # connection 'from_node' -> 'to_node' would create a network cycle
        visited = set()
        stack = [to_node]

        while stack:

            current = stack.pop()
            if current == from_node:
                return True   # found path 'to_node' -> 'from_node', would create cycle
            if current in visited:
                continue
            visited.add(current)

            # Add all nodes that can be reached from 'current' in one step
            for conn_gene in self.conn_genes.values():
                if conn_gene.node_in == current and (conn_gene.enabled or not enabled_only):
                    stack.append(conn_gene.node_out)

        return False

    # -------------------------------------------------------------------------
    # Speciation

    def distance(self, other: 'Genome') -> float:
        """
        Calculate genetic distance between this genome and another using the original NEAT formula.

        The original NEAT formula only looks at connections.
           distance = (c1 * E / N) + (c2 * D / N) + c3 * W̄

        Where:
        - E = number of excess connection genes
        - D = number of disjoint connection genes
        - N = number of connection genes in larger genome, or 1 if that number is
              below 'distance_normalization_threshold' (small genomes are not normalized)
        - W̄ = average weight difference of matching connection genes
        - c1, c2, c3 = weight of various terms (from configuration file)

        Both gene lists are sorted by innovation number, so they are aligned in one linear walk.
        The result is symmetric, and zero for two genomes without connections.

        Parameters:
            other: the genome relative to which we are calculating the distance

        Returns:
            the genetic distance between this genome and 'other'
        """
        genes1 = self.connections
        genes2 = other.connections
        if not genes1 and not genes2:
            return 0.0

        num_matching = 0
        num_disjoint = 0
        weight_diff  = 0.0

        i = j = 0
        while i < len(genes1) and j < len(genes2):
            innov1 = genes1[i].innovation
            innov2 = genes2[j].innovation
            if innov1 == innov2:
                weight_diff  += abs(genes1[i].weight - genes2[j].weight)
                num_matching += 1
                i += 1
                j += 1
            elif innov1 < innov2:
                num_disjoint += 1
                i += 1
            else:
                num_disjoint += 1
                j += 1

        # Whatever is left over lies beyond the other genome's last innovation number
        num_excess = (len(genes1) - i) + (len(genes2) - j)

        # Average connection weight difference for matching connection genes
        avg_weight_diff = weight_diff / num_matching if num_matching else 0.0

        N = max(len(genes1), len(genes2))
        if N < self._config.distance_normalization_threshold:
            N = 1

        distance = (self._config.distance_excess_coeff   * num_excess   / N +
                    self._config.distance_disjoint_coeff * num_disjoint / N +
                    self._config.distance_weight_coeff   * avg_weight_diff)
        return distance

    # -------------------------------------------------------------------------
    # Serialization

    def to_dict(self) -> dict:
        """
        Convert the genome to a dictionary representation.

        This is the inverse operation of from_dict(), producing
        a dictionary that can be used to reconstruct the genome.

        Returns:
            Dictionary with the following structure:
            {
                "nodes": [
                    {"id": 0, "type": "input"},
                    {"id": 1, "type": "output", "activation": "sigmoid"},
                    {"id": 2, "type": "bias"},
                    {"id": 3, "type": "hidden", "activation": "relu"}
                ],
                "connections": [
                    {"from": 0, "to": 3, "weight":  0.5, "enabled": true, "innovation": 0},
                    {"from": 3, "to": 1, "weight":  1.5, "enabled": true, "innovation": 2}
                ]
            }
            Nodes are listed by ID, connections by innovation number.
        """
        nodes = []
        for node_id in sorted(self.node_genes):
            node      = self.node_genes[node_id]
            node_dict = {
                "id"  : node.id,
                "type": _TYPE_NAMES[node.type]
            }
            if node.activation_name is not None:
                node_dict["activation"] = node.activation_name
            nodes.append(node_dict)

        connections = []
        for conn in self.connections:
            connections.append({
                "from"      : conn.node_in,
                "to"        : conn.node_out,
                "weight"    : conn.weight,
                "enabled"   : conn.enabled,
                "innovation": conn.innovation
            })

        result = {
            "nodes"      : nodes,
            "connections": connections
        }
        if self.fitness is not None:
            result["fitness"] = self.fitness

        return result

    @classmethod
    def from_dict(cls, genome_dict: dict, config: Config, tracker=None) -> 'Genome':
        """
        Create a Genome from a dictionary description.

        The node numbering must follow the convention implied by 'config' (number of
        inputs and outputs, presence of a bias node). Connections without an
        "innovation" field get their number from 'tracker', which is then required.
        Hidden and output nodes without an "activation" field use 'config.activation_initial'.

        Parameters:
            genome_dict: Dictionary describing the genome structure (see 'to_dict')
            config:      Stores configuration parameters
            tracker:     InnovationTracker assigning missing innovation numbers

        Returns:
            A new Genome object with the specified structure

        Raises:
            ValueError: If the structure is invalid (wrong node numbering, dangling
                        connections, or a cycle while 'config.allow_recurrent' is False)
            KeyError:   If required fields are missing from the dictionary
        """
        nodes_data = genome_dict["nodes"]
        cls._validate_node_numbering(nodes_data, config)

        genome = cls.empty(config)

        for node_data in nodes_data:
            node_type = _TYPES_BY_NAME[node_data["type"]]
            actname   = None if node_type.is_source else node_data.get("activation", config.activation_initial)
            genome.node_genes[node_data["id"]] = NodeGene(node_data["id"], node_type, actname)

        for conn_data in genome_dict.get("connections", []):
            node_in  = conn_data["from"]
            node_out = conn_data["to"]

            if "innovation" in conn_data:
                innovation = conn_data["innovation"]
            elif tracker is not None:
                innovation = tracker.get_innovation_number(node_in, node_out)
            else:
                raise ValueError(f"Connection {node_in}->{node_out} has no innovation number and no tracker was given")

            try:
                genome.add_connection_at(node_in, node_out, conn_data["weight"], innovation,
                                         conn_data.get("enabled", True))
            except StructuralError as e:
                raise ValueError(str(e)) from e

        if not config.allow_recurrent and genome.has_cycle():
            raise ValueError("Genome contains a cycle but recurrent connections are not allowed")

        genome.fitness = genome_dict.get("fitness")
        return genome

    @staticmethod
    def _validate_node_numbering(nodes_data: list, config: Config) -> None:
        """
        Validate that nodes follow the NEAT numbering convention.

        Parameters:
            nodes_data: List of node dictionaries
            config:     Stores configuration parameters

        Raises:
            ValueError: If node numbering doesn't follow the convention
        """
        def ids_of(type_name):
            return sorted(n["id"] for n in nodes_data if n["type"] == type_name)

        for type_name in (n["type"] for n in nodes_data):
            if type_name not in _TYPES_BY_NAME:
                raise ValueError(f"Unknown node type '{type_name}'")

        num_io = config.num_inputs + config.num_outputs

        # Check input nodes are numbered [0, num_inputs)
        expected_input_ids = list(range(config.num_inputs))
        if ids_of("input") != expected_input_ids:
            raise ValueError(f"Input nodes must be numbered {expected_input_ids}, got {ids_of('input')}")

        # Check output nodes are numbered [num_inputs, num_inputs + num_outputs)
        expected_output_ids = list(range(config.num_inputs, num_io))
        if ids_of("output") != expected_output_ids:
            raise ValueError(f"Output nodes must be numbered {expected_output_ids}, got {ids_of('output')}")

        # Check the bias node is present exactly when the configuration asks for it
        expected_bias_ids = [num_io] if config.bias_node else []
        if ids_of("bias") != expected_bias_ids:
            raise ValueError(f"Bias nodes must be numbered {expected_bias_ids}, got {ids_of('bias')}")

        # Check hidden nodes are numbered above all fixed nodes
        for hid in ids_of("hidden"):
            if hid < config.num_fixed_nodes:
                raise ValueError(f"Hidden node {hid} has ID below minimum {config.num_fixed_nodes}")

        # Check for duplicate node IDs
        all_ids = [n["id"] for n in nodes_data]
        if len(all_ids) != len(set(all_ids)):
            raise ValueError("Duplicate node IDs found in node list")

    def __str__(self):
        node_genes_str  = ''.join(str(node) for node in self.input_nodes)
        node_genes_str += ''.join(str(node) for node in self.bias_nodes)
        node_genes_str += ''.join(str(node) for node in self.hidden_nodes)
        node_genes_str += ''.join(str(node) for node in self.output_nodes)
        conn_genes_str  = ''.join(str(conn) for conn in self.conn_genes.values())
        return f"Nodes: {node_genes_str}\nConns: {conn_genes_str}"

_TYPE_NAMES = {
    NodeType.INPUT : "input",
    NodeType.HIDDEN: "hidden",
    NodeType.OUTPUT: "output",
    NodeType.BIAS  : "bias"
    }

_TYPES_BY_NAME = {name: node_type for node_type, name in _TYPE_NAMES.items()}
