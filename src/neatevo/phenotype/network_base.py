"""
NEAT Network Base Module

This module defines the abstract base class for the NEAT neural network implementations.
It provides the graph analysis shared by the feed-forward and the recurrent networks:
detection of feedback edges, evaluation ordering, introspection and visualization.

Classes:
    NetworkBase: Abstract base class defining the network interface
"""

from abc         import ABC, abstractmethod
from collections import deque, defaultdict
from typing      import Any, TYPE_CHECKING
import graphviz  # type: ignore

from neatevo.genotype.node_gene import NodeType

if TYPE_CHECKING:
    from neatevo.genotype import Genome

class NetworkBase(ABC):
    """
    Abstract base class for NEAT neural network implementations.

    The network is built from the enabled connections of a genome:
        - a depth-first search, started from the input and bias nodes and then from
          every remaining node in ID order, marks the edges closing a cycle as
          'feedback edges' (self-loops included)
        - Kahn's algorithm over the remaining edges gives the evaluation order

    Feedback edges carry the value their source node had at the previous tick.

    Public Properties (available to all subclasses):
        number_nodes:               Total number of nodes in the network
        number_nodes_hidden:        Number of hidden nodes in the network
        number_connections:         Total number of connections in the network
        number_connections_enabled: Number of enabled connections in the network
        feedback_edges:             Innovation numbers of the feedback edges
        is_recurrent:               Whether the network has any feedback edge

    Public Methods (must be implemented by subclasses):
        tick(inputs): Process inputs through the network and return outputs

    Public Methods:
        visualize(view): Render the network with Graphviz
    """

    def __init__(self, genome: 'Genome'):
        """
        Parameters:
            genome: The Genome to express
        """
        self._genome          = genome
        self._input_ids       = sorted(gene.id for gene in genome.input_nodes)
        self._output_ids      = sorted(gene.id for gene in genome.output_nodes)
        self._bias_ids        = sorted(gene.id for gene in genome.bias_nodes)
        self._feedback_edges  = self._find_feedback_edges(genome)
        self._sorted_nodes    = self._topological_sort(genome, self._feedback_edges)

    @property
    def genome(self) -> 'Genome':
        return self._genome

    @property
    def number_nodes(self) -> int:
        return len(self._genome.node_genes)

    @property
    def number_nodes_hidden(self) -> int:
        return len(self._genome.hidden_nodes)

    @property
    def number_connections(self) -> int:
        return len(self._genome.conn_genes)

    @property
    def number_connections_enabled(self) -> int:
        return sum(1 for conn in self._genome.conn_genes.values() if conn.enabled)

    @property
    def feedback_edges(self) -> frozenset[int]:
        """Innovation numbers of the enabled connections evaluated with a one-tick delay."""
        return self._feedback_edges

    @property
    def is_recurrent(self) -> bool:
        return bool(self._feedback_edges)

    @abstractmethod
    def tick(self, inputs: Any) -> Any:
        """
        Advance the network by one evaluation step.

        Parameters:
            inputs: Network inputs (one per input node)

        Returns:
            Network outputs (one per output node, in output node ID order)
        """
        pass

    @staticmethod
    def _find_feedback_edges(genome: 'Genome') -> frozenset[int]:
        """
        Find the enabled connections which close a cycle.

        Runs a depth-first search over the enabled connections, rooted first at the
        input and bias nodes and then at any node not yet visited, in ID order.
        An edge leading back to a node still on the search stack is a feedback edge.

        Parameters:
            genome: The Genome containing node and connection genes

        Returns:
            Innovation numbers of the feedback edges
        """
        adjacency = defaultdict(list)   # node ID => [(innovation, successor ID)]
        for conn in genome.connections:
            if conn.enabled:
                adjacency[conn.node_in].append((conn.innovation, conn.node_out))

        sources = sorted(n.id for n in genome.node_genes.values() if n.type.is_source)
        others  = sorted(n_id for n_id in genome.node_genes if n_id not in sources)

        WHITE, GREY, BLACK = 0, 1, 2
        color    = {node_id: WHITE for node_id in genome.node_genes}
        feedback = set()

        for root in sources + others:
            if color[root] != WHITE:
                continue
            color[root] = GREY
            stack = [(root, iter(adjacency[root]))]
            while stack:
                node_id, successors = stack[-1]
                for innovation, succ in successors:
                    if color[succ] == GREY:
                        feedback.add(innovation)
                    elif color[succ] == WHITE:
                        color[succ] = GREY
                        stack.append((succ, iter(adjacency[succ])))
                        break
                else:
                    color[node_id] = BLACK
                    stack.pop()

        return frozenset(feedback)

    @staticmethod
    def _topological_sort(genome: 'Genome', feedback_edges: frozenset[int] = frozenset()) -> list[int]:
        """
        Order the nodes so that every node comes after all of its sources
        (Kahn's algorithm). Feedback edges are left out, which leaves a DAG.
        Ties are broken by node ID, so the order is deterministic.

        Parameters:
            genome:         The Genome containing node and connection genes
            feedback_edges: Innovation numbers of the connections to ignore

        Returns:
            List of node IDs in topological order
        """
        node_ids = sorted(genome.node_genes.keys())

        adjacency = defaultdict(list)
        in_degree = {node_id: 0 for node_id in node_ids}

        # Build graph from enabled, non-feedback connections only
        for conn in genome.connections:
            if conn.enabled and conn.innovation not in feedback_edges:
                adjacency[conn.node_in].append(conn.node_out)
                in_degree[conn.node_out] += 1

        # Start with nodes that have no incoming edges
        queue = deque([node_id for node_id in node_ids if in_degree[node_id] == 0])
        result = []

        while queue:
            node_id = queue.popleft()
            result.append(node_id)

            # Process all outgoing edges
            for neighbor in adjacency[node_id]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        return result

    def visualize(self, view: bool = False) -> graphviz.Digraph:
        """
        Draw the network with Graphviz: inputs left, outputs right, disabled
        connections gray and feedback connections dashed.

        Parameters:
            view: Open the rendered graph in a viewer

        Returns:
            the graphviz.Digraph
        """
        dot = graphviz.Digraph()
        dot.attr(rankdir='LR')  # Left to right layout
        dot.attr('graph', labelloc='t')

        # Define node colors and shapes
        common_attrs = {'color': 'black', 'style': 'filled', 'shape': 'circle', 'penwidth': '0.5',
                        'fontsize': '5', 'width': '0.5', 'height': '0.5', 'fixedsize': 'true'}
        fillcolors   = {NodeType.INPUT : 'lightgrey',
                        NodeType.BIAS  : 'khaki',
                        NodeType.HIDDEN: 'lightblue',
                        NodeType.OUTPUT: 'white'}

        def add_node(cluster, node_id):
            node_gene = self._genome.node_genes[node_id]
            attrs     = dict(common_attrs, fillcolor=fillcolors[node_gene.type])
            label     = f"id={node_id}"
            if node_gene.activation_name is not None:
                label += f"\\n{node_gene.activation_name}"
            cluster.node(str(node_id), label=label, **attrs)

        # Create subgraphs for better layout
        with dot.subgraph(name='cluster_input') as input_cluster:
            input_cluster.attr(rank='source', label='Inputs', style='invisible')
            for node_id in self._input_ids + self._bias_ids:
                add_node(input_cluster, node_id)

        # Add hidden nodes if any
        hidden_ids = sorted(n.id for n in self._genome.hidden_nodes)
        if hidden_ids:
            with dot.subgraph(name='cluster_hidden') as hidden_cluster:
                hidden_cluster.attr(rank='same', label='Hidden', style='invisible')
                for node_id in hidden_ids:
                    add_node(hidden_cluster, node_id)

        with dot.subgraph(name='cluster_output') as output_cluster:
            output_cluster.attr(rank='sink', label='Outputs', style='invisible')
            for node_id in self._output_ids:
                add_node(output_cluster, node_id)

        # Add edges with weights (both enabled and disabled)
        for conn in self._genome.connections:
            edge_attrs = {
                'label': f"i={conn.innovation},w={conn.weight:.2f}",
                'fontsize' : '5',
                'penwidth' : '0.5',
                'arrowsize': '0.5',
                'labelfloat': 'false'
            }

            # Use light gray color for disabled connections, red for feedback, black otherwise
            if not conn.enabled:
                edge_attrs['color'] = 'lightgray'
            elif conn.innovation in self._feedback_edges:
                edge_attrs['color'] = 'red'
                edge_attrs['style'] = 'dashed'
            else:
                edge_attrs['color'] = 'black'

            dot.edge(str(conn.node_in), str(conn.node_out), **edge_attrs)

        if view:
            dot.view(cleanup=True)

        return dot
