"""
NEAT Innovation Tracker Module

This module implements the InnovationTracker class for the
NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    InnovationTracker: Tracker for innovation numbers and node IDs
"""

import threading
from typing import TYPE_CHECKING, Iterable

from neatevo.run.config import Config
if TYPE_CHECKING:
    from neatevo.genotype.connection_gene import ConnectionGene
    from neatevo.genotype.genome          import Genome

class InnovationTracker:
    """
    Tracks structural changes across all genomes of a run.
    Ensures the same structural change gets the same innovation
    number (for connections) and ID (for nodes).

    A tracker is an ordinary object owned by whoever runs the evolution
    (normally the Population) and passed to the operators that need it.
    Its methods are serialized by an internal lock, so it can be shared
    between threads.

    Innovation numbers and node IDs only ever grow; they are never reused.
    Depending on 'config.innovation_reset_policy' the table remembering which
    structural change received which number lives for the whole run ("run"),
    or is forgotten at the start of each generation ("generation").

    Public Methods:
        get_innovation_number(node_in, node_out):    Innovation number for a connection
        get_split_IDs(conn_to_split, existing_IDs):  Node ID and innovation numbers for a node insertion
        new_node_id():                               Allocate a fresh hidden node ID
        begin_generation():                          Apply the reset policy at the start of a generation
        sync(genome):                                Advance the counters past the IDs used by a genome
        reset():                                     Forget everything and restart the counters
    """

    def __init__(self, config: Config):
        """
        Initialize the tracker.

        Parameters:
            config: Stores configuration parameters
        """
        self._lock         = threading.Lock()
        self._reset_policy = config.innovation_reset_policy

        # Node IDs below this value are reserved for input, output and bias nodes
        self._first_hidden_id = config.num_fixed_nodes

        self.reset()

    def reset(self) -> None:
        """
        Restart both counters and forget all recorded structural changes.
        """
        with self._lock:
            self._next_innovation_number = 0
            self._next_node_id           = self._first_hidden_id

            # For each connection ever created, map its endpoints to its innovation number
            self._innovation_numbers = {}     # (node_in, node_out) -> innovation number

            # When a connection is split, tracks what node was created and
            # what innovation numbers were assigned to the new connections.
            self._split_IDs = {}              # split_connection_innov_number -> (new_node_id, innov1, innov2)

    @property
    def next_innovation_number(self) -> int:
        return self._next_innovation_number

    @property
    def next_node_id(self) -> int:
        return self._next_node_id

    def get_innovation_number(self, node_in: int, node_out: int) -> int:
        """
        Get innovation number for a connection, identified by its endpoints.
        Returns existing innovation number if this connection was created
        before, otherwise assigns a new innovation number.

        Parameters:
            node_in:  node ID for the 'from' end of the connection
            node_out: node ID for the 'to'   end of the connection

        Returns:
            connection ID (a.k.a. innovation number)
        """
        with self._lock:
            return self._get_innovation_number(node_in, node_out)

    def _get_innovation_number(self, node_in: int, node_out: int) -> int:
        key = (node_in, node_out)

        # This is a new connection
        if key not in self._innovation_numbers:
            self._innovation_numbers[key]  = self._next_innovation_number
            self._next_innovation_number  += 1

        return self._innovation_numbers[key]

    def get_split_IDs(self,
                      conn_to_split: 'ConnectionGene',
                      existing_IDs : Iterable[int] = ()) -> tuple[int, int, int]:
        """
        Get node ID and innovation numbers for splitting a connection.
        If this exact connection has been split before, returns the same
        values, otherwise creates new ones.

        A genome may split the same connection more than once (the connection
        gets re-enabled and split again). When the node recorded for a previous
        split is already part of the genome, as told by 'existing_IDs', a fresh
        node ID and fresh innovation numbers are handed out instead.

        Parameters:
            conn_to_split: the connection being split
            existing_IDs:  IDs of the nodes already present in the genome being mutated

        Returns:
            3-tuple: (new_node_id, innovation1, innovation2)
            innovation1 is for the connection from the 'from' node of 'conn_to_split' to the new node
            innovation2 is for the connection from the new node to the 'to' node of 'conn_to_split'
        """
        existing_IDs = set(existing_IDs)
        key          = conn_to_split.innovation

        with self._lock:
            if key in self._split_IDs and self._split_IDs[key][0] not in existing_IDs:
                return self._split_IDs[key]

            # Generate the ID for the new node
            new_node_id = self._new_node_id()

            # First new connection: original_in -> new_node
            innov1 = self._get_innovation_number(conn_to_split.node_in, new_node_id)

            # Second new connection: new_node -> original_out
            innov2 = self._get_innovation_number(new_node_id, conn_to_split.node_out)

            if key not in self._split_IDs:
                self._split_IDs[key] = (new_node_id, innov1, innov2)

            return new_node_id, innov1, innov2

    def new_node_id(self) -> int:
        """
        Allocate a node ID never handed out before.
        """
        with self._lock:
            return self._new_node_id()

    def _new_node_id(self) -> int:
        node_id             = self._next_node_id
        self._next_node_id += 1
        return node_id

    def begin_generation(self) -> None:
        """
        Called once at the start of each generation's mutation phase.
        Under the "generation" policy, forgets which structural change got which
        number, so identical mutations in different generations get different numbers.
        """
        if self._reset_policy != "generation":
            return
        with self._lock:
            self._innovation_numbers = {}
            self._split_IDs          = {}

    def sync(self, genome: 'Genome') -> None:
        """
        Advance the counters past the node IDs and innovation numbers used by 'genome'.
        Needed after loading genomes created by another tracker, so that
        numbers handed out from now on do not collide with theirs.
        The connections of 'genome' are recorded, so re-creating them yields the same numbers.

        Parameters:
            genome: a genome whose IDs must be treated as taken
        """
        with self._lock:
            for conn in genome.connections:
                self._innovation_numbers.setdefault(conn.endpoints, conn.innovation)
                self._next_innovation_number = max(self._next_innovation_number, conn.innovation + 1)
            for node_id in genome.node_genes:
                self._next_node_id = max(self._next_node_id, node_id + 1)

    def __getstate__(self):
        state = self.__dict__.copy()
        del state['_lock']
        return state

    def __setstate__(self, state):
        self.__dict__.update(state)
        self._lock = threading.Lock()
