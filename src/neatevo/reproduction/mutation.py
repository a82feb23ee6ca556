"""
NEAT Mutation Module

This module implements the mutation operators for the NEAT
(NeuroEvolution of Augmenting Topologies) algorithm.

Every operator modifies a genome in place and degrades to a no-op when it
finds nothing to act upon (no connection to split, no free node pair, ...).

Functions:
    mutate:                   Apply all mutation operators stochastically
    mutate_add_connection:    Connect two unconnected nodes
    mutate_add_node:          Split an enabled connection with a new hidden node
    mutate_delete_connection: Remove a connection gene
    mutate_toggle_connection: Flip the enabled status of a connection
    mutate_weights:           Perturb or replace connection weights
    mutate_activation:        Change node activation functions
"""

import random

from loguru import logger

from neatevo.errors                      import StructuralError
from neatevo.genotype.connection_gene    import ConnectionGene, random_weight
from neatevo.genotype.genome             import Genome
from neatevo.genotype.innovation_tracker import InnovationTracker
from neatevo.genotype.node_gene          import NodeType
from neatevo.run.config                  import Config

def mutate(genome : Genome,
           tracker: InnovationTracker,
           config : Config,
           rng=random) -> None:
    """
    Apply to a genome all possible mutation operations.

    The list of possible mutations is:
      + add a node
      + add a connection
      + delete a connection
      + toggle (enable/disable) an existing connection
      + mutate connection weights
      + mutate node activation functions
    Each structural mutation occurs randomly with a given probability; with
    'single_structural_mutation' at most one of them happens per call.

    Parameters:
        genome:  the genome to mutate (in place)
        tracker: hands out innovation numbers and node IDs
        config:  Stores configuration parameters
        rng:     Source of randomness (random.Random-like)
    """

    # Apply structural mutations (mutations that change the network graph)
    # Case #1: only one structural mutation is allowed at a time
    if config.single_structural_mutation:
        normalizer = config.node_add_probability          + \
                     config.connection_add_probability    + \
                     config.connection_delete_probability + \
                     config.connection_toggle_probability

        if normalizer > 0:
            r = rng.random()
            if r < config.node_add_probability / normalizer:
                mutate_add_node(genome, tracker, config, rng)

            elif r < (config.node_add_probability +
                      config.connection_add_probability) / normalizer:
                mutate_add_connection(genome, tracker, config, rng)

            elif r < (config.node_add_probability       +
                      config.connection_add_probability +
                      config.connection_delete_probability) / normalizer:
                mutate_delete_connection(genome, config, rng)

            else:
                mutate_toggle_connection(genome, config, rng)

    # Case #2: multiple structural mutations are allowed at a time
    else:
        do_add_node          = rng.random() < config.node_add_probability
        do_add_connection    = rng.random() < config.connection_add_probability
        do_delete_connection = rng.random() < config.connection_delete_probability
        do_toggle_connection = rng.random() < config.connection_toggle_probability

        if do_add_node:
            mutate_add_node(genome, tracker, config, rng)
        if do_add_connection:
            mutate_add_connection(genome, tracker, config, rng)
        if do_delete_connection:
            mutate_delete_connection(genome, config, rng)
        if do_toggle_connection:
            mutate_toggle_connection(genome, config, rng)

    # Mutate connection parameters
    mutate_weights(genome, config, rng)

    # Mutate node parameters
    mutate_activation(genome, config, rng)

def mutate_add_connection(genome : Genome,
                          tracker: InnovationTracker,
                          config : Config,
                          rng=random) -> ConnectionGene | None:
    """
    Add a new connection between two existing nodes.

    The two ends of the new connection are selected at random,
    however we cannot add a connection:
     + starting at an OUTPUT node
     + ending   at an INPUT or BIAS node
     + between two nodes already joined by a connection gene (enabled or not)
     + which would close a cycle, unless 'allow_recurrent' is set
       (self-loops included)

    The weight of the new connection is drawn from N(weight_init_mean, weight_init_stdev).

    Returns:
        the new connection gene, or None if no valid node pair exists
    """
    node_ids  = sorted(genome.node_genes)
    connected = {conn.endpoints for conn in genome.connections}

    # Carry out quick checks first
    candidates = [(node_in, node_out)
                  for node_in  in node_ids if genome.node_genes[node_in].type != NodeType.OUTPUT
                  for node_out in node_ids if not genome.node_genes[node_out].type.is_source
                  if (node_in, node_out) not in connected]
    rng.shuffle(candidates)

    # Carry out expensive check last
    for node_in, node_out in candidates:
        if not config.allow_recurrent and genome._would_create_cycle(node_in, node_out, enabled_only=True):
            continue

        innovation = tracker.get_innovation_number(node_in, node_out)
        weight     = random_weight(config, rng)
        try:
            return genome.add_connection_at(node_in, node_out, weight, innovation)
        except StructuralError as e:
            logger.debug("add-connection skipped on genome {}: {}", genome.ID, e)
            return None

    logger.debug("add-connection found no free node pair in genome {}", genome.ID)
    return None

def mutate_add_node(genome : Genome,
                    tracker: InnovationTracker,
                    config : Config,
                    rng=random) -> int | None:
    """
    Split an existing connection by adding a new node.

    The connection to split is selected at random from all 'enabled' connections.
    It is disabled, and replaced by two new connections:
        source -> new node (weight 1.0)
        new node -> target (weight of the split connection)
    so that the genome gains exactly one node and two connections.

    Returns:
        the ID of the new node, or None if the genome has no enabled connection
    """
    enabled_conn_genes = [gene for gene in genome.connections if gene.enabled]
    if not enabled_conn_genes:
        logger.debug("add-node found no enabled connection in genome {}", genome.ID)
        return None
    split_conn_gene = rng.choice(enabled_conn_genes)

    # From the tracker, get the ID for the new node and the
    # innovation numbers (connection IDs) for the two new connections
    new_node_id, innov1, innov2 = tracker.get_split_IDs(split_conn_gene, genome.node_genes)

    if new_node_id in genome.node_genes or innov1 in genome.conn_genes or innov2 in genome.conn_genes:
        logger.debug("add-node skipped on genome {}: split IDs {} already in use",
                     genome.ID, (new_node_id, innov1, innov2))
        return None

    # The connection being split must be disabled.
    split_conn_gene.enabled = False

    # Create the gene describing the new node (it is a hidden node)
    genome.add_node_at(new_node_id, config.activation_initial)

    # First new connection: input -> new node (weight = 1.0)
    genome.add_connection_at(split_conn_gene.node_in, new_node_id, 1.0, innov1)

    # Second new connection: new node -> output (weight = old weight)
    genome.add_connection_at(new_node_id, split_conn_gene.node_out, split_conn_gene.weight, innov2)

    return new_node_id

def mutate_delete_connection(genome: Genome, config: Config, rng=random) -> int | None:
    """
    Randomly delete a connection (either enabled or disabled).

    Returns:
        the innovation number of the deleted connection, or None if there was none
    """
    if not genome.conn_genes:
        return None

    connection_to_delete = rng.choice(genome.connections)
    genome.delete_connection(connection_to_delete.innovation)
    return connection_to_delete.innovation

def mutate_toggle_connection(genome: Genome, config: Config, rng=random) -> bool:
    """
    Flip the 'enabled' status of a randomly chosen connection.

    Enabling is skipped when the same node pair already has an enabled connection,
    or when it would close a cycle while 'allow_recurrent' is not set.

    Returns:
        whether a connection was toggled
    """
    if not genome.conn_genes:
        return False

    conn = rng.choice(genome.connections)
    if conn.enabled:
        conn.enabled = False
        return True

    if genome.has_enabled_connection(conn.node_in, conn.node_out):
        logger.debug("toggle skipped on genome {}: {} would duplicate an enabled connection", genome.ID, conn)
        return False
    if not config.allow_recurrent and genome._would_create_cycle(conn.node_in, conn.node_out, enabled_only=True):
        logger.debug("toggle skipped on genome {}: {} would create a cycle", genome.ID, conn)
        return False

    conn.enabled = True
    return True

def mutate_weights(genome: Genome, config: Config, rng=random) -> None:
    """
    Perturb (with 'weight_perturb_prob') or replace (with 'weight_replace_prob')
    the weight of every connection; results are clipped to [min_weight, max_weight].
    """
    for conn in genome.connections:
        conn.mutate(config, rng)

def mutate_activation(genome: Genome, config: Config, rng=random) -> None:
    """
    With 'activation_mutate_prob', give each hidden and output node
    a different activation function taken from 'activation_options'.
    """
    for node in genome.node_genes.values():
        node.mutate(config, rng)
