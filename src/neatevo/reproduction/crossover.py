"""
NEAT Crossover Module

This module implements the generators of new genomes from existing ones
for the NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Functions:
    crossover: Combine two parent genomes, aligning their genes by innovation number
    clone:     Copy a single parent genome
"""

import copy
import random

from loguru import logger

from neatevo.errors                   import StructuralError
from neatevo.genotype.connection_gene import ConnectionGene
from neatevo.genotype.genome          import Genome
from neatevo.genotype.node_gene       import NodeType
from neatevo.run.config               import Config

def crossover(genome_a    : Genome,
              genome_b    : Genome,
              same_fitness: bool | None   = None,
              config      : Config | None = None,
              rng=random) -> Genome:
    """
    Perform NEAT crossover between two genomes to create offspring.

    'genome_a' is expected to be the fitter parent; if both parents have a fitness
    and 'genome_b' is fitter, they are swapped.

    NEAT crossover rules, applied while walking both innovation-sorted gene lists:
    - Matching genes: inherit randomly from either parent; if the gene is disabled in
      either parent, it is disabled in the offspring with 'disabled_gene_inherit_prob'
    - Disjoint/excess genes: inherit from the fitter parent only; when both parents are
      equally fit, the genes of both parents are candidates, each kept with
      'tie_gene_inclusion_prob'
    - A gene joining two nodes already joined by an enabled gene of the offspring is
      inherited disabled

    Unless recurrent networks are allowed, a cyclic offspring is repaired by disabling
    first the genes kept because of the fitness tie, then the genes which were
    re-enabled, latest innovation first, until no cycle is left.

    Parameters:
        genome_a:     the fitter parent
        genome_b:     the other parent
        same_fitness: whether the parents are equally fit (computed from their
                      fitness when not given)
        config:       Stores configuration parameters (defaults to the parents' one)
        rng:          Source of randomness (random.Random-like)

    Returns:
        New offspring genome (fresh ID, no fitness)

    Raises:
        StructuralError: If the parents do not have the same input, output and bias nodes
    """
    config = config or genome_a.config

    if _fixed_node_ids(genome_a) != _fixed_node_ids(genome_b):
        raise StructuralError(f"Genomes {genome_a.ID} and {genome_b.ID} have different input/output nodes")

    if genome_a.fitness is not None and genome_b.fitness is not None:
        if genome_b.fitness > genome_a.fitness:
            genome_a, genome_b = genome_b, genome_a
        if same_fitness is None:
            same_fitness = genome_a.fitness == genome_b.fitness
    same_fitness = bool(same_fitness)

    genes_a = genome_a.connections
    genes_b = genome_b.connections

    # Each entry: (inherited gene, kept because of a fitness tie, re-enabled)
    inherited: list[tuple[ConnectionGene, bool, bool]] = []

    def inherit_non_matching(gene):
        if not same_fitness:
            inherited.append((copy.copy(gene), False, False))
        elif rng.random() < config.tie_gene_inclusion_prob:
            inherited.append((copy.copy(gene), True, False))

    i = j = 0
    while i < len(genes_a) or j < len(genes_b):
        gene_a = genes_a[i] if i < len(genes_a) else None
        gene_b = genes_b[j] if j < len(genes_b) else None

        # Matching connections: inherit connection gene randomly from either parent
        if gene_a is not None and gene_b is not None and gene_a.innovation == gene_b.innovation:
            conn_gene = copy.copy(gene_a if rng.random() < 0.5 else gene_b)

            reenabled = False
            if not (gene_a.enabled and gene_b.enabled):
                conn_gene.enabled = rng.random() >= config.disabled_gene_inherit_prob
                reenabled = conn_gene.enabled and not gene_a.enabled

            inherited.append((conn_gene, False, reenabled))
            i += 1
            j += 1

        # Disjoint & excess connections of the fitter parent
        elif gene_b is None or (gene_a is not None and gene_a.innovation < gene_b.innovation):
            inherit_non_matching(gene_a)
            i += 1

        # Disjoint & excess connections of the other parent, only considered on a tie
        else:
            if same_fitness:
                inherit_non_matching(gene_b)
            j += 1

    # Create empty (no node or connection genes) offspring genome
    offspring = Genome.empty(config)

    # Inherit node genes: all input/output/bias nodes, plus the nodes needed by the
    # inherited connections; the fitter parent's copy is preferred
    node_ids = set(_fixed_node_ids(genome_a))
    for conn_gene, _, _ in inherited:
        node_ids.add(conn_gene.node_in)
        node_ids.add(conn_gene.node_out)

    for nid in sorted(node_ids):
        if nid in genome_a.node_genes:
            node_gene = genome_a.node_genes[nid]
        elif nid in genome_b.node_genes:
            node_gene = genome_b.node_genes[nid]
        else:
            raise StructuralError(f"node ID {nid} cannot be found in either parent")
        offspring.node_genes[nid] = copy.copy(node_gene)

    # Inherit connection genes, in innovation order
    for conn_gene, _, _ in inherited:
        if conn_gene.enabled and offspring.has_enabled_connection(conn_gene.node_in, conn_gene.node_out):
            conn_gene.enabled = False
        offspring.add_connection_at(conn_gene.node_in, conn_gene.node_out, conn_gene.weight,
                                    conn_gene.innovation, conn_gene.enabled)

    if not config.allow_recurrent:
        _break_cycles(offspring, inherited)

    return offspring

def _break_cycles(offspring: Genome, inherited: list[tuple[ConnectionGene, bool, bool]]) -> None:
    """
    Disable tie-included genes, then re-enabled genes, latest innovation first,
    until the offspring's enabled connections are acyclic.
    """
    if not offspring.has_cycle():
        return

    tie_included = [gene.innovation for gene, tie, _      in inherited if tie]
    reenabled    = [gene.innovation for gene, _,   again in inherited if again]

    for innovation in tie_included[::-1] + reenabled[::-1]:
        conn = offspring.conn_genes[innovation]
        if not conn.enabled:
            continue
        conn.enabled = False
        logger.debug("crossover disabled {} in genome {} to break a cycle", conn, offspring.ID)
        if not offspring.has_cycle():
            return

    raise StructuralError(f"Offspring genome {offspring.ID} is cyclic")

def clone(genome: Genome) -> Genome:
    """
    Copy a genome, to be mutated as a child of a single parent.

    Returns:
        a copy of 'genome' with a fresh ID and no fitness
    """
    offspring = Genome.empty(genome.config)
    offspring.node_genes = {nid: copy.copy(node) for nid, node in genome.node_genes.items()}
    offspring.conn_genes = {innov: copy.copy(conn) for innov, conn in genome.conn_genes.items()}
    return offspring

def _fixed_node_ids(genome: Genome) -> list[int]:
    return sorted(node.id for node in genome.node_genes.values() if node.type != NodeType.HIDDEN)
