"""
NEAT Genome Serialization Module

Save genomes to, and load them from, JSON files built on 'Genome.to_dict()'.

Functions:
    save_genome: Write a genome to a JSON file
    load_genome: Read a genome from a JSON file
"""

import json
from pathlib import Path

from loguru import logger

from neatevo.genotype.genome             import Genome
from neatevo.genotype.innovation_tracker import InnovationTracker
from neatevo.run.config                  import Config

def save_genome(genome: Genome, path: str | Path) -> None:
    """
    Write 'genome' to 'path' as JSON.
    """
    path = Path(path)
    with path.open("w") as f:
        json.dump(genome.to_dict(), f, indent=2)
    logger.debug("Saved genome {} to {}", genome.ID, path)

def load_genome(path: str | Path, config: Config, tracker: InnovationTracker | None = None) -> Genome:
    """
    Read a genome previously written by 'save_genome'.

    If a tracker is given, it is synchronized with the loaded genome so that
    innovation numbers and node IDs handed out later do not collide with it.

    Parameters:
        path:    JSON file to read
        config:  Stores configuration parameters (must match the saved genome's inputs/outputs)
        tracker: InnovationTracker to synchronize

    Returns:
        the loaded genome (with a fresh ID)
    """
    path = Path(path)
    with path.open() as f:
        genome_dict = json.load(f)

    genome = Genome.from_dict(genome_dict, config, tracker)
    if tracker is not None:
        tracker.sync(genome)

    logger.debug("Loaded genome {} from {} ({} nodes, {} connections)",
                 genome.ID, path, len(genome.node_genes), len(genome.conn_genes))
    return genome
