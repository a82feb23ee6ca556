"""Pytest configuration and shared fixtures."""

import random

import numpy as np
import pytest

from neatevo.genotype   import Genome, InnovationTracker
from neatevo.run.config import Config


@pytest.fixture(autouse=True)
def set_random_seeds():
    """Set random seeds for reproducibility."""
    np.random.seed(42)
    random.seed(42)

    yield

    np.random.seed(None)
    random.seed(None)


@pytest.fixture
def make_config():
    """
    Factory for Config objects holding default values,
    with selected options overridden by keyword arguments.
    """
    def _make_config(**overrides):
        config = Config(config_file=None)
        config.num_inputs  = 2
        config.num_outputs = 1
        config.bias_node   = False
        for name, value in overrides.items():
            setattr(config, name, value)
        return config
    return _make_config


@pytest.fixture
def config(make_config):
    """2 inputs, 1 output, no bias node, sigmoid activation."""
    return make_config()


@pytest.fixture
def tracker(config):
    """Fresh innovation tracker for 'config'."""
    return InnovationTracker(config)


@pytest.fixture
def rng():
    """Seeded random number generator."""
    return random.Random(1234)


@pytest.fixture
def genome_from_connections(config):
    """
    Factory building a genome from (node_in, node_out, weight, innovation[, enabled]) tuples.
    Hidden nodes referenced by the connections are created automatically.
    """
    def _build(connections, cfg=None):
        cfg    = cfg or config
        genome = Genome(cfg)
        for conn in connections:
            node_in, node_out = conn[0], conn[1]
            for node_id in (node_in, node_out):
                if node_id not in genome.node_genes:
                    genome.add_node_at(node_id)
        for conn in connections:
            node_in, node_out, weight, innovation = conn[:4]
            enabled = conn[4] if len(conn) > 4 else True
            genome.add_connection_at(node_in, node_out, weight, innovation, enabled)
        return genome
    return _build
