"""
Shared fixtures for integration tests.
"""

from pathlib import Path

import pytest

from neatevo.run.trial import Trial
from neatevo.phenotype import create_network


XOR_INPUTS  = [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
XOR_OUTPUTS = [[0.0], [1.0], [1.0], [0.0]]


def evaluate_xor_fitness(network):
    """
    Evaluate XOR fitness of a network.

    Parameters:
        network: FeedForwardNetwork or RecurrentNetwork instance

    Returns:
        Fitness score (max 4.0 for perfect solution)
    """
    fitness = 4.0
    for inputs, expected_output in zip(XOR_INPUTS, XOR_OUTPUTS):
        output   = network.tick(inputs)
        error    = output[0] - expected_output[0]
        fitness -= error ** 2
    return fitness


class TrialXORTest(Trial):
    """Simplified XOR trial for integration testing."""

    def __init__(self, config, rng=None):
        super().__init__(config, suppress_output=True, rng=rng)
        self.progress = []

    def _evaluate_fitness(self, genome):
        return evaluate_xor_fitness(create_network(genome))

    def run(self, num_jobs=1):
        # Reports are suppressed, record the initial champion instead
        self.progress = []
        return super().run(num_jobs)

    def _terminate(self):
        self.progress.append(self._population.get_fittest_genome().fitness)
        return super()._terminate()


@pytest.fixture
def xor_fitness():
    """Fitness function scoring a genome on XOR (max 4.0)."""
    return lambda genome: evaluate_xor_fitness(create_network(genome))


@pytest.fixture
def xor_network_fitness():
    """Fitness function scoring a network on XOR (max 4.0)."""
    return evaluate_xor_fitness


@pytest.fixture
def xor_trial():
    """Factory for XOR trials."""
    return TrialXORTest


@pytest.fixture
def xor_config_path():
    """Path of examples/config_xor.ini."""
    return Path(__file__).resolve().parents[2] / "examples" / "config_xor.ini"
