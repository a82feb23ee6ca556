"""
Unit tests for ConnectionGene class.

Tests cover initialization, weight mutation (perturbation, replacement,
clipping), the random_weight helper, equality and string representations.
"""

import pytest
import random
from unittest.mock import Mock

from neatevo.genotype.connection_gene import ConnectionGene, random_weight
from neatevo.run.config               import Config


# ============================================================================
# Test Fixtures
# ============================================================================

@pytest.fixture
def weight_config():
    """Config with standard weight parameters."""
    config = Mock(spec=Config)
    config.weight_init_mean        = 0.0
    config.weight_init_stdev       = 1.0
    config.min_weight              = -3.0
    config.max_weight              = 3.0
    config.weight_perturb_prob     = 0.8
    config.weight_replace_prob     = 0.1
    config.weight_perturb_strength = 0.5
    return config


# ============================================================================
# Initialization Tests
# ============================================================================

class TestConnectionGeneInit:
    """Test ConnectionGene initialization."""

    def test_fields(self):
        """Test that all fields are stored."""
        conn = ConnectionGene(0, 3, 0.5, 7)
        assert conn.node_in == 0
        assert conn.node_out == 3
        assert conn.weight == 0.5
        assert conn.innovation == 7
        assert conn.enabled is True
        assert conn.endpoints == (0, 3)

    def test_disabled(self):
        """Test creation of a disabled connection."""
        assert ConnectionGene(0, 3, 0.5, 7, enabled=False).enabled is False

    def test_weight_cast_to_float(self):
        """Test that integer weights are stored as floats."""
        conn = ConnectionGene(0, 3, 2, 7)
        assert isinstance(conn.weight, float)


# ============================================================================
# Mutation Tests
# ============================================================================

class TestConnectionGeneMutate:
    """Test ConnectionGene.mutate()."""

    def test_perturbation_small_change(self, weight_config):
        """Test that a pure perturbation moves the weight by a gaussian step."""
        weight_config.weight_perturb_prob = 1.0
        weight_config.weight_replace_prob = 0.0
        conn = ConnectionGene(0, 3, 0.0, 0)
        conn.mutate(weight_config, random.Random(5))
        assert conn.weight != 0.0
        assert abs(conn.weight) <= 3.0

    def test_weights_stay_within_bounds(self, weight_config):
        """Test that repeated mutation never leaves [min_weight, max_weight]."""
        weight_config.weight_perturb_strength = 10.0
        rng  = random.Random(11)
        conn = ConnectionGene(0, 3, 2.9, 0)
        for _ in range(200):
            conn.mutate(weight_config, rng)
            assert weight_config.min_weight <= conn.weight <= weight_config.max_weight

    def test_replacement(self, weight_config):
        """Test that a pure replacement draws a fresh clipped weight."""
        weight_config.weight_perturb_prob = 0.0
        weight_config.weight_replace_prob = 1.0
        conn = ConnectionGene(0, 3, 100.0, 0)
        conn.mutate(weight_config, random.Random(3))
        assert -3.0 <= conn.weight <= 3.0

    def test_no_mutation(self, weight_config):
        """Test that nothing changes when both probabilities are zero."""
        weight_config.weight_perturb_prob = 0.0
        weight_config.weight_replace_prob = 0.0
        conn = ConnectionGene(0, 3, 1.25, 0)
        for _ in range(10):
            conn.mutate(weight_config, random.Random(0))
        assert conn.weight == 1.25

    def test_mutation_deterministic_with_seeded_rng(self, weight_config):
        """Test that equal seeds yield equal weights."""
        conn1 = ConnectionGene(0, 3, 0.3, 0)
        conn2 = ConnectionGene(0, 3, 0.3, 0)
        rng1, rng2 = random.Random(99), random.Random(99)
        for _ in range(10):
            conn1.mutate(weight_config, rng1)
            conn2.mutate(weight_config, rng2)
        assert conn1.weight == conn2.weight


class TestRandomWeight:
    """Test the random_weight helper."""

    def test_within_bounds(self, weight_config):
        """Test that drawn weights respect the bounds."""
        weight_config.weight_init_stdev = 100.0
        rng = random.Random(2)
        for _ in range(100):
            assert -3.0 <= random_weight(weight_config, rng) <= 3.0

    def test_returns_float(self, weight_config):
        """Test that the result is a plain float."""
        assert type(random_weight(weight_config, random.Random(0))) is float


# ============================================================================
# Equality and String Representation Tests
# ============================================================================

class TestConnectionGeneRepresentation:
    """Test equality and string representations."""

    def test_equality(self):
        """Test that all fields take part in equality."""
        assert ConnectionGene(0, 3, 0.5, 7) == ConnectionGene(0, 3, 0.5, 7)
        assert ConnectionGene(0, 3, 0.5, 7) != ConnectionGene(0, 3, 0.5, 8)
        assert ConnectionGene(0, 3, 0.5, 7) != ConnectionGene(0, 3, 0.5, 7, enabled=False)

    def test_str(self):
        """Test the compact string form."""
        assert str(ConnectionGene(1, 4, 0.5, 7)) == "[007,E,01=>04,+0.50]"
        assert str(ConnectionGene(1, 4, -1.0, 12, enabled=False)) == "[012,D,01=>04,-1.00]"
