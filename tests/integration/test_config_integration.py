"""
Integration tests for configuration files driving complete runs.

These tests load real INI files and verify that every component
(population, speciation, reproduction, termination) honours them.
"""

import random

import pytest

from neatevo.errors import InvalidConfiguration
from neatevo.pool   import Population
from neatevo.run    import Config


# ============================================================================
# Test Shipped Configuration
# ============================================================================

class TestXORConfigFile:
    """Test examples/config_xor.ini."""

    def test_loads_and_validates(self, xor_config_path):
        """Verify that the shipped file parses and passes validation."""
        config = Config(str(xor_config_path))
        config.validate()
        assert config.population_size == 150
        assert config.bias_node is True
        assert config.activation_options == ['sigmoid']
        assert config.fitness_threshold == 3.9

    def test_population_follows_file(self, xor_config_path):
        """Verify that the initial population matches the file's topology settings."""
        config = Config(str(xor_config_path))
        population = Population(config, rng=random.Random(0))

        assert len(population.genomes) == 150
        for genome in population.genomes:
            assert len(genome.input_nodes)  == 2
            assert len(genome.output_nodes) == 1
            assert len(genome.bias_nodes)   == 1
            assert len(genome.connections)  == 3
            assert all(node.activation_name == 'sigmoid' for node in genome.output_nodes)

    def test_short_trial(self, xor_config_path, xor_trial):
        """Verify that a trial driven by the file runs and respects max_number_generations."""
        config = Config(str(xor_config_path))
        config.population_size        = 40
        config.max_number_generations = 5

        trial = xor_trial(config, rng=random.Random(1))
        best  = trial.run()

        assert best is not None
        assert trial._generation_counter <= 5
        assert len(trial.population.genomes) == 40
        assert all(node.activation_name == 'sigmoid'
                   for genome in trial.population.genomes for node in genome.hidden_nodes)


# ============================================================================
# Test Custom Configuration Files
# ============================================================================

class TestCustomConfigFiles:
    """Test runs driven by hand-written configuration files."""

    def test_weight_bounds_respected(self, tmp_path, xor_fitness):
        """Verify that evolved weights never leave [min_weight, max_weight]."""
        path = tmp_path / "bounded.ini"
        path.write_text("[POPULATION_INIT]\n"
                        "population_size = 30\n"
                        "[CONNECTION]\n"
                        "min_weight = -2.0\n"
                        "max_weight = 2.0\n"
                        "weight_perturb_strength = 3.0\n")
        population = Population(Config(str(path)), rng=random.Random(2))
        for _ in range(5):
            population.step(xor_fitness)

        for genome in population.genomes:
            assert all(-2.0 <= conn.weight <= 2.0 for conn in genome.connections)

    def test_generation_reset_policy(self, tmp_path, xor_fitness):
        """Verify that a run with per-generation innovation tables keeps numbers unique per pair."""
        path = tmp_path / "generation.ini"
        path.write_text("[POPULATION_INIT]\n"
                        "population_size = 30\n"
                        "[STRUCTURAL_MUTATIONS]\n"
                        "node_add_probability = 0.3\n"
                        "connection_add_probability = 0.5\n"
                        "[INNOVATION]\n"
                        "innovation_reset_policy = generation\n")
        population = Population(Config(str(path)), rng=random.Random(4))
        for _ in range(5):
            population.step(xor_fitness)

        for genome in population.genomes:
            innovations = [conn.innovation for conn in genome.connections]
            assert innovations == sorted(innovations)
            assert len(innovations) == len(set(innovations))

    def test_invalid_file_rejected(self, tmp_path):
        """Verify that an out-of-range option stops the population from being built."""
        path = tmp_path / "invalid.ini"
        path.write_text("[REPRODUCTION]\nsurvival_threshold = 1.5\n")
        with pytest.raises(InvalidConfiguration, match="survival_threshold"):
            Population(Config(str(path)))
