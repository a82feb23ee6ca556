"""
Integration tests for basic NEAT evolution.

These tests verify that NEAT can solve real problems end-to-end:
populations grow structure, fitness improves, and the evolved genomes
survive serialization.

NOTE: These tests use seeded random number generators for reproducibility.
"""

import random

import pytest

from neatevo.genotype  import load_genome, save_genome
from neatevo.phenotype import create_network
from neatevo.pool      import Population
from neatevo.run       import Config


# ============================================================================
# Helper Functions
# ============================================================================

def xor_config(**overrides):
    config = Config()
    config.population_size              = 150
    config.num_inputs                   = 2
    config.num_outputs                  = 1
    config.bias_node                    = True
    config.initial_cxn_policy           = 'full'
    config.survival_threshold           = 0.2
    config.node_add_probability         = 0.2
    config.connection_add_probability   = 0.5
    config.connection_delete_probability = 0.0
    config.activation_options           = ['sigmoid']
    config.fitness_termination_check    = True
    config.fitness_criterion            = 'max'
    config.fitness_threshold            = 3.9
    config.max_number_generations       = 300
    for name, value in overrides.items():
        setattr(config, name, value)
    return config


# ============================================================================
# Test Basic Evolution - Problem Solving
# ============================================================================

class TestBasicEvolution:
    """Test that NEAT makes progress on XOR end-to-end."""

    def test_xor_fitness_improves(self, xor_trial):
        """Verify that evolution finds networks clearly better than the initial ones."""
        trial = xor_trial(xor_config(), rng=random.Random(42))
        best  = trial.run()

        assert best is not None
        assert best.fitness > trial.progress[0]
        assert best.fitness >= 3.5

    def test_xor_solution_needs_hidden_nodes(self, xor_trial, xor_fitness):
        """Verify that a solved XOR network has grown beyond the initial topology."""
        trial = xor_trial(xor_config(), rng=random.Random(42))
        best  = trial.run()
        if trial.failed:
            pytest.skip("XOR not solved within the generation limit")
        assert best.hidden_nodes
        assert xor_fitness(best) == pytest.approx(best.fitness)

    def test_best_fitness_never_decreases(self, xor_fitness):
        """Verify that the recorded best genome only ever improves."""
        population = Population(xor_config(population_size=50), rng=random.Random(7))
        best_so_far = []
        for _ in range(15):
            population.step(xor_fitness)
            best_so_far.append(population.best_genome.fitness)
        assert best_so_far == sorted(best_so_far)

    def test_structure_grows(self, xor_fitness):
        """Verify that structural mutations add nodes and connections over generations."""
        population = Population(xor_config(population_size=50), rng=random.Random(3))
        for _ in range(10):
            population.step(xor_fitness)
        assert any(genome.hidden_nodes for genome in population.genomes)
        assert max(len(genome.connections) for genome in population.genomes) > 3


# ============================================================================
# Test Recurrent Evolution
# ============================================================================

class TestRecurrentEvolution:
    """Test evolution with recurrent connections allowed."""

    def test_recurrent_population_evolves(self):
        """Verify that recurrent genomes are created and evaluated without errors."""
        config = xor_config(population_size=40, allow_recurrent=True,
                            connection_add_probability=0.9, fitness_termination_check=False)
        population = Population(config, rng=random.Random(11))

        def memory_fitness(genome):
            # Reward networks whose output depends on the previous input
            network = create_network(genome)
            first   = network.tick([1.0, 0.0])[0]
            second  = network.tick([0.0, 0.0])[0]
            return abs(first - second)

        for _ in range(10):
            population.step(memory_fitness)

        assert any(genome.has_cycle() for genome in population.genomes)
        assert len(population.genomes) == 40


# ============================================================================
# Test Serialization of Evolved Genomes
# ============================================================================

class TestEvolvedGenomeSerialization:
    """Test that evolved genomes survive a save/load cycle."""

    def test_save_and_reload_best(self, tmp_path, xor_fitness):
        """Verify that a reloaded genome computes exactly the same outputs."""
        population = Population(xor_config(population_size=30), rng=random.Random(5))
        for _ in range(5):
            population.step(xor_fitness)
        population.evaluate(xor_fitness)
        best = population.best_genome

        path = tmp_path / "best.json"
        save_genome(best, path)
        reloaded = load_genome(path, population.genomes[0].config, population.tracker)

        assert reloaded.fitness == best.fitness
        assert [c.innovation for c in reloaded.connections] == [c.innovation for c in best.connections]
        assert xor_fitness(reloaded) == xor_fitness(best)
