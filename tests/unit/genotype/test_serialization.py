"""
Unit tests for genome JSON serialization.
"""

import json

import pytest

from neatevo.genotype import InnovationTracker, load_genome, save_genome


class TestSaveLoad:
    """Test save_genome() and load_genome()."""

    def test_file_is_json(self, tmp_path, genome_from_connections):
        """Test that the saved file holds the genome's dictionary form."""
        genome = genome_from_connections([(0, 2, 0.5, 0), (1, 2, -1.5, 1)])
        path   = tmp_path / "genome.json"
        save_genome(genome, path)

        with path.open() as f:
            data = json.load(f)
        assert data == genome.to_dict()

    def test_round_trip(self, tmp_path, config, genome_from_connections):
        """Test that a loaded genome has the same genes and fitness."""
        genome = genome_from_connections([(0, 3, 0.5, 0), (3, 2, 2.0, 5), (1, 2, -1.0, 1, False)])
        genome.fitness = 1.25
        path = tmp_path / "genome.json"
        save_genome(genome, str(path))

        loaded = load_genome(path, config)
        assert loaded.connections == genome.connections
        assert [node.id for node in loaded.hidden_nodes] == [3]
        assert loaded.fitness == 1.25

    def test_tracker_synced(self, tmp_path, config, genome_from_connections):
        """Test that loading advances the tracker past the genome's numbers."""
        genome = genome_from_connections([(0, 7, 0.5, 12), (7, 2, 1.0, 13)])
        path   = tmp_path / "genome.json"
        save_genome(genome, path)

        tracker = InnovationTracker(config)
        load_genome(path, config, tracker)
        assert tracker.next_innovation_number > 13
        assert tracker.next_node_id > 7

    def test_mismatched_config(self, tmp_path, make_config, genome_from_connections):
        """Test that a genome cannot be loaded with a different number of outputs."""
        genome = genome_from_connections([(0, 2, 0.5, 0)])
        path   = tmp_path / "genome.json"
        save_genome(genome, path)

        with pytest.raises(ValueError, match="Output nodes"):
            load_genome(path, make_config(num_outputs=2))

    def test_missing_file(self, tmp_path, config):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_genome(tmp_path / "nope.json", config)
