"""
Unit tests for NetworkBase graph analysis.

Tests cover feedback edge detection, evaluation ordering,
introspection properties and Graphviz visualization.
"""

import graphviz
import pytest

from neatevo.genotype.genome        import Genome
from neatevo.phenotype.network_base import NetworkBase


# ============================================================================
# Test Fixtures
# ============================================================================

@pytest.fixture
def recurrent_config(make_config):
    """Config allowing cycles."""
    return make_config(allow_recurrent=True)


# ============================================================================
# Feedback Edge Tests
# ============================================================================

class TestFindFeedbackEdges:
    """Test NetworkBase._find_feedback_edges()."""

    def test_acyclic_genome_has_none(self, genome_from_connections):
        """Test that a feed-forward genome has no feedback edge."""
        genome = genome_from_connections([(0, 3, 1.0, 0), (3, 2, 1.0, 1), (1, 2, 1.0, 2)])
        assert NetworkBase._find_feedback_edges(genome) == frozenset()

    def test_self_loop(self, genome_from_connections):
        """Test that a self-loop is a feedback edge."""
        genome = genome_from_connections([(0, 3, 1.0, 0), (3, 3, 0.5, 1), (3, 2, 1.0, 2)])
        assert NetworkBase._find_feedback_edges(genome) == frozenset({1})

    def test_back_edge_of_loop(self, genome_from_connections):
        """Test that the edge pointing back towards the inputs closes the loop."""
        genome = genome_from_connections([(0, 3, 1.0, 0), (3, 4, 1.0, 1), (4, 3, 1.0, 2), (4, 2, 1.0, 3)])
        assert NetworkBase._find_feedback_edges(genome) == frozenset({2})

    def test_disabled_edges_ignored(self, genome_from_connections):
        """Test that disabled connections are never feedback edges."""
        genome = genome_from_connections([(0, 3, 1.0, 0), (3, 4, 1.0, 1), (4, 3, 1.0, 2, False), (4, 2, 1.0, 3)])
        assert NetworkBase._find_feedback_edges(genome) == frozenset()

    def test_loop_unreachable_from_inputs(self, genome_from_connections):
        """Test that cycles not fed by any input are still found."""
        genome = genome_from_connections([(3, 4, 1.0, 0), (4, 3, 1.0, 1), (4, 2, 1.0, 2)])
        assert len(NetworkBase._find_feedback_edges(genome)) == 1


# ============================================================================
# Ordering Tests
# ============================================================================

class TestTopologicalSort:
    """Test NetworkBase._topological_sort()."""

    def test_dependencies_come_first(self, genome_from_connections):
        """Test that every node follows the sources of its incoming connections."""
        genome = genome_from_connections([(0, 4, 1.0, 0), (4, 3, 1.0, 1), (3, 2, 1.0, 2), (1, 3, 1.0, 3)])
        order  = NetworkBase._topological_sort(genome)
        for conn in genome.connections:
            assert order.index(conn.node_in) < order.index(conn.node_out)
        assert sorted(order) == sorted(genome.node_genes)

    def test_deterministic(self, genome_from_connections):
        """Test that ties are broken by node ID."""
        genome = genome_from_connections([(0, 2, 1.0, 0), (1, 2, 1.0, 1)])
        assert NetworkBase._topological_sort(genome) == [0, 1, 2]

    def test_feedback_edges_excluded(self, genome_from_connections):
        """Test that ignoring the feedback edges orders a cyclic genome completely."""
        genome   = genome_from_connections([(0, 3, 1.0, 0), (3, 4, 1.0, 1), (4, 3, 1.0, 2), (4, 2, 1.0, 3)])
        feedback = NetworkBase._find_feedback_edges(genome)
        order    = NetworkBase._topological_sort(genome, feedback)
        assert sorted(order) == [0, 1, 2, 3, 4]
        assert order.index(3) < order.index(4) < order.index(2)


# ============================================================================
# Introspection and Visualization Tests
# ============================================================================

class TestNetworkProperties:
    """Test introspection properties shared by all networks."""

    class _Stub(NetworkBase):
        def tick(self, inputs):
            return []

    def test_counts(self, genome_from_connections):
        """Test node and connection counts."""
        genome  = genome_from_connections([(0, 3, 1.0, 0), (3, 2, 1.0, 1), (0, 2, 1.0, 2, False)])
        network = self._Stub(genome)
        assert network.genome is genome
        assert network.number_nodes == 4
        assert network.number_nodes_hidden == 1
        assert network.number_connections == 3
        assert network.number_connections_enabled == 2
        assert not network.is_recurrent

    def test_is_recurrent(self, genome_from_connections):
        """Test that a self-loop makes the network recurrent."""
        genome = genome_from_connections([(0, 3, 1.0, 0), (3, 3, 1.0, 1), (3, 2, 1.0, 2)])
        assert self._Stub(genome).is_recurrent

    def test_cannot_instantiate_base(self, config):
        """Test that NetworkBase is abstract."""
        with pytest.raises(TypeError):
            NetworkBase(Genome(config))

    def test_visualize_returns_digraph(self, make_config, genome_from_connections):
        """Test that visualization builds a Graphviz graph with every node and edge."""
        cfg     = make_config(bias_node=True)
        genome  = genome_from_connections([(0, 4, 1.0, 0), (4, 4, 1.0, 1), (4, 2, 1.0, 2), (3, 2, 1.0, 3)], cfg)
        network = self._Stub(genome)
        dot     = network.visualize(view=False)
        assert isinstance(dot, graphviz.Digraph)
        assert "khaki" in dot.source
        assert "dashed" in dot.source
        for node_id in genome.node_genes:
            assert f"id={node_id}" in dot.source
