"""
Unit tests for the object-oriented networks.

Tests cover neurons, feed-forward evaluation, recurrent evaluation
with one-tick delays on feedback edges, and network selection.
"""

import pytest

from neatevo.errors                import ArityMismatch
from neatevo.genotype.genome       import Genome
from neatevo.genotype.node_gene    import NodeGene, NodeType
from neatevo.phenotype.network     import (Neuron,
                                           FeedForwardNetwork,
                                           RecurrentNetwork,
                                           create_network)


# ============================================================================
# Test Fixtures
# ============================================================================

@pytest.fixture
def linear_config(make_config):
    """Config with identity activations, so outputs are easy to compute by hand."""
    return make_config(activation_initial='identity', allow_recurrent=True)


# ============================================================================
# Neuron Tests
# ============================================================================

class TestNeuron:
    """Test Neuron.calculate_output()."""

    def test_input_passes_through(self):
        """Test that input neurons emit their input."""
        neuron = Neuron(NodeGene(0, NodeType.INPUT))
        neuron.calculate_output(0.7)
        assert neuron.output == 0.7

    def test_bias_emits_constant(self):
        """Test that bias neurons ignore their input."""
        neuron = Neuron(NodeGene(3, NodeType.BIAS), bias_value=2.5)
        neuron.calculate_output(100.0)
        assert neuron.output == 2.5

    def test_activation_applied(self):
        """Test that hidden neurons apply their activation."""
        neuron = Neuron(NodeGene(4, NodeType.HIDDEN, 'relu'))
        neuron.calculate_output(-3.0)
        assert neuron.output == 0.0

    def test_initial_output(self):
        """Test that neurons start at 0.0."""
        assert Neuron(NodeGene(4, NodeType.HIDDEN, 'tanh')).output == 0.0


# ============================================================================
# Feed-Forward Network Tests
# ============================================================================

class TestFeedForwardNetwork:
    """Test FeedForwardNetwork.tick()."""

    def test_no_connections_gives_activation_of_zero(self, config):
        """Test that an unconnected sigmoid output emits sigmoid(0) = 0.5."""
        network = FeedForwardNetwork(Genome(config))
        assert network.tick([1.0, 1.0]) == [pytest.approx(0.5)]

    def test_weighted_sum(self, linear_config, genome_from_connections):
        """Test output = w0 * x0 + w1 * x1 with identity activation."""
        genome  = genome_from_connections([(0, 2, 0.5, 0), (1, 2, -2.0, 1)], linear_config)
        network = FeedForwardNetwork(genome)
        assert network.tick([2.0, 1.0]) == [pytest.approx(-1.0)]

    def test_hidden_layer(self, linear_config, genome_from_connections):
        """Test propagation through a hidden node."""
        genome  = genome_from_connections([(0, 3, 2.0, 0), (3, 2, 3.0, 1), (1, 2, 1.0, 2)], linear_config)
        network = FeedForwardNetwork(genome)
        assert network.tick([1.0, 0.5]) == [pytest.approx(6.5)]

    def test_disabled_connection_ignored(self, linear_config, genome_from_connections):
        """Test that disabled connections do not contribute."""
        genome  = genome_from_connections([(0, 2, 1.0, 0), (1, 2, 1.0, 1, False)], linear_config)
        network = FeedForwardNetwork(genome)
        assert network.tick([1.0, 5.0]) == [pytest.approx(1.0)]

    def test_genome_changes_after_build_ignored(self, linear_config, genome_from_connections):
        """Test that a built network keeps the weights and flags it was built with."""
        genome  = genome_from_connections([(0, 2, 0.5, 0), (1, 2, -2.0, 1)], linear_config)
        network = FeedForwardNetwork(genome)
        genome.conn_genes[0].weight  = 100.0
        genome.conn_genes[1].enabled = False
        assert network.tick([2.0, 1.0]) == [pytest.approx(-1.0)]
        assert FeedForwardNetwork(genome).tick([2.0, 1.0]) == [pytest.approx(200.0)]

    def test_bias_node(self, make_config, genome_from_connections):
        """Test that the bias node contributes bias_value times its weight."""
        cfg     = make_config(activation_initial='identity', bias_node=True, bias_value=2.0)
        genome  = genome_from_connections([(3, 2, 0.25, 0)], cfg)
        network = FeedForwardNetwork(genome)
        assert network.tick([0.0, 0.0]) == [pytest.approx(0.5)]

    def test_deterministic(self, genome_from_connections):
        """Test that repeated ticks with the same inputs give the same outputs."""
        genome  = genome_from_connections([(0, 3, 0.7, 0), (3, 2, -1.2, 1), (1, 2, 0.4, 2)])
        network = FeedForwardNetwork(genome)
        first   = network.tick([0.3, 0.9])
        network.tick([5.0, -5.0])
        assert network.tick([0.3, 0.9]) == first

    def test_multiple_outputs_in_id_order(self, make_config, genome_from_connections):
        """Test that outputs are returned in ascending output ID order."""
        cfg     = make_config(activation_initial='identity', num_outputs=2)
        genome  = genome_from_connections([(0, 3, 3.0, 0), (0, 2, 2.0, 1)], cfg)
        network = FeedForwardNetwork(genome)
        assert network.tick([1.0, 0.0]) == [pytest.approx(2.0), pytest.approx(3.0)]

    @pytest.mark.parametrize("inputs", [[], [1.0], [1.0, 2.0, 3.0]])
    def test_wrong_number_of_inputs(self, config, inputs):
        """Test that a wrong input count raises ArityMismatch."""
        network = FeedForwardNetwork(Genome(config))
        with pytest.raises(ArityMismatch):
            network.tick(inputs)


# ============================================================================
# Recurrent Network Tests
# ============================================================================

class TestRecurrentNetwork:
    """Test RecurrentNetwork.tick() and reset()."""

    def test_self_loop_carries_state(self, linear_config, genome_from_connections):
        """Test that a self-loop feeds back the value of the previous tick."""
        genome  = genome_from_connections([(0, 3, 1.0, 0), (3, 3, 0.5, 1), (3, 2, 1.0, 2)], linear_config)
        network = RecurrentNetwork(genome)
        assert network.tick([1.0, 0.0]) == [pytest.approx(1.0)]
        assert network.tick([0.0, 0.0]) == [pytest.approx(0.5)]
        assert network.tick([0.0, 0.0]) == [pytest.approx(0.25)]

    def test_reset_clears_state(self, linear_config, genome_from_connections):
        """Test that reset() forgets values carried between ticks."""
        genome  = genome_from_connections([(0, 3, 1.0, 0), (3, 3, 0.5, 1), (3, 2, 1.0, 2)], linear_config)
        network = RecurrentNetwork(genome)
        network.tick([1.0, 0.0])
        network.reset()
        assert network.tick([0.0, 0.0]) == [pytest.approx(0.0)]

    def test_one_hop_per_tick(self, linear_config, genome_from_connections):
        """Test that a signal crosses a feedback edge with a one-tick delay."""
        # 0 -> 3 -> 4 -> 2, with 4 -> 3 closing the loop
        genome  = genome_from_connections([(0, 3, 1.0, 0), (3, 4, 1.0, 1), (4, 3, 10.0, 2), (4, 2, 1.0, 3)],
                                          linear_config)
        network = RecurrentNetwork(genome)
        assert network.tick([1.0, 0.0]) == [pytest.approx(1.0)]
        assert network.tick([0.0, 0.0]) == [pytest.approx(10.0)]

    def test_same_sequence_same_outputs(self, linear_config, genome_from_connections):
        """Test that fresh networks fed the same sequence agree."""
        genome = genome_from_connections([(0, 3, 0.9, 0), (3, 3, -0.3, 1), (3, 2, 1.1, 2)], linear_config)
        seq    = [[1.0, 0.0], [0.5, 0.5], [0.0, 1.0]]
        net1, net2 = RecurrentNetwork(genome), RecurrentNetwork(genome)
        assert [net1.tick(x) for x in seq] == [net2.tick(x) for x in seq]


# ============================================================================
# Network Selection Tests
# ============================================================================

class TestCreateNetwork:
    """Test create_network()."""

    def test_acyclic_gives_feed_forward(self, genome_from_connections):
        """Test that acyclic genomes build a FeedForwardNetwork."""
        genome = genome_from_connections([(0, 2, 1.0, 0)])
        assert isinstance(create_network(genome), FeedForwardNetwork)

    def test_cyclic_gives_recurrent(self, linear_config, genome_from_connections):
        """Test that cyclic genomes build a RecurrentNetwork."""
        genome = genome_from_connections([(0, 3, 1.0, 0), (3, 3, 0.5, 1), (3, 2, 1.0, 2)], linear_config)
        assert isinstance(create_network(genome), RecurrentNetwork)

    def test_bias_value_override(self, make_config, genome_from_connections):
        """Test that an explicit bias value overrides the configuration."""
        cfg    = make_config(activation_initial='identity', bias_node=True, bias_value=1.0)
        genome = genome_from_connections([(3, 2, 1.0, 0)], cfg)
        assert create_network(genome, bias_value=-4.0).tick([0.0, 0.0]) == [pytest.approx(-4.0)]
