import configparser
import math
import os

from neatevo.activations import activations
from neatevo.errors      import InvalidConfiguration

class Config:

    @staticmethod
    def _parse_activation_options(raw_options):
        """
        Parse activation_options from string to list.

        Parameters:
            raw_options: Either "all", a comma-separated list, or already a list

        Returns:
            List of activation function names
        """
        # If already a list, return as-is
        if isinstance(raw_options, list):
            return raw_options

        # Parse string values
        if raw_options == 'all':
            return list(activations.keys())
        else:
            # Parse comma-separated list
            parsed = [opt.strip() for opt in raw_options.split(',')]
            for opt in parsed:
                if opt not in activations:
                    raise InvalidConfiguration(f"Invalid activation function '{opt}' in activation_options")
            return parsed

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a Config holding default values.
        Options missing from the INI file keep their default value.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a Config with default values for manual attribute setting.
        """
        self._set_defaults()

        if config_file is None:
            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Helper function to safely parse values
        def get_value(section, key, value_type, default):
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                return default
            except ValueError as e:
                raise InvalidConfiguration(f"Bad value for '{key}' in section [{section}]: {e}") from e

        # [POPULATION_INIT]
        self.population_size      = get_value('POPULATION_INIT', 'population_size',      int,   self.population_size)
        self.num_inputs           = get_value('POPULATION_INIT', 'num_inputs',           int,   self.num_inputs)
        self.num_outputs          = get_value('POPULATION_INIT', 'num_outputs',          int,   self.num_outputs)
        self.bias_node            = get_value('POPULATION_INIT', 'bias_node',            bool,  self.bias_node)
        self.bias_value           = get_value('POPULATION_INIT', 'bias_value',           float, self.bias_value)
        self.initial_cxn_policy   = get_value('POPULATION_INIT', 'initial_cxn_policy',   str,   self.initial_cxn_policy)
        self.initial_cxn_fraction = get_value('POPULATION_INIT', 'initial_cxn_fraction', float, self.initial_cxn_fraction)

        # [SPECIATION]
        self.compatibility_threshold          = get_value('SPECIATION', 'compatibility_threshold',          float, self.compatibility_threshold)
        self.distance_excess_coeff            = get_value('SPECIATION', 'distance_excess_coeff',            float, self.distance_excess_coeff)
        self.distance_disjoint_coeff          = get_value('SPECIATION', 'distance_disjoint_coeff',          float, self.distance_disjoint_coeff)
        self.distance_weight_coeff            = get_value('SPECIATION', 'distance_weight_coeff',            float, self.distance_weight_coeff)
        self.distance_normalization_threshold = get_value('SPECIATION', 'distance_normalization_threshold', int,   self.distance_normalization_threshold)

        # [REPRODUCTION]
        self.elitism                     = get_value('REPRODUCTION', 'elitism',                     int,   self.elitism)
        self.min_species_size_for_elitism = get_value('REPRODUCTION', 'min_species_size_for_elitism', int,   self.min_species_size_for_elitism)
        self.survival_threshold          = get_value('REPRODUCTION', 'survival_threshold',          float, self.survival_threshold)
        self.crossover_prob              = get_value('REPRODUCTION', 'crossover_prob',              float, self.crossover_prob)
        self.interspecies_crossover_prob = get_value('REPRODUCTION', 'interspecies_crossover_prob', float, self.interspecies_crossover_prob)
        self.tie_gene_inclusion_prob     = get_value('REPRODUCTION', 'tie_gene_inclusion_prob',     float, self.tie_gene_inclusion_prob)
        self.disabled_gene_inherit_prob  = get_value('REPRODUCTION', 'disabled_gene_inherit_prob',  float, self.disabled_gene_inherit_prob)

        # [STAGNATION]
        self.max_stagnation_period = get_value('STAGNATION', 'max_stagnation_period', int, self.max_stagnation_period)
        self.species_elitism       = get_value('STAGNATION', 'species_elitism',       int, self.species_elitism)

        # [TERMINATION]
        self.fitness_termination_check = get_value('TERMINATION', 'fitness_termination_check', bool,  self.fitness_termination_check)
        self.fitness_criterion         = get_value('TERMINATION', 'fitness_criterion',         str,   self.fitness_criterion)
        self.fitness_threshold         = get_value('TERMINATION', 'fitness_threshold',         float, self.fitness_threshold)
        self.max_number_generations    = get_value('TERMINATION', 'max_number_generations',    int,   self.max_number_generations)

        # [NODE]
        self.activation_initial     = get_value('NODE', 'activation_initial',     str,   self.activation_initial)
        self.activation_mutate_prob = get_value('NODE', 'activation_mutate_prob', float, self.activation_mutate_prob)
        self.activation_options     = get_value('NODE', 'activation_options',     str,   self.activation_options)

        # [CONNECTION]
        self.weight_init_mean        = get_value('CONNECTION', 'weight_init_mean',        float, self.weight_init_mean)
        self.weight_init_stdev       = get_value('CONNECTION', 'weight_init_stdev',       float, self.weight_init_stdev)
        self.min_weight              = get_value('CONNECTION', 'min_weight',              float, self.min_weight)
        self.max_weight              = get_value('CONNECTION', 'max_weight',              float, self.max_weight)
        self.weight_replace_prob     = get_value('CONNECTION', 'weight_replace_prob',     float, self.weight_replace_prob)
        self.weight_perturb_prob     = get_value('CONNECTION', 'weight_perturb_prob',     float, self.weight_perturb_prob)
        self.weight_perturb_strength = get_value('CONNECTION', 'weight_perturb_strength', float, self.weight_perturb_strength)

        # [STRUCTURAL_MUTATIONS]
        self.single_structural_mutation    = get_value('STRUCTURAL_MUTATIONS', 'single_structural_mutation',    bool,  self.single_structural_mutation)
        self.node_add_probability          = get_value('STRUCTURAL_MUTATIONS', 'node_add_probability',          float, self.node_add_probability)
        self.connection_add_probability    = get_value('STRUCTURAL_MUTATIONS', 'connection_add_probability',    float, self.connection_add_probability)
        self.connection_delete_probability = get_value('STRUCTURAL_MUTATIONS', 'connection_delete_probability', float, self.connection_delete_probability)
        self.connection_toggle_probability = get_value('STRUCTURAL_MUTATIONS', 'connection_toggle_probability', float, self.connection_toggle_probability)
        self.allow_recurrent               = get_value('STRUCTURAL_MUTATIONS', 'allow_recurrent',               bool,  self.allow_recurrent)

        # [INNOVATION]
        self.innovation_reset_policy = get_value('INNOVATION', 'innovation_reset_policy', str, self.innovation_reset_policy)

    def _set_defaults(self):
        """
        Assign the default value of every option.
        """

        # [POPULATION_INIT]

        # The number of genomes in each generation.
        self.population_size = 150

        # The number of input nodes, through which the network receives inputs.
        self.num_inputs = 2

        # The number of output nodes, to which the network delivers outputs.
        self.num_outputs = 1

        # Whether each genome carries a bias node, an input-like
        # node which always emits 'bias_value'.
        self.bias_node  = True
        self.bias_value = 1.0

        # Specifies the initial connectivity of newly-created networks.
        # Allowed values:
        #   "none"      - no connections are initially present
        #   "one-input" - one random input node is connected to all outputs nodes
        #   "partial"   - a fraction of all possible connections are instantiate randomly
        #   "full"      - connect all input (and bias) nodes to all output nodes
        self.initial_cxn_policy = "full"

        # The fraction of connections to instantiate (only applicable
        # if the initial connection policy is "partial").
        self.initial_cxn_fraction = None

        # [SPECIATION]

        # Genomes whose genomic distance is less than this
        # threshold are considered to be in the same species.
        self.compatibility_threshold = 3.0

        # The coefficients for the excess and disjoint gene counts'
        # contribution to the genomic distance.
        self.distance_excess_coeff   = 1.0
        self.distance_disjoint_coeff = 1.0

        # The coefficient for the average weight difference of matching genes.
        self.distance_weight_coeff = 0.4

        # The excess/disjoint terms are divided by the size of the larger genome
        # only when it has at least this many connection genes (otherwise by 1),
        # so that tiny genomes are not over-penalized.
        self.distance_normalization_threshold = 20

        # [REPRODUCTION]

        # The number of most-fit genomes in each species that
        # will be preserved as-is from one generation to the next.
        self.elitism = 1

        # Elites are copied only from species with at least this many members.
        # They are kept whatever the species' offspring allocation, even when it is zero.
        self.min_species_size_for_elitism = 1

        # The fraction of genomes allowed to reproduce in each species
        # (the rest, the least fit, are discarded before breeding).
        self.survival_threshold = 0.8

        # The probability that a child is bred by crossover between two
        # parents, rather than by cloning a single parent.
        self.crossover_prob = 0.75

        # The probability that the second parent of a crossover comes from another species.
        self.interspecies_crossover_prob = 0.001

        # When both parents have the same fitness, the probability that
        # each of their non-matching genes is inherited by the child.
        self.tie_gene_inclusion_prob = 0.5

        # The probability that a gene disabled in either parent is disabled in the child.
        self.disabled_gene_inherit_prob = 0.75

        # [STAGNATION]

        # Species that have not shown improvement in more than this
        # number of generations will be considered stagnant and removed.
        self.max_stagnation_period = 15

        # The number of species that will be protected from stagnation.
        self.species_elitism = 2

        # [TERMINATION]

        # Whether to use the fitness of the most recent
        # generation as a criterion for stopping the run.
        self.fitness_termination_check = False

        # The function used to compute the termination criterion: "mean" or "max".
        self.fitness_criterion = "max"

        # The fitness value which when met or exceeded causes the run to end.
        self.fitness_threshold = None

        # The number of generations after which to stop the run.
        self.max_number_generations = 100

        # [NODE]

        # Activation function for new hidden and output nodes (see 'basic_activations.py').
        self.activation_initial = "sigmoid"

        # The probability that mutation will change the activation function of a node.
        self.activation_mutate_prob = 0.0

        # Which activation functions are available for mutation.
        # Options: "all" or a comma-separated list
        self.activation_options = "all"

        # [CONNECTION]

        # The mean and standard deviation of the normal distribution
        # used to initialize the 'weight' parameter for new connections.
        self.weight_init_mean  = 0.0
        self.weight_init_stdev = 1.0

        # The minimum and maximum allowed 'weight' values.
        # Weights outside this range will be clamped to this range.
        self.min_weight = -30.0
        self.max_weight =  30.0

        # The probability that mutation will replace the 'weight' of a connection
        # with a newly chosen random value (as if it were a new connection).
        self.weight_replace_prob = 0.1

        # The probability that mutation will change the 'weight'
        # of a connection by adding a random value.
        self.weight_perturb_prob = 0.8

        # The standard deviation of the zero-centered normal distribution
        # from which a 'weight' perturbation value is drawn.
        self.weight_perturb_strength = 0.5

        # [STRUCTURAL_MUTATIONS]

        # If this is 'True', only one structural mutation will be
        # allowed per genome per generation.
        self.single_structural_mutation = False

        # The probability that mutation will add a new node (splitting an
        # existing connection, the enabled status of which will be set to False).
        self.node_add_probability = 0.2

        # The probability that mutation will add a connection between existing nodes.
        self.connection_add_probability = 0.5

        # The probability that mutation will delete an existing connection.
        # NEAT disables rather than deletes connections, so keep it at 0
        # unless you have a good reason not to.
        self.connection_delete_probability = 0.0

        # The probability that mutation will flip the enabled status of a connection.
        self.connection_toggle_probability = 0.01

        # Whether mutation may create recurrent (cycle-forming) connections.
        self.allow_recurrent = False

        # [INNOVATION]

        # Lifetime of the innovation table:
        #   "run"        - identical structural mutations share one innovation number for the whole run
        #   "generation" - the table is cleared at the start of each generation's mutation phase
        self.innovation_reset_policy = "run"

    def validate(self) -> None:
        """
        Check that all options hold values in their allowed range.

        Raises:
            InvalidConfiguration: on the first out-of-range option found
        """
        def check(condition, message):
            if not condition:
                raise InvalidConfiguration(message)

        def check_probability(name):
            value = getattr(self, name)
            check(value is not None and 0.0 <= value <= 1.0,
                  f"'{name}' must be a probability in [0, 1], got {value}")

        def check_non_negative(name):
            value = getattr(self, name)
            check(value is not None and value >= 0 and not math.isnan(value),
                  f"'{name}' must be non-negative, got {value}")

        check(isinstance(self.population_size, int) and self.population_size >= 1,
              f"'population_size' must be a positive integer, got {self.population_size}")
        check(isinstance(self.num_inputs, int) and self.num_inputs >= 1,
              f"'num_inputs' must be a positive integer, got {self.num_inputs}")
        check(isinstance(self.num_outputs, int) and self.num_outputs >= 1,
              f"'num_outputs' must be a positive integer, got {self.num_outputs}")

        check(self.initial_cxn_policy in ("none", "one-input", "partial", "full"),
              f"Bad 'initial_cxn_policy': {self.initial_cxn_policy}")
        if self.initial_cxn_policy == "partial":
            check_probability('initial_cxn_fraction')

        for name in ('compatibility_threshold',
                     'distance_excess_coeff',
                     'distance_disjoint_coeff',
                     'distance_weight_coeff',
                     'distance_normalization_threshold',
                     'elitism',
                     'species_elitism',
                     'weight_init_stdev',
                     'weight_perturb_strength'):
            check_non_negative(name)

        for name in ('survival_threshold',
                     'crossover_prob',
                     'interspecies_crossover_prob',
                     'tie_gene_inclusion_prob',
                     'disabled_gene_inherit_prob',
                     'activation_mutate_prob',
                     'weight_replace_prob',
                     'weight_perturb_prob',
                     'node_add_probability',
                     'connection_add_probability',
                     'connection_delete_probability',
                     'connection_toggle_probability'):
            check_probability(name)

        check(self.survival_threshold > 0.0, "'survival_threshold' must be greater than 0")
        check(self.weight_replace_prob + self.weight_perturb_prob <= 1.0,
              "'weight_replace_prob' + 'weight_perturb_prob' must not exceed 1")
        check(self.min_weight <= self.max_weight, "'min_weight' must not exceed 'max_weight'")
        check(isinstance(self.min_species_size_for_elitism, int) and self.min_species_size_for_elitism >= 1,
              f"'min_species_size_for_elitism' must be at least 1, got {self.min_species_size_for_elitism}")
        check(self.max_stagnation_period is not None and self.max_stagnation_period >= 1,
              f"'max_stagnation_period' must be at least 1, got {self.max_stagnation_period}")

        check(self.activation_initial in activations, f"Unknown 'activation_initial': {self.activation_initial}")
        check(len(self.activation_options) > 0, "'activation_options' must not be empty")

        check(self.fitness_criterion in ("max", "mean"), f"Bad 'fitness_criterion': {self.fitness_criterion}")
        if self.fitness_termination_check:
            check(self.fitness_threshold is not None, "'fitness_threshold' is required by 'fitness_termination_check'")

        check(self.innovation_reset_policy in ("run", "generation"),
              f"Bad 'innovation_reset_policy': {self.innovation_reset_policy}")

    @property
    def num_fixed_nodes(self) -> int:
        """Number of nodes every genome has: inputs, outputs and the optional bias node."""
        return self.num_inputs + self.num_outputs + (1 if self.bias_node else 0)

    def __setattr__(self, name, value):
        """
        Override 'setattr' to automatically parse activation_options when set.
        This allows users to write config.activation_options = "all" and have it
        automatically converted to the list of activation names.
        """
        if name == 'activation_options':
            value = self._parse_activation_options(value)
        super().__setattr__(name, value)
