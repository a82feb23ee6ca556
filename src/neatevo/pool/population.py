"""
NEAT Population Module

This module implements the Population class, the top-level orchestrator for the NEAT
evolutionary algorithm. The population manages the complete lifecycle of a generation,
from fitness evaluation through speciation and selection to reproduction.

Classes:
    GenerationState: The phases a generation goes through
    Population:      Top-level evolutionary coordinator managing genomes and generations
"""

import copy
import math
import random
from enum   import Enum
from joblib import Parallel, delayed
from typing import Callable

from loguru import logger

from neatevo.errors                      import EmptyPopulation, NeatError
from neatevo.genotype.connection_gene    import random_weight
from neatevo.genotype.genome             import Genome
from neatevo.genotype.innovation_tracker import InnovationTracker
from neatevo.pool.species                import Species
from neatevo.pool.species_manager        import SpeciesManager
from neatevo.run.config                  import Config

class GenerationState(Enum):
    """
    A generation moves through these states, in this order,
    after which the next generation starts EVALUATING.
    """
    EVALUATING            = "evaluating"
    SPECIATING            = "speciating"
    REPRODUCING_SELECTION = "reproducing-selection"
    REPRODUCING_OFFSPRING = "reproducing-offspring"
    ADVANCED_GENERATION   = "advanced-generation"

def _safe_fitness(fitness_function: Callable[[Genome], float], genome: Genome) -> tuple[float | None, str | None]:
    """
    Call the fitness function, turning any exception into an error message.
    Module level, so that joblib workers can unpickle it.
    """
    try:
        return float(fitness_function(genome)), None
    except Exception as e:
        return None, f"{type(e).__name__}: {e}"

class Population:
    """
    A population of evolving genomes in the NEAT algorithm.

    The Population class represents the top-level container for the evolutionary
    process, managing a collection of genomes and coordinating their evolution
    through generations. It handles initialization, fitness evaluation, reproduction,
    and maintains the speciation structure that protects innovation.

    Termination is not decided here: callers (e.g. a Trial) decide how many
    generations to run.

    Public Attributes:
        genomes:     List of all Genome objects in the current generation
        generation:  Number of the current generation (0 for the initial one)
        state:       The GenerationState the population is in
        tracker:     The InnovationTracker used for structural mutations
        best_genome: Copy of the fittest genome evaluated so far (None before any evaluation)

    Public Properties:
        species: Dictionary mapping species IDs to Species instances

    Public Methods:
        evaluate(fitness_function, num_jobs): Assign a fitness to every genome
        get_fittest_genome():                 Return the genome with highest fitness
        spawn_next_generation():              Create the next generation through evolution
        step(fitness_function, num_jobs):     Evaluate, then spawn the next generation
    """

    def __init__(self,
                 config : Config,
                 tracker: InnovationTracker | None = None,
                 rng=None):
        """
        Initialize the population with 'population_size' minimal genomes.

        Parameters:
            config:  Stores configuration parameters (validated here)
            tracker: InnovationTracker to use (a new one is created if not given)
            rng:     Source of randomness (random.Random-like), defaults to the 'random' module

        Raises:
            InvalidConfiguration: If a configuration value is out of range
        """
        config.validate()

        self._config         : Config            = config
        self._rng                                = rng if rng is not None else random
        self.tracker         : InnovationTracker = tracker if tracker is not None else InnovationTracker(config)
        self.generation      : int               = 0
        self.state           : GenerationState   = GenerationState.EVALUATING
        self.best_genome     : Genome | None     = None
        self._species_manager: SpeciesManager    = SpeciesManager(config)

        # Step 1: create a number of identical genomes, each with a
        # network consisting only of unconnected input, output and bias nodes.
        self.genomes: list[Genome] = [Genome(config) for _ in range(config.population_size)]

        # Step 2: add connections to each genome.
        # The manner in which this is done depends on the initialization policy.
        if config.initial_cxn_policy == "none":
            pass  # already unconnected
        elif config.initial_cxn_policy == "one-input":
            self._connect_one_input()
        elif config.initial_cxn_policy == "partial":
            self._connect_partial()
        elif config.initial_cxn_policy == "full":
            self._connect_full()

    @property
    def species(self) -> dict[int, Species]:
        return self._species_manager.species

    def _connect(self, genome: Genome, node_in: int, node_out: int) -> None:
        innovation = self.tracker.get_innovation_number(node_in, node_out)
        weight     = random_weight(self._config, self._rng)
        genome.add_connection_at(node_in, node_out, weight, innovation)

    def _connect_one_input(self):
        """
        For each network, connect one random input node to all outputs nodes.
        """
        for genome in self.genomes:
            input_node = self._rng.choice(genome.input_nodes)
            for output_node in genome.output_nodes:
                self._connect(genome, input_node.id, output_node.id)

    def _connect_partial(self):
        """
        For each network, connect a fraction of all possible connections.
        The connections are chosen at random.
        """
        for genome in self.genomes:

            # Randomly select the source-output node pairs which are to be connected
            sources    = genome.input_nodes + genome.bias_nodes
            all_pairs  = [(src.id, out.id) for src in sources for out in genome.output_nodes]
            num_conns  = int(len(all_pairs) * self._config.initial_cxn_fraction)
            make_pairs = sorted(self._rng.sample(all_pairs, num_conns))

            for source_id, output_id in make_pairs:
                self._connect(genome, source_id, output_id)

    def _connect_full(self):
        """
        For each network, connect all input (and bias) nodes to all output nodes.
        """
        for genome in self.genomes:
            for source_node in genome.input_nodes + genome.bias_nodes:
                for output_node in genome.output_nodes:
                    self._connect(genome, source_node.id, output_node.id)

    def evaluate(self, fitness_function: Callable[[Genome], float], num_jobs: int = 1) -> None:
        """
        Assign a fitness to every genome of the current generation.

        This is a barrier: it returns only once every genome has a fitness.
        A genome whose evaluation raises or returns NaN or infinity gets fitness 0.0 (the
        lowest possible), negative fitness is clamped to 0.0; failures are logged
        and do not affect the other genomes.

        Parameters:
            fitness_function: callable mapping a genome to a non-negative float
            num_jobs:         Number of parallel processes for fitness evaluation
                              1 = serial (no parallelization)
                             -1 = use all available CPU cores
                             >1 = use specified number of processes
        """
        self.state = GenerationState.EVALUATING

        # Calculate genomes' fitness
        if num_jobs == 1:
            results = [_safe_fitness(fitness_function, genome) for genome in self.genomes]
        else:
            results = Parallel(num_jobs)(delayed(_safe_fitness)(fitness_function, g) for g in self.genomes)

        for genome, (fitness, error) in zip(self.genomes, results):
            if error is not None:
                logger.warning("Fitness evaluation failed for genome {}: {}", genome.ID, error)
                fitness = 0.0
            elif not math.isfinite(fitness):
                logger.warning("Fitness evaluation returned {} for genome {}", fitness, genome.ID)
                fitness = 0.0
            elif fitness < 0.0:
                logger.debug("Negative fitness {} clamped to 0 for genome {}", fitness, genome.ID)
                fitness = 0.0
            genome.fitness = fitness

        fittest = self.get_fittest_genome()
        if fittest is not None and (self.best_genome is None or fittest.fitness > self.best_genome.fitness):
            self.best_genome = copy.deepcopy(fittest)

    def get_fittest_genome(self) -> Genome | None:
        """
        Find and return the genome with the highest fitness in the population.

        Returns:
            The genome with the highest fitness value, or None if population
            is empty, or the fitness of genomes has not been calculated yet
        """
        if not self.genomes or any(genome.fitness is None for genome in self.genomes):
            return None
        return max(self.genomes, key=lambda genome: genome.fitness)

    def spawn_next_generation(self) -> None:
        """
        Create the next generation through speciation, selection, and reproduction.

        The generation process follows these steps:

        Step 1: Speciation (SPECIATING)
        - Assign all genomes to species based on genetic similarity
        - Update species fitness and stagnation counters

        Step 2: Selection (REPRODUCING_SELECTION)
        - Remove stagnant species and all their members, protecting the top
          'species_elitism' species and the species containing the fittest genome
        - Reserve 'elitism' slots for every species with at least
          'min_species_size_for_elitism' members, whatever its fitness
        - Share fitness within species and allocate the other slots proportionally
          to species adjusted fitness (exactly 'population_size' in total)

        Step 3: Reproduction (REPRODUCING_OFFSPRING)
        - Each species spawns its allocated number of offspring: elites unchanged,
          the rest through crossover (or cloning) and mutation

        Step 4: ADVANCED_GENERATION, until 'evaluate' starts on the new generation

        Raises:
            NeatError:       If some genome has not been evaluated
            EmptyPopulation: If no species or no genome is left to breed from
        """
        if not self.genomes:
            raise EmptyPopulation("The population has no genomes")
        if any(genome.fitness is None for genome in self.genomes):
            raise NeatError("All genomes must be evaluated before spawning the next generation")

        # Split the population into species
        self.state = GenerationState.SPECIATING
        self._species_manager.speciate(self.genomes, self._rng)
        self._species_manager.update_fitness()

        # Remove stagnating species and all genomes that belong to them
        self.state = GenerationState.REPRODUCING_SELECTION
        champion = self.get_fittest_genome()
        _, removed_ids = self._species_manager.remove_stagnating_species(champion)
        survivors = [genome for genome in self.genomes if genome.ID not in removed_ids]
        if not self._species_manager.species or not survivors:
            raise EmptyPopulation(f"No species survived generation {self.generation}")

        # Every qualifying species keeps its elites; the remaining
        # slots are shared out in proportion to adjusted fitness
        self._species_manager.share_fitness()
        elites      = self._species_manager.calculate_elite_counts()
        allocations = self._species_manager.calculate_offspring_allocations(self._config.population_size - sum(elites.values()))

        # Spawn the new generation, one species at a time
        self.state = GenerationState.REPRODUCING_OFFSPRING
        self.tracker.begin_generation()
        offspring_all = []
        for spec_id, spec in self._species_manager.species.items():
            other_parents = [genome for genome in survivors if genome.ID not in spec.members]
            offspring_all.extend(spec.spawn(elites[spec_id] + allocations[spec_id], self.tracker, other_parents,
                                            self._rng, num_elites=elites[spec_id]))

        if not offspring_all:
            raise EmptyPopulation(f"No offspring produced in generation {self.generation}")

        # Every genome of the new generation, elites included, must be evaluated anew
        for genome in offspring_all:
            genome.fitness          = None
            genome.adjusted_fitness = None

        logger.info("Generation {}: best fitness {:.4f}, {} species, {} offspring",
                    self.generation, champion.fitness, len(self.species), len(offspring_all))

        self.genomes     = offspring_all
        self.generation += 1
        self.state       = GenerationState.ADVANCED_GENERATION

    def step(self, fitness_function: Callable[[Genome], float], num_jobs: int = 1) -> Genome:
        """
        Evaluate the current generation, then spawn the next one.

        Returns:
            the fittest genome of the evaluated generation
        """
        self.evaluate(fitness_function, num_jobs)
        champion = self.get_fittest_genome()
        self.spawn_next_generation()
        return champion

    def __str__(self):
        return '\n'.join(str(genome) for genome in self.genomes)
