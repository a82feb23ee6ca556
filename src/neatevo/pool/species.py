"""
NEAT Species Module

This module implements the Species class for the NEAT algorithm.
A species represents a cluster of genetically similar genomes
that compete primarily within their own niche.

Classes:
    Species: Represents a single species with members and fitness tracking
"""

import copy
import random
from statistics import mean
from typing     import TYPE_CHECKING, Sequence

from loguru import logger

from neatevo.errors                   import StructuralError
from neatevo.reproduction.crossover   import crossover, clone
from neatevo.reproduction.mutation    import mutate
from neatevo.run.config               import Config
if TYPE_CHECKING:
    from neatevo.genotype import Genome, InnovationTracker

class Species:
    """
    A species representing a cluster of genetically similar genomes in NEAT.

    In NEAT, the population is divided into species based on genetic similarity,
    allowing different evolutionary niches to develop independently. This protects
    innovative structures from being eliminated by competition with more mature
    solutions, as genomes only compete for resources within their own species.

    Each species maintains a representative genome used for distance calculations
    during speciation. Species track their best fitness over time and can be
    eliminated if they stagnate (fail to improve).

    Public Attributes:
        id:               Unique species identifier
        representative:   Genome used for distance calculations during speciation
        members:          The genomes that are part of this species (genome ID => Genome)
        age:              Number of generations this species has existed
        last_improved:    Age at which the best fitness last improved
        fitness:          Average fitness of all members (None until calculated)
        best_fitness:     Best member fitness in the current generation (None until calculated)
        adjusted_fitness: Sum of the members' shared fitness (None until calculated)
        max_fitness:      Best fitness ever achieved by this species
        fitness_history:  List of best fitness values over generations

    Public Methods:
        init_for_next_generation(representative): Prepare species for a new generation
        update_fitness():                         Update species fitness, history and stagnation
        share_fitness():                          Compute the members' adjusted fitness
        is_stagnant():                            Check if species has stopped improving
        distance_to(genome):                      Calculate genetic distance to a genome
        ranked_members():                         Members sorted from fittest to least fit
        spawn(num_offspring, ...):                Generate this species' share of the next generation
    """

    def __init__(self, species_id: int, representative: 'Genome', config: Config):
        """
        Initialize a new species.

        Parameters:
            species_id:     unique species identifier
            representative: the Genome that represents this species in the speciation process
            config:         stores configuration parameters
        """
        self._config: Config = config

        # Unique species identifier
        self.id: int = species_id

        # Representative genome for distance calculations during speciation
        self.representative: 'Genome' = representative

        # All genomes in this species: genome ID => Genome
        # For now we only have one member: the representative.
        self.members: dict[int, 'Genome'] = {representative.ID: representative}

        self.age          : int = 0               # How many generations this species has existed
        self.last_improved: int = 0               # Age when the best fitness last improved

        self.fitness         : float | None = None          # Average fitness of all members
        self.best_fitness    : float | None = None          # Best member fitness this generation
        self.adjusted_fitness: float | None = None          # Sum of the members' shared fitness
        self.max_fitness     : float        = float('-inf') # Best fitness ever achieved by this species
        self.fitness_history : list[float]  = []            # Track best fitness over generations

    def init_for_next_generation(self, representative: 'Genome') -> None:
        """
        Resets the species in preparation of being assigned the genomes in a new generation.

        Parameters:
            representative: the Genome that represents this species in the speciation process
        """
        self.representative   =  representative
        self.members          = {representative.ID: representative}
        self.age             += 1
        self.fitness          = None
        self.best_fitness     = None
        self.adjusted_fitness = None

    def update_fitness(self) -> None:
        """
        Update the species fitness from its members' fitness.
        This method assumes that the fitness of all members has already been calculated.
        The species improves when its best member beats the best fitness ever seen.
        """
        fitnesses = [genome.fitness for genome in self.members.values()]

        self.fitness      = mean(fitnesses)
        self.best_fitness = max(fitnesses)
        if self.best_fitness > self.max_fitness:
            self.max_fitness   = self.best_fitness
            self.last_improved = self.age
        self.fitness_history.append(self.best_fitness)

    def share_fitness(self) -> float:
        """
        Explicit fitness sharing: each member's adjusted fitness is its
        fitness divided by the number of members of the species.

        Returns:
            the sum of the members' adjusted fitness
        """
        size = len(self.members)
        for genome in self.members.values():
            genome.adjusted_fitness = genome.fitness / size
        self.adjusted_fitness = sum(genome.adjusted_fitness for genome in self.members.values())
        return self.adjusted_fitness

    def is_stagnant(self) -> bool:
        """
        Check whether the species is stagnant.
        A species is stagnant if its fitness has not improved in a given number of generations.
        """
        return self.age - self.last_improved > self._config.max_stagnation_period

    def distance_to(self, genome: 'Genome') -> float:
        """
        Calculate the genetic distance between this species and a given genome.
        Uses the species representative genome for comparison.

        Parameters:
            genome: The genome whose distance to this species we want to calculate

        Returns:
            The genetic distance between the genome and the species representative
        """
        return self.representative.distance(genome)

    def ranked_members(self) -> list['Genome']:
        """
        Sort all members by fitness, fittest first.
        Use ID as tie-breaker to ensure deterministic ordering when fitnesses are equal.
        """
        return sorted(self.members.values(), key=lambda genome: (genome.fitness, -genome.ID), reverse=True)

    def spawn(self,
              num_offspring : int,
              tracker       : 'InnovationTracker',
              other_parents : Sequence['Genome'] = (),
              rng=random,
              num_elites    : int | None = None) -> list['Genome']:
        """
        Generate offspring for the next generation through elitism and reproduction.

        The spawning process:
        1. Sort all members by fitness (highest first)
        2. Transfer elite genomes unchanged (same ID) to preserve best solutions;
           the fittest one becomes the species representative
        3. Create parent pool from top performers based on survival threshold
        4. Fill remaining offspring slots through crossover (or cloning) and mutation

        As a precondition for running this method, all member genomes must have their
        fitness already evaluated (fitness != None), so they can be sorted.

        Configuration parameters used:
            - elitism:                     Number of top genomes to carry over unchanged
            - survival_threshold:          Fraction of species that can reproduce (0.0-1.0)
            - crossover_prob:              Probability that a child has two parents
            - interspecies_crossover_prob: Probability that the second parent comes from 'other_parents'

        Parameters:
            num_offspring: Number of genomes this species should produce
            tracker:       Hands out innovation numbers and node IDs during mutation
            other_parents: Parents available for interspecies crossover
            rng:           Source of randomness (random.Random-like)
            num_elites:    Number of elites among the offspring (default: 'elitism')

        Returns:
            List of offspring genomes for the next generation
        """

        # Trivial case
        if num_offspring == 0 or len(self.members) == 0:
            return []

        sorted_members = self.ranked_members()

        # Apply elitism: the top genomes from the species
        # are transferred to the next generation unchanged.
        if num_elites is None:
            num_elites = self._config.elitism
        elite_number = min(num_elites, num_offspring)
        offspring    = [copy.deepcopy(genome) for genome in sorted_members[:elite_number]]
        if offspring:
            self.representative = offspring[0]

        # Select the parent pool - this is the top fraction of genomes in the species
        num_parents = max(2, int(len(sorted_members) * self._config.survival_threshold))
        num_parents = min(num_parents, len(sorted_members))  # can't exceed actual size
        parent_pool = sorted_members[:num_parents]

        # Spawn new offspring, until we get the requested number
        while len(offspring) < num_offspring:
            parent1 = rng.choice(parent_pool)
            child   = None

            if rng.random() < self._config.crossover_prob:
                if other_parents and rng.random() < self._config.interspecies_crossover_prob:
                    parent2 = rng.choice(other_parents)
                else:
                    parent2 = rng.choice(parent_pool)

                # Crossing a genome with itself would just clone it
                if parent2 is not parent1:
                    try:
                        child = crossover(parent1, parent2, config=self._config, rng=rng)
                    except StructuralError as e:
                        logger.debug("crossover of {} and {} failed, cloning instead: {}", parent1.ID, parent2.ID, e)

            if child is None:
                child = clone(parent1)

            mutate(child, tracker, self._config, rng)
            offspring.append(child)

        return offspring

    def __str__(self):
        return (f"Species({self.id}, members={len(self.members)}, age={self.age}, "
                f"fitness={self.fitness}, max_fitness={self.max_fitness})")
