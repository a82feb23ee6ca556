"""
NEAT Species Manager Module

This module implements the SpeciesManager class for the NEAT algorithm.
The manager coordinates the speciation process and manages the lifecycle
of all species across generations.

Speciation in NEAT:
In traditional genetic algorithms, new structural innovations often have lower
initial fitness and are quickly eliminated. NEAT addresses this by organizing
the population into species - groups of genetically similar genomes that
compete primarily within their own niche. This allows novel structures time to
optimize before facing global competition.

Key Concepts:
- Species: A cluster of genetically similar genomes
- Representative: A genome used to define species membership
- Compatibility Threshold: Maximum genetic distance for same-species membership
- Explicit Fitness Sharing: Offspring allocation proportional to species adjusted fitness
- Stagnation: Species removed if they fail to improve over many generations

Classes:
    SpeciesManager: Manages all species, handles speciation and offspring allocation
"""

import math
import random
from itertools import count
from typing    import TYPE_CHECKING, Sequence

from loguru import logger

from neatevo.pool.species import Species
from neatevo.run.config   import Config
if TYPE_CHECKING:
    from neatevo.genotype import Genome

class SpeciesManager:
    """
    Manages the collection of species and speciation process across generations.

    The SpeciesManager is responsible for organizing the entire population into
    species based on genetic similarity, tracking species across generations, and
    deciding how many offspring each species contributes to the next generation.

    Public Attributes:
        species:           Dictionary mapping species IDs to Species instances (ascending IDs)
        genome_to_species: Dictionary mapping genome IDs to their Species

    Public Methods:
        speciate(genomes):                         Assign all genomes to species
        update_fitness():                          Calculate and update all species fitnesses
        remove_stagnating_species(champion):       Remove species that haven't improved
        share_fitness():                           Compute adjusted (shared) fitness
        calculate_offspring_allocations():         Determine offspring count per species
    """

    class DistanceCache:
        """
        Caches the genomic distance between genomes.
        """
        def __init__(self):
            self.distances = {}

        def __call__(self, genome1, genome2):
            id1  = genome1.ID
            id2  = genome2.ID
            dist = self.distances.get((id1, id2))
            if dist is None:
                dist = genome1.distance(genome2)
                self.distances[(id1, id2)] = dist
                self.distances[(id2, id1)] = dist
            return dist

    def __init__(self, config: Config):
        """
        Initialize the Species Manager.

        Parameters:
            config: Stores configuration parameters.
        """
        self.species          : dict[int, Species] = {}   # species ID => Species instance
        self.genome_to_species: dict[int, Species] = {}   # genome ID  => Species instance
        self._id_generator    = count(1)                  # generates species IDs
        self._config          = config                    # stores config parameters

    def speciate(self, genomes: Sequence['Genome'], rng=random) -> None:
        """
        Assign all genomes to species based on genetic similarity.

        The algorithm proceeds in three phases:

        Phase 1: Keep surviving representatives
        - Every existing species whose representative is part of 'genomes'
          (same genome ID) takes that genome as its first member

        Phase 2: Assign genomes to species
        - Every other genome, in the given order, joins the first species (in ascending
          species ID order) whose representative lies closer than the compatibility threshold
        - If no species is compatible, the genome founds a new species as its representative
        - Representatives do not change during this phase

        Phase 3: Cleanup
        - Species whose representative did not survive pick a new one among their members
        - Species left without members are removed (extinction)

        Postconditions:
            - Every genome is assigned to exactly one species
            - Each species has at least one member

        Parameters:
            genomes: all genomes of the current generation
            rng:     Source of randomness (random.Random-like)
        """
        dist_cache    = SpeciesManager.DistanceCache()
        threshold     = self._config.compatibility_threshold
        genomes_by_id = {genome.ID: genome for genome in genomes}

        reps       : dict[int, 'Genome']       = {}  # species ID => representative genome
        new_members: dict[int, list['Genome']] = {}  # species ID => all species members
        assigned   : set[int]                  = set()

        for spec_id in sorted(self.species):
            rep = self.species[spec_id].representative
            reps[spec_id] = rep
            new_members[spec_id] = []
            if rep.ID in genomes_by_id and rep.ID not in assigned:
                survivor = genomes_by_id[rep.ID]
                reps[spec_id] = survivor
                new_members[spec_id].append(survivor)
                assigned.add(survivor.ID)

        for genome in genomes:
            if genome.ID in assigned:
                continue

            for spec_id, rep in reps.items():
                if dist_cache(genome, rep) < threshold:
                    new_members[spec_id].append(genome)
                    break

            # No species is similar enough, assign to a new species,
            # with this genome as its species representative.
            else:
                spec_id = next(self._id_generator)
                reps       [spec_id] =  genome
                new_members[spec_id] = [genome]
            assigned.add(genome.ID)

        # Update all species.
        self.genome_to_species = {}       # reset
        for spec_id, members in new_members.items():

            # Remove extinct species
            if not members:
                if spec_id in self.species:
                    logger.debug("species {} went extinct", spec_id)
                    del self.species[spec_id]
                continue

            rep = reps[spec_id]
            if rep.ID not in genomes_by_id:
                rep = rng.choice(members)

            if spec_id not in self.species:
                self.species[spec_id] = Species(spec_id, rep, self._config)
            else:
                self.species[spec_id].init_for_next_generation(rep)
            spec = self.species[spec_id]

            for genome in members:
                self.genome_to_species[genome.ID] = spec
                spec.members[genome.ID] = genome

        # Error check: all genomes must have been allocated to a species
        assigned_count = sum(len(spec.members) for spec in self.species.values())
        assert assigned_count == len(genomes_by_id), "Lost genomes during speciation!"

    def update_fitness(self) -> None:
        """
        Calculates and updates the fitness for all species.
        This method assumes that the fitness of all genomes has already been calculated.
        """
        for spec in self.species.values():
            spec.update_fitness()

    def remove_stagnating_species(self, champion: 'Genome | None') -> tuple[set[int], set[int]]:
        """
        Identify and remove species that have been stagnating for too long.

        A species is stagnant if it hasn't improved its best fitness for a
        given number of generations. However, a species is protected from
        being marked as stagnant if:
        - It contains the fittest genome of the entire population, OR
        - It is in the top 'species_elitism' species ranked by best fitness

        Parameters:
            champion: The fittest genome of the population

        Returns:
            Tuple of (stagnant_species_ids, removed_genome_ids)
        """
        if champion is None:
            return set(), set()

        # Rank all species by fitness
        sorted_species = sorted(self.species.values(), key=lambda s: (s.best_fitness, -s.id), reverse=True)

        # Protect from elimination the top N species,
        # plus the species with the fittest genome
        protected_spec_ids = {s.id for s in sorted_species[:self._config.species_elitism]}
        protected_spec_ids.add(self.genome_to_species[champion.ID].id)

        # Identify stagnating species
        stagnating_spec_ids = {spec.id for spec in self.species.values()
                               if spec.id not in protected_spec_ids and spec.is_stagnant()}

        # Identify all genomes that belong to stagnating species
        stagnating_genome_ids = set()
        for spec_id in stagnating_spec_ids:
            spec = self.species[spec_id]
            stagnating_genome_ids.update(spec.members.keys())
            logger.warning("Removing stagnant species {} ({} members, no improvement since age {})",
                           spec_id, len(spec.members), spec.last_improved)

        # Clean-up: remove stagnating species and genomes
        for spec_id in stagnating_spec_ids:
            del self.species[spec_id]
        for genome_id in stagnating_genome_ids:
            del self.genome_to_species[genome_id]

        return stagnating_spec_ids, stagnating_genome_ids

    def share_fitness(self) -> float:
        """
        Compute the adjusted fitness of every genome and species.

        Returns:
            the total adjusted fitness over all species
        """
        return sum(spec.share_fitness() for spec in self.species.values())

    def calculate_elite_counts(self) -> dict[int, int]:
        """
        Calculate how many elites each species carries over unchanged.

        Every species with at least 'min_species_size_for_elitism' members keeps
        its best 'elitism' genomes, independently of its offspring allocation.
        Should the elites outnumber 'population_size', species with the fittest
        champions are served first.

        Returns:
            Dictionary mapping species_id to number of elites
        """
        budget = self._config.population_size
        counts = {spec_id: 0 for spec_id in self.species}

        ranked = sorted(self.species.values(),
                        key=lambda spec: (-max(genome.fitness for genome in spec.members.values()), spec.id))
        for spec in ranked:
            if len(spec.members) < self._config.min_species_size_for_elitism:
                continue
            counts[spec.id] = min(self._config.elitism, len(spec.members), budget)
            budget         -= counts[spec.id]

        return counts

    def calculate_offspring_allocations(self, num_offspring: int | None = None) -> dict[int, int]:
        """
        Calculate how many offspring each species should produce.

        Allocates offspring proportionally to species adjusted fitness, so that the
        allocations add up to exactly 'num_offspring'. Fractional shares are rounded
        with the largest remainder method (ties go to the lower species ID). When all
        species have zero adjusted fitness the offspring are split equally.

        Parameters:
            num_offspring: Number of offspring to distribute (default: 'population_size')

        Returns:
            Dictionary mapping species_id to number of offspring to produce
        """
        if not self.species:
            return {}

        total_offspring = self._config.population_size if num_offspring is None else num_offspring
        spec_ids        = sorted(self.species)

        # Treat NaN fitness as 0 (fitness cannot be negative)
        shares = {spec_id: self.species[spec_id].adjusted_fitness or 0.0 for spec_id in spec_ids}
        shares = {spec_id: 0.0 if math.isnan(share) else share for spec_id, share in shares.items()}
        total  = sum(shares.values())

        if total > 0:
            quotas = {spec_id: shares[spec_id] / total * total_offspring for spec_id in spec_ids}
        else:
            quotas = {spec_id: total_offspring / len(spec_ids) for spec_id in spec_ids}

        allocations = {spec_id: int(math.floor(quotas[spec_id])) for spec_id in spec_ids}
        remaining   = total_offspring - sum(allocations.values())

        by_remainder = sorted(spec_ids, key=lambda spec_id: (-(quotas[spec_id] - allocations[spec_id]), spec_id))
        for spec_id in by_remainder[:remaining]:
            allocations[spec_id] += 1

        return allocations
