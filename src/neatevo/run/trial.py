"""
NEAT Trial Module

A trial is a single NEAT run: a population is created, then evaluated and
bred generation after generation until a stopping condition holds. Fitness
evaluation can be spread over several processes with joblib.
"""

from abc        import ABC, abstractmethod
from statistics import mean
from typing     import TYPE_CHECKING

from loguru import logger

from neatevo.genotype.innovation_tracker import InnovationTracker
from neatevo.pool.population             import Population
from neatevo.run.config                  import Config
if TYPE_CHECKING:
    from neatevo.genotype import Genome

class Trial(ABC):
    """
    Base class for a single run of NEAT on some problem.

    Subclasses must implement:
    - _evaluate_fitness(genome): Score one genome on the problem

    Subclasses can override:
    - _reset():           Prepare problem-specific state (call super()._reset())
    - _report_progress(): Called after every evaluated generation
    - _final_report():    Called once the run is over
    - _terminate():       Stopping rule (default: generation limit and optional fitness target)

    Public Attributes:
        failed:     True unless the last run reached the fitness target
        population: The population of the last run

    Public Methods:
        run(): Evolve a fresh population until '_terminate()' says stop

    'num_jobs' controls fitness evaluation:
        1:  in this process
        n:  over n worker processes
        -1: over one worker per CPU core
    """

    def __init__(self, config: Config, suppress_output: bool = False, rng=None):
        """
        Parameters:
            config:          Configuration parameters
            suppress_output: Skip '_report_progress' and '_final_report'
            rng:             Source of randomness handed to the population
        """
        self._config            : Config                   = config
        self._generation_counter: int                      = 0
        self._population        : Population | None        = None
        self._tracker           : InnovationTracker | None = None
        self._suppress_output   : bool                     = suppress_output
        self._rng                                          = rng
        self.failed             : bool                     = True

    @property
    def population(self) -> Population | None:
        return self._population

    def __getstate__(self):
        # Parallel workers receive the trial with its '_evaluate_fitness';
        # they need the problem data, not the population
        state = self.__dict__.copy()
        state['_population'] = None
        state['_tracker']    = None
        state['_rng']        = None
        return state

    def run(self, num_jobs: int = 1) -> 'Genome | None':
        """
        Evolve a fresh population until '_terminate()' returns True.

        Parameters:
            num_jobs: Worker processes used to evaluate fitness (see class docstring)

        Returns:
            the best genome seen during the run

        Raises:
            InvalidConfiguration: if the configuration fails validation
        """
        self._config.validate()
        self._reset()

        self._population = Population(self._config, self._tracker, self._rng)
        self._population.evaluate(self._evaluate_fitness, num_jobs)
        if not self._suppress_output:
            self._report_progress()

        while not self._terminate():
            self._generation_counter += 1

            # Breed, then score the offspring
            self._population.spawn_next_generation()
            self._population.evaluate(self._evaluate_fitness, num_jobs)

            if not self._suppress_output:
                self._report_progress()

        if not self._suppress_output:
            self._final_report()

        return self._population.best_genome

    def _reset(self):
        """
        Start every run from scratch: new innovation tracker, counter at zero.
        Subclasses extend this to reset their own state.
        """
        self._tracker            = InnovationTracker(self._config)
        self._generation_counter = 0
        self.failed              = True

    @abstractmethod
    def _evaluate_fitness(self, genome: 'Genome') -> float:
        """
        Return the fitness of 'genome' on the problem.

        Build the genome's network (see 'neatevo.phenotype.create_network'),
        run it on the problem and score it. Fitness must be non-negative;
        larger is better. Negative values are clamped to 0; exceptions,
        NaN and infinity give the genome a fitness of 0.
        """
        pass

    def _report_progress(self):
        """
        Log one line per generation.
        """
        fittest = self._population.get_fittest_genome()
        logger.info("Generation {:4d}: best fitness {:.4f}, mean fitness {:.4f}, {} species",
                    self._generation_counter,
                    fittest.fitness,
                    mean(genome.fitness for genome in self._population.genomes),
                    len(self._population.species))

    def _final_report(self):
        best = self._population.best_genome
        logger.info("Trial {} after {} generations, best fitness {:.4f}",
                    "failed" if self.failed else "succeeded",
                    self._generation_counter,
                    best.fitness)
        logger.info("Best genome:\n{}", best)

    def _terminate(self) -> bool:
        """
        Stop after 'max_number_generations' generations, or earlier when
        'fitness_termination_check' is on and the population's max (or mean)
        fitness reaches 'fitness_threshold'. Sets 'failed' accordingly.
        """
        out_of_time = self._generation_counter >= self._config.max_number_generations
        if not self._config.fitness_termination_check:
            return out_of_time

        scores = [genome.fitness for genome in self._population.genomes]
        score  = max(scores) if self._config.fitness_criterion == "max" else mean(scores)
        solved = score >= self._config.fitness_threshold

        if out_of_time or solved:
            self.failed = not solved
            return True
        return False
