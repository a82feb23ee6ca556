"""
XOR Problem Implementation for NEAT

This module implements the classic XOR (exclusive OR) problem as a benchmark
for the NEAT algorithm. The XOR problem is a fundamental test case in neural
network research, demonstrating the necessity of hidden layers for solving
non-linearly separable problems.

The XOR Problem:
    XOR is a two-input, one-output boolean function where the output is True
    only when the inputs differ:
        Input (0, 0) → Output 0
        Input (0, 1) → Output 1
        Input (1, 0) → Output 1
        Input (1, 1) → Output 0

Fitness Function:
    Fitness = 4.0 - Σ(output - target)²

    Maximum fitness of 4.0 is achieved when all four XOR cases produce exact outputs.
    The algorithm typically succeeds when fitness exceeds 3.9.

Classes:
    Trial_XOR: NEAT trial for solving XOR

Usage:
    python trial_XOR.py [config_xor.ini] [num_jobs]
"""

import sys
from pathlib import Path

from loguru import logger

from neatevo           import Config, Genome, create_network, save_genome
from neatevo.run.trial import Trial

class Trial_XOR(Trial):
    """
    NEAT trial for solving the XOR (exclusive OR) problem.

    Problem Definition:
        Inputs: 2 binary values (0 or 1)
        Output: 1 binary value (XOR of inputs)
        Training cases: All 4 possible input combinations

    Implemented Methods:
        _evaluate_fitness(genome): Test network on all 4 XOR cases
        _report_progress():        Log generation statistics and XOR truth table
        _final_report():           Save and visualize the evolved network
    """

    xor_inputs  = [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
    xor_outputs = [[0.0],      [1.0],      [1.0],      [0.0]]

    def _evaluate_fitness(self, genome: Genome) -> float:
        """
        Evaluate genome fitness by testing its network on XOR inputs.

        Returns:
            Fitness score (maximum 4.0 for perfect XOR solution)
        """
        network = create_network(genome)

        fitness = 4.0  # max possible fitness
        for inputs, expected_output in zip(self.xor_inputs, self.xor_outputs):
            output   = network.tick(inputs)                # one pass through the network
            error    = output[0] - expected_output[0]      # calculate error
            fitness -= error ** 2                          # errors cause the fitness to decrease

        return fitness

    def _report_progress(self):
        """
        Log a report describing the current generation.
        """
        fittest = self._population.get_fittest_genome()
        network = create_network(fittest)

        s  = f"GENERATION {self._generation_counter:04d}\n"
        s += f"population size = {len(self._population.genomes)}\n"
        s += f"number species  = {len(self._population.species)}\n"
        s += f"maximum fitness = {fittest.fitness:.4f}\n"
        s += f"{fittest}\n\n"
        s += "input         output   target  error\n"
        s += "------------------------------------\n"
        for inputs, target in zip(self.xor_inputs, self.xor_outputs):
            output = network.tick(inputs)[0]
            s += f"{inputs} -> {output:.4f}    {target[0]}   {abs(output - target[0]):.4f}\n"

        logger.info(s)

    def _final_report(self):
        """
        Save the best genome and visualize its network.
        """
        super()._final_report()

        best = self._population.best_genome
        save_genome(best, Path("xor_best_genome.json"))

        try:
            create_network(best).visualize(view=False).render("xor_best_network", cleanup=True)
            logger.info("Network visualization saved as 'xor_best_network.pdf'")
        except Exception as e:
            logger.warning("Could not visualize network: {}", e)

if __name__ == "__main__":
    config_file = sys.argv[1] if len(sys.argv) > 1 else str(Path(__file__).parent / "config_xor.ini")
    num_jobs    = int(sys.argv[2]) if len(sys.argv) > 2 else 1

    trial = Trial_XOR(Config(config_file))
    trial.run(num_jobs=num_jobs)
