"""
NEAT Errors Module

This module defines the exceptions raised by the NEAT package.

Classes:
    NeatError:            Base class for all NEAT errors
    StructuralError:      A genetic operator cannot proceed (missing/invalid genes)
    ArityMismatch:        A network was fed the wrong number of inputs
    EmptyPopulation:      All species were eliminated, the run cannot continue
    InvalidConfiguration: A configuration value is out of range
"""

class NeatError(Exception):
    """Base class for all errors raised by this package."""

class StructuralError(NeatError):
    """
    Raised when a structural operation on a genome cannot proceed because the
    genes it requires are missing or the result would break a genome invariant.

    Mutation and crossover catch this error and degrade to a no-op.
    """

class ArityMismatch(NeatError, ValueError):
    """Raised when a network is evaluated with the wrong number of inputs."""

class EmptyPopulation(NeatError, RuntimeError):
    """Raised when no genome or species is left to breed the next generation."""

class InvalidConfiguration(NeatError, ValueError):
    """Raised when a configuration value is missing or out of range."""
