"""
NEAT Run Package

Modules:
    config: Config class (INI file parsing, defaults, validation)
    trial:  Trial abstract base class (import it from 'neatevo.run.trial')
"""

from neatevo.run.config import Config

__all__ = ['Config']
