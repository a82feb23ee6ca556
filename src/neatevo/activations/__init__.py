"""
Activations Package

This package provides the activation functions available to NEAT network nodes.
The set is closed: nodes refer to activations by name, and only the names
registered in 'activations' are valid.

Exported:
    activations:      Dictionary mapping activation function names to functions
    activation_codes: Dictionary mapping activation function names to 3-letter codes
    get_activation:   Look up an activation function by name
    Individual activation functions: identity_activation, clamped_activation,
                                     relu_activation, sigmoid_activation, tanh_activation,
                                     sin_activation, gauss_activation, square_activation,
                                     abs_activation
"""

from neatevo.activations.basic_activations import (
    activations,
    activation_codes,
    get_activation,
    identity_activation,
    clamped_activation,
    relu_activation,
    sigmoid_activation,
    tanh_activation,
    sin_activation,
    gauss_activation,
    square_activation,
    abs_activation
)

__all__ = [
    'activations',
    'activation_codes',
    'get_activation',
    'identity_activation',
    'clamped_activation',
    'relu_activation',
    'sigmoid_activation',
    'tanh_activation',
    'sin_activation',
    'gauss_activation',
    'square_activation',
    'abs_activation'
]
