import numpy as np

from neatevo.errors import InvalidConfiguration

def identity_activation(z):
    return z

def clamped_activation(z):
    return np.clip(z, -1.0, 1.0)

def relu_activation(z):
    return np.maximum(0.0, z)

def sigmoid_activation(z):
    # Steepened sigmoid, as in the original NEAT paper
    K = 4.9
    Z = K * z
    Z = np.clip(Z, -60, 60)   # to prevent under/overflow when calculating exp
    return 1.0 / (1.0 + np.exp(-Z))

def tanh_activation(z):
    return np.tanh(z)

def sin_activation(z):
    return np.sin(z)

def gauss_activation(z):
    z_clipped = np.clip(z, -3.4, 3.4)
    return np.exp(-5.0 * z_clipped ** 2)

def square_activation(z):
    # Clip input to avoid overflow (±1e154 squared stays within float64 range)
    z_clipped = np.clip(z, -1e154, 1e154)
    return z_clipped ** 2

def abs_activation(z):
    return np.abs(z)

activations = {
    "identity": identity_activation,
    "clamped" : clamped_activation,
    "relu"    : relu_activation,
    "sigmoid" : sigmoid_activation,
    "tanh"    : tanh_activation,
    "sin"     : sin_activation,
    "gauss"   : gauss_activation,
    "square"  : square_activation,
    "abs"     : abs_activation
    }

# 3-letter identifiers for each activation function
activation_codes = {
    "identity": "IDN",
    "clamped" : "CLP",
    "relu"    : "RLU",
    "sigmoid" : "SIG",
    "tanh"    : "TNH",
    "sin"     : "SIN",
    "gauss"   : "GAU",
    "square"  : "SQR",
    "abs"     : "ABS"
    }

def get_activation(name: str):
    """
    Look up an activation function by name.

    Raises:
        InvalidConfiguration: if no activation is registered under 'name'
    """
    try:
        return activations[name]
    except KeyError:
        raise InvalidConfiguration(f"Unknown activation function '{name}'") from None
