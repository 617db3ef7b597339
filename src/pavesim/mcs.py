"""
Monte Carlo helper for repeated stochastic runs.
"""

import numpy as np


def monte_carlo(function, runs=1000):
    """Call ``function`` ``runs`` times and stack the results row-wise."""
    if runs < 1:
        raise ValueError("runs must be >= 1")
    return np.array([function() for _ in range(runs)])
