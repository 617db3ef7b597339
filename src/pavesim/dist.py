"""Speed distributions used for truck trips.

Each loaded or empty trip draws its speed from a :class:`uniform` distribution
built on :mod:`scipy.stats`. Draws take an explicit NumPy random generator so
that every simulation run owns its random stream.
"""
from typing import Optional

import numpy as np
import scipy.stats as st


class distribution:
    """Base class for the distributions in this module."""

    def __init__(self):
        self.params = None
        self.dist_type = None
        self.dist = None

    def __str__(self):
        """Human-readable representation like 'dist.uniform(20, 30)'."""
        name = getattr(self, "dist_type", None) or self.__class__.__name__
        params = getattr(self, "params", None)

        if params is None:
            return f"dist.{name}"

        def _fmt(p):
            if isinstance(p, (int, float)):
                return f"{p:g}"
            return str(p)

        params_str = ", ".join(_fmt(p) for p in params)
        return f"dist.{name}({params_str})" if params_str else f"dist.{name}"

    __repr__ = __str__

    def sample(self, random_state: Optional[np.random.Generator] = None) -> float:
        """Draw a single random variate from the distribution."""

        return float(self.dist.rvs(random_state=random_state))

    def samples(self, n, random_state: Optional[np.random.Generator] = None):
        """Draw ``n`` random variates from the distribution."""

        return self.dist.rvs(n, random_state=random_state)

    def mean(self):
        """Return the distribution mean."""

        return self.dist.mean()


class uniform(distribution):
    """Uniform distribution defined by lower/upper bounds.

    ``a == b`` is allowed and yields a constant, which makes runs that use it
    deterministic.
    """

    def __init__(self, a, b):
        """Initialize the distribution with ``a`` (min) and ``b`` (max)."""
        super().__init__()
        if a > b:
            raise ValueError("Lower bound must not exceed upper bound.")
        self.dist_type = 'uniform'
        self.params = [a, b]
        # scipy rejects a zero scale
        self.dist = st.uniform(loc=a, scale=b - a) if b > a else None

    @property
    def degenerate(self) -> bool:
        return self.dist is None

    def sample(self, random_state: Optional[np.random.Generator] = None) -> float:
        if self.degenerate:
            return float(self.params[0])
        return super().sample(random_state)

    def samples(self, n, random_state: Optional[np.random.Generator] = None):
        if self.degenerate:
            return np.full(n, float(self.params[0]))
        return super().samples(n, random_state)

    def mean(self):
        if self.degenerate:
            return float(self.params[0])
        return super().mean()


def make_uniform(a: float, b: float) -> "uniform":
    """Create a uniform distribution with validation."""
    if a > b:
        raise ValueError("Lower bound must not exceed upper bound.")
    return uniform(a, b)


def travel_minutes(distance: float, speed: float) -> float:
    """Minutes needed to cover ``distance`` km at ``speed`` km/h."""
    return distance * 60 / speed
