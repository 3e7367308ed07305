"""
Seeded pseudo random numbers for reproducible initial placements.
"""

from __future__ import annotations

from typing import Optional, Union
import random

import numpy as np


class RandomNumberGenerator:
    """
    Linear congruential pseudo random number generator.

    Produces floats in [0, 1) from the recurrence
    ``state = (a * state + c) mod m``. Each layout call owns its own
    instance, so concurrent calls never share state.
    """

    M = 2 ** 35 - 31
    A = 185852
    C = 1

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize generator.

        Args:
            seed: Integer seed; a fresh one is drawn when None
        """
        if seed is None:
            seed = random.randrange(1000000)
        self.seed = int(seed)
        self.state = self.seed % self.M

    def next(self) -> float:
        """Get random real in [0, 1)."""
        self.state = (self.A * self.state + self.C) % self.M
        return self.state / self.M

    def rand(self, shape: Union[None, int, tuple[int, ...]] = None) -> Union[float, np.ndarray]:
        """
        Draw a float or an array of floats in [0, 1).

        Values are filled in row-major order, so ``rand((n, d))`` yields the
        same sequence as ``n`` successive ``rand(d)`` calls.

        Args:
            shape: None for a scalar, an int for a vector, or a tuple shape

        Returns:
            Float or ndarray
        """
        if shape is None:
            return self.next()
        if isinstance(shape, int):
            shape = (shape,)
        size = int(np.prod(shape))
        return np.array([self.next() for _ in range(size)]).reshape(shape)

    def uniform(
        self,
        low: float,
        high: float,
        shape: Union[None, int, tuple[int, ...]] = None
    ) -> Union[float, np.ndarray]:
        """Draw values in [low, high)."""
        return low + self.rand(shape) * (high - low)
