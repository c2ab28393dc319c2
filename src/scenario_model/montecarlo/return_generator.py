# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Normally distributed monthly return generator.

Returns are drawn with a Box-Muller transform over two independent uniform
draws taken from an explicitly passed ``numpy.random.Generator``. The
generator holds no random state of its own, so the same stream always yields
the same returns.
"""

import math

import numpy as np

from ..errors import ValidationError

MONTHS_PER_YEAR = 12


class RandomReturnGenerator:
    """Generates monthly returns from an annual mean/volatility pair.

    The annual figures are spread evenly over the year:
    ``r = mean / 12 + (volatility / 12) * z`` with ``z`` standard normal.

    Example:
        >>> gen = RandomReturnGenerator(0.10, 0.14)
        >>> rng = np.random.default_rng(42)
        >>> monthly = gen.sample(rng)
        >>> path = gen.sample_path(rng, 240)
    """

    def __init__(self, annual_mean_return: float, annual_volatility: float):
        """Initialize the return generator.

        Args:
            annual_mean_return: Annual expected return as decimal (e.g., 0.10 for 10%)
            annual_volatility: Annual volatility as decimal, must be >= 0

        Raises:
            ValidationError: If volatility is negative or either input is not finite
        """
        if not (math.isfinite(annual_mean_return) and math.isfinite(annual_volatility)):
            raise ValidationError("Return and volatility must be finite numbers")
        if annual_volatility < 0:
            raise ValidationError(f"Volatility cannot be negative: {annual_volatility}")

        self.annual_mean_return = annual_mean_return
        self.annual_volatility = annual_volatility
        self.monthly_mean = annual_mean_return / MONTHS_PER_YEAR
        self.monthly_volatility = annual_volatility / MONTHS_PER_YEAR

    @staticmethod
    def standard_normal(rng: np.random.Generator) -> float:
        """Draw one standard normal variate with the Box-Muller transform.

        ``u1 == 0`` would make ``log(u1)`` undefined, so it is redrawn.
        """
        u1 = rng.random()
        while u1 == 0.0:
            u1 = rng.random()
        u2 = rng.random()
        return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)

    @staticmethod
    def standard_normal_block(rng: np.random.Generator, size: int) -> np.ndarray:
        """Vectorised Box-Muller transform producing ``size`` variates."""
        u1 = rng.random(size)
        zeros = u1 == 0.0
        while zeros.any():
            u1[zeros] = rng.random(int(zeros.sum()))
            zeros = u1 == 0.0
        u2 = rng.random(size)
        return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)

    def sample(self, rng: np.random.Generator) -> float:
        """Generate one monthly return.

        Args:
            rng: Seeded numpy generator supplying the uniform draws

        Returns:
            Monthly return in decimal form
        """
        return self.monthly_mean + self.monthly_volatility * self.standard_normal(rng)

    def sample_path(self, rng: np.random.Generator, months: int) -> np.ndarray:
        """Generate ``months`` consecutive monthly returns.

        Args:
            rng: Seeded numpy generator supplying the uniform draws
            months: Number of monthly returns to produce

        Returns:
            numpy array of monthly returns
        """
        if months < 0:
            raise ValidationError(f"months cannot be negative: {months}")
        if self.monthly_volatility == 0.0:
            return np.full(months, self.monthly_mean)
        return self.monthly_mean + self.monthly_volatility * self.standard_normal_block(rng, months)
