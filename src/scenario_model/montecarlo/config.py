# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Configuration for Monte Carlo simulations."""

from dataclasses import dataclass
from typing import Optional

from ..errors import ValidationError


@dataclass
class MonteCarloConfig:
    """Configuration for Monte Carlo simulation parameters.
    
    Attributes:
        num_simulations: Number of Monte Carlo iterations per scenario. Default 5000.
        random_seed: Optional seed for reproducible results. Default None.
        risk_free_rate: Annual risk-free rate used by the Sharpe ratio. Default 6%.
        max_workers: Worker threads used for a batch. 1 runs sequentially.
        max_simulations: Upper bound on num_simulations accepted for one batch.
        max_horizon_years: Upper bound on the simulated horizon.
    """
    num_simulations: int = 5000
    random_seed: Optional[int] = None
    risk_free_rate: float = 0.06
    max_workers: int = 1
    max_simulations: int = 100_000
    max_horizon_years: int = 60
    
    def __post_init__(self):
        if self.num_simulations < 1:
            raise ValidationError("num_simulations must be at least 1")
        if self.max_workers < 1:
            raise ValidationError("max_workers must be at least 1")
        if self.max_simulations < 1 or self.max_horizon_years < 1:
            raise ValidationError("Resource limits must be positive")
        if self.random_seed is not None and self.random_seed < 0:
            raise ValidationError("random_seed must be non-negative")
