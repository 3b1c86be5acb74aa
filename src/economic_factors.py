import numpy as np

from typing import Optional


class ReturnSampler:
    """
    Draws i.i.d. normal annual portfolio returns.

    One row per simulation run, one column per simulated year. Returns are
    not correlated across years or asset classes.
    """

    def __init__(
        self,
        mean: float,
        std: float,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        self.mean = mean
        self.std = std
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def sample(self, runs: int, years: int) -> np.ndarray:
        return self.rng.normal(self.mean, self.std, size=(runs, years))

