"""
RANDOM SOURCE
The single seam through which every engine draws randomness.

Pass a seed for reproducible simulations and statistical tests.
"""

import random
from typing import Optional


class RandomSource:
    """Injectable uniform random source backed by `random.Random`"""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def uniform(self) -> float:
        """Uniform draw in [0, 1)"""
        return self._rng.random()

    def open_uniform(self) -> float:
        """Uniform draw in (0, 1], safe to pass to log()"""
        return 1.0 - self._rng.random()
