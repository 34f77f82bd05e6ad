"""Seeded randomness for every harness decision.

``RandomPolicy`` wraps a :class:`numpy.random.Generator`. Each decision helper
consumes the generator in call order, so the same seed and the same sequence of
calls always reproduce the same decisions.

Components never share a generator. They derive independent children with
:meth:`RandomPolicy.spawn`, which keeps the reproducibility contract explicit:
a child depends only on its parent's seed and on how many children were spawned
before it, not on how many values the parent has drawn since.
"""

from __future__ import annotations

import numpy as np
from loguru import logger

from randindex.config import settings

__all__ = ["RandomPolicy", "RandomSource"]


class RandomPolicy:
    """Seeded source of yes/no and range decisions.

    Args:
        generator: Generator backing this policy. It must carry a seed sequence
            (``numpy.random.default_rng`` generators do) for :meth:`spawn` to work.
        seed: Root seed, recorded for log messages. None for spawned children.
    """

    def __init__(self, generator: np.random.Generator, seed: int | None = None) -> None:
        """Wrap an existing generator."""
        self._rng = generator
        self.seed = seed

    @classmethod
    def from_seed(cls, seed: int | None = None) -> RandomPolicy:
        """Create a root policy.

        Falls back to ``settings.seed`` and then to fresh OS entropy. The chosen
        seed is logged so a failing run can be replayed with ``RANDINDEX_SEED``.

        Args:
            seed: Explicit root seed. Any integer is accepted; negative
                values are folded into numpy's unsigned seed space.

        Returns:
            A new root policy
        """
        if seed is None:
            seed = settings.seed
        if seed is None:
            seed = int(np.random.SeedSequence().entropy % (2**63))
            logger.info("RandomPolicy: no seed configured, using seed={}", seed)
        return cls(np.random.default_rng(seed % 2**64), seed=seed)

    @classmethod
    def coerce(cls, source: RandomSource) -> RandomPolicy:
        """Turn whatever the caller handed in into a policy.

        Args:
            source: A policy, a numpy generator, an integer seed or None

        Returns:
            ``source`` itself when it already is a policy, otherwise a wrapper
        """
        if isinstance(source, RandomPolicy):
            return source
        if isinstance(source, np.random.Generator):
            return cls(source)
        if source is None:
            return cls.from_seed()
        if isinstance(source, int | np.integer):
            return cls.from_seed(int(source))
        raise TypeError(f"Unsupported random source: {type(source).__name__}")

    def spawn(self) -> RandomPolicy:
        """Derive an independent child policy (substream derivation)."""
        return RandomPolicy(self._rng.spawn(1)[0])

    def next_int(self, low: int, high: int) -> int:
        """Return a uniform integer in the closed range ``[low, high]``."""
        if high < low:
            raise ValueError(f"high ({high}) must be >= low ({low})")
        return int(self._rng.integers(low, high, endpoint=True))

    def next_below(self, n: int) -> int:
        """Return a uniform integer in ``[0, n)``."""
        if n <= 0:
            raise ValueError(f"n must be positive, got {n}")
        return int(self._rng.integers(n))

    def next_bool(self) -> bool:
        """Flip a fair coin."""
        return bool(self._rng.integers(2))

    def one_in(self, n: int) -> bool:
        """Return True with probability ``1/n``."""
        return self.next_below(n) == 0

    def __repr__(self) -> str:
        return f"RandomPolicy(seed={self.seed})"


RandomSource = RandomPolicy | np.random.Generator | int | None
