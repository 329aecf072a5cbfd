"""Injectable randomness for the scoring heuristics that intentionally vary."""

from __future__ import annotations

import random
import typing as t
from abc import abstractmethod


class RandomSource(t.Protocol):
    """Anything with a ``random()`` returning a float in [0, 1).

    :class:`random.Random` satisfies this; so does a stub returning a constant.
    """

    @abstractmethod
    def random(self) -> float: ...


RandomSourceFactory = t.Callable[[], RandomSource]


def uniform(rng: RandomSource, low: float, high: float) -> float:
    return low + rng.random() * (high - low)


def seeded_factory(seed: int | None = None) -> RandomSourceFactory:
    """Return a factory producing one independent generator per evaluation.

    With a seed, the n-th generator produced is always seeded identically so
    that a batch replays deterministically.
    """
    if seed is None:
        return random.Random

    seeds = random.Random(seed)

    def factory() -> RandomSource:
        return random.Random(seeds.getrandbits(64))

    return factory


class FixedRandom(object):
    """Always returns the same value; useful for pinning heuristics."""

    def __init__(self, value: float = 0.5):
        if not 0 <= value < 1:
            raise ValueError(f"value must lie in [0, 1): {value}")
        self.value = value

    def random(self) -> float:
        return self.value
