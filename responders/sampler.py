"""
Randomized behavior sampler for liveness easter eggs.

Each roll is independent and uses the platform random source; nothing is
seeded or shared between messages.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable

DEFAULT_RANDOM_CHANCE = 0.01
DEFAULT_LIVENESS_CHANCE = 0.01


@dataclass(frozen=True)
class SampleOutcome:
    random_hit: bool = False
    liveness: bool = False


class LivenessSampler:
    """
    Two nested probability checks.

    The outer roll (p1) marks a message as picked for random functions; only
    then is the inner roll (p2) made to decide whether a liveness reply is
    sent, giving a compound chance of p1 * p2.
    """

    def __init__(
        self,
        random_chance: float = DEFAULT_RANDOM_CHANCE,
        liveness_chance: float = DEFAULT_LIVENESS_CHANCE,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self.random_chance = random_chance
        self.liveness_chance = liveness_chance
        self._rng = rng

    def roll(self) -> SampleOutcome:
        if self._rng() >= self.random_chance:
            return SampleOutcome()
        return SampleOutcome(random_hit=True, liveness=self._rng() < self.liveness_chance)
