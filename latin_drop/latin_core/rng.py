"""
RNG - Seeded Park-Miller Stream
===============================

Provides the deterministic random stream behind puzzle generation.

Level puzzles must be reproducible from ``(level_index, seed)`` alone, so the
core never touches the global ``random`` module for generation. Each
derivation (solved grid, masking) builds its own ``SeededRandom``.
"""

from __future__ import annotations

from typing import List, MutableSequence, Sequence, TypeVar

T = TypeVar("T")

# Park-Miller "minimal standard" generator (MINSTD, 1993 multiplier)
MODULUS = 2147483647  # 2**31 - 1, prime
MULTIPLIER = 48271


def normalize_seed(seed: int) -> int:
    """
    Map any integer seed into the generator's state range [1, MODULUS - 1].

    The remainder keeps the sign of the seed (truncated division), and
    non-positive remainders are shifted up by ``MODULUS - 1`` so that zero
    and negative seeds never collapse the stream.

    Args:
        seed: Any integer seed.

    Returns:
        A non-zero generator state.
    """
    value = abs(seed) % MODULUS
    if seed < 0:
        value = -value
    if value <= 0:
        value += MODULUS - 1
    return value


class SeededRandom:
    """
    Linear congruential generator producing floats in [0, 1).

    The same seed always yields the same sequence. Instances are cheap and
    not meant to be shared: create one per derivation.
    """

    def __init__(self, seed: int):
        """
        Initialize generator.

        Args:
            seed: Integer seed. Zero and negative values are remapped.
        """
        self._seed = seed
        self._state = normalize_seed(seed)

    @property
    def seed(self) -> int:
        """Seed this stream was created from."""
        return self._seed

    @property
    def state(self) -> int:
        """Current internal state (for checkpointing)."""
        return self._state

    def next_float(self) -> float:
        """Advance the stream and return the next value in [0, 1)."""
        self._state = (self._state * MULTIPLIER) % MODULUS
        return self._state / MODULUS

    __call__ = next_float

    def next_index(self, upper: int) -> int:
        """Return an integer in [0, upper) drawn from the stream."""
        return int(self.next_float() * upper)

    def shuffle_in_place(self, items: MutableSequence[T]) -> None:
        """
        Fisher-Yates shuffle driven by this stream.

        Iterates ``i`` from ``len(items) - 1`` down to 1, swapping position
        ``i`` with ``floor(rand() * (i + 1))``.
        """
        for i in range(len(items) - 1, 0, -1):
            j = self.next_index(i + 1)
            items[i], items[j] = items[j], items[i]

    def shuffled(self, items: Sequence[T]) -> List[T]:
        """Return a shuffled copy of ``items``; the input is left untouched."""
        result = list(items)
        self.shuffle_in_place(result)
        return result
