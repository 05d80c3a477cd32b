"""
Tests for the seeded random stream.
"""

import pytest

from latin_drop.latin_core.rng import MODULUS, MULTIPLIER, SeededRandom, normalize_seed


class TestSeedNormalization:
    """Test seed remapping into the generator's state range."""

    def test_positive_seed_kept(self):
        """Small positive seeds are used as-is."""
        assert normalize_seed(1) == 1
        assert normalize_seed(12345) == 12345

    def test_zero_seed_remapped(self):
        """Seed 0 must not collapse the stream."""
        assert normalize_seed(0) == MODULUS - 1

    def test_negative_seed_remapped(self):
        """Negative seeds shift into the valid non-zero range."""
        assert normalize_seed(-5) == MODULUS - 1 - 5
        assert 0 < normalize_seed(-123456789) < MODULUS

    def test_modulus_multiple_remapped(self):
        """A seed equal to the modulus would be zero; it is remapped too."""
        assert normalize_seed(MODULUS) == MODULUS - 1


class TestSeededRandom:
    """Test the LCG stream itself."""

    def test_first_values(self):
        """The stream follows state = state * 48271 mod (2^31 - 1)."""
        rand = SeededRandom(1)
        assert rand.next_float() == pytest.approx(MULTIPLIER / MODULUS)
        assert rand.state == MULTIPLIER
        assert rand.next_float() == pytest.approx(182605794 / MODULUS)

    def test_deterministic_with_seed(self):
        """Same seed should produce same sequence."""
        a = SeededRandom(42)
        b = SeededRandom(42)
        assert [a() for _ in range(100)] == [b() for _ in range(100)]

    def test_different_seeds_differ(self):
        """Different seeds should produce different sequences."""
        a = SeededRandom(42)
        b = SeededRandom(43)
        assert [a() for _ in range(20)] != [b() for _ in range(20)]

    def test_values_in_unit_interval(self):
        """Every value lies in [0, 1)."""
        for seed in (-7, 0, 1, 99, 2**31 - 2, 1_700_000_000_000):
            rand = SeededRandom(seed)
            for _ in range(500):
                value = rand.next_float()
                assert 0.0 <= value < 1.0

    def test_no_short_cycle(self):
        """No repeated state within a few thousand draws."""
        rand = SeededRandom(7)
        states = set()
        for _ in range(5000):
            rand.next_float()
            states.add(rand.state)
        assert len(states) == 5000


class TestShuffle:
    """Test the seeded Fisher-Yates pass."""

    def test_shuffle_is_permutation(self):
        """Shuffling keeps exactly the same elements."""
        items = list(range(50))
        result = SeededRandom(3).shuffled(items)
        assert sorted(result) == items

    def test_shuffle_leaves_input_untouched(self):
        """shuffled() returns a copy."""
        items = [1, 2, 3, 4, 5]
        SeededRandom(3).shuffled(items)
        assert items == [1, 2, 3, 4, 5]

    def test_shuffle_deterministic(self):
        """Same seed gives the same permutation."""
        assert SeededRandom(9).shuffled(range(20)) == SeededRandom(9).shuffled(range(20))

    def test_shuffle_consumes_one_draw_per_swap(self):
        """A pass over n items consumes exactly n - 1 values."""
        rand = SeededRandom(11)
        rand.shuffled(range(10))
        reference = SeededRandom(11)
        for _ in range(9):
            reference.next_float()
        assert rand.state == reference.state

    def test_single_element_untouched(self):
        """Lists of length 0 or 1 consume nothing."""
        rand = SeededRandom(5)
        assert rand.shuffled([7]) == [7]
        assert rand.shuffled([]) == []
        assert rand.state == 5
