from collections import Counter
from itertools import permutations

import pytest

from fmforge.rng import DEFAULT_SEED, MASK32, GenRng


def test_same_seed_same_stream() -> None:
    a = GenRng(42)
    b = GenRng(42)
    assert [a.next_u32() for _ in range(32)] == [b.next_u32() for _ in range(32)]


def test_reseed_restarts_stream() -> None:
    rng = GenRng(7)
    first = [rng.next_u32() for _ in range(8)]
    rng.seed(7)
    assert [rng.next_u32() for _ in range(8)] == first


def test_different_seeds_diverge() -> None:
    a = GenRng(1)
    b = GenRng(2)
    assert [a.next_u32() for _ in range(8)] != [b.next_u32() for _ in range(8)]


def test_default_seed() -> None:
    assert GenRng().state == GenRng(DEFAULT_SEED).state


def test_outputs_are_32_bit() -> None:
    rng = GenRng(99)
    for _ in range(200):
        assert 0 <= rng.next_u32() <= MASK32


def test_rand_int_bounds() -> None:
    rng = GenRng(3)
    values = {rng.rand_int(-3, 3) for _ in range(500)}
    assert values == set(range(-3, 4))


def test_rand_int_degenerate_ranges() -> None:
    rng = GenRng(3)
    state = rng.state
    assert rng.rand_int(5, 5) == 5
    assert rng.rand_int(7, 3) == 7
    assert rng.state == state


def test_rand_float_range() -> None:
    rng = GenRng(11)
    for _ in range(500):
        value = rng.rand_float()
        assert 0.0 <= value < 1.0


def test_weighted_pick_single_positive_weight() -> None:
    rng = GenRng(5)
    for _ in range(100):
        assert rng.weighted_pick([1.0, 0.0, 0.0]) == 0
        assert rng.weighted_pick([0.0, 0.0, 2.0]) == 2


def test_weighted_pick_without_weight() -> None:
    rng = GenRng(5)
    assert rng.weighted_pick([0.0, 0.0]) == 0
    assert rng.weighted_pick([]) == 0
    assert rng.weighted_pick([-1.0, 0.5]) == 0


def test_pick_empty_returns_default() -> None:
    rng = GenRng(5)
    assert rng.pick([]) == 0
    assert rng.pick((), default=-1) == -1
    assert rng.pick([4, 5, 6]) in (4, 5, 6)


def test_shuffle_is_permutation() -> None:
    rng = GenRng(8)
    values = list(range(20))
    rng.shuffle(values)
    assert sorted(values) == list(range(20))


def test_shuffle_deterministic() -> None:
    a, b = list(range(10)), list(range(10))
    GenRng(21).shuffle(a)
    GenRng(21).shuffle(b)
    assert a == b


def _chi_square(observed: Counter, expected: dict) -> float:
    return sum((observed[key] - count) ** 2 / count for key, count in expected.items())


@pytest.mark.parametrize("seed", [1, DEFAULT_SEED, 987654])
def test_weighted_pick_frequencies_follow_weights(seed: int) -> None:
    weights = [1.0, 2.0, 0.0, 3.0, 4.0]
    draws = 20_000
    rng = GenRng(seed)
    counts = Counter(rng.weighted_pick(weights) for _ in range(draws))
    total = sum(weights)
    assert counts[2] == 0
    for index, weight in enumerate(weights):
        assert abs(counts[index] / draws - weight / total) < 0.02
    expected = {i: draws * w / total for i, w in enumerate(weights) if w > 0}
    # 3 degrees of freedom, p = 1e-6
    assert _chi_square(counts, expected) < 30.66


@pytest.mark.parametrize("seed", [3, DEFAULT_SEED])
def test_shuffle_orderings_are_uniform(seed: int) -> None:
    draws = 6_000
    rng = GenRng(seed)
    counts: Counter = Counter()
    for _ in range(draws):
        values = [0, 1, 2]
        rng.shuffle(values)
        counts[tuple(values)] += 1
    orderings = list(permutations(range(3)))
    assert set(counts) == set(orderings)
    expected = {ordering: draws / len(orderings) for ordering in orderings}
    # 5 degrees of freedom, p = 1e-6
    assert _chi_square(counts, expected) < 35.89


def test_shuffle_positions_are_uniform() -> None:
    draws = 5_000
    rng = GenRng(17)
    first = Counter()
    for _ in range(draws):
        values = list(range(5))
        rng.shuffle(values)
        first[values[0]] += 1
    for value in range(5):
        assert abs(first[value] / draws - 0.2) < 0.03
