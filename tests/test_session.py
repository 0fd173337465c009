import numpy as np

from fmforge.grid import PatternGrid
from fmforge.rng import DEFAULT_SEED
from fmforge.session import GenerationSession
from fmforge.style import Role
from fmforge.theory import GrooveType, PhraseForm


def test_initial_state() -> None:
    session = GenerationSession()
    assert session.current_seed == DEFAULT_SEED
    assert not session.has_patch
    assert session.patch_description == ""
    assert session.role is Role.LEAD


def test_generate_patch_advances_seed() -> None:
    session = GenerationSession(seed=100)
    patch = session.generate_patch()
    assert session.has_patch
    assert session.patch is patch
    assert session.patch_description.startswith(f"Algo {patch.algorithm} |")
    assert session.current_seed == 101


def test_locked_seed_repeats() -> None:
    session = GenerationSession(seed=100, lock_seed=True)
    first = session.generate_patch()
    second = session.generate_patch()
    assert session.current_seed == 100
    assert first == second


def test_sessions_with_same_seed_agree() -> None:
    assert GenerationSession(seed=5).generate_patch() == GenerationSession(seed=5).generate_patch()


def test_mutate_without_patch_generates() -> None:
    session = GenerationSession(seed=7)
    patch = session.mutate_patch()
    assert patch == GenerationSession(seed=7).generate_patch()
    assert session.current_seed == 8


def test_mutate_replaces_patch() -> None:
    session = GenerationSession(seed=7)
    original = session.generate_patch()
    snapshot = original.model_copy(deep=True)
    mutated = session.mutate_patch(4)
    assert session.patch is mutated
    assert original == snapshot
    assert session.current_seed == 9


def test_populate_params_uses_active_style() -> None:
    session = GenerationSession()
    session.styles.set_active(0)
    params = session.populate_params(rows_per_beat=3, rows_per_bar=12)
    assert params.rows_per_beat == 3
    assert params.rows_per_bar == 12
    assert params.groove is GrooveType.DRIVING
    assert params.phrase_form is PhraseForm.ABAB
    assert params.chord_tone_emphasis == 0.6
    assert params.motif_length_hint == 16


def test_populate_params_ignores_non_positive_hints() -> None:
    session = GenerationSession()
    params = session.populate_params(rows_per_beat=0, rows_per_bar=-8)
    assert (params.rows_per_beat, params.rows_per_bar) == (4, 16)


def test_generate_pattern_is_reproducible() -> None:
    grids = []
    for _ in range(2):
        session = GenerationSession(seed=44)
        session.params.role = Role.BASS
        grid = PatternGrid(rows=64)
        assert session.generate_pattern(grid, 64)
        assert session.current_seed == 45
        grids.append(grid)
    assert np.array_equal(grids[0].data, grids[1].data)
    assert grids[0].note_rows()


def test_generate_fill_reports_bad_region() -> None:
    session = GenerationSession(seed=1)
    grid = PatternGrid(rows=16)
    assert not session.generate_fill(grid, 4, 4)
    assert grid.events() == []


def test_populate_false_keeps_explicit_params() -> None:
    session = GenerationSession()
    session.params.groove = GrooveType.SHUFFLE
    session.generate_pattern(PatternGrid(rows=64), populate=False)
    assert session.params.groove is GrooveType.SHUFFLE


def test_randomize_seed(monkeypatch) -> None:
    monkeypatch.setattr("fmforge.session.time.time", lambda: 1_700_000_000.5)
    session = GenerationSession()
    assert session.randomize_seed() == 1_700_000_000
    assert session.current_seed == 1_700_000_000


def test_locked_session_repeats_patterns() -> None:
    session = GenerationSession(seed=9, lock_seed=True)
    first, second = PatternGrid(rows=64), PatternGrid(rows=64)
    assert session.generate_pattern(first)
    assert session.generate_pattern(second)
    assert np.array_equal(first.data, second.data)
    assert session.current_seed == 9
