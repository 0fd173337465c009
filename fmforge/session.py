"""Stateful front end tying the style catalog to both generators.

A session owns the seed. Every generation call reseeds from it, so with the
seed locked the same request always gives the same result; unlocked, the
seed advances by one after each call.
"""

from __future__ import annotations

import logging
import time

from .config import PatternParams
from .grid import PatternGrid
from .patch import FmPatch, PatchGenerator, describe_patch
from .pattern import PatternGenerator
from .rng import DEFAULT_SEED, MASK32
from .style import Role, StylePreset, role_name
from .style_engine import StyleEngine

_LOGGER = logging.getLogger("fmforge.session")


class GenerationSession:
    """Generates patches and patterns from the active style with a managed seed.

    Every call reseeds its generator from ``current_seed``, locked or not. A
    locked session therefore restarts the same stream on each call and repeats
    its last result instead of drawing further along the stream.
    """

    def __init__(self, seed: int = DEFAULT_SEED, *, lock_seed: bool = False) -> None:
        self.styles = StyleEngine()
        self.patch_generator = PatchGenerator()
        self.pattern_generator = PatternGenerator()
        self.current_seed = int(seed) & MASK32
        self.lock_seed = lock_seed
        self.role: Role = Role.LEAD
        self.params = PatternParams()
        self.patch: FmPatch | None = None
        self.patch_description = ""

    @property
    def has_patch(self) -> bool:
        return self.patch is not None

    @property
    def style(self) -> StylePreset:
        return self.styles.active_preset

    def _advance_seed(self) -> None:
        if not self.lock_seed:
            self.current_seed = (self.current_seed + 1) & MASK32

    def randomize_seed(self) -> int:
        self.current_seed = int(time.time()) & MASK32
        _LOGGER.debug("Seed randomized to %d", self.current_seed)
        return self.current_seed

    # -------------------------------------------------------------------------
    # Patches
    # -------------------------------------------------------------------------

    def generate_patch(self) -> FmPatch:
        self.patch_generator.set_seed(self.current_seed)
        constraints = self.styles.role_constraints(self.role)
        patch = self.patch_generator.generate(self.role, constraints)
        self._store_patch(patch)
        self._advance_seed()
        return patch

    def mutate_patch(self, mutations: int = 3) -> FmPatch:
        """Mutate the held patch; generates a fresh one when none is held yet."""
        if self.patch is None:
            return self.generate_patch()
        self.patch_generator.set_seed(self.current_seed)
        constraints = self.styles.role_constraints(self.role)
        patch = self.patch_generator.mutate(self.patch, self.role, constraints, mutations)
        self._store_patch(patch)
        self._advance_seed()
        return patch

    def _store_patch(self, patch: FmPatch) -> None:
        self.patch = patch
        self.patch_description = describe_patch(patch)
        _LOGGER.info(
            "%s patch (seed %d, %s): %s",
            role_name(self.role),
            self.current_seed,
            self.style.name,
            self.patch_description,
        )

    # -------------------------------------------------------------------------
    # Patterns
    # -------------------------------------------------------------------------

    def populate_params(
        self, rows_per_beat: int | None = None, rows_per_bar: int | None = None
    ) -> PatternParams:
        """Apply positive host grid hints and the active style's pattern defaults."""
        params = self.params
        if rows_per_beat is not None and rows_per_beat > 0:
            params.rows_per_beat = rows_per_beat
        if rows_per_bar is not None and rows_per_bar > 0:
            params.rows_per_bar = rows_per_bar
        style = self.style
        params.groove = style.default_groove
        params.phrase_form = style.default_phrase_form
        params.chord_tone_emphasis = style.chord_tone_emphasis
        params.motif_length_hint = style.motif_length_for(params.role)
        return params

    def generate_pattern(
        self,
        grid: PatternGrid,
        pattern_length: int | None = None,
        *,
        rows_per_beat: int | None = None,
        rows_per_bar: int | None = None,
        populate: bool = True,
    ) -> bool:
        """Generate rows ``[0, pattern_length)`` with the current seed.

        With ``populate=False`` the params are used exactly as set.
        """
        if pattern_length is not None:
            self.params.pattern_length = pattern_length
        if populate:
            self.populate_params(rows_per_beat, rows_per_bar)
        self.pattern_generator.set_seed(self.current_seed)
        ok = self.pattern_generator.generate(grid, self.params, self.style)
        self._log_pattern(0, self.params.pattern_length, ok)
        self._advance_seed()
        return ok

    def generate_fill(
        self,
        grid: PatternGrid,
        start: int,
        end: int,
        *,
        rows_per_beat: int | None = None,
        rows_per_bar: int | None = None,
        populate: bool = True,
    ) -> bool:
        if populate:
            self.populate_params(rows_per_beat, rows_per_bar)
        self.pattern_generator.set_seed(self.current_seed)
        ok = self.pattern_generator.generate_fill(grid, self.params, self.style, start, end)
        self._log_pattern(start, end, ok)
        self._advance_seed()
        return ok

    def _log_pattern(self, start: int, end: int, ok: bool) -> None:
        if ok:
            _LOGGER.info(
                "%s pattern rows %d-%d (seed %d, %s)",
                role_name(self.params.role),
                start,
                end,
                self.current_seed,
                self.style.name,
            )
        else:
            _LOGGER.warning("Nothing generated for rows %d-%d", start, end)
