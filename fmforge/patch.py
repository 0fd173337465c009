"""Constraint-bound 4-operator FM patch generation and mutation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field

from .rng import GenRng
from .style import ALGORITHM_COUNT, OPERATOR_PARAMS, OperatorRange, RoleConstraints, role_name

_LOGGER = logging.getLogger("fmforge.patch")

OPERATOR_COUNT = 4

# Parameters a mutation may redraw, by index.
_MUTABLE_PARAMS: tuple[str, ...] = OPERATOR_PARAMS[:8]

ALGORITHM_NAMES: Mapping[int, str] = MappingProxyType(
    {
        0: "0: 1>2>3>4",
        1: "1: (1+2)>3>4",
        2: "2: (1+(2>3))>4",
        3: "3: ((1>2)+3)>4",
        4: "4: (1>2)+(3>4)",
        5: "5: 1>(2+3+4)",
        6: "6: (1>2)+3+4",
        7: "7: 1+2+3+4",
    }
)


def algorithm_name(algorithm: int) -> str:
    return ALGORITHM_NAMES.get(algorithm, "?")


class FmOperator(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    level: int = 0
    attack: int = 31
    decay: int = 0
    sustain: int = 0
    release: int = 0
    multiplier: int = 1
    detune: int = 0
    decay2: int = 0
    rate_scaling: int = 0
    am: int = 0
    enabled: bool = True


def _default_fm_operators() -> list[FmOperator]:
    return [FmOperator() for _ in range(OPERATOR_COUNT)]


class FmPatch(BaseModel):
    """A complete 4-operator FM instrument."""

    model_config = ConfigDict(validate_assignment=True)

    name: str = "Gen"
    algorithm: int = 0
    feedback: int = 0
    operators: list[FmOperator] = Field(
        default_factory=_default_fm_operators, min_length=OPERATOR_COUNT, max_length=OPERATOR_COUNT
    )


def describe_patch(patch: FmPatch) -> str:
    """One-line summary: algorithm, feedback, per-operator multiplier and level."""
    mults = ",".join(str(op.multiplier) for op in patch.operators)
    levels = ",".join(str(op.level) for op in patch.operators)
    return f"Algo {patch.algorithm} | FB {patch.feedback} | MUL {mults} | TL {levels}"


class PatchGenerator:
    """Draws FM parameters uniformly from a role's constraint ranges."""

    def __init__(self, rng: GenRng | None = None) -> None:
        self.rng = rng or GenRng()

    def set_seed(self, seed: int) -> None:
        self.rng.seed(seed)

    def _draw(self, bounds: tuple[int, int]) -> int:
        lo, hi = bounds
        return self.rng.rand_int(lo, hi)

    def _draw_algorithm(self, constraints: RoleConstraints) -> int:
        if constraints.algorithms:
            return int(self.rng.pick(constraints.algorithms))
        return self.rng.rand_int(0, ALGORITHM_COUNT - 1)

    def _draw_operator(self, ranges: OperatorRange) -> FmOperator:
        values = {param: self._draw(ranges.bounds(param)) for param in OPERATOR_PARAMS}
        return FmOperator(**values, enabled=True)

    def generate(self, role: int, constraints: RoleConstraints) -> FmPatch:
        algorithm = self._draw_algorithm(constraints)
        feedback = self._draw(constraints.feedback)
        operators = [self._draw_operator(constraints.operators[i]) for i in range(OPERATOR_COUNT)]
        patch = FmPatch(
            name=f"Gen {role_name(role)}",
            algorithm=algorithm,
            feedback=feedback,
            operators=operators,
        )
        _LOGGER.debug("Generated patch for %s: %s", role_name(role), describe_patch(patch))
        return patch

    def mutate(
        self,
        source: FmPatch,
        role: int,
        constraints: RoleConstraints,
        mutations: int,
    ) -> FmPatch:
        """Copy ``source`` and redraw ``mutations`` randomly chosen values.

        Targets may repeat, so not every mutation changes a distinct value.
        """
        patch = source.model_copy(deep=True)
        for _ in range(max(0, mutations)):
            target = self.rng.rand_int(0, 5)
            if target == 0:
                patch.algorithm = self._draw_algorithm(constraints)
            elif target == 1:
                patch.feedback = self._draw(constraints.feedback)
            else:
                op_index = self.rng.rand_int(0, OPERATOR_COUNT - 1)
                param = _MUTABLE_PARAMS[self.rng.rand_int(0, len(_MUTABLE_PARAMS) - 1)]
                bounds = constraints.operators[op_index].bounds(param)
                setattr(patch.operators[op_index], param, self._draw(bounds))
        _LOGGER.debug(
            "Mutated %s patch %d times: %s", role_name(role), mutations, describe_patch(patch)
        )
        return patch
