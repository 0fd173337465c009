import re

import pytest

from fmforge.patch import FmPatch, PatchGenerator, algorithm_name, describe_patch
from fmforge.presets import builtin_presets
from fmforge.rng import GenRng
from fmforge.style import OPERATOR_PARAMS, Role, RoleConstraints


def _assert_within(patch: FmPatch, constraints: RoleConstraints) -> None:
    if constraints.algorithms:
        assert patch.algorithm in constraints.algorithms
    else:
        assert 0 <= patch.algorithm <= 7
    fb_lo, fb_hi = constraints.feedback
    assert fb_lo <= patch.feedback <= fb_hi
    for op, ranges in zip(patch.operators, constraints.operators):
        assert op.enabled
        for param in OPERATOR_PARAMS:
            lo, hi = ranges.bounds(param)
            assert lo <= getattr(op, param) <= hi, param


@pytest.mark.parametrize("role", list(Role))
def test_generated_patches_respect_constraints(role: Role) -> None:
    for preset in builtin_presets():
        constraints = preset.constraints_for(role)
        generator = PatchGenerator(GenRng(2024))
        for _ in range(10):
            _assert_within(generator.generate(role, constraints), constraints)


def test_same_seed_same_patch() -> None:
    constraints = builtin_presets()[0].constraints_for(Role.LEAD)
    a = PatchGenerator(GenRng(77)).generate(Role.LEAD, constraints)
    b = PatchGenerator(GenRng(77)).generate(Role.LEAD, constraints)
    assert a == b


def test_set_seed_reproduces() -> None:
    constraints = builtin_presets()[1].constraints_for(Role.BASS)
    generator = PatchGenerator()
    generator.set_seed(9)
    first = generator.generate(Role.BASS, constraints)
    generator.set_seed(9)
    assert generator.generate(Role.BASS, constraints) == first


def test_patch_name_uses_role() -> None:
    patch = PatchGenerator().generate(Role.PAD, RoleConstraints())
    assert patch.name == "Gen Pad"
    assert len(patch.operators) == 4


def test_empty_algorithm_list_draws_any_algorithm() -> None:
    constraints = RoleConstraints(algorithms=())
    generator = PatchGenerator(GenRng(5))
    seen = {generator.generate(Role.SFX, constraints).algorithm for _ in range(200)}
    assert seen <= set(range(8))
    assert len(seen) > 1


def test_mutate_leaves_source_untouched() -> None:
    constraints = builtin_presets()[2].constraints_for(Role.LEAD)
    generator = PatchGenerator(GenRng(3))
    source = generator.generate(Role.LEAD, constraints)
    snapshot = source.model_copy(deep=True)
    mutated = generator.mutate(source, Role.LEAD, constraints, 8)
    assert source == snapshot
    assert mutated is not source
    _assert_within(mutated, constraints)


def test_mutate_zero_times_copies() -> None:
    constraints = RoleConstraints()
    generator = PatchGenerator(GenRng(3))
    source = generator.generate(Role.LEAD, constraints)
    assert generator.mutate(source, Role.LEAD, constraints, 0) == source


def test_mutations_stay_in_range() -> None:
    constraints = builtin_presets()[3].constraints_for(Role.BASS)
    generator = PatchGenerator(GenRng(10))
    patch = generator.generate(Role.BASS, constraints)
    for _ in range(20):
        patch = generator.mutate(patch, Role.BASS, constraints, 5)
        _assert_within(patch, constraints)


def test_describe_patch_format() -> None:
    patch = FmPatch(algorithm=4, feedback=6)
    for i, op in enumerate(patch.operators):
        op.multiplier = i + 1
        op.level = 10 * i
    assert describe_patch(patch) == "Algo 4 | FB 6 | MUL 1,2,3,4 | TL 0,10,20,30"


def test_description_of_generated_patch() -> None:
    patch = PatchGenerator().generate(Role.LEAD, RoleConstraints())
    pattern = r"^Algo \d \| FB \d \| MUL \d+,\d+,\d+,\d+ \| TL \d+,\d+,\d+,\d+$"
    assert re.match(pattern, describe_patch(patch))


def test_algorithm_name() -> None:
    assert algorithm_name(7) == "7: 1+2+3+4"
    assert algorithm_name(12) == "?"
