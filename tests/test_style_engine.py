import pytest

from fmforge.errors import InvalidConfigError
from fmforge.style import CustomStylePreset, Role
from fmforge.style_engine import StyleEngine


def test_catalog_has_custom_last() -> None:
    engine = StyleEngine()
    assert engine.preset_count == 5
    assert engine.get_preset(4).name == "Custom"
    assert isinstance(engine.custom_preset, CustomStylePreset)


def test_out_of_range_index_returns_first() -> None:
    engine = StyleEngine()
    assert engine.get_preset(-1) is engine.get_preset(0)
    assert engine.get_preset(99) is engine.get_preset(0)


def test_set_active_ignores_invalid() -> None:
    engine = StyleEngine()
    engine.set_active(2)
    engine.set_active(17)
    assert engine.active_index == 2
    assert engine.active_preset.name == "Sonic"


def test_find_is_case_insensitive() -> None:
    engine = StyleEngine()
    assert engine.find("streets of rage") == 1
    assert engine.find("  M.U.S.H.A. ") == 3
    assert engine.find("nope") is None


def test_role_constraints_follow_active_preset() -> None:
    engine = StyleEngine()
    engine.set_active(0)
    assert engine.role_constraints(Role.LEAD).algorithms == (0, 1, 2)
    engine.set_active(1)
    assert engine.role_constraints(Role.LEAD).algorithms == (2, 4, 5)


def test_engines_are_independent() -> None:
    a = StyleEngine()
    b = StyleEngine()
    a.set_active(3)
    assert b.active_index == 0


def test_replace_custom_preset() -> None:
    engine = StyleEngine()
    preset = engine.replace_custom_preset({"name": "Mine", "chromaticism": 0.0, "syncopation": 0.1})
    assert engine.get_preset(engine.preset_count - 1) is preset
    assert preset.chromaticism == 0.0


def test_replace_custom_preset_rejects_invalid() -> None:
    engine = StyleEngine()
    with pytest.raises(InvalidConfigError):
        engine.replace_custom_preset({"rhythm_density": 3.0})
    assert engine.custom_preset.name == "Custom"


def test_reset_restores_catalog() -> None:
    engine = StyleEngine()
    engine.replace_custom_preset({"name": "Mine"})
    engine.set_active(2)
    engine.reset()
    assert engine.active_index == 0
    assert engine.custom_preset.name == "Custom"


def test_replace_custom_preset_rejects_unknown_role() -> None:
    engine = StyleEngine()
    with pytest.raises(InvalidConfigError):
        engine.replace_custom_preset({"name": "Mine", "articulation_gaps": {"theremin": 2}})
    assert engine.custom_preset.name == "Custom"


def test_builtin_presets_cannot_be_edited_in_place() -> None:
    engine = StyleEngine()
    preset = engine.get_preset(0)
    with pytest.raises(TypeError):
        preset.roles[Role.BASS] = engine.custom_preset.roles[Role.BASS]  # type: ignore[index]
    assert engine.presets() is engine.presets()
