"""Style presets: per-role FM parameter ranges plus pattern-style coefficients."""

from __future__ import annotations

from collections.abc import Mapping
from enum import IntEnum
from types import MappingProxyType
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .theory import GrooveType, PhraseForm, ScaleId


class Role(IntEnum):
    LEAD = 0
    BASS = 1
    PAD = 2
    RHYTHM = 3
    SFX = 4
    SLAP_BASS = 5
    DIST_GUITAR = 6


ROLE_NAMES: Mapping[Role, str] = MappingProxyType(
    {
        Role.LEAD: "Lead",
        Role.BASS: "Bass",
        Role.PAD: "Pad",
        Role.RHYTHM: "Rhythm",
        Role.SFX: "SFX",
        Role.SLAP_BASS: "Slap Bass",
        Role.DIST_GUITAR: "Dist. Guitar",
    }
)


def role_name(role: int) -> str:
    try:
        return ROLE_NAMES[Role(role)]
    except ValueError:
        return "Unknown"


# Full legal register ranges of a 4-operator FM chip.
OPERATOR_PARAMS: tuple[str, ...] = (
    "level",
    "attack",
    "decay",
    "sustain",
    "release",
    "multiplier",
    "detune",
    "decay2",
    "rate_scaling",
    "am",
)

OPERATOR_LIMITS: Mapping[str, tuple[int, int]] = MappingProxyType(
    {
        "level": (0, 127),
        "attack": (0, 31),
        "decay": (0, 31),
        "sustain": (0, 15),
        "release": (0, 15),
        "multiplier": (0, 15),
        "detune": (0, 7),
        "decay2": (0, 31),
        "rate_scaling": (0, 3),
        "am": (0, 1),
    }
)

ALGORITHM_COUNT = 8
FEEDBACK_LIMITS = (0, 7)

Bounds = tuple[int, int]


class OperatorRange(BaseModel):
    """Inclusive (min, max) bounds for each parameter of one operator.

    Bounds are not checked for order; drawing from an inverted pair yields
    its lower bound.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: Bounds = OPERATOR_LIMITS["level"]
    attack: Bounds = OPERATOR_LIMITS["attack"]
    decay: Bounds = OPERATOR_LIMITS["decay"]
    sustain: Bounds = OPERATOR_LIMITS["sustain"]
    release: Bounds = OPERATOR_LIMITS["release"]
    multiplier: Bounds = OPERATOR_LIMITS["multiplier"]
    detune: Bounds = OPERATOR_LIMITS["detune"]
    decay2: Bounds = OPERATOR_LIMITS["decay2"]
    rate_scaling: Bounds = OPERATOR_LIMITS["rate_scaling"]
    am: Bounds = OPERATOR_LIMITS["am"]

    def bounds(self, param: str) -> Bounds:
        return cast(Bounds, getattr(self, param))


def _default_operators() -> tuple[OperatorRange, ...]:
    return tuple(OperatorRange() for _ in range(4))


class RoleConstraints(BaseModel):
    """Allowed algorithms, feedback range and four operator ranges for one role."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    algorithms: tuple[int, ...] = ()
    feedback: Bounds = FEEDBACK_LIMITS
    operators: tuple[OperatorRange, OperatorRange, OperatorRange, OperatorRange] = Field(
        default_factory=_default_operators
    )


def _default_roles() -> dict[Role, RoleConstraints]:
    return {role: RoleConstraints() for role in Role}


_DEFAULT_ARTICULATION_GAPS: Mapping[Role, int] = MappingProxyType(
    {
        Role.LEAD: 0,
        Role.BASS: 1,
        Role.PAD: 0,
        Role.RHYTHM: 2,
        Role.SFX: 3,
        Role.SLAP_BASS: 2,
        Role.DIST_GUITAR: 1,
    }
)
_FALLBACK_ARTICULATION_GAP = 1


def _default_articulation_gaps() -> dict[Role, int]:
    return dict(_DEFAULT_ARTICULATION_GAPS)


def _role_key(key: object) -> Role:
    if isinstance(key, Role):
        return key
    text = str(key).strip()
    if text.lstrip("-").isdigit():
        try:
            return Role(int(text))
        except ValueError:
            pass
    else:
        member = Role.__members__.get(text.upper().replace("-", "_").replace(" ", "_"))
        if member is not None:
            return member
    raise ValueError(f"unknown role key {key!r}")


def _role_keyed(value: object) -> object:
    """Accept role names, numeric strings (JSON keys) or members as mapping keys.

    Raises ``ValueError`` on a key that names no role.
    """
    if not isinstance(value, Mapping):
        return value
    return {_role_key(key): item for key, item in cast(Mapping[Any, Any], value).items()}


class StylePreset(BaseModel):
    """A named style: patch ranges per role plus pattern-style coefficients."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = "Custom"
    tempo_min: int = 100
    tempo_max: int = 200
    preferred_scales: tuple[ScaleId, ...] = ()
    roles: Mapping[Role, RoleConstraints] = Field(default_factory=_default_roles, validate_default=True)

    rhythm_density: float = Field(default=0.5, ge=0.0, le=1.0)
    syncopation: float = Field(default=0.3, ge=0.0, le=1.0)
    chromaticism: float = Field(default=0.2, ge=0.0, le=1.0)
    prefer_fast_arpeggios: bool = False
    use_16th_subdivisions: bool = False

    default_groove: GrooveType = GrooveType.STRAIGHT
    default_phrase_form: PhraseForm = PhraseForm.RANDOM
    chord_tone_emphasis: float = Field(default=0.7, ge=0.0, le=1.0)
    role_motif_length: Mapping[Role, int] = Field(default_factory=dict, validate_default=True)

    # Empirically tuned pipeline constants, kept per style so they can be retuned.
    articulation_gaps: Mapping[Role, int] = Field(
        default_factory=_default_articulation_gaps, validate_default=True
    )
    passing_skip_interval: int = Field(default=4, ge=0)

    @field_validator("roles", mode="before")
    @classmethod
    def _fill_roles(cls, value: object) -> object:
        keyed = _role_keyed(value)
        if not isinstance(keyed, dict):
            return keyed
        merged: dict[Role, Any] = _default_roles()
        merged.update(keyed)
        return merged

    @field_validator("role_motif_length", "articulation_gaps", mode="before")
    @classmethod
    def _coerce_role_keys(cls, value: object) -> object:
        return _role_keyed(value)

    @field_validator("roles", "role_motif_length", "articulation_gaps")
    @classmethod
    def _freeze_mapping(cls, value: Mapping[Role, Any]) -> Mapping[Role, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("roles", "role_motif_length", "articulation_gaps")
    def _dump_mapping(self, value: Mapping[Role, Any]) -> dict[Role, Any]:
        return dict(value)

    def constraints_for(self, role: int) -> RoleConstraints:
        """Constraints for ``role``; unknown roles use the lead constraints."""
        try:
            key = Role(role)
        except ValueError:
            key = Role.LEAD
        constraints = self.roles.get(key)
        if constraints is None:
            constraints = self.roles.get(Role.LEAD, RoleConstraints())
        return constraints

    def articulation_gap_for(self, role: int) -> int:
        try:
            return self.articulation_gaps.get(Role(role), _FALLBACK_ARTICULATION_GAP)
        except ValueError:
            return _FALLBACK_ARTICULATION_GAP

    def motif_length_for(self, role: int) -> int:
        try:
            return self.role_motif_length.get(Role(role), 0)
        except ValueError:
            return 0


class CustomStylePreset(StylePreset):
    """The single user-editable preset; assignments are re-validated."""

    model_config = ConfigDict(frozen=False, validate_assignment=True, extra="ignore")
