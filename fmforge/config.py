from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, field_validator

from .errors import InvalidConfigError
from .grid import INSTRUMENT_MAX
from .style import Role
from .theory import NOTE_NAMES, Contour, GrooveType, PhraseForm, ScaleId, coerce_enum

# -----------------------------------------------------------------------------
# Label tables
# -----------------------------------------------------------------------------

_ROLE_MAP: Mapping[str, Role] = MappingProxyType(
    {
        "lead": Role.LEAD,
        "bass": Role.BASS,
        "pad": Role.PAD,
        "rhythm": Role.RHYTHM,
        "sfx": Role.SFX,
        "slap-bass": Role.SLAP_BASS,
        "slap": Role.SLAP_BASS,
        "dist-guitar": Role.DIST_GUITAR,
        "guitar": Role.DIST_GUITAR,
    }
)

_SCALE_MAP: Mapping[str, ScaleId] = MappingProxyType(
    {
        "minor": ScaleId.MINOR,
        "natural-minor": ScaleId.MINOR,
        "harmonic-minor": ScaleId.HARMONIC_MINOR,
        "melodic-minor": ScaleId.MELODIC_MINOR,
        "phrygian": ScaleId.PHRYGIAN,
        "phrygian-dominant": ScaleId.PHRYGIAN_DOMINANT,
        "dorian": ScaleId.DORIAN,
        "mixolydian": ScaleId.MIXOLYDIAN,
        "major": ScaleId.MAJOR,
        "pentatonic-minor": ScaleId.PENTATONIC_MINOR,
        "pentatonic-major": ScaleId.PENTATONIC_MAJOR,
        "chromatic": ScaleId.CHROMATIC,
        "locrian": ScaleId.LOCRIAN,
        "blues": ScaleId.BLUES,
    }
)

_GROOVE_MAP: Mapping[str, GrooveType] = MappingProxyType(
    {
        "straight": GrooveType.STRAIGHT,
        "shuffle": GrooveType.SHUFFLE,
        "funk": GrooveType.FUNK,
        "driving": GrooveType.DRIVING,
        "half-time": GrooveType.HALF_TIME,
        "halftime": GrooveType.HALF_TIME,
    }
)

_PHRASE_FORM_MAP: Mapping[str, PhraseForm] = MappingProxyType(
    {
        "aaba": PhraseForm.AABA,
        "abab": PhraseForm.ABAB,
        "aaab": PhraseForm.AAAB,
        "abac": PhraseForm.ABAC,
        "random": PhraseForm.RANDOM,
    }
)

_CONTOUR_MAP: Mapping[str, Contour] = MappingProxyType(
    {
        "arch": Contour.ARCH,
        "valley": Contour.INVERTED_ARCH,
        "inverted-arch": Contour.INVERTED_ARCH,
        "ascending": Contour.ASCENDING,
        "descending": Contour.DESCENDING,
        "flat": Contour.FLAT,
        "random": Contour.RANDOM,
    }
)

_FLAT_ALIASES: Mapping[str, str] = MappingProxyType(
    {"DB": "C#", "EB": "D#", "GB": "F#", "AB": "G#", "BB": "A#"}
)


def _normalize(value: str) -> str:
    return value.strip().lower().replace("_", "-").replace(" ", "-")


def role_from_label(value: str) -> Role:
    try:
        return _ROLE_MAP[_normalize(value)]
    except KeyError as exc:
        raise InvalidConfigError(f"Unknown role label: {value!r}") from exc


def scale_from_label(value: str) -> ScaleId:
    try:
        return _SCALE_MAP[_normalize(value)]
    except KeyError as exc:
        raise InvalidConfigError(f"Unknown scale label: {value!r}") from exc


def groove_from_label(value: str) -> GrooveType:
    try:
        return _GROOVE_MAP[_normalize(value)]
    except KeyError as exc:
        raise InvalidConfigError(f"Unknown groove label: {value!r}") from exc


def phrase_form_from_label(value: str) -> PhraseForm:
    try:
        return _PHRASE_FORM_MAP[_normalize(value)]
    except KeyError as exc:
        raise InvalidConfigError(f"Unknown phrase form label: {value!r}") from exc


def contour_from_label(value: str) -> Contour:
    try:
        return _CONTOUR_MAP[_normalize(value)]
    except KeyError as exc:
        raise InvalidConfigError(f"Unknown contour label: {value!r}") from exc


def root_from_label(value: str) -> int:
    """Pitch class 0-11 from a note name such as ``A``, ``f#`` or ``Bb``."""
    key = value.strip().upper()
    key = _FLAT_ALIASES.get(key, key)
    try:
        return NOTE_NAMES.index(key)
    except ValueError as exc:
        raise InvalidConfigError(f"Unknown root note: {value!r}") from exc


# -----------------------------------------------------------------------------
# Pattern parameters
# -----------------------------------------------------------------------------


def _clamp_percent(value: object) -> object:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    return max(0, min(100, int(value)))


class PatternParams(BaseModel):
    """Per-request settings for one pattern or fill.

    Enum fields accept members, ints or names; unknown values fall back to
    the field default instead of failing.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    channel: int = 0
    instrument: int = 0
    role: Role = Role.LEAD
    scale_root: int = 9  # A
    scale: ScaleId = ScaleId.MINOR
    density: int = 60
    complexity: int = 50
    octave_min: int = 3
    octave_max: int = 5
    pattern_length: int = 64
    allow_effects: bool = True
    rows_per_beat: int = 4
    rows_per_bar: int = 16
    groove: GrooveType = GrooveType.STRAIGHT
    phrase_form: PhraseForm = PhraseForm.RANDOM
    contour: Contour = Contour.RANDOM
    motif_length_hint: int = 0
    articulation_gap: int | None = None
    chord_tone_emphasis: float = 0.7

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: object) -> Role:
        return coerce_enum(Role, value, Role.LEAD)

    @field_validator("scale", mode="before")
    @classmethod
    def _coerce_scale(cls, value: object) -> ScaleId:
        return coerce_enum(ScaleId, value, ScaleId.MINOR)

    @field_validator("groove", mode="before")
    @classmethod
    def _coerce_groove(cls, value: object) -> GrooveType:
        return coerce_enum(GrooveType, value, GrooveType.STRAIGHT)

    @field_validator("phrase_form", mode="before")
    @classmethod
    def _coerce_phrase_form(cls, value: object) -> PhraseForm:
        return coerce_enum(PhraseForm, value, PhraseForm.RANDOM)

    @field_validator("contour", mode="before")
    @classmethod
    def _coerce_contour(cls, value: object) -> Contour:
        return coerce_enum(Contour, value, Contour.RANDOM)

    @field_validator("density", "complexity", mode="before")
    @classmethod
    def _clamp_percentages(cls, value: object) -> object:
        return _clamp_percent(value)

    @field_validator("instrument")
    @classmethod
    def _clamp_instrument(cls, value: int) -> int:
        return max(0, min(INSTRUMENT_MAX, value))

    @field_validator("scale_root", mode="before")
    @classmethod
    def _wrap_root(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return value % 12
        return value
