"""Built-in style catalog.

Each builder returns a fresh preset. Operator slots are listed OP1..OP4; in
most algorithms OP4 is the audible carrier.
"""

from __future__ import annotations

from typing import Any

from .style import CustomStylePreset, OperatorRange, Role, RoleConstraints, StylePreset
from .theory import GrooveType, PhraseForm, ScaleId

_ALL_ALGORITHMS = tuple(range(8))

_CARRIER: dict[str, Any] = {
    "level": (0, 20),
    "attack": (25, 31),
    "decay": (4, 15),
    "sustain": (2, 12),
    "release": (3, 10),
    "multiplier": (0, 4),
    "detune": (0, 3),
    "decay2": (0, 8),
    "rate_scaling": (0, 2),
}

_MODULATOR: dict[str, Any] = {
    "level": (15, 90),
    "attack": (20, 31),
    "decay": (3, 20),
    "sustain": (0, 15),
    "release": (1, 12),
    "multiplier": (1, 10),
    "detune": (0, 7),
    "decay2": (0, 15),
    "rate_scaling": (0, 3),
}


def _op(**bounds: tuple[int, int]) -> OperatorRange:
    return OperatorRange(**bounds)


def _carrier(**overrides: tuple[int, int]) -> OperatorRange:
    """Loud, fast-attack output operator."""
    return OperatorRange(**{**_CARRIER, **overrides})


def _modulator(**overrides: tuple[int, int]) -> OperatorRange:
    """Modulator with headroom on total level."""
    return OperatorRange(**{**_MODULATOR, **overrides})


def _uniform(algorithms: tuple[int, ...], feedback: tuple[int, int], **bounds: tuple[int, int]) -> RoleConstraints:
    op = _op(**bounds)
    return RoleConstraints(algorithms=algorithms, feedback=feedback, operators=(op, op, op, op))


def thunder_force() -> StylePreset:
    """Aggressive leads, driving bass, fast tempos, minor and harmonic minor."""
    roles = {
        Role.LEAD: RoleConstraints(
            algorithms=(0, 1, 2),
            feedback=(4, 7),
            operators=(
                _op(level=(30, 60), attack=(28, 31), decay=(5, 12), sustain=(3, 10),
                    release=(3, 8), multiplier=(1, 3), detune=(3, 6)),
                _op(level=(35, 70), attack=(25, 31), decay=(5, 15), sustain=(2, 12),
                    release=(2, 8), multiplier=(2, 7), detune=(0, 5)),
                _modulator(multiplier=(1, 4)),
                _carrier(),
            ),
        ),
        Role.BASS: RoleConstraints(
            algorithms=(0, 4),
            feedback=(3, 6),
            operators=(
                _op(multiplier=(0, 3), level=(25, 55), attack=(28, 31), decay=(8, 18),
                    sustain=(2, 8), release=(5, 10)),
                _op(multiplier=(0, 3)),
                _op(multiplier=(0, 3)),
                _carrier(attack=(28, 31), decay=(6, 14)),
            ),
        ),
        Role.PAD: RoleConstraints(
            algorithms=(2, 4, 5),
            feedback=(0, 3),
            operators=(
                *(
                    _op(attack=(8, 22), decay=(2, 10), sustain=(5, 14), release=(4, 12),
                        multiplier=(0, 4))
                    for _ in range(3)
                ),
                _carrier(attack=(10, 20)),
            ),
        ),
        Role.RHYTHM: _uniform(
            (5, 6, 7), (2, 6),
            attack=(28, 31), decay=(12, 25), sustain=(0, 5), release=(8, 15),
            multiplier=(1, 14), detune=(0, 7),
        ),
        Role.SFX: _uniform(
            _ALL_ALGORITHMS, (3, 7),
            level=(0, 127), attack=(20, 31), decay=(5, 31), multiplier=(0, 15), detune=(0, 7),
        ),
        Role.SLAP_BASS: RoleConstraints(
            algorithms=(0, 4),
            feedback=(4, 7),
            operators=(
                # high-ratio modulator with a fast decay gives the pop
                _op(level=(20, 50), attack=(30, 31), decay=(15, 25), sustain=(0, 3),
                    release=(8, 15), multiplier=(4, 8)),
                _modulator(multiplier=(1, 3)),
                _modulator(multiplier=(0, 2)),
                _carrier(attack=(30, 31), decay=(10, 18), multiplier=(0, 2)),
            ),
        ),
        Role.DIST_GUITAR: RoleConstraints(
            algorithms=(0, 1),
            feedback=(5, 7),
            operators=(
                _op(level=(25, 50), attack=(28, 31), decay=(6, 12), sustain=(4, 10),
                    release=(3, 8), multiplier=(1, 2), detune=(3, 6)),
                _op(level=(30, 65), attack=(26, 31), decay=(5, 14), multiplier=(1, 5)),
                _modulator(),
                _carrier(),
            ),
        ),
    }
    return StylePreset(
        name="Thunder Force",
        tempo_min=148,
        tempo_max=180,
        preferred_scales=(ScaleId.MINOR, ScaleId.HARMONIC_MINOR, ScaleId.PHRYGIAN_DOMINANT),
        roles=roles,
        rhythm_density=0.8,
        syncopation=0.4,
        chromaticism=0.35,
        prefer_fast_arpeggios=True,
        use_16th_subdivisions=True,
        default_groove=GrooveType.DRIVING,
        default_phrase_form=PhraseForm.ABAB,
        chord_tone_emphasis=0.6,
        role_motif_length={Role.LEAD: 16, Role.BASS: 16},
    )


def streets_of_rage() -> StylePreset:
    """Funky bass, syncopated grooves, dorian and blues colours, moderate tempo."""
    roles = {
        Role.LEAD: RoleConstraints(
            algorithms=(2, 4, 5),
            feedback=(2, 5),
            operators=(
                _modulator(multiplier=(1, 4)),
                _modulator(),
                _modulator(),
                _carrier(attack=(20, 28)),
            ),
        ),
        Role.BASS: RoleConstraints(
            algorithms=(0, 4),
            feedback=(2, 5),
            operators=(
                _modulator(),
                _op(multiplier=(0, 3)),
                _op(multiplier=(0, 3)),
                _carrier(attack=(26, 31), decay=(8, 16)),
            ),
        ),
        Role.PAD: RoleConstraints(
            algorithms=(4, 5, 7),
            feedback=(0, 2),
            operators=(
                *(_op(attack=(10, 20), sustain=(6, 14)) for _ in range(3)),
                _carrier(attack=(10, 18)),
            ),
        ),
        Role.RHYTHM: _uniform(
            (5, 6, 7), (1, 4),
            attack=(28, 31), decay=(10, 22), sustain=(0, 4), release=(7, 14),
        ),
    }
    return StylePreset(
        name="Streets of Rage",
        tempo_min=100,
        tempo_max=130,
        preferred_scales=(ScaleId.DORIAN, ScaleId.MINOR, ScaleId.BLUES, ScaleId.PENTATONIC_MINOR),
        roles=roles,
        rhythm_density=0.6,
        syncopation=0.65,
        chromaticism=0.2,
        prefer_fast_arpeggios=False,
        use_16th_subdivisions=True,
        default_groove=GrooveType.FUNK,
        default_phrase_form=PhraseForm.AABA,
        chord_tone_emphasis=0.75,
        role_motif_length={Role.BASS: 16, Role.SLAP_BASS: 16},
    )


def sonic() -> StylePreset:
    """Bright FM, major and mixolydian, bouncy rhythms."""
    roles = {
        Role.LEAD: RoleConstraints(
            algorithms=(2, 3, 4),
            feedback=(2, 5),
            operators=(
                _modulator(multiplier=(1, 5)),
                _modulator(multiplier=(1, 4)),
                _modulator(),
                _carrier(attack=(26, 31)),
            ),
        ),
        Role.BASS: RoleConstraints(
            algorithms=(0, 4),
            feedback=(1, 4),
            operators=(
                _op(multiplier=(0, 3)),
                _op(multiplier=(0, 3)),
                _op(multiplier=(0, 3)),
                _carrier(),
            ),
        ),
    }
    return StylePreset(
        name="Sonic",
        tempo_min=120,
        tempo_max=160,
        preferred_scales=(ScaleId.MAJOR, ScaleId.MIXOLYDIAN, ScaleId.PENTATONIC_MAJOR),
        roles=roles,
        rhythm_density=0.65,
        syncopation=0.5,
        chromaticism=0.15,
        prefer_fast_arpeggios=True,
        use_16th_subdivisions=True,
        default_groove=GrooveType.STRAIGHT,
        default_phrase_form=PhraseForm.ABAB,
        chord_tone_emphasis=0.8,
        role_motif_length={Role.LEAD: 16},
    )


def musha() -> StylePreset:
    """Dark and atmospheric, phrygian and locrian, dense operator routing."""
    roles = {
        Role.LEAD: RoleConstraints(
            algorithms=(0, 1, 3),
            feedback=(3, 7),
            operators=(
                _modulator(detune=(3, 7), multiplier=(1, 6)),
                _modulator(multiplier=(2, 8)),
                _modulator(),
                _carrier(),
            ),
        ),
        Role.BASS: RoleConstraints(
            algorithms=(0, 1),
            feedback=(4, 7),
            operators=(
                _modulator(multiplier=(1, 3)),
                _modulator(),
                _modulator(),
                _carrier(multiplier=(0, 2)),
            ),
        ),
    }
    return StylePreset(
        name="M.U.S.H.A.",
        tempo_min=130,
        tempo_max=165,
        preferred_scales=(
            ScaleId.PHRYGIAN,
            ScaleId.LOCRIAN,
            ScaleId.HARMONIC_MINOR,
            ScaleId.PHRYGIAN_DOMINANT,
        ),
        roles=roles,
        rhythm_density=0.7,
        syncopation=0.35,
        chromaticism=0.45,
        prefer_fast_arpeggios=True,
        use_16th_subdivisions=True,
        default_groove=GrooveType.DRIVING,
        default_phrase_form=PhraseForm.AAAB,
        chord_tone_emphasis=0.5,
        role_motif_length={Role.LEAD: 16},
    )


def custom() -> CustomStylePreset:
    """Wide-open ranges for every role."""
    return CustomStylePreset(
        name="Custom",
        tempo_min=80,
        tempo_max=220,
        preferred_scales=(ScaleId.MINOR, ScaleId.MAJOR, ScaleId.CHROMATIC),
        roles={role: RoleConstraints(algorithms=_ALL_ALGORITHMS, feedback=(0, 7)) for role in Role},
        rhythm_density=0.5,
        syncopation=0.3,
        chromaticism=0.2,
    )


BUILTIN_PRESETS = (thunder_force, streets_of_rage, sonic, musha)


def builtin_presets() -> list[StylePreset]:
    """Fresh copies of the fixed catalog, without the custom slot."""
    return [build() for build in BUILTIN_PRESETS]
