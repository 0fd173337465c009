from __future__ import annotations

from .config import (
    PatternParams,
    contour_from_label,
    groove_from_label,
    phrase_form_from_label,
    role_from_label,
    root_from_label,
    scale_from_label,
)
from .errors import FmForgeError, InvalidConfigError
from .grid import EMPTY, NOTE_OFF, PatternGrid, format_note
from .logging_utils import configure_logging as _configure_logging
from .motifs import Motif, MotifNote, generate_role_motif
from .patch import FmOperator, FmPatch, PatchGenerator, describe_patch
from .pattern import BarChord, GrooveTemplate, MotifPlacement, PatternGenerator, Phrase
from .rng import GenRng
from .session import GenerationSession
from .style import CustomStylePreset, OperatorRange, Role, RoleConstraints, StylePreset
from .style_engine import StyleEngine
from .theory import Contour, GrooveType, PhraseForm, ScaleId, bpm_to_hz, scale_intervals

__all__ = [
    "EMPTY",
    "NOTE_OFF",
    "BarChord",
    "Contour",
    "CustomStylePreset",
    "FmForgeError",
    "FmOperator",
    "FmPatch",
    "GenRng",
    "GenerationSession",
    "GrooveTemplate",
    "GrooveType",
    "InvalidConfigError",
    "Motif",
    "MotifNote",
    "MotifPlacement",
    "OperatorRange",
    "PatchGenerator",
    "PatternGenerator",
    "PatternGrid",
    "PatternParams",
    "Phrase",
    "PhraseForm",
    "Role",
    "RoleConstraints",
    "ScaleId",
    "StyleEngine",
    "StylePreset",
    "bpm_to_hz",
    "contour_from_label",
    "describe_patch",
    "format_note",
    "generate_role_motif",
    "groove_from_label",
    "phrase_form_from_label",
    "role_from_label",
    "root_from_label",
    "scale_from_label",
    "scale_intervals",
]

__version__ = "0.1.0"

_configure_logging()
del _configure_logging
