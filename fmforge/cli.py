from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import (
    contour_from_label,
    groove_from_label,
    phrase_form_from_label,
    role_from_label,
    root_from_label,
    scale_from_label,
)
from .errors import InvalidConfigError
from .grid import (
    COL_INSTRUMENT,
    COL_VOLUME,
    EMPTY,
    MAX_ROWS,
    PatternGrid,
    effect_col,
    effect_value_col,
    format_note,
)
from .logging_utils import configure_logging, console_level, log_exception
from .patch import FmPatch, algorithm_name
from .session import GenerationSession
from .style import OPERATOR_PARAMS, role_name
from .style_engine import StyleEngine
from .theory import GROOVE_NAMES, PHRASE_FORM_NAMES, root_name, scale_name

_LOGGER = logging.getLogger("fmforge.cli")
_CONSOLE = Console()
_ERR_CONSOLE = Console(stderr=True)


def _render_error(context: str, exc: BaseException) -> None:
    _ERR_CONSOLE.print(f"[bold red]{escape(context)} failed:[/] {escape(str(exc))}")


def _resolve_style(engine: StyleEngine, value: str | None) -> int:
    if value is None:
        return engine.active_index
    text = value.strip()
    if text.isdigit():
        index = int(text)
        if 0 <= index < engine.preset_count:
            return index
        raise InvalidConfigError(f"Style index out of range: {index}")
    found = engine.find(text)
    if found is None:
        raise InvalidConfigError(f"Unknown style: {value!r}")
    return found


def _load_custom_style(engine: StyleEngine, path: Path) -> int:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidConfigError(f"Cannot read custom style {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidConfigError(f"Custom style {path} must be a JSON object")
    engine.replace_custom_preset(data)
    return engine.preset_count - 1


def _prepare_session(args: argparse.Namespace) -> GenerationSession:
    session = GenerationSession(seed=args.seed, lock_seed=True)
    if args.custom_style is not None:
        index = _load_custom_style(session.styles, Path(args.custom_style))
    else:
        index = _resolve_style(session.styles, args.style)
    session.styles.set_active(index)
    session.role = role_from_label(args.role)
    return session


# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------


def _presets_table(engine: StyleEngine) -> Table:
    table = Table(title="Style presets")
    table.add_column("#")
    table.add_column("Name", no_wrap=True)
    for column in ("Tempo", "Scales", "Density", "Sync", "Chroma", "Groove", "Form"):
        table.add_column(column)
    for index, preset in enumerate(engine.presets()):
        table.add_row(
            str(index),
            preset.name,
            f"{preset.tempo_min}-{preset.tempo_max}",
            ", ".join(scale_name(scale) for scale in preset.preferred_scales),
            f"{preset.rhythm_density:.2f}",
            f"{preset.syncopation:.2f}",
            f"{preset.chromaticism:.2f}",
            GROOVE_NAMES[preset.default_groove],
            PHRASE_FORM_NAMES[preset.default_phrase_form],
        )
    return table


def _patch_table(patch: FmPatch) -> Table:
    table = Table(title=f"{patch.name}  algorithm {algorithm_name(patch.algorithm)}  feedback {patch.feedback}")
    table.add_column("Param")
    for index in range(len(patch.operators)):
        table.add_column(f"OP{index + 1}", justify="right")
    for param in OPERATOR_PARAMS:
        table.add_row(param, *(str(getattr(op, param)) for op in patch.operators))
    return table


def _hex_cell(value: int) -> str:
    return ".." if value == EMPTY else f"{value:02X}"


def _pattern_table(grid: PatternGrid, start: int, end: int) -> Table:
    table = Table()
    for column in ("Row", "Note", "Ins", "Vol", "FX"):
        table.add_column(column)
    for row in range(max(0, start), min(end, grid.rows)):
        command = grid.get(row, effect_col(0))
        value = grid.get(row, effect_value_col(0))
        effect = "..." if command == EMPTY else f"{command:01X}{value:02X}"
        table.add_row(
            f"{row:02X}",
            format_note(grid.note(row)),
            _hex_cell(grid.get(row, COL_INSTRUMENT)),
            _hex_cell(grid.get(row, COL_VOLUME)),
            effect,
        )
    return table


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------


def _cmd_presets(args: argparse.Namespace) -> int:
    engine = StyleEngine()
    if args.json:
        payload = [preset.model_dump(mode="json") for preset in engine.presets()]
        _CONSOLE.print_json(json.dumps(payload))
    else:
        _CONSOLE.print(_presets_table(engine))
    return 0


def _cmd_patch(args: argparse.Namespace) -> int:
    session = _prepare_session(args)
    patch = session.generate_patch()
    if args.mutations > 0:
        patch = session.mutate_patch(args.mutations)
    if args.json:
        _CONSOLE.print_json(patch.model_dump_json())
    else:
        _CONSOLE.print(_patch_table(patch))
        _CONSOLE.print(session.patch_description)
    return 0


def _apply_pattern_overrides(session: GenerationSession, args: argparse.Namespace) -> None:
    params = session.params
    updates: dict[str, Any] = {
        "role": session.role,
        "instrument": args.instrument,
        "density": args.density,
        "complexity": args.complexity,
        "octave_min": args.octave_min,
        "octave_max": args.octave_max,
        "pattern_length": args.length,
        "allow_effects": not args.no_effects,
        "articulation_gap": args.gap,
    }
    if args.scale is not None:
        updates["scale"] = scale_from_label(args.scale)
    if args.root is not None:
        updates["scale_root"] = root_from_label(args.root)
    if args.contour is not None:
        updates["contour"] = contour_from_label(args.contour)
    for name, value in updates.items():
        setattr(params, name, value)

    session.populate_params(args.rows_per_beat, args.rows_per_bar)
    if args.groove is not None:
        params.groove = groove_from_label(args.groove)
    if args.phrase_form is not None:
        params.phrase_form = phrase_form_from_label(args.phrase_form)
    if args.motif_length is not None:
        params.motif_length_hint = args.motif_length


def _cmd_pattern(args: argparse.Namespace) -> int:
    session = _prepare_session(args)
    _apply_pattern_overrides(session, args)
    params = session.params

    grid = PatternGrid(rows=MAX_ROWS)
    if args.fill is not None:
        start, end = args.fill
        ok = session.generate_fill(grid, start, end, populate=False)
    else:
        start, end = 0, params.pattern_length
        ok = session.generate_pattern(grid, populate=False)
    if not ok:
        raise InvalidConfigError(f"Invalid row range {start}-{end} for a {grid.rows}-row grid")

    if args.json:
        payload = {
            "seed": args.seed,
            "style": session.style.name,
            "params": params.model_dump(mode="json"),
            "events": grid.events(),
        }
        _CONSOLE.print_json(json.dumps(payload))
        return 0

    title = (
        f"{role_name(params.role)} | {root_name(params.scale_root)} {scale_name(params.scale)}"
        f" | {session.style.name} | seed {args.seed}"
    )
    _CONSOLE.print(title, markup=False)
    _CONSOLE.print(_pattern_table(grid, start, end))
    return 0


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--role", type=str, default="lead")
    parser.add_argument("--style", type=str, default=None, help="Preset name or index.")
    parser.add_argument("--custom-style", type=str, default=None, help="JSON file for the custom preset.")
    parser.add_argument("--seed", type=int, default=12345)
    parser.add_argument("--json", action="store_true")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fmforge")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logs on stderr.")
    sub = parser.add_subparsers(dest="command", required=True)

    presets = sub.add_parser("presets", help="List the style presets.")
    presets.add_argument("--json", action="store_true")

    patch = sub.add_parser("patch", help="Generate an FM patch.")
    _add_common(patch)
    patch.add_argument("--mutations", type=int, default=0)

    pattern = sub.add_parser("pattern", help="Generate a tracker pattern.")
    _add_common(pattern)
    pattern.add_argument("--scale", type=str, default=None)
    pattern.add_argument("--root", type=str, default=None)
    pattern.add_argument("--instrument", type=int, default=0)
    pattern.add_argument("--density", type=int, default=60)
    pattern.add_argument("--complexity", type=int, default=50)
    pattern.add_argument("--octave-min", type=int, default=3)
    pattern.add_argument("--octave-max", type=int, default=5)
    pattern.add_argument("--length", type=int, default=64)
    pattern.add_argument("--rows-per-beat", type=int, default=None)
    pattern.add_argument("--rows-per-bar", type=int, default=None)
    pattern.add_argument("--groove", type=str, default=None)
    pattern.add_argument("--phrase-form", type=str, default=None)
    pattern.add_argument("--contour", type=str, default=None)
    pattern.add_argument("--motif-length", type=int, default=None)
    pattern.add_argument("--gap", type=int, default=None, help="Articulation gap; 0 keeps notes legato.")
    pattern.add_argument("--no-effects", action="store_true")
    pattern.add_argument("--fill", type=int, nargs=2, metavar=("START", "END"), default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = console_level(verbose=args.verbose, machine_output=getattr(args, "json", False))
    configure_logging(level=level, log_file=True, force=True)
    try:
        if args.command == "presets":
            return _cmd_presets(args)
        if args.command == "patch":
            return _cmd_patch(args)
        if args.command == "pattern":
            return _cmd_pattern(args)

        parser.print_help()
        return 1
    except Exception as exc:
        _LOGGER.warning("fmforge CLI failed: %s", exc, exc_info=level <= logging.DEBUG)
        log_exception("fmforge CLI", exc)
        _render_error("fmforge CLI", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
