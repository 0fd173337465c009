import json

import pytest
from rich.console import Console

from fmforge import cli


@pytest.fixture(autouse=True)
def _log_dir(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("FMFORGE_LOG_DIR", str(tmp_path))


def test_presets_table(capsys, monkeypatch) -> None:
    monkeypatch.setattr(cli, "_CONSOLE", Console(width=160))
    assert cli.main(["presets"]) == 0
    out = capsys.readouterr().out
    assert "Thunder Force" in out
    assert "Custom" in out


def test_patch_command(capsys) -> None:
    assert cli.main(["patch", "--role", "bass", "--style", "sonic", "--seed", "3"]) == 0
    out = capsys.readouterr().out
    assert "Algo " in out
    assert "multiplier" in out


def test_patch_json(capsys) -> None:
    assert cli.main(["patch", "--json", "--mutations", "2"]) == 0
    out = capsys.readouterr().out
    assert '"algorithm"' in out
    assert '"operators"' in out


def test_pattern_table(capsys) -> None:
    args = ["pattern", "--role", "lead", "--style", "0", "--length", "32", "--root", "C", "--scale", "major"]
    assert cli.main(args) == 0
    out = capsys.readouterr().out
    assert "Lead" in out
    assert "C Major" in out


def test_pattern_fill(capsys) -> None:
    assert cli.main(["pattern", "--role", "pad", "--fill", "16", "32", "--gap", "0"]) == 0


def test_custom_style_file(tmp_path, capsys) -> None:
    path = tmp_path / "style.json"
    path.write_text(json.dumps({"name": "Mine", "chromaticism": 0.0}), encoding="utf-8")
    assert cli.main(["pattern", "--custom-style", str(path), "--length", "16"]) == 0
    assert "Mine" in capsys.readouterr().out


def test_unknown_role_fails(tmp_path, capsys) -> None:
    assert cli.main(["patch", "--role", "kazoo"]) == 1
    assert "Unknown role label" in capsys.readouterr().err
    assert (tmp_path / "fmforge.log").exists()


def test_unknown_style_fails() -> None:
    assert cli.main(["patch", "--style", "Vaporwave"]) == 1


def test_bad_custom_style_fails(tmp_path) -> None:
    path = tmp_path / "style.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert cli.main(["pattern", "--custom-style", str(path)]) == 1


def test_oversized_fill_fails() -> None:
    assert cli.main(["pattern", "--fill", "0", "400"]) == 1


def test_preset_names_do_not_wrap() -> None:
    table = cli._presets_table(cli.StyleEngine())
    assert table.columns[1].header == "Name"
    assert table.columns[1].no_wrap


def test_json_output_is_clean(capsys) -> None:
    assert cli.main(["patch", "--json", "--role", "bass"]) == 0
    captured = capsys.readouterr()
    assert json.loads(captured.out)["name"] == "Gen Bass"
    assert "patch (seed" not in captured.err


def test_table_output_logs_progress(capsys) -> None:
    assert cli.main(["patch", "--role", "bass"]) == 0
    assert "patch (seed" in capsys.readouterr().err


def test_verbose_flag_shows_debug(capsys) -> None:
    assert cli.main(["--verbose", "pattern", "--length", "16"]) == 0
    assert "Generated" in capsys.readouterr().err


def test_run_writes_log_file(tmp_path) -> None:
    assert cli.main(["patch"]) == 0
    assert "patch (seed" in (tmp_path / "fmforge.log").read_text(encoding="utf-8")
