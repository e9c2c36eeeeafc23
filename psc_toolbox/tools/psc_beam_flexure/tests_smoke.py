from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest
from loguru import logger
from openpyxl import load_workbook

from psc_toolbox.__main__ import main as cli_main
from psc_toolbox.core.loader import discover_tools, get_tool

from . import tool as tool_module
from .constants import TOOL_ID
from .tool import TOOL


@pytest.fixture(autouse=True)
def _temp_user_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("PSC_TOOLBOX_HOME", raising=False)
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))  # force outputs to temp
    return tmp_path


def _assert_artifacts(run_dir: Path) -> None:
    required = [
        "calc_trace.json",
        "results.json",
        "results.xlsx",
        "stress_strain_curves.csv",
        "mathcad_inputs.csv",
        "run.log",
    ]
    missing = [f for f in required if not (run_dir / f).exists()]
    assert not missing, f"Missing artifacts in {run_dir}: {missing}"


def test_smoke_default_inputs() -> None:
    res = TOOL.run(TOOL.default_inputs())
    assert res["ok"] is True
    run_dir = Path(res["run_dir"])
    _assert_artifacts(run_dir)
    assert res["outputs"]["phiMn"] > 0.0
    assert set(res["artifacts"]) >= {"calc_trace", "results_xlsx"}


def test_smoke_rectangular_scenario(_temp_user_dir) -> None:
    inputs = {
        "section": {"section_type": "rectangular", "bw_in": 12.0, "h_in": 24.0, "fc_ksi": 6.0},
        "layers": [{"steel_id": "grade60", "area_in2": 1.53, "depth_in": 20.0, "name": "4 #6"}],
    }
    res = TOOL.run(inputs)
    assert res["ok"] is True
    out = res["outputs"]
    assert out["c"] == pytest.approx(2.0, rel=1e-6)
    assert out["phi"] == 0.9
    assert out["ductilityLabel"] == "Tension-Controlled"
    assert out["cracking"]["passes_min_strength"] is True

    run_dir = Path(res["run_dir"])
    assert run_dir.parent == _temp_user_dir / "PSCToolbox" / TOOL_ID / "runs"
    _assert_artifacts(run_dir)

    saved = json.loads((run_dir / "results.json").read_text(encoding="utf-8"))
    assert saved["input_hash"] == res["input_hash"]
    assert saved["outputs"]["Mn"] == pytest.approx(1767.15, rel=1e-6)

    trace = json.loads((run_dir / "calc_trace.json").read_text(encoding="utf-8"))
    assert trace["meta"]["input_hash"] == res["input_hash"]
    assert trace["meta"]["code_basis"] == "ACI 318-19"

    wb = load_workbook(run_dir / "results.xlsx")
    assert wb.sheetnames == ["Summary", "Inputs", "Assumptions", "Calcs", "Layers", "Tables"]
    layers = list(wb["Layers"].iter_rows(values_only=True))
    assert layers[1][0] == "4 #6"
    assert layers[1][6] == pytest.approx(60.0)

    with (run_dir / "stress_strain_curves.csv").open(encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert {r["steel_id"] for r in rows} == {"grade60"}
    assert len(rows) == 201

    assert "Starting flexural strength run" in (run_dir / "run.log").read_text(encoding="utf-8")


def test_smoke_prestressed_tbeam() -> None:
    inputs = {
        "section": {"section_type": "tbeam", "bf_in": 48.0, "bw_in": 8.0, "hf_in": 4.0, "h_in": 32.0, "fc_ksi": 7.0},
        "layers": [
            {"steel_id": "grade270", "area_in2": 1.836, "depth_in": 29.0},
            {"steel_id": "grade60", "area_in2": 0.62, "depth_in": 2.0},
        ],
    }
    res = TOOL.run(inputs)
    assert res["ok"] is True
    out = res["outputs"]
    assert out["hasPrestress"] is True
    assert out["cracking"]["P"] == pytest.approx(170.0 * 1.836)
    assert out["equilibriumError"] < 1e-3
    _assert_artifacts(Path(res["run_dir"]))


def test_invalid_inputs_withhold_results() -> None:
    res = TOOL.run({"layers": []})
    assert res["ok"] is False
    assert "at least one" in res["error"]
    assert "outputs" not in res
    assert "run_dir" not in res


def test_non_convergence_withholds_results(_temp_user_dir) -> None:
    settings_file = _temp_user_dir / "PSCToolbox" / "settings.json"
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    settings_file.write_text(json.dumps({TOOL_ID: {"solver": {"max_iterations": 1}}}), encoding="utf-8")

    res = TOOL.run(TOOL.default_inputs())
    assert res["ok"] is False
    assert "did not converge" in res["error"]
    assert "outputs" not in res
    run_dir = Path(res["run_dir"])
    assert not (run_dir / "results.json").exists()
    assert "Run failed" in (run_dir / "run.log").read_text(encoding="utf-8")


def test_malformed_tool_settings_fall_back_to_defaults(_temp_user_dir) -> None:
    settings_file = _temp_user_dir / "PSCToolbox" / "settings.json"
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    settings_file.write_text(json.dumps({TOOL_ID: ["oops"]}), encoding="utf-8")

    res = TOOL.run(TOOL.default_inputs())
    assert isinstance(res, dict)
    assert res["ok"] is True
    _assert_artifacts(Path(res["run_dir"]))


def test_unexpected_error_is_reported_not_raised(monkeypatch) -> None:
    def _disk_full(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(tool_module, "export_all", _disk_full)
    res = TOOL.run(TOOL.default_inputs())
    assert res["ok"] is False
    assert "disk full" in res["error"]
    assert "OSError" in res["traceback"]
    assert "outputs" not in res
    assert "Run failed" in (Path(res["run_dir"]) / "run.log").read_text(encoding="utf-8")


def test_steel_curves() -> None:
    curves = TOOL.steel_curves(20)
    assert set(curves) == {"grade60", "grade65", "grade70", "grade150", "grade270", "grade250"}
    assert all(len(pts) == 21 for pts in curves.values())


def test_tool_discovery() -> None:
    tools = discover_tools()
    assert any(t.meta.id == TOOL_ID for t in tools)
    assert get_tool(TOOL_ID).meta.name == "PSC Beam Flexural Strength"
    with pytest.raises(KeyError):
        get_tool("no_such_tool")


def test_cli(capsys, _temp_user_dir) -> None:
    try:
        assert cli_main(["--quiet", "list"]) == 0
        assert TOOL_ID in capsys.readouterr().out

        assert cli_main(["--quiet", "defaults", TOOL_ID]) == 0
        assert json.loads(capsys.readouterr().out) == TOOL.default_inputs()

        inputs_file = _temp_user_dir / "inputs.json"
        inputs_file.write_text(json.dumps({"layers": [{"steel_id": "grade60", "area_in2": 0.4, "depth_in": 5.0}]}), encoding="utf-8")
        assert cli_main(["--quiet", "run", TOOL_ID, "--inputs", str(inputs_file)]) == 0
        assert json.loads(capsys.readouterr().out)["ok"] is True

        assert cli_main(["--quiet", "run", "no_such_tool"]) == 2
        assert (_temp_user_dir / "PSCToolbox" / "logs" / "psc_toolbox.log").exists()
    finally:
        logger.remove()
