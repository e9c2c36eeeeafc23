from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from .analysis.flexure import analyze
from .analysis.sections import HollowCoreSection, SandwichSection
from .calc_trace import CalcTrace, CalcVariable, Rounding, TraceMeta, _substitute, compute_step
from .config import DEFAULT_SOLVER_SETTINGS, SolverSettings, load_solver_settings
from .constants import TOOL_ID
from .models import BeamStrengthInputs, SteelLayerInputs
from .paths import compute_input_hash
from .trace_builder import build_trace


def _trace() -> CalcTrace:
    meta = TraceMeta(
        tool_id=TOOL_ID,
        tool_version="test",
        report_version="test",
        timestamp="2000-01-01T00:00:00",
        units_system="US",
        input_hash="testhash",
    )
    return CalcTrace(meta=meta)


def _scenario_inputs() -> dict:
    return {
        "section": {"section_type": "rectangular", "bw_in": 12.0, "h_in": 24.0, "fc_ksi": 6.0},
        "layers": [{"steel_id": "grade60", "area_in2": 1.53, "depth_in": 20.0}],
    }


def test_input_hash_deterministic() -> None:
    a = {"b": 2.0, "a": {"y": [1.0, 2.0], "x": 1.0}}
    b = {"a": {"x": 1.0, "y": [1.0, 2.0]}, "b": 2.0}
    assert compute_input_hash(a) == compute_input_hash(b)
    assert len(compute_input_hash(a)) == 12
    assert compute_input_hash(a) != compute_input_hash({"b": 2.5, "a": {"y": [1.0, 2.0], "x": 1.0}})


def test_default_inputs_round_trip() -> None:
    model = BeamStrengthInputs()
    assert model.section.section_type == "rectangular"
    again = BeamStrengthInputs.model_validate(model.model_dump())
    assert again == model


def test_layer_fse_defaults_from_catalog() -> None:
    layer = SteelLayerInputs(steel_id="grade270", area_in2=0.153, depth_in=3.0).to_layer()
    assert layer.fse == 170.0
    layer = SteelLayerInputs(steel_id="grade270", area_in2=0.153, depth_in=3.0, fse_ksi=150.0).to_layer()
    assert layer.fse == 150.0
    layer = SteelLayerInputs(steel_id="grade60", area_in2=0.44, depth_in=3.0).to_layer()
    assert layer.fse == 0.0
    assert layer.label == "Grade 60 Bars"


def test_section_discriminator() -> None:
    m = BeamStrengthInputs.model_validate(
        {
            "section": {"section_type": "sandwich", "ht_in": 6.0, "hg_in": 2.0, "hb_in": 6.0},
            "layers": [{"steel_id": "grade60", "area_in2": 0.5, "depth_in": 12.0}],
        }
    )
    s = m.to_section()
    assert isinstance(s, SandwichSection)
    assert s.h == 14.0

    m = BeamStrengthInputs.model_validate(
        {
            "section": {"section_type": "hollowcore", "h_in": 10.0},
            "layers": [{"steel_id": "grade270", "area_in2": 0.612, "depth_in": 8.5}],
        }
    )
    s = m.to_section()
    assert isinstance(s, HollowCoreSection)
    assert s.void_center_depth == 5.0


@pytest.mark.parametrize(
    "inputs",
    [
        {"layers": []},
        {"layers": [{"steel_id": "unobtainium", "area_in2": 1.0, "depth_in": 3.0}]},
        {"layers": [{"steel_id": "grade60", "area_in2": 1.0, "depth_in": 3.0, "fse_ksi": 50.0}]},
        {"layers": [{"steel_id": "grade60", "area_in2": 1.0, "depth_in": 7.0}]},
        {"layers": [{"steel_id": "grade60", "area_in2": 0.0, "depth_in": 3.0}]},
        {"section": {"section_type": "tbeam", "bf_in": 10.0, "bw_in": 12.0}},
        {"section": {"section_type": "doubletee", "hf_in": 24.0, "h_in": 24.0}},
        {"section": {"section_type": "box"}},
        {"section": {"section_type": "rectangular", "fc_ksi": 5.0, "extra": 1.0}},
    ],
)
def test_invalid_inputs_rejected(inputs) -> None:
    with pytest.raises(ValidationError):
        BeamStrengthInputs.model_validate(inputs)


def test_substitution_keeps_latex_commands() -> None:
    vs = [
        CalcVariable(symbol="c", description="", value=2.0, units="in", source="solver:c"),
        CalcVariable(symbol="d_i", description="", value=20.0, units="in", source="input"),
    ]
    out = _substitute("0.003\\left(\\frac{d_i}{c} - 1\\right)", vs)
    assert "\\frac" in out
    assert "\\left" in out
    assert "{20\\,\\mathrm{in}}" in out
    assert "{2\\,\\mathrm{in}}" in out


def test_rounding_rules() -> None:
    assert Rounding(rule="decimals", digits=1).apply(1767.1499) == 1767.1
    assert Rounding(rule="sigfigs", digits=3).apply(0.0269871) == pytest.approx(0.027)
    assert Rounding(rule="sigfigs", digits=3).apply(-1234.5) == -1230.0
    assert Rounding().apply(0.0) == 0.0
    assert Rounding(rule="none").apply(1.23456) == 1.23456
    assert Rounding().apply(float("inf")) == float("inf")
    with pytest.raises(ValidationError):
        Rounding(rule="banker")


def test_compute_step_records_substitution() -> None:
    tr = _trace()
    v = compute_step(
        tr,
        id="a",
        section="Concrete stress block",
        title="Stress block depth",
        output_symbol="a",
        equation_latex="a = \\beta_1 c",
        variables=[
            {"symbol": "\\beta_1", "description": "", "value": 0.75, "units": "", "source": "step:beta1"},
            {"symbol": "c", "description": "", "value": 2.0, "units": "in", "source": "solver:c"},
        ],
        compute_fn=lambda: 0.75 * 2.0,
        units="in",
        references=[{"type": "code", "ref": "ACI 318-19 22.2.2.4.1"}],
    )
    assert v == 1.5
    step = tr.step("a")
    assert step.substitution_latex == "a = 0.75 2\\,\\mathrm{in}"
    assert step.result_rounded.value == 1.5
    with pytest.raises(KeyError):
        tr.step("missing")


def test_trace_for_scenario() -> None:
    model = BeamStrengthInputs.model_validate(_scenario_inputs())
    inputs = model.model_dump()
    result = analyze(model.to_section(), model.to_layers())
    tr = build_trace(inputs, compute_input_hash(inputs), result)
    ids = [s.id for s in tr.steps]
    assert ids == ["beta1", "a", "eps_s1", "Mn", "phi", "phiMn", "fr", "Mcr", "min_strength"]
    assert tr.step("beta1").result_rounded.value == 0.75
    assert tr.step("phi").result_unrounded.value == 0.9
    assert tr.step("Mn").result_unrounded.value == pytest.approx(1767.15, rel=1e-6)
    checks = tr.step("min_strength").checks
    assert checks and checks[0].pass_fail == "PASS"
    assert tr.summary.ductility == "Tension-Controlled"
    assert tr.summary.key_outputs["phiMn"].units == "kip-in"
    assert [c.pass_fail for c in tr.summary.governing_checks] == ["PASS"]
    assert tr.solver is not None and tr.solver.iterations == result.iterations
    assert tr.tables["gross_section"][0]["Sb"] == pytest.approx(1152.0)
    json.dumps(tr.to_json_dict())


def test_solver_settings_from_user_settings(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("PSC_TOOLBOX_HOME", str(tmp_path))
    assert load_solver_settings() == DEFAULT_SOLVER_SETTINGS

    (tmp_path / "settings.json").write_text(
        json.dumps({TOOL_ID: {"solver": {"max_iterations": 200, "equilibrium_tolerance_kip": 0.05}}}),
        encoding="utf-8",
    )
    s = load_solver_settings()
    assert s.max_iterations == 200
    assert s.equilibrium_tolerance_kip == 0.05
    assert s.force_tolerance_kip == 1e-6

    (tmp_path / "settings.json").write_text(json.dumps({TOOL_ID: {"solver": {"max_iterations": 0}}}), encoding="utf-8")
    assert load_solver_settings() == DEFAULT_SOLVER_SETTINGS

    (tmp_path / "settings.json").write_text("{not json", encoding="utf-8")
    assert load_solver_settings() == DEFAULT_SOLVER_SETTINGS


@pytest.mark.parametrize(
    "content",
    [
        {TOOL_ID: ["oops"]},
        {TOOL_ID: {"solver": ["oops"]}},
        {TOOL_ID: "fast"},
        ["not", "an", "object"],
    ],
)
def test_solver_settings_wrong_shape_use_defaults(tmp_path, monkeypatch, content) -> None:
    monkeypatch.setenv("PSC_TOOLBOX_HOME", str(tmp_path))
    (tmp_path / "settings.json").write_text(json.dumps(content), encoding="utf-8")
    assert load_solver_settings() == DEFAULT_SOLVER_SETTINGS


def test_solver_settings_are_frozen() -> None:
    s = SolverSettings()
    with pytest.raises(ValidationError):
        s.max_iterations = 10
