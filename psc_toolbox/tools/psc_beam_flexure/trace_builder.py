from __future__ import annotations

from typing import Any, Dict, Optional

from .analysis.cracking import MIN_STRENGTH_FACTOR, modulus_of_rupture
from .analysis.equilibrium import beta1
from .analysis.flexure import phi_factor
from .analysis.results import DUCTILITY_LABELS, AnalysisResult
from .calc_trace import CalcCheck, CalcTrace, Quantity, Rounding, SolverInfo, TraceAssumption, TraceInput, compute_step
from .config import SolverSettings
from .constants import CODE_BASIS, DEFAULT_UNITS_SYSTEM, REPORT_VERSION, TOOL_ID, TOOL_VERSION

ASSUMPTIONS = [
    TraceAssumption(id="A1", text="Plane sections remain plane; maximum usable concrete strain 0.003 (ACI 318-19 22.2.2.1)."),
    TraceAssumption(id="A2", text="Concrete stress 0.85 f'c uniformly distributed over an equivalent depth a = beta1*c (ACI 318-19 22.2.2.4)."),
    TraceAssumption(id="A3", text="Concrete tensile strength neglected in flexural strength (ACI 318-19 22.2.2.2)."),
    TraceAssumption(id="A4", text="Steel stress from the Devalapura-Tadros power formula, capped at fy (mild) or fpu (prestressing)."),
    TraceAssumption(id="A5", text="Prestressing strain superposed as fse/Es on the flexural strain; bonded tendons."),
]


def _units_for(key: str) -> str:
    if key.endswith("_ksi"):
        return "ksi"
    if key.endswith("_in2"):
        return "in^2"
    if key.endswith("_in"):
        return "in"
    return ""


def _add_inputs(trace: CalcTrace, inputs: Dict[str, Any]) -> None:
    for k, v in inputs.get("section", {}).items():
        if v is None:
            continue
        trace.inputs.append(TraceInput(id=f"section.{k}", label=k, value=v, units=_units_for(k), source="user"))
    for i, layer in enumerate(inputs.get("layers", []), start=1):
        for k, v in layer.items():
            if v is None or v == "":
                continue
            trace.inputs.append(TraceInput(id=f"layer{i}.{k}", label=f"Layer {i} {k}", value=v, units=_units_for(k), source="user"))


def _min_strength_check(threshold: float, phiMn: float, passes: bool) -> CalcCheck:
    return CalcCheck(
        label="phiMn >= 1.2Mcr",
        demand=Quantity(value=threshold, units="kip-in"),
        capacity=Quantity(value=phiMn, units="kip-in"),
        ratio=threshold / phiMn if phiMn > 0.0 else float("inf"),
        pass_fail="PASS" if passes else "FAIL",
    )


def build_trace(
    inputs: Dict[str, Any],
    input_hash: str,
    result: AnalysisResult,
    settings: Optional[SolverSettings] = None,
) -> CalcTrace:
    """Audit trail for one analysis: the closed-form steps around the iterative solve."""
    trace = CalcTrace.new(
        tool_id=TOOL_ID,
        tool_version=TOOL_VERSION,
        report_version=REPORT_VERSION,
        units_system=DEFAULT_UNITS_SYSTEM,
        code_basis=CODE_BASIS,
        input_hash=input_hash,
    )
    _add_inputs(trace, inputs)
    trace.assumptions.extend(ASSUMPTIONS)
    trace.solver = SolverInfo(
        iterations=result.iterations,
        c_in=result.c,
        equilibrium_error_kip=result.equilibrium_error,
        settings=settings.model_dump() if settings is not None else {},
    )

    fc = result.fc
    compute_step(
        trace,
        id="beta1",
        section="Concrete stress block",
        title="Equivalent rectangular stress block factor β1",
        output_symbol="\\beta_1",
        equation_latex="\\beta_1 = 0.85 - 0.05\\,(f'_c - 4)\\;\\; [0.65 \\le \\beta_1 \\le 0.85]",
        variables=[{"symbol": "f'_c", "description": "Concrete compressive strength", "value": fc, "units": "ksi", "source": "input:section.fc_ksi"}],
        compute_fn=lambda: beta1(fc),
        units="",
        rounding=Rounding(rule="decimals", digits=3),
        references=[{"type": "code", "ref": "ACI 318-19 Table 22.2.2.4.3"}],
    )

    compute_step(
        trace,
        id="a",
        section="Concrete stress block",
        title="Stress block depth at the equilibrium neutral axis",
        output_symbol="a",
        equation_latex="a = \\beta_1 c",
        variables=[
            {"symbol": "\\beta_1", "description": "Stress block factor", "value": result.beta1, "units": "", "source": "step:beta1"},
            {"symbol": "c", "description": "Neutral axis depth (bisection on force equilibrium)", "value": result.c, "units": "in", "source": "solver:c"},
        ],
        compute_fn=lambda: result.beta1 * result.c,
        units="in",
        references=[{"type": "code", "ref": "ACI 318-19 22.2.2.4.1"}],
    )

    for i, lr in enumerate(result.layer_results, start=1):
        compute_step(
            trace,
            id=f"eps_s{i}",
            section="Strain compatibility",
            title=f"Total strain in layer {i} ({lr.layer.label})",
            output_symbol=f"\\varepsilon_{{s{i}}}",
            equation_latex="\\varepsilon_s = 0.003\\left(\\frac{d_i}{c} - 1\\right) + \\frac{f_{se}}{E_s}",
            variables=[
                {"symbol": "d_i", "description": "Layer depth", "value": lr.depth, "units": "in", "source": f"input:layer{i}.depth_in"},
                {"symbol": "c", "description": "Neutral axis depth", "value": result.c, "units": "in", "source": "solver:c"},
                {"symbol": "f_{se}", "description": "Effective prestress", "value": lr.fse, "units": "ksi", "source": f"input:layer{i}.fse_ksi"},
                {"symbol": "E_s", "description": "Steel modulus", "value": lr.layer.steel.Es, "units": "ksi", "source": f"db:{lr.layer.steel.id}"},
            ],
            compute_fn=lambda lr=lr: lr.strain,
            units="",
            references=[{"type": "code", "ref": "ACI 318-19 22.2.1.2"}],
        )

    compute_step(
        trace,
        id="Mn",
        section="Flexural strength",
        title="Nominal moment about the extreme compression fiber",
        output_symbol="M_n",
        equation_latex="M_n = \\sum F_{si} d_i - C_c\\,\\bar{y}_c",
        variables=[
            {"symbol": "\\sum F_{si} d_i", "description": "Sum of steel force moments", "value": sum(lr.force * lr.depth for lr in result.layer_results), "units": "kip-in", "source": "solver:layers"},
            {"symbol": "C_c", "description": "Concrete compression force", "value": result.Cc, "units": "kip", "source": "solver:Cc"},
            {"symbol": "\\bar{y}_c", "description": "Compression centroid depth", "value": result.cc_centroid, "units": "in", "source": "solver:ccCentroid"},
        ],
        compute_fn=lambda: result.Mn,
        units="kip-in",
        rounding=Rounding(rule="decimals", digits=1),
        references=[{"type": "derived", "ref": "Equilibrium of internal forces, ACI 318-19 22.2"}],
    )

    compute_step(
        trace,
        id="phi",
        section="Strength reduction factor",
        title="Strength reduction factor φ from net tensile strain εt",
        output_symbol="\\phi",
        equation_latex="\\phi = 0.65 + 0.25\\,(\\varepsilon_t - \\varepsilon_{ty})/0.003 \\;\\; [0.65 \\le \\phi \\le 0.90]",
        variables=[
            {"symbol": "\\varepsilon_t", "description": "Net tensile strain in extreme tension layer", "value": result.epsilon_t, "units": "", "source": "solver:epsilonT"},
            {"symbol": "\\varepsilon_{ty}", "description": "Yield strain fpy/Es of that layer", "value": result.epsilon_ty, "units": "", "source": "db:fpy/Es"},
        ],
        compute_fn=lambda: phi_factor(result.epsilon_t, result.epsilon_ty),
        units="",
        rounding=Rounding(rule="decimals", digits=3),
        references=[{"type": "code", "ref": "ACI 318-19 Table 21.2.2"}],
    )

    phiMn = compute_step(
        trace,
        id="phiMn",
        section="Flexural strength",
        title="Design flexural strength",
        output_symbol="\\phi M_n",
        equation_latex="\\phi M_n = \\phi \\cdot M_n",
        variables=[
            {"symbol": "\\phi", "description": "Strength reduction factor", "value": result.phi, "units": "", "source": "step:phi"},
            {"symbol": "M_n", "description": "Nominal moment", "value": result.Mn, "units": "kip-in", "source": "step:Mn"},
        ],
        compute_fn=lambda: result.phi * result.Mn,
        units="kip-in",
        rounding=Rounding(rule="decimals", digits=1),
        references=[{"type": "code", "ref": "ACI 318-19 21.2.1"}],
    )

    cr = result.cracking
    if cr is not None:
        compute_step(
            trace,
            id="fr",
            section="Cracking moment",
            title="Modulus of rupture",
            output_symbol="f_r",
            equation_latex="f_r = 7.5\\sqrt{1000\\,f'_c}/1000",
            variables=[{"symbol": "f'_c", "description": "Concrete compressive strength", "value": fc, "units": "ksi", "source": "input:section.fc_ksi"}],
            compute_fn=lambda: modulus_of_rupture(fc),
            units="ksi",
            references=[{"type": "code", "ref": "ACI 318-19 19.2.3.1"}],
        )
        compute_step(
            trace,
            id="Mcr",
            section="Cracking moment",
            title="Cracking moment including effective prestress",
            output_symbol="M_{cr}",
            equation_latex="M_{cr} = S_b\\,(f_r + P/A + P e_p/S_b)",
            variables=[
                {"symbol": "S_b", "description": "Bottom-fiber section modulus", "value": cr.section_props.Sb, "units": "in^3", "source": "derived:gross section"},
                {"symbol": "f_r", "description": "Modulus of rupture", "value": cr.fr, "units": "ksi", "source": "step:fr"},
                {"symbol": "P", "description": "Effective prestress force", "value": cr.P, "units": "kip", "source": "derived:sum(fse*Aps)"},
                {"symbol": "A", "description": "Gross area", "value": cr.section_props.A, "units": "in^2", "source": "derived:gross section"},
                {"symbol": "e_p", "description": "Prestress eccentricity", "value": cr.e, "units": "in", "source": "derived:yps - yCg"},
            ],
            compute_fn=lambda: cr.Mcr,
            units="kip-in",
            rounding=Rounding(rule="decimals", digits=1),
            references=[{"type": "derived", "ref": "Elastic stress at extreme tension fiber equal to fr"}],
        )
        compute_step(
            trace,
            id="min_strength",
            section="Cracking moment",
            title="Minimum flexural strength φMn ≥ 1.2 Mcr",
            output_symbol="1.2M_{cr}",
            equation_latex="1.2M_{cr} = 1.2 \\cdot M_{cr}",
            variables=[{"symbol": "M_{cr}", "description": "Cracking moment", "value": cr.Mcr, "units": "kip-in", "source": "step:Mcr"}],
            compute_fn=lambda: MIN_STRENGTH_FACTOR * cr.Mcr,
            units="kip-in",
            rounding=Rounding(rule="decimals", digits=1),
            references=[{"type": "code", "ref": "ACI 318-19 9.6.2.1"}],
            checks_builder=lambda thr: [_min_strength_check(thr, phiMn, cr.passes_min_strength)],
        )

    trace.tables["layers"] = [lr.as_dict() for lr in result.layer_results]
    if cr is not None:
        trace.tables["gross_section"] = [cr.section_props.as_dict()]

    trace.summary.warnings = list(result.warnings)
    trace.summary.ductility = DUCTILITY_LABELS[result.ductility]
    for name, value, units in (
        ("c", result.c, "in"),
        ("a", result.a, "in"),
        ("Mn", result.Mn, "kip-in"),
        ("phi", result.phi, ""),
        ("phiMn", result.phiMn, "kip-in"),
        ("phiMnFt", result.phiMnFt, "kip-ft"),
        ("epsilonT", result.epsilon_t, ""),
    ):
        trace.key_output(name, value, units)
    if cr is not None:
        trace.key_output("Mcr", cr.Mcr, "kip-in")
    trace.summary.governing_checks = trace.all_checks()
    return trace
