from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from .calc_trace import CalcTrace


def _autosize(ws) -> None:
    for col in range(1, ws.max_column + 1):
        max_len = 0
        for row in range(1, min(ws.max_row, 200) + 1):  # cap scanning
            v = ws.cell(row=row, column=col).value
            if v is None:
                continue
            max_len = max(max_len, len(str(v)))
        ws.column_dimensions[get_column_letter(col)].width = min(max(10, max_len + 2), 70)


def _write_json(path: Path, obj: Any) -> None:
    path.write_text(json.dumps(obj, indent=2), encoding="utf-8")


def _write_workbook(path: Path, trace: CalcTrace, results: Dict[str, Any]) -> None:
    wb = Workbook()

    ws_sum = wb.active
    ws_sum.title = "Summary"
    ws_sum.append(["key", "value", "units"])
    for k, q in trace.summary.key_outputs.items():
        ws_sum.append([k, q.value, q.units])
    if trace.summary.ductility:
        ws_sum.append(["ductility", trace.summary.ductility, ""])
    if trace.solver is not None:
        ws_sum.append(["solver iterations", trace.solver.iterations, ""])
        ws_sum.append(["equilibrium error", trace.solver.equilibrium_error_kip, "kip"])
    for chk in trace.summary.governing_checks:
        ws_sum.append([chk.label, chk.pass_fail, f"ratio {chk.ratio:.3f}"])
    for w in trace.summary.warnings:
        ws_sum.append(["warning", w, ""])
    _autosize(ws_sum)

    ws_in = wb.create_sheet("Inputs")
    ws_in.append(["id", "label", "value", "units", "source"])
    for i in trace.inputs:
        ws_in.append([i.id, i.label, i.value, i.units, i.source])
    _autosize(ws_in)

    ws_a = wb.create_sheet("Assumptions")
    ws_a.append(["id", "text"])
    for a in trace.assumptions:
        ws_a.append([a.id, a.text])
    _autosize(ws_a)

    ws_c = wb.create_sheet("Calcs")
    ws_c.append(["id", "section", "title", "reference", "equation", "substitution", "result_rounded", "units", "check"])
    for st in trace.steps:
        refs = "; ".join(f"{r.type}:{r.ref}" for r in st.references)
        ws_c.append([
            st.id,
            st.section,
            st.title,
            refs,
            st.equation_latex,
            st.substitution_latex,
            st.result_rounded.value,
            st.result_rounded.units,
            "; ".join(f"{c.label}: {c.pass_fail}" for c in st.checks),
        ])
    _autosize(ws_c)

    ws_l = wb.create_sheet("Layers")
    cols = ["name", "steel_id", "area", "depth", "fse", "strain", "stress", "force"]
    ws_l.append(cols)
    for row in results.get("outputs", {}).get("layerResults", []):
        ws_l.append([row.get(c) for c in cols])
    _autosize(ws_l)

    ws_t = wb.create_sheet("Tables")
    ws_t.append(["table_name", "json"])
    for k, v in trace.tables.items():
        ws_t.append([k, json.dumps(v, ensure_ascii=False)])
    _autosize(ws_t)

    wb.save(path)


def _write_curves(path: Path, curves: Dict[str, Sequence[Tuple[float, float]]]) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["steel_id", "strain", "stress_ksi"])
        for steel_id, pts in curves.items():
            for eps, fs in pts:
                w.writerow([steel_id, f"{eps:.8g}", f"{fs:.8g}"])


def export_all(
    trace: CalcTrace,
    results: Dict[str, Any],
    run_dir: Path,
    curves: Dict[str, Sequence[Tuple[float, float]]],
) -> Dict[str, Path]:
    """Write the calculation package for one run and return the artifact paths."""
    run_dir.mkdir(parents=True, exist_ok=True)
    out: Dict[str, Path] = {
        "calc_trace": run_dir / "calc_trace.json",
        "results_json": run_dir / "results.json",
        "results_xlsx": run_dir / "results.xlsx",
        "curves_csv": run_dir / "stress_strain_curves.csv",
        "mathcad_inputs": run_dir / "mathcad_inputs.csv",
    }

    _write_json(out["calc_trace"], trace.to_json_dict())
    _write_json(out["results_json"], results)
    _write_workbook(out["results_xlsx"], trace, results)
    _write_curves(out["curves_csv"], curves)

    # Mathcad handoff: inputs + key outputs
    with out["mathcad_inputs"].open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["id", "label", "value", "units", "source"])
        for i in trace.inputs:
            w.writerow([i.id, i.label, i.value, i.units, i.source])
        w.writerow([])
        w.writerow(["key", "value", "units", "source"])
        w.writerows([k, q.value, q.units, "summary"] for k, q in trace.summary.key_outputs.items())

    return out
