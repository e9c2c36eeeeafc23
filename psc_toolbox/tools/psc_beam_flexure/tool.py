from __future__ import annotations

import traceback
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from psc_toolbox.core.tool_base import RunResult, ToolMeta

from .analysis.flexure import analyze
from .analysis.steel import curve
from .config import load_solver_settings
from .constants import CURVE_POINTS, TOOL_ID, TOOL_VERSION
from .db.steel_presets import STEEL_TYPES
from .exports import export_all
from .logging_utils import get_run_logger, remove_run_logger_sink
from .models import BeamStrengthInputs
from .paths import compute_input_hash, create_run_dir
from .trace_builder import build_trace


class PSCBeamFlexureTool:
    """Flexural strength of RC / PSC sections by strain compatibility.

    run() validates inputs, solves the section, writes the calc package and
    returns a results dict. Failures come back as {"ok": False, ...} with no
    result fields.
    """

    meta = ToolMeta(
        id=TOOL_ID,
        name="PSC Beam Flexural Strength",
        category="Concrete",
        version=TOOL_VERSION,
        description="Nominal and design moment strength of reinforced and prestressed concrete sections "
        "(power-formula steel, ACI 318-19 stress block) with cracking moment check.",
    )

    InputModel = BeamStrengthInputs

    def default_inputs(self) -> dict:
        return self.InputModel().model_dump()

    def steel_curves(self, num_points: int = CURVE_POINTS) -> Dict[str, List[Tuple[float, float]]]:
        """Reference stress-strain curve for every catalog steel, keyed by steel id."""
        return {sid: curve(steel, num_points) for sid, steel in STEEL_TYPES.items()}

    def run(self, inputs: Dict[str, Any]) -> RunResult:
        try:
            model = self.InputModel.model_validate(inputs)
        except ValidationError as e:
            return {"ok": False, "error": str(e), "traceback": traceback.format_exc()}

        inputs_norm = model.model_dump()
        input_hash = compute_input_hash(inputs_norm)
        run_dir = create_run_dir(self.meta.id, input_hash)
        log, log_sink = get_run_logger(run_dir, self.meta.id, input_hash)

        try:
            log.info("Starting flexural strength run")
            log.info(f"Inputs (validated): {inputs_norm}")

            settings = load_solver_settings()
            result = analyze(model.to_section(), model.to_layers(), settings)
            trace = build_trace(inputs_norm, input_hash, result, settings)

            results: RunResult = {
                "ok": True,
                "run_dir": str(run_dir),
                "input_hash": input_hash,
                "outputs": result.as_dict(),
            }
            used = {lr.layer.steel.id for lr in result.layer_results}
            curves = {sid: pts for sid, pts in self.steel_curves().items() if sid in used}
            out_paths = export_all(trace, results, run_dir, curves)
            results["artifacts"] = {k: str(v) for k, v in out_paths.items()}

            log.info("Run complete")
            return results

        except Exception as e:
            log.exception("Run failed")
            return {
                "ok": False,
                "run_dir": str(run_dir),
                "input_hash": input_hash,
                "error": str(e),
                "traceback": traceback.format_exc(),
            }

        finally:
            remove_run_logger_sink(log_sink)


TOOL = PSCBeamFlexureTool()
