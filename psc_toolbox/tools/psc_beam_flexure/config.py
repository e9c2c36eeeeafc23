from __future__ import annotations

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, confloat, conint

from psc_toolbox.core.settings import load_settings

from .constants import TOOL_ID


class SolverSettings(BaseModel):
    """Numerical controls for the neutral-axis search and the post-hoc equilibrium check."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_iterations: conint(ge=1) = Field(500, description="Bisection iteration cap")
    force_tolerance_kip: confloat(gt=0) = Field(1e-6, description="Force residual that stops the bisection", json_schema_extra={"units": "kip"})
    c_min_in: confloat(gt=0) = Field(0.01, description="Lower bound of the neutral-axis search", json_schema_extra={"units": "in"})
    equilibrium_tolerance_kip: confloat(gt=0) = Field(0.1, description="Largest |Cc - sum(Fs)| accepted as a valid result", json_schema_extra={"units": "kip"})


DEFAULT_SOLVER_SETTINGS = SolverSettings()


def load_solver_settings() -> SolverSettings:
    """Solver settings from the user settings file (key = tool id), defaults otherwise."""
    tool_cfg = load_settings().get(TOOL_ID, {})
    raw = tool_cfg.get("solver", {}) if isinstance(tool_cfg, dict) else tool_cfg
    if not isinstance(raw, dict):
        logger.warning(f"Solver settings for {TOOL_ID} are not a JSON object; using defaults.")
        return DEFAULT_SOLVER_SETTINGS
    try:
        return SolverSettings.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Invalid solver settings in user settings file; using defaults. {e}")
        return DEFAULT_SOLVER_SETTINGS
