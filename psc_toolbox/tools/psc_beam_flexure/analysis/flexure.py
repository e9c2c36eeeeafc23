from __future__ import annotations

import math
from typing import Optional, Sequence

from loguru import logger

from ..config import DEFAULT_SOLVER_SETTINGS, SolverSettings
from .cracking import cracking_check
from .equilibrium import solve
from .errors import InvalidInputError, NonConvergenceError
from .results import AnalysisResult, EquilibriumState, LayerResult
from .sections import HollowCoreSection, Section, SteelLayer, check_void_geometry

# Net tensile strain beyond yield for tension-controlled sections (ACI 318-19 Table 21.2.2)
TENSION_CONTROL_OFFSET = 0.003

PHI_TENSION_CONTROLLED = 0.90
PHI_COMPRESSION_CONTROLLED = 0.65


def phi_factor(eps_t: float, eps_ty: float) -> float:
    """Strength reduction factor per ACI 318-19 21.2.2 (other than spiral transverse reinforcement)."""
    if eps_t >= eps_ty + TENSION_CONTROL_OFFSET:
        return PHI_TENSION_CONTROLLED
    if eps_t <= eps_ty:
        return PHI_COMPRESSION_CONTROLLED
    return PHI_COMPRESSION_CONTROLLED + 0.25 * (eps_t - eps_ty) / TENSION_CONTROL_OFFSET


def classify_ductility(eps_t: float, eps_ty: float) -> str:
    if eps_t >= eps_ty + TENSION_CONTROL_OFFSET:
        return "tension-controlled"
    if eps_t >= eps_ty:
        return "transition"
    return "compression-controlled"


def validate_layers(section: Section, layers: Sequence[SteelLayer]) -> None:
    """Reject layer sets the solver cannot give a meaningful answer for."""
    if not layers:
        raise InvalidInputError("Add at least one steel reinforcement layer.")
    for i, layer in enumerate(layers, start=1):
        if not (0.0 < layer.depth <= section.h):
            raise InvalidInputError(
                f"Layer {i}: depth must be between 0 and total beam depth ({section.h:g} in)."
            )
        if not (layer.area > 0.0) or math.isinf(layer.area):
            raise InvalidInputError(f"Layer {i}: steel area must be positive.")
        if layer.fse < 0.0:
            raise InvalidInputError(f"Layer {i}: effective prestress fse cannot be negative.")
        if layer.fse > 0.0 and layer.steel.is_mild:
            raise InvalidInputError(
                f"Layer {i}: mild steel ({layer.steel.name}) cannot carry effective prestress."
            )


def extreme_tension_layer(layer_results: Sequence[LayerResult]) -> Optional[LayerResult]:
    """Deepest layer; the first one found wins a tie."""
    extreme: Optional[LayerResult] = None
    for lr in layer_results:
        if extreme is None or lr.depth > extreme.depth:
            extreme = lr
    return extreme


def check_equilibrium(state: EquilibriumState, tolerance_kip: float) -> float:
    """Global force balance |Cc - sum(Fs)|; raises NonConvergenceError above tolerance."""
    discrepancy = abs(state.Cc - state.total_steel_force)
    if not (discrepancy <= tolerance_kip):
        raise NonConvergenceError(discrepancy, tolerance_kip)
    return discrepancy


def analyze(
    section: Section,
    layers: Sequence[SteelLayer],
    settings: Optional[SolverSettings] = None,
) -> AnalysisResult:
    """Nominal and design flexural strength of a section by strain compatibility.

    Raises InvalidInputError for unusable layers and NonConvergenceError when
    the solver state fails the global equilibrium check. A result is only
    returned when it is valid in full.
    """
    settings = settings or DEFAULT_SOLVER_SETTINGS
    validate_layers(section, layers)

    warnings = []
    if isinstance(section, HollowCoreSection):
        warnings.extend(check_void_geometry(section))
        for w in warnings:
            logger.warning(w)

    state = solve(section, layers, settings)
    equilibrium_error = check_equilibrium(state, settings.equilibrium_tolerance_kip)

    # Moments about the extreme compression fiber
    Mn = sum(lr.force * lr.depth for lr in state.layer_results) - state.Cc * state.cc_centroid

    extreme = extreme_tension_layer(state.layer_results)
    if extreme is not None:
        eps_t = extreme.strain
        eps_ty = extreme.layer.steel.yield_strain
        dt = extreme.depth
    else:
        eps_t, eps_ty, dt = 0.0, 0.002, 1.0

    phi = phi_factor(eps_t, eps_ty)
    phiMn = phi * Mn
    ductility = classify_ductility(eps_t, eps_ty)
    cracking = cracking_check(section, layers, phiMn)
    if cracking.section_props.voids_ignored:
        warnings.append("Void area exceeds gross area; cracking check uses the solid gross rectangle.")

    logger.info(
        f"{section.section_type} analysis: c={state.c:.4f} in, Mn={Mn:.2f} kip-in, "
        f"phi={phi:.3f}, phiMn={phiMn:.2f} kip-in, {ductility}"
    )

    return AnalysisResult(
        section=section,
        c=state.c,
        a=state.a,
        beta1=state.beta1,
        Cc=state.Cc,
        cc_centroid=state.cc_centroid,
        layer_results=state.layer_results,
        Mn=Mn,
        phi=phi,
        phiMn=phiMn,
        epsilon_t=eps_t,
        epsilon_ty=eps_ty,
        c_over_d=state.c / dt,
        ductility=ductility,
        iterations=state.iterations,
        equilibrium_error=equilibrium_error,
        cracking=cracking,
        warnings=tuple(warnings),
    )
