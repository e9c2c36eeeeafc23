from __future__ import annotations

from typing import Optional, Sequence, Tuple

from loguru import logger

from ..config import DEFAULT_SOLVER_SETTINGS, SolverSettings
from .geometry import compression_centroid, concrete_compression
from .results import EquilibriumState, LayerResult
from .sections import Section, SteelLayer
from .steel import strain_at_depth, stress


def beta1(fc: float) -> float:
    """Stress block factor per ACI 318-19 Table 22.2.2.4.3 (fc in ksi)."""
    if fc <= 4.0:
        return 0.85
    if fc >= 8.0:
        return 0.65
    return 0.85 - 0.05 * (fc - 4.0)


def layer_state(layer: SteelLayer, c: float) -> LayerResult:
    eps = strain_at_depth(layer.depth, c, layer.fse, layer.steel.Es)
    fs = stress(eps, layer.steel)
    return LayerResult(layer=layer, strain=eps, stress=fs, force=fs * layer.area)


def _residual(section: Section, layers: Sequence[SteelLayer], c: float, b1: float) -> Tuple[float, float]:
    """(Cc, Cc - sum(Fs)) at neutral-axis depth c. Compression positive."""
    Cc = concrete_compression(section.fc, b1 * c, section)
    steel_force = sum(layer_state(layer, c).force for layer in layers)
    return Cc, Cc - steel_force


def solve(
    section: Section,
    layers: Sequence[SteelLayer],
    settings: Optional[SolverSettings] = None,
) -> EquilibriumState:
    """Neutral-axis depth c from force equilibrium by bisection on [c_min, h].

    Bisection rather than Newton: the compression area has kinks at the
    geometric transition depths, so the residual is monotone in c but not
    smoothly differentiable.

    Residual > 0 (concrete compression exceeds steel tension) means c is too
    deep, so the upper bound moves down; otherwise the lower bound moves up.
    Exhausting the iteration cap is not an error here; callers check global
    equilibrium on the returned state.
    """
    settings = settings or DEFAULT_SOLVER_SETTINGS
    b1 = beta1(section.fc)

    c_lo = settings.c_min_in
    c_hi = section.h
    c = section.h / 2.0
    residual = float("nan")
    converged = False
    iterations = 0

    for iterations in range(1, settings.max_iterations + 1):
        c = 0.5 * (c_lo + c_hi)
        _, residual = _residual(section, layers, c, b1)
        if abs(residual) < settings.force_tolerance_kip:
            converged = True
            break
        if residual > 0.0:
            c_hi = c
        else:
            c_lo = c

    if converged:
        logger.debug(f"Neutral axis converged: c={c:.6f} in after {iterations} iterations (residual {residual:.3e} kip)")
    else:
        logger.warning(
            f"Neutral-axis bisection hit {settings.max_iterations} iterations without meeting "
            f"{settings.force_tolerance_kip:g} kip tolerance (c={c:.6f} in, residual {residual:.3e} kip)"
        )

    a = b1 * c
    return EquilibriumState(
        c=c,
        a=a,
        beta1=b1,
        Cc=concrete_compression(section.fc, a, section),
        cc_centroid=compression_centroid(a, section),
        layer_results=tuple(layer_state(layer, c) for layer in layers),
        iterations=iterations,
        residual=residual,
        converged=converged,
    )
