from __future__ import annotations

import math
from typing import Iterable, Tuple

from loguru import logger

from .results import GrossProperties
from .sections import (
    DoubleTeeSection,
    HollowCoreSection,
    RectangularSection,
    SandwichSection,
    Section,
    TBeamSection,
    unsupported_section,
)

# (area, centroid depth from top, moment of inertia about own centroid)
_Part = Tuple[float, float, float]


def _rect(b: float, height: float, top: float) -> _Part:
    return b * height, top + height / 2.0, b * height ** 3 / 12.0


def _combine(parts: Iterable[_Part]) -> Tuple[float, float, float]:
    """Composite area, centroid and Ig by the parallel-axis theorem.

    Parts with negative area are holes.
    """
    parts = list(parts)
    A = sum(p[0] for p in parts)
    y_cg = sum(p[0] * p[1] for p in parts) / A
    Ig = sum(p[2] + p[0] * (p[1] - y_cg) ** 2 for p in parts)
    return A, y_cg, Ig


def _parts(section: Section) -> Tuple[list, bool]:
    """Decompose a section into rectangles (and negative voids)."""
    if isinstance(section, RectangularSection):
        return [_rect(section.bw, section.h, 0.0)], False
    if isinstance(section, TBeamSection):
        parts = [_rect(section.bf, section.hf, 0.0)]
        if section.h > section.hf:
            parts.append(_rect(section.bw, section.h - section.hf, section.hf))
        return parts, False
    if isinstance(section, SandwichSection):
        return [
            _rect(section.bt, section.ht, 0.0),
            _rect(section.bb, section.hb, section.ht + section.hg),
        ], False
    if isinstance(section, DoubleTeeSection):
        return [
            _rect(section.bf, section.hf, 0.0),
            _rect(section.num_stems * section.stem_width, section.h - section.hf, section.hf),
        ], False
    if isinstance(section, HollowCoreSection):
        gross = _rect(section.bf, section.h, 0.0)
        n = int(section.num_voids)
        if n == 0:
            return [gross], False
        r = section.void_radius
        voids_area = n * section.void_area
        if voids_area >= gross[0]:
            logger.warning(
                f"Hollow-core void area {voids_area:.3f} in^2 >= gross area {gross[0]:.3f} in^2; "
                "using solid gross rectangle"
            )
            return [gross], True
        voids = (-voids_area, section.void_center_depth, -n * math.pi * r ** 4 / 4.0)
        return [gross, voids], False
    raise unsupported_section(section)


def gross_properties(section: Section) -> GrossProperties:
    """Uncracked gross section properties (A, yCg, Ig, yb, Sb).

    yb = h - yCg is the distance from the centroid to the extreme tension
    fiber and Sb = Ig / yb.
    """
    parts, voids_ignored = _parts(section)
    A, y_cg, Ig = _combine(parts)
    yb = section.h - y_cg
    Sb = Ig / yb
    return GrossProperties(A=A, yCg=y_cg, Ig=Ig, yb=yb, Sb=Sb, voids_ignored=voids_ignored)
