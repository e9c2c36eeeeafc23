from __future__ import annotations

import math
from typing import Tuple

from .sections import (
    DoubleTeeSection,
    HollowCoreSection,
    RectangularSection,
    SandwichSection,
    Section,
    TBeamSection,
    unsupported_section,
)

# Whitney stress block intensity factor (ACI 318-19 22.2.2.4.1)
STRESS_BLOCK_FACTOR = 0.85


# ----------------------------
# Compression zone of depth a
# ----------------------------
# Every variant returns (area, first moment about the top fiber) of the
# concrete inside the stress block. Transition depths are inclusive:
# a == transition uses the shallower branch.


def _flanged_zone(a: float, bf: float, hf: float, web_width: float) -> Tuple[float, float]:
    if a <= hf:
        area = a * bf
        return area, area * a / 2.0
    flange_area = hf * bf
    web_area = (a - hf) * web_width
    return flange_area + web_area, flange_area * hf / 2.0 + web_area * (hf + (a - hf) / 2.0)


def _sandwich_zone(a: float, s: SandwichSection) -> Tuple[float, float]:
    if a <= s.ht:
        area = a * s.bt
        return area, area * a / 2.0
    top_area = s.ht * s.bt
    top_moment = top_area * s.ht / 2.0
    if a <= s.ht + s.hg:
        # gap is void
        return top_area, top_moment
    depth_in_bottom = a - s.ht - s.hg
    bot_area = depth_in_bottom * s.bb
    return top_area + bot_area, top_moment + bot_area * (s.ht + s.hg + depth_in_bottom / 2.0)


def circular_segment(r: float, rise: float) -> Tuple[float, float]:
    """Area of a circular segment of height `rise` and its centroid distance from the arc apex.

    theta = 2*acos((r - rise)/r)
    A     = r^2/2 * (theta - sin(theta))
    ybar  = 4 r sin^3(theta/2) / (3 (theta - sin(theta)))   measured from the void's top chord
    """
    cos_half = max(-1.0, min(1.0, (r - rise) / r))
    theta = 2.0 * math.acos(cos_half)
    k = theta - math.sin(theta)
    area = (r * r / 2.0) * k
    if k <= 0.0:
        return 0.0, 0.0
    y_bar = (4.0 * r * math.sin(theta / 2.0) ** 3) / (3.0 * k)
    return area, y_bar


def _hollowcore_voids(a: float, s: HollowCoreSection) -> Tuple[float, float]:
    """Void area and first moment (about the top fiber) inside the stress block."""
    void_area = 0.0
    void_moment = 0.0
    if s.num_voids == 0 or a <= s.void_top:
        return void_area, void_moment
    r = s.void_radius
    if a >= s.void_bottom:
        one_area = s.void_area
        one_moment = one_area * s.void_center_depth
    else:
        seg_area, y_bar = circular_segment(r, a - s.void_top)
        one_area = seg_area
        one_moment = seg_area * (s.void_top + y_bar)
    for _ in range(int(s.num_voids)):
        void_area += one_area
        void_moment += one_moment
    return void_area, void_moment


def _zone(a: float, section: Section) -> Tuple[float, float]:
    if isinstance(section, RectangularSection):
        return _flanged_zone(a, section.bw, section.h, section.bw)
    if isinstance(section, TBeamSection):
        return _flanged_zone(a, section.bf, section.hf, section.bw)
    if isinstance(section, SandwichSection):
        return _sandwich_zone(a, section)
    if isinstance(section, DoubleTeeSection):
        return _flanged_zone(a, section.bf, section.hf, section.num_stems * section.stem_width)
    if isinstance(section, HollowCoreSection):
        gross_area = section.bf * a
        void_area, void_moment = _hollowcore_voids(a, section)
        return gross_area - void_area, gross_area * a / 2.0 - void_moment
    raise unsupported_section(section)


def compression_area(a: float, section: Section) -> float:
    """Concrete area (in^2) within stress-block depth a."""
    area, _ = _zone(a, section)
    return area


def concrete_compression(fc: float, a: float, section: Section) -> float:
    """Cc = 0.85 f'c A_comp (kips)."""
    return STRESS_BLOCK_FACTOR * fc * compression_area(a, section)


def compression_centroid(a: float, section: Section) -> float:
    """Depth (in) of the compression-zone centroid below the top fiber."""
    area, moment = _zone(a, section)
    if area <= 0.0:
        # fully voided or zero-depth block: gross rectangle centroid
        return a / 2.0
    return moment / area
