from __future__ import annotations

import math
from typing import Sequence

from .properties import gross_properties
from .results import CrackingResult
from .sections import Section, SteelLayer

# phi*Mn >= 1.2*Mcr (ACI 318-19 9.6.2.1)
MIN_STRENGTH_FACTOR = 1.2


def modulus_of_rupture(fc: float) -> float:
    """fr = 7.5*sqrt(f'c) with f'c in psi (ACI 318-19 19.2.3.1), returned in ksi for fc in ksi."""
    return 7.5 * math.sqrt(fc * 1000.0) / 1000.0


def cracking_check(section: Section, layers: Sequence[SteelLayer], phiMn: float) -> CrackingResult:
    """
    Effective prestress, cracking moment and the minimum flexural strength check.

      P    = sum(fse_i * Aps_i)              layers with fse > 0
      yps  = sum(fse_i * Aps_i * d_i) / P    (section centroid when P == 0)
      e    = yps - yCg                       positive below the centroid
      fpc  = P / A
      Mcr  = Sb * (fr + P/A + P*e/Sb)
    """
    props = gross_properties(section)

    P = 0.0
    P_moment = 0.0
    for layer in layers:
        if layer.fse > 0.0:
            force = layer.fse * layer.area
            P += force
            P_moment += force * layer.depth

    yps = P_moment / P if P > 0.0 else props.yCg
    e = yps - props.yCg
    fpc = P / props.A
    fr = modulus_of_rupture(section.fc)
    Mcr = props.Sb * (fr + P / props.A + P * e / props.Sb)
    threshold = MIN_STRENGTH_FACTOR * Mcr

    return CrackingResult(
        section_props=props,
        P=P,
        fpc=fpc,
        e=e,
        yps=yps,
        fr=fr,
        Mcr=Mcr,
        threshold=threshold,
        passes_min_strength=bool(phiMn >= threshold),
    )
