from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .sections import Section, SteelLayer

DUCTILITY_LABELS = {
    "tension-controlled": "Tension-Controlled",
    "transition": "Transition Zone",
    "compression-controlled": "Compression-Controlled",
}


@dataclass(frozen=True)
class LayerResult:
    layer: SteelLayer
    strain: float
    stress: float  # ksi, tension positive
    force: float  # kips, tension positive

    @property
    def area(self) -> float:
        return self.layer.area

    @property
    def depth(self) -> float:
        return self.layer.depth

    @property
    def fse(self) -> float:
        return self.layer.fse

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.layer.label,
            "steel_id": self.layer.steel.id,
            "area": self.area,
            "depth": self.depth,
            "fse": self.fse,
            "strain": self.strain,
            "stress": self.stress,
            "force": self.force,
        }


@dataclass(frozen=True)
class GrossProperties:
    A: float
    yCg: float
    Ig: float
    yb: float
    Sb: float
    voids_ignored: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "A": self.A,
            "yCg": self.yCg,
            "Ig": self.Ig,
            "yb": self.yb,
            "Sb": self.Sb,
            "voids_ignored": self.voids_ignored,
        }


@dataclass(frozen=True)
class CrackingResult:
    section_props: GrossProperties
    P: float  # kips
    fpc: float  # ksi
    e: float  # in, positive below the centroid
    yps: float  # in
    fr: float  # ksi
    Mcr: float  # kip-in
    threshold: float  # kip-in, 1.2*Mcr
    passes_min_strength: bool

    @property
    def McrFt(self) -> float:
        return self.Mcr / 12.0

    @property
    def thresholdFt(self) -> float:
        return self.threshold / 12.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "section_props": self.section_props.as_dict(),
            "P": self.P,
            "fpc": self.fpc,
            "e": self.e,
            "yps": self.yps,
            "fr": self.fr,
            "Mcr": self.Mcr,
            "McrFt": self.McrFt,
            "threshold": self.threshold,
            "thresholdFt": self.thresholdFt,
            "passes_min_strength": self.passes_min_strength,
        }


@dataclass(frozen=True)
class EquilibriumState:
    """Converged (or iteration-capped) state of the neutral-axis search."""

    c: float
    a: float
    beta1: float
    Cc: float
    cc_centroid: float
    layer_results: Tuple[LayerResult, ...]
    iterations: int
    residual: float
    converged: bool

    @property
    def total_steel_force(self) -> float:
        return sum(lr.force for lr in self.layer_results)


@dataclass(frozen=True)
class AnalysisResult:
    section: Section
    c: float
    a: float
    beta1: float
    Cc: float
    cc_centroid: float
    layer_results: Tuple[LayerResult, ...]
    Mn: float  # kip-in
    phi: float
    phiMn: float  # kip-in
    epsilon_t: float
    epsilon_ty: float
    c_over_d: float
    ductility: str
    iterations: int
    equilibrium_error: float  # kips
    cracking: Optional[CrackingResult] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def fc(self) -> float:
        return self.section.fc

    @property
    def MnFt(self) -> float:
        return self.Mn / 12.0

    @property
    def phiMnFt(self) -> float:
        return self.phiMn / 12.0

    @property
    def ductile(self) -> bool:
        return self.ductility == "tension-controlled"

    @property
    def transition(self) -> bool:
        return self.ductility == "transition"

    @property
    def has_prestress(self) -> bool:
        return any(lr.layer.is_prestressed for lr in self.layer_results)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "section": self.section.as_dict(),
            "fc": self.fc,
            "c": self.c,
            "a": self.a,
            "beta1": self.beta1,
            "Cc": self.Cc,
            "ccCentroid": self.cc_centroid,
            "layerResults": [lr.as_dict() for lr in self.layer_results],
            "Mn": self.Mn,
            "MnFt": self.MnFt,
            "phi": self.phi,
            "phiMn": self.phiMn,
            "phiMnFt": self.phiMnFt,
            "epsilonT": self.epsilon_t,
            "epsilonTy": self.epsilon_ty,
            "cOverD": self.c_over_d,
            "ductility": self.ductility,
            "ductilityLabel": DUCTILITY_LABELS[self.ductility],
            "ductile": self.ductile,
            "transition": self.transition,
            "hasPrestress": self.has_prestress,
            "iterations": self.iterations,
            "equilibriumError": self.equilibrium_error,
            "cracking": self.cracking.as_dict() if self.cracking is not None else None,
            "warnings": list(self.warnings),
        }
