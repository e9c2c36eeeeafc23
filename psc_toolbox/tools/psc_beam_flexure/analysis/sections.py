from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Dict, List, Union

from .errors import InvalidInputError
from .steel import SteelType

# Coordinate convention for every section:
#   depth measured downward from the extreme compression fiber (top), inches.


def _require_positive(section_type: str, **dims: float) -> None:
    for name, value in dims.items():
        if not (value > 0.0) or math.isinf(value):
            raise InvalidInputError(f"{section_type}: {name} must be a positive finite number, got {value!r}")


@dataclass(frozen=True)
class RectangularSection:
    bw: float
    h: float
    fc: float

    section_type: ClassVar[str] = "rectangular"

    def __post_init__(self) -> None:
        _require_positive(self.section_type, bw=self.bw, h=self.h, fc=self.fc)

    def as_dict(self) -> Dict[str, Any]:
        return {"section_type": self.section_type, **asdict(self)}


@dataclass(frozen=True)
class TBeamSection:
    bf: float
    bw: float
    hf: float
    h: float
    fc: float

    section_type: ClassVar[str] = "tbeam"

    def __post_init__(self) -> None:
        _require_positive(self.section_type, bf=self.bf, bw=self.bw, hf=self.hf, h=self.h, fc=self.fc)
        if self.hf > self.h:
            raise InvalidInputError("tbeam: flange depth hf cannot exceed total depth h")
        if self.bw > self.bf:
            raise InvalidInputError("tbeam: web width bw cannot exceed flange width bf")

    def as_dict(self) -> Dict[str, Any]:
        return {"section_type": self.section_type, **asdict(self)}


@dataclass(frozen=True)
class SandwichSection:
    """Double-wall section: solid top slab, void gap, solid bottom slab."""

    bt: float
    ht: float
    hg: float
    bb: float
    hb: float
    fc: float

    section_type: ClassVar[str] = "sandwich"

    def __post_init__(self) -> None:
        _require_positive(
            self.section_type, bt=self.bt, ht=self.ht, hg=self.hg, bb=self.bb, hb=self.hb, fc=self.fc
        )

    @property
    def h(self) -> float:
        return self.ht + self.hg + self.hb

    def as_dict(self) -> Dict[str, Any]:
        return {"section_type": self.section_type, **asdict(self), "h": self.h}


@dataclass(frozen=True)
class DoubleTeeSection:
    bf: float
    hf: float
    num_stems: int
    stem_width: float
    h: float
    fc: float

    section_type: ClassVar[str] = "doubletee"

    def __post_init__(self) -> None:
        _require_positive(
            self.section_type, bf=self.bf, hf=self.hf, stem_width=self.stem_width, h=self.h, fc=self.fc
        )
        if int(self.num_stems) != self.num_stems or self.num_stems < 1:
            raise InvalidInputError("doubletee: num_stems must be a whole number >= 1")
        if self.hf >= self.h:
            raise InvalidInputError("doubletee: flange thickness hf must be less than total depth h")

    def as_dict(self) -> Dict[str, Any]:
        return {"section_type": self.section_type, **asdict(self)}


@dataclass(frozen=True)
class HollowCoreSection:
    """Solid rectangle bf x h with num_voids circular voids centred at void_center_depth."""

    bf: float
    h: float
    num_voids: int
    void_diameter: float
    void_center_depth: float
    fc: float

    section_type: ClassVar[str] = "hollowcore"

    def __post_init__(self) -> None:
        _require_positive(
            self.section_type,
            bf=self.bf,
            h=self.h,
            void_diameter=self.void_diameter,
            void_center_depth=self.void_center_depth,
            fc=self.fc,
        )
        if int(self.num_voids) != self.num_voids or self.num_voids < 0:
            raise InvalidInputError("hollowcore: num_voids must be a whole number >= 0")

    @property
    def void_radius(self) -> float:
        return self.void_diameter / 2.0

    @property
    def void_top(self) -> float:
        return self.void_center_depth - self.void_radius

    @property
    def void_bottom(self) -> float:
        return self.void_center_depth + self.void_radius

    @property
    def void_area(self) -> float:
        """Area of a single void."""
        return math.pi * self.void_radius ** 2

    def as_dict(self) -> Dict[str, Any]:
        return {"section_type": self.section_type, **asdict(self)}


Section = Union[RectangularSection, TBeamSection, SandwichSection, DoubleTeeSection, HollowCoreSection]


def unsupported_section(section: Any) -> TypeError:
    return TypeError(f"Unsupported section type: {type(section).__name__}")


def check_void_geometry(section: HollowCoreSection) -> List[str]:
    """Bounds checks for hollow-core voids.

    Returned as warnings; the analysis still runs on the geometry as given.
    """
    warnings: List[str] = []
    if section.num_voids == 0:
        return warnings
    if section.void_top < 0.0:
        warnings.append(
            f"Voids extend above the top fiber (void top at {section.void_top:.3f} in)."
        )
    if section.void_bottom > section.h:
        warnings.append(
            f"Voids extend below the bottom fiber (void bottom at {section.void_bottom:.3f} in > h = {section.h:.3f} in)."
        )
    total_width = section.num_voids * section.void_diameter
    if total_width >= section.bf:
        warnings.append(
            f"Total void width {total_width:.3f} in is not less than section width bf = {section.bf:.3f} in; voids overlap."
        )
    if section.num_voids * section.void_area >= section.bf * section.h:
        warnings.append("Total void area is not less than the gross rectangle area.")
    return warnings


@dataclass(frozen=True)
class SteelLayer:
    """One layer of reinforcement or prestressing steel.

    depth: from the extreme compression fiber (in). fse: effective prestress (ksi).
    """

    area: float
    depth: float
    steel: SteelType
    fse: float = 0.0
    name: str = ""

    @property
    def is_prestressed(self) -> bool:
        return self.fse > 0.0

    @property
    def label(self) -> str:
        return self.name or self.steel.name
