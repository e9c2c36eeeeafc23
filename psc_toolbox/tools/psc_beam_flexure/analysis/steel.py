from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Tuple

import numpy as np

from .errors import InvalidInputError

# ACI 318 limiting concrete compressive strain
EPS_CU = 0.003

# Below this strain magnitude the power formula is not evaluated
ZERO_STRAIN = 1e-12


@dataclass(frozen=True)
class SteelType:
    """Steel material entry with Devalapura-Tadros (PCI) power-formula parameters.

    Stresses and moduli in ksi.

    stress_cap is fpy for mild steel and fpu for prestressing steel.
    """

    id: str
    name: str
    category: str  # "mild" | "prestressing"
    Es: float
    fpu: float
    fpy: float
    stress_cap: float
    Q: float
    R: float
    K: float
    default_fse: float = 0.0
    description: str = ""

    def __post_init__(self) -> None:
        if self.category not in ("mild", "prestressing"):
            raise InvalidInputError(f"{self.id}: category must be 'mild' or 'prestressing', got {self.category!r}")
        if self.Es <= 0.0:
            raise InvalidInputError(f"{self.id}: Es must be > 0")
        if self.R <= 0.0:
            raise InvalidInputError(f"{self.id}: power-formula R must be > 0")
        if not (0.0 <= self.Q < 1.0):
            raise InvalidInputError(f"{self.id}: power-formula Q must satisfy 0 <= Q < 1")
        if self.K <= 0.0 or self.fpy <= 0.0:
            raise InvalidInputError(f"{self.id}: K and fpy must be > 0")
        if self.stress_cap <= 0.0:
            raise InvalidInputError(f"{self.id}: stress_cap must be > 0")
        if self.default_fse < 0.0:
            raise InvalidInputError(f"{self.id}: default_fse must be >= 0")

    @property
    def is_mild(self) -> bool:
        return self.category == "mild"

    @property
    def yield_strain(self) -> float:
        return self.fpy / self.Es

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def stress(strain: float, steel: SteelType) -> float:
    """
    Steel stress (ksi) from total strain using the power formula:

      fs = Es*eps * [ Q + (1 - Q) / (1 + (Es*eps / (K*fpy))^R)^(1/R) ]  <= stress_cap

    The sign of the result follows the sign of the strain (tension positive).
    """
    if abs(strain) < ZERO_STRAIN:
        return 0.0

    abs_eps = abs(strain)
    es_eps = steel.Es * abs_eps
    ratio = es_eps / (steel.K * steel.fpy)
    if ratio <= 1.0:
        bracket = (1.0 + ratio ** steel.R) ** (1.0 / steel.R)
    else:
        # same bracket, factored so ratio**R cannot overflow at large strains
        bracket = ratio * (1.0 + ratio ** -steel.R) ** (1.0 / steel.R)
    fs = es_eps * (steel.Q + (1.0 - steel.Q) / bracket)
    fs_capped = min(fs, steel.stress_cap)

    return fs_capped if strain >= 0.0 else -fs_capped


def curve(steel: SteelType, num_points: int = 200) -> List[Tuple[float, float]]:
    """Sample (strain, stress) from zero to 3*fpu/Es, endpoints included."""
    if num_points < 1:
        raise ValueError("num_points must be >= 1")
    strains = np.linspace(0.0, 3.0 * steel.fpu / steel.Es, num_points + 1)
    return [(float(eps), stress(float(eps), steel)) for eps in strains]


def decompression_strain(fse: float, Es: float) -> float:
    return fse / Es


def strain_at_depth(depth: float, c: float, fse: float, Es: float) -> float:
    """Total steel strain by strain compatibility, tension positive.

    eps = eps_cu*(d/c - 1) + fse/Es
    """
    return EPS_CU * (depth / c - 1.0) + decompression_strain(fse, Es)
