from __future__ import annotations

from typing import Dict, List

from ..analysis.steel import SteelType


class SteelTypeNotFoundError(RuntimeError):
    pass


# Power-formula parameters per PCI Design Handbook (Devalapura-Tadros).
# stress_cap: fy for mild steel, fpu for prestressing steel.
_PRESETS: Dict[str, Dict[str, object]] = {
    "grade60": {
        "name": "Grade 60 Bars", "description": "ASTM A615 Gr. 60 deformed reinforcing bars", "category": "mild",
        "Es": 29000.0, "fpu": 90.0, "fpy": 60.0, "stress_cap": 60.0, "Q": 0.0, "R": 100.0, "K": 1.096, "default_fse": 0.0,
    },
    "grade65": {
        "name": "Grade 65 WWR", "description": "ASTM A1064 Gr. 65 welded wire reinforcement", "category": "mild",
        "Es": 29000.0, "fpu": 80.0, "fpy": 65.0, "stress_cap": 65.0, "Q": 0.0, "R": 100.0, "K": 1.096, "default_fse": 0.0,
    },
    "grade70": {
        "name": "Grade 70 Plate", "description": "ASTM A709 Gr. 70 steel plate", "category": "mild",
        "Es": 29000.0, "fpu": 90.0, "fpy": 70.0, "stress_cap": 70.0, "Q": 0.0, "R": 100.0, "K": 1.06, "default_fse": 0.0,
    },
    "grade150": {
        "name": "Gr. 150 Rods", "description": "ASTM A722 Gr. 150 high-strength threaded rods", "category": "prestressing",
        "Es": 29000.0, "fpu": 150.0, "fpy": 127.5, "stress_cap": 150.0, "Q": 0.016, "R": 3.75, "K": 1.04, "default_fse": 0.0,
    },
    "grade270": {
        "name": "Gr. 270 Strand", "description": "ASTM A416 Gr. 270 7-wire low-relaxation strand", "category": "prestressing",
        "Es": 28800.0, "fpu": 270.0, "fpy": 243.0, "stress_cap": 270.0, "Q": 0.031, "R": 7.36, "K": 1.043, "default_fse": 170.0,
    },
    "grade250": {
        "name": "Gr. 250 Strand", "description": "ASTM A416 Gr. 250 7-wire strand", "category": "prestressing",
        "Es": 28800.0, "fpu": 250.0, "fpy": 225.0, "stress_cap": 250.0, "Q": 0.031, "R": 7.36, "K": 1.043, "default_fse": 150.0,
    },
}

# Validated once at import; SteelType checks Es, R, Q and stress_cap.
STEEL_TYPES: Dict[str, SteelType] = {sid: SteelType(id=sid, **vals) for sid, vals in _PRESETS.items()}


def list_steel_types() -> List[SteelType]:
    return list(STEEL_TYPES.values())


def get_steel_type(steel_id: str) -> SteelType:
    key = (steel_id or "").strip().lower()
    try:
        return STEEL_TYPES[key]
    except KeyError:
        raise SteelTypeNotFoundError(
            f"Unknown steel type {steel_id!r}. Available: {', '.join(STEEL_TYPES)}"
        ) from None
