from __future__ import annotations

import pytest

from .analysis.errors import InvalidInputError
from .analysis.steel import SteelType, curve, decompression_strain, strain_at_depth, stress
from .db.steel_presets import STEEL_TYPES, SteelTypeNotFoundError, get_steel_type, list_steel_types


def test_zero_strain_is_exactly_zero() -> None:
    for steel in list_steel_types():
        assert stress(0.0, steel) == 0.0
        assert stress(5e-13, steel) == 0.0
        assert stress(-5e-13, steel) == 0.0


def test_stress_monotone_and_capped() -> None:
    for steel in list_steel_types():
        prev = 0.0
        for i in range(1, 2001):
            eps = i * 5e-5
            fs = stress(eps, steel)
            assert fs >= prev - 1e-12, (steel.id, eps)
            assert fs <= steel.stress_cap
            prev = fs


def test_stress_odd_symmetry() -> None:
    for steel in list_steel_types():
        for eps in (1e-4, 0.001, 0.0035, 0.01, 0.05):
            assert stress(-eps, steel) == -stress(eps, steel)


def test_mild_steel_elastic_then_yield() -> None:
    gr60 = get_steel_type("grade60")
    assert stress(0.001, gr60) == pytest.approx(29.0, rel=1e-9)
    assert stress(0.01, gr60) == pytest.approx(60.0)
    assert stress(-0.01, gr60) == pytest.approx(-60.0)


def test_large_strain_does_not_overflow() -> None:
    # c at the lower search bound makes eps = 0.003*(d/c - 1) very large
    eps = strain_at_depth(40.0, 0.01, 0.0, 29000.0)
    for steel in list_steel_types():
        fs = stress(eps, steel)
        assert 0.0 < fs <= steel.stress_cap


def test_strand_stress_below_fpu() -> None:
    g270 = get_steel_type("grade270")
    fs = stress(0.01, g270)
    assert 240.0 < fs < 250.0
    assert stress(0.2, g270) <= 270.0


def test_curve_sampling() -> None:
    g270 = get_steel_type("grade270")
    pts = curve(g270, 10)
    assert len(pts) == 11
    assert pts[0] == (0.0, 0.0)
    assert pts[-1][0] == pytest.approx(3.0 * 270.0 / 28800.0)
    with pytest.raises(ValueError):
        curve(g270, 0)


def test_strain_compatibility() -> None:
    assert strain_at_depth(20.0, 2.0, 0.0, 29000.0) == pytest.approx(0.027)
    assert decompression_strain(170.0, 28800.0) == pytest.approx(170.0 / 28800.0)
    # at the neutral axis only the decompression strain remains
    assert strain_at_depth(5.0, 5.0, 170.0, 28800.0) == pytest.approx(170.0 / 28800.0)


def test_catalog_lookup() -> None:
    assert set(STEEL_TYPES) == {"grade60", "grade65", "grade70", "grade150", "grade270", "grade250"}
    assert get_steel_type(" Grade270 ").id == "grade270"
    assert get_steel_type("grade270").default_fse == 170.0
    assert get_steel_type("grade60").is_mild
    assert get_steel_type("grade60").yield_strain == pytest.approx(60.0 / 29000.0)
    with pytest.raises(SteelTypeNotFoundError):
        get_steel_type("grade999")


def test_invalid_steel_parameters_rejected() -> None:
    base = get_steel_type("grade60").as_dict()
    with pytest.raises(InvalidInputError):
        SteelType(**{**base, "R": 0.0})
    with pytest.raises(InvalidInputError):
        SteelType(**{**base, "Es": -1.0})
    with pytest.raises(InvalidInputError):
        SteelType(**{**base, "category": "stainless"})
