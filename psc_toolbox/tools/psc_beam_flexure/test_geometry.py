from __future__ import annotations

import math

import pytest

from .analysis.errors import InvalidInputError
from .analysis.geometry import (
    circular_segment,
    compression_area,
    compression_centroid,
    concrete_compression,
)
from .analysis.properties import gross_properties
from .analysis.sections import (
    DoubleTeeSection,
    HollowCoreSection,
    RectangularSection,
    SandwichSection,
    TBeamSection,
    check_void_geometry,
)


def _plank(**kw) -> HollowCoreSection:
    dims = dict(bf=48.0, h=8.0, num_voids=4, void_diameter=6.0, void_center_depth=4.0, fc=5.0)
    dims.update(kw)
    return HollowCoreSection(**dims)


def test_rectangular_zone() -> None:
    s = RectangularSection(bw=12.0, h=24.0, fc=6.0)
    assert compression_area(1.5, s) == pytest.approx(18.0)
    assert compression_centroid(1.5, s) == pytest.approx(0.75)
    assert concrete_compression(6.0, 1.5, s) == pytest.approx(0.85 * 6.0 * 18.0)


def test_tbeam_flange_and_web() -> None:
    s = TBeamSection(bf=28.0, bw=16.0, hf=4.0, h=24.0, fc=5.0)
    # a == hf uses the flange-only branch
    assert compression_area(4.0, s) == pytest.approx(112.0)
    assert compression_centroid(4.0, s) == pytest.approx(2.0)
    assert compression_area(6.0, s) == pytest.approx(144.0)
    assert compression_centroid(6.0, s) == pytest.approx(384.0 / 144.0)


def test_tbeam_reduces_to_rectangle() -> None:
    t = TBeamSection(bf=12.0, bw=12.0, hf=24.0, h=24.0, fc=6.0)
    r = RectangularSection(bw=12.0, h=24.0, fc=6.0)
    for a in (0.5, 3.0, 12.0, 24.0):
        assert concrete_compression(6.0, a, t) == concrete_compression(6.0, a, r)
        assert compression_centroid(a, t) == compression_centroid(a, r)
    assert gross_properties(t) == gross_properties(r)


def test_sandwich_gap_is_void() -> None:
    s = SandwichSection(bt=16.0, ht=8.0, hg=4.0, bb=16.0, hb=8.0, fc=5.0)
    assert s.h == 20.0
    assert compression_area(8.0, s) == pytest.approx(128.0)
    assert compression_area(10.0, s) == pytest.approx(128.0)
    assert compression_area(12.0, s) == pytest.approx(128.0)
    assert compression_centroid(10.0, s) == pytest.approx(4.0)
    assert compression_area(14.0, s) == pytest.approx(160.0)
    assert compression_centroid(14.0, s) == pytest.approx(928.0 / 160.0)


def test_doubletee_stems() -> None:
    s = DoubleTeeSection(bf=96.0, hf=2.0, num_stems=2, stem_width=5.0, h=24.0, fc=5.0)
    assert compression_area(1.0, s) == pytest.approx(96.0)
    assert compression_area(4.0, s) == pytest.approx(212.0)
    assert compression_centroid(4.0, s) == pytest.approx(252.0 / 212.0)


def test_circular_segment_limits() -> None:
    assert circular_segment(3.0, 0.0) == (0.0, 0.0)
    area, y_bar = circular_segment(3.0, 3.0)
    assert area == pytest.approx(math.pi * 9.0 / 2.0)
    assert y_bar == pytest.approx(4.0 * 3.0 / (3.0 * math.pi))
    area, _ = circular_segment(3.0, 6.0)
    assert area == pytest.approx(math.pi * 9.0)


def test_hollowcore_zone() -> None:
    s = _plank()
    # above the voids
    assert compression_area(1.0, s) == pytest.approx(48.0)
    # through the full voids
    assert compression_area(7.0, s) == pytest.approx(48.0 * 7.0 - 4 * math.pi * 9.0)
    # half-way into the voids
    half = math.pi * 9.0 / 2.0
    y_bar = 4.0 * 3.0 / (3.0 * math.pi)
    net = 48.0 * 4.0 - 4 * half
    assert compression_area(4.0, s) == pytest.approx(net)
    expected = (48.0 * 4.0 * 2.0 - 4 * half * (1.0 + y_bar)) / net
    assert compression_centroid(4.0, s) == pytest.approx(expected)


def test_hollowcore_without_voids_is_rectangle() -> None:
    s = _plank(num_voids=0)
    r = RectangularSection(bw=48.0, h=8.0, fc=5.0)
    assert compression_area(3.0, s) == pytest.approx(compression_area(3.0, r))
    assert compression_centroid(3.0, s) == pytest.approx(1.5)
    assert gross_properties(s).Ig == pytest.approx(gross_properties(r).Ig)


def test_gross_properties_rectangle() -> None:
    p = gross_properties(RectangularSection(bw=12.0, h=24.0, fc=6.0))
    assert p.A == pytest.approx(288.0)
    assert p.yCg == pytest.approx(12.0)
    assert p.Ig == pytest.approx(12.0 * 24.0 ** 3 / 12.0)
    assert p.yb == pytest.approx(12.0)
    assert p.Sb == pytest.approx(1152.0)
    assert p.voids_ignored is False


def test_gross_properties_tbeam() -> None:
    p = gross_properties(TBeamSection(bf=28.0, bw=16.0, hf=4.0, h=24.0, fc=5.0))
    A = 112.0 + 320.0
    y = (112.0 * 2.0 + 320.0 * 14.0) / A
    Ig = 28.0 * 4.0 ** 3 / 12.0 + 112.0 * (2.0 - y) ** 2 + 16.0 * 20.0 ** 3 / 12.0 + 320.0 * (14.0 - y) ** 2
    assert p.A == pytest.approx(A)
    assert p.yCg == pytest.approx(y)
    assert p.Ig == pytest.approx(Ig)
    assert p.Sb == pytest.approx(Ig / (24.0 - y))


def test_gross_properties_hollowcore_symmetric() -> None:
    p = gross_properties(_plank())
    r = 3.0
    assert p.A == pytest.approx(48.0 * 8.0 - 4 * math.pi * r ** 2)
    assert p.yCg == pytest.approx(4.0)
    assert p.Ig == pytest.approx(48.0 * 8.0 ** 3 / 12.0 - 4 * math.pi * r ** 4 / 4.0)


def test_gross_properties_hollowcore_offset_voids() -> None:
    p = gross_properties(_plank(bf=48.0, h=10.0, void_diameter=5.0, void_center_depth=6.0))
    r = 2.5
    A_void = 4 * math.pi * r ** 2
    A = 480.0 - A_void
    y = (480.0 * 5.0 - A_void * 6.0) / A
    gross_I = 48.0 * 10.0 ** 3 / 12.0 + 480.0 * (5.0 - y) ** 2
    void_I_self = 4 * math.pi * r ** 4 / 4.0
    void_I_par = A_void * (6.0 - y) ** 2
    assert y < 5.0
    assert p.A == pytest.approx(A)
    assert p.yCg == pytest.approx(y)
    assert p.Ig == pytest.approx(gross_I - void_I_self - void_I_par)
    assert p.Sb == pytest.approx(p.Ig / (10.0 - y))


def test_gross_properties_sandwich() -> None:
    p = gross_properties(SandwichSection(bt=16.0, ht=6.0, hg=4.0, bb=12.0, hb=8.0, fc=5.0))
    # top slab 96 in^2 at 3 in, bottom slab 96 in^2 at 14 in
    assert p.A == pytest.approx(192.0)
    assert p.yCg == pytest.approx(8.5)
    Ig = 16.0 * 6.0 ** 3 / 12.0 + 12.0 * 8.0 ** 3 / 12.0 + 2 * 96.0 * 5.5 ** 2
    assert Ig == pytest.approx(6608.0)
    assert p.Ig == pytest.approx(Ig)
    assert p.yb == pytest.approx(9.5)
    assert p.Sb == pytest.approx(6608.0 / 9.5)


def test_gross_properties_doubletee() -> None:
    p = gross_properties(DoubleTeeSection(bf=96.0, hf=2.0, num_stems=2, stem_width=5.0, h=24.0, fc=5.0))
    A_f, y_f = 96.0 * 2.0, 1.0
    A_s, y_s = 2 * 5.0 * 22.0, 13.0
    A = A_f + A_s
    y = (A_f * y_f + A_s * y_s) / A
    Ig = 96.0 * 2.0 ** 3 / 12.0 + A_f * (y_f - y) ** 2 + 10.0 * 22.0 ** 3 / 12.0 + A_s * (y_s - y) ** 2
    assert p.A == pytest.approx(412.0)
    assert p.yCg == pytest.approx(y)
    assert p.Ig == pytest.approx(Ig)
    assert p.Sb == pytest.approx(Ig / (24.0 - y))


def test_degenerate_hollowcore_falls_back_to_gross() -> None:
    s = _plank(bf=10.0, h=8.0, num_voids=4, void_diameter=6.0)
    assert s.num_voids * s.void_area >= s.bf * s.h
    p = gross_properties(s)
    assert p.voids_ignored is True
    assert p.A == pytest.approx(80.0)
    assert p.yCg == pytest.approx(4.0)
    assert p.Sb > 0.0
    assert compression_centroid(7.0, s) == pytest.approx(3.5)
    warnings = check_void_geometry(s)
    assert any("area" in w for w in warnings)
    assert any("width" in w for w in warnings)


def test_void_bounds_warnings() -> None:
    assert check_void_geometry(_plank()) == []
    out = check_void_geometry(_plank(void_center_depth=2.0))
    assert len(out) == 1 and "above the top" in out[0]
    out = check_void_geometry(_plank(void_center_depth=6.0))
    assert len(out) == 1 and "below the bottom" in out[0]


def test_invalid_dimensions_rejected() -> None:
    with pytest.raises(InvalidInputError):
        RectangularSection(bw=0.0, h=24.0, fc=5.0)
    with pytest.raises(InvalidInputError):
        TBeamSection(bf=10.0, bw=12.0, hf=4.0, h=24.0, fc=5.0)
    with pytest.raises(InvalidInputError):
        DoubleTeeSection(bf=96.0, hf=2.0, num_stems=1.5, stem_width=5.0, h=24.0, fc=5.0)
    with pytest.raises(InvalidInputError):
        _plank(num_voids=-1)
