from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, confloat, conint, model_validator

from .analysis.sections import (
    DoubleTeeSection,
    HollowCoreSection,
    RectangularSection,
    SandwichSection,
    Section,
    SteelLayer,
    TBeamSection,
)
from .db.steel_presets import STEEL_TYPES, SteelTypeNotFoundError, get_steel_type


class RectangularInputs(BaseModel):
    """Solid rectangular beam b x h."""

    model_config = ConfigDict(extra="forbid")

    section_type: Literal["rectangular"] = "rectangular"
    bw_in: confloat(gt=0) = Field(16.0, description="Beam width bw", json_schema_extra={"units": "in"})
    h_in: confloat(gt=0) = Field(6.0, description="Total depth h", json_schema_extra={"units": "in"})
    fc_ksi: confloat(gt=0) = Field(5.0, description="Specified concrete compressive strength f'c", json_schema_extra={"units": "ksi"})

    def to_section(self) -> Section:
        return RectangularSection(bw=self.bw_in, h=self.h_in, fc=self.fc_ksi)


class TBeamInputs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    section_type: Literal["tbeam"] = "tbeam"
    bf_in: confloat(gt=0) = Field(28.0, description="Flange width bf", json_schema_extra={"units": "in"})
    bw_in: confloat(gt=0) = Field(16.0, description="Web width bw", json_schema_extra={"units": "in"})
    hf_in: confloat(gt=0) = Field(4.0, description="Flange depth hf", json_schema_extra={"units": "in"})
    h_in: confloat(gt=0) = Field(24.0, description="Total depth h", json_schema_extra={"units": "in"})
    fc_ksi: confloat(gt=0) = Field(5.0, description="Specified concrete compressive strength f'c", json_schema_extra={"units": "ksi"})

    @model_validator(mode="after")
    def _cross_checks(self):
        if self.hf_in > self.h_in:
            raise ValueError("hf_in cannot exceed h_in.")
        if self.bw_in > self.bf_in:
            raise ValueError("bw_in cannot exceed bf_in.")
        return self

    def to_section(self) -> Section:
        return TBeamSection(bf=self.bf_in, bw=self.bw_in, hf=self.hf_in, h=self.h_in, fc=self.fc_ksi)


class SandwichInputs(BaseModel):
    """Double-wall (sandwich) section. Total depth h = ht + hg + hb."""

    model_config = ConfigDict(extra="forbid")

    section_type: Literal["sandwich"] = "sandwich"
    bt_in: confloat(gt=0) = Field(16.0, description="Top wythe width bt", json_schema_extra={"units": "in"})
    ht_in: confloat(gt=0) = Field(8.0, description="Top wythe height ht", json_schema_extra={"units": "in"})
    hg_in: confloat(gt=0) = Field(4.0, description="Gap (insulation) height hg", json_schema_extra={"units": "in"})
    bb_in: confloat(gt=0) = Field(16.0, description="Bottom wythe width bb", json_schema_extra={"units": "in"})
    hb_in: confloat(gt=0) = Field(8.0, description="Bottom wythe height hb", json_schema_extra={"units": "in"})
    fc_ksi: confloat(gt=0) = Field(5.0, description="Specified concrete compressive strength f'c", json_schema_extra={"units": "ksi"})

    @property
    def h_in(self) -> float:
        return self.ht_in + self.hg_in + self.hb_in

    def to_section(self) -> Section:
        return SandwichSection(bt=self.bt_in, ht=self.ht_in, hg=self.hg_in, bb=self.bb_in, hb=self.hb_in, fc=self.fc_ksi)


class DoubleTeeInputs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    section_type: Literal["doubletee"] = "doubletee"
    bf_in: confloat(gt=0) = Field(96.0, description="Flange width bf (8 ft typical)", json_schema_extra={"units": "in"})
    hf_in: confloat(gt=0) = Field(2.0, description="Flange thickness hf", json_schema_extra={"units": "in"})
    num_stems: conint(ge=1) = Field(2, description="Number of stems")
    stem_width_in: confloat(gt=0) = Field(5.0, description="Width of each stem", json_schema_extra={"units": "in"})
    h_in: confloat(gt=0) = Field(24.0, description="Total depth h", json_schema_extra={"units": "in"})
    fc_ksi: confloat(gt=0) = Field(5.0, description="Specified concrete compressive strength f'c", json_schema_extra={"units": "ksi"})

    @model_validator(mode="after")
    def _cross_checks(self):
        if self.hf_in >= self.h_in:
            raise ValueError("hf_in must be less than h_in.")
        return self

    def to_section(self) -> Section:
        return DoubleTeeSection(
            bf=self.bf_in,
            hf=self.hf_in,
            num_stems=self.num_stems,
            stem_width=self.stem_width_in,
            h=self.h_in,
            fc=self.fc_ksi,
        )


class HollowCoreInputs(BaseModel):
    """Hollow-core plank with circular voids. Void centre defaults to mid-depth."""

    model_config = ConfigDict(extra="forbid")

    section_type: Literal["hollowcore"] = "hollowcore"
    bf_in: confloat(gt=0) = Field(48.0, description="Plank width bf (4 ft typical)", json_schema_extra={"units": "in"})
    h_in: confloat(gt=0) = Field(8.0, description="Total depth h", json_schema_extra={"units": "in"})
    num_voids: conint(ge=0) = Field(4, description="Number of circular voids")
    void_diameter_in: confloat(gt=0) = Field(6.0, description="Void diameter", json_schema_extra={"units": "in"})
    void_center_depth_in: Optional[confloat(gt=0)] = Field(None, description="Depth from top to void centres (default h/2)", json_schema_extra={"units": "in"})
    fc_ksi: confloat(gt=0) = Field(5.0, description="Specified concrete compressive strength f'c", json_schema_extra={"units": "ksi"})

    def to_section(self) -> Section:
        center = self.void_center_depth_in if self.void_center_depth_in is not None else self.h_in / 2.0
        return HollowCoreSection(
            bf=self.bf_in,
            h=self.h_in,
            num_voids=self.num_voids,
            void_diameter=self.void_diameter_in,
            void_center_depth=center,
            fc=self.fc_ksi,
        )


SectionInputs = Annotated[
    Union[RectangularInputs, TBeamInputs, SandwichInputs, DoubleTeeInputs, HollowCoreInputs],
    Field(discriminator="section_type"),
]


class SteelLayerInputs(BaseModel):
    """One steel layer. fse defaults to the preset's effective prestress when omitted."""

    model_config = ConfigDict(extra="forbid")

    steel_id: str = Field("grade270", description=f"Steel preset id ({', '.join(STEEL_TYPES)})")
    area_in2: confloat(gt=0) = Field(0.153, description="Steel area in the layer", json_schema_extra={"units": "in^2"})
    depth_in: confloat(gt=0) = Field(3.0, description="Depth from extreme compression fiber to layer centroid", json_schema_extra={"units": "in"})
    fse_ksi: Optional[confloat(ge=0)] = Field(None, description="Effective prestress after losses (0 for mild steel)", json_schema_extra={"units": "ksi"})
    name: str = Field("", description="Optional layer label")

    @model_validator(mode="after")
    def _validate_layer(self):
        try:
            steel = get_steel_type(self.steel_id)
        except SteelTypeNotFoundError as e:
            raise ValueError(str(e)) from e
        if steel.is_mild and self.fse_ksi:
            raise ValueError(f"Mild steel preset {steel.id!r} cannot carry effective prestress (fse_ksi must be 0).")
        return self

    def to_layer(self) -> SteelLayer:
        steel = get_steel_type(self.steel_id)
        fse = steel.default_fse if self.fse_ksi is None else self.fse_ksi
        return SteelLayer(area=self.area_in2, depth=self.depth_in, steel=steel, fse=fse, name=self.name or steel.name)


class BeamStrengthInputs(BaseModel):
    """
    Flexural strength of a reinforced / prestressed concrete section.
    Units are US customary (in, ksi, kip, kip-in).
    """

    model_config = ConfigDict(extra="forbid")

    section: SectionInputs = Field(default_factory=RectangularInputs)
    layers: List[SteelLayerInputs] = Field(default_factory=lambda: [SteelLayerInputs()], description="Steel layers (at least one)")

    @model_validator(mode="after")
    def _cross_checks(self):
        if not self.layers:
            raise ValueError("Add at least one steel reinforcement layer.")
        h = self.section.h_in
        for i, layer in enumerate(self.layers, start=1):
            if layer.depth_in > h:
                raise ValueError(f"Layer {i}: depth must be between 0 and total beam depth ({h:g} in).")
        return self

    def to_section(self) -> Section:
        return self.section.to_section()

    def to_layers(self) -> List[SteelLayer]:
        return [layer.to_layer() for layer in self.layers]
