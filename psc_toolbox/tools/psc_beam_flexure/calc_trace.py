from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid")


class Quantity(_Strict):
    value: float
    units: str = ""


class Rounding(_Strict):
    rule: Literal["decimals", "sigfigs", "none"] = "sigfigs"
    digits: int = 4

    def apply(self, value: float) -> float:
        if not math.isfinite(value) or self.rule == "none":
            return float(value)
        if self.rule == "decimals":
            return float(round(value, self.digits))
        if value == 0:
            return 0.0
        exp = math.floor(math.log10(abs(value)))
        return float(round(value, self.digits - 1 - exp))


class CalcVariable(_Strict):
    symbol: str
    description: str
    value: float
    units: str
    source: str  # input:<id> | db:<steel id> | step:<step id> | solver:<field> | derived:<note>


class CalcReference(_Strict):
    type: Literal["code", "derived", "note"]
    ref: str


class CalcCheck(_Strict):
    label: str
    demand: Quantity
    capacity: Quantity
    ratio: float
    pass_fail: Literal["PASS", "FAIL"]


class CalcStep(_Strict):
    id: str
    section: str
    title: str
    output_symbol: str
    equation_latex: str
    substitution_latex: str
    variables: List[CalcVariable]
    result_unrounded: Quantity
    rounding: Rounding
    result_rounded: Quantity
    references: List[CalcReference]
    checks: List[CalcCheck] = Field(default_factory=list)


class TraceMeta(_Strict):
    tool_id: str
    tool_version: str
    report_version: str
    timestamp: str
    units_system: str
    code_basis: Optional[str] = None
    input_hash: str


class SolverInfo(_Strict):
    """Neutral-axis search diagnostics; c itself is iterative, not a traced closed-form step."""

    method: str = "bisection"
    iterations: int
    c_in: float
    equilibrium_error_kip: float
    settings: Dict[str, float] = Field(default_factory=dict)


class TraceInput(_Strict):
    id: str
    label: str
    value: Union[float, int, bool, str]
    units: str
    source: Literal["user", "default", "db"]


class TraceAssumption(_Strict):
    id: str
    text: str


class TraceSummary(_Strict):
    governing_checks: List[CalcCheck] = Field(default_factory=list)
    key_outputs: Dict[str, Quantity] = Field(default_factory=dict)
    ductility: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


class CalcTrace(_Strict):
    meta: TraceMeta
    inputs: List[TraceInput] = Field(default_factory=list)
    assumptions: List[TraceAssumption] = Field(default_factory=list)
    solver: Optional[SolverInfo] = None
    steps: List[CalcStep] = Field(default_factory=list)
    tables: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)
    summary: TraceSummary = Field(default_factory=TraceSummary)

    @classmethod
    def new(
        cls,
        *,
        tool_id: str,
        tool_version: str,
        report_version: str,
        units_system: str,
        code_basis: str,
        input_hash: str,
        timestamp: Optional[str] = None,
    ) -> "CalcTrace":
        meta = TraceMeta(
            tool_id=tool_id,
            tool_version=tool_version,
            report_version=report_version,
            timestamp=timestamp or datetime.now().isoformat(timespec="seconds"),
            units_system=units_system,
            code_basis=code_basis,
            input_hash=input_hash,
        )
        return cls(meta=meta)

    def step(self, step_id: str) -> CalcStep:
        for s in self.steps:
            if s.id == step_id:
                return s
        raise KeyError(step_id)

    def key_output(self, name: str, value: float, units: str = "") -> None:
        self.summary.key_outputs[name] = Quantity(value=value, units=units)

    def all_checks(self) -> List[CalcCheck]:
        return [c for s in self.steps for c in s.checks]

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def _latex_quantity(value: float, units: str) -> str:
    num = str(value) if not math.isfinite(value) else f"{value:.6g}"
    u = units.strip()
    return f"{num}\\,\\mathrm{{{u}}}" if u else num


def _substitute(expr: str, var_models: Sequence[CalcVariable]) -> str:
    """Replace whole symbols with values in a single pass.

    Longer symbols are tried first, and a symbol never matches inside a
    longer identifier or LaTeX command ("c" is left alone in "\\frac").
    """
    by_symbol = {vm.symbol: vm for vm in var_models}
    alternation = "|".join(re.escape(s) for s in sorted(by_symbol, key=len, reverse=True))
    pattern = re.compile(rf"(?<![A-Za-z\\])(?:{alternation})(?![A-Za-z])")

    def _repl(m: "re.Match[str]") -> str:
        vm = by_symbol[m.group(0)]
        return _latex_quantity(vm.value, vm.units)

    return pattern.sub(_repl, expr)


def compute_step(
    trace: CalcTrace,
    *,
    id: str,
    section: str,
    title: str,
    output_symbol: str,
    equation_latex: str,
    variables: Sequence[Dict[str, Any]],
    compute_fn: Callable[[], float],
    units: str,
    references: Sequence[Dict[str, str]],
    rounding: Optional[Rounding] = None,
    checks_builder: Optional[Callable[[float], List[CalcCheck]]] = None,
) -> float:
    """
    Compute one traced calculation step and append it to the trace.

    The substitution line is the right-hand side of `equation_latex` with each
    variable symbol replaced by its value and units. Returns the UNROUNDED
    value so traced steps chain without accumulating rounding error; the
    rounded value is for display only.
    """
    if not id or not section or not title:
        raise ValueError("compute_step requires non-empty id/section/title")
    if "=" not in equation_latex or not variables or not references:
        raise ValueError("compute_step requires an equation with '=', variables and references")

    var_models = [CalcVariable(**v) for v in variables]
    unrounded = float(compute_fn())
    rounding = rounding or Rounding()
    rhs = equation_latex.split("=", 1)[1]

    trace.steps.append(
        CalcStep(
            id=id,
            section=section,
            title=title,
            output_symbol=output_symbol,
            equation_latex=equation_latex,
            substitution_latex=f"{output_symbol} = {_substitute(rhs, var_models).strip()}",
            variables=var_models,
            result_unrounded=Quantity(value=unrounded, units=units),
            rounding=rounding,
            result_rounded=Quantity(value=rounding.apply(unrounded), units=units),
            references=[CalcReference(**r) for r in references],
            checks=checks_builder(unrounded) if checks_builder is not None else [],
        )
    )
    return unrounded
