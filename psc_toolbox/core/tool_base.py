from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Protocol, Type, TypedDict, runtime_checkable

from pydantic import BaseModel


@dataclass(frozen=True)
class ToolMeta:
    id: str
    name: str
    category: str
    version: str
    description: str


class RunResult(TypedDict, total=False):
    """Shape of a tool run. Result fields are present only when ok is True."""

    ok: bool
    run_dir: str
    input_hash: str
    outputs: Dict[str, Any]
    artifacts: Dict[str, str]
    error: str
    traceback: str


@runtime_checkable
class ToolBase(Protocol):
    """
    Tool contract.

    Inputs are a plain dict validated against `InputModel` (pydantic), so
    callers get field-level errors before any calculation runs. run() never
    raises for bad inputs or failed analyses; it reports them with ok=False.
    """

    meta: ToolMeta
    InputModel: Type[BaseModel]

    def default_inputs(self) -> Dict[str, Any]:
        ...

    def run(self, inputs: Dict[str, Any]) -> RunResult:
        ...
