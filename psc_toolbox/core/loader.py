from __future__ import annotations
import importlib
import pkgutil
from typing import Dict, List
from loguru import logger
from .tool_base import ToolBase

TOOLS_PKG = "psc_toolbox.tools"

def discover_tools() -> List[ToolBase]:
    """
    Tools are subpackages of psc_toolbox.tools exposing `TOOL` at package level:
      psc_toolbox/tools/<tool_id>/__init__.py  ->  TOOL = MyTool()
    A subpackage that fails to import is logged and skipped so one broken tool
    does not hide the others.
    """
    found: Dict[str, ToolBase] = {}
    pkg = importlib.import_module(TOOLS_PKG)
    for m in pkgutil.iter_modules(pkg.__path__):
        if not m.ispkg:
            continue
        mod_name = f"{TOOLS_PKG}.{m.name}"
        try:
            mod = importlib.import_module(mod_name)
        except Exception as e:
            logger.exception(f"Failed loading tool {mod_name}: {e}")
            continue
        tool = getattr(mod, "TOOL", None)
        if not isinstance(tool, ToolBase):
            logger.warning(f"Module {mod_name} has no usable TOOL export; skipping.")
            continue
        if tool.meta.id in found:
            logger.warning(f"Duplicate tool id {tool.meta.id!r} in {mod_name}; keeping the first.")
            continue
        found[tool.meta.id] = tool
    return sorted(found.values(), key=lambda t: (t.meta.category.lower(), t.meta.name.lower()))


def get_tool(tool_id: str) -> ToolBase:
    for tool in discover_tools():
        if tool.meta.id == tool_id:
            return tool
    raise KeyError(f"No tool registered with id {tool_id!r}")
