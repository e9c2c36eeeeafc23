from __future__ import annotations

import hashlib
import json
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from psc_toolbox.core.paths import tool_data_dir

from .constants import TOOL_ID


def runs_root(tool_id: str = TOOL_ID) -> Path:
    d = tool_data_dir(tool_id) / "runs"
    d.mkdir(parents=True, exist_ok=True)
    return d


def create_run_dir(tool_id: str = TOOL_ID, input_hash: Optional[str] = None) -> Path:
    """Run directory for one calculation package.

    Location:
      <user data dir>/<tool_id>/runs/YYYYMMDD_HHMMSS_<short_hash>/

    The suffix mixes the input hash with a time/pid seed so repeated runs of
    identical inputs never collide.
    """
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    seed = f"{ts}:{os.getpid()}:{time.time_ns()}"
    rand = hashlib.sha256(seed.encode("utf-8")).hexdigest()[:8]
    short = f"{str(input_hash)[:6]}{rand[:2]}" if input_hash else rand

    run_dir = runs_root(tool_id) / f"{ts}_{short}"
    run_dir.mkdir(parents=True, exist_ok=False)
    return run_dir


def _normalize(o: Any) -> Any:
    if isinstance(o, dict):
        return {k: _normalize(o[k]) for k in sorted(o.keys())}
    if isinstance(o, (list, tuple)):
        return [_normalize(x) for x in o]
    if isinstance(o, float):
        # Stable float repr for hashing (12 significant digits)
        return float(f"{o:.12g}")
    return o


def compute_input_hash(inputs: Dict[str, Any]) -> str:
    """Deterministic input hash over normalized, sorted keys (nested inputs included)."""
    payload = json.dumps(_normalize(inputs), sort_keys=True, separators=(",", ":"), ensure_ascii=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]
