from __future__ import annotations

TOOL_ID = "psc_beam_flexure"
TOOL_VERSION = "1.0.0"
REPORT_VERSION = "1.0.0"
CODE_BASIS = "ACI 318-19"
DEFAULT_UNITS_SYSTEM = "US"

# Stress-strain curve samples exported with every run
CURVE_POINTS = 200
