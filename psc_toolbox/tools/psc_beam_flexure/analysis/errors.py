from __future__ import annotations


class AnalysisError(ValueError):
    """Base class for failures that withhold an analysis result."""


class InvalidInputError(AnalysisError):
    pass


class NonConvergenceError(AnalysisError):
    def __init__(self, discrepancy_kip: float, tolerance_kip: float):
        self.discrepancy_kip = float(discrepancy_kip)
        self.tolerance_kip = float(tolerance_kip)
        super().__init__(
            f"Solution did not converge. Equilibrium error = {self.discrepancy_kip:.3f} kips "
            f"(tolerance {self.tolerance_kip:g} kips). Check your inputs."
        )
