# src/dcsim_core/simulation/exceptions.py
"""
Defines custom, diagnosable exceptions specific to assembling and solving the
MNA system.

`SingularSystemError` is special: the solver and the engine hand it back as a
value inside a `SolveFailure` instead of raising it, so that the failure path is
an ordinary, inspectable result. Only the public `solve_circuit` facade raises it
(wrapped in a `SolveRunError`).
"""
import numpy as np
from dataclasses import dataclass

from ..constants import PIVOT_TOLERANCE
from ..errors import DiagnosableError, format_diagnostic_report


@dataclass()
class MnaInputError(DiagnosableError):
    """
    Raised for logical or structural errors encountered while setting up the
    MNA system, before any matrix entry is written.
    """
    details: str

    def __str__(self):
        return self.details

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="MNA Input Error",
            details=self.details,
            suggestion="The consolidated topology handed to the assembler is invalid. Make sure node 0 (ground) exists and every element value is a finite number.",
            context={}
        )


@dataclass()
class SingularSystemError(DiagnosableError, np.linalg.LinAlgError):
    """
    The linear system has no unique solution: elimination met a pivot whose
    magnitude is below the fixed tolerance.

    Uses multiple inheritance so it is recognizable both as a `DiagnosableError`
    and as a standard `LinAlgError`.
    """
    pivot_index: int
    pivot_magnitude: float
    system_size: int

    def __str__(self):
        return (
            f"Singular system detected at pivot {self.pivot_index} of {self.system_size}: "
            f"|pivot| = {self.pivot_magnitude:.3e} < {PIVOT_TOLERANCE:.0e}. "
            "The network has no unique solution."
        )

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Singular System Encountered",
            details=str(self),
            suggestion=(
                "This is usually caused by a node or sub-network without a conductive path to ground "
                "(e.g. connected only through current sources), a loop of ideal voltage sources, "
                "or a voltage source shorted by cables."
            ),
            context={}
        )
