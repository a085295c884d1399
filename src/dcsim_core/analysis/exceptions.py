# src/dcsim_core/analysis/exceptions.py
"""
Defines custom, diagnosable exceptions for the analysis services.
"""
from dataclasses import dataclass
from ..errors import DiagnosableError, format_diagnostic_report


@dataclass()
class TopologyAnalysisError(DiagnosableError):
    """Custom exception for unexpected failures during connectivity analysis."""
    details: str

    def __str__(self):
        return self.details

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Topological Analysis Error",
            details=self.details,
            suggestion="This may indicate an internal error or a fundamental problem with the circuit's connectivity graph.",
            context={}
        )
