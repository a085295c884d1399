from .exceptions import (
    MnaInputError,
    SingularSystemError,
)
from .config import SolveOptions, ConfigParsingError, parse_solve_options
from .results import MnaSystem, ResistorReport, CircuitSolution, SolveFailure, SolveOutcome
from .mna import MnaAssembler, format_augmented_matrix
from .solver import solve_linear_system
from .mapper import ResultMapper
from .engine import SimulationEngine
from .execution import solve_circuit
from .report import format_solution_report

__all__ = [
    # Exceptions
    "MnaInputError",
    "SingularSystemError",
    # Configuration
    "SolveOptions",
    "ConfigParsingError",
    "parse_solve_options",
    # Result Contracts
    "MnaSystem",
    "ResistorReport",
    "CircuitSolution",
    "SolveFailure",
    "SolveOutcome",
    # Core Services
    "MnaAssembler",
    "format_augmented_matrix",
    "solve_linear_system",
    "ResultMapper",
    "SimulationEngine",
    "solve_circuit",
    "format_solution_report",
]
