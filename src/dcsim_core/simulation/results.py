# src/dcsim_core/simulation/results.py
"""
Formal, type-safe contracts for the output of the solve pipeline.

A solve produces exactly one of two results: a complete `CircuitSolution` or a
`SolveFailure` carrying the `SingularSystemError` that stopped it. There is no
partial result.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

import numpy as np

from ..data_structures import Resistor
from ..validation.issues import ValidationIssue
from .exceptions import SingularSystemError


@dataclass(frozen=True)
class MnaSystem:
    """
    The assembled system A·x = b.

    Unknowns are ordered as: one voltage per non-ground consolidated node (in node-list
    order), then one branch current per voltage source (in element-list order).
    `matrix` and `rhs` are read-only; `augmented_matrix` is rendered from these exact arrays.

    Attributes:
        matrix: The n×n coefficient matrix A.
        rhs: The right-hand-side vector b.
        node_index: Canonical node id -> row/column of its voltage unknown.
        voltage_source_elements: Element-list indices of the voltage sources, in unknown order.
        augmented_matrix: Fixed-point rendering of [A | b].
    """
    matrix: np.ndarray
    rhs: np.ndarray
    node_index: Dict[int, int]
    voltage_source_elements: Tuple[int, ...]
    augmented_matrix: str

    @property
    def size(self) -> int:
        return len(self.rhs)

    @property
    def node_count(self) -> int:
        return len(self.node_index)


@dataclass(frozen=True)
class ResistorReport:
    """
    Per-resistor result. `element` is the resistor as declared (original node ids);
    the voltages are taken at the representatives of its endpoints.
    """
    element_index: int
    element: Resistor
    current: float
    voltage_drop: float
    is_short_circuited: bool


@dataclass(frozen=True)
class CircuitSolution:
    """
    The complete result of a successful solve.

    Attributes:
        augmented_matrix: Diagnostic rendering of the system that was solved.
        node_voltages: Every original node id -> its voltage, or None when the id is
                       absent from the consolidated system ("not available").
        consolidated_voltages: Canonical node id -> voltage.
        representative_map: Original node id -> canonical node id.
        resistor_reports: One report per resistor, in element-list order.
        voltage_source_currents: Solved branch current of each voltage source, in element-list order.
        solution_vector: The raw solution x.
        system: The assembled MNA system.
        issues: Non-fatal validation issues found before solving.
    """
    augmented_matrix: str
    node_voltages: Dict[int, Optional[float]]
    consolidated_voltages: Dict[int, float]
    representative_map: Dict[int, int]
    resistor_reports: Tuple[ResistorReport, ...]
    voltage_source_currents: Tuple[float, ...]
    solution_vector: np.ndarray
    system: MnaSystem
    issues: Tuple[ValidationIssue, ...] = field(default=())

    def voltage(self, node_id: int) -> Optional[float]:
        """Voltage of an original node id, or None if it is not available."""
        return self.node_voltages.get(node_id)

    @property
    def matrix(self) -> np.ndarray:
        """A writable copy of the coefficient matrix that was solved."""
        return self.system.matrix.copy()

    @property
    def rhs(self) -> np.ndarray:
        return self.system.rhs.copy()

    @property
    def short_circuited_resistors(self) -> Tuple[ResistorReport, ...]:
        return tuple(r for r in self.resistor_reports if r.is_short_circuited)


@dataclass(frozen=True)
class SolveFailure:
    """The explicit failure result of a solve: the system was singular."""
    error: SingularSystemError
    augmented_matrix: str
    issues: Tuple[ValidationIssue, ...] = field(default=())


SolveOutcome = Union[CircuitSolution, SolveFailure]
