# src/dcsim_core/simulation/mapper.py
import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..analysis.results import ConsolidationResult
from ..constants import SHORT_CIRCUIT_VOLTAGE_THRESHOLD
from ..data_structures import Resistor, TopologySnapshot
from ..validation.issues import ValidationIssue
from .results import CircuitSolution, MnaSystem, ResistorReport

logger = logging.getLogger(__name__)


class ResultMapper:
    """
    Projects a solution vector back onto the user's original node ids.

    The consolidation passed in must be the one the system was assembled from; the
    mapper never recomputes the representative mapping.
    """
    def __init__(self, snapshot: TopologySnapshot, consolidation: ConsolidationResult, system: MnaSystem):
        self.snapshot = snapshot
        self.consolidation = consolidation
        self.system = system

    def map(self, x: np.ndarray, issues: Sequence[ValidationIssue] = ()) -> CircuitSolution:
        if len(x) != self.system.size:
            raise ValueError(f"Solution vector has {len(x)} entries, system has {self.system.size} unknowns.")
        x = np.array(x, dtype=float)
        x.setflags(write=False)

        consolidated_voltages = self._consolidated_voltages(x)
        node_voltages = self._node_voltages(consolidated_voltages)

        resistor_reports: List[ResistorReport] = []
        for index, element in enumerate(self.snapshot.elements):
            if not isinstance(element, Resistor):
                continue
            v1 = node_voltages.get(element.node1)
            v2 = node_voltages.get(element.node2)
            voltage_drop = (v1 if v1 is not None else 0.0) - (v2 if v2 is not None else 0.0)
            resistor_reports.append(ResistorReport(
                element_index=index,
                element=element,
                current=voltage_drop / element.resistance,
                voltage_drop=voltage_drop,
                is_short_circuited=abs(voltage_drop) < SHORT_CIRCUIT_VOLTAGE_THRESHOLD,
            ))

        n_nodes = self.system.node_count
        source_currents = tuple(
            float(x[n_nodes + k]) for k in range(len(self.system.voltage_source_elements))
        )

        logger.debug(f"Mapped solution onto {len(node_voltages)} original node(s).")
        return CircuitSolution(
            augmented_matrix=self.system.augmented_matrix,
            node_voltages=node_voltages,
            consolidated_voltages=consolidated_voltages,
            representative_map=dict(self.consolidation.representative_map),
            resistor_reports=tuple(resistor_reports),
            voltage_source_currents=source_currents,
            solution_vector=x,
            system=self.system,
            issues=tuple(issues),
        )

    def _consolidated_voltages(self, x: np.ndarray) -> Dict[int, float]:
        voltages: Dict[int, float] = {}
        for node in self.consolidation.nodes:
            if self.consolidation.is_ground(node.id):
                voltages[node.id] = 0.0
            else:
                voltages[node.id] = float(x[self.system.node_index[node.id]])
        return voltages

    def _node_voltages(self, consolidated_voltages: Dict[int, float]) -> Dict[int, Optional[float]]:
        node_voltages: Dict[int, Optional[float]] = {}
        for node in self.snapshot.nodes:
            if node.is_ground:
                node_voltages[node.id] = 0.0
                continue
            rep = self.consolidation.representative(node.id)
            node_voltages[node.id] = consolidated_voltages.get(rep) if rep is not None else None
        return node_voltages
