# src/dcsim_core/simulation/mna.py

import logging
import math
from typing import Dict, List, Tuple

import numpy as np

from ..analysis.results import ConsolidationResult
from ..constants import MATRIX_CELL_FORMAT
from ..data_structures import Cable, CurrentSource, Node, Resistor, VoltageSource
from ..errors import FrameworkLogicError
from .exceptions import MnaInputError
from .results import MnaSystem


logger = logging.getLogger(__name__)


def format_augmented_matrix(matrix: np.ndarray, rhs: np.ndarray) -> str:
    """Renders [A | b] with fixed-point, column-aligned cells, one row per line."""
    lines = []
    for row, b_value in zip(matrix, rhs):
        cells = [MATRIX_CELL_FORMAT.format(value) for value in row]
        cells.append(MATRIX_CELL_FORMAT.format(b_value))
        lines.append("".join(cells))
    return "".join(line + "\n" for line in lines)


class MnaAssembler:
    """
    Constructs the Modified Nodal Analysis (MNA) system of a cable-consolidated topology.

    It is responsible for:
    1.  Assigning an unknown to every non-ground consolidated node, in node-list order.
    2.  Assigning a branch-current unknown to every voltage source, in element-list order.
    3.  Writing one KCL equation per non-ground node and one constraint equation
        V(node1) - V(node2) = voltage per voltage source.

    The ground class (the class containing node 0, whatever its canonical id) is the
    reference and never receives an unknown.
    """
    def __init__(self, consolidation: ConsolidationResult):
        if not isinstance(consolidation, ConsolidationResult):
            raise TypeError("MnaAssembler requires a ConsolidationResult.")
        if consolidation.ground_representative is None:
            raise MnaInputError(details="The consolidated topology has no ground node (id 0); there is no reference potential.")
        for element in consolidation.elements:
            if element.value is not None and not math.isfinite(element.value):
                raise MnaInputError(details=f"Element '{element.label}' has non-finite value {element.value}.")

        self.consolidation = consolidation
        self.elements = consolidation.elements

        self.node_index: Dict[int, int] = {}
        self.non_ground_nodes: List[Node] = []
        self.voltage_source_elements: Tuple[int, ...] = ()

        self._assign_indices()

        logger.debug(
            f"MNA Assembler initialized. Node unknowns: {self.node_count}, "
            f"voltage source unknowns: {len(self.voltage_source_elements)}."
        )

    @property
    def node_count(self) -> int:
        return len(self.node_index)

    @property
    def size(self) -> int:
        return self.node_count + len(self.voltage_source_elements)

    def _assign_indices(self):
        for node in self.consolidation.nodes:
            if self.consolidation.is_ground(node.id):
                continue
            self.node_index[node.id] = len(self.node_index)
            self.non_ground_nodes.append(node)

        self.voltage_source_elements = tuple(
            index for index, element in enumerate(self.elements) if isinstance(element, VoltageSource)
        )

    def assemble(self) -> MnaSystem:
        """Builds A and b and freezes them together with their diagnostic rendering."""
        n = self.size
        n_nodes = self.node_count
        matrix = np.zeros((n, n), dtype=float)
        rhs = np.zeros(n, dtype=float)

        source_column = {
            element_index: n_nodes + k for k, element_index in enumerate(self.voltage_source_elements)
        }

        # KCL at every non-ground node.
        for node in self.non_ground_nodes:
            eq = self.node_index[node.id]
            for element_index, element in enumerate(self.elements):
                if not element.touches(node.id):
                    continue
                match element:
                    case Resistor(node1=n1, node2=n2, resistance=resistance):
                        g = 1.0 / resistance
                        matrix[eq, eq] += g
                        other = n2 if n1 == node.id else n1
                        col = self.node_index.get(other)
                        if col is not None:
                            matrix[eq, col] -= g
                    case CurrentSource(node1=n1, node2=n2, current=current):
                        if n1 == node.id:
                            rhs[eq] -= current
                        if n2 == node.id:
                            rhs[eq] += current
                    case VoltageSource(node1=n1, node2=n2):
                        col = source_column[element_index]
                        if n1 == node.id:
                            matrix[eq, col] += 1.0
                        if n2 == node.id:
                            matrix[eq, col] -= 1.0
                    case Cable():
                        pass
                    case _:
                        raise FrameworkLogicError(f"Unsupported element type: {type(element).__name__}")

        # One constraint row per voltage source.
        for k, element_index in enumerate(self.voltage_source_elements):
            source = self.elements[element_index]
            row = n_nodes + k
            col1 = self.node_index.get(source.node1)
            col2 = self.node_index.get(source.node2)
            if col1 is not None:
                matrix[row, col1] = 1.0
            if col2 is not None:
                matrix[row, col2] = -1.0
            rhs[row] = source.voltage

        matrix.setflags(write=False)
        rhs.setflags(write=False)

        logger.debug(f"Assembled MNA system of shape {matrix.shape}.")
        return MnaSystem(
            matrix=matrix,
            rhs=rhs,
            node_index=dict(self.node_index),
            voltage_source_elements=self.voltage_source_elements,
            augmented_matrix=format_augmented_matrix(matrix, rhs),
        )
