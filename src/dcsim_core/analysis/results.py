# src/dcsim_core/analysis/results.py
"""
Formal, immutable result contracts of the analysis services.

Consumers read these objects instead of recomputing anything from the snapshot,
which keeps the consolidation mapping single-sourced across the pipeline.
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

import networkx as nx

from ..constants import GROUND_NODE_ID
from ..data_structures import Element, Node


@dataclass(frozen=True)
class ConsolidationResult:
    """
    The reduced topology produced by the cable consolidator.

    Attributes:
        nodes: One canonical node per cable-connected class, in original node-list order.
        elements: Every original element, in order, with endpoints rewritten to canonical ids.
                  Cables become self-loops and are ignored by the assembler.
        representative_map: Original node id -> canonical node id, for every original node.
        classes: Canonical node id -> ids of all members of its class.
        ground_representative: Canonical id of the class containing the ground node,
                               or None if the snapshot has no ground node.
    """
    nodes: Tuple[Node, ...]
    elements: Tuple[Element, ...]
    representative_map: Dict[int, int]
    classes: Dict[int, Tuple[int, ...]]
    ground_representative: Optional[int]

    def representative(self, node_id: int) -> Optional[int]:
        return self.representative_map.get(node_id)

    def is_ground(self, node_id: int) -> bool:
        """True if `node_id` (original or canonical) belongs to the ground class."""
        if node_id == GROUND_NODE_ID:
            return True
        return (
            self.ground_representative is not None
            and self.representative_map.get(node_id) == self.ground_representative
        )

    @property
    def non_ground_nodes(self) -> Tuple[Node, ...]:
        return tuple(n for n in self.nodes if not self.is_ground(n.id))


@dataclass(frozen=True)
class TopologyAnalysisResults:
    """
    Connectivity facts about a consolidated topology.

    The graph's vertices are canonical node ids; resistors and voltage sources are
    edges. Current sources and cables add no edges: a current source does not fix a
    potential, and cables were already contracted.
    """
    graph: nx.MultiGraph
    grounded_nodes: FrozenSet[int]
    floating_nodes: FrozenSet[int]
    unconnected_nodes: FrozenSet[int]
    shorted_voltage_sources: Tuple[int, ...]
    shorted_resistors: Tuple[int, ...]
