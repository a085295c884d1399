# src/dcsim_core/analysis/consolidation.py
"""
Collapses nodes joined by ideal wires (cables) into single logical nodes.

Cables carry no independent unknown, so every equivalence class of cable-connected
nodes is represented by one canonical node: the first node of the class in the
original node-list order. The id -> canonical id mapping is computed exactly once
per snapshot and travels with the `ConsolidationResult`, so the assembler and the
result mapper always agree on it.
"""
import logging
from typing import Dict, Iterable, List, Tuple

from ..constants import GROUND_NODE_ID
from ..data_structures import Cable, Element, Node, TopologySnapshot
from ..validation.exceptions import ValidationError
from ..validation.issue_codes import ValidationIssueCode
from .results import ConsolidationResult

logger = logging.getLogger(__name__)


class DisjointSet:
    """
    Union-find forest keyed by node id.

    `find` is iterative and compresses paths. `union` attaches the root of the
    first argument under the root of the second, without rank or size balancing.
    """
    def __init__(self, items: Iterable[int] = ()):
        self._parent: Dict[int, int] = {item: item for item in items}

    def __contains__(self, item: int) -> bool:
        return item in self._parent

    def add(self, item: int):
        self._parent.setdefault(item, item)

    def find(self, item: int) -> int:
        parent = self._parent
        root = item
        while parent[root] != root:
            root = parent[root]
        # Second pass: point every node on the path directly at the root.
        while parent[item] != root:
            parent[item], item = root, parent[item]
        return root

    def union(self, a: int, b: int):
        root_a, root_b = self.find(a), self.find(b)
        if root_a != root_b:
            self._parent[root_a] = root_b


def build_representative_map(node_ids: List[int], cables: Iterable[Cable]) -> Dict[int, int]:
    """
    Maps every node id to the canonical node id of its cable-connected class.

    This is a pure function of the node order and the cable list. The canonical node
    of a class is the first id in `node_ids` that belongs to it.

    Raises:
        ValidationError: If a cable references a node id not in `node_ids`.
    """
    forest = DisjointSet(node_ids)
    for cable in cables:
        for endpoint in (cable.node1, cable.node2):
            if endpoint not in forest:
                raise ValidationError.from_code(
                    ValidationIssueCode.ELEM_NODE_UNKNOWN, node_id=endpoint, element=cable.label
                )
        forest.union(cable.node1, cable.node2)

    canonical_by_root: Dict[int, int] = {}
    representative_map: Dict[int, int] = {}
    for node_id in node_ids:
        root = forest.find(node_id)
        canonical = canonical_by_root.setdefault(root, node_id)
        representative_map[node_id] = canonical
    return representative_map


class CableConsolidator:
    """Produces the reduced node/element set used for assembly and solving."""

    def __init__(self, snapshot: TopologySnapshot):
        if not isinstance(snapshot, TopologySnapshot):
            raise TypeError("CableConsolidator requires a TopologySnapshot.")
        self.snapshot = snapshot

    def consolidate(self) -> ConsolidationResult:
        node_ids = self.snapshot.node_ids
        representative_map = build_representative_map(node_ids, self.snapshot.cables)

        canonical_nodes: List[Node] = [n for n in self.snapshot.nodes if representative_map[n.id] == n.id]
        rewritten = tuple(self._rewrite(e, representative_map) for e in self.snapshot.elements)

        classes: Dict[int, List[int]] = {}
        for node_id in node_ids:
            classes.setdefault(representative_map[node_id], []).append(node_id)

        ground_representative = representative_map.get(GROUND_NODE_ID)

        logger.debug(
            f"Consolidated {len(node_ids)} nodes into {len(canonical_nodes)} classes "
            f"using {len(self.snapshot.cables)} cable(s)."
        )
        return ConsolidationResult(
            nodes=tuple(canonical_nodes),
            elements=rewritten,
            representative_map=representative_map,
            classes={rep: tuple(members) for rep, members in classes.items()},
            ground_representative=ground_representative,
        )

    @staticmethod
    def _rewrite(element: Element, representative_map: Dict[int, int]) -> Element:
        try:
            return element.with_endpoints(representative_map[element.node1], representative_map[element.node2])
        except KeyError as e:
            raise ValidationError.from_code(
                ValidationIssueCode.ELEM_NODE_UNKNOWN, node_id=e.args[0], element=element.label
            ) from None


def consolidate(snapshot: TopologySnapshot) -> ConsolidationResult:
    """Convenience wrapper around `CableConsolidator(snapshot).consolidate()`."""
    return CableConsolidator(snapshot).consolidate()
