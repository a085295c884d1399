# src/dcsim_core/analysis/topology.py
"""
Connectivity analysis of a consolidated topology, used for early diagnostics.
"""
import logging
from typing import Optional, Set

import networkx as nx

from ..data_structures import Resistor, TopologySnapshot, VoltageSource
from .exceptions import TopologyAnalysisError
from .results import ConsolidationResult, TopologyAnalysisResults

logger = logging.getLogger(__name__)


class TopologyAnalyzer:
    """
    Builds the conduction graph of a consolidated topology and classifies its nodes.

    This is a stateless service over an immutable snapshot and its consolidation; the
    result is computed once and memoized on the instance.
    """
    def __init__(self, snapshot: TopologySnapshot, consolidation: ConsolidationResult):
        if not isinstance(snapshot, TopologySnapshot):
            raise TypeError("TopologyAnalyzer requires a TopologySnapshot.")
        if not isinstance(consolidation, ConsolidationResult):
            raise TypeError("TopologyAnalyzer requires a ConsolidationResult.")
        self.snapshot = snapshot
        self.consolidation = consolidation
        self._analysis_results: Optional[TopologyAnalysisResults] = None

    def analyze(self) -> TopologyAnalysisResults:
        if self._analysis_results is not None:
            return self._analysis_results

        try:
            graph = self._build_conduction_graph()
            grounded = self._compute_grounded_nodes(graph)
            floating = {
                n.id for n in self.consolidation.non_ground_nodes if n.id not in grounded
            }
            results = TopologyAnalysisResults(
                graph=graph,
                grounded_nodes=frozenset(grounded),
                floating_nodes=frozenset(floating),
                unconnected_nodes=frozenset(self._compute_unconnected_nodes()),
                shorted_voltage_sources=self._find_self_loops(VoltageSource),
                shorted_resistors=self._find_self_loops(Resistor),
            )
        except Exception as e:
            raise TopologyAnalysisError(
                details=f"An unexpected error occurred during topology analysis: {e}"
            ) from e

        logger.debug(
            f"Topology analysis: {len(results.grounded_nodes)} grounded, "
            f"{len(results.floating_nodes)} floating, {len(results.unconnected_nodes)} unconnected node(s)."
        )
        self._analysis_results = results
        return results

    def get_floating_nodes(self) -> Set[int]:
        return set(self.analyze().floating_nodes)

    def is_node_grounded(self, node_id: int) -> bool:
        """Checks whether an original node id has a conductive path to ground."""
        rep = self.consolidation.representative(node_id)
        return rep is not None and rep in self.analyze().grounded_nodes

    def _build_conduction_graph(self) -> nx.MultiGraph:
        graph = nx.MultiGraph()
        graph.add_nodes_from(n.id for n in self.consolidation.nodes)
        for index, element in enumerate(self.consolidation.elements):
            if isinstance(element, (Resistor, VoltageSource)):
                graph.add_edge(element.node1, element.node2, key=index, kind=element.kind.code)
        return graph

    def _compute_grounded_nodes(self, graph: nx.MultiGraph) -> Set[int]:
        ground_rep = self.consolidation.ground_representative
        if ground_rep is None or ground_rep not in graph:
            return set()
        return set(nx.node_connected_component(graph, ground_rep))

    def _compute_unconnected_nodes(self) -> Set[int]:
        touched = {node_id for e in self.snapshot.elements for node_id in (e.node1, e.node2)}
        return {n.id for n in self.snapshot.nodes if n.id not in touched and not n.is_ground}

    def _find_self_loops(self, element_type) -> tuple:
        return tuple(
            index for index, element in enumerate(self.consolidation.elements)
            if isinstance(element, element_type) and element.node1 == element.node2
        )
