# tests/test_topology_analyzer.py
import networkx as nx
import pytest

from dcsim_core.analysis import TopologyAnalyzer, consolidate
from tests.conftest import build_snapshot


def analyze(snapshot):
    return TopologyAnalyzer(snapshot, consolidate(snapshot)).analyze()


class TestTopologyAnalyzer:

    def test_divider_is_fully_grounded(self, divider_snapshot):
        results = analyze(divider_snapshot)
        assert results.grounded_nodes == {0, 1, 2}
        assert results.floating_nodes == frozenset()
        assert results.unconnected_nodes == frozenset()
        assert isinstance(results.graph, nx.MultiGraph)
        assert results.graph.number_of_edges() == 3

    def test_isolated_loop_is_floating(self, isolated_loop_snapshot):
        results = analyze(isolated_loop_snapshot)
        assert results.floating_nodes == {2, 3}
        assert 1 in results.grounded_nodes

    def test_current_sources_do_not_ground_a_node(self):
        snapshot = build_snapshot([0, 1, 2], [("R", 1, 0, 100), ("I", 0, 2, 0.001)])
        results = analyze(snapshot)
        assert results.floating_nodes == {2}

    def test_cable_to_ground_grounds_the_class(self):
        snapshot = build_snapshot([0, 1, 2], [("R", 1, 2, 100), ("C", 2, 0, None)])
        analyzer = TopologyAnalyzer(snapshot, consolidate(snapshot))
        assert analyzer.get_floating_nodes() == set()
        assert analyzer.is_node_grounded(2)
        assert analyzer.is_node_grounded(1)

    def test_unconnected_nodes_are_reported(self):
        snapshot = build_snapshot([0, 1, 4], [("R", 1, 0, 100)])
        results = analyze(snapshot)
        assert results.unconnected_nodes == {4}
        assert 4 in results.floating_nodes

    def test_cabled_sources_and_resistors_become_self_loops(self):
        snapshot = build_snapshot(
            [0, 1, 2],
            [("R", 1, 0, 100), ("V", 1, 2, 5), ("C", 1, 2, None), ("R", 2, 1, 10)],
        )
        results = analyze(snapshot)
        assert results.shorted_voltage_sources == (1,)
        assert results.shorted_resistors == (3,)

    def test_results_are_memoized(self, divider_snapshot):
        analyzer = TopologyAnalyzer(divider_snapshot, consolidate(divider_snapshot))
        assert analyzer.analyze() is analyzer.analyze()

    def test_requires_consolidation_result(self, divider_snapshot):
        with pytest.raises(TypeError):
            TopologyAnalyzer(divider_snapshot, None)
