# tests/conftest.py
import pytest

from dcsim_core import Topology, TopologySnapshot


def build_topology(node_ids, elements_def) -> Topology:
    """
    Programmatically creates an editable Topology through the construction API.
    node_ids: e.g. [0, 1, 2]
    elements_def: e.g. [("V", 1, 0, 5), ("R", 1, 2, "1k"), ("C", 2, 3, None)]
    """
    topology = Topology()
    for node_id in node_ids:
        topology.add_node(node_id, 100 * node_id, 300)
    for kind, node1, node2, value in elements_def:
        topology.add_element(kind, node1, node2, value)
    return topology


def build_snapshot(node_ids, elements_def) -> TopologySnapshot:
    return build_topology(node_ids, elements_def).snapshot()


@pytest.fixture
def divider_snapshot():
    """5 V across two 1 kΩ resistors in series: V(1) = 5, V(2) = 2.5."""
    return build_snapshot(
        [0, 1, 2],
        [("V", 1, 0, 5), ("R", 1, 2, 1000), ("R", 2, 0, 1000)],
    )


@pytest.fixture
def ohm_snapshot():
    """10 mA driven from ground into node 1 through a 1 kΩ load: V(1) = 10."""
    return build_snapshot(
        [0, 1],
        [("R", 0, 1, 1000), ("I", 0, 1, 0.01)],
    )


@pytest.fixture
def isolated_loop_snapshot():
    """A grounded divider plus a resistor loop (2-3) with no path to ground."""
    return build_snapshot(
        [0, 1, 2, 3],
        [("V", 1, 0, 5), ("R", 1, 0, 1000), ("R", 2, 3, 1000)],
    )
