# tests/test_simulation.py
import numpy as np
import pytest
import scipy.linalg
from numpy.testing import assert_allclose

from dcsim_core import (
    Node, Resistor, CurrentSource, TopologySnapshot,
    SolveOptions, SimulationEngine, CircuitSolution, SolveFailure, SolveRunError,
    solve_circuit,
)
from dcsim_core.simulation import MnaInputError, SingularSystemError
from dcsim_core.validation import ValidationError
from tests.conftest import build_snapshot, build_topology


def run(snapshot, **options):
    return SimulationEngine(snapshot, SolveOptions(**options)).run()


class TestReferenceCircuits:

    def test_ohms_law(self, ohm_snapshot):
        solution = run(ohm_snapshot)
        assert isinstance(solution, CircuitSolution)
        assert solution.voltage(1) == pytest.approx(10.0, abs=1e-6)
        assert solution.voltage(0) == 0.0

    def test_voltage_divider(self, divider_snapshot):
        solution = run(divider_snapshot)
        assert solution.voltage(1) == pytest.approx(5.0)
        assert solution.voltage(2) == pytest.approx(2.5)

        reports = solution.resistor_reports
        assert [r.element_index for r in reports] == [1, 2]
        assert reports[0].current == pytest.approx(2.5e-3)
        assert reports[0].voltage_drop == pytest.approx(2.5)
        assert not reports[0].is_short_circuited

    def test_voltage_source_branch_current(self, divider_snapshot):
        solution = run(divider_snapshot)
        # The branch unknown is the current flowing out of node1 into the source.
        assert solution.voltage_source_currents == pytest.approx((-2.5e-3,))

    def test_parallel_resistors_act_as_half_resistance(self):
        parallel = run(build_snapshot([0, 1], [("I", 0, 1, 0.01), ("R", 1, 0, 1000), ("R", 1, 0, 1000)]))
        single = run(build_snapshot([0, 1], [("I", 0, 1, 0.01), ("R", 1, 0, 500)]))
        assert parallel.voltage(1) == pytest.approx(5.0)
        assert parallel.voltage(1) == pytest.approx(single.voltage(1))
        assert [r.current for r in parallel.resistor_reports] == pytest.approx([0.005, 0.005])

    def test_every_voltage_source_constraint_holds(self):
        snapshot = build_snapshot(
            [0, 1, 2, 3],
            [("V", 1, 0, 12), ("R", 1, 2, 220), ("V", 2, 3, 3.3), ("R", 3, 0, 470), ("R", 2, 0, 1000), ("I", 0, 3, 0.002)],
        )
        solution = run(snapshot)
        for source in snapshot.voltage_sources:
            diff = solution.voltage(source.node1) - solution.voltage(source.node2)
            assert abs(diff - source.voltage) < 1e-9

    def test_solution_matches_reference_solver(self):
        snapshot = build_snapshot(
            [0, 1, 2, 3, 4],
            [("V", 1, 0, 10), ("R", 1, 2, 100), ("R", 2, 3, 220), ("R", 3, 0, 330),
             ("R", 2, 4, 470), ("R", 4, 0, 560), ("I", 4, 3, 0.01)],
        )
        solution = run(snapshot)
        expected = scipy.linalg.solve(solution.matrix, solution.rhs)
        assert_allclose(solution.solution_vector, expected, rtol=1e-10)


class TestCables:

    def test_cable_joined_nodes_report_identical_voltage(self):
        snapshot = build_snapshot(
            [0, 1, 2, 3],
            [("V", 1, 0, 5), ("R", 1, 2, 1000), ("C", 2, 3, None), ("R", 3, 0, 1000)],
        )
        solution = run(snapshot)
        assert solution.voltage(2) == solution.voltage(3)
        assert solution.voltage(3) == pytest.approx(2.5)
        assert solution.representative_map[3] == 2
        assert solution.consolidated_voltages == pytest.approx({0: 0.0, 1: 5.0, 2: 2.5})

    def test_cable_to_ground_pulls_node_to_zero(self):
        snapshot = build_snapshot([0, 1, 2], [("V", 1, 0, 5), ("R", 1, 2, 1000), ("C", 2, 0, None)])
        solution = run(snapshot)
        assert solution.voltage(2) == 0.0
        assert solution.resistor_reports[0].current == pytest.approx(5e-3)

    def test_ground_class_with_non_zero_canonical_id(self):
        snapshot = build_snapshot([5, 0, 1], [("C", 5, 0, None), ("V", 1, 5, 3), ("R", 1, 0, 1000)])
        solution = run(snapshot)
        assert solution.voltage(5) == 0.0
        assert solution.voltage(0) == 0.0
        assert solution.voltage(1) == pytest.approx(3.0)

    def test_resistor_across_a_cable_is_short_circuited(self):
        snapshot = build_snapshot([0, 1, 2], [("V", 1, 0, 5), ("R", 1, 2, 100), ("C", 1, 2, None), ("R", 2, 0, 50)])
        solution = run(snapshot)
        shorted = solution.short_circuited_resistors
        assert [r.element_index for r in shorted] == [1]
        assert shorted[0].current == 0.0
        assert [i.code for i in solution.issues] == ["RES_SHORTED_BY_CABLE"]


class TestFailures:

    def test_missing_ground_fails_before_assembly(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("assembler must not be reached")
        monkeypatch.setattr("dcsim_core.simulation.engine.MnaAssembler", fail)

        snapshot = build_snapshot([1, 2], [("R", 1, 2, 100)])
        for options in ({}, {"validate": False}):
            with pytest.raises(ValidationError) as excinfo:
                run(snapshot, **options)
            assert excinfo.value.codes == ["GND_MISSING"]

    def test_isolated_loop_is_singular(self, isolated_loop_snapshot):
        outcome = run(isolated_loop_snapshot)
        assert isinstance(outcome, SolveFailure)
        assert isinstance(outcome.error, SingularSystemError)
        assert outcome.augmented_matrix.count("\n") == 4
        assert {i.code for i in outcome.issues} == {"NODE_FLOATING"}

    def test_node_fed_only_by_current_source_is_singular(self):
        outcome = run(build_snapshot([0, 1], [("I", 0, 1, 0.001)]))
        assert isinstance(outcome, SolveFailure)

    def test_shorted_voltage_source_is_singular(self):
        snapshot = build_snapshot([0, 1, 2], [("R", 1, 0, 100), ("V", 1, 2, 5), ("C", 1, 2, None)])
        assert isinstance(run(snapshot), SolveFailure)

    def test_fail_on_warnings_promotes_warnings(self, isolated_loop_snapshot):
        with pytest.raises(ValidationError) as excinfo:
            run(isolated_loop_snapshot, fail_on_warnings=True)
        assert set(excinfo.value.codes) == {"NODE_FLOATING"}

    def test_structural_errors_stop_the_solve(self):
        snapshot = TopologySnapshot.from_iterables([Node(0), Node(1)], [Resistor(1, 0, 100.0), CurrentSource(0, 4, 1.0)])
        with pytest.raises(ValidationError) as excinfo:
            run(snapshot)
        assert excinfo.value.codes == ["ELEM_NODE_UNKNOWN"]

    def test_dangling_element_rejected_without_validation(self):
        snapshot = TopologySnapshot.from_iterables([Node(0), Node(1)], [Resistor(1, 4, 100.0)])
        with pytest.raises(ValidationError):
            run(snapshot, validate=False)

    def test_non_finite_values_never_produce_a_solution(self):
        snapshot = TopologySnapshot.from_iterables(
            [Node(0), Node(1)], [CurrentSource(0, 1, float("inf")), Resistor(1, 0, 10.0)]
        )
        with pytest.raises(ValidationError) as excinfo:
            run(snapshot)
        assert excinfo.value.codes == ["ELEM_VALUE_INVALID"]
        with pytest.raises(MnaInputError):
            run(snapshot, validate=False)
        with pytest.raises(SolveRunError, match="finite"):
            solve_circuit(snapshot)


class TestDeterminism:

    def test_repeated_solves_are_bit_identical(self):
        snapshot = build_snapshot(
            [0, 1, 2, 3],
            [("V", 1, 0, 5), ("R", 1, 2, 1000), ("R", 2, 3, 1000), ("R", 3, 0, 1000), ("R", 1, 3, 1000)],
        )
        first, second = run(snapshot), run(snapshot)
        assert np.array_equal(first.matrix, second.matrix)
        assert np.array_equal(first.rhs, second.rhs)
        assert np.array_equal(first.solution_vector, second.solution_vector)
        assert first.augmented_matrix == second.augmented_matrix

    def test_solution_exposes_copies_of_the_system(self, divider_snapshot):
        solution = run(divider_snapshot)
        matrix = solution.matrix
        matrix[0, 0] = 99.0
        assert solution.matrix[0, 0] == pytest.approx(1e-3)

    def test_ground_only_topology(self):
        solution = run(build_snapshot([0], []))
        assert solution.voltage(0) == 0.0
        assert solution.solution_vector.shape == (0,)

    def test_unknown_node_id_is_not_available(self, divider_snapshot):
        assert run(divider_snapshot).voltage(42) is None


class TestSolveCircuit:

    def test_accepts_editable_topology(self):
        topology = build_topology([0, 1, 2], [("V", 1, 0, "5V"), ("R", 1, 2, "1k"), ("R", 2, 0, "1k")])
        solution = solve_circuit(topology)
        assert solution.voltage(2) == pytest.approx(2.5)
        assert len(topology.elements) == 3

    def test_singular_system_raises_run_error(self, isolated_loop_snapshot):
        with pytest.raises(SolveRunError, match="Singular System Encountered") as excinfo:
            solve_circuit(isolated_loop_snapshot)
        assert isinstance(excinfo.value.__cause__, SingularSystemError)

    def test_validation_error_raises_run_error(self):
        topology = build_topology([1, 2], [("R", 1, 2, 10)])
        with pytest.raises(SolveRunError, match="GND_MISSING") as excinfo:
            solve_circuit(topology)
        assert isinstance(excinfo.value.__cause__, ValidationError)
        # A failed solve leaves the editable topology untouched.
        assert topology.snapshot().node_ids == [1, 2]

    def test_rejects_other_inputs(self):
        with pytest.raises(TypeError):
            solve_circuit([Node(0)])
