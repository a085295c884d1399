# tests/test_solver.py
import logging

import numpy as np
import pytest
import scipy.linalg
from numpy.testing import assert_allclose

from dcsim_core.simulation import SingularSystemError, solve_linear_system


class TestGaussianElimination:

    def test_matches_reference_solver(self):
        rng = np.random.default_rng(seed=7)
        a = rng.uniform(-5.0, 5.0, size=(6, 6)) + 10.0 * np.eye(6)
        b = rng.uniform(-1.0, 1.0, size=6)
        x = solve_linear_system(a, b)
        assert isinstance(x, np.ndarray)
        assert_allclose(x, scipy.linalg.solve(a, b), rtol=1e-10, atol=1e-12)

    def test_zero_leading_pivot_requires_row_swap(self):
        x = solve_linear_system(np.array([[0.0, 1.0], [1.0, 0.0]]), np.array([2.0, 3.0]))
        assert_allclose(x, [3.0, 2.0])

    def test_tie_keeps_lower_row(self, caplog):
        caplog.set_level(logging.DEBUG, logger="dcsim_core.simulation.solver")
        x = solve_linear_system(np.array([[1.0, 1.0], [-1.0, 1.0]]), np.array([2.0, 0.0]))
        assert_allclose(x, [1.0, 1.0])
        assert "swapped" not in caplog.text

    def test_inputs_are_not_modified(self):
        a = np.array([[0.0, 2.0], [4.0, 1.0]])
        b = np.array([2.0, 5.0])
        a_before, b_before = a.copy(), b.copy()
        solve_linear_system(a, b)
        assert np.array_equal(a, a_before)
        assert np.array_equal(b, b_before)

    def test_read_only_inputs_are_accepted(self):
        a = np.array([[2.0, 0.0], [0.0, 4.0]])
        b = np.array([2.0, 2.0])
        a.setflags(write=False)
        b.setflags(write=False)
        assert_allclose(solve_linear_system(a, b), [1.0, 0.5])

    def test_empty_system(self):
        x = solve_linear_system(np.zeros((0, 0)), np.zeros(0))
        assert x.shape == (0,)

    def test_results_are_bit_identical_across_runs(self):
        a = np.array([[1e-3, -1e-3, 1.0], [-1e-3, 2e-3, 0.0], [1.0, 0.0, 0.0]])
        b = np.array([0.0, 0.0, 5.0])
        assert np.array_equal(solve_linear_system(a, b), solve_linear_system(a, b))


class TestSingularity:

    def test_singular_system_is_returned_not_raised(self):
        result = solve_linear_system(np.array([[1.0, 2.0], [2.0, 4.0]]), np.array([1.0, 2.0]))
        assert isinstance(result, SingularSystemError)
        assert isinstance(result, np.linalg.LinAlgError)
        assert result.pivot_index == 1
        assert result.system_size == 2
        assert result.pivot_magnitude < 1e-12

    def test_pivot_just_below_tolerance_is_singular(self):
        result = solve_linear_system(np.array([[1e-13]]), np.array([1.0]))
        assert isinstance(result, SingularSystemError)
        assert result.pivot_index == 0

    def test_small_but_valid_pivot_is_accepted(self):
        x = solve_linear_system(np.array([[1e-11]]), np.array([1e-11]))
        assert_allclose(x, [1.0])

    def test_singular_report_is_actionable(self):
        error = solve_linear_system(np.zeros((2, 2)), np.zeros(2))
        report = error.get_diagnostic_report()
        assert "Singular System Encountered" in report
        assert "pivot 0 of 2" in report


class TestInputChecks:

    def test_non_square_matrix(self):
        with pytest.raises(ValueError, match="must be square"):
            solve_linear_system(np.zeros((2, 3)), np.zeros(2))

    def test_rhs_length_mismatch(self):
        with pytest.raises(ValueError, match="does not match"):
            solve_linear_system(np.eye(2), np.zeros(3))
