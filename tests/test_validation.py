# tests/test_validation.py
import logging

import pytest

from dcsim_core import Node, Resistor, VoltageSource, CurrentSource, TopologySnapshot
from dcsim_core.validation import ValidationError, ValidationIssueCode, ValidationIssueLevel
from dcsim_core.validation.topology_validator import TopologyValidator
from tests.conftest import build_snapshot


def issue_codes(issues, level=None):
    return [i.code for i in issues if level is None or i.level == level]


class TestStructuralChecks:

    def test_valid_divider_has_no_issues(self, divider_snapshot):
        validator = TopologyValidator(divider_snapshot)
        assert validator.validate() == []
        assert not validator.has_errors()
        validator.raise_for_errors()

    def test_missing_ground_is_an_error(self):
        snapshot = build_snapshot([1, 2], [("R", 1, 2, 100)])
        validator = TopologyValidator(snapshot)
        issues = validator.validate()
        assert issue_codes(issues, ValidationIssueLevel.ERROR) == ["GND_MISSING"]
        with pytest.raises(ValidationError, match="no ground node"):
            validator.raise_for_errors()

    def test_dangling_element_and_bad_resistance_are_reported_together(self):
        snapshot = TopologySnapshot.from_iterables(
            [Node(0), Node(1)],
            [Resistor(1, 0, 0.0), VoltageSource(1, 9, 5.0)],
        )
        validator = TopologyValidator(snapshot)
        issues = validator.validate()
        assert issue_codes(issues, ValidationIssueLevel.ERROR) == ["ELEM_NODE_UNKNOWN", "ELEM_VALUE_INVALID"]

        with pytest.raises(ValidationError) as excinfo:
            validator.raise_for_errors()
        report = excinfo.value.get_diagnostic_report()
        assert "Found 2 error(s)" in report
        assert "V 1-9" in report

    def test_non_finite_source_values_are_errors(self):
        snapshot = TopologySnapshot.from_iterables(
            [Node(0), Node(1)],
            [Resistor(1, 0, 10.0), VoltageSource(1, 0, float("nan")), CurrentSource(0, 1, float("inf"))],
        )
        issues = TopologyValidator(snapshot).validate()
        errors = [i for i in issues if i.level == ValidationIssueLevel.ERROR]
        assert [i.code for i in errors] == ["ELEM_VALUE_INVALID", "ELEM_VALUE_INVALID"]
        assert [i.element for i in errors] == ["V 1-0", "I 0-1"]

    def test_connectivity_is_skipped_when_errors_exist(self):
        snapshot = build_snapshot([1, 2, 3], [("R", 1, 2, 100)])
        issues = TopologyValidator(snapshot).validate()
        assert issue_codes(issues) == ["GND_MISSING"]


class TestConnectivityChecks:

    def test_floating_nodes_warn(self, isolated_loop_snapshot, caplog):
        with caplog.at_level(logging.WARNING):
            issues = TopologyValidator(isolated_loop_snapshot).validate()
        floating = [i for i in issues if i.code == ValidationIssueCode.NODE_FLOATING.code]
        assert [i.node_id for i in floating] == [2, 3]
        assert all(i.level == ValidationIssueLevel.WARNING for i in floating)
        assert "Node 2 has no conductive path" in caplog.text

    def test_floating_class_reports_every_member(self):
        snapshot = build_snapshot([0, 1, 2, 3, 4], [("R", 1, 0, 100), ("C", 2, 4, None), ("R", 2, 3, 50)])
        issues = TopologyValidator(snapshot).validate()
        floating = [i.node_id for i in issues if i.code == ValidationIssueCode.NODE_FLOATING.code]
        assert floating == [2, 4, 3]

    def test_unconnected_node_is_not_also_reported_floating(self):
        snapshot = build_snapshot([0, 1, 4], [("R", 1, 0, 100)])
        issues = TopologyValidator(snapshot).validate()
        assert issue_codes(issues) == ["NODE_UNCONNECTED"]
        assert issues[0].node_id == 4

    def test_shorted_voltage_source_warns(self):
        snapshot = build_snapshot([0, 1, 2], [("R", 1, 0, 100), ("V", 1, 2, 5), ("C", 1, 2, None)])
        issues = TopologyValidator(snapshot).validate()
        assert issue_codes(issues, ValidationIssueLevel.WARNING) == ["VSRC_SHORTED"]
        assert issues[0].element == "V 1-2"

    def test_resistor_shorted_by_cable_is_info(self):
        snapshot = build_snapshot([0, 1, 2], [("V", 1, 0, 5), ("R", 1, 2, 100), ("C", 2, 1, None)])
        issues = TopologyValidator(snapshot).validate()
        assert issue_codes(issues) == ["RES_SHORTED_BY_CABLE"]
        assert issues[0].level == ValidationIssueLevel.INFO

    def test_validator_exposes_consolidation_it_used(self, divider_snapshot):
        validator = TopologyValidator(divider_snapshot)
        validator.validate()
        assert validator.consolidation is not None
        assert validator.consolidation.representative_map == {0: 0, 1: 1, 2: 2}


class TestValidationError:

    def test_only_error_level_issues_are_kept(self, isolated_loop_snapshot):
        issues = TopologyValidator(isolated_loop_snapshot).validate()
        error = ValidationError(issues)
        assert error.issues == []

    def test_from_code_builds_single_issue(self):
        error = ValidationError.from_code(ValidationIssueCode.NODE_DUPLICATE, node_id=3)
        assert str(error) == "A node with id 3 already exists."
        assert error.issues[0].node_id == 3
        assert "Node:           3" in error.get_diagnostic_report()
