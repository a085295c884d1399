# src/dcsim_core/validation/topology_validator.py
import logging
import math
from typing import List, Optional

from ..constants import GROUND_NODE_ID
from ..data_structures import Resistor, TopologySnapshot
from ..analysis.consolidation import CableConsolidator
from ..analysis.topology import TopologyAnalyzer
from ..analysis.results import ConsolidationResult
from .issues import ValidationIssue, ValidationIssueLevel
from .issue_codes import ValidationIssueCode
from .exceptions import ValidationError

logger = logging.getLogger(__name__)


class TopologyValidator:
    """
    Checks a topology snapshot for structural errors and connectivity problems.

    Structural checks (ground present, element endpoints exist, resistances positive)
    produce ERROR issues and must pass before the MNA system can be assembled.
    Connectivity checks run on the cable-consolidated topology and only produce
    WARNING and INFO issues: a floating node will still be reported as a singular
    system by the solver, this merely explains why ahead of time.
    """

    def __init__(self, snapshot: TopologySnapshot, consolidation: Optional[ConsolidationResult] = None):
        if not isinstance(snapshot, TopologySnapshot):
            raise TypeError("TopologyValidator requires a TopologySnapshot.")
        self.snapshot = snapshot
        self.consolidation = consolidation
        self.issues: List[ValidationIssue] = []

    def validate(self) -> List[ValidationIssue]:
        """
        Runs all checks and returns every issue found (errors, warnings and info).
        The caller decides whether ERROR-level issues halt the operation.
        """
        self.issues = []
        logger.debug(f"Validating topology with {len(self.snapshot.nodes)} node(s) and {len(self.snapshot.elements)} element(s)...")

        self._check_ground()
        self._check_element_references()
        self._check_element_values()

        # Connectivity is only meaningful on a structurally valid topology.
        if not self.has_errors():
            self._check_connectivity()

        if self.issues:
            errors = sum(1 for i in self.issues if i.level == ValidationIssueLevel.ERROR)
            warnings = sum(1 for i in self.issues if i.level == ValidationIssueLevel.WARNING)
            infos = sum(1 for i in self.issues if i.level == ValidationIssueLevel.INFO)
            logger.info(f"Validation complete. Found: {errors} errors, {warnings} warnings, {infos} info messages.")
        else:
            logger.debug("Validation complete with no issues found.")
        return self.issues

    def raise_for_errors(self):
        """Raises a ValidationError if the last `validate()` call found errors."""
        if self.has_errors():
            raise ValidationError(self.issues)

    def has_errors(self) -> bool:
        return any(i.level == ValidationIssueLevel.ERROR for i in self.issues)

    def _add_issue(self, level: ValidationIssueLevel, code: ValidationIssueCode,
                   node_id: Optional[int] = None, element: Optional[str] = None, **details):
        message = code.format_message(node_id=node_id, element=element, **details)
        self.issues.append(ValidationIssue(
            level=level, code=code.code, message=message,
            node_id=node_id, element=element, details=details,
        ))
        if level == ValidationIssueLevel.WARNING:
            logger.warning(message)

    def _check_ground(self):
        if not self.snapshot.has_ground:
            self._add_issue(ValidationIssueLevel.ERROR, ValidationIssueCode.GND_MISSING, ground_id=GROUND_NODE_ID)

    def _check_element_references(self):
        known_ids = set(self.snapshot.node_ids)
        for element in self.snapshot.elements:
            for node_id in dict.fromkeys((element.node1, element.node2)):
                if node_id not in known_ids:
                    self._add_issue(
                        ValidationIssueLevel.ERROR, ValidationIssueCode.ELEM_NODE_UNKNOWN,
                        node_id=node_id, element=element.label,
                    )

    def _check_element_values(self):
        for element in self.snapshot.elements:
            if isinstance(element, Resistor) and not element.resistance > 0:
                self._add_issue(
                    ValidationIssueLevel.ERROR, ValidationIssueCode.ELEM_VALUE_INVALID,
                    element=element.label, value=element.resistance,
                    reason="resistance must be greater than zero",
                )
            elif element.value is not None and not math.isfinite(element.value):
                self._add_issue(
                    ValidationIssueLevel.ERROR, ValidationIssueCode.ELEM_VALUE_INVALID,
                    element=element.label, value=element.value, reason="value must be finite",
                )

    def _check_connectivity(self):
        if self.consolidation is None:
            self.consolidation = CableConsolidator(self.snapshot).consolidate()
        consolidation = self.consolidation
        results = TopologyAnalyzer(self.snapshot, consolidation).analyze()

        for node_id in sorted(results.unconnected_nodes):
            self._add_issue(ValidationIssueLevel.WARNING, ValidationIssueCode.NODE_UNCONNECTED, node_id=node_id)

        # Every member of a floating class floats, not only its canonical node.
        for rep in (n.id for n in consolidation.nodes):
            if rep not in results.floating_nodes:
                continue
            for node_id in consolidation.classes[rep]:
                if node_id not in results.unconnected_nodes:
                    self._add_issue(ValidationIssueLevel.WARNING, ValidationIssueCode.NODE_FLOATING, node_id=node_id)

        for index in results.shorted_voltage_sources:
            self._add_issue(
                ValidationIssueLevel.WARNING, ValidationIssueCode.VSRC_SHORTED,
                element=self.snapshot.elements[index].label,
            )
        for index in results.shorted_resistors:
            self._add_issue(
                ValidationIssueLevel.INFO, ValidationIssueCode.RES_SHORTED_BY_CABLE,
                element=self.snapshot.elements[index].label,
            )
