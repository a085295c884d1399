# src/dcsim_core/simulation/engine.py
"""
Defines the `SimulationEngine`, the stateless service that runs one DC solve.

The engine owns the pipeline order: ground check, validation, cable consolidation,
MNA assembly, Gaussian elimination and result mapping. It operates on an immutable
`TopologySnapshot`, so a solve can never mutate the editable topology it came from.
"""
import logging
from dataclasses import replace
from typing import List, Optional

import numpy as np

from ..constants import GROUND_NODE_ID
from ..data_structures import TopologySnapshot
from ..analysis import ConsolidationResult, consolidate
from ..validation import ValidationError, ValidationIssue, ValidationIssueCode, ValidationIssueLevel
from ..validation.topology_validator import TopologyValidator

from .config import SolveOptions
from .mna import MnaAssembler
from .solver import solve_linear_system
from .mapper import ResultMapper
from .results import SolveFailure, SolveOutcome

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Orchestrates a single solve over an immutable snapshot.

    `run()` raises `ValidationError` for invalid topologies and returns a
    `SolveFailure` (rather than raising) when the assembled system is singular.
    """
    def __init__(self, snapshot: TopologySnapshot, options: Optional[SolveOptions] = None):
        if not isinstance(snapshot, TopologySnapshot):
            raise TypeError("SimulationEngine requires a TopologySnapshot.")
        self.snapshot = snapshot
        self.options = options if options is not None else SolveOptions()
        logger.debug(f"SimulationEngine initialized with {self.options}.")

    def run(self) -> SolveOutcome:
        logger.info(
            f"--- Solving DC network: {len(self.snapshot.nodes)} node(s), "
            f"{len(self.snapshot.elements)} element(s) ---"
        )

        # The ground check is not optional: without a reference there is nothing to solve.
        if not self.snapshot.has_ground:
            raise ValidationError.from_code(ValidationIssueCode.GND_MISSING, ground_id=GROUND_NODE_ID)

        issues: List[ValidationIssue] = []
        consolidation: Optional[ConsolidationResult] = None
        if self.options.validate:
            issues, consolidation = self._validate()
        if consolidation is None:
            consolidation = consolidate(self.snapshot)

        system = MnaAssembler(consolidation).assemble()
        logger.debug(f"Augmented matrix [A | b]:\n{system.augmented_matrix}")

        x = solve_linear_system(system.matrix, system.rhs)
        if not isinstance(x, np.ndarray):
            logger.error(f"Solve failed: {x}")
            return SolveFailure(error=x, augmented_matrix=system.augmented_matrix, issues=tuple(issues))

        solution = ResultMapper(self.snapshot, consolidation, system).map(x, issues)
        logger.info("DC solve successful.")
        return solution

    def _validate(self):
        validator = TopologyValidator(self.snapshot)
        issues = validator.validate()
        validator.raise_for_errors()

        if self.options.fail_on_warnings:
            warnings = [i for i in issues if i.level == ValidationIssueLevel.WARNING]
            if warnings:
                raise ValidationError([replace(w, level=ValidationIssueLevel.ERROR) for w in warnings])

        return issues, validator.consolidation
