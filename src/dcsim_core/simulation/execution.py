# src/dcsim_core/simulation/execution.py
"""
Provides the primary public API function for solving a circuit.

`solve_circuit` is a thin Facade over the `SimulationEngine`: it takes the
snapshot, runs the engine, and turns every failure, including the engine's
explicit `SolveFailure` result, into a single `SolveRunError` whose message is an
actionable diagnostic report. The original exception is always chained.
"""
import logging
from typing import Optional, Union

from ..data_structures import Topology, TopologySnapshot
from ..errors import SolveRunError, DiagnosableError, format_diagnostic_report

from .config import SolveOptions
from .engine import SimulationEngine
from .results import CircuitSolution, SolveFailure

logger = logging.getLogger(__name__)


def solve_circuit(
    topology: Union[Topology, TopologySnapshot],
    options: Optional[SolveOptions] = None,
) -> CircuitSolution:
    """
    Solves a circuit and returns its complete DC solution.

    Args:
        topology: An editable `Topology` (a snapshot is taken internally, under its
                  lock) or an already-taken `TopologySnapshot`.
        options: Optional `SolveOptions`; defaults validate the topology first.

    Returns:
        The `CircuitSolution` with node voltages, resistor currents and the
        augmented matrix that was solved.

    Raises:
        SolveRunError: If the topology is invalid or the system is singular.
    """
    if isinstance(topology, Topology):
        snapshot = topology.snapshot()
    elif isinstance(topology, TopologySnapshot):
        snapshot = topology
    else:
        raise TypeError(f"solve_circuit expects a Topology or TopologySnapshot, got {type(topology).__name__}.")

    try:
        outcome = SimulationEngine(snapshot, options).run()
        if isinstance(outcome, SolveFailure):
            raise outcome.error
        return outcome

    except DiagnosableError as e:
        logger.error(f"A diagnosable error occurred during the solve: {e}")
        raise SolveRunError(e.get_diagnostic_report()) from e

    except Exception as e:
        logger.critical(f"An unexpected internal error occurred during the solve: {e}", exc_info=True)
        report = format_diagnostic_report(
            error_type=f"An Unexpected Solve Error Occurred ({type(e).__name__})",
            details=f"The solver encountered an unexpected internal error: {e}",
            suggestion="This may be a bug. Review the traceback and consider filing a bug report.",
            context={}
        )
        raise SolveRunError(report) from e
