import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.info("DCSim Core package initialized.")

from .units import ureg, pint, Quantity, parse_value, parse_quantity
from .data_structures import (
    Node, Resistor, VoltageSource, CurrentSource, Cable, Element, ElementKind,
    Topology, TopologySnapshot, create_element,
)
from .parser import CircuitFileLoader, load_circuit_file, dump_circuit
from .validation.topology_validator import TopologyValidator
from .simulation import (
    SolveOptions, SimulationEngine, CircuitSolution, SolveFailure,
    solve_circuit, format_solution_report,
)
from .errors import DcSimError, TopologyLoadError, SolveRunError

__all__ = [
    # Units
    "ureg", "pint", "Quantity",
    # Value grammar
    "parse_value", "parse_quantity",
    # Data Structures
    "Node", "Resistor", "VoltageSource", "CurrentSource", "Cable", "Element", "ElementKind",
    "Topology", "TopologySnapshot", "create_element",
    # Loader
    "CircuitFileLoader", "load_circuit_file", "dump_circuit",
    # Validation
    "TopologyValidator",
    # Simulation
    "SolveOptions", "SimulationEngine", "CircuitSolution", "SolveFailure",
    "solve_circuit", "format_solution_report",
    # Top-Level Errors (Actionable Diagnostics)
    "DcSimError", "TopologyLoadError", "SolveRunError",
]
