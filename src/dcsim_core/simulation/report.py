# src/dcsim_core/simulation/report.py
import logging
from typing import List

from ..data_structures import TopologySnapshot
from .results import CircuitSolution

logger = logging.getLogger(__name__)


def format_number(value: float) -> str:
    """Up to four decimals, trailing zeros dropped: 2.5 -> '2.5', 10.0 -> '10'."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def format_solution_report(solution: CircuitSolution, snapshot: TopologySnapshot) -> str:
    """
    Renders the human-readable results of a solve: the augmented matrix, the voltage
    of every original node (N/A when not available), the current and voltage drop of
    every resistor, and the branch current of every voltage source.
    """
    lines: List[str] = [
        "--- Augmented matrix [A | b] ---",
        solution.augmented_matrix.rstrip("\n"),
        "",
        "--- Node voltages ---",
    ]
    for node in snapshot.nodes:
        v = solution.voltage(node.id)
        if v is None:
            lines.append(f"Node {node.id} -> V = N/A")
        else:
            lines.append(f"Node {node.id} -> V = {format_number(v)} V")

    lines.append("")
    lines.append("--- Resistor currents ---")
    for report in solution.resistor_reports:
        element = report.element
        line = (
            f"Resistor {element.formatted_value} between N{element.node1} and N{element.node2}: "
            f"I = {format_number(report.current)} A, Vdrop = {format_number(report.voltage_drop)} V"
        )
        if report.is_short_circuited:
            line += "  --> short-circuited"
        lines.append(line)

    sources = snapshot.voltage_sources
    if sources:
        lines.append("")
        lines.append("--- Voltage source currents ---")
        for source, current in zip(sources, solution.voltage_source_currents):
            lines.append(
                f"Source {source.formatted_value} between N{source.node1} (+) and N{source.node2}: "
                f"I = {format_number(current)} A"
            )

    return "\n".join(lines) + "\n"
