# src/dcsim_core/errors.py
import logging
from typing import Any, Dict, Protocol, abstractmethod
from typing import runtime_checkable

logger = logging.getLogger(__name__)

# --- User-Facing Exception Hierarchy ---

class DcSimError(Exception):
    """Base class for all custom, user-facing errors in DCSim Core."""
    pass

class TopologyLoadError(DcSimError):
    """
    Raised when a circuit description file cannot be loaded at all (missing file,
    unreadable content, invalid document structure). Individual malformed lines are
    not fatal and are reported as load diagnostics instead.
    The message is a pre-formatted, user-friendly diagnostic report.
    """
    pass

class SolveRunError(DcSimError):
    """
    Raised when solving a topology fails for any reason, such as a validation error
    or a singular system. The message is a pre-formatted, user-friendly diagnostic report.
    """
    pass

class FrameworkLogicError(DcSimError):
    """Raised when an internal contract is violated. Indicates a bug, not a user error."""
    pass


# --- Diagnostic Protocol & Base Exception ---

@runtime_checkable
class Diagnosable(Protocol):
    """
    A protocol for exceptions that can generate their own rich diagnostic report.
    """
    def get_diagnostic_report(self) -> str:
        """Generates a complete, user-friendly, multi-line report string."""
        ...

class DiagnosableError(Exception, Diagnosable):
    """
    A common, concrete base class for all internal exceptions that are diagnosable.

    It inherits from `Exception`, so it can be used in `except` clauses, and declares
    `get_diagnostic_report` abstract so every subclass must provide a report.
    """
    @abstractmethod
    def get_diagnostic_report(self) -> str:
        """
        Abstract method to generate the diagnostic report.
        Subclasses MUST implement this.
        """
        raise NotImplementedError


# --- Stateless Formatting Utility ---

def format_diagnostic_report(
    error_type: str,
    details: str,
    suggestion: str,
    context: Dict[str, Any]
) -> str:
    """
    A stateless helper to format the final multi-line report string, ensuring a
    consistent look and feel for all user-facing diagnostics.

    Args:
        error_type: The high-level category of the error (e.g., "Singular System").
        details: A detailed, potentially multi-line description of the problem.
        suggestion: Actionable advice for the user to resolve the issue.
        context: A dictionary of contextual information (node id, element, file path, user input, etc.).

    Returns:
        A formatted, user-friendly diagnostic report string ready for display.
    """
    lines = [
        "\n",
        "================ DCSim Core: Actionable Diagnostic Report ================",
        f"Error Type:     {error_type}",
    ]
    if (node_id := context.get('node_id')) is not None:
        lines.append(f"Node:           {node_id}")
    if element := context.get('element'):
        lines.append(f"Element:        {element}")
    if source_file := context.get('source_file'):
        lines.append(f"Source File:    {source_file}")
    if line_number := context.get('line_number'):
        lines.append(f"Line:           {line_number}")
    if user_input := context.get('user_input'):
        lines.append(f"User Input:     '{user_input}'")

    lines.append("\nDetails:")
    for line in details.splitlines():
        lines.append(f"  {line}")

    if suggestion:
        lines.append("\nSuggestion:")
        for line in suggestion.splitlines():
            lines.append(f"  {line}")

    lines.append("==========================================================================")
    return "\n".join(lines)
