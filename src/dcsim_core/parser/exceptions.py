# src/dcsim_core/parser/exceptions.py
"""
Defines the diagnosable exceptions of the loading stage.

Only file-level failures are exceptions. A malformed individual record in a circuit
file is not fatal: the loader skips it and reports a `LoadDiagnostic` instead.

`ParsingError` covers missing or unreadable files and invalid YAML syntax, while
`SchemaValidationError` covers YAML documents whose structure does not match the
Cerberus schema.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from ..errors import DiagnosableError, format_diagnostic_report


class BaseParsingError(DiagnosableError):
    """A local, concrete base class for all file loading errors."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Parsing Error",
            details=str(self),
            suggestion="Please check the format and content of the circuit file.",
            context={}
        )


@dataclass()
class ParsingError(BaseParsingError):
    """
    Raised when a circuit file cannot be read at all: the file does not exist,
    cannot be opened, or contains invalid YAML syntax.
    """
    details: str
    file_path: Path

    def __str__(self):
        return f"Parsing error in file '{self.file_path}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Circuit File Error",
            details=self.details,
            suggestion="Ensure the file exists, has the correct read permissions, and is a valid circuit file (line format or YAML).",
            context={'source_file': self.file_path}
        )


@dataclass()
class SchemaValidationError(BaseParsingError):
    """
    Raised when a YAML netlist is syntactically valid but does not match the
    required document structure (e.g. missing 'nodes', wrong field types).
    """
    errors: Dict[str, Any]
    file_path: Path

    def _error_lines(self):
        return [f"  - Field '{field}': {messages}" for field, messages in sorted(self.errors.items())]

    def __str__(self):
        return (
            f"YAML schema validation failed for file '{self.file_path}':\n"
            + "\n".join(self._error_lines())
        )

    def get_diagnostic_report(self) -> str:
        details = (
            "The structure of the YAML file does not conform to the required schema.\n"
            f"See details for {len(self.errors)} issue(s) below:\n\n" + "\n".join(self._error_lines())
        )
        return format_diagnostic_report(
            error_type="YAML Schema Validation Error",
            details=details,
            suggestion="A netlist needs a 'nodes' list of {id, x, y} and an 'elements' list of {kind, node1, node2, value}.",
            context={'source_file': self.file_path}
        )
