# src/dcsim_core/parser/loader.py
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import cerberus
import numpy as np
import yaml

from ..data_structures import Cable, ElementKind, Topology, TopologySnapshot
from ..errors import TopologyLoadError
from ..simulation.config import ConfigParsingError, parse_solve_options
from ..validation.exceptions import ValidationError
from .exceptions import BaseParsingError, ParsingError, SchemaValidationError
from .raw_data import LoadDiagnostic, LoadResult

logger = logging.getLogger(__name__)

# Record keywords of the line format. The Spanish spellings are accepted so that
# files written by earlier tools still load.
NODE_KEYWORDS = ("NODE", "NODO")
ELEMENT_KEYWORDS = ("ELEMENT", "ELEMENTO")

YAML_SUFFIXES = (".yaml", ".yml")


class RecordValidator(cerberus.Validator):
    """Cerberus validator with the coercions needed by whitespace-separated records."""

    def _normalize_coerce_upper(self, value):
        return str(value).strip().upper()


class CircuitFileLoader:
    """
    Loads a circuit description into an editable `Topology`.

    Two formats are understood, chosen by file suffix:

    * The line format (any suffix other than .yaml/.yml)::

        # comment
        NODE 0 100 300
        NODE 1 200 300
        ELEMENT R 0 1 4.7k
        ELEMENT V 1 0 5
        ELEMENT C 1 2

    * A YAML netlist with ``nodes``, ``elements`` and optional ``options`` sections.

    Records are applied in file order through the construction API. A record that is
    malformed or rejected by the topology is skipped and reported as a
    `LoadDiagnostic`; loading continues with the next record.
    """

    _node_record_schema = {
        "id": {"type": "integer", "coerce": int, "required": True},
        "x": {"type": "integer", "coerce": int, "required": True},
        "y": {"type": "integer", "coerce": int, "required": True},
    }

    _element_record_schema = {
        "kind": {"type": "string", "coerce": "upper", "required": True, "allowed": [k.code for k in ElementKind]},
        "node1": {"type": "integer", "coerce": int, "required": True},
        "node2": {"type": "integer", "coerce": int, "required": True},
        "value": {"type": "string", "required": False},
    }

    _yaml_schema = {
        "nodes": {
            "type": "list", "required": True,
            "schema": {"type": "dict", "schema": {
                "id": {"type": "integer", "required": True},
                "x": {"type": "integer", "default": 0},
                "y": {"type": "integer", "default": 0},
            }},
        },
        "elements": {
            "type": "list", "required": False, "default": [],
            "schema": {"type": "dict", "schema": {
                "kind": {"type": "string", "required": True, "empty": False},
                "node1": {"type": "integer", "required": True},
                "node2": {"type": "integer", "required": True},
                "value": {"type": ["string", "number"], "required": False, "nullable": True},
            }},
        },
        "options": {"type": "dict", "required": False, "nullable": True},
    }

    def __init__(self):
        self._node_validator = RecordValidator(self._node_record_schema)
        self._element_validator = RecordValidator(self._element_record_schema)
        self._yaml_validator = cerberus.Validator(self._yaml_schema)
        self._yaml_validator.allow_unknown = False
        logger.debug("CircuitFileLoader initialized.")

    def load(self, path: Union[str, Path]) -> LoadResult:
        """
        Loads a circuit file.

        Raises:
            ParsingError: The file is missing or unreadable, or is not valid YAML.
            SchemaValidationError: A YAML netlist does not match the document schema.
        """
        source = Path(path)
        logger.info(f"Loading circuit from: {source}")
        text = self._read_text(source)

        if source.suffix.lower() in YAML_SUFFIXES:
            result = self._load_yaml(text, source)
        else:
            result = self.load_lines(text, source_path=source)

        logger.info(
            f"Loaded {len(result.topology.nodes)} node(s) and {len(result.topology.elements)} element(s) "
            f"with {len(result.diagnostics)} skipped record(s)."
        )
        return result

    def load_lines(self, text: str, source_path: Optional[Path] = None) -> LoadResult:
        """Loads circuit text in the line format."""
        topology = Topology()
        diagnostics: List[LoadDiagnostic] = []

        for line_number, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            message = self._apply_line(topology, line)
            if message is not None:
                diagnostics.append(self._skip(line_number, line, message))

        return LoadResult(topology=topology, diagnostics=tuple(diagnostics), source_path=source_path)

    def _apply_line(self, topology: Topology, line: str) -> Optional[str]:
        """Applies one record; returns the reason it was rejected, or None on success."""
        tokens = line.split()
        keyword = tokens[0].upper()

        if keyword in NODE_KEYWORDS:
            validator, fields = self._node_validator, ("id", "x", "y")
        elif keyword in ELEMENT_KEYWORDS:
            validator, fields = self._element_validator, ("kind", "node1", "node2", "value")
        else:
            return f"Unknown record keyword '{tokens[0]}'."

        # Tokens beyond the record's fields are ignored.
        record = dict(zip(fields, tokens[1:]))
        if not validator.validate(record):
            return self._format_errors(validator.errors)
        record = validator.document

        try:
            if keyword in NODE_KEYWORDS:
                topology.add_node(record["id"], record["x"], record["y"])
            else:
                topology.add_element(record["kind"], record["node1"], record["node2"], record.get("value"))
        except ValidationError as e:
            return str(e)
        return None

    def _load_yaml(self, text: str, source: Path) -> LoadResult:
        try:
            content = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ParsingError(details=f"Invalid YAML syntax: {e}", file_path=source) from e
        if content is None:
            raise ParsingError(details="The YAML file is empty or contains no valid content.", file_path=source)
        if not isinstance(content, dict):
            raise ParsingError(details="The root of the YAML file must be a dictionary (mapping).", file_path=source)

        if not self._yaml_validator.validate(content):
            raise SchemaValidationError(self._yaml_validator.errors, source)
        document = self._yaml_validator.document

        try:
            options = parse_solve_options(document.get("options"))
        except ConfigParsingError as e:
            raise ParsingError(details=f"Invalid 'options' section: {e}", file_path=source) from e

        topology = Topology()
        diagnostics: List[LoadDiagnostic] = []

        # Entries are numbered by their 1-based position within their section.
        for position, entry in enumerate(document["nodes"], start=1):
            try:
                topology.add_node(entry["id"], entry["x"], entry["y"])
            except ValidationError as e:
                diagnostics.append(self._skip(position, f"nodes: {entry}", str(e)))

        for position, entry in enumerate(document.get("elements", []), start=1):
            try:
                topology.add_element(entry["kind"], entry["node1"], entry["node2"], entry.get("value"))
            except ValidationError as e:
                diagnostics.append(self._skip(position, f"elements: {entry}", str(e)))

        return LoadResult(topology=topology, diagnostics=tuple(diagnostics), options=options, source_path=source)

    @staticmethod
    def _read_text(source: Path) -> str:
        if not source.is_file():
            raise ParsingError(details=f"Circuit file not found at path: {source}", file_path=source)
        try:
            return source.read_text(encoding="utf-8")
        except PermissionError as e:
            raise ParsingError(details=f"Permission denied when trying to read file: {e}", file_path=source) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ParsingError(details=f"Could not read file: {e}", file_path=source) from e

    @staticmethod
    def _skip(line_number: int, line: str, message: str) -> LoadDiagnostic:
        diagnostic = LoadDiagnostic(line_number=line_number, line=line, message=message)
        logger.warning(f"Skipping record at {diagnostic}")
        return diagnostic

    @staticmethod
    def _format_errors(errors: Dict[str, Any]) -> str:
        return "; ".join(
            f"{field}: {', '.join(str(m) for m in messages)}" for field, messages in sorted(errors.items())
        )


def load_circuit_file(path: Union[str, Path]) -> LoadResult:
    """
    Loads a circuit file, presenting file-level failures as a `TopologyLoadError`
    whose message is an actionable diagnostic report.
    """
    try:
        return CircuitFileLoader().load(path)
    except BaseParsingError as e:
        logger.error(f"Failed to load circuit file: {e}")
        raise TopologyLoadError(e.get_diagnostic_report()) from e


def _format_magnitude(value: float) -> str:
    # Positional notation only: the value grammar has no exponent.
    return np.format_float_positional(value, trim="-")


def dump_circuit(topology: Union[Topology, TopologySnapshot]) -> str:
    """
    Writes a topology in the line format accepted by `CircuitFileLoader`.

    The value grammar carries no sign, so a source with a negative value is written
    with its terminals swapped and the magnitude made positive. The circuit it
    describes is the same.
    """
    snapshot = topology.snapshot() if isinstance(topology, Topology) else topology

    lines = [f"NODE {node.id} {node.x} {node.y}" for node in snapshot.nodes]
    for element in snapshot.elements:
        if isinstance(element, Cable):
            lines.append(f"ELEMENT {element.kind.code} {element.node1} {element.node2}")
            continue
        node1, node2, value = element.node1, element.node2, element.value
        if value < 0:
            node1, node2, value = node2, node1, -value
        lines.append(f"ELEMENT {element.kind.code} {node1} {node2} {_format_magnitude(value)}")
    return "".join(line + "\n" for line in lines)
