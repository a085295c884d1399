# src/dcsim_core/data_structures.py
from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import ClassVar, Iterable, List, Optional, Tuple, Union

from .constants import GROUND_NODE_ID
from .units import (
    Quantity, OHM, VOLT, AMPERE, format_compact, parse_value,
    RESISTANCE_DIMENSIONALITY, VOLTAGE_DIMENSIONALITY, CURRENT_DIMENSIONALITY,
)
from .validation.exceptions import ValidationError
from .validation.issue_codes import ValidationIssueCode

logger = logging.getLogger(__name__)


class ElementKind(Enum):
    """The closed set of two-terminal element kinds, keyed by their one-letter code."""
    RESISTOR = "R"
    VOLTAGE_SOURCE = "V"
    CURRENT_SOURCE = "I"
    CABLE = "C"

    @property
    def code(self) -> str:
        return self.value

    @property
    def unit(self):
        """The pint unit of this kind's value, or None for cables."""
        return _KIND_UNITS.get(self)

    @classmethod
    def from_code(cls, code: Union[str, "ElementKind"]) -> "ElementKind":
        """Resolves a (case-insensitive) letter code such as 'r' or 'V'."""
        if isinstance(code, ElementKind):
            return code
        normalized = str(code).strip().upper()
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise ValidationError.from_code(
            ValidationIssueCode.ELEM_KIND_UNKNOWN,
            kind=code,
            valid_kinds=", ".join(k.value for k in cls),
        )


_KIND_UNITS = {
    ElementKind.RESISTOR: OHM,
    ElementKind.VOLTAGE_SOURCE: VOLT,
    ElementKind.CURRENT_SOURCE: AMPERE,
}

_KIND_DIMENSIONALITIES = {
    ElementKind.RESISTOR: RESISTANCE_DIMENSIONALITY,
    ElementKind.VOLTAGE_SOURCE: VOLTAGE_DIMENSIONALITY,
    ElementKind.CURRENT_SOURCE: CURRENT_DIMENSIONALITY,
}


@dataclass(frozen=True)
class Node:
    """
    An electrical node. Only the id matters to the solver; the position is
    display-only and is carried along for editors and file round-trips.
    """
    id: int
    x: int = 0
    y: int = 0

    @property
    def is_ground(self) -> bool:
        return self.id == GROUND_NODE_ID


@dataclass(frozen=True)
class _TwoTerminalElement:
    """Common behaviour of all element variants. `node1` is the positive / 'from' terminal."""
    node1: int
    node2: int

    kind: ClassVar[ElementKind]

    @property
    def value(self) -> Optional[float]:
        return None

    @property
    def label(self) -> str:
        return f"{self.kind.code} {self.node1}-{self.node2}"

    @property
    def quantity(self) -> Optional[Quantity]:
        if self.value is None:
            return None
        return Quantity(self.value, self.kind.unit)

    @property
    def formatted_value(self) -> str:
        qty = self.quantity
        return format_compact(qty) if qty is not None else "Cable"

    def touches(self, node_id: int) -> bool:
        return self.node1 == node_id or self.node2 == node_id

    def with_endpoints(self, node1: int, node2: int):
        """Returns a copy of this element connected to different nodes."""
        return replace(self, node1=node1, node2=node2)


@dataclass(frozen=True)
class Resistor(_TwoTerminalElement):
    resistance: float

    kind: ClassVar[ElementKind] = ElementKind.RESISTOR

    @property
    def value(self) -> float:
        return self.resistance


@dataclass(frozen=True)
class VoltageSource(_TwoTerminalElement):
    """Ideal voltage source imposing V(node1) - V(node2) = voltage."""
    voltage: float

    kind: ClassVar[ElementKind] = ElementKind.VOLTAGE_SOURCE

    @property
    def value(self) -> float:
        return self.voltage


@dataclass(frozen=True)
class CurrentSource(_TwoTerminalElement):
    """Ideal current source driving `current` out of node1, through the source, into node2."""
    current: float

    kind: ClassVar[ElementKind] = ElementKind.CURRENT_SOURCE

    @property
    def value(self) -> float:
        return self.current


@dataclass(frozen=True)
class Cable(_TwoTerminalElement):
    """A zero-resistance wire. Cables never reach the equation assembler."""
    kind: ClassVar[ElementKind] = ElementKind.CABLE


Element = Union[Resistor, VoltageSource, CurrentSource, Cable]


@dataclass(frozen=True)
class TopologySnapshot:
    """
    An immutable copy of a topology, handed to the solve pipeline.

    Nodes and elements are kept in insertion order; that order defines the
    ordering of the MNA unknowns and is therefore part of the contract.
    """
    nodes: Tuple[Node, ...]
    elements: Tuple[Element, ...]

    @classmethod
    def from_iterables(cls, nodes: Iterable[Node], elements: Iterable[Element]) -> "TopologySnapshot":
        return cls(nodes=tuple(nodes), elements=tuple(elements))

    @property
    def node_ids(self) -> List[int]:
        return [n.id for n in self.nodes]

    @property
    def has_ground(self) -> bool:
        return any(n.id == GROUND_NODE_ID for n in self.nodes)

    @property
    def resistors(self) -> List[Resistor]:
        return [e for e in self.elements if isinstance(e, Resistor)]

    @property
    def voltage_sources(self) -> List[VoltageSource]:
        return [e for e in self.elements if isinstance(e, VoltageSource)]

    @property
    def current_sources(self) -> List[CurrentSource]:
        return [e for e in self.elements if isinstance(e, CurrentSource)]

    @property
    def cables(self) -> List[Cable]:
        return [e for e in self.elements if isinstance(e, Cable)]


def create_element(kind: Union[str, ElementKind], node1: int, node2: int, value=None) -> Element:
    """
    Builds an element of the given kind. `value` may be a number, a pint Quantity of
    the matching dimension (converted to ohm, volt or ampere) or a string in the
    value grammar (e.g. '4.7k'); it is ignored for cables.

    Raises:
        ValidationError: Unknown kind, missing, malformed or non-finite value, or non-positive resistance.
    """
    kind = ElementKind.from_code(kind)
    if kind is ElementKind.CABLE:
        return Cable(node1, node2)

    if value is None:
        raise ValidationError.from_code(ValidationIssueCode.ELEM_VALUE_MISSING, kind=kind.code)
    if isinstance(value, str):
        magnitude = parse_value(value)
    elif isinstance(value, Quantity):
        if value.dimensionality != _KIND_DIMENSIONALITIES[kind]:
            raise ValidationError.from_code(
                ValidationIssueCode.ELEM_VALUE_INVALID,
                element=f"{kind.code} {node1}-{node2}",
                value=value,
                reason=f"expected a quantity of dimension {_KIND_DIMENSIONALITIES[kind]}",
            )
        magnitude = float(value.to(kind.unit).magnitude)
    else:
        magnitude = float(value)

    if not math.isfinite(magnitude):
        raise ValidationError.from_code(
            ValidationIssueCode.ELEM_VALUE_INVALID,
            element=f"{kind.code} {node1}-{node2}",
            value=magnitude,
            reason="value must be finite",
        )

    match kind:
        case ElementKind.RESISTOR:
            if not magnitude > 0:
                raise ValidationError.from_code(
                    ValidationIssueCode.ELEM_VALUE_INVALID,
                    element=f"R {node1}-{node2}",
                    value=magnitude,
                    reason="resistance must be greater than zero",
                )
            return Resistor(node1, node2, magnitude)
        case ElementKind.VOLTAGE_SOURCE:
            return VoltageSource(node1, node2, magnitude)
        case ElementKind.CURRENT_SOURCE:
            return CurrentSource(node1, node2, magnitude)


class Topology:
    """
    The editable circuit topology, built incrementally by an editor or a loader.

    Every mutating call validates its input first and leaves the topology unchanged
    when it raises. Editing and snapshot-taking are serialized by an internal lock,
    so a snapshot never observes a half-applied edit.
    """
    def __init__(self):
        self._nodes: List[Node] = []
        self._elements: List[Element] = []
        self._lock = threading.RLock()

    @classmethod
    def from_snapshot(cls, snapshot: TopologySnapshot) -> "Topology":
        topology = cls()
        topology._nodes = list(snapshot.nodes)
        topology._elements = list(snapshot.elements)
        return topology

    @property
    def nodes(self) -> Tuple[Node, ...]:
        with self._lock:
            return tuple(self._nodes)

    @property
    def elements(self) -> Tuple[Element, ...]:
        with self._lock:
            return tuple(self._elements)

    def find_node(self, node_id: int) -> Optional[Node]:
        with self._lock:
            for node in self._nodes:
                if node.id == node_id:
                    return node
        return None

    def has_node(self, node_id: int) -> bool:
        return self.find_node(node_id) is not None

    def add_node(self, node_id: int, x: int = 0, y: int = 0) -> Node:
        """
        Adds a node.

        Raises:
            ValidationError: If a node with the same id already exists.
        """
        node = Node(int(node_id), int(x), int(y))
        with self._lock:
            if self.has_node(node.id):
                raise ValidationError.from_code(ValidationIssueCode.NODE_DUPLICATE, node_id=node.id)
            self._nodes.append(node)
        logger.debug(f"Node {node.id} added at ({node.x},{node.y}).")
        return node

    def add_element(self, kind: Union[str, ElementKind], node1: int, node2: int, value=None) -> Element:
        """
        Adds an element between two existing nodes.

        Raises:
            ValidationError: If either node is absent, the kind is unknown, or the value is invalid.
        """
        with self._lock:
            element = create_element(kind, node1, node2, value)
            for node_id in (node1, node2):
                if not self.has_node(node_id):
                    raise ValidationError.from_code(
                        ValidationIssueCode.ELEM_NODE_UNKNOWN, node_id=node_id, element=element.label
                    )
            self._elements.append(element)
        logger.debug(f"Element {element.label} added with value {element.formatted_value}.")
        return element

    def clear(self):
        """Removes every node and element."""
        with self._lock:
            self._nodes.clear()
            self._elements.clear()
        logger.info("Topology cleared.")

    def snapshot(self) -> TopologySnapshot:
        """Takes an independent, immutable copy for solving."""
        with self._lock:
            return TopologySnapshot.from_iterables(self._nodes, self._elements)
