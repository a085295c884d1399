# src/dcsim_core/validation/issue_codes.py
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class ValidationIssueCode(Enum):
    """
    Registry of validation issue codes and their message templates.
    Each enum member's value is a tuple: (code_str, message_template_str).
    """

    # --- Ground Issues (GND_...) ---
    GND_MISSING = ("GND_MISSING", "The topology has no ground node. A node with id {ground_id} is required as the 0 V reference.")

    # --- Construction Issues (NODE_..., ELEM_...) ---
    NODE_DUPLICATE = ("NODE_DUPLICATE", "A node with id {node_id} already exists.")
    ELEM_KIND_UNKNOWN = ("ELEM_KIND_UNKNOWN", "Unrecognized element kind '{kind}'. Valid kinds are: {valid_kinds}.")
    ELEM_NODE_UNKNOWN = ("ELEM_NODE_UNKNOWN", "Element '{element}' references node {node_id}, which does not exist.")
    ELEM_VALUE_MISSING = ("ELEM_VALUE_MISSING", "Element kind '{kind}' requires a value, but none was given.")
    ELEM_VALUE_INVALID = ("ELEM_VALUE_INVALID", "Element '{element}' has invalid value {value}: {reason}.")
    VALUE_FORMAT = ("VALUE_FORMAT", "Invalid value format: '{text}'. Expected digits with an optional fraction, SI prefix (k, K, m, u, U, M) and unit letters, e.g. '4.7k' or '10mA'.")

    # --- Connectivity Issues (NODE_CONN_..., ...) ---
    NODE_UNCONNECTED = ("NODE_UNCONNECTED", "Node {node_id} is defined but no element is connected to it.")
    NODE_FLOATING = ("NODE_FLOATING", "Node {node_id} has no conductive path (resistors, voltage sources or cables) to ground; its potential is undetermined.")
    VSRC_SHORTED = ("VSRC_SHORTED", "Voltage source '{element}' has both terminals joined by cables; its constraint cannot be satisfied.")
    RES_SHORTED_BY_CABLE = ("RES_SHORTED_BY_CABLE", "Resistor '{element}' has both terminals joined by cables and will carry no current.")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def template(self) -> str:
        return self.value[1]

    def format_message(self, **kwargs) -> str:
        """Formats the message template with provided keyword arguments."""
        try:
            return self.template.format(**kwargs)
        except KeyError as e:
            logger.error(f"Missing key {e} for formatting message template of {self.name} (code: {self.code}): '{self.template}'. Provided args: {kwargs}")
            return f"Error formatting message for {self.code}: Missing key {e}. Template: '{self.template}' Args: {kwargs}"
