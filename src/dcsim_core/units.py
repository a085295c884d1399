# --- src/dcsim_core/units.py ---
import re
import logging

import pint

from .validation.exceptions import ValueFormatError

logger = logging.getLogger(__name__)
ureg = pint.UnitRegistry()
Quantity = ureg.Quantity
logger.debug("Pint Unit Registry initialized.")

# Base units in which element values are stored. Values handed to the solver are
# plain magnitudes in these units.
OHM = ureg.ohm
VOLT = ureg.volt
AMPERE = ureg.ampere

# --- Canonical dimensionality objects for explicit checks ---
RESISTANCE_DIMENSIONALITY = ureg.parse_expression('ohm').dimensionality
VOLTAGE_DIMENSIONALITY = ureg.parse_expression('volt').dimensionality
CURRENT_DIMENSIONALITY = ureg.parse_expression('ampere').dimensionality


def format_compact(qty: Quantity) -> str:
    """Renders a quantity with an SI prefix chosen for readability (e.g. '4.7 kΩ')."""
    compact = qty.to_compact()
    return f"{compact:.6g~P}"


# --- Textual Value Grammar ---
#
#   <digits>[.<digits>] <prefix?> <unit letters?>
#
# The prefix is case-sensitive where it matters: 'm' is milli, 'M' is mega.
# Trailing unit letters ('ohm', 'V', 'A', ...) are accepted and ignored.

VALUE_REGEX = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([kKmMuU]?)([A-Za-zΩ]*)\s*$")

SI_PREFIX_MULTIPLIERS = {
    "": 1.0,
    "k": 1e3,
    "K": 1e3,
    "m": 1e-3,
    "u": 1e-6,
    "U": 1e-6,
    "M": 1e6,
}


def parse_value(text: str) -> float:
    """
    Parses a textual component value such as '4.7k', '2.2M', '10mA' or '5V'.

    Raises:
        ValueFormatError: If the text does not match the value grammar.
    """
    if not isinstance(text, str):
        raise ValueFormatError(repr(text))
    match = VALUE_REGEX.match(text)
    if not match:
        raise ValueFormatError(text)
    number, prefix, _unit = match.groups()
    return float(number) * SI_PREFIX_MULTIPLIERS[prefix]


def parse_quantity(text: str, unit) -> Quantity:
    """Parses a textual value and attaches the given unit (e.g. `ureg.ohm`)."""
    return Quantity(parse_value(text), unit)
