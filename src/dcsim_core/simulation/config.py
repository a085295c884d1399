# src/dcsim_core/simulation/config.py
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ConfigParsingError(ValueError):
    """Custom exception for errors during solve configuration parsing."""
    pass


@dataclass(frozen=True)
class SolveOptions:
    """
    Options of a single solve.

    Attributes:
        validate: Run the full TopologyValidator before assembly. The ground-node
                  check is performed regardless.
        fail_on_warnings: Treat validation warnings (floating nodes, shorted sources...)
                          as errors.
    """
    validate: bool = True
    fail_on_warnings: bool = False


def parse_solve_options(raw_options: Optional[Dict[str, Any]]) -> SolveOptions:
    """
    Parses a raw `options` mapping (e.g. from a YAML netlist) into SolveOptions.
    Missing keys keep their defaults.
    """
    if not raw_options:
        return SolveOptions()
    if not isinstance(raw_options, dict):
        raise ConfigParsingError(f"Solve options must be a mapping, got {type(raw_options).__name__}.")

    known = {f.name for f in fields(SolveOptions)}
    unknown = sorted(set(raw_options) - known)
    if unknown:
        raise ConfigParsingError(f"Unknown solve option(s): {unknown}. Known options: {sorted(known)}.")

    for name, value in raw_options.items():
        if not isinstance(value, bool):
            raise ConfigParsingError(f"Solve option '{name}' must be a boolean, got {value!r}.")

    options = SolveOptions(**raw_options)
    logger.debug(f"Parsed solve options: {options}")
    return options
