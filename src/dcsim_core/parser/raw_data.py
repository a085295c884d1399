# src/dcsim_core/parser/raw_data.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from ..data_structures import Topology
from ..simulation.config import SolveOptions

# The result of loading a file is a populated, editable Topology plus one
# diagnostic per record that was skipped.


@dataclass(frozen=True)
class LoadDiagnostic:
    """A skipped record: where it was, what it said and why it was rejected."""
    line_number: int
    line: str
    message: str

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.message} ('{self.line}')"


@dataclass(frozen=True)
class LoadResult:
    topology: Topology
    diagnostics: Tuple[LoadDiagnostic, ...] = ()
    options: SolveOptions = field(default_factory=SolveOptions)
    source_path: Optional[Path] = None

    @property
    def is_clean(self) -> bool:
        return not self.diagnostics
