# src/dcsim_core/analysis/__init__.py
"""
Public interface of the analysis services: cable consolidation, connectivity
analysis, and their formal result contracts.
"""
from .results import ConsolidationResult, TopologyAnalysisResults
from .consolidation import CableConsolidator, DisjointSet, build_representative_map, consolidate
from .topology import TopologyAnalyzer
from .exceptions import TopologyAnalysisError

__all__ = [
    # Formal Result Contracts
    "ConsolidationResult",
    "TopologyAnalysisResults",
    # Services
    "CableConsolidator",
    "DisjointSet",
    "build_representative_map",
    "consolidate",
    "TopologyAnalyzer",
    # Exceptions
    "TopologyAnalysisError",
]
