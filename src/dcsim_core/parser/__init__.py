from .raw_data import LoadDiagnostic, LoadResult
from .loader import CircuitFileLoader, load_circuit_file, dump_circuit
from .exceptions import BaseParsingError, ParsingError, SchemaValidationError

__all__ = [
    # Load Results
    "LoadDiagnostic",
    "LoadResult",
    # Loader and Exceptions
    "CircuitFileLoader",
    "load_circuit_file",
    "dump_circuit",
    "BaseParsingError",
    "ParsingError",
    "SchemaValidationError",
]
