# --- src/dcsim_core/constants.py ---
import logging

logger = logging.getLogger(__name__)

# --- Topology Constants ---

#: Id of the mandatory reference node. Its potential is fixed at 0 V and it never
#: receives an unknown in the MNA system.
GROUND_NODE_ID: int = 0

# --- Numerical Constants for the Solver ---

#: Smallest pivot magnitude accepted during Gaussian elimination. A pivot below this
#: value means the network has no unique solution. Not configurable.
PIVOT_TOLERANCE: float = 1.0e-12

#: A resistor whose voltage drop magnitude is below this value (in volts) is
#: reported as short-circuited.
SHORT_CIRCUIT_VOLTAGE_THRESHOLD: float = 1.0e-6

# --- Diagnostic Rendering ---

#: Fixed-point, column-aligned format of a single cell of the augmented matrix rendering.
MATRIX_CELL_FORMAT: str = "{:10.4f} "

logger.debug("Defined core constants: GROUND_NODE_ID, PIVOT_TOLERANCE, SHORT_CIRCUIT_VOLTAGE_THRESHOLD")
