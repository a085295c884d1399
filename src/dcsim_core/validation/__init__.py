# src/dcsim_core/validation/__init__.py
import logging
logger = logging.getLogger(__name__)

from .issues import ValidationIssue, ValidationIssueLevel
from .issue_codes import ValidationIssueCode
from .exceptions import ValidationError, ValueFormatError

# The TopologyValidator lives in `validation.topology_validator`. It depends on the
# data model and the analysis services, which themselves raise ValidationError, so it
# is not imported here.

__all__ = [
    "ValidationIssue",
    "ValidationIssueLevel",
    "ValidationIssueCode",
    "ValidationError",
    "ValueFormatError",
]
