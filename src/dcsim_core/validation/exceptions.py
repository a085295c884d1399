# src/dcsim_core/validation/exceptions.py
"""
Defines the diagnosable exceptions raised when a topology, or an edit to it,
fails validation.

`ValidationError` is raised both by the construction API (a rejected `add_node` or
`add_element` call) and by the solve pipeline before system assembly (missing
ground, dangling element references). It always carries the list of error-level
`ValidationIssue`s that caused it.
"""
from typing import List, Optional

from .issues import ValidationIssue, ValidationIssueLevel
from .issue_codes import ValidationIssueCode
from ..errors import DiagnosableError, format_diagnostic_report


class ValidationError(DiagnosableError):
    """
    Raised when validation detects one or more errors.

    Only issues with level `ERROR` are retained; warnings and info messages are
    reported through logging by the validator and never abort an operation.
    """
    def __init__(self, issues: List[ValidationIssue]):
        self.issues: List[ValidationIssue] = [
            issue for issue in issues if issue.level == ValidationIssueLevel.ERROR
        ]
        if not self.issues:
            summary_message = "ValidationError was raised with no error-level issues."
        elif len(self.issues) == 1:
            summary_message = self.issues[0].message
        else:
            summary_message = (
                f"Validation failed with {len(self.issues)} error(s):\n"
                + "\n".join(f"  - {issue}" for issue in self.issues)
            )
        super().__init__(summary_message)

    @classmethod
    def from_code(
        cls,
        code: ValidationIssueCode,
        node_id: Optional[int] = None,
        element: Optional[str] = None,
        **kwargs
    ) -> "ValidationError":
        """Builds a single-issue error from a registered issue code."""
        issue = ValidationIssue(
            level=ValidationIssueLevel.ERROR,
            code=code.code,
            message=code.format_message(node_id=node_id, element=element, **kwargs),
            node_id=node_id,
            element=element,
            details=dict(kwargs),
        )
        return cls([issue])

    @property
    def codes(self) -> List[str]:
        return [issue.code for issue in self.issues]

    def get_diagnostic_report(self) -> str:
        error_lines = [str(issue) for issue in self.issues]
        details = (
            f"The circuit topology is invalid.\n"
            f"Found {len(self.issues)} error(s). See details below:\n\n"
            + "\n".join(f"  - {line}" for line in error_lines)
        )

        first_issue = self.issues[0] if self.issues else None
        context = {}
        if first_issue:
            context['node_id'] = first_issue.node_id
            context['element'] = first_issue.element

        return format_diagnostic_report(
            error_type="Topology Validation Error",
            details=details,
            suggestion="Make sure node 0 (ground) exists, every element references existing nodes, and all values are valid.",
            context=context
        )


class ValueFormatError(ValidationError):
    """Raised when a textual value does not match the value grammar."""
    def __init__(self, text: str):
        self.text = text
        issue = ValidationIssue(
            level=ValidationIssueLevel.ERROR,
            code=ValidationIssueCode.VALUE_FORMAT.code,
            message=ValidationIssueCode.VALUE_FORMAT.format_message(text=text),
            details={'text': text},
        )
        super().__init__([issue])

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Invalid Value Format",
            details=str(self),
            suggestion="Write values as digits with an optional fraction, followed by an optional SI prefix and unit, e.g. '4.7k', '2.2M', '10mA' or '5V'.",
            context={'user_input': self.text}
        )
