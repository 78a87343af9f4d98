"""
Validation reporting for form exports.

Exporting never fails on a lookup miss: an unknown element type, an option value
that matches no option or a number answer that cannot be parsed all fall back to
a documented default. Those fallbacks are still worth surfacing to whoever
designed the form, so the exporters report them here instead of raising.

The collector supports three severity levels:
- CRITICAL: the export cannot be produced
- ERROR: the export was produced but contains something the designer must fix
  (for example a GDT placeholder whose code does not exist)
- WARNING: a fallback was applied

And three validation levels:
- STRICT: raises on ERROR and CRITICAL results
- NORMAL: raises on CRITICAL results, collects the rest
- LENIENT: collects everything, never raises
"""
from enum import Enum
from typing import Dict, List, Optional, Set
import logging
from pathlib import Path
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    """Severity of a single validation result."""
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"


class ValidationLevel(Enum):
    """How strictly collected results are turned into exceptions."""
    STRICT = "STRICT"
    NORMAL = "NORMAL"
    LENIENT = "LENIENT"


# Severities that abort the export at each level
RAISING_SEVERITIES: Dict[ValidationLevel, Set[ValidationSeverity]] = {
    ValidationLevel.STRICT: {ValidationSeverity.CRITICAL, ValidationSeverity.ERROR},
    ValidationLevel.NORMAL: {ValidationSeverity.CRITICAL},
    ValidationLevel.LENIENT: set(),
}


class ValidationResult(BaseModel):
    """A single issue found while exporting a form."""
    severity: ValidationSeverity
    message: str
    element_id: Optional[str] = None
    element_type: Optional[str] = None
    field_name: Optional[str] = None

    class Config:
        frozen = True

    def __str__(self) -> str:
        text = f"{self.severity.value}: {self.message}"
        if self.element_id:
            text += f" (Element ID: {self.element_id})"
        if self.element_type:
            text += f" (Type: {self.element_type})"
        return text


class ValidationCollector:
    """Collects validation results produced during an export."""

    def __init__(self, validation_level: ValidationLevel = ValidationLevel.NORMAL):
        """Initialize the validation collector.

        Args:
            validation_level: Determines which severities raise. Defaults to NORMAL.
        """
        self.validation_level = validation_level
        self.results: List[ValidationResult] = []

    def add_result(self,
                   severity: ValidationSeverity,
                   message: str,
                   element_id: Optional[str] = None,
                   element_type: Optional[str] = None,
                   field_name: Optional[str] = None) -> None:
        """Record a validation result, log it and raise if the level demands it.

        Args:
            severity: The severity level of the issue
            message: Description of the validation issue
            element_id: ID of the affected form element (if applicable)
            element_type: Type tag of the affected form element (if applicable)
            field_name: Name of the affected field (if applicable)

        Raises:
            ValueError: If the validation level does not tolerate the severity
        """
        result = ValidationResult(
            severity=severity,
            message=message,
            element_id=element_id,
            element_type=element_type,
            field_name=field_name
        )
        self.results.append(result)

        if severity == ValidationSeverity.WARNING:
            logger.warning(str(result))
        else:
            logger.error(str(result))

        if severity in RAISING_SEVERITIES[self.validation_level]:
            raise ValueError(str(result))

    def add_pydantic_error(self, error: ValidationError,
                           element_type: Optional[str] = None) -> None:
        """Record every entry of a pydantic ValidationError as an ERROR result."""
        for err in error.errors():
            self.add_result(
                severity=ValidationSeverity.ERROR,
                message=f"Field validation error: {err['msg']}",
                element_type=element_type,
                field_name='.'.join(str(loc) for loc in err['loc'])
            )

    def get_results_by_severity(self, severity: ValidationSeverity) -> List[ValidationResult]:
        return [r for r in self.results if r.severity == severity]

    @property
    def has_critical_issues(self) -> bool:
        """True if any CRITICAL result was collected."""
        return any(r.severity == ValidationSeverity.CRITICAL for r in self.results)

    def report_lines(self) -> List[str]:
        """The export report: a header, then the results grouped by severity."""
        lines = [
            "Export Validation Report",
            f"Validation Level: {self.validation_level.value}",
            f"Total Issues: {len(self.results)}",
        ]

        for severity in ValidationSeverity:
            results = self.get_results_by_severity(severity)
            if not results:
                continue
            lines.append("")
            lines.append(f"{severity.value} Issues ({len(results)}):")
            for result in results:
                lines.append(f"- {result.message}")
                for label, value in (("Element ID", result.element_id),
                                     ("Element Type", result.element_type),
                                     ("Field", result.field_name)):
                    if value:
                        lines.append(f"  {label}: {value}")

        if self.has_critical_issues:
            lines.append("")
            lines.append("Critical issues were found, the export is incomplete.")
        return lines

    def save_report(self, output_path: Path) -> None:
        """Write the report to a file, creating its directory.

        Args:
            output_path: Path where to save the validation report
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text("\n".join(self.report_lines()) + "\n", encoding="utf-8")
