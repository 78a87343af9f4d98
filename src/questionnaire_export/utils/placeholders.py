"""
Helpers for variable placeholders in PMS output templates.

Output templates are free text with variables written as `#...#`, for example
`Patient: #GDT_3101_NAME_DES_PATIENTEN#`. Variables may be namespaced with
colons (`#DD:MM:YYYY:PATIENTNAME#`); the readable name is the last part.
"""

import re
from typing import List, Optional

from questionnaire_export.business_rules.gdt_codes import GDTCodeRegistry
from questionnaire_export.utils.validation import (
    ValidationCollector,
    ValidationSeverity,
)

VARIABLE_PATTERN = re.compile(r"#[^#]+#")
GDT_VARIABLE_PATTERN = re.compile(r"^#GDT_(\d+)_")


def find_variables(text: str) -> List[str]:
    """Return all placeholders in the text, in order of appearance."""
    if not text:
        return []
    return VARIABLE_PATTERN.findall(text)


def readable_name(variable: str) -> str:
    """Display name of a placeholder: "#DD:MM:YYYY:PATIENTNAME#" -> "PATIENTNAME"."""
    return variable.replace("#", "").split(":")[-1]


def validate_variables(
    text: str,
    registry: Optional[GDTCodeRegistry] = None,
    validation_collector: Optional[ValidationCollector] = None,
    element_id: Optional[str] = None,
) -> List[str]:
    """Check the GDT placeholders of a template against the code table.

    Args:
        text: Template text
        registry: GDT registry to check against (packaged table by default)
        validation_collector: Receives an ERROR result per unknown code
        element_id: Element the template belongs to, for the report

    Returns:
        The unknown GDT codes, in order of appearance
    """
    registry = registry or GDTCodeRegistry()
    unknown = []

    for variable in find_variables(text):
        match = GDT_VARIABLE_PATTERN.match(variable)
        if not match:
            continue

        code = match.group(1)
        if registry.is_valid_code(code):
            continue

        unknown.append(code)
        if validation_collector:
            validation_collector.add_result(
                severity=ValidationSeverity.ERROR,
                message=f'GDT Code "{code}" not found in mapping table.',
                element_id=element_id,
                field_name="gdt_code",
            )

    return unknown
