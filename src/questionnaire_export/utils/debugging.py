from pathlib import Path
from typing import Dict, List, Optional, Tuple
import logging
from questionnaire_export.models.fhir import Questionnaire, QuestionnaireItem
from questionnaire_export.models.form import FormDefinition, iter_elements
from questionnaire_export.core.form_exporter import FormExporter
from questionnaire_export.utils.validation import ValidationCollector, ValidationLevel

logger = logging.getLogger(__name__)


def setup_debug_logging(level=logging.INFO):
    """Set up logging configuration for debugging purposes.
    level: DEBUG also prints every fallback the exporters apply,
    level: INFO prints just the validation results"""
    # Reset root logger handlers
    root = logging.getLogger()
    if root.handlers:
        root.handlers.clear()

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def count_element_types(form: FormDefinition) -> Dict[str, int]:
    """Number of elements per type, over the whole tree"""
    counts: Dict[str, int] = {}
    for element in iter_elements(form.elements):
        counts[element.type] = counts.get(element.type, 0) + 1
    return counts


def inspect_form(form: FormDefinition):
    """Print a summary of a loaded form"""
    print("\n=== Form Summary ===")
    print(f"Title: {form.metadata.title or '(untitled)'}")
    print(f"Top-level elements: {len(form.elements)}")
    print(f"Answers: {len(form.answers)}")

    print("\n=== Amount of Element Types ===")
    for element_type, count in count_element_types(form).items():
        print(f"{element_type}: {count}")

    unanswered = [
        element.id
        for element in iter_elements(form.elements)
        if element.type not in ("group", "header", "image") and element.id not in form.answers
    ]
    print(f"\nUnanswered elements: {unanswered}")


def _print_items(items: Optional[List[QuestionnaireItem]], level: int):
    for item in items or []:
        flags = " (required)" if item.required else ""
        print(f"{'  ' * level}- {item.link_id} [{item.type}]{flags}: {item.text or ''}")
        _print_items(item.item, level + 1)


def inspect_questionnaire(questionnaire: Questionnaire):
    """Print the item tree of an exported Questionnaire"""
    print("\n=== Questionnaire Items ===")
    _print_items(questionnaire.item, 0)


def debug_export(form_path: Path, output_dir: Path,
                 validation_level: ValidationLevel = ValidationLevel.LENIENT,
                 logging_level=logging.INFO) -> Tuple[Dict[str, Path], ValidationCollector]:
    """Run a complete debugging session for exporting a saved form

    Args:
        form_path: Path to the form JSON file
        output_dir: Where to write the exports
        validation_level: Validation strictness level (default: LENIENT for debugging)
    """
    setup_debug_logging(logging_level)

    exporter = FormExporter(validation_level=validation_level)
    form = exporter.load_form(form_path)
    inspect_form(form)

    result = exporter.export(form)
    inspect_questionnaire(result.questionnaire)

    written = exporter.export_all(form, output_dir)
    print("\n=== Written Files ===")
    for path in written.values():
        print(path)

    return written, exporter.validator
