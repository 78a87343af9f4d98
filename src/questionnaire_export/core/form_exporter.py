"""
End-to-end export of a saved designer form.

Loads a form saved by the designer (metadata, element tree and the answers
entered in preview mode) and produces every export the designer offers:

- `<title>.json`: Questionnaire as FHIR JSON
- `<title>_response.json`: QuestionnaireResponse as FHIR JSON
- `<title>_questionnaire.xml`: Questionnaire as XML
- `<title>_response_with_metadata.xml`: enhanced QuestionnaireResponse XML
- `<title>_bundle.xml`: Bundle with the questionnaire and the enhanced response
"""

import json
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import Dict, Union

from pydantic import ValidationError

from questionnaire_export.config import DEFAULT_SETTINGS, ExportSettings
from questionnaire_export.core.questionnaire_exporter import QuestionnaireExporter
from questionnaire_export.core.response_exporter import ResponseExporter
from questionnaire_export.core.xml_serializer import FHIRXMLSerializer
from questionnaire_export.exceptions.export import FormDefinitionError
from questionnaire_export.models.fhir import Questionnaire, QuestionnaireResponse
from questionnaire_export.models.form import FormDefinition
from questionnaire_export.utils.validation import ValidationCollector, ValidationLevel

logger = getLogger(__name__)

DEFAULT_FILE_STEM = "questionnaire"
REPORT_DIR = "validation_reports"
REPORT_NAME = "export_validation.log"


@dataclass
class FormExport:
    """The two resources produced from one form"""
    questionnaire: Questionnaire
    response: QuestionnaireResponse


def file_stem(form: FormDefinition) -> str:
    """Base name for export files: the form title without path separators."""
    title = form.metadata.title or DEFAULT_FILE_STEM
    return title.replace("/", "_").replace("\\", "_")


class FormExporter:
    """Exports designer forms to FHIR JSON and XML files.

    Usage:
        exporter = FormExporter()
        form = exporter.load_form(Path("intake.json"))
        written = exporter.export_all(form, Path("out"))
    """

    def __init__(
        self,
        validation_level: ValidationLevel = ValidationLevel.NORMAL,
        settings: ExportSettings = DEFAULT_SETTINGS,
    ):
        self.settings = settings
        self.validator = ValidationCollector(validation_level)
        self.questionnaire_exporter = QuestionnaireExporter(settings, self.validator)
        self.response_exporter = ResponseExporter(settings, self.validator)
        self.serializer = FHIRXMLSerializer(settings)

    def load_form(self, filepath: Union[str, Path]) -> FormDefinition:
        """Read a form saved by the designer.

        Args:
            filepath: Path to the form JSON file

        Returns:
            The validated form

        Raises:
            FormDefinitionError: If the file cannot be read, is not JSON, or does
                not describe a valid form
        """
        filepath = Path(filepath)
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise FormDefinitionError(f"Failed to read form file: {e}", filepath) from e
        except json.JSONDecodeError as e:
            raise FormDefinitionError(f"Form file is not valid JSON: {e}", filepath) from e

        try:
            return FormDefinition.model_validate(data)
        except ValidationError as e:
            self.validator.add_pydantic_error(e, element_type="Form")
            raise FormDefinitionError(
                f"Form file does not describe a valid form ({e.error_count()} errors)",
                filepath,
            ) from e

    def export(self, form: FormDefinition) -> FormExport:
        """Build the Questionnaire and the QuestionnaireResponse for a form."""
        questionnaire = self.questionnaire_exporter.to_questionnaire(
            form.elements, form.metadata
        )
        response = self.response_exporter.to_questionnaire_response(
            form.answers, form.elements, form.metadata
        )
        return FormExport(questionnaire=questionnaire, response=response)

    def render(self, form: FormDefinition) -> Dict[str, str]:
        """Render every export of a form.

        Returns:
            File name -> file content
        """
        result = self.export(form)
        stem = file_stem(form)

        return {
            f"{stem}.json": result.questionnaire.to_json(),
            f"{stem}_response.json": result.response.to_json(),
            f"{stem}_questionnaire.xml": self.serializer.questionnaire_to_xml(
                result.questionnaire
            ),
            f"{stem}_response_with_metadata.xml": self.serializer.enhanced_questionnaire_response_to_xml(
                result.response, result.questionnaire
            ),
            f"{stem}_bundle.xml": self.serializer.combined_questionnaire_response_to_xml(
                result.questionnaire, result.response
            ),
        }

    def export_all(self, form: FormDefinition, output_dir: Union[str, Path]) -> Dict[str, Path]:
        """Write every export of a form and a validation report.

        Args:
            form: The form to export
            output_dir: Directory to write to (created if missing)

        Returns:
            File name -> written path
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        written = {}
        for name, content in self.render(form).items():
            path = output_dir / name
            path.write_text(content, encoding="utf-8")
            written[name] = path
            logger.info(f"Wrote {path}")

        self.validator.save_report(output_dir / REPORT_DIR / REPORT_NAME)
        return written
