"""
Builds a FHIR Questionnaire from the designer's element tree.

This is the structural side of the export: every element becomes a
QuestionnaireItem describing the question, its type, constraints and answer
options. Answers are handled by the ResponseExporter.
"""

import uuid
from datetime import datetime, timezone
from logging import getLogger
from typing import List, Optional

from questionnaire_export.business_rules.type_mapping import FHIRTypeMapper
from questionnaire_export.config import DEFAULT_SETTINGS, ExportSettings
from questionnaire_export.models.fhir import (
    AnswerOption,
    Coding,
    ElementExtension,
    Extension,
    Questionnaire,
    QuestionnaireItem,
)
from questionnaire_export.models.form import (
    CHOICE_TYPES,
    ElementType,
    FormElement,
    FormMetadata,
)
from questionnaire_export.utils.validation import (
    ValidationCollector,
    ValidationSeverity,
)

logger = getLogger(__name__)


def generate_id() -> str:
    """Generate a unique resource ID."""
    return str(uuid.uuid4())


def today() -> str:
    """Current UTC date as YYYY-MM-DD."""
    return datetime.now(timezone.utc).date().isoformat()


class QuestionnaireExporter:
    """Converts a form element tree and its metadata into a Questionnaire.

    Usage:
        exporter = QuestionnaireExporter()
        questionnaire = exporter.to_questionnaire(elements, metadata)
        fhir_json = questionnaire.to_json()

    The element tree is read, never modified.
    """

    def __init__(
        self,
        settings: ExportSettings = DEFAULT_SETTINGS,
        validation_collector: Optional[ValidationCollector] = None,
    ):
        """Initialize the exporter.

        Args:
            settings: URIs and defaults to use
            validation_collector: Optional collector for fallback warnings
        """
        self.settings = settings
        self.validator = validation_collector
        self.type_mapper = FHIRTypeMapper()

    def to_questionnaire(
        self, elements: List[FormElement], metadata: Optional[FormMetadata] = None
    ) -> Questionnaire:
        """Convert the form to a FHIR Questionnaire resource.

        Args:
            elements: Top-level form elements
            metadata: Form metadata; missing fields get defaults

        Returns:
            A FHIR Questionnaire resource
        """
        metadata = metadata or FormMetadata()

        return Questionnaire(
            id=metadata.id or generate_id(),
            url=metadata.url or f"urn:uuid:{generate_id()}",
            title=metadata.title or self.settings.default_title,
            status=metadata.status or self.settings.default_status,
            date=metadata.date or today(),
            publisher=metadata.publisher,
            description=metadata.description,
            version=metadata.version,
            item=self._map_elements_to_items(elements),
        )

    def _map_elements_to_items(self, elements: List[FormElement]) -> List[QuestionnaireItem]:
        # images are presentation only and have no Questionnaire counterpart
        return [
            self._map_element_to_item(element)
            for element in elements
            if element.type != ElementType.IMAGE.value
        ]

    def _map_element_to_item(self, element: FormElement) -> QuestionnaireItem:
        """Convert a single form element (and its children) to a QuestionnaireItem."""
        item = {
            "link_id": element.effective_link_id,
            "text": element.label,
            "type": element.fhir_type or self._map_type(element),
            "required": element.required or False,
        }

        # the description is carried as an extension so `text` stays the label
        if element.description:
            item["text_extension"] = ElementExtension(
                extension=[
                    Extension(
                        url=self.settings.rendering_xhtml_url,
                        value_string=element.description,
                    )
                ]
            )

        # 0 is a meaningful constraint
        if element.min_length is not None:
            item["min_length"] = element.min_length
        if element.max_length is not None:
            item["max_length"] = element.max_length

        if element.options is not None and element.type in CHOICE_TYPES:
            item["answer_option"] = [
                AnswerOption(
                    value_coding=Coding(
                        system=self.settings.answer_code_system,
                        code=option.value,
                        display=option.label,
                    )
                )
                for option in element.options
            ]

        if element.type == ElementType.GROUP.value and element.elements is not None:
            item["item"] = self._map_elements_to_items(element.elements)

        if element.code:
            item["code"] = element.code
        if element.prefix:
            item["prefix"] = element.prefix
        if element.read_only:
            item["read_only"] = element.read_only
        if element.enable_when:
            item["enable_when"] = element.enable_when
        if element.answer_value_set:
            item["answer_value_set"] = element.answer_value_set
        if element.repeats:
            item["repeats"] = element.repeats
        if element.max_occurs:
            item["max_occurs"] = element.max_occurs

        return QuestionnaireItem(**item)

    def _map_type(self, element: FormElement) -> str:
        if not self.type_mapper.is_known_element_type(element.type):
            self._report(
                f"Unknown element type '{element.type}', exported as FHIR type 'string'.",
                element,
                "type",
            )
        return self.type_mapper.element_type_to_fhir_type(element.type)

    def _report(self, message: str, element: FormElement, field_name: str) -> None:
        if self.validator:
            self.validator.add_result(
                severity=ValidationSeverity.WARNING,
                message=message,
                element_id=element.id,
                element_type=element.type,
                field_name=field_name,
            )
        else:
            logger.debug(message)
