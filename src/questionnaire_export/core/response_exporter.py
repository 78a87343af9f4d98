"""
Builds a FHIR QuestionnaireResponse from the answers entered in a form.

This is the data side of the export. Each element's answer is encoded as the
FHIR value type matching the element type. Dispatch happens on the element
type itself, not on the mapped FHIR type.
"""

import math
from datetime import datetime, timezone
from logging import getLogger
from typing import Any, Dict, List, Optional

from questionnaire_export.config import DEFAULT_SETTINGS, ExportSettings
from questionnaire_export.core.questionnaire_exporter import generate_id
from questionnaire_export.models.fhir import (
    Answer,
    Coding,
    QuestionnaireResponse,
    QuestionnaireResponseItem,
)
from questionnaire_export.models.form import ElementType, FormElement, FormMetadata
from questionnaire_export.utils.formatting import parse_decimal, stringify_value
from questionnaire_export.utils.validation import (
    ValidationCollector,
    ValidationSeverity,
)

logger = getLogger(__name__)

# Elements that never carry an answer and get no response item
NON_ANSWERABLE_TYPES = frozenset({ElementType.HEADER.value, ElementType.IMAGE.value})

STRING_TYPES = frozenset(
    {ElementType.TEXT.value, ElementType.TEXTAREA.value, ElementType.EMAIL.value}
)


def now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2024-05-01T09:30:00.000Z"""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def is_answered(value: Any) -> bool:
    """None and the empty string mean the question was left blank."""
    return value is not None and value != ""


class ResponseExporter:
    """Converts form answers into a QuestionnaireResponse.

    Usage:
        exporter = ResponseExporter()
        response = exporter.to_questionnaire_response(answers, elements, metadata)

    `answers` maps element ids to the stored values. Neither the answers nor the
    element tree are modified.
    """

    def __init__(
        self,
        settings: ExportSettings = DEFAULT_SETTINGS,
        validation_collector: Optional[ValidationCollector] = None,
    ):
        self.settings = settings
        self.validator = validation_collector

    def to_questionnaire_response(
        self,
        answers: Dict[str, Any],
        elements: List[FormElement],
        metadata: Optional[FormMetadata] = None,
    ) -> QuestionnaireResponse:
        """Convert form answers to a FHIR QuestionnaireResponse resource.

        Args:
            answers: Element id -> stored value
            elements: Top-level form elements
            metadata: Form metadata, used to reference the questionnaire

        Returns:
            A completed QuestionnaireResponse
        """
        metadata = metadata or FormMetadata()

        return QuestionnaireResponse(
            id=generate_id(),
            questionnaire=metadata.url or f"urn:uuid:{metadata.id or generate_id()}",
            status=self.settings.response_status,
            authored=now_iso(),
            item=self._map_data_to_response_items(answers, elements),
        )

    def _map_data_to_response_items(
        self, answers: Dict[str, Any], elements: List[FormElement]
    ) -> List[QuestionnaireResponseItem]:
        return [
            self._map_data_to_response_item(answers, element)
            for element in elements
            if element.type not in NON_ANSWERABLE_TYPES
        ]

    def _map_data_to_response_item(
        self, answers: Dict[str, Any], element: FormElement
    ) -> QuestionnaireResponseItem:
        link_id = element.effective_link_id

        # groups hold their children's answers, never one of their own
        if element.type == ElementType.GROUP.value:
            return QuestionnaireResponseItem(
                link_id=link_id,
                text=element.label,
                item=self._map_data_to_response_items(answers, element.elements or []),
            )

        value = answers.get(element.id)
        if not is_answered(value):
            return QuestionnaireResponseItem(link_id=link_id, text=element.label)

        created = self.create_answers(value, element)
        return QuestionnaireResponseItem(
            link_id=link_id,
            text=element.label,
            answer=created or None,
        )

    def create_answers(self, value: Any, element: FormElement) -> List[Answer]:
        """Encode a stored value as FHIR answers according to the element type.

        Args:
            value: The stored (non-blank) value
            element: The element the value belongs to

        Returns:
            List of answers; more than one only for multi-select checkboxes
        """
        element_type = element.type

        if element_type in STRING_TYPES:
            return [Answer(value_string=stringify_value(value))]

        if element_type == ElementType.NUMBER.value:
            number = parse_decimal(value)
            if math.isnan(number):
                self._report(
                    f"Answer '{stringify_value(value)}' is not a number, exported as NaN.",
                    element,
                )
            return [Answer(value_decimal=number)]

        if element_type == ElementType.DATE.value:
            return [Answer(value_date=stringify_value(value))]
        if element_type == ElementType.DATE_TIME.value:
            return [Answer(value_date_time=stringify_value(value))]
        if element_type == ElementType.TIME.value:
            return [Answer(value_time=stringify_value(value))]

        if element_type in (ElementType.SELECT.value, ElementType.RADIO.value):
            return [Answer(value_coding=self.create_coding_from_option(value, element))]

        if element_type == ElementType.CHECKBOX.value:
            # checkbox groups store the selected values, single checkboxes a flag
            if isinstance(value, (list, tuple)):
                return [
                    Answer(value_coding=self.create_coding_from_option(selected, element))
                    for selected in value
                ]
            return [Answer(value_boolean=bool(value))]

        if element_type == ElementType.YES_NO.value:
            return [Answer(value_boolean=value is True or value == "true")]

        return [Answer(value_string=stringify_value(value))]

    def create_coding_from_option(self, value: Any, element: FormElement) -> Coding:
        """Build the Coding for a selected option value.

        The display is the matching option's label, or the value itself when no
        option matches.
        """
        code = stringify_value(value)
        option = next(
            (opt for opt in element.options or [] if opt.value == code), None
        )
        if option is None:
            self._report(f"Value '{code}' matches no option.", element)

        return Coding(
            system=self.settings.answer_code_system,
            code=code,
            display=(option.label if option else None) or code,
        )

    def _report(self, message: str, element: FormElement) -> None:
        if self.validator:
            self.validator.add_result(
                severity=ValidationSeverity.WARNING,
                message=message,
                element_id=element.id,
                element_type=element.type,
                field_name="answer",
            )
        else:
            logger.debug(message)
