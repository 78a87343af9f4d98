"""
Renders Questionnaire and QuestionnaireResponse resources as XML text.

The serializer is a plain line emitter, two spaces per indentation level, with
primitive values written as `<name value="..." />`. It does not aim to be a
conformant FHIR XML writer (element order and namespaces are best effort), but
its output is deterministic: the same resources always give the same text.

Besides the plain renderings there is an "enhanced" response variant that looks
up each answered item in the questionnaire and carries the item's definition
along (as comments and as a local, unregistered extension), and a Bundle that
combines the questionnaire with the enhanced response.
"""

import re
from typing import List, Optional

from questionnaire_export.config import DEFAULT_SETTINGS, ExportSettings
from questionnaire_export.models.fhir import (
    ANSWER_VALUE_FIELDS,
    Answer,
    Coding,
    Questionnaire,
    QuestionnaireItem,
    QuestionnaireResponse,
    QuestionnaireResponseItem,
)
from questionnaire_export.utils.formatting import format_number

XML_PROLOG = '<?xml version="1.0" encoding="UTF-8"?>'
INDENT = "  "

# answer field -> XML element name
ANSWER_ELEMENT_NAMES = {
    "value_string": "valueString",
    "value_boolean": "valueBoolean",
    "value_decimal": "valueDecimal",
    "value_integer": "valueInteger",
    "value_date": "valueDate",
    "value_date_time": "valueDateTime",
    "value_time": "valueTime",
    "value_coding": "valueCoding",
}


def escape_xml(text) -> str:
    """Escape XML special characters. The ampersand goes first so that the
    entities introduced for the other characters are not escaped again."""
    if not text:
        return ""
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )


def comment_text(text) -> str:
    """Make text safe inside an XML comment, which may not contain "--"."""
    return re.sub(r"-(?=-)", "- ", str(text))


def format_value(value) -> str:
    """Render a primitive for a value attribute."""
    if isinstance(value, (bool, int, float)):
        return format_number(value)
    return escape_xml(value)


def find_questionnaire_item(
    link_id: str, items: Optional[List[QuestionnaireItem]]
) -> Optional[QuestionnaireItem]:
    """Depth-first search for the item with the given linkId."""
    for item in items or []:
        if item.link_id == link_id:
            return item
        found = find_questionnaire_item(link_id, item.item)
        if found is not None:
            return found
    return None


class FHIRXMLSerializer:
    """Serializes FHIR resources built by the exporters to XML strings."""

    def __init__(self, settings: ExportSettings = DEFAULT_SETTINGS):
        self.settings = settings

    def questionnaire_to_xml(self, questionnaire: Questionnaire) -> str:
        """Convert a Questionnaire to XML.

        Args:
            questionnaire: The Questionnaire resource

        Returns:
            XML document as a string
        """
        lines = [XML_PROLOG, f'<Questionnaire xmlns="{self.settings.fhir_namespace}">']

        self._append_value(lines, 1, "id", questionnaire.id)
        self._append_value(lines, 1, "url", questionnaire.url)
        self._append_value(lines, 1, "version", questionnaire.version)
        self._append_value(lines, 1, "title", questionnaire.title)
        lines.append(f'{INDENT}<status value="{escape_xml(questionnaire.status)}" />')
        self._append_value(lines, 1, "date", questionnaire.date)
        self._append_value(lines, 1, "publisher", questionnaire.publisher)
        self._append_value(lines, 1, "description", questionnaire.description)

        for item in questionnaire.item:
            self._append_item(lines, item, 1)

        lines.append("</Questionnaire>")
        return "\n".join(lines)

    def questionnaire_response_to_xml(
        self,
        response: QuestionnaireResponse,
        questionnaire: Optional[Questionnaire] = None,
    ) -> str:
        """Convert a QuestionnaireResponse to XML.

        Args:
            response: The QuestionnaireResponse resource
            questionnaire: Accepted for symmetry with the enhanced variant; the
                plain rendering does not use it

        Returns:
            XML document as a string
        """
        return self._response_to_xml(response, None)

    def enhanced_questionnaire_response_to_xml(
        self, response: QuestionnaireResponse, questionnaire: Questionnaire
    ) -> str:
        """Convert a QuestionnaireResponse to XML, annotating every item with the
        definition of the matching questionnaire item.

        Args:
            response: The QuestionnaireResponse resource
            questionnaire: The Questionnaire the response answers

        Returns:
            XML document as a string
        """
        return self._response_to_xml(response, questionnaire)

    def combined_questionnaire_response_to_xml(
        self, questionnaire: Questionnaire, response: QuestionnaireResponse
    ) -> str:
        """Wrap the questionnaire and the enhanced response in a collection Bundle.

        Args:
            questionnaire: The Questionnaire resource
            response: The QuestionnaireResponse resource

        Returns:
            XML document as a string
        """
        lines = [
            XML_PROLOG,
            f'<Bundle xmlns="{self.settings.fhir_namespace}">',
            f'{INDENT}<resourceType value="Bundle" />',
            f'{INDENT}<type value="collection" />',
        ]

        for document in (
            self.questionnaire_to_xml(questionnaire),
            self.enhanced_questionnaire_response_to_xml(response, questionnaire),
        ):
            lines.append(f"{INDENT}<entry>")
            lines.append(f"{INDENT * 2}<resource>")
            lines.extend(self._embed(document, 3))
            lines.append(f"{INDENT * 2}</resource>")
            lines.append(f"{INDENT}</entry>")

        lines.append("</Bundle>")
        return "\n".join(lines)

    def _response_to_xml(
        self,
        response: QuestionnaireResponse,
        questionnaire: Optional[Questionnaire],
    ) -> str:
        lines = [
            XML_PROLOG,
            f'<QuestionnaireResponse xmlns="{self.settings.fhir_namespace}">',
        ]

        self._append_value(lines, 1, "id", response.id)
        lines.append(
            f'{INDENT}<questionnaire value="{escape_xml(response.questionnaire)}" />'
        )
        lines.append(f'{INDENT}<status value="{escape_xml(response.status)}" />')
        self._append_value(lines, 1, "authored", response.authored)

        for item in response.item:
            self._append_response_item(lines, item, 1, questionnaire)

        lines.append("</QuestionnaireResponse>")
        return "\n".join(lines)

    @staticmethod
    def _embed(document: str, level: int) -> List[str]:
        """Indent a standalone document for nesting, dropping its prolog."""
        return [
            f"{INDENT * level}{line}"
            for line in document.split("\n")
            if line.strip() and not line.startswith("<?xml")
        ]

    @staticmethod
    def _append_value(lines: List[str], level: int, name: str, value) -> None:
        """Append `<name value="..." />` if the value is present."""
        if value is None or value == "":
            return
        lines.append(f'{INDENT * level}<{name} value="{format_value(value)}" />')

    def _append_coding(self, lines: List[str], level: int, coding: Coding) -> None:
        lines.append(f"{INDENT * level}<valueCoding>")
        self._append_value(lines, level + 1, "system", coding.system)
        self._append_value(lines, level + 1, "code", coding.code)
        self._append_value(lines, level + 1, "display", coding.display)
        lines.append(f"{INDENT * level}</valueCoding>")

    def _append_item(self, lines: List[str], item: QuestionnaireItem, level: int) -> None:
        indent = INDENT * level
        lines.append(f"{indent}<item>")

        self._append_value(lines, level + 1, "linkId", item.link_id)
        self._append_value(lines, level + 1, "text", item.text)
        lines.append(f'{indent}{INDENT}<type value="{escape_xml(item.type)}" />')
        if item.required:
            self._append_value(lines, level + 1, "required", item.required)
        if item.repeats:
            self._append_value(lines, level + 1, "repeats", item.repeats)
        if item.read_only:
            self._append_value(lines, level + 1, "readOnly", item.read_only)
        self._append_value(lines, level + 1, "maxLength", item.max_length)
        self._append_value(lines, level + 1, "minLength", item.min_length)

        for option in item.answer_option or []:
            lines.append(f"{indent}{INDENT}<answerOption>")
            if option.value_coding:
                self._append_coding(lines, level + 2, option.value_coding)
            lines.append(f"{indent}{INDENT}</answerOption>")

        for child in item.item or []:
            self._append_item(lines, child, level + 1)

        lines.append(f"{indent}</item>")

    def _append_response_item(
        self,
        lines: List[str],
        item: QuestionnaireResponseItem,
        level: int,
        questionnaire: Optional[Questionnaire],
    ) -> None:
        indent = INDENT * level
        lines.append(f"{indent}<item>")

        self._append_value(lines, level + 1, "linkId", item.link_id)
        self._append_value(lines, level + 1, "text", item.text)

        if questionnaire is not None:
            definition = find_questionnaire_item(item.link_id, questionnaire.item)
            if definition is not None:
                self._append_item_metadata(lines, level + 1, definition)

        for answer in item.answer or []:
            lines.append(f"{indent}{INDENT}<answer>")
            self._append_answer_value(lines, level + 2, answer)
            lines.append(f"{indent}{INDENT}</answer>")

        for child in item.item or []:
            self._append_response_item(lines, child, level + 1, questionnaire)

        lines.append(f"{indent}</item>")

    def _append_answer_value(self, lines: List[str], level: int, answer: Answer) -> None:
        for field_name in ANSWER_VALUE_FIELDS:
            value = getattr(answer, field_name)
            if value is None:
                continue
            if isinstance(value, Coding):
                self._append_coding(lines, level, value)
            else:
                lines.append(
                    f'{INDENT * level}<{ANSWER_ELEMENT_NAMES[field_name]} value="{format_value(value)}" />'
                )
            return

    def _append_item_metadata(
        self, lines: List[str], level: int, definition: QuestionnaireItem
    ) -> None:
        """Emit the questionnaire item's definition as comments and as the
        questionnaire-metadata extension."""
        indent = INDENT * level
        required = bool(definition.required)

        lines.append(f"{indent}<!-- Questionnaire Metadata -->")
        lines.append(f"{indent}<!-- type: {comment_text(definition.type)} -->")
        lines.append(f"{indent}<!-- required: {format_value(required)} -->")
        if definition.repeats:
            lines.append(f"{indent}<!-- repeats: {format_value(definition.repeats)} -->")
        if definition.read_only:
            lines.append(f"{indent}<!-- readOnly: {format_value(definition.read_only)} -->")
        if definition.max_length is not None:
            lines.append(f"{indent}<!-- maxLength: {definition.max_length} -->")
        if definition.min_length is not None:
            lines.append(f"{indent}<!-- minLength: {definition.min_length} -->")

        lines.append(
            f'{indent}<extension url="{escape_xml(self.settings.metadata_extension_url)}">'
        )
        self._append_sub_extension(lines, level + 1, "type", "valueString", definition.type)
        self._append_sub_extension(lines, level + 1, "required", "valueBoolean", required)
        if definition.repeats:
            self._append_sub_extension(
                lines, level + 1, "repeats", "valueBoolean", definition.repeats
            )
        if definition.read_only:
            self._append_sub_extension(
                lines, level + 1, "readOnly", "valueBoolean", definition.read_only
            )
        if definition.max_length is not None:
            self._append_sub_extension(
                lines, level + 1, "maxLength", "valueInteger", definition.max_length
            )
        lines.append(f"{indent}</extension>")

    @staticmethod
    def _append_sub_extension(
        lines: List[str], level: int, url: str, value_name: str, value
    ) -> None:
        indent = INDENT * level
        lines.append(f'{indent}<extension url="{url}">')
        lines.append(f'{indent}{INDENT}<{value_name} value="{format_value(value)}" />')
        lines.append(f"{indent}</extension>")
