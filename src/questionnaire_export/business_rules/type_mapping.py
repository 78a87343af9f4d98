"""
Mapping between the designer's element types and FHIR Questionnaire item types.

The two tables are intentionally not inverses of each other. Several element
types share one FHIR type (select, checkbox and radio are all `choice`) and
several FHIR types collapse onto one element type (`decimal` and `integer` both
become `number`), so converting back and forth does not round-trip.
"""

from logging import getLogger
from types import MappingProxyType

from questionnaire_export.models.form import ElementType

logger = getLogger(__name__)

DEFAULT_FHIR_TYPE = "string"
DEFAULT_ELEMENT_TYPE = ElementType.TEXT.value

ELEMENT_TO_FHIR_TYPE = MappingProxyType({
    ElementType.TEXT.value: "string",
    ElementType.TEXTAREA.value: "text",
    ElementType.NUMBER.value: "decimal",
    ElementType.EMAIL.value: "string",
    ElementType.SELECT.value: "choice",
    ElementType.CHECKBOX.value: "choice",
    ElementType.RADIO.value: "choice",
    ElementType.DATE.value: "date",
    ElementType.GROUP.value: "group",
    ElementType.HEADER.value: "display",
    ElementType.IMAGE.value: "display",
    ElementType.YES_NO.value: "boolean",
    ElementType.DATE_TIME.value: "dateTime",
    ElementType.TIME.value: "time",
    ElementType.ATTACHMENT.value: "attachment",
    ElementType.REFERENCE.value: "reference",
    ElementType.QUANTITY.value: "quantity",
})

FHIR_TO_ELEMENT_TYPE = MappingProxyType({
    "string": ElementType.TEXT.value,
    "text": ElementType.TEXTAREA.value,
    "decimal": ElementType.NUMBER.value,
    "integer": ElementType.NUMBER.value,
    "boolean": ElementType.YES_NO.value,
    "date": ElementType.DATE.value,
    "dateTime": ElementType.DATE_TIME.value,
    "time": ElementType.TIME.value,
    "choice": ElementType.SELECT.value,
    "open-choice": ElementType.SELECT.value,
    "group": ElementType.GROUP.value,
    "display": ElementType.HEADER.value,
    "attachment": ElementType.ATTACHMENT.value,
    "reference": ElementType.REFERENCE.value,
    "quantity": ElementType.QUANTITY.value,
})


class FHIRTypeMapper:
    """Converts between element types and FHIR item types.

    Both directions are total: unknown input falls back to a default instead of
    raising.
    """

    def element_type_to_fhir_type(self, element_type: str) -> str:
        """Convert a form element type to the corresponding FHIR item type.

        Args:
            element_type: The element type tag, e.g. "textarea"

        Returns:
            The FHIR type, "string" for unknown element types
        """
        # enum members hash by name, look them up by their tag
        if isinstance(element_type, ElementType):
            element_type = element_type.value

        fhir_type = ELEMENT_TO_FHIR_TYPE.get(element_type)
        if fhir_type is None:
            logger.debug(
                f"No FHIR type for element type '{element_type}', using '{DEFAULT_FHIR_TYPE}'"
            )
            return DEFAULT_FHIR_TYPE
        return fhir_type

    def fhir_type_to_element_type(self, fhir_type: str) -> str:
        """Convert a FHIR item type to the corresponding form element type.

        Args:
            fhir_type: The FHIR type, e.g. "open-choice"

        Returns:
            The element type, "text" for unknown FHIR types
        """
        element_type = FHIR_TO_ELEMENT_TYPE.get(fhir_type)
        if element_type is None:
            logger.debug(
                f"No element type for FHIR type '{fhir_type}', using '{DEFAULT_ELEMENT_TYPE}'"
            )
            return DEFAULT_ELEMENT_TYPE
        return element_type

    @staticmethod
    def is_known_element_type(element_type: str) -> bool:
        if isinstance(element_type, ElementType):
            element_type = element_type.value
        return element_type in ELEMENT_TO_FHIR_TYPE
