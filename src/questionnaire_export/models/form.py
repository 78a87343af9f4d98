"""
Data model for forms built in the questionnaire designer.

The designer keeps a tree of form elements: questions, static content (headers
and images) and groups that nest further elements. This module models that
tree as the exporters consume it. Only the fields that matter for FHIR export
are declared; the presentation settings the designer stores alongside (tooltips,
header fonts, image sizes, yes/no labels, ...) are accepted and ignored, so a
form saved by the designer can be validated as is.

Field names follow Python conventions but are read from (and written to) the
camelCase keys the designer uses, e.g. `link_id` <-> `linkId`.
"""

from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

from questionnaire_export.models.fhir import Coding, QuestionnaireStatus


class ElementType(str, Enum):
    """Element types the designer's palette offers"""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    EMAIL = "email"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    DATE = "date"
    GROUP = "group"
    HEADER = "header"
    IMAGE = "image"
    YES_NO = "yesNo"
    DATE_TIME = "dateTime"
    TIME = "time"
    ATTACHMENT = "attachment"
    REFERENCE = "reference"
    QUANTITY = "quantity"


# Element types whose options become answer options / codings
CHOICE_TYPES = frozenset(
    {ElementType.SELECT.value, ElementType.RADIO.value, ElementType.CHECKBOX.value}
)


class DesignerModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True


class FormElementOption(DesignerModel):
    value: str
    label: str = ""


class FormElement(DesignerModel):
    """A node of the form tree.

    `type` is kept as a plain string: the exporters fall back to defaults for tags
    they do not know instead of rejecting the whole form.
    """

    id: str
    link_id: Optional[str] = None
    type: str
    label: str = ""
    required: Optional[bool] = None
    options: Optional[List[FormElementOption]] = None
    elements: Optional[List["FormElement"]] = None
    description: Optional[str] = None

    # validation constraints
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None

    # FHIR passthrough
    code: Optional[List[Coding]] = None
    prefix: Optional[str] = None
    read_only: Optional[bool] = None
    repeats: Optional[bool] = None
    max_occurs: Optional[int] = None
    answer_value_set: Optional[str] = None
    fhir_type: Optional[str] = None
    enable_when: Optional[List[Dict[str, Any]]] = None

    @model_validator(mode="after")
    def validate_children(self) -> "FormElement":
        """Ensure only groups contain child elements"""
        if self.elements and self.type != ElementType.GROUP.value:
            raise ValueError(
                f"Only group elements can contain child elements (element '{self.id}' is '{self.type}')"
            )
        return self

    @property
    def effective_link_id(self) -> str:
        """The identifier the element is exported under"""
        return self.link_id or self.id


class FormMetadata(DesignerModel):
    """Questionnaire-level descriptive fields, all optional"""

    id: Optional[str] = None
    url: Optional[str] = None
    status: Optional[QuestionnaireStatus] = None
    title: Optional[str] = None
    version: Optional[str] = None
    publisher: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None


def iter_elements(elements: List[FormElement]) -> Iterator[FormElement]:
    """Walk a form tree depth-first, children in list order."""
    for element in elements:
        yield element
        if element.elements:
            yield from iter_elements(element.elements)


class FormDefinition(DesignerModel):
    """A complete form as saved by the designer: metadata, element tree and answers"""

    metadata: FormMetadata = Field(default_factory=FormMetadata)
    elements: List[FormElement] = Field(default_factory=list)
    answers: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_structure(self) -> "FormDefinition":
        """Element ids must be unique across the whole tree"""
        seen = set()
        duplicates = []
        for element in iter_elements(self.elements):
            if element.id in seen and element.id not in duplicates:
                duplicates.append(element.id)
            seen.add(element.id)

        if duplicates:
            raise ValueError(f"Duplicate element ids in form: {', '.join(duplicates)}")

        return self
