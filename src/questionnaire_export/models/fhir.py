"""
FHIR R4 resources produced by the exporters.

Only the practical subset of Questionnaire and QuestionnaireResponse that the
designer emits is modelled. Attributes are snake_case in Python and serialise to
the camelCase element names FHIR uses, so `to_dict()` and `to_json()` return
FHIR JSON directly. Every model is frozen: once an exporter has built a resource
nothing downstream may change it.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel


class FHIRModel(BaseModel):
    """Base for all FHIR value objects"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True
        use_enum_values = True


class QuestionnaireStatus(str, Enum):
    """Publication status of a Questionnaire"""

    DRAFT = "draft"
    ACTIVE = "active"
    RETIRED = "retired"
    UNKNOWN = "unknown"


class Coding(FHIRModel):
    system: Optional[str] = None
    code: Optional[str] = None
    display: Optional[str] = None


class Extension(FHIRModel):
    url: str
    value_string: Optional[str] = None


class ElementExtension(FHIRModel):
    """Extensions attached to a primitive element (the `_text` of an item)"""

    extension: List[Extension] = Field(default_factory=list)


class AnswerOption(FHIRModel):
    value_coding: Optional[Coding] = None


class QuestionnaireItem(FHIRModel):
    """A question, display text or group inside a Questionnaire"""

    link_id: str
    text: Optional[str] = None
    type: str
    required: Optional[bool] = None
    text_extension: Optional[ElementExtension] = Field(default=None, alias="_text")
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    answer_option: Optional[List[AnswerOption]] = None
    item: Optional[List["QuestionnaireItem"]] = None
    code: Optional[List[Coding]] = None
    prefix: Optional[str] = None
    read_only: Optional[bool] = None
    enable_when: Optional[List[Dict[str, Any]]] = None
    answer_value_set: Optional[str] = None
    repeats: Optional[bool] = None
    max_occurs: Optional[int] = None


class FHIRResource(FHIRModel):
    """Common serialisation helpers for top-level resources"""

    def to_dict(self) -> Dict[str, Any]:
        """Return the resource as a FHIR JSON dictionary."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def to_json(self, indent: int = 2) -> str:
        """Return the resource as a FHIR JSON string.

        Args:
            indent: JSON indentation level

        Returns:
            Resource as a JSON string, absent fields omitted
        """
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)


class Questionnaire(FHIRResource):
    resource_type: Literal["Questionnaire"] = "Questionnaire"
    id: Optional[str] = None
    url: Optional[str] = None
    title: Optional[str] = None
    status: QuestionnaireStatus
    date: Optional[str] = None
    publisher: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    item: List[QuestionnaireItem] = Field(default_factory=list)


# Precedence used when a serializer has to find the populated value of an answer
ANSWER_VALUE_FIELDS = (
    "value_string",
    "value_boolean",
    "value_decimal",
    "value_integer",
    "value_date",
    "value_date_time",
    "value_time",
    "value_coding",
)


class Answer(FHIRModel):
    """One answer of a QuestionnaireResponse item.

    Exactly one value field is populated per answer.
    """

    value_string: Optional[str] = None
    value_boolean: Optional[bool] = None
    value_decimal: Optional[float] = None
    value_integer: Optional[int] = None
    value_date: Optional[str] = None
    value_date_time: Optional[str] = None
    value_time: Optional[str] = None
    value_coding: Optional[Coding] = None

    @model_validator(mode="after")
    def validate_single_value(self) -> "Answer":
        """Ensure the answer carries exactly one value"""
        populated = [
            name for name in ANSWER_VALUE_FIELDS if getattr(self, name) is not None
        ]
        if len(populated) != 1:
            raise ValueError(
                f"An answer must carry exactly one value, found {len(populated)}"
            )
        return self


class QuestionnaireResponseItem(FHIRModel):
    link_id: str
    text: Optional[str] = None
    answer: Optional[List[Answer]] = None
    item: Optional[List["QuestionnaireResponseItem"]] = None


class QuestionnaireResponse(FHIRResource):
    resource_type: Literal["QuestionnaireResponse"] = "QuestionnaireResponse"
    id: Optional[str] = None
    questionnaire: str
    status: str = "completed"
    authored: Optional[str] = None
    item: List[QuestionnaireResponseItem] = Field(default_factory=list)
