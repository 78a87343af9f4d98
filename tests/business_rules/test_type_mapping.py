import pytest
from questionnaire_export.business_rules.type_mapping import (
    ELEMENT_TO_FHIR_TYPE,
    FHIR_TO_ELEMENT_TYPE,
    FHIRTypeMapper,
)
from questionnaire_export.models.form import ElementType


@pytest.fixture
def mapper():
    """Provides a fresh type mapper for each test"""
    return FHIRTypeMapper()


@pytest.mark.parametrize("element_type, fhir_type", [
    ("text", "string"),
    ("textarea", "text"),
    ("number", "decimal"),
    ("email", "string"),
    ("select", "choice"),
    ("checkbox", "choice"),
    ("radio", "choice"),
    ("date", "date"),
    ("group", "group"),
    ("header", "display"),
    ("image", "display"),
    ("yesNo", "boolean"),
    ("dateTime", "dateTime"),
    ("time", "time"),
    ("attachment", "attachment"),
    ("reference", "reference"),
    ("quantity", "quantity"),
])
def test_element_type_to_fhir_type(mapper, element_type, fhir_type):
    """Test every documented element type -> FHIR type pair"""
    assert mapper.element_type_to_fhir_type(element_type) == fhir_type


@pytest.mark.parametrize("fhir_type, element_type", [
    ("string", "text"),
    ("text", "textarea"),
    ("decimal", "number"),
    ("integer", "number"),
    ("boolean", "yesNo"),
    ("date", "date"),
    ("dateTime", "dateTime"),
    ("time", "time"),
    ("choice", "select"),
    ("open-choice", "select"),
    ("group", "group"),
    ("display", "header"),
    ("attachment", "attachment"),
    ("reference", "reference"),
    ("quantity", "quantity"),
])
def test_fhir_type_to_element_type(mapper, fhir_type, element_type):
    """Test every documented FHIR type -> element type pair"""
    assert mapper.fhir_type_to_element_type(fhir_type) == element_type


def test_unknown_types_fall_back(mapper):
    """Test that unknown input falls back instead of raising"""
    assert mapper.element_type_to_fhir_type("bogus") == "string"
    assert mapper.fhir_type_to_element_type("bogus") == "text"


def test_mapping_does_not_round_trip(mapper):
    """Test the deliberate asymmetry between the two tables"""
    # integer -> number -> decimal
    assert mapper.element_type_to_fhir_type(mapper.fhir_type_to_element_type("integer")) == "decimal"
    # open-choice -> select -> choice
    assert mapper.element_type_to_fhir_type(mapper.fhir_type_to_element_type("open-choice")) == "choice"
    # checkbox -> choice -> select
    assert mapper.fhir_type_to_element_type(mapper.element_type_to_fhir_type("checkbox")) == "select"


def test_enum_members_are_accepted(mapper):
    """Test that ElementType members map like their tags"""
    assert mapper.element_type_to_fhir_type(ElementType.YES_NO) == "boolean"
    assert mapper.is_known_element_type(ElementType.GROUP)
    assert not mapper.is_known_element_type("signature")


def test_tables_are_read_only():
    """Test that the lookup tables cannot be changed at runtime"""
    with pytest.raises(TypeError):
        ELEMENT_TO_FHIR_TYPE["signature"] = "attachment"
    with pytest.raises(TypeError):
        FHIR_TO_ELEMENT_TYPE["url"] = "text"
