import pytest
from pydantic import ValidationError
from questionnaire_export.models.form import (
    ElementType,
    FormDefinition,
    FormElement,
    FormMetadata,
    iter_elements,
)
from questionnaire_export.models.fhir import Answer, Coding, QuestionnaireItem


@pytest.fixture
def designer_element():
    """Provides an element the way the designer saves it"""
    return {
        "id": "el-1",
        "linkId": "name",
        "type": "text",
        "label": "Name",
        "required": True,
        "maxLength": 40,
        "minLength": 2,
        "showTooltip": True,
        "tooltipText": "Your full name",
    }


def test_element_reads_camel_case_keys(designer_element):
    """Test that designer keys populate the snake_case fields"""
    element = FormElement.model_validate(designer_element)
    assert element.link_id == "name"
    assert element.max_length == 40
    assert element.min_length == 2
    assert element.required is True


def test_element_accepts_field_names():
    """Test that elements can also be built in Python with field names"""
    element = FormElement(id="el-2", type="yesNo", max_occurs=3)
    assert element.type == "yesNo"
    assert element.max_occurs == 3
    assert element.label == ""
    assert element.required is None


def test_required_null_is_accepted():
    """Test that a null required flag from the designer loads as unset"""
    element = FormElement.model_validate({"id": "a", "type": "text", "required": None})
    assert element.required is None


def test_effective_link_id_falls_back_to_id():
    """Test that an element without linkId is exported under its id"""
    assert FormElement(id="el-3", type="text").effective_link_id == "el-3"
    assert FormElement(id="el-3", link_id="q3", type="text").effective_link_id == "q3"


def test_unknown_type_is_accepted():
    """Test that unknown type tags do not reject the form"""
    element = FormElement(id="el-4", type="signature")
    assert element.type == "signature"
    assert "signature" not in [t.value for t in ElementType]


def test_only_groups_contain_children():
    """Test that nesting under a non-group element is rejected"""
    with pytest.raises(ValidationError) as exc_info:
        FormElement.model_validate({
            "id": "el-5",
            "type": "text",
            "elements": [{"id": "el-6", "type": "text"}],
        })
    assert "Only group elements can contain child elements" in str(exc_info.value)


def test_group_with_children():
    """Test that groups nest elements, including nested groups"""
    group = FormElement.model_validate({
        "id": "g1",
        "type": "group",
        "elements": [
            {"id": "q1", "type": "text"},
            {"id": "g2", "type": "group", "elements": [{"id": "q2", "type": "number"}]},
        ],
    })
    assert [e.id for e in iter_elements([group])] == ["g1", "q1", "g2", "q2"]


def test_empty_children_list_on_non_group():
    """Test that an empty child list is not treated as nesting"""
    element = FormElement(id="el-7", type="text", elements=[])
    assert element.elements == []


def test_form_definition_rejects_duplicate_ids():
    """Test that ids must be unique across the whole tree"""
    with pytest.raises(ValidationError) as exc_info:
        FormDefinition.model_validate({
            "elements": [
                {"id": "q1", "type": "text"},
                {"id": "g1", "type": "group", "elements": [{"id": "q1", "type": "text"}]},
            ]
        })
    assert "Duplicate element ids in form: q1" in str(exc_info.value)


def test_form_definition_defaults():
    """Test that every part of a form definition is optional"""
    form = FormDefinition.model_validate({})
    assert form.elements == []
    assert form.answers == {}
    assert form.metadata == FormMetadata()


def test_metadata_status_is_checked():
    """Test that only FHIR publication states are accepted"""
    assert FormMetadata(status="retired").status == "retired"
    with pytest.raises(ValidationError):
        FormMetadata(status="published")


def test_answer_requires_exactly_one_value():
    """Test the single-value rule of answers"""
    assert Answer(value_boolean=False).value_boolean is False
    with pytest.raises(ValidationError):
        Answer()
    with pytest.raises(ValidationError):
        Answer(value_string="x", value_integer=1)


def test_fhir_models_are_frozen():
    """Test that exported resources cannot be modified"""
    coding = Coding(system="http://example.org/answer-codes", code="a")
    with pytest.raises(ValidationError):
        coding.code = "b"


def test_item_text_extension_alias():
    """Test that the description extension serialises as _text"""
    item = QuestionnaireItem.model_validate({
        "linkId": "q1",
        "type": "string",
        "_text": {"extension": [{"url": "http://example.org/x", "valueString": "Hint"}]},
    })
    assert item.text_extension.extension[0].value_string == "Hint"
    dumped = item.model_dump(by_alias=True, exclude_none=True)
    assert "_text" in dumped
    assert dumped["linkId"] == "q1"
