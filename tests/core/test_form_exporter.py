import json
from pathlib import Path
import pytest
from lxml import etree as ET
from questionnaire_export.core.form_exporter import FormExporter, file_stem
from questionnaire_export.exceptions.export import FormDefinitionError
from questionnaire_export.models.form import FormDefinition
from questionnaire_export.utils.validation import ValidationSeverity

TEST_DATA = Path(__file__).parent.parent / "test_data"


@pytest.fixture
def exporter():
    """Provides a fresh form exporter for each test"""
    return FormExporter()


@pytest.fixture
def form(exporter):
    """Provides the patient intake form"""
    return exporter.load_form(TEST_DATA / "patient_intake.json")


def test_load_form(form):
    """Test loading a form saved by the designer"""
    assert form.metadata.title == "Patient Intake"
    assert [e.id for e in form.elements][:3] == ["el-header", "el-logo", "el-name"]
    assert form.elements[4].elements[1].options[2].label == "Penicillin"
    assert form.answers["el-allergies"] == ["pollen", "nuts"]


def test_load_missing_file(exporter, tmp_path):
    """Test that a missing file raises FormDefinitionError"""
    with pytest.raises(FormDefinitionError) as exc_info:
        exporter.load_form(tmp_path / "missing.json")
    assert "missing.json" in str(exc_info.value)


def test_load_invalid_json(exporter, tmp_path):
    """Test that a file that is not JSON raises FormDefinitionError"""
    path = tmp_path / "broken.json"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(FormDefinitionError):
        exporter.load_form(path)


def test_load_invalid_form(exporter, tmp_path):
    """Test that validation errors are collected and raised as FormDefinitionError"""
    path = tmp_path / "duplicates.json"
    path.write_text(json.dumps({
        "elements": [{"id": "q1", "type": "text"}, {"id": "q1", "type": "number"}]
    }), encoding="utf-8")

    with pytest.raises(FormDefinitionError):
        exporter.load_form(path)

    errors = exporter.validator.get_results_by_severity(ValidationSeverity.ERROR)
    assert len(errors) == 1
    assert "Duplicate element ids in form: q1" in errors[0].message


def test_export(exporter, form):
    """Test the resources built for the intake form"""
    result = exporter.export(form)
    questionnaire = result.questionnaire
    response = result.response

    assert questionnaire.id == "patient-intake"
    assert questionnaire.status == "active"
    assert [i.link_id for i in questionnaire.item] == ["el-header", "name", "weight", "history", "notes"]
    assert response.questionnaire == "http://example.org/Questionnaire/patient-intake"
    assert [i.link_id for i in response.item] == ["name", "weight", "history", "notes"]

    name, weight, history, notes = response.item
    assert name.answer[0].value_string == "Erna Schmitz & Sohn"
    assert weight.answer[0].value_decimal == 72.5
    assert notes.answer is None

    smoker, allergies, insurance = history.item
    assert smoker.answer[0].value_boolean is False
    assert [a.value_coding.display for a in allergies.answer] == ["Pollen", "Nuts"]
    assert insurance.answer[0].value_coding.code == "gkv"
    assert insurance.answer[0].value_coding.display == "Statutory"
    assert not exporter.validator.results


def test_export_does_not_modify_form(exporter, form):
    """Test that exporting leaves the form untouched"""
    before = form.model_dump()
    exporter.export(form)
    assert form.model_dump() == before


def test_file_stem():
    """Test the export file base name"""
    assert file_stem(FormDefinition.model_validate({"metadata": {"title": "A/B\\C"}})) == "A_B_C"
    assert file_stem(FormDefinition()) == "questionnaire"


def test_export_all(exporter, form, tmp_path):
    """Test that all exports and the validation report are written"""
    written = exporter.export_all(form, tmp_path / "out")

    assert sorted(written) == [
        "Patient Intake.json",
        "Patient Intake_bundle.xml",
        "Patient Intake_questionnaire.xml",
        "Patient Intake_response.json",
        "Patient Intake_response_with_metadata.xml",
    ]
    for path in written.values():
        assert path.exists()

    report = tmp_path / "out" / "validation_reports" / "export_validation.log"
    assert report.exists()
    assert "Total Issues: 0" in report.read_text(encoding="utf-8")


def test_exported_files_content(exporter, form, tmp_path):
    """Test that written JSON is FHIR JSON and written XML is well-formed"""
    written = exporter.export_all(form, tmp_path)

    questionnaire = json.loads(written["Patient Intake.json"].read_text(encoding="utf-8"))
    assert questionnaire["resourceType"] == "Questionnaire"
    assert questionnaire["item"][1]["_text"]["extension"][0]["valueString"] == "As printed on the insurance card"

    response = json.loads(written["Patient Intake_response.json"].read_text(encoding="utf-8"))
    assert response["resourceType"] == "QuestionnaireResponse"
    assert "answer" not in response["item"][3]

    for name in written:
        if name.endswith(".xml"):
            ET.fromstring(written[name].read_bytes())

    bundle = written["Patient Intake_bundle.xml"].read_text(encoding="utf-8")
    assert "Erna Schmitz &amp; Sohn" in bundle
    assert "<!-- type: boolean -->" in bundle


def test_warnings_go_to_report(exporter, tmp_path):
    """Test that export fallbacks end up in the validation report"""
    form = FormDefinition.model_validate({
        "metadata": {"title": "Fallbacks"},
        "elements": [
            {"id": "q1", "type": "number"},
            {"id": "q2", "type": "signature"},
        ],
        "answers": {"q1": "many"},
    })
    exporter.export_all(form, tmp_path)

    report = (tmp_path / "validation_reports" / "export_validation.log").read_text(encoding="utf-8")
    assert "WARNING Issues (2):" in report
    assert "Unknown element type 'signature'" in report
    assert "Answer 'many' is not a number, exported as NaN." in report
