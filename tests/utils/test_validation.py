from pydantic import BaseModel, ValidationError
import pytest
from questionnaire_export.utils.validation import (
    ValidationCollector,
    ValidationLevel,
    ValidationSeverity,
)


class Sample(BaseModel):
    count: int


@pytest.fixture
def collector():
    """Provides a collector at the default level"""
    return ValidationCollector()


def test_default_level_is_normal(collector):
    """Test the default validation level"""
    assert collector.validation_level == ValidationLevel.NORMAL


def test_normal_collects_warnings_and_errors(collector):
    """Test that NORMAL only raises on critical results"""
    collector.add_result(ValidationSeverity.WARNING, "fallback", element_id="q1")
    collector.add_result(ValidationSeverity.ERROR, "bad code", element_id="q2")

    assert len(collector.results) == 2
    with pytest.raises(ValueError, match="CRITICAL: broken"):
        collector.add_result(ValidationSeverity.CRITICAL, "broken")
    assert collector.has_critical_issues


def test_strict_raises_on_errors():
    """Test that STRICT raises on errors but not on warnings"""
    collector = ValidationCollector(ValidationLevel.STRICT)
    collector.add_result(ValidationSeverity.WARNING, "fallback")

    with pytest.raises(ValueError, match="ERROR: bad code"):
        collector.add_result(ValidationSeverity.ERROR, "bad code")


def test_lenient_never_raises():
    """Test that LENIENT collects everything"""
    collector = ValidationCollector(ValidationLevel.LENIENT)
    for severity in ValidationSeverity:
        collector.add_result(severity, "issue")

    assert len(collector.results) == 3
    assert len(collector.get_results_by_severity(ValidationSeverity.CRITICAL)) == 1


def test_add_pydantic_error(collector):
    """Test that each pydantic error becomes an ERROR result"""
    with pytest.raises(ValidationError) as exc_info:
        Sample(count="many")

    collector.add_pydantic_error(exc_info.value, element_type="Form")

    result = collector.results[0]
    assert result.severity == ValidationSeverity.ERROR
    assert result.message.startswith("Field validation error:")
    assert result.field_name == "count"
    assert result.element_type == "Form"


def test_results_are_logged(collector, caplog):
    """Test that results are logged with their element"""
    collector.add_result(ValidationSeverity.WARNING, "fallback", element_id="q1", element_type="text")
    assert "WARNING: fallback (Element ID: q1) (Type: text)" in caplog.text


def test_save_report(tmp_path):
    """Test the report layout"""
    collector = ValidationCollector(ValidationLevel.LENIENT)
    collector.add_result(ValidationSeverity.ERROR, 'GDT Code "9999" not found in mapping table.',
                         element_id="q1", field_name="gdt_code")
    collector.add_result(ValidationSeverity.CRITICAL, "broken")

    report_path = tmp_path / "reports" / "export_validation.log"
    collector.save_report(report_path)
    report = report_path.read_text(encoding="utf-8")

    assert report.startswith("Export Validation Report\n")
    assert "Validation Level: LENIENT" in report
    assert "Total Issues: 2" in report
    assert "ERROR Issues (1):" in report
    assert "  Element ID: q1" in report
    assert "  Field: gdt_code" in report
    assert "WARNING Issues" not in report
    assert report.endswith("Critical issues were found, the export is incomplete.\n")
