"""
FHIR and GDT export for forms built in the questionnaire designer.
"""

from questionnaire_export.business_rules.gdt_codes import (
    GDT_MAPPINGS,
    GDTCodeRegistry,
    GDTMapping,
)
from questionnaire_export.business_rules.type_mapping import FHIRTypeMapper
from questionnaire_export.config import ExportSettings
from questionnaire_export.core.form_exporter import FormExport, FormExporter
from questionnaire_export.core.questionnaire_exporter import QuestionnaireExporter
from questionnaire_export.core.response_exporter import ResponseExporter
from questionnaire_export.core.xml_serializer import FHIRXMLSerializer, escape_xml
from questionnaire_export.exceptions.export import FormDefinitionError, GDTTableError
from questionnaire_export.models.fhir import Questionnaire, QuestionnaireResponse
from questionnaire_export.models.form import (
    ElementType,
    FormDefinition,
    FormElement,
    FormElementOption,
    FormMetadata,
)

__all__ = [
    "GDT_MAPPINGS",
    "GDTCodeRegistry",
    "GDTMapping",
    "FHIRTypeMapper",
    "ExportSettings",
    "FormExport",
    "FormExporter",
    "QuestionnaireExporter",
    "ResponseExporter",
    "FHIRXMLSerializer",
    "escape_xml",
    "FormDefinitionError",
    "GDTTableError",
    "Questionnaire",
    "QuestionnaireResponse",
    "ElementType",
    "FormDefinition",
    "FormElement",
    "FormElementOption",
    "FormMetadata",
]

__version__ = "0.1.0"
