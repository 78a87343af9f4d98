"""
Export settings shared by the exporters and the XML serializer.

The defaults reproduce the URIs the designer has always written into its
exports. The answer-code system and the questionnaire-metadata extension are
local placeholders, not registered FHIR terminology or extensions; a deployment
that defines real ones can override them through a JSON settings file.
"""

import json
from pathlib import Path
from typing import Union

from pydantic import BaseModel


class ExportSettings(BaseModel):
    """URIs and default values used when building FHIR resources"""

    fhir_namespace: str = "http://hl7.org/fhir"
    answer_code_system: str = "http://example.org/answer-codes"
    metadata_extension_url: str = "http://example.org/questionnaire-metadata"
    rendering_xhtml_url: str = (
        "http://hl7.org/fhir/StructureDefinition/rendering-xhtml"
    )
    default_title: str = "Untitled Form"
    default_status: str = "draft"
    response_status: str = "completed"

    class Config:
        frozen = True

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ExportSettings":
        """Load settings overrides from a JSON file.

        Args:
            config_path: Path to the settings file. Keys not present in the file
                keep their default value.

        Returns:
            ExportSettings instance (defaults if the file does not exist)
        """
        config_path = Path(config_path)
        if not config_path.exists():
            return cls()

        with open(config_path, "r", encoding="utf-8") as f:
            overrides = json.load(f)

        return cls(**overrides)


DEFAULT_SETTINGS = ExportSettings()
