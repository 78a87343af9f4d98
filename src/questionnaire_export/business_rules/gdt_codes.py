"""
GDT (Gerätedatentransfer) field codes used for PMS integration.

Practice-management systems exchange patient data as GDT records whose fields
are identified by four-digit codes. The designer lets a form author insert a
field as a placeholder of the form `#GDT_<code>_<NAME>#`; downstream tools
replace the placeholder with the value of that field. The code table ships with
the package (`gdt_codes.json`) and is loaded once, read-only, at import time.
"""

import json
import re
from logging import getLogger
from pathlib import Path
from types import MappingProxyType
from typing import List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from questionnaire_export.exceptions.export import GDTTableError

logger = getLogger(__name__)

GDT_TABLE_PATH = Path(__file__).parent / "gdt_codes.json"

# Runs of characters that may not appear in a variable name
_NON_ALNUM_RUN = re.compile(r"[^A-Z0-9]+")
_GDT_VARIABLE = re.compile(r"^#GDT_(\d{4})_[A-Z0-9_]*#$")


class GDTMapping(BaseModel):
    """One GDT field definition"""

    code: str
    bezeichnung: str  # field name as given in the GDT standard
    length: str  # a number, "var" or a list of allowed lengths
    type: str  # a: alphanumeric, n: numeric, d: date, f: float
    rule: Optional[str] = None
    example: Optional[str] = None

    class Config:
        frozen = True


def load_gdt_table(table_path: Union[str, Path] = GDT_TABLE_PATH) -> Mapping[str, GDTMapping]:
    """Load a GDT code table into a read-only mapping keyed by code.

    Args:
        table_path: JSON file with a "mappings" list of GDT field definitions

    Returns:
        Read-only mapping code -> GDTMapping, in table order

    Raises:
        GDTTableError: If the file is missing, is not valid JSON, or holds an
            invalid entry
    """
    table_path = Path(table_path)
    try:
        with open(table_path, "r", encoding="utf-8") as f:
            entries = json.load(f)["mappings"]
        mappings = {}
        for entry in entries:
            mapping = GDTMapping(**entry)
            mappings[mapping.code] = mapping
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
        raise GDTTableError(f"Failed to load GDT table from {table_path}: {e}") from e

    return MappingProxyType(mappings)


GDT_MAPPINGS: Mapping[str, GDTMapping] = load_gdt_table()


def derive_variable_name(bezeichnung: str) -> str:
    """Turn a GDT field name into the NAME part of a placeholder.

    "Name des Patienten" -> "NAME_DES_PATIENTEN"
    """
    return _NON_ALNUM_RUN.sub("_", bezeichnung.upper()).strip("_")


class GDTCodeRegistry:
    """Lookups over a GDT code table.

    None is returned for codes that are not in the table; callers surface that as
    a validation message, it is never an error here.
    """

    def __init__(self, mappings: Optional[Mapping[str, GDTMapping]] = None):
        """Initialize the registry.

        Args:
            mappings: Table to use. Defaults to the packaged GDT table.
        """
        self.mappings = GDT_MAPPINGS if mappings is None else mappings

    def get_mapping(self, code: str) -> Optional[GDTMapping]:
        return self.mappings.get(code)

    def is_valid_code(self, code: str) -> bool:
        return code in self.mappings

    def all_codes(self) -> List[str]:
        return list(self.mappings.keys())

    def search_by_name(self, term: str) -> List[GDTMapping]:
        """Find mappings whose name contains `term`, ignoring case.

        Args:
            term: Search term

        Returns:
            Matching mappings in table order
        """
        term = term.lower()
        return [
            mapping
            for mapping in self.mappings.values()
            if term in mapping.bezeichnung.lower()
        ]

    def code_to_variable(self, code: str) -> Optional[str]:
        """Build the placeholder for a GDT code.

        Args:
            code: Four-digit GDT code, e.g. "3101"

        Returns:
            The placeholder, e.g. "#GDT_3101_NAME_DES_PATIENTEN#", or None if the
            code is not in the table
        """
        mapping = self.get_mapping(code)
        if mapping is None:
            logger.debug(f"GDT code '{code}' not found in mapping table")
            return None

        return f"#GDT_{code}_{derive_variable_name(mapping.bezeichnung)}#"

    def variable_to_code(self, variable: str) -> Optional[str]:
        """Extract the GDT code from a placeholder.

        Args:
            variable: A placeholder such as "#GDT_3101_NAME_DES_PATIENTEN#"

        Returns:
            The code if the placeholder is a GDT placeholder for a known code,
            None otherwise
        """
        match = _GDT_VARIABLE.match(variable)
        if not match:
            return None

        code = match.group(1)
        return code if self.is_valid_code(code) else None
