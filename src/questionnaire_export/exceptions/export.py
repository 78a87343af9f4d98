'''Custom exceptions for loading and exporting designer forms.'''
from pathlib import Path
from typing import Optional, Union


class FormDefinitionError(Exception):
    """Raised when a saved form cannot be read or does not describe a valid form"""
    def __init__(self, message: str, source: Optional[Union[str, Path]] = None):
        self.source = source
        if source is not None:
            message = f"{message} (Source: {source})"
        super().__init__(message)


class GDTTableError(Exception):
    """Raised when the packaged GDT code table is missing or malformed"""
