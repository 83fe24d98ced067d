"""
Custom exception classes for tplhtml.
"""


class TemplateEditorError(Exception):
    """Base exception for all tplhtml errors."""
    pass


class ContractViolation(TemplateEditorError):
    """An invariant of the document tree was broken.

    Raised for list levels outside the supported range, tables shrunk below
    one row or column, and malformed table geometry. These are programming
    errors: the public commands never produce them.
    """
    pass


class TemplateError(TemplateEditorError):
    """Error reading or decoding a template file."""
    pass


class ExportError(TemplateEditorError):
    """Error writing an exported template."""
    pass


class SecurityError(TemplateEditorError):
    """Error related to security validation (size limits, etc.)."""
    pass
