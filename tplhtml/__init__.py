"""
tplhtml - Edit HTML templates with placeholder variables and leveled lists

This package provides the document core of a template editor: importing
template HTML (with ``%s`` placeholders) into a document tree, editing it
with list and table commands, and exporting it back to minified template text.
"""

from .DocumentToHtml import DocumentToHtml
from .soup_adapter import SoupToDocumentAdapter
from .editing import EditingSession
from .placeholder import to_internal, to_external, normalize_entities, count_placeholders
from .minifier import minify
from .list_levels import list_presentation, indent, outdent, start_list_at
from .tables import build_table
from .config import EditorConfig, DEFAULT_CONFIG
from .exceptions import (
    TemplateEditorError,
    ContractViolation,
    TemplateError,
    ExportError,
    SecurityError,
)
from .template_api import (
    import_template,
    render_internal,
    export_template,
    export_bytes,
    load_template,
    save_template,
    convert_file,
)

__version__ = "0.1.0"
__all__ = [
    "DocumentToHtml",
    "SoupToDocumentAdapter",
    "EditingSession",
    "to_internal",
    "to_external",
    "normalize_entities",
    "count_placeholders",
    "minify",
    "list_presentation",
    "indent",
    "outdent",
    "start_list_at",
    "build_table",
    "EditorConfig",
    "DEFAULT_CONFIG",
    "TemplateEditorError",
    "ContractViolation",
    "TemplateError",
    "ExportError",
    "SecurityError",
    "import_template",
    "render_internal",
    "export_template",
    "export_bytes",
    "load_template",
    "save_template",
    "convert_file",
]
