"""
Configuration constants for the tplhtml editor core.

This module centralizes the fixed tokens, presentation values and limits used
throughout import, editing and export. Values can be overridden by passing a
customized EditorConfig instance to any component.
"""


class EditorConfig:
    """Default configuration values for template editing."""

    # === Placeholder Variable ===
    WIRE_TOKEN = '%s'  # Marker used in imported/exported templates
    VARIABLE_CLASS = 'be-variable'
    VARIABLE_LABEL = '{BE Variable}'  # Fixed display label inside the span

    # === Ordered List Levels ===
    MIN_LIST_LEVEL = 1
    MAX_LIST_LEVEL = 3
    LIST_INDENT_UNIT = 1.5  # em per level step
    LIST_STYLE_TYPES = {
        1: 'decimal',
        2: 'lower-alpha',
        3: 'lower-roman',
    }

    # === Headings ===
    HEADING_LEVELS = (1, 2, 3)

    # === Tables ===
    DEFAULT_TABLE_ROWS = 2
    DEFAULT_TABLE_COLS = 2
    TABLE_HEADER_LABEL = 'Header {index}'

    # === Node Presentation Attributes ===
    # Emitted on serialization; ignored on parse.
    NODE_ATTRIBUTES = {
        'paragraph': {'class': 'text-xs font-400'},
        'heading': {'class': 'text-xs font-bold'},
        'bullet_list': {'style': 'list-style:disc;margin:0'},
        'list_item': {'class': 'text-xs font-400'},
        'table': {
            'class': 'document-table',
            'style': 'width: 100%; border-collapse: collapse;',
        },
        'table_header': {
            'class': 'table-header',
            'style': 'text-align:center; background-color: #f3f4f6; font-weight: bold;',
        },
        'table_cell': {'style': 'vertical-align: top; padding: 3px 5px;'},
    }

    # === Export ===
    EXPORT_FILENAME = 'exported.html'
    EXPORT_MIME_TYPE = 'text/html'

    # === Security Limits ===
    MAX_INPUT_FILE_SIZE = 10 * 1024 * 1024  # 10 MB max template file
    MAX_NESTING_DEPTH = 20  # Max nesting for bullet lists and parse recursion


# Global default config instance
DEFAULT_CONFIG = EditorConfig()
