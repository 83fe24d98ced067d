"""
High-level convenience API for tplhtml.

Provides simple functions to import template text into a document tree and
export a tree back to template text, without needing to know the individual
pipeline steps.
"""

import logging
import os

from .soup_adapter import SoupToDocumentAdapter
from .DocumentToHtml import DocumentToHtml
from .placeholder import to_internal, to_external, normalize_entities, count_placeholders
from .minifier import minify
from .config import DEFAULT_CONFIG
from .exceptions import TemplateError, ExportError, SecurityError

logger = logging.getLogger('tplhtml')


def import_template(markup, config=None):
    """Parse template text into a document tree.

    Args:
        markup: Raw template HTML, with ``%s`` wire tokens
        config: Optional EditorConfig instance. Uses DEFAULT_CONFIG if None.

    Returns:
        Document tree dict ``{"blocks": [...]}``. Never raises on bad markup.
    """
    config = config if config is not None else DEFAULT_CONFIG
    internal = to_internal(markup, config)
    adapter = SoupToDocumentAdapter(config)
    document = adapter.parse(internal)
    logger.debug("Imported template: %d blocks, %d placeholders",
                 len(document['blocks']), count_placeholders(markup, config))
    return document


def render_internal(document, config=None):
    """Serialize a document tree to editor markup (variables as spans)."""
    return DocumentToHtml(document, config).convert()


def export_template(document, config=None):
    """Serialize a document tree to minified template text with wire tokens."""
    config = config if config is not None else DEFAULT_CONFIG
    html = render_internal(document, config)
    html = to_external(html, config)
    html = normalize_entities(html)
    return minify(html)


def export_bytes(document, config=None):
    """Exported template as UTF-8 bytes, ready to serve as text/html."""
    return export_template(document, config).encode('utf-8')


def load_template(input_path, config=None):
    """Read and import a template file.

    Raises:
        TemplateError: If the file is missing, unreadable or not UTF-8.
        SecurityError: If the file exceeds the configured size limit.
    """
    config = config if config is not None else DEFAULT_CONFIG
    if not os.path.exists(input_path):
        raise TemplateError(f"Template not found: {input_path}")

    input_size = os.path.getsize(input_path)
    if input_size > config.MAX_INPUT_FILE_SIZE:
        raise SecurityError(
            f"Template file too large: {input_size} bytes "
            f"(max {config.MAX_INPUT_FILE_SIZE} bytes)"
        )

    try:
        with open(input_path, 'r', encoding='utf-8') as f:
            markup = f.read()
    except UnicodeDecodeError as e:
        raise TemplateError(f"Template is not valid UTF-8: {input_path}") from e
    except OSError as e:
        raise TemplateError(f"Cannot read template {input_path}: {e}") from e

    return import_template(markup, config)


def save_template(document, output_path, config=None):
    """Export a document tree to a file.

    Raises:
        ExportError: If the file cannot be written.
    """
    content = export_template(document, config)
    try:
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(content)
    except OSError as e:
        raise ExportError(f"Cannot write {output_path}: {e}") from e
    logger.info("Exported template to %s", output_path)


def convert_file(input_path, output_path, config=None):
    """Import a template file and write its normalized export.

    Returns:
        The imported document tree.
    """
    document = load_template(input_path, config)
    save_template(document, output_path, config)
    return document
