"""
Placeholder codec: wire token <-> atomic variable markup.

Templates mark substitution points with a two character wire token (``%s``).
Inside the editor the token is represented by a fixed inline fragment that the
document parser recognizes as an atomic Variable node.
"""

import re

from .config import DEFAULT_CONFIG


def variable_markup(config=None):
    """Return the canonical markup fragment for a placeholder variable."""
    config = config if config is not None else DEFAULT_CONFIG
    return f'<span class="{config.VARIABLE_CLASS}">{config.VARIABLE_LABEL}</span>'


def normalize_entities(markup):
    """Unescape ``&amp;`` to a literal ampersand. Nothing is re-escaped."""
    if not markup:
        return markup
    return markup.replace('&amp;', '&')


def to_internal(markup, config=None):
    """Convert imported template text to editor markup.

    Escaped ampersands are normalized first, then every wire token is
    replaced by the variable fragment.
    """
    config = config if config is not None else DEFAULT_CONFIG
    if not markup:
        return ''
    markup = normalize_entities(markup)
    return markup.replace(config.WIRE_TOKEN, variable_markup(config))


def to_external(markup, config=None):
    """Replace every canonical variable fragment with the wire token.

    Partial or differently formatted fragments are left untouched.
    """
    config = config if config is not None else DEFAULT_CONFIG
    if not markup:
        return ''
    pattern = re.escape(variable_markup(config))
    # Replacement is a function so a token like '\1' is never read as a group
    return re.sub(pattern, lambda _m: config.WIRE_TOKEN, markup)


def count_placeholders(markup, config=None):
    """Count wire tokens in template text."""
    config = config if config is not None else DEFAULT_CONFIG
    if not markup:
        return 0
    return markup.count(config.WIRE_TOKEN)
