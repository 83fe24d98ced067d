"""
Textual HTML minifier applied to exported templates.

No parsing is done; malformed markup passes through the same regular
expressions as anything else.
"""

import re

WHITESPACE_RE = re.compile(r'\s+')
BETWEEN_TAGS_RE = re.compile(r'>\s+<')
COMMENT_RE = re.compile(r'<!--[\s\S]*?-->')


def _minify_once(markup):
    markup = WHITESPACE_RE.sub(' ', markup)
    markup = BETWEEN_TAGS_RE.sub('><', markup)
    markup = COMMENT_RE.sub('', markup)
    return markup.strip()


def minify(markup):
    """Collapse whitespace, drop whitespace between tags, strip comments.

    Deleting a comment can leave two spaces or a new ``> <`` pair behind, so
    the passes are repeated until the text is stable. Every round either
    shortens the text or leaves it unchanged, so the loop terminates.
    """
    if not markup:
        return ''
    result = _minify_once(markup)
    while True:
        again = _minify_once(result)
        if again == result:
            return result
        result = again
