from __future__ import annotations
import logging
import re
from typing import Union
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

from .config import DEFAULT_CONFIG
from .nodes import (
    make_bullet_list,
    make_header,
    make_ordered_list,
    make_para,
    make_plain,
    make_str,
    make_variable,
)
from .tables import equal_widths

logger = logging.getLogger('tplhtml')


class SoupToDocumentAdapter:
    """Converts BeautifulSoup-parsed HTML to the document tree dict format.

    Parsing is lenient: anything that is not recognized degrades to its text
    content and nothing raises.
    """

    HEADING_LEVEL = {'h1': 1, 'h2': 2, 'h3': 3, 'h4': 4, 'h5': 5, 'h6': 6}

    # Elements that start a new block; everything else is treated as inline
    BLOCK_TAGS = {
        'p', 'ul', 'ol', 'li', 'table', 'thead', 'tbody', 'tfoot', 'tr', 'td', 'th',
        'colgroup', 'col', 'caption', 'div', 'section', 'article', 'main', 'aside',
        'nav', 'header', 'footer', 'blockquote', 'figure', 'pre', 'hr',
        'html', 'body', 'form', 'fieldset', 'details', 'summary',
    } | set(HEADING_LEVEL)

    # Elements dropped together with their content
    NOISE_TAGS = {'script', 'style', 'noscript', 'template', 'head', 'title', 'meta', 'link'}

    # Elements dropped without descending into them
    SKIP_BLOCK_TAGS = {'hr', 'colgroup', 'col', 'caption', 'thead', 'tbody', 'tfoot', 'tr', 'td', 'th'}

    MARK_TAGS = {
        'strong': 'Strong',
        'b': 'Strong',
        'em': 'Emph',
        'i': 'Emph',
        'u': 'Underline',
    }

    SKIPPED_STRINGS = (Comment, Doctype, CData, ProcessingInstruction, Declaration)

    # Width declaration inside a <col style="...">, not min-width or max-width
    WIDTH_RE = re.compile(r'(?<![-\w])width\s*:\s*([\d.]+)')

    def __init__(self, config=None):
        self.config = config if config is not None else DEFAULT_CONFIG

    def parse(self, markup: str) -> dict:
        """
        Parse markup and return the document tree dict.

        Returns:
            {"blocks": [...]}
        """
        soup = BeautifulSoup(markup or '', 'html.parser')
        root = soup.body if soup.body is not None else soup
        blocks = self._convert_children_to_blocks(root.children, depth=0)
        return {"blocks": blocks}

    def _convert_children_to_blocks(self, children, depth) -> list:
        """Convert mixed block/inline children to blocks.

        Runs of inline content between block elements become Plain blocks;
        runs that hold only whitespace are dropped.
        """
        blocks = []
        pending = []

        def flush():
            if pending and self._has_content(pending):
                blocks.append(make_plain(list(pending)))
            pending.clear()

        for child in children:
            if isinstance(child, NavigableString):
                pending.extend(self._convert_inline(child, depth))
                continue
            if not isinstance(child, Tag) or child.name in self.NOISE_TAGS:
                continue
            if child.name in self.BLOCK_TAGS:
                flush()
                blocks.extend(self._convert_block(child, depth))
            else:
                pending.extend(self._convert_inline(child, depth))
        flush()
        return blocks

    def _has_content(self, inlines) -> bool:
        for item in inlines:
            if item['t'] != 'Str' or item['c'].strip():
                return True
        return False

    def _convert_block(self, elem, depth) -> list:
        """Convert a block element to a list of zero or more blocks."""
        if depth >= self.config.MAX_NESTING_DEPTH:
            logger.warning("Nesting depth limit reached (%d). Flattening to text.",
                           self.config.MAX_NESTING_DEPTH)
            inlines = self._flatten_inline(elem)
            return [make_plain(inlines)] if self._has_content(inlines) else []

        name = elem.name

        if name == 'p':
            return [make_para(self._convert_inlines(elem.children, depth + 1))]
        elif name in self.HEADING_LEVEL:
            return [self._convert_heading(elem, depth)]
        elif name == 'ul':
            return [make_bullet_list(self._convert_list_items(elem, depth))]
        elif name == 'ol':
            return [self._convert_ordered_list(elem, depth)]
        elif name == 'table':
            table = self._convert_table(elem, depth)
            return [table] if table else []
        elif name in self.SKIP_BLOCK_TAGS:
            # Stray table parts or rules outside their parent
            logger.debug("Skipping stray <%s>", name)
            return []

        # Containers (div, section, stray li, ...) are unwrapped
        return self._convert_children_to_blocks(elem.children, depth + 1)

    def _convert_heading(self, elem, depth) -> dict:
        """h1-h3 -> Header, deeper levels degrade to Para."""
        level = self.HEADING_LEVEL[elem.name]
        inlines = self._convert_inlines(elem.children, depth + 1)
        if level not in self.config.HEADING_LEVELS:
            logger.debug("Heading level %d not supported, using paragraph", level)
            return make_para(inlines)
        return make_header(level, inlines)

    def _convert_list_items(self, elem, depth) -> list:
        """<li> children -> list of items (each a list of blocks)."""
        items = []
        for child in elem.children:
            if isinstance(child, Tag) and child.name == 'li':
                items.append(self._convert_children_to_blocks(child.children, depth + 1))
                continue
            # Content outside <li> joins the previous item
            stray = self._convert_children_to_blocks([child], depth + 1)
            if not stray:
                continue
            if items:
                items[-1].extend(stray)
            else:
                items.append(stray)
        return items

    def _convert_ordered_list(self, elem, depth) -> dict:
        items = self._convert_list_items(elem, depth)
        return make_ordered_list(items, start=self._parse_start(elem), level=self._parse_level(elem))

    def _parse_level(self, elem) -> int:
        raw = elem.get('data-level')
        if raw is None:
            return self.config.MIN_LIST_LEVEL
        match = re.match(r'\s*(-?\d+)', str(raw))
        if not match:
            logger.warning("Invalid list level %r, using %d", raw, self.config.MIN_LIST_LEVEL)
            return self.config.MIN_LIST_LEVEL
        level = int(match.group(1))
        if level < self.config.MIN_LIST_LEVEL or level > self.config.MAX_LIST_LEVEL:
            clamped = max(self.config.MIN_LIST_LEVEL, min(level, self.config.MAX_LIST_LEVEL))
            logger.warning("List level %d out of range, clamped to %d", level, clamped)
            return clamped
        return level

    def _parse_start(self, elem) -> int:
        raw = elem.get('start')
        if raw is None:
            return 1
        match = re.match(r'\s*(-?\d+)', str(raw))
        if not match or int(match.group(1)) < 1:
            logger.debug("Invalid list start %r, using 1", raw)
            return 1
        return int(match.group(1))

    def _parse_colspan(self, cell) -> int:
        match = re.match(r'\s*(\d+)', str(cell.get('colspan', '1')))
        if not match or int(match.group(1)) < 1:
            return 1
        return int(match.group(1))

    def _collect_rows_and_cols(self, elem):
        """Direct rows and column width declarations of a table element."""
        rows = []
        cols = []
        for child in elem.children:
            if not isinstance(child, Tag):
                continue
            if child.name == 'tr':
                rows.append(child)
            elif child.name in ('thead', 'tbody', 'tfoot'):
                rows.extend(c for c in child.children if isinstance(c, Tag) and c.name == 'tr')
            elif child.name == 'colgroup':
                cols.extend(c for c in child.children if isinstance(c, Tag) and c.name == 'col')
            elif child.name == 'col':
                cols.append(child)
        return rows, cols

    def _col_width(self, col) -> Union[float, None]:
        match = self.WIDTH_RE.search(col.get('style', '') or '')
        if match is None:
            match = re.match(r'\s*([\d.]+)', str(col.get('width', '')))
        if match is None:
            return None
        try:
            value = float(match.group(1))
        except ValueError:
            return None
        return value if value > 0 else None

    def _convert_table(self, elem, depth) -> Union[dict, None]:
        """Convert <table> to a Table node.

        A row is a header row when all of its cells are <th>. Short rows are
        padded with empty cells. Column widths come from <col> declarations
        (as proportions of their total) or default to equal shares.
        """
        tr_elems, col_elems = self._collect_rows_and_cols(elem)

        rows = []
        for tr in tr_elems:
            cells = []
            kinds = []
            for cell in tr.children:
                if not isinstance(cell, Tag) or cell.name not in ('td', 'th'):
                    continue
                blocks = self._convert_children_to_blocks(cell.children, depth + 1)
                cells.append([self._parse_colspan(cell), blocks])
                kinds.append(cell.name == 'th')
            if cells:
                rows.append([all(kinds), cells])

        if not rows:
            logger.debug("Dropping table without cells")
            return None

        col_count = max(sum(span for span, _b in cells) for _h, cells in rows)
        for _is_header, cells in rows:
            missing = col_count - sum(span for span, _b in cells)
            cells.extend([1, []] for _ in range(missing))

        widths = [self._col_width(col) for col in col_elems]
        if len(widths) == col_count and all(w is not None for w in widths):
            total = sum(widths)
            specs = [{"t": "ColWidth", "c": w / total} for w in widths]
        else:
            if col_elems:
                logger.debug("Column widths incomplete (%d/%d), using equal widths",
                             len(widths), col_count)
            specs = equal_widths(col_count)

        return {"t": "Table", "c": [specs, rows]}

    def _is_variable(self, tag) -> bool:
        return tag.name == 'span' and self.config.VARIABLE_CLASS in (tag.get('class') or [])

    def _is_opaque(self, tag) -> bool:
        return self._is_variable(tag) or tag.name in self.NOISE_TAGS

    def _flatten_inline(self, elem) -> list:
        """Visible text of a subtree as a flat inline list.

        Walks descendants without recursion. Variable spans stay atomic and
        noise elements are dropped.
        """
        result = []
        for node in elem.descendants:
            if isinstance(node, Tag):
                if self._is_variable(node):
                    result.append(make_variable())
                elif node.name == 'br':
                    result.append({"t": "LineBreak"})
            elif isinstance(node, NavigableString) and not isinstance(node, self.SKIPPED_STRINGS):
                if str(node) and not any(self._is_opaque(p) for p in node.parents):
                    result.append(make_str(str(node)))
        return result

    def _convert_inlines(self, children, depth) -> list:
        """Convert a sequence of nodes to a flat inline list."""
        result = []
        for child in children:
            result.extend(self._convert_inline(child, depth))
        return result

    def _convert_inline(self, node, depth) -> list:
        """Convert one node to zero or more inline dicts."""
        if isinstance(node, self.SKIPPED_STRINGS):
            return []
        if isinstance(node, NavigableString):
            text = str(node)
            return [make_str(text)] if text else []
        if not isinstance(node, Tag) or node.name in self.NOISE_TAGS:
            return []

        name = node.name
        if self._is_variable(node):
            # Atomic: inner text is replaced by the fixed label on output
            return [make_variable()]
        if depth >= self.config.MAX_NESTING_DEPTH:
            logger.warning("Inline nesting depth limit reached (%d). Flattening to text.",
                           self.config.MAX_NESTING_DEPTH)
            return self._flatten_inline(node)
        if name == 'br':
            return [{"t": "LineBreak"}]
        if name in self.MARK_TAGS:
            inner = self._convert_inlines(node.children, depth + 1)
            return [{"t": self.MARK_TAGS[name], "c": inner}] if inner else []

        # Unknown inline element: keep its content
        return self._convert_inlines(node.children, depth + 1)
