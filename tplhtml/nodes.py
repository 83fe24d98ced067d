"""
Document tree node helpers.

The document tree follows a Pandoc-like dict layout: every node is
``{"t": <type>, "c": <content>}`` and a document is ``{"blocks": [...]}``.

Block shapes:
    Para         {"t": "Para", "c": [inlines]}
    Plain        {"t": "Plain", "c": [inlines]}        (inline run without <p>)
    Header       {"t": "Header", "c": [level, [inlines]]}
    BulletList   {"t": "BulletList", "c": [item, ...]}
    OrderedList  {"t": "OrderedList", "c": [[start, level], [item, ...]]}
    Table        {"t": "Table", "c": [[colspec, ...], [row, ...]]}

    item    = [block, ...]
    colspec = {"t": "ColWidth", "c": fraction}
    row     = [is_header, [cell, ...]]
    cell    = [colspan, [block, ...]]

Inline shapes:
    Str {"t": "Str", "c": text}, Strong/Emph/Underline {"t": ..., "c": [inlines]},
    LineBreak {"t": "LineBreak"}, Variable {"t": "Variable"}
"""

from __future__ import annotations

from .config import DEFAULT_CONFIG
from .exceptions import ContractViolation

LIST_TYPES = ('BulletList', 'OrderedList')
TEXT_BLOCK_TYPES = ('Para', 'Plain', 'Header')
MARK_TYPES = ('Strong', 'Emph', 'Underline')


def make_document(blocks=None) -> dict:
    return {"blocks": blocks if blocks is not None else []}


def make_str(text: str) -> dict:
    return {"t": "Str", "c": text}


def make_variable() -> dict:
    return {"t": "Variable"}


def make_para(inlines=None) -> dict:
    return {"t": "Para", "c": inlines if inlines is not None else []}


def make_plain(inlines=None) -> dict:
    return {"t": "Plain", "c": inlines if inlines is not None else []}


def make_header(level: int, inlines=None) -> dict:
    if level not in DEFAULT_CONFIG.HEADING_LEVELS:
        raise ContractViolation(f"Heading level out of range: {level}")
    return {"t": "Header", "c": [level, inlines if inlines is not None else []]}


def make_bullet_list(items=None) -> dict:
    return {"t": "BulletList", "c": items if items is not None else []}


def make_ordered_list(items=None, start: int = 1, level: int = 1) -> dict:
    node = {"t": "OrderedList", "c": [[1, 1], items if items is not None else []]}
    set_list_start(node, start)
    set_list_level(node, level)
    return node


def is_list(node) -> bool:
    return isinstance(node, dict) and node.get('t') in LIST_TYPES


def list_items(node) -> list:
    """Return the mutable item list of a BulletList or OrderedList."""
    if node['t'] == 'OrderedList':
        return node['c'][1]
    return node['c']


def get_list_level(node) -> int:
    level = node['c'][0][1]
    if level not in range(DEFAULT_CONFIG.MIN_LIST_LEVEL, DEFAULT_CONFIG.MAX_LIST_LEVEL + 1):
        raise ContractViolation(f"Ordered list level out of range: {level}")
    return level


def set_list_level(node, level: int) -> None:
    if node.get('t') != 'OrderedList':
        raise ContractViolation(f"Only ordered lists carry a level, got {node.get('t')}")
    if not isinstance(level, int) or not (
            DEFAULT_CONFIG.MIN_LIST_LEVEL <= level <= DEFAULT_CONFIG.MAX_LIST_LEVEL):
        raise ContractViolation(f"Ordered list level out of range: {level}")
    node['c'][0][1] = level


def get_list_start(node) -> int:
    return node['c'][0][0]


def set_list_start(node, start: int) -> None:
    if not isinstance(start, int) or start < 1:
        raise ContractViolation(f"List start must be a positive integer, got {start!r}")
    node['c'][0][0] = start


def block_inlines(block) -> list:
    """Return the mutable inline list of a text block (Para, Plain, Header)."""
    if block['t'] == 'Header':
        return block['c'][1]
    return block['c']


def plain_text(inlines) -> str:
    """Flatten inlines into their visible text."""
    if not isinstance(inlines, list):
        return ""
    text = []
    for item in inlines:
        t = item.get('t')
        if t == 'Str':
            text.append(item['c'])
        elif t in MARK_TYPES:
            text.append(plain_text(item['c']))
        elif t == 'LineBreak':
            text.append("\n")
        elif t == 'Variable':
            text.append(DEFAULT_CONFIG.VARIABLE_LABEL)
    return "".join(text)


def block_text(block) -> str:
    """Visible text of any block, nested content included."""
    t = block.get('t')
    if t in TEXT_BLOCK_TYPES:
        return plain_text(block_inlines(block))
    if t in LIST_TYPES:
        return "\n".join(
            "\n".join(block_text(b) for b in item) for item in list_items(block)
        )
    if t == 'Table':
        parts = []
        for _is_header, cells in block['c'][1]:
            for _colspan, blocks in cells:
                parts.extend(block_text(b) for b in blocks)
        return "\n".join(parts)
    return ""


def iter_blocks(blocks):
    """Yield every block in document order, descending into lists and tables."""
    for block in blocks:
        yield block
        t = block.get('t')
        if t in LIST_TYPES:
            for item in list_items(block):
                yield from iter_blocks(item)
        elif t == 'Table':
            for _is_header, cells in block['c'][1]:
                for _colspan, cell_blocks in cells:
                    yield from iter_blocks(cell_blocks)


def count_variables(blocks) -> int:
    """Count Variable nodes anywhere in the given blocks."""

    def _count(inlines):
        n = 0
        for item in inlines:
            if item.get('t') == 'Variable':
                n += 1
            elif item.get('t') in MARK_TYPES:
                n += _count(item['c'])
        return n

    return sum(
        _count(block_inlines(b)) for b in iter_blocks(blocks) if b.get('t') in TEXT_BLOCK_TYPES
    )


def validate_document(doc) -> None:
    """Check tree invariants, raising ContractViolation on the first failure."""
    from .tables import validate_table

    for block in iter_blocks(doc.get('blocks', [])):
        t = block.get('t')
        if t == 'OrderedList':
            get_list_level(block)
            if get_list_start(block) < 1:
                raise ContractViolation(f"List start must be positive: {get_list_start(block)}")
        elif t == 'Header':
            if block['c'][0] not in DEFAULT_CONFIG.HEADING_LEVELS:
                raise ContractViolation(f"Heading level out of range: {block['c'][0]}")
        elif t == 'Table':
            validate_table(block)
