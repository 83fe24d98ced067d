"""
In-process editing session over one document tree.

The session stands in for the rich-text editing surface: it owns the tree,
tracks a caret, applies structural commands and notifies listeners with the
freshly serialized markup after every applied change.

The caret is a path of ints. Starting from the document's block list, each
step picks a block by index; a list block is followed by an item index, a
table block by a row index and a cell index. The item or cell is again a list
of blocks, so the walk continues. ``[1, 0, 0]`` is the first block of the
first item of the list at top-level position 1.
"""

from __future__ import annotations

import logging

from .config import DEFAULT_CONFIG
from .exceptions import ContractViolation, ExportError
from .nodes import (
    TEXT_BLOCK_TYPES,
    block_inlines,
    get_list_level,
    get_list_start,
    is_list,
    list_items,
    make_bullet_list,
    make_document,
    make_header,
    make_ordered_list,
    make_para,
)
from . import list_levels
from . import template_api

logger = logging.getLogger('tplhtml')


def resolve_caret(blocks, caret):
    """Walk a caret path and return the frames it passes through.

    Each frame is a dict with the ``container`` (list of blocks), the
    ``index`` of the block inside it, the ``block`` itself, the caret
    position ``pos`` of that index, and ``item`` / ``row`` / ``cell`` when the
    path continues into a list item or table cell. The walk stops quietly at
    the first index that does not exist.
    """
    frames = []
    container = blocks
    i = 0
    while i < len(caret):
        idx = caret[i]
        if not 0 <= idx < len(container):
            break
        block = container[idx]
        frame = {'container': container, 'index': idx, 'block': block, 'pos': i,
                 'item': None, 'row': None, 'cell': None}
        frames.append(frame)
        i += 1
        if is_list(block) and i < len(caret):
            items = list_items(block)
            j = caret[i]
            if not 0 <= j < len(items):
                break
            frame['item'] = j
            container = items[j]
            i += 1
        elif block.get('t') == 'Table' and i + 1 < len(caret):
            rows = block['c'][1]
            r, c = caret[i], caret[i + 1]
            if not 0 <= r < len(rows) or not 0 <= c < len(rows[r][1]):
                break
            frame['row'] = r
            frame['cell'] = c
            container = rows[r][1][c][1]
            i += 2
        else:
            break
    return frames


def first_caret(blocks):
    """Caret of the first text position in the given blocks."""
    caret = []
    container = blocks
    while container:
        caret.append(0)
        block = container[0]
        if is_list(block) and list_items(block):
            caret.append(0)
            container = list_items(block)[0]
        elif block.get('t') == 'Table' and block['c'][1] and block['c'][1][0][1]:
            caret.extend([0, 0])
            container = block['c'][1][0][1][0][1]
        else:
            break
    return caret


def _list_shell(lst, items):
    """New list of the same kind and attributes as ``lst`` holding ``items``."""
    if lst['t'] == 'OrderedList':
        return make_ordered_list(items, start=get_list_start(lst), level=get_list_level(lst))
    return make_bullet_list(items)


class EditingSession:
    """One editable document plus a caret and change listeners."""

    def __init__(self, document=None, config=None, caret=None):
        self.config = config if config is not None else DEFAULT_CONFIG
        self.doc = document if document is not None else make_document([make_para()])
        self.caret = list(caret) if caret is not None else first_caret(self.doc['blocks'])
        self._listeners = []

    @classmethod
    def from_markup(cls, markup, config=None, caret=None):
        session = cls(config=config)
        session.load(markup, notify=False)
        if caret is not None:
            session.set_caret(caret)
        return session

    # --- Surface contract ---

    def load(self, markup, notify=True):
        """Replace the whole tree with one parsed from template text."""
        self.doc = template_api.import_template(markup, self.config)
        if not self.doc['blocks']:
            self.doc['blocks'].append(make_para())
        self.caret = first_caret(self.doc['blocks'])
        if notify:
            self.changed()

    def render(self):
        return template_api.render_internal(self.doc, self.config)

    def on_change(self, callback):
        self._listeners.append(callback)

    def changed(self):
        html = self.render()
        for callback in self._listeners:
            callback(html)

    def handle_key_down(self, key, shift=False):
        return list_levels.handle_key_down(self, key, shift=shift)

    def set_caret(self, caret):
        caret = [int(step) for step in caret]
        if any(step < 0 for step in caret):
            raise ValueError(f"Invalid caret: {caret}")
        self.caret = caret

    # --- Export ---

    def export_text(self):
        return template_api.export_template(self.doc, self.config)

    def export_to(self, output_path):
        """Write the exported template. Returns False on failure."""
        try:
            template_api.save_template(self.doc, output_path, self.config)
        except ExportError as e:
            logger.error("Export failed: %s", e)
            return False
        return True

    # --- Caret queries ---

    def frames(self):
        return resolve_caret(self.doc['blocks'], self.caret)

    def current_block(self):
        """The block the caret sits in, or None if it points at a container."""
        frames = self.frames()
        if not frames:
            return None
        last = frames[-1]
        if last['item'] is not None or last['row'] is not None:
            return None
        return last

    def current_list_frame(self):
        """Innermost list frame around the caret, unless a table cell is deeper."""
        for frame in reversed(self.frames()):
            if frame['row'] is not None:
                return None
            if frame['item'] is not None:
                return frame
        return None

    def current_table_frame(self):
        for frame in reversed(self.frames()):
            if frame['row'] is not None:
                return frame
        return None

    def list_depth(self):
        return sum(1 for frame in self.frames() if frame['item'] is not None)

    # --- Structural list primitives ---

    def sink_list_item(self):
        """Nest the current item inside its previous sibling.

        Returns False when there is no previous sibling to nest under.
        """
        frame = self.current_list_frame()
        if frame is None:
            return False
        lst = frame['block']
        items = list_items(lst)
        j = frame['item']
        if j == 0:
            logger.debug("Cannot sink first list item")
            return False

        prev = items[j - 1]
        item = items.pop(j)
        if prev and prev[-1].get('t') == lst['t']:
            nested_items = list_items(prev[-1])
            nested_items.append(item)
            new_item_idx = len(nested_items) - 1
        else:
            nested = make_ordered_list([item]) if lst['t'] == 'OrderedList' else make_bullet_list([item])
            prev.append(nested)
            new_item_idx = 0

        pos = frame['pos']
        self.caret = self.caret[:pos + 1] + [j - 1, len(prev) - 1, new_item_idx] + self.caret[pos + 2:]
        return True

    def lift_list_item(self):
        """Move the current item one level out.

        A nested item becomes the next sibling of its parent item; an item of
        an outermost list is unwrapped into the surrounding blocks, leaving the
        list. Items after it follow along as a list of the same kind.
        """
        frames = self.frames()
        frame = self.current_list_frame()
        if frame is None:
            return False
        k = frames.index(frame)
        lst = frame['block']
        items = list_items(lst)
        j = frame['item']
        pos = frame['pos']
        item = items[j]
        trailing = items[j + 1:]
        parent = frames[k - 1] if k > 0 else None

        if parent is not None and parent['item'] is not None:
            outer_items = list_items(parent['block'])
            p = parent['item']
            del items[j:]
            if trailing:
                item.append(_list_shell(lst, trailing))
            if not items:
                del outer_items[p][frame['index']]
            outer_items.insert(p + 1, item)
            self.caret = self.caret[:parent['pos'] + 1] + [p + 1] + self.caret[pos + 2:]
            return True

        container = frame['container']
        idx = frame['index']
        before = items[:j]
        replacement = []
        if before:
            items[:] = before
            replacement.append(lst)
        lifted = item if item else [make_para()]
        replacement.extend(lifted)
        if trailing:
            replacement.append(_list_shell(lst, trailing))
        container[idx:idx + 1] = replacement

        offset = self.caret[pos + 2] if len(self.caret) > pos + 2 else 0
        base = idx + (1 if before else 0)
        self.caret = self.caret[:pos] + [base + min(offset, len(lifted) - 1)] + self.caret[pos + 3:]
        return True

    # --- Block commands ---

    def toggle_heading(self, level):
        """Turn the current text block into a heading, or back into a paragraph."""
        if level not in self.config.HEADING_LEVELS:
            raise ContractViolation(f"Heading level out of range: {level}")
        frame = self.current_block()
        if frame is None or frame['block'].get('t') not in TEXT_BLOCK_TYPES:
            return False
        block = frame['block']
        inlines = block_inlines(block)
        if block['t'] == 'Header' and block['c'][0] == level:
            replacement = make_para(inlines)
        else:
            replacement = make_header(level, inlines)
        frame['container'][frame['index']] = replacement
        self.changed()
        return True

    def set_paragraph(self):
        frame = self.current_block()
        if frame is None or frame['block'].get('t') not in TEXT_BLOCK_TYPES:
            return False
        block = frame['block']
        if block['t'] == 'Para':
            return False
        frame['container'][frame['index']] = make_para(block_inlines(block))
        self.changed()
        return True
