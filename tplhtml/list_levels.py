"""
Ordered list level tracking.

Every OrderedList carries a level in {1, 2, 3}. The level records how many
successful indent steps the list has taken and drives its presentation:

    level 1 -> decimal,      no extra indent
    level 2 -> lower-alpha,  1.5em
    level 3 -> lower-roman,  3em

Indent and outdent change the tree structurally (sink / lift the current
item) and update the level of the list that ends up holding the item, both in
the same call. If the structural step does not apply, the level is left alone.
"""

from __future__ import annotations

import logging

from .config import DEFAULT_CONFIG
from .exceptions import ContractViolation
from .nodes import (
    get_list_level,
    list_items,
    make_bullet_list,
    make_ordered_list,
    set_list_level,
    set_list_start,
    TEXT_BLOCK_TYPES,
)

logger = logging.getLogger('tplhtml')


def list_presentation(level, config=None) -> tuple[str, str]:
    """Return (list-style-type, margin-left) for a list level."""
    config = config if config is not None else DEFAULT_CONFIG
    if level not in config.LIST_STYLE_TYPES:
        raise ContractViolation(f"Ordered list level out of range: {level}")
    style_type = config.LIST_STYLE_TYPES[level]
    indent = (level - 1) * config.LIST_INDENT_UNIT
    margin = '0' if indent == 0 else f'{indent:g}em'
    return style_type, margin


def list_style_attribute(level, config=None) -> str:
    """Inline CSS emitted on an ordered list of the given level."""
    style_type, margin = list_presentation(level, config)
    return f'list-style-type: {style_type} !important; margin-left: {margin} !important;'


def indent(session) -> bool:
    """Sink the current list item one level deeper.

    Returns True if the tree changed.
    """
    config = session.config
    frame = session.current_list_frame()
    if frame is None:
        return False
    lst = frame['block']

    if lst['t'] == 'OrderedList':
        level = get_list_level(lst)
        if level >= config.MAX_LIST_LEVEL:
            logger.debug("Indent ignored: list already at level %d", level)
            return False
        if not session.sink_list_item():
            return False
        set_list_level(session.current_list_frame()['block'], level + 1)
    else:
        if session.list_depth() >= config.MAX_NESTING_DEPTH:
            logger.warning("Bullet list nesting depth limit reached (%d).", config.MAX_NESTING_DEPTH)
            return False
        if not session.sink_list_item():
            return False

    session.changed()
    return True


def outdent(session) -> bool:
    """Lift the current list item one level up.

    At level 1 the item is still lifted, which takes it out of the list.
    """
    frame = session.current_list_frame()
    if frame is None:
        return False
    lst = frame['block']
    level = get_list_level(lst) if lst['t'] == 'OrderedList' else None

    if not session.lift_list_item():
        return False

    if level is not None and level > session.config.MIN_LIST_LEVEL:
        target = session.current_list_frame()
        if target is not None and target['block']['t'] == 'OrderedList':
            set_list_level(target['block'], level - 1)

    session.changed()
    return True


def handle_key_down(session, key, shift=False) -> bool:
    """Route Tab / Shift-Tab inside a list to indent / outdent.

    Returns True if the key press was consumed, even when the command itself
    was a no-op.
    """
    if key != 'Tab':
        return False
    if session.current_list_frame() is None:
        return False
    if shift:
        outdent(session)
    else:
        indent(session)
    return True


def _toggle_list(session, list_type) -> bool:
    frame = session.current_list_frame()
    if frame is not None and frame['block']['t'] == list_type:
        return session.lift_list_item()

    if frame is not None:
        lst = frame['block']
        items = list_items(lst)
        if list_type == 'OrderedList':
            lst.update(make_ordered_list(items))
        else:
            lst.update(make_bullet_list(items))
        return True

    block_frame = session.current_block()
    if block_frame is None or block_frame['block'].get('t') not in TEXT_BLOCK_TYPES:
        return False
    block = block_frame['block']
    wrapper = make_ordered_list([[block]]) if list_type == 'OrderedList' else make_bullet_list([[block]])
    block_frame['container'][block_frame['index']] = wrapper
    pos = block_frame['pos']
    session.caret = session.caret[:pos + 1] + [0, 0] + session.caret[pos + 1:]
    return True


def toggle_ordered_list(session) -> bool:
    if not _toggle_list(session, 'OrderedList'):
        return False
    session.changed()
    return True


def toggle_bullet_list(session) -> bool:
    if not _toggle_list(session, 'BulletList'):
        return False
    session.changed()
    return True


def start_list_at(session, number) -> bool:
    """Set the start number of the ordered list around the caret.

    The current block is wrapped in a new ordered list first when the caret
    is not inside one. The level is never touched.
    """
    try:
        start = int(number)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid list start: %r", number)
        return False
    if start < 1:
        logger.warning("Ignoring non-positive list start: %d", start)
        return False

    frame = session.current_list_frame()
    if frame is None or frame['block']['t'] != 'OrderedList':
        if not _toggle_list(session, 'OrderedList'):
            return False
        frame = session.current_list_frame()

    set_list_start(frame['block'], start)
    session.changed()
    return True
