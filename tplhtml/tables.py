"""
Table construction and structural table edits.

A table node is ``{"t": "Table", "c": [colspecs, rows]}`` where every colspec
is ``{"t": "ColWidth", "c": fraction}``, every row is ``[is_header, cells]``
and every cell is ``[colspan, blocks]``. The fractions sum to 1 and every
row's colspans sum to the number of colspecs.

The module has two layers: pure functions over a table node, and session
commands that find the table around the caret, call them and keep the caret
valid.
"""

from __future__ import annotations

import logging
import math

from .config import DEFAULT_CONFIG
from .exceptions import ContractViolation
from .nodes import make_para, make_str, TEXT_BLOCK_TYPES, block_inlines

logger = logging.getLogger('tplhtml')

WIDTH_TOLERANCE = 1e-6


def _header_cell(index, config):
    label = config.TABLE_HEADER_LABEL.format(index=index)
    return [1, [make_para([{"t": "Strong", "c": [make_str(label)]}])]]


def _empty_cell():
    return [1, [make_para()]]


def equal_widths(count):
    return [{"t": "ColWidth", "c": 1.0 / count} for _ in range(count)]


def build_table(rows=None, cols=None, config=None) -> dict:
    """Build a table with a labeled header row and empty body rows.

    Column widths and header cells are created together, so the returned
    node is complete.
    """
    config = config if config is not None else DEFAULT_CONFIG
    rows = config.DEFAULT_TABLE_ROWS if rows is None else rows
    cols = config.DEFAULT_TABLE_COLS if cols is None else cols
    if rows < 1 or cols < 1:
        raise ContractViolation(f"Table must be at least 1x1, got {rows}x{cols}")

    header = [True, [_header_cell(i + 1, config) for i in range(cols)]]
    body = [[False, [_empty_cell() for _ in range(cols)]] for _ in range(rows - 1)]
    return {"t": "Table", "c": [equal_widths(cols), [header] + body]}


def table_specs(table):
    return table['c'][0]


def table_rows(table):
    return table['c'][1]


def column_widths(table):
    return [spec['c'] for spec in table_specs(table)]


def row_width(cells):
    return sum(colspan for colspan, _blocks in cells)


def validate_table(table) -> None:
    """Raise ContractViolation if the table geometry is inconsistent."""
    specs = table_specs(table)
    rows = table_rows(table)
    if not specs or not rows:
        raise ContractViolation("Table must have at least one row and one column")
    for spec in specs:
        if spec.get('t') != 'ColWidth' or not spec.get('c', 0) > 0:
            raise ContractViolation(f"Invalid column spec: {spec}")
    total = sum(column_widths(table))
    if not math.isclose(total, 1.0, abs_tol=WIDTH_TOLERANCE):
        raise ContractViolation(f"Column widths sum to {total}, expected 1")
    for r, (_is_header, cells) in enumerate(rows):
        if any(colspan < 1 for colspan, _blocks in cells):
            raise ContractViolation(f"Row {r} has a cell with colspan < 1")
        if row_width(cells) != len(specs):
            raise ContractViolation(
                f"Row {r} spans {row_width(cells)} columns, table has {len(specs)}"
            )


def locate_column(cells, col):
    """Return (cell_index, offset) of the cell covering grid column ``col``."""
    start = 0
    for i, (colspan, _blocks) in enumerate(cells):
        if start <= col < start + colspan:
            return i, col - start
        start += colspan
    raise ContractViolation(f"Column {col} is outside the row")


def cell_start_column(cells, cell_index):
    return sum(colspan for colspan, _blocks in cells[:cell_index])


def _rescale(specs):
    total = sum(spec['c'] for spec in specs)
    for spec in specs:
        spec['c'] = spec['c'] / total


def insert_row(table, index, is_header=False):
    rows = table_rows(table)
    if not 0 <= index <= len(rows):
        raise ContractViolation(f"Row index out of range: {index}")
    row = [bool(is_header), [_empty_cell() for _ in table_specs(table)]]
    rows.insert(index, row)
    return row


def remove_row(table, index):
    rows = table_rows(table)
    if len(rows) <= 1:
        raise ContractViolation("Cannot remove the last row of a table")
    del rows[index]


def insert_column(table, index):
    """Insert an empty column before grid column ``index``.

    The new column takes a 1/(n+1) share; existing widths keep their ratios.
    """
    specs = table_specs(table)
    n = len(specs)
    if not 0 <= index <= n:
        raise ContractViolation(f"Column index out of range: {index}")
    for _is_header, cells in table_rows(table):
        if index == n:
            cells.append(_empty_cell())
            continue
        ci, offset = locate_column(cells, index)
        if offset == 0:
            cells.insert(ci, _empty_cell())
        else:
            cells[ci][0] += 1
    for spec in specs:
        spec['c'] = spec['c'] * n / (n + 1)
    specs.insert(index, {"t": "ColWidth", "c": 1.0 / (n + 1)})
    _rescale(specs)


def remove_column(table, index):
    specs = table_specs(table)
    if len(specs) <= 1:
        raise ContractViolation("Cannot remove the last column of a table")
    if not 0 <= index < len(specs):
        raise ContractViolation(f"Column index out of range: {index}")
    for _is_header, cells in table_rows(table):
        ci, _offset = locate_column(cells, index)
        if cells[ci][0] > 1:
            cells[ci][0] -= 1
        else:
            del cells[ci]
    del specs[index]
    _rescale(specs)


def _is_empty_block(block):
    return block.get('t') in TEXT_BLOCK_TYPES and not block_inlines(block)


def merge_cells(table, row_index, cell_index, count) -> bool:
    """Merge ``count`` cells of one row, starting at ``cell_index``."""
    cells = table_rows(table)[row_index][1]
    if count < 2 or cell_index + count > len(cells):
        return False
    merged = cells[cell_index:cell_index + count]
    colspan = sum(span for span, _blocks in merged)
    blocks = [b for _span, cell_blocks in merged for b in cell_blocks if not _is_empty_block(b)]
    cells[cell_index:cell_index + count] = [[colspan, blocks or [make_para()]]]
    return True


def split_cell(table, row_index, cell_index) -> bool:
    """Split a spanning cell back into single-column cells."""
    cells = table_rows(table)[row_index][1]
    cell = cells[cell_index]
    if cell[0] <= 1:
        return False
    extra = cell[0] - 1
    cell[0] = 1
    cells[cell_index + 1:cell_index + 1] = [_empty_cell() for _ in range(extra)]
    return True


def set_header_row(table, flag):
    table_rows(table)[0][0] = bool(flag)


# --- Session commands ---

def _finish(session, frame, row, cell):
    table = frame['block']
    rows = table_rows(table)
    row = max(0, min(row, len(rows) - 1))
    cell = max(0, min(cell, len(rows[row][1]) - 1))
    pos = frame['pos']
    session.caret = session.caret[:pos + 1] + [row, cell, 0]
    session.changed()
    return True


def insert_table(session, rows=None, cols=None) -> bool:
    """Insert a new table after the caret block, or in place of an empty one."""
    table = build_table(rows, cols, session.config)
    frames = session.frames()
    outer_table = next((f for f in frames if f['row'] is not None), None)
    anchor = outer_table if outer_table is not None else (frames[-1] if frames else None)

    if anchor is None:
        container = session.doc['blocks']
        index = len(container)
        pos = 0
        session.caret = []
        container.append(table)
    else:
        container = anchor['container']
        pos = anchor['pos']
        block = anchor['block']
        if anchor is not outer_table and block.get('t') in ('Para', 'Plain') and not block_inlines(block):
            index = anchor['index']
            container[index] = table
        else:
            index = anchor['index'] + 1
            container.insert(index, table)

    session.caret = session.caret[:pos] + [index, 0, 0, 0]
    logger.debug("Inserted %dx%d table", len(table_rows(table)), len(table_specs(table)))
    session.changed()
    return True


def add_row_before(session) -> bool:
    frame = session.current_table_frame()
    if frame is None:
        return False
    table = frame['block']
    r = frame['row']
    # A row added above a header first row takes the header role, so the
    # first row stays a header.
    is_header = r == 0 and table_rows(table)[0][0]
    insert_row(table, r, is_header=is_header)
    return _finish(session, frame, r + 1, frame['cell'])


def add_row_after(session) -> bool:
    frame = session.current_table_frame()
    if frame is None:
        return False
    insert_row(frame['block'], frame['row'] + 1)
    return _finish(session, frame, frame['row'], frame['cell'])


def delete_row(session) -> bool:
    frame = session.current_table_frame()
    if frame is None:
        return False
    table = frame['block']
    if len(table_rows(table)) <= 1:
        logger.debug("Refusing to delete the only row of a table")
        return False
    remove_row(table, frame['row'])
    return _finish(session, frame, frame['row'], frame['cell'])


def _add_column(session, after):
    frame = session.current_table_frame()
    if frame is None:
        return False
    table = frame['block']
    cells = table_rows(table)[frame['row']][1]
    start = cell_start_column(cells, frame['cell'])
    colspan = cells[frame['cell']][0]
    target = start + colspan if after else start
    insert_column(table, target)
    caret_col = start if after else start + 1
    new_cell, _offset = locate_column(table_rows(table)[frame['row']][1], caret_col)
    return _finish(session, frame, frame['row'], new_cell)


def add_column_before(session) -> bool:
    return _add_column(session, after=False)


def add_column_after(session) -> bool:
    return _add_column(session, after=True)


def delete_column(session) -> bool:
    frame = session.current_table_frame()
    if frame is None:
        return False
    table = frame['block']
    if len(table_specs(table)) <= 1:
        logger.debug("Refusing to delete the only column of a table")
        return False
    cells = table_rows(table)[frame['row']][1]
    remove_column(table, cell_start_column(cells, frame['cell']))
    return _finish(session, frame, frame['row'], frame['cell'])


def merge_cells_command(session, count=2) -> bool:
    """Merge the caret cell with the next ``count - 1`` cells of its row."""
    frame = session.current_table_frame()
    if frame is None:
        return False
    if not merge_cells(frame['block'], frame['row'], frame['cell'], int(count)):
        return False
    return _finish(session, frame, frame['row'], frame['cell'])


def split_cell_command(session) -> bool:
    frame = session.current_table_frame()
    if frame is None:
        return False
    if not split_cell(frame['block'], frame['row'], frame['cell']):
        return False
    return _finish(session, frame, frame['row'], frame['cell'])


def toggle_header_row(session) -> bool:
    """Flip the header role of the first row of the caret's table."""
    frame = session.current_table_frame()
    if frame is None:
        return False
    table = frame['block']
    set_header_row(table, not table_rows(table)[0][0])
    return _finish(session, frame, frame['row'], frame['cell'])


def delete_table(session) -> bool:
    frame = session.current_table_frame()
    if frame is None:
        return False
    container = frame['container']
    index = frame['index']
    del container[index]
    if not container:
        container.append(make_para())
    pos = frame['pos']
    session.caret = session.caret[:pos] + [min(index, len(container) - 1)]
    session.changed()
    return True
