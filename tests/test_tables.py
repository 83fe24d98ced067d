"""Tests for table construction and structural table commands."""

import math

import pytest

from tplhtml.editing import EditingSession
from tplhtml.exceptions import ContractViolation
from tplhtml.nodes import make_document, make_para, validate_document
from tplhtml import tables
from tplhtml.tables import (
    build_table,
    column_widths,
    insert_column,
    merge_cells,
    remove_column,
    remove_row,
    split_cell,
    table_rows,
    validate_table,
)


def header_label(cell):
    return cell[1][0]["c"][0]["c"][0]["c"]


def table_session(rows=2, cols=2, caret=None):
    """Session whose only block is a fresh table."""
    session = EditingSession(make_document([build_table(rows, cols)]))
    session.set_caret(caret if caret is not None else [0, 0, 0, 0])
    return session


def current_table(session):
    return session.doc["blocks"][0]


class TestBuildTable:

    def test_default_shape(self):
        table = build_table()
        rows = table_rows(table)
        assert len(rows) == 2
        assert column_widths(table) == [0.5, 0.5]
        assert rows[0][0] is True
        assert rows[1][0] is False
        assert [header_label(c) for c in rows[0][1]] == ["Header 1", "Header 2"]
        assert rows[1][1] == [[1, [make_para()]], [1, [make_para()]]]
        validate_table(table)

    def test_custom_size(self):
        table = build_table(4, 3)
        assert len(table_rows(table)) == 4
        assert len(column_widths(table)) == 3
        assert math.isclose(sum(column_widths(table)), 1.0)

    @pytest.mark.parametrize("rows,cols", [(0, 2), (2, 0), (-1, 1)])
    def test_rejects_empty(self, rows, cols):
        with pytest.raises(ContractViolation):
            build_table(rows, cols)

    def test_one_by_one(self):
        table = build_table(1, 1)
        rows = table_rows(table)
        assert len(rows) == 1
        assert rows[0][0] is True
        assert header_label(rows[0][1][0]) == "Header 1"
        assert column_widths(table) == [1.0]


class TestTableModel:

    def test_insert_column_rescales(self):
        table = build_table(2, 2)
        insert_column(table, 2)
        widths = column_widths(table)
        assert len(widths) == 3
        assert all(math.isclose(w, 1 / 3) for w in widths)
        validate_table(table)

    def test_insert_column_inside_span_widens_cell(self):
        table = build_table(2, 2)
        merge_cells(table, 1, 0, 2)
        insert_column(table, 1)
        assert table_rows(table)[1][1][0][0] == 3
        validate_table(table)

    def test_remove_column(self):
        table = build_table(2, 3)
        remove_column(table, 1)
        assert column_widths(table) == [0.5, 0.5]
        validate_table(table)

    def test_cannot_remove_last_column(self):
        table = build_table(2, 1)
        with pytest.raises(ContractViolation):
            remove_column(table, 0)

    def test_cannot_remove_last_row(self):
        table = build_table(1, 2)
        with pytest.raises(ContractViolation):
            remove_row(table, 0)

    def test_merge_and_split(self):
        table = build_table(2, 3)
        assert merge_cells(table, 1, 0, 3) is True
        assert table_rows(table)[1][1] == [[3, [make_para()]]]
        validate_table(table)
        assert split_cell(table, 1, 0) is True
        assert len(table_rows(table)[1][1]) == 3
        validate_table(table)

    def test_merge_keeps_content(self):
        table = build_table(1, 2)
        assert merge_cells(table, 0, 0, 2) is True
        cell = table_rows(table)[0][1][0]
        assert [header_label([1, [b]]) for b in cell[1]] == ["Header 1", "Header 2"]

    def test_merge_out_of_range(self):
        table = build_table(2, 2)
        assert merge_cells(table, 1, 1, 2) is False
        assert merge_cells(table, 1, 0, 1) is False

    def test_split_single_cell_is_noop(self):
        table = build_table(2, 2)
        assert split_cell(table, 1, 0) is False

    def test_validate_rejects_bad_geometry(self):
        table = build_table(2, 2)
        table_rows(table)[1][1].pop()
        with pytest.raises(ContractViolation):
            validate_table(table)

    def test_validate_rejects_bad_widths(self):
        table = build_table(2, 2)
        table["c"][0][0]["c"] = 0.9
        with pytest.raises(ContractViolation):
            validate_table(table)


class TestTableCommands:

    def test_insert_table_replaces_empty_paragraph(self):
        session = EditingSession()
        assert tables.insert_table(session) is True
        assert [b["t"] for b in session.doc["blocks"]] == ["Table"]
        assert session.caret == [0, 0, 0, 0]

    def test_insert_table_after_text(self, make_session):
        session = make_session("<p>intro</p>", caret=[0])
        assert tables.insert_table(session, 3, 2) is True
        assert [b["t"] for b in session.doc["blocks"]] == ["Para", "Table"]
        assert session.caret == [1, 0, 0, 0]
        assert len(table_rows(session.doc["blocks"][1])) == 3

    def test_insert_table_inside_cell_goes_after_table(self):
        session = table_session(caret=[0, 1, 0, 0])
        assert tables.insert_table(session) is True
        assert [b["t"] for b in session.doc["blocks"]] == ["Table", "Table"]

    def test_add_rows(self):
        session = table_session(caret=[0, 1, 0, 0])
        assert tables.add_row_after(session) is True
        assert tables.add_row_before(session) is True
        assert len(table_rows(current_table(session))) == 4
        validate_document(session.doc)

    def test_row_added_above_header_becomes_header(self):
        session = table_session(caret=[0, 0, 0, 0])
        tables.add_row_before(session)
        rows = table_rows(current_table(session))
        assert rows[0][0] is True
        assert session.caret[:3] == [0, 1, 0]

    def test_delete_row(self):
        session = table_session(caret=[0, 1, 0, 0])
        assert tables.delete_row(session) is True
        assert len(table_rows(current_table(session))) == 1
        assert tables.delete_row(session) is False
        assert len(table_rows(current_table(session))) == 1

    def test_add_columns(self):
        session = table_session(caret=[0, 1, 1, 0])
        assert tables.add_column_after(session) is True
        assert tables.add_column_before(session) is True
        assert len(column_widths(current_table(session))) == 4
        validate_document(session.doc)

    def test_delete_column(self):
        session = table_session(caret=[0, 0, 1, 0])
        assert tables.delete_column(session) is True
        assert column_widths(current_table(session)) == [1.0]
        assert tables.delete_column(session) is False
        validate_document(session.doc)

    def test_merge_and_split_commands(self):
        session = table_session(caret=[0, 1, 0, 0])
        assert tables.merge_cells_command(session) is True
        assert table_rows(current_table(session))[1][1][0][0] == 2
        assert tables.split_cell_command(session) is True
        assert len(table_rows(current_table(session))[1][1]) == 2
        validate_document(session.doc)

    def test_toggle_header_row(self):
        session = table_session()
        assert tables.toggle_header_row(session) is True
        assert table_rows(current_table(session))[0][0] is False
        assert "<th" not in session.render()
        tables.toggle_header_row(session)
        assert table_rows(current_table(session))[0][0] is True

    def test_delete_table(self):
        session = table_session()
        assert tables.delete_table(session) is True
        assert session.doc["blocks"] == [make_para()]
        assert session.caret == [0]

    def test_commands_outside_table_are_noops(self, make_session):
        session = make_session("<p>x</p>")
        for command in (tables.add_row_after, tables.delete_row, tables.add_column_before,
                        tables.delete_column, tables.merge_cells_command,
                        tables.split_cell_command, tables.toggle_header_row,
                        tables.delete_table):
            assert command(session) is False

    def test_commands_notify_listeners(self):
        session = table_session(caret=[0, 1, 0, 0])
        seen = []
        session.on_change(seen.append)
        tables.add_row_after(session)
        assert len(seen) == 1
        assert seen[0] == session.render()
