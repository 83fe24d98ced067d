"""Tests for SoupToDocumentAdapter (HTML -> document tree)."""

import logging

import pytest

from tplhtml.soup_adapter import SoupToDocumentAdapter
from tplhtml.nodes import block_text, get_list_level, get_list_start, validate_document
from tplhtml.template_api import export_template, import_template


def parse(markup):
    return SoupToDocumentAdapter().parse(markup)


def blocks(markup):
    return parse(markup)["blocks"]


class TestBlocks:

    def test_paragraph(self):
        assert blocks("<p>Hello</p>") == [{"t": "Para", "c": [{"t": "Str", "c": "Hello"}]}]

    def test_headings_one_to_three(self):
        result = blocks("<h1>a</h1><h2>b</h2><h3>c</h3>")
        assert [b["c"][0] for b in result] == [1, 2, 3]
        assert all(b["t"] == "Header" for b in result)

    def test_deeper_heading_becomes_paragraph(self):
        assert blocks("<h5>small</h5>") == [{"t": "Para", "c": [{"t": "Str", "c": "small"}]}]

    def test_loose_text_becomes_plain(self):
        assert blocks("just text") == [{"t": "Plain", "c": [{"t": "Str", "c": "just text"}]}]

    def test_whitespace_between_blocks_dropped(self):
        result = blocks("<p>a</p>\n   \n<p>b</p>")
        assert [b["t"] for b in result] == ["Para", "Para"]

    def test_containers_unwrapped(self):
        result = blocks("<div><section><p>inside</p></section></div>")
        assert result == [{"t": "Para", "c": [{"t": "Str", "c": "inside"}]}]

    def test_noise_dropped(self):
        result = blocks("<style>p {}</style><script>x()</script><p>kept</p>")
        assert result == [{"t": "Para", "c": [{"t": "Str", "c": "kept"}]}]

    def test_full_document_uses_body(self):
        markup = "<!DOCTYPE html><html><head><title>T</title></head><body><p>b</p></body></html>"
        assert blocks(markup) == [{"t": "Para", "c": [{"t": "Str", "c": "b"}]}]

    def test_empty_input(self):
        assert parse("") == {"blocks": []}
        assert parse(None) == {"blocks": []}

    def test_malformed_markup_does_not_raise(self):
        result = blocks("<p>open <b>bold</p><li>stray</li></ol>")
        assert result[0]["t"] == "Para"
        validate_document({"blocks": result})


class TestInlines:

    def test_marks(self):
        result = blocks("<p><b>x</b><i>y</i><u>z</u><strong>s</strong><em>e</em></p>")
        assert [i["t"] for i in result[0]["c"]] == ["Strong", "Emph", "Underline", "Strong", "Emph"]

    def test_line_break(self):
        result = blocks("<p>a<br>b</p>")
        assert result[0]["c"] == [
            {"t": "Str", "c": "a"},
            {"t": "LineBreak"},
            {"t": "Str", "c": "b"},
        ]

    def test_variable_span(self):
        result = blocks('<p>Hi <span class="be-variable">{BE Variable}</span></p>')
        assert result[0]["c"] == [{"t": "Str", "c": "Hi "}, {"t": "Variable"}]

    def test_variable_label_is_discarded(self):
        result = blocks('<p><span class="be-variable">edited text</span></p>')
        assert result[0]["c"] == [{"t": "Variable"}]

    def test_unknown_inline_unwrapped(self):
        result = blocks('<p><a href="#">link</a></p>')
        assert result[0]["c"] == [{"t": "Str", "c": "link"}]

    def test_comment_skipped(self):
        result = blocks("<p>a<!-- hidden --></p>")
        assert result[0]["c"] == [{"t": "Str", "c": "a"}]

    def test_entities_decoded(self):
        result = blocks("<p>1 &lt; 2</p>")
        assert result[0]["c"] == [{"t": "Str", "c": "1 < 2"}]


class TestLists:

    def test_bullet_list(self):
        result = blocks("<ul><li>a</li><li>b</li></ul>")
        assert result[0]["t"] == "BulletList"
        assert len(result[0]["c"]) == 2

    def test_ordered_list_defaults(self):
        lst = blocks("<ol><li>a</li></ol>")[0]
        assert get_list_level(lst) == 1
        assert get_list_start(lst) == 1

    def test_ordered_list_level_and_start(self):
        lst = blocks('<ol start="4" data-level="2"><li>a</li></ol>')[0]
        assert get_list_level(lst) == 2
        assert get_list_start(lst) == 4

    def test_nested_list(self):
        lst = blocks('<ol><li>a<ol data-level="2"><li>b</li></ol></li></ol>')[0]
        item = lst["c"][1][0]
        assert item[0] == {"t": "Plain", "c": [{"t": "Str", "c": "a"}]}
        assert item[1]["t"] == "OrderedList"
        assert get_list_level(item[1]) == 2

    @pytest.mark.parametrize("raw,expected", [
        ("0", 1),
        ("-2", 1),
        ("7", 3),
        ("abc", 1),
        ("3", 3),
    ])
    def test_level_clamped(self, raw, expected):
        lst = blocks(f'<ol data-level="{raw}"><li>a</li></ol>')[0]
        assert get_list_level(lst) == expected

    def test_clamp_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tplhtml"):
            blocks('<ol data-level="9"><li>a</li></ol>')
        assert "clamped" in caplog.text

    def test_invalid_start_falls_back(self):
        lst = blocks('<ol start="0"><li>a</li></ol>')[0]
        assert get_list_start(lst) == 1

    def test_content_outside_li_joins_previous_item(self):
        lst = blocks("<ul><li>a</li><p>extra</p></ul>")[0]
        assert len(lst["c"]) == 1
        assert lst["c"][0][1]["t"] == "Para"


class TestTables:

    def test_header_and_body_rows(self):
        table = blocks(
            "<table><thead><tr><th>H1</th><th>H2</th></tr></thead>"
            "<tbody><tr><td>a</td><td>b</td></tr></tbody></table>"
        )[0]
        specs, rows = table["c"]
        assert [s["c"] for s in specs] == [0.5, 0.5]
        assert rows[0][0] is True
        assert rows[1][0] is False

    def test_mixed_row_is_not_header(self):
        table = blocks("<table><tr><th>a</th><td>b</td></tr></table>")[0]
        assert table["c"][1][0][0] is False

    def test_short_rows_padded(self):
        table = blocks("<table><tr><td>a</td><td>b</td></tr><tr><td>c</td></tr></table>")[0]
        assert len(table["c"][1][1][1]) == 2
        validate_document({"blocks": [table]})

    def test_colspan(self):
        table = blocks('<table><tr><td colspan="2">a</td></tr><tr><td>b</td><td>c</td></tr></table>')[0]
        assert table["c"][1][0][1][0][0] == 2
        validate_document({"blocks": [table]})

    def test_widths_from_colgroup(self):
        table = blocks(
            '<table><colgroup><col style="width: 25%"><col style="width: 75%"></colgroup>'
            "<tr><td>a</td><td>b</td></tr></table>"
        )[0]
        assert [s["c"] for s in table["c"][0]] == [0.25, 0.75]

    def test_incomplete_widths_fall_back_to_equal(self):
        table = blocks(
            '<table><colgroup><col style="width: 25%"></colgroup>'
            "<tr><td>a</td><td>b</td></tr></table>"
        )[0]
        assert [s["c"] for s in table["c"][0]] == [0.5, 0.5]

    def test_empty_table_dropped(self):
        assert blocks("<table></table>") == []

    def test_min_width_not_read_as_width(self):
        table = blocks(
            '<table><colgroup><col style="min-width: 25px; width: 25%">'
            '<col style="min-width: 25px; width: 75%"></colgroup>'
            "<tr><td>a</td><td>b</td></tr></table>"
        )[0]
        assert [s["c"] for s in table["c"][0]] == [0.25, 0.75]

    def test_min_width_only_falls_back_to_equal(self):
        table = blocks(
            '<table><colgroup><col style="min-width: 25px"><col style="min-width: 80px">'
            "</colgroup><tr><td>a</td><td>b</td></tr></table>"
        )[0]
        assert [s["c"] for s in table["c"][0]] == [0.5, 0.5]


class TestDeepNesting:
    """Pathologically nested markup degrades to text instead of raising."""

    @pytest.mark.parametrize("tag", ["b", "span", "font"])
    def test_deep_inline_nesting(self, tag, caplog):
        markup = "<p>" + f"<{tag}>" * 1500 + "deep text" + f"</{tag}>" * 1500 + "</p>"
        with caplog.at_level(logging.WARNING, logger="tplhtml"):
            result = blocks(markup)
        assert len(result) == 1
        assert block_text(result[0]) == "deep text"
        assert "Flattening to text" in caplog.text

    def test_deep_block_nesting(self):
        markup = "<div>" * 1500 + "<p>inner</p>" + "</div>" * 1500
        result = blocks(markup)
        assert [block_text(b) for b in result] == ["inner"]

    def test_deep_inline_nesting_survives_export(self):
        markup = "<p>" + "<b>" * 1500 + "x %s" + "</b>" * 1500 + "</p>"
        document = import_template(markup)
        exported = export_template(document)
        assert "x %s" in exported


class TestUploadScenario:

    def test_text_then_list(self):
        result = import_template("A & B <ol><li>x</li></ol>")["blocks"]
        assert result[0] == {"t": "Plain", "c": [{"t": "Str", "c": "A & B "}]}
        lst = result[1]
        assert lst["t"] == "OrderedList"
        assert get_list_level(lst) == 1
        assert lst["c"][1] == [[{"t": "Plain", "c": [{"t": "Str", "c": "x"}]}]]
        assert len(result) == 2
