import logging
import xml.sax.saxutils as saxutils

from .config import DEFAULT_CONFIG
from .list_levels import list_style_attribute
from .placeholder import variable_markup

logger = logging.getLogger('tplhtml')


class DocumentToHtml:
    """Serialize a document tree back to editor markup.

    The output is the internal form: variables appear as their canonical
    span fragment and ordered lists carry data-level plus the style derived
    from it. Export-time transforms (wire token, minification) are applied
    by template_api.
    """

    def __init__(self, document, config=None):
        self.document = document
        self.config = config if config is not None else DEFAULT_CONFIG

    def convert(self):
        blocks = self.document.get('blocks', []) if self.document else []
        return self._process_blocks(blocks)

    def _escape_text(self, text):
        """Escape markup characters in text. Ampersands stay literal."""
        return text.replace('<', '&lt;').replace('>', '&gt;')

    def _escape_attr(self, value):
        """Escape value for use in attributes (handles &, <, >, ")."""
        if value is None:
            return ''
        return saxutils.escape(str(value), {'"': '&quot;'})

    def _attrs(self, node_key, extra=None):
        """Render configured presentation attributes plus any extras."""
        attrs = dict(extra or {})
        for name, value in self.config.NODE_ATTRIBUTES.get(node_key, {}).items():
            attrs.setdefault(name, value)
        return "".join(
            f' {name}="{self._escape_attr(value)}"'
            for name, value in attrs.items()
            if value is not None and value != ''
        )

    def _process_blocks(self, blocks):
        result = []
        if not isinstance(blocks, list):
            return ""

        for block in blocks:
            if not isinstance(block, dict):
                continue

            b_type = block.get('t')
            b_content = block.get('c')

            if b_type == 'Header':
                result.append(self._handle_header(b_content))
            elif b_type == 'Para':
                result.append(self._handle_para(b_content))
            elif b_type == 'Plain':
                result.append(self._handle_plain(b_content))
            elif b_type == 'BulletList':
                result.append(self._handle_bullet_list(b_content))
            elif b_type == 'OrderedList':
                result.append(self._handle_ordered_list(b_content))
            elif b_type == 'Table':
                result.append(self._handle_table(b_content))
            else:
                logger.debug("Skipping unknown block type: %s", b_type)

        return "".join(result)

    def _process_inlines(self, inlines):
        result = []
        if not isinstance(inlines, list):
            return ""

        for item in inlines:
            if not isinstance(item, dict):
                continue

            i_type = item.get('t')
            i_content = item.get('c')

            if i_type == 'Str':
                result.append(self._escape_text(i_content))
            elif i_type == 'Strong':
                result.append(f"<strong>{self._process_inlines(i_content)}</strong>")
            elif i_type == 'Emph':
                result.append(f"<em>{self._process_inlines(i_content)}</em>")
            elif i_type == 'Underline':
                result.append(f"<u>{self._process_inlines(i_content)}</u>")
            elif i_type == 'LineBreak':
                result.append("<br>")
            elif i_type == 'Variable':
                # Always the canonical fragment, whatever was parsed
                result.append(variable_markup(self.config))
            else:
                logger.debug("Skipping unknown inline type: %s", i_type)

        return "".join(result)

    def _handle_header(self, content):
        level = content[0]
        text = self._process_inlines(content[1])
        return f"<h{level}{self._attrs('heading')}>{text}</h{level}>"

    def _handle_para(self, content):
        return f"<p{self._attrs('paragraph')}>{self._process_inlines(content)}</p>"

    def _handle_plain(self, content):
        return self._process_inlines(content)

    def _handle_list_items(self, items):
        li_attrs = self._attrs('list_item')
        return "".join(f"<li{li_attrs}>{self._process_blocks(item)}</li>" for item in items)

    def _handle_bullet_list(self, content):
        return f"<ul{self._attrs('bullet_list')}>{self._handle_list_items(content)}</ul>"

    def _handle_ordered_list(self, content):
        start, level = content[0]
        extra = {}
        if start != 1:
            extra['start'] = start
        extra['data-level'] = level
        extra['style'] = list_style_attribute(level, self.config)
        return f"<ol{self._attrs('ordered_list', extra)}>{self._handle_list_items(content[1])}</ol>"

    def _format_width(self, fraction):
        return f"{round(fraction * 100, 4):g}%"

    def _handle_table(self, content):
        specs, rows = content
        html_parts = [f"<table{self._attrs('table')}>"]

        html_parts.append("<colgroup>")
        for spec in specs:
            html_parts.append(f'<col style="width: {self._format_width(spec["c"])}">')
        html_parts.append("</colgroup>")

        html_parts.append("<tbody>")
        for row in rows:
            html_parts.append(self._process_table_row(row))
        html_parts.append("</tbody>")

        html_parts.append("</table>")
        return "".join(html_parts)

    def _process_table_row(self, row):
        is_header, cells = row
        row_html = ["<tr>"]
        tag = "th" if is_header else "td"
        node_key = 'table_header' if is_header else 'table_cell'

        for colspan, blocks in cells:
            extra = {'colspan': colspan} if colspan > 1 else None
            cell_content = self._process_blocks(blocks)
            row_html.append(f'<{tag}{self._attrs(node_key, extra)}>{cell_content}</{tag}>')

        row_html.append("</tr>")
        return "".join(row_html)
