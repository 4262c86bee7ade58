"""导出渲染测试"""

import json
from datetime import date

import pytest

from basable.db.export import process_exports
from basable.db.types import ColumnValue, TableExportFormat

COLUMNS = ["id", "name"]
ROWS = [
    {"id": 1, "name": "Ada"},
    {"id": ColumnValue.integer(2), "name": ColumnValue.text('Grace "Amazing" Hopper')},
]


class TestProcessExports:
    """导出格式测试"""

    @pytest.mark.parametrize("fmt, delimiter", [
        (TableExportFormat.CSV, ","),
        (TableExportFormat.PSV, "|"),
        (TableExportFormat.TSV, "\t"),
    ])
    def test_delimited(self, fmt: TableExportFormat, delimiter: str):
        output = process_exports(fmt, COLUMNS, [{"id": 1, "name": "Ada"}, {"id": 2, "name": "Bob"}])

        header, body = output.split("\n\n")
        assert header == delimiter.join(COLUMNS)
        assert body.split("\n") == [f"1{delimiter}Ada", f"2{delimiter}Bob"]

    def test_text_uses_space(self):
        assert process_exports("text", COLUMNS, [{"id": 1, "name": "Ada"}]) == "id name\n\n1 Ada"

    def test_missing_values_are_empty(self):
        output = process_exports(TableExportFormat.CSV, COLUMNS, [{"id": 1}, {"id": None, "name": "x"}])
        assert output == "id,name\n\n1,\n,x"

    def test_dates_render_as_text(self):
        output = process_exports("csv", ["day"], [{"day": date(2024, 3, 9)}])
        assert output.endswith("2024-03-09")

    def test_json(self):
        output = process_exports(TableExportFormat.JSON, COLUMNS, ROWS)

        assert json.loads(output) == [
            {"id": "1", "name": "Ada"},
            {"id": "2", "name": 'Grace "Amazing" Hopper'},
        ]

    def test_json_without_rows(self):
        assert json.loads(process_exports("json", COLUMNS, [])) == []

    def test_html(self):
        output = process_exports(TableExportFormat.HTML, COLUMNS, [{"id": 1, "name": "<b>Ada</b>"}])

        assert output.startswith("<table>")
        assert output.endswith("</table>")
        assert "<th>id</th>" in output
        assert "<td>&lt;b&gt;Ada&lt;/b&gt;</td>" in output
        assert output.index("<thead>") < output.index("<tbody>")

    @pytest.mark.parametrize("fmt", [None, "xml", "yaml"])
    def test_unknown_format(self, fmt):
        assert process_exports(fmt, COLUMNS, ROWS) == ""
