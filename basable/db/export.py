"""
表数据导出
"""
from html import escape
from typing import Any, Dict, Sequence, Union

from .conv import to_column_value
from .types import ColumnValue, TableExportFormat


ExportRow = Dict[str, Any]


def cell_text(row: ExportRow, column: str) -> str:
    """取单元格的文本形式，缺失值为空字符串"""
    value = row.get(column)
    if value is None:
        return ""
    if isinstance(value, ColumnValue):
        return value.to_text()
    return to_column_value(value).to_text()


def _json_string(text: str) -> str:
    text = text.replace("\\", "\\\\").replace('"', '\\"')
    return text.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")


def render_delimited(delimiter: str, columns: Sequence[str], rows: Sequence[ExportRow]) -> str:
    header = delimiter.join(columns)
    body = "\n".join(
        delimiter.join(cell_text(row, col) for col in columns) for row in rows
    )
    return f"{header}\n\n{body}"


def render_json(columns: Sequence[str], rows: Sequence[ExportRow]) -> str:
    objects = []
    for row in rows:
        pairs = [
            f'\t\t"{_json_string(col)}": "{_json_string(cell_text(row, col))}"'
            for col in columns
        ]
        objects.append("{\n" + ",\n".join(pairs) + "\n\t}")

    if not objects:
        return "[]"
    return "[\n\t" + ",\n\t".join(objects) + "\n]"


def render_html(columns: Sequence[str], rows: Sequence[ExportRow]) -> str:
    headers = "\n\t\t\t".join(f"<th>{escape(col)}</th>" for col in columns)
    thead = f"<thead>\n\t\t<tr>\n\t\t\t{headers}\n\t\t</tr>\n\t</thead>"

    row_list = []
    for row in rows:
        cells = "\n\t\t\t".join(f"<td>{escape(cell_text(row, col))}</td>" for col in columns)
        row_list.append(f"<tr>\n\t\t\t{cells}\n\t\t</tr>")
    tbody = "<tbody>\n\t\t" + "\n\t\t".join(row_list) + "\n\t</tbody>"

    return f"<table>\n\t{thead}\n\t{tbody}\n</table>"


def process_exports(fmt: Union[TableExportFormat, str, None],
                    columns: Sequence[str],
                    rows: Sequence[ExportRow]) -> str:
    """
    把结果集渲染为指定格式

    Args:
        fmt: 导出格式，也可以是格式名
        columns: 列顺序
        rows: 行数据，值可以是驱动原始值或 ColumnValue

    Returns:
        渲染后的文本，不支持的格式返回空字符串
    """
    if isinstance(fmt, str):
        fmt = TableExportFormat.parse(fmt)
    if fmt is None:
        return ""

    delimiter = fmt.field_delimiter()
    if delimiter is not None:
        return render_delimited(delimiter, columns, rows)
    if fmt == TableExportFormat.JSON:
        return render_json(columns, rows)
    if fmt == TableExportFormat.HTML:
        return render_html(columns, rows)
    return ""
