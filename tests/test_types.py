"""值类型与请求选项测试"""

import unittest
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from basable.config.config import Settings, configure
from basable.db.conv import get_int, get_str, map_row, to_column_value
from basable.db.types import (
    ColumnValue,
    HistoryColumn,
    NotifyEvent,
    NotifyEventMethod,
    NotifyTrigger,
    NotifyTriggerTime,
    OnNotifyError,
    SpecialColumn,
    SpecialValueType,
    TableConfig,
    TableExportFormat,
    TableQueryOpts,
    ValueKind,
)
from basable.errors import MissingParameterError
from basable.query import Combinator, OrderDirection


class TestColumnValue(unittest.TestCase):
    """ColumnValue 测试"""

    def test_integer_range(self):
        self.assertEqual(ColumnValue.integer(-5).value, -5)
        with self.assertRaises(ValueError):
            ColumnValue.integer(2 ** 63)
        with self.assertRaises(ValueError):
            ColumnValue.unsigned(-1)

    def test_float32_truncates(self):
        value = ColumnValue.float32(0.1)
        self.assertEqual(value.kind, ValueKind.FLOAT)
        self.assertNotEqual(value.value, 0.1)
        self.assertAlmostEqual(value.value, 0.1, places=6)

    def test_text_forms(self):
        self.assertEqual(ColumnValue.null().to_text(), "")
        self.assertEqual(ColumnValue.date(2024, 1, 2).to_text(), "2024-01-02")
        self.assertEqual(ColumnValue.date(2024, 1, 2, 3, 4, 5).to_text(), "2024-01-02 03:04:05")
        self.assertEqual(ColumnValue.time(True, 1, 2, 3, 4).to_text(), "-26:03:04")
        self.assertEqual(str(ColumnValue.double(1.5)), "1.5")

    def test_to_dict(self):
        self.assertEqual(ColumnValue.text("a").to_dict(), {"Text": "a"})
        self.assertEqual(ColumnValue.null().to_dict(), {"NULL": None})
        self.assertEqual(ColumnValue.date(2024, 1, 2).to_dict(), {"Date": [2024, 1, 2, 0, 0, 0, 0]})


class TestConversion(unittest.TestCase):
    """驱动值转换测试"""

    def test_scalars(self):
        self.assertTrue(to_column_value(None).is_null())
        self.assertEqual(to_column_value(True), ColumnValue.integer(1))
        self.assertEqual(to_column_value(-3), ColumnValue.integer(-3))
        self.assertEqual(to_column_value(2 ** 64 - 1), ColumnValue.unsigned(2 ** 64 - 1))
        self.assertEqual(to_column_value(2.5), ColumnValue.double(2.5))
        self.assertEqual(to_column_value(Decimal("10.10")), ColumnValue.text("10.10"))
        self.assertEqual(to_column_value(b"abc"), ColumnValue.text("abc"))
        self.assertEqual(to_column_value(b"\xff"), ColumnValue.text("ff"))

    def test_temporal_values_keep_precision(self):
        self.assertEqual(
            to_column_value(datetime(2024, 5, 6, 7, 8, 9, 123456)),
            ColumnValue.date(2024, 5, 6, 7, 8, 9, 123456),
        )
        self.assertEqual(to_column_value(date(2024, 5, 6)), ColumnValue.date(2024, 5, 6))
        self.assertEqual(
            to_column_value(timedelta(days=1, hours=2, minutes=3, seconds=4, microseconds=5)),
            ColumnValue.time(False, 1, 2, 3, 4, 5),
        )
        self.assertEqual(to_column_value(-timedelta(hours=1)), ColumnValue.time(True, 0, 1, 0, 0))
        self.assertEqual(to_column_value(time(1, 2, 3)), ColumnValue.time(False, 0, 1, 2, 3))

    def test_round_trip_to_python(self):
        moment = datetime(2024, 5, 6, 7, 8, 9)
        self.assertEqual(to_column_value(moment).to_python(), moment)
        delta = -timedelta(hours=3, minutes=30)
        self.assertEqual(to_column_value(delta).to_python(), delta)

    def test_map_row_skips_absent_columns(self):
        row = map_row({"id": 1, "name": "x"}, ["id", "missing"])
        self.assertEqual(row, {"id": ColumnValue.integer(1)})

    def test_getters(self):
        row = {"n": "12", "s": None, "bad": "abc"}
        self.assertEqual(get_int(row, "n"), 12)
        self.assertEqual(get_int(row, "bad", -1), -1)
        self.assertEqual(get_str(row, "s"), "")
        self.assertEqual(get_str(row, "n"), "12")


class TestTableQueryOpts(unittest.TestCase):
    """查询选项测试"""

    def tearDown(self):
        configure(Settings())

    def test_from_query_params(self):
        opts = TableQueryOpts.from_query_params({
            "table": "users",
            "offset": "20",
            "row_count": "10",
            "columns": "id, name,,email",
        })

        self.assertEqual(opts.table, "users")
        self.assertEqual(opts.offset, 20)
        self.assertEqual(opts.row_count, 10)
        self.assertEqual(opts.columns, ["id", "name", "email"])

    def test_defaults_from_settings(self):
        configure(Settings(default_rows_per_page=25))

        opts = TableQueryOpts.from_query_params({"table": "users"})

        self.assertEqual(opts.offset, 0)
        self.assertEqual(opts.row_count, 25)
        self.assertIsNone(opts.columns)
        self.assertEqual(TableQueryOpts(table="t").row_count, 25)

    def test_missing_table(self):
        with self.assertRaises(MissingParameterError):
            TableQueryOpts.from_query_params({"offset": "1"})
        with self.assertRaises(MissingParameterError):
            TableQueryOpts.from_dict({})

    def test_bad_counts(self):
        with self.assertRaises(ValueError):
            TableQueryOpts.from_query_params({"table": "t", "offset": "-1"})
        with self.assertRaises(ValueError):
            TableQueryOpts.from_query_params({"table": "t", "row_count": "many"})

    def test_from_dict(self):
        opts = TableQueryOpts.from_dict({
            "table": "users",
            "columns": ["id"],
            "filters": [
                {"combinator": "BASE", "column": "age", "expression": {"Gte": "18"}},
                {"combinator": "OR", "column": "vip", "expression": {"Eq": "1"}},
            ],
            "order_by": {"DESC": "id"},
            "search_opts": {"search_cols": "bio,name", "query": "rust"},
        })

        self.assertEqual([f.combinator for f in opts.filters], [Combinator.BASE, Combinator.OR])
        self.assertEqual(opts.order_by.direction, OrderDirection.DESC)
        self.assertEqual(opts.search_opts.search_cols, ["bio", "name"])
        self.assertTrue(opts.is_search_mode())

        query = opts.to_query()
        self.assertEqual(query.command.columns, ["id"])
        self.assertEqual(len(query.filters), 2)
        self.assertIs(query.search_opts, opts.search_opts)


class TestTableConfig(unittest.TestCase):
    """表配置序列化测试"""

    def test_dict_round_trip(self):
        config = TableConfig(
            label="Users",
            name="users",
            pk_column="id",
            items_per_page=50,
            created_column=HistoryColumn("created_at", "%Y-%m-%d"),
            special_columns=[SpecialColumn("avatar", SpecialValueType.IMAGE, "/media")],
            events=[NotifyEvent(NotifyTrigger.CREATE, NotifyTriggerTime.AFTER,
                                NotifyEventMethod.POST, "https://hooks.example.com/users",
                                OnNotifyError.FAIL)],
            exclude_columns=["password"],
        )

        data = config.to_dict()

        self.assertEqual(data["events"][0]["trigger"], "Create")
        self.assertEqual(data["special_columns"][0]["special_type"], "Image")
        self.assertEqual(TableConfig.from_dict(data), config)


class TestExportFormat(unittest.TestCase):

    def test_parse(self):
        self.assertEqual(TableExportFormat.parse("CSV"), TableExportFormat.CSV)
        self.assertIsNone(TableExportFormat.parse("xlsx"))
        self.assertEqual(TableExportFormat.TSV.field_delimiter(), "\t")
        self.assertIsNone(TableExportFormat.JSON.field_delimiter())


if __name__ == '__main__':
    unittest.main()
