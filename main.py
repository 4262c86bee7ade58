#!/usr/bin/env python3
"""
basable 命令行入口

连接配置文件中的数据库，输出表概要、服务器详情、列定义或导出表数据。
"""
import sys
import json
import argparse
from loguru import logger

from basable.config.config import Config
from basable.config.table_config_store import create_table_config_store
from basable.core.foundation import Basable
from basable.db.types import ExportTrim, TableExportFormat, TableExportOpts, TableQueryOpts
from basable.errors import BasableError
from basable.monitor.logger import setup_logger
from basable.monitor.notifier import EventNotifier

CLI_USER = "cli"


class BasableApplication:
    """命令行应用"""

    def __init__(self, config_path: str = None):
        self.config_path = config_path
        self.config = None
        self.basable = None
        self.db = None

    def initialize(self):
        """加载配置并建立连接"""
        self.config = Config(self.config_path)
        self.config.validate()

        setup_logger(self.config.logging)

        logger.info(f"Config file: {self.config.config_path}")
        logger.info(f"Connecting to {self.config.connection.host}/{self.config.connection.db_name}")

        store = create_table_config_store(self.config.redis)
        self.basable = Basable(store, EventNotifier())

        self.db = self.basable.create_connection(self.config.connection, CLI_USER)
        self.basable.add_connection(self.db)

        logger.info(f"Connection {self.db.id} ready with {len(self.db.tables())} tables")

    def close(self):
        if self.db is not None:
            self.basable.remove_connection(self.db.id, CLI_USER)
            self.db = None

    def print_tables(self):
        summaries = [s.to_dict() for s in self.db.build_table_list()]
        print(json.dumps(summaries, indent=2, ensure_ascii=False))

    def print_details(self):
        print(json.dumps(self.db.details().to_dict(), indent=2, ensure_ascii=False))

    def print_columns(self, table_name: str):
        table = self._require_table(table_name)
        columns = [c.to_dict() for c in table.query_columns()]
        print(json.dumps(columns, indent=2, ensure_ascii=False))

    def export(self, table_name: str, fmt: str, offset: int, count: int):
        table = self._require_table(table_name)

        export_format = TableExportFormat.parse(fmt)
        if export_format is None:
            logger.warning(f"Unknown export format {fmt}, output will be empty")

        opts = TableExportOpts(
            query_opts=TableQueryOpts(table=table_name),
            format=export_format,
            trim=ExportTrim(offset, count) if count else None,
        )
        print(table.export(opts, self.db))

    def _require_table(self, table_name: str):
        table = self.db.get_table(table_name)
        if table is None:
            logger.error(f"Table {table_name} not found")
            sys.exit(1)
        return table


def main():
    """主函数"""
    parser = argparse.ArgumentParser(
        description='Basable query and table access CLI'
    )
    parser.add_argument(
        '-c', '--config',
        help='Path to configuration file',
        default=None
    )
    parser.add_argument(
        '--init',
        action='store_true',
        help='Initialize configuration file'
    )
    parser.add_argument(
        '--tables',
        action='store_true',
        help='List table summaries'
    )
    parser.add_argument(
        '--details',
        action='store_true',
        help='Show database server details'
    )
    parser.add_argument(
        '--columns',
        metavar='TABLE',
        help='Show column definitions of a table'
    )
    parser.add_argument(
        '--export',
        metavar='TABLE',
        help='Export table data'
    )
    parser.add_argument(
        '--format',
        default='csv',
        help='Export format: csv, psv, tsv, text, json, html'
    )
    parser.add_argument(
        '--offset',
        type=int,
        default=0,
        help='Export offset'
    )
    parser.add_argument(
        '--count',
        type=int,
        default=0,
        help='Number of rows to export (0 exports all rows)'
    )

    args = parser.parse_args()

    # 初始化配置文件
    if args.init:
        config = Config(args.config)
        config.save()
        print(f"Configuration file created: {config.config_path}")
        print("Please edit the configuration file and run again")
        return

    app = BasableApplication(args.config)
    try:
        app.initialize()

        if args.tables:
            app.print_tables()
        if args.details:
            app.print_details()
        if args.columns:
            app.print_columns(args.columns)
        if args.export:
            app.export(args.export, args.format, args.offset, args.count)
    except BasableError as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)
    finally:
        app.close()


if __name__ == '__main__':
    main()
