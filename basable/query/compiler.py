"""
SQL 编译器

子句顺序固定：
SELECT -> FROM -> LEFT JOIN -> WHERE -> GROUP BY -> HAVING -> ORDER BY -> LIMIT/OFFSET
没有数据的子句整体省略。
"""
from typing import List, Optional

from loguru import logger

from ..config.config import get_settings
from .query import BasableQuery, CommandKind, TableSearchOpts


class QueryCompiler:
    """把 BasableQuery 编译为 SQL 文本"""

    def __init__(self, search_mode: Optional[str] = None):
        self._search_mode = search_mode

    @property
    def search_mode(self) -> str:
        return self._search_mode or get_settings().search_mode

    def generate_sql(self, query: BasableQuery) -> str:
        """
        编译查询

        Raises:
            MalformedChainError: WHERE 或 HAVING 过滤链不是以 BASE 开头
        """
        parts: List[str] = [self._select_clause(query)]

        if query.left_join:
            parts.append(f"LEFT JOIN {query.left_join}")

        where = self._where_clause(query)
        if where:
            parts.append(f"WHERE {where}")

        if query.group_by:
            parts.append(f"GROUP BY {', '.join(query.group_by)}")

        if query.having.not_empty():
            parts.append(f"HAVING {query.having.render()}")

        if query.order_by is not None:
            parts.append(f"ORDER BY {query.order_by.render()}")

        # MySQL 不支持没有 LIMIT 的 OFFSET
        if query.row_count is not None:
            limit = f"LIMIT {query.row_count}"
            if query.offset is not None:
                limit += f" OFFSET {query.offset}"
            parts.append(limit)

        sql = " ".join(parts)
        logger.debug(f"Compiled SQL: {sql}")
        return sql

    compile = generate_sql

    def _select_clause(self, query: BasableQuery) -> str:
        command = query.command
        if command.kind != CommandKind.SELECT_DATA:
            raise ValueError(f"Unsupported query command: {command.kind}")

        columns = ", ".join(command.columns) if command.columns else "*"
        table = query.table
        if query.table_alias:
            table = f"{table} {query.table_alias}"

        return f"SELECT {columns} FROM {table}"

    def _where_clause(self, query: BasableQuery) -> str:
        conditions = []
        if query.filters.not_empty():
            conditions.append(query.filters.render())

        if query.is_search_mode():
            match = self.search_predicate(query.search_opts)
            if match:
                conditions.append(match)

        return " AND ".join(conditions)

    def search_predicate(self, opts: TableSearchOpts) -> str:
        """全文搜索条件，没有搜索列时返回空字符串"""
        if not opts.search_cols:
            return ""

        cols = ", ".join(f"`{col}`" for col in opts.search_cols)
        return f"MATCH({cols}) AGAINST('{opts.query}' IN {self.search_mode})"
