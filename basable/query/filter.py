"""
查询过滤条件

过滤链由有序的条件组成，第一个条件必须是 BASE（无连接词），
后续条件以 AND / OR 连接。渲染顺序即插入顺序。
"""
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum

from ..config.config import get_settings
from ..errors import MalformedChainError


class Combinator(Enum):
    """条件连接词"""
    BASE = "BASE"
    AND = "AND"
    OR = "OR"


class OperatorKind(Enum):
    """过滤操作符"""
    EQ = "Eq"
    NOT_EQ = "NotEq"
    GT = "Gt"
    LT = "Lt"
    GTE = "Gte"
    LTE = "Lte"
    LIKE = "Like"
    NOT_LIKE = "NotLike"
    LIKE_PREFIX = "LikePrefix"
    NOT_LIKE_PREFIX = "NotLikePrefix"
    REGEX = "Regex"
    NOT_REGEX = "NotRegex"
    BETWEEN = "Between"
    NOT_BETWEEN = "NotBetween"
    CONTAINS = "Contains"
    NOT_CONTAINS = "NotContains"
    IS_NULL = "IsNull"
    IS_NOT_NULL = "IsNotNull"

    @staticmethod
    def parse(value: str) -> 'OperatorKind':
        normalized = value.replace("_", "").lower()
        for kind in OperatorKind:
            if kind.value.lower() == normalized:
                return kind
        raise ValueError(f"Unknown filter operator: {value}")


# 单值操作符的 SQL 模板
_SINGLE_TEMPLATES = {
    OperatorKind.EQ: "= '{0}'",
    OperatorKind.NOT_EQ: "!= '{0}'",
    OperatorKind.GT: "> '{0}'",
    OperatorKind.LT: "< '{0}'",
    OperatorKind.GTE: ">= '{0}'",
    OperatorKind.LTE: "<= '{0}'",
    OperatorKind.LIKE: "LIKE '{0}%'",
    OperatorKind.NOT_LIKE: "NOT LIKE '{0}%'",
    OperatorKind.LIKE_PREFIX: "LIKE '_{0}%'",
    OperatorKind.NOT_LIKE_PREFIX: "NOT LIKE '_{0}%'",
    OperatorKind.REGEX: "REGEXP '{0}'",
    OperatorKind.NOT_REGEX: "NOT REGEXP '{0}'",
}

_RANGE_TEMPLATES = {
    OperatorKind.BETWEEN: "BETWEEN '{0}' AND '{1}'",
    OperatorKind.NOT_BETWEEN: "NOT BETWEEN '{0}' AND '{1}'",
}

_LIST_TEMPLATES = {
    OperatorKind.CONTAINS: "IN ({0})",
    OperatorKind.NOT_CONTAINS: "NOT IN ({0})",
}

_NO_VALUE_TEMPLATES = {
    OperatorKind.IS_NULL: "IS NULL",
    OperatorKind.IS_NOT_NULL: "IS NOT NULL",
}


@dataclass(frozen=True)
class FilterOperator:
    """
    过滤操作符及其操作数

    操作数在这一层都是字符串，不会根据目标列的声明类型做校验。
    """
    kind: OperatorKind = OperatorKind.IS_NOT_NULL
    values: Tuple[str, ...] = ()

    def __post_init__(self):
        count = len(self.values)
        if self.kind in _SINGLE_TEMPLATES and count != 1:
            raise ValueError(f"{self.kind.value} expects exactly one value, got {count}")
        if self.kind in _RANGE_TEMPLATES and count != 2:
            raise ValueError(f"{self.kind.value} expects two values, got {count}")
        if self.kind in _LIST_TEMPLATES and count == 0:
            raise ValueError(f"{self.kind.value} expects at least one value")
        if self.kind in _NO_VALUE_TEMPLATES and count != 0:
            raise ValueError(f"{self.kind.value} takes no value")

    @classmethod
    def of(cls, kind: OperatorKind, *values: Any) -> 'FilterOperator':
        return cls(kind, tuple(str(v) for v in values))

    @classmethod
    def eq(cls, value: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.EQ, value)

    @classmethod
    def not_eq(cls, value: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.NOT_EQ, value)

    @classmethod
    def gt(cls, value: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.GT, value)

    @classmethod
    def lt(cls, value: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.LT, value)

    @classmethod
    def gte(cls, value: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.GTE, value)

    @classmethod
    def lte(cls, value: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.LTE, value)

    @classmethod
    def like(cls, value: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.LIKE, value)

    @classmethod
    def not_like(cls, value: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.NOT_LIKE, value)

    @classmethod
    def like_prefix(cls, value: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.LIKE_PREFIX, value)

    @classmethod
    def not_like_prefix(cls, value: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.NOT_LIKE_PREFIX, value)

    @classmethod
    def regex(cls, value: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.REGEX, value)

    @classmethod
    def not_regex(cls, value: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.NOT_REGEX, value)

    @classmethod
    def between(cls, start: Any, end: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.BETWEEN, start, end)

    @classmethod
    def not_between(cls, start: Any, end: Any) -> 'FilterOperator':
        return cls.of(OperatorKind.NOT_BETWEEN, start, end)

    @classmethod
    def contains(cls, values: Iterable[Any]) -> 'FilterOperator':
        return cls.of(OperatorKind.CONTAINS, *values)

    @classmethod
    def not_contains(cls, values: Iterable[Any]) -> 'FilterOperator':
        return cls.of(OperatorKind.NOT_CONTAINS, *values)

    @classmethod
    def is_null(cls) -> 'FilterOperator':
        return cls(OperatorKind.IS_NULL)

    @classmethod
    def is_not_null(cls) -> 'FilterOperator':
        return cls(OperatorKind.IS_NOT_NULL)

    def render(self) -> str:
        """渲染为 SQL 片段"""
        if self.kind in _SINGLE_TEMPLATES:
            return _SINGLE_TEMPLATES[self.kind].format(self.values[0])
        if self.kind in _RANGE_TEMPLATES:
            return _RANGE_TEMPLATES[self.kind].format(*self.values)
        if self.kind in _LIST_TEMPLATES:
            return _LIST_TEMPLATES[self.kind].format(", ".join(self.values))
        return _NO_VALUE_TEMPLATES[self.kind]

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class Filter:
    """单个过滤条件"""
    combinator: Combinator
    column: str
    operator: FilterOperator = field(default_factory=FilterOperator.is_not_null)

    @classmethod
    def base(cls, column: str, operator: Optional[FilterOperator] = None) -> 'Filter':
        return cls(Combinator.BASE, column, operator or FilterOperator.is_not_null())

    @classmethod
    def and_(cls, column: str, operator: Optional[FilterOperator] = None) -> 'Filter':
        return cls(Combinator.AND, column, operator or FilterOperator.is_not_null())

    @classmethod
    def or_(cls, column: str, operator: Optional[FilterOperator] = None) -> 'Filter':
        return cls(Combinator.OR, column, operator or FilterOperator.is_not_null())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Filter':
        """
        从请求数据构建过滤条件

        Args:
            data: {"combinator": "AND", "column": "age", "expression": {"Gt": "18"}}

        Returns:
            Filter 对象
        """
        column = data.get("column")
        if not column:
            raise ValueError("filter column must be provided")

        combinator = Combinator(str(data.get("combinator", "BASE")).upper())

        expression = data.get("expression") or {}
        if not expression:
            return cls(combinator, column)
        if len(expression) != 1:
            raise ValueError("filter expression must hold exactly one operator")

        name, value = next(iter(expression.items()))
        kind = OperatorKind.parse(name)

        if kind in _NO_VALUE_TEMPLATES:
            operator = FilterOperator(kind)
        elif isinstance(value, (list, tuple)):
            operator = FilterOperator.of(kind, *value)
        else:
            operator = FilterOperator.of(kind, value)

        return cls(combinator, column, operator)

    def render(self) -> str:
        condition = f"{self.column} {self.operator.render()}"
        if self.combinator == Combinator.BASE:
            return condition
        return f"{self.combinator.value} {condition}"

    def __str__(self) -> str:
        return self.render()


FilterInput = Union[Filter, Dict[str, Any]]


class FilterChain:
    """有序的过滤条件列表"""

    def __init__(self, filters: Optional[Sequence[Filter]] = None):
        self._filters: List[Filter] = list(filters or [])

    @classmethod
    def empty(cls) -> 'FilterChain':
        return cls()

    @classmethod
    def prefill(cls, filters: Iterable[FilterInput]) -> 'FilterChain':
        """用外部提供的有序列表构建过滤链（请求中的字典也可以）"""
        chain = cls()
        for f in filters:
            chain.add_one(f if isinstance(f, Filter) else Filter.from_dict(f))
        return chain

    def add_one(self, f: Filter) -> None:
        self._filters.append(f)

    def add_multiple(self, filters: Iterable[Filter]) -> None:
        self._filters.extend(filters)

    def all(self) -> List[Filter]:
        return list(self._filters)

    def is_empty(self) -> bool:
        return not self._filters

    def not_empty(self) -> bool:
        return bool(self._filters)

    def is_well_formed(self) -> bool:
        return self.is_empty() or self._filters[0].combinator == Combinator.BASE

    def validate(self) -> None:
        """过滤链非空时第一个条件必须是 BASE，否则抛出 MalformedChainError"""
        if not self.is_well_formed():
            first = self._filters[0]
            raise MalformedChainError(
                f"filter chain must start with a BASE condition, got {first.combinator.value} on {first.column}"
            )

    def render(self, prefix: Optional[str] = None, joiner: Optional[str] = None) -> str:
        """
        渲染过滤链

        Args:
            prefix: 每个条件前的固定前缀，默认取进程设置 filter_prefix
            joiner: 条件之间的连接符，默认取进程设置 filter_joiner

        Raises:
            MalformedChainError: 过滤链非空且第一个条件不是 BASE
        """
        self.validate()

        settings = get_settings()
        prefix = settings.filter_prefix if prefix is None else prefix
        joiner = settings.filter_joiner if joiner is None else joiner

        return joiner.join(f"{prefix}{f.render()}" for f in self._filters)

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self) -> Iterator[Filter]:
        return iter(self._filters)

    def __repr__(self) -> str:
        return f"FilterChain({self._filters!r})"
