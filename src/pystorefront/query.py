"""Filter expressions for backend list queries.

Backend filters are plain strings such as
``status = "active" && (name ~ "mug" || sku ~ "mug")``. String values must
be escaped before interpolation; :class:`QueryBuilder` does that and also
rejects field names that are not plain identifiers, so user input can only
ever land inside a quoted literal.

Example::

    filter_ = (
        QueryBuilder()
        .where("status", "=", "active")
        .and_("categoryId", "=", category_id)
        .and_group(lambda q: q.where("name", "~", term).or_("sku", "~", term))
        .build()
    )
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from typing import Literal

FilterOperator = Literal["=", "!=", ">", ">=", "<", "<=", "~", "!~", "?=", "?~"]
LogicalOperator = Literal["&&", "||"]
FilterValue = str | int | float | bool | None

_OPERATORS: frozenset[str] = frozenset({"=", "!=", ">", ">=", "<", "<=", "~", "!~", "?=", "?~"})
_FIELD_RE = re.compile(r"^@?[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_:]*)*$")


def escape_filter_value(value: str) -> str:
    """Escape a string for use inside a double-quoted filter literal."""
    # Backslashes first, then quotes.
    return value.replace("\\", "\\\\").replace('"', '\\"')


def format_filter_value(value: FilterValue) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    return f'"{escape_filter_value(value)}"'


def _check_field(field: str) -> str:
    if not _FIELD_RE.match(field):
        raise ValueError(f"Invalid filter field name: {field!r}")
    return field


def _check_operator(operator: str) -> str:
    if operator not in _OPERATORS:
        raise ValueError(f"Invalid filter operator: {operator!r}")
    return operator


class QueryBuilder:
    """Fluent builder for filter strings."""

    def __init__(self) -> None:
        self._parts: list[tuple[LogicalOperator, str]] = []

    def __bool__(self) -> bool:
        return bool(self._parts)

    def _push(self, logical: LogicalOperator, fragment: str) -> QueryBuilder:
        if fragment:
            self._parts.append((logical, fragment))
        return self

    @staticmethod
    def condition(field: str, operator: FilterOperator, value: FilterValue) -> str:
        return f"{_check_field(field)} {_check_operator(operator)} {format_filter_value(value)}"

    def where(self, field: str, operator: FilterOperator, value: FilterValue) -> QueryBuilder:
        """Add a condition (joined with ``&&`` when not the first)."""
        return self._push("&&", self.condition(field, operator, value))

    def and_(self, field: str, operator: FilterOperator, value: FilterValue) -> QueryBuilder:
        return self._push("&&", self.condition(field, operator, value))

    def or_(self, field: str, operator: FilterOperator, value: FilterValue) -> QueryBuilder:
        return self._push("||", self.condition(field, operator, value))

    def and_group(self, build: Callable[[QueryBuilder], QueryBuilder]) -> QueryBuilder:
        """Add a parenthesised sub-expression joined with ``&&``. Empty groups are skipped."""
        inner = build(QueryBuilder()).build()
        return self._push("&&", f"({inner})" if inner else "")

    def or_group(self, build: Callable[[QueryBuilder], QueryBuilder]) -> QueryBuilder:
        inner = build(QueryBuilder()).build()
        return self._push("||", f"({inner})" if inner else "")

    def raw(self, filter_: str) -> QueryBuilder:
        """Add a pre-built filter string joined with ``&&``.

        Escaping is the caller's responsibility.
        """
        return self._push("&&", filter_)

    def or_raw(self, filter_: str) -> QueryBuilder:
        return self._push("||", filter_)

    def build(self) -> str:
        pieces: list[str] = []
        for index, (logical, fragment) in enumerate(self._parts):
            if index:
                pieces.append(f" {logical} ")
            pieces.append(fragment)
        return "".join(pieces)

    def __str__(self) -> str:
        return self.build()


def create_query() -> QueryBuilder:
    return QueryBuilder()


def build_filter(filters: Mapping[str, FilterValue | None]) -> str:
    """Equality filter over every key whose value is not ``None``.

    Use ``QueryBuilder().where(field, "=", None)`` to match null explicitly.
    """
    query = QueryBuilder()
    for field, value in filters.items():
        if value is None:
            continue
        query.where(field, "=", value)
    return query.build()


def build_search_filter(term: str, fields: Iterable[str]) -> str:
    """``(a ~ "term" || b ~ "term")``; empty when there is no term or field."""
    field_list = list(fields)
    if not term or not field_list:
        return ""
    query = QueryBuilder()
    for field in field_list:
        query.or_(field, "~", term)
    return f"({query.build()})"


def build_in_filter(field: str, values: Iterable[str]) -> str:
    """``(field = "a" || field = "b")``; empty for no values."""
    query = QueryBuilder()
    for value in values:
        query.or_(field, "=", value)
    built = query.build()
    return f"({built})" if built else ""


class Filters:
    """Common filter presets."""

    @staticmethod
    def active_products() -> QueryBuilder:
        return create_query().where("status", "=", "active")

    @staticmethod
    def featured_products() -> QueryBuilder:
        return create_query().where("status", "=", "active").and_("isFeatured", "=", True)

    @staticmethod
    def user_orders(user_id: str) -> QueryBuilder:
        return create_query().where("userId", "=", user_id)

    @staticmethod
    def orders_by_status(status: str) -> QueryBuilder:
        return create_query().where("status", "=", status)

    @staticmethod
    def active_discounts() -> QueryBuilder:
        return create_query().where("isActive", "=", True)

    @staticmethod
    def unread_messages() -> QueryBuilder:
        return create_query().where("isRead", "=", False).and_("isArchived", "=", False)
