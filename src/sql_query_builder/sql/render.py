# src/sql_query_builder/sql/render.py
"""
SQL text rendering for builder state.

Every function here is pure: it reads the filter tree, joins and the
accumulated builder lists and returns text. Value formatting is delegated
to a context object exposing ``format_value(value)`` (normally the
SQLQueryBuilder being rendered) so that nested subqueries and the query
parameter token are handled by the builder that owns them.
"""

import logging
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Tuple

from ..base.filter import (
    AndFilter,
    Column,
    CompareFilter,
    CompareType,
    Filter,
    MEMBERSHIP_COMPARE_TYPES,
    OrFilter,
    RawFilter,
    SINGLE_OPERAND_COMPARE_TYPES,
)
from ..base.join import Join

log = logging.getLogger(__name__)


class ValueFormatter(Protocol):
    def format_value(self, value: Any) -> str: ...


# Map compare types to SQL operator text
SQL_COMPARE_MAP = {
    CompareType.EQUAL: "=",
    CompareType.NOT_EQUAL: "!=",
    CompareType.LESSTHAN: "<",
    CompareType.GREATERTHAN: ">",
    CompareType.LESSTHAN_EQUAL: "<=",
    CompareType.GREATERTHAN_EQUAL: ">=",
    CompareType.LIKE: "LIKE",
    CompareType.LIKE_IGNORECASE: "LIKE",
    CompareType.IN: "IN",
    CompareType.NOT_IN: "NOT IN",
    CompareType.IS_NULL: "IS NULL",
    CompareType.NOT_NULL: "NOT NULL",
}

LIST_SEPARATOR = ", "
UNION = " UNION "
UNION_ALL = " UNION ALL "


def _is_subquery(value: Any) -> bool:
    return not isinstance(value, Column) and callable(getattr(value, "build_query", None))


def render_compare(node: CompareFilter, context: ValueFormatter) -> str:
    operator = SQL_COMPARE_MAP[node.compare_type]
    if node.compare_type in SINGLE_OPERAND_COMPARE_TYPES:
        return f"{node.field_path} {operator}"

    value = node.value
    if node.compare_type in MEMBERSHIP_COMPARE_TYPES and not _is_subquery(value):
        # Subqueries already format as "(...)"; everything else gets wrapped here
        return f"{node.field_path} {operator} ({context.format_value(value)})"
    return f"{node.field_path} {operator} {context.format_value(value)}"


def render_filter(
    node: Filter, context: ValueFormatter, parent: Optional[Filter] = None
) -> str:
    """
    Renders a filter tree.

    AND children join with " AND "; an AND nested in an OR is parenthesised.
    OR groups are always parenthesised, whatever their size or position.
    """
    if isinstance(node, CompareFilter):
        return render_compare(node, context)
    if isinstance(node, RawFilter):
        return node.text
    if isinstance(node, AndFilter):
        parts = [
            text for text in (render_filter(f, context, node) for f in node.filters) if text
        ]
        rendered = " AND ".join(parts)
        if isinstance(parent, OrFilter) and len(parts) > 1:
            return f"({rendered})"
        return rendered
    if isinstance(node, OrFilter):
        parts = [
            text for text in (render_filter(f, context, node) for f in node.filters) if text
        ]
        if not parts:
            return ""
        return f"({' OR '.join(parts)})"

    log.error(f"Unsupported filter type during rendering: {type(node)}")
    raise TypeError(f"Unsupported filter type: {type(node).__name__}")


def render_join(join: Join, context: ValueFormatter) -> str:
    return f"{join.join_type.value} {join.table} ON {render_filter(join.condition, context)}"


def render_field(name: str, alias: Optional[str] = None) -> str:
    if alias:
        return f"{name} AS {alias}"
    return name


def join_list(items: Iterable[Any], separator: str = LIST_SEPARATOR) -> str:
    return separator.join(str(item) for item in items)


def render_select(
    context: ValueFormatter,
    *,
    distinct: bool,
    fields: Sequence[Any],
    tables: Sequence[str],
    joins: Sequence[Join],
    filter_node: Optional[Filter],
    group_bys: Sequence[str],
    order_bys: Sequence[str],
    count_only: bool = False,
) -> Tuple[str, str]:
    """
    Renders a SELECT statement in fixed clause order.

    Returns the select clause ("SELECT [DISTINCT] <fields>") and the
    post-select clause (" FROM ..." through ORDER BY) separately; the full
    statement is their concatenation. Count-only mode selects count(*) and
    drops GROUP BY and ORDER BY.
    """
    query: List[str] = ["SELECT "]
    if distinct:
        query.append("DISTINCT ")

    if count_only:
        query.append("count(*)")
    elif fields:
        query.append(join_list(fields))
    else:
        query.append("*")
    select_clause = "".join(query)

    query = []
    if tables:
        query.append(" FROM ")
        query.append(join_list(tables))

    for join in joins:
        query.append(" ")
        query.append(render_join(join, context))

    if filter_node is not None:
        where = render_filter(filter_node, context)
        if where:
            query.append(" WHERE ")
            query.append(where)

    if group_bys and not count_only:
        query.append(" GROUP BY ")
        query.append(join_list(group_bys))

    if order_bys and not count_only:
        query.append(" ORDER BY ")
        query.append(join_list(order_bys))

    post_select_clause = "".join(query)
    log.debug(f"Rendered SQL: {select_clause}{post_select_clause}")
    return select_clause, post_select_clause


def render_union(builders: Sequence[Any], union_all: bool = False) -> str:
    """
    Joins complete statements with UNION / UNION ALL inside exactly one pair
    of parentheses. Zero builders render as `()`.
    """
    separator = UNION_ALL if union_all else UNION
    return f"({separator.join(str(builder) for builder in builders)})"


def like_clause(column: str, value: str) -> str:
    """Returns `column LIKE '%value%'`."""
    return f"{column} LIKE '%{value}%'"


def ignore_case_like_clause(column: str, value: str) -> str:
    """Returns `column LIKE '%value%'`, the same text as like_clause()."""
    return like_clause(column, value)
