# src/sql_query_builder/sql/builder.py
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..base.exceptions import InvalidArgumentError, InvalidStateError
from ..base.filter import (
    AndFilter,
    Column,
    CompareFilter,
    CompareType,
    Filter,
    OrFilter,
    RawFilter,
    SINGLE_OPERAND_COMPARE_TYPES,
    compare_fields,
)
from ..base.join import Join, JoinType
from ..base.utils import prepare_value
from . import render

# --- Setup Logging ---
log = logging.getLogger(__name__)

FieldRef = Union[str, Column]


@dataclass(frozen=True)
class SelectField:
    """A selected column with an optional alias."""

    name: str
    alias: Optional[str] = None

    def __str__(self) -> str:
        return render.render_field(self.name, self.alias)


class SQLQueryBuilder:
    """
    Builds a SQL SELECT statement using a fluent API.

    Fields, tables, joins, filters, GROUP BY and ORDER BY items accumulate
    in insertion order; ``build_query()`` (or ``str()``) renders them. The
    builder is a plain mutable object: ``clone()`` it before deriving
    variants from a shared template.

    Example:
        >>> sql = SQLQueryBuilder().table("Car").field("Name").filter("Car.ID", "?")
        >>> str(sql)
        'SELECT Name FROM Car WHERE Car.ID = ?'
    """

    DEFAULT_QUERY_PARAMETER = "?"

    _distinct: Optional[bool]
    _fields: List[SelectField]
    _tables: List[str]
    _joins: List[Join]
    _filter: Optional[Filter]
    _filter_groups: Dict[int, OrFilter]
    _group_bys: List[str]
    _order_bys: List[str]
    _select_clause: str
    _post_select_clause: str
    _query_parameter: str
    _logger: logging.Logger

    def __init__(self, query_parameter: Optional[str] = None):
        self._logger = log
        self._query_parameter = self.DEFAULT_QUERY_PARAMETER
        if query_parameter is not None:
            self.query_parameter = query_parameter
        self.reset()

    @classmethod
    def build(cls) -> "SQLQueryBuilder":
        return cls()

    def reset(self) -> "SQLQueryBuilder":
        """Clears all accumulated state. The query parameter token is kept."""
        self._distinct = None
        self._fields = []
        self._tables = []
        self._joins = []
        self._filter = None
        self._filter_groups = {}
        self._group_bys = []
        self._order_bys = []
        self._select_clause = ""
        self._post_select_clause = ""
        self._logger.debug("Query builder reset.")
        return self

    # --- Copying and Merging ---

    def clone(self) -> "SQLQueryBuilder":
        """Returns an independent deep copy: lists are copied and filter trees cloned."""
        try:
            clone = type(self)()
        except Exception as e:
            self._logger.error(
                f"Could not instantiate {type(self).__name__} for clone", exc_info=True
            )
            raise InvalidStateError("Could not clone query builder") from e

        clone._query_parameter = self._query_parameter
        clone._distinct = self._distinct
        clone._fields = list(self._fields)
        clone._tables = list(self._tables)
        clone._joins = [join.clone() for join in self._joins]
        clone._filter = self._filter.clone() if self._filter is not None else None
        clone._filter_groups = {
            group: group_filter.clone()
            for group, group_filter in self._filter_groups.items()
        }
        clone._group_bys = list(self._group_bys)
        clone._order_bys = list(self._order_bys)
        # Rendered text is immutable, just assign
        clone._select_clause = self._select_clause
        clone._post_select_clause = self._post_select_clause
        return clone

    def __copy__(self) -> "SQLQueryBuilder":
        return self.clone()

    def __deepcopy__(self, memo: Dict[int, Any]) -> "SQLQueryBuilder":
        return self.clone()

    def apply(self, other: "SQLQueryBuilder") -> "SQLQueryBuilder":
        """
        Merges another builder's state into this one.

        Lists are appended after this builder's own items. The other
        builder's filter (including its OR groups) is cloned and AND-ed
        onto this builder's filter. DISTINCT is taken from this builder if
        it was set, otherwise from the other one.
        """
        if not isinstance(other, SQLQueryBuilder):
            raise TypeError(
                f"apply() requires a SQLQueryBuilder, got {type(other).__name__}"
            )
        self._logger.debug(f"Applying {other!r} to {self!r}")
        # Snapshot first: other may be self
        other_joins = [join.clone() for join in other._joins]
        other_filter = other._compose_filter()
        if other_filter is not None:
            other_filter = other_filter.clone()

        if self._distinct is None:
            self._distinct = other._distinct
        self._fields.extend(list(other._fields))
        self._tables.extend(list(other._tables))
        self._joins.extend(other_joins)
        if other_filter is not None:
            self._add_filter(other_filter)
        self._group_bys.extend(list(other._group_bys))
        self._order_bys.extend(list(other._order_bys))
        return self

    # --- Select List ---

    def distinct(self, distinct: bool = True) -> "SQLQueryBuilder":
        self._distinct = bool(distinct)
        return self

    def field(self, name: FieldRef, alias: Optional[str] = None) -> "SQLQueryBuilder":
        """Adds a column (or any select expression) to the query."""
        name = name.path if isinstance(name, Column) else name
        if not isinstance(name, str):
            raise TypeError(f"Field name must be a str, got {type(name).__name__}")
        self._fields.append(SelectField(name, alias or None))
        self._logger.debug(f"Added field: {self._fields[-1]}")
        return self

    def table_field(
        self, table: str, name: str, alias: Optional[str] = None
    ) -> "SQLQueryBuilder":
        """Adds `table.name` to the query."""
        return self.field(f"{table}.{name}", alias)

    def fields(self, *names: Union[FieldRef, Sequence[str]]) -> "SQLQueryBuilder":
        """
        Adds several columns. Each entry is either a name or a
        (name,) / (name, alias) tuple.
        """
        for entry in names:
            if isinstance(entry, (str, Column)):
                self.field(entry)
            elif isinstance(entry, (tuple, list)):
                if len(entry) == 1:
                    self.field(entry[0])
                elif len(entry) == 2:
                    self.field(entry[0], entry[1])
                else:
                    raise InvalidArgumentError(
                        f"Unsupported number of strings for field with alias: {list(entry)!r}"
                    )
            else:
                raise TypeError(
                    f"fields() entries must be str or tuple, got {type(entry).__name__}"
                )
        return self

    # --- Tables and Joins ---

    def table(
        self, table: Union[str, "SQLQueryBuilder"], alias: Optional[str] = None
    ) -> "SQLQueryBuilder":
        """
        Adds a table to the FROM list. A builder is embedded as a
        parenthesised subquery; union text is used verbatim.
        """
        if isinstance(table, SQLQueryBuilder):
            table = f"({table.build_query()})"
        elif not isinstance(table, str):
            raise TypeError(
                f"table() requires a str or SQLQueryBuilder, got {type(table).__name__}"
            )
        self._tables.append(f"{table} {alias}" if alias else table)
        self._logger.debug(f"Added table: {self._tables[-1]}")
        return self

    def join(self, *args: Any) -> "SQLQueryBuilder":
        """
        Adds join clauses. Accepted shapes:

        - ``join(table, field1, field2)``: JOIN table ON field1 = field2
        - ``join(table, *filters)``: JOIN table ON <filters AND-ed>
        - ``join(JoinType, table, field1, field2)``
        - ``join(JoinType, table, *filters)``
        - ``join(*Join)``: prebuilt Join objects
        - ``join(field1, field2)``: no join clause at all; ANDs
          ``field1 = field2`` into the WHERE filter (legacy shorthand)
        """
        if args and all(isinstance(arg, Join) for arg in args):
            self._joins.extend(args)
            self._logger.debug(f"Added {len(args)} prebuilt join(s)")
            return self

        join_type = JoinType.JOIN
        if args and isinstance(args[0], JoinType):
            join_type, args = args[0], args[1:]
        elif len(args) == 2 and all(isinstance(arg, (str, Column)) for arg in args):
            self._logger.debug(f"Legacy join shorthand, filtering on {args[0]} = {args[1]}")
            return self.filter(compare_fields(args[0], args[1]))

        if len(args) < 2 or not isinstance(args[0], str):
            raise InvalidArgumentError(f"Unsupported join arguments: {args!r}")

        table, rest = args[0], args[1:]
        if len(rest) == 2 and all(isinstance(arg, (str, Column)) for arg in rest):
            condition: Filter = compare_fields(rest[0], rest[1])
        elif all(isinstance(arg, Filter) for arg in rest):
            condition = rest[0] if len(rest) == 1 else AndFilter(rest)
        else:
            raise InvalidArgumentError(f"Unsupported join arguments: {args!r}")

        self._joins.append(Join(join_type, table, condition))
        return self

    # --- Filters ---

    def _make_filter(self, args: Tuple[Any, ...]) -> Filter:
        """Translates the positional shapes accepted by filter() into a Filter."""
        if len(args) == 1:
            (item,) = args
            if isinstance(item, Filter):
                return item
            if isinstance(item, str):
                return RawFilter(item)
            raise TypeError(
                f"filter() requires a Filter or str, got {type(item).__name__}"
            )
        if len(args) == 2:
            field, value = args
            if isinstance(value, CompareType):
                if value not in SINGLE_OPERAND_COMPARE_TYPES:
                    raise InvalidArgumentError(
                        f"Illegal 1 argument compare {value.name}"
                    )
                return CompareFilter(field, value)
            return CompareFilter(field, CompareType.EQUAL, value)
        if len(args) == 3:
            field, compare_type, value = args
            return CompareFilter(field, compare_type, value)
        raise InvalidArgumentError(f"Unsupported filter arguments: {args!r}")

    def _add_filter(self, new_filter: Filter) -> None:
        if self._filter is None:
            self._filter = new_filter
        else:
            self._filter = self._filter.and_(new_filter)
        self._logger.debug(f"Current root filter is now: {self._filter!r}")

    def filter(self, *args: Any) -> "SQLQueryBuilder":
        """
        Adds a predicate, AND-ed with any existing ones. Accepted shapes:

        - ``filter(field, value)``: field = value
        - ``filter(field, CompareType, value)``
        - ``filter(field, CompareType.IS_NULL)`` / ``CompareType.NOT_NULL``
        - ``filter("raw sql")``: verbatim text
        - ``filter(Filter)``
        """
        self._add_filter(self._make_filter(args))
        return self

    def filter_to_group(self, *args: Any) -> "SQLQueryBuilder":
        """
        Adds a predicate to an OR group. The last argument is the group id;
        the others take the same shapes as filter().

        Predicates sharing a group id are OR-ed together, and each group is
        AND-ed with the rest of the filter. Group id 0 or None behaves like
        filter().
        """
        if len(args) < 2:
            raise InvalidArgumentError("filter_to_group() requires a filter and a group id")
        *filter_args, group = args
        if group is not None and (isinstance(group, bool) or not isinstance(group, int)):
            raise TypeError(f"Group id must be an int, got {type(group).__name__}")

        new_filter = self._make_filter(tuple(filter_args))
        if not group:
            self._add_filter(new_filter)
            return self

        group_filter = self._filter_groups.get(group)
        if group_filter is None:
            self._filter_groups[group] = OrFilter([new_filter])
            self._logger.debug(f"Created filter group {group}")
        else:
            group_filter.or_(new_filter)
        return self

    # --- Grouping and Ordering ---

    def group_by(self, *items: str) -> "SQLQueryBuilder":
        self._group_bys.extend(items)
        return self

    def order_by(self, *items: str, ascending: Optional[bool] = None) -> "SQLQueryBuilder":
        """
        Adds ORDER BY items. With ``ascending`` set, each item gets an
        explicit ASC/DESC suffix.
        """
        if ascending is None:
            self._order_bys.extend(items)
        else:
            direction = "ASC" if ascending else "DESC"
            self._order_bys.extend(f"{item} {direction}" for item in items)
        return self

    # --- Rendering ---

    def build_query(self, count_only: bool = False) -> str:
        self._select_clause, self._post_select_clause = render.render_select(
            self,
            distinct=self.is_distinct,
            fields=self._fields,
            tables=self._tables,
            joins=self._joins,
            filter_node=self._compose_filter(),
            group_bys=self._group_bys,
            order_bys=self._order_bys,
            count_only=count_only,
        )
        return self._select_clause + self._post_select_clause

    def __str__(self) -> str:
        return self.build_query()

    def __repr__(self) -> str:
        return (
            f"SQLQueryBuilder(fields={len(self._fields)}, tables={self._tables!r}, "
            f"joins={len(self._joins)}, groups={list(self._filter_groups)!r})"
        )

    def format_value(self, value: Any) -> str:
        """Formats a filter value as SQL text."""
        if isinstance(value, SQLQueryBuilder):
            return f"({value.build_query()})"
        if isinstance(value, Column):
            return value.path
        value = prepare_value(value)
        if isinstance(value, bool):
            return str(self.format_boolean(value))
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        if isinstance(value, str):
            if value == self._query_parameter:
                return value
            return f"'{value}'"
        if isinstance(value, (list, tuple)):
            return render.join_list(self.format_value(item) for item in value)
        return str(value)

    def format_boolean(self, flag: bool) -> int:
        return 1 if flag else 0

    def format_like_clause(self, column: str, value: str) -> str:
        return render.like_clause(column, value)

    def format_ignore_case_like_clause(self, column: str, value: str) -> str:
        return render.ignore_case_like_clause(column, value)

    @staticmethod
    def union(*builders: "SQLQueryBuilder") -> str:
        return union(*builders)

    @staticmethod
    def union_all(*builders: "SQLQueryBuilder") -> str:
        return union_all(*builders)

    # --- Accessors ---

    @property
    def select_clause(self) -> str:
        """The SELECT part of the last render; renders now if nothing was rendered yet."""
        if not self._select_clause:
            self.build_query()
        return self._select_clause

    @property
    def post_select_clause(self) -> str:
        """Everything after the SELECT list from the last render."""
        return self._post_select_clause

    @property
    def query_parameter(self) -> str:
        return self._query_parameter

    @query_parameter.setter
    def query_parameter(self, token: str) -> None:
        if not isinstance(token, str) or not token:
            raise InvalidArgumentError(
                f"Query parameter must be a non-empty str, got {token!r}"
            )
        self._query_parameter = token

    @property
    def is_distinct(self) -> bool:
        return bool(self._distinct)

    @property
    def selected_fields(self) -> List[SelectField]:
        return list(self._fields)

    @property
    def tables(self) -> List[str]:
        return list(self._tables)

    @property
    def joins(self) -> List[Join]:
        return list(self._joins)

    @property
    def filter_groups(self) -> Dict[int, OrFilter]:
        return {
            group: group_filter.clone()
            for group, group_filter in self._filter_groups.items()
        }

    def _compose_filter(self) -> Optional[Filter]:
        """
        Composes the live root filter: ungrouped predicates first, then one
        OR block per group id in order of first use. Shares nodes with the
        builder.
        """
        if not self._filter_groups:
            return self._filter
        root = AndFilter([self._filter] if self._filter is not None else [])
        for group_filter in self._filter_groups.values():
            root.filters.append(group_filter)
        return root

    @property
    def filter_node(self) -> Optional[Filter]:
        """A copy of the composed root filter, or None when nothing was filtered."""
        root = self._compose_filter()
        return root.clone() if root is not None else None

    @property
    def group_bys(self) -> List[str]:
        return list(self._group_bys)

    @property
    def order_bys(self) -> List[str]:
        return list(self._order_bys)


# --- Set Operations ---
def union(*builders: SQLQueryBuilder) -> str:
    """Renders `(q1 UNION q2 ...)`."""
    return render.render_union(builders, union_all=False)


def union_all(*builders: SQLQueryBuilder) -> str:
    """Renders `(q1 UNION ALL q2 ...)`."""
    return render.render_union(builders, union_all=True)
