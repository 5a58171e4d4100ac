# src/sql_query_builder/base/filter.py
import logging
from enum import Enum
from typing import Any, Iterable, List, Optional, Union

from .exceptions import InvalidArgumentError

# --- Setup Logging ---
log = logging.getLogger(__name__)


# --- Compare Type Enum ---
class CompareType(Enum):
    """Enumeration of comparison operators usable in a CompareFilter."""

    # Comparison
    EQUAL = "eq"
    EQUALS = "eq"  # alias of EQUAL
    NOT_EQUAL = "ne"
    LESSTHAN = "lt"
    GREATERTHAN = "gt"
    LESSTHAN_EQUAL = "le"
    GREATERTHAN_EQUAL = "ge"
    # String matching
    LIKE = "like"
    LIKE_IGNORECASE = "ilike"
    # Membership
    IN = "in"
    NOT_IN = "nin"
    # Existence
    IS_NULL = "is_null"
    NOT_NULL = "not_null"


# Operators that take no right-hand value
SINGLE_OPERAND_COMPARE_TYPES = frozenset({CompareType.IS_NULL, CompareType.NOT_NULL})
# Operators that accept a collection or a subquery as right-hand value
MEMBERSHIP_COMPARE_TYPES = frozenset({CompareType.IN, CompareType.NOT_IN})


# --- Filter Expression Classes ---
class Filter:
    """Base class for nodes of the boolean predicate tree."""

    def clone(self) -> "Filter":
        raise NotImplementedError

    def and_(self, other: "Filter") -> "Filter":
        """
        Requires `other` in addition to this filter.

        Returns the node that now represents the conjunction: the receiver
        itself when it is already an AndFilter, otherwise a new AndFilter
        holding both. Callers must keep the returned node.
        """
        _check_filter(other, "and_")
        log.debug(f"Wrapping {self!r} in AND with {other!r}")
        result = AndFilter([self])
        return result.and_(other)

    def or_(self, other: "Filter") -> "Filter":
        """Offers `other` as an alternative; same return contract as and_()."""
        _check_filter(other, "or_")
        log.debug(f"Wrapping {self!r} in OR with {other!r}")
        result = OrFilter([self])
        return result.or_(other)

    def __and__(self, other: "Filter") -> "Filter":
        _check_filter(other, "&")
        return self.clone().and_(other.clone())

    def __or__(self, other: "Filter") -> "Filter":
        _check_filter(other, "|")
        return self.clone().or_(other.clone())


class CompareFilter(Filter):
    """Represents a single comparison (field <operator> value)."""

    field_path: str
    compare_type: CompareType
    value: Any

    def __init__(
        self,
        field: Union[str, "Column"],
        compare_type: CompareType = CompareType.EQUAL,
        value: Any = None,
    ):
        if not isinstance(compare_type, CompareType):
            raise TypeError(
                f"compare_type must be a CompareType, got {type(compare_type).__name__}"
            )
        self.field_path = _field_path(field)
        self.compare_type = compare_type

        if compare_type in SINGLE_OPERAND_COMPARE_TYPES:
            if value is not None:
                log.debug(
                    f"Ignoring value {value!r} for single operand compare {compare_type.name}"
                )
            self.value = None
            return

        if value is None:
            raise InvalidArgumentError(
                f"Illegal 1 argument compare {compare_type.name} for field '{self.field_path}'"
            )

        if isinstance(value, (list, tuple, set, frozenset)):
            if compare_type not in MEMBERSHIP_COMPARE_TYPES:
                raise InvalidArgumentError(
                    f"Compare {compare_type.name} does not accept a collection value"
                )
            if not value:
                raise InvalidArgumentError(
                    f"Compare {compare_type.name} on field '{self.field_path}' "
                    "requires a non-empty collection"
                )
            # Keep an independent copy of the caller's collection
            value = list(value) if not isinstance(value, (set, frozenset)) else set(value)
        self.value = value

    def clone(self) -> "CompareFilter":
        value = self.value
        if isinstance(value, list):
            value = list(value)
        elif isinstance(value, set):
            value = set(value)
        elif not isinstance(value, Column) and callable(getattr(value, "clone", None)):
            # Nested builders are mutable, so they are copied as well
            value = value.clone()
        clone = CompareFilter.__new__(CompareFilter)
        clone.field_path = self.field_path
        clone.compare_type = self.compare_type
        clone.value = value
        return clone

    def __repr__(self) -> str:
        return (
            f"CompareFilter({self.field_path!r}, {self.compare_type.name}, "
            f"{self.value!r})"
        )


class RawFilter(Filter):
    """A verbatim SQL fragment, opaque to filter composition."""

    text: str

    def __init__(self, text: str):
        if not isinstance(text, str):
            raise TypeError(f"RawFilter requires a str, got {type(text).__name__}")
        self.text = text

    def clone(self) -> "RawFilter":
        return RawFilter(self.text)

    def __repr__(self) -> str:
        return f"RawFilter({self.text!r})"


class AndFilter(Filter):
    """Conjunction of an ordered list of filters."""

    filters: List[Filter]

    def __init__(self, filters: Optional[Iterable[Filter]] = None):
        self.filters = []
        for item in filters or []:
            _check_filter(item, "AndFilter")
            self.filters.append(item)

    def and_(self, other: Filter) -> "AndFilter":
        _check_filter(other, "and_")
        if isinstance(other, AndFilter):
            self.filters.extend(other.filters)
        else:
            self.filters.append(other)
        log.debug(f"AND now holds {len(self.filters)} filter(s)")
        return self

    def clone(self) -> "AndFilter":
        return AndFilter([item.clone() for item in self.filters])

    def __len__(self) -> int:
        return len(self.filters)

    def __repr__(self) -> str:
        return f"AndFilter({self.filters!r})"


class OrFilter(Filter):
    """Disjunction of an ordered list of filters. Always rendered in parentheses."""

    filters: List[Filter]

    def __init__(self, filters: Optional[Iterable[Filter]] = None):
        self.filters = []
        for item in filters or []:
            _check_filter(item, "OrFilter")
            self.filters.append(item)

    def or_(self, other: Filter) -> "OrFilter":
        _check_filter(other, "or_")
        if isinstance(other, OrFilter):
            self.filters.extend(other.filters)
        else:
            self.filters.append(other)
        log.debug(f"OR now holds {len(self.filters)} filter(s)")
        return self

    def clone(self) -> "OrFilter":
        return OrFilter([item.clone() for item in self.filters])

    def __len__(self) -> int:
        return len(self.filters)

    def __repr__(self) -> str:
        return f"OrFilter({self.filters!r})"


# --- Factory Functions ---
def compare(
    field: Union[str, "Column"],
    compare_type: CompareType = CompareType.EQUAL,
    value: Any = None,
) -> CompareFilter:
    """Creates a CompareFilter. Only IS_NULL and NOT_NULL may omit the value."""
    return CompareFilter(field, compare_type, value)


def compare_fields(field1: Union[str, "Column"], field2: Union[str, "Column"]) -> CompareFilter:
    """Creates an equality between two columns, e.g. for a join condition."""
    other = field2 if isinstance(field2, Column) else Column(field2)
    return CompareFilter(field1, CompareType.EQUAL, other)


def and_filter(*filters: Filter) -> AndFilter:
    if not filters:
        raise InvalidArgumentError("and_filter() requires at least one filter")
    return AndFilter(filters)


def or_filter(*filters: Filter) -> OrFilter:
    if not filters:
        raise InvalidArgumentError("or_filter() requires at least one filter")
    return OrFilter(filters)


def raw(text: str) -> RawFilter:
    return RawFilter(text)


# --- Column Reference ---
class Column:
    """
    A column reference. Used as a filter value it renders unquoted; its
    comparison operators build CompareFilters.
    """

    _path: str

    def __init__(self, path: str):
        if not isinstance(path, str) or not path:
            raise InvalidArgumentError(f"Column path must be a non-empty str, got {path!r}")
        object.__setattr__(self, "_path", path)

    @property
    def path(self) -> str:
        return self._path

    def _op(self, compare_type: CompareType, other: Any = None) -> CompareFilter:
        log.debug(f"Creating filter: Column('{self._path}') {compare_type.name} {other!r}")
        return CompareFilter(self._path, compare_type, other)

    # Comparison operators
    def __eq__(self, other: Any) -> CompareFilter:  # type: ignore[override]
        return self._op(CompareType.EQUAL, other)

    def __ne__(self, other: Any) -> CompareFilter:  # type: ignore[override]
        return self._op(CompareType.NOT_EQUAL, other)

    def __gt__(self, other: Any) -> CompareFilter:
        return self._op(CompareType.GREATERTHAN, other)

    def __lt__(self, other: Any) -> CompareFilter:
        return self._op(CompareType.LESSTHAN, other)

    def __ge__(self, other: Any) -> CompareFilter:
        return self._op(CompareType.GREATERTHAN_EQUAL, other)

    def __le__(self, other: Any) -> CompareFilter:
        return self._op(CompareType.LESSTHAN_EQUAL, other)

    __hash__ = None  # type: ignore[assignment]

    # Other operators
    def like(self, pattern: str) -> CompareFilter:
        if not isinstance(pattern, str):
            raise TypeError("like() requires a string pattern")
        return self._op(CompareType.LIKE, pattern)

    def in_(self, values: Any) -> CompareFilter:
        return self._op(CompareType.IN, values)

    def not_in(self, values: Any) -> CompareFilter:
        return self._op(CompareType.NOT_IN, values)

    def is_null(self) -> CompareFilter:
        return self._op(CompareType.IS_NULL)

    def not_null(self) -> CompareFilter:
        return self._op(CompareType.NOT_NULL)

    def __getattr__(self, name: str) -> "Column":
        """Builds a dotted path, e.g. Column("Car").WHEELS -> Car.WHEELS."""
        if name.startswith("_"):
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            )
        return Column(f"{self._path}.{name}")

    def __setattr__(self, name: str, value: Any):
        raise AttributeError(f"Cannot set attribute '{name}' on Column object.")

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"Column(path={self._path!r})"


class ColumnsProxy:
    """Creates Column instances for any attribute access (columns.Car.ID)."""

    __slots__ = ()

    def __getattr__(self, name: str) -> Column:
        if name.startswith("_"):
            raise AttributeError(f"No attribute '{name}'")
        return Column(name)

    def __dir__(self) -> List[str]:
        return []


columns = ColumnsProxy()


# --- Helpers ---
def _field_path(field: Union[str, Column]) -> str:
    if isinstance(field, Column):
        return field.path
    if isinstance(field, str):
        return field
    raise TypeError(f"Expected field to be str or Column, got {type(field).__name__}")


def _check_filter(item: Any, where: str) -> None:
    if not isinstance(item, Filter):
        raise TypeError(f"{where} requires a Filter object, got {type(item).__name__}")
