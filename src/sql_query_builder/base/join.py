# src/sql_query_builder/base/join.py
import logging
from enum import Enum

from .filter import Filter, _check_filter

log = logging.getLogger(__name__)


class JoinType(Enum):
    """Enumeration of join kinds. The value is the SQL keyword text."""

    JOIN = "JOIN"
    INNER_JOIN = "INNER JOIN"
    LEFT_JOIN = "LEFT JOIN"
    LEFT_OUTER_JOIN = "LEFT OUTER JOIN"
    RIGHT_JOIN = "RIGHT JOIN"
    RIGHT_OUTER_JOIN = "RIGHT OUTER JOIN"
    FULL_OUTER_JOIN = "FULL OUTER JOIN"
    CROSS_JOIN = "CROSS JOIN"


class Join:
    """One `<kind> <table> ON <condition>` clause."""

    join_type: JoinType
    table: str
    condition: Filter

    def __init__(self, join_type: JoinType, table: str, condition: Filter):
        if not isinstance(join_type, JoinType):
            raise TypeError(
                f"join_type must be a JoinType, got {type(join_type).__name__}"
            )
        if not isinstance(table, str):
            raise TypeError(f"Join table must be a str, got {type(table).__name__}")
        _check_filter(condition, "Join")
        self.join_type = join_type
        self.table = table
        self.condition = condition
        log.debug(f"Created {self!r}")

    def clone(self) -> "Join":
        return Join(self.join_type, self.table, self.condition.clone())

    def __repr__(self) -> str:
        return f"Join({self.join_type.name}, {self.table!r}, {self.condition!r})"
