# src/sql_query_builder/__init__.py

"""
SQL Query Builder Library Initialization.

This package builds SQL SELECT statements from fields, tables, joins,
filter trees, grouping and ordering, and renders them as literal SQL text.
Nothing is executed and no values are escaped.

It initializes a logger with a NullHandler and makes the builder, the
filter and join models, and the exceptions available at the top level.
"""

import logging

# --------------------------------------------------------------------------
# Logging Setup
# --------------------------------------------------------------------------
# Library logs are discarded unless the consuming application configures
# logging for "sql_query_builder".
logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())
logger.propagate = False  # Prevent log messages from propagating to the root logger

# --------------------------------------------------------------------------
# Exception Exports
# --------------------------------------------------------------------------
from .base.exceptions import (
    QueryBuilderError,
    InvalidArgumentError,
    InvalidStateError,
)

# --------------------------------------------------------------------------
# Filter and Join Model Exports
# --------------------------------------------------------------------------
from .base.filter import (
    AndFilter,
    Column,
    ColumnsProxy,
    CompareFilter,
    CompareType,
    Filter,
    OrFilter,
    RawFilter,
    and_filter,
    columns,
    compare,
    compare_fields,
    or_filter,
    raw,
)
from .base.join import Join, JoinType

# --------------------------------------------------------------------------
# Builder Exports
# --------------------------------------------------------------------------
from .sql.builder import SQLQueryBuilder, SelectField, union, union_all
from .sql.render import ignore_case_like_clause, like_clause

__all__ = [
    # Builder
    "SQLQueryBuilder",
    "SelectField",
    "union",
    "union_all",
    "like_clause",
    "ignore_case_like_clause",
    # Filters
    "Filter",
    "CompareFilter",
    "AndFilter",
    "OrFilter",
    "RawFilter",
    "CompareType",
    "Column",
    "ColumnsProxy",
    "columns",
    "compare",
    "compare_fields",
    "and_filter",
    "or_filter",
    "raw",
    # Joins
    "Join",
    "JoinType",
    # Exceptions
    "QueryBuilderError",
    "InvalidArgumentError",
    "InvalidStateError",
    # Logging
    "logger",
]

__version__ = "0.1.0"
