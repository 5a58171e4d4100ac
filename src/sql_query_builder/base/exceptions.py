class QueryBuilderError(Exception):
    """Base class for errors raised while assembling a query."""

    def __init__(self, message: str = "Query construction failed."):
        super().__init__(message)


class InvalidArgumentError(QueryBuilderError, ValueError):
    """Exception raised when a call introduces an invalid query fragment."""

    def __init__(self, message: str = "Invalid argument for query fragment."):
        super().__init__(message)


class InvalidStateError(QueryBuilderError, RuntimeError):
    """Exception raised when the builder cannot complete an internal operation."""

    def __init__(self, message: str = "Query builder is in an invalid state."):
        super().__init__(message)
