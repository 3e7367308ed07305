"""
Exceptions and warnings raised by the layout algorithms.
"""


class LayoutError(Exception):
    """Base class for all layout errors."""
    pass


class InvalidParameterError(LayoutError, ValueError):
    """A layout parameter is outside its valid range."""
    pass


class GraphStructureError(LayoutError, TypeError):
    """The graph input lacks structure the algorithm requires (e.g. edges)."""
    pass


class LayoutWarning(UserWarning):
    """Warning about suspicious but recoverable layout input."""
    pass
