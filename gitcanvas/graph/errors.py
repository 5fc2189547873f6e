"""Error types raised by the graph core and its collaborators."""


class GraphError(Exception):
    """Base class for recoverable graph errors surfaced to the user."""


class FetchError(GraphError):
    """Reading commits or refs from the repository failed."""


class LayoutError(GraphError):
    """The commit set cannot be laid out (duplicate ids, bad coordinates)."""


class PersistenceError(GraphError):
    """Saving or clearing a cached layout failed."""
