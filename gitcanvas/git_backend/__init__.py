"""Git backend for reading repository history"""

from gitcanvas.git_backend.repository import FileDiff, GraphRepository

__all__ = ["FileDiff", "GraphRepository"]
