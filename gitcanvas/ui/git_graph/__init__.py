"""Git graph visualization components."""

from gitcanvas.ui.git_graph.widget import GitGraphView

__all__ = ["GitGraphView"]
