"""Per-repository graph sessions"""

from gitcanvas.session.graph_session import GraphSession
from gitcanvas.session.registry import SessionRegistry

__all__ = ["GraphSession", "SessionRegistry"]
