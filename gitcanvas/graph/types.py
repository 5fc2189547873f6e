"""Types for the commit graph: commits, positions, nodes and edges."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from gitcanvas.constants import WORKING_COPY_ID
from gitcanvas.graph.errors import LayoutError


@dataclass(frozen=True)
class Position:
    """A point in graph space."""

    x: float
    y: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.x) and math.isfinite(self.y)):
            raise LayoutError(f"Non-finite position ({self.x}, {self.y})")

    def __add__(self, other: "Position") -> "Position":
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Position") -> "Position":
        return Position(self.x - other.x, self.y - other.y)

    def translated(self, dx: float, dy: float) -> "Position":
        return Position(self.x + dx, self.y + dy)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Position":
        """Build from a persisted {"x": .., "y": ..} mapping."""
        return cls(float(data["x"]), float(data["y"]))


ORIGIN = Position(0.0, 0.0)


class UncommittedState(str, Enum):
    """What kind of changes the working-copy node stands for."""

    STAGED = "staged"
    UNSTAGED = "unstaged"
    MIXED = "mixed"


@dataclass
class Commit:
    """A commit as delivered by the repository backend."""

    id: str
    message: str
    author: str
    timestamp: int
    parents: list[str] = field(default_factory=list)
    refs: list[str] = field(default_factory=list)
    uncommitted_state: UncommittedState | None = None

    @property
    def is_synthetic(self) -> bool:
        """True for the working-copy placeholder, which is not a git object."""
        return self.id == WORKING_COPY_ID

    @property
    def short_id(self) -> str:
        return self.id if self.is_synthetic else self.id[:7]

    @property
    def summary(self) -> str:
        """First line of the message."""
        return self.message.strip().split("\n")[0]


@dataclass(frozen=True)
class Edge:
    """Parent -> child connection. ``merge`` is set for non-first-parent edges."""

    source_id: str
    target_id: str
    merge: bool = False

    @property
    def id(self) -> str:
        return f"{self.source_id}-{self.target_id}"


@dataclass
class CommitNode:
    """A rendered commit."""

    id: str
    position: Position
    commit: Commit

    kind = "commit"


@dataclass
class VirtualDiffTarget:
    """Zero-size node following the cursor while a diff pointer is armed."""

    id: str
    position: Position

    kind = "virtual"


GraphNode = CommitNode | VirtualDiffTarget


@dataclass(frozen=True)
class GitRef:
    """A named reference and the commit it resolves to."""

    name: str
    commit_id: str
    kind: str = "branch"  # "head", "branch", "remote", "tag" or "stash"


@dataclass
class CommitPage:
    """One slice of history returned by a paged fetch."""

    commits: list[Commit]
    has_more: bool


@dataclass(frozen=True)
class Viewport:
    """Pan offset and zoom of the rendering surface."""

    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0

    def to_graph(self, screen_x: float, screen_y: float) -> Position:
        """Convert a screen coordinate into graph space."""
        return Position((screen_x - self.x) / self.zoom, (screen_y - self.y) / self.zoom)
