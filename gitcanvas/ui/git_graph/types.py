"""Colors for git graph visualization."""

import re
import zlib

from PySide6.QtGui import QColor

from gitcanvas.graph.types import Commit

# Remote prefixes ignored so that origin/main and main share a color
_REMOTE_PREFIX = re.compile(r"^(origin|upstream|gitlab|github|heroku)/")

DEFAULT_NODE_COLOR = QColor("#94A3B8")  # Slate
WORKING_COPY_COLOR = QColor("#FF9800")  # Orange
DIFF_POINTER_COLOR = QColor("#2196F3")  # Blue
EDGE_COLOR = QColor("#94A3B8")


def ref_hue(name: str) -> int:
    """Stable hue (0-359) for a ref name."""
    clean = _REMOTE_PREFIX.sub("", name)
    return zlib.crc32(clean.encode("utf-8")) % 360


def get_node_color(commit: Commit) -> QColor:
    """Color for a commit: working copy, first branch-like ref, or neutral."""
    if commit.is_synthetic:
        return WORKING_COPY_COLOR
    for ref in commit.refs:
        if ref != "HEAD":
            return QColor.fromHsl(ref_hue(ref), 160, 110)
    return DEFAULT_NODE_COLOR


def author_hue(name: str) -> int:
    """Stable hue (0-359) for an author name."""
    return zlib.crc32(name.encode("utf-8")) % 360
