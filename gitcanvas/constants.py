"""
Centralized constants for gitcanvas.

Hardcoded ids, file names and layout metrics shared between the graph
core, the session layer and the rendering surface.
"""

# Synthetic node representing uncommitted changes in the work tree
WORKING_COPY_ID = "working-copy"

# Zero-size node that follows the cursor while a diff pointer is armed
DIFF_POINTER_TARGET_ID = "diff-pointer-target"

# Paging
DEFAULT_PAGE_SIZE = 100

# Layered layout metrics (node box plus separation)
NODE_WIDTH = 100
NODE_HEIGHT = 60
RANK_SEPARATION = 50
NODE_SEPARATION = 20
ROW_SPACING = NODE_HEIGHT + RANK_SEPARATION
COLUMN_SPACING = NODE_WIDTH + NODE_SEPARATION

# Barycenter passes used to reduce edge crossings (alternating down/up)
ORDERING_SWEEPS = 4

# Trailing debounce for layout writes after a drag ends
DEFAULT_PERSIST_DEBOUNCE_MS = 500

# Config / cache files under ~/.config/gitcanvas/
CONFIG_DIR_NAME = "gitcanvas"
SETTINGS_FILE = "settings.json"
LAYOUT_CACHE_FILE = "layout-cache.json"
