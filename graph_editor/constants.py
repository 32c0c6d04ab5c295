"""Application-wide constants.

History, canvas and layout defaults for the graph editor.
"""

APP_NAME = "Graph Editor"
APP_VERSION = "0.1.0"
APP_ORGANIZATION = "SBGN"

# History
MAX_HISTORY_LEVELS = None  # None = unbounded
CLEAR_REDO_ON_EXECUTE = False  # fresh edits keep the redo chain

# Canvas
FIT_PADDING = 10.0  # px around the node bounding box
DEFAULT_NODE_WIDTH = 50.0
DEFAULT_NODE_HEIGHT = 50.0

# Compound nodes
COLLAPSED_NODE_WIDTH = 36.0
COLLAPSED_NODE_HEIGHT = 36.0
COMPOUND_PADDING = 10.0  # px between a compound border and its children

# Document format
GRAPH_SCHEMA_VERSION = "1.0"
