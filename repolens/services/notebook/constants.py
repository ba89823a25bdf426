"""Constants for notebook compression."""

from repolens.services.github.constants import CONTENT_TRUNCATION_SENTINEL

# Estimated-token budget for the core logic section
DEFAULT_TOKEN_BUDGET = 8000

# Stream outputs above this many estimated tokens are cut to the ceiling
DEFAULT_OUTPUT_TOKEN_LIMIT = 100

# Marker appended wherever text was cut
TRUNCATION_MARKER = "... [truncated]"

# Raw content carrying this sentinel was cut before it reached us
EXTERNAL_TRUNCATION_SENTINEL = CONTENT_TRUNCATION_SENTINEL

# Cell priority weights
BASE_PRIORITY = 0.5
NON_CODE_PRIORITY = 0.3
DEFINITION_BONUS = 0.3
IMPORT_BONUS = 0.2
KEYWORD_BONUS = 0.1
CONTROL_FLOW_BONUS = 0.1
ASSIGNMENT_PENALTY = 0.1
LARGE_CELL_PENALTY = 0.2
LARGE_CELL_TOKENS = 1000

# Cells above this priority are kept even when over budget
ALWAYS_INCLUDE_PRIORITY = 0.8
# Cells above this priority get a one-line summary when over budget
SUMMARY_PRIORITY = 0.5

CELL_SUMMARY_CHARS = 50
KEY_OUTPUT_CHARS = 200
MAX_LOGIC_GROUPS = 5
LOGIC_GROUP_SEPARATOR = "\n\n# ---\n\n"

MAX_TOPICS = 5
MAX_TOPIC_CHARS = 50
KNOWN_TOPIC_LIBRARIES = frozenset(
    {"pandas", "numpy", "matplotlib", "sklearn", "torch", "tensorflow"}
)

# Degraded path
DEGRADED_PREVIEW_CHARS = 2000
DEGRADED_SCAN_LINES = 20
METADATA_FRAGMENTS = ("kernelspec", "language_info", "nbformat")
