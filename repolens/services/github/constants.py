"""Constants for GitHub service."""

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "repolens/0.1"

# Appended to file content cut at the fetch size limit. Downstream consumers
# (notebook compression) treat content carrying it as partial.
CONTENT_TRUNCATION_SENTINEL = "[File truncated due to size limits]"

# Tree entry types returned by the Git Trees API
BLOB = "blob"
TREE = "tree"
